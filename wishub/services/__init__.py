"""Service layer for WIS Hub."""

from .community_service import CommunityService
from .document_service import DocumentService
from .structure_service import StructureService

__all__ = ["CommunityService", "DocumentService", "StructureService"]
