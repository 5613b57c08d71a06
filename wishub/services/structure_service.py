"""
Project structure notes.

Each repository ("ui" or "api") is one ordered array of folders stored under
its own key. There are no per-folder endpoints: the client edits its local
copy with the helpers below and then replaces the whole array.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Literal, Sequence, Union

from wishub.errors import NotFoundError, ValidationError
from wishub.schema import FileAttachment, FolderInfo, StructurePayload, coerce
from wishub.services.base import CollectionService

logger = logging.getLogger(__name__)

Repo = Literal["ui", "api"]

STRUCTURE_KEYS: Dict[str, str] = {
    "ui": "wis-ui-structure",
    "api": "wis-api-structure",
}


def _folders(*names: str) -> List[FolderInfo]:
    return [FolderInfo(id=name, name=name) for name in names]


DEFAULT_UI_FOLDERS = _folders(
    "Features", "StepDefinitions", "Pages", "Stubs", "API_Requests",
    "APIHelpers", "Constants", "Hooks", "Models",
)
DEFAULT_API_FOLDERS = _folders("Controllers", "Services", "Models", "Helpers", "Tests")

REPO_LABELS: Dict[str, str] = {
    "ui": "UI",
    "api": "API",
}


class StructureService(CollectionService[FolderInfo]):
    model = FolderInfo

    def __init__(self, manager, repo: Repo) -> None:
        if repo not in STRUCTURE_KEYS:
            raise ValueError(f"Unknown repository: {repo!r}")
        super().__init__(manager)
        self.repo = repo
        self.key = STRUCTURE_KEYS[repo]

    def get(self) -> List[FolderInfo]:
        return self._load()

    def replace(self, structure: Union[Sequence[Any], StructurePayload]) -> List[FolderInfo]:
        """Overwrite the whole array. Last writer wins."""
        if isinstance(structure, StructurePayload):
            folders = structure.structure
        else:
            folders = coerce(StructurePayload, {"structure": list(structure)}).structure
        self._save(folders)
        logger.info(f"{REPO_LABELS[self.repo]} structure replaced ({len(folders)} folders)")
        return list(folders)


def default_structure(repo: Repo) -> List[FolderInfo]:
    source = DEFAULT_UI_FOLDERS if repo == "ui" else DEFAULT_API_FOLDERS
    return [folder.model_copy(deep=True) for folder in source]


# ==================== LOCAL EDITING ====================
# All helpers are pure: they return a new list and never touch the store.

def _index_of(folders: Sequence[FolderInfo], name: str) -> int:
    for index, folder in enumerate(folders):
        if folder.name == name:
            return index
    raise NotFoundError(f"Folder not found: {name}")


def add_folder(folders: Sequence[FolderInfo], name: str = "New Folder") -> List[FolderInfo]:
    folder = FolderInfo(id=f"newFolder{int(time.time() * 1000)}", name=name)
    return [*folders, folder]


def update_folder(folders: Sequence[FolderInfo], folder_name: str, /, **changes: Any) -> List[FolderInfo]:
    """Replace fields of the folder called folder_name. Renaming is allowed; the id is kept."""
    allowed = {"name", "purpose", "description", "attachments"}
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Unknown folder fields: {', '.join(sorted(unknown))}")

    index = _index_of(folders, folder_name)
    updated = list(folders)
    merged = {**folders[index].model_dump(), **changes, "id": folders[index].id}
    updated[index] = FolderInfo.model_validate(merged)
    return updated


def remove_folder(folders: Sequence[FolderInfo], name: str) -> List[FolderInfo]:
    return [folder for folder in folders if folder.name != name]


def move_folder(folders: Sequence[FolderInfo], index: int, direction: Literal["up", "down"]) -> List[FolderInfo]:
    """Swap the folder at index with its neighbour. Moving past either end is a no-op."""
    if direction not in ("up", "down"):
        raise ValueError(f"Unknown direction: {direction!r}")
    moved = list(folders)
    target = index - 1 if direction == "up" else index + 1
    if 0 <= index < len(moved) and 0 <= target < len(moved):
        moved[index], moved[target] = moved[target], moved[index]
    return moved


def add_attachment(folders: Sequence[FolderInfo], name: str,
                   attachment: Union[Dict[str, Any], FileAttachment]) -> List[FolderInfo]:
    index = _index_of(folders, name)
    folder = folders[index]
    attachments = list(folder.attachments or [])
    attachments.append(coerce(FileAttachment, attachment))
    updated = list(folders)
    updated[index] = folder.model_copy(update={"attachments": attachments})
    return updated


def remove_attachment(folders: Sequence[FolderInfo], name: str, attachment_id: str) -> List[FolderInfo]:
    index = _index_of(folders, name)
    folder = folders[index]
    attachments = [att for att in (folder.attachments or []) if att.id != attachment_id]
    updated = list(folders)
    updated[index] = folder.model_copy(update={"attachments": attachments})
    return updated
