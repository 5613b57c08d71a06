from datetime import datetime, timezone
from typing import Any, List, Literal, Optional, Type, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from ulid import ULID

from wishub.errors import ValidationError

M = TypeVar("M", bound=BaseModel)

Category = Literal[
    "Uncategorized",
    "Test Plans",
    "User Guides",
    "Reports",
    "Specifications",
    "Training Materials",
    "Technical Documentation",
    "Meeting Notes",
    "Other",
]

CATEGORIES: List[str] = list(get_args(Category))
DEFAULT_CATEGORY = "Uncategorized"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp (with or without Z); naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce(model: Type[M], payload: Any) -> M:
    """Validate a dict (or pass through an instance) as model, raising the API's ValidationError."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__} payload", details=str(e)) from e


# ----------documents----------

class Document(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: f"doc_{ULID()}")
    name: str
    size: str = ""  # human readable, e.g. "12.3 KB"
    type: str = ""  # MIME
    dataUrl: str
    uploadedAt: str = Field(default_factory=utc_now_iso)
    category: str = DEFAULT_CATEGORY
    isFavorite: bool = False


class NewDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    size: str = ""
    type: str = ""
    dataUrl: str
    uploadedAt: Optional[str] = None
    category: Optional[Category] = None
    isFavorite: Optional[bool] = None


class DocumentUpdate(BaseModel):
    # only these two fields are mutable, everything else is dropped
    model_config = ConfigDict(extra="ignore")

    category: Optional[Category] = None
    isFavorite: Optional[bool] = None


# ----------project structure----------

class FileAttachment(BaseModel):
    id: str  # client generated "<epoch ms>-<random>"
    name: str
    size: int  # bytes
    uploadedAt: int  # epoch ms
    data: str  # data URI


class FolderInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    purpose: str = ""
    description: str = ""
    attachments: Optional[List[FileAttachment]] = None


class StructurePayload(BaseModel):
    structure: List[FolderInfo]


# ----------community----------

class Attachment(BaseModel):
    id: str  # client generated "<epoch ms>-<random>"
    name: str
    type: str = ""
    size: str = ""
    dataUrl: str


class Comment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: f"c_{ULID()}")
    name: str
    message: str
    timestamp: str = Field(default_factory=utc_now_iso)
    attachments: List[Attachment] = Field(default_factory=list)


class Post(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: f"p_{ULID()}")
    name: str
    message: str
    timestamp: str = Field(default_factory=utc_now_iso)
    attachments: List[Attachment] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class NewMessage(BaseModel):
    """Request body shared by post and comment creation."""
    model_config = ConfigDict(extra="ignore")

    name: str
    message: str
    attachments: Optional[List[Attachment]] = None
