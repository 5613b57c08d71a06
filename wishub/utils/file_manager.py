import base64
import logging
import math
import mimetypes
import random
import re
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote_to_bytes

logger = logging.getLogger(__name__)

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]
_SIZE_PATTERN = re.compile(r"^([\d.]+)\s*(\w+)$")
_DATA_URL_PATTERN = re.compile(r"^data:(?P<meta>[^,]*?)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def format_file_size(num_bytes: int) -> str:
    """1536 -> "1.5 KB". Base 1024, at most two decimals."""
    if num_bytes <= 0:
        return "0 Bytes"
    i = min(int(math.floor(math.log(num_bytes) / math.log(1024))), len(_SIZE_UNITS) - 1)
    value = round(num_bytes / math.pow(1024, i), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"


def parse_size(size: str) -> float:
    """Inverse of format_file_size; unparseable strings count as 0."""
    match = _SIZE_PATTERN.match((size or "").strip())
    if not match:
        return 0
    try:
        value = float(match.group(1))
    except ValueError:
        return 0
    factor = 1024 ** _SIZE_UNITS.index(match.group(2)) if match.group(2) in _SIZE_UNITS else 1
    return value * factor


def new_attachment_id() -> str:
    """Client-side attachment id: "<epoch ms>-<random>"."""
    return f"{int(time.time() * 1000)}-{random.random()}"


def to_data_url(payload: bytes, mime: Optional[str]) -> str:
    encoded = base64.b64encode(payload).decode("utf-8")
    return f"data:{mime or 'application/octet-stream'};base64,{encoded}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split a data URI into (mime, payload bytes)."""
    match = _DATA_URL_PATTERN.match(data_url or "")
    if not match:
        raise ValueError("Not a data URL")
    mime = match.group("meta").split(";", 1)[0] or "text/plain"
    data = match.group("data")
    if match.group("b64"):
        return mime, base64.b64decode(data)
    return mime, unquote_to_bytes(data)


def guess_mime(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    return mime or "application/octet-stream"


class FileManager:
    """Reads local files into upload payloads and writes downloaded data URIs back to disk."""

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            base_dir = Path.home() / ".wishub" / "downloads"
        self.base_dir = base_dir

    def read_file(self, path: Path) -> Tuple[bytes, str]:
        path = Path(path)
        return path.read_bytes(), guess_mime(path.name)

    def document_payload(self, path: Path, category: Optional[str] = None) -> Dict[str, Any]:
        """Body for POST /documents built from a local file."""
        payload, mime = self.read_file(path)
        body: Dict[str, Any] = {
            "name": Path(path).name,
            "size": format_file_size(len(payload)),
            "type": mime,
            "dataUrl": to_data_url(payload, mime),
        }
        if category:
            body["category"] = category
        return body

    def post_attachment(self, path: Path) -> Dict[str, Any]:
        """Attachment for a community post or comment."""
        payload, mime = self.read_file(path)
        return {
            "id": new_attachment_id(),
            "name": Path(path).name,
            "type": mime,
            "size": format_file_size(len(payload)),
            "dataUrl": to_data_url(payload, mime),
        }

    def folder_attachment(self, path: Path) -> Dict[str, Any]:
        """Attachment for a project structure folder (sizes in bytes, time in epoch ms)."""
        payload, mime = self.read_file(path)
        return {
            "id": new_attachment_id(),
            "name": Path(path).name,
            "size": len(payload),
            "uploadedAt": int(time.time() * 1000),
            "data": to_data_url(payload, mime),
        }

    def save_data_url(self, data_url: str, file_name: str) -> Path:
        """Write a data URI to base_dir without clobbering existing files."""
        _, payload = decode_data_url(data_url)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.base_dir / (Path(file_name).name or "download")

        counter = 1
        original_stem = file_path.stem
        original_suffix = file_path.suffix
        while file_path.exists():
            file_path = self.base_dir / \
                f"{original_stem}_{counter}{original_suffix}"
            counter += 1

        file_path.write_bytes(payload)
        logger.info(f"Saved file to {file_path}")
        return file_path
