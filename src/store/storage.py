"""
Local object storage for uploaded files (blog featured images).

Objects are addressed by a relative POSIX path such as
``blog-images/1718000000000-cover.png`` and served under ``base_url``.
"""

from __future__ import annotations

import logging
import mimetypes
import re
import time
from pathlib import Path, PurePosixPath

from src.exceptions import StorageError, ValidationError
from src.store.collections import BLOG_IMAGES_PREFIX

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """Reduce an uploaded filename to a safe single path segment."""
    name = PurePosixPath(str(filename or "").replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("-", name).strip(".-")
    return name[:120] or "upload"


def blog_image_path(filename: str, timestamp_ms: int | None = None) -> str:
    """Build ``blog-images/{timestamp}-{filename}``."""
    ts = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    return f"{BLOG_IMAGES_PREFIX}/{ts}-{sanitize_filename(filename)}"


def _validate_object_path(path: str) -> PurePosixPath:
    if not path or not isinstance(path, str):
        raise ValidationError("Object path must be a non-empty string", field="path")
    pure = PurePosixPath(path)
    if pure.is_absolute() or any(part in ("..", ".", "") for part in path.split("/")) or "\\" in path:
        raise ValidationError("Invalid object path", field="path", detail=repr(path))
    return pure


class ObjectStorage:
    """Filesystem-backed object storage rooted at ``root``."""

    def __init__(self, root: str | Path = "data/storage", base_url: str = "/files") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _full_path(self, path: str) -> Path:
        return self.root.joinpath(*_validate_object_path(path).parts)

    def url_for(self, path: str) -> str:
        _validate_object_path(path)
        return f"{self.base_url}/{path}"

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        """Write ``data`` to ``path`` and return its public URL."""
        target = self._full_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_name(target.name + ".part")
            tmp.write_bytes(data)
            tmp.replace(target)
        except OSError as exc:
            raise StorageError(operation="upload", path=path) from exc
        logger.info("Stored object %s (%d bytes, %s)", path, len(data), content_type or "unknown")
        return self.url_for(path)

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def read(self, path: str) -> bytes:
        target = self._full_path(path)
        if not target.is_file():
            raise FileNotFoundError(path)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StorageError(operation="read", path=path) from exc

    def delete(self, path: str) -> bool:
        target = self._full_path(path)
        if not target.is_file():
            return False
        try:
            target.unlink()
        except OSError as exc:
            raise StorageError(operation="delete", path=path) from exc
        return True

    @staticmethod
    def guess_content_type(path: str) -> str:
        return mimetypes.guess_type(path)[0] or "application/octet-stream"
