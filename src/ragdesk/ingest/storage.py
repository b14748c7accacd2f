"""On-disk storage for uploaded documents.

Files are validated (non-empty, supported extension, size limit), copied
into the storage directory under a unique name, and fingerprinted for
deduplication.
"""

from __future__ import annotations

import hashlib
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path

import structlog

from ragdesk.errors import EmptyFile, FileTooLarge
from ragdesk.ingest.extract import media_type_for

logger = structlog.get_logger(__name__)

_MB = 1024 * 1024


@dataclass
class StoredFile:
    file_path: str
    file_name: str
    original_name: str
    size_bytes: int
    media_type: str


def compute_hash(path: Path | str) -> str:
    """MD5 hex digest of the file bytes (dedup fingerprint, not a security hash)."""
    h = hashlib.md5(usedforsecurity=False)
    with Path(path).open("rb") as fh:
        for block in iter(lambda: fh.read(65536), b""):
            h.update(block)
    return h.hexdigest()


class FileStore:
    """Copies validated uploads into *base_dir*.

    Args:
        base_dir: Storage directory (created on first store).
        max_file_size_mb: Upload size limit in megabytes.
    """

    def __init__(self, base_dir: Path | str, max_file_size_mb: int = 50) -> None:
        self.base_dir = Path(base_dir)
        self.max_bytes = max_file_size_mb * _MB

    def validate(self, path: Path) -> str:
        """Check *path* can be stored; returns its media type.

        Raises:
            FileNotFoundError: If *path* does not exist.
            EmptyFile: If the file has no bytes.
            UnsupportedFileType: If the extension has no extractor.
            FileTooLarge: If the file exceeds the size limit.
        """
        if not path.is_file():
            raise FileNotFoundError(f"File not found: '{path}'")
        media_type = media_type_for(path)
        size = path.stat().st_size
        if size == 0:
            raise EmptyFile(f"File is empty: '{path.name}'")
        if size > self.max_bytes:
            raise FileTooLarge(
                f"File exceeds {self.max_bytes // _MB} MB limit: '{path.name}' "
                f"({size / _MB:.1f} MB)"
            )
        return media_type

    def store(self, path: Path) -> StoredFile:
        """Validate *path* and copy it under a unique name."""
        media_type = self.validate(path)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        unique_name = f"{uuid.uuid4().hex}{path.suffix.lower()}"
        target = (self.base_dir / unique_name).resolve()
        shutil.copyfile(path, target)
        logger.info("file_stored", original=path.name, stored=str(target))
        return StoredFile(
            file_path=str(target),
            file_name=unique_name,
            original_name=path.name,
            size_bytes=target.stat().st_size,
            media_type=media_type,
        )

    def resolve(self, file_path: str) -> Path | None:
        """Return the stored file at *file_path*, or None if missing or outside the store."""
        path = Path(file_path).resolve()
        if not path.is_relative_to(self.base_dir.resolve()):
            logger.warning("file_outside_storage", path=file_path)
            return None
        return path if path.is_file() else None

    def delete(self, file_path: str) -> bool:
        """Delete a stored file. Returns False if it was not present."""
        path = self.resolve(file_path)
        if path is None:
            return False
        path.unlink()
        logger.info("file_deleted", path=str(path))
        return True
