"""Local Upload Directory - filesystem implementation of the UploadDirectory protocol.

Invariants:
    - Every relative path resolves INSIDE root; anything escaping it raises ValueError
    - Stored paths use "/" only; translation to native separators happens here
    - write_file never overwrites: exclusive create ("xb"); a write failing after
      the create removes the partial file before re-raising
    - ensure_directory is idempotent (mkdir parents=True, exist_ok=True)

Design Decisions:
    - Sync pathlib IO; ImageStorageService moves calls onto worker threads
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from doconnect.core.repository_protocols import StoredFile

logger = logging.getLogger(__name__)


class LocalUploadDirectory:
    """Directory of record rooted at a web-servable directory on local disk."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def resolve(self, relative: str) -> Path:
        """Absolute path for a stored, forward-slash relative path."""
        parts = PurePosixPath(relative).parts
        if not parts or PurePosixPath(relative).is_absolute() or ".." in parts:
            raise ValueError(f"path escapes upload root: {relative!r}")
        target = self.root.joinpath(*parts).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"path escapes upload root: {relative!r}")
        return target

    def ensure_directory(self, relative: str) -> None:
        self.resolve(relative).mkdir(parents=True, exist_ok=True)

    def write_file(self, relative: str, content: bytes) -> None:
        target = self.resolve(relative)
        f = open(target, "xb")
        try:
            with f:
                f.write(content)
        except OSError:
            # Partial file created above by "xb"
            target.unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {target} ({len(content)} bytes)")

    def is_writable(self, relative: str) -> bool:
        """True if files can be created at relative; a missing directory is judged by
        its nearest existing ancestor, since ensure_directory would create it."""
        candidate = self.resolve(relative)
        while not candidate.exists() and candidate != candidate.parent:
            candidate = candidate.parent
        return candidate.is_dir() and os.access(candidate, os.W_OK)

    def read_file(self, relative: str) -> bytes:
        return self.resolve(relative).read_bytes()

    def remove_file(self, relative: str) -> bool:
        """Delete a stored file. False if it was already gone."""
        try:
            self.resolve(relative).unlink()
        except FileNotFoundError:
            logger.warning(f"File not found for deletion: {relative}")
            return False
        return True

    def list_files(self, relative: str) -> list[StoredFile]:
        directory = self.resolve(relative)
        if not directory.is_dir():
            return []
        files = []
        for entry in sorted(directory.iterdir()):
            if not entry.is_file():
                continue
            stat = entry.stat()
            files.append(StoredFile(
                path=f"{relative.rstrip('/')}/{entry.name}",
                size=stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        return files
