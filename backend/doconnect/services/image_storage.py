"""Image Storage Service - turns uploaded bytes into stored files plus image descriptors.

Invariants:
    - Parent is resolved (exactly one of question_id / answer_id) BEFORE any IO
    - Empty batches are rejected BEFORE any IO
    - Generated names never contain the original filename (only a vetted extension)
    - Every write in a batch finishes before the batch outcome is decided
    - On any write failure: files already written by the batch are removed and
      no descriptor is returned (all-or-nothing per batch)
    - Never inserts rows; the caller attaches descriptors to its aggregate and commits

Design Decisions:
    - One worker thread per file (asyncio.to_thread + gather): names are unique per
      file, so writes never contend
    - Directory of record injected (UploadDirectory protocol): tests use tmp_path or fakes
    - Batch files orphaned by a cancelled request stay on disk for OrphanSweeper
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from doconnect.core.domain_types import QuestionId, AnswerId
from doconnect.core.errors import StorageWriteError, UploadValidationError
from doconnect.core.image_parent import (
    ImageDescriptor, UPLOADS_DIR, resolve_parent,
)
from doconnect.core.repository_protocols import UploadDirectory
from doconnect.core.upload_paths import build_storage_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """One file from a multipart upload."""
    filename: str
    content: bytes


def _new_token() -> str:
    return uuid.uuid4().hex


class ImageStorageService:
    """Stores image uploads under <root>/uploads and describes them for the entity graph."""

    def __init__(
        self,
        directory: UploadDirectory,
        token_factory: Callable[[], str] = _new_token,
    ):
        self._directory = directory
        self._token_factory = token_factory

    async def save_files(
        self,
        files: Sequence[UploadedFile],
        question_id: QuestionId | None = None,
        answer_id: AnswerId | None = None,
    ) -> list[ImageDescriptor]:
        """Write every file and return one descriptor per file, in input order.

        Raises:
            InvalidParentReferenceError: both or neither parent id given
            UploadValidationError: files is empty
            StorageWriteError: any write failed (batch rolled back on disk)
        """
        parent = resolve_parent(question_id, answer_id)
        if not files:
            raise UploadValidationError("At least one file is required")

        try:
            await asyncio.to_thread(self._directory.ensure_directory, UPLOADS_DIR)
        except OSError as e:
            logger.error(f"Cannot create upload directory: {e}")
            raise StorageWriteError(e.strerror or type(e).__name__) from e

        paths = [build_storage_path(f.filename, self._token_factory()) for f in files]
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self._directory.write_file, path, f.content)
                for path, f in zip(paths, files)
            ),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            written = [p for p, r in zip(paths, results) if not isinstance(r, BaseException)]
            await self._remove_batch(written)
            first = failures[0]
            logger.error(
                f"Upload batch failed ({len(failures)}/{len(paths)} writes)",
                extra={"file_count": len(paths), "error_code": "STORAGE_WRITE_ERROR"},
            )
            if not isinstance(first, OSError):
                raise first
            raise StorageWriteError(first.strerror or type(first).__name__) from first

        descriptors = [ImageDescriptor(path=p, parent=parent) for p in paths]
        logger.info(
            f"Stored {len(descriptors)} image(s)",
            extra={
                "file_count": len(descriptors),
                "question_id": question_id,
                "answer_id": answer_id,
            },
        )
        return descriptors

    async def discard(self, descriptors: Sequence[ImageDescriptor]) -> int:
        """Remove files whose descriptors never made it into a committed row."""
        return await self._remove_batch([d.path for d in descriptors])

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(self._directory.read_file, path)

    def resolve(self, path: str) -> Path:
        """Physical location of a stored path (native separators)."""
        return self._directory.resolve(path)

    async def is_writable(self) -> bool:
        """Readiness check: can new uploads be stored right now."""
        return await asyncio.to_thread(self._directory.is_writable, UPLOADS_DIR)

    async def _remove_batch(self, paths: Sequence[str]) -> int:
        removed = 0
        for path in paths:
            try:
                if await asyncio.to_thread(self._directory.remove_file, path):
                    removed += 1
            except OSError as e:
                # Left for OrphanSweeper
                logger.warning(f"Could not remove {path}: {e}", extra={"path": path})
        return removed
