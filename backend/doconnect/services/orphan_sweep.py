"""Orphan Sweep - reclaims stored files that no image row references.

Invariants:
    - Only files under uploads/ are considered
    - A file is removed only if NO images.path equals it AND it is older than the grace
      window; younger files may belong to an upload whose commit is still in flight
    - Rows are never touched, only physical files

Design Decisions:
    - Periodic job (cron / scheduler) rather than inline cleanup: covers commits that
      failed after writing, cancelled requests, and cascade deletes alike
    - Referenced-path lookup chunked to keep IN lists bounded
    - run_sweep owns its engine and disposes it whether or not the sweep succeeds
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.image_parent import UPLOADS_DIR
from doconnect.core.repository_protocols import UploadDirectory
from doconnect.core.upload_paths import select_orphans
from doconnect.models.image_file import ImageFile

logger = logging.getLogger(__name__)


LOOKUP_CHUNK_SIZE = 500


@dataclass(frozen=True)
class SweepReport:
    scanned: int
    removed: tuple[str, ...]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrphanSweeper:
    """Deletes unreferenced files from the directory of record."""

    def __init__(
        self,
        directory: UploadDirectory,
        grace: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._directory = directory
        self._grace = grace
        self._clock = clock

    async def sweep(self, db: AsyncSession) -> SweepReport:
        files = await asyncio.to_thread(self._directory.list_files, UPLOADS_DIR)
        referenced: set[str] = set()
        for start in range(0, len(files), LOOKUP_CHUNK_SIZE):
            chunk = [f.path for f in files[start:start + LOOKUP_CHUNK_SIZE]]
            referenced.update(await db.scalars(
                select(ImageFile.path).where(ImageFile.path.in_(chunk)),
            ))

        orphans = select_orphans(files, referenced, self._clock() - self._grace)
        removed = []
        for orphan in orphans:
            if await asyncio.to_thread(self._directory.remove_file, orphan.path):
                removed.append(orphan.path)

        logger.info(
            f"Orphan sweep removed {len(removed)} of {len(files)} file(s)",
            extra={"file_count": len(files), "removed": len(removed)},
        )
        return SweepReport(scanned=len(files), removed=tuple(removed))


async def run_sweep() -> SweepReport:
    """Entry point for scheduled runs: `python -m doconnect.services.orphan_sweep`."""
    from doconnect.config import get_settings
    from doconnect.infrastructure.database import DatabaseSessionManager
    from doconnect.infrastructure.observability import setup_logging
    from doconnect.infrastructure.upload_directory import LocalUploadDirectory

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = DatabaseSessionManager(settings.database_url)
    sweeper = OrphanSweeper(
        LocalUploadDirectory(settings.storage_root),
        timedelta(minutes=settings.orphan_grace_minutes),
    )
    try:
        async with manager.session() as db:
            return await sweeper.sweep(db)
    finally:
        await manager.dispose()


if __name__ == "__main__":
    asyncio.run(run_sweep())
