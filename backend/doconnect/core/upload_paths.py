"""Upload Paths - storage naming and orphan selection rules.

Invariants:
    - Stored names are <token><ext>; the original filename contributes at most a short
      alphanumeric extension, so no separator or ".." from user input can reach a path
    - Paths returned here are root-relative and forward-slash separated
    - select_orphans is PURE: decides, never deletes

Design Decisions:
    - Token supplied by the caller (uuid4().hex in the service): deterministic in tests
"""

import re
from datetime import datetime

from doconnect.core.image_parent import UPLOADS_PREFIX
from doconnect.core.repository_protocols import StoredFile


_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def safe_extension(filename: str) -> str:
    """Lowercased extension of filename, or "" when absent or suspicious."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in base.strip("."):
        return ""
    ext = "." + base.rsplit(".", 1)[1]
    if not _EXTENSION_RE.match(ext):
        return ""
    return ext.lower()


def build_storage_path(filename: str, token: str) -> str:
    """uploads/<token><ext> for an uploaded file."""
    return f"{UPLOADS_PREFIX}{token}{safe_extension(filename)}"


def select_orphans(
    files: list[StoredFile], referenced_paths: set[str], cutoff: datetime,
) -> list[StoredFile]:
    """Files no row references and last modified before cutoff."""
    return [
        f for f in files
        if f.path not in referenced_paths and f.modified_at < cutoff
    ]
