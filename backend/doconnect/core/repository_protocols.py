"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All filesystem IO goes through UploadDirectory (the directory of record)
    - Relative paths crossing these protocols are forward-slash separated

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - UploadDirectory is sync: callers push it onto worker threads when they need concurrency
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class StoredFile:
    """A physical file found under the directory of record."""
    path: str
    size: int
    modified_at: datetime


class UploadDirectory(Protocol):
    """Directory of record for uploaded bytes - implemented by shell."""
    def ensure_directory(self, relative: str) -> None: ...
    def write_file(self, relative: str, content: bytes) -> None: ...
    def read_file(self, relative: str) -> bytes: ...
    def remove_file(self, relative: str) -> bool: ...
    def list_files(self, relative: str) -> list[StoredFile]: ...
    def resolve(self, relative: str) -> Path: ...
    def is_writable(self, relative: str) -> bool: ...


class TokenIdentity(Protocol):
    """Structural contract for anything a token can be minted for (User ORM row, DTO)."""
    id: UUID
    username: str
    email: str
    role: str


class PasswordVerifier(Protocol):
    """Password check used by login. Hashing scheme lives outside this package."""
    def verify(self, plain_password: str, password_hash: str) -> bool: ...


class PasswordHasher(Protocol):
    """Password hashing used by registration. Same scheme as PasswordVerifier."""
    def hash(self, plain_password: str) -> str: ...
