"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, QuestionId, AnswerId, ImageId wrap UUIDs; never use bare UUID in domain logic
    - RoleType values are the exact strings written to the DB and to the token role claim
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and JWT payloads without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
QuestionId = NewType("QuestionId", UUID)
AnswerId = NewType("AnswerId", UUID)
ImageId = NewType("ImageId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class RoleType(str, Enum):
    """User roles. Value is the string form used in the role claim."""
    USER = "User"
    ADMIN = "Admin"
