"""Image Parent - tagged union naming the single owner of a stored image.

Invariants:
    - An ImageParent is EITHER a QuestionParent OR an AnswerParent, never both, never neither
    - resolve_parent is the only place two optional ids are collapsed into a parent
    - ImageDescriptor.question_id / answer_id are derived from the parent, so exactly one is set
    - Descriptor paths always start with UPLOADS_PREFIX and use forward slashes

Design Decisions:
    - Exclusivity lives in the type first; the images CHECK constraint is the backstop
    - Frozen dataclasses: descriptors are handed across the storage/commit seam unchanged
"""

from dataclasses import dataclass

from doconnect.core.domain_types import QuestionId, AnswerId
from doconnect.core.errors import InvalidParentReferenceError


UPLOADS_DIR: str = "uploads"
UPLOADS_PREFIX: str = f"{UPLOADS_DIR}/"


@dataclass(frozen=True)
class QuestionParent:
    question_id: QuestionId


@dataclass(frozen=True)
class AnswerParent:
    answer_id: AnswerId


ImageParent = QuestionParent | AnswerParent


def resolve_parent(
    question_id: QuestionId | None, answer_id: AnswerId | None,
) -> ImageParent:
    """Collapse the (question_id, answer_id) pair into a parent. Pure."""
    if (question_id is None) == (answer_id is None):
        raise InvalidParentReferenceError()
    if question_id is not None:
        return QuestionParent(question_id)
    return AnswerParent(answer_id)


@dataclass(frozen=True)
class ImageDescriptor:
    """A stored file ready to become an ImageFile row in the parent's aggregate."""
    path: str
    parent: ImageParent

    def __post_init__(self):
        if not self.path.startswith(UPLOADS_PREFIX) or "\\" in self.path:
            raise ValueError(f"descriptor path must start with {UPLOADS_PREFIX!r}: {self.path!r}")

    @property
    def question_id(self) -> QuestionId | None:
        if isinstance(self.parent, QuestionParent):
            return self.parent.question_id
        return None

    @property
    def answer_id(self) -> AnswerId | None:
        if isinstance(self.parent, AnswerParent):
            return self.parent.answer_id
        return None
