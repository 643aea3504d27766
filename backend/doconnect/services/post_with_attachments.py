"""Post With Attachments - create a question or an answer together with its images.

Invariants:
    - The aggregate id is assigned BEFORE files are written, so descriptors can name it
    - All files finish writing before the single commit; a write failure means no commit
    - A descriptor is attached only to the aggregate it names (else InvalidParentReferenceError)
    - Commit failure after successful writes: no row survives (rollback) and the batch's
      files are discarded; the error is re-raised unchanged
    - Answers are only created for an existing question (checked before any IO)

Design Decisions:
    - Storage and commit stay two composable steps; this module is where they meet
"""

import logging
import uuid
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import QuestionId, UserId
from doconnect.core.errors import (
    ConstraintViolationError, DatabaseError,
    InvalidParentReferenceError, ResourceNotFoundError,
)
from doconnect.core.image_parent import ImageDescriptor
from doconnect.infrastructure.database import commit_aggregate
from doconnect.models.answer import Answer
from doconnect.models.image_file import ImageFile
from doconnect.models.question import Question
from doconnect.services.image_storage import ImageStorageService, UploadedFile

logger = logging.getLogger(__name__)


def attach_images(
    aggregate: Question | Answer, descriptors: Sequence[ImageDescriptor],
) -> None:
    """Append one ImageFile per descriptor to the aggregate's images collection."""
    for descriptor in descriptors:
        if isinstance(aggregate, Question):
            owner = descriptor.question_id
        else:
            owner = descriptor.answer_id
        if owner is None or owner != aggregate.id:
            raise InvalidParentReferenceError()
        aggregate.images.append(ImageFile.from_descriptor(descriptor))


async def create_question(
    db: AsyncSession,
    storage: ImageStorageService,
    user_id: UserId,
    title: str,
    text: str,
    files: Sequence[UploadedFile] = (),
) -> Question:
    question = Question(
        id=uuid.uuid4(), title=title, text=text, user_id=user_id, images=[],
    )
    descriptors: list[ImageDescriptor] = []
    if files:
        descriptors = await storage.save_files(files, question_id=question.id)
        attach_images(question, descriptors)

    await _commit_or_discard(db, storage, question, descriptors)
    logger.info(
        "Question created",
        extra={"question_id": question.id, "user_id": user_id, "file_count": len(descriptors)},
    )
    return question


async def create_answer(
    db: AsyncSession,
    storage: ImageStorageService,
    question_id: QuestionId,
    user_id: UserId,
    text: str,
    files: Sequence[UploadedFile] = (),
) -> Answer:
    exists = await db.scalar(select(Question.id).where(Question.id == question_id))
    if exists is None:
        raise ResourceNotFoundError("Question", str(question_id))

    answer = Answer(
        id=uuid.uuid4(), text=text, question_id=question_id, user_id=user_id, images=[],
    )
    descriptors: list[ImageDescriptor] = []
    if files:
        descriptors = await storage.save_files(files, answer_id=answer.id)
        attach_images(answer, descriptors)

    await _commit_or_discard(db, storage, answer, descriptors)
    logger.info(
        "Answer created",
        extra={
            "answer_id": answer.id, "question_id": question_id,
            "user_id": user_id, "file_count": len(descriptors),
        },
    )
    return answer


async def _commit_or_discard(
    db: AsyncSession,
    storage: ImageStorageService,
    aggregate: Question | Answer,
    descriptors: Sequence[ImageDescriptor],
) -> None:
    try:
        await commit_aggregate(db, aggregate)
    except (ConstraintViolationError, DatabaseError):
        if descriptors:
            removed = await storage.discard(descriptors)
            logger.warning(
                f"Commit failed; discarded {removed}/{len(descriptors)} stored file(s)",
                extra={"file_count": len(descriptors)},
            )
        raise
