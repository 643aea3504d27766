"""Cascade Delete - executes a DeletionPlan for a question or an answer in one transaction.

Invariants:
    - Snapshot load, every step, and the commit share ONE transaction (the session's)
    - Steps run in plan order: images, answers, root; a failure rolls back everything
    - Missing root raises ResourceNotFoundError before anything is deleted
    - Rows inserted after the snapshot are removed by the FK ON DELETE CASCADE backstop
    - Physical files are NOT removed here; OrphanSweeper reclaims them once unreferenced

Design Decisions:
    - Statement-level DELETE per step instead of session.delete(): traversal stays in
      core/deletion_plan.py, not in ORM cascade resolution
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.deletion_plan import (
    DeletionPlan, EntityGraph, Table,
    plan_answer_deletion, plan_question_deletion,
)
from doconnect.core.domain_types import AnswerId, QuestionId
from doconnect.core.errors import (
    ConstraintViolationError, DatabaseError, ResourceNotFoundError,
)
from doconnect.models.answer import Answer
from doconnect.models.image_file import ImageFile
from doconnect.models.question import Question

logger = logging.getLogger(__name__)


_MODELS = {
    Table.IMAGES: ImageFile,
    Table.ANSWERS: Answer,
    Table.QUESTIONS: Question,
}


@dataclass(frozen=True)
class DeletionReport:
    """Rows removed per table, plus the image paths that lost their row."""
    questions: int
    answers: int
    images: int
    image_paths: tuple[str, ...]


async def delete_question(db: AsyncSession, question_id: QuestionId) -> DeletionReport:
    """Delete a question, its answers, and every image of either."""
    exists = await db.scalar(select(Question.id).where(Question.id == question_id))
    if exists is None:
        raise ResourceNotFoundError("Question", str(question_id))

    graph = EntityGraph()
    answer_ids = list(await db.scalars(
        select(Answer.id).where(Answer.question_id == question_id),
    ))
    graph.answer_ids_by_question[question_id] = answer_ids

    image_rows = await db.execute(
        select(ImageFile.id, ImageFile.path, ImageFile.question_id, ImageFile.answer_id)
        .where(or_(
            ImageFile.question_id == question_id,
            ImageFile.answer_id.in_(answer_ids),
        )),
    )
    paths = _index_images(graph, image_rows.all())

    plan = plan_question_deletion(question_id, graph)
    return await _execute(db, plan, paths)


async def delete_answer(db: AsyncSession, answer_id: AnswerId) -> DeletionReport:
    """Delete an answer and its images. The question and its other answers stay."""
    exists = await db.scalar(select(Answer.id).where(Answer.id == answer_id))
    if exists is None:
        raise ResourceNotFoundError("Answer", str(answer_id))

    graph = EntityGraph()
    image_rows = await db.execute(
        select(ImageFile.id, ImageFile.path, ImageFile.question_id, ImageFile.answer_id)
        .where(ImageFile.answer_id == answer_id),
    )
    paths = _index_images(graph, image_rows.all())

    plan = plan_answer_deletion(answer_id, graph)
    return await _execute(db, plan, paths)


def _index_images(graph: EntityGraph, rows) -> dict[UUID, str]:
    paths: dict[UUID, str] = {}
    for image_id, path, question_id, answer_id in rows:
        paths[image_id] = path
        if question_id is not None:
            graph.image_ids_by_question.setdefault(question_id, []).append(image_id)
        else:
            graph.image_ids_by_answer.setdefault(answer_id, []).append(image_id)
    return paths


async def _execute(
    db: AsyncSession, plan: DeletionPlan, paths: dict[UUID, str],
) -> DeletionReport:
    try:
        for step in plan.steps:
            model = _MODELS[step.table]
            result = await db.execute(
                delete(model)
                .where(model.id.in_(step.ids))
                .execution_options(synchronize_session="fetch"),
            )
            if result.rowcount != len(step.ids):
                logger.warning(
                    f"{step.table.value}: planned {len(step.ids)}, deleted {result.rowcount}",
                )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error(f"Cascade rejected by constraint: {e.orig}")
        raise ConstraintViolationError("delete")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Cascade failed: {e}")
        raise DatabaseError("Database operation failed", "delete")

    report = DeletionReport(
        questions=plan.count(Table.QUESTIONS),
        answers=plan.count(Table.ANSWERS),
        images=plan.count(Table.IMAGES),
        image_paths=tuple(
            paths[i] for s in plan.steps if s.table == Table.IMAGES for i in s.ids
        ),
    )
    logger.info(
        f"Deleted {plan.root_table.value} {plan.root_id} "
        f"({report.answers} answer(s), {report.images} image(s))",
    )
    return report
