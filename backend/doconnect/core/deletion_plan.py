"""Deletion Plan - explicit, ordered cascade for question and answer removal.

Invariants:
    - plan_* functions are PURE: they read an EntityGraph snapshot, never a DB session
    - Steps are ordered leaf-first: images, then answers, then the root row
    - A plan for a question includes the images of every one of its answers
    - The root row is always the last step; steps with nothing to delete are omitted

Design Decisions:
    - The traversal is spelled out instead of delegated to ORM cascade resolution, so
      ordering is unit-testable without a storage engine
    - Shell (services/cascade_delete.py) loads the snapshot and executes the steps
      inside one transaction; DB ON DELETE CASCADE catches rows inserted after the snapshot
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from doconnect.core.domain_types import QuestionId, AnswerId


class Table(str, Enum):
    """Tables touched by a cascade, in the order they are emptied."""
    IMAGES = "images"
    ANSWERS = "answers"
    QUESTIONS = "questions"


@dataclass(frozen=True)
class DeletionStep:
    table: Table
    ids: tuple[UUID, ...]


@dataclass(frozen=True)
class DeletionPlan:
    root_table: Table
    root_id: UUID
    steps: tuple[DeletionStep, ...]

    def count(self, table: Table) -> int:
        return sum(len(s.ids) for s in self.steps if s.table == table)


@dataclass
class EntityGraph:
    """Dependents reachable from one root, as loaded by the shell."""
    answer_ids_by_question: dict[UUID, list[UUID]] = field(default_factory=dict)
    image_ids_by_question: dict[UUID, list[UUID]] = field(default_factory=dict)
    image_ids_by_answer: dict[UUID, list[UUID]] = field(default_factory=dict)


def plan_answer_deletion(answer_id: AnswerId, graph: EntityGraph) -> DeletionPlan:
    """Answer images first, then the answer."""
    steps = _non_empty([
        DeletionStep(Table.IMAGES, tuple(graph.image_ids_by_answer.get(answer_id, ()))),
    ])
    steps.append(DeletionStep(Table.ANSWERS, (answer_id,)))
    return DeletionPlan(Table.ANSWERS, answer_id, tuple(steps))


def plan_question_deletion(question_id: QuestionId, graph: EntityGraph) -> DeletionPlan:
    """Images of each answer, images of the question, the answers, then the question."""
    answer_ids = graph.answer_ids_by_question.get(question_id, [])
    answer_image_ids: list[UUID] = []
    for answer_id in answer_ids:
        answer_image_ids.extend(graph.image_ids_by_answer.get(answer_id, ()))

    steps = _non_empty([
        DeletionStep(Table.IMAGES, tuple(answer_image_ids)),
        DeletionStep(Table.IMAGES, tuple(graph.image_ids_by_question.get(question_id, ()))),
        DeletionStep(Table.ANSWERS, tuple(answer_ids)),
    ])
    steps.append(DeletionStep(Table.QUESTIONS, (question_id,)))
    return DeletionPlan(Table.QUESTIONS, question_id, tuple(steps))


def _non_empty(steps: list[DeletionStep]) -> list[DeletionStep]:
    return [s for s in steps if s.ids]
