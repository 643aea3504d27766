"""Post With Attachments - question/answer creation with images in one commit.

Tests cover:
    - Question with files: rows and files exist, every image owned by the question
    - Answer with files: images owned by the answer only
    - Posts without files create no images and no upload directory
    - Answering a missing question fails before any file is written
    - Commit failure discards the batch's files and leaves no rows
    - attach_images refuses descriptors naming another aggregate
"""

import uuid

import pytest
from sqlalchemy import func, select

from doconnect.core.errors import (
    ConstraintViolationError, InvalidParentReferenceError, ResourceNotFoundError,
)
from doconnect.core.image_parent import AnswerParent, ImageDescriptor, QuestionParent
from doconnect.models.answer import Answer
from doconnect.models.image_file import ImageFile
from doconnect.models.question import Question
from doconnect.services.image_storage import UploadedFile
from doconnect.services.post_with_attachments import (
    attach_images, create_answer, create_question,
)

FILES = [UploadedFile("one.png", b"1"), UploadedFile("two.png", b"2")]


async def _count(db, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


# ─── create_question ─────────────────────────────────────────────

async def test_question_with_two_images(test_db, storage, seed_user, tmp_path):
    question = await create_question(
        test_db, storage, seed_user.id, "Title", "Body", FILES,
    )

    rows = (await test_db.execute(
        select(ImageFile.path, ImageFile.question_id, ImageFile.answer_id),
    )).all()
    assert len(rows) == 2
    assert all(q == question.id and a is None for _, q, a in rows)
    for path, _, _ in rows:
        assert (tmp_path / path).is_file()
    assert len(question.images) == 2


async def test_question_without_files(test_db, storage, seed_user, tmp_path):
    question = await create_question(test_db, storage, seed_user.id, "T", "B")

    assert question.images == []
    assert await _count(test_db, Question) == 1
    assert await _count(test_db, ImageFile) == 0
    assert not (tmp_path / "uploads").exists()


# ─── create_answer ───────────────────────────────────────────────

async def test_answer_with_images(test_db, storage, seed_user):
    question = await create_question(test_db, storage, seed_user.id, "T", "B")

    answer = await create_answer(
        test_db, storage, question.id, seed_user.id, "Answer", FILES[:1],
    )

    [row] = (await test_db.execute(
        select(ImageFile.question_id, ImageFile.answer_id),
    )).all()
    assert row == (None, answer.id)
    assert answer.question_id == question.id


async def test_answer_for_missing_question(test_db, storage, seed_user, tmp_path):
    with pytest.raises(ResourceNotFoundError):
        await create_answer(
            test_db, storage, uuid.uuid4(), seed_user.id, "Answer", FILES,
        )
    assert not (tmp_path / "uploads").exists()


# ─── commit failure ──────────────────────────────────────────────

async def test_commit_failure_discards_files(test_db, storage, tmp_path):
    unknown_user = uuid.uuid4()

    with pytest.raises(ConstraintViolationError):
        await create_question(test_db, storage, unknown_user, "T", "B", FILES)

    assert list((tmp_path / "uploads").iterdir()) == []
    assert await _count(test_db, Question) == 0
    assert await _count(test_db, ImageFile) == 0


# ─── attach_images ───────────────────────────────────────────────

def test_attach_images_rejects_foreign_descriptor():
    question = Question(id=uuid.uuid4(), title="t", text="x", images=[])
    other = ImageDescriptor("uploads/x.png", QuestionParent(uuid.uuid4()))
    with pytest.raises(InvalidParentReferenceError):
        attach_images(question, [other])


def test_attach_images_rejects_answer_descriptor_on_question():
    question = Question(id=uuid.uuid4(), title="t", text="x", images=[])
    wrong_kind = ImageDescriptor("uploads/x.png", AnswerParent(question.id))
    with pytest.raises(InvalidParentReferenceError):
        attach_images(question, [wrong_kind])


def test_attach_images_appends_rows():
    answer = Answer(id=uuid.uuid4(), text="a", images=[])
    attach_images(answer, [ImageDescriptor("uploads/x.png", AnswerParent(answer.id))])
    assert [i.path for i in answer.images] == ["uploads/x.png"]
    assert answer.images[0].answer_id == answer.id
