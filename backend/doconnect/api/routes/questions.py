"""Question Routes - create with images, delete with cascade.

Invariants:
    - Creation goes through services/post_with_attachments (files written before commit)
    - Deletion goes through services/cascade_delete (one transaction)
    - Only the owner or an Admin may delete
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.api.dependencies import (
    CurrentUser, ensure_can_modify, get_current_user, get_image_storage,
)
from doconnect.api.routes._forms import read_uploads, validate_form
from doconnect.core.domain_types import QuestionId
from doconnect.core.errors import ResourceNotFoundError
from doconnect.infrastructure.database import get_db
from doconnect.models.question import Question
from doconnect.schemas.qa import QuestionCreate, QuestionResponse
from doconnect.services import cascade_delete, post_with_attachments
from doconnect.services.image_storage import ImageStorageService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/questions", tags=["questions"])


@router.post(
    "", response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    title: str = Form(...),
    text: str = Form(...),
    files: list[UploadFile] = File(default=[]),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorageService = Depends(get_image_storage),
):
    """Create a question, optionally with images."""
    body = validate_form(QuestionCreate, title=title, text=text)
    question = await post_with_attachments.create_question(
        db, storage, user.id, body.title, body.text, await read_uploads(files),
    )
    return QuestionResponse.model_validate(question)


@router.delete("/{question_id}")
async def delete_question(
    question_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a question with its answers and images."""
    owner_id = await db.scalar(
        select(Question.user_id).where(Question.id == question_id),
    )
    if owner_id is None:
        raise ResourceNotFoundError("Question", str(question_id))
    ensure_can_modify(owner_id, user, "delete this question")

    report = await cascade_delete.delete_question(db, QuestionId(question_id))
    return {
        "deleted": {
            "questions": report.questions,
            "answers": report.answers,
            "images": report.images,
        },
    }
