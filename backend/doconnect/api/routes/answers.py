"""Answer Routes - answer a question with images, delete an answer with its images.

Invariants:
    - Answers are created under an existing question only (404 otherwise)
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
from doconnect.core.domain_types import AnswerId, QuestionId
from doconnect.core.errors import ResourceNotFoundError
from doconnect.infrastructure.database import get_db
from doconnect.models.answer import Answer
from doconnect.schemas.qa import AnswerCreate, AnswerResponse
from doconnect.services import cascade_delete, post_with_attachments
from doconnect.services.image_storage import ImageStorageService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["answers"])


@router.post(
    "/questions/{question_id}/answers", response_model=AnswerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_answer(
    question_id: UUID,
    text: str = Form(...),
    files: list[UploadFile] = File(default=[]),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: ImageStorageService = Depends(get_image_storage),
):
    body = validate_form(AnswerCreate, text=text)
    answer = await post_with_attachments.create_answer(
        db, storage, QuestionId(question_id), user.id, body.text,
        await read_uploads(files),
    )
    return AnswerResponse.model_validate(answer)


@router.delete("/answers/{answer_id}")
async def delete_answer(
    answer_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    owner_id = await db.scalar(select(Answer.user_id).where(Answer.id == answer_id))
    if owner_id is None:
        raise ResourceNotFoundError("Answer", str(answer_id))
    ensure_can_modify(owner_id, user, "delete this answer")

    report = await cascade_delete.delete_answer(db, AnswerId(answer_id))
    return {"deleted": {"answers": report.answers, "images": report.images}}
