"""Question/Answer Schemas - create payloads and public responses.

Invariants:
    - QuestionCreate.title: 1-140 chars, stripped, non-empty
    - QuestionCreate.text / AnswerCreate.text: 1-4000 chars, stripped, non-empty
    - Image responses expose the stored relative path, never a filesystem path
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from doconnect.models.question import TEXT_MAX_LENGTH, TITLE_MAX_LENGTH


def _strip_non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


class QuestionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    text: str = Field(min_length=1, max_length=TEXT_MAX_LENGTH)

    @field_validator("title", "text")
    @classmethod
    def strip_fields(cls, v: str) -> str:
        return _strip_non_empty(v)


class AnswerCreate(BaseModel):
    text: str = Field(min_length=1, max_length=TEXT_MAX_LENGTH)

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_non_empty(v)


class ImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    path: str
    question_id: UUID | None = None
    answer_id: UUID | None = None


class AnswerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    text: str
    question_id: UUID
    user_id: UUID
    created_at: datetime
    images: list[ImageResponse] = []


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    text: str
    user_id: UUID
    created_at: datetime
    images: list[ImageResponse] = []
