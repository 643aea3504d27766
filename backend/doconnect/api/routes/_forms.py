"""Multipart helpers shared by question and answer routes.

Invariants:
    - Form payloads are validated by the same Pydantic schemas as JSON bodies
    - Validation failures surface as RequestValidationError (400 envelope)
"""

from typing import TypeVar

from fastapi import UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from doconnect.services.image_storage import UploadedFile

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_form(schema: type[SchemaT], **fields: object) -> SchemaT:
    try:
        return schema(**fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


async def read_uploads(files: list[UploadFile]) -> list[UploadedFile]:
    uploads = []
    for f in files:
        uploads.append(UploadedFile(filename=f.filename or "", content=await f.read()))
        await f.close()
    return uploads
