"""Auth Schemas - registration and login payloads.

Invariants:
    - RegisterRequest.email is a syntactically valid address (pydantic EmailStr,
      which also bounds its length)
    - LoginRequest fields are required and non-blank
    - Consumed by services/registration.py and services/login.py
"""

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("username must have at least 3 non-blank characters")
        return v


class LoginRequest(BaseModel):
    username_or_email: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=100)

    @field_validator("username_or_email", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v
