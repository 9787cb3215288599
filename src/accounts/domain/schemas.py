"""Pydantic schemas guarding user payloads."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from shared.services.credentials import normalize_name

Role = Literal["patient", "doctor", "bacteriologist", "admin"]


class UserSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    document_id: int = Field(gt=0)
    email: EmailStr
    role: Role = "patient"
    is_active: bool = True
    contact_number: Optional[str] = Field(default=None, max_length=30)

    @field_validator("first_name")
    @classmethod
    def first_name_yields_username_stem(cls, value: str) -> str:
        if not normalize_name(value):
            raise ValueError("must contain Latin letters or digits to derive a username")
        return value

    @field_validator("last_name")
    @classmethod
    def surname_yields_username_stem(cls, value: str) -> str:
        # only the first token ends up in the username
        if not normalize_name(value.split()[0]):
            raise ValueError("first surname must contain Latin letters or digits to derive a username")
        return value


class UserUpdateSchema(BaseModel):
    """Partial update; username and password are not editable here."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    document_id: Optional[int] = Field(default=None, gt=0)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    contact_number: Optional[str] = Field(default=None, max_length=30)

    @field_validator("first_name", "last_name", "document_id", "email", "role", "is_active")
    @classmethod
    def not_null(cls, value):
        # omitted fields never reach here; an explicit null does
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value
