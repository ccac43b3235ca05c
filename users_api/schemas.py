from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# Column limits: ages are 32-bit, ids 64-bit signed.
MIN_INT32 = -(2**31)
MAX_INT32 = 2**31 - 1
MAX_INT64 = 2**63 - 1


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, examples=["Ann"])
    email: EmailStr = Field(..., examples=["ann@example.com"])
    age: Optional[int] = Field(0, ge=MIN_INT32, le=MAX_INT32, examples=[20])


class UpdateUserRequest(BaseModel):
    """Partial update.

    Empty strings, ``0`` and ``null`` all mean "leave as is"; see
    ``users_api.service.merge_update``.
    """

    name: Optional[str] = Field(None, examples=["Ann"])
    email: Optional[EmailStr] = Field(None, examples=["ann@example.com"])
    age: Optional[int] = Field(None, ge=MIN_INT32, le=MAX_INT32, examples=[30])

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, value):
        if value == "":
            return None
        return value


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    age: int
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
