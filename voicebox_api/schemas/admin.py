from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class LoginRequest(BaseModel):
    password: str


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(
        ...,
        validation_alias=AliasChoices("currentPassword", "oldPassword", "current_password"),
    )
    new_password: str = Field(
        ...,
        validation_alias=AliasChoices("newPassword", "new_password"),
    )


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., description="PENDING, APPROVED or REJECTED (case-insensitive)")


class PasswordStatus(BaseModel):
    configured: bool
    updated_at: Optional[str] = Field(None, serialization_alias="updatedAt")
    recovery_enabled: bool = Field(False, serialization_alias="recoveryEnabled")
    min_length: int = Field(8, serialization_alias="minLength")
