"""Pydantic schemas for user edits.

These validate the values an admin submits when editing a user, before
anything is tokenized or written.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

UserStatus = Literal["active", "unverified", "inactive", "deleted"]


class UserUpdateRequest(BaseModel):
    """Request schema for updating a user's editable columns.

    All fields are required: the submitted values are the complete desired
    state of the user's editable columns.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    status: UserStatus = Field(..., description="The status of the user")
    first_name: str = Field(..., min_length=1, description="The first name of the user")
    last_name: str = Field(..., min_length=1, description="The last name of the user")
    email: EmailStr = Field(..., description="The email address of the user")
    memo: str = Field("", description="Admin notes, never shown to the user")

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: str) -> str:
        """Reject an empty status with a readable message."""
        if not v:
            raise ValueError("Status is required")
        return v


class UserDetailsResponse(BaseModel):
    """A user's columns with sensitive values resolved from the vault."""

    id: str
    status: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    memo: str = ""
    created_at: str
    updated_at: str
