"""Request and response shapes shared by the service and HTTP layers."""

import uuid
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_serializer


class UserRequest(BaseModel):
    """Body of both account creation and profile update (full replace)."""
    username: str
    email: str
    name: str
    password: str
    role: str


# Creation and update carry the same fields
CreateUserRequest = UserRequest
UpdateUserRequest = UserRequest


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    """Redacted view of a user; the password hash is never part of it."""
    id: uuid.UUID
    username: str
    email: str
    name: str
    role: str
    access_token: str = ""
    created_at: datetime
    created_by: uuid.UUID
    updated_at: Optional[datetime] = None
    updated_by: Optional[uuid.UUID] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[uuid.UUID] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", "deleted_at")
    def serialize_timestamp(self, value: Optional[datetime], _info):
        # Some backends (SQLite) hand timestamps back naive; they were written as UTC
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenClaims(BaseModel):
    """Identity asserted by a verified bearer token."""
    username: str
    user_id: Optional[uuid.UUID] = None
    role: Optional[str] = None
    exp: Optional[int] = None
