import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, String, DateTime, Uuid
from usermgmt.core.database import Base
from usermgmt.core.errors import ConflictError, ValidationError
from usermgmt.core.security import PasswordHasher
from usermgmt.types import UserRequest

REQUIRED_FIELDS = ("username", "email", "name", "password", "role")


def validate_required(values: dict) -> None:
    """Raise ValidationError naming every required field that is missing or empty."""
    missing = [field for field in REQUIRED_FIELDS if not values.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class User(Base):
    """
    User record and its mutation rules.

    Passwords are stored as bcrypt hashes (never plaintext). A record is soft-deleted
    when both deleted_at and deleted_by are set; they are always written together.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True)
    # Unique so concurrent signups with the same username cannot both land
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    # bcrypt hash of the password
    password = Column(String(255), nullable=False)
    role = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(Uuid, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    updated_by = Column(Uuid, nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(Uuid, nullable=True)

    @classmethod
    def new_from_request(
        cls,
        request: UserRequest,
        hasher: PasswordHasher,
        created_by: Optional[uuid.UUID] = None,
    ) -> "User":
        """
        Build a fully formed, not yet persisted user.

        created_by defaults to the new id itself (self-registration).
        """
        values = request.model_dump()
        validate_required(values)

        user_id = uuid.uuid4()
        return cls(
            id=user_id,
            username=request.username,
            email=request.email,
            name=request.name,
            password=hasher.hash(request.password),
            role=request.role,
            created_at=datetime.now(timezone.utc),
            created_by=created_by or user_id,
        )

    def apply_update(self, request: UserRequest, acting_user: "User", hasher: PasswordHasher) -> None:
        """Overwrite every mutable field from the request and stamp the audit fields."""
        if self.is_deleted():
            raise ConflictError("User is deleted")

        # Validate before writing so a rejected update leaves the record untouched
        validate_required(request.model_dump())

        # Hash first: if it fails nothing has been written yet
        # Re-hashed on every update even when the password is unchanged
        password_hash = hasher.hash(request.password)

        self.username = request.username
        self.email = request.email
        self.name = request.name
        self.password = password_hash
        self.role = request.role
        self._touch(acting_user)

    def mark_deleted(self, acting_user: "User") -> None:
        """Soft-delete: active -> deleted. Both deletion fields are set together."""
        if self.is_deleted():
            raise ConflictError("User is already deleted")

        now = datetime.now(timezone.utc)
        self.deleted_at = now
        self.deleted_by = acting_user.id
        self.updated_at = now
        self.updated_by = acting_user.id

    def is_deleted(self) -> bool:
        return self.deleted_at is not None and self.deleted_by is not None

    def _touch(self, acting_user: "User") -> None:
        self.updated_at = datetime.now(timezone.utc)
        self.updated_by = acting_user.id

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
