import logging
import uuid
from typing import Callable, Optional
from usermgmt.core.errors import UnauthorizedError
from usermgmt.core.security import PasswordHasher, create_access_token
from usermgmt.models.login import Login
from usermgmt.models.user import User
from usermgmt.repositories.user_repository import UserRepository
from usermgmt.types import LoginRequest, LoginResponse, UserRequest, UserResponse

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class UserService:
    """
    Business rules for the user lifecycle.

    Errors raised by the repository (NotFoundError, ConflictError, InternalError)
    pass through unchanged.
    """

    def __init__(
        self,
        repository: UserRepository,
        hasher: PasswordHasher,
        token_issuer: Callable[[dict], str] = create_access_token,
    ):
        self.repository = repository
        self.hasher = hasher
        self.token_issuer = token_issuer

    def create(self, request: UserRequest, created_by: Optional[uuid.UUID] = None) -> UserResponse:
        """Register a new user"""
        user = User.new_from_request(request, self.hasher, created_by=created_by)
        self.repository.create(user)
        return UserResponse.model_validate(user)

    def login(self, request: LoginRequest) -> LoginResponse:
        """Check the password and issue an access token"""
        login = Login.from_request(request)
        login.user = self.repository.resolve_by_username(login.username)

        if not self.hasher.verify(login.password, login.user.password):
            logger.info(f"Rejected login for {login.username!r}: wrong password")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if login.user.is_deleted():
            logger.info(f"Rejected login for {login.username!r}: account deleted")
            raise UnauthorizedError("User account is deleted")

        login.access_token = self.token_issuer({
            "sub": login.user.username,
            "uid": str(login.user.id),
            "role": login.user.role,
        })
        return login.to_response()

    def resolve_by_username(self, username: str) -> UserResponse:
        user = self.repository.resolve_by_username(username)
        return UserResponse.model_validate(user)

    def update(self, username: str, request: UserRequest) -> UserResponse:
        """Replace the profile of username; the user is recorded as its own editor"""
        user = self.repository.resolve_by_username(username)
        user.apply_update(request, user, self.hasher)
        self.repository.update(user)
        return UserResponse.model_validate(user)

    def delete(self, username: str) -> UserResponse:
        """Soft-delete the account of username"""
        user = self.repository.resolve_by_username(username)
        user.mark_deleted(user)
        self.repository.update(user)
        return UserResponse.model_validate(user)
