from functools import lru_cache
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from usermgmt.core.config import settings
from usermgmt.core.database import get_db
from usermgmt.core.security import PasswordHasher, decode_access_token
from usermgmt.repositories.user_repository import UserRepository
from usermgmt.services.user_service import UserService
from usermgmt.types import TokenClaims

# OAuth2 password bearer scheme - extracts token from Authorization header
# tokenUrl tells Swagger UI where the login endpoint lives
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/users/login", auto_error=False)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """One hasher per process, with the configured bcrypt cost"""
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


def get_user_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(UserRepository(db), hasher)


async def get_current_claims(token: str | None = Depends(oauth2_scheme)) -> TokenClaims:
    """
    Identity of the caller, taken from the bearer token.

    The username in the claims is trusted as-is; the user row is not re-read here.
    Any problem with the token is a 401.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if settings.DISABLE_AUTH:
        # Dev bypass: act as the configured user without a token
        return TokenClaims(username=settings.DEV_AUTH_USERNAME)

    if token is None:
        raise credentials_exception

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    # JWT standard uses 'sub' (subject) claim for the username
    username = payload.get("sub")
    if not username:
        raise credentials_exception

    try:
        return TokenClaims(
            username=username,
            user_id=payload.get("uid"),
            role=payload.get("role"),
            exp=payload.get("exp"),
        )
    except PydanticValidationError:
        # Signed by us but malformed (e.g. uid is not a UUID)
        raise credentials_exception
