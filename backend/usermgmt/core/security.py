from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from usermgmt.core.config import settings
from usermgmt.core.errors import InternalError


class PasswordHasher:
    """
    One-way hashing and verification of passwords.

    The bcrypt cost factor is fixed when the hasher is built. Build one per process
    and hand it to whatever needs it.
    """

    def __init__(self, rounds: int = settings.BCRYPT_ROUNDS):
        self.rounds = rounds
        # bcrypt_sha256 pre-hashes the password, so NUL bytes and anything past
        # bcrypt's 72-byte limit still count; plain bcrypt hashes keep verifying
        self._context = CryptContext(
            schemes=["bcrypt_sha256", "bcrypt"], deprecated="auto",
            bcrypt_sha256__rounds=rounds, bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt"""
        try:
            return self._context.hash(password)
        except (ValueError, TypeError) as exc:
            raise InternalError("Could not hash password") from exc

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a hash using constant-time comparison"""
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # Unrecognised or malformed hash never matches
            return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token with expiration"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(
            timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # JWT standard 'exp' claim
    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token"""
    try:
        # Verifies signature and expiration
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        # Expired, tampered, or signed with another key
        return None
