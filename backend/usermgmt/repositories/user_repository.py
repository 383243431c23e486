import logging
import uuid
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from usermgmt.core.database import transaction
from usermgmt.core.errors import ConflictError, InternalError, NotFoundError
from usermgmt.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Sole gateway to persisted user rows.

    Every call goes straight to the database; nothing is cached. Writes are guarded by
    an existence check and run in their own transaction. The check and the write are
    not atomic; the primary key and the unique username constraint close that gap.
    """

    def __init__(self, db: Session):
        self.db = db

    def exists_by_id(self, user_id: uuid.UUID) -> bool:
        try:
            return self.db.query(User.id).filter(User.id == user_id).first() is not None
        except SQLAlchemyError as exc:
            logger.error(f"Error checking user {user_id} existence: {str(exc)}")
            raise InternalError("Database error occurred") from exc

    def create(self, user: User) -> None:
        """Insert a new user. Raises ConflictError if the id (or username) is taken."""
        user_id = user.id
        if self.exists_by_id(user_id):
            logger.warning(f"Refusing to create user {user_id}: id already exists")
            raise ConflictError("User already exists")

        try:
            with transaction(self.db):
                self.db.add(user)
        except IntegrityError as exc:
            logger.warning(f"Unique constraint rejected user {user_id}: {str(exc.orig)}")
            raise ConflictError("User already exists") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Error creating user {user_id}: {str(exc)}")
            raise InternalError("Database error occurred") from exc

        logger.info(f"Created user {user_id}")

    def update(self, user: User) -> None:
        """Replace every column of an existing user. Raises NotFoundError if it is gone."""
        # Read before the transaction: a rollback expires the instance
        user_id = user.id
        if not self.exists_by_id(user_id):
            logger.warning(f"Refusing to update user {user_id}: not found")
            raise NotFoundError("User")

        try:
            with transaction(self.db):
                # merge returns the same instance when it is already in this session
                self.db.merge(user)
        except IntegrityError as exc:
            logger.warning(f"Unique constraint rejected update of user {user_id}: {str(exc.orig)}")
            raise ConflictError("Username already taken") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Error updating user {user_id}: {str(exc)}")
            raise InternalError("Database error occurred") from exc

        logger.info(f"Updated user {user_id}")

    def resolve_by_username(self, username: str) -> User:
        """Return the row for username, soft-deleted or not."""
        try:
            user = self.db.query(User).filter(User.username == username).first()
        except SQLAlchemyError as exc:
            logger.error(f"Error resolving user {username!r}: {str(exc)}")
            raise InternalError("Database error occurred") from exc

        if user is None:
            logger.info(f"User {username!r} not found")
            raise NotFoundError("User")
        return user
