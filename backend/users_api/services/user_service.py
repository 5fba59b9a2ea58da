import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from users_api.core.exceptions import APIError, ClientInputError, NotFoundError, ServerFault
from users_api.core.security import CredentialService
from users_api.models.user import User
from users_api.storage.user_store import UserStore

logger = logging.getLogger(__name__)

# Range of the Integer columns (32-bit signed on PostgreSQL)
DB_INT_MIN = -2**31
DB_INT_MAX = 2**31 - 1

USER_ID_PATTERN = re.compile(r"-?[0-9]+")


def parse_user_id(raw_id: str) -> int:
    """
    Path ids arrive as strings; anything that is not a plain integer is a client error.

    Integers no row can have (outside 1..DB_INT_MAX) are reported as not found.
    """
    if not isinstance(raw_id, str) or not USER_ID_PATTERN.fullmatch(raw_id):
        raise ClientInputError("Invalid ID provided.")
    user_id = int(raw_id)
    if not 1 <= user_id <= DB_INT_MAX:
        raise NotFoundError(f"No user found with ID {raw_id}")
    return user_id


class UserService:
    """List, get, create, update and delete users with their locations and credential"""

    def __init__(self, db: Session, credentials: CredentialService):
        self.db = db
        self.store = UserStore(db)
        self.credentials = credentials

    @contextmanager
    def _transaction(self, failure_message: str):
        """
        Commit on success, roll back everything on any failure.

        Nested writes (user + locations + credential) are one unit of work.
        """
        try:
            yield
            self.db.commit()
        except APIError:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            # Rollback prevents partial state if some rows were flushed
            self.db.rollback()
            logger.exception(failure_message)
            raise ServerFault(failure_message)

    def list_users(self) -> List[User]:
        try:
            return self.store.find_all()
        except SQLAlchemyError:
            logger.exception("Error listing users")
            raise ServerFault("Error fetching users")

    def get_user(self, user_id: int) -> User:
        try:
            return self.store.find_one(user_id)
        except SQLAlchemyError:
            logger.exception(f"Error fetching user {user_id}")
            raise ServerFault(f"Error fetching user with ID {user_id}")

    def create_user(self, data: Dict[str, Any]) -> User:
        """
        Create a user with optional locations and a required password.

        Duplicate names are accepted; names are not unique.
        """
        password = data.get("password")
        if not password:
            raise ClientInputError("Password is required.")
        if not _is_valid_name(data.get("name")):
            raise ClientInputError("Name is required.")

        # Hash before opening the transaction, bcrypt is slow on purpose
        password_hash = self._hash(password)
        with self._transaction("Database error occurred while creating the user."):
            user = self.store.insert(
                data,
                locations=data.get("locations"),
                password_hash=password_hash,
            )
        logger.info(f"Created user {user.id} with {len(user.locations)} location(s)")
        return user

    def update_user(self, user_id: int, data: Dict[str, Any]) -> User:
        """
        Partially update a user.

        Only keys present in data are touched. Locations are upserted by id and
        locations not mentioned are left alone. A password replaces the stored hash.
        """
        if "name" in data and not _is_valid_name(data["name"]):
            raise ClientInputError("Name cannot be empty.")
        password = data.get("password")
        if password == "":
            raise ClientInputError("Password cannot be empty.")
        password_hash = self._hash(password) if password else None

        with self._transaction("Database error occurred while updating the user."):
            user = self.store.find_one(user_id, include_credential=True)
            self.store.update(user, data)
            for location_data in data.get("locations") or []:
                self.store.upsert_location(user, location_data)
            if password_hash is not None:
                self.store.set_credential(user, password_hash)
        logger.info(f"Updated user {user_id}, fields: {sorted(data.keys() - {'password'})}")
        return user

    def delete_user(self, user_id: int) -> None:
        """Delete a user together with its credential and locations"""
        with self._transaction("Database error occurred while deleting the user."):
            self.store.remove(user_id)
        logger.info(f"Deleted user {user_id}")

    def _hash(self, password: str) -> str:
        try:
            return self.credentials.get_password_hash(password)
        except (ValueError, TypeError) as e:
            logger.error(f"Password hashing failed: {e}")
            raise ServerFault("Error hashing password.")


def _is_valid_name(name) -> bool:
    return isinstance(name, str) and bool(name.strip())
