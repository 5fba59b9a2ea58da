import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from users_api.core.exceptions import AuthRejected, ClientInputError, NotFoundError, ServerFault
from users_api.core.security import CredentialService
from users_api.storage.user_store import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, credentials: CredentialService):
        self.store = UserStore(db)
        self.credentials = credentials

    def login(self, name: Optional[str], password: Optional[str]) -> str:
        """
        Check a name/password pair and issue a bearer token.

        Returns the signed token carrying the user's id and name.
        """
        if not name or not password:
            raise ClientInputError("Name and password are required.")

        try:
            user = self.store.find_by_name(name)
        except SQLAlchemyError:
            logger.exception("Error looking up user during login")
            raise ServerFault("Error during login.")

        if user is None:
            logger.warning("Login failed: unknown user name")
            raise NotFoundError("User not found.")

        # A user without a credential row is a data problem, not a bad login
        if user.credential is None or not user.credential.password:
            logger.error(f"Login failed: user {user.id} has no password set")
            raise ServerFault("Password not set for this user.")

        if not self.credentials.verify_password(password, user.credential.password):
            logger.warning(f"Login failed: invalid password for user {user.id}")
            raise AuthRejected("Invalid password.")

        logger.info(f"User {user.id} authenticated")
        return self.credentials.create_access_token({"id": user.id, "name": user.name})
