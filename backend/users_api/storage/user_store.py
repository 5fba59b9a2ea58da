import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from users_api.core.exceptions import ClientInputError, NotFoundError
from users_api.models.credential import Credential
from users_api.models.location import Location
from users_api.models.user import User

logger = logging.getLogger(__name__)

USER_FIELDS = ("name", "salary", "status")
LOCATION_FIELDS = ("country", "district", "street")


class UserStore:
    """
    Typed queries against the users, locations and credentials tables.

    Works on the request's session and never commits; the caller decides
    when the unit of work is complete. Nothing is cached between calls.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_all(self, include_credential: bool = False) -> List[User]:
        """All users with their locations, oldest first"""
        options = [selectinload(User.locations)]
        if include_credential:
            options.append(selectinload(User.credential))
        return self.db.query(User).options(*options).order_by(User.id).all()

    def find_one(self, user_id: int, include_credential: bool = False) -> User:
        options = [selectinload(User.locations)]
        if include_credential:
            options.append(selectinload(User.credential))
        user = self.db.query(User).options(*options).filter(
            User.id == user_id).first()
        if user is None:
            raise NotFoundError(f"No user found with ID {user_id}")
        return user

    def find_by_name(self, name: str) -> Optional[User]:
        """
        Case-insensitive exact name match.

        Names are not unique; the lowest id wins when several users share one.
        """
        return (
            self.db.query(User)
            .options(selectinload(User.credential))
            .filter(func.lower(User.name) == name.lower())
            .order_by(User.id)
            .first()
        )

    def insert(
        self,
        data: Dict[str, Any],
        locations: Optional[List[Dict[str, Any]]] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        """Add a user together with its locations and credential"""
        user = User(**{key: data.get(key) for key in USER_FIELDS})
        for location_data in locations or []:
            user.locations.append(Location(
                **{key: location_data.get(key) for key in LOCATION_FIELDS}))
        if password_hash is not None:
            user.credential = Credential(password=password_hash)
        self.db.add(user)
        self._flush()
        return user

    def update(self, user: User, data: Dict[str, Any]) -> User:
        """Apply only the user columns present in data"""
        for key in USER_FIELDS:
            if key in data:
                setattr(user, key, data[key])
        self._flush()
        return user

    def find_location(self, user: User, location_id: int) -> Optional[Location]:
        """A location by id, only if it belongs to the given user"""
        return self.db.query(Location).filter(
            Location.id == location_id,
            Location.user_id == user.id
        ).first()

    def upsert_location(self, user: User, data: Dict[str, Any]) -> Location:
        """
        Update the user's location with data["id"] in place, or insert a new one.

        Only the location columns present in data are written on update.
        """
        location = None
        if data.get("id") is not None:
            location = self.find_location(user, data["id"])
        if location is None:
            location = Location(
                **{key: data.get(key) for key in LOCATION_FIELDS})
            user.locations.append(location)
        else:
            for key in LOCATION_FIELDS:
                if key in data:
                    setattr(location, key, data[key])
        self._flush()
        return location

    def set_credential(self, user: User, password_hash: str) -> Credential:
        """Replace the user's password hash, creating the row if missing"""
        if user.credential is None:
            user.credential = Credential(password=password_hash)
        else:
            user.credential.password = password_hash
        self._flush()
        return user.credential

    def remove(self, user_id: int) -> None:
        """Delete a user after its credential and locations"""
        if self.db.query(User.id).filter(User.id == user_id).first() is None:
            raise NotFoundError(f"User with ID {user_id} not found.")
        # Dependents first, the foreign keys would reject the user delete
        self.db.query(Credential).filter(
            Credential.user_id == user_id).delete(synchronize_session=False)
        self.db.query(Location).filter(
            Location.user_id == user_id).delete(synchronize_session=False)
        self.db.query(User).filter(
            User.id == user_id).delete(synchronize_session=False)
        self._flush()

    def _flush(self):
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity violation: {e.orig}")
            raise ClientInputError("Validation error: Invalid data provided.")
