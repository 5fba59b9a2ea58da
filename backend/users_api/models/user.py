from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from users_api.core.database import Base


class User(Base):
    """
    User model - the aggregate root.

    Owns zero or more locations and at most one credential. Dependents are
    removed explicitly by the delete operation before the user row goes.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Names are not unique; login matches them case-insensitively
    name = Column(String, nullable=False, index=True)
    salary = Column(Integer, nullable=True)
    status = Column(Boolean, nullable=True)
    # Set automatically by database
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    locations = relationship(
        "Location", back_populates="user", order_by="Location.id")
    credential = relationship(
        "Credential", back_populates="user", uselist=False)
