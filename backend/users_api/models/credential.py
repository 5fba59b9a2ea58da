from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from users_api.core.database import Base


class Credential(Base):
    """
    Hashed password of a user, one-to-one through the user id.

    Only bcrypt output is ever stored here, never the plaintext.
    """
    __tablename__ = "credentials"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    password = Column(String, nullable=False)

    user = relationship("User", back_populates="credential")
