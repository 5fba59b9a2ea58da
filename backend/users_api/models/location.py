from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from users_api.core.database import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    country = Column(String, nullable=True)
    district = Column(String, nullable=True)
    street = Column(String, nullable=True)
    # A location always belongs to exactly one user
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    user = relationship("User", back_populates="locations")
