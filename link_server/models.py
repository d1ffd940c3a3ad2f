import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, String, Text, DateTime, ForeignKey, JSON, Index,
)
from sqlalchemy.orm import relationship

from link_server.database import Base

TRIP_STATUSES = ("planning", "ongoing", "completed")


def new_uuid():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    image = Column(String(1024), nullable=True)
    hashed_password = Column(String(255), nullable=True)  # NULL = OAuth-only account
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    trips = relationship("Trip", back_populates="user", cascade="all, delete-orphan")


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String, primary_key=True, default=new_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    destination = Column(String(255), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    cover_image = Column(String(1024), nullable=True)
    status = Column(String(20), nullable=False, default="planning")
    is_bookmarked = Column(Boolean, nullable=False, default=False)
    members = Column(JSON, nullable=True)  # list of member names
    color = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (Index("ix_trips_user_id_is_bookmarked", "user_id", "is_bookmarked"),)

    user = relationship("User", back_populates="trips")
