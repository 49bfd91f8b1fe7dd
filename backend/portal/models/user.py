from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


def _new_user_id() -> str:
    return str(uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    uid = Column(String(8), unique=True, index=True, nullable=False)  # public 8-digit id
    phone = Column(String(20), unique=True, index=True, nullable=False)  # normalized
    email = Column(String(255), unique=True, index=True, nullable=True)
    display_name = Column(String(255), nullable=True)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    profile_image_url = Column(String(1000), nullable=True)
    # Only the docket completion engine flips this, and only false -> true.
    docket_completed = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    docket = relationship("Docket", back_populates="user", uselist=False, cascade="all, delete-orphan")
    contract = relationship("Contract", back_populates="user", uselist=False, cascade="all, delete-orphan")
    work_permit = relationship("WorkPermit", back_populates="user", uselist=False, cascade="all, delete-orphan")
    sessions = relationship("CandidateSession", back_populates="user", cascade="all, delete-orphan")
