from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Docket(Base):
    __tablename__ = "dockets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Single-document slots: NULL until uploaded, otherwise a non-empty URL from the blob store.
    passport_front_url = Column(String(1000), nullable=True)
    passport_last_url = Column(String(1000), nullable=True)
    passport_photo_url = Column(String(1000), nullable=True)
    offer_letter_url = Column(String(1000), nullable=True)
    permanent_address_url = Column(String(1000), nullable=True)
    current_address_url = Column(String(1000), nullable=True)
    resume_url = Column(String(1000), nullable=True)

    # Variable-length collections (JSON string lists)
    passport_visa_urls = Column(Text, nullable=True)  # ["url", ...]
    education_files = Column(Text, nullable=True)  # [{name, url, size}, ...]
    experience_files = Column(Text, nullable=True)
    other_certifications = Column(Text, nullable=True)
    references = Column(Text, nullable=True)  # [{fullName, company, designation, phone, email}, ...]

    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="docket")
