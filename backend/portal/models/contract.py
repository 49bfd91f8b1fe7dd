from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Original = uploaded by admin, signed = returned by the candidate.
    company_contract_original_url = Column(String(1000), nullable=True)
    company_contract_signed_url = Column(String(1000), nullable=True)
    company_contract_status = Column(String(20), nullable=False, default="pending")  # pending|signed|rejected

    job_offer_original_url = Column(String(1000), nullable=True)
    job_offer_signed_url = Column(String(1000), nullable=True)
    job_offer_status = Column(String(20), nullable=False, default="pending")

    notes = Column(Text, nullable=True)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="contract")
