from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class WorkPermit(Base):
    __tablename__ = "work_permits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # preparation|applied|awaiting_decision|approved|rejected
    status = Column(String(30), nullable=False, default="preparation")
    tracking_code = Column(String(120), nullable=True)
    application_date = Column(DateTime(timezone=True), nullable=True)
    final_docket_url = Column(String(1000), nullable=True)
    notes = Column(Text, nullable=True)

    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="work_permit")
