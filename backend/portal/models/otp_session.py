from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from ..database import Base
from ..utils.clock import utcnow


class OtpSession(Base):
    __tablename__ = "otp_sessions"
    __table_args__ = (
        Index("ix_otp_sessions_lookup", "identifier", "verified", "expires_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Normalized phone or email; matched by value, not a foreign key.
    identifier = Column(String(255), nullable=False)
    code = Column(String(12), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    # Set client-side so "newest" ordering has sub-second precision on SQLite.
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
