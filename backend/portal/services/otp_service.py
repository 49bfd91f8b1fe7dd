"""
One-time code issuance and verification.

Codes are bound to a normalized identifier (phone or email) of a candidate an
admin has already registered. Verification spends a code with a single
conditional UPDATE so two concurrent submissions can never both succeed.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, or_, update
from sqlalchemy.orm import Session

from ..config import OTP_LENGTH, OTP_TTL_MINUTES
from ..models.otp_session import OtpSession
from ..models.user import User
from ..utils.clock import utcnow
from ..utils.error_handlers import DeliveryFailedError, InvalidOrExpiredOtpError, NotRegisteredError
from ..utils.security import generate_numeric_code
from ..utils.validation import is_email_identifier, normalize_identifier
from .notifier import Notifier

logger = logging.getLogger(__name__)


def find_user_by_identifier(db: Session, identifier: str) -> User | None:
    if is_email_identifier(identifier):
        return db.query(User).filter(User.email == identifier).first()
    return db.query(User).filter(User.phone == identifier).first()


def issue_otp(
    db: Session,
    identifier: str,
    notifier: Notifier,
    *,
    now: datetime | None = None,
) -> OtpSession:
    """
    Create a fresh code for a registered identifier and hand it to the notifier.

    Earlier outstanding codes stay valid until they expire. The row is committed
    before delivery so a failed send can be followed by a resend.
    """
    normalized = normalize_identifier(identifier)
    if not normalized:
        raise NotRegisteredError()

    if find_user_by_identifier(db, normalized) is None:
        raise NotRegisteredError()

    now = now or utcnow()
    otp = OtpSession(
        identifier=normalized,
        code=generate_numeric_code(OTP_LENGTH),
        expires_at=now + timedelta(minutes=OTP_TTL_MINUTES),
        verified=False,
        created_at=now,
    )
    db.add(otp)
    db.commit()
    db.refresh(otp)

    try:
        notifier.send(normalized, otp.code)
    except DeliveryFailedError:
        logger.warning("OTP %s stored but delivery failed", otp.id)
        raise
    except Exception as e:
        logger.exception("Notifier crashed while delivering OTP %s", otp.id)
        raise DeliveryFailedError() from e

    logger.info("Issued OTP %s (expires %s)", otp.id, otp.expires_at)
    return otp


def verify_otp(
    db: Session,
    identifier: str,
    code: str,
    *,
    now: datetime | None = None,
) -> User:
    """
    Spend a matching code and return its user.

    Wrong code, expired code, reused code and lost races all raise the same
    `InvalidOrExpiredOtpError`. Users are never created here.
    """
    normalized = normalize_identifier(identifier)
    code = (code or "").strip() if isinstance(code, str) else ""
    if not normalized or not code:
        raise InvalidOrExpiredOtpError()

    now = now or utcnow()
    candidate = (
        db.query(OtpSession)
        .filter(
            OtpSession.identifier == normalized,
            OtpSession.verified.is_(False),
            OtpSession.expires_at > now,
            OtpSession.code == code,
        )
        .order_by(OtpSession.created_at.desc(), OtpSession.id.desc())
        .first()
    )
    if candidate is None:
        raise InvalidOrExpiredOtpError()

    # Check-and-set in one statement: only the first concurrent spender matches.
    result = db.execute(
        update(OtpSession)
        .where(
            OtpSession.id == candidate.id,
            OtpSession.verified.is_(False),
            OtpSession.expires_at > now,
        )
        .values(verified=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidOrExpiredOtpError()
    db.commit()

    user = find_user_by_identifier(db, normalized)
    if user is None:
        # Candidate removed between issue and verify.
        raise InvalidOrExpiredOtpError()

    logger.info("OTP %s verified for user %s", candidate.id, user.id)
    return user


def purge_expired_otps(db: Session, *, now: datetime | None = None) -> int:
    """Delete expired and spent codes. Storage hygiene only."""
    now = now or utcnow()
    result = db.execute(
        delete(OtpSession)
        .where(or_(OtpSession.expires_at <= now, OtpSession.verified.is_(True)))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0
