"""
Session Manager.

Two principal kinds with separate, non-interchangeable credentials:

- candidate: a signed HS256 token (`kind="candidate"`, `jti`) whose `jti` must
  also exist in `candidate_sessions`; logout deletes that row.
- admin: an opaque random token stored in `admin_sessions`.

Both carry an absolute expiry. Nothing is renewed on use.
"""
import logging
from datetime import datetime, timedelta
from uuid import uuid4

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..config import ADMIN_SESSION_TTL_MINUTES, CANDIDATE_SESSION_TTL_MINUTES
from ..models.admin import AdminAccount, AdminSession
from ..models.candidate_session import CandidateSession
from ..models.user import User
from ..schemas.principal import ADMIN, CANDIDATE, AdminPrincipal, CandidatePrincipal, Principal
from ..utils.clock import as_utc, utcnow
from ..utils.error_handlers import InvalidCredentialsError, UnauthorizedError, WrongPrincipalKindError
from ..utils.jwt import create_candidate_token, decode_candidate_token
from ..utils.security import generate_session_token, verify_password

logger = logging.getLogger(__name__)


def grant_candidate_session(db: Session, user: User, *, now: datetime | None = None) -> tuple[str, datetime]:
    now = now or utcnow()
    expires_at = now + timedelta(minutes=CANDIDATE_SESSION_TTL_MINUTES)
    token_id = uuid4().hex

    db.add(CandidateSession(token_id=token_id, user_id=user.id, expires_at=expires_at))
    db.commit()

    token = create_candidate_token(user_id=user.id, token_id=token_id, issued_at=now, expires_at=expires_at)
    logger.info("Candidate session granted for user %s", user.id)
    return token, expires_at


def admin_login(db: Session, email: str, password: str, *, now: datetime | None = None) -> tuple[str, datetime]:
    """Same error, and the same bcrypt cost, whether or not the email exists."""
    normalized = (email or "").strip().lower() if isinstance(email, str) else ""
    account = db.query(AdminAccount).filter(AdminAccount.email == normalized).first() if normalized else None

    if not verify_password(password or "", account.password_hash if account else None):
        logger.info("Admin login failed")
        raise InvalidCredentialsError()

    now = now or utcnow()
    expires_at = now + timedelta(minutes=ADMIN_SESSION_TTL_MINUTES)
    session_row = AdminSession(
        session_token=generate_session_token(),
        email=account.email,
        expires_at=expires_at,
    )
    db.add(session_row)
    db.commit()
    db.refresh(session_row)

    logger.info("Admin session %s created for %s", session_row.id, account.email)
    return session_row.session_token, expires_at


def _resolve_candidate(db: Session, token: str, now: datetime) -> CandidatePrincipal | None:
    claims = decode_candidate_token(token)
    if not claims:
        return None
    row = db.query(CandidateSession).filter(CandidateSession.token_id == claims["jti"]).first()
    if row is None or row.user_id != claims["sub"]:
        return None
    expires_at = as_utc(row.expires_at)
    if expires_at <= now:
        return None
    return CandidatePrincipal(user_id=row.user_id, session_id=row.token_id, expires_at=expires_at)


def _resolve_admin(db: Session, token: str, now: datetime) -> AdminPrincipal | None:
    row = db.query(AdminSession).filter(AdminSession.session_token == token).first()
    if row is None:
        return None
    expires_at = as_utc(row.expires_at)
    if expires_at <= now:
        return None
    return AdminPrincipal(email=row.email, session_id=row.id, expires_at=expires_at)


def validate_session(
    db: Session,
    token: str | None,
    expected_kind: str,
    *,
    now: datetime | None = None,
) -> Principal:
    """
    Resolve a token for a route that requires `expected_kind`.

    Raises UnauthorizedError when the token is absent, unknown or expired, and
    WrongPrincipalKindError when it is a live token of the other kind.
    """
    if expected_kind not in (CANDIDATE, ADMIN):
        raise ValueError(f"Unknown principal kind: {expected_kind}")
    if not token:
        raise UnauthorizedError()

    now = now or utcnow()
    candidate = _resolve_candidate(db, token, now)
    admin = None if candidate else _resolve_admin(db, token, now)

    principal = candidate or admin
    if principal is None:
        raise UnauthorizedError()
    if principal.kind != expected_kind:
        raise WrongPrincipalKindError(expected=expected_kind, actual=principal.kind)
    return principal


def revoke_candidate_session(db: Session, token: str | None) -> bool:
    claims = decode_candidate_token(token) if token else None
    if not claims:
        return False
    result = db.execute(
        delete(CandidateSession)
        .where(CandidateSession.token_id == claims["jti"])
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return bool(result.rowcount)


def revoke_admin_session(db: Session, token: str | None) -> bool:
    if not token:
        return False
    result = db.execute(
        delete(AdminSession)
        .where(AdminSession.session_token == token)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return bool(result.rowcount)


def purge_expired_sessions(db: Session, *, now: datetime | None = None) -> int:
    now = now or utcnow()
    removed = 0
    for model in (CandidateSession, AdminSession):
        result = db.execute(
            delete(model).where(model.expires_at <= now).execution_options(synchronize_session=False)
        )
        removed += result.rowcount or 0
    db.commit()
    return removed
