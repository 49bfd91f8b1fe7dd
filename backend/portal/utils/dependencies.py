"""
Authorization guard.

Each principal kind has its own credential slot:

- candidate: `portal_session` cookie, or `Authorization: Bearer <token>`
- admin: `portal_admin_session` cookie, or `X-Admin-Token: <token>`

A token found in a slot is validated only as that slot's kind. A live token of
the other kind is rejected with 403, never reinterpreted. Admin routes also
look at the candidate slot, only to answer a live candidate session with 403.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..config import ADMIN_COOKIE_NAME, ADMIN_TOKEN_HEADER, CANDIDATE_COOKIE_NAME
from ..database import get_db
from ..schemas.principal import ADMIN, CANDIDATE, AdminPrincipal, CandidatePrincipal, Principal
from ..services.session_service import validate_session
from .error_handlers import ForbiddenError, UnauthorizedError, WrongPrincipalKindError, get_error_message


def candidate_token_from_request(request: Request) -> str | None:
    token = request.cookies.get(CANDIDATE_COOKIE_NAME)
    if token:
        return token
    auth = request.headers.get("Authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def admin_token_from_request(request: Request) -> str | None:
    token = request.cookies.get(ADMIN_COOKIE_NAME)
    if token:
        return token
    value = (request.headers.get(ADMIN_TOKEN_HEADER) or "").strip()
    return value or None


def _validate(db: Session, token: str | None, kind: str) -> Principal:
    try:
        return validate_session(db, token, kind)
    except WrongPrincipalKindError as e:
        raise ForbiddenError(get_error_message("forbidden"), details={"reason": "wrong_principal_kind"}) from e
    except UnauthorizedError as e:
        raise UnauthorizedError(get_error_message("unauthorized")) from e


def get_candidate_principal(request: Request, db: Session = Depends(get_db)) -> CandidatePrincipal:
    return _validate(db, candidate_token_from_request(request), CANDIDATE)


def get_admin_principal(request: Request, db: Session = Depends(get_db)) -> AdminPrincipal:
    token = admin_token_from_request(request)
    if token:
        return _validate(db, token, ADMIN)
    # No admin credential: a live candidate session here is the wrong kind (403),
    # anything else in the candidate slot is just unauthenticated.
    candidate_token = candidate_token_from_request(request)
    if candidate_token:
        try:
            validate_session(db, candidate_token, CANDIDATE)
        except (UnauthorizedError, WrongPrincipalKindError) as e:
            raise UnauthorizedError(get_error_message("unauthorized")) from e
        raise ForbiddenError(get_error_message("forbidden"), details={"reason": "wrong_principal_kind"})
    raise UnauthorizedError(get_error_message("unauthorized"))


def get_candidate_or_admin_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    # A presented candidate credential is authoritative: if it fails we do not
    # fall through to the admin slot.
    candidate_token = candidate_token_from_request(request)
    if candidate_token:
        return _validate(db, candidate_token, CANDIDATE)
    admin_token = admin_token_from_request(request)
    if admin_token:
        return _validate(db, admin_token, ADMIN)
    raise UnauthorizedError(get_error_message("unauthorized"))


def ensure_can_act_on_user(principal: Principal, user_id: str) -> None:
    """Candidates act only on themselves; admins name their target explicitly."""
    if isinstance(principal, AdminPrincipal):
        return
    if principal.user_id != str(user_id):
        raise ForbiddenError(get_error_message("forbidden"))
