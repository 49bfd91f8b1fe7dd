import logging

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from ..config import CANDIDATE_COOKIE_NAME, OTP_TTL_MINUTES
from ..database import get_db
from ..schemas.principal import CandidatePrincipal
from ..services.notifier import Notifier, get_notifier
from ..services.otp_service import issue_otp, verify_otp
from ..services.session_service import grant_candidate_session, revoke_candidate_session
from ..services.user_service import get_user, update_profile, user_to_public
from ..utils.cookies import clear_session_cookie, set_session_cookie
from ..utils.dependencies import candidate_token_from_request
from ..utils.roles import candidate_only
from ..utils.validation import validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


class SendOtpRequest(BaseModel):
    identifier: str  # phone or email


class VerifyOtpRequest(BaseModel):
    identifier: str
    code: str


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


@router.post("/auth/send-otp", status_code=status.HTTP_202_ACCEPTED)
def send_otp(
    payload: SendOtpRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    issue_otp(db, payload.identifier, notifier)
    return {
        "success": True,
        "message": "A login code has been sent.",
        "expiresInMinutes": OTP_TTL_MINUTES,
    }


@router.post("/auth/verify-otp")
def verify_otp_code(payload: VerifyOtpRequest, response: Response, db: Session = Depends(get_db)):
    user = verify_otp(db, payload.identifier, payload.code)
    token, expires_at = grant_candidate_session(db, user)
    set_session_cookie(response, name=CANDIDATE_COOKIE_NAME, token=token, expires_at=expires_at)
    return {
        "success": True,
        "message": "Login successful",
        "access_token": token,
        "token_type": "bearer",
        "expires_at": expires_at.isoformat(),
        "user": user_to_public(user),
    }


@router.get("/auth/user")
def current_user(principal: CandidatePrincipal = Depends(candidate_only), db: Session = Depends(get_db)):
    return user_to_public(get_user(db, principal.user_id))


@router.post("/auth/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    revoke_candidate_session(db, candidate_token_from_request(request))
    clear_session_cookie(response, name=CANDIDATE_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.patch("/profile")
def patch_profile(
    payload: ProfileUpdateRequest,
    principal: CandidatePrincipal = Depends(candidate_only),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    if "display_name" in changes:
        changes["display_name"] = validate_string_field(
            changes["display_name"], "displayName", max_length=255, required=False
        )
    user = update_profile(db, principal.user_id, changes)
    return {"user": user_to_public(user)}
