import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from ..config import ADMIN_COOKIE_NAME
from ..database import get_db
from ..schemas.docket import DocketUpdate
from ..schemas.principal import AdminPrincipal
from ..services.contract_service import contract_to_public, update_contract
from ..services.docket_service import docket_to_public, get_docket, update_docket
from ..services.session_service import admin_login, revoke_admin_session
from ..services.user_service import admin_stats, get_user, list_users, register_candidate, user_to_public
from ..services.work_permit_service import get_work_permit, update_work_permit, work_permit_to_public
from ..utils.cookies import clear_session_cookie, set_session_cookie
from ..utils.dependencies import admin_token_from_request
from ..utils.roles import admin_only
from ..utils.validation import validate_email, validate_phone, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdminLoginRequest(BaseModel):
    email: str
    password: str


class RegisterCandidateRequest(_CamelRequest):
    phone: str
    email: str | None = None
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class ContractUpdateRequest(_CamelRequest):
    company_contract_original_url: str | None = None
    company_contract_signed_url: str | None = None
    company_contract_status: str | None = None
    job_offer_original_url: str | None = None
    job_offer_signed_url: str | None = None
    job_offer_status: str | None = None
    notes: str | None = None


class WorkPermitUpdateRequest(_CamelRequest):
    status: str | None = None
    tracking_code: str | None = None
    application_date: datetime | None = None
    final_docket_url: str | None = None
    notes: str | None = None


@router.post("/login")
def login(payload: AdminLoginRequest, response: Response, db: Session = Depends(get_db)):
    token, expires_at = admin_login(db, payload.email, payload.password)
    set_session_cookie(response, name=ADMIN_COOKIE_NAME, token=token, expires_at=expires_at)
    return {
        "success": True,
        "message": "Admin login successful",
        "admin_token": token,
        "expires_at": expires_at.isoformat(),
    }


@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    revoke_admin_session(db, admin_token_from_request(request))
    clear_session_cookie(response, name=ADMIN_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(principal: AdminPrincipal = Depends(admin_only)):
    return {"email": principal.email, "expiresAt": principal.expires_at.isoformat()}


@router.get("/stats")
def stats(_: AdminPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    return admin_stats(db)


@router.get("/users")
def users(_: AdminPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    return {"users": [user_to_public(u) for u in list_users(db)]}


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: RegisterCandidateRequest,
    principal: AdminPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    user = register_candidate(
        db,
        phone=validate_phone(payload.phone),
        email=validate_email(payload.email) if payload.email else None,
        display_name=validate_string_field(payload.display_name, "displayName", max_length=255, required=False),
        first_name=validate_string_field(payload.first_name, "firstName", max_length=120, required=False),
        last_name=validate_string_field(payload.last_name, "lastName", max_length=120, required=False),
    )
    logger.info("Admin %s registered candidate %s", principal.email, user.id)
    return {"user": user_to_public(user)}


@router.get("/users/{user_id}")
def user_detail(user_id: str, _: AdminPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    return {"user": user_to_public(get_user(db, user_id))}


@router.get("/users/{user_id}/docket")
def user_docket(user_id: str, _: AdminPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    get_user(db, user_id)
    return {"docket": docket_to_public(get_docket(db, user_id))}


@router.patch("/users/{user_id}/docket")
def patch_user_docket(
    user_id: str,
    payload: DocketUpdate,
    principal: AdminPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    docket = update_docket(db, user_id, payload)
    logger.info("Admin %s updated docket of user %s", principal.email, user_id)
    return {"docket": docket_to_public(docket)}


@router.patch("/users/{user_id}/contract")
def patch_user_contract(
    user_id: str,
    payload: ContractUpdateRequest,
    principal: AdminPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    get_user(db, user_id)
    contract = update_contract(db, user_id, payload.model_dump(exclude_unset=True))
    logger.info("Admin %s updated contract of user %s", principal.email, user_id)
    return {"contract": contract_to_public(contract)}


@router.get("/users/{user_id}/work-permit")
def user_work_permit(user_id: str, _: AdminPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    get_user(db, user_id)
    return {"workPermit": work_permit_to_public(get_work_permit(db, user_id))}


@router.patch("/users/{user_id}/work-permit")
def patch_user_work_permit(
    user_id: str,
    payload: WorkPermitUpdateRequest,
    principal: AdminPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    get_user(db, user_id)
    permit = update_work_permit(db, user_id, payload.model_dump(exclude_unset=True))
    logger.info("Admin %s set work permit of user %s to %s", principal.email, user_id, permit.status)
    return {"workPermit": work_permit_to_public(permit)}
