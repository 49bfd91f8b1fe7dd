import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.docket import DocketUpdate
from ..schemas.principal import CandidatePrincipal, Principal
from ..services.contract_service import contract_to_public, get_contract, update_contract
from ..services.docket_service import complete_docket, docket_to_public, get_docket, update_docket
from ..services.work_permit_service import get_work_permit, work_permit_to_public
from ..utils.dependencies import ensure_can_act_on_user
from ..utils.roles import candidate_only, candidate_or_admin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Docket"])


class SignedContractUpdate(BaseModel):
    """Candidates only hand back signed copies; originals, statuses and notes are admin-owned."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    company_contract_signed_url: str | None = None
    job_offer_signed_url: str | None = None


@router.get("/docket")
def my_docket(principal: CandidatePrincipal = Depends(candidate_only), db: Session = Depends(get_db)):
    return {"docket": docket_to_public(get_docket(db, principal.user_id))}


@router.patch("/docket")
def patch_my_docket(
    payload: DocketUpdate,
    principal: CandidatePrincipal = Depends(candidate_only),
    db: Session = Depends(get_db),
):
    docket = update_docket(db, principal.user_id, payload)
    return {"docket": docket_to_public(docket)}


@router.post("/docket/{user_id}/complete")
def complete(
    user_id: str,
    principal: Principal = Depends(candidate_or_admin),
    db: Session = Depends(get_db),
):
    ensure_can_act_on_user(principal, user_id)
    result = complete_docket(db, user_id)
    logger.info("Docket completion for %s requested by %s", user_id, principal.kind)
    return {"success": True, **result.model_dump(by_alias=True)}


@router.get("/contract")
def my_contract(principal: CandidatePrincipal = Depends(candidate_only), db: Session = Depends(get_db)):
    return {"contract": contract_to_public(get_contract(db, principal.user_id))}


@router.patch("/contract")
def patch_my_contract(
    payload: SignedContractUpdate,
    principal: CandidatePrincipal = Depends(candidate_only),
    db: Session = Depends(get_db),
):
    contract = update_contract(db, principal.user_id, payload.model_dump(exclude_unset=True))
    logger.info("Candidate %s returned signed contract documents", principal.user_id)
    return {"contract": contract_to_public(contract)}


@router.get("/work-permit")
def my_work_permit(principal: CandidatePrincipal = Depends(candidate_only), db: Session = Depends(get_db)):
    return {"workPermit": work_permit_to_public(get_work_permit(db, principal.user_id))}
