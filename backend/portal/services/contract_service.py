from sqlalchemy.orm import Session

from ..models.contract import Contract
from ..utils.clock import utcnow
from ..utils.validation import normalize_document_url, validate_contract_status

URL_FIELDS = (
    "company_contract_original_url",
    "company_contract_signed_url",
    "job_offer_original_url",
    "job_offer_signed_url",
)
STATUS_FIELDS = ("company_contract_status", "job_offer_status")


def contract_to_public(contract: Contract | None) -> dict | None:
    if contract is None:
        return None
    return {
        "userId": contract.user_id,
        "companyContractOriginalUrl": contract.company_contract_original_url,
        "companyContractSignedUrl": contract.company_contract_signed_url,
        "companyContractStatus": contract.company_contract_status,
        "jobOfferOriginalUrl": contract.job_offer_original_url,
        "jobOfferSignedUrl": contract.job_offer_signed_url,
        "jobOfferStatus": contract.job_offer_status,
        "notes": contract.notes,
        "lastUpdated": contract.last_updated.isoformat() if contract.last_updated else None,
    }


def get_contract(db: Session, user_id: str) -> Contract | None:
    return db.query(Contract).filter(Contract.user_id == str(user_id)).first()


def update_contract(db: Session, user_id: str, changes: dict) -> Contract:
    contract = get_contract(db, user_id)
    if contract is None:
        contract = Contract(user_id=str(user_id), company_contract_status="pending", job_offer_status="pending")
        db.add(contract)

    for field in URL_FIELDS:
        if field in changes:
            setattr(contract, field, normalize_document_url(changes[field], field))
    for field in STATUS_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(contract, field, validate_contract_status(changes[field], field))
    if "notes" in changes:
        contract.notes = changes["notes"]

    contract.last_updated = utcnow()
    db.commit()
    db.refresh(contract)
    return contract
