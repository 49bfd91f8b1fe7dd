from sqlalchemy.orm import Session

from ..models.work_permit import WorkPermit
from ..utils.clock import utcnow
from ..utils.validation import normalize_document_url, validate_string_field, validate_work_permit_status


def work_permit_to_public(permit: WorkPermit | None) -> dict | None:
    if permit is None:
        return None
    return {
        "userId": permit.user_id,
        "status": permit.status,
        "trackingCode": permit.tracking_code,
        "applicationDate": permit.application_date.isoformat() if permit.application_date else None,
        "finalDocketUrl": permit.final_docket_url,
        "notes": permit.notes,
        "lastUpdated": permit.last_updated.isoformat() if permit.last_updated else None,
    }


def get_work_permit(db: Session, user_id: str) -> WorkPermit | None:
    return db.query(WorkPermit).filter(WorkPermit.user_id == str(user_id)).first()


def update_work_permit(db: Session, user_id: str, changes: dict) -> WorkPermit:
    """Upsert; keys absent from `changes` are left alone."""
    permit = get_work_permit(db, user_id)
    if permit is None:
        permit = WorkPermit(user_id=str(user_id), status="preparation")
        db.add(permit)

    if changes.get("status") is not None:
        permit.status = validate_work_permit_status(changes["status"])
    if "tracking_code" in changes:
        code = changes["tracking_code"]
        if isinstance(code, str) and not code.strip():
            code = None
        permit.tracking_code = validate_string_field(code, "trackingCode", max_length=120, required=False)
    if "application_date" in changes:
        permit.application_date = changes["application_date"]
    if "final_docket_url" in changes:
        permit.final_docket_url = normalize_document_url(changes["final_docket_url"], "finalDocketUrl")
    if "notes" in changes:
        permit.notes = changes["notes"]

    permit.last_updated = utcnow()
    db.commit()
    db.refresh(permit)
    return permit
