"""
Docket Completion Engine.

A docket is complete when the six required single-document slots all hold a
URL. Optional collections (visas, education, experience, certifications,
references) and the resume slot never influence the result.

`complete_docket` is the only code path that sets `User.docket_completed`.
"""
import json
import logging
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models.docket import Docket
from ..models.user import User
from ..schemas.docket import CompletionResult, DocketUpdate
from ..utils.clock import utcnow
from ..utils.error_handlers import IncompleteDocketError, NotFoundError, get_error_message
from ..utils.validation import normalize_document_url

logger = logging.getLogger(__name__)

# (model attribute, API name), in the order missing slots are reported.
REQUIRED_SLOTS: tuple[tuple[str, str], ...] = (
    ("passport_front_url", "passportFrontUrl"),
    ("passport_last_url", "passportLastUrl"),
    ("passport_photo_url", "passportPhotoUrl"),
    ("offer_letter_url", "offerLetterUrl"),
    ("permanent_address_url", "permanentAddressUrl"),
    ("current_address_url", "currentAddressUrl"),
)

OPTIONAL_SLOTS: tuple[str, ...] = ("resume_url",)

COLLECTION_FIELDS: tuple[str, ...] = (
    "passport_visa_urls",
    "education_files",
    "experience_files",
    "other_certifications",
    "references",
)


def _slot_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def missing_required_slots(docket: Docket | None) -> list[str]:
    if docket is None:
        return [api_name for _, api_name in REQUIRED_SLOTS]
    return [api_name for attr, api_name in REQUIRED_SLOTS if not _slot_filled(getattr(docket, attr, None))]


def is_complete(docket: Docket | None) -> bool:
    return not missing_required_slots(docket)


def _load_list(raw: str | None) -> list:
    if not raw:
        return []
    try:
        data = json.loads(raw)
        return data if isinstance(data, list) else []
    except json.JSONDecodeError:
        logger.warning("Discarding malformed docket collection JSON")
        return []


def _dump_list(items: list) -> str:
    return json.dumps(items or [], ensure_ascii=False)


def docket_to_public(docket: Docket | None) -> dict | None:
    if docket is None:
        return None
    payload = {
        "userId": docket.user_id,
        "passportFrontUrl": docket.passport_front_url,
        "passportLastUrl": docket.passport_last_url,
        "passportPhotoUrl": docket.passport_photo_url,
        "offerLetterUrl": docket.offer_letter_url,
        "permanentAddressUrl": docket.permanent_address_url,
        "currentAddressUrl": docket.current_address_url,
        "resumeUrl": docket.resume_url,
        "passportVisaUrls": _load_list(docket.passport_visa_urls),
        "educationFiles": _load_list(docket.education_files),
        "experienceFiles": _load_list(docket.experience_files),
        "otherCertifications": _load_list(docket.other_certifications),
        "references": _load_list(docket.references),
        "lastUpdated": docket.last_updated.isoformat() if docket.last_updated else None,
    }
    payload["missing"] = missing_required_slots(docket)
    payload["isComplete"] = not payload["missing"]
    return payload


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user:
        raise NotFoundError(get_error_message("user_not_found"))
    return user


def get_docket(db: Session, user_id: str) -> Docket | None:
    return db.query(Docket).filter(Docket.user_id == str(user_id)).first()


def update_docket(db: Session, user_id: str, updates: DocketUpdate) -> Docket:
    """
    Upsert a user's docket. Only fields present in the payload change;
    collections are replaced wholesale when given.
    """
    _get_user_or_404(db, user_id)
    docket = get_docket(db, user_id)
    if docket is None:
        docket = Docket(user_id=str(user_id))
        db.add(docket)

    provided = updates.model_fields_set
    for attr, _ in REQUIRED_SLOTS:
        if attr in provided:
            setattr(docket, attr, normalize_document_url(getattr(updates, attr), attr))
    for attr in OPTIONAL_SLOTS:
        if attr in provided:
            setattr(docket, attr, normalize_document_url(getattr(updates, attr), attr))

    for attr in COLLECTION_FIELDS:
        if attr not in provided:
            continue
        items = getattr(updates, attr) or []
        if attr == "passport_visa_urls":
            data = [u.strip() for u in items if isinstance(u, str) and u.strip()]
        else:
            data = [item.model_dump(by_alias=True) for item in items]
        setattr(docket, attr, _dump_list(data))

    docket.last_updated = utcnow()
    db.commit()
    db.refresh(docket)
    return docket


def complete_docket(db: Session, user_id: str) -> CompletionResult:
    """
    Flip `docket_completed` once the required slots are filled.

    Idempotent: a user already marked complete gets a successful no-op, so a
    double submit or a concurrent winner never turns into a failure.
    """
    user = (
        db.query(User)
        .filter(User.id == str(user_id))
        .with_for_update()
        .first()
    )
    if not user:
        raise NotFoundError(get_error_message("user_not_found"))

    if user.docket_completed:
        db.commit()
        return CompletionResult(user_id=user.id, already_completed=True)

    missing = missing_required_slots(get_docket(db, user.id))
    if missing:
        db.rollback()
        raise IncompleteDocketError(missing)

    result = db.execute(
        update(User)
        .where(User.id == user.id, User.docket_completed.is_(False))
        .values(docket_completed=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(user)

    # rowcount 0 means another request completed it between our read and write.
    already = not result.rowcount
    logger.info("Docket completed for user %s (already=%s)", user.id, already)
    return CompletionResult(user_id=user.id, already_completed=already)
