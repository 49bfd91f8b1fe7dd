import logging
import secrets

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.contract import Contract
from ..models.user import User
from ..utils.error_handlers import NotFoundError, ValidationError, get_error_message

logger = logging.getLogger(__name__)

# Fields a candidate may edit on their own profile. Identity (phone/email) and
# workflow flags are admin- or engine-owned.
PROFILE_FIELDS = ("display_name", "first_name", "last_name", "profile_image_url")


def user_to_public(user: User) -> dict:
    return {
        "id": user.id,
        "uid": user.uid,
        "phone": user.phone,
        "email": user.email,
        "displayName": user.display_name,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "profileImageUrl": user.profile_image_url,
        "docketCompleted": bool(user.docket_completed),
        "isAdmin": bool(user.is_admin),
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def generate_unique_uid(db: Session) -> str:
    while True:
        uid = str(10_000_000 + secrets.randbelow(90_000_000))
        if not db.query(User.id).filter(User.uid == uid).first():
            return uid


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user:
        raise NotFoundError(get_error_message("user_not_found"))
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def register_candidate(
    db: Session,
    *,
    phone: str,
    email: str | None = None,
    display_name: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Pre-register a candidate. `phone`/`email` must already be normalized."""
    if db.query(User.id).filter(User.phone == phone).first():
        raise ValidationError("A candidate with this phone number already exists.")
    if email and db.query(User.id).filter(User.email == email).first():
        raise ValidationError("A candidate with this email already exists.")

    user = User(
        uid=generate_unique_uid(db),
        phone=phone,
        email=email or None,
        display_name=display_name,
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Duplicate candidate registration: %s", e)
        raise ValidationError("A candidate with this phone number or email already exists.") from e
    db.refresh(user)
    logger.info("Registered candidate %s (uid=%s)", user.id, user.uid)
    return user


def update_profile(db: Session, user_id: str, changes: dict) -> User:
    user = get_user(db, user_id)
    for field in PROFILE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])
    db.commit()
    db.refresh(user)
    return user


def admin_stats(db: Session) -> dict:
    total = db.query(func.count(User.id)).scalar() or 0
    completed = db.query(func.count(User.id)).filter(User.docket_completed.is_(True)).scalar() or 0
    contracts_pending = (
        db.query(func.count(Contract.id))
        .filter(
            ((Contract.company_contract_status == "pending") & Contract.company_contract_original_url.isnot(None))
            | ((Contract.job_offer_status == "pending") & Contract.job_offer_original_url.isnot(None))
        )
        .scalar()
        or 0
    )
    return {
        "totalUsers": int(total),
        "completedDockets": int(completed),
        "pendingDockets": int(total - completed),
        "contractsPending": int(contracts_pending),
    }
