import logging

from sqlalchemy.orm import Session

from ..config import ADMIN_BOOTSTRAP_EMAIL, ADMIN_BOOTSTRAP_PASSWORD
from ..models.admin import AdminAccount
from ..utils.error_handlers import ValidationError
from ..utils.security import hash_password

logger = logging.getLogger(__name__)


def create_admin_account(db: Session, *, email: str, password: str, name: str | None = None) -> AdminAccount:
    email = email.strip().lower()
    if db.query(AdminAccount.id).filter(AdminAccount.email == email).first():
        raise ValidationError("An admin account with this email already exists.")
    account = AdminAccount(email=email, password_hash=hash_password(password), name=name)
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Created admin account %s", email)
    return account


def bootstrap_admin_from_env(db: Session) -> AdminAccount | None:
    """Create the ADMIN_BOOTSTRAP_EMAIL account on first boot; never overwrites."""
    if not ADMIN_BOOTSTRAP_EMAIL or not ADMIN_BOOTSTRAP_PASSWORD:
        return None
    existing = db.query(AdminAccount).filter(AdminAccount.email == ADMIN_BOOTSTRAP_EMAIL).first()
    if existing:
        return existing
    return create_admin_account(db, email=ADMIN_BOOTSTRAP_EMAIL, password=ADMIN_BOOTSTRAP_PASSWORD, name="Administrator")
