import logging
from threading import RLock
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.admin import ADMIN_CONFIG_ID, AdminConfig
from .config import get_admin_seed_password

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_init_lock = RLock()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password_hash(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # unrecognised or corrupt hash
        return False


def get_admin_config(db: Session) -> Optional[AdminConfig]:
    return db.get(AdminConfig, ADMIN_CONFIG_ID)


def ensure_admin_config(db: Session) -> AdminConfig:
    """
    Return the singleton credential record, creating it from the seed
    password if it does not exist yet. Idempotent; concurrent callers in
    this process are serialized, and an insert that loses a race against
    another process is rolled back in favour of the stored record.
    """
    with _init_lock:
        entry = get_admin_config(db)
        if entry:
            return entry

        entry = AdminConfig(id=ADMIN_CONFIG_ID, password_hash=hash_password(get_admin_seed_password()))
        db.add(entry)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            existing = get_admin_config(db)
            if existing is None:
                raise
            return existing

        logger.info("[admin] credential record created from seed password")
        return entry


def set_admin_password_hash(db: Session, password_hash: str) -> AdminConfig:
    entry = get_admin_config(db)
    if entry:
        entry.password_hash = password_hash
    else:
        entry = AdminConfig(id=ADMIN_CONFIG_ID, password_hash=password_hash)
        db.add(entry)
    db.commit()
    return entry


def reset_admin_password(db: Session, password: Optional[str] = None) -> AdminConfig:
    """
    Operator recovery: overwrite the stored hash without checking the
    current password. Falls back to the configured seed password.
    """
    new_password = (password or get_admin_seed_password()).strip()
    entry = set_admin_password_hash(db, hash_password(new_password))
    logger.info("[admin] password reset by operator")
    return entry
