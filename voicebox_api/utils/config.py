import logging
import os
from pathlib import Path

from dotenv import load_dotenv

ENV_PATH = Path(__file__).parent.parent / ".env"

load_dotenv(dotenv_path=ENV_PATH)
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "default-secret-change-in-production"
DEFAULT_ADMIN_PASSWORD = "12345678"
DEFAULT_DATABASE_URL = "sqlite:///./voicebox.db"

MIN_PASSWORD_LENGTH = 8

_warned: set[str] = set()


def _warn_once(key: str, message: str) -> None:
    if key not in _warned:
        _warned.add(key)
        logger.warning(message)


def _clean(value: str | None) -> str:
    """
    Strip surrounding whitespace and one pair of surrounding quotes,
    which commonly leak in from hand-written .env files.
    """
    if value is None:
        return ""
    cleaned = value.strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in {"'", '"'}:
        cleaned = cleaned[1:-1]
    return cleaned.strip()


def env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)) or default)
    except ValueError:
        return default


def get_database_url() -> str:
    url = _clean(os.getenv("DATABASE_URL"))
    if not url:
        _warn_once("DATABASE_URL", f"[config] DATABASE_URL not set, using default: {DEFAULT_DATABASE_URL}")
        return DEFAULT_DATABASE_URL
    return url


def get_session_secret() -> str:
    secret = _clean(os.getenv("ADMIN_SESSION_SECRET"))
    if not secret:
        _warn_once("ADMIN_SESSION_SECRET", "[config] ADMIN_SESSION_SECRET not set, using insecure default")
        return DEFAULT_SESSION_SECRET
    return secret


def get_admin_seed_password() -> str:
    password = _clean(os.getenv("ADMIN_PASSWORD"))
    if not password:
        _warn_once("ADMIN_PASSWORD", "[config] ADMIN_PASSWORD not set, seeding admin with default password")
        return DEFAULT_ADMIN_PASSWORD
    return password


def get_recovery_password() -> str | None:
    """
    Emergency-recovery credential. Disabled unless ADMIN_RECOVERY_PASSWORD is set.
    """
    return _clean(os.getenv("ADMIN_RECOVERY_PASSWORD")) or None


def get_environment() -> str:
    return _clean(os.getenv("APP_ENV") or os.getenv("ENVIRONMENT")).lower() or "development"


def is_production() -> bool:
    return get_environment() in {"production", "prod"}


def configure_logging() -> None:
    level = _clean(os.getenv("LOG_LEVEL")).upper() or "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("passlib.handlers.bcrypt").setLevel(logging.ERROR)
