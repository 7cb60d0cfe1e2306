from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .utils.config import env_bool, env_int, get_database_url

DATABASE_URL = get_database_url()

POOL_SIZE = env_int("DB_POOL_SIZE", 20)
MAX_OVERFLOW = env_int("DB_MAX_OVERFLOW", 40)
POOL_TIMEOUT = env_int("DB_POOL_TIMEOUT", 30)
POOL_RECYCLE = env_int("DB_POOL_RECYCLE", 1800)
POOL_PRE_PING = env_bool("DB_POOL_PRE_PING", True)

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        future=True,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        pool_pre_ping=POOL_PRE_PING,
        future=True,
    )

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
