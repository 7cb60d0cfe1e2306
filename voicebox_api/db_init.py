from .db import engine
from .models import Base


def init_db() -> None:
    """
    Create any missing tables. Safe to call repeatedly.
    """
    Base.metadata.create_all(bind=engine)


def drop_db() -> None:
    Base.metadata.drop_all(bind=engine)
