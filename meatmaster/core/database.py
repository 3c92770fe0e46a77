from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from meatmaster.core.config import settings
from meatmaster.logger_config import logger


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync routes in a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet (used by run.py, seed.py and tests)."""
    # Import models so they are registered on Base.metadata
    import meatmaster.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Commit everything written inside the block once, or roll it all back.

    Compound operations (ledger entry + customer balance, invoice + stock,
    payment + invoice status + ledger entry) run their writes inside one
    unit of work so they commit or fail together.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Unit of work rolled back")
        raise
