from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import settings


def build_engine(url: str) -> Engine:
    """Create an engine for the local record store.

    SQLite connections are shared between the event loop and the
    threadpool FastAPI uses for sync dependencies, so the same-thread
    check is turned off for that dialect.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def init_local_store(bind: Engine) -> None:
    """Create any missing local store tables."""
    from promptforge.models import Base

    Base.metadata.create_all(bind)


engine = build_engine(settings.LOCAL_STORE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
