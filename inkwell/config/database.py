"""Database engine, session factory and declarative base"""

from typing import Iterator

from sqlalchemy import BigInteger, Integer, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from inkwell.config.settings import settings


def _connect_args(url: str) -> dict:
    # SQLite connections are shared with FastAPI's threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()

# SQLite only auto-assigns rowids for INTEGER PRIMARY KEY columns
Identifier = BigInteger().with_variant(Integer(), "sqlite")
MAX_IDENTIFIER = 2**63 - 1


def is_identifier(text: str) -> bool:
    """ASCII digits only; `str.isdigit` also accepts characters like superscripts."""
    return text.isascii() and text.isdecimal()


def in_identifier_range(value: int) -> bool:
    return 0 < value <= MAX_IDENTIFIER


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables for the registered models"""
    import inkwell.models  # noqa: F401  (registers models on Base.metadata)

    Base.metadata.create_all(bind=engine)
