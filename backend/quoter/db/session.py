from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from quoter.config import DATABASE_URL, SQL_ECHO

_engine: Optional[Engine] = None


def make_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = make_engine()
    return _engine


def set_engine(engine: Engine) -> None:
    global _engine
    _engine = engine


def init_db(engine: Optional[Engine] = None) -> None:
    import quoter.models.record  # noqa: F401  registers the table

    SQLModel.metadata.create_all(engine or get_engine())


def get_session() -> Session:
    return Session(get_engine())
