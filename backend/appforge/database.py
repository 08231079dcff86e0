"""Database engine factory and declarative base for the SQL storage backend.

The wizard core only needs one key/value table, so the engine is plain
synchronous SQLAlchemy: every mutation is written on the calling thread
before the next UI event is handled.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    pass


def make_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    # Register models on the metadata before creating
    import appforge.models  # noqa: F401

    Base.metadata.create_all(engine)
