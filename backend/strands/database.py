"""SQLAlchemy engine, session factory and declarative base."""
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from strands.config import settings

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_db():
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _dialect_insert(db: Session):
    name = db.get_bind().dialect.name
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def insert_ignore(db: Session, model: Any, values: dict[str, Any], conflict_cols: list[str]) -> bool:
    """INSERT ... ON CONFLICT DO NOTHING keyed on a natural unique constraint.

    Returns True when a row was inserted, False when the conflict swallowed it.
    Dialects without native ON CONFLICT fall back to a savepoint.
    """
    insert = _dialect_insert(db)
    if insert is not None:
        stmt = insert(model).values(**values).on_conflict_do_nothing(index_elements=conflict_cols)
        return db.execute(stmt).rowcount == 1

    try:
        with db.begin_nested():
            db.add(model(**values))
    except IntegrityError:
        return False
    return True


def upsert(db: Session, model: Any, values: dict[str, Any], conflict_cols: list[str], update_cols: list[str]) -> None:
    """INSERT ... ON CONFLICT DO UPDATE overwriting ``update_cols``."""
    insert = _dialect_insert(db)
    if insert is not None:
        stmt = insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=conflict_cols,
            set_={col: getattr(stmt.excluded, col) for col in update_cols},
        )
        db.execute(stmt)
        return

    if not insert_ignore(db, model, values, conflict_cols):
        query = db.query(model).filter(*[getattr(model, col) == values[col] for col in conflict_cols])
        query.update({col: values[col] for col in update_cols}, synchronize_session=False)
