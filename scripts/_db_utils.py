from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.rdcpm.db import engine_kwargs_for


def create_script_engine(db_url: str):
    return create_engine(db_url, **engine_kwargs_for(db_url))


@contextmanager
def script_session(db_url: str):
    """Commits on success, rolls back on error, always disposes the engine."""
    engine = create_script_engine(db_url)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
