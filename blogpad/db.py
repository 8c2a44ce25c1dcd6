from __future__ import annotations
from contextlib import contextmanager
from typing import Optional, Protocol
import logging

from sqlmodel import SQLModel, Session, create_engine

from . import config
from .models import Blob

logger = logging.getLogger(__name__)

_ENGINE = None
_ENGINE_URL = None  # track current engine's URL so we can switch when env changes

def _compute_url() -> str:
    return f"sqlite:///{config.db_path()}"

def get_engine():
    global _ENGINE, _ENGINE_URL
    url = _compute_url()
    if _ENGINE is None or _ENGINE_URL != url:
        # swap engine if URL changed (common in tests)
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(url, echo=False)
        _ENGINE_URL = url
        logger.debug("Using database %s", url)
    return _ENGINE

def reset_engine():
    """For tests: drop the cached engine so a new BLOGPAD_DB_PATH is picked up."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None

def init_db():
    engine = get_engine()
    SQLModel.metadata.create_all(engine)

def get_session():
    return Session(get_engine(), expire_on_commit=False)


@contextmanager
def session_scope():
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


class BlobStorage(Protocol):
    """Read/write access to named blobs of text."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...


class SqliteBlobStorage:
    """Blobs kept as rows of the ``blob`` table; each write replaces the row."""

    def __init__(self) -> None:
        init_db()

    def read(self, key: str) -> Optional[str]:
        with session_scope() as s:
            row = s.get(Blob, key)
            return None if row is None else row.value

    def write(self, key: str, value: str) -> None:
        with session_scope() as s:
            row = s.get(Blob, key)
            if row is None:
                row = Blob(key=key, value=value)
            else:
                row.value = value
            s.add(row)


class MemoryBlobStorage:
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.blobs: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, value: str) -> None:
        self.blobs[key] = value
