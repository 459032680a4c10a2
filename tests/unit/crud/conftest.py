"""Shared fixtures for crud unit tests"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from notesite.core.models import ContentDoc
from notesite.core.utils.hashing import sha256
from notesite.crud import tables  # noqa: F401


def _make_doc(path: str, title: str, day: int, tags=None, draft=False, body="Body\n") -> ContentDoc:
    """A parsed document whose hash follows its title and body."""
    section = path.split('/')[0] if '/' in path else ""
    return ContentDoc(
        path=path,
        slug=path.rsplit('/', 1)[-1].removesuffix('.md'),
        section=section,
        title=title,
        date=datetime(2024, 1, day, 12, tzinfo=timezone.utc),
        draft=draft,
        tags=tags or [],
        body=body,
        hash=sha256(title + body),
    )


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    return _make_doc


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s
