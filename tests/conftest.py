"""Pytest bootstrap and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path


def _append_repo_root() -> None:
    """Ensure repository root is present in import path."""
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_text = str(repo_root)
    if repo_root_text in sys.path:
        return
    sys.path.insert(0, repo_root_text)


_append_repo_root()

import io  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from landrec.auth import IdentityProvider, get_identity_provider  # noqa: E402
from landrec.db import get_db  # noqa: E402
from landrec.db_init import init_db  # noqa: E402
from landrec.errors import AuthError  # noqa: E402
from landrec.main import app  # noqa: E402
from landrec.schemas.land import Identity  # noqa: E402

ALICE = Identity(id="user-alice", email_or_handle="alice@example.com")
BOB = Identity(id="user-bob", email_or_handle="bob@example.com")

TOKENS = {"token-alice": ALICE, "token-bob": BOB}


class FakeIdentityProvider(IdentityProvider):
    def get_user(self, token: str) -> Identity:
        try:
            return TOKENS[token]
        except KeyError:
            raise AuthError("Unauthorized")


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def jpeg_bytes(size=(32, 24), color=(90, 140, 60)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: FakeIdentityProvider()
    yield TestClient(app)
    app.dependency_overrides.clear()
