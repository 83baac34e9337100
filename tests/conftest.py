from __future__ import annotations

from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import inkwell.models  # noqa: F401
from inkwell.api.deps import get_renderer, get_storage
from inkwell.config.database import Base, get_db
from inkwell.config.settings import settings
from inkwell.main import app
from inkwell.models import Article, Tag, User
from inkwell.services.article_pipeline import ArticlePipeline
from inkwell.services.article_service import ArticleService
from inkwell.services.math_renderer import MathSyntaxError
from inkwell.services.passwords import hash_password
from inkwell.services.storage import MediaStorage
from inkwell.services.user_service import UserService

VALID_TITLE = "A valid article title"
VALID_BODY = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 4
PASSWORD = "correct horse battery"


class FakeRenderer:
    """Wraps TeX in <math>; unbalanced braces are a syntax error."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def render(self, tex: str) -> str:
        self.calls.append(tex)
        if tex.count("{") != tex.count("}"):
            raise MathSyntaxError(f"unbalanced braces in {tex!r}")
        return f"<math>{tex}</math>"


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch) -> None:
    monkeypatch.setattr(settings, "PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")


@pytest.fixture
def session_factory() -> Iterator[sessionmaker]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def pipeline(renderer) -> ArticlePipeline:
    return ArticlePipeline(renderer)


@pytest.fixture
def articles(db, pipeline) -> ArticleService:
    return ArticleService(db, pipeline)


@pytest.fixture
def users(db) -> UserService:
    return UserService(db)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(handle: str | None = None, *, password: str = PASSWORD, admin: bool = False) -> User:
        counter["n"] += 1
        user = User(
            handle=handle or f"writer{counter['n']}",
            password_hash=hash_password(password),
            admin=admin,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_tag(db):
    def _make(name: str) -> Tag:
        tag = Tag(name=name)
        db.add(tag)
        db.commit()
        return tag

    return _make


@pytest.fixture
def make_article(articles):
    def _make(**overrides: Any) -> Article:
        fields = {"title": VALID_TITLE, "body": VALID_BODY}
        fields.update(overrides)
        return articles.create(**fields)

    return _make


@pytest.fixture
def client(session_factory, renderer, tmp_path) -> Iterator[TestClient]:
    def _get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_renderer] = lambda: renderer
    app.dependency_overrides[get_storage] = lambda: MediaStorage(tmp_path / "media", max_bytes=1024)
    yield TestClient(app)
    app.dependency_overrides.clear()
