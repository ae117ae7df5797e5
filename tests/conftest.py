# tests/conftest.py
"""
Shared fixtures:
- an in-memory SQLite Database per test
- FakeLLM standing in for Gemini (records calls, returns canned text or raises)
- a TestClient over create_app() with both injected
"""
from __future__ import annotations

from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from promptiq.config import Settings
from promptiq.database import Database
from promptiq.generator import PromptGenerator
from promptiq.main import create_app
from promptiq.quota import create_user


def make_prompt_text(words: int = 500) -> str:
    """A markdown prompt that tops every scoring dimension."""
    head = (
        "## Role: You are a seasoned podcast producer.\n\n"
        "## Task: Plan the launch of a new podcast.\n\n"
        "For instance, outline the first three episodes. "
        "For instance, list guest ideas.\n\n"
        "**Format:** numbered sections.\n\n"
        "**Constraint:** keep each section short.\n\n"
    )
    filler = " ".join(["detail"] * max(0, words - len(head.split())))
    return head + filler


class FakeLLM:
    def __init__(self, text: str = "", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[Tuple[str, str]] = []
        self.initialised = False
        self.closed = False

    def init(self) -> None:
        self.initialised = True

    def close(self) -> None:
        self.closed = True

    def generate(self, system_instruction: str, user_text: str) -> str:
        self.calls.append((system_instruction, user_text))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.init(create_tables=True)
    yield db
    db.close()


@pytest.fixture
def session(database):
    s = database.session()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def fake_llm():
    return FakeLLM(text=make_prompt_text())


@pytest.fixture
def generator(fake_llm):
    return PromptGenerator(fake_llm)


@pytest.fixture
def user(session):
    return create_user(session, "user-1", "ada@example.com", "Ada")


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        public_url="https://promptiq.test",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_test",
        stripe_price_architect="price_architect",
        stripe_price_studio="price_studio",
        cors_origins=["https://promptiq.test"],
        log_level="WARNING",
    )


@pytest.fixture
def app(settings, database, fake_llm):
    return create_app(settings=settings, database=database, llm=fake_llm)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_user(client):
    r = client.post("/api/users", json={"uid": "user-1", "email": "ada@example.com", "name": "Ada"})
    assert r.status_code == 200
    return r.json()["user"]
