"""Shared fixtures for the quiz tests."""

import logging
from typing import List

import pytest
from fastapi.testclient import TestClient

from genquiz.app import create_app
from genquiz.config import settings
from genquiz.globals import session_store
from genquiz.models import Question
from genquiz.router import get_question_source
from tests.fixtures import StaticQuestionSource, make_question


@pytest.fixture
def sample_questions() -> List[Question]:
    return [
        make_question("2+2?", "4", "5"),
        make_question("Capital of France?", "Paris", "Rome"),
    ]


@pytest.fixture
def app_settings(tmp_path, monkeypatch):
    """Point every file-backed setting at a temporary directory."""
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setattr(settings, "DB_DIR", str(tmp_path / "db"))
    monkeypatch.setattr(settings, "QUESTION_BANK_DIR", str(tmp_path / "banks"))
    monkeypatch.setattr(settings, "QUESTION_SOURCE", "bank")
    monkeypatch.setattr(settings, "AUTO_TICK", False)
    monkeypatch.setattr(settings, "LOG_TO_DB", False)
    session_store.clear()
    yield settings
    session_store.clear()


@pytest.fixture
def static_source(sample_questions) -> StaticQuestionSource:
    return StaticQuestionSource(sample_questions)


@pytest.fixture
def client(app_settings, static_source):
    app = create_app()
    app.dependency_overrides[get_question_source] = lambda: static_source
    with TestClient(app) as test_client:
        yield test_client
    logger = logging.getLogger("genquiz")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
