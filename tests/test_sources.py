"""Tests for the question sources."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from genquiz import database
from genquiz.question_bank import QuestionBankManager
from genquiz.sources import (
    BankQuestionSource,
    DatabaseQuestionSource,
    GenerativeQuestionSource,
    QuestionSourceError,
    SourceFactory,
    parse_question_record,
)

STORED_RECORD = {
    "question": "2+2?",
    "options": [{"text": "4", "correct": "true"}, {"text": "5", "correct": "false"}],
}


def test_parse_record_with_string_flags():
    question = parse_question_record(STORED_RECORD)

    assert question.prompt == "2+2?"
    assert [o.label for o in question.options] == ["4", "5"]
    assert question.correct_label() == "4"


def test_parse_record_with_boolean_flags_and_json_options():
    record = {
        "prompt": "Capital of France?",
        "options": json.dumps([{"label": "Paris", "is_correct": True}, {"label": "Rome", "is_correct": False}]),
    }
    assert parse_question_record(record).correct_label() == "Paris"


def test_parse_record_without_correct_option():
    record = {"question": "Q?", "options": [{"text": "a", "correct": "false"}]}
    assert parse_question_record(record).correct_label() is None


@pytest.mark.parametrize(
    "record",
    [
        {"options": [{"text": "a"}]},
        {"question": "Q?", "options": []},
        {"question": "Q?", "options": "not json"},
        {"question": "Q?", "options": [{"correct": "true"}]},
        ["not", "a", "dict"],
    ],
)
def test_parse_record_rejects_malformed(record):
    with pytest.raises(QuestionSourceError):
        parse_question_record(record)


def test_bank_source_falls_back_to_default_topic(tmp_path):
    manager = QuestionBankManager(str(tmp_path))
    manager.load_all()
    source = BankQuestionSource(manager)

    questions = source.fetch(3, topic="unknown")
    assert len(questions) == 3


def test_database_source_reads_rows(app_settings):
    database.init_db()
    database.insert_questions([STORED_RECORD, {**STORED_RECORD, "question": "3+3?"}])

    questions = DatabaseQuestionSource().fetch(10)
    assert [q.prompt for q in questions] == ["2+2?", "3+3?"]
    assert questions[0].correct_label() == "4"

    assert len(DatabaseQuestionSource().fetch(1)) == 1


def test_database_source_without_table_raises(app_settings, tmp_path):
    (tmp_path / "db").mkdir()
    with pytest.raises(QuestionSourceError):
        DatabaseQuestionSource().fetch(10)


def _response(payload):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


@patch("genquiz.sources.requests.post")
def test_generative_source_posts_request(mock_post):
    mock_post.return_value = _response([STORED_RECORD, STORED_RECORD])
    source = GenerativeQuestionSource("http://generator.test/quiz", api_key="secret", timeout=5)

    questions = source.fetch(1, topic="math")

    assert len(questions) == 1
    mock_post.assert_called_once_with(
        "http://generator.test/quiz",
        json={"count": 1, "topic": "math"},
        headers={"Authorization": "Bearer secret"},
        timeout=5,
    )


@patch("genquiz.sources.requests.post")
def test_generative_source_accepts_wrapped_payload(mock_post):
    mock_post.return_value = _response({"questions": [STORED_RECORD]})
    questions = GenerativeQuestionSource("http://generator.test/quiz").fetch(10)
    assert questions[0].prompt == "2+2?"


@patch("genquiz.sources.requests.post")
def test_generative_source_wraps_http_errors(mock_post):
    mock_post.side_effect = requests.ConnectionError("down")
    with pytest.raises(QuestionSourceError):
        GenerativeQuestionSource("http://generator.test/quiz").fetch(10)


@patch("genquiz.sources.requests.post")
def test_generative_source_rejects_unexpected_payload(mock_post):
    mock_post.return_value = _response({"error": "quota"})
    with pytest.raises(QuestionSourceError):
        GenerativeQuestionSource("http://generator.test/quiz").fetch(10)


def test_generative_source_requires_url():
    with pytest.raises(QuestionSourceError):
        GenerativeQuestionSource("").fetch(10)


def test_source_factory(tmp_path):
    manager = QuestionBankManager(str(tmp_path))
    assert isinstance(SourceFactory.create("database", manager), DatabaseQuestionSource)
    assert isinstance(SourceFactory.create("generative", manager), GenerativeQuestionSource)
    assert isinstance(SourceFactory.create("bank", manager), BankQuestionSource)
    assert isinstance(SourceFactory.create("unknown", manager), BankQuestionSource)
