import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from .config import settings
from .database import fetch_question_rows
from .models import Option, Question
from .question_bank import QuestionBankManager

logger = logging.getLogger(__name__)


class QuestionSourceError(Exception):
    """Raised when a question source cannot produce questions."""


def _parse_flag(value: Any) -> bool:
    # Stored data encodes correctness as the strings "true"/"false".
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def parse_question_record(record: Dict[str, Any]) -> Question:
    """Builds a Question from a raw ``{question, options: [{text, correct}]}`` record.

    ``prompt``/``label``/``is_correct`` keys are accepted as well.
    """
    if not isinstance(record, dict):
        raise QuestionSourceError(f"Question record must be an object, got {type(record).__name__}")

    prompt = record.get("question", record.get("prompt"))
    raw_options = record.get("options")
    if isinstance(raw_options, str):
        try:
            raw_options = json.loads(raw_options)
        except json.JSONDecodeError as e:
            raise QuestionSourceError(f"Invalid options JSON: {e}") from e

    if not isinstance(prompt, str) or not prompt.strip():
        raise QuestionSourceError("Question record has no prompt")
    if not isinstance(raw_options, list) or not raw_options:
        raise QuestionSourceError(f"Question '{prompt}' has no options")

    options = []
    for raw in raw_options:
        if not isinstance(raw, dict):
            raise QuestionSourceError(f"Question '{prompt}' has a malformed option")
        label = raw.get("text", raw.get("label"))
        if label is None:
            raise QuestionSourceError(f"Question '{prompt}' has an option without text")
        options.append(
            Option(label=str(label), is_correct=_parse_flag(raw.get("correct", raw.get("is_correct"))))
        )
    return Question(prompt=prompt.strip(), options=tuple(options))


def parse_question_records(records: List[Dict[str, Any]]) -> List[Question]:
    return [parse_question_record(record) for record in records]


class QuestionSource(ABC):
    """Abstract base class for the places a quiz can draw questions from."""

    name = "abstract"

    @abstractmethod
    def fetch(self, count: int, topic: Optional[str] = None) -> List[Question]:
        pass


class BankQuestionSource(QuestionSource):
    """Samples questions from the CSV question banks."""

    name = "bank"

    def __init__(self, bank_manager: QuestionBankManager):
        self.bank_manager = bank_manager

    def fetch(self, count: int, topic: Optional[str] = None) -> List[Question]:
        if not topic or not self.bank_manager.get_records(topic):
            topic = self.bank_manager.default_topic()
        return self.bank_manager.sample_questions(topic, count)


class DatabaseQuestionSource(QuestionSource):
    """Reads up to ``count`` rows from the question table."""

    name = "database"

    def fetch(self, count: int, topic: Optional[str] = None) -> List[Question]:
        try:
            rows = fetch_question_rows(count)
        except sqlite3.Error as e:
            logger.error(f"Error fetching questions: {e}")
            raise QuestionSourceError("Failed to fetch questions.") from e
        return parse_question_records([dict(row) for row in rows])


class GenerativeQuestionSource(QuestionSource):
    """Asks a content-generation endpoint for a fresh batch of questions."""

    name = "generative"

    def __init__(self, url: str, api_key: str = "", timeout: int = 30):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    def fetch(self, count: int, topic: Optional[str] = None) -> List[Question]:
        if not self.url:
            raise QuestionSourceError("No generator URL configured")

        payload: Dict[str, Any] = {"count": count}
        if topic:
            payload["topic"] = topic
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        try:
            r = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Question generation failed: {e}")
            raise QuestionSourceError("Failed to generate questions.") from e

        if isinstance(data, dict):
            data = data.get("questions")
        if not isinstance(data, list):
            raise QuestionSourceError("Generator returned an unexpected payload")
        return parse_question_records(data[:count])


class SourceFactory:
    """Factory to select the configured question source."""

    @staticmethod
    def create(kind: str, bank_manager: QuestionBankManager) -> QuestionSource:
        if kind == "database":
            return DatabaseQuestionSource()
        if kind == "generative":
            return GenerativeQuestionSource(
                settings.GENERATOR_URL,
                api_key=settings.GENERATOR_API_KEY,
                timeout=settings.GENERATOR_TIMEOUT_SECONDS,
            )
        if kind != "bank":
            logger.warning(f"Unknown question source '{kind}', using question banks")
        return BankQuestionSource(bank_manager)
