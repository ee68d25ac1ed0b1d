"""Question builders and fake sources shared by the tests."""

import time
from typing import List, Optional

from genquiz.models import Option, Question
from genquiz.sources import QuestionSource, QuestionSourceError


class StaticQuestionSource(QuestionSource):
    """Returns a fixed list of questions after an optional delay, or fails on demand."""

    name = "static"

    def __init__(self, questions: List[Question], fail: bool = False, delay: float = 0.0):
        self.questions = questions
        self.fail = fail
        self.delay = delay
        self.calls = []

    def fetch(self, count: int, topic: Optional[str] = None) -> List[Question]:
        self.calls.append((count, topic))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise QuestionSourceError("source unavailable")
        return list(self.questions[:count])


def make_question(prompt: str, correct: str, *wrong: str) -> Question:
    options = [Option(label=correct, is_correct=True)]
    options += [Option(label=label) for label in wrong]
    return Question(prompt=prompt, options=tuple(options))
