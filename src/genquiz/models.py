from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    is_correct: bool = False


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    options: Tuple[Option, ...]

    def correct_label(self) -> Optional[str]:
        """Label of the first option flagged correct, or None if there is none."""
        for option in self.options:
            if option.is_correct:
                return option.label
        return None


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    FINISHED = "finished"


class SessionState(BaseModel):
    """Snapshot of one quiz session. Transitions replace the whole value."""

    model_config = ConfigDict(frozen=True)

    questions: Tuple[Question, ...] = ()
    current_index: int = 0
    # answers[i] is the label chosen for questions[i]
    answers: Tuple[str, ...] = ()
    elapsed_per_question: Tuple[int, ...] = ()
    running_timer: int = 0
    phase: Phase = Phase.IDLE


class QuizStatistics(BaseModel):
    total_questions: int
    correct_answers: int
    percentage: int
    total_time_seconds: int
    average_time_seconds: int


class QuestionResult(BaseModel):
    index: int
    prompt: str
    selected: str
    correct_answer: Optional[str]
    is_correct: bool
    time_seconds: int


class AnswerRecord(BaseModel):
    question_index: int
    prompt: str
    user_answer: str
    correct_answer: Optional[str]
    is_correct: bool
    time_seconds: int
    finished: bool


class QuizResult(BaseModel):
    statistics: QuizStatistics
    questions: List[QuestionResult]
