"""
Quiz session engine.

Owns the ordered questions of one session, the current position, the answers
and the seconds spent on each question. All transitions go through the methods
below and replace the whole SessionState value in one step, so observers never
see a half-applied answer.
"""
import logging
from typing import Dict, List, Sequence, Tuple

from .models import (
    Phase,
    Question,
    QuestionResult,
    QuizStatistics,
    SessionState,
)

logger = logging.getLogger(__name__)


class QuizSessionError(Exception):
    """Base class for recoverable session errors."""


class EmptyQuestionSet(QuizSessionError):
    """Raised when a session is loaded with no questions."""


class NoActiveQuestion(QuizSessionError):
    """Raised when a question is requested or answered outside the Active phase."""


class SessionFinished(QuizSessionError):
    """Raised when an answer is submitted after the last question."""


class SessionNotFinished(QuizSessionError):
    """Raised when results are requested before the last answer."""


def round_half_up(numerator: int, denominator: int) -> int:
    """Round numerator / denominator to the nearest integer, halves going up."""
    return (2 * numerator + denominator) // (2 * denominator)


class QuizSessionEngine:
    def __init__(self):
        self._state = SessionState()

    # --- Observers ---
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def question_count(self) -> int:
        return len(self._state.questions)

    @property
    def running_timer(self) -> int:
        return self._state.running_timer

    @property
    def answers(self) -> Dict[int, str]:
        return dict(enumerate(self._state.answers))

    @property
    def elapsed_per_question(self) -> Tuple[int, ...]:
        return self._state.elapsed_per_question

    # --- Lifecycle ---
    def begin_loading(self) -> None:
        """Discard any previous session while the question fetch is in flight."""
        self._transition(SessionState(phase=Phase.LOADING))

    def abort_loading(self) -> None:
        """Return to Idle after a failed or empty fetch."""
        self._transition(SessionState())

    def load_session(self, questions: Sequence[Question]) -> None:
        questions = tuple(questions)
        if not questions:
            raise EmptyQuestionSet("Cannot start a quiz without questions")
        self._transition(SessionState(questions=questions, phase=Phase.ACTIVE))
        logger.debug(f"Session loaded with {len(questions)} questions")

    def tick(self) -> None:
        state = self._state
        if state.phase != Phase.ACTIVE:
            return
        self._state = state.model_copy(update={"running_timer": state.running_timer + 1})

    def submit_answer(self, selected_label: str) -> None:
        state = self._state
        if state.phase == Phase.FINISHED:
            raise SessionFinished("The quiz is already finished")
        if state.phase != Phase.ACTIVE:
            raise NoActiveQuestion(f"No active question (phase: {state.phase.value})")

        index = state.current_index
        update = {
            "answers": state.answers + (selected_label,),
            "elapsed_per_question": state.elapsed_per_question + (state.running_timer,),
        }
        if index + 1 < len(state.questions):
            update["current_index"] = index + 1
            update["running_timer"] = 0
            self._state = state.model_copy(update=update)
        else:
            update["current_index"] = len(state.questions)
            update["phase"] = Phase.FINISHED
            self._transition(state.model_copy(update=update))

    def current_question(self) -> Question:
        state = self._state
        if state.phase != Phase.ACTIVE:
            raise NoActiveQuestion(f"No active question (phase: {state.phase.value})")
        return state.questions[state.current_index]

    def restart(self) -> None:
        self._transition(SessionState())

    # --- Results ---
    def question_results(self) -> List[QuestionResult]:
        state = self._require_finished()
        results = []
        for index, question in enumerate(state.questions):
            selected = state.answers[index]
            correct = question.correct_label()
            results.append(
                QuestionResult(
                    index=index,
                    prompt=question.prompt,
                    selected=selected,
                    correct_answer=correct,
                    is_correct=correct is not None and selected == correct,
                    time_seconds=state.elapsed_per_question[index],
                )
            )
        return results

    def compute_statistics(self) -> QuizStatistics:
        state = self._require_finished()
        total = len(state.questions)
        correct = sum(1 for result in self.question_results() if result.is_correct)
        total_time = sum(state.elapsed_per_question)
        return QuizStatistics(
            total_questions=total,
            correct_answers=correct,
            percentage=round_half_up(100 * correct, total),
            total_time_seconds=total_time,
            average_time_seconds=round_half_up(total_time, total),
        )

    # --- Internals ---
    def _require_finished(self) -> SessionState:
        if self._state.phase != Phase.FINISHED:
            raise SessionNotFinished(
                f"Results are available once the quiz is finished (phase: {self._state.phase.value})"
            )
        return self._state

    def _transition(self, new_state: SessionState) -> None:
        old_phase = self._state.phase
        self._state = new_state
        if old_phase != new_state.phase:
            logger.debug(f"Phase transition: {old_phase.value} -> {new_state.phase.value}")
