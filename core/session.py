"""
Exam Session Engine
Governs one student's attempt at a test from start to submission:
presentation order, answers, review marks, countdown and the single
hand-off to the submission gateway.
"""
from __future__ import annotations

import logging
import random
import threading
from typing import Dict, List, Optional

from core.errors import ExamError, GatewayError, ValidationError
from core.gateway import SubmissionGateway
from core.scoring import score_answers
from core.shuffle import generate_shuffle_order
from core.timer import ClockThread, CountdownTimer
from core.validation import validate_option, validate_test
from models import Attempt, Question, QuestionStatus, SessionState, SessionStatus, Test

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (
    SessionStatus.SUBMITTED,
    SessionStatus.FAILED,
    SessionStatus.ABANDONED,
)


class ExamSession:
    """
    State machine for a single in-progress attempt.

    Every command and every clock tick runs under one lock, so the session can
    be driven from a UI thread while its clock thread ticks in the background.
    The RUNNING -> SUBMITTING transition is checked and made under that lock,
    which is what keeps user and timer submissions from both reaching the
    gateway.
    """

    def __init__(
        self,
        gateway: SubmissionGateway,
        student_id: str,
        rng: Optional[random.Random] = None,
        tick_interval: float = 1.0,
    ):
        self.student_id = student_id
        self._gateway = gateway
        self._rng = rng
        self._tick_interval = tick_interval
        self._lock = threading.RLock()

        self._status = SessionStatus.NOT_STARTED
        self._test: Optional[Test] = None
        self._state: Optional[SessionState] = None
        self._timer: Optional[CountdownTimer] = None
        self._clock: Optional[ClockThread] = None

        self.attempt: Optional[Attempt] = None
        self.last_error: Optional[GatewayError] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def test(self) -> Optional[Test]:
        return self._test

    @property
    def shuffle_order(self) -> List[int]:
        return list(self._require_state().shuffle_order)

    @property
    def time_expired(self) -> bool:
        return self._timer is not None and self._timer.expired

    @property
    def finished(self) -> bool:
        return self._status in TERMINAL_STATUSES

    def start(self, test: Test) -> None:
        """Initialize the session for ``test``. The clock is not started here."""
        with self._lock:
            if self._status is not SessionStatus.NOT_STARTED:
                raise ValidationError(f"Session is already {self._status.value}")
            validate_test(test)

            total_seconds = test.duration * 60
            order = generate_shuffle_order(len(test.questions), self._rng)
            self._test = test
            self._state = SessionState(
                shuffle_order=order,
                remaining_seconds=total_seconds,
            )
            self._timer = CountdownTimer(total_seconds)
            self._status = SessionStatus.RUNNING

        logger.info(
            "Student %s started test %s (%d questions, %d s)",
            self.student_id,
            test.id,
            len(test.questions),
            total_seconds,
        )

    def run_clock(self) -> ClockThread:
        """Start the background clock that ticks once per interval."""
        with self._lock:
            if self._status is not SessionStatus.RUNNING:
                raise ValidationError("Clock can only run while the session is running")
            if self._clock is not None:
                return self._clock
            self._clock = ClockThread(self.tick, interval=self._tick_interval)
            self._clock.start()
            return self._clock

    def abandon(self) -> None:
        """Stop the clock and discard all session state without submitting."""
        with self._lock:
            if self._status in (SessionStatus.SUBMITTED, SessionStatus.ABANDONED):
                return
            self._stop_clock()
            if self._timer is not None:
                self._timer.cancel()
            self._state = None
            self._status = SessionStatus.ABANDONED
        logger.info("Student %s abandoned their session", self.student_id)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Consume one second of the countdown.

        Returns whether the clock should keep ticking. A tick that arrives
        while the session is not running is logged and dropped.
        """
        with self._lock:
            if self._status is not SessionStatus.RUNNING or not self._timer.running:
                logger.warning(
                    "Tick received while session is %s; tick ignored",
                    self._status.value,
                )
                return self._status is SessionStatus.SUBMITTING

            expired = self._timer.tick()
            self._state.remaining_seconds = self._timer.remaining_seconds

        if not expired:
            return True

        logger.info("Time is up for test %s; submitting", self._test.id)
        try:
            self._submit("timer")
        except ExamError as exc:
            logger.warning("Automatic submission did not complete: %s", exc)
        return False

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def answer(self, index: int, option: int) -> None:
        with self._lock:
            state = self._require_editable()
            question = self._question_for(index)
            state.answers[index] = validate_option(question, option)

    def clear_answer(self, index: int) -> None:
        with self._lock:
            state = self._require_editable()
            self._check_index(index)
            state.answers.pop(index, None)

    def toggle_review(self, index: int) -> bool:
        """Flip the review mark. Returns the new mark."""
        with self._lock:
            state = self._require_editable()
            self._check_index(index)
            if index in state.review:
                state.review.discard(index)
                return False
            state.review.add(index)
            return True

    def navigate(self, index: int) -> None:
        with self._lock:
            state = self._require_running()
            self._check_index(index)
            state.current_index = index

    def next_question(self) -> Optional[Question]:
        """Move to next question"""
        with self._lock:
            state = self._require_running()
            if state.current_index >= len(state.shuffle_order) - 1:
                return None
            state.current_index += 1
            return self._question_for(state.current_index)

    def previous_question(self) -> Optional[Question]:
        """Move to previous question"""
        with self._lock:
            state = self._require_running()
            if state.current_index == 0:
                return None
            state.current_index -= 1
            return self._question_for(state.current_index)

    def submit(self) -> Optional[Attempt]:
        """
        Submit on the user's behalf.

        Callers wanting a confirmation step should check ``unanswered_count()``
        first. Once the session is submitted, further calls return the stored
        attempt without touching the gateway.

        Raises:
            GatewayError: the gateway refused the attempt. Transient errors
                leave the session running so ``submit()`` can be retried.
            ValidationError: the session was never started or has ended
                without an attempt.
        """
        return self._submit("user")

    def _submit(self, trigger: str) -> Optional[Attempt]:
        with self._lock:
            if self._status is SessionStatus.SUBMITTED:
                logger.info("Ignoring %s submission; attempt already submitted", trigger)
                return self.attempt
            if self._status is SessionStatus.SUBMITTING:
                logger.info("Ignoring %s submission; another one is in flight", trigger)
                return None
            if self._status is not SessionStatus.RUNNING:
                raise ValidationError(f"Cannot submit a session that is {self._status.value}")

            self._status = SessionStatus.SUBMITTING
            test = self._test
            state = self._state
            answers = dict(state.answers)
            order = list(state.shuffle_order)
            score, total = score_answers(order, test.questions, answers)

        try:
            attempt = self._gateway.submit(
                test.id, self.student_id, score, total, answers, order
            )
        except GatewayError as exc:
            with self._lock:
                self.last_error = exc
                if self._status is not SessionStatus.SUBMITTING:
                    logger.info(
                        "Submission of test %s failed after the session was %s: %s",
                        test.id,
                        self._status.value,
                        exc.message,
                    )
                elif exc.retryable:
                    self._status = SessionStatus.RUNNING
                    logger.warning(
                        "Submission of test %s failed transiently; session kept: %s",
                        test.id,
                        exc.message,
                    )
                else:
                    self._status = SessionStatus.FAILED
                    self._stop_clock()
                    logger.error(
                        "Submission of test %s rejected (%s): %s",
                        test.id,
                        exc.kind,
                        exc.message,
                    )
            raise
        except Exception:
            with self._lock:
                if self._status is SessionStatus.SUBMITTING:
                    self._status = SessionStatus.RUNNING
            raise

        with self._lock:
            self.attempt = attempt
            self.last_error = None
            if self._status is not SessionStatus.SUBMITTING:
                # Abandoned while the request was in flight; the server kept it
                logger.info(
                    "Attempt %s for test %s stored after the session was %s",
                    attempt.id,
                    test.id,
                    self._status.value,
                )
                return attempt
            self._status = SessionStatus.SUBMITTED
            self._timer.zero()
            state.remaining_seconds = 0
            self._stop_clock()

        logger.info(
            "Student %s submitted test %s (%s): %d/%d",
            self.student_id,
            test.id,
            trigger,
            score,
            total,
        )
        return attempt

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        return len(self._require_state().shuffle_order)

    @property
    def current_index(self) -> int:
        return self._require_state().current_index

    def current_question(self) -> Question:
        with self._lock:
            return self._question_for(self._require_state().current_index)

    def question_at(self, index: int) -> Question:
        with self._lock:
            return self._question_for(index)

    def selected_option(self, index: int) -> Optional[int]:
        with self._lock:
            self._check_index(index)
            return self._require_state().answers.get(index)

    def answers(self) -> Dict[int, int]:
        with self._lock:
            return dict(self._require_state().answers)

    def answered_count(self) -> int:
        with self._lock:
            return len(self._require_state().answers)

    def unanswered_count(self) -> int:
        with self._lock:
            state = self._require_state()
            return len(state.shuffle_order) - len(state.answers)

    def is_marked_for_review(self, index: int) -> bool:
        with self._lock:
            self._check_index(index)
            return index in self._require_state().review

    def remaining_seconds(self) -> int:
        with self._lock:
            return self._require_state().remaining_seconds

    def question_status(self, index: int) -> QuestionStatus:
        with self._lock:
            self._check_index(index)
            state = self._require_state()
            if index in state.review:
                return QuestionStatus.REVIEW
            if index in state.answers:
                return QuestionStatus.ANSWERED
            return QuestionStatus.UNANSWERED

    def navigation_status(self) -> List[Dict]:
        """Get status of all questions for navigation panel"""
        with self._lock:
            state = self._require_state()
            return [
                {
                    "index": index,
                    "status": self.question_status(index).value,
                    "answered": index in state.answers,
                    "current": index == state.current_index,
                }
                for index in range(len(state.shuffle_order))
            ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_state(self) -> SessionState:
        if self._state is None:
            if self._status is SessionStatus.ABANDONED:
                raise ValidationError("Session was abandoned")
            raise ValidationError("Session has not started")
        return self._state

    def _require_running(self) -> SessionState:
        state = self._require_state()
        if self._status is not SessionStatus.RUNNING:
            raise ValidationError(f"Session is {self._status.value}")
        return state

    def _require_editable(self) -> SessionState:
        state = self._require_running()
        if self._timer.expired:
            raise ValidationError("Time is up; the session can only be submitted")
        return state

    def _check_index(self, index: object) -> int:
        total = len(self._require_state().shuffle_order)
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < total:
            raise ValidationError(
                f"Question index {index!r} is out of range for {total} questions"
            )
        return index

    def _question_for(self, index: int) -> Question:
        self._check_index(index)
        return self._test.questions[self._state.shuffle_order[index]]

    def _stop_clock(self) -> None:
        if self._clock is not None:
            self._clock.stop(timeout=0)
            self._clock = None
