from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set


@dataclass
class Question:
    question: str
    options: List[str]
    correct: int
    image: Optional[str] = None
    option_images: Optional[List[Optional[str]]] = None
    explanation: Optional[str] = None


@dataclass
class Test:
    id: str
    title: str
    questions: List[Question]
    duration: int  # minutes
    approved: bool = False
    active: bool = False
    course_id: Optional[int] = None
    subject: str = ""

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass
class Attempt:
    test_id: str
    student_id: str
    score: int
    total: int
    answers: Dict[int, int]  # presentation index -> option index
    shuffle_order: List[int]
    submitted_at: datetime
    id: Optional[str] = None

    @property
    def percent_correct(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.score / self.total) * 100


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"
    ABANDONED = "abandoned"


class QuestionStatus(str, Enum):
    ANSWERED = "answered"
    REVIEW = "review"
    UNANSWERED = "unanswered"


@dataclass
class SessionState:
    shuffle_order: List[int]
    remaining_seconds: int
    current_index: int = 0
    answers: Dict[int, int] = field(default_factory=dict)
    review: Set[int] = field(default_factory=set)
