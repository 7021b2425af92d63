"""Exception hierarchy for the exam session engine."""
from __future__ import annotations


class ExamError(Exception):
    """Base class for all exam engine errors."""


class ValidationError(ExamError):
    """A command was rejected locally. Session state is unchanged."""


class GatewayError(ExamError):
    """The submission gateway refused or failed to persist an attempt."""

    kind = "gateway"
    retryable = False

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.status_code = status_code


class UnauthorizedError(GatewayError):
    """Credentials are missing, expired or do not belong to a student."""

    kind = "unauthorized"


class NotEligibleError(GatewayError):
    """Test is inactive, unapproved or belongs to another course."""

    kind = "not_eligible"


class DuplicateAttemptError(GatewayError):
    """An attempt for this (test, student) pair already exists."""

    kind = "duplicate_attempt"


class TransientGatewayError(GatewayError):
    """Network or server fault. The same submission may be retried."""

    kind = "transient"
    retryable = True
