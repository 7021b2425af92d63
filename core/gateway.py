"""Submission gateway: where a finished session's attempt gets persisted."""
from __future__ import annotations

import abc
import logging
from typing import Mapping, Sequence

import requests

from core.errors import (
    DuplicateAttemptError,
    GatewayError,
    NotEligibleError,
    TransientGatewayError,
    UnauthorizedError,
)
from models import Attempt
from serialization import attempt_from_payload, attempt_request_payload

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class SubmissionGateway(abc.ABC):
    """Persists graded attempts. One call per submission; no internal retry."""

    @abc.abstractmethod
    def submit(
        self,
        test_id: str,
        student_id: str,
        score: int,
        total: int,
        answers: Mapping[int, int],
        shuffle_order: Sequence[int],
    ) -> Attempt:
        """
        Persist an attempt.

        Raises:
            UnauthorizedError, NotEligibleError, DuplicateAttemptError:
                terminal for the session.
            TransientGatewayError: the same call may be repeated later.
        """


def _response_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return f"HTTP {response.status_code}"


def error_for_response(response: requests.Response) -> GatewayError:
    """Map a failed HTTP response to the matching gateway error."""
    status = response.status_code
    detail = _response_detail(response)
    if status == 401:
        return UnauthorizedError(detail, status)
    if status in (403, 404):
        return NotEligibleError(detail, status)
    if status == 409:
        return DuplicateAttemptError(detail, status)
    if status >= 500 or status in (408, 429):
        return TransientGatewayError(detail, status)
    return GatewayError(detail, status)


class HttpSubmissionGateway(SubmissionGateway):
    """Posts attempts to ``/api/attempts`` of a running platform server."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {token}"})

    def submit(
        self,
        test_id: str,
        student_id: str,
        score: int,
        total: int,
        answers: Mapping[int, int],
        shuffle_order: Sequence[int],
    ) -> Attempt:
        payload = attempt_request_payload(
            test_id, student_id, score, total, answers, shuffle_order
        )
        try:
            response = self._session.post(
                f"{self.base_url}/api/attempts", json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            log.warning("Attempt submission for test %s failed: %s", test_id, exc)
            raise TransientGatewayError(str(exc)) from exc

        if response.status_code in (200, 201):
            return attempt_from_payload(response.json())

        error = error_for_response(response)
        log.warning(
            "Attempt submission for test %s rejected (%s): %s",
            test_id,
            error.kind,
            error.message,
        )
        raise error
