# src/queue_worker/processing.py

"""
Business logic for individual messages.

The batch processor depends only on the ``MessageProcessor`` protocol, so a
real implementation replaces ``ExampleMessageProcessor`` without touching the
batch loop. A processor signals failure by raising; ``DomainFailureError`` is
the conventional type, but any exception is reported as a failed message.
"""

import time
from typing import Any, Protocol

from aws_lambda_powertools import Logger

from .exceptions import IntentionalFailureError, PreconditionViolationError

DEFAULT_FAIL_FLAG = "shouldFail"


class MessageProcessor(Protocol):
    """Processes one unwrapped payload. Returns on success, raises on failure."""

    def process(self, payload: Any, logger: Logger) -> None: ...


def ensure_structured(payload: Any) -> None:
    """Raises PreconditionViolationError unless the payload is a dict or a list."""
    if payload is None or not isinstance(payload, (dict, list)):
        raise PreconditionViolationError(type(payload).__name__)


class ExampleMessageProcessor:
    """
    Placeholder business logic.

    Simulates work with a short sleep, logs the payload, and fails on purpose
    when the payload sets the fail flag so redelivery and the DLQ path can be
    exercised end to end.
    """

    def __init__(self, delay_seconds: float = 0.1, fail_flag: str = DEFAULT_FAIL_FLAG):
        self._delay_seconds = delay_seconds
        self._fail_flag = fail_flag

    def process(self, payload: Any, logger: Logger) -> None:
        if self._delay_seconds > 0:
            time.sleep(self._delay_seconds)

        ensure_structured(payload)

        logger.info("Processing business logic", extra={"payload": payload})

        if isinstance(payload, dict) and payload.get(self._fail_flag):
            raise IntentionalFailureError(self._fail_flag)
