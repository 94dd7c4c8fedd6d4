# src/queue_worker/logging_utils.py

"""
Powertools Logger configuration for the Queue Worker.

Every log line is structured JSON with a UTC timestamp, and sensitive
fields are masked by the formatter before serialization (see ``security``).
"""

from typing import IO, Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.logging.formatter import LambdaPowertoolsFormatter

from .security import redact_sensitive


class RedactingFormatter(LambdaPowertoolsFormatter):
    """A LambdaPowertoolsFormatter that masks sensitive keys at any depth."""

    def serialize(self, log: dict[str, Any]) -> str:  # type: ignore[override]
        return super().serialize(log=redact_sensitive(log))


def build_logger(
    service: str | None = None,
    level: str | int | None = None,
    stream: IO[str] | None = None,
) -> Logger:
    """
    Builds the service Logger.

    ``service`` and ``level`` fall back to Powertools' own environment lookup
    (POWERTOOLS_SERVICE_NAME, POWERTOOLS_LOG_LEVEL / LOG_LEVEL) when omitted.
    ``stream`` defaults to stdout, which is what Lambda ships to CloudWatch.
    """
    return Logger(
        service=service,
        level=level,
        stream=stream,
        logger_formatter=RedactingFormatter(utc=True),
    )
