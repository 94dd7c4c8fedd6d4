import logging
import os
from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ALLOWED_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass(frozen=True, slots=True)
class AppConfig:
    """
    Application configuration loaded from environment variables.

    Nothing here is required. The queue, topic and DLQ identifiers only end
    up in log context, so a worker with none of them set still processes
    messages.
    """

    # --- Resource identifiers (informational) ---
    queue_url: str | None
    topic_arn: str | None
    dlq_url: str | None
    environment: str | None

    # --- Optional Variables with Defaults ---
    log_level: str
    max_batch_size: int
    processing_delay_ms: int

    # --- Derived Properties ---
    @property
    def processing_delay_seconds(self) -> float:
        return self.processing_delay_ms / 1000

    def to_log_context(self) -> dict[str, Any]:
        """The values passed through to log context at invocation start."""
        return {
            "queue_url": self.queue_url,
            "topic_arn": self.topic_arn,
            "dlq_url": self.dlq_url,
            "environment": self.environment,
            "log_level": self.log_level,
        }

    @classmethod
    def load_from_env(cls) -> "AppConfig":
        """
        Loads configuration from environment variables, performing validation and type casting.
        Missing values fall back to defaults; present but invalid values raise a
        ConfigurationError.
        """
        try:
            queue_url = os.getenv("QUEUE_URL") or None
            topic_arn = os.getenv("TOPIC_ARN") or None
            dlq_url = os.getenv("DLQ_URL") or None
            environment = os.getenv("ENVIRONMENT") or None

            # --- Handle special-case variables like log level ---
            log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()
            if log_level not in ALLOWED_LOG_LEVELS:
                raise ValueError(
                    f"LOG_LEVEL must be one of {ALLOWED_LOG_LEVELS}, not '{log_level}'"
                )

            max_batch_size = int(os.getenv("MAX_BATCH_SIZE", "10"))
            if max_batch_size <= 0:
                raise ValueError("MAX_BATCH_SIZE must be a positive integer.")

            processing_delay_ms = int(os.getenv("PROCESSING_DELAY_MS", "100"))
            if processing_delay_ms < 0:
                raise ValueError(
                    "PROCESSING_DELAY_MS must be a non-negative integer."
                )

        except (ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid value for an environment variable: {e}"
            ) from e

        logger.debug("Loaded application configuration from environment.")
        return cls(
            queue_url=queue_url,
            topic_arn=topic_arn,
            dlq_url=dlq_url,
            environment=environment,
            log_level=log_level,
            max_batch_size=max_batch_size,
            processing_delay_ms=processing_delay_ms,
        )
