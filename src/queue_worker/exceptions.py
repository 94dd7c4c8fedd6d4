# src/queue_worker/exceptions.py

"""
Shared custom exceptions for the Queue Worker service.

Centralizing exception definitions in a separate module prevents circular
import errors between other modules that need to raise or catch them.

Exception Hierarchy:
- QueueWorkerError (base)
  - RetryableError (a redelivery may succeed)
    - IntentionalFailureError
    - DomainFailureError
    - PublishThrottledError
  - NonRetryableError (a redelivery will fail the same way)
    - MalformedBodyError
    - MalformedEnvelopeError
    - PreconditionViolationError
    - PublishAccessDeniedError
    - PublishTargetNotFoundError
    - ConfigurationError

The retryable flag is a logging hint only. Every failed message is reported
back to SQS, and the redrive policy decides when it lands in the DLQ.
"""

from typing import Any, Dict, Optional


class QueueWorkerError(Exception):
    """Base exception for all Queue Worker service errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = dict(context) if context else {}
        self.correlation_id = correlation_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "retryable": isinstance(self, RetryableError),
        }


class RetryableError(QueueWorkerError):
    """Base class for errors that can be retried."""

    pass


class NonRetryableError(QueueWorkerError):
    """Base class for errors that should not be retried."""

    pass


# === Message Errors ===


class MessageError(NonRetryableError):
    """Base class for errors caused by the shape of a single message."""

    pass


class MalformedBodyError(MessageError):
    """Raised when an SQS message body is not valid JSON."""

    def __init__(self, reason: str, **kwargs):
        message = f"Message body is not valid JSON: {reason}"
        context = {"reason": reason}
        if "context" in kwargs:
            context.update(kwargs.pop("context"))
        super().__init__(
            message, error_code="MALFORMED_BODY", context=context, **kwargs
        )


class MalformedEnvelopeError(MessageError):
    """Raised when the nested SNS ``Message`` is not valid JSON."""

    def __init__(self, reason: str, **kwargs):
        message = f"Notification envelope is malformed: {reason}"
        context = {"reason": reason}
        if "context" in kwargs:
            context.update(kwargs.pop("context"))
        super().__init__(
            message, error_code="MALFORMED_ENVELOPE", context=context, **kwargs
        )


class PreconditionViolationError(MessageError):
    """Raised when the effective payload is missing or not a structured object."""

    def __init__(self, payload_type: str, **kwargs):
        message = f"Invalid message format: expected an object, got {payload_type}"
        context = {"payload_type": payload_type}
        super().__init__(
            message, error_code="PRECONDITION_VIOLATION", context=context, **kwargs
        )


# === Processing Errors ===


class ProcessingError(RetryableError):
    """Base class for failures raised by business logic."""

    pass


class IntentionalFailureError(ProcessingError):
    """Raised when a payload asks the example processor to fail."""

    def __init__(self, flag: str, **kwargs):
        message = "Message processing failed intentionally"
        context = {"flag": flag}
        super().__init__(
            message, error_code="INTENTIONAL_FAILURE", context=context, **kwargs
        )


class DomainFailureError(ProcessingError):
    """Raised by concrete processors when their domain work fails."""

    def __init__(self, message: str, **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "DOMAIN_FAILURE"
        super().__init__(message, **kwargs)


# === Publishing Errors ===


class PublishError(QueueWorkerError):
    """Base class for errors while sending to SNS or SQS."""

    pass


class PublishThrottledError(PublishError, RetryableError):
    """Raised when SNS or SQS throttles a publish."""

    def __init__(self, target: str, **kwargs):
        message = f"Publish throttled: {target}"
        context = {"target": target}
        if "context" in kwargs:
            context.update(kwargs.pop("context"))
        super().__init__(
            message, error_code="PUBLISH_THROTTLED", context=context, **kwargs
        )


class PublishAccessDeniedError(PublishError, NonRetryableError):
    """Raised when the caller may not publish to the target."""

    def __init__(self, target: str, **kwargs):
        message = f"Access denied publishing to: {target}"
        context = {"target": target}
        if "context" in kwargs:
            context.update(kwargs.pop("context"))
        super().__init__(
            message, error_code="PUBLISH_ACCESS_DENIED", context=context, **kwargs
        )


class PublishTargetNotFoundError(PublishError, NonRetryableError):
    """Raised when the topic or queue does not exist."""

    def __init__(self, target: str, **kwargs):
        message = f"Publish target not found: {target}"
        context = {"target": target}
        if "context" in kwargs:
            context.update(kwargs.pop("context"))
        super().__init__(
            message, error_code="PUBLISH_TARGET_NOT_FOUND", context=context, **kwargs
        )


# === Configuration Errors ===


class ConfigurationError(NonRetryableError):
    """Raised when there's an error in the application configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="CONFIGURATION_ERROR", **kwargs)


# === Utility Functions ===


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable."""
    return isinstance(error, RetryableError)


def get_error_context(error: Exception) -> Dict[str, Any]:
    """Extract error context for logging."""
    if isinstance(error, QueueWorkerError):
        return error.to_dict()
    else:
        return {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "retryable": False,  # Unknown errors default to non-retryable
        }
