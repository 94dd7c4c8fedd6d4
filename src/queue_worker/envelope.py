"""
Body parsing and SNS envelope unwrapping.

When an SNS topic fans out to an SQS queue, the queue message body is a JSON
notification whose ``Message`` field holds the published payload as a JSON
string. Messages sent straight to the queue carry the payload as the body.
"""

import json
from typing import Any

import pydantic

from .exceptions import MalformedBodyError, MalformedEnvelopeError
from .schemas import DirectPayload, Envelope, SnsNotification, WrappedPayload

WRAPPED_MESSAGE_FIELD = "Message"


def parse_body(body: str | None) -> Any:
    """Decodes an SQS message body, raising MalformedBodyError if it isn't JSON."""
    if body is None:
        raise MalformedBodyError("body is missing")
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedBodyError(str(e)) from e


def is_wrapped(parsed_body: Any) -> bool:
    # Presence of a non-empty Message field is the only test; Type is not checked.
    return isinstance(parsed_body, dict) and bool(
        parsed_body.get(WRAPPED_MESSAGE_FIELD)
    )


def classify(parsed_body: Any) -> Envelope:
    """
    Decides whether a parsed body is a direct payload or an SNS envelope.

    For an envelope the nested ``Message`` string is decoded, so the returned
    ``payload`` is always the content business logic should see.

    Raises:
        MalformedEnvelopeError: If ``Message`` is not a string or not valid JSON.
    """
    if not is_wrapped(parsed_body):
        return DirectPayload(payload=parsed_body)

    try:
        notification = SnsNotification.model_validate(parsed_body)
    except pydantic.ValidationError as e:
        raise MalformedEnvelopeError(
            "envelope failed validation",
            context={"validation_errors": e.errors(include_url=False)},
        ) from e

    try:
        inner = json.loads(notification.message)
    except json.JSONDecodeError as e:
        raise MalformedEnvelopeError(
            str(e), context={"sns_message_id": notification.message_id}
        ) from e

    return WrappedPayload(payload=inner, notification=notification)


def unwrap(parsed_body: Any) -> Any:
    """Returns the effective payload; a direct payload comes back unchanged."""
    return classify(parsed_body).payload
