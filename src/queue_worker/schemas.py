# src/queue_worker/schemas.py

from dataclasses import dataclass
from typing import Any, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field

# --- Static Type Hinting (for mypy and IDEs) ---


class SQSAttributesDict(TypedDict, total=False):
    ApproximateReceiveCount: str
    SentTimestamp: str
    SenderId: str
    ApproximateFirstReceiveTimestamp: str


class SQSRecordDict(TypedDict, total=False):
    """
    A TypedDict representing a single SQS record as Lambda delivers it.
    Used for static type analysis of the record builders in the test suite.
    """

    messageId: str
    receiptHandle: str
    body: str
    attributes: SQSAttributesDict
    messageAttributes: dict[str, Any]
    md5OfBody: str
    eventSource: str
    eventSourceARN: str
    awsRegion: str


# --- Runtime Validation (using Pydantic) ---


class SnsNotification(BaseModel):
    """
    Pydantic model for the envelope SNS puts around a message it delivers to SQS.

    Only ``Message`` is required. The remaining fields are kept for logging
    and are never used to decide whether a body is an envelope.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    message: str = Field(..., alias="Message")
    notification_type: str | None = Field(None, alias="Type")
    message_id: str | None = Field(None, alias="MessageId")
    topic_arn: str | None = Field(None, alias="TopicArn")
    subject: str | None = Field(None, alias="Subject")
    timestamp: str | None = Field(None, alias="Timestamp")


# --- Parsed body variants ---


@dataclass(frozen=True)
class DirectPayload:
    """A body that was published straight to the queue."""

    payload: Any


@dataclass(frozen=True)
class WrappedPayload:
    """A body that arrived through SNS; ``payload`` is the decoded inner message."""

    payload: Any
    notification: SnsNotification


Envelope = Union[DirectPayload, WrappedPayload]
