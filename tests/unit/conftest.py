"""
Shared fixtures for unit tests.
"""

from __future__ import annotations

import json
import os
import types
import uuid
from typing import Any, Callable

import pytest
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord

from queue_worker.config import AppConfig
from queue_worker.logging_utils import build_logger
from queue_worker.schemas import SQSRecordDict

# Set before any test module imports queue_worker.app, which builds its
# Powertools objects at import time.
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "queue-worker-test")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

WORKER_ENV_VARS = (
    "QUEUE_URL",
    "TOPIC_ARN",
    "DLQ_URL",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "MAX_BATCH_SIZE",
    "PROCESSING_DELAY_MS",
)


@pytest.fixture(autouse=True)
def worker_env(monkeypatch):
    """
    Ensures a deterministic environment for every test.
    Overwrite *only* the variables read by AppConfig.
    """
    for name in WORKER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(
        "QUEUE_URL", "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"
    )
    monkeypatch.setenv("TOPIC_ARN", "arn:aws:sns:us-east-1:123456789012:test-topic")
    monkeypatch.setenv(
        "DLQ_URL", "https://sqs.us-east-1.amazonaws.com/123456789012/test-dlq"
    )
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.setenv("PROCESSING_DELAY_MS", "0")


# ---------- Minimal, realistic dummy events ---------- #
def make_sqs_record(body: Any, message_id: str | None = None) -> SQSRecordDict:
    """One SQS record; dict/list bodies are JSON-encoded, strings are used as-is."""
    return {
        "messageId": message_id or str(uuid.uuid4()),
        "receiptHandle": "test-receipt-handle",
        "body": body if isinstance(body, str) else json.dumps(body),
        "attributes": {
            "ApproximateReceiveCount": "1",
            "SentTimestamp": "1234567890000",
            "SenderId": "test-sender",
            "ApproximateFirstReceiveTimestamp": "1234567890000",
        },
        "messageAttributes": {},
        "md5OfBody": "test-md5",
        "eventSource": "aws:sqs",
        "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:test-queue",
        "awsRegion": "us-east-1",
    }


def make_sns_envelope(inner: Any) -> dict:
    """The JSON body SNS delivers to a subscribed queue."""
    return {
        "Type": "Notification",
        "MessageId": "sns-message-id",
        "TopicArn": "arn:aws:sns:us-east-1:123456789012:test-topic",
        "Message": inner if isinstance(inner, str) else json.dumps(inner),
        "Timestamp": "2024-01-01T00:00:00.000Z",
        "SignatureVersion": "1",
        "Signature": "test-signature",
        "SigningCertURL": "https://sns.us-east-1.amazonaws.com/test.pem",
        "UnsubscribeURL": "https://sns.us-east-1.amazonaws.com/unsubscribe",
    }


@pytest.fixture
def sqs_record() -> Callable[..., SQSRecordDict]:
    return make_sqs_record


@pytest.fixture
def sns_envelope() -> Callable[[Any], dict]:
    return make_sns_envelope


@pytest.fixture
def sqs_event() -> Callable[..., dict]:
    """Builds an SQS event from (message_id, body) pairs."""

    def _build(*messages: tuple[str, Any]) -> dict:
        return {"Records": [make_sqs_record(body, mid) for mid, body in messages]}

    return _build


@pytest.fixture
def sqs_records() -> Callable[..., list[SQSRecord]]:
    """Builds Powertools SQSRecord objects from (message_id, body) pairs."""

    def _build(*messages: tuple[str, Any]) -> list[SQSRecord]:
        return [SQSRecord(make_sqs_record(body, mid)) for mid, body in messages]

    return _build


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig.load_from_env()


@pytest.fixture
def test_logger():
    """A Powertools Logger with a unique service name so handlers never collide."""
    return build_logger(service=f"queue-worker-test-{uuid.uuid4().hex[:8]}", level="ERROR")


@pytest.fixture
def lambda_context():
    """A small stand-in for the LambdaContext object."""
    return types.SimpleNamespace(
        function_name="test-function",
        function_version="$LATEST",
        memory_limit_in_mb=128,
        invoked_function_arn="arn:aws:lambda:us-east-1:123456789012:function:test",
        aws_request_id="req-" + uuid.uuid4().hex,
        log_group_name="/aws/lambda/test",
        log_stream_name="2024/01/01/[$LATEST]test",
        get_remaining_time_in_millis=lambda: 30000,
    )
