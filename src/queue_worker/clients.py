# src/queue_worker/clients.py

"""
Client wrappers for sending messages into the worker's topic and queues.

The worker itself never publishes; these are used by the local tooling to push
test messages through SNS or straight onto SQS, and are available to business
logic that needs to emit follow-up notifications. boto3 error codes are mapped
onto the service's own exception types.
"""

import json
import logging
from typing import TYPE_CHECKING, Any, NoReturn

from botocore.exceptions import ClientError, EndpointConnectionError

from .exceptions import (
    PublishAccessDeniedError,
    PublishError,
    PublishTargetNotFoundError,
    PublishThrottledError,
)

if TYPE_CHECKING:
    from mypy_boto3_sns.client import SNSClient as SNSClientType
    from mypy_boto3_sqs.client import SQSClient as SQSClientType

logger = logging.getLogger(__name__)

_THROTTLING_CODES = {
    "Throttling",
    "ThrottlingException",
    "ThrottledException",
    "RequestThrottled",
    "RequestLimitExceeded",
}
_ACCESS_DENIED_CODES = {"AccessDenied", "AccessDeniedException", "AuthorizationError"}
_NOT_FOUND_CODES = {
    "NotFound",
    "NotFoundException",
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
}


def _raise_publish_error(target: str, e: ClientError) -> NoReturn:
    error_code = e.response["Error"]["Code"]
    error_message = e.response["Error"].get("Message", "")
    context = {"aws_error_code": error_code, "aws_error_message": error_message}

    if error_code in _THROTTLING_CODES:
        raise PublishThrottledError(target, context=context) from e
    elif error_code in _ACCESS_DENIED_CODES:
        raise PublishAccessDeniedError(target, context=context) from e
    elif error_code in _NOT_FOUND_CODES:
        raise PublishTargetNotFoundError(target, context=context) from e
    else:
        raise PublishError(
            f"Failed to publish to {target}: {error_message}",
            error_code="PUBLISH_FAILED",
            context={"target": target, **context},
        ) from e


def _serialize(payload: Any) -> str:
    return payload if isinstance(payload, str) else json.dumps(payload)


class NotificationPublisher:
    """A wrapper for publishing JSON payloads to an SNS topic."""

    def __init__(self, sns_client: "SNSClientType"):
        self._client = sns_client

    def publish(self, topic_arn: str, payload: Any, subject: str | None = None) -> str:
        """Publishes ``payload`` (JSON-encoded unless already a string) and returns the SNS MessageId."""
        params: dict[str, Any] = {"TopicArn": topic_arn, "Message": _serialize(payload)}
        if subject:
            params["Subject"] = subject

        try:
            response = self._client.publish(**params)
        except ClientError as e:
            _raise_publish_error(topic_arn, e)
        except EndpointConnectionError as e:
            raise PublishError(
                "SNS endpoint connection error",
                error_code="PUBLISH_CONNECTION_ERROR",
                context={"target": topic_arn, "connection_error": str(e)},
            ) from e

        message_id = response["MessageId"]
        logger.debug(
            "Published notification",
            extra={"topic_arn": topic_arn, "sns_message_id": message_id},
        )
        return message_id


class QueueSender:
    """A wrapper for sending JSON payloads directly to an SQS queue."""

    def __init__(self, sqs_client: "SQSClientType"):
        self._client = sqs_client

    def send(self, queue_url: str, payload: Any) -> str:
        """Sends ``payload`` as the message body and returns the SQS MessageId."""
        try:
            response = self._client.send_message(
                QueueUrl=queue_url, MessageBody=_serialize(payload)
            )
        except ClientError as e:
            _raise_publish_error(queue_url, e)
        except EndpointConnectionError as e:
            raise PublishError(
                "SQS endpoint connection error",
                error_code="PUBLISH_CONNECTION_ERROR",
                context={"target": queue_url, "connection_error": str(e)},
            ) from e

        message_id = response["MessageId"]
        logger.debug(
            "Sent message to queue",
            extra={"queue_url": queue_url, "sqs_message_id": message_id},
        )
        return message_id
