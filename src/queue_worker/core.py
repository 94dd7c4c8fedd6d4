# src/queue_worker/core.py

"""
The batch processor: the only place SQS records are turned into outcomes.

Each record is parsed, unwrapped and handed to a ``MessageProcessor``. Any
exception is caught at the scope of that one record and recorded as a failure,
so a bad message never stops, skips or alters the handling of its neighbours.
The identifiers of the failed records are returned in the shape the Lambda
partial batch response API expects; SQS deletes the rest and redelivers the
failed ones according to the queue's redrive policy.
"""

from typing import Iterable, Optional, cast

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.batch.types import (
    PartialItemFailures,
    PartialItemFailureResponse,
)
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord

from .config import AppConfig
from .envelope import classify, parse_body
from .exceptions import (
    IntentionalFailureError,
    MalformedBodyError,
    MalformedEnvelopeError,
    PreconditionViolationError,
    get_error_context,
)
from .processing import MessageProcessor
from .schemas import WrappedPayload

# Metric name per failure kind; anything else a processor raises is a DomainFailure.
_FAILURE_METRICS: dict[type[Exception], str] = {
    MalformedBodyError: "MalformedBody",
    MalformedEnvelopeError: "MalformedEnvelope",
    PreconditionViolationError: "PreconditionViolation",
    IntentionalFailureError: "IntentionalFailure",
}


def failure_kind(error: Exception) -> str:
    for error_type, name in _FAILURE_METRICS.items():
        if isinstance(error, error_type):
            return name
    return "DomainFailure"


def build_partial_failure_response(
    failed_message_ids: list[str],
) -> PartialItemFailureResponse:
    """
    Given a list of SQS message IDs, return the structure that the
    Lambda partial batch response API expects.
    """
    failures = [
        cast(PartialItemFailures, {"itemIdentifier": mid}) for mid in failed_message_ids
    ]
    response = cast(PartialItemFailureResponse, {"batchItemFailures": failures})
    return response


class BatchProcessor:
    """Processes one SQS batch and reports which messages failed."""

    def __init__(
        self,
        processor: MessageProcessor,
        logger: Logger,
        config: AppConfig,
        metrics: Optional[Metrics] = None,
    ):
        self._processor = processor
        self._logger = logger
        self._config = config
        self._metrics = metrics

    def handle(self, records: Iterable[SQSRecord]) -> PartialItemFailureResponse:
        records = list(records)
        if len(records) > self._config.max_batch_size:
            self._logger.warning(
                "Batch is larger than the configured maximum; processing all records.",
                extra={
                    "batch_size": len(records),
                    "max_batch_size": self._config.max_batch_size,
                },
            )

        failed_message_ids: list[str] = []
        for record in records:
            if not self._process_record(record):
                failed_message_ids.append(record.message_id)

        succeeded = len(records) - len(failed_message_ids)
        self._add_metric("ProcessedMessages", succeeded)
        self._add_metric("FailedMessages", len(failed_message_ids))

        log_level = self._logger.warning if failed_message_ids else self._logger.info
        log_level(
            "Batch processing completed",
            extra={
                "batch_size": len(records),
                "succeeded": succeeded,
                "failed": len(failed_message_ids),
                "failed_message_ids": failed_message_ids,
            },
        )
        return build_partial_failure_response(failed_message_ids)

    def _process_record(self, record: SQSRecord) -> bool:
        """Runs one record through parse, unwrap and business logic. True on success."""
        raw = record.raw_event
        self._logger.append_keys(message_id=record.message_id)
        try:
            # Delivery metadata is logged for diagnostics only.
            self._logger.info(
                "Processing message",
                extra={
                    "receive_count": (raw.get("attributes") or {}).get(
                        "ApproximateReceiveCount"
                    ),
                    "event_source_arn": raw.get("eventSourceARN"),
                },
            )

            envelope = classify(parse_body(raw.get("body")))
            self._logger.info(
                "Parsed message",
                extra={
                    "payload": envelope.payload,
                    "sns_wrapped": isinstance(envelope, WrappedPayload),
                },
            )

            self._processor.process(envelope.payload, self._logger)

            self._logger.info("Successfully processed message")
            return True

        except Exception as e:
            kind = failure_kind(e)
            self._add_metric(kind, 1)
            self._logger.exception(
                "Error processing message",
                extra={"failure_kind": kind, "error": get_error_context(e)},
            )
            return False

        finally:
            self._logger.remove_keys(["message_id"])

    def _add_metric(self, name: str, value: int) -> None:
        if self._metrics is not None:
            self._metrics.add_metric(name=name, unit=MetricUnit.Count, value=value)
