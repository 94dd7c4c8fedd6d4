"""
The Lambda Adapter & Orchestrator for the Queue Worker service.

This module is the main entry point for the AWS Lambda function. It is
responsible for:
1.  Initializing AWS Lambda Powertools (Logger, Tracer and Metrics).
2.  Loading the configuration once per invocation and binding it, together with
    the request id and function name, to the log context.
3.  Handing the SQS records to the BatchProcessor and returning its partial
    batch failure report to the Lambda runtime.

Retries, backoff and the move to the dead-letter queue are handled by the SQS
event source mapping and the queue's redrive policy, not here.
"""

import os

from aws_lambda_powertools import Metrics, Tracer
from aws_lambda_powertools.utilities.batch.types import PartialItemFailureResponse
from aws_lambda_powertools.utilities.data_classes import SQSEvent
from aws_lambda_powertools.utilities.typing import LambdaContext

from .config import AppConfig
from .core import BatchProcessor
from .logging_utils import build_logger
from .processing import ExampleMessageProcessor, MessageProcessor

# --- Global & Reusable Components ---
SERVICE_NAME = os.getenv("POWERTOOLS_SERVICE_NAME", "queue-worker")

logger = build_logger(service=SERVICE_NAME)
tracer = Tracer(service=SERVICE_NAME)
metrics = Metrics(namespace="QueueWorker", service=SERVICE_NAME)


def build_processor(config: AppConfig) -> MessageProcessor:
    """The business logic seam: return your own MessageProcessor here."""
    return ExampleMessageProcessor(delay_seconds=config.processing_delay_seconds)


@logger.inject_lambda_context(clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict, context: LambdaContext) -> PartialItemFailureResponse:
    """Main Lambda handler for SQS events."""
    config = AppConfig.load_from_env()
    logger.setLevel(config.log_level)
    if config.environment:
        logger.append_keys(environment=config.environment)
        metrics.add_dimension("environment", config.environment)

    raw_records: list[dict] = event.get("Records") or []
    logger.info(
        "Event received",
        extra={
            "sqs_messages": len(raw_records),
            "message_ids": [r.get("messageId") for r in raw_records],
        },
    )
    logger.info("Environment configuration", extra=config.to_log_context())

    if not raw_records:
        logger.warning("Event did not contain any SQS records. Exiting gracefully.")
        return {"batchItemFailures": []}

    batch_processor = BatchProcessor(
        processor=build_processor(config),
        logger=logger,
        config=config,
        metrics=metrics,
    )
    return batch_processor.handle(SQSEvent(event).records)
