#!/usr/bin/env python

"""
Local runner for the Queue Worker Lambda.

Invokes the handler in-process with canned SQS events, without deploying or
running any emulator. With --publish the same message bodies are sent to the
real topic or queue instead, so the deployed function picks them up.

Usage:
    python test_scripts/run_local.py                 # run every scenario
    python test_scripts/run_local.py partial         # run one scenario
    python test_scripts/run_local.py --list
    python test_scripts/run_local.py sns --publish --topic-arn arn:aws:sns:...

The script puts src/ on sys.path itself, so it runs from a plain checkout
without `pip install -e .`. Its third-party dependencies must still be installed.
"""

import argparse
import json
import os
import sys
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import NoCredentialsError, NoRegionError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

LOCAL_ENVIRONMENT = {
    "QUEUE_URL": "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue",
    "TOPIC_ARN": "arn:aws:sns:us-east-1:123456789012:test-topic",
    "DLQ_URL": "https://sqs.us-east-1.amazonaws.com/123456789012/test-dlq",
    "ENVIRONMENT": "local",
    "LOG_LEVEL": "DEBUG",
    "POWERTOOLS_SERVICE_NAME": "queue-worker-local",
    "POWERTOOLS_TRACE_DISABLED": "true",
}

# --- Data Structures ---


@dataclass
class Message:
    message_id: str
    body: Any
    sns_wrapped: bool = False


@dataclass
class Scenario:
    name: str
    messages: List[Message] = field(default_factory=list)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


SCENARIOS: Dict[str, Scenario] = {
    "simple": Scenario(
        "Simple Message",
        [
            Message(
                "local-test-1",
                {"test": "Hello from local script", "data": "Some test data", "timestamp": _now()},
            )
        ],
    ),
    "sns": Scenario(
        "SNS-wrapped Message",
        [
            Message(
                "local-test-2",
                {"test": "Hello from SNS", "data": "SNS wrapped data", "timestamp": _now()},
                sns_wrapped=True,
            )
        ],
    ),
    "batch": Scenario(
        "Batch Messages",
        [Message(f"batch-message-{i}", {"id": i, "data": f"Message {i}"}) for i in (1, 2, 3)],
    ),
    "failure": Scenario(
        "Message with Failure",
        [Message("failure-test", {"shouldFail": True, "data": "This message should fail"})],
    ),
    "partial": Scenario(
        "Partial Batch Failure",
        [
            Message("success-1", {"id": 1, "data": "Success"}),
            Message("failure", {"shouldFail": True}),
            Message("success-2", {"id": 3, "data": "Success"}),
        ],
    ),
    "invalid": Scenario(
        "Invalid JSON Body",
        [Message("invalid-json", "{ invalid json }")],
    ),
}


# --- Event & context builders ---


def _sns_envelope(body: Any) -> Dict[str, Any]:
    return {
        "Type": "Notification",
        "MessageId": str(uuid.uuid4()),
        "TopicArn": LOCAL_ENVIRONMENT["TOPIC_ARN"],
        "Message": body if isinstance(body, str) else json.dumps(body),
        "Timestamp": _now(),
        "SignatureVersion": "1",
        "Signature": "test-signature",
        "SigningCertURL": "https://sns.us-east-1.amazonaws.com/test.pem",
        "UnsubscribeURL": "https://sns.us-east-1.amazonaws.com/unsubscribe",
    }


def build_event(scenario: Scenario) -> Dict[str, Any]:
    """Builds the SQS event Lambda would deliver for a scenario."""
    sent = str(int(time.time() * 1000))
    records = []
    for index, message in enumerate(scenario.messages, start=1):
        body = _sns_envelope(message.body) if message.sns_wrapped else message.body
        records.append(
            {
                "messageId": message.message_id,
                "receiptHandle": f"receipt-{index}",
                "body": body if isinstance(body, str) else json.dumps(body),
                "attributes": {
                    "ApproximateReceiveCount": "1",
                    "SentTimestamp": sent,
                    "SenderId": "local-test",
                    "ApproximateFirstReceiveTimestamp": sent,
                },
                "messageAttributes": {},
                "md5OfBody": f"test-md5-{index}",
                "eventSource": "aws:sqs",
                "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:test-queue",
                "awsRegion": "us-east-1",
            }
        )
    return {"Records": records}


@dataclass
class LocalContext:
    """Enough of LambdaContext for Powertools' decorators."""

    function_name: str = "local-test-function"
    function_version: str = "$LATEST"
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:local-test"
    memory_limit_in_mb: int = 128
    aws_request_id: str = field(default_factory=lambda: f"local-request-{uuid.uuid4().hex[:8]}")
    log_group_name: str = "/aws/lambda/local-test"
    log_stream_name: str = "local-stream"

    def get_remaining_time_in_millis(self) -> int:
        return 30_000


# --- Runner ---


class LocalRunner:
    """Runs scenarios against the in-process handler or publishes them to AWS."""

    def __init__(self, console: Console, verbose: bool = False):
        self.console = console
        self.verbose = verbose

    def run_in_process(self, keys: List[str]) -> int:
        for name, value in LOCAL_ENVIRONMENT.items():
            os.environ.setdefault(name, value)
        # Imported late so Powertools picks up the environment above.
        from queue_worker.app import handler

        table = Table(title="Local Lambda Results")
        table.add_column("Scenario", style="cyan", no_wrap=True)
        table.add_column("Messages", justify="right")
        table.add_column("Failed", style="yellow")

        exit_code = 0
        for key in keys:
            scenario = SCENARIOS[key]
            self.console.rule(f"[bold]🧪 Testing: {scenario.name}[/bold]")
            try:
                result = handler(build_event(scenario), LocalContext())
            except Exception as e:
                exit_code = 1
                self.console.print(f"[bold red]❌ Lambda execution failed:[/bold red] {e}")
                if self.verbose:
                    self.console.print_exception(show_locals=False)
                table.add_row(scenario.name, str(len(scenario.messages)), "[red]ERROR[/red]")
                continue

            self.console.print_json(data=result)
            failed = [item["itemIdentifier"] for item in result["batchItemFailures"]]
            if failed:
                self.console.print(f"[yellow]⚠️  {len(failed)} message(s) failed[/yellow]")
            else:
                self.console.print("[green]✨ All messages processed successfully![/green]")
            table.add_row(
                scenario.name,
                str(len(scenario.messages)),
                ", ".join(failed) or "[green]-[/green]",
            )

        self.console.print(table)
        return exit_code

    def publish(self, keys: List[str], topic_arn: Optional[str], queue_url: Optional[str]) -> int:
        from queue_worker.clients import NotificationPublisher, QueueSender
        from queue_worker.exceptions import PublishError

        try:
            session = boto3.Session()
            publisher = NotificationPublisher(session.client("sns")) if topic_arn else None
            sender = QueueSender(session.client("sqs")) if queue_url else None
        except NoRegionError:
            self.console.print(
                Panel("An AWS region was not specified.", title="Configuration Error", border_style="red")
            )
            return 2

        table = Table(title="Published Messages")
        table.add_column("Scenario", style="cyan")
        table.add_column("Target")
        table.add_column("MessageId", style="magenta")

        try:
            for key in keys:
                for message in SCENARIOS[key].messages:
                    if publisher and (message.sns_wrapped or not sender):
                        message_id = publisher.publish(topic_arn, message.body, subject=key)
                        table.add_row(key, "SNS", message_id)
                    else:
                        message_id = sender.send(queue_url, message.body)
                        table.add_row(key, "SQS", message_id)
        except NoCredentialsError:
            self.console.print(
                Panel("AWS credentials not found.", title="Authentication Error", border_style="red")
            )
            return 2
        except PublishError as e:
            self.console.print(Panel(str(e), title=e.error_code, border_style="red"))
            if self.verbose:
                self.console.print_json(data=e.to_dict())
            return 1

        self.console.print(table)
        return 0


def main():
    """Main entry point for the local runner script."""
    parser = argparse.ArgumentParser(
        description="Run the Queue Worker Lambda locally against canned SQS events.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("scenario", nargs="?", help="Scenario to run (default: all).")
    parser.add_argument("--list", action="store_true", help="List the available scenarios.")
    parser.add_argument(
        "--publish",
        action="store_true",
        help="Send the scenario bodies to AWS instead of invoking the handler locally.",
    )
    parser.add_argument("--topic-arn", help="SNS topic for --publish (SNS-wrapped scenarios).")
    parser.add_argument("--queue-url", help="SQS queue for --publish (direct scenarios).")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output, including full exception tracebacks.",
    )
    args = parser.parse_args()
    console = Console()

    if args.list or (args.scenario and args.scenario not in SCENARIOS):
        if args.scenario and not args.list:
            console.print(f"[bold red]❌ Unknown scenario: {args.scenario}[/bold red]")
        table = Table(title="📋 Available scenarios")
        table.add_column("Key", style="cyan")
        table.add_column("Name")
        for key, scenario in SCENARIOS.items():
            table.add_row(key, scenario.name)
        console.print(table)
        exit(0 if args.list else 1)

    keys = [args.scenario] if args.scenario else list(SCENARIOS)
    runner = LocalRunner(console, verbose=args.verbose)

    if args.publish:
        if not (args.topic_arn or args.queue_url):
            console.print("[bold red]--publish needs --topic-arn and/or --queue-url[/bold red]")
            exit(2)
        exit(runner.publish(keys, args.topic_arn, args.queue_url))

    console.print(Panel("🚀 Starting Local Lambda Tests", expand=False))
    exit(runner.run_in_process(keys))


if __name__ == "__main__":
    main()
