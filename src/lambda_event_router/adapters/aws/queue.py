"""SQS event processor."""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from pydantic import BaseModel, ConfigDict, Field

from lambda_event_router.adapters.aws.common import (
    SourceMatcher,
    call_action,
    coerce_config,
    first_record,
    records_of,
    source_matches,
)
from lambda_event_router.core.outcome import Completed, Outcome, Skipped

logger = logging.getLogger(__name__)

EVENT_SOURCE = "aws:sqs"


class QueueRoute(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: SourceMatcher = Field(description="Queue ARN, or a compiled regex searched in it.")
    action: Callable[..., Any] = Field(description="Called as action(message_bodies, context).")


class QueueConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    routes: List[QueueRoute] = Field(default_factory=list)
    debug: bool = False


config_model = QueueConfig


async def process(config: Any, event: Any, context: Any) -> Outcome:
    record = first_record(event)
    if record is None or record.get("eventSource") != EVENT_SOURCE:
        return Skipped("not an SQS event")

    queue_config = coerce_config(QueueConfig, config)
    queue_arn = record.get("eventSourceARN")
    for route in queue_config.routes:
        if source_matches(route.source, queue_arn):
            messages = [r.get("body") for r in records_of(event)]
            return Completed(await call_action(route.action, messages, context))

    if queue_config.debug:
        logger.info("No SQS route matches queue %s", queue_arn)
    return Skipped(f"no route for queue {queue_arn}")
