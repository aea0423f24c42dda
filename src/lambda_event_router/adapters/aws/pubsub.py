"""SNS event processor."""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from pydantic import BaseModel, ConfigDict, Field

from lambda_event_router.adapters.aws.common import (
    SourceMatcher,
    call_action,
    coerce_config,
    first_record,
    source_matches,
)
from lambda_event_router.core.outcome import Completed, Outcome, Skipped

logger = logging.getLogger(__name__)

EVENT_SOURCE = "aws:sns"


class PubSubRoute(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: SourceMatcher = Field(description="Topic ARN, or a compiled regex searched in it.")
    action: Callable[..., Any] = Field(description="Called as action(sns_message, context).")


class PubSubConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    routes: List[PubSubRoute] = Field(default_factory=list)
    debug: bool = False


config_model = PubSubConfig


async def process(config: Any, event: Any, context: Any) -> Outcome:
    record = first_record(event)
    if record is None or record.get("EventSource") != EVENT_SOURCE:
        return Skipped("not an SNS event")

    pubsub_config = coerce_config(PubSubConfig, config)
    message = record.get("Sns") or {}
    topic_arn = message.get("TopicArn")
    for route in pubsub_config.routes:
        if source_matches(route.source, topic_arn):
            return Completed(await call_action(route.action, message, context))

    if pubsub_config.debug:
        logger.info("No SNS route matches topic %s", topic_arn)
    return Skipped(f"no route for topic {topic_arn}")
