"""S3 event processor.

Every S3 record of the event is handed to the first route that matches it;
the processor result is the list of action results, in record order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from lambda_event_router.adapters.aws.common import call_action, coerce_config, records_of
from lambda_event_router.core.outcome import Completed, Outcome, Skipped

logger = logging.getLogger(__name__)

EVENT_SOURCE = "aws:s3"


class ObjectStorageRoute(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    action: Callable[..., Any] = Field(description="Called as action(record, context).")
    bucket_name: Optional[str] = None
    event_name: Optional[str] = Field(
        default=None,
        description="Prefix of the record's eventName, e.g. 'ObjectCreated'.",
    )
    object_key_prefix: Optional[str] = None
    condition: Optional[Callable[..., bool]] = Field(
        default=None,
        description="Extra predicate called as condition(record, context).",
    )

    def matches(self, record: Mapping[str, Any], context: Any) -> bool:
        s3 = record.get("s3") or {}
        if self.bucket_name is not None and (s3.get("bucket") or {}).get("name") != self.bucket_name:
            return False
        if self.event_name is not None and not str(record.get("eventName", "")).startswith(self.event_name):
            return False
        if self.object_key_prefix is not None:
            key = str((s3.get("object") or {}).get("key", ""))
            if not key.startswith(self.object_key_prefix):
                return False
        if self.condition is not None and not self.condition(record, context):
            return False
        return True


class ObjectStorageConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    routes: List[ObjectStorageRoute] = Field(default_factory=list)
    debug: bool = False


config_model = ObjectStorageConfig


async def process(config: Any, event: Any, context: Any) -> Outcome:
    records = [r for r in records_of(event) if r.get("eventSource") == EVENT_SOURCE]
    if not records:
        return Skipped("not an S3 event")

    storage_config = coerce_config(ObjectStorageConfig, config)
    results: list[Any] = []
    matched = 0
    for record in records:
        route = next((r for r in storage_config.routes if r.matches(record, context)), None)
        if route is None:
            if storage_config.debug:
                logger.info("No S3 route matches record %s", record.get("eventName"))
            continue
        matched += 1
        results.append(await call_action(route.action, record, context))

    if not matched:
        return Skipped("no route for any S3 record")
    return Completed(results)
