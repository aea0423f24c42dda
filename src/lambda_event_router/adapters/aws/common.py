"""Helpers shared by the AWS event source processors."""

from __future__ import annotations

import inspect
import re
from collections.abc import Mapping
from typing import Any, Callable, TypeVar, Union

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)

# Exact string, or a compiled regex searched in the value.
SourceMatcher = Union[str, re.Pattern]


def records_of(event: Any) -> list[Mapping[str, Any]]:
    if not isinstance(event, Mapping):
        return []
    records = event.get("Records")
    if not isinstance(records, list):
        return []
    return [record for record in records if isinstance(record, Mapping)]


def first_record(event: Any) -> Mapping[str, Any] | None:
    records = records_of(event)
    return records[0] if records else None


def source_matches(source: SourceMatcher, value: str | None) -> bool:
    if isinstance(source, re.Pattern):
        return source.search(value or "") is not None
    return source == value


def coerce_config(model: type[ModelT], config: Any) -> ModelT:
    if isinstance(config, model):
        return config
    return model.model_validate(config)


async def call_action(action: Callable[..., Any], *args: Any) -> Any:
    result = action(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
