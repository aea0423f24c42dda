"""Outcome of a single processor call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Skipped:
    """The processor does not feel responsible for the event."""

    reason: Optional[str] = None


@dataclass(frozen=True)
class Completed:
    """The processor claimed the event; ``value`` is the invocation result."""

    value: Any


@dataclass(frozen=True)
class Failed:
    """The processor claimed the event but could not process it."""

    error: BaseException
    trace: Optional[str] = None


Outcome = Union[Skipped, Completed, Failed]


def coerce_outcome(result: Any) -> Outcome:
    """Map a raw processor return value onto an Outcome.

    Explicit outcomes pass through. Otherwise ``None`` and falsy values mean
    "not my event" and anything else is the result.
    """
    if isinstance(result, (Skipped, Completed, Failed)):
        return result
    if not result:
        return Skipped()
    return Completed(result)
