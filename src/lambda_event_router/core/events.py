"""Dispatch observability events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DispatchEvent:
    """Structured event emitted while an invocation is dispatched."""

    kind: str
    payload: Dict[str, Any]
    error: Optional[BaseException] = None
