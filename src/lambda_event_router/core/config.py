from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import ValidationError

from lambda_event_router.core.exceptions import InvalidRouteConfig

# Keys of a flat route config mapping that never name a processor.
RESERVED_KEYS = frozenset({"debug", "on_error", "onError"})


class RouteConfig(BaseModel):
    """Router configuration: ordered processor slices plus diagnostics and recovery."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    processors: Dict[str, Any] = Field(
        default_factory=dict,
        description="Processor name -> processor-specific config. Order is trial order.",
    )
    debug: bool = Field(
        default=False,
        description="Log raw events, invocation context and declined processors.",
    )
    on_error: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Recovery hook called as on_error(error, event, context) when a processor fails.",
    )

    @field_validator("processors")
    @classmethod
    def _check_processor_names(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        for name in value:
            if not name.strip():
                raise ValueError("Processor names must be non-empty.")
            if name in RESERVED_KEYS:
                raise ValueError(f"'{name}' is a reserved key and cannot name a processor.")
        return value

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> RouteConfig:
        """Build a RouteConfig from a flat mapping mixing processor and reserved keys."""
        processors: dict[str, Any] = {}
        options: dict[str, Any] = {}
        for key, value in mapping.items():
            if key == "debug":
                if value is not None:
                    options["debug"] = value
            elif key in ("on_error", "onError"):
                options["on_error"] = value
            else:
                processors[key] = value
        return cls(processors=processors, **options)


def coerce_route_config(config: RouteConfig | Mapping[str, Any]) -> RouteConfig:
    if isinstance(config, RouteConfig):
        return config
    if not isinstance(config, Mapping):
        raise InvalidRouteConfig(
            f"Route config must be a RouteConfig or a mapping, got {type(config).__name__}."
        )
    try:
        return RouteConfig.from_mapping(config)
    except ValidationError as exc:
        raise InvalidRouteConfig(str(exc), cause=exc) from exc
