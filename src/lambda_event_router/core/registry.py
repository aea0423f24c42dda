from __future__ import annotations

import importlib
import logging
from importlib.metadata import entry_points
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import ValidationError

from lambda_event_router.core.config import RESERVED_KEYS, RouteConfig
from lambda_event_router.core.exceptions import (
    InvalidRouteConfig,
    ProcessorResolutionError,
    RegistryError,
)

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "lambda_event_router.processors"
PROCESSOR_PACKAGE = "lambda_event_router.processors"
MAX_DESCRIPTION_CHARS = 512


class EventProcessor(Protocol):
    """Anything with ``process(config, event, context)``.

    The call returns an Outcome, a plain value (``None``/falsy meaning "not my
    event"), or an awaitable. An awaitable always claims the event unless it
    resolves to an Outcome. Modules with a top-level ``process`` function
    qualify too; an optional ``config_model`` attribute (a pydantic model)
    validates the config slice when the router is built.
    """

    def process(self, config: Any, event: Any, context: Any) -> Any:  # pragma: no cover
        ...


def _normalize_processor_name(name: str) -> str:
    return name.strip()


class ProcessorRegistration(BaseModel):
    """A named event processor."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(description="Route config key selecting this processor.")
    processor: Any = Field(description="Object or module exposing process(config, event, context).")
    description: Optional[str] = Field(default=None, description="Short human-readable summary.")

    def model_post_init(self, __context) -> None:  # type: ignore[override]
        self.name = _normalize_processor_name(self.name)


class ProcessorRegistry:
    """Explicit name -> processor table, with plugin lookup for unknown names."""

    def __init__(self) -> None:
        self._registrations: dict[str, ProcessorRegistration] = {}

    @classmethod
    def with_builtins(cls) -> ProcessorRegistry:
        """Registry holding the built-in AWS event source processors."""
        from lambda_event_router.adapters.aws import builtin_registrations

        registry = cls()
        for registration in builtin_registrations():
            registry.register(registration)
        return registry

    def register(self, registration: ProcessorRegistration, *, replace: bool = False) -> None:
        name = registration.name
        if not name:
            raise RegistryError("Processor name must be non-empty.")
        if name in RESERVED_KEYS:
            raise RegistryError(f"'{name}' is a reserved route config key.")
        if registration.description and len(registration.description) > MAX_DESCRIPTION_CHARS:
            raise RegistryError(
                f"Description for processor '{name}' exceeds {MAX_DESCRIPTION_CHARS} characters."
            )
        if name in self._registrations and not replace:
            raise RegistryError(f"Processor '{name}' is already registered.")
        self._registrations[name] = registration

    def get(self, name: str) -> ProcessorRegistration | None:
        return self._registrations.get(_normalize_processor_name(name))

    def names(self) -> list[str]:
        return list(self._registrations)

    def descriptions(self) -> dict[str, str]:
        return {name: reg.description or "" for name, reg in self._registrations.items()}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize_processor_name(name) in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)

    def resolve(self, name: str) -> EventProcessor:
        """Resolve a route config key to a processor.

        Lookup order: explicit registration, then a plugin published under the
        ``lambda_event_router.processors`` entry point group, then a module
        imported from the key: ``lambda_event_router.processors.<key>`` for a
        plain key, the key itself when it is a dotted path. Import errors
        propagate.
        """
        registration = self.get(name)
        if registration is not None:
            return registration.processor

        plugin = _load_entry_point(name)
        if plugin is not None:
            logger.debug("Resolved processor '%s' from entry point", name)
            return plugin

        module = importlib.import_module(_module_path(name))
        logger.debug("Resolved processor '%s' by importing module %s", name, module.__name__)
        return module


def _module_path(name: str) -> str:
    if "." in name:
        return name
    return f"{PROCESSOR_PACKAGE}.{name}"


def _load_entry_point(name: str) -> Any | None:
    matches: Iterable[Any] = entry_points(group=ENTRY_POINT_GROUP, name=name)
    for entry_point in matches:
        return entry_point.load()
    return None


def build_processor_mapping(
    config: RouteConfig, registry: ProcessorRegistry
) -> Mapping[str, EventProcessor]:
    """Resolve every configured processor, in config order, into a read-only mapping."""
    mapping: dict[str, EventProcessor] = {}
    for key in config.processors:
        try:
            mapping[key] = registry.resolve(key)
        except Exception as exc:
            raise ProcessorResolutionError(key, exc) from exc
    return MappingProxyType(mapping)


def prepare_processor_configs(
    config: RouteConfig, processors: Mapping[str, EventProcessor]
) -> Mapping[str, Any]:
    """Validate each config slice against its processor's ``config_model``, if any.

    Processors without a ``config_model`` attribute get their slice unchanged.
    """
    slices: dict[str, Any] = {}
    for key, processor in processors.items():
        raw = config.processors[key]
        model = getattr(processor, "config_model", None)
        if model is None or isinstance(raw, model):
            slices[key] = raw
            continue
        try:
            slices[key] = model.model_validate(raw)
        except ValidationError as exc:
            raise InvalidRouteConfig(
                f"Invalid config for event processor '{key}': {exc}", cause=exc
            ) from exc
    return MappingProxyType(slices)
