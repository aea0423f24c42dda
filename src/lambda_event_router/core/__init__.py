"""Core (event-source agnostic) primitives for lambda-event-router."""

from lambda_event_router.core.config import RESERVED_KEYS, RouteConfig, coerce_route_config
from lambda_event_router.core.dispatcher import (
    DispatchResult,
    EventRouter,
    async_handler,
    handler,
)
from lambda_event_router.core.events import DispatchEvent
from lambda_event_router.core.exceptions import (
    NO_PROCESSOR_FOUND_MESSAGE,
    ConfigurationError,
    DispatchError,
    EventRouterError,
    InvalidRouteConfig,
    NoProcessorFound,
    ProcessingError,
    ProcessorResolutionError,
    RegistryError,
)
from lambda_event_router.core.outcome import Completed, Failed, Outcome, Skipped, coerce_outcome
from lambda_event_router.core.registry import (
    ENTRY_POINT_GROUP,
    EventProcessor,
    ProcessorRegistration,
    ProcessorRegistry,
    build_processor_mapping,
    prepare_processor_configs,
)

__all__ = [
    "EventRouterError",
    "ConfigurationError",
    "InvalidRouteConfig",
    "RegistryError",
    "ProcessorResolutionError",
    "DispatchError",
    "ProcessingError",
    "NoProcessorFound",
    "NO_PROCESSOR_FOUND_MESSAGE",
    "RESERVED_KEYS",
    "RouteConfig",
    "coerce_route_config",
    "Skipped",
    "Completed",
    "Failed",
    "Outcome",
    "coerce_outcome",
    "ENTRY_POINT_GROUP",
    "EventProcessor",
    "ProcessorRegistration",
    "ProcessorRegistry",
    "build_processor_mapping",
    "prepare_processor_configs",
    "DispatchEvent",
    "DispatchResult",
    "EventRouter",
    "async_handler",
    "handler",
]
