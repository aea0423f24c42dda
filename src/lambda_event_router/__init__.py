"""Route serverless invocations to the event processor that claims them."""

from lambda_event_router.core import (
    Completed,
    EventRouter,
    Failed,
    NoProcessorFound,
    ProcessingError,
    ProcessorRegistration,
    ProcessorRegistry,
    ProcessorResolutionError,
    RouteConfig,
    Skipped,
    async_handler,
    handler,
)

__version__ = "0.1.0"

__all__ = [
    "Completed",
    "EventRouter",
    "Failed",
    "NoProcessorFound",
    "ProcessingError",
    "ProcessorRegistration",
    "ProcessorRegistry",
    "ProcessorResolutionError",
    "RouteConfig",
    "Skipped",
    "async_handler",
    "handler",
]
