"""Exception family for lambda-event-router."""

from __future__ import annotations

NO_PROCESSOR_FOUND_MESSAGE = "No event processor found to handle this kind of event!"


class EventRouterError(Exception):
    """Base error. ``str()`` renders the human-readable message only."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class ConfigurationError(EventRouterError):
    """Raised at setup time; the handler is never produced."""


class InvalidRouteConfig(ConfigurationError):
    pass


class RegistryError(ConfigurationError):
    pass


class ProcessorResolutionError(ConfigurationError):
    """A configured processor key could not be resolved to a processor."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(
            f"The event processor '{key}', that is mentioned in the route config, "
            f"cannot be instantiated ({cause!s})",
            cause=cause,
        )
        self.key = key


class DispatchError(EventRouterError):
    """Raised per invocation and surfaced to the host as a failed call."""


class ProcessingError(DispatchError):
    """A processor failed and the error handler did not recover it."""

    def __init__(
        self,
        message: str,
        *,
        processor_name: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.processor_name = processor_name


class NoProcessorFound(DispatchError):
    def __init__(self) -> None:
        super().__init__(NO_PROCESSOR_FOUND_MESSAGE)
