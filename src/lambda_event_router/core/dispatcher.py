from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from lambda_event_router.core.config import RouteConfig, coerce_route_config
from lambda_event_router.core.events import DispatchEvent
from lambda_event_router.core.exceptions import NoProcessorFound, ProcessingError
from lambda_event_router.core.outcome import Completed, Failed, Outcome, Skipped, coerce_outcome
from lambda_event_router.core.registry import (
    EventProcessor,
    ProcessorRegistry,
    build_processor_mapping,
    prepare_processor_configs,
)


@dataclass(frozen=True)
class DispatchResult:
    processor_name: str
    output: Any
    recovered: bool = False


async def _invoke(processor: EventProcessor, config: Any, event: Any, context: Any) -> Outcome:
    result = processor.process(config, event, context)
    if inspect.isawaitable(result):
        # A pending result claims the event, whatever it resolves to.
        result = await result
        if not isinstance(result, (Skipped, Completed, Failed)):
            return Completed(result)
    outcome = coerce_outcome(result)
    if isinstance(outcome, Completed) and inspect.isawaitable(outcome.value):
        return Completed(await outcome.value)
    return outcome


class EventRouter:
    """Routes one serverless invocation to the first processor that claims it.

    Processors are resolved once, when the router is built, and tried in the
    order of the route config on every call. The first processor to complete or
    fail decides the outcome of the invocation.
    """

    def __init__(
        self,
        config: RouteConfig | Mapping[str, Any],
        *,
        registry: ProcessorRegistry | None = None,
        on_event: Callable[[DispatchEvent], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = coerce_route_config(config)
        self._registry = registry if registry is not None else ProcessorRegistry.with_builtins()
        self._processors = build_processor_mapping(self._config, self._registry)
        self._slices = prepare_processor_configs(self._config, self._processors)
        self._on_event = on_event
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config(self) -> RouteConfig:
        return self._config

    @property
    def processors(self) -> Mapping[str, EventProcessor]:
        return self._processors

    def _emit(self, kind: str, payload: dict, error: BaseException | None = None) -> None:
        self._logger.debug("dispatch.%s payload=%s error=%s", kind, payload, error)
        if self._on_event is None:
            return
        try:
            self._on_event(DispatchEvent(kind=kind, payload=payload, error=error))
        except Exception:
            # on_event never changes the invocation outcome.
            self._logger.debug("on_event hook raised while handling %s", kind, exc_info=True)

    async def __call__(self, event: Any, context: Any = None) -> Any:
        result = await self.dispatch(event, context)
        return result.output

    async def dispatch(self, event: Any, context: Any = None) -> DispatchResult:
        """Try each configured processor in order until one claims the event.

        - A processor that completes ends the loop with its value.
        - A processor that raises (or returns ``Failed``) ends the loop too; the
          configured ``on_error`` hook may turn it into a result, otherwise
          ``ProcessingError`` is raised with the original error's message.
        - If every processor declines, ``NoProcessorFound`` is raised.
        """
        if self._config.debug:
            self._logger.info("Lambda invoked with request: %s", event)
            self._logger.info("Lambda invoked with context: %s", context)
        self._emit("invocation_received", {"processors": list(self._processors)})

        for name, processor in self._processors.items():
            try:
                outcome = await _invoke(processor, self._slices[name], event, context)
            except Exception as exc:
                outcome = Failed(exc)

            if isinstance(outcome, Completed):
                self._emit("processor_completed", {"processor": name})
                return DispatchResult(processor_name=name, output=outcome.value)
            if isinstance(outcome, Failed):
                return await self._handle_failure(name, outcome, event, context)

            if self._config.debug:
                self._logger.info("Event processor '%s' couldn't handle request.", name)
            self._emit("processor_declined", {"processor": name, "reason": outcome.reason})

        error = NoProcessorFound()
        self._emit("no_processor_found", {"processors": list(self._processors)}, error=error)
        raise error

    async def _handle_failure(
        self, name: str, outcome: Failed, event: Any, context: Any
    ) -> DispatchResult:
        error = outcome.error
        if outcome.trace:
            self._logger.error("Event processor '%s' failed:\n%s", name, outcome.trace)
        else:
            self._logger.error("Event processor '%s' failed: %s", name, error, exc_info=error)
        self._emit("processor_failed", {"processor": name}, error=error)

        on_error = self._config.on_error
        if on_error is not None:
            recovered = on_error(error, event, context)
            if inspect.isawaitable(recovered):
                recovered = await recovered
            recovery = coerce_outcome(recovered)
            if isinstance(recovery, Completed):
                self._emit("error_recovered", {"processor": name}, error=error)
                return DispatchResult(processor_name=name, output=recovery.value, recovered=True)

        raise ProcessingError(str(error), processor_name=name, cause=error) from error


def async_handler(
    config: RouteConfig | Mapping[str, Any], **kwargs: Any
) -> EventRouter:
    """Build a router usable as ``await handler(event, context)``."""
    return EventRouter(config, **kwargs)


def handler(
    config: RouteConfig | Mapping[str, Any], **kwargs: Any
) -> Callable[[Any, Any], Any]:
    """Build a synchronous ``lambda_handler(event, context)`` for the Lambda runtime.

    Configuration errors surface here, before any event is processed. The
    router behind the handler is available as ``lambda_handler.router``.
    """
    router = EventRouter(config, **kwargs)

    def lambda_handler(event: Any, context: Any = None) -> Any:
        return asyncio.run(router(event, context))

    lambda_handler.router = router  # type: ignore[attr-defined]
    return lambda_handler
