from __future__ import annotations

import asyncio
import base64
import json
import re
from typing import Any

import pytest

from lambda_event_router import EventRouter, NoProcessorFound, ProcessingError
from lambda_event_router.adapters.aws import (
    ObjectStorageConfig,
    ObjectStorageRoute,
    ProxyIntegrationConfig,
    ProxyRoute,
    QueueConfig,
    QueueRoute,
    http_proxy,
    object_storage,
    pubsub,
    queue,
)
from lambda_event_router.core import (
    Completed,
    InvalidRouteConfig,
    ProcessorRegistration,
    ProcessorRegistry,
    Skipped,
)

QUEUE_ARN = "arn:aws:sqs:eu-west-1:123456789012:orders"
TOPIC_ARN = "arn:aws:sns:eu-west-1:123456789012:alerts"


def sqs_event(*bodies: str, arn: str = QUEUE_ARN) -> dict[str, Any]:
    return {
        "Records": [
            {"eventSource": "aws:sqs", "eventSourceARN": arn, "body": body} for body in bodies
        ]
    }


def sns_event(message: str, arn: str = TOPIC_ARN) -> dict[str, Any]:
    return {
        "Records": [
            {"EventSource": "aws:sns", "Sns": {"TopicArn": arn, "Message": message}}
        ]
    }


def s3_event(*keys: str, bucket: str = "uploads", event_name: str = "ObjectCreated:Put") -> dict[str, Any]:
    return {
        "Records": [
            {
                "eventSource": "aws:s3",
                "eventName": event_name,
                "s3": {"bucket": {"name": bucket}, "object": {"key": key}},
            }
            for key in keys
        ]
    }


def api_event(method: str, path: str, body: str | None = None, headers: dict | None = None) -> dict[str, Any]:
    return {
        "httpMethod": method,
        "path": path,
        "headers": headers or {},
        "body": body,
        "requestContext": {"requestId": "req-1"},
    }


def _process(module: Any, config: Any, event: Any, context: Any = None) -> Any:
    return asyncio.run(module.process(config, event, context))


# queue


def test_queue_scenario_resolves_to_action_result() -> None:
    router = EventRouter(
        {
            "queue": {"routes": [{"source": QUEUE_ARN, "action": lambda messages, ctx: {"status": "ok"}}]},
            "debug": False,
        }
    )
    assert asyncio.run(router(sqs_event("a"), None)) == {"status": "ok"}


def test_queue_passes_message_bodies() -> None:
    received: list[Any] = []
    config = QueueConfig(routes=[QueueRoute(source=re.compile(r":orders$"), action=lambda m, c: received.append(m))])

    outcome = _process(queue, config, sqs_event("one", "two"))

    assert received == [["one", "two"]]
    assert outcome == Completed(None)


def test_queue_declines_other_sources_and_unrouted_queues() -> None:
    config = QueueConfig(routes=[QueueRoute(source="arn:other", action=lambda m, c: "x")])

    assert isinstance(_process(queue, config, sqs_event("a")), Skipped)
    assert isinstance(_process(queue, config, sns_event("a")), Skipped)
    assert isinstance(_process(queue, config, {"not": "records"}), Skipped)


def test_queue_async_action_is_awaited() -> None:
    async def action(messages: list[str], context: Any) -> int:
        return len(messages)

    config = {"routes": [{"source": QUEUE_ARN, "action": action}]}
    assert _process(queue, config, sqs_event("a", "b", "c")) == Completed(3)


# pubsub


def test_pubsub_routes_by_topic() -> None:
    config = {"routes": [{"source": TOPIC_ARN, "action": lambda message, ctx: message["Message"]}]}

    assert _process(pubsub, config, sns_event("hello")) == Completed("hello")
    assert isinstance(_process(pubsub, config, sns_event("hello", arn="arn:x")), Skipped)
    assert isinstance(_process(pubsub, config, sqs_event("hello")), Skipped)


# object storage


def test_object_storage_routes_each_record() -> None:
    config = ObjectStorageConfig(
        routes=[
            ObjectStorageRoute(object_key_prefix="images/", action=lambda r, c: "image"),
            ObjectStorageRoute(bucket_name="uploads", event_name="ObjectCreated", action=lambda r, c: "other"),
        ]
    )

    outcome = _process(object_storage, config, s3_event("images/a.png", "docs/b.txt"))

    assert outcome == Completed(["image", "other"])


def test_object_storage_condition_and_no_match() -> None:
    config = ObjectStorageConfig(
        routes=[
            ObjectStorageRoute(
                condition=lambda record, ctx: record["s3"]["object"]["key"].endswith(".csv"),
                action=lambda r, c: "csv",
            )
        ]
    )

    assert _process(object_storage, config, s3_event("a.csv", "b.txt")) == Completed(["csv"])
    assert isinstance(_process(object_storage, config, s3_event("b.txt")), Skipped)
    assert isinstance(_process(object_storage, config, sqs_event("a")), Skipped)


# http proxy


def _proxy_config(**kwargs: Any) -> ProxyIntegrationConfig:
    return ProxyIntegrationConfig(
        routes=[
            ProxyRoute(method="GET", path="/users/:user_id", action=lambda req, ctx: {"id": req["paths"]["user_id"]}),
            ProxyRoute(method=["POST", "PUT"], path="/users", action=lambda req, ctx: {"statusCode": 201, "body": req["body"]["name"]}),
        ],
        **kwargs,
    )


def test_http_proxy_matches_path_parameters() -> None:
    outcome = _process(http_proxy, _proxy_config(), api_event("GET", "/users/a%20b"))

    assert isinstance(outcome, Completed)
    assert outcome.value["statusCode"] == 200
    assert outcome.value["headers"]["Content-Type"] == "application/json"
    assert json.loads(outcome.value["body"]) == {"id": "a b"}


def test_http_proxy_decodes_json_body_and_passes_responses_through() -> None:
    event = api_event("post", "/users", body='{"name": "Ada"}', headers={"Content-Type": "application/json"})

    outcome = _process(http_proxy, _proxy_config(default_headers={"X-Api": "1"}), event)

    assert outcome.value == {"statusCode": 201, "body": "Ada", "headers": {"X-Api": "1"}}


def test_http_proxy_decodes_base64_bodies() -> None:
    event = api_event(
        "PUT",
        "/users",
        body=base64.b64encode(b'{"name": "Grace"}').decode(),
        headers={"content-type": "application/json; charset=utf-8"},
    )
    event["isBase64Encoded"] = True

    assert _process(http_proxy, _proxy_config(), event).value["body"] == "Grace"


def test_http_proxy_rejects_malformed_json() -> None:
    event = api_event("POST", "/users", body="{nope", headers={"Content-Type": "application/json"})

    assert _process(http_proxy, _proxy_config(), event).value["statusCode"] == 400


def test_http_proxy_unknown_route_is_404() -> None:
    outcome = _process(http_proxy, _proxy_config(), api_event("DELETE", "/users/1"))

    assert outcome.value["statusCode"] == 404
    assert json.loads(outcome.value["body"])["error"] == "NotFound"


def test_http_proxy_cors_preflight() -> None:
    outcome = _process(http_proxy, _proxy_config(cors=True), api_event("OPTIONS", "/users"))

    assert outcome.value["statusCode"] == 200
    assert outcome.value["headers"]["Access-Control-Allow-Origin"] == "*"


def test_http_proxy_error_mapping() -> None:
    class Missing(Exception):
        reason = "NotFound"

    def action(req: Any, ctx: Any) -> Any:
        raise Missing("user 7 not found")

    config = ProxyIntegrationConfig(
        routes=[ProxyRoute(method="*", path="/users/:id", action=action)],
        error_mapping={"NotFound": 404},
    )

    outcome = _process(http_proxy, config, api_event("GET", "/users/7"))

    assert outcome.value["statusCode"] == 404
    assert json.loads(outcome.value["body"]) == {"error": "NotFound", "message": "user 7 not found"}


def test_http_proxy_unmapped_error_becomes_processing_error() -> None:
    def action(req: Any, ctx: Any) -> Any:
        raise RuntimeError("database down")

    router = EventRouter({"http_proxy": {"routes": [{"method": "GET", "path": "/", "action": action}]}})

    with pytest.raises(ProcessingError) as exc_info:
        asyncio.run(router(api_event("GET", "/"), None))
    assert str(exc_info.value) == "database down"


def test_http_proxy_declines_non_http_events() -> None:
    assert isinstance(_process(http_proxy, _proxy_config(), sqs_event("a")), Skipped)


# routing across built-ins


def test_event_matching_no_builtin_shape_fails_with_no_processor_found() -> None:
    router = EventRouter(
        {
            "http_proxy": {"routes": []},
            "queue": {"routes": [{"source": QUEUE_ARN, "action": lambda m, c: "x"}]},
        }
    )

    with pytest.raises(NoProcessorFound) as exc_info:
        asyncio.run(router({"detail-type": "Scheduled Event"}, None))
    assert str(exc_info.value) == "No event processor found to handle this kind of event!"


def test_builtins_route_each_event_to_its_source() -> None:
    router = EventRouter(
        {
            "http_proxy": _proxy_config(),
            "pubsub": {"routes": [{"source": TOPIC_ARN, "action": lambda m, c: "sns"}]},
            "queue": {"routes": [{"source": QUEUE_ARN, "action": lambda m, c: "sqs"}]},
        }
    )

    assert asyncio.run(router.dispatch(sns_event("x"))).processor_name == "pubsub"
    assert asyncio.run(router.dispatch(sqs_event("x"))).processor_name == "queue"
    assert asyncio.run(router.dispatch(api_event("GET", "/users/1"))).processor_name == "http_proxy"


def test_malformed_builtin_slice_fails_when_router_is_built() -> None:
    with pytest.raises(InvalidRouteConfig) as exc_info:
        EventRouter({"queue": {"routes": [{"source": QUEUE_ARN}]}})
    assert "'queue'" in str(exc_info.value)


def test_builtin_slices_reach_processors_as_models() -> None:
    seen: list[Any] = []

    class RecordingQueue:
        config_model = QueueConfig

        async def process(self, config: Any, event: Any, context: Any) -> Any:
            seen.append(config)
            return await queue.process(config, event, context)

    registry = ProcessorRegistry()
    registry.register(ProcessorRegistration(name="queue", processor=RecordingQueue()))
    router = EventRouter(
        {"queue": {"routes": [{"source": QUEUE_ARN, "action": lambda m, c: "ok"}]}},
        registry=registry,
    )

    assert asyncio.run(router(sqs_event("a"), None)) == "ok"
    assert asyncio.run(router(sqs_event("b"), None)) == "ok"
    assert len(seen) == 2
    assert all(isinstance(config, QueueConfig) for config in seen)
    assert seen[0] is seen[1]
