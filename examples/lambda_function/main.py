from __future__ import annotations

import re
from typing import Any

from lambda_event_router import handler
from lambda_event_router.adapters.aws import ProxyIntegrationConfig, ProxyRoute, QueueConfig, QueueRoute


class NotFoundError(Exception):
    reason = "NotFound"


# In-memory users (demo only)
USERS: dict[str, dict[str, Any]] = {
    "1": {"id": "1", "name": "Ada"},
    "2": {"id": "2", "name": "Grace"},
}


def get_user(request: dict[str, Any], context: Any) -> dict[str, Any]:
    user = USERS.get(request["paths"]["user_id"])
    if user is None:
        raise NotFoundError(f"User {request['paths']['user_id']} not found")
    return user


async def create_user(request: dict[str, Any], context: Any) -> dict[str, Any]:
    body = request["body"] or {}
    user_id = str(len(USERS) + 1)
    USERS[user_id] = {"id": user_id, "name": body.get("name", "")}
    return {"statusCode": 201, "body": user_id}


def import_users(messages: list[str], context: Any) -> dict[str, Any]:
    return {"imported": len(messages)}


def report_error(error: Exception, event: Any, context: Any) -> dict[str, Any] | None:
    # Only HTTP callers get a friendly response; queue failures are retried by SQS.
    if isinstance(event, dict) and "httpMethod" in event:
        return {"statusCode": 500, "body": "Internal error"}
    return None


lambda_handler = handler(
    {
        "http_proxy": ProxyIntegrationConfig(
            cors=True,
            error_mapping={"NotFound": 404},
            routes=[
                ProxyRoute(method="GET", path="/users/:user_id", action=get_user),
                ProxyRoute(method="POST", path="/users", action=create_user),
            ],
        ),
        "queue": QueueConfig(
            routes=[QueueRoute(source=re.compile(r":user-imports$"), action=import_users)],
        ),
        "debug": False,
        "on_error": report_error,
    }
)
