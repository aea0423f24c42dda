"""API Gateway proxy integration processor."""

from __future__ import annotations

import base64
import json
import logging
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable, Dict, List, Union
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field

from lambda_event_router.adapters.aws.common import call_action, coerce_config
from lambda_event_router.core.outcome import Completed, Outcome, Skipped

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,PATCH,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}

_PARAM_SEGMENT = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)$")


class ProxyRoute(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: Union[str, List[str]] = Field(description="HTTP verb, list of verbs, or '*'.")
    path: str = Field(description="Path template; ':name' segments become path parameters.")
    action: Callable[..., Any] = Field(description="Called as action(request, context).")

    def accepts(self, method: str) -> bool:
        methods = [self.method] if isinstance(self.method, str) else self.method
        return any(m == "*" or m.upper() == method for m in methods)


class ProxyIntegrationConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    routes: List[ProxyRoute] = Field(default_factory=list)
    cors: bool = False
    default_headers: Dict[str, str] = Field(default_factory=dict)
    error_mapping: Dict[str, int] = Field(
        default_factory=dict,
        description="Exception class name or 'reason' attribute -> HTTP status code.",
    )
    debug: bool = False


@lru_cache(maxsize=256)
def _compile_path(template: str) -> re.Pattern:
    parts = []
    for segment in template.strip("/").split("/"):
        param = _PARAM_SEGMENT.match(segment)
        parts.append(f"(?P<{param.group(1)}>[^/]+)" if param else re.escape(segment))
    return re.compile("^/" + "/".join(parts) + "/?$")


def _match_path(template: str, path: str) -> dict[str, str] | None:
    found = _compile_path(template).match(path)
    if found is None:
        return None
    return {name: unquote(value) for name, value in found.groupdict().items()}


def _header(headers: Mapping[str, Any] | None, name: str) -> str | None:
    for key, value in (headers or {}).items():
        if key.lower() == name.lower():
            return value
    return None


def _decode_body(event: Mapping[str, Any]) -> Any:
    body = event.get("body")
    if not isinstance(body, str) or not body:
        return body
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    content_type = _header(event.get("headers"), "content-type") or ""
    if "application/json" in content_type.lower():
        return json.loads(body)
    return body


def _json_response(status: int, payload: Any, headers: Dict[str, str]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **headers},
        "body": json.dumps(payload),
    }


def _base_headers(config: ProxyIntegrationConfig) -> Dict[str, str]:
    headers = dict(CORS_HEADERS) if config.cors else {}
    headers.update(config.default_headers)
    return headers


def _to_response(result: Any, config: ProxyIntegrationConfig) -> dict[str, Any]:
    headers = _base_headers(config)
    if isinstance(result, Mapping) and "statusCode" in result:
        response = dict(result)
        response["headers"] = {**headers, **(result.get("headers") or {})}
        return response
    return _json_response(200, result, headers)


def _error_status(error: Exception, config: ProxyIntegrationConfig) -> tuple[str, int] | None:
    reason = getattr(error, "reason", None)
    for key in (reason, type(error).__name__):
        if isinstance(key, str) and key in config.error_mapping:
            return key, config.error_mapping[key]
    return None


config_model = ProxyIntegrationConfig


async def process(config: Any, event: Any, context: Any) -> Outcome:
    if not isinstance(event, Mapping) or not event.get("httpMethod"):
        return Skipped("not an API Gateway proxy event")

    proxy_config = coerce_config(ProxyIntegrationConfig, config)
    headers = _base_headers(proxy_config)
    method = str(event["httpMethod"]).upper()
    path = event.get("path") or "/"

    if proxy_config.cors and method == "OPTIONS":
        return Completed({"statusCode": 200, "headers": headers, "body": ""})

    for route in proxy_config.routes:
        if not route.accepts(method):
            continue
        params = _match_path(route.path, path)
        if params is None:
            continue

        request = dict(event)
        request["paths"] = params
        try:
            request["body"] = _decode_body(event)
        except ValueError:
            return Completed(
                _json_response(400, {"error": "BadRequest", "message": "Malformed request body"}, headers)
            )

        try:
            result = await call_action(route.action, request, context)
        except Exception as exc:
            mapped = _error_status(exc, proxy_config)
            if mapped is None:
                raise
            reason, status = mapped
            logger.debug("Mapped %s to HTTP %d", reason, status)
            return Completed(_json_response(status, {"error": reason, "message": str(exc)}, headers))
        return Completed(_to_response(result, proxy_config))

    if proxy_config.debug:
        logger.info("No route matches %s %s", method, path)
    return Completed(
        _json_response(
            404,
            {
                "error": "NotFound",
                "message": f"Could not find matching action for {path} and method {method}",
            },
            headers,
        )
    )
