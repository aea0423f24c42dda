import pytest

from lambda_event_router.core import (
    Completed,
    Failed,
    InvalidRouteConfig,
    RouteConfig,
    Skipped,
    coerce_outcome,
    coerce_route_config,
)


def _recover(error, event, context):
    return "recovered"


def test_from_mapping_separates_reserved_keys() -> None:
    config = RouteConfig.from_mapping(
        {"queue": {"q": 1}, "debug": True, "http_proxy": {"h": 2}, "onError": _recover}
    )

    assert config.processors == {"queue": {"q": 1}, "http_proxy": {"h": 2}}
    assert list(config.processors) == ["queue", "http_proxy"]
    assert config.debug is True
    assert config.on_error is _recover


def test_from_mapping_defaults() -> None:
    config = RouteConfig.from_mapping({"queue": {}, "debug": None})
    assert config.debug is False
    assert config.on_error is None


def test_route_config_rejects_reserved_processor_names() -> None:
    with pytest.raises(ValueError):
        RouteConfig(processors={"debug": {}})


def test_coerce_route_config_passes_instances_through() -> None:
    config = RouteConfig(processors={"queue": {}})
    assert coerce_route_config(config) is config


def test_coerce_route_config_wraps_validation_errors() -> None:
    with pytest.raises(InvalidRouteConfig):
        coerce_route_config({"queue": {}, "on_error": "not callable"})


def test_coerce_route_config_rejects_non_mappings() -> None:
    with pytest.raises(InvalidRouteConfig):
        coerce_route_config(["queue"])  # type: ignore[arg-type]


def test_route_config_is_frozen() -> None:
    config = RouteConfig()
    with pytest.raises(ValueError):
        config.debug = True  # type: ignore[misc]


def test_coerce_outcome() -> None:
    failed = Failed(RuntimeError("x"))

    assert coerce_outcome(None) == Skipped()
    assert coerce_outcome({}) == Skipped()
    assert coerce_outcome(False) == Skipped()
    assert coerce_outcome({"a": 1}) == Completed({"a": 1})
    assert coerce_outcome(failed) is failed
    assert coerce_outcome(Completed(None)) == Completed(None)
