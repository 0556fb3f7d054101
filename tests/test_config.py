"""Tests for LoadConfig validation and YAML settings loading."""

from pathlib import Path

import pytest

from loadgen.config import (
    DEFAULT_ENDPOINTS,
    DEFAULT_STATUS_CODES,
    LoadConfig,
    RequestCatalog,
    load_settings,
    resource_attributes,
)


def test_defaults() -> None:
    config = LoadConfig()
    assert (config.min_interval, config.max_interval, config.batch_size) == (100, 1000, 1)


@pytest.mark.parametrize("value", [9, 0, -5, "abc", None, True, float("nan"), [10]])
def test_invalid_min_interval_ignored(value) -> None:
    config = LoadConfig()
    assert config.update({"min_interval": value}) == {}
    assert config.min_interval == 100


def test_min_interval_floor_is_ten() -> None:
    config = LoadConfig()
    assert config.update({"min_interval": 10}) == {"min_interval": 10}
    assert config.min_interval == 10


def test_numeric_strings_accepted() -> None:
    config = LoadConfig()
    config.update({"min_interval": " 250 ", "max_interval": "900", "batch_size": "3"})
    assert (config.min_interval, config.max_interval, config.batch_size) == (250, 900, 3)


def test_max_below_min_rejected() -> None:
    config = LoadConfig(min_interval=200, max_interval=1000)
    assert config.update({"max_interval": 150}) == {}
    assert config.max_interval == 1000


def test_max_checked_against_new_min() -> None:
    config = LoadConfig(min_interval=100, max_interval=1000)
    applied = config.update({"min_interval": 500, "max_interval": 400})
    assert applied == {"min_interval": 500}
    assert (config.min_interval, config.max_interval) == (500, 1000)


def test_min_above_current_max_rejected() -> None:
    """A min that would exceed max is dropped; a max valid against the old min still applies."""
    config = LoadConfig(min_interval=100, max_interval=1000)
    assert config.update({"min_interval": 2000}) == {}
    assert (config.min_interval, config.max_interval) == (100, 1000)

    applied = config.update({"min_interval": 2000, "max_interval": 1500})
    assert applied == {"max_interval": 1500}
    assert (config.min_interval, config.max_interval) == (100, 1500)


def test_min_and_max_raised_together() -> None:
    config = LoadConfig()
    assert config.update({"min_interval": 2000, "max_interval": 3000}) == {
        "min_interval": 2000,
        "max_interval": 3000,
    }


def test_equal_bounds_allowed() -> None:
    config = LoadConfig()
    config.update({"min_interval": 10, "max_interval": 10})
    assert (config.min_interval, config.max_interval) == (10, 10)


@pytest.mark.parametrize("value", [0, -1, "x", None])
def test_invalid_batch_size_ignored(value) -> None:
    config = LoadConfig(batch_size=2)
    config.update({"batch_size": value})
    assert config.batch_size == 2


def test_unknown_fields_ignored() -> None:
    config = LoadConfig()
    assert config.update({"rate": 5}) == {}


def test_invariants_hold_over_many_updates() -> None:
    config = LoadConfig()
    candidates = [
        {"min_interval": m, "max_interval": x, "batch_size": b}
        for m in (-1, 5, 10, 50, 500, 5000)
        for x in (0, 9, 40, 600, 10000)
        for b in (0, 1, 7)
    ]
    for candidate in candidates:
        config.update(candidate)
        assert config.min_interval >= 10
        assert config.max_interval >= config.min_interval
        assert config.batch_size >= 1


def test_load_settings_missing_file_uses_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "missing.yaml")
    assert settings.service_name == "load-testing-web"
    assert settings.catalog == RequestCatalog()
    assert settings.collector_port == 14318


def test_load_settings_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        """
service:
  name: checkout-load
generator:
  min_interval: 20
  max_interval: 40
  batch_size: 2
catalog:
  endpoints: [/x, /y]
  status_codes: [200, "503"]
  duration_ms: {min: 5, max: 15}
collector:
  port: 9999
""",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.service_name == "checkout-load"
    assert settings.service_version == "1.0.0"
    assert settings.generator.describe() == "interval=20-40ms, batch=2"
    assert settings.catalog.endpoints == ("/x", "/y")
    assert settings.catalog.status_codes == (200, 503)
    assert (settings.catalog.duration_min_ms, settings.catalog.duration_max_ms) == (5, 15)
    assert settings.catalog.methods == ("GET", "POST", "PUT", "DELETE")
    assert settings.collector_port == 9999
    assert resource_attributes(settings)["service.name"] == "checkout-load"


def test_load_settings_invalid_values_fall_back(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        """
generator: {min_interval: 1}
catalog:
  endpoints: "not-a-list"
  status_codes: []
  duration_ms: {min: 100, max: 10}
collector: {port: 70000}
""",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.generator.min_interval == 100
    assert settings.catalog.endpoints == DEFAULT_ENDPOINTS
    assert settings.catalog.status_codes == DEFAULT_STATUS_CODES
    assert (settings.catalog.duration_min_ms, settings.catalog.duration_max_ms) == (50, 549)
    assert settings.collector_port == 14318


def test_load_settings_unparseable_yaml(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("service: [unclosed", encoding="utf-8")
    assert load_settings(path).service_name == "load-testing-web"


def test_bundled_config_matches_defaults() -> None:
    """resource/config/config.yaml mirrors the built-in catalog."""
    settings = load_settings()
    assert settings.catalog == RequestCatalog()
    assert settings.generator.describe() == LoadConfig().describe()
