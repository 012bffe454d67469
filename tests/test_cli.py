# tests/test_cli.py
"""
Tests for the iglu-resolver command-line interface (CLI).

Scope
-----
These tests verify the interaction layer provided by Typer:
1.  **Command Registration**: `resolve`, `validate` and `--help` work.
2.  **Argument Validation**: Typer's `exists=True` checks for input files.
3.  **Exit Codes**: 0 success, 1 invalid input, 2 not found, 3 repository failure.
4.  **Configuration**: `--config` wires configured repositories in; the HTTP
    backend's `_get` seam is patched so no network is touched.

We use `typer.testing.CliRunner` to invoke the app in-process, avoiding the overhead
of spawning subprocesses.
"""

from __future__ import annotations

import json
import urllib.error
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from iglu_resolver.cli import app
from iglu_resolver.core.settings import load_settings
from iglu_resolver.repositories import HttpRepositoryRef

SELF_DESC_URI = "iglu:com.snowplowanalytics.self-desc/instance-iglu-only/jsonschema/1-0-0"
CONFIG_URI = "iglu:com.snowplowanalytics.iglu/resolver-config/jsonschema/1-0-1"


@pytest.fixture  # type: ignore[misc]
def runner(monkeypatch: Any) -> Iterator[CliRunner]:
    """
    Create a fresh CliRunner for each test.

    IGLU_RESOLVER_CONFIG is removed so only the bundled repository is used
    unless a test passes `--config`.
    """
    monkeypatch.delenv("IGLU_RESOLVER_CONFIG", raising=False)
    load_settings.cache_clear()
    yield CliRunner()
    load_settings.cache_clear()


def _write_json(path: Path, document: Any) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _http_config(tmp_path: Path) -> Path:
    return _write_json(
        tmp_path / "resolver.json",
        {
            "schema": CONFIG_URI,
            "data": {
                "cacheSize": 500,
                "cacheTtl": 60,
                "repositories": [
                    {
                        "name": "Acme registry",
                        "priority": 0,
                        "vendorPrefixes": ["com.acme"],
                        "connection": {"http": {"uri": "https://registry.acme.com"}},
                    }
                ],
            },
        },
    )


def _patch_get(monkeypatch: Any, behaviour: Any) -> None:
    def fake_get(self: HttpRepositoryRef, *, url: str, headers: Mapping[str, str]) -> bytes:
        if isinstance(behaviour, BaseException):
            raise behaviour
        return json.dumps(behaviour).encode("utf-8")

    monkeypatch.setattr(HttpRepositoryRef, "_get", fake_get)


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    """Invoking --help should print usage instructions and exit 0."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    assert "resolve" in result.output
    assert "validate" in result.output


# --------------------------------------------------------------------------- #
# resolve
# --------------------------------------------------------------------------- #


def test_resolve_bundled_schema(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", SELF_DESC_URI])
    assert result.exit_code == 0, f"CLI Failed with Output:\n{result.output}"
    assert "instance-iglu-only" in result.output


def test_resolve_unknown_schema_exits_2(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "iglu:com.acme/unknown/jsonschema/1-0-0"])
    assert result.exit_code == 2, result.output
    assert "ResolutionError" in result.output


def test_resolve_malformed_key_exits_1(runner: CliRunner) -> None:
    result = runner.invoke(app, ["resolve", "com.acme/event/jsonschema/1-0-0"])
    assert result.exit_code == 1, result.output
    assert "Malformed schema key" in result.output


def test_resolve_through_configured_http_repository(
    runner: CliRunner, tmp_path: Path, monkeypatch: Any
) -> None:
    _patch_get(monkeypatch, {"type": "object", "description": "acme event"})
    config = _http_config(tmp_path)

    result = runner.invoke(
        app, ["resolve", "iglu:com.acme/event/jsonschema/1-0-0", "--config", str(config)]
    )

    assert result.exit_code == 0, result.output
    assert "acme event" in result.output


def test_resolve_with_unreachable_repository_exits_3(
    runner: CliRunner, tmp_path: Path, monkeypatch: Any
) -> None:
    _patch_get(monkeypatch, urllib.error.URLError("Connection refused"))
    config = _http_config(tmp_path)

    result = runner.invoke(
        app, ["resolve", "iglu:com.acme/event/jsonschema/1-0-0", "-c", str(config)]
    )

    assert result.exit_code == 3, result.output
    assert "Acme registry" in result.output


def test_invalid_config_file_exits_1(runner: CliRunner, tmp_path: Path) -> None:
    config = _write_json(tmp_path / "resolver.json", {"schema": CONFIG_URI, "data": {}})
    result = runner.invoke(app, ["resolve", SELF_DESC_URI, "--config", str(config)])
    assert result.exit_code == 1, result.output
    assert "Invalid resolver configuration" in result.output


# --------------------------------------------------------------------------- #
# validate
# --------------------------------------------------------------------------- #


def test_validate_fails_on_missing_file(runner: CliRunner) -> None:
    """Typer should enforce `exists=True` for the input file argument."""
    result = runner.invoke(app, ["validate", "ghost.json"])
    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_validate_valid_instance(runner: CliRunner, tmp_path: Path) -> None:
    instance = _write_json(
        tmp_path / "config.json",
        {"schema": CONFIG_URI, "data": {"cacheSize": 10, "repositories": []}},
    )

    result = runner.invoke(app, ["validate", str(instance), "--data-only"])

    assert result.exit_code == 0, result.output
    assert "Valid" in result.output
    assert "cacheSize" in result.output


def test_validate_invalid_instance_exits_1(runner: CliRunner, tmp_path: Path) -> None:
    instance = _write_json(
        tmp_path / "config.json",
        {"schema": CONFIG_URI, "data": {"cacheSize": -1, "repositories": []}},
    )

    result = runner.invoke(app, ["validate", str(instance)])

    assert result.exit_code == 1, result.output
    assert "ValidationError" in result.output


def test_validate_criterion_mismatch_exits_1(runner: CliRunner, tmp_path: Path) -> None:
    instance = _write_json(
        tmp_path / "config.json",
        {"schema": CONFIG_URI, "data": {"cacheSize": 10, "repositories": []}},
    )
    criterion = "iglu:com.snowplowanalytics.iglu/resolver-config/jsonschema/2-*-*"

    result = runner.invoke(app, ["validate", str(instance), "--criterion", criterion])

    assert result.exit_code == 1, result.output
    assert "SchemaMismatch" in result.output


def test_validate_rejects_non_json(runner: CliRunner, tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    result = runner.invoke(app, ["validate", str(broken)])
    assert result.exit_code == 1
    assert "JSON" in result.output
