"""Unit tests for lookup history and the client error family."""

from __future__ import annotations

from datetime import UTC, datetime

from iglu_resolver.core.errors import (
    ClientFailure,
    ConnectionFailed,
    LookupHistory,
    NotFound,
    ResolutionError,
    SchemaMismatch,
    ServerFailure,
    ValidationError,
)
from iglu_resolver.core.schema_key import SchemaCriterion, SchemaKey

KEY = SchemaKey.parse("iglu:com.acme/event/jsonschema/1-0-0")


def test_history_record_is_immutable_and_counts() -> None:
    """`record` returns a new value with the error added and attempts bumped."""
    empty = LookupHistory()
    when = datetime(2026, 1, 1, tzinfo=UTC)
    once = empty.record(NotFound(), when)
    twice = once.record(NotFound(), when)

    assert empty.attempts == 0 and empty.errors == frozenset()
    assert once.attempts == 1 and once.last_attempt == when
    # Same error twice stays a single set member.
    assert twice.attempts == 2 and twice.errors == frozenset({NotFound()})


def test_registry_errors_compare_by_value() -> None:
    assert NotFound() == NotFound()
    assert ServerFailure("boom") == ServerFailure("boom")
    assert ServerFailure("boom") != ClientFailure("boom")
    assert len({ConnectionFailed("a"), ConnectionFailed("a"), NotFound()}) == 2


def test_resolution_error_is_not_found_only_when_all_not_found() -> None:
    absent = LookupHistory().record(NotFound())
    down = LookupHistory().record(ConnectionFailed("refused"))

    assert ResolutionError(KEY, {"a": absent, "b": absent}).is_not_found
    assert not ResolutionError(KEY, {"a": absent, "b": down}).is_not_found
    assert not ResolutionError(KEY, {"a": absent.record(ServerFailure("500"))}).is_not_found


def test_resolution_error_value_is_read_only_snapshot() -> None:
    source = {"a": LookupHistory().record(NotFound())}
    error = ResolutionError(KEY, source)
    source["b"] = LookupHistory()
    assert list(error.value) == ["a"]
    assert "iglu:com.acme/event/jsonschema/1-0-0" in error.message


def test_messages_are_human_readable() -> None:
    criterion = SchemaCriterion.parse("iglu:com.acme/event/jsonschema/2-*-*")
    mismatch = SchemaMismatch(criterion, KEY)
    assert mismatch.message == (
        "Verifying schema as iglu:com.acme/event/jsonschema/2-*-* failed: "
        "found iglu:com.acme/event/jsonschema/1-0-0"
    )
    assert ValidationError(("/x: bad", "/y: worse")).message == "/x: bad; /y: worse"
