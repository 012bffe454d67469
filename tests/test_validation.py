"""Tests for raw schema validation and the self-describing pipeline."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from iglu_resolver.core.errors import (
    MalformedEnvelope,
    ResolutionError,
    SchemaMismatch,
    ValidationError,
)
from iglu_resolver.core.result import Err, Ok, ok
from iglu_resolver.core.schema_key import SchemaCriterion, SchemaKey
from iglu_resolver.repositories import (
    EmbeddedRepositoryRef,
    LookupResult,
    RepositoryRef,
    RepositoryRefConfig,
)
from iglu_resolver.resolver import Resolver
from iglu_resolver.validation import (
    JsonSchemaValidator,
    split_envelope,
    validate,
    validate_against_schema,
    validate_and_identify_schema,
    verify_schema_and_validate,
)

EVENT_URI = "iglu:com.acme/event/jsonschema/1-0-0"
EVENT_KEY = SchemaKey.parse(EVENT_URI)
EVENT_SCHEMA = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "properties": {"x": {"type": "string"}},
    "required": ["x"],
    "additionalProperties": False,
}

BEER_SCHEMA = {
    "type": "object",
    "properties": {"beers": {"type": "array", "items": {"type": "string"}}},
    "required": ["beers"],
}


@pytest.fixture
def resolver(tmp_path: Path) -> Resolver:
    """Resolver over a temporary embedded repository holding the event schema."""
    target = tmp_path / "acme" / "schemas" / EVENT_KEY.as_path()
    target.parent.mkdir(parents=True)
    target.write_text(json.dumps(EVENT_SCHEMA), encoding="utf-8")
    repo = EmbeddedRepositoryRef(
        config=RepositoryRefConfig(name="acme", instance_priority=0, vendor_prefixes=("com.acme",)),
        path="/acme",
        root=tmp_path,
    )
    return Resolver([repo], cache_ttl=60)


class CountingValidator:
    """Validator that records calls and reports no violations."""

    def __init__(self) -> None:
        self.calls = 0

    def validate(self, instance: Any, schema: Mapping[str, Any]) -> list[str]:
        self.calls += 1
        return []


class CountingRepository(RepositoryRef):
    descriptor = "counting"
    class_priority = 1

    def __init__(self) -> None:
        self.config = RepositoryRefConfig(
            name="counting", instance_priority=0, vendor_prefixes=("com.acme",)
        )
        self.calls = 0

    def lookup_schema(self, key: SchemaKey) -> LookupResult:
        self.calls += 1
        return ok(dict(EVENT_SCHEMA))


# --------------------------------------------------------------------------- #
# Raw validation
# --------------------------------------------------------------------------- #


def test_validate_against_schema_valid() -> None:
    instance = {"beers": ["ipa", "stout"]}
    result = validate_against_schema(instance, BEER_SCHEMA)
    assert isinstance(result, Ok) and result.value is instance


def test_validate_against_schema_reports_missing_property() -> None:
    result = validate_against_schema({"wine": "red"}, BEER_SCHEMA)
    assert isinstance(result, Err)
    assert result.error.messages == ("/: 'beers' is a required property",)


def test_validate_against_schema_reports_pointer_to_item() -> None:
    result = validate_against_schema({"beers": ["ipa", False]}, BEER_SCHEMA)
    assert isinstance(result, Err)
    assert result.error.messages == ("/beers/1: False is not of type 'string'",)


def test_violations_are_sorted_and_complete() -> None:
    schema = {
        "type": "object",
        "properties": {"a": {"type": "string"}, "b": {"type": "integer"}},
    }
    messages = JsonSchemaValidator().validate({"b": "2", "a": 1}, schema)
    assert messages == [
        "/a: 1 is not of type 'string'",
        "/b: '2' is not of type 'integer'",
    ]


def test_invalid_schema_is_reported_as_violation() -> None:
    result = validate_against_schema({}, {"type": "no-such-type"})
    assert isinstance(result, Err)
    assert result.error.messages[0].startswith("Invalid schema at /type")


def test_remote_ref_is_reported_not_fetched() -> None:
    schema = {"properties": {"x": {"$ref": "http://127.0.0.1:9/nope#"}}}

    result = validate_against_schema({"x": 1}, schema)

    assert isinstance(result, Err)
    assert isinstance(result.error, ValidationError)
    assert "http://127.0.0.1:9/nope" in result.error.messages[0]
    assert result.error.messages[0].startswith("Invalid schema")


def test_local_ref_still_resolves() -> None:
    schema = {
        "definitions": {"name": {"type": "string"}},
        "properties": {"x": {"$ref": "#/definitions/name"}},
    }
    assert validate_against_schema({"x": "ok"}, schema).is_ok()
    result = validate_against_schema({"x": 1}, schema)
    assert isinstance(result, Err)
    assert result.error.messages == ("/x: 1 is not of type 'string'",)


def test_remote_ref_in_resolved_schema_is_client_error(tmp_path: Path) -> None:
    key = SchemaKey.parse("iglu:com.acme/linked/jsonschema/1-0-0")
    target = tmp_path / "acme" / "schemas" / key.as_path()
    target.parent.mkdir(parents=True)
    target.write_text(
        json.dumps({"properties": {"x": {"$ref": "http://127.0.0.1:9/nope#"}}}),
        encoding="utf-8",
    )
    repo = EmbeddedRepositoryRef(
        config=RepositoryRefConfig(name="acme", instance_priority=0, vendor_prefixes=("com.acme",)),
        path="/acme",
        root=tmp_path,
    )

    result = validate({"schema": key.to_uri(), "data": {"x": 1}}, Resolver([repo], cache_ttl=0))

    assert isinstance(result, Err) and isinstance(result.error, ValidationError)


# --------------------------------------------------------------------------- #
# Self-describing pipeline
# --------------------------------------------------------------------------- #


def test_validate_returns_envelope_or_payload(resolver: Resolver) -> None:
    instance = {"schema": EVENT_URI, "data": {"x": "hello"}}

    full = validate(instance, resolver)
    payload = validate(instance, resolver, data_only=True)

    assert isinstance(full, Ok) and full.value is instance
    assert isinstance(payload, Ok) and payload.value == {"x": "hello"}


def test_validate_reports_payload_violations(resolver: Resolver) -> None:
    result = validate({"schema": EVENT_URI, "data": {"x": 1}}, resolver)

    assert isinstance(result, Err)
    assert isinstance(result.error, ValidationError)
    assert "/x: 1 is not of type 'string'" in result.error.messages


def test_validate_and_identify_schema_returns_key(resolver: Resolver) -> None:
    instance = {"schema": EVENT_URI, "data": {"x": "hello"}}

    result = validate_and_identify_schema(instance, resolver, data_only=True)

    assert result.unwrap() == (EVENT_KEY, {"x": "hello"})
    key, envelope = validate_and_identify_schema(instance, resolver).unwrap()
    assert key == EVENT_KEY and envelope is instance


def test_unresolvable_schema_is_resolution_error(resolver: Resolver) -> None:
    instance = {"schema": "iglu:com.acme/other/jsonschema/1-0-0", "data": {}}

    result = validate(instance, resolver)

    assert isinstance(result, Err)
    assert isinstance(result.error, ResolutionError)
    assert result.error.is_not_found
    assert list(result.error.value) == ["acme"]


@pytest.mark.parametrize(
    "instance",
    [
        {"schema": EVENT_URI},
        {"schema": "not-an-iglu-uri", "data": {}},
        {"schema": "iglu:com.acme/event/jsonschema/0-0-0", "data": {}},
        {"schema": EVENT_URI, "data": {}, "extra": True},
        ["schema", "data"],
    ],
)
def test_malformed_envelopes(resolver: Resolver, instance: Any) -> None:
    result = validate(instance, resolver)
    assert isinstance(result, Err)
    assert isinstance(result.error, MalformedEnvelope)


def test_split_envelope_rejects_bad_key() -> None:
    result = split_envelope({"schema": "iglu:com.acme/event/jsonschema/1-0", "data": 1})
    assert isinstance(result, Err) and isinstance(result.error, MalformedEnvelope)


def test_custom_validator_is_used_for_payload(resolver: Resolver) -> None:
    counting = CountingValidator()
    result = validate({"schema": EVENT_URI, "data": {"x": 1}}, resolver, validator=counting)
    # The counting validator accepts everything.
    assert result.is_ok()
    assert counting.calls == 1


# --------------------------------------------------------------------------- #
# Criterion verification
# --------------------------------------------------------------------------- #


def test_verify_accepts_matching_criterion(resolver: Resolver) -> None:
    criterion = SchemaCriterion.parse("iglu:com.acme/event/jsonschema/1-*-*")
    instance = {"schema": EVENT_URI, "data": {"x": "ok"}}

    result = verify_schema_and_validate(instance, criterion, resolver, data_only=True)

    assert result.unwrap() == {"x": "ok"}


def test_criterion_mismatch_touches_neither_resolver_nor_validator() -> None:
    repo = CountingRepository()
    counting = CountingValidator()
    resolver = Resolver([repo], cache_ttl=60)
    criterion = SchemaCriterion.parse("iglu:com.acme/event/jsonschema/2-*-*")

    result = verify_schema_and_validate(
        {"schema": EVENT_URI, "data": {"x": "ok"}},
        criterion,
        resolver,
        validator=counting,
    )

    assert isinstance(result, Err)
    assert result.error == SchemaMismatch(criterion, EVENT_KEY)
    assert (repo.calls, counting.calls) == (0, 0)


def test_verify_still_validates_payload(resolver: Resolver) -> None:
    criterion = SchemaCriterion("com.acme", "event", "jsonschema", 1)
    result = verify_schema_and_validate(
        {"schema": EVENT_URI, "data": {"y": "?"}}, criterion, resolver
    )
    assert isinstance(result, Err) and isinstance(result.error, ValidationError)
