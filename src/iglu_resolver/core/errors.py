"""Error taxonomy for schema resolution and validation.

Two layers
----------
1. **Registry errors** describe why *one* repository failed to produce a
   schema: `NotFound`, `ConnectionFailed`, `ClientFailure`, `ServerFailure`,
   `ParseFailure`. They are recorded in a :class:`LookupHistory` and never
   abort a resolution sweep.
2. **Client errors** are what callers of the resolver and the validation
   pipeline receive inside an ``Err``:

   - :class:`ResolutionError`   every repository was tried, none had the schema
   - :class:`ValidationError`   the schema was found, the instance violates it
   - :class:`MalformedEnvelope` the instance is not a usable self-describing JSON
   - :class:`SchemaMismatch`    the instance's key fails a caller's criterion

All types are frozen dataclasses so they can be stored in sets, compared in
tests and shared between threads without copying.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType

from .schema_key import SchemaCriterion, SchemaKey

# --------------------------------------------------------------------------- #
# Per-repository failures
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegistryError:
    """Base class of the closed set of per-repository failures."""

    @property
    def message(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class NotFound(RegistryError):
    """The repository answered but does not hold the schema."""


@dataclass(frozen=True, slots=True)
class ConnectionFailed(RegistryError):
    """The repository could not be reached (refused, DNS, timeout)."""

    reason: str = ""

    @property
    def message(self) -> str:
        return f"ConnectionFailed: {self.reason}" if self.reason else "ConnectionFailed"


@dataclass(frozen=True, slots=True)
class ClientFailure(RegistryError):
    """The repository rejected the request (4xx other than 404, unreadable resource)."""

    reason: str

    @property
    def message(self) -> str:
        return f"ClientFailure: {self.reason}"


@dataclass(frozen=True, slots=True)
class ServerFailure(RegistryError):
    """The repository failed internally (5xx)."""

    reason: str

    @property
    def message(self) -> str:
        return f"ServerFailure: {self.reason}"


@dataclass(frozen=True, slots=True)
class ParseFailure(RegistryError):
    """The repository returned something that is not a JSON schema document."""

    reason: str

    @property
    def message(self) -> str:
        return f"ParseFailure: {self.reason}"


@dataclass(frozen=True, slots=True)
class LookupHistory:
    """Record of failed attempts of one repository for one key.

    Values are immutable; :meth:`record` returns the updated history.
    """

    errors: frozenset[RegistryError] = frozenset()
    attempts: int = 0
    last_attempt: datetime | None = None

    def record(self, error: RegistryError, when: datetime | None = None) -> LookupHistory:
        return LookupHistory(
            errors=self.errors | {error},
            attempts=self.attempts + 1,
            last_attempt=when or datetime.now(UTC),
        )

    @property
    def is_not_found(self) -> bool:
        return all(isinstance(e, NotFound) for e in self.errors)


# --------------------------------------------------------------------------- #
# Caller-facing errors
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ClientError:
    """Base class of everything returned inside an ``Err`` to callers."""

    @property
    def message(self) -> str:  # pragma: no cover - overridden by every variant
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class ResolutionError(ClientError):
    """No repository produced the schema; carries per-repository history.

    ``value`` maps the repository name to its :class:`LookupHistory`.
    """

    key: SchemaKey
    value: Mapping[str, LookupHistory] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", MappingProxyType(dict(self.value)))

    @property
    def is_not_found(self) -> bool:
        """True iff every recorded error of every repository is `NotFound`."""
        return all(history.is_not_found for history in self.value.values())

    @property
    def message(self) -> str:
        details = "; ".join(
            f"{repo}: {', '.join(sorted(e.message for e in history.errors))}"
            for repo, history in self.value.items()
        )
        return f"Could not resolve {self.key.to_uri()} ({details or 'no repositories'})"


@dataclass(frozen=True, slots=True)
class ValidationError(ClientError):
    """The instance violates its schema; ``messages`` is the validator output, verbatim."""

    messages: tuple[str, ...]

    @property
    def message(self) -> str:
        return "; ".join(self.messages)


@dataclass(frozen=True, slots=True)
class MalformedEnvelope(ClientError):
    """The instance lacks ``schema``/``data`` or its ``schema`` is not a key."""

    reason: str

    @property
    def message(self) -> str:
        return f"Malformed self-describing JSON: {self.reason}"


@dataclass(frozen=True, slots=True)
class SchemaMismatch(ClientError):
    """The envelope's key does not satisfy the caller's criterion."""

    criterion: SchemaCriterion
    key: SchemaKey

    @property
    def message(self) -> str:
        return (
            f"Verifying schema as {self.criterion.as_string()} failed: "
            f"found {self.key.to_uri()}"
        )


__all__ = [
    "ClientError",
    "ClientFailure",
    "ConnectionFailed",
    "LookupHistory",
    "MalformedEnvelope",
    "NotFound",
    "ParseFailure",
    "RegistryError",
    "ResolutionError",
    "SchemaMismatch",
    "ServerFailure",
    "ValidationError",
]
