"""Schema identifiers: SchemaVer, SchemaKey and SchemaCriterion.

A schema is addressed by ``vendor/name/format/version`` where the version is a
SchemaVer triple ``MODEL-REVISION-ADDITION``. On the wire keys travel as Iglu
URIs::

    iglu:com.acme/event/jsonschema/1-0-0

Criteria use the same shape with ``*`` in place of unknown version parts
(``iglu:com.acme/event/jsonschema/1-*-*``) and match a family of keys.

Notes
-----
- All three types are frozen dataclasses: hashable, comparable and safe to use
  as cache keys.
- Parsing failures raise :class:`MalformedKey`; callers that handle untrusted
  input (the validation pipeline) convert it into a ``Result``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

IGLU_PREFIX = "iglu:"

_VENDOR = r"[a-zA-Z0-9\-_.]+"
_NAME = r"[a-zA-Z0-9\-_]+"
_FORMAT = r"[a-zA-Z0-9\-_]+"
_MODEL = r"[1-9][0-9]*"
_PART = r"0|[1-9][0-9]*"

_SCHEMAVER_RE = re.compile(rf"^({_MODEL})-({_PART})-({_PART})$")
_PATH_RE = re.compile(rf"^({_VENDOR})/({_NAME})/({_FORMAT})/([^/]+)$")
_CRITERION_VER_RE = re.compile(rf"^({_MODEL}|\*)-({_PART}|\*)-({_PART}|\*)$")


class MalformedKey(ValueError):
    """Raised when a string is not a valid schema key, version or criterion."""


def _checked_vendor(vendor: str) -> str:
    # Keys become path segments; a vendor of only dots would escape "schemas/".
    if not vendor.strip("."):
        raise MalformedKey(f"Vendor must not consist of dots only: {vendor!r}")
    return vendor


@dataclass(frozen=True, slots=True, order=True)
class SchemaVer:
    """Semantic schema version ``MODEL-REVISION-ADDITION``.

    Ordering is lexicographic on ``(model, revision, addition)``.
    """

    model: int
    revision: int
    addition: int

    @classmethod
    def parse(cls, text: str) -> SchemaVer:
        """Parse ``"1-0-2"`` into a :class:`SchemaVer`."""
        match = _SCHEMAVER_RE.match(text)
        if match is None:
            raise MalformedKey(f"Invalid SchemaVer: {text!r}")
        model, revision, addition = (int(part) for part in match.groups())
        return cls(model, revision, addition)

    def as_string(self) -> str:
        return f"{self.model}-{self.revision}-{self.addition}"

    def is_compatible(self, other: SchemaVer) -> bool:
        """Two versions sharing a model are compatible variants of one schema."""
        return self.model == other.model

    def __str__(self) -> str:
        return self.as_string()


@dataclass(frozen=True, slots=True)
class SchemaKey:
    """Globally unique identifier of one schema document."""

    vendor: str
    name: str
    format: str
    version: SchemaVer

    @classmethod
    def parse(cls, uri: str) -> SchemaKey:
        """Parse an Iglu URI (``iglu:vendor/name/format/M-R-A``)."""
        if not uri.startswith(IGLU_PREFIX):
            raise MalformedKey(f"Schema URI must start with {IGLU_PREFIX!r}: {uri!r}")
        return cls.from_path(uri[len(IGLU_PREFIX) :])

    @classmethod
    def from_path(cls, path: str) -> SchemaKey:
        """Parse the bare ``vendor/name/format/M-R-A`` form."""
        match = _PATH_RE.match(path)
        if match is None:
            raise MalformedKey(f"Not a vendor/name/format/version path: {path!r}")
        vendor, name, fmt, version = match.groups()
        return cls(_checked_vendor(vendor), name, fmt, SchemaVer.parse(version))

    def as_path(self) -> str:
        return f"{self.vendor}/{self.name}/{self.format}/{self.version.as_string()}"

    def to_uri(self) -> str:
        """Inverse of :meth:`parse`."""
        return IGLU_PREFIX + self.as_path()

    def __str__(self) -> str:
        return self.to_uri()


def to_path(base_path: str, key: SchemaKey) -> str:
    """Location of ``key`` below a repository root: ``{base}/schemas/{v}/{n}/{f}/{ver}``."""
    return f"{base_path.rstrip('/')}/schemas/{key.as_path()}"


@dataclass(frozen=True, slots=True)
class SchemaCriterion:
    """Matcher over :class:`SchemaKey`; ``None`` version parts are wildcards."""

    vendor: str
    name: str
    format: str
    model: int | None = None
    revision: int | None = None
    addition: int | None = None

    def __post_init__(self) -> None:
        parts = (self.model, self.revision, self.addition)
        # A concrete part may not follow a wildcard ("1-*-0").
        seen_wildcard = False
        for part in parts:
            if part is None:
                seen_wildcard = True
            elif seen_wildcard:
                raise MalformedKey(f"Concrete version part after wildcard in {parts!r}")

    @classmethod
    def parse(cls, text: str) -> SchemaCriterion:
        """Parse ``iglu:vendor/name/format/1-*-*``."""
        if not text.startswith(IGLU_PREFIX):
            raise MalformedKey(f"Criterion must start with {IGLU_PREFIX!r}: {text!r}")
        match = _PATH_RE.match(text[len(IGLU_PREFIX) :])
        if match is None:
            raise MalformedKey(f"Invalid schema criterion: {text!r}")
        vendor, name, fmt, version = match.groups()
        _checked_vendor(vendor)
        ver_match = _CRITERION_VER_RE.match(version)
        if ver_match is None:
            raise MalformedKey(f"Invalid criterion version: {version!r}")
        model, revision, addition = (None if p == "*" else int(p) for p in ver_match.groups())
        return cls(vendor, name, fmt, model, revision, addition)

    def matches(self, key: SchemaKey) -> bool:
        """True iff every concrete field equals the corresponding key field."""
        if (self.vendor, self.name, self.format) != (key.vendor, key.name, key.format):
            return False
        expected = (self.model, self.revision, self.addition)
        actual = (key.version.model, key.version.revision, key.version.addition)
        return all(e is None or e == a for e, a in zip(expected, actual, strict=True))

    def as_string(self) -> str:
        version = "-".join(
            "*" if part is None else str(part)
            for part in (self.model, self.revision, self.addition)
        )
        return f"{IGLU_PREFIX}{self.vendor}/{self.name}/{self.format}/{version}"

    def __str__(self) -> str:
        return self.as_string()


__all__ = [
    "IGLU_PREFIX",
    "MalformedKey",
    "SchemaCriterion",
    "SchemaKey",
    "SchemaVer",
    "to_path",
]
