"""Validation entry points.

- :func:`validate_against_schema`: raw instance against an explicit schema.
- :func:`validate`, :func:`validate_and_identify_schema`,
  :func:`verify_schema_and_validate`: the self-describing pipeline,
  implemented in ``self_describing.py``. Each takes the resolver explicitly.
"""

from __future__ import annotations

from .self_describing import (
    SELF_DESCRIBING_KEY,
    self_describing_schema,
    split_envelope,
    validate,
    validate_and_identify_schema,
    validate_as_self_describing,
    verify_schema_and_validate,
)
from .validator import (
    DEFAULT_VALIDATOR,
    JsonSchemaValidator,
    SchemaValidator,
    validate_against_schema,
)

__all__ = [
    "DEFAULT_VALIDATOR",
    "JsonSchemaValidator",
    "SELF_DESCRIBING_KEY",
    "SchemaValidator",
    "self_describing_schema",
    "split_envelope",
    "validate",
    "validate_against_schema",
    "validate_and_identify_schema",
    "validate_as_self_describing",
    "verify_schema_and_validate",
]
