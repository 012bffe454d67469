"""Core value types shared by the resolver and the validation pipeline.

    from iglu_resolver.core.schema_key import SchemaKey, SchemaCriterion
    from iglu_resolver.core.result import Result, ok, err
    from iglu_resolver.core.settings import settings, load_settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
