"""Schema resolution: the cached, priority-ordered lookup engine.

Currently exposed:

- :class:`Resolver`: multi-repository lookup with caching and failure
  aggregation, implemented in ``resolver.py``.
- :class:`SchemaCache`: the lock-guarded cache/history container.
- :class:`ResolverConfig`: the self-describing configuration document.
"""

from __future__ import annotations

from .cache import CacheEntry, SchemaCache
from .config import RESOLVER_CONFIG_CRITERION, ResolverConfig, ResolverConfigError
from .resolver import Resolver

__all__ = [
    "CacheEntry",
    "RESOLVER_CONFIG_CRITERION",
    "Resolver",
    "ResolverConfig",
    "ResolverConfigError",
    "SchemaCache",
]
