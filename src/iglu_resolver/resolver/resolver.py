"""
Schema resolver: priority-ordered, cached lookup across repository refs.

Flow Overview
-------------
1. **Cache**: a live cache entry for the key is returned immediately; no
   repository and no history is consulted.
2. **Order**: repositories are sorted by class priority (embedded before
   HTTP), then vendor-prefix match (matching refs first within a class),
   then instance priority. The sort is stable.
3. **Sweep**: each repository is asked once. The first schema found is cached
   and returned; every absence or failure is recorded in the lookup history
   and the sweep continues.
4. **Exhaustion**: if nobody had the schema, the caller receives a
   :class:`~iglu_resolver.core.errors.ResolutionError` carrying the history
   of every repository for that key.

History is informational, not an exclusion list: the next call for the same
key sweeps from the first repository again, so a transient outage heals on
its own. Entries older than the cache TTL are dropped before each sweep, so
``ResolutionError.is_not_found`` reflects recent attempts only.

Thread Safety
-------------
The repository list is immutable after construction and the cache is
lock-guarded, so one resolver may be shared between threads. Concurrent
sweeps of the same cold key are not coalesced; the last writer wins.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from iglu_resolver.core.errors import ClientFailure, NotFound, RegistryError, ResolutionError
from iglu_resolver.core.result import Err, Result, err, ok
from iglu_resolver.core.schema_key import SchemaKey
from iglu_resolver.core.settings import get_logger, load_settings
from iglu_resolver.repositories import (
    BOOTSTRAP_REPOSITORY,
    RepositoryRef,
    SchemaDocument,
    UnsafeLookupError,
)

from .cache import SchemaCache
from .config import ResolverConfig

log = get_logger(__name__)


class Resolver:
    """Resolve schema keys against an ordered set of repositories.

    Parameters
    ----------
    repositories:
        The repositories to consult. Names must be unique; they key the
        lookup history.
    cache_ttl:
        Seconds a resolved schema is served from cache; ``0`` disables the
        cache. Defaults to ``IGLU_CACHE_TTL``.
    cache:
        Pre-built cache, mainly to inject a fake clock in tests. Overrides
        ``cache_ttl``.
    """

    __slots__ = ("_repositories", "_cache")

    def __init__(
        self,
        repositories: Iterable[RepositoryRef],
        cache_ttl: int | None = None,
        *,
        cache: SchemaCache | None = None,
    ) -> None:
        repos = tuple(repositories)
        names = [repo.name for repo in repos]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Repository names must be unique, duplicated: {duplicates}")

        self._repositories: tuple[RepositoryRef, ...] = repos
        if cache is None:
            ttl = load_settings().cache_ttl if cache_ttl is None else cache_ttl
            cache = SchemaCache(ttl)
        self._cache: SchemaCache = cache

    # --------------------------------------------------------------------- #
    # Constructors
    # --------------------------------------------------------------------- #
    @classmethod
    def bootstrap(cls, cache_ttl: int | None = None) -> Resolver:
        """A resolver that only knows the schemas bundled with this package."""
        return cls([BOOTSTRAP_REPOSITORY], cache_ttl)

    @classmethod
    def from_config(cls, document: Mapping[str, Any]) -> Resolver:
        """Build a resolver from a self-describing resolver configuration.

        The bundled repository is always included ahead of the configured
        ones unless the configuration already declares a repository with the
        same name.

        Raises
        ------
        ResolverConfigError
            If the document does not validate or a descriptor is unusable.
        """
        config = ResolverConfig.parse(document)
        configured = config.repository_refs()
        repos: list[RepositoryRef] = []
        if all(repo.name != BOOTSTRAP_REPOSITORY.name for repo in configured):
            repos.append(BOOTSTRAP_REPOSITORY)
        repos.extend(configured)
        return cls(repos, config.effective_ttl(load_settings().cache_ttl))

    @classmethod
    def from_file(cls, path: Path | str) -> Resolver:
        """Read a resolver configuration JSON file; see :meth:`from_config`."""
        with Path(path).open("r", encoding="utf-8") as f:
            document = json.load(f)
        return cls.from_config(document)

    # --------------------------------------------------------------------- #
    # Introspection
    # --------------------------------------------------------------------- #
    @property
    def repositories(self) -> tuple[RepositoryRef, ...]:
        return self._repositories

    @property
    def cache(self) -> SchemaCache:
        return self._cache

    def prioritize(self, key: SchemaKey) -> list[RepositoryRef]:
        """Return the repositories in the order they are consulted for ``key``."""
        return sorted(
            self._repositories,
            key=lambda repo: (
                repo.class_priority,
                not repo.vendor_matched(key),
                repo.instance_priority,
            ),
        )

    # --------------------------------------------------------------------- #
    # Resolution
    # --------------------------------------------------------------------- #
    def resolve_schema(self, key: SchemaKey) -> Result[SchemaDocument, ResolutionError]:
        """Return the schema for ``key`` or the aggregated failure of every repository."""
        cached = self._cache.get(key)
        if cached is not None:
            log.debug("Cache hit for %s", key)
            return ok(cached)

        self._cache.expire_history(key)
        for repo in self.prioritize(key):
            outcome = self._lookup(repo, key)
            if isinstance(outcome, Err):
                error: RegistryError = outcome.error
            elif outcome.unwrap() is None:
                error = NotFound()
            else:
                schema = outcome.unwrap()
                self._cache.store(key, schema)
                log.debug("Resolved %s from %s", key, repo)
                return ok(schema)

            history = self._cache.record_failure(key, repo.name, error)
            log.info(
                "Lookup of %s in %s failed: %s (attempt %d)",
                key,
                repo,
                error.message,
                history.attempts,
            )

        failure = ResolutionError(key, self._cache.history(key))
        log.warning(failure.message)
        return err(failure)

    #: Alias kept for callers used to the "lookup" vocabulary.
    lookup_schema = resolve_schema

    def unsafe_lookup_schema(self, key: SchemaKey) -> SchemaDocument:
        """Resolve ``key`` or raise :class:`UnsafeLookupError`."""
        result = self.resolve_schema(key)
        if isinstance(result, Err):
            raise UnsafeLookupError(f"Unsafe lookup of schema failed: {result.error.message}")
        return result.unwrap()

    @staticmethod
    def _lookup(repo: RepositoryRef, key: SchemaKey) -> Result[SchemaDocument | None, RegistryError]:
        # Backends classify their own failures; anything else is a backend bug
        # and must not abort the sweep.
        try:
            return repo.lookup_schema(key)
        except Exception as exc:
            log.exception("Unexpected error from %s while looking up %s", repo, key)
            return err(ClientFailure(f"Unexpected {type(exc).__name__}: {exc}"))


__all__ = ["Resolver"]
