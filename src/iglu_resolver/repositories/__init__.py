from __future__ import annotations

from .base import LookupResult, RepositoryRef, SchemaDocument, UnsafeLookupError
from .config import RepositoryRefConfig
from .embedded import EmbeddedRepositoryRef
from .factory import BOOTSTRAP_NAME, BOOTSTRAP_REPOSITORY, parse_repository_ref
from .http import HttpRepositoryRef

__all__ = [
    "BOOTSTRAP_NAME",
    "BOOTSTRAP_REPOSITORY",
    "EmbeddedRepositoryRef",
    "HttpRepositoryRef",
    "LookupResult",
    "RepositoryRef",
    "RepositoryRefConfig",
    "SchemaDocument",
    "UnsafeLookupError",
    "parse_repository_ref",
]
