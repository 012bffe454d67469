"""Static per-repository metadata shared by every backend variant."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RepositoryRefConfig(BaseModel):
    """Name, operator-assigned priority and vendor prefixes of one repository.

    Accepts both the Python field names and the camelCase keys used in
    resolver configuration documents (``priority``, ``vendorPrefixes``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1, description="Human-readable repository name")
    instance_priority: int = Field(
        alias="priority", description="Lower value is consulted first within a class"
    )
    vendor_prefixes: tuple[str, ...] = Field(
        alias="vendorPrefixes",
        min_length=1,
        description="Vendors starting with any of these are routed here first",
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("repository name must not be blank")
        return v

    @classmethod
    def parse(cls, descriptor: Mapping[str, Any]) -> RepositoryRefConfig:
        """Build from a repository descriptor; raises pydantic ``ValidationError``."""
        return cls.model_validate(descriptor)


__all__ = ["RepositoryRefConfig"]
