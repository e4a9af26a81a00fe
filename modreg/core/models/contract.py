"""
Contract model — a named, typed interface a component provides.

The contract ``type`` taxonomy is open: the built-in set below covers the
common cases, ``custom:<name>`` is always accepted, and a registry may
declare further types in its configuration.
"""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, field_validator

from modreg.core.models.common import coerce_version

BUILTIN_CONTRACT_TYPES = frozenset({
    "openapi-3.0",
    "openapi-3.1",
    "asyncapi-2.0",
    "graphql",
    "grpc-proto",
    "json-schema",
    "kafka-avro",
    "kafka-json",
    "terraform-output",
    "helm-values",
    "micro-frontend",
    "cli-commands",
    "sdk",
})

CUSTOM_TYPE_PREFIX = "custom:"


def is_known_contract_type(contract_type: str, extra: Iterable[str] = ()) -> bool:
    """Built-in, ``custom:*`` with a non-empty name, or declared in config."""
    if contract_type in BUILTIN_CONTRACT_TYPES or contract_type in set(extra):
        return True
    return (
        contract_type.startswith(CUSTOM_TYPE_PREFIX)
        and len(contract_type) > len(CUSTOM_TYPE_PREFIX)
    )


class Contract(BaseModel):
    """A contract provided by a component."""

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str
    version: str
    spec: str = ""            # pointer to the specification artifact
    component: str = ""       # owning component (implied inside component docs)
    description: str = ""

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return coerce_version(value)


class ContractRequirement(BaseModel):
    """A contract named by a dependency, optionally with a version range.

    Accepts either a bare name or ``{name, version}``.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    version: str = "*"

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return coerce_version(value)

    @classmethod
    def coerce(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        return value

    def __str__(self) -> str:
        return self.name if self.version in ("*", "") else f"{self.name}@{self.version}"
