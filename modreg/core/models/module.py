"""
Module model — a versioned grouping of components delivering one capability.

A Module document pins one tested combination of component versions,
aggregates the contracts those components provide, and declares which
other modules it depends on (with semver ranges).
"""

from __future__ import annotations

from typing import Any, Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from modreg.core.domain.semver import Version, VersionError, parse_version
from modreg.core.models.common import (
    Classification,
    DocumentModel,
    ModuleStatus,
    coerce_version,
)
from modreg.core.models.contract import Contract, ContractRequirement


class ModuleMetadata(BaseModel):
    """Identity of one module version."""

    model_config = ConfigDict(extra="forbid")

    name: str
    version: str
    description: str = ""
    owner: str = ""                       # owning team
    status: ModuleStatus = ModuleStatus.ACTIVE
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return coerce_version(value)


class ComponentRef(BaseModel):
    """A component pinned by a module version."""

    model_config = ConfigDict(extra="forbid")

    name: str
    version: str

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return coerce_version(value)


class ComponentGroups(BaseModel):
    """Components of a module, grouped by classification.

    Each group is a list; ``primary`` may also be written as a single
    mapping since a module has exactly one.
    """

    model_config = ConfigDict(extra="forbid")

    primary: list[ComponentRef] = Field(default_factory=list)
    interface: list[ComponentRef] = Field(default_factory=list)
    integration: list[ComponentRef] = Field(default_factory=list)
    infrastructure: list[ComponentRef] = Field(default_factory=list)

    @field_validator("primary", "interface", "integration", "infrastructure", mode="before")
    @classmethod
    def single_as_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value

    def group(self, classification: Classification) -> list[ComponentRef]:
        return getattr(self, classification.value)

    def iter_refs(self) -> Iterator[tuple[Classification, ComponentRef]]:
        """All component refs in classification order."""
        for classification in Classification:
            for ref in self.group(classification):
                yield classification, ref

    def get(self, name: str) -> tuple[Classification, ComponentRef] | None:
        for classification, ref in self.iter_refs():
            if ref.name == name:
                return classification, ref
        return None

    @property
    def names(self) -> list[str]:
        return [ref.name for _, ref in self.iter_refs()]


class ModuleDependency(BaseModel):
    """Dependency on another module, by version range and named contracts."""

    model_config = ConfigDict(extra="forbid")

    module: str
    version: str = "*"
    contracts: list[ContractRequirement] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return "*" if value is None else coerce_version(value)

    @field_validator("contracts", mode="before")
    @classmethod
    def names_as_requirements(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [ContractRequirement.coerce(v) for v in value]
        return value


class ModuleDocument(DocumentModel):
    """A ``kind: Module`` document — one version of one module."""

    kind: Literal["Module"] = "Module"
    metadata: ModuleMetadata
    components: ComponentGroups = Field(default_factory=ComponentGroups)
    contracts: list[Contract] = Field(default_factory=list)
    dependencies: list[ModuleDependency] = Field(default_factory=list)
    compliance: dict[str, Any] = Field(default_factory=dict)
    compatibility: dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        "components", "contracts", "dependencies", "compliance", "compatibility", mode="before"
    )
    @classmethod
    def null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name in ("contracts", "dependencies") else {}
        return value

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def status(self) -> ModuleStatus:
        return self.metadata.status

    @property
    def parsed_version(self) -> Version | None:
        """Parsed semver, or None when the declared version is invalid."""
        try:
            return parse_version(self.metadata.version)
        except VersionError:
            return None

    def provides(self, contract_name: str) -> Contract | None:
        """Look up an aggregated contract by name."""
        for contract in self.contracts:
            if contract.name == contract_name:
                return contract
        return None

    @property
    def primary(self) -> ComponentRef | None:
        primaries = self.components.primary
        return primaries[0] if len(primaries) == 1 else None

    def depends_on(self, module_name: str) -> ModuleDependency | None:
        for dep in self.dependencies:
            if dep.module == module_name:
                return dep
        return None
