"""
Component model — an independently versioned, deployable unit of a module.

The document kind carries the classification: ``PrimaryComponent``,
``InterfaceComponent``, ``IntegrationComponent`` or
``InfrastructureComponent``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from modreg.core.domain.semver import Version, VersionError, parse_version
from modreg.core.models.common import (
    COMPONENT_KINDS,
    Classification,
    DocumentModel,
    coerce_version,
)
from modreg.core.models.contract import Contract


class ComponentMetadata(BaseModel):
    """Identity of one component version."""

    model_config = ConfigDict(extra="forbid")

    name: str
    module: str                  # owning module
    version: str
    repository: str = ""
    description: str = ""
    owner: str = ""
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return coerce_version(value)


class ComponentDependency(BaseModel):
    """Dependency on a named contract of another module.

    ``version`` is a range over the contract's version, not the module's.
    """

    model_config = ConfigDict(extra="forbid")

    module: str
    contract: str
    version: str = "*"

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return "*" if value is None else coerce_version(value)


class ConfigurationKeys(BaseModel):
    """Configuration keys a component reads at deploy time."""

    model_config = ConfigDict(extra="forbid")

    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)

    @field_validator("required", "optional", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ComponentDocument(DocumentModel):
    """A ``kind: <Classification>Component`` document."""

    metadata: ComponentMetadata
    contracts: list[Contract] = Field(default_factory=list)
    dependencies: list[ComponentDependency] = Field(default_factory=list)
    configuration: ConfigurationKeys = Field(default_factory=ConfigurationKeys)

    @field_validator("kind")
    @classmethod
    def known_component_kind(cls, value: str) -> str:
        if value not in COMPONENT_KINDS:
            raise ValueError(f"kind must be one of {', '.join(COMPONENT_KINDS)}")
        return value

    @field_validator("contracts", "dependencies", "configuration", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "configuration" else []
        return value

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def module(self) -> str:
        return self.metadata.module

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def classification(self) -> Classification:
        found = Classification.from_kind(self.kind)
        assert found is not None  # guaranteed by known_component_kind
        return found

    @property
    def parsed_version(self) -> Version | None:
        try:
            return parse_version(self.metadata.version)
        except VersionError:
            return None

    def provides(self, contract_name: str) -> Contract | None:
        for contract in self.contracts:
            if contract.name == contract_name:
                return contract
        return None
