"""
Registry index model — the derived, read-only aggregate of all modules.

Serialized to ``registry.yaml`` with camelCase keys.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modreg.core.models.common import DocumentModel


class RegistryEntry(BaseModel):
    """One module in the index."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    latest_version: str | None = Field(default=None, alias="latestVersion")
    available_versions: list[str] = Field(default_factory=list, alias="availableVersions")
    supported_versions: list[str] = Field(default_factory=list, alias="supportedVersions")
    description: str = ""
    owner: str = ""


class RegistrySummary(BaseModel):
    """Counts over the index."""

    model_config = ConfigDict(populate_by_name=True)

    total_modules: int = Field(default=0, alias="totalModules")
    total_module_versions: int = Field(default=0, alias="totalModuleVersions")
    total_components: int = Field(default=0, alias="totalComponents")
    total_contracts: int = Field(default=0, alias="totalContracts")
    components_by_classification: dict[str, int] = Field(
        default_factory=dict, alias="componentsByClassification"
    )
    contracts_by_type: dict[str, int] = Field(default_factory=dict, alias="contractsByType")


class RegistryMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = "registry"
    generated_at: str | None = Field(default=None, alias="generatedAt")
    source: str = ""

    @field_validator("generated_at", mode="before")
    @classmethod
    def timestamp_as_text(cls, value: Any) -> Any:
        # Unquoted ISO timestamps come back from YAML as datetime objects
        if isinstance(value, datetime):
            return value.isoformat()
        return value


class RegistryIndex(DocumentModel):
    """A ``kind: ModuleRegistry`` document."""

    kind: Literal["ModuleRegistry"] = "ModuleRegistry"
    metadata: RegistryMetadata = Field(default_factory=RegistryMetadata)
    modules: list[RegistryEntry] = Field(default_factory=list)
    summary: RegistrySummary = Field(default_factory=RegistrySummary)

    def get(self, name: str) -> RegistryEntry | None:
        for entry in self.modules:
            if entry.name == name:
                return entry
        return None

    def to_document(self) -> dict:
        # latestVersion stays as an explicit null; generatedAt is dropped when unset
        data = self.model_dump(mode="json", by_alias=True)
        if data["metadata"].get("generatedAt") is None:
            data["metadata"].pop("generatedAt", None)
        return data

    def comparable(self) -> dict:
        """Document form without the generation timestamp."""
        data = self.to_document()
        data.get("metadata", {}).pop("generatedAt", None)
        return data
