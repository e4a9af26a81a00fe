"""
Application model — a deployable selection of module versions.

An application lists module requirements (name + range). Each environment
can override a requirement and supplies per-component configuration.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modreg.core.models.common import DocumentModel, coerce_version


class ModuleSelection(BaseModel):
    """A module requirement: name and version range."""

    model_config = ConfigDict(extra="forbid")

    name: str
    version: str = "*"

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return "*" if value is None else coerce_version(value)


class EnvironmentSpec(BaseModel):
    """A deployment target (dev, staging, prod)."""

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str = ""
    modules: list[ModuleSelection] = Field(default_factory=list)
    # component name -> {config key: value}
    configuration: dict[str, dict[str, Any]] = Field(default_factory=dict)


class ApplicationMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    description: str = ""
    owner: str = ""


class ApplicationDocument(DocumentModel):
    """A ``kind: Application`` document."""

    kind: Literal["Application"] = "Application"
    metadata: ApplicationMetadata
    modules: list[ModuleSelection] = Field(default_factory=list)
    environments: list[EnvironmentSpec] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.metadata.name

    def get_environment(self, name: str) -> EnvironmentSpec | None:
        """Look up an environment by name."""
        for env in self.environments:
            if env.name == name:
                return env
        return None

    def requirements_for(self, environment: str | None = None) -> list[ModuleSelection]:
        """Module requirements with the environment's overrides applied.

        An override replaces the application's range for that module;
        modules only named by the environment are appended.
        """
        merged: dict[str, ModuleSelection] = {m.name: m for m in self.modules}
        env = self.get_environment(environment) if environment else None
        if env is not None:
            for override in env.modules:
                merged[override.name] = override
        return list(merged.values())
