"""
Settings model — the registry's own configuration, loaded from modreg.yml.

Every section is optional; an absent file means all defaults.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegistrySection(BaseModel):
    """Where things live, relative to the registry root."""

    model_config = ConfigDict(extra="forbid")

    name: str = "registry"
    modules_dir: str = "modules"
    applications_dir: str = "applications"
    index_path: str = "registry.yaml"


class ValidationSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    strict: bool = False                 # warnings count as errors
    allow_cycles: bool = False           # module dependency cycles are warnings
    contract_types: list[str] = Field(default_factory=list)  # beyond the built-ins


class ResolverSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=10000, ge=1)
    include_prerelease: bool = False


class IndexSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    include_timestamp: bool = True


class Settings(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    registry: RegistrySection = Field(default_factory=RegistrySection)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
