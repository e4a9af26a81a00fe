"""
List use case — modules and their versions as currently on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modreg.core.config.loader import ConfigError
from modreg.core.services.registry_index import build_entry
from modreg.core.use_cases.workspace import open_workspace


@dataclass
class ModuleSummary:
    name: str
    latest: str | None = None
    versions: list[str] = field(default_factory=list)
    statuses: dict[str, str] = field(default_factory=dict)
    description: str = ""
    owner: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "latest": self.latest,
            "versions": [{"version": v, "status": self.statuses.get(v, "")} for v in self.versions],
            "description": self.description,
            "owner": self.owner,
        }


@dataclass
class ListResult:
    root: Path | None = None
    modules: list[ModuleSummary] = field(default_factory=list)
    component_count: int = 0
    application_count: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "root": str(self.root) if self.root else None,
            "modules": [m.to_dict() for m in self.modules],
            "components": self.component_count,
            "applications": self.application_count,
        }


def list_modules(config_path: Path | None = None) -> ListResult:
    """Summarize every module in the registry, every version included."""
    result = ListResult()

    try:
        workspace = open_workspace(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    catalog = workspace.catalog
    result.root = workspace.root
    result.component_count = len(catalog.components)
    result.application_count = len(catalog.applications)

    for name in catalog.module_names():
        versions = catalog.modules_named(name)
        entry = build_entry(catalog, name)
        result.modules.append(ModuleSummary(
            name=name,
            latest=entry.latest_version,
            versions=[d.version for d in versions],
            statuses={d.version: d.status.value for d in versions},
            description=entry.description,
            owner=entry.owner,
        ))

    return result
