"""
Catalog — every document loaded from a registry tree, with lookups.

The catalog is the in-memory view the validator, graph builder, resolver
and index generator all work from. It holds whatever loaded, valid or
not; validation is a separate pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modreg.core.domain.semver import Version, VersionError, parse_version
from modreg.core.models.application import ApplicationDocument
from modreg.core.models.common import Classification, ModuleStatus
from modreg.core.models.component import ComponentDocument
from modreg.core.models.issue import Issue
from modreg.core.models.module import ComponentRef, ModuleDocument


@dataclass
class Catalog:
    """Documents grouped by kind."""

    root: Path | None = None
    modules: list[ModuleDocument] = field(default_factory=list)
    components: list[ComponentDocument] = field(default_factory=list)
    applications: list[ApplicationDocument] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)   # load-time findings

    @property
    def document_count(self) -> int:
        return len(self.modules) + len(self.components) + len(self.applications)

    # ── Modules ─────────────────────────────────────────────────

    def module_names(self) -> list[str]:
        return sorted({m.name for m in self.modules})

    def has_module(self, name: str) -> bool:
        return any(m.name == name for m in self.modules)

    def modules_named(self, name: str) -> list[ModuleDocument]:
        """Every version of a module with a valid semver, highest first."""
        docs = [m for m in self.modules if m.name == name and m.parsed_version is not None]
        docs.sort(key=_version_of, reverse=True)
        return docs

    def module(self, name: str, version: str) -> ModuleDocument | None:
        for doc in self.modules:
            if doc.name == name and doc.version == version:
                return doc
        # Fall back to semver equality ("v1.0.0" vs "1.0.0", build metadata)
        for doc in self.modules_named(name):
            if _same_version(doc.parsed_version, version):
                return doc
        return None

    def latest_module(self, name: str) -> ModuleDocument | None:
        """Highest non-retired release, else the highest non-retired prerelease."""
        candidates = [m for m in self.modules_named(name) if m.status != ModuleStatus.RETIRED]
        for doc in candidates:
            if not _version_of(doc).is_prerelease:
                return doc
        return candidates[0] if candidates else None

    def latest_modules(self) -> list[ModuleDocument]:
        latest = (self.latest_module(n) for n in self.module_names())
        return [m for m in latest if m is not None]

    # ── Components ──────────────────────────────────────────────

    def component(self, name: str, version: str) -> ComponentDocument | None:
        for doc in self.components:
            if doc.name == name and doc.version == version:
                return doc
        return None

    def component_versions(self, name: str) -> list[ComponentDocument]:
        return [c for c in self.components if c.name == name]

    def components_of(
        self, module: ModuleDocument
    ) -> list[tuple[Classification, ComponentRef, ComponentDocument | None]]:
        """Component refs of a module version paired with their documents."""
        return [
            (classification, ref, self.component(ref.name, ref.version))
            for classification, ref in module.components.iter_refs()
        ]

    def contract_owner(self, module: ModuleDocument, contract_name: str) -> str | None:
        """Name of the component within ``module`` that provides a contract."""
        contract = module.provides(contract_name)
        if contract is not None and contract.component:
            return contract.component
        for _, ref, doc in self.components_of(module):
            if doc is not None and doc.provides(contract_name):
                return ref.name
        return None

    # ── Applications ────────────────────────────────────────────

    def application(self, name: str) -> ApplicationDocument | None:
        for doc in self.applications:
            if doc.name == name:
                return doc
        return None

    def without(self, sources: set[str]) -> Catalog:
        """A copy excluding documents loaded from the given sources."""
        return Catalog(
            root=self.root,
            modules=[m for m in self.modules if m.source not in sources],
            components=[c for c in self.components if c.source not in sources],
            applications=[a for a in self.applications if a.source not in sources],
            issues=list(self.issues),
        )


def _version_of(doc: ModuleDocument) -> Version:
    version = doc.parsed_version
    assert version is not None  # filtered by modules_named
    return version


def _same_version(parsed: Version | None, text: str) -> bool:
    try:
        return parsed is not None and parsed == parse_version(text)
    except VersionError:
        return False
