"""
Registry index generator — aggregate modules into a ModuleRegistry document.

Output is deterministic: modules sorted by name, versions by descending
semver precedence. The only varying field is ``metadata.generatedAt``,
which can be switched off.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, datetime

from modreg.core.models.catalog import Catalog
from modreg.core.models.common import Classification, ModuleStatus
from modreg.core.models.registry import (
    RegistryEntry,
    RegistryIndex,
    RegistryMetadata,
    RegistrySummary,
)

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def build_entry(catalog: Catalog, name: str) -> RegistryEntry:
    """Index entry for one module name."""
    versions = catalog.modules_named(name)  # highest first, valid semver only
    available = [d for d in versions if d.status != ModuleStatus.RETIRED]
    supported = [d for d in available if d.status == ModuleStatus.ACTIVE]
    latest = catalog.latest_module(name)

    return RegistryEntry(
        name=name,
        latest_version=latest.version if latest else None,
        available_versions=[d.version for d in available],
        supported_versions=[d.version for d in supported],
        description=latest.metadata.description if latest else "",
        owner=latest.metadata.owner if latest else "",
    )


def build_summary(catalog: Catalog, entries: list[RegistryEntry]) -> RegistrySummary:
    """Counts over the latest version of each module."""
    by_classification: Counter[str] = Counter({c.value: 0 for c in Classification})
    by_type: Counter[str] = Counter()
    components: set[str] = set()
    contracts: set[str] = set()

    for doc in catalog.latest_modules():
        for classification, ref in doc.components.iter_refs():
            if ref.name not in components:
                components.add(ref.name)
                by_classification[classification.value] += 1
        for contract in doc.contracts:
            if contract.name not in contracts:
                contracts.add(contract.name)
                by_type[contract.type] += 1

    return RegistrySummary(
        total_modules=len(entries),
        total_module_versions=sum(len(e.available_versions) for e in entries),
        total_components=len(components),
        total_contracts=len(contracts),
        components_by_classification=dict(by_classification),
        contracts_by_type=dict(sorted(by_type.items())),
    )


def build_index(
    catalog: Catalog,
    name: str = "registry",
    source: str = "modules",
    include_timestamp: bool = True,
) -> RegistryIndex:
    """Aggregate every module in ``catalog`` into a registry index.

    Args:
        catalog: Documents to index (callers exclude invalid ones first).
        name: Registry name for ``metadata.name``.
        source: Modules directory, relative to the registry root.
        include_timestamp: Whether to stamp ``metadata.generatedAt``.

    Returns:
        RegistryIndex ready to be written.
    """
    entries = []
    for module_name in catalog.module_names():
        if not catalog.modules_named(module_name):
            logger.warning("Module '%s' has no version with valid semver; skipping", module_name)
            continue
        entries.append(build_entry(catalog, module_name))

    index = RegistryIndex(
        metadata=RegistryMetadata(
            name=name,
            generated_at=_now_iso() if include_timestamp else None,
            source=source,
        ),
        modules=entries,
        summary=build_summary(catalog, entries),
    )
    logger.info(
        "Built registry index: %d modules, %d versions",
        index.summary.total_modules, index.summary.total_module_versions,
    )
    return index

