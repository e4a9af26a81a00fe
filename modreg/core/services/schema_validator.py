"""Registry document validation — structural and cross-document checks.

Layers:
  1. Envelope (apiVersion, kind) and structural schema via Pydantic
  2. Per-document semantic checks (names, versions, primary component, ...)
  3. Cross-document consistency (duplicates, component refs, contracts)
  4. Graph checks (module dependency cycles)

Layer 1 runs at load time through ``parse_document``; the rest runs over a
whole ``Catalog`` in ``validate_catalog``. Problems are reported as
``Issue`` entries; nothing here raises for bad input.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError

from modreg.core.domain.semver import VersionError, is_valid_version, parse_range
from modreg.core.models.application import ApplicationDocument
from modreg.core.models.catalog import Catalog
from modreg.core.models.common import (
    NAME_PATTERN,
    SUPPORTED_API_VERSIONS,
    Classification,
)
from modreg.core.models.component import ComponentDocument
from modreg.core.models.contract import Contract, is_known_contract_type
from modreg.core.models.issue import Issue, Severity, error, warning
from modreg.core.models.module import ModuleDocument
from modreg.core.models.registry import RegistryIndex
from modreg.core.models.settings import ValidationSettings
from modreg.core.services.dependency_graph import build_module_graph

logger = logging.getLogger(__name__)

Document = Union[ModuleDocument, ComponentDocument, ApplicationDocument, RegistryIndex]

_MODELS_BY_KIND: dict[str, type] = {
    "Module": ModuleDocument,
    "Application": ApplicationDocument,
    "ModuleRegistry": RegistryIndex,
}


@dataclass
class ValidationReport:
    """Result of validating a catalog."""

    issues: list[Issue] = field(default_factory=list)
    documents_checked: int = 0

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_sources(self) -> set[str]:
        """Sources of documents that carry at least one error."""
        return {i.source for i in self.errors if i.source}

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "documents_checked": self.documents_checked,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [i.model_dump(mode="json") for i in self.issues],
        }


# ── Layer 1: envelope + structure ───────────────────────────────


def parse_document(data: Any, source: str = "") -> tuple[Document | None, list[Issue]]:
    """Turn one raw YAML document into a typed model.

    Returns:
        ``(document, issues)``. ``document`` is None when any error was found.
    """
    if not isinstance(data, dict):
        return None, [error(
            "not-a-mapping",
            f"Expected a YAML mapping, got {type(data).__name__}",
            source=source,
        )]

    kind = data.get("kind")
    api_version = data.get("apiVersion")
    meta = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
    ref = f"{kind}/{meta.get('name', '?')}" if isinstance(kind, str) and kind else ""
    where = {"source": source, "document": ref}
    issues: list[Issue] = []

    if api_version is None:
        issues.append(error("missing-api-version", "Missing apiVersion", path="apiVersion", **where))
    elif not isinstance(api_version, str) or api_version not in SUPPORTED_API_VERSIONS:
        issues.append(error(
            "unknown-api-version",
            f"Unsupported apiVersion '{api_version}' "
            f"(supported: {', '.join(SUPPORTED_API_VERSIONS)})",
            path="apiVersion",
            **where,
        ))

    model: type | None = None
    if kind is None:
        issues.append(error("missing-kind", "Missing kind", path="kind", **where))
    elif not isinstance(kind, str):
        issues.append(error(
            "unknown-kind",
            f"kind must be a string, got {type(kind).__name__}",
            path="kind",
            **where,
        ))
    elif Classification.from_kind(kind) is not None:
        model = ComponentDocument
    else:
        model = _MODELS_BY_KIND.get(kind)
        if model is None:
            issues.append(error("unknown-kind", f"Unknown kind '{kind}'", path="kind", **where))

    if issues or model is None:
        return None, issues

    try:
        document = model.model_validate(data)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            issues.append(error("schema", err.get("msg", "invalid value"), path=loc, **where))
        return None, issues

    document.bind_source(source)
    return document, []


# ── Layers 2-4: catalog-wide ────────────────────────────────────


def validate_catalog(
    catalog: Catalog,
    settings: ValidationSettings | None = None,
) -> ValidationReport:
    """Run every semantic and cross-document check over a catalog.

    Load-time issues already recorded on the catalog are included.

    Args:
        catalog: Documents to check.
        settings: Validation options (strict mode, cycles, extra contract types).

    Returns:
        ValidationReport with all findings.
    """
    settings = settings or ValidationSettings()
    issues: list[Issue] = list(catalog.issues)

    _check_duplicates(catalog, issues)
    for module in catalog.modules:
        _check_module(module, catalog, settings, issues)
    for component in catalog.components:
        _check_component(component, catalog, settings, issues)
    for app in catalog.applications:
        _check_application(app, catalog, issues)
    _check_cycles(catalog, settings, issues)

    if settings.strict:
        issues = [
            i.model_copy(update={"severity": Severity.ERROR}) if not i.is_error else i
            for i in issues
        ]

    report = ValidationReport(issues=issues, documents_checked=catalog.document_count)
    logger.info(
        "Validated %d documents: %d errors, %d warnings",
        report.documents_checked, len(report.errors), len(report.warnings),
    )
    return report


def _where(doc) -> dict[str, str]:
    return {"source": doc.source, "document": doc.ref}


def _check_name(name: str, path: str, where: dict, issues: list[Issue]) -> None:
    if not NAME_PATTERN.match(name):
        issues.append(error(
            "invalid-name",
            f"'{name}' is not a valid name (lowercase letters, digits and '-')",
            path=path,
            **where,
        ))


def _check_version(version: str, path: str, where: dict, issues: list[Issue]) -> None:
    if not is_valid_version(version):
        issues.append(error(
            "invalid-version",
            f"'{version}' is not a valid semantic version",
            path=path,
            **where,
        ))


def _check_range(text: str, path: str, where: dict, issues: list[Issue]) -> bool:
    try:
        parse_range(text)
    except VersionError as e:
        issues.append(error("invalid-range", str(e), path=path, **where))
        return False
    return True


def _check_contracts(
    contracts: list[Contract],
    where: dict,
    settings: ValidationSettings,
    issues: list[Issue],
) -> None:
    counts = Counter(c.name for c in contracts)
    for name in sorted(n for n, count in counts.items() if count > 1):
        issues.append(error("duplicate-contract", f"Contract '{name}' declared more than once", **where))

    for i, contract in enumerate(contracts):
        path = f"contracts[{i}]"
        _check_version(contract.version, f"{path}.version", where, issues)
        if not is_known_contract_type(contract.type, settings.contract_types):
            issues.append(warning(
                "unknown-contract-type",
                f"Contract '{contract.name}' has unknown type '{contract.type}' "
                "(use 'custom:<name>' or declare it in validation.contract_types)",
                path=f"{path}.type",
                **where,
            ))


def _check_duplicates(catalog: Catalog, issues: list[Issue]) -> None:
    groups: dict[tuple[str, str, str], list] = {}
    for doc in catalog.modules:
        groups.setdefault(("Module", doc.name, doc.version), []).append(doc)
    for doc in catalog.components:
        groups.setdefault(("Component", doc.name, doc.version), []).append(doc)
    for doc in catalog.applications:
        groups.setdefault(("Application", doc.name, ""), []).append(doc)

    for (family, name, version), docs in sorted(groups.items()):
        if len(docs) < 2:
            continue
        label = f"{name}@{version}" if version else name
        sources = ", ".join(d.source for d in docs)
        for doc in docs[1:]:
            issues.append(error(
                "duplicate-document",
                f"{family} {label} is defined more than once ({sources})",
                **_where(doc),
            ))


def _check_module(
    doc: ModuleDocument,
    catalog: Catalog,
    settings: ValidationSettings,
    issues: list[Issue],
) -> None:
    where = _where(doc)
    _check_name(doc.name, "metadata.name", where, issues)
    _check_version(doc.version, "metadata.version", where, issues)

    if not doc.metadata.owner:
        issues.append(warning("missing-owner", "No owning team (metadata.owner)", **where))

    # ── Components ──────────────────────────────────────────────
    primaries = doc.components.primary
    if len(primaries) != 1:
        issues.append(error(
            "primary-count",
            f"A module needs exactly one primary component, found {len(primaries)}",
            path="components.primary",
            **where,
        ))

    counts = Counter(doc.components.names)
    for name in sorted(n for n, count in counts.items() if count > 1):
        issues.append(error(
            "duplicate-component",
            f"Component '{name}' is listed more than once",
            path="components",
            **where,
        ))

    component_names = set(counts)
    for classification, ref in doc.components.iter_refs():
        path = f"components.{classification.value}.{ref.name}"
        _check_version(ref.version, f"{path}.version", where, issues)

        component = catalog.component(ref.name, ref.version)
        if component is None:
            known = sorted(c.version for c in catalog.component_versions(ref.name))
            detail = f" (known versions: {', '.join(known)})" if known else ""
            issues.append(warning(
                "component-missing",
                f"No component document for {ref.name}@{ref.version}{detail}",
                path=path,
                **where,
            ))
            continue

        if component.classification != classification:
            issues.append(error(
                "classification-mismatch",
                f"Component '{ref.name}' is a {component.kind} but is listed "
                f"under '{classification.value}'",
                path=path,
                **where,
            ))
        if component.module != doc.name:
            issues.append(error(
                "component-module-mismatch",
                f"Component '{ref.name}' belongs to module '{component.module}'",
                path=path,
                **where,
            ))

    # ── Contracts ───────────────────────────────────────────────
    _check_contracts(doc.contracts, where, settings, issues)
    for i, contract in enumerate(doc.contracts):
        path = f"contracts[{i}].component"
        if not contract.component:
            issues.append(warning(
                "contract-owner-missing",
                f"Contract '{contract.name}' does not name its owning component",
                path=path,
                **where,
            ))
            continue
        if contract.component not in component_names:
            issues.append(error(
                "contract-component-unknown",
                f"Contract '{contract.name}' is owned by '{contract.component}', "
                "which is not a component of this module",
                path=path,
                **where,
            ))
            continue
        found = doc.components.get(contract.component)
        owner = catalog.component(contract.component, found[1].version) if found else None
        if owner is not None and owner.provides(contract.name) is None:
            issues.append(warning(
                "contract-not-provided",
                f"Component {owner.name}@{owner.version} does not declare "
                f"contract '{contract.name}'",
                path=path,
                **where,
            ))

    # ── Dependencies ────────────────────────────────────────────
    seen: set[str] = set()
    for i, dep in enumerate(doc.dependencies):
        path = f"dependencies[{i}]"
        if dep.module in seen:
            issues.append(error(
                "duplicate-dependency",
                f"Module '{dep.module}' is listed as a dependency more than once",
                path=path,
                **where,
            ))
        seen.add(dep.module)

        if dep.module == doc.name:
            issues.append(error("self-dependency", "A module cannot depend on itself", path=path, **where))
            continue

        range_ok = _check_range(dep.version, f"{path}.version", where, issues)
        for j, req in enumerate(dep.contracts):
            _check_range(req.version, f"{path}.contracts[{j}].version", where, issues)

        targets = catalog.modules_named(dep.module)
        if not catalog.has_module(dep.module):
            issues.append(error(
                "unknown-module",
                f"Depends on unknown module '{dep.module}'",
                path=path,
                **where,
            ))
            continue

        if range_ok:
            rng = parse_range(dep.version)
            matching = [t for t in targets if rng.allows(t.parsed_version, include_prerelease=True)]
            if not matching:
                issues.append(warning(
                    "unsatisfiable-range",
                    f"No version of '{dep.module}' satisfies '{dep.version}'",
                    path=f"{path}.version",
                    **where,
                ))

        for j, req in enumerate(dep.contracts):
            if not any(t.provides(req.name) for t in targets):
                issues.append(error(
                    "unknown-contract",
                    f"No version of '{dep.module}' provides contract '{req.name}'",
                    path=f"{path}.contracts[{j}]",
                    **where,
                ))


def _check_component(
    doc: ComponentDocument,
    catalog: Catalog,
    settings: ValidationSettings,
    issues: list[Issue],
) -> None:
    where = _where(doc)
    _check_name(doc.name, "metadata.name", where, issues)
    _check_version(doc.version, "metadata.version", where, issues)

    if not catalog.has_module(doc.module):
        issues.append(warning(
            "unknown-module",
            f"Owning module '{doc.module}' is not in the registry",
            path="metadata.module",
            **where,
        ))
    elif not any(
        m.components.get(doc.name) is not None for m in catalog.modules if m.name == doc.module
    ):
        issues.append(warning(
            "component-unlisted",
            f"No version of module '{doc.module}' lists component '{doc.name}'",
            **where,
        ))

    _check_contracts(doc.contracts, where, settings, issues)
    for i, contract in enumerate(doc.contracts):
        if contract.component and contract.component != doc.name:
            issues.append(error(
                "contract-component-mismatch",
                f"Contract '{contract.name}' names owner '{contract.component}' "
                f"inside component '{doc.name}'",
                path=f"contracts[{i}].component",
                **where,
            ))

    # ── Configuration ───────────────────────────────────────────
    config = doc.configuration
    for group in ("required", "optional"):
        keys = getattr(config, group)
        for key in sorted(k for k, count in Counter(keys).items() if count > 1):
            issues.append(error(
                "duplicate-config-key",
                f"Configuration key '{key}' repeated in '{group}'",
                path=f"configuration.{group}",
                **where,
            ))
    for key in sorted(set(config.required) & set(config.optional)):
        issues.append(error(
            "config-key-conflict",
            f"Configuration key '{key}' is both required and optional",
            path="configuration",
            **where,
        ))

    # ── Dependencies ────────────────────────────────────────────
    for i, dep in enumerate(doc.dependencies):
        path = f"dependencies[{i}]"
        _check_range(dep.version, f"{path}.version", where, issues)
        if dep.module == doc.module:
            issues.append(warning(
                "same-module-dependency",
                f"Depends on contract '{dep.contract}' of its own module",
                path=path,
                **where,
            ))
        if not catalog.has_module(dep.module):
            issues.append(error(
                "unknown-module",
                f"Depends on unknown module '{dep.module}'",
                path=path,
                **where,
            ))
            continue
        providers = [
            m for m in catalog.modules_named(dep.module) if m.provides(dep.contract) is not None
        ]
        if not providers:
            issues.append(error(
                "unknown-contract",
                f"No version of '{dep.module}' provides contract '{dep.contract}'",
                path=path,
                **where,
            ))


def _check_application(doc: ApplicationDocument, catalog: Catalog, issues: list[Issue]) -> None:
    where = _where(doc)
    _check_name(doc.name, "metadata.name", where, issues)

    selections = [(f"modules[{i}]", s) for i, s in enumerate(doc.modules)]
    env_counts = Counter(e.name for e in doc.environments)
    for name in sorted(n for n, count in env_counts.items() if count > 1):
        issues.append(error(
            "duplicate-environment",
            f"Environment '{name}' is defined more than once",
            path="environments",
            **where,
        ))
    for i, env in enumerate(doc.environments):
        selections.extend(
            (f"environments[{i}].modules[{j}]", s) for j, s in enumerate(env.modules)
        )

    for path, selection in selections:
        _check_range(selection.version, f"{path}.version", where, issues)
        if not catalog.has_module(selection.name):
            issues.append(error(
                "unknown-module",
                f"Selects unknown module '{selection.name}'",
                path=path,
                **where,
            ))


def _check_cycles(catalog: Catalog, settings: ValidationSettings, issues: list[Issue]) -> None:
    graph = build_module_graph(catalog)
    for cycle in graph.cycles():
        make = warning if settings.allow_cycles else error
        members = ", ".join(cycle)
        first = catalog.latest_module(cycle[0])
        where = _where(first) if first is not None else {}
        issues.append(make(
            "dependency-cycle",
            f"Modules form a dependency cycle: {members}",
            **where,
        ))
