"""
Version resolver — choose one version per module that satisfies every range.

Flow:
    root requirements → constraints per module → pick module with fewest
    candidates → try candidates best-first → add their dependencies as
    constraints → recurse, backtracking on conflict

Candidate order: ``active`` before ``deprecated``, then highest version.
Retired versions are only considered when a constraint pins them exactly.
A candidate must also provide every contract its dependents name, at a
contract version inside the requested range.

After modules are chosen, every selected component's contract
dependencies are checked against the chosen provider versions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from modreg.core.domain.semver import VersionError, parse_range
from modreg.core.models.catalog import Catalog
from modreg.core.models.common import ModuleStatus
from modreg.core.models.contract import ContractRequirement
from modreg.core.models.module import ModuleDocument
from modreg.core.models.settings import ResolverSettings
from modreg.core.services.dependency_graph import CycleError, build_module_graph

logger = logging.getLogger(__name__)

ROOT = "<root>"


class ResolutionError(Exception):
    """Raised when the search exceeds its attempt budget."""


@dataclass(frozen=True)
class Requirement:
    """``required_by`` needs ``module`` within ``version_range``."""

    module: str
    version_range: str = "*"
    contracts: tuple[ContractRequirement, ...] = ()
    required_by: str = ROOT

    @classmethod
    def parse(cls, text: str, required_by: str = ROOT) -> Requirement:
        """Parse ``name`` or ``name@range`` (as typed on the command line)."""
        name, _, rng = text.partition("@")
        return cls(module=name.strip(), version_range=rng.strip() or "*", required_by=required_by)

    def to_dict(self) -> dict[str, Any]:
        return {
            "module": self.module,
            "version": self.version_range,
            "contracts": [str(c) for c in self.contracts],
            "required_by": self.required_by,
        }

    def __str__(self) -> str:
        text = f"{self.required_by} requires {self.module} {self.version_range}"
        if self.contracts:
            text += f" (contracts: {', '.join(str(c) for c in self.contracts)})"
        return text


@dataclass
class Conflict:
    """Why a module could not be resolved."""

    module: str
    reason: str
    constraints: list[Requirement] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "module": self.module,
            "reason": self.reason,
            "constraints": [c.to_dict() for c in self.constraints],
        }

    def __str__(self) -> str:
        return f"{self.module}: {self.reason}"


@dataclass
class Resolution:
    """Outcome of a resolve call."""

    ok: bool = False
    selected: dict[str, str] = field(default_factory=dict)
    components: dict[str, dict[str, str]] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)
    attempts: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "selected": dict(sorted(self.selected.items())),
            "components": {k: dict(sorted(v.items())) for k, v in sorted(self.components.items())},
            "order": self.order,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "attempts": self.attempts,
        }


class VersionResolver:
    """Backtracking resolver over a catalog.

    One instance can run several resolutions; each call to ``resolve``
    starts from a clean slate.
    """

    def __init__(self, catalog: Catalog, settings: ResolverSettings | None = None):
        self._catalog = catalog
        self._settings = settings or ResolverSettings()
        self._attempts = 0
        self._conflicts: dict[str, Conflict] = {}

    # ── Public ──────────────────────────────────────────────────

    def resolve(self, requirements: list[Requirement]) -> Resolution:
        """Find a consistent version assignment for ``requirements``.

        Raises:
            ResolutionError: If more than ``max_attempts`` candidates are tried.
        """
        self._attempts = 0
        self._conflicts = {}

        constraints: dict[str, list[Requirement]] = {}
        for req in requirements:
            if not self._range_ok(req):
                return self._failure()
            constraints.setdefault(req.module, []).append(req)

        logger.info(
            "Resolving %d requirement(s): %s",
            len(requirements), ", ".join(f"{r.module}@{r.version_range}" for r in requirements),
        )
        chosen = self._search({}, constraints)
        if chosen is None:
            return self._failure()

        resolution = Resolution(
            ok=True,
            selected={name: doc.version for name, doc in chosen.items()},
            attempts=self._attempts,
        )
        resolution.components = {
            name: {ref.name: ref.version for _, ref in doc.components.iter_refs()}
            for name, doc in chosen.items()
        }
        resolution.conflicts = self._check_component_contracts(chosen)
        resolution.ok = not resolution.conflicts
        resolution.order = self._install_order(resolution.selected)

        logger.info(
            "Resolution %s after %d attempt(s): %s",
            "succeeded" if resolution.ok else "failed contract checks",
            self._attempts,
            ", ".join(f"{k}@{v}" for k, v in sorted(resolution.selected.items())),
        )
        return resolution

    # ── Search ──────────────────────────────────────────────────

    def _search(
        self,
        selected: dict[str, ModuleDocument],
        constraints: dict[str, list[Requirement]],
    ) -> dict[str, ModuleDocument] | None:
        unresolved = [n for n in constraints if n not in selected]
        if not unresolved:
            return selected

        options = {n: self._candidates(n, constraints[n]) for n in unresolved}
        name = min(unresolved, key=lambda n: (len(options[n]), n))
        candidates = options[name]

        if not candidates:
            reason = (
                "unknown module" if not self._catalog.has_module(name)
                else "no version satisfies all constraints"
            )
            self._record(name, reason, constraints[name])
            return None

        for doc in candidates:
            self._attempts += 1
            if self._attempts > self._settings.max_attempts:
                raise ResolutionError(
                    f"Gave up after {self._settings.max_attempts} attempts "
                    f"(last tried {doc.name}@{doc.version})"
                )

            next_constraints = {k: list(v) for k, v in constraints.items()}
            rejected = False
            for dep in doc.dependencies:
                req = Requirement(
                    module=dep.module,
                    version_range=dep.version,
                    contracts=tuple(dep.contracts),
                    required_by=f"{doc.name}@{doc.version}",
                )
                if not self._range_ok(req):
                    rejected = True
                    break
                next_constraints.setdefault(dep.module, []).append(req)

                already = doc if dep.module == name else selected.get(dep.module)
                if already is not None and not self._admits(req, already):
                    self._record(
                        dep.module,
                        f"selected version {already.version} does not satisfy "
                        f"{req.version_range} required by {req.required_by}",
                        next_constraints[dep.module],
                    )
                    rejected = True
                    break

            if rejected:
                logger.debug("Rejected %s@%s", doc.name, doc.version)
                continue

            logger.debug("Trying %s@%s", doc.name, doc.version)
            result = self._search({**selected, name: doc}, next_constraints)
            if result is not None:
                return result

        return None

    def _candidates(self, name: str, constraints: list[Requirement]) -> list[ModuleDocument]:
        pinned = set()
        for req in constraints:
            exact = parse_range(req.version_range).exact_version
            if exact is not None:
                pinned.add(exact)

        candidates = []
        for doc in self._catalog.modules_named(name):
            if doc.status == ModuleStatus.RETIRED and doc.parsed_version not in pinned:
                continue
            if all(self._admits(req, doc) for req in constraints):
                candidates.append(doc)

        # Stable sort keeps highest-first within each status
        candidates.sort(key=lambda d: d.status == ModuleStatus.DEPRECATED)
        return candidates

    def _admits(self, req: Requirement, doc: ModuleDocument) -> bool:
        version = doc.parsed_version
        if version is None:
            return False
        if not parse_range(req.version_range).allows(version, self._settings.include_prerelease):
            return False
        for wanted in req.contracts:
            contract = doc.provides(wanted.name)
            if contract is None:
                return False
            if not self._contract_in_range(contract.version, wanted.version):
                return False
        return True

    def _contract_in_range(self, version: str, range_text: str) -> bool:
        try:
            return parse_range(range_text).allows(version, include_prerelease=True)
        except VersionError:
            return False

    def _range_ok(self, req: Requirement) -> bool:
        try:
            parse_range(req.version_range)
            for wanted in req.contracts:
                parse_range(wanted.version)
        except VersionError as e:
            self._record(req.module, f"invalid range from {req.required_by}: {e}", [req])
            return False
        return True

    def _record(self, module: str, reason: str, constraints: list[Requirement]) -> None:
        self._conflicts[module] = Conflict(module, reason, list(constraints))

    def _failure(self) -> Resolution:
        conflicts = [self._conflicts[k] for k in sorted(self._conflicts)]
        logger.info("Resolution failed after %d attempt(s): %s", self._attempts,
                    "; ".join(str(c) for c in conflicts))
        return Resolution(ok=False, conflicts=conflicts, attempts=self._attempts)

    # ── Post checks ─────────────────────────────────────────────

    def _check_component_contracts(self, chosen: dict[str, ModuleDocument]) -> list[Conflict]:
        conflicts: list[Conflict] = []
        for name in sorted(chosen):
            for _, ref, component in self._catalog.components_of(chosen[name]):
                if component is None:
                    continue
                for dep in component.dependencies:
                    req = Requirement(
                        module=dep.module,
                        version_range="*",
                        contracts=(ContractRequirement(name=dep.contract, version=dep.version),),
                        required_by=f"{name}/{ref.name}@{ref.version}",
                    )
                    provider = chosen.get(dep.module)
                    if provider is None:
                        conflicts.append(Conflict(
                            dep.module,
                            f"component {req.required_by} needs contract '{dep.contract}' "
                            f"but module '{dep.module}' is not part of the resolution",
                            [req],
                        ))
                        continue
                    contract = provider.provides(dep.contract)
                    if contract is None:
                        conflicts.append(Conflict(
                            dep.module,
                            f"{dep.module}@{provider.version} does not provide contract "
                            f"'{dep.contract}' needed by {req.required_by}",
                            [req],
                        ))
                    elif not self._contract_in_range(contract.version, dep.version):
                        conflicts.append(Conflict(
                            dep.module,
                            f"{dep.module}@{provider.version} provides '{dep.contract}' "
                            f"{contract.version}, outside {dep.version} needed by {req.required_by}",
                            [req],
                        ))
        return conflicts

    def _install_order(self, selected: dict[str, str]) -> list[str]:
        graph = build_module_graph(self._catalog, selected)
        try:
            return [n for n in graph.topological_order() if n in selected]
        except CycleError:
            logger.debug("Selected modules form a cycle; falling back to name order")
            return sorted(selected)


def resolve(
    catalog: Catalog,
    requirements: list[Requirement],
    settings: ResolverSettings | None = None,
) -> Resolution:
    """One-shot convenience wrapper around ``VersionResolver``."""
    return VersionResolver(catalog, settings).resolve(requirements)
