"""
Index use case — regenerate registry.yaml from the modules directory.

Flow:
    load documents → validate → (exclude invalid, if allowed) → build index
    → check against the existing file, or write atomically
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from modreg.core.config.loader import ConfigError
from modreg.core.models.registry import RegistryIndex
from modreg.core.persistence.index_file import dump_index, index_is_current, write_index
from modreg.core.services.registry_index import build_index
from modreg.core.services.schema_validator import ValidationReport, validate_catalog
from modreg.core.use_cases.workspace import open_workspace

logger = logging.getLogger(__name__)


@dataclass
class IndexResult:
    """Outcome of index generation."""

    index: RegistryIndex | None = None
    path: Path | None = None
    written: bool = False
    checked: bool = False
    current: bool = False
    excluded: list[str] = field(default_factory=list)
    report: ValidationReport | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        if self.error:
            return False
        return self.current if self.checked else True

    def to_dict(self) -> dict:
        data: dict = {"ok": self.ok}
        if self.error:
            data["error"] = self.error
        if self.report is not None:
            data["validation"] = {
                "errors": len(self.report.errors),
                "warnings": len(self.report.warnings),
            }
        if self.index is not None:
            data.update({
                "path": str(self.path) if self.path else None,
                "written": self.written,
                "checked": self.checked,
                "current": self.current,
                "excluded": self.excluded,
                "index": self.index.to_document(),
            })
        return data

    def render(self) -> str:
        return dump_index(self.index) if self.index else ""


def generate_index(
    config_path: Path | None = None,
    output: Path | None = None,
    check: bool = False,
    allow_invalid: bool = False,
    include_timestamp: bool | None = None,
    write: bool = True,
) -> IndexResult:
    """Regenerate the registry index.

    Args:
        config_path: Optional explicit path to modreg.yml.
        output: Index path (default: ``registry.index_path`` under the root).
        check: Only compare with the existing file; never write.
        allow_invalid: Exclude invalid documents instead of refusing.
        include_timestamp: Override ``index.include_timestamp``.
        write: Set False to build without touching disk (``--stdout``).

    Returns:
        IndexResult describing what happened.
    """
    result = IndexResult()

    try:
        workspace = open_workspace(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    report = validate_catalog(workspace.catalog, workspace.settings.validation)
    result.report = report
    catalog = workspace.catalog

    if not report.ok:
        if not allow_invalid:
            result.error = (
                f"Validation failed with {len(report.errors)} error(s); "
                "fix them or pass --allow-invalid"
            )
            return result
        excluded = report.error_sources()
        result.excluded = sorted(excluded)
        catalog = catalog.without(excluded)
        logger.warning("Excluding %d invalid document(s) from the index", len(excluded))

    if include_timestamp is None:
        include_timestamp = workspace.settings.index.include_timestamp

    result.index = build_index(
        catalog,
        name=workspace.settings.registry.name,
        source=workspace.settings.registry.modules_dir,
        include_timestamp=include_timestamp,
    )
    result.path = output or workspace.index_path

    if check:
        result.checked = True
        result.current = index_is_current(result.index, result.path)
        return result

    if write:
        write_index(result.index, result.path)
        result.written = True
        logger.info("Registry index written to %s", result.path)

    return result
