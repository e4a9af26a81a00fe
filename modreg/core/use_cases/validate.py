"""
Validate use case — load every registry document and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from modreg.core.config.loader import ConfigError
from modreg.core.services.schema_validator import ValidationReport, validate_catalog
from modreg.core.use_cases.workspace import open_workspace


@dataclass
class ValidateResult:
    """Result of registry validation."""

    valid: bool = False
    root: Path | None = None
    config_path: Path | None = None
    report: ValidationReport | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"valid": False, "error": self.error}
        return {
            "valid": self.valid,
            "root": str(self.root) if self.root else None,
            "config_path": str(self.config_path) if self.config_path else None,
            **(self.report.to_dict() if self.report else {}),
        }


def run_validate(config_path: Path | None = None, strict: bool | None = None) -> ValidateResult:
    """Validate all documents of a registry.

    Args:
        config_path: Optional explicit path to modreg.yml.
        strict: Override ``validation.strict`` from the config.

    Returns:
        ValidateResult with the validation report.
    """
    result = ValidateResult()

    try:
        workspace = open_workspace(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.root = workspace.root
    result.config_path = workspace.config_path

    settings = workspace.settings.validation
    if strict is not None:
        settings = settings.model_copy(update={"strict": strict})

    result.report = validate_catalog(workspace.catalog, settings)
    result.valid = result.report.ok
    return result
