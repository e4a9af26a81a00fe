"""
Resolve use case — pick module versions for requirements or an application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from modreg.core.config.document_loader import DocumentError, load_application
from modreg.core.config.loader import ConfigError
from modreg.core.models.application import ApplicationDocument
from modreg.core.models.issue import Issue
from modreg.core.services.application_check import (
    application_requirements,
    check_configuration,
)
from modreg.core.services.version_resolver import (
    Requirement,
    Resolution,
    ResolutionError,
    VersionResolver,
)
from modreg.core.use_cases.workspace import open_workspace

logger = logging.getLogger(__name__)


@dataclass
class ResolveResult:
    """Resolution plus the application/environment context it ran in."""

    resolution: Resolution | None = None
    requirements: list[Requirement] = field(default_factory=list)
    application: str | None = None
    environment: str | None = None
    issues: list[Issue] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        if self.error or self.resolution is None:
            return False
        return self.resolution.ok and not any(i.is_error for i in self.issues)

    def to_dict(self) -> dict:
        if self.error:
            return {"ok": False, "error": self.error}
        return {
            "ok": self.ok,
            "application": self.application,
            "environment": self.environment,
            "requirements": [r.to_dict() for r in self.requirements],
            "resolution": self.resolution.to_dict() if self.resolution else None,
            "issues": [i.model_dump(mode="json") for i in self.issues],
        }


def run_resolve(
    config_path: Path | None = None,
    requirements: list[str] | None = None,
    application: str | None = None,
    environment: str | None = None,
) -> ResolveResult:
    """Resolve module versions.

    Args:
        config_path: Optional explicit path to modreg.yml.
        requirements: ``name`` or ``name@range`` strings.
        application: Application file path, or the name of an Application
            document found under the applications directory.
        environment: Environment of the application to resolve for.

    Returns:
        ResolveResult; ``error`` is set for usage problems, conflicts are
        reported on the resolution.
    """
    result = ResolveResult(environment=environment)

    try:
        workspace = open_workspace(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    catalog = workspace.catalog
    app: ApplicationDocument | None = None
    if application is not None:
        candidate = Path(application)
        if candidate.is_file():
            try:
                app = load_application(candidate, workspace.root)
            except DocumentError as e:
                result.error = str(e)
                return result
        else:
            app = catalog.application(application)
            if app is None:
                result.error = f"Unknown application '{application}'"
                return result
        result.application = app.name

    if environment is not None:
        if app is None:
            result.error = "An environment can only be resolved together with --app"
            return result
        if app.get_environment(environment) is None:
            result.error = f"Application '{app.name}' has no environment '{environment}'"
            return result

    if app is not None:
        result.requirements.extend(application_requirements(app, environment))
    result.requirements.extend(Requirement.parse(text) for text in requirements or [])

    if not result.requirements:
        result.error = "Nothing to resolve: give module requirements or --app"
        return result

    resolver = VersionResolver(catalog, workspace.settings.resolver)
    try:
        result.resolution = resolver.resolve(result.requirements)
    except ResolutionError as e:
        result.error = str(e)
        return result

    if app is not None and environment is not None and result.resolution.ok:
        env = app.get_environment(environment)
        assert env is not None  # checked above
        result.issues = check_configuration(catalog, result.resolution, env, app)

    return result
