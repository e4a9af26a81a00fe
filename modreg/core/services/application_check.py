"""
Application checks — configuration completeness for a resolved selection.

Given a resolution and an environment, every selected component's
``required`` configuration keys must be supplied by the environment.
Keys that no component declares are reported as warnings.
"""

from __future__ import annotations

from modreg.core.models.application import ApplicationDocument, EnvironmentSpec
from modreg.core.models.catalog import Catalog
from modreg.core.models.issue import Issue, error, warning
from modreg.core.services.version_resolver import Requirement, Resolution


def application_requirements(
    app: ApplicationDocument,
    environment: str | None = None,
) -> list[Requirement]:
    """Root requirements for an application, with environment overrides."""
    origin = f"{app.name}/{environment}" if environment else app.name
    return [
        Requirement(module=s.name, version_range=s.version, required_by=origin)
        for s in app.requirements_for(environment)
    ]


def check_configuration(
    catalog: Catalog,
    resolution: Resolution,
    environment: EnvironmentSpec,
    app: ApplicationDocument | None = None,
) -> list[Issue]:
    """Compare supplied configuration against what selected components declare."""
    issues: list[Issue] = []
    where = {"source": app.source, "document": app.ref} if app is not None else {}
    declared: dict[str, set[str]] = {}
    selected: dict[str, str] = {}

    for module_name in sorted(resolution.components):
        for component_name, version in sorted(resolution.components[module_name].items()):
            selected[component_name] = version
            component = catalog.component(component_name, version)
            if component is None:
                continue
            config = component.configuration
            declared[component_name] = set(config.required) | set(config.optional)
            supplied = environment.configuration.get(component_name, {})
            for key in config.required:
                if key not in supplied:
                    issues.append(error(
                        "missing-config",
                        f"{component_name}@{version} requires '{key}' "
                        f"in environment '{environment.name}'",
                        path=f"environments.{environment.name}.configuration.{component_name}",
                        **where,
                    ))

    for component_name in sorted(environment.configuration):
        if component_name not in selected:
            issues.append(warning(
                "unused-config",
                f"Configuration given for '{component_name}', which is not a selected component",
                path=f"environments.{environment.name}.configuration",
                **where,
            ))
            continue
        if component_name not in declared:
            issues.append(warning(
                "unchecked-config",
                f"Configuration for {component_name}@{selected[component_name]} cannot be "
                "checked: no component document",
                path=f"environments.{environment.name}.configuration.{component_name}",
                **where,
            ))
            continue
        for key in sorted(environment.configuration[component_name]):
            if key not in declared[component_name]:
                issues.append(warning(
                    "undeclared-config",
                    f"'{key}' is not a configuration key of {component_name}",
                    path=f"environments.{environment.name}.configuration.{component_name}",
                    **where,
                ))
    return issues
