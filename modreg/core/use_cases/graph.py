"""
Graph use case — build the module or component dependency graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from modreg.core.config.loader import ConfigError
from modreg.core.services.dependency_graph import (
    DependencyGraph,
    build_component_graph,
    build_module_graph,
)
from modreg.core.use_cases.workspace import open_workspace


@dataclass
class GraphResult:
    graph: DependencyGraph | None = None
    focus: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        data = self.graph.to_dict() if self.graph else {}
        data["focus"] = self.focus
        return data


def build_graph(
    config_path: Path | None = None,
    components: bool = False,
    module: str | None = None,
) -> GraphResult:
    """Build a dependency graph over the latest module versions.

    Args:
        config_path: Optional explicit path to modreg.yml.
        components: Component-level graph instead of module-level.
        module: Restrict to this module and what it transitively depends on.
    """
    result = GraphResult(focus=module)

    try:
        workspace = open_workspace(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    catalog = workspace.catalog
    graph = build_component_graph(catalog) if components else build_module_graph(catalog)

    if module is not None:
        if not catalog.has_module(module):
            result.error = f"Unknown module '{module}'"
            return result
        if components:
            roots = [n for n in graph.nodes if graph.node(n).get("module") == module]
            graph = graph.subgraph(*roots)
        else:
            graph = graph.subgraph(module)

    result.graph = graph
    return result
