"""
Workspace — config + registry root + loaded catalog, shared by all use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from modreg.core.config.document_loader import discover_documents
from modreg.core.config.loader import find_config_file, load_settings, registry_root
from modreg.core.models.catalog import Catalog
from modreg.core.models.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Everything a command needs to work on one registry."""

    root: Path
    config_path: Path | None = None
    settings: Settings = field(default_factory=Settings)
    catalog: Catalog = field(default_factory=Catalog)

    @property
    def modules_dir(self) -> Path:
        return self.root / self.settings.registry.modules_dir

    @property
    def applications_dir(self) -> Path:
        return self.root / self.settings.registry.applications_dir

    @property
    def index_path(self) -> Path:
        return self.root / self.settings.registry.index_path


def open_workspace(config_path: Path | None = None) -> Workspace:
    """Find config, load settings and every document under the registry root.

    Args:
        config_path: Explicit path to modreg.yml. If None, searches upward;
            when nothing is found the working directory is the root.

    Raises:
        ConfigError: If the config file is invalid.
    """
    if config_path is None:
        config_path = find_config_file()

    settings = load_settings(config_path)
    root = registry_root(config_path)
    workspace = Workspace(root=root, config_path=config_path, settings=settings)

    workspace.catalog = discover_documents(
        [workspace.modules_dir, workspace.applications_dir],
        root=root,
    )
    if not workspace.modules_dir.is_dir():
        logger.warning("Modules directory not found: %s", workspace.modules_dir)
    return workspace
