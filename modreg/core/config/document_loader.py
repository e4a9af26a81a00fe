"""
Document loader — loads registry documents from YAML files.

Documents live anywhere under modules/ (and applications/). This module
discovers every YAML file, loads each document in it and sorts them into
a Catalog by kind.

Expects structure like::

    modules/
        payments/
            module-2.1.0.yaml
            components/
                payments-service.yaml
        identity/
            ...
    applications/
        shop.yaml

Layout below modules/ is free-form: ``kind`` decides what a document is.
Files that fail to load are recorded as issues; loading never aborts.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from modreg.core.models.application import ApplicationDocument
from modreg.core.models.catalog import Catalog
from modreg.core.models.component import ComponentDocument
from modreg.core.models.issue import Issue, error, warning
from modreg.core.models.module import ModuleDocument
from modreg.core.models.registry import RegistryIndex
from modreg.core.services.schema_validator import Document, parse_document

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class DocumentError(Exception):
    """Raised when a single requested document cannot be loaded."""


def _display(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def load_file(path: Path, root: Path | None = None) -> tuple[list[Document], list[Issue]]:
    """Load every document in one YAML file.

    Multi-document files (``---`` separated) are allowed; each document's
    source is ``<path>#<n>`` when the file holds more than one.

    Returns:
        ``(documents, issues)``.
    """
    display = _display(path, root)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        return [], [error("unreadable", f"Cannot read file: {e}", source=display)]
    except UnicodeDecodeError as e:
        return [], [error("invalid-encoding", f"File is not valid UTF-8: {e}", source=display)]

    try:
        payloads = [d for d in yaml.safe_load_all(raw) if d is not None]
    except yaml.YAMLError as e:
        return [], [error("invalid-yaml", f"Invalid YAML: {e}", source=display)]

    if not payloads:
        return [], [warning("empty-file", "File contains no documents", source=display)]

    documents: list[Document] = []
    issues: list[Issue] = []
    for n, payload in enumerate(payloads):
        source = f"{display}#{n}" if len(payloads) > 1 else display
        doc, found = parse_document(payload, source)
        issues.extend(found)
        if doc is not None:
            documents.append(doc)
    return documents, issues


def _yaml_files(directory: Path) -> list[Path]:
    return sorted(
        p for p in directory.rglob("*")
        if p.is_file() and p.suffix in YAML_SUFFIXES and not p.name.startswith(".")
    )


def discover_documents(
    directories: list[Path],
    root: Path | None = None,
    catalog: Catalog | None = None,
) -> Catalog:
    """Walk directories and load every YAML document into a catalog.

    Args:
        directories: Directories to scan recursively (missing ones are skipped).
        root: Registry root, used to display sources as relative paths.
        catalog: Existing catalog to add to (a new one by default).

    Returns:
        Catalog with documents sorted by kind and every load issue recorded.
    """
    catalog = catalog or Catalog(root=root)

    for directory in directories:
        if not directory.is_dir():
            logger.debug("Document directory not found: %s", directory)
            continue

        for path in _yaml_files(directory):
            documents, issues = load_file(path, root)
            catalog.issues.extend(issues)
            for doc in documents:
                _add(catalog, doc)

    logger.info(
        "Loaded %d modules, %d components, %d applications (%d load issues)",
        len(catalog.modules), len(catalog.components),
        len(catalog.applications), len(catalog.issues),
    )
    return catalog


def _add(catalog: Catalog, doc: Document) -> None:
    if isinstance(doc, ModuleDocument):
        catalog.modules.append(doc)
    elif isinstance(doc, ComponentDocument):
        catalog.components.append(doc)
    elif isinstance(doc, ApplicationDocument):
        catalog.applications.append(doc)
    elif isinstance(doc, RegistryIndex):
        logger.debug("Ignoring generated index document at %s", doc.source)


def load_application(path: Path, root: Path | None = None) -> ApplicationDocument:
    """Load a single Application document.

    Raises:
        DocumentError: If the file is unreadable or holds no valid Application.
    """
    if not path.is_file():
        raise DocumentError(f"Application file not found: {path}")

    documents, issues = load_file(path, root)
    apps = [d for d in documents if isinstance(d, ApplicationDocument)]
    if issues and not apps:
        raise DocumentError("; ".join(str(i) for i in issues))
    if len(apps) != 1:
        raise DocumentError(f"Expected exactly one Application in {path}, found {len(apps)}")
    return apps[0]
