"""
Index file persistence — atomic read/write for the registry index.

The index is stored as YAML (registry.yaml at the registry root). Writes
are atomic (write to temp file, then rename) so a crash mid-write never
leaves a half-written index behind.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from modreg.core.models.registry import RegistryIndex

logger = logging.getLogger(__name__)

_HEADER = "# Generated by modreg. Do not edit by hand; run 'modreg index'.\n"


class IndexFileError(Exception):
    """Raised when an existing index file cannot be read."""


def dump_index(index: RegistryIndex) -> str:
    """Render an index as YAML text (keys in document order)."""
    body = yaml.safe_dump(
        index.to_document(),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    return _HEADER + body


def load_index(path: Path) -> RegistryIndex | None:
    """Load a registry index from disk.

    Returns:
        RegistryIndex, or None if the file doesn't exist.

    Raises:
        IndexFileError: If the file exists but isn't a valid index.
    """
    if not path.is_file():
        logger.debug("No index file at %s", path)
        return None

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise IndexFileError(f"Cannot read index {path}: {e}") from e

    try:
        return RegistryIndex.model_validate(data)
    except ValidationError as e:
        raise IndexFileError(f"Invalid index {path}: {e}") from e


def write_index(index: RegistryIndex, path: Path) -> None:
    """Save a registry index (atomic write).

    Uses write-to-temp-then-rename to prevent corruption.

    Args:
        index: The index to save.
        path: Target path for the index file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = dump_index(index)

    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".registry_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with open(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            tmp.replace(path)
            logger.debug("Index saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Failed to save index to %s: %s", path, e)
        raise


def index_is_current(index: RegistryIndex, path: Path) -> bool:
    """Whether the file at ``path`` matches ``index``, ignoring generatedAt."""
    try:
        existing = load_index(path)
    except IndexFileError as e:
        logger.info("Existing index unreadable, treating as stale: %s", e)
        return False
    if existing is None:
        return False
    return existing.comparable() == index.comparable()
