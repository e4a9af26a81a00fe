"""
Shared document pieces — the envelope every registry document carries.

Every document has ``apiVersion``, ``kind`` and ``metadata``. The kind
decides which model the rest of the document is validated against.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

API_VERSION = "registry/v1"
SUPPORTED_API_VERSIONS = (API_VERSION,)

# DNS label: lowercase alphanumerics and dashes, no leading/trailing dash
NAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


class Classification(str, Enum):
    """Where a component sits within its module."""

    PRIMARY = "primary"
    INTERFACE = "interface"
    INTEGRATION = "integration"
    INFRASTRUCTURE = "infrastructure"

    @property
    def kind(self) -> str:
        """Document kind for this classification, e.g. ``PrimaryComponent``."""
        return f"{self.value.capitalize()}Component"

    @classmethod
    def from_kind(cls, kind: str) -> Classification | None:
        for member in cls:
            if member.kind == kind:
                return member
        return None


COMPONENT_KINDS = tuple(c.kind for c in Classification)


class ModuleStatus(str, Enum):
    """Support status of one module version."""

    ACTIVE = "active"
    DEPRECATED = "deprecated"
    RETIRED = "retired"


def coerce_version(value: Any) -> Any:
    """YAML reads ``1.0`` as a float; keep it as text so semver checks can report it."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class DocumentModel(BaseModel):
    """Base for every top-level registry document."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    api_version: str = Field(default=API_VERSION, alias="apiVersion")
    kind: str

    _source: str = PrivateAttr(default="")

    @property
    def source(self) -> str:
        """Where this document was loaded from (``path`` or ``path#index``)."""
        return self._source

    def bind_source(self, source: str) -> DocumentModel:
        self._source = source
        return self

    @property
    def ref(self) -> str:
        """Human-readable identity, e.g. ``Module/payments@2.1.0``."""
        meta = getattr(self, "metadata", None)
        name = getattr(meta, "name", "?")
        version = getattr(meta, "version", None)
        return f"{self.kind}/{name}@{version}" if version else f"{self.kind}/{name}"

    def to_document(self) -> dict[str, Any]:
        """Serialize back to the YAML document shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
