"""
Domain models — Pydantic types for registry documents.

All models are re-exported here for convenient access:

    from modreg.core.models import ModuleDocument, ComponentDocument, Catalog
"""

from modreg.core.models.application import (
    ApplicationDocument,
    ApplicationMetadata,
    EnvironmentSpec,
    ModuleSelection,
)
from modreg.core.models.catalog import Catalog
from modreg.core.models.common import (
    API_VERSION,
    COMPONENT_KINDS,
    Classification,
    DocumentModel,
    ModuleStatus,
)
from modreg.core.models.component import (
    ComponentDependency,
    ComponentDocument,
    ComponentMetadata,
    ConfigurationKeys,
)
from modreg.core.models.contract import (
    BUILTIN_CONTRACT_TYPES,
    Contract,
    ContractRequirement,
    is_known_contract_type,
)
from modreg.core.models.issue import Issue, Severity
from modreg.core.models.module import (
    ComponentGroups,
    ComponentRef,
    ModuleDependency,
    ModuleDocument,
    ModuleMetadata,
)
from modreg.core.models.registry import (
    RegistryEntry,
    RegistryIndex,
    RegistryMetadata,
    RegistrySummary,
)
from modreg.core.models.settings import (
    IndexSettings,
    RegistrySection,
    ResolverSettings,
    Settings,
    ValidationSettings,
)

__all__ = [
    # common.py
    "API_VERSION",
    "COMPONENT_KINDS",
    "Classification",
    "DocumentModel",
    "ModuleStatus",
    # application.py
    "ApplicationDocument",
    "ApplicationMetadata",
    "EnvironmentSpec",
    "ModuleSelection",
    # catalog.py
    "Catalog",
    # component.py
    "ComponentDependency",
    "ComponentDocument",
    "ComponentMetadata",
    "ConfigurationKeys",
    # contract.py
    "BUILTIN_CONTRACT_TYPES",
    "Contract",
    "ContractRequirement",
    "is_known_contract_type",
    # issue.py
    "Issue",
    "Severity",
    # module.py
    "ComponentGroups",
    "ComponentRef",
    "ModuleDependency",
    "ModuleDocument",
    "ModuleMetadata",
    # registry.py
    "RegistryEntry",
    "RegistryIndex",
    "RegistryMetadata",
    "RegistrySummary",
    # settings.py
    "IndexSettings",
    "RegistrySection",
    "ResolverSettings",
    "Settings",
    "ValidationSettings",
]
