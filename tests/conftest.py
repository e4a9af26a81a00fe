"""
Shared test fixtures and configuration.

``registry`` writes a small but complete registry tree:

    identity  1.0.0, 1.1.0, 2.0.0 (all active)
    payments  1.0.0 (retired), 2.0.0 (deprecated), 2.1.0 (active)
              depends on identity >=1.0.0 <2.0.0 via identity-api
    shop      application selecting payments ^2.0.0
"""

import textwrap
from pathlib import Path

import pytest

from modreg.core.models import Catalog
from modreg.core.models.application import ApplicationDocument
from modreg.core.models.component import ComponentDocument
from modreg.core.models.module import ModuleDocument
from modreg.core.services.schema_validator import parse_document


def write(root: Path, relpath: str, content: str) -> Path:
    path = root / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content))
    return path


def _identity_module(version: str, component_version: str) -> str:
    return f"""\
        apiVersion: registry/v1
        kind: Module
        metadata:
          name: identity
          version: {version}
          description: Users and tokens
          owner: team-identity
        components:
          primary:
            name: identity-service
            version: {component_version}
        contracts:
          - name: identity-api
            type: openapi-3.0
            version: {version}
            spec: contracts/identity-api.yaml
            component: identity-service
    """


def _identity_component(version: str) -> str:
    return f"""\
        apiVersion: registry/v1
        kind: PrimaryComponent
        metadata:
          name: identity-service
          module: identity
          version: {version}
          repository: github.com/acme/identity-service
        contracts:
          - name: identity-api
            type: openapi-3.0
            version: {version}
        configuration:
          required: [JWT_SECRET]
    """


def _payments_module(version: str, status: str, identity_range: str) -> str:
    return f"""\
        apiVersion: registry/v1
        kind: Module
        metadata:
          name: payments
          version: {version}
          description: Card payments
          owner: team-payments
          status: {status}
        components:
          primary:
            - name: payments-service
              version: 1.4.0
          interface:
            - name: payments-ui
              version: 3.0.1
        contracts:
          - name: payments-api
            type: openapi-3.0
            version: 1.2.0
            spec: contracts/payments-api.yaml
            component: payments-service
        dependencies:
          - module: identity
            version: "{identity_range}"
            contracts:
              - identity-api
        compliance:
          pci: true
    """


PAYMENTS_SERVICE = """\
    apiVersion: registry/v1
    kind: PrimaryComponent
    metadata:
      name: payments-service
      module: payments
      version: 1.4.0
      repository: github.com/acme/payments-service
    contracts:
      - name: payments-api
        type: openapi-3.0
        version: 1.2.0
    dependencies:
      - module: identity
        contract: identity-api
        version: ^1.0.0
    configuration:
      required: [DATABASE_URL]
      optional: [LOG_LEVEL]
"""

PAYMENTS_UI = """\
    apiVersion: registry/v1
    kind: InterfaceComponent
    metadata:
      name: payments-ui
      module: payments
      version: 3.0.1
      repository: github.com/acme/payments-ui
"""

SHOP_APPLICATION = """\
    apiVersion: registry/v1
    kind: Application
    metadata:
      name: shop
      description: Web shop
    modules:
      - name: payments
        version: ^2.0.0
    environments:
      - name: prod
        configuration:
          payments-service:
            DATABASE_URL: postgres://db/payments
          identity-service:
            JWT_SECRET: s3cret
      - name: legacy
        modules:
          - name: payments
            version: 2.0.0
        configuration:
          payments-service:
            LOG_LEVEL: debug
"""

CONFIG = """\
    registry:
      name: acme
    index:
      include_timestamp: false
"""


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def registry(tmp_path: Path) -> Path:
    """Write the sample registry and return its modreg.yml path."""
    root = tmp_path / "registry"
    write(root, "modules/identity/module-1.0.0.yaml", _identity_module("1.0.0", "1.0.0"))
    write(root, "modules/identity/module-1.1.0.yaml", _identity_module("1.1.0", "1.0.0"))
    write(root, "modules/identity/module-2.0.0.yaml", _identity_module("2.0.0", "2.0.0"))
    write(root, "modules/identity/components/identity-service-1.0.0.yaml",
          _identity_component("1.0.0"))
    write(root, "modules/identity/components/identity-service-2.0.0.yaml",
          _identity_component("2.0.0"))

    write(root, "modules/payments/module-1.0.0.yaml",
          _payments_module("1.0.0", "retired", "^1.0.0"))
    write(root, "modules/payments/module-2.0.0.yaml",
          _payments_module("2.0.0", "deprecated", "^1.0.0"))
    write(root, "modules/payments/module-2.1.0.yaml",
          _payments_module("2.1.0", "active", ">=1.0.0 <2.0.0"))
    write(root, "modules/payments/components/payments-service.yaml", PAYMENTS_SERVICE)
    write(root, "modules/payments/components/payments-ui.yaml", PAYMENTS_UI)

    write(root, "applications/shop.yaml", SHOP_APPLICATION)
    return write(root, "modreg.yml", CONFIG)


@pytest.fixture
def registry_root(registry: Path) -> Path:
    return registry.parent


@pytest.fixture
def make_catalog():
    """Build an in-memory Catalog from plain document dicts."""

    def _make(*documents: dict) -> Catalog:
        catalog = Catalog()
        for n, data in enumerate(documents):
            doc, issues = parse_document(data, source=f"doc-{n}")
            assert doc is not None, issues
            if isinstance(doc, ModuleDocument):
                catalog.modules.append(doc)
            elif isinstance(doc, ComponentDocument):
                catalog.components.append(doc)
            elif isinstance(doc, ApplicationDocument):
                catalog.applications.append(doc)
        return catalog

    return _make


def _module_doc(
    name: str,
    version: str,
    dependencies: list | None = None,
    status: str = "active",
    contracts: list | None = None,
) -> dict:
    """A minimal Module document as a dict."""
    return {
        "apiVersion": "registry/v1",
        "kind": "Module",
        "metadata": {"name": name, "version": version, "owner": "team", "status": status},
        "components": {"primary": {"name": f"{name}-svc", "version": version}},
        "contracts": contracts or [],
        "dependencies": dependencies or [],
    }


@pytest.fixture
def module_doc():
    return _module_doc
