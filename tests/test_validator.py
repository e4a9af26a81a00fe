"""
Tests for the schema validator — per-document and cross-document checks.
"""

from pathlib import Path

import pytest

from conftest import write
from modreg.core.config.document_loader import discover_documents
from modreg.core.models.settings import ValidationSettings
from modreg.core.services.schema_validator import validate_catalog


def _codes(report, errors_only: bool = False) -> list[str]:
    issues = report.errors if errors_only else report.issues
    return sorted(i.code for i in issues)


def _component(name: str, module: str, version: str = "1.0.0", kind: str = "PrimaryComponent",
               **extra) -> dict:
    data = {
        "apiVersion": "registry/v1",
        "kind": kind,
        "metadata": {"name": name, "module": module, "version": version},
    }
    data.update(extra)
    return data


class TestSampleRegistry:
    def test_clean(self, registry_root: Path):
        catalog = discover_documents(
            [registry_root / "modules", registry_root / "applications"], root=registry_root
        )
        report = validate_catalog(catalog)
        assert report.ok
        assert report.issues == []
        assert report.documents_checked == 11

    def test_load_issues_included(self, registry_root: Path):
        write(registry_root, "modules/broken.yaml", "kind: [\n")
        catalog = discover_documents([registry_root / "modules"], root=registry_root)
        report = validate_catalog(catalog)
        assert not report.ok
        assert report.error_sources() == {"modules/broken.yaml"}


class TestModuleChecks:
    def test_primary_count(self, make_catalog, module_doc):
        doc = module_doc("a", "1.0.0")
        doc["components"] = {"interface": [{"name": "ui", "version": "1.0.0"}]}
        report = validate_catalog(make_catalog(doc))
        assert "primary-count" in _codes(report, errors_only=True)

    def test_bad_name_and_version(self, make_catalog, module_doc):
        report = validate_catalog(make_catalog(module_doc("Payments_Svc", "1.0")))
        codes = _codes(report, errors_only=True)
        assert "invalid-name" in codes
        assert "invalid-version" in codes

    def test_missing_owner_is_warning(self, make_catalog, module_doc):
        doc = module_doc("a", "1.0.0")
        doc["metadata"].pop("owner")
        report = validate_catalog(make_catalog(doc))
        assert "missing-owner" in [w.code for w in report.warnings]

    def test_duplicate_component(self, make_catalog, module_doc):
        doc = module_doc("a", "1.0.0")
        doc["components"]["interface"] = [{"name": "a-svc", "version": "1.0.0"}]
        report = validate_catalog(make_catalog(doc))
        assert "duplicate-component" in _codes(report, errors_only=True)

    def test_missing_component_document_is_warning(self, make_catalog, module_doc):
        report = validate_catalog(make_catalog(module_doc("a", "1.0.0")))
        assert report.ok
        assert "component-missing" in [w.code for w in report.warnings]

    def test_classification_and_module_mismatch(self, make_catalog, module_doc):
        catalog = make_catalog(
            module_doc("a", "1.0.0"),
            module_doc("b", "1.0.0"),
            _component("a-svc", "b", kind="InterfaceComponent"),
        )
        codes = _codes(validate_catalog(catalog), errors_only=True)
        assert "classification-mismatch" in codes
        assert "component-module-mismatch" in codes

    def test_contract_checks(self, make_catalog, module_doc):
        doc = module_doc("a", "1.0.0", contracts=[
            {"name": "api", "type": "openapi-3.0", "version": "1.0.0", "component": "ghost"},
            {"name": "api", "type": "soap", "version": "one", "component": "a-svc"},
            {"name": "events", "type": "custom:queue", "version": "1.0.0"},
        ])
        report = validate_catalog(make_catalog(doc))
        errors = _codes(report, errors_only=True)
        warnings = [w.code for w in report.warnings]
        assert "contract-component-unknown" in errors
        assert "duplicate-contract" in errors
        assert "invalid-version" in errors
        assert "unknown-contract-type" in warnings
        assert "contract-owner-missing" in warnings

    def test_configured_contract_type(self, make_catalog, module_doc):
        doc = module_doc("a", "1.0.0", contracts=[
            {"name": "api", "type": "soap", "version": "1.0.0", "component": "a-svc"},
        ])
        report = validate_catalog(make_catalog(doc), ValidationSettings(contract_types=["soap"]))
        assert "unknown-contract-type" not in _codes(report)

    def test_dependency_checks(self, make_catalog, module_doc):
        catalog = make_catalog(
            module_doc("a", "1.0.0", [
                {"module": "a"},
                {"module": "ghost"},
                {"module": "b", "version": "^^1"},
                {"module": "b", "version": "^5.0.0", "contracts": ["nope"]},
            ]),
            module_doc("b", "1.0.0"),
        )
        report = validate_catalog(catalog)
        errors = _codes(report, errors_only=True)
        assert "self-dependency" in errors
        assert "unknown-module" in errors
        assert "invalid-range" in errors
        assert "duplicate-dependency" in errors
        assert "unknown-contract" in errors
        assert "unsatisfiable-range" in [w.code for w in report.warnings]

    def test_duplicate_document(self, make_catalog, module_doc):
        report = validate_catalog(make_catalog(module_doc("a", "1.0.0"), module_doc("a", "1.0.0")))
        duplicates = [i for i in report.errors if i.code == "duplicate-document"]
        assert len(duplicates) == 1
        assert duplicates[0].source == "doc-1"


class TestComponentChecks:
    def test_configuration_keys(self, make_catalog, module_doc):
        catalog = make_catalog(
            module_doc("a", "1.0.0"),
            _component("a-svc", "a", configuration={
                "required": ["URL", "URL", "TOKEN"],
                "optional": ["TOKEN"],
            }),
        )
        codes = _codes(validate_catalog(catalog), errors_only=True)
        assert codes == ["config-key-conflict", "duplicate-config-key"]

    def test_unknown_owner_module_is_warning(self, make_catalog):
        report = validate_catalog(make_catalog(_component("x-svc", "x")))
        assert report.ok
        assert [w.code for w in report.warnings] == ["unknown-module"]

    def test_unlisted_component(self, make_catalog, module_doc):
        report = validate_catalog(make_catalog(module_doc("a", "1.0.0"), _component("stray", "a")))
        assert "component-unlisted" in [w.code for w in report.warnings]

    def test_contract_dependencies(self, make_catalog, module_doc):
        catalog = make_catalog(
            module_doc("a", "1.0.0"),
            module_doc("b", "1.0.0", contracts=[
                {"name": "b-api", "type": "grpc-proto", "version": "1.0.0", "component": "b-svc"},
            ]),
            _component("a-svc", "a", dependencies=[
                {"module": "b", "contract": "b-api", "version": "^1.0.0"},
                {"module": "b", "contract": "b-events"},
                {"module": "ghost", "contract": "x"},
                {"module": "a", "contract": "a-api"},
            ]),
        )
        report = validate_catalog(catalog)
        a_svc = [i for i in report.issues if i.document == "PrimaryComponent/a-svc@1.0.0"]
        assert sorted(i.code for i in a_svc) == [
            "same-module-dependency", "unknown-contract", "unknown-contract", "unknown-module",
        ]

    def test_contract_owner_mismatch(self, make_catalog, module_doc):
        catalog = make_catalog(
            module_doc("a", "1.0.0"),
            _component("a-svc", "a", contracts=[
                {"name": "api", "type": "graphql", "version": "1.0.0", "component": "other"},
            ]),
        )
        assert "contract-component-mismatch" in _codes(validate_catalog(catalog), errors_only=True)


class TestApplicationChecks:
    def test_unknown_module_and_duplicate_environment(self, make_catalog, module_doc):
        catalog = make_catalog(module_doc("a", "1.0.0"), {
            "apiVersion": "registry/v1",
            "kind": "Application",
            "metadata": {"name": "shop"},
            "modules": [{"name": "a"}, {"name": "ghost"}],
            "environments": [{"name": "prod"}, {"name": "prod"}],
        })
        codes = _codes(validate_catalog(catalog), errors_only=True)
        assert codes == ["duplicate-environment", "unknown-module"]


class TestCycles:
    @pytest.fixture
    def cyclic(self, make_catalog, module_doc):
        return make_catalog(
            module_doc("a", "1.0.0", [{"module": "b"}]),
            module_doc("b", "1.0.0", [{"module": "a"}]),
        )

    def test_cycle_is_error(self, cyclic):
        report = validate_catalog(cyclic)
        cycles = [i for i in report.errors if i.code == "dependency-cycle"]
        assert len(cycles) == 1
        assert "a, b" in cycles[0].message

    def test_allow_cycles(self, cyclic):
        report = validate_catalog(cyclic, ValidationSettings(allow_cycles=True))
        assert "dependency-cycle" in [w.code for w in report.warnings]
        assert "dependency-cycle" not in _codes(report, errors_only=True)


class TestStrict:
    def test_warnings_become_errors(self, make_catalog, module_doc):
        catalog = make_catalog(module_doc("a", "1.0.0"))
        assert validate_catalog(catalog).ok
        report = validate_catalog(catalog, ValidationSettings(strict=True))
        assert not report.ok
        assert report.warnings == []

    def test_to_dict(self, make_catalog, module_doc):
        data = validate_catalog(make_catalog(module_doc("a", "1.0.0"))).to_dict()
        assert data["ok"] is True
        assert data["errors"] == 0
        assert data["warnings"] == 1
        assert data["issues"][0]["severity"] == "warning"
