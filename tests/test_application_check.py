"""
Tests for application resolution — environment overrides and configuration.
"""

from pathlib import Path

from modreg.core.models.application import EnvironmentSpec
from modreg.core.services.application_check import check_configuration
from modreg.core.services.version_resolver import Requirement, resolve
from modreg.core.use_cases.resolve import run_resolve


class TestRunResolve:
    def test_requirements(self, registry: Path):
        result = run_resolve(config_path=registry, requirements=["payments@^2.0.0"])
        assert result.ok
        assert result.resolution.selected == {"payments": "2.1.0", "identity": "1.1.0"}
        assert result.application is None

    def test_application_by_name(self, registry: Path):
        result = run_resolve(config_path=registry, application="shop")
        assert result.ok
        assert result.application == "shop"
        assert [r.required_by for r in result.requirements] == ["shop"]

    def test_application_by_path(self, registry: Path):
        path = registry.parent / "applications" / "shop.yaml"
        result = run_resolve(config_path=registry, application=str(path), environment="prod")
        assert result.ok
        assert result.issues == []

    def test_environment_override_and_missing_config(self, registry: Path):
        result = run_resolve(config_path=registry, application="shop", environment="legacy")
        assert result.resolution.ok
        assert result.resolution.selected["payments"] == "2.0.0"
        assert result.requirements[0].required_by == "shop/legacy"

        missing = sorted((i.code, i.message) for i in result.issues)
        assert [code for code, _ in missing] == ["missing-config", "missing-config"]
        assert any("DATABASE_URL" in message for _, message in missing)
        assert not result.ok

    def test_undeclared_and_unused_config(self, registry: Path):
        shop = registry.parent / "applications" / "shop.yaml"
        shop.write_text(shop.read_text().replace(
            "        JWT_SECRET: s3cret\n",
            "        JWT_SECRET: s3cret\n"
            "        COLOR: blue\n"
            "      billing-worker:\n"
            "        X: 1\n",
        ))
        result = run_resolve(config_path=registry, application="shop", environment="prod")
        codes = sorted(i.code for i in result.issues)
        assert codes == ["undeclared-config", "unused-config"]
        assert result.ok

    def test_extra_requirements_combine_with_app(self, registry: Path):
        result = run_resolve(
            config_path=registry, requirements=["identity@^2.0.0"], application="shop"
        )
        assert not result.ok
        assert result.error is None
        assert result.resolution.conflicts[0].module == "identity"

    def test_errors(self, registry: Path):
        assert "Nothing to resolve" in run_resolve(config_path=registry).error
        assert "Unknown application" in run_resolve(config_path=registry, application="nope").error
        assert "together with --app" in run_resolve(
            config_path=registry, requirements=["payments"], environment="prod"
        ).error
        assert "no environment 'qa'" in run_resolve(
            config_path=registry, application="shop", environment="qa"
        ).error

    def test_to_dict(self, registry: Path):
        data = run_resolve(config_path=registry, application="shop", environment="legacy").to_dict()
        assert data["ok"] is False
        assert data["environment"] == "legacy"
        assert data["resolution"]["selected"]["payments"] == "2.0.0"
        assert {i["code"] for i in data["issues"]} == {"missing-config"}


class TestCheckConfiguration:
    def test_component_without_document(self, make_catalog, module_doc):
        catalog = make_catalog(module_doc("a", "1.0.0"))
        resolution = resolve(catalog, [Requirement.parse("a")])
        env = EnvironmentSpec(name="prod", configuration={
            "a-svc": {"URL": "x"},
            "ghost-svc": {"URL": "y"},
        })
        issues = check_configuration(catalog, resolution, env)
        found = {i.code: i.message for i in issues}
        assert set(found) == {"unchecked-config", "unused-config"}
        assert "a-svc@1.0.0" in found["unchecked-config"]
        assert "no component document" in found["unchecked-config"]
        assert "'ghost-svc'" in found["unused-config"]
        assert not any(i.is_error for i in issues)
