"""
Tests for configuration loading — modreg.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from modreg.core.config.loader import (
    ConfigError,
    find_config_file,
    load_settings,
    registry_root,
)


@pytest.fixture
def full_config(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        version: 1
        registry:
          name: acme
          modules_dir: defs/modules
          index_path: out/registry.yaml
        validation:
          strict: true
          allow_cycles: true
          contract_types: [soap]
        resolver:
          max_attempts: 50
          include_prerelease: true
        index:
          include_timestamp: false
    """)
    path = tmp_path / "modreg.yml"
    path.write_text(content)
    return path


class TestLoadSettings:
    def test_full(self, full_config: Path):
        settings = load_settings(full_config)
        assert settings.registry.name == "acme"
        assert settings.registry.modules_dir == "defs/modules"
        assert settings.registry.applications_dir == "applications"
        assert settings.validation.strict is True
        assert settings.validation.contract_types == ["soap"]
        assert settings.resolver.max_attempts == 50
        assert settings.index.include_timestamp is False

    def test_none_means_defaults(self):
        settings = load_settings(None)
        assert settings.registry.modules_dir == "modules"
        assert settings.registry.index_path == "registry.yaml"
        assert settings.resolver.max_attempts == 10000
        assert settings.index.include_timestamp is True

    def test_empty_file_means_defaults(self, tmp_path: Path):
        path = tmp_path / "modreg.yml"
        path.write_text("")
        assert load_settings(path).registry.name == "registry"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "modreg.yml"
        path.write_text("registry: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_invalid_encoding(self, tmp_path: Path):
        path = tmp_path / "modreg.yml"
        path.write_bytes(b"registry:\n  name: \xff\xfe\n")
        with pytest.raises(ConfigError, match="not valid UTF-8"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "modreg.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_settings(path)

    def test_unknown_key(self, tmp_path: Path):
        path = tmp_path / "modreg.yml"
        path.write_text("registry:\n  modules: x\n")
        with pytest.raises(ConfigError, match="Invalid registry configuration"):
            load_settings(path)

    def test_max_attempts_must_be_positive(self, tmp_path: Path):
        path = tmp_path / "modreg.yml"
        path.write_text("resolver:\n  max_attempts: 0\n")
        with pytest.raises(ConfigError):
            load_settings(path)


class TestFindConfigFile:
    def test_found_in_current(self, full_config: Path):
        assert find_config_file(full_config.parent) == full_config.resolve()

    def test_found_walking_up(self, full_config: Path):
        nested = full_config.parent / "modules" / "payments"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == full_config.resolve()

    def test_alternate_name(self, tmp_path: Path):
        path = tmp_path / "modreg.yaml"
        path.write_text("registry: {name: alt}\n")
        assert find_config_file(tmp_path) == path.resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None

    def test_registry_root(self, full_config: Path, tmp_path: Path, monkeypatch):
        assert registry_root(full_config) == full_config.parent.resolve()
        monkeypatch.chdir(tmp_path)
        assert registry_root(None) == tmp_path.resolve()
