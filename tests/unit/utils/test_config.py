"""Unit tests for the wizard settings file."""

from pathlib import Path

import pytest
import yaml
from schema import SchemaError

from autoclean_wizard.utils.config import (
    CONFIG_ENV_VAR,
    DEFAULT_WIZARD_CONFIG,
    default_config_path,
    load_wizard_config,
)


class TestLoadWizardConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_wizard_config(tmp_path / "missing.yaml") == DEFAULT_WIZARD_CONFIG

    def test_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "wizard.yaml"
        config_file.write_text("", encoding="utf-8")
        assert load_wizard_config(config_file) == DEFAULT_WIZARD_CONFIG

    def test_values_override_defaults(self, tmp_path):
        config_file = tmp_path / "wizard.yaml"
        config_file.write_text(
            yaml.dump({"output_dir": str(tmp_path / "out"), "default_template": "EventBased"}),
            encoding="utf-8",
        )

        config = load_wizard_config(config_file)

        assert config["output_dir"] == tmp_path / "out"
        assert isinstance(config["output_dir"], Path)
        assert config["default_template"] == "EventBased"
        assert config["fallback_class_name"] == "CustomTask"

    def test_invalid_class_name(self, tmp_path):
        config_file = tmp_path / "wizard.yaml"
        config_file.write_text("fallback_class_name: 1bad\n", encoding="utf-8")

        with pytest.raises(SchemaError):
            load_wizard_config(config_file)

    def test_unknown_key(self, tmp_path):
        config_file = tmp_path / "wizard.yaml"
        config_file.write_text("colour: blue\n", encoding="utf-8")

        with pytest.raises(SchemaError):
            load_wizard_config(config_file)

    def test_malformed_yaml(self, tmp_path):
        config_file = tmp_path / "wizard.yaml"
        config_file.write_text("output_dir: [unclosed\n", encoding="utf-8")

        with pytest.raises(yaml.YAMLError):
            load_wizard_config(config_file)


class TestDefaultConfigPath:
    def test_env_var_takes_precedence(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "custom.yaml"))
        assert default_config_path() == tmp_path / "custom.yaml"

    def test_user_config_dir(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        path = default_config_path()
        assert path.name == "wizard.yaml"
        assert "autoclean-wizard" in str(path)

    def test_load_uses_env_var(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("default_template: EventBased\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert load_wizard_config()["default_template"] == "EventBased"
