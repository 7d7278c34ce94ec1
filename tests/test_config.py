"""
Tests for configuration parsing (gnu_setup/config.py).
"""

import json
import pytest
from unittest.mock import patch

from gnu_setup.config import (
    Preferences,
    ShellPreferences,
    Config,
    load_config_file,
    load_config,
    validate_config,
    _load_yaml,
    _load_json,
)


VALID_YAML = """\
version: 1
packages:
  skip: [tmux, watch]
preferences:
  install_timeout_seconds: 600
  verify_timeout_seconds: 20
  fresh_shell_check: false
shell:
  register_login_shell: true
"""


class TestPreferences:
    """Tests for Preferences dataclass."""

    def test_defaults(self):
        """Test Preferences with default values."""
        prefs = Preferences()
        assert prefs.install_timeout_seconds == 1800
        assert prefs.verify_timeout_seconds == 10
        assert prefs.fresh_shell_check is True

    def test_invalid_install_timeout(self):
        """Test install timeout out of range is rejected."""
        with pytest.raises(ValueError, match="install_timeout_seconds"):
            Preferences(install_timeout_seconds=0)

    def test_invalid_verify_timeout(self):
        """Test verify timeout out of range is rejected."""
        with pytest.raises(ValueError, match="verify_timeout_seconds"):
            Preferences(verify_timeout_seconds=500)

    def test_from_dict_partial(self):
        """Test missing keys fall back to defaults."""
        prefs = Preferences.from_dict({"verify_timeout_seconds": 30})
        assert prefs.verify_timeout_seconds == 30
        assert prefs.install_timeout_seconds == 1800


class TestShellPreferences:
    """Tests for ShellPreferences dataclass."""

    def test_defaults_are_off(self):
        """Test login shell changes are opt-in."""
        shell = ShellPreferences()
        assert shell.register_login_shell is False
        assert shell.change_default_shell is False

    def test_from_dict(self):
        """Test creating ShellPreferences from dictionary."""
        shell = ShellPreferences.from_dict({"change_default_shell": True})
        assert shell.change_default_shell is True
        assert shell.register_login_shell is False


class TestConfig:
    """Tests for Config dataclass."""

    def test_defaults(self):
        """Test default Config."""
        config = Config()
        assert config.version == 1
        assert config.skip_packages == ()
        assert config.source == ""

    def test_invalid_version(self):
        """Test unsupported schema version is rejected."""
        with pytest.raises(ValueError, match="Unsupported config version"):
            Config(version=2)

    def test_from_dict(self):
        """Test creating Config from a full dictionary."""
        config = Config.from_dict(
            {
                "version": 1,
                "packages": {"skip": ["tmux"]},
                "preferences": {"fresh_shell_check": False},
                "shell": {"register_login_shell": True},
            },
            source="test.yml",
        )
        assert config.skip_packages == ("tmux",)
        assert config.preferences.fresh_shell_check is False
        assert config.shell.register_login_shell is True
        assert config.source == "test.yml"

    def test_from_dict_single_skip_string(self):
        """Test a scalar skip value is accepted."""
        config = Config.from_dict({"packages": {"skip": "tmux"}})
        assert config.skip_packages == ("tmux",)

    def test_from_dict_empty_sections(self):
        """Test null sections (empty YAML keys) use defaults."""
        config = Config.from_dict({"packages": None, "preferences": None, "shell": None})
        assert config == Config()

    def test_merge_prefers_self(self):
        """Test merge keeps keys this config set and fills in the rest."""
        project = Config.from_dict({"preferences": {"verify_timeout_seconds": 30}}, source="project.yml")
        user = Config.from_dict(
            {"preferences": {"verify_timeout_seconds": 60, "install_timeout_seconds": 900}},
            source="user.yml",
        )
        merged = project.merge_with(user)
        assert merged.preferences.verify_timeout_seconds == 30
        assert merged.preferences.install_timeout_seconds == 900
        assert merged.source == "project.yml"

    def test_merge_unions_skip_lists(self):
        """Test skip lists are combined without duplicates."""
        merged = Config(skip_packages=("tmux",)).merge_with(Config(skip_packages=("tmux", "watch")))
        assert merged.skip_packages == ("tmux", "watch")

    def test_merge_takes_unset_shell_flags_from_other(self):
        """Test a flag only the lower-priority file sets is used."""
        project = Config.from_dict({"shell": {"change_default_shell": False}})
        user = Config.from_dict({"shell": {"register_login_shell": True}})
        merged = project.merge_with(user)
        assert merged.shell.register_login_shell is True
        assert merged.shell.change_default_shell is False

    def test_merge_explicit_false_overrides(self):
        """Test an explicit false in the higher-priority file wins."""
        project = Config.from_dict({"shell": {"register_login_shell": False}})
        user = Config.from_dict({"shell": {"register_login_shell": True}})
        assert project.merge_with(user).shell.register_login_shell is False

    def test_merge_explicit_true_overrides(self):
        """Test an explicit true re-enables the fresh shell check."""
        project = Config.from_dict({"preferences": {"fresh_shell_check": True}})
        user = Config.from_dict({"preferences": {"fresh_shell_check": False}})
        assert project.merge_with(user).preferences.fresh_shell_check is True

    def test_explicit_keys_recorded(self):
        """Test from_dict records only known keys that were set."""
        config = Config.from_dict(
            {"preferences": {"verify_timeout_seconds": 5, "bogus": 1}, "shell": {"change_default_shell": True}}
        )
        assert config.explicit == {"preferences.verify_timeout_seconds", "shell.change_default_shell"}

    def test_non_string_skip_entry_rejected(self):
        """Test a skip list entry must be a package name string."""
        with pytest.raises(ValueError, match="skip list"):
            Config.from_dict({"packages": {"skip": [123]}})

    def test_string_for_bool_rejected(self):
        """Test a quoted "no" is not taken as true."""
        with pytest.raises(ValueError, match="register_login_shell"):
            Config.from_dict({"shell": {"register_login_shell": "no"}})
        with pytest.raises(ValueError, match="fresh_shell_check"):
            Config.from_dict({"preferences": {"fresh_shell_check": "no"}})

    def test_non_integer_timeout_rejected(self):
        """Test timeouts must be integers."""
        with pytest.raises(ValueError, match="install_timeout_seconds"):
            Preferences(install_timeout_seconds="600")
        with pytest.raises(ValueError, match="verify_timeout_seconds"):
            Preferences(verify_timeout_seconds=True)


class TestLoaders:
    """Tests for the file loaders."""

    def test_load_yaml(self, tmp_path):
        """Test YAML parsing."""
        path = tmp_path / "config.yml"
        path.write_text(VALID_YAML)
        data = _load_yaml(str(path))
        assert data["packages"]["skip"] == ["tmux", "watch"]

    def test_load_yaml_invalid(self, tmp_path):
        """Test malformed YAML returns None."""
        path = tmp_path / "config.yml"
        path.write_text("version: [1\n")
        assert _load_yaml(str(path)) is None

    def test_load_yaml_non_mapping(self, tmp_path):
        """Test a YAML list is treated as an empty mapping."""
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n")
        assert _load_yaml(str(path)) == {}

    def test_load_json(self, tmp_path):
        """Test JSON parsing."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"version": 1}))
        assert _load_json(str(path)) == {"version": 1}

    def test_load_json_invalid(self, tmp_path):
        """Test malformed JSON returns None."""
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert _load_json(str(path)) is None


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_missing_file(self, tmp_path):
        """Test a missing file yields None."""
        assert load_config_file(str(tmp_path / "nope.yml")) is None

    def test_valid_yaml_file(self, tmp_path):
        """Test loading a complete YAML file."""
        path = tmp_path / "config.yml"
        path.write_text(VALID_YAML)
        config = load_config_file(str(path))
        assert config is not None
        assert config.skip_packages == ("tmux", "watch")
        assert config.preferences.install_timeout_seconds == 600
        assert config.preferences.verify_timeout_seconds == 20
        assert config.preferences.fresh_shell_check is False
        assert config.shell.register_login_shell is True
        assert config.source == str(path)

    def test_json_file(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"shell": {"change_default_shell": True}}))
        config = load_config_file(str(path))
        assert config is not None
        assert config.shell.change_default_shell is True

    def test_invalid_values_yield_none(self, tmp_path):
        """Test validation errors are reported as an unloadable file."""
        path = tmp_path / "config.yml"
        path.write_text("version: 3\n")
        assert load_config_file(str(path)) is None

    def test_wrong_section_type_yields_none(self, tmp_path):
        """Test a scalar where a mapping is expected is rejected."""
        path = tmp_path / "config.yml"
        path.write_text("packages: 5\n")
        assert load_config_file(str(path)) is None


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_when_nothing_found(self, tmp_path):
        """Test defaults are returned without any config file."""
        with patch("gnu_setup.config.CONFIG_LOCATIONS", [str(tmp_path / "missing.yml")]):
            assert load_config() == Config()

    def test_custom_path_missing_raises(self, tmp_path):
        """Test an explicit path that cannot be loaded is an error."""
        with patch("gnu_setup.config.CONFIG_LOCATIONS", []):
            with pytest.raises(ValueError, match="Could not load config"):
                load_config(custom_path=str(tmp_path / "missing.yml"))

    def test_custom_path_takes_priority(self, tmp_path):
        """Test the explicit file wins over default locations."""
        custom = tmp_path / "custom.yml"
        custom.write_text("preferences:\n  verify_timeout_seconds: 40\n")
        user = tmp_path / "user.yml"
        user.write_text("preferences:\n  verify_timeout_seconds: 50\n  install_timeout_seconds: 100\n")

        with patch("gnu_setup.config.CONFIG_LOCATIONS", [str(user)]):
            config = load_config(custom_path=str(custom))

        assert config.preferences.verify_timeout_seconds == 40
        assert config.preferences.install_timeout_seconds == 100
        assert config.source == str(custom)


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_default_config_is_clean(self):
        """Test defaults produce no warnings."""
        assert validate_config(Config()) == []

    def test_unknown_skip_package(self):
        """Test unknown package names are flagged."""
        warnings = validate_config(Config(skip_packages=("not-a-formula",)))
        assert any("not-a-formula" in w for w in warnings)

    def test_change_shell_without_registration(self):
        """Test chsh without /etc/shells registration is flagged."""
        config = Config(shell=ShellPreferences(change_default_shell=True))
        warnings = validate_config(config)
        assert any("register_login_shell" in w for w in warnings)


class TestInvalidValuesInFiles:
    """Tests for type errors in config files."""

    def test_non_string_skip_yields_none(self, tmp_path):
        """Test a numeric skip entry makes the file unloadable."""
        path = tmp_path / "config.yml"
        path.write_text("packages:\n  skip: [123]\n")
        assert load_config_file(str(path)) is None

    def test_quoted_bool_yields_none(self, tmp_path):
        """Test a quoted boolean makes the file unloadable."""
        path = tmp_path / "config.yml"
        path.write_text('shell:\n  register_login_shell: "no"\n')
        assert load_config_file(str(path)) is None

    def test_unquoted_no_is_false(self, tmp_path):
        """Test YAML's bare no is accepted as false."""
        path = tmp_path / "config.yml"
        path.write_text("preferences:\n  fresh_shell_check: no\n")
        config = load_config_file(str(path))
        assert config is not None
        assert config.preferences.fresh_shell_check is False

    def test_explicit_config_with_bad_skip_raises(self, tmp_path):
        """Test a bad --config file is reported before anything runs."""
        path = tmp_path / "config.yml"
        path.write_text("packages:\n  skip: [123]\n")
        with patch("gnu_setup.config.CONFIG_LOCATIONS", []):
            with pytest.raises(ValueError, match="Could not load config"):
                load_config(custom_path=str(path))

    def test_project_file_turns_off_user_flag(self, tmp_path):
        """Test a higher-priority file can switch a user flag back off."""
        project = tmp_path / "project.yml"
        project.write_text("shell:\n  register_login_shell: false\n")
        user = tmp_path / "user.yml"
        user.write_text("shell:\n  register_login_shell: true\n")

        with patch("gnu_setup.config.CONFIG_LOCATIONS", [str(project), str(user)]):
            config = load_config()

        assert config.shell.register_login_shell is False
