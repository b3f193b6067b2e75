"""Tests for ConfigManager."""

import yaml
import pytest
from pathlib import Path
from unittest.mock import patch

from redtools.core.config_manager import ConfigManager, DEFAULT_CONFIG, app_home
from redtools.core.exceptions import ConfigError
from redtools.core.types import GeminiModel


class TestConfigManagerInit:
    """Test configuration loading and creation."""

    def test_creates_default_config_when_missing(self, tmp_dir):
        """When no settings.yaml exists, should create one with defaults."""
        config_path = tmp_dir / "config" / "settings.yaml"
        ConfigManager(config_path)

        assert config_path.exists()
        with open(config_path, 'r') as f:
            saved = yaml.safe_load(f)
        assert saved["gemini"]["model"] == GeminiModel.FLASH.value
        assert saved["reddit"]["max_pages"] == 40

    def test_loads_existing_config(self, config_file):
        cm = ConfigManager(config_file)
        assert cm.get("gemini.api_key") == "test-key"
        assert cm.get("reddit.client_id") == "cid"
        assert cm.get("reddit.fetch_delay_sec") == 0

    def test_partial_file_merged_over_defaults(self, tmp_dir):
        config_path = tmp_dir / "settings.yaml"
        config_path.write_text("gemini:\n  api_key: abc\n")

        cm = ConfigManager(config_path)
        assert cm.get("gemini.api_key") == "abc"
        assert cm.get("gemini.timeout") == 60
        assert cm.get("reddit.page_size") == 25

    def test_uses_defaults_on_invalid_yaml(self, tmp_dir):
        config_path = tmp_dir / "settings.yaml"
        config_path.write_text("{{invalid yaml: [")

        cm = ConfigManager(config_path)
        assert cm.get("gemini.model") == DEFAULT_CONFIG["gemini"]["model"]

    def test_non_mapping_yaml_ignored(self, tmp_dir):
        config_path = tmp_dir / "settings.yaml"
        config_path.write_text("- just\n- a list\n")

        cm = ConfigManager(config_path)
        assert cm.get("app.log_level") == "INFO"

    def test_defaults_not_mutated(self, tmp_dir):
        cm = ConfigManager(tmp_dir / "settings.yaml")
        cm.set("reddit.page_size", 5)
        assert DEFAULT_CONFIG["reddit"]["page_size"] == 25


class TestConfigManagerAccess:
    """Test dot-notation get/set."""

    def test_get_missing_returns_default(self, config_file):
        cm = ConfigManager(config_file)
        assert cm.get("nope.missing", "fallback") == "fallback"
        assert cm.get("gemini.api_key.deeper") is None

    def test_set_creates_intermediate(self, config_file):
        cm = ConfigManager(config_file)
        cm.set("extra.section.value", 3)
        assert cm.get("extra.section.value") == 3

    def test_set_does_not_save(self, config_file):
        cm = ConfigManager(config_file)
        cm.set("gemini.api_key", "changed")
        assert ConfigManager(config_file).get("gemini.api_key") == "test-key"

    def test_reload_picks_up_external_change(self, config_file):
        cm = ConfigManager(config_file)
        other = ConfigManager(config_file)
        other.update({"gemini.api_key": "from-elsewhere"})

        cm.reload()
        assert cm.get("gemini.api_key") == "from-elsewhere"


class TestConfigManagerUpdate:
    """Test validation in update()."""

    def test_update_persists(self, config_file):
        cm = ConfigManager(config_file)
        cm.update({"gemini.api_key": "  new-key  ", "gemini.model": GeminiModel.PRO})

        fresh = ConfigManager(config_file)
        assert fresh.get("gemini.api_key") == "new-key"
        assert fresh.get("gemini.model") == "gemini-2.0-flash-exp"

    def test_unknown_model_ignored(self, config_file):
        cm = ConfigManager(config_file)
        cm.update({"gemini.model": "gpt-4"})
        assert cm.get("gemini.model") == GeminiModel.FLASH.value

    @pytest.mark.parametrize("value,expected", [(3, 10), (30, 30), ("45", 45)])
    def test_timeout_minimum(self, config_file, value, expected):
        cm = ConfigManager(config_file)
        cm.update({"gemini.timeout": value})
        assert cm.get("gemini.timeout") == expected

    def test_invalid_timeout_ignored(self, config_file):
        cm = ConfigManager(config_file)
        cm.update({"gemini.timeout": "soon"})
        assert cm.get("gemini.timeout") == 60

    @pytest.mark.parametrize("value,expected", [(0, 1), (500, 100), (42, 42)])
    def test_post_limit_clamped(self, config_file, value, expected):
        cm = ConfigManager(config_file)
        cm.update({"reddit.post_limit": value})
        assert cm.get("reddit.post_limit") == expected

    def test_negative_delay_forced_to_zero(self, config_file):
        cm = ConfigManager(config_file)
        cm.update({"reddit.fetch_delay_sec": -1})
        assert cm.get("reddit.fetch_delay_sec") == 0.0

    def test_save_failure_raises_config_error(self, config_file):
        cm = ConfigManager(config_file)
        with patch("builtins.open", side_effect=PermissionError("read-only")):
            with pytest.raises(ConfigError):
                cm.save()


class TestResolvePath:
    def test_relative_resolved_against_app_home(self, tmp_dir, app_home_dir):
        cm = ConfigManager(tmp_dir / "settings.yaml")
        assert cm.resolve_path("shared.store_path", "x.db") == app_home_dir / "db" / "shared.db"

    def test_absolute_kept(self, config_file, tmp_dir):
        cm = ConfigManager(config_file)
        assert cm.resolve_path("shared.store_path", "x.db") == tmp_dir / "shared.db"


class TestAppHome:
    def test_env_override(self, app_home_dir):
        assert app_home() == app_home_dir

    def test_defaults_to_user_directory(self, monkeypatch, tmp_dir):
        monkeypatch.delenv("REDTOOLS_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_dir)
        assert app_home() == tmp_dir / ".redtools"

    def test_default_settings_live_in_app_home(self, app_home_dir):
        cm = ConfigManager()
        assert cm.CONFIG_PATH == app_home_dir / "settings.yaml"
        assert (app_home_dir / "settings.yaml").exists()
