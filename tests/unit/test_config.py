"""
Tests for ConfigManager: defaults, merging and persistence.
"""
import pytest
import json
from unittest.mock import patch
from gamscheck.utils.config import ConfigManager, DEFAULT_CONFIG


class TestConfigDefaults:
    """Test that default configuration values are correct."""

    def test_default_compiler(self):
        assert DEFAULT_CONFIG["compiler"] == "gams"

    def test_default_directives(self):
        assert DEFAULT_CONFIG["directives"] == ["action=c", "lo=0"]

    def test_default_listing_ext(self):
        assert DEFAULT_CONFIG["listing_ext"] == "lst"

    def test_default_extensions(self):
        assert DEFAULT_CONFIG["extensions"] == [".gms"]


class TestConfigManagerLoadSave:
    """Test config loading and saving."""

    def test_creates_config_dir(self, tmp_path):
        config_dir = tmp_path / ".gamscheck"
        ConfigManager(config_dir=config_dir)
        assert config_dir.exists()

    def test_load_returns_defaults_when_no_file(self, tmp_path):
        mgr = ConfigManager(config_dir=tmp_path / ".gamscheck")
        assert mgr.get("compiler") == "gams"
        assert mgr.get("listing_ext") == "lst"

    def test_defaults_are_not_shared(self, tmp_path):
        mgr = ConfigManager(config_dir=tmp_path / ".gamscheck")
        mgr.get("directives").append("s=save")
        assert DEFAULT_CONFIG["directives"] == ["action=c", "lo=0"]

    def test_load_merges_user_config(self, tmp_path):
        config_dir = tmp_path / ".gamscheck"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(json.dumps({"compiler": "/opt/gams/gams"}))

        mgr = ConfigManager(config_dir=config_dir)
        # User override
        assert mgr.get("compiler") == "/opt/gams/gams"
        # Default preserved
        assert mgr.get("directives") == ["action=c", "lo=0"]

    def test_load_handles_corrupt_config(self, tmp_path):
        """Corrupt JSON should fall back to defaults."""
        config_dir = tmp_path / ".gamscheck"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("NOT VALID JSON {{{")

        mgr = ConfigManager(config_dir=config_dir)
        assert mgr.get("compiler") == "gams"

    def test_load_ignores_non_object_config(self, tmp_path):
        config_dir = tmp_path / ".gamscheck"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("[1, 2, 3]")

        mgr = ConfigManager(config_dir=config_dir)
        assert mgr.get("compiler") == "gams"

    def test_save_and_reload(self, tmp_path):
        config_dir = tmp_path / ".gamscheck"
        mgr = ConfigManager(config_dir=config_dir)
        mgr.set("compiler", "gamske")
        assert mgr.get("compiler") == "gamske"

        # Reload from disk
        mgr2 = ConfigManager(config_dir=config_dir)
        assert mgr2.get("compiler") == "gamske"

    def test_defaults_to_home_directory(self, tmp_path):
        with patch("pathlib.Path.home", return_value=tmp_path):
            mgr = ConfigManager()
        assert mgr.config_dir == tmp_path / ".gamscheck"


class TestConfigManagerGetSet:
    """Test get/set methods."""

    def test_get_missing_key_returns_default(self, tmp_path):
        mgr = ConfigManager(config_dir=tmp_path / ".gamscheck")
        assert mgr.get("nonexistent", "fallback") == "fallback"

    def test_get_missing_key_returns_none(self, tmp_path):
        mgr = ConfigManager(config_dir=tmp_path / ".gamscheck")
        assert mgr.get("nonexistent") is None

    def test_set_new_key(self, tmp_path):
        mgr = ConfigManager(config_dir=tmp_path / ".gamscheck")
        mgr.set("extensions", [".gms", ".inc"])
        assert mgr.get("extensions") == [".gms", ".inc"]
        assert json.loads(mgr.config_file.read_text())["extensions"] == [".gms", ".inc"]
