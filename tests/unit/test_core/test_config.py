"""
Unit tests for the Config class.
"""

import json

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from tracker.core.config import PROJECT_ROOT, Config


class TestConfigDefaults:
    """Tests for default settings and preferences."""

    def test_creates_files_with_defaults(self, tmp_path):
        config = Config(tmp_path)
        assert (tmp_path / "settings.json").exists()
        assert (tmp_path / "preferences.json").exists()
        assert config.get("start_of_week") == 1
        assert config.get("top_suggestions", "preferences") == 3

    def test_settings_file_holds_only_used_keys(self, tmp_path):
        Config(tmp_path)
        written = json.loads((tmp_path / "settings.json").read_text())
        assert set(written) == {"database_path", "start_of_week"}

    def test_unknown_key_returns_default(self, tmp_path):
        config = Config(tmp_path)
        assert config.get("missing", default="x") == "x"
        assert config.get("anything", section="nope", default=5) == 5

    def test_relative_database_path_under_project(self, tmp_path):
        config = Config(tmp_path)
        assert config.get_database_path() == PROJECT_ROOT / "data/database/tracker.db"


class TestConfigOverrides:
    """Tests for values written to disk."""

    def test_saved_file_merges_over_defaults(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"start_of_week": 0}))
        config = Config(tmp_path)
        assert config.get_start_of_week() == 0
        assert config.get("database_path") == "data/database/tracker.db"

    def test_set_persists(self, tmp_path):
        Config(tmp_path).set("suggestions_per_outcome", 5, section="preferences")
        assert Config(tmp_path).get("suggestions_per_outcome", "preferences") == 5

    def test_absolute_database_path(self, tmp_path):
        config = Config(tmp_path)
        config.set("database_path", str(tmp_path / "t.db"))
        assert config.get_database_path() == tmp_path / "t.db"

    def test_env_config_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRACKER_CONFIG_DIR", str(tmp_path / "cfg"))
        config = Config()
        assert config.config_dir == tmp_path / "cfg"
