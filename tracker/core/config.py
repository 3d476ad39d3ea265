"""
Configuration management for Outcome Tracker
Handles loading and saving settings and user preferences
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

PROJECT_ROOT = Path(__file__).parent.parent.parent


class Config:
    """Configuration manager for the tracker"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Path to configuration directory (defaults to
                $TRACKER_CONFIG_DIR, then ./config)
        """
        if config_dir is None:
            env_dir = os.environ.get('TRACKER_CONFIG_DIR')
            config_dir = Path(env_dir) if env_dir else PROJECT_ROOT / "config"

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.settings_file = self.config_dir / "settings.json"
        self.preferences_file = self.config_dir / "preferences.json"

        self.settings = self._load_json(self.settings_file, self._default_settings())
        self.preferences = self._load_json(self.preferences_file, self._default_preferences())

    def _load_json(self, file_path: Path, default: Dict[str, Any]) -> Dict[str, Any]:
        """Load JSON file merged over defaults, creating it if missing"""
        if file_path.exists():
            with open(file_path, 'r') as f:
                return {**default, **json.load(f)}
        self._save_json(file_path, default)
        return default

    def _save_json(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Save data to JSON file"""
        with open(file_path, 'w') as f:
            json.dump(data, f, indent=2)

    def _default_settings(self) -> Dict[str, Any]:
        """Default system settings"""
        return {
            "database_path": "data/database/tracker.db",
            "start_of_week": 1,  # 0 = Sunday, 1 = Monday
        }

    def _default_preferences(self) -> Dict[str, Any]:
        """Default user preferences"""
        return {
            "suggestions_per_outcome": 3,
            "top_suggestions": 3,
            "graduation_prompts_enabled": True,
        }

    def get(self, key: str, section: str = "settings", default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            key: Configuration key
            section: Configuration section ('settings', 'preferences')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        section_map = {
            "settings": self.settings,
            "preferences": self.preferences,
        }

        return section_map.get(section, {}).get(key, default)

    def set(self, key: str, value: Any, section: str = "settings") -> None:
        """
        Set configuration value and save to disk

        Args:
            key: Configuration key
            value: Value to set
            section: Configuration section ('settings', 'preferences')
        """
        section_map = {
            "settings": (self.settings, self.settings_file),
            "preferences": (self.preferences, self.preferences_file),
        }

        if section in section_map:
            config_dict, file_path = section_map[section]
            config_dict[key] = value
            self._save_json(file_path, config_dict)

    def get_database_path(self) -> Path:
        """Get full path to database file"""
        path = Path(self.settings["database_path"])
        return path if path.is_absolute() else PROJECT_ROOT / path

    def get_start_of_week(self) -> int:
        """Get first weekday of the tracking week (0 = Sunday, 1 = Monday)"""
        return 0 if int(self.settings.get("start_of_week", 1)) == 0 else 1
