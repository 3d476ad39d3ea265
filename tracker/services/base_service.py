"""
Base Service for Outcome Tracker
Shared plumbing for the services that read and write the row store.

Services follow a common shape:
- The row store and configuration are passed in, never looked up globally
- Each service logs under its own name (tracker.<name>)
- Mutations are recorded as one JSON audit line each
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tracker.core.database import RowStore


class BaseService:
    """
    Common functionality for tracker services.

    Provides:
    - Row store access
    - Configuration lookups
    - Named logging and action audit lines
    """

    def __init__(self, db: RowStore, config, name: str):
        """
        Initialize the base service.

        Args:
            db: Row store for data access
            config: Config instance for settings/preferences (may be None)
            name: Short identifier used for the logger (e.g., "skills")
        """
        self.db = db
        self.config = config
        self.name = name
        self.logger = logging.getLogger(f"tracker.{name}")

    def log_action(self, action: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Log a mutation performed by this service.

        Args:
            action: Description of the action taken
            details: Optional additional details as key-value pairs
        """
        log_entry = {
            "service": self.name,
            "action": action,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        if details:
            log_entry["details"] = details

        self.logger.info(json.dumps(log_entry, default=str))

    def get_config_value(self, key: str, section: str = "preferences",
                         default: Any = None) -> Any:
        """
        Get a configuration value with fallback to default.

        Args:
            key: Configuration key to retrieve
            section: Configuration section (settings, preferences)
            default: Default value if key not found or no config given

        Returns:
            Configuration value or default
        """
        if self.config is None:
            return default
        return self.config.get(key, section=section, default=default)
