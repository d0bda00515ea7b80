"""Environment variable manager for provider credentials and settings.

Reads the project's ``.env`` file, falling back to the process
environment, and reports which keys are configured with secrets masked.
"""

import os
from pathlib import Path
from typing import Optional


class EnvManager:
    """Read-only access to credentials kept in ``.env`` / ``os.environ``."""

    API_KEY_REGISTRY = {
        # Google APIs
        "GOOGLE_CLIENT_EMAIL": {
            "category": "Google APIs",
            "label": "Service Account Client Email",
            "description": "Service account with read access to GA4 properties and Search Console sites",
            "required": False,
            "docs_url": "https://console.cloud.google.com/iam-admin/serviceaccounts",
        },
        "GOOGLE_PRIVATE_KEY": {
            "category": "Google APIs",
            "label": "Service Account Private Key",
            "description": "PEM private key of the service account (\\n escapes allowed)",
            "required": False,
            "docs_url": "https://console.cloud.google.com/iam-admin/serviceaccounts",
            "is_secret": True,
        },
        "GOOGLE_APPLICATION_CREDENTIALS": {
            "category": "Google APIs",
            "label": "Service Account JSON Path",
            "description": "Alternative to client email + private key: path to the JSON key file",
            "required": False,
            "docs_url": "https://console.cloud.google.com/iam-admin/serviceaccounts",
            "is_path": True,
        },

        # Domain authority
        "AHREFS_API_TOKEN": {
            "category": "Domain Authority (Optional)",
            "label": "Ahrefs API Token",
            "description": "Enables the Domain Rating row; reports show N/A without it",
            "required": False,
            "docs_url": "https://ahrefs.com/api",
            "is_secret": True,
        },

        # Application Settings
        "LOG_LEVEL": {
            "category": "App Settings",
            "label": "Log Level",
            "description": "Logging verbosity: DEBUG, INFO, WARNING, ERROR",
            "required": False,
            "docs_url": "",
        },
    }

    def __init__(self, env_path: Optional[str] = None):
        """Initialize with path to .env file."""
        if env_path:
            self.env_path = Path(env_path)
        else:
            self.env_path = Path.cwd() / ".env"

    def load_env(self) -> dict[str, str]:
        """Load all variables from .env file."""
        env_vars = {}
        if not self.env_path.exists():
            return env_vars

        with open(self.env_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" in line:
                    key, _, value = line.partition("=")
                    env_vars[key.strip()] = value.strip().strip('"').strip("'")
        return env_vars

    def get_key(self, key_name: str) -> Optional[str]:
        """Get a single value, checking ``.env`` first and then ``os.environ``."""
        value = self.load_env().get(key_name, "")
        if not value:
            value = os.environ.get(key_name, "")
        return value if value else None

    def get_status(self) -> dict[str, dict]:
        """Get configuration status for all registered keys."""
        env_vars = self.load_env()
        status = {}
        for key, meta in self.API_KEY_REGISTRY.items():
            value = env_vars.get(key, "") or os.environ.get(key, "")
            shown = self._mask_value(value) if meta.get("is_secret") else value
            status[key] = {
                **meta,
                "configured": bool(value),
                "masked_value": shown,
            }
        return status

    def get_categories(self) -> list[str]:
        """Get all unique categories, in registry order."""
        cats = []
        for meta in self.API_KEY_REGISTRY.values():
            if meta["category"] not in cats:
                cats.append(meta["category"])
        return cats

    def _mask_value(self, value: str) -> str:
        """Mask a value for display (show first 4 and last 4 chars)."""
        if not value:
            return ""
        if len(value) <= 10:
            return "*" * len(value)
        return value[:4] + "*" * (len(value) - 8) + value[-4:]
