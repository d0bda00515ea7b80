"""Settings for report generation, loaded from YAML and the environment."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from seo_digest.utils.env_manager import EnvManager

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yaml"


@dataclass(frozen=True)
class GoogleCredentials:
    """Service account used for both Analytics and Search Console."""

    client_email: str = ""
    private_key: str = ""
    credentials_path: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.credentials_path) or bool(self.client_email and self.private_key)

    def service_account_info(self) -> dict[str, str]:
        """Key material in the shape ``from_service_account_info`` expects.

        Keys copied from ``.env`` files often carry literal ``\\n``
        sequences instead of newlines.
        """
        return {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        }


@dataclass(frozen=True)
class ReportSettings:
    period_days: int = 30
    search_window_days: int = 28
    top_limit: int = 10
    top_projects: int = 3
    include_indexed_pages: bool = True
    analytics_rpm: int = 600
    search_console_rpm: int = 1200
    ahrefs_rpm: int = 60
    ahrefs_timeout: float = 30.0
    google: GoogleCredentials = field(default_factory=GoogleCredentials)
    ahrefs_api_token: Optional[str] = None


def _load_yaml(config_path: str) -> dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.exists():
        logger.warning("Config file not found: %s, using defaults.", config_path)
        return {}
    with open(config_file, "r", encoding="utf-8") as fh:
        config = yaml.safe_load(fh) or {}
    logger.info("Configuration loaded from %s", config_path)
    return config


def load_settings(
    config_path: str = DEFAULT_CONFIG_PATH,
    env_path: str = ".env",
) -> ReportSettings:
    """Build :class:`ReportSettings` from ``settings.yaml`` and ``.env``.

    Missing keys fall back to the dataclass defaults.  Credentials are not
    validated here; see :class:`~seo_digest.integrations.client_factory.ProviderClientFactory`.
    """
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)
        logger.info("Loaded environment from %s", env_path)

    config = _load_yaml(config_path)
    reporting = config.get("reporting", {})
    limits = config.get("rate_limits", {})
    env = EnvManager(env_path)
    defaults = ReportSettings()

    return ReportSettings(
        period_days=int(reporting.get("period_days", defaults.period_days)),
        search_window_days=int(reporting.get("search_window_days", defaults.search_window_days)),
        top_limit=int(reporting.get("top_limit", defaults.top_limit)),
        top_projects=int(reporting.get("top_projects", defaults.top_projects)),
        include_indexed_pages=bool(reporting.get("include_indexed_pages", defaults.include_indexed_pages)),
        analytics_rpm=int(limits.get("google_analytics", {}).get("requests_per_minute", defaults.analytics_rpm)),
        search_console_rpm=int(limits.get("search_console", {}).get("requests_per_minute", defaults.search_console_rpm)),
        ahrefs_rpm=int(limits.get("ahrefs", {}).get("requests_per_minute", defaults.ahrefs_rpm)),
        ahrefs_timeout=float(limits.get("ahrefs", {}).get("timeout", defaults.ahrefs_timeout)),
        google=GoogleCredentials(
            client_email=env.get_key("GOOGLE_CLIENT_EMAIL") or "",
            private_key=env.get_key("GOOGLE_PRIVATE_KEY") or "",
            credentials_path=env.get_key("GOOGLE_APPLICATION_CREDENTIALS") or "",
        ),
        ahrefs_api_token=env.get_key("AHREFS_API_TOKEN"),
    )
