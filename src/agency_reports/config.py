"""Environment-based configuration for reports and exports."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


class Settings:
    """Report configuration loaded from environment variables."""

    def __init__(self):
        self.page_size = _int_env("AGENCY_REPORTS_PAGE_SIZE", 10)
        if self.page_size not in (5, 10, 20):
            logger.warning(f"Unsupported page size {self.page_size}, using 10")
            self.page_size = 10
        self.top_n = _int_env("AGENCY_REPORTS_TOP_N", 5)

        self.output_dir = Path(os.getenv(
            "AGENCY_REPORTS_OUTPUT_DIR",
            str(Path.home() / ".agency-reports" / "exports"),
        ))
        self.currency_symbol = os.getenv("AGENCY_REPORTS_CURRENCY", "$")
        self.report_title = os.getenv("AGENCY_REPORTS_TITLE", "Commission Performance Report")
        self.log_level = os.getenv("AGENCY_REPORTS_LOG_LEVEL", "WARNING").upper()


_settings = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Re-read the environment (used by tests and long-running callers)."""
    global _settings
    _settings = Settings()
    return _settings


class _SettingsProxy:
    """Lazy proxy so settings aren't loaded until first access."""

    def __getattr__(self, name):
        return getattr(_get_settings(), name)


settings = _SettingsProxy()
