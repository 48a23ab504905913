"""
ReviewWatch Configuration Module
================================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    ALERT_MIN_RATING: Ratings strictly below this raise a critical alert (default: 3)
    ALERT_KEYWORDS: Comma-separated negative keywords (default: Portuguese defect words)
    ALERT_AUTO_RESOLVE: Auto-resolve stale alerts (default: true)
    ALERT_AUTO_RESOLVE_HOURS: Age before auto-resolve (default: 24)
    ALERT_RETENTION_DAYS: Age before alerts are pruned (default: 30)
    ALERT_NOTIFICATION_FREQUENCY: immediate | hourly | daily (default: immediate)
    ALERT_EMAIL_ENABLED / ALERT_WHATSAPP_ENABLED / ALERT_PUSH_ENABLED: channel toggles
    ALERT_EMAIL_ADDRESS / ALERT_WHATSAPP_NUMBER: channel destinations

    ANALYTICS_TREND_BUCKETS: Buckets per trend series (default: 6)
    ANALYTICS_KEYWORD_TOP_N: Keywords kept per aggregation (default: 10)
    ANALYTICS_KEYWORD_MIN_MENTIONS: Minimum mentions, global keywords (default: 3)
    ANALYTICS_PRODUCT_KEYWORD_MIN_MENTIONS: Minimum mentions, per product (default: 2)

    REPORT_DATA_SOURCE: Label stamped into report metadata (default: Mercado Livre API)
    REPORT_GENERATED_BY: Generator label for report metadata

    LOG_LEVEL: Root log level (default: INFO)
    LOG_JSON: Emit JSON lines (default: false)
    LOG_FILE: Optional rotating log file path
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path
from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_NEGATIVE_KEYWORDS = "defeito,problema,ruim,péssimo,quebrado,danificado"

NOTIFICATION_FREQUENCIES = ("immediate", "hourly", "daily")


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Args:
        key: Environment variable name
        default: Default value if not set
        required: If True, raises ValueError when not set

    Returns:
        Environment variable value or default

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def get_env_list(key: str, default: str) -> List[str]:
    """Get a comma-separated environment variable as a list of trimmed items."""
    value = os.getenv(key, default)
    return [item.strip().lower() for item in value.split(",") if item.strip()]


@dataclass
class AlertSettings:
    """Alert engine configuration."""

    min_rating: int = field(default_factory=lambda: get_env_int("ALERT_MIN_RATING", 3))
    keywords: List[str] = field(
        default_factory=lambda: get_env_list("ALERT_KEYWORDS", DEFAULT_NEGATIVE_KEYWORDS)
    )

    # Lifecycle
    auto_resolve: bool = field(default_factory=lambda: get_env_bool("ALERT_AUTO_RESOLVE", True))
    auto_resolve_hours: int = field(default_factory=lambda: get_env_int("ALERT_AUTO_RESOLVE_HOURS", 24))
    retention_days: int = field(default_factory=lambda: get_env_int("ALERT_RETENTION_DAYS", 30))

    # Notification decision (delivery itself is external)
    notification_frequency: str = field(
        default_factory=lambda: get_env("ALERT_NOTIFICATION_FREQUENCY", "immediate")
    )
    email_enabled: bool = field(default_factory=lambda: get_env_bool("ALERT_EMAIL_ENABLED", True))
    whatsapp_enabled: bool = field(default_factory=lambda: get_env_bool("ALERT_WHATSAPP_ENABLED", True))
    push_enabled: bool = field(default_factory=lambda: get_env_bool("ALERT_PUSH_ENABLED", False))
    email_address: str = field(default_factory=lambda: get_env("ALERT_EMAIL_ADDRESS", ""))
    whatsapp_number: str = field(default_factory=lambda: get_env("ALERT_WHATSAPP_NUMBER", ""))

    def __post_init__(self):
        """Validate configuration."""
        if self.auto_resolve_hours <= 0:
            raise ValueError("auto_resolve_hours must be positive")
        if self.retention_days <= 0:
            raise ValueError("retention_days must be positive")
        if self.notification_frequency not in NOTIFICATION_FREQUENCIES:
            raise ValueError(
                f"notification_frequency must be one of {NOTIFICATION_FREQUENCIES}, "
                f"got: {self.notification_frequency}"
            )

    def to_alert_config(self):
        """Build the runtime AlertConfig consumed by AlertManager."""
        from ..alerts.alert_models import AlertConfig, NotificationFrequency

        return AlertConfig(
            email_enabled=self.email_enabled,
            whatsapp_enabled=self.whatsapp_enabled,
            push_enabled=self.push_enabled,
            email_address=self.email_address,
            whatsapp_number=self.whatsapp_number,
            min_rating=self.min_rating,
            keywords=list(self.keywords),
            auto_resolve=self.auto_resolve,
            auto_resolve_hours=self.auto_resolve_hours,
            retention_days=self.retention_days,
            notification_frequency=NotificationFrequency(self.notification_frequency),
        )


@dataclass
class AnalyticsSettings:
    """Analytics and aggregation configuration."""

    trend_buckets: int = field(default_factory=lambda: get_env_int("ANALYTICS_TREND_BUCKETS", 6))
    keyword_top_n: int = field(default_factory=lambda: get_env_int("ANALYTICS_KEYWORD_TOP_N", 10))
    keyword_min_mentions: int = field(
        default_factory=lambda: get_env_int("ANALYTICS_KEYWORD_MIN_MENTIONS", 3)
    )
    product_keyword_min_mentions: int = field(
        default_factory=lambda: get_env_int("ANALYTICS_PRODUCT_KEYWORD_MIN_MENTIONS", 2)
    )

    def __post_init__(self):
        """Validate configuration."""
        if self.trend_buckets <= 0:
            raise ValueError("trend_buckets must be positive")
        if self.keyword_top_n <= 0:
            raise ValueError("keyword_top_n must be positive")
        if self.keyword_min_mentions < 1 or self.product_keyword_min_mentions < 1:
            raise ValueError("keyword min mentions must be at least 1")


@dataclass
class ReportSettings:
    """Report generation configuration."""

    data_source: str = field(default_factory=lambda: get_env("REPORT_DATA_SOURCE", "Mercado Livre API"))
    generated_by: str = field(default_factory=lambda: get_env("REPORT_GENERATED_BY", "ReviewWatch Analytics"))


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    json_output: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))


@dataclass
class Settings:
    """Application settings container."""

    alerts: AlertSettings = field(default_factory=AlertSettings)
    analytics: AnalyticsSettings = field(default_factory=AnalyticsSettings)
    reports: ReportSettings = field(default_factory=ReportSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton pattern).

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
