"""
SERENE Application Settings

Production-grade configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational store configuration."""

    model_config = SettingsConfigDict(env_prefix="SERENE_DB_")

    driver: str = Field(default="postgresql+asyncpg", description="SQLAlchemy async driver")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="serene_db", description="Database name")
    user: str = Field(default="serene_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")
    enabled: bool = Field(default=False, description="Use the SQL store instead of in-memory repositories")

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        password = self.password.get_secret_value()
        return f"{self.driver}://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class GeminiSettings(BaseSettings):
    """Google Gemini API configuration."""

    model_config = SettingsConfigDict(env_prefix="SERENE_GEMINI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Gemini API key")
    model: str = Field(default="gemini-1.5-flash", description="Model identifier")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=1024, ge=64, le=8192)


class OpenAISettings(BaseSettings):
    """OpenAI API configuration."""

    model_config = SettingsConfigDict(env_prefix="SERENE_OPENAI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    model: str = Field(default="gpt-4o-mini", description="Model identifier")
    max_tokens: int = Field(default=1024, ge=64, le=4096)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)


class AnalysisSettings(BaseSettings):
    """Sub-analyzer and queue behaviour."""

    model_config = SettingsConfigDict(env_prefix="SERENE_ANALYSIS_")

    ai_timeout_seconds: float = Field(default=8.0, gt=0.0, le=60.0, description="Hard bound on one AI call")
    queue_inter_item_delay_seconds: float = Field(default=1.0, ge=0.0, le=30.0)
    ai_min_confidence: float = Field(default=70.0, ge=0.0, le=100.0)
    fallback_max_confidence: float = Field(default=40.0, ge=0.0, le=100.0)


class FusionSettings(BaseSettings):
    """Hybrid score fusion weights and calibration."""

    model_config = SettingsConfigDict(env_prefix="SERENE_FUSION_")

    text_weight: float = Field(default=0.5, gt=0.0, le=1.0)
    audio_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    visual_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    baseline_blend: float = Field(default=0.2, ge=0.0, le=1.0, description="Pull toward the user's baseline")
    crisis_floor: float = Field(default=8.0, ge=0.0, le=10.0)


class TrackingSettings(BaseSettings):
    """Pattern and trend tracking thresholds."""

    model_config = SettingsConfigDict(env_prefix="SERENE_TRACKING_")

    window_size: int = Field(default=10, ge=3, le=10)
    pattern_lookback: int = Field(default=3, ge=2, le=10)
    pattern_min_hits: int = Field(default=2, ge=1, le=10)
    pattern_threshold: float = Field(default=7.0, ge=0.0, le=10.0)
    trend_window_days: int = Field(default=7, ge=1, le=90)
    trend_delta: float = Field(default=1.0, gt=0.0, le=10.0)
    history_limit: int = Field(default=100, ge=10, le=1000)

    @model_validator(mode="after")
    def check_pattern_rule(self) -> "TrackingSettings":
        if self.pattern_min_hits > self.pattern_lookback:
            raise ValueError("pattern_min_hits cannot exceed pattern_lookback")
        if self.pattern_lookback > self.window_size:
            raise ValueError("pattern_lookback cannot exceed window_size")
        return self


class NotificationSettings(BaseSettings):
    """Notification thresholds and delivery."""

    model_config = SettingsConfigDict(env_prefix="SERENE_NOTIFY_")

    stress_threshold: float = Field(default=5.0, ge=0.0, le=10.0, description="Notify when stress exceeds this")
    attention_threshold: float = Field(default=6.0, ge=0.0, le=10.0)
    urgent_threshold: float = Field(default=8.0, ge=0.0, le=10.0)
    max_remedies: int = Field(default=6, ge=1, le=20)
    store_attempts: int = Field(default=2, ge=1, le=5, description="Initial write plus retries")
    webhook_url: str = Field(default="", description="Push endpoint for urgent alerts")
    webhook_timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)


class MonitoringSettings(BaseSettings):
    """Error tracking configuration."""

    model_config = SettingsConfigDict(env_prefix="SERENE_SENTRY_")

    dsn: SecretStr = Field(default=SecretStr(""), description="Sentry DSN")
    traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with SERENE_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        weights = settings.fusion.text_weight
    """

    model_config = SettingsConfigDict(
        env_prefix="SERENE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # LLM Provider selection
    llm_primary_provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="Generative-AI backend used by the sub-analyzers"
    )

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    fusion: FusionSettings = Field(default_factory=FusionSettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and inject it.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
