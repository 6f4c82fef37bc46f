from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    DATABASE_URL: str = Field("sqlite:///data/scout.db", description="SQLAlchemy database URL")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # Finding extraction. Bounds are exclusive and shared by hashing and detection.
    MIN_FINDING_LENGTH: int = Field(30, description="Findings must be longer than this")
    MAX_FINDING_LENGTH: int = Field(500, description="Findings must be shorter than this")
    MAX_KEY_FINDINGS: int = Field(10, description="Max findings kept per report")

    # History lookback
    RECENT_FINDINGS_LIMIT: int = Field(
        50,
        description="Number of most recent memory records compared for finding novelty"
    )
    RECENT_URL_DAYS: int = Field(
        7,
        description="Trailing window (days) of source URLs compared for URL novelty"
    )

    DEFAULT_USER_ID: str = Field("anonymous", description="User notified when no user context exists")
    NOTIFICATION_RETENTION_DAYS: int = Field(30, description="Age after which notifications are purged")

# Singleton instance
settings = Settings()
