"""Configuration management for perfmetrics."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    service_name: str = Field(default="perfmetrics", description="Service name reported to Logfire")
    environment: str = Field(default="development", description="Deployment environment name")

    # Analytics defaults
    default_trend_days: int = Field(default=30, ge=1, description="Default number of days in trend series")
    history_window_days: int = Field(
        default=30, ge=1, description="Default look-back window when comparing against metric history"
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # Calculation methodology version recorded in audit entries
    METRICS_METHODOLOGY_VERSION: str = "1.0.0"

    # Productivity score weights (fixed, not configurable)
    WEIGHT_COMPLETION_RATE: float = 0.4
    WEIGHT_ON_TIME_RATE: float = 0.3
    WEIGHT_SPEED: float = 0.2
    WEIGHT_UNBLOCKED: float = 0.1
    SPEED_PENALTY_PER_DAY: int = 2

    # Completion time sanity bound (days)
    MAX_COMPLETION_DAYS: int = 365

    # Workload
    WORKLOAD_BASELINE_TASKS: int = 10
    WORKLOAD_PENALTY_PER_TASK: int = 5

    # Ratings
    MAX_RATING: int = 5

    # Performance grade lower bounds (inclusive)
    GRADE_A_PLUS: int = 90
    GRADE_A: int = 80
    GRADE_B: int = 70
    GRADE_C: int = 60
    GRADE_D: int = 50

    # Data integrity status thresholds
    INTEGRITY_POOR_BELOW: int = 70
    INTEGRITY_WARNING_BELOW: int = 90
    UNRATED_SHARE_HIGH_PRIORITY: float = 0.5
    DATA_QUALITY_PENALTY_SLOTS: int = 5  # defect categories sharing the score denominator

    # Decision readiness
    READINESS_MIN_TASKS: int = 10
    READINESS_MIN_QUALITY: int = 70
    READINESS_SMALL_SAMPLE: int = 30
    READINESS_MEDIUM_SAMPLE: int = 50
    READINESS_SMALL_SAMPLE_FACTOR: float = 0.8
    READINESS_MEDIUM_SAMPLE_FACTOR: float = 0.9
    READINESS_LOW_COMPLETION_RATIO: float = 0.3
    READINESS_LOW_COMPLETION_FACTOR: float = 0.7
    READINESS_CONFIDENCE_THRESHOLD: int = 75

    # Health indicators: (target, warning floor)
    HEALTH_COMPLETION: tuple[int, int] = (85, 70)
    HEALTH_ON_TIME: tuple[int, int] = (80, 65)
    HEALTH_PRODUCTIVITY: tuple[int, int] = (75, 60)
    HEALTH_QUALITY: tuple[int, int] = (80, 65)


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
