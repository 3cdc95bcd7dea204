"""
Engine Configuration

All tunables loaded from environment variables (prefix TAENGINE_).
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Technical analysis engine settings from environment variables."""

    # Calculation engine
    engine_workers: int = Field(
        default=4, description="Worker pool size; values <= 0 fall back to 4"
    )

    # Chart patterns
    pattern_tolerance_percent: float = Field(
        default=0.02, ge=0, description="Relative tolerance for 'equal' prices"
    )
    min_swing_strength: int = Field(default=3, ge=1)
    min_pattern_bars: int = Field(default=10, ge=1)

    # Volatility
    trading_days_per_year: int = Field(default=252, gt=0)

    # Levels
    fibonacci_lookback: int = Field(default=50, gt=0)

    class Config:
        env_prefix = "TAENGINE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
