"""
Ranking engine settings

Loaded from RANKING_* environment variables or a .env file.
"""
from datetime import date
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class RankingConfig(BaseSettings):
    """Engine, CLI and logging settings"""

    # Evaluation date override; None means today
    as_of: Optional[date] = Field(default=None, description="Date used to decide which events are past")

    # Output
    summary_top_n: int = Field(default=20, ge=1, description="Rows printed in the ranking summary")
    export_top_n: int = Field(default=100, ge=1, description="Rows written to a ranking export")

    # Logging
    log_level: str = Field(default="INFO", description="Console log level")
    log_dir: str = Field(default="logs", description="Directory for rotated log files")
    log_retention_days: int = Field(default=30, ge=1, description="Days of log files to keep")

    class Config:
        env_prefix = "RANKING_"
        case_sensitive = False
        extra = "ignore"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v


@lru_cache()
def get_ranking_config() -> RankingConfig:
    return RankingConfig()


ranking_config = get_ranking_config()
