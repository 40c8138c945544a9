# fleetrecon/core/config.py

import json
from typing import List, Optional, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


#
# =====================================================
#                    SETTINGS CLASS
# =====================================================
#


class Settings(BaseSettings):
    """
    Application Settings
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", case_sensitive=False
    )

    environment: str = "development"
    allowed_cors_urls: str = "*"

    # Full SQLAlchemy URL, wins over the db_* parts when set (e.g. sqlite:///recon.db)
    database_url: Optional[str] = None

    # DB parts (support .env)
    db_host: str = "localhost"
    db_user: str = "fleetrecon"
    db_password: str = ""
    db_database: str = "fleetrecon"
    db_port: int = 3306

    # Redis base fields (for .env / local)
    redis_host: str = "localhost"
    redis_port: str = "6379"
    redis_username: Optional[str] = None
    redis_password: Optional[str] = None

    # Logging configuration
    log_level: str = "INFO"

    # Ingest
    ingest_batch_size: int = 1000
    max_upload_size_mb: int = 10
    cross_reference_window_hours: int = 24

    # All stored timestamps are naive wall-clock times in this zone
    local_timezone: str = "Europe/Berlin"

    # Bonus tiers as JSON list of [min_completed_trips, bonus_eur], lower bound inclusive
    bonus_tiers: str = "[[700, 400], [250, 250]]"

    # Shift segmentation
    shift_idle_gap_hours: float = 5
    day_shift_start_hour: int = 6
    day_shift_end_hour: int = 18
    default_trip_minutes: int = 15
    shift_tie_breaker: str = "day"

    #
    # ---------------------------
    #  DB ACCESS PROPERTIES
    # ---------------------------
    #
    @property
    def db_url(self) -> str:
        """Construct the synchronous database URL."""
        if self.database_url:
            return self.database_url
        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_database}"
        )

    #
    # ---------------------------
    #  REDIS ACCESS PROPERTIES
    # ---------------------------
    #
    @property
    def redis_url(self) -> str:
        """Construct the Redis URL."""
        host = self.redis_host or "localhost"
        port = self.redis_port or "6379"

        if self.redis_username and self.redis_password:
            return f"redis://{self.redis_username}:{self.redis_password}@{host}:{port}"
        elif self.redis_password:
            return f"redis://:{self.redis_password}@{host}:{port}"
        else:
            return f"redis://{host}:{port}"

    @property
    def celery_broker(self) -> str:
        """Construct the Redis URL for Celery broker (DB 1)."""
        return f"{self.redis_url}/1"

    @property
    def celery_backend(self) -> str:
        """Construct the Redis URL for Celery backend (DB 2)."""
        return f"{self.redis_url}/2"

    #
    # ---------------------------
    #  DOMAIN PROPERTIES
    # ---------------------------
    #
    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def bonus_tier_table(self) -> List[Tuple[int, int]]:
        """
        Parsed bonus tiers, highest threshold first.

        Falls back to the default table when the configured value is not valid JSON.
        """
        try:
            tiers = [(int(count), int(bonus)) for count, bonus in json.loads(self.bonus_tiers)]
        except (TypeError, ValueError) as e:
            logger.warning("Invalid BONUS_TIERS, using defaults", error=str(e))
            tiers = [(700, 400), (250, 250)]
        return sorted(tiers, key=lambda tier: tier[0], reverse=True)


settings = Settings()
