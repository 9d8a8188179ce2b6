import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DEBUG: bool = False

    # Session
    MAX_PLAYERS: int = 4

    # Dungeon generation
    TARGET_ROOM_COUNT: int = 20
    MAX_GENERATION_CYCLES: int = 1000
    CORRIDOR_CHANCE: float = 0.15
    CHEST_CHANCE: float = 0.3
    MAX_MONSTERS_PER_ROOM: int = 4

    # Game clock milliseconds per activity step; hosts usually tick around 15 times a second
    STEP_TIME_MS: float = 1000 / 3

    # Combat
    RANGED_DISTANCE: int = 10

    @field_validator("CORRIDOR_CHANCE", "CHEST_CHANCE")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("Probabilities must be between 0 and 1")
        return v

    @field_validator("TARGET_ROOM_COUNT", "MAX_PLAYERS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug(
        "Generation: target_rooms=%d, max_cycles=%d, step_time_ms=%.1f",
        settings.TARGET_ROOM_COUNT,
        settings.MAX_GENERATION_CYCLES,
        settings.STEP_TIME_MS,
    )
    return settings
