"""Application configuration using environment variables."""
import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # World
    WORLD_SEED: int = int(os.getenv("WORLD_SEED", "12345"))

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS - Frontend URL
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Game Constants
    POI_SPAWN_CHANCE: float = float(os.getenv("POI_SPAWN_CHANCE", "0.15"))
    POI_RADIUS: int = int(os.getenv("POI_RADIUS", "6"))  # cells around the player
    WANDERING_ENCOUNTER_CHANCE: float = float(os.getenv("WANDERING_ENCOUNTER_CHANCE", "0.15"))
    MAX_COMBAT_ROUNDS: int = int(os.getenv("MAX_COMBAT_ROUNDS", "1000"))
    FINISHED_COMBAT_TTL: float = float(os.getenv("FINISHED_COMBAT_TTL", "600"))  # seconds a finished combat stays readable


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
