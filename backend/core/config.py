"""
Centralized configuration for the BioInsight matching service.

All environment variables and settings should be defined here
to avoid duplication across modules.
"""
import os
from functools import lru_cache


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")

    # Catalog snapshot exported by the catalog-sync job
    CATALOG_PATH: str = os.environ.get("BIOINSIGHT_CATALOG_PATH", "data/catalog.json")

    # Engine tunables (weights, thresholds, vendor aliases); empty = packaged default
    ENGINE_CONFIG_PATH: str = os.environ.get("BIOINSIGHT_ENGINE_CONFIG", "")

    # Semantic embedding store (optional)
    EMBEDDINGS_ENABLED: bool = _env_flag("BIOINSIGHT_EMBEDDINGS_ENABLED")
    CHROMA_DIR: str = os.environ.get("BIOINSIGHT_CHROMA_DIR", "data/embeddings/catalog")
    OLLAMA_URL: str = os.environ.get("OLLAMA_URL", "http://localhost:11434")
    EMBED_MODEL: str = os.environ.get("EMBED_MODEL", "nomic-embed-text:v1.5")

    # Logging
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
