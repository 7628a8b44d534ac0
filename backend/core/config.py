"""
Centralized configuration for the ScrapVoice backend.

All environment variables and settings should be defined here
to avoid duplication across modules.
"""
import os
from functools import lru_cache


class Settings:
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:8081,http://localhost:19006,http://127.0.0.1:8081"
    ).split(",")

    # LLM (OpenAI-compatible chat completions, Groq by default)
    GROQ_API_KEY: str = os.environ.get("GROQ_API_KEY", "")
    GROQ_API_URL: str = os.environ.get("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions")
    GROQ_EXTRACTION_MODEL: str = os.environ.get("GROQ_EXTRACTION_MODEL", "llama-3.1-8b-instant")

    # Main backend: catalog and transcription endpoints
    BACKEND_API_URL: str = os.environ.get("BACKEND_API_URL", "http://localhost:5000")
    BACKEND_API_TOKEN: str = os.environ.get("BACKEND_API_TOKEN", "")
    TRANSCRIPTION_LANGUAGE: str = os.environ.get("TRANSCRIPTION_LANGUAGE", "ar")

    # Roles the catalog is scoped by - comma-separated
    CATALOG_ROLES: list = os.environ.get("CATALOG_ROLES", "customer,buyer,delivery").split(",")

    # Timeouts for every outbound HTTP call, in seconds
    HTTP_TIMEOUT_SECONDS: float = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "30"))

    # Optional override for match thresholds and cache TTL (JSON)
    MATCH_CONFIG_PATH: str = os.environ.get("SCRAPVOICE_MATCH_CONFIG", "")

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
