"""Process-wide configuration loaded from the environment."""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


class Settings(BaseModel):
    """Runtime settings for the ClaimWatch backend.

    Built once at process start and treated as read-only afterwards.
    """

    openai_api_key: Optional[str] = Field(None, description="OpenAI API key; absent means heuristic mode")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    chat_model: str = Field(default="gpt-3.5-turbo", description="Model for verdicts and feature scoring")
    research_model: str = Field(default="gpt-4o", description="Model for web-context research")
    embedding_model: str = Field(default="text-embedding-3-small", description="Embedding model")
    embedding_dimension: int = Field(default=1536, description="Fixed embedding dimension")
    max_concurrent_ai_calls: int = Field(default=3, description="Maximum AI requests in flight")
    ai_retries: int = Field(default=3, description="Attempts per AI call")
    feature_timeout: float = Field(default=15.0, description="Seconds to wait for feature scorers")
    similarity_threshold: float = Field(default=0.8, description="Minimum similarity for a cluster hint")
    web_context_cache_ttl: int = Field(default=3600, description="Web-context cache TTL in seconds")
    auto_analyze: bool = Field(default=True, description="Analyze new claims in the background")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    log_level: str = Field(default="INFO", description="Root log level")

    @property
    def ai_enabled(self) -> bool:
        """Whether an AI provider can be configured."""
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables (and a .env file if present)."""
        load_dotenv()

        origins = os.getenv("CLAIMWATCH_CORS_ORIGINS", "*")
        settings = cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
            chat_model=os.getenv("CLAIMWATCH_CHAT_MODEL", "gpt-3.5-turbo"),
            research_model=os.getenv("CLAIMWATCH_RESEARCH_MODEL", "gpt-4o"),
            embedding_model=os.getenv("CLAIMWATCH_EMBEDDING_MODEL", "text-embedding-3-small"),
            embedding_dimension=_env_int("CLAIMWATCH_EMBEDDING_DIMENSION", 1536),
            max_concurrent_ai_calls=_env_int("CLAIMWATCH_MAX_CONCURRENT_AI_CALLS", 3),
            ai_retries=_env_int("CLAIMWATCH_AI_RETRIES", 3),
            feature_timeout=_env_float("CLAIMWATCH_FEATURE_TIMEOUT", 15.0),
            similarity_threshold=_env_float("CLAIMWATCH_SIMILARITY_THRESHOLD", 0.8),
            web_context_cache_ttl=_env_int("CLAIMWATCH_WEB_CONTEXT_CACHE_TTL", 3600),
            auto_analyze=os.getenv("CLAIMWATCH_AUTO_ANALYZE", "true").lower() == "true",
            cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            log_level=os.getenv("CLAIMWATCH_LOG_LEVEL", "INFO").upper(),
        )

        # Logged once, here, rather than on every AI call
        if settings.ai_enabled:
            logger.info(f"✅ OpenAI API key loaded ({len(settings.openai_api_key)} chars). Using real AI models.")
        else:
            logger.warning("⚠️ No OpenAI API key found. Using heuristic fallbacks and placeholder embeddings.")

        return settings
