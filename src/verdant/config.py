"""Configuration loading from environment variables with validation."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Anchor all paths to the project root (two levels up from this package)
_PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

DEFAULT_NICHES = [
    "Product Reviews",
    "Renewable Energy",
    "Sustainable Living",
    "Zero Waste",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VERDANT_",
        case_sensitive=False,
    )

    # Hosted store (loaded separately, no prefix)
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Provider credentials (loaded separately, no prefix)
    gemini_api_key: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    minimax_api_key: str = ""
    minimax_group_id: str = ""

    # Store backend: "rest" talks to the hosted store, "sql" uses local sqlite
    store_backend: str = "rest"
    db_path: Path = _PROJECT_DIR / "data" / "verdant.db"

    # Provider settings
    provider_timeout: float = 30.0
    default_text_provider: str = "gemini"
    seo_text_provider: str = "gemini"
    gemini_model: str = "gemini-1.5-flash"
    claude_model: str = "claude-sonnet-4-20250514"
    openai_model: str = "gpt-4o"
    max_tokens: int = 4000
    temperature: float = 0.7

    # Content defaults
    default_niches: list[str] = DEFAULT_NICHES

    # Logging
    log_level: str = "INFO"

    # HTTP server
    api_host: str = "127.0.0.1"
    api_port: int = 8000


def get_settings() -> Settings:
    """Load settings from environment and .env file."""
    # Load .env from the project root regardless of cwd
    load_dotenv(_PROJECT_DIR / ".env")
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL", ""),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or os.getenv("CLAUDE_API_KEY", ""),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        minimax_api_key=os.getenv("MINIMAX_API_KEY", ""),
        minimax_group_id=os.getenv("MINIMAX_GROUP_ID", ""),
    )
