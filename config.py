import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class Config:
    """Holds all configuration for the orchestration layer.

    The scoring kernel never reads this; it is injected into the services
    that talk to external APIs.
    """
    GEMINI_API_KEY: Optional[str] = None
    NEWS_API_KEY: Optional[str] = None
    FIRECRAWL_API_KEY: Optional[str] = None

    GEMINI_MODEL: str = "gemini-2.5-flash"
    HTTP_TIMEOUT_SECONDS: int = 25
    LLM_MAX_RETRIES: int = 2

    # News window and page size for market context
    NEWS_LOOKBACK_DAYS: int = 7
    NEWS_PAGE_SIZE: int = 10

    # Consistency verifier
    CONSISTENCY_RUNS: int = 5


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name) or default)
    except ValueError:
        return default


def load_config() -> Config:
    return Config(
        GEMINI_API_KEY=os.getenv("GEMINI_API_KEY"),
        NEWS_API_KEY=os.getenv("NEWS_API_KEY") or os.getenv("NEWS_API"),
        FIRECRAWL_API_KEY=os.getenv("FIRECRAWL_API_KEY") or os.getenv("FIRECRAWLER_API"),
        GEMINI_MODEL=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        HTTP_TIMEOUT_SECONDS=_int_env("HTTP_TIMEOUT_SECONDS", 25),
        LLM_MAX_RETRIES=_int_env("LLM_MAX_RETRIES", 2),
        NEWS_LOOKBACK_DAYS=_int_env("NEWS_LOOKBACK_DAYS", 7),
        NEWS_PAGE_SIZE=_int_env("NEWS_PAGE_SIZE", 10),
        CONSISTENCY_RUNS=_int_env("CONSISTENCY_RUNS", 5),
    )


# Instantiate the config
config = load_config()
