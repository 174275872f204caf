"""Settings for the cart panel, read from the environment (and `.env`)."""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:1337/api"
DEFAULT_CART_LIMIT = 1000
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    """Content API and display settings."""
    api_url: str = DEFAULT_API_URL
    api_token: Optional[str] = None
    cart_limit: int = DEFAULT_CART_LIMIT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    currency: str = "USD"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        limit = int(os.environ.get("PICKNGO_CART_LIMIT", DEFAULT_CART_LIMIT))
        if limit < 1:
            raise ValueError("PICKNGO_CART_LIMIT must be a positive integer")
        return cls(
            api_url=os.environ.get("PICKNGO_API_URL", DEFAULT_API_URL).rstrip("/"),
            api_token=os.environ.get("PICKNGO_API_TOKEN") or None,
            cart_limit=limit,
            http_timeout=float(os.environ.get("PICKNGO_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
            currency=os.environ.get("PICKNGO_CURRENCY", "USD").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get Settings singleton (loads `.env` on first call)."""
    load_dotenv()
    return Settings.from_env()
