"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Product catalog API
    CATALOG_BASE_URL: str = os.getenv("CATALOG_BASE_URL", "https://fakestoreapi.com/")
    CATALOG_TIMEOUT_SECONDS: float = float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10"))
    # Browsing sessions idle longer than this are closed
    CATALOG_SESSION_TTL_SECONDS: float = float(
        os.getenv("CATALOG_SESSION_TTL_SECONDS", "1800")
    )

    # Redis settings (favorites, identity, profile documents)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    FAVORITES_KEY_PREFIX: str = os.getenv("FAVORITES_KEY_PREFIX", "favorites:")
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "2592000"))

    # Reverse geocoding
    GEOCODER_BASE_URL: str = os.getenv(
        "GEOCODER_BASE_URL",
        "https://nominatim.openstreetmap.org/",
    )
    GEOCODER_USER_AGENT: str = os.getenv("GEOCODER_USER_AGENT", "storefront/1.0")

    # Checkout
    DELIVERY_FEE: float = float(os.getenv("DELIVERY_FEE", "5.0"))
    ORDER_SUBMIT_DELAY_SECONDS: float = float(
        os.getenv("ORDER_SUBMIT_DELAY_SECONDS", "1.0")
    )

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized for {self.ENVIRONMENT}, log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
