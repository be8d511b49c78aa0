"""
Engine and service configuration
"""
import logging
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Storage
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "crease.db")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Match format
    DEFAULT_OVERS: int = int(os.getenv("DEFAULT_OVERS", "20"))
    MAX_SUPER_OVERS: int = int(os.getenv("MAX_SUPER_OVERS", "3"))

    # Stats persistence
    STATS_SAVE_RETRIES: int = int(os.getenv("STATS_SAVE_RETRIES", "3"))
    STATS_RETRY_BASE_DELAY: float = float(os.getenv("STATS_RETRY_BASE_DELAY", "0.5"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Comma-separated extra origins for the API
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or f"sqlite:///{self.DATABASE_PATH}"


settings = Settings()


def configure_logging(level: str = None):
    """Install a single console handler on the root logger"""
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    console_handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        handlers=[console_handler],
    )
