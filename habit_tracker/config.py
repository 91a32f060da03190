"""Application configuration."""

import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    database_path: str = os.getenv("DATABASE_PATH", "data/habits.db")

    # Sessions whose email matches this are served the read-only demo store
    demo_email: str = os.getenv("DEMO_EMAIL", "demo@demo.demo")

    # "Today" is the user's local calendar date in this zone
    timezone: str = os.getenv("TIMEZONE", "UTC")

    # Server
    server_host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    server_port: int = int(os.getenv("SERVER_PORT", "8000"))

    # Rendering
    image_width: int = int(os.getenv("IMAGE_WIDTH", "800"))
    image_height: int = int(os.getenv("IMAGE_HEIGHT", "480"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False


settings = Settings()
