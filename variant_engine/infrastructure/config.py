"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    debug: bool = False

    # Remote catalog
    remote_base_url: str = "https://tomato.tpos.vn"
    remote_token: str = ""
    remote_timeout: float = 30.0
    template_id_cache_ttl_seconds: float = 1800.0

    # Synthesis
    max_code_suffix_retries: int = 50

    # Database
    database_url: str = "postgresql+asyncpg://variants:variants_dev_password@db:5432/variants"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
