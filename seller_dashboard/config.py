import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SELLER_DASHBOARD_", case_sensitive=True)

    PROJECT_NAME: str = "Seller Dashboard"

    # Backend
    API_BASE_URL: str = "http://localhost:3001"
    REQUEST_TIMEOUT: float = 10.0
    UPLOAD_TIMEOUT: float = 30.0

    # Local session storage
    STORAGE_PATH: str = "data/session.db"

    # Dashboard stats cache, seconds
    DASHBOARD_CACHE_TTL: float = 300.0

    LOG_LEVEL: str = "INFO"


settings = Settings()


def configure_logging(level: str = None) -> None:
    """Set up root logging once for the host process"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
