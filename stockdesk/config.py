from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Stockdesk"
    DATABASE_URL: str = "sqlite:///./stockdesk.db"

    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 72

    # Bootstrap account, created only when the users table is empty
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin"

    # Threshold applied to products created without one
    DEFAULT_MIN_STOCK_LEVEL: int = 10

    # Size of the dashboard "recent movements" feed
    RECENT_MOVEMENTS_LIMIT: int = 10

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env"}


settings = Settings()
