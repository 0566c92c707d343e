from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "busbook"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite+aiosqlite:///./busbook.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    SECRET_KEY: str = "replace-me"
    # session tokens / auth settings
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_SECONDS: int = 60 * 60
    SESSION_COOKIE_NAME: str = "session"
    # deadline for a single seat ledger operation, lock waits included
    LEDGER_TIMEOUT_SECONDS: float = 5.0
    # upper bound on sqlite lock waits; capped at LEDGER_TIMEOUT_SECONDS
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 30.0
    # trip dates and clock times are local to this zone
    TRIP_TIMEZONE: str = "UTC"
    SENTRY_DSN: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
