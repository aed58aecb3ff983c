from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# receipt ids are prefix + 14 timestamp digits + 6 hex digits in a String(50) column
RECEIPT_PREFIX_MAX_LENGTH = 30


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "KAUNTER-POS"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite+pysqlite:///./kaunter.db"
    STORE_TIMEZONE: str = "UTC"
    CASH_PAYMENT_METHOD_NAME: str = "Cash"
    RECEIPT_PREFIX: str = Field(default="RCP", max_length=RECEIPT_PREFIX_MAX_LENGTH)
    DEFAULT_PAYMENT_METHODS: list[tuple[str, float]] = [("Cash", 0.0)]
    OPS_ENABLE_INTEGRITY_SCAN: bool = True
    METRICS_ENABLED: bool = True


settings = Settings()
