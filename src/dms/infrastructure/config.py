from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """
    Sync engine configuration.

    Values come from the environment, then from `config.env` / `.env` in the
    repository root or the current directory.
    """

    model_config = SettingsConfigDict(
        env_file=(
            str(_PROJECT_ROOT / "config.env"),
            str(_PROJECT_ROOT / ".env"),
            "config.env",
            ".env",
        ),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(default=_PROJECT_ROOT / "data", validation_alias="DMS_DATA_DIR")

    # "json" reads the digital menu documents from data_dir, "mongo" from MongoDB.
    source: str = Field(default="json", validation_alias="DMS_SOURCE")
    mongo_url: str = Field(default="mongodb://localhost:27017", validation_alias="MONGO_URL")
    mongo_db: str = Field(default="digital_menu", validation_alias="MONGO_DB")
    orders_collection: str = Field(
        default="digital_menu_customer_orders", validation_alias="DMS_ORDERS_COLLECTION"
    )
    customers_collection: str = Field(default="customers", validation_alias="DMS_CUSTOMERS_COLLECTION")

    # Empty disables Redis; events are then only logged.
    redis_url: str = Field(default="", validation_alias="REDIS_URL")
    events_channel: str = Field(default="pos:events", validation_alias="DMS_EVENTS_CHANNEL")

    sync_interval_seconds: float = Field(default=5.0, gt=0, validation_alias="DMS_SYNC_INTERVAL_SECONDS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


def get_settings() -> Settings:
    return Settings()
