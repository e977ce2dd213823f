# Settings loader
from __future__ import annotations
import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # DynamoDB record store
    TABLE_NAME: str = "InspectionsTable-dev"
    STATUS_INDEX_NAME: str = "GSI1"
    DYNAMODB_ENDPOINT_URL: Optional[str] = None  # keep None for AWS

    # S3 image bucket
    IMAGE_BUCKET_NAME: str = "inspection-images-dev"
    S3_ENDPOINT_URL: Optional[str] = None
    UPLOAD_URL_EXPIRES_IN: int = 300
    DOWNLOAD_URL_EXPIRES_IN: int = 3600

    # SNS notification topic (empty = notifications disabled)
    SNS_TOPIC_ARN: str = ""
    SNS_ENDPOINT_URL: Optional[str] = None

    # Worker: send real email through SES when a sender is configured
    NOTIFICATION_SENDER_EMAIL: str = ""

    AWS_REGION: str = "us-east-1"

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.SNS_TOPIC_ARN)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Root logging setup for the HTTP services and the worker."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
