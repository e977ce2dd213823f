# Service wiring for FastAPI routes and the worker
from __future__ import annotations
from functools import lru_cache

import boto3

from .config import Settings, get_settings
from .notifications import NotificationPublisher
from .records import InspectionRepository
from .services.inspections import InspectionService
from .services.notification_worker import LoggingDispatcher, NotificationWorker, SesDispatcher
from .services.report_generator import ReportGenerator
from .storage import StorageService


def build_repository(settings: Settings) -> InspectionRepository:
    # boto3 resources are not thread-safe: each caller gets its own session and Table
    session = boto3.session.Session(region_name=settings.AWS_REGION)
    dynamodb = session.resource("dynamodb", endpoint_url=settings.DYNAMODB_ENDPOINT_URL or None)
    return InspectionRepository(dynamodb.Table(settings.TABLE_NAME), settings.STATUS_INDEX_NAME)


def build_storage(settings: Settings) -> StorageService:
    s3 = boto3.client("s3", region_name=settings.AWS_REGION, endpoint_url=settings.S3_ENDPOINT_URL or None)
    return StorageService(
        s3,
        settings.IMAGE_BUCKET_NAME,
        upload_expires_in=settings.UPLOAD_URL_EXPIRES_IN,
        download_expires_in=settings.DOWNLOAD_URL_EXPIRES_IN,
    )


def build_publisher(settings: Settings) -> NotificationPublisher:
    sns = boto3.client("sns", region_name=settings.AWS_REGION, endpoint_url=settings.SNS_ENDPOINT_URL or None)
    return NotificationPublisher(sns, settings.SNS_TOPIC_ARN)


def build_worker(settings: Settings) -> NotificationWorker:
    if settings.NOTIFICATION_SENDER_EMAIL:
        ses = boto3.client("ses", region_name=settings.AWS_REGION)
        return NotificationWorker(SesDispatcher(ses, settings.NOTIFICATION_SENDER_EMAIL))
    return NotificationWorker(LoggingDispatcher())


# ---------- Shared clients (thread-safe, one per process) ----------

@lru_cache
def get_storage() -> StorageService:
    return build_storage(get_settings())


@lru_cache
def get_publisher() -> NotificationPublisher:
    return build_publisher(get_settings())


# ---------- FastAPI dependencies (one repository per request) ----------

def get_inspection_service() -> InspectionService:
    settings = get_settings()
    return InspectionService(build_repository(settings), get_storage())


def get_report_generator() -> ReportGenerator:
    settings = get_settings()
    publisher = get_publisher() if settings.notifications_enabled else None
    return ReportGenerator(build_repository(settings), publisher)
