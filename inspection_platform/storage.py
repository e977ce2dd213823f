# S3 storage service
from __future__ import annotations
import logging
from typing import Optional

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

KEY_PREFIX = "inspections"
DEFAULT_EXTENSION = "jpg"


def inspection_prefix(inspection_id: str) -> str:
    return f"{KEY_PREFIX}/{inspection_id}/"


def image_key(inspection_id: str, image_id: str, file_name: str) -> str:
    """inspections/<inspectionId>/<imageId>.<ext>, extension taken from the uploaded file name."""
    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return f"{inspection_prefix(inspection_id)}{image_id}.{ext or DEFAULT_EXTENSION}"


def key_belongs_to(inspection_id: str, key: str) -> bool:
    """Reject keys outside this inspection's folder (including ../ tricks)."""
    prefix = inspection_prefix(inspection_id)
    return key.startswith(prefix) and ".." not in key.split("/")


class StorageService:
    """
    Thin wrapper around an S3-compatible client. The service never moves image bytes itself:
    it only hands out time-limited URLs for the browser to PUT/GET against.
    """

    def __init__(self, s3_client, bucket_name: str, upload_expires_in: int = 300, download_expires_in: int = 3600):
        self.s3 = s3_client
        self.bucket = bucket_name
        self.upload_expires_in = upload_expires_in
        self.download_expires_in = download_expires_in

    # ---------- Presigning ----------

    def get_upload_url(self, key: str, content_type: str = "image/jpeg", expiration: Optional[int] = None) -> str:
        expiration = expiration or self.upload_expires_in
        return self._presign(
            "put_object",
            {"Bucket": self.bucket, "Key": key, "ContentType": content_type},
            expiration,
        )

    def get_signed_url(self, key: str, expiration: Optional[int] = None) -> str:
        expiration = expiration or self.download_expires_in
        return self._presign("get_object", {"Bucket": self.bucket, "Key": key}, expiration)

    def _presign(self, operation: str, params: dict, expiration: int) -> str:
        try:
            url = self.s3.generate_presigned_url(operation, Params=params, ExpiresIn=expiration)
        except ClientError as e:
            raise RuntimeError(f"Failed to presign {operation} for s3://{self.bucket}/{params['Key']}: {e}")
        logger.debug(f"Presigned {operation} for {params['Key']} ({expiration}s)")
        return url
