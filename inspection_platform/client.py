"""
API client for the inspection platform.
Covers the same calls the browser frontend makes: records, reports and image uploads.
"""
from __future__ import annotations
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests

from .lib.clock import to_iso, utc_now

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InspectionApiClient:
    """Client for the inspection-api and report-service endpoints (both served under /api)"""

    def __init__(self, base_url: str = "http://localhost:8000", session: Optional[requests.Session] = None, timeout: int = 30):
        """
        Args:
            base_url: Where /api is served (ALB, nginx proxy or a local service)
            session: Optional pre-configured requests session
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}/api{endpoint}"
        logger.debug(f"API Request: {method} {url}")
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            logger.error(f"API Error [{endpoint}]: {response.status_code} {message}")
            raise ApiError(message or "API request failed", response.status_code)
        return data

    # ---------- Inspections ----------

    def create_inspection(self, inspection: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/inspections", json=inspection)

    def get_inspection(self, inspection_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/inspections/{inspection_id}")

    def list_inspections(self, status: Optional[str] = None) -> Dict[str, Any]:
        params = {"status": status} if status else None
        return self._request("GET", "/inspections", params=params)

    def update_inspection(self, inspection_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/inspections/{inspection_id}", json=updates)

    # ---------- Reports ----------

    def generate_report(self, inspection_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/reports/{inspection_id}")

    def get_report(self, inspection_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/reports/{inspection_id}")

    # ---------- Images ----------

    def get_presigned_url(self, inspection_id: str, file_name: str, content_type: str = "image/jpeg") -> Dict[str, Any]:
        return self._request(
            "POST",
            "/presigned-url",
            json={
                "inspectionId": inspection_id,
                "fileName": file_name,
                "contentType": content_type,
                "operation": "upload",
            },
        )

    def upload_image(self, inspection_id: str, file_path: str | Path) -> Dict[str, Any]:
        """
        Upload one image straight to S3 through a pre-signed URL.

        Returns:
            Image reference to send back with update_inspection(images=[...])
        """
        path = Path(file_path)
        content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        presigned = self.get_presigned_url(inspection_id, path.name, content_type)

        with open(path, "rb") as f:
            response = self.session.put(
                presigned["uploadUrl"],
                data=f,
                headers={"Content-Type": content_type},
                timeout=self.timeout,
            )
        if not response.ok:
            raise ApiError("Failed to upload image to S3", response.status_code)

        logger.info(f"Uploaded {path.name} as {presigned['s3Key']}")
        return {
            "imageId": presigned["imageId"],
            "s3Key": presigned["s3Key"],
            "description": path.name,
            "uploadedAt": to_iso(utc_now()),
        }

    def upload_images(self, inspection_id: str, file_paths: Iterable[str | Path]) -> List[Dict[str, Any]]:
        return [self.upload_image(inspection_id, p) for p in file_paths]
