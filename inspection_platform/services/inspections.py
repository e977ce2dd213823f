# Inspection record service: CRUD over records plus pre-signed image URLs
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..errors import NotFoundError, ValidationFailedError
from ..lib.clock import to_iso, utc_now
from ..lib.ids import new_image_id, new_inspection_id
from ..records import InspectionRepository
from ..schemas import (
    CHECKLIST_CATEGORIES,
    InspectionCreate,
    InspectionStatus,
    InspectionSummary,
    InspectionUpdate,
    PresignedUrl,
    PresignedUrlRequest,
)
from ..storage import StorageService, image_key, key_belongs_to

logger = logging.getLogger(__name__)

# Statuses a client may set by hand; REPORT_GENERATED only comes from report generation
MANUAL_STATUSES = {InspectionStatus.DRAFT, InspectionStatus.IN_PROGRESS}


def empty_checklist() -> Dict[str, Optional[str]]:
    return {category: None for category in CHECKLIST_CATEGORIES}


def new_inspection_record(data: InspectionCreate, now: str) -> Dict[str, Any]:
    return {
        "inspectionId": new_inspection_id(),
        "propertyAddress": data.property_address,
        "inspectorName": data.inspector_name,
        "inspectorEmail": str(data.inspector_email),
        "clientName": data.client_name or "",
        "clientEmail": str(data.client_email) if data.client_email else "",
        "status": InspectionStatus.DRAFT.value,
        "createdAt": now,
        "updatedAt": now,
        "checklist": empty_checklist(),
        "notes": "",
        "images": [],
    }


def derived_status(checklist: Dict[str, Optional[str]]) -> InspectionStatus:
    if any(v is not None for v in checklist.values()):
        return InspectionStatus.IN_PROGRESS
    return InspectionStatus.DRAFT


class InspectionService:
    def __init__(
        self,
        repository: InspectionRepository,
        storage: Optional[StorageService] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.storage = storage
        self.clock = clock

    # ---------- Records ----------

    def create(self, data: InspectionCreate) -> InspectionSummary:
        record = new_inspection_record(data, to_iso(self.clock()))
        self.repository.put(record)
        return InspectionSummary(
            inspection_id=record["inspectionId"],
            property_address=record["propertyAddress"],
            inspector_name=record["inspectorName"],
            status=record["status"],
            created_at=record["createdAt"],
        )

    def get(self, inspection_id: str) -> Dict[str, Any]:
        inspection = self.repository.get(inspection_id)
        if inspection is None:
            raise NotFoundError("Inspection not found")
        return inspection

    def list_inspections(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        if status:
            wanted = status.strip().upper()
            if wanted not in InspectionStatus.__members__:
                raise ValidationFailedError(f"Unknown status: {status}")
            return self.repository.query_by_status(wanted)

        inspections = self.repository.scan_all()
        inspections.sort(key=lambda i: i.get("createdAt") or "", reverse=True)
        return inspections

    def update(self, inspection_id: str, changes: InspectionUpdate) -> Dict[str, Any]:
        existing = self.get(inspection_id)
        fields: Dict[str, Any] = {"updatedAt": to_iso(self.clock())}

        if changes.checklist is not None:
            checklist = {**empty_checklist(), **(existing.get("checklist") or {})}
            checklist.update(changes.checklist.provided())
            fields["checklist"] = checklist

        if changes.notes is not None:
            fields["notes"] = changes.notes

        if changes.images:
            images = list(existing.get("images") or [])
            known = {img.get("imageId") for img in images}
            for ref in changes.images:
                if ref.image_id not in known:
                    images.append(ref.model_dump(by_alias=True))
                    known.add(ref.image_id)
            fields["images"] = images

        if changes.client_name is not None:
            fields["clientName"] = changes.client_name
        if changes.client_email is not None:
            fields["clientEmail"] = str(changes.client_email)

        if changes.status is not None:
            if changes.status not in MANUAL_STATUSES:
                raise ValidationFailedError("Status REPORT_GENERATED can only be set by generating a report")
            if existing.get("status") == InspectionStatus.REPORT_GENERATED.value:
                raise ValidationFailedError("Status cannot change once the report has been generated")
            fields["status"] = changes.status.value
        elif "checklist" in fields and existing.get("status") != InspectionStatus.REPORT_GENERATED.value:
            fields["status"] = derived_status(fields["checklist"]).value

        updated = self.repository.update_fields(inspection_id, fields)
        logger.info(f"Updated inspection {inspection_id}: {', '.join(sorted(fields))}")
        return updated

    # ---------- Images ----------

    def presign(self, request: PresignedUrlRequest) -> PresignedUrl:
        if self.storage is None:
            raise RuntimeError("Image storage is not configured")

        image_id = new_image_id()
        key = image_key(request.inspection_id, image_id, request.file_name)

        if request.operation == "download":
            target = request.s3_key or key
            if not key_belongs_to(request.inspection_id, target):
                raise ValidationFailedError("s3Key does not belong to this inspection")
            url = self.storage.get_signed_url(target)
            return PresignedUrl(
                download_url=url,
                s3_key=target,
                image_id=image_id,
                expires_in=self.storage.download_expires_in,
            )

        url = self.storage.get_upload_url(key, content_type=request.content_type)
        return PresignedUrl(
            upload_url=url,
            s3_key=key,
            image_id=image_id,
            expires_in=self.storage.upload_expires_in,
        )
