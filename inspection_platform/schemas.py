# Pydantic schemas shared by the services, the HTTP routers and the worker
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

# Closed set of checklist categories; every one must be rated before a report is generated
CHECKLIST_CATEGORIES = ("roof", "foundation", "plumbing", "electrical", "hvac")

REPORT_GENERATED_EVENT = "REPORT_GENERATED"


class InspectionStatus(str, Enum):
    DRAFT = "DRAFT"
    IN_PROGRESS = "IN_PROGRESS"
    REPORT_GENERATED = "REPORT_GENERATED"


class ConditionRating(str, Enum):
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


# ---------- Base ----------

class CamelModel(BaseModel):
    """Wire format is camelCase (shared with the frontend and the worker); Python side stays snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Inspections ----------

class Checklist(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    roof: Optional[ConditionRating] = None
    foundation: Optional[ConditionRating] = None
    plumbing: Optional[ConditionRating] = None
    electrical: Optional[ConditionRating] = None
    hvac: Optional[ConditionRating] = None

    def provided(self) -> Dict[str, Optional[str]]:
        """Only the categories the caller actually sent, as plain strings."""
        return {
            key: (value.value if value is not None else None)
            for key, value in self.model_dump(exclude_unset=True).items()
        }


class ImageReference(CamelModel):
    image_id: str = Field(min_length=1)
    s3_key: str = Field(min_length=1)
    description: str = ""
    uploaded_at: str


class InspectionCreate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    property_address: str = Field(min_length=1)
    inspector_name: str = Field(min_length=1)
    inspector_email: EmailStr
    client_name: str = ""
    client_email: Optional[EmailStr] = None

    @field_validator("client_email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, v):
        return v or None


class InspectionUpdate(CamelModel):
    """Partial update: every field is optional and applied only when present."""
    checklist: Optional[Checklist] = None
    notes: Optional[str] = None
    images: Optional[List[ImageReference]] = None
    client_name: Optional[str] = None
    client_email: Optional[EmailStr] = None
    status: Optional[InspectionStatus] = None

    @field_validator("client_email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, v):
        return v or None


class InspectionSummary(CamelModel):
    inspection_id: str
    property_address: str
    inspector_name: str
    status: InspectionStatus
    created_at: str


# ---------- Pre-signed URLs ----------

class PresignedUrlRequest(CamelModel):
    inspection_id: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    content_type: str = "image/jpeg"
    operation: Literal["upload", "download"] = "upload"
    s3_key: Optional[str] = None


class PresignedUrl(CamelModel):
    upload_url: Optional[str] = None
    download_url: Optional[str] = None
    s3_key: str
    image_id: str
    expires_in: int


# ---------- Reports ----------

class ReportParty(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None


class ReportSummary(CamelModel):
    # Stored values are copied verbatim, so no rating validation here
    checklist: Dict[str, Optional[str]]
    overall_condition: ConditionRating
    notes: Optional[str] = ""
    total_images: int = 0


class Report(CamelModel):
    report_id: str
    inspection_id: str
    generated_at: Optional[str] = None
    property_address: Optional[str] = None
    inspector: ReportParty
    client: ReportParty
    summary: ReportSummary
    images: List[Dict[str, Any]] = Field(default_factory=list)


# ---------- Notifications ----------

class NotificationEvent(CamelModel):
    type: str
    inspection_id: str
    report_id: Optional[str] = None
    property_address: str
    inspector_email: str
    client_email: Optional[str] = None
    generated_at: str


class Notification(CamelModel):
    to: str
    subject: str
    body: str


class NotificationOutcome(CamelModel):
    status: str
    inspection_id: Optional[str] = None
    record_id: Optional[str] = None
    recipients: Optional[List[str]] = None
    error: Optional[str] = None


class WorkerSummary(CamelModel):
    processed: int
    results: List[NotificationOutcome] = Field(default_factory=list)
