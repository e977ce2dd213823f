# Report generation service
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import NotFoundError, ValidationFailedError
from ..lib.clock import to_iso, utc_now
from ..lib.ids import report_id_for
from ..notifications import NotificationPublisher
from ..records import InspectionRepository
from ..schemas import (
    CHECKLIST_CATEGORIES,
    REPORT_GENERATED_EVENT,
    ConditionRating,
    InspectionStatus,
    NotificationEvent,
    Report,
    ReportParty,
    ReportSummary,
)

logger = logging.getLogger(__name__)

CONDITION_SCORES = {
    ConditionRating.GOOD.value: 3,
    ConditionRating.FAIR.value: 2,
    ConditionRating.POOR.value: 1,
}
GOOD_THRESHOLD = 2.5
FAIR_THRESHOLD = 1.5


def overall_condition(checklist: Mapping[str, Any]) -> ConditionRating:
    """
    Average the checklist scores (Good=3, Fair=2, Poor=1, anything else 0) and classify:
    >= 2.5 Good, >= 1.5 Fair, otherwise Poor.
    """
    values = list(checklist.values())
    if not values:
        return ConditionRating.POOR
    avg = sum(CONDITION_SCORES.get(v, 0) if isinstance(v, str) else 0 for v in values) / len(values)
    if avg >= GOOD_THRESHOLD:
        return ConditionRating.GOOD
    if avg >= FAIR_THRESHOLD:
        return ConditionRating.FAIR
    return ConditionRating.POOR


def is_checklist_complete(checklist: Optional[Mapping[str, Any]]) -> bool:
    if not checklist:
        return False
    return all(checklist.get(category) is not None for category in CHECKLIST_CATEGORIES) and all(
        v is not None for v in checklist.values()
    )


def build_report(inspection: Dict[str, Any], generated_at: Optional[str]) -> Report:
    """Project an inspection record into a report. Nothing here is persisted."""
    checklist = dict(inspection.get("checklist") or {})
    images = list(inspection.get("images") or [])
    return Report(
        report_id=report_id_for(inspection["inspectionId"]),
        inspection_id=inspection["inspectionId"],
        generated_at=generated_at,
        property_address=inspection.get("propertyAddress"),
        inspector=ReportParty(name=inspection.get("inspectorName"), email=inspection.get("inspectorEmail")),
        client=ReportParty(name=inspection.get("clientName"), email=inspection.get("clientEmail")),
        summary=ReportSummary(
            checklist=checklist,
            overall_condition=overall_condition(checklist),
            notes=inspection.get("notes", ""),
            total_images=len(images),
        ),
        images=images,
    )


class ReportGenerator:
    """
    generate(): read -> validate -> build report -> status transition -> best-effort publish.
    The status write is the only step that must succeed; notification failures are logged
    and never undo it.
    """

    def __init__(
        self,
        repository: InspectionRepository,
        publisher: Optional[NotificationPublisher] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.publisher = publisher
        self.clock = clock

    # ---------- Entry points ----------

    def generate(self, inspection_id: str) -> Report:
        inspection = self._load(inspection_id)

        if not is_checklist_complete(inspection.get("checklist")):
            raise ValidationFailedError("Inspection checklist is incomplete")

        now = to_iso(self.clock())
        report = build_report(inspection, generated_at=now)

        self.repository.update_status(
            inspection_id,
            InspectionStatus.REPORT_GENERATED.value,
            {"reportGeneratedAt": now, "updatedAt": now},
        )
        logger.info(
            f"Report {report.report_id} generated for {inspection_id} "
            f"(overall condition: {report.summary.overall_condition.value})"
        )

        self._notify(inspection, report)
        return report

    def fetch(self, inspection_id: str) -> Report:
        inspection = self._load(inspection_id)
        if inspection.get("status") != InspectionStatus.REPORT_GENERATED.value:
            raise ValidationFailedError("Report has not been generated for this inspection")
        return build_report(inspection, generated_at=inspection.get("reportGeneratedAt"))

    # ---------- Helpers ----------

    def _load(self, inspection_id: str) -> Dict[str, Any]:
        inspection = self.repository.get(inspection_id)
        if inspection is None:
            raise NotFoundError("Inspection not found")
        return inspection

    def _notify(self, inspection: Dict[str, Any], report: Report) -> None:
        if self.publisher is None or not self.publisher.configured:
            logger.warning("SNS_TOPIC_ARN not configured, skipping notification")
            return

        try:
            event = NotificationEvent(
                type=REPORT_GENERATED_EVENT,
                inspection_id=report.inspection_id,
                report_id=report.report_id,
                property_address=inspection.get("propertyAddress", ""),
                inspector_email=inspection.get("inspectorEmail", ""),
                client_email=inspection.get("clientEmail") or None,
                generated_at=report.generated_at,
            )
            self.publisher.publish(event)
        except Exception:
            logger.exception(f"Notification publish failed for {report.inspection_id} (non-fatal)")
