"""Reports API endpoints (report-service)"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_report_generator
from ..errors import InspectionPlatformError
from ..services.report_generator import ReportGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reports/{inspection_id}")
def generate_report(inspection_id: str, generator: ReportGenerator = Depends(get_report_generator)):
    """Generate the report, mark the inspection REPORT_GENERATED and notify (best-effort)."""
    try:
        report = generator.generate(inspection_id)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception(f"Generate report error for {inspection_id}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"message": "Report generated successfully", "report": report.model_dump(by_alias=True, mode="json")}


@router.get("/reports/{inspection_id}")
def get_report(inspection_id: str, generator: ReportGenerator = Depends(get_report_generator)):
    """Rebuild the report from the inspection's current state."""
    try:
        report = generator.fetch(inspection_id)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception(f"Get report error for {inspection_id}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"report": report.model_dump(by_alias=True, mode="json")}
