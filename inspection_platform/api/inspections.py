"""Inspection record endpoints (inspection-api service)"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_inspection_service
from ..errors import InspectionPlatformError
from ..schemas import InspectionCreate, InspectionUpdate, PresignedUrlRequest
from ..services.inspections import InspectionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/inspections", status_code=201)
def create_inspection(payload: InspectionCreate, service: InspectionService = Depends(get_inspection_service)):
    try:
        summary = service.create(payload)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Create inspection error")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {
        "message": "Inspection created successfully",
        "inspection": summary.model_dump(by_alias=True, mode="json"),
    }


@router.get("/inspections")
def list_inspections(
    status: Optional[str] = Query(None, description="Only inspections in this status"),
    service: InspectionService = Depends(get_inspection_service),
):
    try:
        inspections = service.list_inspections(status)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("List inspections error")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"count": len(inspections), "inspections": inspections}


@router.get("/inspections/{inspection_id}")
def get_inspection(inspection_id: str, service: InspectionService = Depends(get_inspection_service)):
    try:
        inspection = service.get(inspection_id)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Get inspection error")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"inspection": inspection}


@router.put("/inspections/{inspection_id}")
def update_inspection(
    inspection_id: str,
    payload: InspectionUpdate,
    service: InspectionService = Depends(get_inspection_service),
):
    try:
        inspection = service.update(inspection_id, payload)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Update inspection error")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"message": "Inspection updated successfully", "inspection": inspection}


@router.post("/presigned-url")
def create_presigned_url(payload: PresignedUrlRequest, service: InspectionService = Depends(get_inspection_service)):
    """Upload (PUT, 5 min) or download (GET, 1 h) URL for one inspection image."""
    try:
        presigned = service.presign(payload)
    except InspectionPlatformError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Presigned URL error")
        raise HTTPException(status_code=500, detail="Internal server error")
    return presigned.model_dump(by_alias=True, exclude_none=True)
