# FastAPI entrypoint
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.inspections import router as inspections_router
from .api.reports import router as reports_router
from .config import Settings, configure_logging, get_settings
from .lib.clock import to_iso, utc_now

logger = logging.getLogger(__name__)

INSPECTION_API = "inspection-api"
REPORT_SERVICE = "report-service"
ALL_SERVICES = "all"

ROUTERS = {
    INSPECTION_API: [inspections_router],
    REPORT_SERVICE: [reports_router],
    ALL_SERVICES: [inspections_router, reports_router],
}

DEFAULT_PORTS = {INSPECTION_API: 3001, REPORT_SERVICE: 3002, ALL_SERVICES: 8000}


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def create_app(service: str = ALL_SERVICES, settings: Optional[Settings] = None) -> FastAPI:
    if service not in ROUTERS:
        raise ValueError(f"Unknown service {service!r}; expected one of {sorted(ROUTERS)}")
    settings = settings or get_settings()

    app = FastAPI(title=f"Inspection Platform ({service})", version="1.0.0")

    # CORS configuration based on environment
    allowed_origins = ["*"] if settings.ENVIRONMENT == "development" else [
        "http://localhost:3000",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    # Error bodies are {"error": ...} for the frontend
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(status_code=404, content={"error": "Not found", "path": request.url.path})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    for router in ROUTERS[service]:
        app.include_router(router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "healthy", "service": service, "timestamp": to_iso(utc_now())}

    logger.info(f"{service} configured (environment: {settings.ENVIRONMENT})")
    logger.info(f"DynamoDB Table: {settings.TABLE_NAME}")
    if service != REPORT_SERVICE:
        logger.info(f"S3 Bucket: {settings.IMAGE_BUCKET_NAME}")
    if service != INSPECTION_API:
        logger.info(f"SNS Topic: {settings.SNS_TOPIC_ARN or 'NOT CONFIGURED'}")

    return app


def app_factory() -> FastAPI:
    """uvicorn --factory inspection_platform.main:app_factory"""
    settings = get_settings()
    configure_logging(settings)
    return create_app(ALL_SERVICES, settings)
