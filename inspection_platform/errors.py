# Domain errors raised by the services and translated to HTTP by the routers
from __future__ import annotations


class InspectionPlatformError(Exception):
    """Base class for errors that are safe to show to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(InspectionPlatformError):
    status_code = 404


class ValidationFailedError(InspectionPlatformError):
    status_code = 400
