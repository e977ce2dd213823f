"""Shared fixtures: an in-memory record store, a fixed clock and sample inspection records."""
import copy
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from inspection_platform.errors import NotFoundError
from inspection_platform.services.report_generator import ReportGenerator

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
FIXED_NOW_ISO = "2024-05-01T12:00:00.000Z"


class InMemoryInspectionRepository:
    """Same interface as InspectionRepository, backed by a dict. Records every write."""

    def __init__(self):
        self.items = {}
        self.writes = []

    def get(self, inspection_id):
        item = self.items.get(inspection_id)
        return copy.deepcopy(item) if item is not None else None

    def put(self, record):
        if record["inspectionId"] in self.items:
            raise ValueError("duplicate inspection id")
        self.items[record["inspectionId"]] = copy.deepcopy(record)
        self.writes.append(("put", record["inspectionId"], copy.deepcopy(record)))

    def update_fields(self, inspection_id, fields):
        if inspection_id not in self.items:
            raise NotFoundError("Inspection not found")
        self.items[inspection_id].update(copy.deepcopy(fields))
        self.writes.append(("update", inspection_id, copy.deepcopy(fields)))
        return copy.deepcopy(self.items[inspection_id])

    def update_status(self, inspection_id, status, timestamps):
        return self.update_fields(inspection_id, {"status": status, **timestamps})

    def query_by_status(self, status):
        matching = [copy.deepcopy(i) for i in self.items.values() if i.get("status") == status]
        return sorted(matching, key=lambda i: i["createdAt"], reverse=True)

    def scan_all(self):
        return [copy.deepcopy(i) for i in self.items.values()]


def make_record(**overrides):
    record = {
        "inspectionId": "insp_1234abcd",
        "propertyAddress": "12 Elm Street, Springfield",
        "inspectorName": "Dana Reyes",
        "inspectorEmail": "dana@inspections.example.com",
        "clientName": "Sam Patel",
        "clientEmail": "sam@example.com",
        "status": "IN_PROGRESS",
        "createdAt": "2024-04-30T09:00:00.000Z",
        "updatedAt": "2024-04-30T10:00:00.000Z",
        "checklist": {
            "roof": "Good",
            "foundation": "Good",
            "plumbing": "Fair",
            "electrical": "Good",
            "hvac": "Poor",
        },
        "notes": "Minor rust on the furnace housing.",
        "images": [
            {
                "imageId": "img_aaaa1111",
                "s3Key": "inspections/insp_1234abcd/img_aaaa1111.jpg",
                "description": "furnace.jpg",
                "uploadedAt": "2024-04-30T09:30:00.000Z",
            }
        ],
    }
    record.update(overrides)
    return record


@pytest.fixture
def repository():
    return InMemoryInspectionRepository()


@pytest.fixture
def complete_record(repository):
    record = make_record()
    repository.put(record)
    repository.writes.clear()
    return record


@pytest.fixture
def publisher():
    pub = MagicMock()
    pub.configured = True
    pub.publish.return_value = "msg-1"
    return pub


@pytest.fixture
def generator(repository, publisher):
    return ReportGenerator(repository, publisher, clock=lambda: FIXED_NOW)
