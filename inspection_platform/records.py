# DynamoDB record store for inspection records
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from .errors import NotFoundError

logger = logging.getLogger(__name__)

ENTITY_PREFIX = "INSPECTION#"
STATUS_PREFIX = "STATUS#"
METADATA_SK = "METADATA"

# Table/index keys; never returned to API callers
INTERNAL_KEYS = ("PK", "SK", "GSI1PK", "GSI1SK")


def primary_key(inspection_id: str) -> Dict[str, str]:
    return {"PK": f"{ENTITY_PREFIX}{inspection_id}", "SK": METADATA_SK}


def status_key(status: str) -> str:
    return f"{STATUS_PREFIX}{status}"


def strip_internal_keys(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if k not in INTERNAL_KEYS}


def _is_conditional_failure(e: ClientError) -> bool:
    return e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class InspectionRepository:
    """
    Single-table layout:
      PK = INSPECTION#<id>, SK = METADATA
      GSI1PK = STATUS#<status>, GSI1SK = createdAt  (listing by status)
    """

    def __init__(self, table, status_index_name: str = "GSI1"):
        self.table = table
        self.status_index_name = status_index_name

    # ---------- Reads ----------

    def get(self, inspection_id: str) -> Optional[Dict[str, Any]]:
        result = self.table.get_item(Key=primary_key(inspection_id))
        item = result.get("Item")
        return strip_internal_keys(item) if item else None

    def query_by_status(self, status: str) -> List[Dict[str, Any]]:
        """Records in the given status, newest first."""
        kwargs: Dict[str, Any] = {
            "IndexName": self.status_index_name,
            "KeyConditionExpression": Key("GSI1PK").eq(status_key(status)),
            "ScanIndexForward": False,
        }
        return self._collect(self.table.query, kwargs)

    def scan_all(self) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {"FilterExpression": Attr("PK").begins_with(ENTITY_PREFIX)}
        return self._collect(self.table.scan, kwargs)

    def _collect(self, operation, kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        while True:
            page = operation(**kwargs)
            items.extend(strip_internal_keys(i) for i in page.get("Items", []))
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    # ---------- Writes ----------

    def put(self, record: Dict[str, Any]) -> None:
        inspection_id = record["inspectionId"]
        item = {
            **primary_key(inspection_id),
            "GSI1PK": status_key(record["status"]),
            "GSI1SK": record["createdAt"],
            **record,
        }
        self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
        logger.info(f"Created inspection {inspection_id}")

    def update_fields(self, inspection_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        SET only the given attributes and return the full record afterwards.
        A status change also rewrites the status index key. Fails with NotFoundError
        if the record disappeared; there is no version check.
        """
        if not fields:
            raise ValueError("update_fields called with no fields")

        values = dict(fields)
        if "status" in values:
            values["GSI1PK"] = status_key(values["status"])

        names: Dict[str, str] = {}
        placeholders: Dict[str, Any] = {}
        assignments: List[str] = []
        for idx, (attr, value) in enumerate(values.items()):
            names[f"#f{idx}"] = attr
            placeholders[f":v{idx}"] = value
            assignments.append(f"#f{idx} = :v{idx}")

        try:
            result = self.table.update_item(
                Key=primary_key(inspection_id),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=placeholders,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise NotFoundError("Inspection not found")
            raise
        return strip_internal_keys(result.get("Attributes", {}))

    def update_status(self, inspection_id: str, status: str, timestamps: Dict[str, str]) -> Dict[str, Any]:
        """Status-only transition; checklist, notes and images are left untouched."""
        return self.update_fields(inspection_id, {"status": status, **timestamps})

