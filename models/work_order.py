"""
Work Order Models
=================
Pydantic models for faults, technicians, parts and work orders.

Documents are stored and exchanged with camelCase keys (workOrderNumber,
partsUsed, ...). Incoming keys are matched case-insensitively, so the same
models parse database rows and loosely-formatted agent output. Numeric
fields accept numbers or numeric strings.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from config.settings import WORK_ORDER_DEFAULTS, WORK_ORDER_PRIORITIES, WORK_ORDER_TYPES

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


class WorkOrderParseError(ValueError):
    """Raised when the planning agent's response cannot be read as a WorkOrder."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class Document(BaseModel):
    """Base for every stored/exchanged record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _match_field_names(cls, data: Any) -> Any:
        """Map keys to field aliases ignoring case and underscores; drop nulls for non-nullable fields."""
        if not isinstance(data, dict):
            return data

        lookup = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            lookup[name.replace("_", "").lower()] = (alias, field)

        matched = {}
        for key, value in data.items():
            entry = lookup.get(str(key).replace("_", "").lower())
            if entry is None:
                continue
            alias, field = entry
            # null on a field with a non-null default means "not provided"
            if value is None and field.default is not None:
                continue
            matched[alias] = value
        return matched

    def to_document(self) -> dict:
        """Serialize with camelCase keys for storage."""
        return self.model_dump(mode="json", by_alias=True)


class DiagnosedFault(Document):
    model_config = ConfigDict(frozen=True)

    fault_type: str = ""
    machine_id: str = ""
    description: str = ""
    detected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Technician(Document):
    id: str = ""
    name: str = ""
    department: str = ""
    skills: list[str] = Field(default_factory=list)
    available: bool = True
    # Per-request ranking; never persisted
    match_score: int = Field(default=0, exclude=True)


class Part(Document):
    id: str = ""
    part_number: str = ""
    description: str = ""
    category: str = ""
    quantity_available: int = 0


class WorkOrderPartUsage(Document):
    part_id: str = ""
    part_number: str = ""
    quantity: int = 0


class RepairTask(Document):
    sequence: int = 0
    title: str = ""
    description: str = ""
    estimated_duration_minutes: int = 0
    required_skills: list[str] = Field(default_factory=list)
    safety_notes: Optional[str] = None


class WorkOrder(Document):
    id: str = ""
    work_order_number: str = ""
    machine_id: str = ""
    title: str = ""
    description: str = ""
    type: str = WORK_ORDER_DEFAULTS["type"]
    priority: str = WORK_ORDER_DEFAULTS["priority"]
    status: str = ""
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    estimated_duration: int = 0
    parts_used: list[WorkOrderPartUsage] = Field(default_factory=list)
    tasks: list[RepairTask] = Field(default_factory=list)
    # Assigned by the store on insert
    created_at: Optional[datetime] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        return _one_of(value, WORK_ORDER_TYPES, WORK_ORDER_DEFAULTS["type"])

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Any:
        return _one_of(value, WORK_ORDER_PRIORITIES, WORK_ORDER_DEFAULTS["priority"])

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude={"created_at"})


def _one_of(value: Any, allowed: tuple, default: str) -> Any:
    if not isinstance(value, str):
        return value
    normalized = value.strip().lower()
    if normalized in allowed:
        return normalized
    logger.warning(f"Unrecognized value '{value}', using '{default}'")
    return default


def parse_work_order_draft(text: str) -> WorkOrder:
    """
    Parse the planning agent's raw response into an unreconciled WorkOrder.

    A surrounding markdown code fence is tolerated. Anything that is not a
    JSON object matching the WorkOrder shape raises WorkOrderParseError.
    """
    payload = text or ""
    fenced = _CODE_FENCE.match(payload)
    if fenced:
        payload = fenced.group(1)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise WorkOrderParseError(f"Agent response is not valid JSON: {e}", text) from e

    if not isinstance(data, dict):
        raise WorkOrderParseError(
            f"Agent response is JSON {type(data).__name__}, expected an object", text
        )

    try:
        return WorkOrder.model_validate(data)
    except ValidationError as e:
        raise WorkOrderParseError(f"Agent response does not match the WorkOrder schema: {e}", text) from e
