"""Pydantic schemas for the harvest schedule document.

`HarvestScheduleDraft` is the in-memory draft the wizard assembles; it is
posted as-is to the backend, which stores it on the harvest as its
`harvestSchedule`. Python attributes are snake_case, the wire format is
the backend's camelCase (serialize with ``by_alias=True``).
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PhaseStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    DELAYED = "Delayed"


class ScheduleStatus(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# ── Farmer-sourced (read-only in the wizard) ────────────────

class Coordinates(CamelModel):
    lat: float | str = ""
    lng: float | str = ""


class FarmLocation(CamelModel):
    address: str = ""
    coordinates: Coordinates = Field(default_factory=Coordinates)
    soil_type: str = ""


class FarmSize(CamelModel):
    area: float = 0
    unit: Literal["acres"] = "acres"


class ExpectedYield(CamelModel):
    quantity: float = 0
    unit: str = "kg"


# ── Agronomist input ────────────────────────────────────────

class LaborRequired(CamelModel):
    workers: int = Field(0, ge=0)
    skills: list[str] = Field(default_factory=list)


class Storage(CamelModel):
    type: str = ""
    capacity: str = ""
    duration: str = ""


class QualityStandards(CamelModel):
    size: str = ""
    color: str = ""
    ripeness: str = ""
    packaging: str = ""


# Longest phase the wizard accepts, in days.
MAX_PHASE_DURATION_DAYS = 3650


class Phase(CamelModel):
    """One timeline stage. Only the first phase's start date is set by hand."""

    phase: str = ""
    activities: list[str] = Field(default_factory=list)
    start_date: str = ""
    duration: int | None = Field(1, ge=0, le=MAX_PHASE_DURATION_DAYS)
    status: PhaseStatus = PhaseStatus.PENDING


class Risk(CamelModel):
    type: str | None = None
    description: str | None = None
    mitigation: str | None = None


def default_timeline() -> list[Phase]:
    return [
        Phase(
            phase="Pre-harvest Preparation",
            activities=["Field inspection", "Equipment check"],
            duration=1,
        ),
        Phase(
            phase="Harvest Execution",
            activities=["Picking", "Sorting", "Packaging"],
            duration=3,
        ),
        Phase(
            phase="Post-harvest Activities",
            activities=["Quality check", "Storage", "Delivery"],
            duration=1,
        ),
    ]


class HarvestScheduleDraft(CamelModel):
    # Basic info (from farmer request)
    crop_variety: str = ""
    farm_location: FarmLocation = Field(default_factory=FarmLocation)
    farm_size: FarmSize = Field(default_factory=FarmSize)

    # Harvest planning (from farmer request)
    expected_harvest_date: str = ""
    harvest_duration: int = Field(1, ge=1)
    harvest_method: str = "Manual"
    expected_yield: ExpectedYield = Field(default_factory=ExpectedYield)

    # Resources
    labor_required: LaborRequired = Field(default_factory=LaborRequired)
    equipment: list[str] = Field(default_factory=list)
    transportation: list[str] = Field(default_factory=list)
    storage: Storage = Field(default_factory=Storage)

    # Timeline
    timeline: list[Phase] = Field(default_factory=default_timeline)

    # Quality standards
    quality_standards: QualityStandards = Field(default_factory=QualityStandards)

    # Risk management (carried through, no step edits it)
    risks: list[Risk] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """Body for POST /harvest/{id}/schedule."""
        return self.model_dump(by_alias=True, mode="json")


# ── Stored schedule (as returned by the backend) ────────────

class StoredFarmSize(CamelModel):
    area: float | None = None
    unit: str = "acres"


class TrackedPhase(Phase):
    start_date: str | None = None
    duration: int | None = None
    completed_at: str | None = None
    notes: str | None = ""


class StoredHarvestSchedule(HarvestScheduleDraft):
    farm_size: StoredFarmSize = Field(default_factory=StoredFarmSize)
    expected_harvest_date: str | None = None
    timeline: list[TrackedPhase] = Field(default_factory=list)
    schedule_status: ScheduleStatus = ScheduleStatus.DRAFT
    created_at: str | None = None
    updated_at: str | None = None
