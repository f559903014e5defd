"""Harvest entities as the AgroLink backend returns them.

Only the fields the wizard and the tracking view read are declared;
everything else in the backend document is ignored.
"""

from typing import Any

from pydantic import Field, field_validator

from agrolink.schemas.schedule import CamelModel, StoredHarvestSchedule


class PersonalizedData(CamelModel):
    """Free-form farmer answers; anything not text or a number reads as absent."""

    farm_location: str | None = None
    soil_type: str | None = None
    farm_size: float | str | None = None

    @field_validator("farm_location", "soil_type", mode="before")
    @classmethod
    def text_or_none(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator("farm_size", mode="before")
    @classmethod
    def size_or_none(cls, v: Any) -> float | str | None:
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            return None
        return v


class HarvestRequest(CamelModel):
    """A farmer's harvest request assigned to the current agronomist."""

    id: str = Field(alias="_id")
    crop: str | None = None
    harvest_date: str | None = None
    expected_yield: float | str | None = None
    status: str | None = None
    personalized_data: PersonalizedData | None = None

    @field_validator("personalized_data", mode="before")
    @classmethod
    def mapping_or_none(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, PersonalizedData)) else None


class AssignedHarvests(CamelModel):
    """Envelope only; each item is validated on its own so one bad record
    cannot hide the rest."""

    items: list[Any] = Field(default_factory=list)


class HarvestRecord(CamelModel):
    """A farmer's harvest carrying a created schedule."""

    id: str = Field(alias="_id")
    crop: str | None = None
    farmer_name: str | None = None
    status: str | None = None
    harvest_schedule: StoredHarvestSchedule | None = None


class HarvestScheduleList(CamelModel):
    harvests: list[HarvestRecord] = Field(default_factory=list)
