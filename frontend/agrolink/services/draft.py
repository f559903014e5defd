"""Draft construction and scalar/phase edits.

Each function takes a draft and returns a new one; callers swap the result
in. Values are re-validated through the pydantic models so a bad edit
never leaves a half-updated draft behind.
"""

import re
from typing import Any

from pydantic import ValidationError

from agrolink.middleware.exceptions import DraftEditError
from agrolink.schemas.harvest import HarvestRequest
from agrolink.schemas.schedule import (
    ExpectedYield,
    FarmLocation,
    FarmSize,
    HarvestScheduleDraft,
    Phase,
)
from agrolink.services.list_fields import parse_comma_list
from agrolink.services.timeline import derive_timeline, parse_date

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

# dotted wire path -> (draft attribute, sub-field attribute)
EDITABLE_FIELDS: dict[str, tuple[str, str]] = {
    "laborRequired.workers": ("labor_required", "workers"),
    "laborRequired.skills": ("labor_required", "skills"),
    "storage.type": ("storage", "type"),
    "storage.capacity": ("storage", "capacity"),
    "storage.duration": ("storage", "duration"),
    "qualityStandards.size": ("quality_standards", "size"),
    "qualityStandards.color": ("quality_standards", "color"),
    "qualityStandards.ripeness": ("quality_standards", "ripeness"),
    "qualityStandards.packaging": ("quality_standards", "packaging"),
}

READ_ONLY_FIELDS = (
    "cropVariety",
    "farmLocation",
    "farmSize",
    "expectedHarvestDate",
    "harvestDuration",
    "harvestMethod",
    "expectedYield",
)


def parse_number(value: Any) -> float:
    """Leading-number parse of loosely typed request values; 0 when absent."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER.match(str(value))
    return float(match.group(0)) if match else 0


def seed_draft(request: HarvestRequest) -> HarvestScheduleDraft:
    """Build a fresh draft pre-filled from the farmer's harvest request."""
    personalized = request.personalized_data
    return HarvestScheduleDraft(
        crop_variety=request.crop or "",
        farm_location=FarmLocation(
            address=(personalized.farm_location if personalized else None) or "",
            soil_type=(personalized.soil_type if personalized else None) or "",
        ),
        farm_size=FarmSize(area=parse_number(personalized.farm_size if personalized else None)),
        expected_harvest_date=request.harvest_date or "",
        expected_yield=ExpectedYield(quantity=parse_number(request.expected_yield)),
    )


def set_field(draft: HarvestScheduleDraft, field: str, value: Any) -> HarvestScheduleDraft:
    """Set one editable scalar field addressed by its dotted wire path."""
    if field.split(".")[0] in READ_ONLY_FIELDS:
        raise DraftEditError(f"{field} is read-only")
    if field not in EDITABLE_FIELDS:
        raise DraftEditError(f"Unknown field: {field}")

    parent, child = EDITABLE_FIELDS[field]
    if child == "skills" and isinstance(value, str):
        value = parse_comma_list(value)

    section = getattr(draft, parent)
    try:
        updated = type(section).model_validate({**section.model_dump(), child: value})
    except ValidationError as exc:
        raise DraftEditError(f"Invalid value for {field}: {exc.errors()[0]['msg']}") from exc
    return draft.model_copy(update={parent: updated})


def update_phase(draft: HarvestScheduleDraft, index: int, changes: dict[str, Any]) -> HarvestScheduleDraft:
    """Apply a partial phase edit and re-derive every dependent start date."""
    if not 0 <= index < len(draft.timeline):
        raise DraftEditError(f"Timeline has no phase {index + 1}")
    if index > 0 and "start_date" in changes:
        raise DraftEditError("Only the first phase's start date can be set")
    if changes.get("start_date") and parse_date(changes["start_date"]) is None:
        raise DraftEditError(f"Invalid start date: {changes['start_date']}")

    if isinstance(changes.get("activities"), str):
        changes = {**changes, "activities": parse_comma_list(changes["activities"])}

    current = draft.timeline[index]
    try:
        phase = Phase.model_validate({**current.model_dump(), **changes})
    except ValidationError as exc:
        raise DraftEditError(
            f"Invalid value for phase {index + 1}: {exc.errors()[0]['msg']}"
        ) from exc

    timeline = [phase if i == index else existing for i, existing in enumerate(draft.timeline)]
    return draft.model_copy(update={"timeline": derive_timeline(timeline)})
