"""Pre-submit validation of the harvest schedule draft.

Only agronomist input (timeline, quality standards) is checked. The
farmer-sourced fields of steps 1 and 2 are never edited here, so they are
taken as given. All violations are collected, not just the first.
"""

from agrolink.schemas.schedule import HarvestScheduleDraft
from agrolink.services.timeline import parse_date

QUALITY_STANDARD_MESSAGES = {
    "size": "Size requirements are required",
    "color": "Color standards are required",
    "ripeness": "Ripeness level is required",
    "packaging": "Packaging requirements are required",
}


def validate_timeline(draft: HarvestScheduleDraft) -> list[str]:
    if not draft.timeline:
        return ["At least one timeline phase is required"]
    errors: list[str] = []
    for index, phase in enumerate(draft.timeline, start=1):
        if not phase.phase.strip():
            errors.append(f"Phase {index} name is required")
        if not phase.duration or phase.duration <= 0:
            errors.append(f"Phase {index} duration is required")
        if parse_date(phase.start_date) is None:
            errors.append(f"Phase {index} start date is required")
    return errors


def validate_quality_standards(draft: HarvestScheduleDraft) -> list[str]:
    standards = draft.quality_standards
    return [
        message
        for field, message in QUALITY_STANDARD_MESSAGES.items()
        if not getattr(standards, field).strip()
    ]


def validate_draft(draft: HarvestScheduleDraft) -> list[str]:
    """Return every human-readable violation; an empty list means submittable."""
    return validate_timeline(draft) + validate_quality_standards(draft)
