"""Add / remove / update semantics for the draft's ordered list fields.

Every helper returns a new list or a new draft; nothing is mutated in place.
Addressable fields:

    equipment
    transportation
    laborRequired.skills
    timeline
    timeline.<index>.activities

Any edit that touches the timeline re-derives all phase start dates.
"""

import re
from typing import Any, Sequence, TypeVar

from pydantic import TypeAdapter, ValidationError

from agrolink.middleware.exceptions import DraftEditError
from agrolink.schemas.schedule import HarvestScheduleDraft, Phase
from agrolink.services.timeline import derive_timeline

T = TypeVar("T")

_STRING_LIST = TypeAdapter(list[str])
_PHASE_LIST = TypeAdapter(list[Phase])
_ACTIVITIES_FIELD = re.compile(r"^timeline\.(\d+)\.activities$")

STRING_LIST_FIELDS = ("equipment", "transportation")


# ── Comma-separated text inputs ──────────────────────────────

def parse_comma_list(text: str) -> list[str]:
    """Split on commas, trim each token, drop tokens that end up empty."""
    return [token.strip() for token in text.split(",") if token.strip()]


def format_comma_list(items: Sequence[str]) -> str:
    return ", ".join(items)


# ── Pure list primitives ─────────────────────────────────────

def append_item(items: Sequence[T], value: T) -> list[T]:
    return [*items, value]


def remove_item_at(items: Sequence[T], index: int) -> list[T]:
    if not 0 <= index < len(items):
        raise IndexError(index)
    return [item for i, item in enumerate(items) if i != index]


def replace_item_at(items: Sequence[T], index: int, value: T) -> list[T]:
    if not 0 <= index < len(items):
        raise IndexError(index)
    return [value if i == index else item for i, item in enumerate(items)]


# ── Draft-level addressing ───────────────────────────────────

def _phase_index(draft: HarvestScheduleDraft, field: str) -> int | None:
    match = _ACTIVITIES_FIELD.match(field)
    if not match:
        return None
    index = int(match.group(1))
    if index >= len(draft.timeline):
        raise DraftEditError(f"Timeline has no phase {index + 1}")
    return index


def get_list(draft: HarvestScheduleDraft, field: str) -> list:
    if field in STRING_LIST_FIELDS or field == "timeline":
        return list(getattr(draft, field))
    if field == "laborRequired.skills":
        return list(draft.labor_required.skills)
    phase_index = _phase_index(draft, field)
    if phase_index is not None:
        return list(draft.timeline[phase_index].activities)
    raise DraftEditError(f"Not an editable list field: {field}")


def with_list(draft: HarvestScheduleDraft, field: str, items: Sequence[Any]) -> HarvestScheduleDraft:
    """Return a copy of ``draft`` with ``field`` replaced by ``items``."""
    try:
        if field in STRING_LIST_FIELDS:
            return draft.model_copy(update={field: _STRING_LIST.validate_python(items)})

        if field == "timeline":
            timeline = derive_timeline(_PHASE_LIST.validate_python(items))
            return draft.model_copy(update={"timeline": timeline})

        if field == "laborRequired.skills":
            labor = draft.labor_required.model_copy(
                update={"skills": _STRING_LIST.validate_python(items)}
            )
            return draft.model_copy(update={"labor_required": labor})

        phase_index = _phase_index(draft, field)
        if phase_index is not None:
            activities = _STRING_LIST.validate_python(items)
            timeline = [
                phase.model_copy(update={"activities": activities}) if i == phase_index else phase
                for i, phase in enumerate(draft.timeline)
            ]
            return draft.model_copy(update={"timeline": derive_timeline(timeline)})
    except ValidationError as exc:
        raise DraftEditError(f"Invalid value for {field}: {exc.errors()[0]['msg']}") from exc

    raise DraftEditError(f"Not an editable list field: {field}")


def default_item(field: str) -> Any:
    if field == "timeline":
        return Phase()
    return ""


def add_item(draft: HarvestScheduleDraft, field: str, value: Any = None) -> HarvestScheduleDraft:
    items = get_list(draft, field)
    return with_list(draft, field, append_item(items, default_item(field) if value is None else value))


def remove_item(draft: HarvestScheduleDraft, field: str, index: int) -> HarvestScheduleDraft:
    items = get_list(draft, field)
    try:
        return with_list(draft, field, remove_item_at(items, index))
    except IndexError:
        raise DraftEditError(f"{field} has no item at index {index}") from None


def update_item(draft: HarvestScheduleDraft, field: str, index: int, value: Any) -> HarvestScheduleDraft:
    items = get_list(draft, field)
    try:
        return with_list(draft, field, replace_item_at(items, index, value))
    except IndexError:
        raise DraftEditError(f"{field} has no item at index {index}") from None
