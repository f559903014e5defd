"""Timeline date derivation.

The first phase's start date is the anchor. Every later phase starts the
day the previous one ends: ``start[k] = start[k-1] + duration[k-1]``.
Dates are recomputed for the whole sequence after any timeline edit; the
sequence is short (a handful of phases), so there is no incremental patching.
"""

from datetime import date, datetime, timedelta
from typing import Sequence, TypeVar

from agrolink.schemas.schedule import Phase

DATE_FORMAT = "%Y-%m-%d"

PhaseT = TypeVar("PhaseT", bound=Phase)


def parse_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD (or ISO datetime) string, None when unusable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def add_days(start: str | None, days: int | None) -> str:
    """Return ``start + days`` as YYYY-MM-DD, or "" if either is missing
    or the result falls past the last representable date.
    """
    anchor = parse_date(start)
    if anchor is None or not days:
        return ""
    try:
        return (anchor + timedelta(days=days)).strftime(DATE_FORMAT)
    except OverflowError:
        return ""


def phase_end_date(phase: Phase) -> str:
    """Display-only end date of a phase. Never stored on the draft."""
    return add_days(phase.start_date, phase.duration)


def derive_timeline(phases: Sequence[PhaseT]) -> list[PhaseT]:
    """Recompute every dependent start date from the anchor forward.

    Returns new phase objects; the input sequence is left untouched.
    A phase whose predecessor lacks a valid start date or a duration gets
    an empty start date instead of a stale or malformed one.
    """
    derived: list[PhaseT] = []
    for index, phase in enumerate(phases):
        if index == 0:
            derived.append(phase.model_copy(deep=True))
            continue
        previous = derived[index - 1]
        start = add_days(previous.start_date, previous.duration)
        derived.append(phase.model_copy(update={"start_date": start}, deep=True))
    return derived
