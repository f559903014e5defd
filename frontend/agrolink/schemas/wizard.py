"""Pydantic schemas for the 4-step harvest schedule wizard API.

Request bodies carry single edits (a field, a list slot, a phase); every
edit answers with the full `WizardProgress` so the client re-renders from
one source of truth.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from agrolink.schemas.schedule import MAX_PHASE_DURATION_DAYS, CamelModel, PhaseStatus


# ── Rendered step views ─────────────────────────────────────

class FieldView(BaseModel):
    name: str
    label: str
    value: Any = None
    input: Literal["text", "number", "date", "list", "comma_list"] = "text"
    read_only: bool = True
    required: bool = False
    placeholder: str | None = None


class PhaseView(BaseModel):
    index: int
    phase: str
    activities: list[str]
    activities_text: str
    start_date: str
    start_date_editable: bool
    duration: int | None
    end_date: str
    status: PhaseStatus


class StepView(BaseModel):
    step: int
    title: str
    description: str
    editable: bool
    fields: list[FieldView] = []
    phases: list[PhaseView] = []


# ── Wizard state / progress ─────────────────────────────────

class WizardProgress(BaseModel):
    session_id: str
    harvest_id: str
    current_step: int
    total_steps: int
    can_go_back: bool
    can_go_forward: bool
    can_submit: bool
    submitting: bool
    step: StepView
    draft: dict


class Notice(BaseModel):
    level: Literal["success", "error", "info"]
    message: str


class NavigationOutcome(BaseModel):
    navigate_to: str
    notice: Notice | None = None


# ── Edit requests ───────────────────────────────────────────

class FieldUpdate(BaseModel):
    """Set one scalar field, e.g. ``qualityStandards.size``."""
    field: str
    value: Any = None


class ListItemInput(BaseModel):
    value: Any = None


class PhaseUpdate(CamelModel):
    """Partial phase edit. `activities` may be a list or comma-separated text."""
    phase: str | None = None
    activities: list[str] | str | None = None
    start_date: str | None = None
    duration: int | None = Field(None, ge=0, le=MAX_PHASE_DURATION_DAYS)


class PhaseStatusUpdate(BaseModel):
    status: PhaseStatus
    notes: str | None = None
