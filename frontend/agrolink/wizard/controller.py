"""Harvest schedule wizard — step controller and draft owner.

Lifecycle:
  load()    → fetch the agronomist's assigned harvests, find ours, seed a draft
  edits     → set_field / add_item / update_item / remove_item / update_phase,
              each swapping in a new draft value
  go_next() / go_previous() → free navigation, clamped to steps 1..4
  submit()  → validate everything, POST once, hand back where to go next

Failures never escape as anything but `AgroLinkException` subclasses, which
the exception handlers turn into the standard error envelope.
"""

import logging
from typing import Any

from fastapi import status

from agrolink.clients.backend import BackendAPIError, BackendClient
from agrolink.config import settings
from agrolink.middleware.exceptions import (
    HarvestFetchError,
    HarvestNotFoundError,
    ScheduleSubmitError,
    ScheduleValidationError,
    SubmitInProgressError,
)
from agrolink.schemas.harvest import HarvestRequest
from agrolink.schemas.schedule import HarvestScheduleDraft
from agrolink.schemas.wizard import NavigationOutcome, Notice, StepView
from agrolink.services import draft as draft_edits
from agrolink.services import list_fields
from agrolink.services.validation import validate_draft
from agrolink.wizard.steps import FIRST_STEP, LAST_STEP, WizardStep, next_step, previous_step
from agrolink.wizard.views import render_step

logger = logging.getLogger("agrolink.wizard")


class HarvestScheduleWizard:
    def __init__(
        self,
        harvest_id: str,
        request: HarvestRequest,
        draft: HarvestScheduleDraft | None = None,
    ):
        self.harvest_id = harvest_id
        self.request = request
        self.draft = draft if draft is not None else draft_edits.seed_draft(request)
        self.current_step = FIRST_STEP
        self.submitting = False

    # ── Initial load ─────────────────────────────────────────

    @classmethod
    async def load(cls, client: BackendClient, harvest_id: str) -> "HarvestScheduleWizard":
        """Resolve `harvest_id` against the assigned set and seed a new wizard."""
        try:
            assigned = await client.list_assigned_harvests()
        except BackendAPIError as exc:
            logger.exception(
                "Failed to fetch assigned harvests for %s (status=%s): %s",
                harvest_id, exc.status_code, exc.message,
            )
            raise HarvestFetchError(harvest_id, redirect_to=settings.dashboard_path) from exc

        request = next((h for h in assigned if h.id == harvest_id), None)
        if request is None:
            logger.warning(
                "Harvest %s not among %d assigned harvests", harvest_id, len(assigned)
            )
            raise HarvestNotFoundError(harvest_id, redirect_to=settings.dashboard_path)

        logger.info("Wizard opened for harvest %s (%s)", harvest_id, request.crop or "unknown crop")
        return cls(harvest_id, request)

    # ── Navigation ───────────────────────────────────────────

    def go_next(self) -> WizardStep:
        self.current_step = next_step(self.current_step)
        return self.current_step

    def go_previous(self) -> WizardStep:
        self.current_step = previous_step(self.current_step)
        return self.current_step

    def render_step(self, step: WizardStep | None = None) -> StepView:
        return render_step(step or self.current_step, self.draft)

    @property
    def can_go_back(self) -> bool:
        return self.current_step != FIRST_STEP

    @property
    def can_go_forward(self) -> bool:
        return self.current_step != LAST_STEP

    @property
    def can_submit(self) -> bool:
        return self.current_step == LAST_STEP and not self.submitting

    # ── Edits ────────────────────────────────────────────────

    def set_field(self, field: str, value: Any) -> None:
        self.draft = draft_edits.set_field(self.draft, field, value)

    def update_phase(self, index: int, changes: dict[str, Any]) -> None:
        self.draft = draft_edits.update_phase(self.draft, index, changes)

    def add_item(self, field: str, value: Any = None) -> None:
        self.draft = list_fields.add_item(self.draft, field, value)

    def update_item(self, field: str, index: int, value: Any) -> None:
        self.draft = list_fields.update_item(self.draft, field, index, value)

    def remove_item(self, field: str, index: int) -> None:
        self.draft = list_fields.remove_item(self.draft, field, index)

    # ── Submission ───────────────────────────────────────────

    def validate(self) -> list[str]:
        return validate_draft(self.draft)

    async def submit(self, client: BackendClient) -> NavigationOutcome:
        """Validate, then POST the draft once.

        The draft is left untouched on any failure so the agronomist can fix
        it and retry; discarding it on success is the session owner's job.
        """
        if self.submitting:
            raise SubmitInProgressError()

        errors = self.validate()
        if errors:
            logger.info(
                "Schedule for harvest %s blocked by %d validation errors",
                self.harvest_id, len(errors),
            )
            raise ScheduleValidationError(errors)

        self.submitting = True
        try:
            await client.create_schedule(self.harvest_id, self.draft)
        except BackendAPIError as exc:
            logger.error(
                "Failed to create schedule for harvest %s (status=%s): %s",
                self.harvest_id, exc.status_code, exc.message,
            )
            raise ScheduleSubmitError(
                exc.message,
                status_code=exc.status_code or status.HTTP_502_BAD_GATEWAY,
            ) from exc
        finally:
            self.submitting = False

        logger.info(
            "Schedule created for harvest %s with %d phases",
            self.harvest_id, len(self.draft.timeline),
        )
        return NavigationOutcome(
            navigate_to=settings.schedule_list_path,
            notice=Notice(level="success", message="Harvest schedule created successfully!"),
        )

    def cancel(self) -> NavigationOutcome:
        logger.info("Wizard for harvest %s cancelled", self.harvest_id)
        return NavigationOutcome(navigate_to=settings.dashboard_path)
