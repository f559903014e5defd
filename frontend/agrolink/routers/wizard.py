"""Harvest schedule wizard — 4-step guided form, one session per draft.

Endpoints:
  POST   /api/wizard/{harvest_id}                        → open a session (initial load)
  GET    /api/wizard/sessions/{sid}                      → current step view
  POST   /api/wizard/sessions/{sid}/next | /previous     → move between steps
  PATCH  /api/wizard/sessions/{sid}/fields               → set a scalar field
  POST   /api/wizard/sessions/{sid}/lists/{field}        → append a list item
  PUT    /api/wizard/sessions/{sid}/lists/{field}/{i}    → replace a list item
  DELETE /api/wizard/sessions/{sid}/lists/{field}/{i}    → remove a list item
  PATCH  /api/wizard/sessions/{sid}/timeline/{i}         → edit one phase
  POST   /api/wizard/sessions/{sid}/submit               → validate + create schedule
  DELETE /api/wizard/sessions/{sid}                      → cancel, discard the draft

Design:
  - Navigation is never blocked; validation runs only on submit.
  - Steps 1-2 are read-only farmer data; edits address steps 3-4 only.
  - Every timeline edit re-derives all dependent phase start dates.
"""

from fastapi import APIRouter, Depends, status

from agrolink.auth.deps import get_access_token, get_backend_client
from agrolink.clients.backend import BackendClient
from agrolink.schemas.wizard import (
    FieldUpdate,
    ListItemInput,
    NavigationOutcome,
    PhaseUpdate,
    WizardProgress,
)
from agrolink.wizard.controller import HarvestScheduleWizard
from agrolink.wizard.sessions import WizardSession, WizardSessionStore, get_session_store
from agrolink.wizard.steps import TOTAL_STEPS

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def _make_progress(session: WizardSession) -> WizardProgress:
    """Build a WizardProgress response from the session's wizard."""
    wizard = session.wizard
    return WizardProgress(
        session_id=session.session_id,
        harvest_id=wizard.harvest_id,
        current_step=wizard.current_step.value,
        total_steps=TOTAL_STEPS,
        can_go_back=wizard.can_go_back,
        can_go_forward=wizard.can_go_forward,
        can_submit=wizard.can_submit,
        submitting=wizard.submitting,
        step=wizard.render_step(),
        draft=wizard.draft.to_payload(),
    )


async def get_session(
    session_id: str,
    token: str = Depends(get_access_token),
    store: WizardSessionStore = Depends(get_session_store),
) -> WizardSession:
    return store.get(session_id, token)


# ── Session lifecycle ────────────────────────────────────────

@router.post("/{harvest_id}", response_model=WizardProgress, status_code=status.HTTP_201_CREATED)
async def open_wizard(
    harvest_id: str,
    token: str = Depends(get_access_token),
    client: BackendClient = Depends(get_backend_client),
    store: WizardSessionStore = Depends(get_session_store),
):
    """Load the harvest request and start a draft seeded from it."""
    wizard = await HarvestScheduleWizard.load(client, harvest_id)
    session = store.create(wizard, token)
    return _make_progress(session)


@router.get("/sessions/{session_id}", response_model=WizardProgress)
async def get_progress(session: WizardSession = Depends(get_session)):
    return _make_progress(session)


@router.delete("/sessions/{session_id}", response_model=NavigationOutcome)
async def cancel_wizard(
    session: WizardSession = Depends(get_session),
    store: WizardSessionStore = Depends(get_session_store),
):
    outcome = session.wizard.cancel()
    store.discard(session.session_id)
    return outcome


# ── Navigation ───────────────────────────────────────────────

@router.post("/sessions/{session_id}/next", response_model=WizardProgress)
async def go_next(session: WizardSession = Depends(get_session)):
    session.wizard.go_next()
    return _make_progress(session)


@router.post("/sessions/{session_id}/previous", response_model=WizardProgress)
async def go_previous(session: WizardSession = Depends(get_session)):
    session.wizard.go_previous()
    return _make_progress(session)


# ── Draft edits ──────────────────────────────────────────────

@router.patch("/sessions/{session_id}/fields", response_model=WizardProgress)
async def set_field(body: FieldUpdate, session: WizardSession = Depends(get_session)):
    """Set one scalar field. `laborRequired.skills` also takes comma text."""
    session.wizard.set_field(body.field, body.value)
    return _make_progress(session)


@router.post("/sessions/{session_id}/lists/{field}", response_model=WizardProgress)
async def add_list_item(
    field: str,
    body: ListItemInput | None = None,
    session: WizardSession = Depends(get_session),
):
    session.wizard.add_item(field, body.value if body else None)
    return _make_progress(session)


@router.put("/sessions/{session_id}/lists/{field}/{index}", response_model=WizardProgress)
async def update_list_item(
    field: str,
    index: int,
    body: ListItemInput,
    session: WizardSession = Depends(get_session),
):
    session.wizard.update_item(field, index, body.value)
    return _make_progress(session)


@router.delete("/sessions/{session_id}/lists/{field}/{index}", response_model=WizardProgress)
async def remove_list_item(
    field: str,
    index: int,
    session: WizardSession = Depends(get_session),
):
    session.wizard.remove_item(field, index)
    return _make_progress(session)


@router.patch("/sessions/{session_id}/timeline/{index}", response_model=WizardProgress)
async def update_phase(
    index: int,
    body: PhaseUpdate,
    session: WizardSession = Depends(get_session),
):
    """Edit name, activities, duration, or (first phase only) start date."""
    session.wizard.update_phase(index, body.model_dump(exclude_unset=True))
    return _make_progress(session)


# ── Submission ───────────────────────────────────────────────

@router.post("/sessions/{session_id}/submit", response_model=NavigationOutcome)
async def submit_schedule(
    session: WizardSession = Depends(get_session),
    client: BackendClient = Depends(get_backend_client),
    store: WizardSessionStore = Depends(get_session_store),
):
    """Validate the whole draft and create the schedule on the backend."""
    outcome = await session.wizard.submit(client)
    store.discard(session.session_id)
    return outcome
