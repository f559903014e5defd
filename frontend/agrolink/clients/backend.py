"""HTTP client for the AgroLink backend REST API.

One shared `httpx.AsyncClient` is opened in the app lifespan; each request
wraps it in a `BackendClient` carrying the caller's bearer token.

Backend errors come back as ``{"error": {"message": ...}}``. Some older
handlers answer ``{"message": ...}`` or nest the text under
``error.data.message``, so `extract_error_message` walks that chain before
falling back to a fixed string.
"""

import logging
from typing import Any, TypeVar

import httpx
from fastapi import Request
from pydantic import BaseModel, ValidationError

from agrolink.schemas.harvest import (
    AssignedHarvests,
    HarvestRecord,
    HarvestRequest,
    HarvestScheduleList,
)
from agrolink.schemas.schedule import HarvestScheduleDraft, PhaseStatus

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BackendAPIError(Exception):
    """A backend call failed at the transport or HTTP level, or its body was malformed.

    `status_code` is None when no response arrived (connect error, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


def extract_error_message(payload: Any, default: str) -> str:
    if not isinstance(payload, dict):
        return default
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if payload.get("message"):
        return str(payload["message"])
    if isinstance(error, dict):
        data = error.get("data")
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
    return default


class BackendClient:
    """Thin async wrapper over the backend endpoints this service consumes."""

    def __init__(self, http: httpx.AsyncClient, token: str | None = None):
        self.http = http
        self.token = token

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, default_error: str, **kwargs) -> Any:
        try:
            response = await self.http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s unreachable: %s", method, path, exc)
            raise BackendAPIError(default_error) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = extract_error_message(payload, default_error)
            logger.warning(
                "Backend %s %s returned %d: %s",
                method, path, response.status_code, message,
            )
            raise BackendAPIError(message, status_code=response.status_code, payload=payload)
        return payload

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, default_error: str) -> ModelT:
        """Validate a response body, reporting a malformed one as a backend failure."""
        try:
            return model.model_validate(payload or {})
        except ValidationError as exc:
            logger.warning("Backend returned a malformed %s: %s", model.__name__, exc)
            raise BackendAPIError(default_error, payload=payload) from exc

    # ── Harvest requests ─────────────────────────────────────

    async def list_assigned_harvests(self) -> list[HarvestRequest]:
        """GET /harvest/agronomist/assigned"""
        payload = await self._request(
            "GET", "/harvest/agronomist/assigned", "Failed to load harvest details"
        )
        envelope = self._parse(AssignedHarvests, payload, "Failed to load harvest details")
        harvests: list[HarvestRequest] = []
        for position, item in enumerate(envelope.items):
            try:
                harvests.append(HarvestRequest.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed assigned harvest at position %d: %s",
                    position, exc.errors()[0]["msg"],
                )
        return harvests

    async def create_schedule(self, harvest_id: str, draft: HarvestScheduleDraft) -> dict:
        """POST /harvest/{harvest_id}/schedule"""
        payload = await self._request(
            "POST",
            f"/harvest/{harvest_id}/schedule",
            "Failed to create harvest schedule",
            json=draft.to_payload(),
        )
        return payload or {}

    # ── Schedule tracking ────────────────────────────────────

    async def list_schedules(self) -> list[HarvestRecord]:
        """GET /harvest/schedules"""
        payload = await self._request(
            "GET", "/harvest/schedules", "Failed to load harvest schedules"
        )
        return self._parse(HarvestScheduleList, payload, "Failed to load harvest schedules").harvests

    async def update_phase_status(
        self,
        harvest_id: str,
        phase_index: int,
        status: PhaseStatus,
        notes: str | None = None,
    ) -> dict:
        """PUT /harvest/{harvest_id}/schedule/status"""
        body: dict[str, Any] = {"phaseIndex": phase_index, "status": status.value}
        if notes is not None:
            body["notes"] = notes
        payload = await self._request(
            "PUT",
            f"/harvest/{harvest_id}/schedule/status",
            "Failed to update harvest schedule status",
            json=body,
        )
        return payload or {}


# ── FastAPI dependencies ─────────────────────────────────────

def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client
