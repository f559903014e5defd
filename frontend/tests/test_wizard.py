"""Harvest schedule wizard API tests, driven through the ASGI app."""

import asyncio
import json

import pytest

from agrolink.config import settings
from agrolink.wizard.steps import STEP_TITLES, WizardStep

from conftest import HARVEST_ID, TOKEN, assigned_harvest


async def open_session(client, auth_headers) -> dict:
    response = await client.post(f"/api/wizard/{HARVEST_ID}", headers=auth_headers)
    assert response.status_code == 201
    return response.json()


async def fill_required(client, auth_headers, sid: str) -> None:
    base = f"/api/wizard/sessions/{sid}"
    response = await client.patch(
        f"{base}/timeline/0", json={"startDate": "2024-03-15"}, headers=auth_headers,
    )
    assert response.status_code == 200
    for field, value in [
        ("qualityStandards.size", "Medium to large"),
        ("qualityStandards.color", "Deep red"),
        ("qualityStandards.ripeness", "90-95%"),
        ("qualityStandards.packaging", "5kg ventilated boxes"),
    ]:
        response = await client.patch(
            f"{base}/fields", json={"field": field, "value": value}, headers=auth_headers,
        )
        assert response.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
class TestOpenWizard:
    async def test_opens_on_step_one_seeded_from_request(self, client, auth_headers):
        data = await open_session(client, auth_headers)

        assert data["harvest_id"] == HARVEST_ID
        assert data["current_step"] == 1
        assert data["total_steps"] == 4
        assert data["can_go_back"] is False
        assert data["can_submit"] is False
        assert data["draft"]["cropVariety"] == "Tomato"
        assert data["draft"]["farmSize"] == {"area": 5, "unit": "acres"}
        assert data["draft"]["expectedYield"] == {"quantity": 1200, "unit": "kg"}
        assert data["step"]["editable"] is False

    async def test_forwards_bearer_token(self, client, auth_headers, backend):
        await open_session(client, auth_headers)
        request = backend.calls("GET", "/harvest/agronomist/assigned")[0]
        assert request.headers["Authorization"] == f"Bearer {TOKEN}"

    async def test_requires_token(self, client):
        response = await client.post(f"/api/wizard/{HARVEST_ID}")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_unknown_harvest_redirects_to_dashboard(self, client, auth_headers):
        response = await client.post("/api/wizard/does-not-exist", headers=auth_headers)

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "HARVEST_NOT_FOUND"
        assert error["message"] == "Harvest not found"
        assert error["details"]["redirect_to"] == settings.dashboard_path

    async def test_malformed_sibling_does_not_block(self, client, auth_headers, backend):
        backend.assigned.append(assigned_harvest(
            "665f1c2e9b1e8a0012a4b003", personalizedData={"farmLocation": {"lat": 1}},
        ))
        backend.assigned.append({"crop": "Leeks"})

        data = await open_session(client, auth_headers)
        assert data["draft"]["farmLocation"]["address"] == "Nuwara Eliya"

    async def test_malformed_assigned_list_redirects_to_dashboard(self, client, auth_headers, backend):
        backend.overrides[("GET", "/harvest/agronomist/assigned")] = (200, {"items": 42})
        response = await client.post(f"/api/wizard/{HARVEST_ID}", headers=auth_headers)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "HARVEST_FETCH_FAILED"
        assert error["details"]["redirect_to"] == settings.dashboard_path

    async def test_backend_failure_redirects_to_dashboard(self, client, auth_headers, backend):
        backend.overrides[("GET", "/harvest/agronomist/assigned")] = (
            500, {"error": {"message": "Database unavailable"}},
        )
        response = await client.post(f"/api/wizard/{HARVEST_ID}", headers=auth_headers)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["message"] == "Failed to load harvest details"
        assert error["details"]["redirect_to"] == settings.dashboard_path


@pytest.mark.api
@pytest.mark.asyncio
class TestNavigation:
    async def test_next_and_previous_clamp(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        base = f"/api/wizard/sessions/{sid}"

        data = (await client.post(f"{base}/previous", headers=auth_headers)).json()
        assert data["current_step"] == 1

        for _ in range(5):
            data = (await client.post(f"{base}/next", headers=auth_headers)).json()
        assert data["current_step"] == 4
        assert data["can_go_forward"] is False
        assert data["can_submit"] is True
        assert data["step"]["title"] == STEP_TITLES[WizardStep.QUALITY_REVIEW]

    async def test_get_progress_reflects_step(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        await client.post(f"/api/wizard/sessions/{sid}/next", headers=auth_headers)

        data = (await client.get(f"/api/wizard/sessions/{sid}", headers=auth_headers)).json()
        assert data["current_step"] == 2

    async def test_session_is_private_to_its_token(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.get(
            f"/api/wizard/sessions/{sid}", headers={"Authorization": "Bearer intruder"},
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.api
@pytest.mark.asyncio
class TestDraftEdits:
    async def test_set_quality_field(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.patch(
            f"/api/wizard/sessions/{sid}/fields",
            json={"field": "qualityStandards.color", "value": "Deep red"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["draft"]["qualityStandards"]["color"] == "Deep red"

    async def test_skills_from_comma_text(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.patch(
            f"/api/wizard/sessions/{sid}/fields",
            json={"field": "laborRequired.skills", "value": "Picking, , Sorting "},
            headers=auth_headers,
        )
        assert response.json()["draft"]["laborRequired"]["skills"] == ["Picking", "Sorting"]

    async def test_read_only_field_rejected(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.patch(
            f"/api/wizard/sessions/{sid}/fields",
            json={"field": "cropVariety", "value": "Potato"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DRAFT_EDIT_ERROR"

    async def test_list_add_update_remove(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        base = f"/api/wizard/sessions/{sid}/lists/equipment"

        await client.post(base, json={"value": "Crates"}, headers=auth_headers)
        await client.post(base, json={"value": "Knives"}, headers=auth_headers)
        await client.put(f"{base}/0", json={"value": "Harvest crates"}, headers=auth_headers)
        data = (await client.delete(f"{base}/1", headers=auth_headers)).json()

        assert data["draft"]["equipment"] == ["Harvest crates"]

    async def test_remove_missing_item(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.delete(
            f"/api/wizard/sessions/{sid}/lists/transportation/0", headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_anchor_edit_cascades_through_timeline(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        base = f"/api/wizard/sessions/{sid}/timeline"

        await client.patch(f"{base}/0", json={"startDate": "2024-03-15"}, headers=auth_headers)
        data = (await client.patch(f"{base}/1", json={"duration": 4}, headers=auth_headers)).json()

        starts = [phase["startDate"] for phase in data["draft"]["timeline"]]
        assert starts == ["2024-03-15", "2024-03-16", "2024-03-20"]

    async def test_dependent_start_date_not_settable(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.patch(
            f"/api/wizard/sessions/{sid}/timeline/2",
            json={"startDate": "2024-01-01"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_oversized_duration_rejected_and_step_still_renders(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        base = f"/api/wizard/sessions/{sid}"
        await client.post(f"{base}/next", headers=auth_headers)
        await client.post(f"{base}/next", headers=auth_headers)
        await client.patch(f"{base}/timeline/0", json={"startDate": "2024-01-01"}, headers=auth_headers)

        response = await client.patch(
            f"{base}/timeline/2", json={"duration": 5000000}, headers=auth_headers,
        )
        assert response.status_code == 422

        view = await client.get(base, headers=auth_headers)
        assert view.status_code == 200
        assert view.json()["step"]["phases"][2]["duration"] == 1

    async def test_anchor_at_end_of_calendar(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.patch(
            f"/api/wizard/sessions/{sid}/timeline/0",
            json={"startDate": "9999-12-30"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        starts = [p["startDate"] for p in response.json()["draft"]["timeline"]]
        assert starts == ["9999-12-30", "9999-12-31", ""]

    async def test_impossible_anchor_rejected(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.patch(
            f"/api/wizard/sessions/{sid}/timeline/0",
            json={"startDate": "2024-02-31"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DRAFT_EDIT_ERROR"

    async def test_add_phase(self, client, auth_headers):
        sid = (await open_session(client, auth_headers))["session_id"]
        data = (await client.post(
            f"/api/wizard/sessions/{sid}/lists/timeline", headers=auth_headers,
        )).json()
        assert len(data["draft"]["timeline"]) == 4
        assert data["draft"]["timeline"][3]["status"] == "Pending"


@pytest.mark.api
@pytest.mark.asyncio
class TestSubmit:
    async def test_incomplete_draft_blocks_submit(self, client, auth_headers, backend):
        sid = (await open_session(client, auth_headers))["session_id"]
        response = await client.post(
            f"/api/wizard/sessions/{sid}/submit", headers=auth_headers,
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["message"].startswith("Please fill required fields: ")
        assert "Phase 1 start date is required" in error["details"]["errors"]
        assert backend.calls("POST", f"/harvest/{HARVEST_ID}/schedule") == []

    async def test_valid_submit_posts_once_and_navigates(self, client, auth_headers, backend):
        sid = (await open_session(client, auth_headers))["session_id"]
        await fill_required(client, auth_headers, sid)

        response = await client.post(
            f"/api/wizard/sessions/{sid}/submit", headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["navigate_to"] == settings.schedule_list_path
        assert data["notice"] == {
            "level": "success", "message": "Harvest schedule created successfully!",
        }

        posts = backend.calls("POST", f"/harvest/{HARVEST_ID}/schedule")
        assert len(posts) == 1
        body = json.loads(posts[0].content)
        assert body["cropVariety"] == "Tomato"
        assert body["qualityStandards"]["packaging"] == "5kg ventilated boxes"
        assert [p["startDate"] for p in body["timeline"]] == [
            "2024-03-15", "2024-03-16", "2024-03-19",
        ]

        gone = await client.get(f"/api/wizard/sessions/{sid}", headers=auth_headers)
        assert gone.status_code == 404

    async def test_backend_rejection_keeps_draft(self, client, auth_headers, backend):
        backend.overrides[("POST", f"/harvest/{HARVEST_ID}/schedule")] = (
            400, {"error": {"message": "Schedule already exists"}},
        )
        sid = (await open_session(client, auth_headers))["session_id"]
        await fill_required(client, auth_headers, sid)

        response = await client.post(
            f"/api/wizard/sessions/{sid}/submit", headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Error: Schedule already exists"

        kept = await client.get(f"/api/wizard/sessions/{sid}", headers=auth_headers)
        assert kept.status_code == 200
        assert kept.json()["draft"]["qualityStandards"]["color"] == "Deep red"
        assert kept.json()["submitting"] is False

    async def test_cancel_discards_session(self, client, auth_headers, backend):
        sid = (await open_session(client, auth_headers))["session_id"]

        response = await client.delete(f"/api/wizard/sessions/{sid}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["navigate_to"] == settings.dashboard_path
        assert backend.calls("POST", f"/harvest/{HARVEST_ID}/schedule") == []
        gone = await client.get(f"/api/wizard/sessions/{sid}", headers=auth_headers)
        assert gone.status_code == 404

    async def test_overlapping_submits_post_once(self, client, auth_headers, backend):
        sid = (await open_session(client, auth_headers))["session_id"]
        await fill_required(client, auth_headers, sid)
        submit_url = f"/api/wizard/sessions/{sid}/submit"
        backend.hold = asyncio.Event()

        first = asyncio.create_task(client.post(submit_url, headers=auth_headers))
        for _ in range(200):
            if backend.held:
                break
            await asyncio.sleep(0.01)
        assert backend.held == 1

        second = await client.post(submit_url, headers=auth_headers)
        backend.hold.set()
        first_response = await first

        assert second.status_code == 409
        assert second.json()["error"]["code"] == "SUBMIT_IN_PROGRESS"
        assert first_response.status_code == 200
        assert len(backend.calls("POST", f"/harvest/{HARVEST_ID}/schedule")) == 1
