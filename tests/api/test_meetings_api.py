"""Integration tests for meetings API endpoints."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from viewings.notifications.schemas import TemplateKind


@pytest.fixture
def future(clock):
    def at(**delta) -> str:
        return (clock.now + timedelta(**delta)).isoformat()

    return at


async def create(client: AsyncClient, headers, scheduled_at: str, **extra):
    body = {"property_id": "prop-1", "phone": "+21622333444", "scheduled_at": scheduled_at}
    body.update(extra)
    return await client.post("/meetings", json=body, headers=headers)


class TestCreateMeeting:
    """POST /meetings"""

    async def test_created(self, client, client_headers, future, notifier):
        response = await create(client, client_headers, future(days=2), notes="Garden?")

        assert response.status_code == 201
        data = response.json()
        assert data["meeting"]["status"] == "pending"
        assert data["meeting"]["property_title"] == "Villa Carthage"
        assert data["meeting"]["requester_email"] == "jean.dupont@example.com"
        assert "registered email" in data["message"]
        assert len(notifier.sent_with(TemplateKind.NEW_REQUEST)) == 2

    async def test_contact_fields_in_body_are_ignored(self, client, client_headers, future):
        response = await create(
            client,
            client_headers,
            future(days=2),
            requester_name="Someone Else",
            requester_email="spoof@example.com",
        )

        assert response.status_code == 201
        assert response.json()["meeting"]["requester_name"] == "Jean Dupont"

    async def test_unauthenticated(self, client, future):
        response = await create(client, {}, future(days=2))

        assert response.status_code == 401
        assert response.json()["status"] == "error"

    async def test_invalid_token(self, client, future):
        response = await create(client, {"Authorization": "Bearer nope"}, future(days=2))
        assert response.status_code == 401

    async def test_missing_field(self, client, client_headers):
        response = await client.post(
            "/meetings", json={"property_id": "prop-1"}, headers=client_headers
        )

        assert response.status_code == 400
        assert response.json() == {
            "status": "error",
            "message": "Please provide all required fields",
            "field": "phone",
        }

    async def test_past_date(self, client, client_headers, future):
        response = await create(client, client_headers, future(hours=-1))

        assert response.status_code == 400
        assert response.json()["field"] == "scheduled_at"

    async def test_unknown_property(self, client, client_headers, future):
        response = await create(client, client_headers, future(days=1), property_id="ghost")
        assert response.status_code == 404

    async def test_conflict(self, client, client_headers, future):
        await create(client, client_headers, future(days=1))

        response = await create(client, client_headers, future(days=1, minutes=45))

        assert response.status_code == 409
        assert response.json()["message"] == "You already have a meeting scheduled around this time"


class TestMyMeetings:
    """GET /meetings/my-meetings"""

    async def test_lists_own_meetings_with_property(
        self, client, client_headers, other_headers, future
    ):
        await create(client, client_headers, future(days=1))
        await create(client, other_headers, future(days=1))

        response = await client.get("/meetings/my-meetings", headers=client_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["property_summary"]["title"] == "Villa Carthage"
        assert data[0]["property_summary"]["image"] == "https://cdn.example.com/villa-1.jpg"


class TestStatusUpdate:
    """PATCH /meetings/{id}/status"""

    async def test_accept(self, client, client_headers, admin_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.patch(
            f"/meetings/{meeting_id}/status",
            json={"status": "accepted", "admin_response": "See you then"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["meeting"]["status"] == "accepted"
        assert data["meeting"]["responded_at"] is not None
        assert data["notification_sent"] is True
        assert data["message"] == "Meeting accepted. Email sent to user."

    async def test_email_failure_still_succeeds(
        self, client, client_headers, admin_headers, future, notifier
    ):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]
        notifier.fail_all = True

        response = await client.patch(
            f"/meetings/{meeting_id}/status", json={"status": "rejected"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["notification_sent"] is False
        assert response.json()["message"] == "Meeting rejected. Email failed to send."

    async def test_pending_message(self, client, client_headers, admin_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.patch(
            f"/meetings/{meeting_id}/status", json={"status": "pending"}, headers=admin_headers
        )

        assert response.json()["message"] == "Meeting status updated to pending"

    async def test_non_admin_forbidden(self, client, client_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.patch(
            f"/meetings/{meeting_id}/status", json={"status": "accepted"}, headers=client_headers
        )

        assert response.status_code == 403

    async def test_invalid_status(self, client, client_headers, admin_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.patch(
            f"/meetings/{meeting_id}/status", json={"status": "archived"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["field"] == "status"

    async def test_missing_status_field(self, client, client_headers, admin_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.patch(
            f"/meetings/{meeting_id}/status", json={}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert response.json()["field"] == "status"

    async def test_unknown_meeting(self, client, admin_headers):
        response = await client.patch(
            "/meetings/missing/status", json={"status": "accepted"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestCancel:
    """DELETE /meetings/{id}"""

    async def test_owner_cancels(self, client, client_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.delete(f"/meetings/{meeting_id}", headers=client_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Meeting cancelled successfully"}

        again = await client.delete(f"/meetings/{meeting_id}", headers=client_headers)
        assert again.status_code == 400

    async def test_stranger_forbidden(self, client, client_headers, other_headers, future):
        created = await create(client, client_headers, future(days=2))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.delete(f"/meetings/{meeting_id}", headers=other_headers)

        assert response.status_code == 403


class TestReschedule:
    """PATCH /meetings/{id}/reschedule"""

    async def test_reschedule(self, client, client_headers, future, notifier):
        created = await create(client, client_headers, future(days=1))
        meeting_id = created.json()["meeting"]["id"]
        notifier.sent.clear()

        response = await client.patch(
            f"/meetings/{meeting_id}/reschedule",
            json={"scheduled_at": future(days=3)},
            headers=client_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["meeting"]["status"] == "pending"
        assert data["message"] == "Meeting rescheduled successfully. Waiting for admin approval."
        assert len(notifier.sent_with(TemplateKind.NEW_REQUEST)) == 2

    async def test_reschedule_missing_date(self, client, client_headers, future):
        created = await create(client, client_headers, future(days=1))
        meeting_id = created.json()["meeting"]["id"]

        response = await client.patch(
            f"/meetings/{meeting_id}/reschedule", json={}, headers=client_headers
        )

        assert response.status_code == 400


class TestAdminQueries:
    """GET /meetings/admin/all and /meetings/admin/stats"""

    async def test_list_all_with_filters(
        self, client, client_headers, other_headers, admin_headers, future
    ):
        await create(client, client_headers, future(days=1))
        await create(client, client_headers, future(days=2))
        await create(client, other_headers, future(days=1))

        response = await client.get(
            "/meetings/admin/all",
            params={"status": "pending", "search": "DUPONT", "limit": 1, "sortBy": "meetingDate",
                    "sortOrder": "asc"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["total_pages"] == 2
        assert data["page"] == 1
        assert len(data["items"]) == 1
        assert data["items"][0]["requester_name"] == "Jean Dupont"

    async def test_bad_sort_field(self, client, admin_headers):
        response = await client.get(
            "/meetings/admin/all", params={"sortBy": "password"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["field"] == "sort_by"

    async def test_limit_out_of_range(self, client, admin_headers):
        response = await client.get(
            "/meetings/admin/all", params={"limit": 500}, headers=admin_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert body["field"] == "limit"
        assert body["message"]

    async def test_requires_admin(self, client, client_headers):
        response = await client.get("/meetings/admin/all", headers=client_headers)
        assert response.status_code == 403

    async def test_stats(self, client, client_headers, admin_headers, future):
        await create(client, client_headers, future(days=1))

        response = await client.get("/meetings/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["pending"] == 1


async def test_upcoming_for_property_is_public(client, client_headers, admin_headers, future):
    created = await create(client, client_headers, future(days=1))
    meeting_id = created.json()["meeting"]["id"]
    await client.patch(
        f"/meetings/{meeting_id}/status", json={"status": "accepted"}, headers=admin_headers
    )

    response = await client.get("/meetings/property/prop-1")

    assert response.status_code == 200
    assert [m["id"] for m in response.json()] == [meeting_id]
    for slot in response.json():
        assert set(slot) == {"id", "property_id", "scheduled_at"}
