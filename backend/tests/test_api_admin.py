"""
Tests for Admin API endpoints (sweeps, dashboard, scheduler status).
"""
import pytest
from datetime import date
from decimal import Decimal
from httpx import AsyncClient

from conftest import MEETING_DATE, seoul
from clubdesk.models.member import MemberStatus
from clubdesk.services import votes


class TestSweepEndpoints:

    @pytest.mark.asyncio
    async def test_vote_deadline_sweep(
        self, client: AsyncClient, admin_headers: dict, clock, db_session, test_member, test_location
    ):
        vote = await votes.create_vote(
            db_session, "Sunday", MEETING_DATE, seoul(2026, 3, 11, 19, 30), location_id=test_location.id
        )
        clock.set(seoul(2026, 3, 11, 20, 0))

        response = await client.post("/api/v1/admin/sweeps/vote-deadlines", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["closed_votes"] == 1
        # the admin and alice both stayed silent
        assert data["non_voters"] == {vote.id: 2}

        response = await client.post("/api/v1/admin/sweeps/vote-deadlines", headers=admin_headers)
        assert response.json() == {"closed_votes": 0, "non_voters": {}}

    @pytest.mark.asyncio
    async def test_warning_reset(self, client: AsyncClient, admin_headers: dict, test_member):
        await client.post(
            "/api/v1/attendance/warnings",
            json={"member_id": test_member.id, "reason": "Noise"},
            headers=admin_headers
        )

        response = await client.post("/api/v1/admin/sweeps/warning-reset", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"resolved": 1}

    @pytest.mark.asyncio
    async def test_presenter_sweep_without_presenters(self, client: AsyncClient, admin_headers: dict):
        response = await client.post("/api/v1/admin/sweeps/presenter-deadlines", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"charged": []}

    @pytest.mark.asyncio
    async def test_members_cannot_sweep(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/admin/sweeps/warning-reset", headers=auth_headers)
        assert response.status_code == 403


class TestDashboard:

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, admin_headers: dict, make_member, test_member):
        await make_member(status=MemberStatus.SUSPENDED)
        last_sunday = date(2026, 3, 8)
        for status in ("PRESENT", "ABSENT"):
            member = await make_member()
            await client.post(
                "/api/v1/attendance/records",
                json={"member_id": member.id, "meeting_date": last_sunday.isoformat(), "status": status},
                headers=admin_headers
            )

        response = await client.get("/api/v1/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["active_members"] == 4
        assert data["suspended_members"] == 1
        assert Decimal(data["weekly_attendance_rate"]) == Decimal("50.00")
        assert data["active_votes"] == 0
        assert data["open_warnings"] == 1  # room fee pushed the present member low

    @pytest.mark.asyncio
    async def test_scheduler_status_when_disabled(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/admin/scheduler", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"running": False, "jobs": [], "last_runs": {}}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200
