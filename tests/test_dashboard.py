"""Admin dashboard statistics tests."""

from datetime import datetime, timedelta, timezone

from httpx import AsyncClient

from tests.conftest import auth_header

STATS = "/api/admin/stats"


class TestDashboardStats:

    async def test_empty(self, client: AsyncClient, admin_token):
        res = await client.get(STATS, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json() == {
            "success": True,
            "stats": {
                "total": 0,
                "pending": 0,
                "inProgress": 0,
                "resolved": 0,
                "categoryBreakdown": {},
                "recentIssues": [],
            },
        }

    async def test_counts(self, client: AsyncClient, make_issue, citizen_user, other_citizen, admin_token):
        await make_issue(citizen_user, category="Roads", status="Pending")
        await make_issue(citizen_user, category="Roads", status="In-Progress")
        await make_issue(other_citizen, category="Parks", status="Resolved")
        await make_issue(other_citizen, category="Drainage", status="Resolved")

        stats = (await client.get(STATS, headers=auth_header(admin_token))).json()["stats"]
        assert stats["total"] == 4
        assert stats["pending"] == 1
        assert stats["inProgress"] == 1
        assert stats["resolved"] == 2
        assert stats["total"] == stats["pending"] + stats["inProgress"] + stats["resolved"]
        assert stats["categoryBreakdown"] == {"Drainage": 1, "Parks": 1, "Roads": 2}

    async def test_recent_issues_limited_to_ten(self, client: AsyncClient, make_issue, citizen_user, admin_token):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for n in range(12):
            await make_issue(citizen_user, title=f"Issue {n}", created_at=start + timedelta(hours=n))

        stats = (await client.get(STATS, headers=auth_header(admin_token))).json()["stats"]
        recent = stats["recentIssues"]
        assert len(recent) == 10
        assert [r["title"] for r in recent] == [f"Issue {n}" for n in range(11, 1, -1)]
        assert set(recent[0]) == {"id", "title", "category", "status", "createdAt", "reportedBy"}
        assert recent[0]["reportedBy"]["name"] == "Asha Citizen"

    async def test_citizen_forbidden(self, client: AsyncClient, citizen_token):
        res = await client.get(STATS, headers=auth_header(citizen_token))
        assert res.status_code == 403
