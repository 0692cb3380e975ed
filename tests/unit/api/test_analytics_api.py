import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from planwise.api.main import app
from planwise.api.dependencies import get_clock, get_priority_calculator

client = TestClient(app)

pytestmark = pytest.mark.api


@pytest.fixture(autouse=True)
def fixed_clock(as_of):
    app.dependency_overrides[get_clock] = lambda: (lambda: as_of)
    yield
    app.dependency_overrides = {}


def item(item_id, **fields):
    data = {"id": item_id, "title": f"Story {item_id}", "priority": "medium", "story_points": 3}
    data.update(fields)
    return data


def history(*completed):
    return [
        {
            "id": f"hist_{i}",
            "capacity_points": 40,
            "completed_points": points,
            "start_date": f"2025-{1 + i:02d}-01",
            "end_date": f"2025-{1 + i:02d}-14",
            "status": "completed",
        }
        for i, points in enumerate(completed)
    ]


class TestScoreEndpoint:

    def test_scores_ranked_descending(self):
        response = client.post("/api/v1/analytics/score", json={"items": [
            item("a", priority="low", story_points=2, business_value=0, due_date="2026-03-05"),
            item("b", priority="critical", story_points=1),
        ]})

        assert response.status_code == 200
        assert response.json() == [
            {"item_id": "b", "score": 41.0, "suggested_priority": "medium"},
            {"item_id": "a", "score": 27.0, "suggested_priority": "low"},
        ]

    def test_as_of_overrides_clock(self):
        response = client.post("/api/v1/analytics/score", json={
            "items": [item("a", priority="low", story_points=2, due_date="2026-03-05")],
            "as_of": "2026-01-01T00:00:00Z",
        })

        # Two months out, no urgency bonus
        assert response.json()[0]["score"] == 12.0

    def test_self_dependency_rejected(self):
        response = client.post("/api/v1/analytics/score", json={
            "items": [item("a", dependencies=["a"])],
        })
        assert response.status_code == 422

    def test_duplicate_ids_rejected(self):
        response = client.post("/api/v1/analytics/score", json={"items": [item("a"), item("a")]})

        assert response.status_code == 422
        assert "Duplicate work item id: a" in response.text

    def test_invalid_story_points_rejected(self):
        response = client.post("/api/v1/analytics/score", json={"items": [item("a", story_points=0)]})
        assert response.status_code == 422

    def test_analyzer_failure_returns_500(self):
        failing = MagicMock()
        failing.rank_items.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_priority_calculator] = lambda: failing

        response = client.post("/api/v1/analytics/score", json={"items": [item("a")]})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to compute score: boom"


class TestSuggestionsEndpoint:

    def test_suggestions(self):
        response = client.post("/api/v1/analytics/suggestions", json={"items": [
            item("keep", priority="low", story_points=3),
            item("demote", priority="critical", story_points=1),
        ]})

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["item_id"] == "demote"
        assert body[0]["current_priority"] == "critical"
        assert body[0]["suggested_priority"] == "medium"
        assert body[0]["confidence"] == "medium"


class TestConflictsEndpoint:

    def test_conflict_report(self):
        response = client.post("/api/v1/analytics/conflicts", json={"items": [
            item("a", priority="high", dependencies=["b"]),
            item("b", priority="low", due_date="2026-03-04"),
        ]})

        assert response.status_code == 200
        body = response.json()
        assert body["total_conflicts"] == 2
        assert body["by_type"] == {"dependency": 1, "deadline": 1}
        assert body["by_severity"] == {"high": 2}
        assert body["conflicts"][0] == {
            "item_id": "a",
            "conflict_type": "dependency",
            "severity": "high",
            "description": 'Story has higher priority than its dependency "Story b"',
            "related_item_id": "b",
        }
        assert body["conflicts"][1]["description"] == (
            "Story has low priority but urgent deadline (2 days)"
        )

    def test_no_conflicts(self):
        response = client.post("/api/v1/analytics/conflicts", json={"items": []})

        assert response.status_code == 200
        assert response.json() == {
            "conflicts": [],
            "total_conflicts": 0,
            "by_type": {},
            "by_severity": {},
        }


class TestCapacityEndpoints:

    def test_capacity(self):
        response = client.post("/api/v1/analytics/capacity", json={
            "sprint": {
                "id": "s1",
                "capacity_points": 40,
                "assigned_stories": [item("x", story_points=30)],
            },
            "candidate_items": [item("c1", story_points=10), item("c2", story_points=5)],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["new_total_points"] == 45
        assert body["utilization_rate"] == 112.5
        assert body["is_over_capacity"] is True
        assert body["remaining_capacity"] == -5
        assert body["utilization_band"] == "over"
        assert len(body["warnings"]) == 1

    def test_team_capacity(self):
        response = client.post("/api/v1/analytics/team-capacity", json={
            "members": [
                {"id": "m1", "capacity_points": 20, "points_assigned": 15},
                {"id": "m2", "capacity_points": 20, "availability": 50, "points_assigned": 12},
            ],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["adjusted_capacity"] == 30
        assert body["utilization_rate"] == 90.0
        assert body["risk_level"] == "medium"

    def test_duplicate_members_rejected(self):
        response = client.post("/api/v1/analytics/team-capacity", json={
            "members": [{"id": "m1"}, {"id": "m1"}],
        })
        assert response.status_code == 422


class TestVelocityEndpoint:

    def test_velocity(self):
        response = client.post("/api/v1/analytics/velocity", json={
            "sprints": history(18, 22, 25, 19, 28, 24, 23),
        })

        assert response.status_code == 200
        body = response.json()
        assert body["sprint_count"] == 7
        assert body["average_velocity"] == 22.71
        assert body["median_velocity"] == 23
        assert body["velocity_range"] == {"min": 18, "max": 28}
        assert body["trend"] == "improving"
        assert body["recommended_capacity"] == 19

    def test_empty_history(self):
        response = client.post("/api/v1/analytics/velocity", json={"sprints": []})

        assert response.status_code == 200
        assert response.json()["trend"] == "stable"
        assert response.json()["sprint_count"] == 0

    def test_end_before_start_rejected(self):
        response = client.post("/api/v1/analytics/velocity", json={
            "sprints": history(10, 20),
            "start": "2025-10-01",
            "end": "2025-09-01",
        })
        assert response.status_code == 422
        assert response.json()["detail"] == "end must not be before start"

    def test_sprint_ending_before_it_starts_rejected(self):
        sprint = history(10)[0]
        sprint["end_date"] = "2024-12-01"
        response = client.post("/api/v1/analytics/velocity", json={"sprints": [sprint]})
        assert response.status_code == 422


class TestHealth:

    def test_liveness(self):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readiness(self):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert "version" in response.json()
