"""
Integration tests for Scores and Competitors API endpoints
"""

import pytest

from app.models.competitor import Competitor


def shots_payload(count, value=10, is_x=False):
    return [{"value": value, "is_x": is_x} for _ in range(count)]


class TestScoresEndpoints:
    """Test suite for /scores endpoints."""

    @pytest.mark.asyncio
    async def test_submit_score(self, client, services, sample_competition):
        score = services["score"]
        score.competition_repo.get_by_id.return_value = sample_competition
        score.competitor_repo.exists.return_value = True
        score.score_repo.create.side_effect = lambda card: card

        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(20, 10, True) + shots_payload(5, 9),
        })

        assert response.status_code == 201
        data = response.json()
        assert data["total_score"] == 245
        assert data["x_count"] == 20
        assert data["verification_status"] == "pending"
        assert data["competition_type"] == "indoor"

    @pytest.mark.asyncio
    async def test_submit_wrong_shot_count(self, client, services, sample_competition):
        score = services["score"]
        score.competition_repo.get_by_id.return_value = sample_competition
        score.competitor_repo.exists.return_value = True

        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(9),
        })

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "ShotCountMismatch"
        score.score_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_out_of_range(self, client, services, sample_competition):
        score = services["score"]
        score.competition_repo.get_by_id.return_value = sample_competition
        score.competitor_repo.exists.return_value = True

        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(24) + shots_payload(1, 11),
        })

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "ShotValueOutOfRange"

    @pytest.mark.asyncio
    async def test_submit_to_closed_competition(self, client, services, sample_competition):
        sample_competition.status = "completed"
        services["score"].competition_repo.get_by_id.return_value = sample_competition

        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(25),
        })

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_submit_unknown_competition(self, client, services):
        services["score"].competition_repo.get_by_id.return_value = None

        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "nope",
            "shots": shots_payload(25),
        })

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_verify_approve_refreshes_classification(self, client, services, recent):
        score = services["score"]
        classification = services["classification"]
        pending = recent("shooter1", 245, status="pending")
        approved = pending.model_copy(update={"verification_status": "approved"})
        score.score_repo.get_by_id.return_value = pending
        score.score_repo.set_verification.return_value = approved
        classification.competitor_repo.get_by_id.return_value = Competitor(id="shooter1", username="joe")
        classification.score_repo.get_approved_for_competitor.return_value = [approved]

        response = await client.put(f"/scores/{pending.id}/verify", json={"status": "approved"})

        assert response.status_code == 200
        assert response.json()["verification_status"] == "approved"
        args = classification.competitor_repo.set_classification.call_args.args
        assert args[:2] == ("shooter1", "Provisional Gold")

    @pytest.mark.asyncio
    async def test_verify_twice_conflicts(self, client, services, recent):
        approved = recent("shooter1", 245, status="approved")
        services["score"].score_repo.get_by_id.return_value = approved

        response = await client.put(f"/scores/{approved.id}/verify", json={"status": "rejected"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_verify_rejects_pending_status(self, client):
        response = await client.put("/scores/any/verify", json={"status": "pending"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_pending_list(self, client, services, recent):
        services["score"].score_repo.get_pending.return_value = [
            recent("shooter1", 240, status="pending"),
        ]

        response = await client.get("/scores/pending")

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_purge(self, client, services, recent):
        pending = recent("shooter1", 240, status="pending")
        services["score"].score_repo.get_by_id.return_value = pending

        response = await client.delete(f"/scores/{pending.id}")

        assert response.status_code == 204
        services["score"].score_repo.delete.assert_awaited_once_with(pending.id)

    @pytest.mark.asyncio
    async def test_purge_unknown(self, client, services):
        services["score"].score_repo.get_by_id.return_value = None

        response = await client.delete("/scores/missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_submit_boolean_shot_value(self, client, services, sample_competition):
        """`true` is not a shot value; it never becomes a 1-point shot."""
        score = services["score"]
        sample_competition.shots_per_target = 1
        score.competition_repo.get_by_id.return_value = sample_competition
        score.competitor_repo.exists.return_value = True

        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": [{"value": True}],
        })

        assert response.status_code == 422
        score.score_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_string_shot_value(self, client, services):
        response = await client.post("/scores", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": [{"value": "10", "is_x": "yes"}],
        })

        assert response.status_code == 422
        services["score"].score_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_submit(self, client, services, sample_competition):
        score = services["score"]
        classification = services["classification"]
        score.competition_repo.get_by_id.return_value = sample_competition
        score.competitor_repo.exists.return_value = True
        score.score_repo.create.side_effect = lambda card: card
        classification.competitor_repo.get_by_id.return_value = Competitor(id="shooter1", username="joe")
        classification.score_repo.get_approved_for_competitor.return_value = []

        response = await client.post("/scores/admin", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(25, 10, True),
            "submitted_by": "range_admin",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["verification_status"] == "approved"
        assert data["submitted_by"] == "range_admin"
        assert data["total_score"] == 250
        classification.competitor_repo.set_classification.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_admin_submit_requires_submitter(self, client):
        response = await client.post("/scores/admin", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(25),
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_admin_submit_validation_error(self, client, services, sample_competition):
        score = services["score"]
        score.competition_repo.get_by_id.return_value = sample_competition
        score.competitor_repo.exists.return_value = True

        response = await client.post("/scores/admin", json={
            "competitor_id": "shooter1",
            "competition_id": "comp1",
            "shots": shots_payload(24) + shots_payload(1, 8, True),
            "submitted_by": "range_admin",
        })

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "InvalidXFlag"

    @pytest.mark.asyncio
    async def test_competitor_history(self, client, services, recent):
        score = services["score"]
        score.competitor_repo.exists.return_value = True
        score.score_repo.get_by_competitor.return_value = [
            recent("shooter1", 240, status="pending", days_ago=1),
            recent("shooter1", 230, status="rejected", days_ago=5),
        ]

        response = await client.get("/scores/user/shooter1?limit=20")

        assert response.status_code == 200
        assert [c["verification_status"] for c in response.json()] == ["pending", "rejected"]
        score.score_repo.get_by_competitor.assert_awaited_once_with("shooter1", 20)

    @pytest.mark.asyncio
    async def test_competitor_history_unknown(self, client, services):
        services["score"].competitor_repo.exists.return_value = False

        response = await client.get("/scores/user/ghost")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_competition_history(self, client, services, recent, sample_competition):
        score = services["score"]
        score.competition_repo.get_by_id.return_value = sample_competition
        score.score_repo.get_by_competition.return_value = [
            recent("A", 240, competition_id="comp1"),
            recent("B", 235, competition_id="comp1", status="flagged"),
        ]

        response = await client.get("/scores/competition/comp1")

        assert response.status_code == 200
        assert [c["competitor_id"] for c in response.json()] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_competition_history_unknown(self, client, services):
        services["score"].competition_repo.get_by_id.return_value = None

        response = await client.get("/scores/competition/nope")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_approve_with_missing_competitor_record(self, client, services, recent):
        """Approval succeeds even when the classification cannot be recomputed."""
        score = services["score"]
        classification = services["classification"]
        pending = recent("ghost", 245, status="pending")
        score.score_repo.get_by_id.return_value = pending
        score.score_repo.set_verification.return_value = pending.model_copy(
            update={"verification_status": "approved"}
        )
        classification.competitor_repo.get_by_id.return_value = None

        response = await client.put(f"/scores/{pending.id}/verify", json={"status": "approved"})

        assert response.status_code == 200
        assert response.json()["verification_status"] == "approved"
        score.score_repo.set_verification.assert_awaited_once()
        classification.competitor_repo.set_classification.assert_not_called()


class TestCompetitorsEndpoints:
    """Test suite for /competitors endpoints."""

    @pytest.mark.asyncio
    async def test_get_classification(self, client, services, recent):
        classification = services["classification"]
        classification.competitor_repo.get_by_id.return_value = Competitor(id="shooter1", username="joe")
        classification.score_repo.get_approved_for_competitor.return_value = [
            recent("shooter1", total, 12, days_ago=idx + 1)
            for idx, total in enumerate([250, 249, 248, 247, 246, 245, 200])
        ]

        response = await client.get("/competitors/shooter1/classification")

        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == "Master"
        assert data["provisional"] is False
        assert data["average_score"] == 247.5
        classification.competitor_repo.set_classification.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_classification_unknown(self, client, services):
        services["classification"].competitor_repo.get_by_id.return_value = None

        response = await client.get("/competitors/ghost/classification")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_refresh_classification(self, client, services):
        classification = services["classification"]
        classification.competitor_repo.get_by_id.return_value = Competitor(id="shooter1", username="joe")
        classification.score_repo.get_approved_for_competitor.return_value = []

        response = await client.post("/competitors/shooter1/classification/refresh")

        assert response.status_code == 200
        assert response.json()["label"] == "Provisional Bronze"
        classification.competitor_repo.set_classification.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stats(self, client, services, recent):
        classification = services["classification"]
        classification.competitor_repo.get_by_id.return_value = Competitor(id="shooter1", username="joe")
        classification.score_repo.get_approved_for_competitor.return_value = []
        services["leaderboard"].score_repo.get_approved.return_value = [
            recent("other", 249),
            recent("shooter1", 240, 4, competition_id="c1"),
            recent("shooter1", 230, 2, competition_id="c2"),
        ]

        response = await client.get("/competitors/shooter1/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["rank"] == 2
        assert data["average_score"] == 235.0
        assert data["best_score"] == 240
        assert data["total_x_count"] == 6
        assert data["competitions_count"] == 2

    @pytest.mark.asyncio
    async def test_stats_without_cards(self, client, services):
        classification = services["classification"]
        classification.competitor_repo.get_by_id.return_value = Competitor(id="shooter1", username="joe")
        classification.score_repo.get_approved_for_competitor.return_value = []
        services["leaderboard"].score_repo.get_approved.return_value = []

        response = await client.get("/competitors/shooter1/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["rank"] is None
        assert data["classification"]["label"] == "Provisional Bronze"


class TestHealthEndpoint:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["database"] == "disconnected"
        assert data["tiers"][0] == "Grand Master"
        assert data["tiers"][-1] == "Bronze"
