"""HTTP tests for the /api routes and health endpoints."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from draftroom.errors import StoreError
from draftroom.web.api import create_app


def assert_error(response, status, code):
    assert response.status_code == status
    body = response.json()
    assert body["error"]["code"] == code
    assert isinstance(body["error"]["message"], str)
    return body["error"]


class TestHealthEndpoints:
    """Test health, readiness and liveness endpoints."""

    def test_health(self, client):
        """Test the health payload."""
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["service"] == "draftroom-api"

    def test_readiness_ok(self, client):
        """Test readiness answers 200 when the DB responds."""
        assert client.get("/readiness").status_code == 200

    def test_readiness_db_down(self, client, storage):
        """Test readiness answers 503 on a store failure."""
        with patch.object(storage, "ping", side_effect=StoreError("Failed to ping the database")):
            assert client.get("/readiness").status_code == 503

    def test_metrics(self, client):
        """Test uptime metrics are exposed."""
        body = client.get("/metrics").json()

        assert body["uptime_seconds"] >= 0

    def test_liveness(self, client):
        """Test liveness always answers 200."""
        assert client.get("/liveness").text == "Alive"


class TestChampionRoutes:
    """Test champion and evaluation endpoints."""

    def test_list_with_null_evaluation(self, client, champions):
        """Test camelCase fields and null evaluation."""
        body = client.get("/api/champions").json()

        assert [c["id"] for c in body] == ["Ahri", "Gnar", "Thresh"]
        assert body[0]["imageUrl"].endswith("Ahri.png")
        assert body[0]["evaluation"] is None

    def test_get_unknown(self, client, champions):
        """Test 404 payload for an unknown champion."""
        error = assert_error(client.get("/api/champions/Nobody"), 404, "NOT_FOUND")

        assert error["details"]["id"] == "Nobody"

    def test_update_roles(self, client, champions):
        """Test roles equal exactly the submitted set."""
        response = client.put("/api/champions/Gnar/roles", json={"roles": ["TOP", "JGL"]})

        assert response.status_code == 200
        assert response.json()["roles"] == ["TOP", "JGL"]

    def test_invalid_role_rejected(self, client, champions):
        """Test BOT is refused and roles stay unchanged."""
        error = assert_error(
            client.put("/api/champions/Gnar/roles", json={"roles": ["BOT"]}), 400, "VALIDATION_ERROR",
        )

        assert error["details"]["fields"][0]["field"] == "roles"
        assert client.get("/api/champions/Gnar").json()["roles"] == ["TOP"]

    def test_partial_evaluations_merge(self, client, champions):
        """Test engage then split keeps both, others stay at 0."""
        client.post("/api/champions/evaluate", json={"championId": "Ahri", "engage": 2})
        response = client.post("/api/champions/evaluate", json={"championId": "Ahri", "split": 3})

        evaluation = response.json()
        assert evaluation["engage"] == 2
        assert evaluation["split"] == 3
        assert evaluation["prioLane"] == 0
        assert client.get("/api/champions/Ahri").json()["evaluation"]["split"] == 3

    def test_evaluation_out_of_range(self, client, champions):
        """Test a rating of 4 is a validation error."""
        error = assert_error(
            client.post("/api/champions/evaluate", json={"championId": "Ahri", "engage": 4}),
            400, "VALIDATION_ERROR",
        )

        assert error["details"]["fields"][0]["field"] == "engage"

    def test_evaluation_missing_champion_id(self, client, champions):
        """Test championId is required."""
        assert_error(client.post("/api/champions/evaluate", json={"engage": 1}), 400, "VALIDATION_ERROR")

    def test_evaluation_unknown_champion(self, client, champions):
        """Test rating an unknown champion is 404."""
        assert_error(
            client.post("/api/champions/evaluate", json={"championId": "Nobody", "engage": 1}),
            404, "NOT_FOUND",
        )


class TestDraftRoutes:
    """Test draft and variant endpoints."""

    def test_create_and_list_details(self, client, champions):
        """Test slots resolve to champions; stale ids become null."""
        created = client.post("/api/drafts", json={
            "name": "Poke",
            "teamMidChampionId": "Ahri",
            "enemySupChampionId": "Removed",
            "teamBans": ["Zed"],
        }).json()
        client.post(f"/api/drafts/{created['id']}/variants", json={"name": "Flex", "midChampionId": "Gnar"})

        [draft] = client.get("/api/drafts").json()

        assert draft["teamMidChampion"]["name"] == "Ahri"
        assert draft["enemySupChampionId"] == "Removed"
        assert draft["enemySupChampion"] is None
        assert draft["teamBans"] == ["Zed"]
        assert draft["variants"][0]["name"] == "Flex"

    def test_blank_name_rejected(self, client):
        """Test an empty draft name is a validation error."""
        assert_error(client.post("/api/drafts", json={"name": "  "}), 400, "VALIDATION_ERROR")

    def test_update_unknown(self, client):
        """Test updating an unknown draft is 404."""
        assert_error(client.put("/api/drafts/missing", json={"name": "x"}), 404, "NOT_FOUND")

    def test_update_null_bans_rejected(self, client):
        """Test explicit null on a NOT NULL field is refused."""
        draft = client.post("/api/drafts", json={"name": "A"}).json()

        assert_error(client.put(f"/api/drafts/{draft['id']}", json={"teamBans": None}), 400, "VALIDATION_ERROR")

    def test_delete_cascades(self, client):
        """Test deleting a draft removes its variants."""
        draft = client.post("/api/drafts", json={"name": "A"}).json()
        variant = client.post(f"/api/drafts/{draft['id']}/variants", json={"name": "v"}).json()

        assert client.delete(f"/api/drafts/{draft['id']}").json() == {"success": True}
        assert_error(client.delete(f"/api/variants/{variant['id']}"), 404, "NOT_FOUND")


class TestScrimRoutes:
    """Test scrim endpoints and the statistics report."""

    def post_scrim(self, client, **fields):
        body = {"opponent": "T1 Academy", "isWin": True, "score": "2-1"}
        body.update(fields)
        response = client.post("/api/scrims", json=body)
        assert response.status_code == 200, response.text
        return response.json()

    def test_create_camel_case_json(self, client):
        """Test nested drafts round-trip in camelCase."""
        scrim = self.post_scrim(
            client,
            date="2026-10-01T18:00:00Z",
            numberOfGames=2,
            compositions=[{"top": "Gnar", "mid": "Ahri"}],
            drafts=[{"gameNumber": 1, "draftId": "D1"}],
        )

        assert scrim["drafts"] == [{"gameNumber": 1, "draftId": "D1"}]
        assert scrim["compositions"] == [{"top": "Gnar", "mid": "Ahri"}]
        assert scrim["comments"] == ""
        assert scrim["numberOfGames"] == 2

    def test_is_win_required(self, client):
        """Test isWin is mandatory."""
        error = assert_error(
            client.post("/api/scrims", json={"opponent": "X", "score": "1-0"}), 400, "VALIDATION_ERROR",
        )

        assert "isWin" in [f["field"] for f in error["details"]["fields"]]

    def test_update_and_delete(self, client):
        """Test partial update then delete."""
        scrim = self.post_scrim(client)

        updated = client.put(f"/api/scrims/{scrim['id']}", json={"isWin": False, "comments": "tilted"}).json()
        assert updated["isWin"] is False
        assert updated["opponent"] == "T1 Academy"

        assert client.delete(f"/api/scrims/{scrim['id']}").json() == {"success": True}
        assert client.get("/api/scrims").json() == []

    def test_update_unknown(self, client):
        """Test updating an unknown scrim is 404."""
        assert_error(client.put("/api/scrims/missing", json={"score": "0-1"}), 404, "NOT_FOUND")

    def test_statistics(self, client):
        """Test winrate and per-draft performance."""
        self.post_scrim(client, date="2026-10-01T10:00:00Z", drafts=[{"gameNumber": 1, "draftId": "D1"}])
        self.post_scrim(client, isWin=False, date="2026-10-02T10:00:00Z",
                        drafts=[{"gameNumber": 1, "draftId": "D1"}])
        client.post("/api/drafts", json={"name": "A", "teamTopChampionId": "Ahri"})
        client.post("/api/drafts", json={"name": "B", "teamTopChampionId": "Ahri", "enemyTopChampionId": "Gnar"})

        report = client.get("/api/scrims/statistics").json()

        assert report["totalScrims"] == 2
        assert report["winrate"] == 50
        assert report["draftPerformance"] == [
            {"draftId": "D1", "wins": 1, "losses": 1, "total": 2, "winrate": 50},
        ]
        assert report["topChampions"][0] == {"championId": "Ahri", "count": 2}
        assert [d["date"] for d in report["performanceOverTime"]] == ["2026-10-01", "2026-10-02"]

    def test_statistics_empty(self, client):
        """Test the report on an empty store."""
        report = client.get("/api/scrims/statistics").json()

        assert report["totalScrims"] == 0
        assert report["winrate"] == 0

    def test_statistics_idempotent(self, client):
        """Test two calls with no write in between are identical."""
        self.post_scrim(client, drafts=[{"gameNumber": 1, "draftId": "D9"}])

        assert client.get("/api/scrims/statistics").json() == client.get("/api/scrims/statistics").json()

    def test_dates_carry_utc_offset(self, client):
        """Test scrim dates read back from the store keep their UTC offset."""
        scrim = self.post_scrim(client, date="2026-10-01T12:00:00+02:00")

        assert scrim["date"] in ("2026-10-01T10:00:00Z", "2026-10-01T10:00:00+00:00")
        listed = client.get("/api/scrims").json()[0]
        assert listed["date"] == scrim["date"]

    def test_statistics_single_snapshot(self, client, storage):
        """Test the report reads scrims and drafts through one snapshot."""
        self.post_scrim(client, drafts=[{"gameNumber": 1, "draftId": "D1"}])

        with patch.object(storage, "statistics_snapshot", wraps=storage.statistics_snapshot) as mock_snapshot, \
             patch.object(storage, "get_scrim_list") as mock_scrims:
            report = client.get("/api/scrims/statistics").json()

        mock_snapshot.assert_called_once_with()
        mock_scrims.assert_not_called()
        assert report["totalScrims"] == 1


class TestRosterRoutes:
    """Test players and availability endpoints."""

    def test_availability_upsert_single_row(self, client):
        """Test the same (player, day) twice leaves one record."""
        player = client.post("/api/players", json={"name": "Faker", "role": "MID"}).json()
        payload = {"playerId": player["id"], "dayOfWeek": 3, "isAvailable": True}

        client.post("/api/availability", json=payload)
        client.post("/api/availability", json=payload)

        records = client.get("/api/availability", params={"playerId": player["id"]}).json()
        assert len(records) == 1
        assert records[0]["isAvailable"] is True

    def test_day_out_of_range(self, client):
        """Test dayOfWeek 7 is a validation error."""
        player = client.post("/api/players", json={"name": "Faker", "role": "MID"}).json()

        assert_error(
            client.post("/api/availability", json={"playerId": player["id"], "dayOfWeek": 7}),
            400, "VALIDATION_ERROR",
        )

    def test_delete_player(self, client):
        """Test deleting then deleting again."""
        player = client.post("/api/players", json={"name": "Keria", "role": "SUP"}).json()

        assert client.delete(f"/api/players/{player['id']}").json() == {"success": True}
        assert_error(client.delete(f"/api/players/{player['id']}"), 404, "NOT_FOUND")

    def test_duplicate_name_is_store_error(self, client):
        """Test a constraint violation returns 500 without diagnostics."""
        client.post("/api/players", json={"name": "Zeus", "role": "TOP"})

        error = assert_error(client.post("/api/players", json={"name": "Zeus", "role": "TOP"}), 500, "STORE_ERROR")

        assert "UNIQUE" not in error["message"]
        assert "sqlite" not in error["message"].lower()


class TestSynergyRoutes:
    """Test synergy endpoints."""

    def test_rating_five_rejected(self, client, champions):
        """Test rating 5 is rejected, never clamped."""
        error = assert_error(
            client.post("/api/synergies", json={
                "champion1Id": "Ahri", "champion2Id": "Gnar", "synergyType": "positive", "rating": 5,
            }),
            400, "VALIDATION_ERROR",
        )

        assert error["details"]["fields"][0]["field"] == "rating"
        assert client.get("/api/synergies").json() == []

    def test_same_champion_twice(self, client, champions):
        """Test a champion cannot synergize with itself."""
        assert_error(
            client.post("/api/synergies", json={
                "champion1Id": "Ahri", "champion2Id": "Ahri", "synergyType": "positive",
            }),
            400, "VALIDATION_ERROR",
        )

    def test_filter_by_champion(self, client, champions):
        """Test the championId filter matches both sides."""
        client.post("/api/synergies", json={"champion1Id": "Ahri", "champion2Id": "Gnar", "synergyType": "positive", "rating": 3})
        client.post("/api/synergies", json={"champion1Id": "Thresh", "champion2Id": "Ahri", "synergyType": "negative"})
        client.post("/api/synergies", json={"champion1Id": "Gnar", "champion2Id": "Thresh", "synergyType": "positive"})

        assert len(client.get("/api/synergies", params={"championId": "Ahri"}).json()) == 2

    def test_delete(self, client, champions):
        """Test deleting a synergy."""
        synergy = client.post("/api/synergies", json={
            "champion1Id": "Ahri", "champion2Id": "Gnar", "synergyType": "positive",
        }).json()

        assert client.delete(f"/api/synergies/{synergy['id']}").json() == {"success": True}


class TestPatchNoteRoutes:
    """Test patch note endpoints."""

    def test_create_and_filter(self, client):
        """Test category filter."""
        client.post("/api/patchnotes", json={"version": "15.1", "title": "Ahri", "content": "buff", "category": "champion"})
        client.post("/api/patchnotes", json={"version": "15.1", "title": "Boots", "content": "nerf", "category": "item"})

        notes = client.get("/api/patchnotes", params={"category": "item"}).json()

        assert [n["title"] for n in notes] == ["Boots"]
        assert notes[0]["createdAt"].endswith(("Z", "+00:00"))

    @pytest.mark.parametrize("category", ["balance", ""])
    def test_invalid_category(self, client, category):
        """Test unknown categories are refused."""
        assert_error(
            client.post("/api/patchnotes", json={"version": "15.1", "title": "t", "content": "c", "category": category}),
            400, "VALIDATION_ERROR",
        )


class TestUnexpectedErrors:
    """Test the catch-all error handler."""

    def test_unexpected_exception_is_json_500(self, storage):
        """Test a bug in a route answers the JSON error envelope without leaking details."""
        app = create_app(storage)

        with TestClient(app, raise_server_exceptions=False) as client, \
             patch.object(storage, "get_player_list", side_effect=RuntimeError("boom: secret path")):
            response = client.get("/api/players")

        error = assert_error(response, 500, "INTERNAL_ERROR")
        assert error["message"] == "Internal server error"
        assert "secret" not in response.text
