"""
Tests for the HTTP API.
"""


def headers(player_id):
    return {"X-Player-Id": player_id}


def create_game(client, player_id="alice", **body):
    payload = {"name": "Lunch break", "min_players": 2, "max_players": 4, **body}
    response = client.post("/games", json=payload, headers=headers(player_id))
    assert response.status_code == 201
    return response.json()["id"]


def start_two_player_game(client):
    game_id = create_game(client)
    client.post(f"/games/{game_id}/join", headers=headers("bob"))
    client.post(f"/games/{game_id}/ready", headers=headers("bob"))
    response = client.post(f"/games/{game_id}/start", headers=headers("alice"))
    assert response.status_code == 200
    return game_id


class TestGameRoutes:
    """Tests for game lifecycle endpoints."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_create_and_get(self, client):
        game_id = create_game(client)

        response = client.get(f"/games/{game_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["creator_id"] == "alice"
        assert data["status"] == "Waiting"
        assert data["initial_card"] == {"color": "blue", "value": "0", "type": "number"}

    def test_create_requires_player_header(self, client):
        response = client.post("/games", json={"name": "x"})

        assert response.status_code == 422

    def test_create_rejects_bad_bounds(self, client):
        response = client.post(
            "/games",
            json={"name": "x", "min_players": 5, "max_players": 3},
            headers=headers("alice"),
        )

        assert response.status_code == 422

    def test_game_not_found(self, client):
        response = client.get("/games/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Game not found"}

    def test_join_and_ready(self, client):
        game_id = create_game(client)

        joined = client.post(f"/games/{game_id}/join", headers=headers("bob"))
        ready = client.post(f"/games/{game_id}/ready", headers=headers("bob"))

        assert joined.json()["currentPlayerCount"] == 2
        assert ready.json()["playersReadyCount"] == 2

    def test_join_twice_conflicts(self, client):
        game_id = create_game(client)

        response = client.post(f"/games/{game_id}/join", headers=headers("alice"))

        assert response.status_code == 409
        assert response.json()["message"] == "User is already in this game"

    def test_only_creator_starts(self, client):
        game_id = create_game(client)
        client.post(f"/games/{game_id}/join", headers=headers("bob"))

        response = client.post(f"/games/{game_id}/start", headers=headers("bob"))

        assert response.status_code == 403

    def test_status_and_players(self, client):
        game_id = start_two_player_game(client)

        status = client.get(f"/games/{game_id}/status").json()
        players = client.get(f"/games/{game_id}/players").json()

        assert status == {"game_id": game_id, "status": "Active"}
        assert [p["username"] for p in players["players"]] == ["Alice", "Bob"]

    def test_abandon(self, client):
        game_id = start_two_player_game(client)

        response = client.post(f"/games/{game_id}/abandon", headers=headers("bob"))

        assert response.json() == {"success": True, "message": "You left the game"}
        game = client.get(f"/games/{game_id}").json()
        assert game["status"] == "Ended"
        assert game["winner_id"] == "alice"


class TestTurnRoutes:
    """Tests for turn and play endpoints."""

    def test_current_player_and_advance(self, client):
        game_id = start_two_player_game(client)

        current = client.get(f"/games/{game_id}/current-player").json()
        advanced = client.post(f"/games/{game_id}/advance-turn").json()

        assert current == {"success": True, "currentPlayerId": "alice"}
        assert advanced == {"success": True, "currentPlayerId": "bob"}

    def test_play_card(self, client):
        game_id = start_two_player_game(client)

        response = client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "BLUE", "value": "5"}},
            headers=headers("alice"),
        )

        assert response.status_code == 200
        assert response.json()["nextPlayerId"] == "bob"

    def test_play_mismatch_uses_card_error_shape(self, client):
        game_id = start_two_player_game(client)

        response = client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "red", "value": "5"}},
            headers=headers("alice"),
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "The card does not match the color or value of the top card."
        }

    def test_play_wild_with_chosen_color(self, client):
        game_id = start_two_player_game(client)

        wild = client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "wild", "value": "wild"}, "chosen_color": "yellow"},
            headers=headers("alice"),
        )
        follow = client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "yellow", "value": "2"}},
            headers=headers("bob"),
        )

        assert wild.status_code == 200
        assert follow.status_code == 200
        assert client.get(f"/games/{game_id}").json()["current_color"] == "yellow"

    def test_play_wild_without_color(self, client):
        game_id = start_two_player_game(client)

        response = client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "wild", "value": "wild"}},
            headers=headers("alice"),
        )

        assert response.status_code == 400
        assert "missing color for Wild" in response.json()["error"]

    def test_play_invalid_card(self, client):
        game_id = start_two_player_game(client)

        response = client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "red", "value": "wild"}},
            headers=headers("alice"),
        )

        assert response.status_code == 422


class TestDiscardRoutes:
    """Tests for discard pile endpoints."""

    def test_discard_top_before_start(self, client):
        game_id = create_game(client)

        response = client.get(f"/games/{game_id}/discard-top")

        assert response.status_code == 412
        assert response.json() == {"error": "Game has not started yet"}

    def test_discard_top_after_play(self, client):
        game_id = start_two_player_game(client)
        client.post(
            f"/games/{game_id}/play",
            json={"card": {"color": "blue", "value": "draw2"}},
            headers=headers("alice"),
        )

        rich = client.get(f"/games/{game_id}/discard-top").json()
        simple = client.get(f"/games/{game_id}/discard-top/simple").json()
        recent = client.get(f"/games/{game_id}/discards", params={"limit": 1}).json()

        assert rich["current_top_card"]["value"] == "draw2"
        assert rich["current_top_card"]["played_at"]
        assert simple == {"game_ids": [game_id], "top_cards": ["Blue Draw Two"]}
        assert len(recent["recent_cards"]) == 1


class TestCardRoutes:

    def test_validate_card(self, client):
        valid = client.post("/cards/validate", json={
            "card": {"color": "wild", "value": "wild"},
            "top_card": {"color": "red", "value": "3"},
        })
        invalid = client.post("/cards/validate", json={
            "card": {"color": "green", "value": "4"},
            "top_card": {"color": "red", "value": "3"},
        })

        assert valid.json() == {"valid": True}
        assert invalid.status_code == 400
        assert "does not match" in invalid.json()["error"]


class TestUnexpectedErrors:

    def test_internal_error_is_hidden(self, client, service, monkeypatch):
        """Unclassified failures become a generic 500."""
        async def broken(game_id):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(service.game_repository, "find_by_id", broken)

        response = client.get("/games/g1")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}
