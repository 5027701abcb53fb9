"""Tests for the shared roll log HTTP routes."""

from __future__ import annotations

from charsheet.rolls import roll_damage


def _payload(**overrides) -> dict:
    data = roll_damage("Longsword", "1d8+3").share("Vex").model_dump(mode="json", by_alias=True)
    data.update(overrides)
    return data


async def test_empty_log(client):
    response = await client.get("/api/rolls")
    assert response.status_code == 200
    assert response.json() == {"rolls": []}


async def test_submit_then_list(client, store):
    payload = _payload()
    response = await client.post("/api/rolls", json=payload)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    rolls = (await client.get("/api/rolls")).json()["rolls"]
    assert len(rolls) == 1
    assert rolls[0]["id"] == payload["id"]
    assert rolls[0]["characterName"] == "Vex"
    assert rolls[0]["type"] == "damage"
    assert rolls[0]["total"] == payload["total"]
    assert len(await store.query()) == 1


async def test_newest_first(client):
    await client.post("/api/rolls", json=_payload(id="first", timestamp="2024-06-01T18:00:00Z"))
    await client.post("/api/rolls", json=_payload(id="second", timestamp="2024-06-01T18:00:05Z"))
    rolls = (await client.get("/api/rolls")).json()["rolls"]
    assert [r["id"] for r in rolls] == ["second", "first"]


async def test_since_filter(client):
    await client.post("/api/rolls", json=_payload(id="old", timestamp="2024-06-01T18:00:00Z"))
    await client.post("/api/rolls", json=_payload(id="new", timestamp="2024-06-01T18:00:10Z"))
    response = await client.get("/api/rolls", params={"since": "2024-06-01T18:00:00Z"})
    assert [r["id"] for r in response.json()["rolls"]] == ["new"]


async def test_invalid_since(client):
    response = await client.get("/api/rolls", params={"since": "yesterday-ish"})
    assert response.status_code == 422


async def test_missing_character_name_defaults(client):
    payload = _payload()
    del payload["characterName"]
    await client.post("/api/rolls", json=payload)
    rolls = (await client.get("/api/rolls")).json()["rolls"]
    assert rolls[0]["characterName"] == "Unknown"


async def test_rejects_missing_fields(client, store):
    for field in ("id", "timestamp", "total"):
        payload = _payload()
        del payload[field]
        response = await client.post("/api/rolls", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid roll data"}
    assert await store.query() == []


async def test_zero_total_is_accepted(client):
    response = await client.post("/api/rolls", json=_payload(total=0))
    assert response.status_code == 200


async def test_rejects_unknown_roll_type(client, store):
    response = await client.post("/api/rolls", json=_payload(type="initiative"))
    assert response.status_code == 400
    assert await store.query() == []


async def test_cors_preflight(client):
    response = await client.options(
        "/api/rolls",
        headers={
            "Origin": "https://vtt.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
