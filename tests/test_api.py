"""
End-to-end flows through the HTTP API: admin setup, judging and ranking.
"""
import pytest
from sqlalchemy import select

from hackjudge.models import Score

from conftest import PASSWORD, auth_headers


async def login(client, email: str) -> dict:
    response = await client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.mark.asyncio
async def test_judge_login_then_clamped_canvas_score(client, session_factory, judge):
    headers = await login(client, "judge.one@example.com")

    response = await client.post("/scores", json={"teamNumero": 1, "phase": "canvas", "canvasScore": 25}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    async with session_factory() as session:
        scores = (await session.execute(select(Score))).scalars().all()
    assert len(scores) == 1
    assert scores[0].canvas_score == 20


@pytest.mark.asyncio
async def test_snake_case_payload_is_accepted(client, judge):
    response = await client.post(
        "/scores",
        json={"team_numero": 1, "phase": "mvp", "mvp_score": 12},
        headers=auth_headers(judge)
    )
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, status_code, error", [
    ({"teamNumero": 1, "phase": "final"}, 400, "invalid_phase"),
    ({"phase": "canvas"}, 400, "missing_fields"),
    ({"teamNumero": 1, "phase": "canvas", "notes": "no score"}, 400, "missing_fields"),
    ({"teamNumero": 7, "phase": "canvas", "canvasScore": 3}, 403, "conflict_of_interest"),
    ({"teamNumero": 99, "phase": "canvas", "canvasScore": 3}, 404, "team_not_found"),
    ({"teamNumero": "abc", "phase": "canvas"}, 400, "missing_fields"),
])
async def test_score_errors(client, session_factory, judge, payload, status_code, error):
    response = await client.post("/scores", json=payload, headers=auth_headers(judge))
    assert response.status_code == status_code
    assert response.json()["error"] == error

    async with session_factory() as session:
        assert (await session.execute(select(Score))).scalars().all() == []


@pytest.mark.asyncio
async def test_duplicate_under_reject_policy(client, judge, restore_settings):
    restore_settings.score_resubmission_policy = "reject"
    payload = {"teamNumero": 1, "phase": "canvas", "canvasScore": 10}

    first = await client.post("/scores", json=payload, headers=auth_headers(judge))
    second = await client.post("/scores", json=payload, headers=auth_headers(judge))

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["error"] == "duplicate"


@pytest.mark.asyncio
async def test_my_scores(client, judge):
    await client.post("/scores", json={"teamNumero": 1, "phase": "canvas", "canvasScore": 14}, headers=auth_headers(judge))
    await client.post("/scores", json={"teamNumero": 3, "phase": "pitch", "impact": 60, "notes": "solid"}, headers=auth_headers(judge))

    response = await client.get("/scores/mine", headers=auth_headers(judge))
    assert response.status_code == 200
    scores = {(score["team_numero"], score["phase"]): score for score in response.json()}
    assert scores[(1, "canvas")]["canvas_score"] == 14
    assert scores[(3, "pitch")]["impact"] == 60
    assert scores[(3, "pitch")]["pitch_total"] == 60
    assert scores[(1, "canvas")]["pitch_total"] is None
    assert scores[(3, "pitch")]["notes"] == "solid"


@pytest.mark.asyncio
async def test_admin_setup_flow(client, admin):
    headers = auth_headers(admin)

    response = await client.post("/teams", json={"numero": 12, "name": "Rocket"}, headers=headers)
    assert response.status_code == 200

    response = await client.post("/users", json={
        "email": "New.Judge@Example.com",
        "password": PASSWORD,
        "role": "judge",
        "conflict_team_numbers": [12],
    }, headers=headers)
    assert response.status_code == 200
    assert response.json()["email"] == "new.judge@example.com"

    judge_headers = await login(client, "new.judge@example.com")
    response = await client.post("/scores", json={"teamNumero": 12, "phase": "canvas", "canvasScore": 5}, headers=judge_headers)
    assert response.json()["error"] == "conflict_of_interest"

    response = await client.put("/judges/new.judge@example.com/conflicts", json={"team_numbers": []}, headers=headers)
    assert response.status_code == 200
    assert response.json()["conflict_team_numbers"] == []

    response = await client.post("/scores", json={"teamNumero": 12, "phase": "canvas", "canvasScore": 5}, headers=judge_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_admin_endpoints_require_admin(client, judge):
    response = await client.post("/teams", json={"numero": 40, "name": "X"}, headers=auth_headers(judge))
    assert response.status_code == 403
    response = await client.get("/users", headers=auth_headers(judge))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_duplicate_email_via_api(client, admin, judge):
    response = await client.post("/users", json={
        "email": "judge.one@example.com", "password": PASSWORD, "role": "participant"
    }, headers=auth_headers(admin))
    assert response.status_code == 409
    assert response.json()["error"] == "email_taken"


@pytest.mark.asyncio
async def test_deactivate_via_api(client, admin, participant):
    response = await client.post(f"/users/{participant.id}/deactivate", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["is_active"] is False


@pytest.mark.asyncio
async def test_phase_window_admin(client, admin, judge):
    headers = auth_headers(admin)
    response = await client.put(
        "/phases/pitch/window",
        json={"starts_at": "2020-01-01T00:00:00Z", "ends_at": "2020-01-02T00:00:00Z"},
        headers=headers
    )
    assert response.status_code == 200
    assert response.json()["is_open"] is False

    response = await client.get("/phases", headers=auth_headers(judge))
    phases = {phase["phase"]: phase for phase in response.json()}
    assert phases["pitch"]["is_open"] is False
    assert phases["canvas"]["is_open"] is True

    response = await client.delete("/phases/pitch/window", headers=headers)
    assert response.json()["is_open"] is True

    response = await client.put("/phases/final/window", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_phase"


@pytest.mark.asyncio
async def test_ranking_orders_by_total(client, judge, other_judge):
    await client.post("/scores", json={"teamNumero": 1, "phase": "canvas", "canvasScore": 10}, headers=auth_headers(judge))
    await client.post("/scores", json={"teamNumero": 1, "phase": "canvas", "canvasScore": 20}, headers=auth_headers(other_judge))
    await client.post("/scores", json={"teamNumero": 3, "phase": "pitch", "impact": 50, "innovation": 40}, headers=auth_headers(judge))
    await client.post("/scores", json={"teamNumero": 3, "phase": "mvp", "mvpScore": 30}, headers=auth_headers(judge))

    response = await client.get("/ranking")
    assert response.status_code == 200
    standings = response.json()

    assert [standing["numero"] for standing in standings[:2]] == [3, 1]
    assert standings[0]["position"] == 1
    assert standings[0]["pitch_average"] == 90
    assert standings[0]["mvp_average"] == 30
    assert standings[0]["total"] == 120
    assert standings[1]["canvas_average"] == 15
    assert standings[1]["evaluations_count"] == 2
    # unscored teams are listed last with a zero total
    assert {standing["numero"] for standing in standings[2:]} == {5, 7}
    assert all(standing["total"] == 0 for standing in standings[2:])


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}
