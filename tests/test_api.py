# tests/test_api.py
from datetime import timedelta

from fastapi.testclient import TestClient

from promptiq.errors import ProviderQuotaExceeded
from promptiq.models import SharedLink, User, utcnow


def _generate(client, **overrides):
    body = {"input": "launch a podcast", "framework": "star", "userId": "user-1"}
    body.update(overrides)
    return client.post("/api/generate", json=body)


def test_health(client):
    assert client.get("/").text == "promptiq OK"
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/version").json() == {"version": "0.1.0"}


def test_lifespan_opens_and_closes_llm(app, fake_llm):
    with TestClient(app):
        assert fake_llm.initialised
    assert fake_llm.closed


class TestGenerate:
    def test_success(self, client, api_user, fake_llm):
        r = _generate(client)
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["output"] == fake_llm.text
        assert data["qualityScore"]["total"] == 10.0
        assert set(data["qualityScore"]) == {
            "structure", "clarity", "examples", "specificity", "total", "suggestions",
        }
        assert data["promptId"]

        usage = client.get("/api/user/usage", headers={"X-User-Id": "user-1"}).json()
        assert usage["generations_used"] == 1
        assert usage["remaining"] == 29

    def test_refine(self, client, api_user):
        first = _generate(client).json()
        r = _generate(
            client,
            mode="refine",
            input="make it shorter",
            originalPrompt=first["output"],
            parentId=first["promptId"],
        )
        assert r.status_code == 200

        prompts = client.get("/api/prompts", params={"userId": "user-1"}).json()["prompts"]
        refined = next(p for p in prompts if p["id"] == r.json()["promptId"])
        assert refined["version"] == 2
        assert refined["parent_id"] == first["promptId"]

    def test_refine_requires_original(self, client, api_user, fake_llm):
        r = _generate(client, mode="refine")
        assert r.status_code == 400
        assert r.json()["error"] == "missing_fields"
        assert fake_llm.calls == []

    def test_missing_fields(self, client, api_user):
        r = client.post("/api/generate", json={"framework": "star", "userId": "user-1"})
        assert r.status_code == 400
        assert r.json()["error"] == "missing_fields"

    def test_blank_input(self, client, api_user):
        assert _generate(client, input="   ").status_code == 400

    def test_input_too_long(self, client, api_user):
        assert _generate(client, input="x" * 2001).status_code == 400

    def test_unknown_framework(self, client, api_user):
        assert _generate(client, framework="kanban").status_code == 400

    def test_unknown_user(self, client):
        r = _generate(client, userId="ghost")
        assert r.status_code == 404
        assert r.json()["error"] == "user_not_found"

    def test_limit_reached(self, client, api_user, database):
        with database.session() as s:
            s.get(User, "user-1").generations_used = 30
            s.commit()

        r = _generate(client)
        assert r.status_code == 403
        assert r.json() == {
            "error": "generation_limit_reached",
            "message": "Generation limit reached. Please upgrade your plan.",
        }

    def test_provider_quota(self, client, api_user, fake_llm):
        fake_llm.error = ProviderQuotaExceeded()
        r = _generate(client)
        assert r.status_code == 429
        body = r.json()
        assert body["error"] == "quota_exceeded"
        assert "incredible demand" in body["message"]

        usage = client.get("/api/user/usage", headers={"X-User-Id": "user-1"}).json()
        assert usage["generations_used"] == 0

    def test_empty_output(self, client, api_user, fake_llm):
        fake_llm.text = "   "
        r = _generate(client)
        assert r.status_code == 502
        assert r.json()["error"] == "empty_generation"


def test_score_endpoint(client):
    r = client.post("/api/score", json={"text": ""})
    assert r.status_code == 200
    assert r.json()["total"] == 2.0
    assert len(r.json()["suggestions"]) == 3


def test_catalogues(client):
    frameworks = client.get("/api/frameworks").json()["frameworks"]
    assert [f["id"] for f in frameworks] == ["chain-of-thought", "rice", "creative-brief", "star", "socratic", "custom"]

    plans = {p["id"]: p for p in client.get("/api/plans").json()["plans"]}
    assert (plans["spark"]["limit"], plans["spark"]["price"]) == (30, 0)
    assert (plans["architect"]["limit"], plans["architect"]["price"]) == (500, 299)
    assert (plans["studio"]["limit"], plans["studio"]["price"]) == (2500, 999)


class TestUsers:
    def test_profile(self, client, api_user):
        assert api_user["plan"] == "spark"
        assert api_user["plan_name"] == "Spark"
        assert api_user["generations_limit"] == 30
        assert api_user["payment_history"] == []

        r = client.patch("/api/users/user-1", json={"name": "Ada Lovelace"})
        assert r.json()["user"]["name"] == "Ada Lovelace"

        data = client.get("/api/users/user-1").json()
        assert data["user"]["name"] == "Ada Lovelace"
        assert data["usage"]["remaining"] == 30

    def test_invalid_email(self, client):
        r = client.post("/api/users", json={"uid": "u", "email": "not-an-email"})
        assert r.status_code == 400

    def test_unknown(self, client):
        assert client.get("/api/users/ghost").status_code == 404

    def test_usage_requires_header(self, client):
        r = client.get("/api/user/usage")
        assert r.status_code == 400
        assert r.json()["error"] == "missing_fields"


class TestPrompts:
    def test_list_and_delete(self, client, api_user):
        ids = [_generate(client).json()["promptId"] for _ in range(3)]

        listed = client.get("/api/prompts", params={"userId": "user-1", "limit": 2}).json()["prompts"]
        assert len(listed) == 2
        assert {p["id"] for p in listed} <= set(ids)

        r = client.request("DELETE", "/api/prompts", json={"promptId": ids[0], "userId": "user-1"})
        assert r.json() == {"success": True}
        remaining = client.get("/api/prompts", params={"userId": "user-1"}).json()["prompts"]
        assert ids[0] not in {p["id"] for p in remaining}

    def test_delete_someone_elses(self, client, api_user):
        pid = _generate(client).json()["promptId"]
        r = client.request("DELETE", "/api/prompts", json={"promptId": pid, "userId": "user-2"})
        assert r.status_code == 403

    def test_delete_missing(self, client):
        r = client.request("DELETE", "/api/prompts", json={"promptId": "nope", "userId": "user-1"})
        assert r.status_code == 404

    def test_list_requires_user(self, client):
        assert client.get("/api/prompts").status_code == 400


class TestShare:
    def test_share_flow(self, client, api_user, database):
        pid = _generate(client).json()["promptId"]

        created = client.post("/api/share/create", json={"promptId": pid, "userId": "user-1"}).json()
        code = created["code"]
        assert created["success"] is True
        assert created["shareUrl"] == f"https://promptiq.test/p/{code}"

        first = client.get(f"/api/share/{code}").json()
        assert first["prompt"]["id"] == pid
        assert first["views"] == 1
        assert client.get(f"/api/share/{code}").json()["views"] == 2

        with database.session() as s:
            link = s.query(SharedLink).filter_by(code=code).one()
            link.expires_at = utcnow() - timedelta(minutes=1)
            s.commit()

        r = client.get(f"/api/share/{code}")
        assert r.status_code == 410
        assert r.json()["error"] == "link_expired"

    def test_unknown_code(self, client):
        r = client.get("/api/share/AAAAAA")
        assert r.status_code == 404
        assert r.json()["error"] == "link_not_found"

    def test_prompt_not_owned(self, client, api_user):
        pid = _generate(client).json()["promptId"]
        r = client.post("/api/share", json={"promptId": pid, "userId": "user-2"})
        assert r.status_code == 403

    def test_deleted_prompt_link_is_gone(self, client, api_user):
        pid = _generate(client).json()["promptId"]
        code = client.post("/api/share", json={"promptId": pid, "userId": "user-1"}).json()["code"]
        client.request("DELETE", "/api/prompts", json={"promptId": pid, "userId": "user-1"})
        assert client.get(f"/api/share/{code}").status_code == 404


class TestWaitlist:
    def test_join_and_count(self, client):
        r = client.post("/api/waitlist", json={"email": "New@Example.com", "source": "landing"})
        assert r.json() == {"success": True, "message": "Successfully added to waitlist!", "remaining": 249}

        again = client.post("/api/waitlist", json={"email": "new@example.com"}).json()
        assert again["alreadyExists"] is True

        assert client.get("/api/waitlist/count").json() == {
            "success": True, "total": 250, "signups": 1, "remaining": 249,
        }

    def test_invalid_email(self, client):
        assert client.post("/api/waitlist", json={"email": "nope"}).status_code == 400


def test_unhandled_error_hides_details(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("connection to db-internal:5432 refused")

    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/boom")
    assert r.status_code == 500
    assert r.json() == {"error": "internal_error", "message": "Internal error"}
