"""Error envelope — framework and domain failures share one body shape."""


async def test_unknown_route_uses_envelope(client):
    res = await client.get("/api/v1/does-not-exist")
    assert res.status_code == 404
    err = res.json()["error"]
    assert err["code"] == "NOT_FOUND"
    assert err["category"] == "resource_not_found"


async def test_wrong_method_uses_envelope(client):
    res = await client.delete("/api/v1/health/ready")
    assert res.status_code == 405
    assert res.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


async def test_missing_token_advertises_bearer(client):
    res = await client.get("/api/v1/auth/me")
    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Bearer"
    assert "timestamp" in res.json()["error"]


async def test_validation_error_lists_fields(client):
    res = await client.post("/api/v1/auth/signup", json={"email": "not-an-email"})
    assert res.status_code == 400
    fields = {d["field"] for d in res.json()["error"]["details"]}
    assert "body.email" in fields
    assert "body.password" in fields
