def test_subscription_status(client, headers, client_record):
    res = client.get("/api/subscription/status", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["contractor"]["subscriptionPlan"] == "pro"
    assert body["plan"]["maxClients"] == 50
    assert body["plan"]["aiUsageLimit"] == 10
    assert body["usage"]["currentClientCount"] == 1
    assert body["usage"]["clientsRemaining"] == 49
    assert body["usage"]["aiUsageRemaining"] == 10


def test_business_plan_is_unlimited(client, make_contractor, auth_for):
    business = auth_for(make_contractor(plan="business"))
    body = client.get("/api/subscription/status", headers=business).json()
    assert body["plan"]["maxClients"] == -1
    assert body["usage"]["clientsRemaining"] == "unlimited"
    assert body["usage"]["maxAiUsage"] == -1


def test_unknown_plan_is_treated_as_basic(client, make_contractor, auth_for):
    legacy = auth_for(make_contractor(plan="gold"))
    body = client.get("/api/subscription/status", headers=legacy).json()
    assert body["plan"]["planName"] == "basic"
    assert body["plan"]["maxClients"] == 10


def test_feature_check(client, headers, make_contractor, auth_for):
    res = client.get("/api/subscription/check/hasAiCostAnalysis", headers=headers)
    assert res.json() == {"hasAccess": True, "currentPlan": "pro"}

    assert client.get("/api/subscription/check/hasBrandedPortal", headers=headers).json()["hasAccess"] is False
    assert client.get("/api/subscription/check/teleport", headers=headers).json()["hasAccess"] is False

    basic = auth_for(make_contractor(plan="basic"))
    assert client.get("/api/subscription/check/hasAiCostAnalysis", headers=basic).json()["hasAccess"] is False


def test_subscription_info(client, headers):
    res = client.get("/api/billing/subscription-info", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["currentPlan"]["name"] == "pro"
    assert body["currentPlan"]["price"] == "59"
    assert body["subscriptionStatus"] == "trial"
    assert [p["name"] for p in body["availablePlans"]] == ["basic", "pro", "business"]
    assert body["usage"] == {"clientCount": 0, "aiUsageThisMonth": 0}


def test_upgrade_and_cancel(client, headers):
    res = client.post("/api/billing/upgrade", json={"planName": "business"}, headers=headers)
    assert res.status_code == 200
    contractor = res.json()["contractor"]
    assert contractor["plan"] == "business"
    assert contractor["subscriptionStatus"] == "active"
    assert contractor["planEndDate"] is not None

    assert client.post("/api/billing/upgrade", json={"planName": "platinum"}, headers=headers).status_code == 400

    res = client.post("/api/billing/cancel", headers=headers)
    assert res.json()["contractor"]["subscriptionStatus"] == "cancelled"
    assert res.json()["contractor"]["plan"] == "business"


def test_admin_subscription_update(client, headers, admin_headers, contractor):
    url = f"/api/super-admin/contractors/{contractor.id}/subscription"
    assert client.put(url, json={"plan": "basic", "status": "active"}, headers=headers).status_code == 403

    res = client.put(url, json={"plan": "basic", "status": "inactive"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["contractor"]["plan"] == "basic"
    assert res.json()["contractor"]["subscriptionStatus"] == "inactive"

    assert client.put(url, json={"plan": "mega", "status": "active"}, headers=admin_headers).status_code == 400
    assert client.put(
        "/api/super-admin/contractors/99999/subscription",
        json={"plan": "pro", "status": "active"},
        headers=admin_headers,
    ).status_code == 404
