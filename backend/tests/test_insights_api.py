GENERAL_COSTS = {
    "monthly_summary": [
        {"payment_month": "2024-01-01", "total_amount": 600, "payments_count": 3},
        {"payment_month": "2024-02-01", "total_amount": 400, "payments_count": 2},
    ],
    "by_category": [
        {"category_name": "Alquiler", "total_amount": 900},
        {"category_name": "Luz", "total_amount": 100},
    ],
    "current_month": 2,
}

CLIENTS = {
    "summaries": [
        {"client_id": "c1", "client_name": "Acme", "total_committed_amount": 1000, "total_paid_amount": 200, "balance_due": 800},
        {"client_id": "c2", "client_name": "Beta", "total_committed_amount": 1000, "total_paid_amount": 950, "balance_due": 50},
    ],
    "payments": [
        {"client_id": "c1", "client_name": "Acme", "amount": 200, "payment_date": "2024-03-01"},
        {"client_id": "c2", "client_name": "Beta", "amount": 950, "payment_date": "2024-05-20"},
    ],
    "as_of": "2024-06-01",
}


def test_domains_are_listed(api_client):
    resp = api_client.get("/api/insights/domains")

    assert resp.status_code == 200
    assert resp.json() == ["admin", "clients", "finance", "general_costs", "materials", "real_estate"]


def test_unknown_domain_is_404(api_client):
    assert api_client.post("/api/insights/payroll", json={}).status_code == 404


def test_generate_returns_camel_case_contract(api_client):
    resp = api_client.post("/api/insights/general_costs", json=GENERAL_COSTS)

    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"] == {"domain": "general_costs", "count": 1, "dismissed": 0}
    insight = body["insights"][0]
    assert insight["id"] == "concentration-single"
    assert insight["severity"] == "critical"
    assert "actionHint" in insight
    assert insight["actions"] == [
        {"id": "filter-category", "label": "Ver en gráfico", "type": "filter", "payload": {"category": "Alquiler"}}
    ]


def test_invalid_domain_payload_is_422(api_client):
    resp = api_client.post("/api/insights/general_costs", json={"current_month": 13})

    assert resp.status_code == 422


def test_clients_default_cap_and_explicit_limit(api_client):
    default = api_client.post("/api/insights/clients", json=CLIENTS).json()
    limited = api_client.post("/api/insights/clients?limit=2", json=CLIENTS).json()

    assert default["meta"]["count"] == 5
    assert [i["id"] for i in limited["insights"]] == ["concentration-single", "client-debtors"]


def test_max_results_env_caps_uncapped_domains(api_client, monkeypatch):
    monkeypatch.setenv("INSIGHTS_MAX_RESULTS", "1")
    payload = {
        "kpis": {"bounce_rate": 70, "avg_session_duration": 30},
    }

    body = api_client.post("/api/insights/admin", json=payload).json()

    assert [i["id"] for i in body["insights"]] == ["high-bounce-rate"]


def test_dismissed_insights_are_hidden_for_that_scope(api_client, org_id):
    resp = api_client.post(
        "/api/insights/dismissals",
        json={"organization_id": org_id, "scope": "costs-page", "insight_id": "concentration-single"},
    )
    assert resp.status_code == 200

    hidden = api_client.post(
        f"/api/insights/general_costs?organization_id={org_id}&scope=costs-page", json=GENERAL_COSTS
    ).json()
    other_scope = api_client.post(
        f"/api/insights/general_costs?organization_id={org_id}&scope=dashboard", json=GENERAL_COSTS
    ).json()

    assert hidden["insights"] == []
    assert hidden["meta"]["dismissed"] == 1
    assert other_scope["meta"]["count"] == 1

    listed = api_client.get("/api/insights/dismissals", params={"organization_id": org_id}).json()
    assert [d["insight_id"] for d in listed] == ["concentration-single"]

    restore = api_client.delete(f"/api/insights/dismissals/{org_id}/costs-page/concentration-single")
    assert restore.status_code == 200
    shown = api_client.post(
        f"/api/insights/general_costs?organization_id={org_id}&scope=costs-page", json=GENERAL_COSTS
    ).json()
    assert shown["meta"]["count"] == 1


def test_threshold_editing_is_gated(api_client, org_id):
    resp = api_client.put(f"/api/insights/config/{org_id}", json={"concentration_pareto": 95})

    assert resp.status_code == 403


def test_stored_thresholds_apply_to_generation(api_client, org_id, monkeypatch):
    monkeypatch.setenv("INSIGHTS_CUSTOM_THRESHOLDS", "1")

    resp = api_client.put(f"/api/insights/config/{org_id}", json={"concentration_pareto": 95})
    assert resp.status_code == 200
    assert resp.json()["thresholds"]["concentration_pareto"] == 95.0
    assert resp.json()["overrides"] == {"concentration_pareto": 95.0}

    body = api_client.post(f"/api/insights/general_costs?organization_id={org_id}", json=GENERAL_COSTS).json()
    assert [i["id"] for i in body["insights"]] == ["concentration-few"]

    config = api_client.get(f"/api/insights/config/{org_id}").json()
    assert config["custom_thresholds_enabled"] is True
    assert config["thresholds"]["growth_significant"] == 15.0


def test_invalid_threshold_values_are_rejected(api_client, org_id, monkeypatch):
    monkeypatch.setenv("INSIGHTS_CUSTOM_THRESHOLDS", "1")

    assert api_client.put(f"/api/insights/config/{org_id}", json={"concentration_pareto": 150}).status_code == 422
    assert api_client.put(f"/api/insights/config/{org_id}", json={"unknown": 1}).status_code == 422
