"""HTTP surface: drafts, pricing controls, scenarios, persistence and form helpers."""

import json

import pytest

BANNER = {
    "description": "Banner",
    "quantity": 2,
    "area": {"width": 10, "height": 5, "unit": "foot", "cost_per_area": 3},
    "sale_rate": 5,
    "is_print": True,
}
PANEL = {"description": "ACM panel", "unit_price": "100", "category": "materials"}


def _create(client, **body):
    r = client.post("/quotes", json={"name": "Storefront", "client": "ACME", **body})
    assert r.status_code == 201
    return r.json()["draft_id"]


@pytest.fixture
def draft(client):
    draft_id = _create(client)
    client.post(f"/quotes/{draft_id}/items", json=BANNER)
    client.post(f"/quotes/{draft_id}/items", json=PANEL)
    return draft_id


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


class TestDrafts:

    def test_create_empty(self, client):
        r = client.post("/quotes", json={"mode": "print"})
        assert r.status_code == 201
        summary = r.json()["summary"]
        assert summary["mode"] == "print"
        assert summary["final_price"] == 0
        assert summary["margin_percent"] == 40.0
        assert summary["commission_percent"] == 10.0

    def test_add_items_recomputes(self, client, draft):
        s = client.get(f"/quotes/{draft}").json()["summary"]
        assert s["cost_total"] == pytest.approx(400.0)
        assert s["final_price"] == pytest.approx(100.0 / 0.6 + 500.0)
        assert s["items"][1]["category"] == "materials"

    def test_unknown_draft(self, client):
        assert client.get("/quotes/nope").status_code == 404
        assert client.post("/quotes/nope/items", json=PANEL).status_code == 404

    def test_invalid_item_rejected(self, client, draft):
        r = client.post(f"/quotes/{draft}/items", json={"description": "x", "quantity": 0})
        assert r.status_code == 422

    def test_role_rejected_outside_combined(self, client, draft):
        r = client.post(f"/quotes/{draft}/items", json={**PANEL, "role": "cost"})
        assert r.status_code == 422

    def test_edit_and_delete_item(self, client, draft):
        items = client.get(f"/quotes/{draft}").json()["summary"]["items"]
        panel_id = items[1]["id"]

        r = client.patch(f"/quotes/{draft}/items/{panel_id}", json={"unit_price": "=60*2"})
        assert r.status_code == 200
        assert r.json()["summary"]["cost_total"] == pytest.approx(420.0)

        r = client.delete(f"/quotes/{draft}/items/{panel_id}")
        assert r.status_code == 200
        assert len(r.json()["summary"]["items"]) == 1

        assert client.delete(f"/quotes/{draft}/items/{panel_id}").status_code == 404

    def test_switch_pricing_mode_keeps_price(self, client, draft):
        banner = client.get(f"/quotes/{draft}").json()["summary"]["items"][0]
        r = client.put(f"/quotes/{draft}/items/{banner['id']}/pricing-mode", json={"pricing_mode": "flat_total"})
        switched = r.json()["summary"]["items"][0]
        assert switched["pricing_mode"] == "flat_total"
        assert switched["sale_rate"] == pytest.approx(250.0)
        assert r.json()["summary"]["totals"]["print_sale_total"] == pytest.approx(500.0)

    def test_update_header_fields(self, client, draft):
        r = client.patch(f"/quotes/{draft}", json={"client": "Globex", "note": "rush", "name": None})
        s = r.json()["summary"]
        assert s["client_name"] == "Globex"
        assert s["note"] == "rush"
        assert s["project_name"] == "Storefront"

    def test_duplicate(self, client, draft):
        r = client.post(f"/quotes/{draft}/duplicate")
        assert r.status_code == 201
        body = r.json()
        assert body["draft_id"] != draft
        assert body["summary"]["project_name"] == "Storefront (Copy)"
        assert body["summary"]["quote_id"] is None

    def test_discard(self, client, draft):
        assert client.delete(f"/quotes/{draft}").status_code == 200
        assert client.get(f"/quotes/{draft}").status_code == 404
        assert client.delete(f"/quotes/{draft}").status_code == 404


class TestPricingControls:

    def test_margin(self, client, draft):
        s = client.put(f"/quotes/{draft}/margin", json={"margin": 50}).json()["summary"]
        assert s["final_price"] == pytest.approx(700.0)

    @pytest.mark.parametrize("margin", [100, -1])
    def test_margin_out_of_range(self, client, draft, margin):
        assert client.put(f"/quotes/{draft}/margin", json={"margin": margin}).status_code == 422

    def test_commission(self, client, draft):
        s = client.put(f"/quotes/{draft}/commission", json={"percent": 0}).json()["summary"]
        assert s["commission"] == 0
        assert client.put(f"/quotes/{draft}/commission", json={"percent": 120}).status_code == 422

    def test_manual_final_price_and_reset(self, client, draft):
        s = client.put(f"/quotes/{draft}/final-price", json={"value": "=400+400"}).json()["summary"]
        assert s["final_price"] == pytest.approx(800.0)
        assert s["final_price_manual"] is True
        assert s["margin_percent"] == pytest.approx(50.0)

        s = client.delete(f"/quotes/{draft}/final-price").json()["summary"]
        assert s["final_price_manual"] is False
        assert s["final_price"] == pytest.approx(s["suggested_price"])

    def test_cleared_final_price_falls_back_to_sale_total(self, client, draft):
        s = client.put(f"/quotes/{draft}/final-price", json={"value": ""}).json()["summary"]
        assert s["final_price"] == pytest.approx(600.0)

    def test_huge_manual_price_leaves_draft_usable(self, client, draft):
        r = client.put(f"/quotes/{draft}/final-price", json={"value": "100000000"})
        assert r.status_code == 200
        assert r.json()["summary"]["margin_percent"] == pytest.approx(99.99)
        assert client.get(f"/quotes/{draft}/summary").status_code == 200
        assert client.delete(f"/quotes/{draft}/final-price").status_code == 200

    def test_change_that_cannot_be_summarized_is_not_stored(self, client, draft):
        from fastapi import HTTPException

        from quoter.api.quotes import apply_change

        with pytest.raises(HTTPException) as exc:
            apply_change(draft, lambda q: q.model_copy(update={"target_margin": 100.0}))
        assert exc.value.status_code == 422
        s = client.get(f"/quotes/{draft}/summary").json()
        assert s["margin_percent"] == 40.0

    def test_final_margin(self, client, draft):
        s = client.put(f"/quotes/{draft}/final-margin", json={"margin": 50}).json()["summary"]
        assert s["final_price"] == pytest.approx(800.0)
        assert s["realized_margin_percent"] == pytest.approx(50.0)

    def test_summary_and_export(self, client, draft):
        s = client.get(f"/quotes/{draft}/summary").json()
        assert s["margin_rating"] == "good"

        r = client.get(f"/quotes/{draft}/export")
        assert r.status_code == 200
        assert r.headers["content-disposition"] == 'attachment; filename="Storefront.json"'
        exported = json.loads(r.content)
        assert exported["final_price"] == pytest.approx(s["final_price"])
        assert "exported_at" in exported


class TestScenarios:

    def test_snapshot_and_list(self, client, draft):
        r = client.post(f"/quotes/{draft}/scenarios", json={"name": "Baseline"})
        assert r.status_code == 201
        assert r.json()["metrics"]["cost_total"] == pytest.approx(400.0)
        listed = client.get(f"/quotes/{draft}/scenarios").json()
        assert [s["scenario"]["name"] for s in listed] == ["Baseline"]

    def test_generate_apply_delete(self, client, draft):
        r = client.post(f"/quotes/{draft}/scenarios/generate")
        assert r.status_code == 201
        generated = r.json()
        assert [g["scenario"]["name"] for g in generated] == ["Optimistic", "Pessimistic", "No commission"]

        no_commission = generated[2]["scenario"]["id"]
        s = client.post(f"/quotes/{draft}/scenarios/{no_commission}/apply").json()["summary"]
        assert s["commission_percent"] == 0

        assert client.delete(f"/quotes/{draft}/scenarios/{no_commission}").status_code == 200
        assert client.delete(f"/quotes/{draft}/scenarios/{no_commission}").status_code == 404
        assert client.post(f"/quotes/{draft}/scenarios/{no_commission}/apply").status_code == 404
        assert len(client.get(f"/quotes/{draft}/scenarios").json()) == 2

    def test_generate_refused_for_combined(self, client):
        draft_id = _create(client, mode="combined")
        client.post(f"/quotes/{draft_id}/items", json={"description": "Sign", "unit_price": "100"})
        assert client.post(f"/quotes/{draft_id}/scenarios/generate").status_code == 422
        assert client.post(f"/quotes/{draft_id}/scenarios", json={"name": "Baseline"}).status_code == 201


class TestSaved:

    def test_save_list_open_delete(self, client, draft):
        r = client.post(f"/quotes/{draft}/save")
        assert r.status_code == 200
        quote_id = r.json()["id"]

        # saving again updates the same record
        assert client.post(f"/quotes/{draft}/save").json()["id"] == quote_id

        listed = client.get("/saved").json()
        assert len(listed) == 1
        assert listed[0]["id"] == quote_id
        assert listed[0]["final_price"] == pytest.approx(100.0 / 0.6 + 500.0)

        r = client.post(f"/saved/{quote_id}/open")
        assert r.status_code == 201
        s = r.json()["summary"]
        assert s["quote_id"] == quote_id
        assert s["final_price_manual"] is True

        assert client.delete(f"/saved/{quote_id}").status_code == 200
        assert client.delete(f"/saved/{quote_id}").status_code == 404
        assert client.post(f"/saved/{quote_id}/open").status_code == 404

    def test_dashboard(self, client, draft):
        client.post(f"/quotes/{draft}/save")
        other = _create(client, mode="print")
        client.post(f"/quotes/{other}/items", json={"description": "Poster", "unit_price": "20", "sale_price": 50})
        client.post(f"/quotes/{other}/save")

        d = client.get("/dashboard/summary").json()
        assert d["total_quotes"] == 2
        assert d["by_mode"] == {"general": 1, "print": 1}
        assert d["quoted_total"] == pytest.approx(100.0 / 0.6 + 500.0 + 50.0)
        assert d["cost_total"] == pytest.approx(420.0)
        assert d["gross_profit"] == pytest.approx(d["quoted_total"] - 420.0)


class TestTools:

    def test_evaluate(self, client):
        assert client.post("/pricing/evaluate", json={"expression": "=2*(3+4)"}).json()["value"] == 14
        assert client.post("/pricing/evaluate", json={"expression": "__import__('os')"}).json()["value"] == 0

    def test_area(self, client):
        r = client.post("/pricing/area", json={"width": 24, "height": 36, "unit": "inch", "quantity": 10,
                                               "total": 300})
        body = r.json()
        assert body["area_sq_ft"] == pytest.approx(6.0)
        assert body["rate_per_sq_ft"] == pytest.approx(5.0)

    def test_area_rejects_non_positive(self, client):
        assert client.post("/pricing/area", json={"width": 0, "height": 3}).status_code == 422

    def test_categorize(self, client):
        body = client.post("/pricing/categorize", json={"description": "Flete a obra"}).json()
        assert body == {"category": "transport", "advisory": True}

    def test_markup(self, client):
        assert client.post("/pricing/markup", json={"cost": 60, "margin": 40}).json()["sale_price"] == pytest.approx(100)
        assert client.post("/pricing/markup", json={"cost": 60, "margin": 100}).status_code == 422

    def test_validate_item(self, client):
        r = client.post("/validate/item", json={"item": {"description": "x", "role": "cost"}, "mode": "print"})
        assert r.json() == {"decision": "rejected", "issues": ["invalid_role_for_mode"]}
