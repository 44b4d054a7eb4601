import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from webapp.app import EXAMPLE, app


def test_get_simulate_returns_usage():
    client = app.test_client()
    resp = client.get("/simulate")
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


def test_post_example_runs_simulation():
    client = app.test_client()
    resp = client.post("/simulate", json=EXAMPLE)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    wall = body["result"]["surfaces"]["Wall 1"]
    assert len(wall["rh"]) == 97
    assert wall["heat_flux_latent"][1] > 0
    assert wall["rh"][-1] < wall["rh"][1]


def test_post_with_bad_material_reports_diagnostics():
    client = app.test_client()
    data = dict(EXAMPLE, empd_settings=[dict(EXAMPLE["empd_settings"][0], material="Plaster")])
    resp = client.post("/simulate", json=data)
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["ok"] is False
    assert any("Plaster" in line for line in body["diagnostics"])


def test_report_endpoint_returns_html():
    client = app.test_client()
    resp = client.post("/report", json=EXAMPLE)
    assert resp.status_code == 200
    assert b"EMPD Moisture Report" in resp.data


def test_empd_settings_endpoint_filters_by_name():
    client = app.test_client()
    body = client.get("/empd_settings?q=pine").get_json()
    assert body["ok"] is True
    assert [s["material_name"] for s in body["empd_settings"]] == ["Pine Paneling"]
    assert body["empd_settings"][0]["mu"] == 42.0
