"""
API tests for the Irrigation Planner router.

The run store dependency is replaced by an in-memory store (see conftest).
"""
import pytest

WHEAT_FORM = {
    "crop": "wheat",
    "stage": "mid",
    "area": "1",
    "et0": "5",
    "rain": "",
    "soil": "",
    "soil_type": "loam",
    "eff": "70",
}


class TestPlanEndpoints:

    def test_reference_data(self, client):
        response = client.get("/api/irrigation/crops")
        assert response.status_code == 200
        data = response.json()
        assert len(data["crops"]) == 7
        assert {s["id"] for s in data["soil_types"]} == {"sandy", "loam", "clay"}
        assert data["stages"] == ["initial", "mid", "late"]
        assert data["defaults"]["eff"] == 70

    def test_calculate_plan(self, client):
        response = client.post("/api/irrigation/plan", json=WHEAT_FORM)
        assert response.status_code == 200
        data = response.json()

        assert data["plan"]["kc"] == pytest.approx(1.15)
        assert data["plan"]["gross_depth"] == pytest.approx(8.2142857, rel=1e-6)
        assert data["plan"]["status_class"] == "warn"
        assert data["summary"]["etc"] == "5.75"
        assert data["summary"]["gross_depth"] == "8.21"

    def test_numbers_may_be_sent_as_numbers(self, client):
        form = dict(WHEAT_FORM, area=1, et0=5, eff=70)
        response = client.post("/api/irrigation/plan", json=form)
        assert response.json()["summary"]["etc"] == "5.75"

    def test_garbage_numbers_fall_back_to_defaults(self, client):
        form = dict(WHEAT_FORM, et0="n/a")
        response = client.post("/api/irrigation/plan", json=form)
        assert response.status_code == 200
        assert response.json()["plan"]["gross_litres"] == 0
        assert response.json()["plan"]["schedule"] == "No irrigation needed today. Recheck tomorrow."

    def test_unknown_stage_shows_dash(self, client):
        response = client.post("/api/irrigation/plan", json=dict(WHEAT_FORM, stage="flowering"))
        assert response.status_code == 200
        data = response.json()
        assert data["plan"]["etc"] is None
        assert data["summary"]["etc"] == "–"

    def test_chart_pdf(self, client):
        response = client.post("/api/irrigation/chart", json=WHEAT_FORM)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")


class TestRunEndpoints:

    def test_empty_history(self, client):
        response = client.get("/api/irrigation/runs")
        assert response.json() == {"items": [], "total": 0}

    def test_badly_typed_stored_fields_still_list(self, client, memory_backend):
        memory_backend.set_item("wm_runs", '[{"crop": 5, "date": 7, "grossL": [1]}]')
        response = client.get("/api/irrigation/runs")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["run"]["crop"] == 5
        assert data["items"][0]["cells"][:2] == ["7", "5"]

    def test_save_and_delete_runs(self, client, run_store):
        first = client.post("/api/irrigation/runs", json=WHEAT_FORM)
        assert first.status_code == 201
        second = client.post("/api/irrigation/runs", json=dict(WHEAT_FORM, crop="rice"))
        data = second.json()

        assert data["total"] == 2
        assert data["items"][0]["run"]["crop"] == "rice"
        assert data["items"][1]["run"]["crop"] == "wheat"
        assert data["items"][1]["run"]["grossL"] == 82143

        response = client.delete("/api/irrigation/runs/0")
        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert run_store.load_runs()[0]["crop"] == "wheat"

    def test_delete_unknown_index(self, client):
        response = client.delete("/api/irrigation/runs/3")
        assert response.status_code == 404

    def test_clear_runs(self, client, run_store, sample_runs):
        run_store.save_runs(sample_runs)
        response = client.delete("/api/irrigation/runs")
        assert response.status_code == 204
        assert run_store.load_runs() == []

    def test_export_csv(self, client, run_store, sample_runs):
        run_store.save_runs(sample_runs)
        response = client.get("/api/irrigation/runs/export/csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "irrigation_runs.csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == "Date,Crop,Stage,Area_ha,ET0_mm_day,Rain_mm,ETc_mm,Net_mm,Gross_L"
        assert len(lines) == 4

    def test_export_excel(self, client, run_store, sample_runs):
        run_store.save_runs(sample_runs)
        response = client.get("/api/irrigation/runs/export/excel")
        assert response.status_code == 200
        assert response.content[:2] == b"PK"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
