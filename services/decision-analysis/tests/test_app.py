"""
Tests for the HTTP endpoints
============================
Tests cover:
- Health and root endpoints
- Analysis endpoints
- Simulation and risk endpoints
- Error status mapping (400 / 422)
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient

from app import app


client = TestClient(app)

RECORDS = [
    {"x": 8, "y": 4, "profit": 28, "label": "a"},
    {"x": 12, "y": 6, "profit": 42, "label": "b"},
    {"x": 9, "y": 5, "profit": 33, "label": "c"},
    {"x": 11, "y": None, "profit": 37, "label": "d"},
]

CONFIG = {
    "target_variable": "profit",
    "input_variables": ["x", "y"],
    "uncertain_variables": ["y"],
    "distributions": {"y": {"type": "uniform", "min": 5, "max": 5}},
    "coefficients": {"x": 2, "y": 3},
    "num_simulations": 500,
    "random_seed": 1,
}


class TestServiceEndpoints:

    def test_root(self):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestAnalysisEndpoints:

    def test_statistics(self):
        response = client.post("/statistics", json={"data": RECORDS})
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"x", "y", "profit"}
        assert body["y"]["count"] == 3

    def test_correlation(self):
        response = client.post("/correlation", json={"data": RECORDS})
        assert response.status_code == 200
        body = response.json()
        assert body["columns"] == ["x", "y", "profit"]
        assert body["values"][0][0] == 1.0

    def test_coefficients(self):
        response = client.post("/coefficients", json={
            "data": RECORDS,
            "target_variable": "profit",
            "input_variables": ["x"],
            "alignment": "pairwise",
        })
        assert response.status_code == 200
        assert response.json()["coefficients"]["x"] == pytest.approx(3.2)

    def test_coefficients_unknown_column(self):
        response = client.post("/coefficients", json={
            "data": RECORDS,
            "target_variable": "profit",
            "input_variables": ["missing"],
        })
        assert response.status_code == 400

    def test_suggest_distributions(self):
        response = client.post("/suggest-distributions", json={"data": RECORDS, "variables": ["x"]})
        assert response.status_code == 200
        assert response.json()["x"]["type"] in ("normal", "uniform")

    def test_preprocess(self):
        response = client.post("/preprocess", json={
            "data": RECORDS,
            "methods": {"y": "drop"},
            "columns": ["x", "y"],
            "include_categories": True,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["row_count"] == 3
        assert body["columns"] == ["x", "y"]
        assert body["missing_values"]["y"]["count"] == 1
        assert body["column_types"]["label"] == "categorical"
        assert len(body["category_counts"]["label"]) == 4

    def test_preprocess_unknown_method(self):
        response = client.post("/preprocess", json={"data": RECORDS, "methods": {"y": "guess"}})
        assert response.status_code == 400

    def test_analyze(self):
        response = client.post("/analyze", json={
            "data": RECORDS,
            "target_variable": "profit",
            "input_variables": ["x", "y"],
        })
        assert response.status_code == 200
        assert list(response.json()["coefficients"]) == ["x", "y"]


class TestSimulationEndpoints:

    def test_simulate(self):
        response = client.post("/simulate", json={"data": RECORDS, "config": CONFIG})
        assert response.status_code == 200
        body = response.json()
        assert len(body["outcomes"]) == 500
        assert body["statistics"]["mean"] == pytest.approx(2 * 10 + 3 * 5)
        assert body["seed"] == 1
        assert body["risk_assessment"]["level"] == "Low"

    def test_simulate_missing_distribution(self):
        config = dict(CONFIG, distributions={})
        response = client.post("/simulate", json={"data": RECORDS, "config": config})
        assert response.status_code == 400

    def test_simulate_invalid_distribution(self):
        config = dict(CONFIG, distributions={"y": {"type": "uniform", "min": 5, "max": 1}})
        response = client.post("/simulate", json={"data": RECORDS, "config": config})
        assert response.status_code == 400

    def test_risk(self):
        response = client.post("/risk", json={
            "outcomes": list(range(1, 101)),
            "confidence_level": 0.95,
            "threshold": 51,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["risk_metrics"]["value_at_risk"]["value"] == 6.0
        assert body["risk_metrics"]["conditional_value_at_risk"]["value"] == pytest.approx(3.0)
        assert body["exceedance_probability"] == pytest.approx(50.0)

    def test_risk_empty_tail_reported(self):
        response = client.post("/risk", json={"outcomes": list(range(10))})
        assert response.status_code == 200
        assert response.json()["risk_metrics"]["conditional_value_at_risk"]["error"]

    def test_risk_empty_outcomes(self):
        response = client.post("/risk", json={"outcomes": []})
        assert response.status_code == 422
