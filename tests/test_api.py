"""
Tests for the calculation API endpoints.
"""

import pytest


BASE_DEAL = {
    "price": 450000,
    "down_pct": 0.20,
    "rate": 6.5,
    "term_years": 30,
    "taxes_pct": 0.017,
    "insurance_annual": 1800,
    "rent_monthly": 2600,
    "timeline_years": 10,
    "gains_rate": 0.055,
    "inflation_rate": 0.03,
}


class TestResultsAPI:
    """Tests for the full model endpoint."""

    def test_calculate_results(self, client):
        """Test the default deal returns the recorded results."""
        response = client.post("/api/calculate/results", json=BASE_DEAL)
        assert response.status_code == 200
        data = response.json()
        assert data["total_real_roi"] == pytest.approx(297491.98750400, rel=1e-6)
        assert data["roi_pct"] == pytest.approx(2.754555439852, rel=1e-6)
        assert data["irr"] == pytest.approx(0.059804267501, abs=1e-6)
        assert data["equity_terminal_wealth"] == pytest.approx(36773.22242661, rel=1e-6)
        assert len(data["ledger"]) == 10
        assert data["ledger"][0]["year"] == 1

    def test_initial_fairness_mode(self, client):
        response = client.post(
            "/api/calculate/results", json={**BASE_DEAL, "fairness_mode": "initial"}
        )
        assert response.status_code == 200
        assert response.json()["equity_contributions"] == pytest.approx(108000)

    def test_minimal_input_uses_defaults(self, client):
        response = client.post("/api/calculate/results", json={"price": 300000})
        assert response.status_code == 200
        assert response.json()["timeline_years"] == 10

    @pytest.mark.parametrize(
        "overrides",
        [
            {"price": 0},
            {"down_pct": 1.5},
            {"timeline_years": 0},
            {"fairness_mode": "sideways"},
            {"inflation_rate": -2},
            {"insurance_annual": -100},
            {"term_years": 51},
            {"timeline_years": 101},
        ],
    )
    def test_invalid_deal(self, client, overrides):
        """Test invalid inputs are rejected."""
        response = client.post("/api/calculate/results", json={**BASE_DEAL, **overrides})
        assert response.status_code == 422


class TestCalculationsAPI:
    """Tests for component calculation endpoints."""

    def test_calculate_amortization(self, client):
        """Test amortization schedule endpoint."""
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 240000,
                "annual_rate": 0.065,
                "term_years": 30,
                "start_date": "2025-01-01",
                "summary_years": 10,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["payment_monthly"] == pytest.approx(1516.9632563831, rel=1e-9)
        assert len(data["schedule"]) == 360
        assert data["schedule"][0]["date"] == "2025-01-01"
        assert data["schedule"][12]["date"] == "2026-01-01"
        assert data["total_principal"] == pytest.approx(240000)
        assert data["summary"]["balance"] == pytest.approx(203462.7032712328, rel=1e-9)

    def test_calculate_amortization_invalid_term(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 240000, "annual_rate": 0.065, "term_years": 0},
        )
        assert response.status_code == 422

    def test_calculate_amortization_remaining_balance(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 240000,
                "annual_rate": 0.065,
                "term_years": 30,
                "payments_completed": 120,
            },
        )
        assert response.status_code == 200
        assert response.json()["remaining_balance"] == pytest.approx(203462.70, abs=0.01)

    def test_calculate_irr(self, client):
        """Test IRR calculation endpoint."""
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [-100, 10, 10, 110]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["irr"] == pytest.approx(0.10, abs=1e-6)
        assert data["annual_irr"] == pytest.approx(0.10, abs=1e-6)
        assert data["multiple"] == pytest.approx(1.3)
        assert data["profit"] == pytest.approx(30)
        assert data["npv_at_10_percent"] == pytest.approx(0, abs=1e-9)

    def test_calculate_irr_monthly(self, client):
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [-100, 1, 101], "periods_per_year": 12},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["irr"] == pytest.approx(0.01, abs=1e-6)
        assert data["annual_irr"] == pytest.approx(1.01 ** 12 - 1, abs=1e-5)

    def test_calculate_irr_invalid_cash_flows(self, client):
        """Test IRR with invalid cash flows."""
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [100, 50]},  # No negative values
        )
        assert response.status_code == 422

    def test_calculate_irr_no_convergence(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [1, -1, 1]})
        assert response.status_code == 400

    @pytest.mark.parametrize("guess", [-1, -3])
    def test_calculate_irr_invalid_guess(self, client, guess):
        response = client.post(
            "/api/calculate/irr", json={"cash_flows": [-100, 110], "guess": guess}
        )
        assert response.status_code == 422

    def test_calculate_irr_diverging_guess(self, client):
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [-100.0] + [1.0] * 200, "guess": 1e6},
        )
        assert response.status_code == 400

    def test_calculate_real(self, client):
        response = client.post(
            "/api/calculate/real",
            json={"nominal": 1000, "cpi_base": 100, "cpi_now": 125},
        )
        assert response.status_code == 200
        assert response.json()["real"] == pytest.approx(800)

    def test_calculate_real_invalid_cpi(self, client):
        response = client.post(
            "/api/calculate/real",
            json={"nominal": 1000, "cpi_base": 100, "cpi_now": 0},
        )
        assert response.status_code == 422

    def test_calculate_benchmark(self, client):
        response = client.post(
            "/api/calculate/benchmark",
            json={
                "returns": [0.01, 0.01],
                "dividends": [0, 0],
                "cpi_growth": [0, 0],
                "cash_flows_real": [100, 0, 0],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["curve"] == pytest.approx([1.0, 1.01, 1.0201])
        assert data["terminal_wealth"] == pytest.approx(102.01)

    def test_calculate_benchmark_mismatched_series(self, client):
        response = client.post(
            "/api/calculate/benchmark",
            json={
                "returns": [0.01, 0.01],
                "dividends": [0],
                "cpi_growth": [0, 0],
                "cash_flows_real": [100],
            },
        )
        assert response.status_code == 422

    def test_calculate_benchmark_invalid_inflation(self, client):
        response = client.post(
            "/api/calculate/benchmark",
            json={
                "returns": [0.0],
                "dividends": [0.0],
                "cpi_growth": [-1.0],
                "cash_flows_real": [100],
            },
        )
        assert response.status_code == 422

    def test_calculate_benchmark_total_loss(self, client):
        """Test money added after a -100% period is still counted."""
        response = client.post(
            "/api/calculate/benchmark",
            json={
                "returns": [-1.0, 0.0],
                "dividends": [0.0, 0.0],
                "cpi_growth": [0.0, 0.0],
                "cash_flows_real": [100, 0, 50],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["curve"] == [1.0, 0.0, 0.0]
        assert data["terminal_wealth"] == pytest.approx(50.0)

    def test_calculate_cost_segregation(self, client):
        response = client.post("/api/calculate/cost-segregation", json={"price": 500000})
        assert response.status_code == 200
        data = response.json()
        assert data["bonus_eligible"] == pytest.approx(100000)
        assert data["special_allowance"] == pytest.approx(15000)
        assert data["immediate_used"] == pytest.approx(15000)
        assert data["tax_savings"] == pytest.approx(3600)
        assert data["breakeven_deduction"] == pytest.approx(37500)

    def test_calculate_cost_segregation_professional(self, client):
        response = client.post(
            "/api/calculate/cost-segregation",
            json={"price": 500000, "reps_or_str": True},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["immediate_cap"] is None
        assert data["immediate_used"] == pytest.approx(100000 + 300000 / 27.5)


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
