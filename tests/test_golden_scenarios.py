"""
Model Regression Tests

Golden values recorded from a reference run of the full model. The formula
chain is deterministic, so any drift here is a behavior change.
"""

import dataclasses

import pytest

from realroi.calculations.amortization import calculate_payment
from realroi.calculations.errors import InvalidInput
from realroi.calculations.model import compute_results

# Tolerances
TOL_REL = 1e-6               # Relative, for dollar amounts
TOL_IRR = 1e-6               # Absolute, for rates


# =============================================================================
# $450k RENTAL, 20% DOWN, 6.5% / 30yr, 10-YEAR HORIZON, 3% INFLATION
# =============================================================================

GOLDEN_BASE = {
    "piti": 3062.94488457,
    "appreciation": 318665.00625912,
    "real_gains": 237116.69204793,
    "real_principal_paid": 40780.77024398,
    "real_cash_flow": -96829.22085399,
    "real_tax_savings": 116423.74606608,
    "total_real_roi": 297491.98750400,
    "net_proceeds": 440411.00116449,
    "total_investment": 108000.0,
    "roi_pct": 2.754555439852,
    "equity_terminal_wealth": 36773.22242661,
    "equity_contributions": 9846.48295435,
}

GOLDEN_LEDGER = [
    # year, nominal cash flow, tax savings, interest this year, loan balance
    (1, -11351.338615, 14087.179526, 23281.526927, 355976.188312),
    (2, -11351.338615, 14000.945247, 23012.044806, 351682.894503),
    (5, -11351.338615, 13706.017769, 22090.396439, 336999.518790),
    (10, -11351.338615, 13067.179302, 20094.026229, 305194.054907),
]


@pytest.mark.golden
class TestBaseScenario:
    """Regression fixture for the default deal."""

    @pytest.fixture
    def results(self, base_deal):
        return compute_results(base_deal)

    @pytest.mark.parametrize("field,expected", sorted(GOLDEN_BASE.items()))
    def test_totals(self, results, field, expected):
        assert getattr(results, field) == pytest.approx(expected, rel=TOL_REL)

    def test_irr(self, results):
        assert abs(results.monthly_irr - 0.004852086581) < TOL_IRR
        assert abs(results.irr - 0.059804267501) < TOL_IRR

    @pytest.mark.parametrize("year,cash_flow,tax_savings,interest,balance", GOLDEN_LEDGER)
    def test_ledger(self, results, year, cash_flow, tax_savings, interest, balance):
        entry = results.ledger[year - 1]
        assert entry.year == year
        assert entry.nominal_cash_flow == pytest.approx(cash_flow, rel=TOL_REL)
        assert entry.tax_savings == pytest.approx(tax_savings, rel=TOL_REL)
        assert entry.interest_this_year == pytest.approx(interest, rel=TOL_REL)
        assert entry.loan_balance == pytest.approx(balance, rel=TOL_REL)
        assert entry.pmi_monthly == 0

    def test_initial_only_benchmark(self, base_deal):
        deal = dataclasses.replace(base_deal, fairness_mode="initial")
        results = compute_results(deal)
        assert results.equity_terminal_wealth == pytest.approx(156508.35366276, rel=TOL_REL)
        assert results.equity_contributions == pytest.approx(108000.0)

    def test_deterministic(self, base_deal):
        assert compute_results(base_deal) == compute_results(base_deal)


class TestModel:
    """Behavior of the full pipeline."""

    def test_ledger_length(self, base_deal):
        results = compute_results(dataclasses.replace(base_deal, timeline_years=15))
        assert [entry.year for entry in results.ledger] == list(range(1, 16))

    def test_total_real_roi_components(self, base_deal):
        r = compute_results(base_deal)
        assert r.total_real_roi == pytest.approx(
            r.real_gains + r.real_principal_paid + r.real_cash_flow + r.real_tax_savings
        )

    def test_zero_inflation_real_equals_nominal(self, base_deal):
        r = compute_results(dataclasses.replace(base_deal, inflation_rate=0.0))
        assert r.real_cash_flow == pytest.approx(r.cash_flow)
        assert r.real_tax_savings == pytest.approx(r.tax_savings)
        assert r.real_gains == pytest.approx(r.appreciation)

    def test_per_year_deflation(self, base_deal):
        """Early years lose less purchasing power than the horizon end."""
        r = compute_results(dataclasses.replace(base_deal, inflation_rate=0.06))
        deflated_once = r.tax_savings * (1 / 1.06 ** 10)
        assert r.real_tax_savings > deflated_once * 1.2

    def test_mortgage_insurance_with_low_down_payment(self, base_deal):
        r = compute_results(dataclasses.replace(base_deal, down_pct=0.05))
        loan = 450000 * 0.95
        assert r.ledger[0].pmi_monthly == pytest.approx(loan * 0.006 / 12)

    def test_cost_segregation_front_loads_tax_savings(self, base_deal):
        base = compute_results(base_deal)
        seg = compute_results(dataclasses.replace(base_deal, cost_segregation=True))
        building = 450000 * 0.80
        extra = (building * 0.20 - building / 27.5) * 0.32
        assert seg.ledger[0].tax_savings - base.ledger[0].tax_savings == pytest.approx(extra)
        assert seg.ledger[1].tax_savings == pytest.approx(base.ledger[1].tax_savings)

    def test_rent_growth(self, base_deal):
        r = compute_results(dataclasses.replace(base_deal, rent_growth=0.03))
        first, second = r.ledger[0], r.ledger[1]
        assert second.rent_monthly == pytest.approx(2600 * 1.03)
        assert second.nominal_cash_flow > first.nominal_cash_flow

    def test_horizon_past_loan_term(self, base_deal):
        r = compute_results(dataclasses.replace(base_deal, term_years=5, timeline_years=10))
        assert r.ledger[-1].loan_balance < 1e-6
        assert r.principal_paid == pytest.approx(360000, rel=1e-6)
        payment = calculate_payment(360000, 0.065, 5)
        assert r.ledger[5].nominal_cash_flow - r.ledger[4].nominal_cash_flow == pytest.approx(
            payment * 12
        )

    def test_all_cash_purchase(self, base_deal):
        r = compute_results(dataclasses.replace(base_deal, down_pct=1.0))
        assert r.principal_paid == 0
        assert r.total_investment == pytest.approx(450000 + 8000 + 10000)
        assert r.irr is not None

    def test_flat_benchmark_keeps_contributions(self, base_deal):
        """No growth, fees or inflation leaves the benchmark at its contributions."""
        deal = dataclasses.replace(
            base_deal,
            inflation_rate=0.0,
            equity_return=0.0,
            dividend_yield=0.0,
            etf_er_bps=0,
            advisor_fee=0.0,
        )
        r = compute_results(deal)
        assert r.equity_terminal_wealth == pytest.approx(r.equity_contributions)
        assert r.equity_net_gain == pytest.approx(0, abs=1e-6)

    def test_supplied_series(self, base_deal):
        """Externally supplied series replace the generated ones."""
        months = 120
        deal = dataclasses.replace(
            base_deal,
            cpi_series=[100.0] * (months + 1),
            equity_monthly_returns=[0.0] * months,
            equity_monthly_dividends=[0.0] * months,
            etf_er_bps=0,
            advisor_fee=0.0,
        )
        r = compute_results(deal)
        assert r.real_cash_flow == pytest.approx(r.cash_flow)
        assert r.equity_terminal_wealth == pytest.approx(r.equity_contributions)

    def test_no_solution_irr_is_none(self, base_deal):
        """A deal that never returns cash has no IRR rather than a fake one."""
        deal = dataclasses.replace(
            base_deal, rent_monthly=0, gains_rate=-0.5, sale_cost_pct=0.5
        )
        r = compute_results(deal)
        assert r.irr is None
        assert r.monthly_irr is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"price": 0},
            {"price": float("nan")},
            {"down_pct": 1.5},
            {"rate": float("nan")},
            {"term_years": 0},
            {"timeline_years": 0},
            {"insurance_annual": -1},
            {"inflation_rate": -1.0},
            {"fairness_mode": "sideways"},
            {"cpi_series": [100.0] * 5},
            {"equity_monthly_returns": [-1.5] * 120},
        ],
    )
    def test_invalid_deal(self, base_deal, overrides):
        with pytest.raises((InvalidInput, ValueError)):
            compute_results(dataclasses.replace(base_deal, **overrides))
