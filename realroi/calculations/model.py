"""
Real ROI Model

Runs the full property-versus-equities comparison for one deal:

1. Amortize the loan and build a yearly ledger of cash flow and tax effects
2. Deflate every period's amounts to today's dollars with a CPI series
3. Solve the real IRR from monthly cash flows plus net sale proceeds
4. Project an equity benchmark funded on the same cash timing

All monetary results are in today's dollars unless named nominal.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from realroi.calculations.amortization import (
    AmortizationSchedule,
    FinancialSummary,
    amortization_schedule,
    summarize_financials,
)
from realroi.calculations.benchmark import (
    BPS,
    FairnessMode,
    contribution_schedule,
    monthly_series,
    growth_factors,
    terminal_wealth_from_factors,
)
from realroi.calculations.cashflow import (
    CashFlowConfig,
    annual_cash_flow,
    grown_rent,
    mortgage_insurance_monthly,
)
from realroi.calculations.errors import InvalidInput, require_finite, require_non_negative
from realroi.calculations.inflation import cpi_growth, cpi_series, deflate_series, to_real
from realroi.calculations.irr import irr_bisection, monthly_to_annual_irr
from realroi.calculations.tax import annual_tax_savings, depreciation_for_year

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class Deal:
    """
    Deal parameters for one calculation run.

    Rates are decimals except ``rate``, which is the loan APR in percent as
    entered on the form (6.5 means 6.5%).
    """

    price: float
    down_pct: float = 0.20
    rate: float = 6.5
    term_years: int = 30
    taxes_pct: float = 0.017
    insurance_annual: float = 1800
    rent_monthly: float = 2600
    closing_costs: float = 8000
    reserves: float = 10000
    fairness_mode: FairnessMode = FairnessMode.MATCHED
    gains_rate: float = 0.055  # Annual appreciation
    timeline_years: int = 10
    inflation_rate: float = 0.03
    sale_cost_pct: float = 0.03
    etf_er_bps: float = 3
    advisor_fee: float = 0.01
    cost_segregation: bool = False

    # Operating assumptions
    pm_pct: float = 0.08
    vacancy_months_10yr: float = 5
    repairs_10yr: float = 15000
    warranty_10yr: float = 5000
    marginal_tax_rate: float = 0.32
    pmi_annual_rate: float = 0.006
    building_pct: float = 0.80  # Depreciable share of the price
    rent_growth: float = 0.0

    # Equity market assumptions
    equity_return: float = 0.08  # Annual nominal price return
    dividend_yield: float = 0.0

    # Optional external series; None derives them from the rates above
    cpi_series: Optional[Tuple[float, ...]] = None
    equity_monthly_returns: Optional[Tuple[float, ...]] = None
    equity_monthly_dividends: Optional[Tuple[float, ...]] = None

    start_date: Optional[date] = None

    def __post_init__(self):
        object.__setattr__(self, "fairness_mode", FairnessMode(self.fairness_mode))

        if not (isinstance(self.price, (int, float)) and math.isfinite(self.price) and self.price > 0):
            raise InvalidInput(f"price must be a positive number, got {self.price!r}")
        require_finite("down_pct", self.down_pct)
        if not 0 <= self.down_pct <= 1:
            raise InvalidInput(f"down_pct must be between 0 and 1, got {self.down_pct!r}")
        require_finite("rate", self.rate)
        if self.timeline_years <= 0 or int(self.timeline_years) != self.timeline_years:
            raise InvalidInput(
                f"timeline_years must be a positive whole number, got {self.timeline_years!r}"
            )

        for name in (
            "taxes_pct",
            "insurance_annual",
            "rent_monthly",
            "closing_costs",
            "reserves",
            "sale_cost_pct",
            "etf_er_bps",
            "advisor_fee",
            "pm_pct",
            "vacancy_months_10yr",
            "repairs_10yr",
            "warranty_10yr",
            "marginal_tax_rate",
            "pmi_annual_rate",
            "building_pct",
            "dividend_yield",
        ):
            require_non_negative(name, getattr(self, name))

        for name in ("gains_rate", "inflation_rate", "rent_growth", "equity_return"):
            require_finite(name, getattr(self, name))
            if getattr(self, name) <= -1:
                raise InvalidInput(f"{name} must be > -1, got {getattr(self, name)!r}")

        months = self.months
        self._check_series("cpi_series", months + 1)
        self._check_series("equity_monthly_returns", months)
        self._check_series("equity_monthly_dividends", months)
        if self.cpi_series is not None and any(v <= 0 for v in self.cpi_series):
            raise InvalidInput("cpi_series values must be positive")

    def _check_series(self, name: str, required: int) -> None:
        series = getattr(self, name)
        if series is None:
            return
        object.__setattr__(self, name, tuple(float(v) for v in series))
        if len(getattr(self, name)) < required:
            raise InvalidInput(f"{name} needs at least {required} values, got {len(series)}")
        for v in getattr(self, name):
            require_finite(name, v)

    @property
    def months(self) -> int:
        return int(self.timeline_years) * MONTHS_PER_YEAR

    @property
    def down_payment(self) -> float:
        return self.price * self.down_pct

    @property
    def loan_amount(self) -> float:
        return self.price - self.down_payment

    @property
    def total_investment(self) -> float:
        """Cash in at closing: down payment, closing costs and reserves."""
        return self.down_payment + self.closing_costs + self.reserves


@dataclass(frozen=True)
class LedgerEntry:
    """One year of the comparison horizon, in nominal dollars."""

    year: int
    rent_monthly: float
    nominal_cash_flow: float
    principal_paid: float  # Cumulative through year-end
    interest_paid: float  # Cumulative through year-end
    principal_this_year: float
    interest_this_year: float
    loan_balance: float
    pmi_monthly: float
    depreciation: float
    tax_savings: float


@dataclass(frozen=True)
class ResultSet:
    """Aggregated output of one model run."""

    timeline_years: int
    piti: float
    rent_vs_own: float
    appreciation: float
    real_gains: float
    principal_paid: float
    real_principal_paid: float
    cash_flow: float
    real_cash_flow: float
    tax_savings: float
    real_tax_savings: float
    total_real_roi: float
    net_proceeds: float
    total_investment: float
    roi_pct: Optional[float]  # None when nothing was invested
    monthly_irr: Optional[float]  # None when the IRR has no solution
    irr: Optional[float]
    equity_contributions: float
    equity_terminal_wealth: float
    equity_net_gain: float
    ledger: List[LedgerEntry] = field(default_factory=list)


def appreciation_gain(price: float, rate: float, years: int) -> float:
    """Nominal gain in value after compounding appreciation."""
    return price * ((1 + rate) ** years - 1)


def build_ledger(deal: Deal, schedule: AmortizationSchedule) -> List[LedgerEntry]:
    """
    Build one ledger entry per year of the horizon.

    Mortgage insurance is re-evaluated from each year-end balance; interest
    for the year is the change in cumulative interest.
    """
    loan = deal.loan_amount
    building_value = deal.price * deal.building_pct
    property_tax = deal.price * deal.taxes_pct

    ledger = []
    previous = FinancialSummary(principal_paid=0.0, interest_paid=0.0, balance=loan)

    for year in range(1, int(deal.timeline_years) + 1):
        financials = summarize_financials(schedule.rows, year)
        pmi_monthly = mortgage_insurance_monthly(
            loan, financials.balance, deal.price, deal.pmi_annual_rate
        )
        rent = grown_rent(deal.rent_monthly, deal.rent_growth, year)

        nominal_cash_flow = annual_cash_flow(
            CashFlowConfig(
                rent_monthly=rent,
                price=deal.price,
                taxes_pct=deal.taxes_pct,
                insurance_annual=deal.insurance_annual,
                pm_pct=deal.pm_pct,
                vacancy_months_10yr=deal.vacancy_months_10yr,
                repairs_10yr=deal.repairs_10yr,
                warranty_10yr=deal.warranty_10yr,
                pi_monthly=schedule.payment_monthly if year <= deal.term_years else 0.0,
                pmi_monthly=pmi_monthly,
            )
        )

        interest_this_year = financials.interest_paid - previous.interest_paid
        depreciation = depreciation_for_year(building_value, year, deal.cost_segregation)

        ledger.append(
            LedgerEntry(
                year=year,
                rent_monthly=rent,
                nominal_cash_flow=nominal_cash_flow,
                principal_paid=financials.principal_paid,
                interest_paid=financials.interest_paid,
                principal_this_year=financials.principal_paid - previous.principal_paid,
                interest_this_year=interest_this_year,
                loan_balance=financials.balance,
                pmi_monthly=pmi_monthly,
                depreciation=depreciation,
                tax_savings=annual_tax_savings(
                    interest_this_year, property_tax, depreciation, deal.marginal_tax_rate
                ),
            )
        )
        previous = financials

    return ledger


def monthly_cash_flows(ledger: List[LedgerEntry]) -> List[float]:
    """Spread each year's nominal cash flow evenly over its 12 months."""
    return [
        entry.nominal_cash_flow / MONTHS_PER_YEAR
        for entry in ledger
        for _ in range(MONTHS_PER_YEAR)
    ]


def compute_results(deal: Deal) -> ResultSet:
    """
    Run the full model for a deal.

    Args:
        deal: Immutable deal parameters

    Returns:
        A new ResultSet; nothing is retained between calls

    Raises:
        InvalidInput: If the loan terms cannot be amortized or a supplied
            equity series is degenerate
    """
    years = int(deal.timeline_years)
    months = deal.months
    logger.debug(
        f"Computing results: price={deal.price}, down_pct={deal.down_pct}, "
        f"rate={deal.rate}, timeline_years={years}, mode={deal.fairness_mode.value}"
    )

    schedule = amortization_schedule(
        deal.loan_amount, deal.rate / 100, deal.term_years, deal.start_date
    )

    if deal.cpi_series is not None:
        cpi = list(deal.cpi_series[: months + 1])
    else:
        cpi = cpi_series(deal.inflation_rate, months)
    cpi_base = cpi[0]
    cpi_end = cpi[months]

    ledger = build_ledger(deal, schedule)
    final = ledger[-1]

    # === PROPERTY RETURN (today's dollars) ===
    appreciation = appreciation_gain(deal.price, deal.gains_rate, years)
    real_gains = to_real(appreciation, cpi_base, cpi_end)
    real_principal_paid = to_real(final.principal_paid, cpi_base, cpi_end)

    # Each year is deflated at its own year-end index before summing
    real_cash_flow = 0.0
    real_tax_savings = 0.0
    for entry in ledger:
        cpi_year_end = cpi[entry.year * MONTHS_PER_YEAR]
        real_cash_flow += to_real(entry.nominal_cash_flow, cpi_base, cpi_year_end)
        real_tax_savings += to_real(entry.tax_savings, cpi_base, cpi_year_end)

    total_real_roi = real_gains + real_principal_paid + real_cash_flow + real_tax_savings

    sale_price = deal.price + appreciation
    net_proceeds = sale_price - sale_price * deal.sale_cost_pct - final.loan_balance

    total_investment = deal.total_investment
    roi_pct = total_investment_ratio(total_real_roi, total_investment)

    # === IRR on monthly real cash flows ===
    monthly_nominal = monthly_cash_flows(ledger)
    irr_flows = [-total_investment] + monthly_nominal
    irr_flows[-1] += net_proceeds
    real_flows = deflate_series(irr_flows, cpi)

    monthly_irr = None
    try:
        monthly_irr = irr_bisection(real_flows)
    except InvalidInput as e:
        logger.warning(f"IRR undefined for these cash flows: {e}")
    if monthly_irr is None:
        logger.warning("IRR has no solution in the search interval")
    annual_irr = monthly_to_annual_irr(monthly_irr) if monthly_irr is not None else None

    # === EQUITY BENCHMARK ===
    fee_bps = deal.etf_er_bps + deal.advisor_fee * BPS
    returns = (
        list(deal.equity_monthly_returns[:months])
        if deal.equity_monthly_returns is not None
        else monthly_series(deal.equity_return, months)
    )
    dividends = (
        list(deal.equity_monthly_dividends[:months])
        if deal.equity_monthly_dividends is not None
        else monthly_series(deal.dividend_yield, months)
    )
    factors = growth_factors(returns, dividends, cpi_growth(cpi), fee_bps)

    periodic_real = [
        to_real(cf, cpi_base, cpi[t]) for t, cf in enumerate(monthly_nominal, start=1)
    ]
    contributions = contribution_schedule(deal.fairness_mode, total_investment, periodic_real)
    equity_terminal_wealth = terminal_wealth_from_factors(factors, contributions)
    equity_contributions = sum(contributions)

    piti = (
        schedule.payment_monthly
        + deal.price * deal.taxes_pct / MONTHS_PER_YEAR
        + deal.insurance_annual / MONTHS_PER_YEAR
    )

    return ResultSet(
        timeline_years=years,
        piti=piti,
        rent_vs_own=deal.rent_monthly - piti,
        appreciation=appreciation,
        real_gains=real_gains,
        principal_paid=final.principal_paid,
        real_principal_paid=real_principal_paid,
        cash_flow=sum(entry.nominal_cash_flow for entry in ledger),
        real_cash_flow=real_cash_flow,
        tax_savings=sum(entry.tax_savings for entry in ledger),
        real_tax_savings=real_tax_savings,
        total_real_roi=total_real_roi,
        net_proceeds=net_proceeds,
        total_investment=total_investment,
        roi_pct=roi_pct,
        monthly_irr=monthly_irr,
        irr=annual_irr,
        equity_contributions=equity_contributions,
        equity_terminal_wealth=equity_terminal_wealth,
        equity_net_gain=equity_terminal_wealth - equity_contributions,
        ledger=ledger,
    )


def total_investment_ratio(amount: float, total_investment: float) -> Optional[float]:
    """Return amount / investment, or None when nothing was invested."""
    if total_investment <= 0:
        return None
    return amount / total_investment
