"""
Financial calculation API endpoints.

These endpoints accept deal inputs and return calculated results.
Used by the browser calculator for recalculation on every input change.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional

import numpy as np
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from realroi.calculations import amortization, benchmark, inflation, irr, tax
from realroi.calculations.benchmark import FairnessMode
from realroi.calculations.errors import CalculationError, DidNotConverge
from realroi.calculations.model import Deal, compute_results

logger = logging.getLogger(__name__)

router = APIRouter()

# Request limits on schedule length
MAX_TERM_YEARS = 50
MAX_TIMELINE_YEARS = 100


def _raise_http(e: CalculationError) -> None:
    """Translate a calculation error into an HTTP error response."""
    logger.warning(f"Rejected calculation request: {e}")
    if isinstance(e, DidNotConverge):
        raise HTTPException(status_code=400, detail=str(e))
    raise HTTPException(status_code=422, detail=str(e))


class DealInput(BaseModel):
    """Input for the full real ROI model."""

    # Property & loan
    price: float = Field(..., gt=0)
    down_pct: float = Field(0.20, ge=0, le=1)
    rate: float = 6.5  # APR in percent
    term_years: int = Field(30, gt=0, le=MAX_TERM_YEARS)
    taxes_pct: float = 0.017
    insurance_annual: float = 1800
    rent_monthly: float = 2600
    closing_costs: float = 8000
    reserves: float = 10000

    # Assumptions
    gains_rate: float = 0.055
    timeline_years: int = Field(10, gt=0, le=MAX_TIMELINE_YEARS)
    inflation_rate: float = 0.03
    sale_cost_pct: float = 0.03
    cost_segregation: bool = False
    rent_growth: float = 0.0

    # Operating assumptions
    pm_pct: float = 0.08
    vacancy_months_10yr: float = 5
    repairs_10yr: float = 15000
    warranty_10yr: float = 5000
    marginal_tax_rate: float = 0.32
    pmi_annual_rate: float = 0.006
    building_pct: float = 0.80

    # Equities comparison
    fairness_mode: FairnessMode = FairnessMode.MATCHED
    etf_er_bps: float = 3
    advisor_fee: float = 0.01
    equity_return: float = 0.08
    dividend_yield: float = 0.0

    # Optional external series
    cpi_series: Optional[List[float]] = None
    equity_monthly_returns: Optional[List[float]] = None
    equity_monthly_dividends: Optional[List[float]] = None

    start_date: Optional[date] = None


class ResultResponse(BaseModel):
    """Aggregated results, in today's dollars unless named nominal."""

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
    roi_pct: Optional[float] = None
    monthly_irr: Optional[float] = None
    irr: Optional[float] = None
    equity_contributions: float
    equity_terminal_wealth: float
    equity_net_gain: float
    ledger: List[dict]


@router.post("/results", response_model=ResultResponse)
async def calculate_results(inputs: DealInput):
    """Run the full property versus equities model."""
    try:
        deal = Deal(**inputs.model_dump())
        results = compute_results(deal)
    except CalculationError as e:
        _raise_http(e)

    return asdict(results)


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float  # Decimal, e.g. 0.065
    term_years: int = Field(..., le=MAX_TERM_YEARS)
    start_date: Optional[date] = None
    summary_years: Optional[int] = None
    payments_completed: Optional[int] = Field(None, ge=0)


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    try:
        schedule = amortization.amortization_schedule(
            principal=inputs.principal,
            annual_rate=inputs.annual_rate,
            term_years=inputs.term_years,
            start_date=inputs.start_date,
        )
        summary = None
        if inputs.summary_years is not None:
            summary = asdict(
                amortization.summarize_financials(schedule.rows, inputs.summary_years)
            )
        remaining_balance = None
        if inputs.payments_completed is not None:
            remaining_balance = amortization.calculate_remaining_balance(
                inputs.principal,
                inputs.annual_rate,
                inputs.term_years,
                inputs.payments_completed,
            )
    except CalculationError as e:
        _raise_http(e)

    rows = []
    for row in schedule.rows:
        record = asdict(row)
        record["date"] = row.date.isoformat()
        rows.append(record)

    return {
        "payment_monthly": schedule.payment_monthly,
        "schedule": rows,
        "total_interest": amortization.calculate_total_interest(schedule),
        "total_principal": sum(row.principal for row in schedule.rows),
        "summary": summary,
        "remaining_balance": remaining_balance,
    }


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    guess: Optional[float] = Field(None, gt=-1)
    periods_per_year: int = Field(1, gt=0, le=365)


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    annual_irr: float
    multiple: float
    profit: float
    npv_at_10_percent: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given periodic cash flows."""
    try:
        irr_val = irr.irr(inputs.cash_flows, inputs.guess)
        annual_irr = irr.annualize(irr_val, inputs.periods_per_year)
        multiple = irr.calculate_multiple(inputs.cash_flows)
    except CalculationError as e:
        _raise_http(e)

    return IRRResponse(
        irr=irr_val,
        annual_irr=annual_irr,
        multiple=multiple,
        profit=irr.calculate_profit(inputs.cash_flows),
        npv_at_10_percent=irr.calculate_npv(inputs.cash_flows, 0.10),
    )


class RealInput(BaseModel):
    """Input for nominal to real conversion."""

    nominal: float
    cpi_base: float
    cpi_now: float


@router.post("/real")
async def calculate_real(inputs: RealInput):
    """Convert a nominal amount to base-period dollars."""
    try:
        real = inflation.to_real(inputs.nominal, inputs.cpi_base, inputs.cpi_now)
    except CalculationError as e:
        _raise_http(e)

    return {"real": real}


class BenchmarkInput(BaseModel):
    """Input for equity benchmark projection."""

    returns: List[float]
    dividends: List[float]
    cpi_growth: List[float]
    fee_bps_per_year: float = 0.0
    cash_flows_real: List[float]


@router.post("/benchmark")
async def calculate_benchmark(inputs: BenchmarkInput):
    """Project real terminal wealth of an equity position."""
    try:
        factors = benchmark.growth_factors(
            inputs.returns, inputs.dividends, inputs.cpi_growth, inputs.fee_bps_per_year
        )
    except CalculationError as e:
        _raise_http(e)

    return {
        "curve": [1.0] + np.cumprod(factors).tolist(),
        "terminal_wealth": benchmark.terminal_wealth_from_factors(
            factors, inputs.cash_flows_real
        ),
    }


class CostSegregationInput(BaseModel):
    """Input for the year-1 cost segregation estimate."""

    price: float = Field(..., gt=0)
    land_pct: float = Field(0.20, ge=0, le=1)
    reclass_pct: float = Field(0.25, ge=0, le=1)
    bonus_pct: float = Field(1.0, ge=0, le=1)
    tax_bracket: float = Field(0.24, ge=0, le=1)
    magi: float = 120_000
    other_passive_income: float = 0.0
    study_fee: float = 9_000
    reps_or_str: bool = False


@router.post("/cost-segregation")
async def calculate_cost_segregation(inputs: CostSegregationInput):
    """Estimate the deduction a cost segregation study makes usable in year 1."""
    try:
        result = tax.cost_segregation_usability(
            tax.CostSegregationInputs(**inputs.model_dump())
        )
    except CalculationError as e:
        _raise_http(e)

    return asdict(result)
