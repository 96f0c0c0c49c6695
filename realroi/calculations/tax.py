"""
Tax Effect Calculations

Depreciation, yearly tax savings, and the year-1 usability of a cost
segregation study for a residential rental.

Illustrative only. Rules on bonus depreciation, passive losses and
recapture depend on the taxpayer; this is not tax advice.
"""

from dataclasses import dataclass
from typing import Optional

from realroi.calculations.errors import require_non_negative

# Straight-line recovery period for residential rental property (years)
RESIDENTIAL_RECOVERY_YEARS = 27.5

# Share of building value written off in year 1 with cost segregation
COST_SEG_YEAR1_PCT = 0.20

# Passive activity special allowance, phased out between the MAGI bounds
SPECIAL_ALLOWANCE_MAX = 25_000
PHASE_OUT_START = 100_000
PHASE_OUT_END = 150_000
PHASE_OUT_RATE = 0.5


def depreciation_for_year(
    building_value: float, year: int, cost_segregation: bool = False
) -> float:
    """
    Calculate depreciation deducted in a given year (1-based).

    With cost segregation, year 1 deducts 20% of the building value;
    otherwise the building is depreciated straight-line over 27.5 years.
    """
    if cost_segregation and year == 1:
        return building_value * COST_SEG_YEAR1_PCT
    return building_value / RESIDENTIAL_RECOVERY_YEARS


def annual_tax_savings(
    interest: float,
    property_tax: float,
    depreciation: float,
    marginal_rate: float,
) -> float:
    """Tax saved by deducting interest, property tax and depreciation."""
    return (interest + property_tax + depreciation) * marginal_rate


def special_allowance(magi: float) -> float:
    """
    Calculate the $25k passive loss allowance for a given MAGI.

    Full below $100k, reduced by 50 cents per dollar above it, zero at $150k.
    """
    if magi <= PHASE_OUT_START:
        return float(SPECIAL_ALLOWANCE_MAX)
    if magi >= PHASE_OUT_END:
        return 0.0
    return max(0.0, SPECIAL_ALLOWANCE_MAX - PHASE_OUT_RATE * (magi - PHASE_OUT_START))


@dataclass(frozen=True)
class CostSegregationInputs:
    """Inputs for the year-1 cost segregation estimate."""

    price: float
    land_pct: float = 0.20
    reclass_pct: float = 0.25  # Share of improvements reclassed to 5/7/15-year
    bonus_pct: float = 1.0  # Bonus depreciation on the reclassed share
    tax_bracket: float = 0.24
    magi: float = 120_000
    other_passive_income: float = 0.0
    study_fee: float = 9_000
    reps_or_str: bool = False  # Real estate professional or short-term rental


@dataclass(frozen=True)
class CostSegregationResult:
    """Year-1 deduction available, usable, and its tax value."""

    improvement_basis: float
    bonus_eligible: float
    remaining_improvements: float
    straight_line_year1: float
    special_allowance: float
    immediate_available: float
    immediate_cap: Optional[float]  # None means no cap
    immediate_used: float
    tax_savings: float
    breakeven_deduction: Optional[float]


def cost_segregation_usability(inputs: CostSegregationInputs) -> CostSegregationResult:
    """
    Estimate the deduction a cost segregation study frees up in year 1.

    The reclassed improvements take bonus depreciation; the remainder takes
    one year of straight-line. Usable deductions are capped by the special
    allowance plus other passive income, unless the owner qualifies as
    REPS/STR.
    """
    require_non_negative("price", inputs.price)

    improvement_basis = inputs.price * (1 - inputs.land_pct)
    reclassed = improvement_basis * inputs.reclass_pct
    bonus_eligible = reclassed * inputs.bonus_pct
    remaining = improvement_basis - reclassed
    sl_year1 = remaining / RESIDENTIAL_RECOVERY_YEARS

    allowance = special_allowance(inputs.magi)
    available = bonus_eligible + sl_year1

    if inputs.reps_or_str:
        cap = None
        used = available
    else:
        cap = allowance + inputs.other_passive_income
        used = min(available, cap)

    breakeven = inputs.study_fee / inputs.tax_bracket if inputs.tax_bracket > 0 else None

    return CostSegregationResult(
        improvement_basis=improvement_basis,
        bonus_eligible=bonus_eligible,
        remaining_improvements=remaining,
        straight_line_year1=sl_year1,
        special_allowance=allowance,
        immediate_available=available,
        immediate_cap=cap,
        immediate_used=used,
        tax_savings=used * inputs.tax_bracket,
        breakeven_deduction=breakeven,
    )
