"""
IRR and NPV Calculations

Implements IRR by bisection over a bounded rate interval, with a
Newton-Raphson solver for callers that have a good initial guess.
"""

import math
from typing import Optional, Sequence

from realroi.calculations.errors import DidNotConverge, InvalidInput

MAX_ITERATIONS = 100
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.1

BISECTION_LOW = -0.9
BISECTION_HIGH = 5.0
BISECTION_TOLERANCE = 1e-10
BISECTION_MAX_ITERATIONS = 10000


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Periodic discount rate (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    npv = 0.0
    for period, cf in enumerate(cash_flows):
        npv += cf / ((1 + discount_rate) ** period)
    return npv


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    dnpv = 0.0
    for period, cf in enumerate(cash_flows):
        dnpv -= (period * cf) / ((1 + rate) ** (period + 1))
    return dnpv


def _finite_npv(cash_flows: Sequence[float], rate: float) -> Optional[float]:
    """NPV, or None when it cannot be represented as a float."""
    try:
        npv = calculate_npv(cash_flows, rate)
    except (OverflowError, ZeroDivisionError):
        return None
    return npv if math.isfinite(npv) else None


def _validate_cash_flows(cash_flows: Sequence[float]) -> None:
    if len(cash_flows) < 2:
        raise InvalidInput("At least 2 cash flows required")

    if any(not math.isfinite(cf) for cf in cash_flows):
        raise InvalidInput("Cash flows must be finite numbers")

    has_positive = any(cf > 0 for cf in cash_flows)
    has_negative = any(cf < 0 for cf in cash_flows)

    if not has_positive or not has_negative:
        raise InvalidInput("Cash flows must contain both positive and negative values")


def irr_bisection(
    cash_flows: Sequence[float],
    low: float = BISECTION_LOW,
    high: float = BISECTION_HIGH,
    tol: float = BISECTION_TOLERANCE,
    max_iter: int = BISECTION_MAX_ITERATIONS,
) -> Optional[float]:
    """
    Find the periodic IRR by bisection on [low, high].

    Returns:
        The periodic rate, or None when NPV has the same sign at both ends
        of the interval (no bracketed root)
    """
    _validate_cash_flows(cash_flows)

    # Long series overflow at the extremes; pull such bounds toward zero
    f_low = _finite_npv(cash_flows, low)
    while f_low is None:
        low /= 2
        f_low = _finite_npv(cash_flows, low)

    f_high = _finite_npv(cash_flows, high)
    while f_high is None:
        high /= 2
        f_high = _finite_npv(cash_flows, high)

    if f_low == 0:
        return low
    if f_high == 0:
        return high
    if f_low * f_high > 0:
        return None

    for _ in range(max_iter):
        mid = (low + high) / 2
        f_mid = calculate_npv(cash_flows, mid)

        if f_mid == 0 or (high - low) / 2 < tol:
            return mid

        if f_low * f_mid < 0:
            high = mid
        else:
            low, f_low = mid, f_mid

    return None


def calculate_irr(cash_flows: Sequence[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        Periodic IRR as decimal (e.g., 0.15 for 15%)

    Raises:
        InvalidInput: If the cash flows cannot have an IRR, or guess <= -1
        DidNotConverge: If the iteration fails to settle on a root
    """
    _validate_cash_flows(cash_flows)
    if not math.isfinite(guess) or guess <= -1:
        raise InvalidInput(f"IRR guess must be a finite rate above -1, got {guess!r}")

    rate = guess

    for _ in range(MAX_ITERATIONS):
        try:
            npv = calculate_npv(cash_flows, rate)
            dnpv = _npv_derivative(cash_flows, rate)
        except (OverflowError, ZeroDivisionError):
            raise DidNotConverge(f"IRR calculation diverged from guess {guess}")

        if not (math.isfinite(npv) and math.isfinite(dnpv)):
            raise DidNotConverge(f"IRR calculation diverged from guess {guess}")

        if abs(dnpv) < TOLERANCE:
            raise DidNotConverge("IRR calculation failed: derivative too small")

        new_rate = rate - npv / dnpv

        if not math.isfinite(new_rate) or new_rate <= -1:
            raise DidNotConverge(f"IRR calculation diverged from guess {guess}")

        if abs(new_rate - rate) < TOLERANCE:
            return new_rate

        rate = new_rate

    raise DidNotConverge("IRR calculation did not converge")


def irr(cash_flows: Sequence[float], guess: Optional[float] = None) -> float:
    """
    Calculate the periodic IRR, trying bisection before Newton-Raphson.

    Raises:
        DidNotConverge: If neither solver finds a root
    """
    if guess is None:
        rate = irr_bisection(cash_flows)
        if rate is not None:
            return rate
        guess = DEFAULT_GUESS
    return calculate_irr(cash_flows, guess)


def annualize(periodic_rate: float, periods_per_year: int = 12) -> float:
    """Convert a periodic rate to an annual rate: (1 + r) ** k - 1."""
    try:
        return ((1 + periodic_rate) ** periods_per_year) - 1
    except OverflowError:
        raise InvalidInput(
            f"Rate {periodic_rate} compounded {periods_per_year} times is out of range"
        )


def calculate_multiple(cash_flows: Sequence[float]) -> float:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return)
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        raise InvalidInput("No investment (outflows) found")

    return total_inflows / total_outflows


def calculate_profit(cash_flows: Sequence[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)


def monthly_to_annual_irr(monthly_irr: float) -> float:
    """Convert monthly IRR to annual IRR."""
    return annualize(monthly_irr, 12)

