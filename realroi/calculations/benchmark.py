"""
Equity Benchmark Projection

Grows an alternative stock-market investment alongside the property so both
can be compared in today's dollars.

Contribution policies:
1. Initial-only - the property's initial outlay is invested at period 0
2. Matched - the initial outlay plus each period's real property cash flow,
   added to (or withdrawn from) the position as it occurs
"""

from enum import Enum
from typing import List, Sequence

import numpy as np

from realroi.calculations.errors import InvalidInput, require_non_negative
from realroi.calculations.inflation import monthly_rate

BPS = 10000
PERIODS_PER_YEAR = 12


class FairnessMode(str, Enum):
    """How capital is deployed into the benchmark."""

    INITIAL = "initial"
    MATCHED = "matched"


def monthly_series(annual_rate: float, months: int) -> List[float]:
    """Flat monthly series equivalent to a compounding annual rate."""
    return [monthly_rate(annual_rate)] * months


def growth_factors(
    returns: Sequence[float],
    dividends: Sequence[float],
    cpi_growth: Sequence[float],
    fee_bps_per_year: float,
) -> np.ndarray:
    """
    Calculate the real growth factor of each period.

    factor = (1 + return + dividend) * (1 - fee) / (1 + inflation)
    where fee = fee_bps_per_year / 10000 / 12.

    Args:
        returns: Periodic price returns
        dividends: Periodic dividend yields
        cpi_growth: Periodic inflation rates
        fee_bps_per_year: Annual fee drag in basis points

    Returns:
        One non-negative factor per period

    Raises:
        InvalidInput: On mismatched lengths, non-finite values, a period
            losing more than 100%, inflation <= -100%, or a fee above 100%
    """
    require_non_negative("fee_bps_per_year", fee_bps_per_year)
    if not len(returns) == len(dividends) == len(cpi_growth):
        raise InvalidInput(
            "returns, dividends and cpi_growth must have the same length, got "
            f"{len(returns)}, {len(dividends)} and {len(cpi_growth)}"
        )

    fee = fee_bps_per_year / BPS / PERIODS_PER_YEAR
    if fee > 1:
        raise InvalidInput(f"fee_bps_per_year exceeds 100% per period: {fee_bps_per_year!r}")

    gross = 1 + np.asarray(returns, dtype=float) + np.asarray(dividends, dtype=float)
    inflation = 1 + np.asarray(cpi_growth, dtype=float)

    if not (np.all(np.isfinite(gross)) and np.all(np.isfinite(inflation))):
        raise InvalidInput("returns, dividends and cpi_growth must be finite numbers")
    if np.any(gross < 0):
        raise InvalidInput("return + dividend cannot lose more than 100% in a period")
    if np.any(inflation <= 0):
        raise InvalidInput("cpi_growth must be greater than -1")

    return gross * (1 - fee) / inflation


def real_equity_curve(
    returns: Sequence[float],
    dividends: Sequence[float],
    cpi_growth: Sequence[float],
    fee_bps_per_year: float,
) -> List[float]:
    """
    Calculate the cumulative real growth factor of an equity position.

    Returns:
        Growth factors with curve[0] == 1.0 and len(returns) + 1 entries
    """
    factors = growth_factors(returns, dividends, cpi_growth, fee_bps_per_year)
    curve = np.concatenate(([1.0], np.cumprod(factors)))
    return curve.tolist()


def terminal_wealth_from_factors(
    factors: Sequence[float], cash_flows_real: Sequence[float]
) -> float:
    """
    Grow every real contribution to the horizon and sum them.

    A contribution at t grows by the product of factors t..T-1, so a flow
    made after a total loss still keeps its value.

    Contributions dated past the horizon (t > len(factors)) are ignored.
    """
    factors = np.asarray(factors, dtype=float)
    growth_to_end = np.concatenate((np.cumprod(factors[::-1])[::-1], [1.0]))
    flows = np.asarray(cash_flows_real[: len(growth_to_end)], dtype=float)
    return float(np.dot(flows, growth_to_end[: len(flows)]))


def terminal_wealth_from_cash_flows(
    curve: Sequence[float], cash_flows_real: Sequence[float]
) -> float:
    """
    Grow every real contribution to the end of the curve and sum them.

    wealth = sum(flow[t] * curve[T] / curve[t])

    Contributions dated past the end of the curve are ignored.

    Raises:
        InvalidInput: If the curve reaches zero before its last point; use
            terminal_wealth_from_factors for such series
    """
    if len(curve) == 0:
        return 0.0

    curve = np.asarray(curve, dtype=float)
    if np.any(curve[:-1] == 0):
        raise InvalidInput("curve reaches zero before its end; growth after it is unknown")
    return terminal_wealth_from_factors(curve[1:] / curve[:-1], cash_flows_real)


def contribution_schedule(
    policy: FairnessMode,
    initial: float,
    periodic_real_flows: Sequence[float],
) -> List[float]:
    """
    Build the benchmark's real contribution for every period.

    Period 0 receives the initial outlay. Under the matched policy each
    property cash flow realized at the end of period t (t = 1..N) is
    contributed at t; negative flows are withdrawals.

    Returns:
        N + 1 contributions
    """
    policy = FairnessMode(policy)
    flows = [0.0] * (len(periodic_real_flows) + 1)
    flows[0] = initial

    if policy is FairnessMode.MATCHED:
        for t, cf in enumerate(periodic_real_flows, start=1):
            flows[t] += cf

    return flows


def project_benchmark(
    policy: FairnessMode,
    initial: float,
    periodic_real_flows: Sequence[float],
    returns: Sequence[float],
    dividends: Sequence[float],
    cpi_growth: Sequence[float],
    fee_bps_per_year: float,
) -> float:
    """Terminal real wealth of the benchmark under a contribution policy."""
    factors = growth_factors(returns, dividends, cpi_growth, fee_bps_per_year)
    contributions = contribution_schedule(policy, initial, periodic_real_flows)
    return terminal_wealth_from_factors(factors, contributions)
