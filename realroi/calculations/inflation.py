"""
Inflation Adjustment

Converts nominal amounts into real (today's dollars) amounts using a
consumer-price-index series. Element 0 of a series is the base period;
element m is the index at the end of month m.
"""

from typing import List, Sequence

from realroi.calculations.errors import InvalidInput, require_finite

DEFAULT_CPI_BASE = 100.0


def to_real(nominal: float, cpi_base: float, cpi_now: float) -> float:
    """
    Deflate a nominal amount to base-period dollars.

    Args:
        nominal: Amount in dollars of the period indexed by cpi_now
        cpi_base: Index value of the base period
        cpi_now: Index value of the period the amount was realized in

    Returns:
        nominal * cpi_base / cpi_now
    """
    if not cpi_now > 0 or not cpi_base > 0:
        raise InvalidInput(f"CPI values must be positive, got {cpi_base!r} and {cpi_now!r}")
    return nominal * (cpi_base / cpi_now)


def monthly_rate(annual_rate: float) -> float:
    """Convert an annual compounding rate to the equivalent monthly rate."""
    return (1 + annual_rate) ** (1 / 12) - 1


def cpi_series(
    inflation_rate: float, months: int, base: float = DEFAULT_CPI_BASE
) -> List[float]:
    """
    Build a monthly CPI series compounding at an annual inflation rate.

    Returns months + 1 values so the series covers both the base period and
    the end of the final month.
    """
    require_finite("inflation_rate", inflation_rate)
    if inflation_rate <= -1:
        raise InvalidInput(f"inflation_rate must be > -1, got {inflation_rate!r}")
    if months < 0:
        raise InvalidInput(f"months must be >= 0, got {months!r}")

    growth = 1 + monthly_rate(inflation_rate)
    series = [base]
    for _ in range(months):
        series.append(series[-1] * growth)
    return series


def cpi_growth(series: Sequence[float]) -> List[float]:
    """Period-over-period inflation rates of a CPI series."""
    return [current / previous - 1 for previous, current in zip(series, series[1:])]


def deflate_series(flows: Sequence[float], series: Sequence[float]) -> List[float]:
    """
    Deflate each flow by the index of its own period.

    Flows past the end of the series use the last index value.
    """
    if not series:
        raise InvalidInput("CPI series is empty")

    base = series[0]
    last = series[-1]
    return [
        to_real(cf, base, series[t] if t < len(series) else last)
        for t, cf in enumerate(flows)
    ]
