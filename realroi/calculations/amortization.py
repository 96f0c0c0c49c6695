"""
Loan Amortization Calculations

Implements the fixed-rate monthly payment, the month-by-month amortization
schedule, and cumulative summaries of a schedule up to a year-end.
"""

from typing import List, Optional
from datetime import date
from dataclasses import dataclass
from dateutil.relativedelta import relativedelta

from realroi.calculations.errors import InvalidInput, require_finite, require_non_negative

# Monthly rate substituted for a zero (or negative) APR. Small enough that the
# payment differs from principal / n only in the fifth significant digit.
ZERO_RATE_GUARD = 1e-7


@dataclass(frozen=True)
class AmortizationRow:
    """One month of a loan schedule."""

    month: int
    payment: float
    interest: float
    principal: float
    balance: float  # Remaining balance after this payment
    date: date


@dataclass(frozen=True)
class AmortizationSchedule:
    """Constant monthly payment plus the full schedule."""

    payment_monthly: float
    rows: List[AmortizationRow]


@dataclass(frozen=True)
class FinancialSummary:
    """Cumulative totals of a schedule as of a year-end."""

    principal_paid: float
    interest_paid: float
    balance: float


def _validate_loan(principal: float, annual_rate: float, term_years: int) -> int:
    require_non_negative("principal", principal)
    require_finite("annual_rate", annual_rate)
    require_finite("term_years", term_years)
    if term_years <= 0 or int(term_years) != term_years:
        raise InvalidInput(f"term_years must be a positive whole number, got {term_years!r}")
    return int(term_years) * 12


def _monthly_rate(annual_rate: float) -> float:
    monthly_rate = annual_rate / 12
    if monthly_rate <= 0:
        monthly_rate = ZERO_RATE_GUARD
    return monthly_rate


def calculate_payment(principal: float, annual_rate: float, term_years: int) -> float:
    """
    Calculate the constant monthly payment of a fixed-rate loan.

    payment = principal * r / (1 - (1 + r) ** -n)

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal (e.g., 0.065 for 6.5%)
        term_years: Loan term in whole years

    Returns:
        Monthly payment amount

    Raises:
        InvalidInput: For negative principal, non-finite rate or bad term
    """
    months = _validate_loan(principal, annual_rate, term_years)
    monthly_rate = _monthly_rate(annual_rate)
    return principal * monthly_rate / (1 - (1 + monthly_rate) ** -months)


def calculate_remaining_balance(
    principal: float,
    annual_rate: float,
    term_years: int,
    payments_completed: int,
) -> float:
    """Calculate remaining loan balance after N payments (closed form)."""
    months = _validate_loan(principal, annual_rate, term_years)
    payments_completed = min(max(payments_completed, 0), months)
    monthly_rate = _monthly_rate(annual_rate)
    payment = calculate_payment(principal, annual_rate, term_years)

    growth = (1 + monthly_rate) ** payments_completed
    balance = principal * growth - payment * ((growth - 1) / monthly_rate)

    return max(0.0, balance)


def amortization_schedule(
    principal: float,
    annual_rate: float,
    term_years: int,
    start_date: Optional[date] = None,
) -> AmortizationSchedule:
    """
    Generate the full month-by-month amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal
        term_years: Loan term in whole years
        start_date: Date of first payment (defaults to today)

    Returns:
        AmortizationSchedule with one row per month of the term
    """
    months = _validate_loan(principal, annual_rate, term_years)
    monthly_rate = _monthly_rate(annual_rate)
    payment = calculate_payment(principal, annual_rate, term_years)

    if start_date is None:
        start_date = date.today()

    rows = []
    balance = principal

    for month in range(1, months + 1):
        interest = balance * monthly_rate
        principal_pmt = payment - interest
        balance = max(0.0, balance - principal_pmt)

        rows.append(
            AmortizationRow(
                month=month,
                payment=payment,
                interest=interest,
                principal=principal_pmt,
                balance=balance,
                date=start_date + relativedelta(months=month - 1),
            )
        )

    return AmortizationSchedule(payment_monthly=payment, rows=rows)


def summarize_financials(rows: List[AmortizationRow], years: int) -> FinancialSummary:
    """
    Sum principal and interest paid through the end of a given year.

    Only the first min(len(rows), years * 12) months are included, so a
    horizon longer than the loan simply stops at the payoff. A zero-month
    window returns zero sums and the first row's balance (0.0 when the
    schedule is empty).
    """
    if years < 0:
        raise InvalidInput(f"years must be >= 0, got {years!r}")

    months = min(len(rows), int(years * 12))

    if months == 0:
        return FinancialSummary(
            principal_paid=0.0,
            interest_paid=0.0,
            balance=rows[0].balance if rows else 0.0,
        )

    window = rows[:months]
    return FinancialSummary(
        principal_paid=sum(row.principal for row in window),
        interest_paid=sum(row.interest for row in window),
        balance=window[-1].balance,
    )


def calculate_total_interest(schedule: AmortizationSchedule) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row.interest for row in schedule.rows)
