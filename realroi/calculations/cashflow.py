"""
Cash Flow Calculations

Composes a rental property's annual net operating cash flow from rent,
financing, and operating expenses.
"""

from dataclasses import dataclass

from realroi.calculations.errors import require_finite

# Mortgage insurance is charged while the loan exceeds this share of value
PMI_LTV_THRESHOLD = 0.80


@dataclass(frozen=True)
class CashFlowConfig:
    """Inputs for one year of property operations."""

    rent_monthly: float
    price: float
    taxes_pct: float  # Annual property tax as fraction of price
    insurance_annual: float
    pm_pct: float  # Property management fee as fraction of rent
    vacancy_months_10yr: float  # Months of vacancy per 10 years
    repairs_10yr: float  # Repair reserve per 10 years
    warranty_10yr: float  # Home warranty cost per 10 years
    pi_monthly: float  # Principal and interest payment
    pmi_monthly: float = 0.0


@dataclass(frozen=True)
class CashFlowBreakdown:
    """Annual line items of the cash flow."""

    rent: float
    financing: float
    taxes: float
    insurance: float
    management: float
    vacancy: float
    repairs: float
    warranty: float
    mortgage_insurance: float

    @property
    def expenses(self) -> float:
        return (
            self.financing
            + self.taxes
            + self.insurance
            + self.management
            + self.vacancy
            + self.repairs
            + self.warranty
            + self.mortgage_insurance
        )

    @property
    def net(self) -> float:
        return self.rent - self.expenses


def cash_flow_breakdown(config: CashFlowConfig) -> CashFlowBreakdown:
    """
    Break one year of operations into income and expense line items.

    Vacancy, repairs, and warranty are quoted per 10 years and spread
    evenly across each year.
    """
    rent_annual = config.rent_monthly * 12

    return CashFlowBreakdown(
        rent=rent_annual,
        financing=config.pi_monthly * 12,
        taxes=config.price * config.taxes_pct,
        insurance=config.insurance_annual,
        management=rent_annual * config.pm_pct,
        vacancy=(config.vacancy_months_10yr / 10) * config.rent_monthly,
        repairs=config.repairs_10yr / 10,
        warranty=config.warranty_10yr / 10,
        mortgage_insurance=config.pmi_monthly * 12,
    )


def annual_cash_flow(config: CashFlowConfig) -> float:
    """
    Calculate net annual operating cash flow.

    rent - (financing + taxes + insurance + management + vacancy
    + repairs + warranty + mortgage insurance)
    """
    return cash_flow_breakdown(config).net


def mortgage_insurance_monthly(
    loan: float,
    balance: float,
    property_value: float,
    annual_rate: float,
) -> float:
    """
    Calculate the monthly mortgage insurance premium.

    The premium is annual_rate * original loan / 12, charged only while the
    current balance exceeds 80% of the property value. Callers recompute it
    each period from the then-current balance.
    """
    require_finite("balance", balance)
    if property_value <= 0:
        return 0.0

    ltv = balance / property_value
    if ltv <= PMI_LTV_THRESHOLD:
        return 0.0
    return loan * annual_rate / 12


def grown_rent(rent_monthly: float, rent_growth: float, year: int) -> float:
    """Monthly rent in a given year (1-based) with annual step growth."""
    return rent_monthly * (1 + rent_growth) ** (year - 1)
