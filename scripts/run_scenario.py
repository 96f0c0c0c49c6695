"""
Run the real ROI model for a deal and print the results.
Defaults to the $450k single-family rental used in the regression tests.
"""
import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from realroi.calculations.errors import CalculationError
from realroi.calculations.model import Deal, compute_results


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--price", type=float, default=450000)
    parser.add_argument("--down-pct", type=float, default=0.20)
    parser.add_argument("--rate", type=float, default=6.5, help="APR in percent")
    parser.add_argument("--rent", type=float, default=2600)
    parser.add_argument("--years", type=int, default=10)
    parser.add_argument("--mode", choices=["matched", "initial"], default="matched")
    parser.add_argument("--cost-seg", action="store_true")
    args = parser.parse_args()

    try:
        deal = Deal(
            price=args.price,
            down_pct=args.down_pct,
            rate=args.rate,
            rent_monthly=args.rent,
            timeline_years=args.years,
            fairness_mode=args.mode,
            cost_segregation=args.cost_seg,
        )
        r = compute_results(deal)
    except CalculationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Deal: ${deal.price:,.0f}, {deal.down_pct:.0%} down, {deal.rate}% APR, "
          f"{deal.timeline_years} years")
    print(f"  Monthly PITI:        ${r.piti:,.0f}")
    print(f"  Rent vs own:         ${r.rent_vs_own:,.0f}/mo")
    print("\nToday's dollars:")
    print(f"  Gains:               ${r.real_gains:,.0f}")
    print(f"  Principal paid:      ${r.real_principal_paid:,.0f}")
    print(f"  Cash flow:           ${r.real_cash_flow:,.0f}")
    print(f"  Tax savings:         ${r.real_tax_savings:,.0f}")
    print(f"  Total real ROI:      ${r.total_real_roi:,.0f}")
    print(f"  Net sale proceeds:   ${r.net_proceeds:,.0f} (nominal)")
    print(f"  Invested:            ${r.total_investment:,.0f}")
    if r.roi_pct is not None:
        print(f"  Real ROI:            {r.roi_pct:.1%}")
    print(f"  Real IRR:            {r.irr:.2%}" if r.irr is not None else "  Real IRR:            n/a")
    print(f"\nEquities ({deal.fairness_mode.value}): ${r.equity_terminal_wealth:,.0f}")

    print("\nYear   Cash flow   Tax savings     Balance")
    for entry in r.ledger:
        print(f"{entry.year:>4} {entry.nominal_cash_flow:>11,.0f} {entry.tax_savings:>13,.0f} "
              f"{entry.loan_balance:>11,.0f}")


if __name__ == "__main__":
    main()
