"""
Financial Calculation Engine

Core calculation modules for the real estate versus equities comparison.
All functions are pure: they take plain numbers and return new values.
"""

from realroi.calculations import amortization, benchmark, cashflow, inflation, irr, model, tax

__all__ = ["amortization", "benchmark", "cashflow", "inflation", "irr", "model", "tax"]
