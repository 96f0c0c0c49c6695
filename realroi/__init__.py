"""
RealROI - real estate versus equities return calculator.
"""

__version__ = "0.1.0"
