"""
Investments Package

Investor portfolios and land acquisition analysis.
"""

from estate_office.investments.land import calculate_feasibility_score, land_acquisition_stats
from estate_office.investments.portfolio import PortfolioService

__all__ = [
    "PortfolioService",
    "calculate_feasibility_score",
    "land_acquisition_stats",
]
