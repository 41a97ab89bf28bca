"""
Insights package: workload recommendations from team summaries and anomaly flags from correlations.
"""

from .correlation import generate_correlation_insights
from .team import build_team_performance, generate_workload_recommendations

__all__ = ["build_team_performance", "generate_workload_recommendations", "generate_correlation_insights"]
