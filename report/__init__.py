"""
Report package: render an AnalysisResult as text, Markdown, HTML, CSV or JSON.
"""

from .renderer import render, render_correlations_csv

__all__ = ["render", "render_correlations_csv"]
