"""
Estimate package: velocity profiling, complexity analysis and Fibonacci story point estimates.
"""

from .estimator import StoryPointEstimator, select_unestimated
from .prioritize import prioritize
from .synthesizer import confidence_label, synthesize_estimate

__all__ = ["StoryPointEstimator", "select_unestimated", "prioritize", "confidence_label", "synthesize_estimate"]
