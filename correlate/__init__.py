"""
Correlate package: expose linker functionality for linking source-control activity to issues.
"""

from .linker import correlate_issue, correlate_issues

__all__ = ["correlate_issue", "correlate_issues"]
