"""
定时任务模块
"""

from .insight_refresh import InsightRefreshJob, RefreshOutcome

__all__ = [
    "InsightRefreshJob",
    "RefreshOutcome"
]
