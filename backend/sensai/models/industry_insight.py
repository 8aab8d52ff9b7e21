"""
行业洞察域模型 - 行业洞察表
按行业标签共享，同一行业的所有用户看到同一行
"""

from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any

from sqlmodel import Field, Column, JSON

from enum import Enum

from .base import TimestampModel, utc_now

# 刷新周期：懒创建和每次刷新后都把 next_update 设为 7 天之后
REFRESH_INTERVAL = timedelta(days=7)


class DemandLevel(str, Enum):
    """需求水平枚举"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class MarketOutlook(str, Enum):
    """市场前景枚举"""
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


def next_update_from(moment: datetime) -> datetime:
    return moment + REFRESH_INTERVAL


class IndustryInsight(TimestampModel, table=True):
    """
    行业洞察表
    industry 唯一约束保证每个行业只有一行，并发创建时由数据库裁决
    """
    __tablename__ = "industry_insights"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 行业标签，唯一
    industry: str = Field(unique=True, index=True, nullable=False)

    # 薪资区间：[{"role", "min", "max", "median", "location"}]
    salary_ranges: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    # 增长率（百分比）
    growth_rate: float = Field(default=0.0, nullable=False)

    demand_level: DemandLevel = Field(default=DemandLevel.MEDIUM, nullable=False)

    top_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    market_outlook: MarketOutlook = Field(default=MarketOutlook.NEUTRAL, nullable=False)

    key_trends: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    recommended_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    last_updated: datetime = Field(default_factory=utc_now, nullable=False)

    next_update: datetime = Field(
        default_factory=lambda: next_update_from(utc_now()),
        nullable=False
    )
