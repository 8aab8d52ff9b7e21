"""
行业洞察 Repository
提供 industry_insights 的查询、懒创建和刷新写入
"""

from datetime import datetime
from typing import List, Optional, Dict, Any

from sqlmodel import Session, select

from sensai.models.base import utc_now
from sensai.models.industry_insight import (
    IndustryInsight,
    DemandLevel,
    MarketOutlook,
    next_update_from
)


class IndustryInsightRepository:
    """
    行业洞察数据访问对象

    create_default 和 apply_refresh 只 flush 不 commit，
    调用方负责在自己的事务里提交或回滚
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_industry(self, industry: str) -> Optional[IndustryInsight]:
        """
        根据行业标签获取洞察

        Args:
            industry: 行业标签

        Returns:
            IndustryInsight 对象，不存在则返回 None
        """
        statement = select(IndustryInsight).where(IndustryInsight.industry == industry)
        return self.session.exec(statement).first()

    def list_industries(self) -> List[str]:
        """
        获取所有已登记的行业标签（按标签排序）

        Returns:
            行业标签列表
        """
        statement = select(IndustryInsight.industry).order_by(IndustryInsight.industry)
        return list(self.session.exec(statement).all())

    def create_default(self, industry: str, now: Optional[datetime] = None) -> IndustryInsight:
        """
        以占位默认值创建行业洞察

        默认值：空列表、增长率 0、需求 MEDIUM、前景 NEUTRAL、下次更新为 7 天后。
        行业标签重复时 flush 会抛出 IntegrityError，由调用方处理。

        Args:
            industry: 行业标签
            now: 当前时间（测试用，可选）

        Returns:
            新建的 IndustryInsight 对象
        """
        now = now or utc_now()
        insight = IndustryInsight(
            industry=industry,
            salary_ranges=[],
            growth_rate=0.0,
            demand_level=DemandLevel.MEDIUM,
            top_skills=[],
            market_outlook=MarketOutlook.NEUTRAL,
            key_trends=[],
            recommended_skills=[],
            last_updated=now,
            next_update=next_update_from(now)
        )
        self.session.add(insight)
        self.session.flush()
        return insight

    def apply_refresh(
        self,
        insight: IndustryInsight,
        data: Dict[str, Any],
        now: Optional[datetime] = None
    ) -> IndustryInsight:
        """
        用刷新结果整体覆盖洞察字段，并更新两个时间戳

        Args:
            insight: 当前事务内加载的洞察对象
            data: 已校验的字段字典（键为模型字段名）
            now: 当前时间（测试用，可选）

        Returns:
            更新后的 IndustryInsight 对象
        """
        now = now or utc_now()
        insight.salary_ranges = data["salary_ranges"]
        insight.growth_rate = data["growth_rate"]
        insight.demand_level = data["demand_level"]
        insight.top_skills = data["top_skills"]
        insight.market_outlook = data["market_outlook"]
        insight.key_trends = data["key_trends"]
        insight.recommended_skills = data["recommended_skills"]
        insight.last_updated = now
        insight.next_update = next_update_from(now)
        self.session.add(insight)
        self.session.flush()
        return insight
