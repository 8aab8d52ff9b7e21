"""
数据库模型模块
导出所有表模型和枚举类型
"""

# 用户域模型
from .user import User
from .resume import Resume

# 行业洞察域模型
from .industry_insight import IndustryInsight, DemandLevel, MarketOutlook, REFRESH_INTERVAL

# 面试域模型
from .assessment import Assessment

# 基础模型
from .base import TimestampModel, utc_now, as_utc

__all__ = [
    # 用户域
    "User",
    "Resume",
    # 行业洞察域
    "IndustryInsight", "DemandLevel", "MarketOutlook", "REFRESH_INTERVAL",
    # 面试域
    "Assessment",
    # 基础模型
    "TimestampModel", "utc_now", "as_utc"
]
