"""
用户域模型 - 用户表
每个外部身份对应一行，首次认证访问时创建
"""

from typing import Optional, List

from sqlmodel import Field, Column, JSON
from sqlalchemy import Text

from .base import TimestampModel


class User(TimestampModel, table=True):
    """
    用户表
    external_id 是身份提供方给出的稳定 ID，是所有操作的信任锚点
    """
    __tablename__ = "users"

    # 主键
    id: Optional[int] = Field(default=None, primary_key=True)

    # 身份提供方 ID，唯一且不可变
    external_id: str = Field(unique=True, index=True, nullable=False)

    email: Optional[str] = Field(default=None, index=True)
    name: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)

    # 行业标签，外键指向 industry_insights.industry
    # 非空时对应的洞察行必须存在
    industry: Optional[str] = Field(
        default=None,
        foreign_key="industry_insights.industry",
        index=True
    )

    # 工作年限，onboarding 之前为空
    experience: Optional[int] = Field(default=None, ge=0)

    # 技能列表，保持用户输入顺序
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    bio: Optional[str] = Field(default=None, sa_column=Column(Text))

    @property
    def is_onboarded(self) -> bool:
        return bool(self.industry)
