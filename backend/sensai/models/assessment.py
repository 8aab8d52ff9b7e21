"""
面试域模型 - 模拟测验记录表
"""

from typing import Optional, List, Dict, Any

from sqlmodel import Field, Column, JSON
from sqlalchemy import Text

from .base import TimestampModel

DEFAULT_QUIZ_CATEGORY = "Technical"


class Assessment(TimestampModel, table=True):
    """
    模拟测验记录表
    每完成一次测验写入一行，列表页按 created_at 升序编号展示
    """
    __tablename__ = "assessments"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 外键：归属用户，测验历史查询热点
    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)

    # 得分百分比 0-100
    quiz_score: float = Field(ge=0, le=100, nullable=False)

    # 题目明细：[{"question", "answer", "user_answer", "is_correct", "explanation"}]
    questions: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    category: str = Field(default=DEFAULT_QUIZ_CATEGORY, nullable=False)

    # LLM 生成的改进建议，全部答对或生成失败时为空
    improvement_tip: Optional[str] = Field(default=None, sa_column=Column(Text))
