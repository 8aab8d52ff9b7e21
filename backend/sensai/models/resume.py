"""
用户域模型 - 简历表
与 users 一对一，每次保存整体覆盖
"""

from typing import Optional

from sqlmodel import Field, Column
from sqlalchemy import Text

from .base import TimestampModel


class Resume(TimestampModel, table=True):
    """
    简历表
    content 为不透明的文本块（实践中是 Markdown），不做字段级合并，也不保留历史版本
    """
    __tablename__ = "resumes"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 唯一外键：一个用户只有一份简历
    user_id: int = Field(foreign_key="users.id", unique=True, index=True, nullable=False)

    content: str = Field(sa_column=Column(Text, nullable=False))
