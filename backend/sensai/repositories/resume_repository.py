"""
简历 Repository
提供 resumes 表的读取和整体覆盖式 upsert
"""

from typing import Optional

from sqlmodel import Session, select

from sensai.models.resume import Resume


class ResumeRepository:
    """
    简历数据访问对象
    封装所有与 resumes 表相关的数据库操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_user_id(self, user_id: int) -> Optional[Resume]:
        """
        获取用户的简历

        Args:
            user_id: 用户 ID

        Returns:
            Resume 对象，用户还没有简历时返回 None
        """
        statement = select(Resume).where(Resume.user_id == user_id)
        return self.session.exec(statement).first()

    def upsert(self, user_id: int, content: str) -> Resume:
        """
        保存简历：存在则整体覆盖 content，不存在则创建

        Args:
            user_id: 用户 ID
            content: 完整简历内容

        Returns:
            保存后的 Resume 对象
        """
        resume = self.get_by_user_id(user_id)
        if resume:
            resume.content = content
        else:
            resume = Resume(user_id=user_id, content=content)
        self.session.add(resume)
        self.session.commit()
        self.session.refresh(resume)
        return resume
