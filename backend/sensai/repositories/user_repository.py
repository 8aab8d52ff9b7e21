"""
用户管理 Repository
提供 users 表的增删改查操作
"""

from typing import Optional, List

from sqlmodel import Session, select

from sensai.models.user import User
from sensai.logger import logger


class UserRepository:
    """
    用户数据访问对象
    封装所有与 users 表相关的数据库操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        """
        根据身份提供方 ID 获取用户

        Args:
            external_id: 身份提供方给出的用户 ID

        Returns:
            User 对象，不存在则返回 None
        """
        statement = select(User).where(User.external_id == external_id)
        return self.session.exec(statement).first()

    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        根据 ID 获取用户

        Args:
            user_id: 用户 ID

        Returns:
            User 对象，不存在则返回 None
        """
        return self.session.get(User, user_id)

    def get_or_create(
        self,
        external_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        image_url: Optional[str] = None
    ) -> User:
        """
        根据 external_id 获取用户，不存在则创建

        实现"身份锚定"：将外部字符串 ID 转换为内部整数 user.id。
        已存在的用户不会被 email/name 覆盖。

        Args:
            external_id: 身份提供方 ID
            email: 邮箱（仅创建时使用）
            name: 显示名（仅创建时使用）
            image_url: 头像（仅创建时使用）

        Returns:
            User 对象（已存在的或新创建的）
        """
        # 1. 尝试查询
        user = self.get_by_external_id(external_id)
        if user:
            return user

        # 2. 不存在，创建新用户
        logger.info(f"[UserRepository] 检测到新身份 '{external_id}'，正在注册...")
        user = User(external_id=external_id, email=email, name=name, image_url=image_url)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        logger.info(f"[UserRepository] 新用户创建成功 (ID: {user.id})")
        return user

    def apply_profile(
        self,
        user: User,
        industry: str,
        experience: int,
        skills: List[str],
        bio: Optional[str]
    ) -> User:
        """
        写入 onboarding 资料

        注意：只 flush 不 commit，事务边界由调用方控制

        Args:
            user: 当前事务内加载的用户对象
            industry: 行业标签（对应的洞察行必须已在同一事务内存在）
            experience: 工作年限
            skills: 技能列表
            bio: 个人简介

        Returns:
            更新后的 User 对象
        """
        user.industry = industry
        user.experience = experience
        user.skills = list(skills)
        user.bio = bio
        self.session.add(user)
        self.session.flush()
        return user
