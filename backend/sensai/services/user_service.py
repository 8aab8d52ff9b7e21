"""
用户服务层

封装用户相关业务逻辑，包括：
1. 身份锚定 (Identity Anchoring)：external_id -> 本地 User
2. onboarding 资料更新：在一个有时间预算的事务里"先确保行业洞察存在，再更新用户"
3. onboarding 状态查询、行业洞察读取

行业洞察按行业标签共享，users.industry 非空时对应的洞察行必须存在。
两个用户并发选择同一个新行业时，由 industry 唯一约束裁决：
败者的事务回滚并整体重试一次，第二次仍冲突则抛出 Conflict。
"""

import time
from typing import Any, Dict, Optional, Union

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy import text
from sqlmodel import Session

from sensai.db.init_db import get_engine, transaction_timeout_seconds
from sensai.exceptions import (
    SensaiError,
    Unauthorized,
    NotFound,
    Conflict,
    TransactionTimeout,
    StoreFailure
)
from sensai.logger import logger
from sensai.models.industry_insight import IndustryInsight
from sensai.models.user import User
from sensai.repositories.industry_insight_repository import IndustryInsightRepository
from sensai.repositories.user_repository import UserRepository
from sensai.services.cache import PathRevalidator
from sensai.services.identity import Identity
from sensai.services.schemas import ProfileUpdate, OnboardingResult

# 首次尝试 + 唯一约束冲突后的一次重试
INDUSTRY_CREATE_ATTEMPTS = 2

# update_user 成功后需要失效的视图
PROFILE_VIEW_PATHS = ("/onboarding", "/dashboard")


def require_user(session: Session, external_id: Optional[str]) -> User:
    """
    按 external_id 加载本地用户

    Raises:
        Unauthorized: 没有调用方身份
        NotFound: 身份没有对应的本地用户
    """
    if not external_id:
        raise Unauthorized()
    user = UserRepository(session).get_by_external_id(external_id)
    if user is None:
        raise NotFound()
    return user


class _IndustryCreationRace(Exception):
    """创建行业洞察时撞上唯一约束（另一个事务抢先创建了同一行业）"""


class _TransactionBudget:
    """事务墙钟预算，在步骤之间检查"""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._deadline = time.monotonic() + seconds

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self._deadline

    def check(self, step: str) -> None:
        if self.expired:
            logger.warning(f"[UserService] 事务超出 {self.seconds}s 预算 (步骤: {step})")
            raise TransactionTimeout()


class UserService:
    """
    用户服务类

    使用示例：
        service = UserService(engine=engine)
        result = service.update_user(external_id, {
            "industry": "tech-software-development",
            "experience": 3,
            "skills": "Python, SQL",
            "bio": "Backend developer"
        })
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        revalidator: Optional[PathRevalidator] = None,
        transaction_timeout: Optional[float] = None
    ):
        """
        Args:
            engine: 数据库引擎，默认按环境变量创建
            revalidator: 视图失效器
            transaction_timeout: update_user 事务预算（秒），默认读取 TRANSACTION_TIMEOUT_SECONDS
        """
        self.engine = engine or get_engine()
        self.revalidator = revalidator or PathRevalidator()
        self.transaction_timeout = (
            transaction_timeout if transaction_timeout is not None
            else transaction_timeout_seconds()
        )

    # ==================== 身份锚定 ====================

    def ensure_user(self, identity: Optional[Identity]) -> User:
        """
        首次认证访问时创建本地用户，之后直接返回已有用户

        Raises:
            Unauthorized: 没有调用方身份
            StoreFailure: 数据库失败
        """
        if identity is None or not identity.external_id:
            raise Unauthorized()

        try:
            with Session(self.engine) as session:
                repo = UserRepository(session)
                try:
                    return repo.get_or_create(
                        identity.external_id,
                        email=identity.email,
                        name=identity.name,
                        image_url=identity.image_url
                    )
                except IntegrityError:
                    # 同一身份的并发首次访问，另一方已经创建
                    session.rollback()
                    user = repo.get_by_external_id(identity.external_id)
                    if user is None:
                        raise
                    return user
        except SQLAlchemyError as e:
            logger.error(f"[UserService] 同步用户失败: {e}")
            raise StoreFailure("Failed to sync user") from e

    # ==================== onboarding ====================

    def get_onboarding_status(self, external_id: Optional[str]) -> Dict[str, bool]:
        """
        查询用户是否完成 onboarding（行业非空即视为完成）

        Returns:
            {"is_onboarded": bool}
        """
        if not external_id:
            raise Unauthorized()

        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                return {"is_onboarded": user.is_onboarded}
        except SQLAlchemyError as e:
            logger.error(f"[UserService] 查询 onboarding 状态失败: {e}")
            raise StoreFailure("Failed to fetch onboarding status") from e

    def update_user(
        self,
        external_id: Optional[str],
        data: Union[ProfileUpdate, Dict[str, Any]]
    ) -> OnboardingResult:
        """
        更新用户资料，并保证所选行业的洞察行存在

        流程（同一事务内）：
        1. 按行业标签查询 IndustryInsight
        2. 不存在则以默认值创建
        3. 更新用户的 industry / experience / skills / bio
        4. 提交，返回更新后的用户和洞察

        Raises:
            Unauthorized: 没有调用方身份
            NotFound: 身份没有对应的本地用户
            pydantic.ValidationError: 资料不合法
            Conflict: 重试后仍然撞上行业唯一约束
            TransactionTimeout: 事务超出时间预算（不自动重试）
            StoreFailure: 其他数据库失败
        """
        if not external_id:
            raise Unauthorized()

        payload = data if isinstance(data, ProfileUpdate) else ProfileUpdate.model_validate(data)

        try:
            with Session(self.engine) as session:
                user_id = require_user(session, external_id).id
        except SQLAlchemyError as e:
            logger.error(f"[UserService] 加载用户失败: {e}")
            raise StoreFailure("Failed to update profile") from e

        result = None
        for attempt in range(1, INDUSTRY_CREATE_ATTEMPTS + 1):
            try:
                result = self._ensure_insight_and_update(user_id, payload)
                break
            except _IndustryCreationRace:
                if attempt < INDUSTRY_CREATE_ATTEMPTS:
                    logger.warning(
                        f"[UserService] 行业 '{payload.industry}' 已被并发创建，重试事务 "
                        f"({attempt}/{INDUSTRY_CREATE_ATTEMPTS})"
                    )
                    continue
                logger.error(f"[UserService] 行业 '{payload.industry}' 创建冲突，放弃")
                raise Conflict()

        for path in PROFILE_VIEW_PATHS:
            self.revalidator.revalidate(path)

        logger.info(
            f"[UserService] 用户 {user_id} 资料已更新，行业 '{payload.industry}'"
        )
        return result

    def _ensure_insight_and_update(self, user_id: int, payload: ProfileUpdate) -> OnboardingResult:
        """单次事务尝试"""
        budget = _TransactionBudget(self.transaction_timeout)
        session = Session(self.engine)
        try:
            with session.begin():
                self._apply_statement_timeout(session)

                insight_repo = IndustryInsightRepository(session)
                insight = insight_repo.get_by_industry(payload.industry)
                if insight is None:
                    try:
                        insight = insight_repo.create_default(payload.industry)
                    except IntegrityError as e:
                        raise _IndustryCreationRace(payload.industry) from e
                    logger.info(f"[UserService] 新行业 '{payload.industry}'，已创建默认洞察")
                budget.check("ensure industry insight")

                user_repo = UserRepository(session)
                user = user_repo.get_by_id(user_id)
                if user is None:
                    raise NotFound()
                user_repo.apply_profile(
                    user,
                    industry=payload.industry,
                    experience=payload.experience,
                    skills=payload.skills,
                    bio=payload.bio
                )
                budget.check("update user")

            # 提交后对象已过期，重新加载以便在会话关闭后返回
            session.refresh(user)
            session.refresh(insight)
            return OnboardingResult(success=True, user=user, industry_insight=insight)
        except (SensaiError, _IndustryCreationRace):
            raise
        except OperationalError as e:
            if budget.expired or "statement timeout" in str(e.orig):
                logger.warning(f"[UserService] 事务超时: {e}")
                raise TransactionTimeout() from e
            logger.error(f"[UserService] 更新用户和行业失败: {e}")
            raise StoreFailure("Failed to update profile") from e
        except SQLAlchemyError as e:
            logger.error(f"[UserService] 更新用户和行业失败: {e}")
            raise StoreFailure("Failed to update profile") from e
        finally:
            session.close()

    def _apply_statement_timeout(self, session: Session) -> None:
        # PostgreSQL 上由数据库强制执行同样的预算，其他方言只靠步骤间检查
        if self.engine.dialect.name == "postgresql":
            timeout_ms = int(self.transaction_timeout * 1000)
            session.connection().execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))

    # ==================== 行业洞察 ====================

    def get_industry_insights(self, external_id: Optional[str]) -> IndustryInsight:
        """
        获取当前用户所在行业的洞察

        Raises:
            Unauthorized / NotFound: 同上；用户尚未 onboarding 时也抛出 NotFound
        """
        if not external_id:
            raise Unauthorized()

        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                if not user.industry:
                    raise NotFound("Complete onboarding to see industry insights")
                insight = IndustryInsightRepository(session).get_by_industry(user.industry)
                if insight is None:
                    raise NotFound("Industry insights not found")
                return insight
        except SQLAlchemyError as e:
            logger.error(f"[UserService] 读取行业洞察失败: {e}")
            raise StoreFailure("Failed to fetch industry insights") from e
