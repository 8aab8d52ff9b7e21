"""
简历服务层

1. 保存 / 读取简历（按用户整体覆盖的 upsert）
2. 调用 LLM 改写简历片段（无状态，不落库）
"""

from typing import Any, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from sensai.db.init_db import get_engine
from sensai.exceptions import AssistFailed, SaveFailed, StoreFailure
from sensai.llm.parsing import message_text
from sensai.llm.prompts import build_improve_prompt
from sensai.logger import logger
from sensai.models.resume import Resume
from sensai.repositories.resume_repository import ResumeRepository
from sensai.services.cache import PathRevalidator
from sensai.services.user_service import require_user

RESUME_VIEW_PATH = "/resume"


class ResumeService:
    """
    简历服务类

    llm 在进程启动时创建一次，通过构造函数传入；
    只做读写时可以不传。
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        llm: Any = None,
        revalidator: Optional[PathRevalidator] = None
    ):
        self.engine = engine or get_engine()
        self.llm = llm
        self.revalidator = revalidator or PathRevalidator()

    def save_resume(self, external_id: Optional[str], content: str) -> Resume:
        """
        保存简历：存在则整体覆盖，不存在则创建

        Raises:
            Unauthorized / NotFound: 身份校验失败
            SaveFailed: 数据库写入失败
        """
        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                resume = ResumeRepository(session).upsert(user.id, content)
        except SQLAlchemyError as e:
            logger.error(f"[ResumeService] 保存简历失败: {e}")
            raise SaveFailed("Failed to save resume") from e

        self.revalidator.revalidate(RESUME_VIEW_PATH)
        logger.info(f"[ResumeService] 用户 {resume.user_id} 简历已保存 (ID: {resume.id})")
        return resume

    def get_resume(self, external_id: Optional[str]) -> Optional[Resume]:
        """
        读取简历

        Returns:
            Resume 对象；用户还没有保存过简历时返回 None（不是错误）

        Raises:
            Unauthorized / NotFound: 身份校验失败
            StoreFailure: 数据库不可用
        """
        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                return ResumeRepository(session).get_by_user_id(user.id)
        except SQLAlchemyError as e:
            logger.error(f"[ResumeService] 读取简历失败: {e}")
            raise StoreFailure("Failed to load resume") from e

    def improve_with_ai(self, external_id: Optional[str], current: str, section_type: str) -> str:
        """
        让 LLM 按固定模板改写一段简历内容

        Args:
            external_id: 调用方身份
            current: 当前文本
            section_type: 片段类型（如 summary、experience）

        Returns:
            改写后的文本（已去除首尾空白）

        Raises:
            Unauthorized / NotFound: 身份校验失败
            AssistFailed: LLM 调用失败或返回空内容
        """
        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                industry = user.industry or "general"
        except SQLAlchemyError as e:
            logger.error(f"[ResumeService] 加载用户失败: {e}")
            raise StoreFailure("Failed to improve content") from e

        if self.llm is None:
            raise AssistFailed()

        prompt = build_improve_prompt(section_type=section_type, industry=industry, current=current)

        try:
            response = self.llm.invoke(prompt)
            improved = message_text(response).strip()
        except Exception as e:
            logger.error(f"[ResumeService] 改写内容失败: {e}")
            raise AssistFailed() from e

        if not improved:
            logger.error("[ResumeService] LLM 返回了空内容")
            raise AssistFailed()

        return improved
