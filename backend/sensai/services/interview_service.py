"""
模拟面试服务层

保存测验结果（计算得分，答错时请 LLM 给一条改进建议）并按时间顺序返回历史记录。
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from sensai.db.init_db import get_engine
from sensai.exceptions import SaveFailed, StoreFailure
from sensai.llm.parsing import message_text
from sensai.llm.prompts import build_improvement_tip_prompt
from sensai.logger import logger
from sensai.models.assessment import Assessment
from sensai.repositories.assessment_repository import AssessmentRepository
from sensai.services.cache import PathRevalidator
from sensai.services.schemas import QuizSubmission
from sensai.services.user_service import require_user

INTERVIEW_VIEW_PATH = "/interview"


def grade_quiz(submission: QuizSubmission) -> List[Dict[str, Any]]:
    """把题目和作答配对，逐题标记是否答对"""
    results = []
    for question, user_answer in zip(submission.questions, submission.answers):
        results.append({
            "question": question.question,
            "answer": question.correct_answer,
            "user_answer": user_answer,
            "is_correct": user_answer == question.correct_answer,
            "explanation": question.explanation,
        })
    return results


def quiz_score(results: List[Dict[str, Any]]) -> float:
    """答对比例（百分比）"""
    if not results:
        return 0.0
    correct = sum(1 for r in results if r["is_correct"])
    return correct / len(results) * 100


class InterviewService:
    """模拟面试服务类"""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        llm: Any = None,
        revalidator: Optional[PathRevalidator] = None
    ):
        self.engine = engine or get_engine()
        self.llm = llm
        self.revalidator = revalidator or PathRevalidator()

    def save_quiz_result(
        self,
        external_id: Optional[str],
        submission: Union[QuizSubmission, Dict[str, Any]]
    ) -> Assessment:
        """
        保存一次测验结果

        改进建议生成失败只记录日志，结果照常保存（improvement_tip 为空）

        Raises:
            Unauthorized / NotFound: 身份校验失败
            SaveFailed: 数据库写入失败
        """
        if not isinstance(submission, QuizSubmission):
            submission = QuizSubmission.model_validate(submission)

        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                user_id, industry = user.id, user.industry
        except SQLAlchemyError as e:
            logger.error(f"[InterviewService] 加载用户失败: {e}")
            raise StoreFailure("Failed to save quiz result") from e

        results = grade_quiz(submission)
        score = quiz_score(results)
        wrong_answers = [r for r in results if not r["is_correct"]]
        improvement_tip = self._improvement_tip(industry, wrong_answers) if wrong_answers else None

        try:
            with Session(self.engine) as session:
                assessment = AssessmentRepository(session).create(
                    user_id=user_id,
                    quiz_score=score,
                    questions=results,
                    improvement_tip=improvement_tip,
                    category=submission.category
                )
        except SQLAlchemyError as e:
            logger.error(f"[InterviewService] 保存测验结果失败: {e}")
            raise SaveFailed("Failed to save quiz result") from e

        self.revalidator.revalidate(INTERVIEW_VIEW_PATH)
        logger.info(f"[InterviewService] 用户 {user_id} 测验已保存，得分 {score:.1f}")
        return assessment

    def get_assessments(self, external_id: Optional[str]) -> List[Assessment]:
        """按时间升序返回调用方的全部测验记录"""
        try:
            with Session(self.engine) as session:
                user = require_user(session, external_id)
                return AssessmentRepository(session).get_all_by_user(user.id)
        except SQLAlchemyError as e:
            logger.error(f"[InterviewService] 读取测验记录失败: {e}")
            raise StoreFailure("Failed to fetch assessments") from e

    def _improvement_tip(self, industry: Optional[str], wrong_answers: List[Dict[str, Any]]) -> Optional[str]:
        if self.llm is None:
            return None
        prompt = build_improvement_tip_prompt(industry, wrong_answers)
        try:
            tip = message_text(self.llm.invoke(prompt)).strip()
        except Exception as e:
            logger.warning(f"[InterviewService] 生成改进建议失败: {e}")
            return None
        return tip or None
