"""
测验记录 Repository
"""

from typing import List, Optional, Dict, Any

from sqlmodel import Session, select, col

from sensai.models.assessment import Assessment, DEFAULT_QUIZ_CATEGORY


class AssessmentRepository:
    """测验记录数据访问对象"""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        user_id: int,
        quiz_score: float,
        questions: List[Dict[str, Any]],
        improvement_tip: Optional[str] = None,
        category: str = DEFAULT_QUIZ_CATEGORY
    ) -> Assessment:
        """
        写入一次测验结果

        Args:
            user_id: 用户 ID
            quiz_score: 得分百分比
            questions: 题目明细
            improvement_tip: 改进建议（可选）
            category: 测验分类

        Returns:
            创建的 Assessment 对象
        """
        assessment = Assessment(
            user_id=user_id,
            quiz_score=quiz_score,
            questions=questions,
            improvement_tip=improvement_tip,
            category=category
        )
        self.session.add(assessment)
        self.session.commit()
        self.session.refresh(assessment)
        return assessment

    def get_all_by_user(self, user_id: int) -> List[Assessment]:
        """按创建时间升序返回用户的全部测验记录"""
        statement = (
            select(Assessment)
            .where(Assessment.user_id == user_id)
            .order_by(col(Assessment.created_at).asc(), col(Assessment.id).asc())
        )
        return list(self.session.exec(statement).all())
