"""
服务层输入/输出数据结构
"""

from dataclasses import dataclass
from typing import List, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sensai.models.assessment import DEFAULT_QUIZ_CATEGORY
from sensai.models.industry_insight import IndustryInsight
from sensai.models.user import User


class ProfileUpdate(BaseModel):
    """
    onboarding / 资料更新表单

    skills 既接受列表，也接受逗号分隔的字符串（表单里的写法）
    """
    industry: str = Field(min_length=1)
    experience: int = Field(ge=0, le=50)
    skills: List[str] = Field(default_factory=list)
    bio: Optional[str] = Field(default=None, max_length=500)

    @field_validator("industry", mode="before")
    @classmethod
    def _strip_industry(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("skills", mode="before")
    @classmethod
    def _split_skills(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return [s.strip() for s in value if isinstance(s, str) and s.strip()]
        return value


class QuizQuestion(BaseModel):
    """一道选择题"""
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    options: List[str] = Field(default_factory=list)
    correct_answer: str = Field(alias="correctAnswer")
    explanation: str = ""


class QuizSubmission(BaseModel):
    """一次测验的题目和作答，answers[i] 对应 questions[i]，未作答为 None"""
    questions: List[QuizQuestion] = Field(min_length=1)
    answers: List[Optional[str]]
    category: str = DEFAULT_QUIZ_CATEGORY

    @model_validator(mode="after")
    def _answers_match_questions(self) -> "QuizSubmission":
        if len(self.answers) != len(self.questions):
            raise ValueError("answers must have one entry per question")
        return self


@dataclass
class OnboardingResult:
    """update_user 的返回值"""
    success: bool
    user: User
    industry_insight: IndustryInsight
