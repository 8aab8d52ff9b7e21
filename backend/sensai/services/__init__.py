"""
服务层模块
提供业务逻辑的抽象层，封装身份校验、事务和 LLM 调用
"""

from .cache import PathRevalidator
from .identity import Identity, IdentityResolver
from .schemas import ProfileUpdate, QuizQuestion, QuizSubmission, OnboardingResult
from .user_service import UserService, require_user
from .resume_service import ResumeService
from .interview_service import InterviewService

__all__ = [
    "PathRevalidator",
    "Identity",
    "IdentityResolver",
    "ProfileUpdate",
    "QuizQuestion",
    "QuizSubmission",
    "OnboardingResult",
    "UserService",
    "require_user",
    "ResumeService",
    "InterviewService"
]
