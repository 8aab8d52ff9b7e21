"""
HTTP 路由

/health 公开；/users、/onboarding、/dashboard、/resume、/interview
下的所有路由都要求有效的 Bearer 令牌。
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from sensai.api.deps import (
    get_identity,
    get_user_service,
    get_resume_service,
    get_interview_service
)
from sensai.api.schemas import (
    UserOut,
    InsightOut,
    OnboardingOut,
    OnboardingStatusOut,
    ResumeIn,
    ResumeOut,
    ImproveIn,
    ImproveOut,
    AssessmentOut
)
from sensai.services.identity import Identity
from sensai.services.interview_service import InterviewService
from sensai.services.resume_service import ResumeService
from sensai.services.schemas import ProfileUpdate, QuizSubmission
from sensai.services.user_service import UserService

public_router = APIRouter()
protected_router = APIRouter(dependencies=[Depends(get_identity)])


@public_router.get("/health")
def health():
    return {"status": "ok"}


# ==================== 用户 / onboarding ====================

@protected_router.post("/users/me", response_model=UserOut)
def sync_user(
    identity: Identity = Depends(get_identity),
    service: UserService = Depends(get_user_service)
):
    """首次认证访问时创建本地用户"""
    return service.ensure_user(identity)


@protected_router.get("/onboarding/status", response_model=OnboardingStatusOut)
def onboarding_status(
    identity: Identity = Depends(get_identity),
    service: UserService = Depends(get_user_service)
):
    return service.get_onboarding_status(identity.external_id)


@protected_router.post("/onboarding", response_model=OnboardingOut)
def update_profile(
    profile: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    service: UserService = Depends(get_user_service)
):
    result = service.update_user(identity.external_id, profile)
    return OnboardingOut(
        success=result.success,
        user=UserOut.model_validate(result.user),
        industry_insight=InsightOut.model_validate(result.industry_insight)
    )


@protected_router.get("/dashboard/insights", response_model=InsightOut)
def industry_insights(
    identity: Identity = Depends(get_identity),
    service: UserService = Depends(get_user_service)
):
    return service.get_industry_insights(identity.external_id)


# ==================== 简历 ====================

@protected_router.get("/resume", response_model=Optional[ResumeOut])
def get_resume(
    identity: Identity = Depends(get_identity),
    service: ResumeService = Depends(get_resume_service)
):
    # 还没有简历时返回 null
    return service.get_resume(identity.external_id)


@protected_router.put("/resume", response_model=ResumeOut)
def save_resume(
    body: ResumeIn,
    identity: Identity = Depends(get_identity),
    service: ResumeService = Depends(get_resume_service)
):
    return service.save_resume(identity.external_id, body.content)


@protected_router.post("/resume/improve", response_model=ImproveOut)
def improve_resume(
    body: ImproveIn,
    identity: Identity = Depends(get_identity),
    service: ResumeService = Depends(get_resume_service)
):
    improved = service.improve_with_ai(identity.external_id, body.current, body.type)
    return ImproveOut(content=improved)


# ==================== 模拟面试 ====================

@protected_router.get("/interview/assessments", response_model=List[AssessmentOut])
def list_assessments(
    identity: Identity = Depends(get_identity),
    service: InterviewService = Depends(get_interview_service)
):
    return service.get_assessments(identity.external_id)


@protected_router.post("/interview/assessments", response_model=AssessmentOut, status_code=201)
def save_assessment(
    submission: QuizSubmission,
    identity: Identity = Depends(get_identity),
    service: InterviewService = Depends(get_interview_service)
):
    return service.save_quiz_result(identity.external_id, submission)
