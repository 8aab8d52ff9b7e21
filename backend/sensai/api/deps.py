"""
FastAPI 依赖：调用方身份与服务实例
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sensai.exceptions import Unauthorized
from sensai.services.identity import Identity
from sensai.services.interview_service import InterviewService
from sensai.services.resume_service import ResumeService
from sensai.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Identity:
    """受保护路由的守卫：无法解析出身份时直接返回 401"""
    token = credentials.credentials if credentials else None
    identity = request.app.state.identity_resolver.resolve(token)
    if identity is None:
        raise Unauthorized()
    return identity


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_resume_service(request: Request) -> ResumeService:
    return request.app.state.resume_service


def get_interview_service(request: Request) -> InterviewService:
    return request.app.state.interview_service
