"""
FastAPI 应用入口

    uvicorn sensai.api.main:create_default_app --factory
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from sensai.api.routes import public_router, protected_router
from sensai.db.init_db import get_engine, create_tables
from sensai.exceptions import (
    SensaiError,
    Unauthorized,
    NotFound,
    Conflict,
    TransactionTimeout,
    ProviderFailure,
    StoreFailure
)
from sensai.llm.llm_factory import get_llm
from sensai.logger import logger, setup_logger
from sensai.services.cache import PathRevalidator
from sensai.services.identity import IdentityResolver
from sensai.services.interview_service import InterviewService
from sensai.services.resume_service import ResumeService
from sensai.services.user_service import UserService

# 按继承顺序匹配，子类在前
ERROR_STATUS_CODES = (
    (Unauthorized, 401),
    (NotFound, 404),
    (Conflict, 409),
    (TransactionTimeout, 504),
    (ProviderFailure, 502),
    (StoreFailure, 500),
)


def status_code_for(exc: SensaiError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def handle_sensai_error(request: Request, exc: SensaiError) -> JSONResponse:
    # 只返回通用提示，细节已在服务层写入日志
    return JSONResponse(status_code=status_code_for(exc), content={"detail": exc.message})


def _build_llm() -> Optional[Any]:
    try:
        return get_llm()
    except (ValueError, FileNotFoundError, NotImplementedError) as e:
        logger.warning(f"[api] LLM 未配置，AI 功能不可用: {e}")
        return None


def create_app(
    engine: Optional[Engine] = None,
    llm: Any = None,
    identity_resolver: Optional[IdentityResolver] = None,
    revalidator: Optional[PathRevalidator] = None
) -> FastAPI:
    """
    组装应用

    engine / llm / identity_resolver 默认按环境变量创建，测试时可以直接传入
    """
    app = FastAPI(title="Sensai")

    engine = engine or get_engine()
    create_tables(engine)

    if llm is None:
        llm = _build_llm()
    revalidator = revalidator or PathRevalidator()

    app.state.identity_resolver = identity_resolver or IdentityResolver()
    app.state.revalidator = revalidator
    app.state.user_service = UserService(engine=engine, revalidator=revalidator)
    app.state.resume_service = ResumeService(engine=engine, llm=llm, revalidator=revalidator)
    app.state.interview_service = InterviewService(engine=engine, llm=llm, revalidator=revalidator)

    app.add_exception_handler(SensaiError, handle_sensai_error)

    app.include_router(public_router)      # /health
    app.include_router(protected_router)   # /users, /onboarding, /dashboard, /resume, /interview

    return app


def create_default_app() -> FastAPI:
    setup_logger()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_default_app(), host="0.0.0.0", port=8000)
