"""
Pytest 测试配置
提供 Mock LLM、测试数据库等测试基础设施
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest
from langchain_core.messages import AIMessage
from sqlmodel import Session
from unittest.mock import Mock

# 添加 backend 目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sensai.db.init_db import create_db_engine, create_tables
from sensai.models import User, IndustryInsight, DemandLevel, MarketOutlook
from sensai.services.cache import PathRevalidator
from sensai.services.user_service import UserService
from sensai.services.resume_service import ResumeService
from sensai.services.interview_service import InterviewService


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine(tmp_path):
    """
    创建测试用的 SQLite 文件数据库引擎
    每个测试函数都会获得一个全新的数据库；使用文件而不是内存库，
    这样不同 Session 拿到的是独立连接，事务互相隔离
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")

    # 创建所有表
    create_tables(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话
    """
    with Session(test_db_engine) as session:
        yield session


# ==================== Mock LLM Fixtures ====================

@pytest.fixture(scope="function")
def mock_llm():
    """
    Mock LLM 实例
    避免真实调用 LLM API
    """
    mock = Mock()
    mock.invoke.return_value = AIMessage(content="Mock LLM response")
    return mock


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_user(test_db_session: Session) -> User:
    """
    创建测试用户（尚未 onboarding）
    """
    user = User(external_id="user_test_001", email="kevin@example.com", name="Kevin")
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def tech_insight(test_db_session: Session) -> IndustryInsight:
    """
    创建一条已刷新过的 tech 行业洞察
    """
    insight = IndustryInsight(
        industry="tech-software-development",
        salary_ranges=[
            {"role": "Backend Engineer", "min": 90000, "max": 160000, "median": 120000, "location": "US"}
        ],
        growth_rate=8.5,
        demand_level=DemandLevel.HIGH,
        top_skills=["Python", "Cloud"],
        market_outlook=MarketOutlook.POSITIVE,
        key_trends=["AI adoption"],
        recommended_skills=["Kubernetes"],
        last_updated=datetime(2020, 1, 1, tzinfo=timezone.utc),
        next_update=datetime(2020, 1, 8, tzinfo=timezone.utc)
    )
    test_db_session.add(insight)
    test_db_session.commit()
    test_db_session.refresh(insight)
    return insight


@pytest.fixture(scope="function")
def onboarded_user(test_db_session: Session, tech_insight: IndustryInsight) -> User:
    """
    创建已完成 onboarding 的测试用户
    """
    user = User(
        external_id="user_test_002",
        email="ada@example.com",
        name="Ada",
        industry=tech_insight.industry,
        experience=5,
        skills=["Python", "SQL"],
        bio="Backend developer"
    )
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


# ==================== Service Fixtures ====================

@pytest.fixture(scope="function")
def revalidator() -> PathRevalidator:
    return PathRevalidator()


@pytest.fixture(scope="function")
def user_service(test_db_engine, revalidator) -> UserService:
    return UserService(engine=test_db_engine, revalidator=revalidator)


@pytest.fixture(scope="function")
def resume_service(test_db_engine, mock_llm, revalidator) -> ResumeService:
    return ResumeService(engine=test_db_engine, llm=mock_llm, revalidator=revalidator)


@pytest.fixture(scope="function")
def interview_service(test_db_engine, mock_llm, revalidator) -> InterviewService:
    return InterviewService(engine=test_db_engine, llm=mock_llm, revalidator=revalidator)


# ==================== Repository Fixtures ====================

@pytest.fixture(scope="function")
def user_repository(test_db_session: Session):
    from sensai.repositories.user_repository import UserRepository
    return UserRepository(test_db_session)


@pytest.fixture(scope="function")
def insight_repository(test_db_session: Session):
    from sensai.repositories.industry_insight_repository import IndustryInsightRepository
    return IndustryInsightRepository(test_db_session)


@pytest.fixture(scope="function")
def resume_repository(test_db_session: Session):
    from sensai.repositories.resume_repository import ResumeRepository
    return ResumeRepository(test_db_session)


@pytest.fixture(scope="function")
def assessment_repository(test_db_session: Session):
    from sensai.repositories.assessment_repository import AssessmentRepository
    return AssessmentRepository(test_db_session)


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )
