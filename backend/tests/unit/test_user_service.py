"""
UserService 单元测试
验证身份锚定、onboarding 事务（行业洞察懒创建、并发冲突重试、超时）和洞察读取
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from unittest.mock import patch

from sensai.exceptions import Unauthorized, NotFound, Conflict, TransactionTimeout
from sensai.models import User, IndustryInsight, DemandLevel, MarketOutlook
from sensai.repositories.industry_insight_repository import IndustryInsightRepository
from sensai.repositories.user_repository import UserRepository
from sensai.services.identity import Identity
from sensai.services.schemas import ProfileUpdate
from sensai.services.user_service import UserService

PROFILE = {
    "industry": "healthcare-nursing",
    "experience": 4,
    "skills": "Triage, Patient care ,  ",
    "bio": "ICU nurse"
}


def count_insights(engine, industry):
    with Session(engine) as session:
        return len(session.exec(select(IndustryInsight).where(IndustryInsight.industry == industry)).all())


def load_user(engine, external_id):
    with Session(engine) as session:
        return session.exec(select(User).where(User.external_id == external_id)).one()


class TestEnsureUser:
    """测试首次访问时的用户同步"""

    def test_creates_user_once(self, user_service, test_db_engine):
        """测试同一身份多次同步只有一行"""
        identity = Identity(external_id="user_sync_001", email="sync@example.com", name="Sync")

        first = user_service.ensure_user(identity)
        second = user_service.ensure_user(identity)

        assert first.id == second.id
        assert first.email == "sync@example.com"
        with Session(test_db_engine) as session:
            rows = session.exec(select(User).where(User.external_id == "user_sync_001")).all()
        assert len(rows) == 1

    def test_concurrent_first_visit(self, user_service, test_db_engine):
        """测试并发首次访问时，败者读取胜者创建的用户"""
        identity = Identity(external_id="user_sync_002")

        def racing_get_or_create(self, external_id, **kwargs):
            with Session(test_db_engine) as other:
                other.add(User(external_id=external_id))
                other.commit()
            raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))

        with patch.object(UserRepository, "get_or_create", autospec=True, side_effect=racing_get_or_create):
            user = user_service.ensure_user(identity)

        assert user.external_id == "user_sync_002"
        assert user.id is not None

    def test_requires_identity(self, user_service):
        """测试没有身份时拒绝"""
        with pytest.raises(Unauthorized):
            user_service.ensure_user(None)


class TestOnboardingStatus:
    """测试 onboarding 状态查询"""

    def test_not_onboarded(self, user_service, test_user):
        """测试新用户尚未 onboarding"""
        assert user_service.get_onboarding_status(test_user.external_id) == {"is_onboarded": False}

    def test_onboarded(self, user_service, onboarded_user):
        """测试已选择行业的用户"""
        assert user_service.get_onboarding_status(onboarded_user.external_id) == {"is_onboarded": True}

    def test_unknown_user(self, user_service):
        """测试没有本地用户"""
        with pytest.raises(NotFound):
            user_service.get_onboarding_status("user_missing")

    def test_unauthenticated(self, user_service):
        """测试没有身份"""
        with pytest.raises(Unauthorized):
            user_service.get_onboarding_status(None)


class TestUpdateUser:
    """测试 onboarding 资料更新"""

    def test_new_industry_created_with_defaults(self, user_service, test_user, test_db_engine):
        """测试首次选择的行业会以默认值创建洞察"""
        result = user_service.update_user(test_user.external_id, PROFILE)

        assert result.success is True
        assert result.user.industry == "healthcare-nursing"
        assert result.user.experience == 4
        assert result.user.skills == ["Triage", "Patient care"]
        assert result.user.bio == "ICU nurse"

        insight = result.industry_insight
        assert insight.industry == "healthcare-nursing"
        assert insight.salary_ranges == []
        assert insight.growth_rate == 0.0
        assert insight.demand_level == DemandLevel.MEDIUM
        assert insight.market_outlook == MarketOutlook.NEUTRAL
        assert count_insights(test_db_engine, "healthcare-nursing") == 1
        assert load_user(test_db_engine, test_user.external_id).is_onboarded is True

    def test_existing_industry_reused(self, user_service, test_user, onboarded_user, test_db_engine):
        """测试第二个用户选择同一行业时复用已有洞察"""
        result = user_service.update_user(
            test_user.external_id,
            ProfileUpdate(industry=onboarded_user.industry, experience=1, skills=["Go"])
        )

        assert result.industry_insight.growth_rate == 8.5
        assert result.industry_insight.top_skills == ["Python", "Cloud"]
        assert count_insights(test_db_engine, onboarded_user.industry) == 1

    def test_update_again_overwrites_profile(self, user_service, onboarded_user, test_db_engine):
        """测试再次更新资料时整体覆盖"""
        user_service.update_user(onboarded_user.external_id, PROFILE)

        user = load_user(test_db_engine, onboarded_user.external_id)
        assert user.industry == "healthcare-nursing"
        assert user.skills == ["Triage", "Patient care"]

    def test_revalidates_views(self, user_service, test_user, revalidator):
        """测试成功后失效 onboarding 和 dashboard 视图"""
        user_service.update_user(test_user.external_id, PROFILE)

        assert revalidator.version("/onboarding") == 1
        assert revalidator.version("/dashboard") == 1

    def test_concurrent_industry_creation_retried(self, user_service, test_user, test_db_engine):
        """测试另一个事务抢先创建同一行业时，整体重试后复用该行"""
        original_lookup = IndustryInsightRepository.get_by_industry
        calls = []

        def racing_lookup(self, industry):
            calls.append(industry)
            if len(calls) == 1:
                # 查询之后、插入之前，另一个用户抢先创建了同一行业
                with Session(test_db_engine) as other:
                    IndustryInsightRepository(other).create_default(industry)
                    other.commit()
                return None
            return original_lookup(self, industry)

        with patch.object(IndustryInsightRepository, "get_by_industry", autospec=True, side_effect=racing_lookup):
            result = user_service.update_user(test_user.external_id, PROFILE)

        assert len(calls) == 2
        assert result.user.industry == "healthcare-nursing"
        assert count_insights(test_db_engine, "healthcare-nursing") == 1

    def test_conflict_after_retry(self, user_service, test_user, test_db_engine, revalidator):
        """测试重试后仍然冲突时抛出 Conflict，用户资料不变"""
        error = IntegrityError("INSERT INTO industry_insights", {}, Exception("UNIQUE constraint failed"))

        with patch.object(IndustryInsightRepository, "create_default", side_effect=error) as create:
            with pytest.raises(Conflict):
                user_service.update_user(test_user.external_id, PROFILE)

        assert create.call_count == 2
        assert load_user(test_db_engine, test_user.external_id).industry is None
        assert revalidator.version("/onboarding") == 0

    def test_transaction_timeout_rolls_back(self, test_db_engine, test_user, revalidator):
        """测试超出事务预算时整体回滚"""
        service = UserService(engine=test_db_engine, revalidator=revalidator, transaction_timeout=0)

        with pytest.raises(TransactionTimeout):
            service.update_user(test_user.external_id, PROFILE)

        assert count_insights(test_db_engine, "healthcare-nursing") == 0
        assert load_user(test_db_engine, test_user.external_id).industry is None
        assert revalidator.version("/dashboard") == 0

    def test_timeout_from_env(self, test_db_engine, monkeypatch):
        """测试事务预算可由环境变量配置"""
        monkeypatch.setenv("TRANSACTION_TIMEOUT_SECONDS", "2.5")
        assert UserService(engine=test_db_engine).transaction_timeout == 2.5

    def test_unauthenticated_does_not_mutate(self, user_service, test_db_engine):
        """测试未认证时不写入任何数据"""
        with pytest.raises(Unauthorized):
            user_service.update_user(None, PROFILE)

        assert count_insights(test_db_engine, "healthcare-nursing") == 0

    def test_unknown_user(self, user_service, test_db_engine):
        """测试没有本地用户"""
        with pytest.raises(NotFound) as exc_info:
            user_service.update_user("user_missing", PROFILE)

        assert exc_info.value.message == "User not found"
        assert count_insights(test_db_engine, "healthcare-nursing") == 0

    @pytest.mark.parametrize("bad_field", [
        {"industry": "   "},
        {"experience": -1},
        {"experience": 51},
        {"bio": "x" * 501},
    ])
    def test_invalid_profile(self, user_service, test_user, bad_field):
        """测试不合法的资料被拒绝"""
        with pytest.raises(ValidationError):
            user_service.update_user(test_user.external_id, {**PROFILE, **bad_field})


class TestIndustryInsights:
    """测试行业洞察读取"""

    def test_get_insights(self, user_service, onboarded_user):
        """测试返回用户所在行业的洞察"""
        insight = user_service.get_industry_insights(onboarded_user.external_id)

        assert insight.industry == onboarded_user.industry
        assert insight.key_trends == ["AI adoption"]

    def test_not_onboarded(self, user_service, test_user):
        """测试尚未 onboarding 时提示先完成 onboarding"""
        with pytest.raises(NotFound) as exc_info:
            user_service.get_industry_insights(test_user.external_id)

        assert "onboarding" in exc_info.value.message
