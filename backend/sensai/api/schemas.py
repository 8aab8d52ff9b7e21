"""
HTTP 请求 / 响应结构
"""

from datetime import datetime
from typing import Annotated, List, Optional, Dict, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from sensai.models.base import as_utc
from sensai.models.industry_insight import DemandLevel, MarketOutlook

# 响应里的时间一律带 UTC 时区
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[int] = None
    skills: List[str] = []
    bio: Optional[str] = None


class InsightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    industry: str
    salary_ranges: List[Dict[str, Any]]
    growth_rate: float
    demand_level: DemandLevel
    top_skills: List[str]
    market_outlook: MarketOutlook
    key_trends: List[str]
    recommended_skills: List[str]
    last_updated: UtcDatetime
    next_update: UtcDatetime


class OnboardingOut(BaseModel):
    success: bool
    user: UserOut
    industry_insight: InsightOut


class OnboardingStatusOut(BaseModel):
    is_onboarded: bool


class ResumeIn(BaseModel):
    content: str


class ResumeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    content: str
    updated_at: UtcDatetime


class ImproveIn(BaseModel):
    current: str = Field(min_length=1)
    type: str = Field(min_length=1)


class ImproveOut(BaseModel):
    content: str


class AssessmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_score: float
    questions: List[Dict[str, Any]]
    category: str
    improvement_tip: Optional[str] = None
    created_at: UtcDatetime
