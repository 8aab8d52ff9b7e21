"""
LLM 输出数据模型

行业洞察刷新时，模型返回的 JSON 必须先通过这里的严格校验，
才允许写入 industry_insights 表。
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sensai.models.industry_insight import DemandLevel, MarketOutlook


class SalaryRange(BaseModel):
    """单个岗位的薪资区间"""
    model_config = ConfigDict(extra="ignore")

    role: str = Field(min_length=1)
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    median: float = Field(ge=0)
    location: str

    @model_validator(mode="after")
    def _check_bounds(self) -> "SalaryRange":
        if self.min > self.max:
            raise ValueError("salary min is greater than max")
        return self


class InsightPayload(BaseModel):
    """
    行业洞察刷新结果

    模型按 camelCase 返回键名（salaryRanges、growthRate ...），
    demandLevel / marketOutlook 统一转为大写后映射到表内枚举，
    不在枚举范围内的值直接拒绝。
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    salary_ranges: List[SalaryRange] = Field(alias="salaryRanges")
    growth_rate: float = Field(alias="growthRate")
    demand_level: DemandLevel = Field(alias="demandLevel")
    top_skills: List[str] = Field(alias="topSkills")
    market_outlook: MarketOutlook = Field(alias="marketOutlook")
    key_trends: List[str] = Field(alias="keyTrends")
    recommended_skills: List[str] = Field(alias="recommendedSkills")

    @field_validator("demand_level", "market_outlook", mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def to_store_fields(self) -> Dict[str, Any]:
        """转成 IndustryInsightRepository.apply_refresh 需要的字段字典"""
        return {
            "salary_ranges": [item.model_dump() for item in self.salary_ranges],
            "growth_rate": self.growth_rate,
            "demand_level": self.demand_level,
            "top_skills": list(self.top_skills),
            "market_outlook": self.market_outlook,
            "key_trends": list(self.key_trends),
            "recommended_skills": list(self.recommended_skills),
        }
