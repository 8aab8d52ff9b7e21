"""
LLM 模块 - 模型工厂、提示词和输出解析
"""

from .llm_factory import LLMFactory, get_llm
from .models import InsightPayload, SalaryRange
from .parsing import message_text, strip_code_fences, parse_insight_payload

__all__ = [
    "LLMFactory",
    "get_llm",
    "InsightPayload",
    "SalaryRange",
    "message_text",
    "strip_code_fences",
    "parse_insight_payload"
]
