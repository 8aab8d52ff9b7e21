"""
LLM 响应解析工具

模型输出没有任何结构保证，这里负责取文本、去掉 Markdown 代码块包裹、
解析 JSON 并做结构校验。失败统一抛出 ProviderFailure。
"""

import json
import re
from typing import Any

from pydantic import ValidationError

from sensai.exceptions import ProviderFailure
from sensai.llm.models import InsightPayload

_CODE_FENCE_RE = re.compile(r"```(?:json)?\n?")


def message_text(message: Any) -> str:
    """
    从 LangChain 消息中取出纯文本

    content 可能是字符串，也可能是分段列表（Gemini 多段输出），
    列表时拼接所有 text 片段。
    """
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


def strip_code_fences(text: str) -> str:
    """去掉 ``` / ```json 包裹并裁剪首尾空白"""
    return _CODE_FENCE_RE.sub("", text or "").strip()


def parse_insight_payload(raw_text: str) -> InsightPayload:
    """
    把模型原始输出解析为 InsightPayload

    Raises:
        ProviderFailure: 不是合法 JSON 或结构不符合要求
    """
    cleaned = strip_code_fences(raw_text)
    if not cleaned:
        raise ProviderFailure("AI provider returned an empty response")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ProviderFailure(f"AI provider returned malformed JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ProviderFailure("AI provider returned JSON that is not an object")

    try:
        return InsightPayload.model_validate(data)
    except ValidationError as e:
        raise ProviderFailure(
            f"AI provider returned an unexpected insight shape ({e.error_count()} errors)"
        ) from e
