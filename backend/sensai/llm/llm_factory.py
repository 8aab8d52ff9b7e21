"""LLM 工厂模块

根据配置文件创建 LLM 实例。
遵循安全协议：从不读取 .env 文件，只从系统环境变量获取密钥。

进程启动时创建一次实例，再显式传给各个服务，服务内部不持有全局客户端。
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI

from sensai.logger import logger


def _default_config_path() -> str:
    env_path = os.getenv("LLM_CONFIG_PATH")
    if env_path:
        return env_path
    # 从 backend/sensai/llm/llm_factory.py 到 backend/llm_config.json
    return str(Path(__file__).parent.parent.parent / "llm_config.json")


class LLMFactory:
    """LLM 工厂类，负责按配置创建 LLM 实例"""

    def __init__(self, config_path: Optional[str] = None):
        """初始化工厂

        Args:
            config_path: 配置文件路径，为 None 时依次使用 LLM_CONFIG_PATH 和 backend/llm_config.json
        """
        self.config_path = config_path or _default_config_path()
        self._loaded_config = None

    def _load_config(self) -> Dict[str, Any]:
        """加载配置文件

        Returns:
            配置字典

        Raises:
            FileNotFoundError: 配置文件不存在
            json.JSONDecodeError: JSON 格式错误
        """
        if self._loaded_config is None:
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    self._loaded_config = json.load(f)
            except FileNotFoundError:
                raise FileNotFoundError(f"配置文件不存在: {self.config_path}")
            except json.JSONDecodeError as e:
                raise json.JSONDecodeError(f"JSON 格式错误: {e}", e.doc, e.pos)

        return self._loaded_config

    def get_active_model_config(self) -> Dict[str, Any]:
        """获取当前激活的模型配置

        Returns:
            当前激活模型的配置字典

        Raises:
            ValueError: active_model 不存在或对应的 provider 配置不存在
        """
        config = self._load_config()

        active_model = config.get("active_model")
        if not active_model:
            raise ValueError("配置文件中缺少 active_model 字段")

        providers = config.get("providers")
        if not providers:
            raise ValueError("配置文件中缺少 providers 字段")

        model_config = providers.get(active_model)
        if not model_config:
            raise ValueError(f"providers 中找不到 '{active_model}' 的配置")

        return model_config

    def _get_api_key(self, env_key: str) -> str:
        """从系统环境变量获取 API Key

        Raises:
            ValueError: 环境变量不存在或为空
        """
        api_key = os.getenv(env_key)
        if not api_key:
            raise ValueError(f"环境变量 '{env_key}' 未设置或为空，无法初始化 LLM")

        return api_key

    def create_llm(self) -> Any:
        """创建并返回 LLM 实例

        Returns:
            LangChain 聊天模型 (ChatGoogleGenerativeAI 或 ChatOpenAI)

        Raises:
            ValueError: 配置错误或环境变量缺失
            NotImplementedError: 不支持的模型类型
        """
        model_config = self.get_active_model_config()

        env_key_map = model_config.get("env_key_map")
        if not env_key_map:
            raise ValueError("模型配置中缺少 env_key_map 字段")

        api_key = self._get_api_key(env_key_map)

        base_url = model_config.get("base_url")
        model_name = model_config.get("model_name")
        temperature = model_config.get("temperature", 0.7)
        # 调用方不做自动重试，默认也关掉 SDK 自带的重试
        max_retries = model_config.get("max_retries", 0)

        if not model_name:
            raise ValueError("模型配置中缺少 model_name 字段")

        active_model = self._load_config()["active_model"]
        logger.info(f"[LLMFactory] 创建模型: {active_model} / {model_name}")

        if active_model == "gemini":
            return ChatGoogleGenerativeAI(
                google_api_key=api_key,
                model=model_name,
                temperature=temperature,
                max_retries=max_retries
            )
        elif active_model in ("openai_official", "moonshot"):
            # Moonshot 使用 OpenAI 兼容接口
            return ChatOpenAI(
                api_key=api_key,
                base_url=base_url,
                model=model_name,
                temperature=temperature,
                max_retries=max_retries
            )
        else:
            raise NotImplementedError(f"不支持的模型类型: {active_model}")


def get_llm(config_path: Optional[str] = None) -> Any:
    """按配置创建一个 LLM 实例的便捷函数

    Returns:
        LangChain LLM 对象
    """
    return LLMFactory(config_path).create_llm()
