"""
日志配置模块

统一使用 loguru。各模块直接 `from sensai.logger import logger`，
消息以 "[组件名]" 作前缀，例如 "[UserService] ..."。
"""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"


def setup_logger(log_dir: Optional[Path] = None, level: str = "INFO") -> Optional[Path]:
    """
    配置 loguru 输出

    控制台始终输出 level 及以上；如果给出 log_dir（或设置了 SENSAI_LOG_DIR），
    额外写一份 DEBUG 级别的滚动文件日志。

    Args:
        log_dir: 日志目录（可选）
        level: 控制台日志级别

    Returns:
        日志文件路径，没有文件输出时返回 None
    """
    if log_dir is None and os.environ.get("SENSAI_LOG_DIR"):
        log_dir = Path(os.environ["SENSAI_LOG_DIR"])

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_dir is None:
        return None

    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / "sensai.log"
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", rotation="10 MB", retention=5)
    logger.info(f"[Logger] 文件日志: {log_file}")
    return log_file


__all__ = ["logger", "setup_logger"]
