"""
视图缓存失效

写操作成功后按逻辑路径（如 "/resume"）标记视图过期。
渲染层可以注册监听器，在收到路径后丢弃自己的缓存。
监听器出错只记录日志，不影响已经提交的写操作。
"""

import threading
from typing import Callable, Dict, List

from sensai.logger import logger


class PathRevalidator:
    """按路径记录失效版本号，并通知已注册的监听器"""

    def __init__(self):
        self._lock = threading.Lock()
        self._versions: Dict[str, int] = {}
        self._listeners: List[Callable[[str], None]] = []

    def add_listener(self, listener: Callable[[str], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def revalidate(self, path: str) -> int:
        """
        标记路径过期

        Returns:
            该路径新的版本号
        """
        with self._lock:
            version = self._versions.get(path, 0) + 1
            self._versions[path] = version
            listeners = list(self._listeners)

        logger.debug(f"[PathRevalidator] {path} -> v{version}")
        for listener in listeners:
            try:
                listener(path)
            except Exception as e:
                logger.warning(f"[PathRevalidator] 监听器处理 {path} 失败: {e}")
        return version

    def version(self, path: str) -> int:
        """路径当前版本号，从未失效过为 0"""
        with self._lock:
            return self._versions.get(path, 0)
