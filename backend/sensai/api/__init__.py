"""
HTTP 接口层
"""

from .main import create_app, create_default_app

__all__ = [
    "create_app",
    "create_default_app"
]
