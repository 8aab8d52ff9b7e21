"""
Sensai 职业助手后端
"""

__version__ = "0.1.0"
