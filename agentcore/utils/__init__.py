"""
Utility modules for agentcore.

- logger: Structured logging with loguru
"""

from agentcore.utils.logger import get_logger, set_log_level, LoggerManager

__all__ = [
    "get_logger",
    "set_log_level",
    "LoggerManager",
]
