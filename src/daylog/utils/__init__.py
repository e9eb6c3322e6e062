"""
Utility helpers for daylog.
"""

from .logging import DailyRotatingHandler, configure_logging, get_logger, log_context

__all__ = ["DailyRotatingHandler", "configure_logging", "get_logger", "log_context"]
