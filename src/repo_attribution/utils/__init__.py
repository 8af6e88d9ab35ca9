"""
Utility modules for repo-attribution
"""

from .logger import get_logger, setup_logger, LogContext
from .config import AppConfig, Config, load_repo_configurations

__all__ = [
    "AppConfig",
    "Config",
    "load_repo_configurations",
    "get_logger",
    "setup_logger",
    "LogContext",
]
