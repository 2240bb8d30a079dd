"""
工具模块
提供项目中使用的各种工具函数和类
"""

from roundnetrank.utils.logger import (
    configure_root_logger,
    get_logger,
    set_log_level,
    setup_logger,
)
from roundnetrank.utils.env_loader import load_project_env

__all__ = [
    'configure_root_logger',
    'get_logger',
    'set_log_level',
    'setup_logger',
    'load_project_env',
]
