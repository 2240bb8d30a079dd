"""统一的环境变量加载工具"""

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from roundnetrank.utils.logger import get_logger

logger = get_logger(__name__)

ENV_FILE_VAR = 'ROUNDNETRANK_ENV_FILE'
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def default_env_path() -> Path:
    """ROUNDNETRANK_ENV_FILE 指定的文件，未指定时为项目根目录的 .env"""
    override = os.getenv(ENV_FILE_VAR)
    return Path(override) if override else PROJECT_ROOT / ".env"


def load_project_env(env_path: Optional[Union[str, Path]] = None) -> bool:
    """加载.env文件（已存在的系统环境变量会被覆盖），返回是否找到该文件"""
    path = Path(env_path) if env_path is not None else default_env_path()

    if not path.exists():
        logger.warning(f"未找到环境变量文件: {path}，将使用系统环境变量")
        return False

    load_dotenv(path, override=True)
    logger.info(f"已加载环境变量文件: {path}")
    return True
