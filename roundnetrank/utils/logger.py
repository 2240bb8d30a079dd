"""
全局日志配置模块
所有模块日志都挂在 roundnetrank 包日志器之下，处理器只在包日志器（或根日志器）上安装一次
"""
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER_NAME = 'roundnetrank'
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "logs"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_LEVEL_ENV = 'ROUNDNETRANK_LOG_LEVEL'

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

_log_configured = False


def resolve_level(level: Optional[str] = None) -> int:
    """日志级别: 显式参数优先，其次环境变量 ROUNDNETRANK_LOG_LEVEL，默认 INFO"""
    name = (level or os.getenv(LOG_LEVEL_ENV) or 'INFO').upper()
    return LOG_LEVELS.get(name, logging.INFO)


def _make_handler(handler: logging.Handler, log_level: int) -> logging.Handler:
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    return handler


def setup_logger(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_to_file: bool = False,
    log_to_console: bool = True,
    log_file_name: Optional[str] = None,
    encoding: str = 'utf-8'
) -> logging.Logger:
    """为指定日志器安装处理器；已安装过则原样返回

    核心计算不做I/O，所以文件日志默认关闭，开启时才创建日志目录。
    """
    logger = logging.getLogger(name) if name else logging.getLogger()
    if logger.handlers:
        return logger

    log_level = resolve_level(level)
    logger.setLevel(log_level)

    if log_to_console:
        logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout), log_level))

    if log_to_file:
        if log_file_name is None:
            log_file_name = f"{PACKAGE_LOGGER_NAME}_{time.strftime('%Y_%m_%d', time.localtime())}.log"
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOGS_DIR / log_file_name, encoding=encoding, mode='a')
        logger.addHandler(_make_handler(file_handler, log_level))

    # 包日志器自带处理器时不再向根日志器重复输出
    logger.propagate = name is None
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取日志记录器

    roundnetrank.* 子模块的日志器本身不挂处理器，向上传播到包日志器；
    程序已调用 configure_root_logger 时则一路传播到根日志器。
    """
    if not name:
        return logging.getLogger()

    logger = logging.getLogger(name)
    if _log_configured:
        return logger

    if name == PACKAGE_LOGGER_NAME or name.startswith(PACKAGE_LOGGER_NAME + '.'):
        setup_logger(PACKAGE_LOGGER_NAME)
        return logger

    return setup_logger(name)


def set_log_level(level: str) -> None:
    """运行时调整包日志器及其处理器的级别"""
    log_level = resolve_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(log_level)
    for handler in package_logger.handlers:
        handler.setLevel(log_level)


def configure_root_logger(
    level: Optional[str] = None,
    log_to_file: bool = False,
    log_to_console: bool = True,
    log_file_name: Optional[str] = None
) -> None:
    """配置根日志记录器（应在程序启动时调用一次），之后包日志器改为向根日志器传播"""
    global _log_configured

    if _log_configured:
        return

    setup_logger(
        name=None,
        level=level,
        log_to_file=log_to_file,
        log_to_console=log_to_console,
        log_file_name=log_file_name
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True

    _log_configured = True
