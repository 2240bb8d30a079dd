"""
配置模块
YAML配置加载与评分设置
"""

from .config_manager import ConfigManager
from .ranking_settings import (
    RankingMode,
    RankingSettings,
    ClassicParams,
    ProportionalParams,
)

__all__ = [
    'ConfigManager',
    'RankingMode',
    'RankingSettings',
    'ClassicParams',
    'ProportionalParams',
]
