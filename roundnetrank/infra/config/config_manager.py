"""
统一配置管理器
加载和解析YAML配置文件，支持环境变量解析、配置验证
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml
import os

from roundnetrank.infra.config.ranking_settings import RankingSettings
from roundnetrank.models import MatchmakingMode


DEFAULT_MATCHMAKING_MODE = MatchmakingMode.BALANCED_PAIRS


class ConfigManager:
    """统一配置管理器: 加载YAML配置、解析环境变量、提供配置访问接口"""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"配置文件不存在: {config_path}")

        self._config = self._load_config()

    def _load_config(self) -> dict:
        """加载配置文件"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
                if not config:
                    raise ValueError("配置文件为空")
                if not isinstance(config, dict):
                    raise ValueError("配置文件顶层必须是映射")
                return config
        except yaml.YAMLError as e:
            raise ValueError(f"配置文件格式错误: {e}")

    def _resolve_env_var(self, value: Any) -> Any:
        """解析环境变量格式的配置值，支持格式: env_var:VARIABLE_NAME"""
        if isinstance(value, str) and value.startswith("env_var:"):
            env_key = value[8:]  # 移除 "env_var:" 前缀
            env_value = os.getenv(env_key)
            if env_value is None:
                raise ValueError(f"环境变量 {env_key} 未设置")
            return env_value
        return value

    def _resolve_section(self, section: Any) -> Any:
        """递归解析一个配置段中的环境变量"""
        if isinstance(section, dict):
            return {key: self._resolve_section(value) for key, value in section.items()}
        if isinstance(section, list):
            return [self._resolve_section(item) for item in section]
        return self._resolve_env_var(section)

    def get_raw_config(self) -> dict:
        """获取原始配置字典"""
        return self._config

    # ==================== 评分相关配置 ====================

    def get_ranking_config(self) -> Dict:
        """获取评分设置原始配置（已解析环境变量）"""
        return self._resolve_section(self._config.get('ranking_settings', {}) or {})

    def get_ranking_settings(self) -> RankingSettings:
        """获取评分设置快照，未配置时使用内置默认值"""
        return RankingSettings.from_dict(self.get_ranking_config()).validate()

    def get_recalculation_config(self) -> Dict:
        """获取全量重算配置"""
        return self._resolve_section(self._config.get('recalculation', {}) or {})

    def get_initial_match_points(self) -> float:
        """获取重算时比赛积分的重置值"""
        return float(self.get_recalculation_config().get('initial_match_points', 0))

    # ==================== 配对相关配置 ====================

    def get_matchmaking_config(self) -> Dict:
        """获取配对配置"""
        return self._resolve_section(self._config.get('matchmaking', {}) or {})

    def get_default_matchmaking_mode(self) -> MatchmakingMode:
        """获取默认的轮次生成模式"""
        raw_mode = self.get_matchmaking_config().get('default_mode')
        if raw_mode is None:
            return DEFAULT_MATCHMAKING_MODE
        try:
            return MatchmakingMode(str(raw_mode).upper())
        except ValueError:
            raise ValueError(f"不支持的配对模式: {raw_mode}")

    def get_random_seed(self) -> Optional[int]:
        """获取随机种子（未配置时返回None，即不固定）"""
        seed = self.get_matchmaking_config().get('random_seed')
        return None if seed is None else int(seed)

    def validate_config(self) -> List[str]:
        """验证配置文件的完整性和有效性"""
        errors = []

        try:
            settings = RankingSettings.from_dict(self.get_ranking_config())
            errors.extend(settings.get_validation_errors())
        except ValueError as e:
            errors.append(str(e))

        try:
            self.get_default_matchmaking_mode()
        except ValueError as e:
            errors.append(str(e))

        try:
            self.get_random_seed()
        except (TypeError, ValueError):
            errors.append("matchmaking.random_seed 必须为整数")

        try:
            self.get_initial_match_points()
        except (TypeError, ValueError):
            errors.append("recalculation.initial_match_points 必须为数字")

        return errors
