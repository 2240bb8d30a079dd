"""
ConfigManager单元测试
"""

import pytest
import yaml

from roundnetrank.infra.config.config_manager import ConfigManager
from roundnetrank.infra.config.ranking_settings import (
    ClassicParams,
    ProportionalParams,
    RankingMode,
    RankingSettings,
)
from roundnetrank.models import MatchmakingMode


@pytest.fixture
def sample_config():
    """创建示例配置"""
    return {
        'ranking_settings': {
            'mode': 'PROPORTIONAL',
            'classic': {'k_base': 16, 'bonus_factor': 1.5, 'margin_threshold': 5},
            'proportional': {'k_base': 20, 'bonus_factor': 1.4, 'saturation_margin': 12},
        },
        'matchmaking': {
            'default_mode': 'SPLIT_BALANCED',
            'random_seed': 7,
        },
        'recalculation': {
            'initial_match_points': 1200,
        },
    }


@pytest.fixture
def write_config(tmp_path):
    """将配置写入临时YAML文件"""
    def _write(config, name='config.yaml'):
        path = tmp_path / name
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(config, f, allow_unicode=True)
        return path
    return _write


def test_config_manager_initialization(sample_config, write_config):
    """测试ConfigManager初始化"""
    path = write_config(sample_config)
    manager = ConfigManager(str(path))

    assert manager.config_path == path
    assert manager.get_raw_config() == sample_config


def test_config_file_not_found():
    """测试配置文件不存在"""
    with pytest.raises(FileNotFoundError):
        ConfigManager('/nonexistent/config.yaml')


def test_empty_config_file(tmp_path):
    """测试空配置文件"""
    path = tmp_path / 'empty.yaml'
    path.write_text('', encoding='utf-8')
    with pytest.raises(ValueError, match="配置文件为空"):
        ConfigManager(str(path))


def test_malformed_config_file(tmp_path):
    """测试格式错误的配置文件"""
    path = tmp_path / 'broken.yaml'
    path.write_text('ranking_settings: [unclosed', encoding='utf-8')
    with pytest.raises(ValueError, match="配置文件格式错误"):
        ConfigManager(str(path))


def test_get_ranking_settings(sample_config, write_config):
    """测试读取评分设置"""
    manager = ConfigManager(str(write_config(sample_config)))
    settings = manager.get_ranking_settings()

    assert settings.mode == RankingMode.PROPORTIONAL
    assert settings.classic == ClassicParams(k_base=16, bonus_factor=1.5, margin_threshold=5)
    assert settings.proportional == ProportionalParams(k_base=20, bonus_factor=1.4, saturation_margin=12)
    assert settings.active_params is settings.proportional


def test_ranking_settings_defaults(write_config):
    """测试未配置评分设置时使用默认值: CLASSIC, K=12, 奖励1.25, 阈值7"""
    manager = ConfigManager(str(write_config({'matchmaking': {'default_mode': 'SAME_LEVEL'}})))
    settings = manager.get_ranking_settings()

    assert settings == RankingSettings.default()
    assert settings.mode == RankingMode.CLASSIC
    assert settings.classic.k_base == 12
    assert settings.classic.bonus_factor == 1.25
    assert settings.classic.margin_threshold == 7


def test_partial_ranking_settings(write_config):
    """测试部分配置时其余字段使用默认值"""
    manager = ConfigManager(str(write_config({'ranking_settings': {'classic': {'margin_threshold': 9}}})))
    settings = manager.get_ranking_settings()

    assert settings.classic.margin_threshold == 9
    assert settings.classic.k_base == 12
    assert settings.mode == RankingMode.CLASSIC


def test_env_var_resolution(sample_config, write_config, monkeypatch):
    """测试环境变量解析"""
    sample_config['ranking_settings']['mode'] = 'env_var:TEST_RANKING_MODE'
    sample_config['ranking_settings']['classic']['k_base'] = 'env_var:TEST_K_BASE'
    monkeypatch.setenv('TEST_RANKING_MODE', 'classic')
    monkeypatch.setenv('TEST_K_BASE', '24')
    manager = ConfigManager(str(write_config(sample_config)))

    settings = manager.get_ranking_settings()
    assert settings.mode == RankingMode.CLASSIC
    assert settings.classic.k_base == 24.0


def test_env_var_missing(sample_config, write_config, monkeypatch):
    """测试环境变量未设置"""
    sample_config['ranking_settings']['mode'] = 'env_var:TEST_MISSING_MODE'
    monkeypatch.delenv('TEST_MISSING_MODE', raising=False)
    manager = ConfigManager(str(write_config(sample_config)))

    with pytest.raises(ValueError, match="环境变量 TEST_MISSING_MODE 未设置"):
        manager.get_ranking_settings()


def test_matchmaking_and_recalculation_settings(sample_config, write_config):
    """测试配对与重算配置"""
    manager = ConfigManager(str(write_config(sample_config)))

    assert manager.get_default_matchmaking_mode() == MatchmakingMode.SPLIT_BALANCED
    assert manager.get_random_seed() == 7
    assert manager.get_initial_match_points() == 1200.0


def test_matchmaking_defaults(write_config):
    """测试配对配置缺失时的默认值"""
    manager = ConfigManager(str(write_config({'recalculation': {}})))

    assert manager.get_default_matchmaking_mode() == MatchmakingMode.BALANCED_PAIRS
    assert manager.get_random_seed() is None
    assert manager.get_initial_match_points() == 0.0


def test_validate_config_ok(sample_config, write_config):
    """测试有效配置没有错误"""
    manager = ConfigManager(str(write_config(sample_config)))
    assert manager.validate_config() == []


def test_validate_config_errors(write_config):
    """测试验证配置错误"""
    config = {
        'ranking_settings': {
            'classic': {'k_base': 0, 'bonus_factor': 0.5},
            'proportional': {'saturation_margin': 0},
        },
        'matchmaking': {'default_mode': 'TEAM_DEATHMATCH', 'random_seed': 'abc'},
    }
    manager = ConfigManager(str(write_config(config)))
    errors = manager.validate_config()

    assert any('classic.k_base' in e for e in errors)
    assert any('classic.bonus_factor' in e for e in errors)
    assert any('saturation_margin' in e for e in errors)
    assert any('不支持的配对模式' in e for e in errors)
    assert any('random_seed' in e for e in errors)

    with pytest.raises(ValueError):
        manager.get_ranking_settings()


def test_unknown_ranking_mode(write_config):
    """测试不支持的评分模式"""
    manager = ConfigManager(str(write_config({'ranking_settings': {'mode': 'GLICKO'}})))
    assert any('不支持的评分模式' in e for e in manager.validate_config())


def test_unknown_parameter_rejected():
    """测试未知参数被拒绝"""
    with pytest.raises(ValueError, match="未知参数"):
        RankingSettings.from_dict({'classic': {'k_factor': 10}})


def test_settings_round_trip_through_dict():
    """测试设置可以导出为字典再构建"""
    settings = RankingSettings(mode=RankingMode.PROPORTIONAL)
    assert RankingSettings.from_dict(settings.to_dict()) == settings
