"""
roundnetrank
2v2 训练场次的轮次生成与选手评分
"""

from roundnetrank.infra.config import ConfigManager, RankingMode, RankingSettings
from roundnetrank.infra.scoring import (
    RecalculationEngine,
    calculate_new_ratings,
    generate_round,
    recalculate_all,
)
from roundnetrank.models import (
    Gender,
    Match,
    MatchmakingMode,
    MatchStatus,
    Player,
    RatingResult,
    Round,
    Session,
    SessionStatus,
    Team,
)

__all__ = [
    'ConfigManager',
    'RankingMode',
    'RankingSettings',
    'RecalculationEngine',
    'calculate_new_ratings',
    'generate_round',
    'recalculate_all',
    'Gender',
    'Match',
    'MatchmakingMode',
    'MatchStatus',
    'Player',
    'RatingResult',
    'Round',
    'Session',
    'SessionStatus',
    'Team',
]
