"""
评分与配对基础设施
提供评分算法、轮空调度、配对策略、轮次生成和全量重算
"""

from .pairing_strategies import (
    PairingStrategy,
    BalancedPairGenerator,
    BalancedPairsPairingStrategy,
    CustomPairingStrategy,
    RandomPairingStrategy,
    SameLevelPairingStrategy,
    SplitBalancedPairingStrategy,
    get_pairing_strategy,
)
from .rating_algorithms import (
    RatingAlgorithm,
    TeamEloRatingAlgorithm,
    calculate_new_ratings,
    validate_scores,
)
from .recalculation import (
    RecalculationEngine,
    RecalculationResult,
    SkippedMatch,
    recalculate_all,
)
from .rest_rotation import RestRotationScheduler
from .round_generator import generate_round
from .round_history import RoundHistory

__all__ = [
    # 配对策略
    'PairingStrategy',
    'BalancedPairGenerator',
    'BalancedPairsPairingStrategy',
    'CustomPairingStrategy',
    'RandomPairingStrategy',
    'SameLevelPairingStrategy',
    'SplitBalancedPairingStrategy',
    'get_pairing_strategy',
    # 评分算法
    'RatingAlgorithm',
    'TeamEloRatingAlgorithm',
    'calculate_new_ratings',
    'validate_scores',
    # 轮次生成
    'RestRotationScheduler',
    'RoundHistory',
    'generate_round',
    # 全量重算
    'RecalculationEngine',
    'RecalculationResult',
    'SkippedMatch',
    'recalculate_all',
]
