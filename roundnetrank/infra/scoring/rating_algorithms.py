"""
评分算法模块
2v2 双打的ELO评分: 每名选手独立对比对手队伍的平均评分
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Optional, Tuple
import math

from roundnetrank.core.exceptions import InvalidScoreError
from roundnetrank.infra.config.ranking_settings import RankingSettings
from roundnetrank.models import Player, RatingResult
from roundnetrank.utils.logger import get_logger

logger = get_logger(__name__)


class RatingAlgorithm(ABC):
    """评分算法基类: 定义评分算法接口"""

    @abstractmethod
    def update_ratings(
        self,
        p1: Player,
        p2: Player,
        p3: Player,
        p4: Player,
        score1: int,
        score2: int,
        settings: Optional[RankingSettings] = None,
    ) -> RatingResult:
        """根据一场比赛的比分更新四名选手的评分"""
        pass

    @abstractmethod
    def get_expected_score(
        self,
        rating: float,
        opponent_rating: float
    ) -> float:
        """计算期望得分"""
        pass


def validate_scores(score1, score2) -> Tuple[int, int]:
    """校验比分: 必须为非负整数"""
    if score1 is None or score2 is None:
        raise InvalidScoreError(f"比分缺失: {score1!r} - {score2!r}")
    for score in (score1, score2):
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidScoreError(f"比分必须为整数: {score!r}")
        if score < 0:
            raise InvalidScoreError(f"比分不能为负数: {score!r}")
    return score1, score2


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TeamEloRatingAlgorithm(RatingAlgorithm):
    """双打ELO评分算法

    K值由 RankingSettings 按分差决定；胜方/负方/平局的实际得分为 1.0/0.0/0.5。
    每名选手对比对手队伍的平均评分计算期望得分，因此同队选手的变化值可能不同。
    """

    def __init__(
        self,
        settings: Optional[RankingSettings] = None,
        logistic_constant: float = 400
    ):
        self.settings = settings or RankingSettings.default()
        self.logistic_constant = logistic_constant

    def get_expected_score(
        self,
        rating: float,
        opponent_rating: float
    ) -> float:
        """
        计算期望得分

        公式: E = 1 / (1 + 10^((R_opp - R) / logistic_constant))
        """
        return 1 / (1 + 10 ** ((opponent_rating - rating) / self.logistic_constant))

    def get_effective_k(
        self,
        score1: int,
        score2: int,
        settings: Optional[RankingSettings] = None
    ) -> float:
        """根据分差计算本场的有效K值"""
        margin = abs(score1 - score2)
        return (settings or self.settings).effective_k(margin)

    def update_ratings(
        self,
        p1: Player,
        p2: Player,
        p3: Player,
        p4: Player,
        score1: int,
        score2: int,
        settings: Optional[RankingSettings] = None,
    ) -> RatingResult:
        """ELO评分更新: delta = K * (actual - expected)，p1/p2 为队伍1，p3/p4 为队伍2"""
        validate_scores(score1, score2)
        k_eff = self.get_effective_k(score1, score2, settings)

        if score1 > score2:
            actual1 = 1.0
        elif score1 < score2:
            actual1 = 0.0
        else:
            actual1 = 0.5
        actual2 = 1.0 - actual1

        team1_avg = (p1.rating + p2.rating) / 2
        team2_avg = (p3.rating + p4.rating) / 2

        deltas: Dict[str, float] = {}
        for player, actual, opponent_avg in (
            (p1, actual1, team2_avg),
            (p2, actual1, team2_avg),
            (p3, actual2, team1_avg),
            (p4, actual2, team1_avg),
        ):
            deltas[player.id] = k_eff * (actual - self.get_expected_score(player.rating, opponent_avg))

        win1 = 1 if score1 > score2 else 0
        win2 = 1 if score2 > score1 else 0

        updated = (
            replace(p1, match_points=p1.match_points + deltas[p1.id], wins=p1.wins + win1, losses=p1.losses + win2),
            replace(p2, match_points=p2.match_points + deltas[p2.id], wins=p2.wins + win1, losses=p2.losses + win2),
            replace(p3, match_points=p3.match_points + deltas[p3.id], wins=p3.wins + win2, losses=p3.losses + win1),
            replace(p4, match_points=p4.match_points + deltas[p4.id], wins=p4.wins + win2, losses=p4.losses + win1),
        )

        # 展示用: 胜方（平局时为队伍1）第一名选手的变化值
        reference = p1 if actual1 >= 0.5 else p3
        aggregate_delta = round_half_up(deltas[reference.id])

        logger.debug(
            f"评分更新: [{p1.id}, {p2.id}] {score1} - {score2} [{p3.id}, {p4.id}], "
            f"K={k_eff:.2f}, 变化: " + ", ".join(f"{pid}:{d:+.2f}" for pid, d in deltas.items())
        )

        return RatingResult(
            updated_players=updated,
            individual_deltas=deltas,
            aggregate_delta=aggregate_delta,
            effective_k=k_eff,
        )


def calculate_new_ratings(
    p1: Player,
    p2: Player,
    p3: Player,
    p4: Player,
    score1: int,
    score2: int,
    settings: Optional[RankingSettings] = None,
) -> RatingResult:
    """计算一场比赛后的评分变化（未提供设置时使用默认的 CLASSIC 参数）"""
    return TeamEloRatingAlgorithm(settings).update_ratings(p1, p2, p3, p4, score1, score2)
