"""
配对策略模块
为每种轮次生成模式提供组队策略: 同水平分组、均衡搭档、分层均衡、完全随机、自定义
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import random

from roundnetrank.infra.scoring.round_history import RoundHistory
from roundnetrank.models import EMPTY_SLOT, Match, MatchmakingMode, Player

MatchFactory = Callable[[str, str, str, str], Match]

GROUP_SIZE = 4


def sort_by_rating(players: Sequence[Player]) -> List[Player]:
    """按总评分降序排列（稳定排序）"""
    return sorted(players, key=lambda p: p.rating, reverse=True)


class PairingStrategy(ABC):
    """配对策略基类: 定义配对策略接口"""

    @abstractmethod
    def generate_matches(
        self,
        players: Sequence[Player],
        history: RoundHistory,
        rng: random.Random,
        create_match: MatchFactory,
    ) -> List[Match]:
        """将本轮上场的选手（人数为4的倍数）组成若干场比赛"""
        pass


class CustomPairingStrategy(PairingStrategy):
    """自定义: 只生成空位比赛，由调用方手动填入选手"""

    def generate_matches(self, players, history, rng, create_match):
        return [
            create_match(EMPTY_SLOT, EMPTY_SLOT, EMPTY_SLOT, EMPTY_SLOT)
            for _ in range(len(players) // GROUP_SIZE)
        ]


class RandomPairingStrategy(PairingStrategy):
    """随机配对策略: 完全随机打乱后每4人一组，不考虑评分和历史"""

    def generate_matches(self, players, history, rng, create_match):
        shuffled = list(players)
        rng.shuffle(shuffled)

        matches = []
        for i in range(0, len(shuffled) - GROUP_SIZE + 1, GROUP_SIZE):
            a, b, c, d = shuffled[i:i + GROUP_SIZE]
            matches.append(create_match(a.id, b.id, c.id, d.id))
        return matches


class SameLevelPairingStrategy(PairingStrategy):
    """同水平分组: 按评分排序后每4人一组，组内选择搭档历史最少的分法"""

    # 组内下标 (0..3 按评分降序) 的三种分法，最均衡的放在最前
    SPLITS: Tuple[Tuple[Tuple[int, int], Tuple[int, int]], ...] = (
        ((0, 3), (1, 2)),
        ((0, 2), (1, 3)),
        ((0, 1), (2, 3)),
    )

    def generate_matches(self, players, history, rng, create_match):
        ordered = sort_by_rating(players)
        matches = []
        for i in range(0, len(ordered) - GROUP_SIZE + 1, GROUP_SIZE):
            block = ordered[i:i + GROUP_SIZE]
            team_a, team_b = self._best_split(block, history)
            matches.append(create_match(team_a[0].id, team_a[1].id, team_b[0].id, team_b[1].id))
        return matches

    def _best_split(
        self,
        block: List[Player],
        history: RoundHistory
    ) -> Tuple[Tuple[Player, Player], Tuple[Player, Player]]:
        best = None
        best_cost = None
        for (a, b), (c, d) in self.SPLITS:
            cost = (
                history.partnership_count(block[a].id, block[b].id) +
                history.partnership_count(block[c].id, block[d].id)
            )
            if best_cost is None or cost < best_cost:
                best_cost = cost
                best = ((block[a], block[b]), (block[c], block[d]))
        return best


class BalancedPairGenerator:
    """均衡搭档生成器

    上半区随机选一人，从打乱的下半区中优先挑选从未搭档过的人组成队伍A；
    再在剩余的 (上半区, 下半区) 组合中寻找对手: 先看是否搭档过，再看总评分与队伍A最接近。
    """

    def __init__(self, rng: random.Random):
        self.rng = rng

    def generate(
        self,
        players: Sequence[Player],
        history: RoundHistory,
        create_match: MatchFactory,
    ) -> Tuple[List[Match], List[Player]]:
        """返回 (比赛列表, 未能组队的选手)"""
        ordered = sort_by_rating(players)
        half = len(ordered) // 2
        top = ordered[:half]
        bottom = ordered[half:]

        matches = []
        while len(top) >= 2 and len(bottom) >= 2:
            p1 = self.rng.choice(top)
            top.remove(p1)

            partner = self._pick_partner(p1, bottom, history)
            bottom.remove(partner)

            target = p1.rating + partner.rating
            p3, p4 = self._pick_opponents(target, top, bottom, history)
            top.remove(p3)
            bottom.remove(p4)

            matches.append(create_match(p1.id, partner.id, p3.id, p4.id))

        return matches, top + bottom

    def _pick_partner(
        self,
        p1: Player,
        bottom: List[Player],
        history: RoundHistory
    ) -> Player:
        candidates = list(bottom)
        self.rng.shuffle(candidates)
        for candidate in candidates:
            if not history.have_partnered(p1.id, candidate.id):
                return candidate
        return candidates[0]

    def _pick_opponents(
        self,
        target: float,
        top: List[Player],
        bottom: List[Player],
        history: RoundHistory
    ) -> Tuple[Player, Player]:
        best = None
        best_key = None
        for top_player in top:
            for bottom_player in bottom:
                key = (
                    history.have_partnered(top_player.id, bottom_player.id),
                    abs(top_player.rating + bottom_player.rating - target),
                )
                if best_key is None or key < best_key:
                    best_key = key
                    best = (top_player, bottom_player)
        return best


class BalancedPairsPairingStrategy(PairingStrategy):
    """均衡搭档: 强弱搭配，两队总评分尽量接近，避免重复搭档"""

    def __init__(self, fallback: Optional[PairingStrategy] = None):
        self.fallback = fallback or RandomPairingStrategy()

    def generate_matches(self, players, history, rng, create_match):
        matches, leftovers = BalancedPairGenerator(rng).generate(players, history, create_match)
        if len(leftovers) >= GROUP_SIZE:
            matches.extend(self.fallback.generate_matches(leftovers, history, rng, create_match))
        return matches


class SplitBalancedPairingStrategy(PairingStrategy):
    """分层均衡: 按评分切成上下两个组，各自独立做均衡搭档，强组与弱组互不相遇"""

    def __init__(self, inner: Optional[PairingStrategy] = None):
        self.inner = inner or BalancedPairsPairingStrategy()

    @staticmethod
    def split_point(count: int) -> int:
        """最接近一半人数的4的倍数（恰在中间时取较大者）"""
        return GROUP_SIZE * int(count / (2 * GROUP_SIZE) + 0.5)

    def generate_matches(self, players, history, rng, create_match):
        ordered = sort_by_rating(players)
        cut = self.split_point(len(ordered))
        upper, lower = ordered[:cut], ordered[cut:]

        matches = []
        for group in (upper, lower):
            if len(group) >= GROUP_SIZE:
                matches.extend(self.inner.generate_matches(group, history, rng, create_match))
        return matches


PAIRING_STRATEGIES: Dict[MatchmakingMode, Callable[[], PairingStrategy]] = {
    MatchmakingMode.CUSTOM: CustomPairingStrategy,
    MatchmakingMode.SAME_LEVEL: SameLevelPairingStrategy,
    MatchmakingMode.BALANCED_PAIRS: BalancedPairsPairingStrategy,
    MatchmakingMode.SPLIT_BALANCED: SplitBalancedPairingStrategy,
    MatchmakingMode.FULL_RANDOM: RandomPairingStrategy,
}


def get_pairing_strategy(mode: MatchmakingMode) -> PairingStrategy:
    """按模式获取配对策略"""
    return PAIRING_STRATEGIES[MatchmakingMode(mode)]()
