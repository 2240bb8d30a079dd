"""
轮次历史索引
一次遍历之前的所有轮次，预计算搭档次数、轮空次数和最近轮空位置，供整次轮次生成复用
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional

from roundnetrank.models import EMPTY_SLOT, Round


def pair_key(player_a: str, player_b: str) -> FrozenSet[str]:
    return frozenset((player_a, player_b))


@dataclass
class RoundHistory:
    """场次内已进行轮次的统计"""
    round_count: int = 0
    partnerships: Dict[FrozenSet[str], int] = field(default_factory=lambda: defaultdict(int))
    rest_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    last_rested_index: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_rounds(cls, rounds: Iterable[Round]) -> 'RoundHistory':
        history = cls()
        for index, rnd in enumerate(rounds):
            history.round_count += 1
            for player_id in rnd.resting_player_ids:
                history.rest_counts[player_id] += 1
                history.last_rested_index[player_id] = index
            for match in rnd.matches:
                for team in (match.team1, match.team2):
                    first, second = team.player_ids
                    if EMPTY_SLOT in (first, second) or first == second:
                        continue
                    history.partnerships[pair_key(first, second)] += 1
        return history

    def partnership_count(self, player_a: str, player_b: str) -> int:
        return self.partnerships.get(pair_key(player_a, player_b), 0)

    def have_partnered(self, player_a: str, player_b: str) -> bool:
        return self.partnership_count(player_a, player_b) > 0

    def times_rested(self, player_id: str) -> int:
        return self.rest_counts.get(player_id, 0)

    def rounds_since_last_rest(self, player_id: str) -> int:
        """距离上次轮空经过的轮数: 上一轮刚轮空为0，从未轮空为 round_count + 1"""
        last_index: Optional[int] = self.last_rested_index.get(player_id)
        if last_index is None:
            return self.round_count + 1
        return self.round_count - 1 - last_index
