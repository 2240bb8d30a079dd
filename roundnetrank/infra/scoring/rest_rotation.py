"""
轮空轮换调度
决定本轮哪些选手轮空: 尽量避免连续轮空，其次让轮空次数最少的人轮空
"""

import random
from typing import List, Optional, Sequence

from roundnetrank.infra.scoring.round_history import RoundHistory
from roundnetrank.models import Player

TEAM_SIZE = 4
REST_COUNT_WEIGHT = 1000
CONSECUTIVE_REST_PENALTY = 10000


class RestRotationScheduler:
    """轮空调度器

    优先级 = 轮空次数 * 1000 - 距上次轮空轮数 (+10000 若上一轮刚轮空)，取最小的若干人。
    排序前先随机打乱，避免同分时的位置偏差。
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def rest_count_for(participant_count: int) -> int:
        return participant_count % TEAM_SIZE

    def rest_priority(self, player_id: str, history: RoundHistory) -> int:
        since_last = history.rounds_since_last_rest(player_id)
        priority = history.times_rested(player_id) * REST_COUNT_WEIGHT - since_last
        if since_last == 0:
            priority += CONSECUTIVE_REST_PENALTY
        return priority

    def select_resting(
        self,
        participants: Sequence[Player],
        history: RoundHistory,
        rest_count: Optional[int] = None
    ) -> List[Player]:
        """返回本轮轮空的选手"""
        if rest_count is None:
            rest_count = self.rest_count_for(len(participants))
        if rest_count <= 0:
            return []

        candidates = list(participants)
        self.rng.shuffle(candidates)
        candidates.sort(key=lambda p: self.rest_priority(p.id, history))
        return candidates[:rest_count]
