"""
轮次生成器
根据参赛名单、生成模式和本场之前的轮次生成新的一轮: 先选轮空，再按模式组队
"""

import random
import time
import uuid
from collections import Counter
from typing import Callable, List, Optional, Sequence

from roundnetrank.core.exceptions import MatchmakingError
from roundnetrank.infra.scoring.pairing_strategies import get_pairing_strategy
from roundnetrank.infra.scoring.rest_rotation import RestRotationScheduler
from roundnetrank.infra.scoring.round_history import RoundHistory
from roundnetrank.models import Match, MatchmakingMode, Player, Round, Team
from roundnetrank.utils.logger import get_logger

logger = get_logger(__name__)

IdFactory = Callable[[], str]


def new_id() -> str:
    return uuid.uuid4().hex


def now_millis() -> int:
    return int(time.time() * 1000)


def resolve_mode(mode) -> MatchmakingMode:
    """解析生成模式；历史数据中无法识别的模式（如已移除的 GENDER_BALANCED）退回完全随机"""
    try:
        return MatchmakingMode(mode)
    except ValueError:
        logger.warning(f"未知的生成模式 {mode!r}，退回 {MatchmakingMode.FULL_RANDOM.value}")
        return MatchmakingMode.FULL_RANDOM


def generate_round(
    participants: Sequence[Player],
    mode: MatchmakingMode,
    round_number: int,
    prior_rounds: Sequence[Round],
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
    now: Optional[int] = None,
) -> Round:
    """生成新的一轮

    Args:
        participants: 本场参赛选手
        mode: 生成模式
        round_number: 本轮序号（从1开始）
        prior_rounds: 本场之前的所有轮次（按顺序）
        rng: 随机源，传入固定种子的实例可复现结果
        id_factory: 比赛/轮次ID生成器，默认使用 uuid4
        now: 比赛创建时间（毫秒时间戳），默认当前时间

    Returns:
        新轮次；人数不足4人时不含比赛，所有人轮空
    """
    mode = resolve_mode(mode)
    rng = rng or random.Random()
    id_factory = id_factory or new_id
    created_at = now_millis() if now is None else now

    duplicates = [pid for pid, count in Counter(p.id for p in participants).items() if count > 1]
    if duplicates:
        raise MatchmakingError(f"参赛名单中存在重复选手: {', '.join(duplicates)}")

    history = RoundHistory.from_rounds(prior_rounds)

    resting = RestRotationScheduler(rng).select_resting(participants, history)
    resting_ids = [p.id for p in resting]
    resting_set = set(resting_ids)
    active = [p for p in participants if p.id not in resting_set]

    def create_match(a: str, b: str, c: str, d: str) -> Match:
        return Match(
            id=id_factory(),
            team1=Team((a, b)),
            team2=Team((c, d)),
            mode=mode,
            created_at=created_at,
        )

    strategy = get_pairing_strategy(mode)
    matches: List[Match] = strategy.generate_matches(active, history, rng, create_match)

    logger.debug(
        f"第 {round_number} 轮 [{mode.value}]: 参赛 {len(participants)} 人, "
        f"比赛 {len(matches)} 场, 轮空: {resting_ids}"
    )

    return Round(
        id=id_factory(),
        round_number=round_number,
        matches=tuple(matches),
        resting_player_ids=tuple(resting_ids),
        mode=mode,
    )
