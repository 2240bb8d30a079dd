"""
数据模型
选手、队伍、比赛、轮次、训练场次等不可变记录，所有"修改"都通过 dataclasses.replace 返回新值
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


EMPTY_SLOT = ''


class Gender(str, Enum):
    """性别标签（仅用于展示，不参与配对）"""
    M = 'M'
    F = 'F'


class MatchmakingMode(str, Enum):
    """轮次生成模式"""
    FULL_RANDOM = 'FULL_RANDOM'
    SAME_LEVEL = 'SAME_LEVEL'
    BALANCED_PAIRS = 'BALANCED_PAIRS'
    SPLIT_BALANCED = 'SPLIT_BALANCED'
    CUSTOM = 'CUSTOM'


class MatchStatus(str, Enum):
    PENDING = 'PENDING'
    COMPLETED = 'COMPLETED'


class SessionStatus(str, Enum):
    ACTIVE = 'ACTIVE'
    ARCHIVED = 'ARCHIVED'


@dataclass(frozen=True)
class Player:
    """选手: 总评分 = base_points + match_points"""
    id: str
    name: str
    gender: Gender = Gender.M
    base_points: float = 0.0
    match_points: float = 0.0
    wins: int = 0
    losses: int = 0
    hidden: bool = False

    @property
    def rating(self) -> float:
        return self.base_points + self.match_points


@dataclass(frozen=True)
class Team:
    """两人队伍，score 为空表示比赛未完成"""
    player_ids: Tuple[str, str]
    score: Optional[int] = None

    def __post_init__(self):
        ids = tuple(self.player_ids)
        if len(ids) != 2:
            raise ValueError(f"队伍必须恰好包含两名选手: {ids}")
        object.__setattr__(self, 'player_ids', ids)

    @property
    def is_scored(self) -> bool:
        return self.score is not None

    def contains(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def partner_of(self, player_id: str) -> Optional[str]:
        if player_id not in self.player_ids:
            return None
        first, second = self.player_ids
        return second if first == player_id else first


@dataclass(frozen=True)
class Match:
    """一场2v2比赛

    individual_deltas 仅在 COMPLETED 状态下存在；points_delta 为展示用的整数化分差。
    """
    id: str
    team1: Team
    team2: Team
    mode: MatchmakingMode
    status: MatchStatus = MatchStatus.PENDING
    created_at: int = 0
    points_delta: Optional[int] = None
    individual_deltas: Optional[Mapping[str, float]] = None

    def __post_init__(self):
        if self.individual_deltas is not None:
            object.__setattr__(self, 'individual_deltas', dict(self.individual_deltas))

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    @property
    def player_ids(self) -> Tuple[str, str, str, str]:
        return self.team1.player_ids + self.team2.player_ids

    @property
    def has_placeholders(self) -> bool:
        return EMPTY_SLOT in self.player_ids

    def team_of(self, player_id: str) -> Optional[Team]:
        if self.team1.contains(player_id):
            return self.team1
        if self.team2.contains(player_id):
            return self.team2
        return None

    def opponents_of(self, player_id: str) -> Tuple[str, ...]:
        if self.team1.contains(player_id):
            return self.team2.player_ids
        if self.team2.contains(player_id):
            return self.team1.player_ids
        return ()

    def with_scores(self, score1: int, score2: int, individual_deltas: Mapping[str, float],
                    points_delta: int) -> 'Match':
        return replace(
            self,
            team1=replace(self.team1, score=score1),
            team2=replace(self.team2, score=score2),
            status=MatchStatus.COMPLETED,
            individual_deltas=individual_deltas,
            points_delta=points_delta,
        )

    def reopened(self) -> 'Match':
        return replace(
            self,
            team1=replace(self.team1, score=None),
            team2=replace(self.team2, score=None),
            status=MatchStatus.PENDING,
            individual_deltas=None,
            points_delta=None,
        )


@dataclass(frozen=True)
class Round:
    """一轮: 若干比赛 + 轮空名单"""
    id: str
    round_number: int
    matches: Tuple[Match, ...] = ()
    resting_player_ids: Tuple[str, ...] = ()
    mode: MatchmakingMode = MatchmakingMode.FULL_RANDOM

    def __post_init__(self):
        object.__setattr__(self, 'matches', tuple(self.matches))
        object.__setattr__(self, 'resting_player_ids', tuple(self.resting_player_ids))

    def player_ids(self) -> List[str]:
        """本轮所有出场及轮空的选手ID（占位空位除外）"""
        ids = [pid for m in self.matches for pid in m.player_ids if pid != EMPTY_SLOT]
        return ids + list(self.resting_player_ids)

    def find_match(self, match_id: str) -> Optional[Match]:
        for match in self.matches:
            if match.id == match_id:
                return match
        return None


@dataclass(frozen=True)
class Session:
    """训练场次: 开始后参赛名单固定，归档后不再生成新轮次"""
    id: str
    date: int
    participant_ids: Tuple[str, ...]
    rounds: Tuple[Round, ...] = ()
    status: SessionStatus = SessionStatus.ACTIVE

    def __post_init__(self):
        object.__setattr__(self, 'participant_ids', tuple(self.participant_ids))
        object.__setattr__(self, 'rounds', tuple(self.rounds))

    @property
    def is_archived(self) -> bool:
        return self.status == SessionStatus.ARCHIVED

    def find_round(self, round_id: str) -> Optional[Round]:
        for rnd in self.rounds:
            if rnd.id == round_id:
                return rnd
        return None


@dataclass(frozen=True)
class RatingResult:
    """单场比赛的评分计算结果"""
    updated_players: Tuple[Player, Player, Player, Player]
    individual_deltas: Dict[str, float] = field(default_factory=dict)
    aggregate_delta: int = 0
    effective_k: float = 0.0
