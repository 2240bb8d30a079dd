"""
选手统计
基于历史比赛计算胜负、得失分、连胜连败、近期状态、搭档与对手战绩、出勤率，以及评分排行榜
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from roundnetrank.models import Match, Player, Session

RECENT_FORM_LENGTH = 5
RECENT_MATCHES_LENGTH = 10
MIN_GAMES_FOR_RATE = 2


@dataclass
class HeadToHead:
    wins: int = 0
    losses: int = 0
    total: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.total if self.total else 0.0

    @property
    def loss_rate(self) -> float:
        return self.losses / self.total if self.total else 0.0


# 挑选"之最"搭档/对手的标准；比率类标准要求至少交手 MIN_GAMES_FOR_RATE 场
TOP_CRITERIA: Dict[str, Callable[[HeadToHead], float]] = {
    'wins': lambda r: r.wins,
    'losses': lambda r: r.losses,
    'frequency': lambda r: r.total,
    'win_rate': lambda r: r.win_rate if r.total >= MIN_GAMES_FOR_RATE else -1,
    'loss_rate': lambda r: r.loss_rate if r.total >= MIN_GAMES_FOR_RATE else -1,
}


def _find_top(records: Dict[str, HeadToHead], criteria: str) -> Optional[str]:
    if criteria not in TOP_CRITERIA:
        raise ValueError(f"不支持的统计标准: {criteria}，可选: {', '.join(TOP_CRITERIA)}")
    metric = TOP_CRITERIA[criteria]

    top_id, top_value = None, -1
    for player_id in sorted(records):
        value = metric(records[player_id])
        if value > top_value:
            top_id, top_value = player_id, value
    return top_id


@dataclass
class PlayerStats:
    """单个选手的统计数据

    recent_form / recent_matches 均为最近的在前；streak_type 为 'W'/'L'/'T'，没有比赛时为 None。
    """
    player_id: str
    matches: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_made: int = 0
    points_taken: int = 0
    current_streak: int = 0
    streak_type: Optional[str] = None
    recent_form: List[str] = field(default_factory=list)
    recent_matches: List[Match] = field(default_factory=list)
    partners: Dict[str, HeadToHead] = field(default_factory=dict)
    opponents: Dict[str, HeadToHead] = field(default_factory=dict)
    attendance_rate: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.matches if self.matches else 0.0

    @property
    def avg_points_made(self) -> float:
        return self.points_made / self.matches if self.matches else 0.0

    @property
    def avg_points_taken(self) -> float:
        return self.points_taken / self.matches if self.matches else 0.0

    def top_partner(self, criteria: str) -> Optional[str]:
        """按标准挑选搭档: wins / losses / frequency / win_rate / loss_rate，同分时取ID靠前者"""
        return _find_top(self.partners, criteria)

    def top_opponent(self, criteria: str) -> Optional[str]:
        """按标准挑选对手，标准同 top_partner"""
        return _find_top(self.opponents, criteria)


def _completed_matches_for(player_id: str, sessions: Sequence[Session]) -> List[Match]:
    """选手参与的已完成比赛，最近的在前"""
    entries = []
    for session in sessions:
        for rnd in session.rounds:
            for match in rnd.matches:
                if match.is_completed and player_id in match.player_ids:
                    entries.append((session.date, match.created_at, match))
    entries.sort(key=lambda e: (e[0], e[1]), reverse=True)
    return [match for _, _, match in entries]


def compute_player_stats(player_id: str, sessions: Sequence[Session]) -> PlayerStats:
    """计算选手的统计数据"""
    stats = PlayerStats(player_id=player_id)
    partners = defaultdict(HeadToHead)
    opponents = defaultdict(HeadToHead)
    streak_open = True

    history = _completed_matches_for(player_id, sessions)
    stats.recent_matches = history[:RECENT_MATCHES_LENGTH]

    for match in history:
        own_team = match.team_of(player_id)
        other_team = match.team2 if own_team is match.team1 else match.team1
        own_score, other_score = own_team.score or 0, other_team.score or 0
        won = own_score > other_score
        lost = own_score < other_score
        outcome = 'W' if won else 'L' if lost else 'T'

        stats.matches += 1
        stats.points_made += own_score
        stats.points_taken += other_score
        if won:
            stats.wins += 1
        elif lost:
            stats.losses += 1
        else:
            stats.ties += 1

        if len(stats.recent_form) < RECENT_FORM_LENGTH:
            stats.recent_form.append(outcome)

        # 从最近一场往前数，结果一变即中断
        if stats.streak_type is None:
            stats.streak_type = outcome
        if streak_open and outcome == stats.streak_type:
            stats.current_streak += 1
        else:
            streak_open = False

        partner_id = own_team.partner_of(player_id)
        for other_id, table in [(partner_id, partners)] + [(oid, opponents) for oid in other_team.player_ids]:
            record = table[other_id]
            record.total += 1
            record.wins += int(won)
            record.losses += int(lost)

    stats.partners = dict(partners)
    stats.opponents = dict(opponents)
    if sessions:
        attended = sum(1 for s in sessions if player_id in s.participant_ids)
        stats.attendance_rate = attended / len(sessions)
    return stats


def leaderboard(players: Sequence[Player], include_hidden: bool = False) -> pd.DataFrame:
    """按总评分降序生成排行榜"""
    visible = [p for p in players if include_hidden or not p.hidden]
    records = []
    for rank, player in enumerate(sorted(visible, key=lambda p: p.rating, reverse=True), 1):
        records.append({
            'rank': rank,
            'id': player.id,
            'name': player.name,
            'rating': player.rating,
            'wins': player.wins,
            'losses': player.losses,
        })
    return pd.DataFrame(records, columns=['rank', 'id', 'name', 'rating', 'wins', 'losses'])
