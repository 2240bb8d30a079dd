"""
全量重算编排器
按时间顺序回放所有已归档场次的比赛，从零重建选手评分
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from roundnetrank.core.exceptions import RecalculationError
from roundnetrank.infra.config.ranking_settings import RankingSettings
from roundnetrank.infra.scoring.rating_algorithms import RatingAlgorithm, TeamEloRatingAlgorithm
from roundnetrank.models import Match, Player, Round, Session
from roundnetrank.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SkippedMatch:
    """回放时跳过的比赛（数据完整性问题）"""
    session_id: str
    round_id: str
    match_id: str
    missing_player_ids: Tuple[str, ...] = ()
    duplicate_player_ids: Tuple[str, ...] = ()


@dataclass
class RecalculationResult:
    """重算结果: 新的选手列表、刷新了评分变化的场次、跳过的比赛和评分历史快照"""
    players: List[Player]
    sessions: List[Session]
    skipped_matches: List[SkippedMatch] = field(default_factory=list)
    history: pd.DataFrame = field(default_factory=pd.DataFrame)
    replayed_count: int = 0


class RecalculationEngine:
    """重算编排器: 严格按顺序折叠比赛结果，全部在内存中完成后一次性返回"""

    def __init__(
        self,
        rating_algorithm: Optional[RatingAlgorithm] = None,
        settings: Optional[RankingSettings] = None,
        initial_match_points: float = 0.0,
    ):
        self.settings = settings or RankingSettings.default()
        self.rating_algorithm = rating_algorithm or TeamEloRatingAlgorithm(self.settings)
        self.initial_match_points = initial_match_points

    def run(
        self,
        players: Sequence[Player],
        sessions: Sequence[Session],
    ) -> RecalculationResult:
        """运行全量重算（输入不会被修改）"""
        archived = sorted(
            (s for s in sessions if s.is_archived),
            key=lambda s: s.date,
        )
        logger.info(f"开始全量重算，选手数: {len(players)}, 已归档场次数: {len(archived)}")

        current: Dict[str, Player] = {
            p.id: replace(p, match_points=self.initial_match_points, wins=0, losses=0)
            for p in players
        }
        skipped: List[SkippedMatch] = []
        snapshots: List[pd.Series] = []
        replayed_sessions: List[Session] = []
        replayed_count = 0

        try:
            for session in archived:
                new_rounds = []
                for rnd in session.rounds:
                    new_matches = []
                    for match in rnd.matches:
                        new_match, replayed = self._replay_match(session, rnd, match, current, skipped)
                        new_matches.append(new_match)
                        replayed_count += replayed
                    new_rounds.append(replace(rnd, matches=tuple(new_matches)))
                replayed_sessions.append(replace(session, rounds=tuple(new_rounds)))
                snapshots.append(
                    pd.Series({pid: p.rating for pid, p in current.items()}, name=session.date)
                )
        except Exception as e:
            logger.error(f"全量重算失败，结果未应用: {e}")
            raise RecalculationError(f"全量重算失败: {e}") from e

        if skipped:
            logger.warning(f"全量重算跳过 {len(skipped)} 场数据不完整的比赛")
        logger.info(f"全量重算完成，共回放 {replayed_count} 场比赛")

        # 未归档场次原样返回，保持输入顺序
        refreshed = {s.id: s for s in replayed_sessions}
        return RecalculationResult(
            players=[current[p.id] for p in players],
            sessions=[refreshed.get(s.id, s) for s in sessions],
            skipped_matches=skipped,
            history=pd.DataFrame(snapshots),
            replayed_count=replayed_count,
        )

    def _replay_match(
        self,
        session: Session,
        rnd: Round,
        match: Match,
        current: Dict[str, Player],
        skipped: List[SkippedMatch],
    ) -> Tuple[Match, int]:
        if not match.is_completed or not match.team1.is_scored or not match.team2.is_scored:
            return match, 0

        missing = tuple(pid for pid in match.player_ids if pid not in current)
        if missing:
            logger.warning(
                f"比赛 {match.id}（场次 {session.id}, 第 {rnd.round_number} 轮）引用了未知选手 {missing}，跳过"
            )
            skipped.append(SkippedMatch(session.id, rnd.id, match.id, missing_player_ids=missing))
            return match, 0

        counts = Counter(match.player_ids)
        duplicates = tuple(pid for pid, count in counts.items() if count > 1)
        if duplicates:
            logger.warning(
                f"比赛 {match.id}（场次 {session.id}, 第 {rnd.round_number} 轮）中选手 {duplicates} 重复出现，跳过"
            )
            skipped.append(SkippedMatch(session.id, rnd.id, match.id, duplicate_player_ids=duplicates))
            return match, 0

        p1, p2, p3, p4 = (current[pid] for pid in match.player_ids)
        result = self.rating_algorithm.update_ratings(
            p1, p2, p3, p4, match.team1.score, match.team2.score, self.settings
        )
        for updated in result.updated_players:
            current[updated.id] = updated

        new_match = replace(
            match,
            individual_deltas=result.individual_deltas,
            points_delta=result.aggregate_delta,
        )
        return new_match, 1


def recalculate_all(
    all_players: Sequence[Player],
    archived_sessions: Sequence[Session],
    settings: Optional[RankingSettings] = None,
    initial_match_points: float = 0.0,
) -> List[Player]:
    """从已归档场次重建所有选手的评分"""
    engine = RecalculationEngine(settings=settings, initial_match_points=initial_match_points)
    return engine.run(all_players, archived_sessions).players
