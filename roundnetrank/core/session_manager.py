"""
训练场次管理
开场、加轮、删轮、调整选手、录入比分、重开比赛、归档；所有操作都返回新的场次与选手表，不修改输入
"""

import random
from dataclasses import replace
from typing import Dict, Iterable, Mapping, Optional, Tuple

from roundnetrank.core.exceptions import MissingPlayerError, SessionStateError
from roundnetrank.infra.config.ranking_settings import RankingSettings
from roundnetrank.infra.scoring.rating_algorithms import calculate_new_ratings, validate_scores
from roundnetrank.infra.scoring.round_generator import IdFactory, generate_round, new_id
from roundnetrank.models import (
    EMPTY_SLOT,
    Match,
    MatchmakingMode,
    Player,
    Round,
    Session,
    SessionStatus,
)
from roundnetrank.utils.logger import get_logger

logger = get_logger(__name__)

PlayerTable = Dict[str, Player]


class RoundNotFoundError(SessionStateError, LookupError):
    pass


class MatchNotFoundError(SessionStateError, LookupError):
    pass


def start_session(
    participant_ids: Iterable[str],
    date: int,
    id_factory: Optional[IdFactory] = None,
) -> Session:
    """开始一个新的训练场次（名单去重并保持顺序）"""
    roster = tuple(dict.fromkeys(participant_ids))
    if not roster:
        raise SessionStateError("参赛名单不能为空")
    session = Session(
        id=(id_factory or new_id)(),
        date=date,
        participant_ids=roster,
        status=SessionStatus.ACTIVE,
    )
    logger.info(f"开始训练场次 {session.id}，参赛 {len(roster)} 人")
    return session


def _require_active(session: Session) -> None:
    if session.is_archived:
        raise SessionStateError(f"场次 {session.id} 已归档")


def _resolve_players(player_ids: Iterable[str], players: Mapping[str, Player], context: str):
    ids = list(player_ids)
    missing = [pid for pid in ids if pid not in players]
    if missing:
        raise MissingPlayerError(missing, context)
    return [players[pid] for pid in ids]


def find_round(session: Session, round_id: str) -> Round:
    rnd = session.find_round(round_id)
    if rnd is None:
        raise RoundNotFoundError(f"场次 {session.id} 中不存在轮次 {round_id}")
    return rnd


def find_match(session: Session, round_id: str, match_id: str) -> Match:
    match = find_round(session, round_id).find_match(match_id)
    if match is None:
        raise MatchNotFoundError(f"轮次 {round_id} 中不存在比赛 {match_id}")
    return match


def _replace_match(session: Session, round_id: str, new_match: Match) -> Session:
    rounds = []
    for rnd in session.rounds:
        if rnd.id == round_id:
            rnd = replace(rnd, matches=tuple(
                new_match if m.id == new_match.id else m for m in rnd.matches
            ))
        rounds.append(rnd)
    return replace(session, rounds=tuple(rounds))


def add_round(
    session: Session,
    players: Mapping[str, Player],
    mode: MatchmakingMode,
    rng: Optional[random.Random] = None,
    id_factory: Optional[IdFactory] = None,
    now: Optional[int] = None,
) -> Session:
    """为进行中的场次生成并追加新一轮"""
    _require_active(session)
    participants = _resolve_players(session.participant_ids, players, f"场次 {session.id}")
    new_round = generate_round(
        participants,
        mode,
        len(session.rounds) + 1,
        session.rounds,
        rng=rng,
        id_factory=id_factory,
        now=now,
    )
    return replace(session, rounds=session.rounds + (new_round,))


def delete_round(session: Session, round_id: str) -> Session:
    """删除一轮（已录入的评分变化不会自动回退，需要时请重开比赛或全量重算）"""
    _require_active(session)
    find_round(session, round_id)
    return replace(session, rounds=tuple(r for r in session.rounds if r.id != round_id))


def replace_match_player(
    session: Session,
    round_id: str,
    match_id: str,
    team: int,
    index: int,
    player_id: str,
) -> Session:
    """替换未完成比赛中某个位置的选手（用于填写自定义模式的空位）"""
    if team not in (1, 2) or index not in (0, 1):
        raise ValueError(f"无效的位置: team={team}, index={index}")
    _require_active(session)
    match = find_match(session, round_id, match_id)
    if match.is_completed:
        raise SessionStateError(f"比赛 {match_id} 已完成，不能调整选手")
    if player_id != EMPTY_SLOT and player_id not in session.participant_ids:
        raise MissingPlayerError([player_id], f"场次 {session.id} 的参赛名单")

    target = match.team1 if team == 1 else match.team2
    ids = list(target.player_ids)
    ids[index] = player_id
    new_team = replace(target, player_ids=tuple(ids))
    new_match = replace(match, team1=new_team) if team == 1 else replace(match, team2=new_team)
    return _replace_match(session, round_id, new_match)


def submit_score(
    session: Session,
    round_id: str,
    match_id: str,
    score1: int,
    score2: int,
    players: Mapping[str, Player],
    settings: Optional[RankingSettings] = None,
) -> Tuple[Session, PlayerTable]:
    """录入比分并更新四名选手的评分"""
    _require_active(session)
    validate_scores(score1, score2)
    match = find_match(session, round_id, match_id)
    if match.is_completed:
        raise SessionStateError(f"比赛 {match_id} 已录入比分，请先重开")
    if match.has_placeholders:
        raise SessionStateError(f"比赛 {match_id} 仍有空位")
    if len(set(match.player_ids)) != 4:
        raise SessionStateError(f"比赛 {match_id} 中存在重复选手")

    p1, p2, p3, p4 = _resolve_players(match.player_ids, players, f"比赛 {match_id}")
    result = calculate_new_ratings(p1, p2, p3, p4, score1, score2, settings)

    updated_players = dict(players)
    for player in result.updated_players:
        updated_players[player.id] = player

    new_match = match.with_scores(score1, score2, result.individual_deltas, result.aggregate_delta)
    logger.info(f"比赛 {match_id} 录入比分 {score1} - {score2}，K={result.effective_k:.2f}")
    return _replace_match(session, round_id, new_match), updated_players


def reopen_match(
    session: Session,
    round_id: str,
    match_id: str,
    players: Mapping[str, Player],
) -> Tuple[Session, PlayerTable]:
    """重开已完成的比赛: 先按记录的 individual_deltas 回退评分与胜负，再恢复为未完成"""
    _require_active(session)
    match = find_match(session, round_id, match_id)
    if not match.is_completed:
        raise SessionStateError(f"比赛 {match_id} 尚未完成，无需重开")

    score1, score2 = match.team1.score, match.team2.score
    deltas = match.individual_deltas or {}
    unrecorded = [pid for pid in match.player_ids if pid not in deltas]
    if unrecorded or score1 is None or score2 is None:
        # 无法精确回退，只能依靠全量重算
        raise SessionStateError(
            f"比赛 {match_id} 缺少选手 {unrecorded} 的评分变化记录或比分，无法回退，请先运行全量重算"
        )
    _resolve_players(match.player_ids, players, f"重开比赛 {match_id}")

    updated_players = dict(players)
    for team, own, other in ((match.team1, score1, score2), (match.team2, score2, score1)):
        for pid in team.player_ids:
            player = updated_players[pid]
            updated_players[pid] = replace(
                player,
                match_points=player.match_points - deltas[pid],
                wins=player.wins - (1 if own > other else 0),
                losses=player.losses - (1 if own < other else 0),
            )

    logger.info(f"比赛 {match_id} 已重开，评分变化已回退")
    return _replace_match(session, round_id, match.reopened()), updated_players


def archive_session(session: Session) -> Session:
    """归档场次（终态）"""
    _require_active(session)
    logger.info(f"场次 {session.id} 已归档，共 {len(session.rounds)} 轮")
    return replace(session, status=SessionStatus.ARCHIVED)
