"""
轮次生成器单元测试
"""

import itertools
import random
from collections import Counter

import pytest

from roundnetrank.core.exceptions import MatchmakingError
from roundnetrank.infra.scoring.round_generator import generate_round, resolve_mode
from roundnetrank.models import MatchmakingMode, MatchStatus, Player


def make_players(count):
    return [Player(id=f"p{i}", name=f"P{i}", base_points=1500 - 37 * i) for i in range(count)]


def run_session(players, mode, rounds, seed=0):
    rng = random.Random(seed)
    history = []
    for number in range(1, rounds + 1):
        history.append(generate_round(players, mode, number, history, rng=rng))
    return history


@pytest.mark.parametrize("mode", list(MatchmakingMode))
@pytest.mark.parametrize("count", [0, 1, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 17, 22, 40])
def test_every_participant_appears_exactly_once(mode, count):
    """测试每轮中每名选手恰好出现一次，比赛数*4 + 轮空数 = 人数"""
    players = make_players(count)
    for rnd in run_session(players, mode, rounds=4, seed=count):
        assert len(rnd.matches) * 4 + len(rnd.resting_player_ids) == count
        assert len(rnd.resting_player_ids) == count % 4
        if mode != MatchmakingMode.CUSTOM:
            counts = Counter(rnd.player_ids())
            assert set(counts) == {p.id for p in players}
            assert all(c == 1 for c in counts.values())


def test_small_pool_everyone_rests():
    """测试人数不足4人时不生成比赛，所有人轮空"""
    players = make_players(3)
    rnd = generate_round(players, MatchmakingMode.BALANCED_PAIRS, 1, [], rng=random.Random(0))

    assert rnd.matches == ()
    assert set(rnd.resting_player_ids) == {"p0", "p1", "p2"}


def test_match_metadata():
    """测试比赛带有模式、未完成状态、创建时间和ID"""
    ids = (f"id{i}" for i in itertools.count())
    rnd = generate_round(
        make_players(8), MatchmakingMode.SAME_LEVEL, 3, [],
        rng=random.Random(0), id_factory=lambda: next(ids), now=1234,
    )

    assert rnd.round_number == 3
    assert rnd.mode == MatchmakingMode.SAME_LEVEL
    assert rnd.id.startswith("id")
    for match in rnd.matches:
        assert match.status == MatchStatus.PENDING
        assert match.mode == MatchmakingMode.SAME_LEVEL
        assert match.created_at == 1234
        assert match.individual_deltas is None
    assert len({m.id for m in rnd.matches} | {rnd.id}) == 3


def test_default_ids_are_unique():
    """测试默认ID生成器产生唯一ID"""
    rounds = run_session(make_players(16), MatchmakingMode.FULL_RANDOM, rounds=3)
    ids = [r.id for r in rounds] + [m.id for r in rounds for m in r.matches]
    assert len(ids) == len(set(ids))


def test_custom_mode_placeholders():
    """测试自定义模式生成空位比赛"""
    rnd = generate_round(make_players(9), MatchmakingMode.CUSTOM, 1, [], rng=random.Random(0))

    assert len(rnd.matches) == 2
    assert len(rnd.resting_player_ids) == 1
    assert all(m.has_placeholders for m in rnd.matches)


def test_mode_accepts_string_value():
    """测试模式可以传入字符串值"""
    rnd = generate_round(make_players(4), "SAME_LEVEL", 1, [], rng=random.Random(0))
    assert rnd.mode == MatchmakingMode.SAME_LEVEL


def test_duplicate_participants_rejected():
    """测试重复选手被拒绝"""
    players = make_players(4)
    with pytest.raises(MatchmakingError):
        generate_round(players + [players[0]], MatchmakingMode.FULL_RANDOM, 1, [])


def test_seeded_generation_is_reproducible():
    """测试相同种子生成相同的轮次"""
    players = make_players(10)
    first = run_session(players, MatchmakingMode.BALANCED_PAIRS, rounds=3, seed=42)
    second = run_session(players, MatchmakingMode.BALANCED_PAIRS, rounds=3, seed=42)

    for a, b in zip(first, second):
        assert a.resting_player_ids == b.resting_player_ids
        assert [m.player_ids for m in a.matches] == [m.player_ids for m in b.matches]


@pytest.mark.parametrize("count", [5, 6, 7, 9, 10, 11, 13, 14, 15])
def test_no_consecutive_rest_unless_saturated(count):
    """测试除非所有其他人都已轮空至少同样多次，否则不会连续轮空"""
    players = make_players(count)
    rounds = run_session(players, MatchmakingMode.BALANCED_PAIRS, rounds=12, seed=count)

    rest_totals = Counter()
    for previous, current in zip(rounds, rounds[1:]):
        rest_totals.update(previous.resting_player_ids)
        for pid in set(previous.resting_player_ids) & set(current.resting_player_ids):
            others = [p.id for p in players if p.id != pid]
            assert all(rest_totals[o] >= rest_totals[pid] for o in others)


@pytest.mark.parametrize("count", [5, 6, 7, 9, 10, 11])
def test_rest_counts_stay_balanced(count):
    """测试轮空次数在选手之间最多相差1"""
    players = make_players(count)
    rounds = run_session(players, MatchmakingMode.FULL_RANDOM, rounds=15, seed=count)

    totals = Counter({p.id: 0 for p in players})
    for rnd in rounds:
        totals.update(rnd.resting_player_ids)
    assert max(totals.values()) - min(totals.values()) <= 1


@pytest.mark.parametrize("seed", range(5))
def test_balanced_pairs_round_one_scenario(seed):
    """测试8人均衡搭档首轮: 每队都是上半区与下半区各一人"""
    players = make_players(8)
    top_half = {"p0", "p1", "p2", "p3"}
    rnd = generate_round(players, MatchmakingMode.BALANCED_PAIRS, 1, [], rng=random.Random(seed))

    assert rnd.resting_player_ids == ()
    for match in rnd.matches:
        for team in (match.team1, match.team2):
            assert len(top_half & set(team.player_ids)) == 1


@pytest.mark.parametrize("seed", range(5))
def test_balanced_pairs_second_round_picks_new_partners(seed):
    """测试第二轮均衡搭档中，每场的队伍1都是首轮没有搭档过的组合"""
    players = make_players(8)
    first, second = run_session(players, MatchmakingMode.BALANCED_PAIRS, rounds=2, seed=seed)

    first_teams = {frozenset(t.player_ids) for m in first.matches for t in (m.team1, m.team2)}
    for match in second.matches:
        assert frozenset(match.team1.player_ids) not in first_teams


def test_unknown_mode_falls_back_to_random():
    """测试历史数据中已不支持的模式退回完全随机，仍然为每名选手排位"""
    players = make_players(9)
    rnd = generate_round(players, "GENDER_BALANCED", 1, [], rng=random.Random(0))

    assert rnd.mode == MatchmakingMode.FULL_RANDOM
    assert len(rnd.matches) == 2
    assert sorted(rnd.player_ids()) == sorted(p.id for p in players)
    assert all(m.mode == MatchmakingMode.FULL_RANDOM for m in rnd.matches)


def test_resolve_mode():
    """测试模式解析"""
    assert resolve_mode("SPLIT_BALANCED") == MatchmakingMode.SPLIT_BALANCED
    assert resolve_mode(MatchmakingMode.CUSTOM) == MatchmakingMode.CUSTOM
    assert resolve_mode("GENDER_BALANCED") == MatchmakingMode.FULL_RANDOM
