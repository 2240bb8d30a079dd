#!/usr/bin/env python3
"""
端到端演示脚本
用虚构选手跑一个完整的训练场次: 生成轮次、随机录入比分、归档，再全量重算并输出排行榜
"""

import argparse
import random
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

try:
    from roundnetrank.core.player_stats import leaderboard
    from roundnetrank.core.session_manager import add_round, archive_session, start_session, submit_score
    from roundnetrank.infra.config import ConfigManager
    from roundnetrank.infra.scoring import RecalculationEngine
    from roundnetrank.models import Gender, MatchmakingMode, Player
    from roundnetrank.utils.env_loader import load_project_env
    from roundnetrank.utils.logger import configure_root_logger, get_logger
except ImportError as e:
    print(f"导入错误: {e}")
    print("\n💡 提示: 请先安装项目依赖:")
    print("   pip install -e .")
    sys.exit(1)


def build_players(count: int, rng: random.Random) -> dict:
    players = {}
    for i in range(count):
        pid = f"p{i + 1:02d}"
        players[pid] = Player(
            id=pid,
            name=f"Player {i + 1}",
            gender=Gender.M if i % 2 == 0 else Gender.F,
            base_points=rng.choice([900, 1000, 1100, 1200]),
        )
    return players


def main():
    parser = argparse.ArgumentParser(description="模拟一个训练场次")
    parser.add_argument('--config', default=str(ROOT_DIR / "config" / "ranking.yaml"))
    parser.add_argument('--players', type=int, default=10)
    parser.add_argument('--rounds', type=int, default=5)
    parser.add_argument('--mode', default=None, choices=[m.value for m in MatchmakingMode])
    parser.add_argument('--log-level', default=None, help='默认读取环境变量 ROUNDNETRANK_LOG_LEVEL')
    args = parser.parse_args()

    load_project_env()
    configure_root_logger(level=args.log_level)
    logger = get_logger("run_mock_session")

    config_manager = ConfigManager(args.config)
    errors = config_manager.validate_config()
    if errors:
        for error in errors:
            logger.error(f"配置错误: {error}")
        sys.exit(1)

    settings = config_manager.get_ranking_settings()
    mode = MatchmakingMode(args.mode) if args.mode else config_manager.get_default_matchmaking_mode()
    rng = random.Random(config_manager.get_random_seed())

    players = build_players(args.players, rng)
    session = start_session(players.keys(), date=0)

    for _ in range(args.rounds):
        session = add_round(session, players, mode, rng=rng)
        current_round = session.rounds[-1]
        logger.info(f"第 {current_round.round_number} 轮，轮空: {list(current_round.resting_player_ids)}")
        for match in current_round.matches:
            if match.has_placeholders:
                continue
            winner_score = 21
            loser_score = rng.randint(5, 19)
            score1, score2 = (winner_score, loser_score) if rng.random() < 0.5 else (loser_score, winner_score)
            session, players = submit_score(
                session, current_round.id, match.id, score1, score2, players, settings
            )

    session = archive_session(session)

    engine = RecalculationEngine(
        settings=settings,
        initial_match_points=config_manager.get_initial_match_points(),
    )
    result = engine.run(list(players.values()), [session])
    print(leaderboard(result.players).to_string(index=False))


if __name__ == "__main__":
    main()
