"""
异常定义模块
核心计算过程中可能抛出的错误类型
"""

from typing import Iterable, Tuple


class RoundnetRankError(Exception):
    """所有业务异常的基类"""


class InvalidScoreError(RoundnetRankError, ValueError):
    """比分非法: 负数、非整数或缺失"""


class MissingPlayerError(RoundnetRankError, LookupError):
    """比赛引用了未知选手，属于数据完整性错误"""

    def __init__(self, player_ids: Iterable[str], context: str = ''):
        self.player_ids: Tuple[str, ...] = tuple(player_ids)
        message = f"未找到选手: {', '.join(self.player_ids)}"
        if context:
            message = f"{context}: {message}"
        super().__init__(message)


class MatchmakingError(RoundnetRankError, ValueError):
    """轮次生成的输入不合法（例如参赛名单中有重复ID）"""


class SessionStateError(RoundnetRankError, RuntimeError):
    """训练场次或比赛的状态不允许该操作"""


class RecalculationError(RoundnetRankError, RuntimeError):
    """全量重算无法完成，结果不可部分应用"""
