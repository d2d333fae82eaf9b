"""玩家模型 - 派对卡牌游戏中一名玩家的数据结构"""

from dataclasses import dataclass, field
from typing import List

from src.engine.token import Token


@dataclass
class Player:
    """一个玩家"""
    id: int                          # 座位号（整局游戏内稳定）
    name: str                        # 显示名
    score: int = 0                   # 累计积分
    hand: List[Token] = field(default_factory=list)        # 已存入的令牌（永久持有）
    this_round: List[Token] = field(default_factory=list)  # 本轮暂得的令牌（尚未存入）
    cash_outs: int = 0               # 兑现次数
    correct_guesses: int = 0
    wrong_guesses: int = 0

    @property
    def hand_size(self) -> int:
        return len(self.hand)

    @property
    def at_risk(self) -> int:
        """本轮尚未兑现的令牌数"""
        return len(self.this_round)

    def bank_this_round(self) -> List[Token]:
        """把本轮令牌全部存入手牌，返回被存入的令牌"""
        banked = list(self.this_round)
        self.hand.extend(banked)
        self.this_round.clear()
        return banked

    def forfeit_this_round(self) -> List[Token]:
        """清空本轮令牌（猜错或轮次结束），返回被移出的令牌"""
        lost = list(self.this_round)
        self.this_round.clear()
        return lost

