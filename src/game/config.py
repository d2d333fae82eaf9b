"""游戏配置 - 默认值可由 GAME_* 环境变量覆盖"""

import os
from dataclasses import dataclass


@dataclass
class GameConfig:
    """一局游戏的可调参数"""
    max_rounds: int = 5
    max_players: int = 6
    min_players: int = 2
    round_end_delay: float = 0.5         # 全员放弃后延迟结算（秒），留给界面过渡
    cash_out_delay: float = 0.3          # 兑现动画停顿（秒），仅用于展示
    challenge_cards_per_draw: int = 3
    draft_pool_size: int = 8

    @classmethod
    def from_env(cls) -> "GameConfig":
        """从环境变量读取配置，未设置的项使用默认值"""
        return cls(
            max_rounds=int(os.getenv("GAME_MAX_ROUNDS", "5")),
            max_players=int(os.getenv("GAME_MAX_PLAYERS", "6")),
            min_players=int(os.getenv("GAME_MIN_PLAYERS", "2")),
            round_end_delay=float(os.getenv("GAME_ROUND_END_DELAY", "0.5")),
            cash_out_delay=float(os.getenv("GAME_CASH_OUT_DELAY", "0.3")),
            challenge_cards_per_draw=int(os.getenv("GAME_CHALLENGE_CARDS", "3")),
            draft_pool_size=int(os.getenv("GAME_DRAFT_POOL_SIZE", "8")),
        )
