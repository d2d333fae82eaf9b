"""回合调度 - 决定下一个行动的玩家（跳过已放弃的玩家）"""

from typing import Optional

from src.game.game_state import GameState


class NoEligiblePlayerError(RuntimeError):
    """所有玩家都已放弃，找不到可行动的玩家"""


class TurnScheduler:
    """按座位顺序轮转，跳过 passed_players 中的玩家"""

    @staticmethod
    def next_eligible(state: GameState, start: int) -> Optional[int]:
        """
        从 start 的下一个座位开始顺时针查找第一个未放弃的玩家。
        最多扫描一整圈（包括 start 自己），找不到返回 None。
        """
        n = state.player_count
        for step in range(1, n + 1):
            pid = (start + step) % n
            if pid not in state.passed_players:
                return pid
        return None

    def advance_turn(self, state: GameState) -> int:
        """把 current_player 推进到下一个可行动的玩家，返回新的座位号"""
        pid = self.next_eligible(state, state.current_player)
        if pid is None:
            raise NoEligiblePlayerError(
                f"round={state.round} 所有玩家都已放弃: {sorted(state.passed_players)}"
            )
        state.current_player = pid
        return pid
