"""自动对局 - 用 AI 策略驱动 GameController 走完整局游戏"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from src.engine.token import Category, ChallengeCard
from src.engine.guess import Direction
from src.game.player import Player
from src.game.game_state import GameState, GamePhase
from src.game.controller import GameController

logger = logging.getLogger(__name__)


@dataclass
class Decision:
    """一次行动决策"""
    action: str                          # "guess" / "pass" / "cash_out"
    token_id: Optional[str] = None
    direction: Optional[Direction] = None
    strategy: str = ""                   # 解说文本


class AIStrategy(Protocol):
    """AI 决策接口（策略模式）"""

    def decide_category(self, cards: List[ChallengeCard], state: GameState) -> Category:
        """从抽出的挑战卡中选择类别"""
        ...

    def decide_action(self, player: Player, state: GameState) -> Decision:
        """决定本回合行动"""
        ...

    async def async_decide_action(self, player: Player, state: GameState) -> Decision:
        """异步决定本回合行动（LLM 策略在这里调用远端模型）"""
        ...


def apply_decision(gc: GameController, decision: Decision) -> bool:
    """把决策交给控制器执行，返回操作是否被接受"""
    if decision.action == "cash_out":
        return gc.execute_cash_out()
    if decision.action == "pass":
        return gc.pass_round()
    if decision.action == "guess":
        return gc.make_guess(decision.direction, token_id=decision.token_id) is not None
    logger.warning("未知决策 action=%s", decision.action)
    return False


async def play_turn(gc: GameController, strategies: List[AIStrategy], delay: float = 0.0) -> None:
    """执行当前玩家的一步操作（选类别或行动）"""
    s = gc.state
    pid = s.current_player
    strategy = strategies[pid]

    if s.phase == GamePhase.CHALLENGE:
        category = strategy.decide_category(list(s.drawn_challenge_cards), s)
        if not gc.select_category(category):
            # 选类别失败时放弃本轮，避免卡住
            gc.pass_round()
        return

    decision = await strategy.async_decide_action(s.current(), s)
    if not apply_decision(gc, decision):
        # 非法决策按放弃处理
        gc.pass_round()
    if decision.action == "cash_out" and delay > 0:
        await asyncio.sleep(gc.config.cash_out_delay)


async def run_game(
    gc: GameController, strategies: List[AIStrategy], delay: float = 0.0, max_steps: int = 10000
) -> GameState:
    """运行一整局，直到游戏结束"""
    assert len(strategies) == len(gc.players)
    await gc.start_game()
    for _ in range(max_steps):
        await gc.wait_idle()
        if gc.state.phase == GamePhase.FINISHED:
            break
        await play_turn(gc, strategies, delay)
        if delay > 0:
            await asyncio.sleep(delay)
    else:
        logger.error("对局超过 %d 步仍未结束", max_steps)
    await gc.wait_idle()
    return gc.state
