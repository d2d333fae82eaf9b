"""规则引擎 AI - 基于简单规则的猜测策略，不依赖 LLM"""

import random
from typing import List, Optional

from src.engine.token import Category, ChallengeCard
from src.engine.guess import Direction
from src.game.player import Player
from src.game.game_state import GameState
from src.game.autoplay import Decision


class RuleAI:
    """基于简单规则的 AI 策略"""

    def __init__(self, cash_out_at: int = 3, rng: Optional[random.Random] = None):
        self.cash_out_at = cash_out_at   # 本轮攒到几枚令牌就兑现
        self.rng = rng or random.Random()

    def decide_category(self, cards: List[ChallengeCard], state: GameState) -> Category:
        """选类别：优先选本局还没玩过的类别"""
        if not cards:
            return self.rng.choice(list(Category))
        fresh = [c for c in cards if c.category not in state.played_challenges]
        return (fresh or cards)[0].category

    def decide_action(self, player: Player, state: GameState) -> Decision:
        """
        行动决策。
        攒够令牌就兑现；没有可猜的令牌时有令牌就兑现、否则放弃；
        其余情况用草稿池中位数估计未知令牌，猜它相对中心令牌的方向。
        """
        if player.at_risk >= self.cash_out_at:
            return Decision("cash_out", strategy="落袋为安")

        center = state.center_token
        category = state.selected_category
        if not state.draft_pool or center is None or category is None:
            if player.this_round:
                return Decision("cash_out", strategy="没得猜了，兑现")
            return Decision("pass", strategy="本轮到此为止")

        values = sorted(t.value(category) for t in state.draft_pool)
        median = values[len(values) // 2]
        center_value = center.value(category)
        direction = Direction.HIGHER if median >= center_value else Direction.LOWER

        # 中心令牌接近中位数时风险最大，手里有货就先兑现
        spread = (values[-1] - values[0]) or 1
        if player.this_round and abs(median - center_value) < spread * 0.1:
            return Decision("cash_out", strategy="太接近了，不冒险")

        token = self.rng.choice(state.draft_pool)
        return Decision("guess", token_id=token.id, direction=direction, strategy="按中位数猜")

    async def async_decide_action(self, player: Player, state: GameState) -> Decision:
        """异步接口，直接复用同步决策"""
        return self.decide_action(player, state)
