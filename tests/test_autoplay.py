"""自动对局测试 - RuleAI 驱动整局游戏"""

import asyncio
import random

from src.engine.content import DeckContentProvider
from src.engine.token import Category
from src.game.config import GameConfig
from src.game.controller import GameController
from src.game.game_state import GamePhase
from src.game.autoplay import Decision, apply_decision, run_game
from src.ai.rule_ai import RuleAI


def _make_gc(n: int = 3, seed: int = 0, **config_kw) -> GameController:
    config_kw.setdefault("round_end_delay", 0)
    return GameController(
        player_names=[f"AI{i}" for i in range(n)],
        content=DeckContentProvider(rng=random.Random(seed)),
        config=GameConfig(**config_kw),
    )


class TestRunGame:

    def test_full_game_finishes(self):
        gc = _make_gc(3, seed=1)
        strategies = [RuleAI(rng=random.Random(i)) for i in range(3)]
        state = asyncio.run(run_game(gc, strategies))
        assert state.phase == GamePhase.FINISHED
        assert state.round == state.max_rounds + 1
        assert state.winners
        top = max(p.score for p in state.players)
        assert all(state.players[w].score == top for w in state.winners)
        assert len([e for e in state.events if e.action == "round_end"]) == state.max_rounds

    def test_every_round_uses_a_category(self):
        gc = _make_gc(2, seed=5, max_rounds=3)
        strategies = [RuleAI(rng=random.Random(i)) for i in range(2)]
        state = asyncio.run(run_game(gc, strategies))
        assert len(state.played_challenges) == 3
        # 相邻两轮不会抽到同一类别
        for a, b in zip(state.played_challenges, state.played_challenges[1:]):
            assert a != b

    def test_with_round_end_delay(self):
        gc = _make_gc(2, seed=2, max_rounds=2, round_end_delay=0.001)
        strategies = [RuleAI(rng=random.Random(i)) for i in range(2)]
        state = asyncio.run(run_game(gc, strategies))
        assert state.phase == GamePhase.FINISHED


class TestApplyDecision:

    def _playing_gc(self) -> GameController:
        gc = _make_gc(2)
        asyncio.run(gc.start_game())
        gc.select_category(gc.state.drawn_challenge_cards[0].category)
        return gc

    def test_pass(self):
        gc = self._playing_gc()
        assert apply_decision(gc, Decision("pass")) is True
        assert gc.state.passed_players == {0}

    def test_unknown_action(self):
        gc = self._playing_gc()
        assert apply_decision(gc, Decision("dance")) is False

    def test_guess_with_bad_token(self):
        gc = self._playing_gc()
        assert apply_decision(gc, Decision("guess", token_id="nope", direction="higher")) is False
        assert gc.state.selected_category in list(Category)
