"""TurnScheduler 单元测试 - 轮转、跳过已放弃玩家、无人可轮"""

import itertools

import pytest

from src.game.player import Player
from src.game.game_state import GameState
from src.game.turns import TurnScheduler, NoEligiblePlayerError


def _make_state(n: int = 2, **kwargs) -> GameState:
    """创建一个基础 GameState"""
    players = [Player(id=i, name=f"P{i}") for i in range(n)]
    s = GameState(players=players)
    for k, v in kwargs.items():
        setattr(s, k, v)
    return s


class TestAdvanceTurn:
    """测试回合推进"""

    def setup_method(self):
        self.scheduler = TurnScheduler()

    def test_advances_to_next_player(self):
        s = _make_state(2, current_player=0)
        assert self.scheduler.advance_turn(s) == 1
        assert s.current_player == 1

    def test_wraps_around(self):
        s = _make_state(3, current_player=2)
        self.scheduler.advance_turn(s)
        assert s.current_player == 0

    def test_skips_passed_player_and_stays(self):
        """2 人，P1 已放弃，P0 行动后仍轮到 P0"""
        s = _make_state(2, current_player=0, passed_players={1})
        self.scheduler.advance_turn(s)
        assert s.current_player == 0

    def test_skips_several_passed_players(self):
        s = _make_state(4, current_player=0, passed_players={1, 2})
        self.scheduler.advance_turn(s)
        assert s.current_player == 3
        self.scheduler.advance_turn(s)
        assert s.current_player == 0

    def test_skips_passed_when_current_already_passed(self):
        """P0 刚放弃时推进：跳过 P1，轮到 P2"""
        s = _make_state(3, current_player=0, passed_players={0, 1})
        self.scheduler.advance_turn(s)
        assert s.current_player == 2

    def test_all_passed_raises_and_keeps_state(self):
        s = _make_state(2, current_player=1, passed_players={0, 1})
        with pytest.raises(NoEligiblePlayerError):
            self.scheduler.advance_turn(s)
        assert s.current_player == 1
        assert s.passed_players == {0, 1}

    def test_does_not_touch_passed_players(self):
        s = _make_state(3, current_player=0, passed_players={2})
        self.scheduler.advance_turn(s)
        assert s.passed_players == {2}

    def test_never_selects_passed_player(self):
        """枚举 4 人局所有放弃组合与起点：结果永远是未放弃的玩家"""
        n = 4
        for k in range(n):
            for passed in itertools.combinations(range(n), k):
                for start in range(n):
                    s = _make_state(n, current_player=start, passed_players=set(passed))
                    pid = self.scheduler.advance_turn(s)
                    assert pid not in passed
                    assert 0 <= pid < n


class TestNextEligible:

    def test_returns_none_when_everyone_passed(self):
        s = _make_state(3, passed_players={0, 1, 2})
        assert TurnScheduler.next_eligible(s, 0) is None

    def test_can_return_start_itself(self):
        s = _make_state(3, passed_players={1, 2})
        assert TurnScheduler.next_eligible(s, 0) == 0
