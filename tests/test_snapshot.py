"""状态快照测试"""

import json

from src.engine.token import Category, ChallengeCard, make_token
from src.game.player import Player
from src.game.game_state import GameState, GamePhase, RoundStatus
from src.game.snapshot import state_to_dict, state_from_dict


def _make_state() -> GameState:
    center = make_token("c0", "Center", boxOffice=100)
    p0 = Player(id=0, name="甲", score=2, hand=[make_token("h", "H", boxOffice=5)])
    p1 = Player(id=1, name="乙", this_round=[make_token("r", "R", boxOffice=7)])
    p2 = Player(id=2, name="丙")
    return GameState(
        players=[p0, p1, p2],
        phase=GamePhase.PLAYING,
        round=3,
        current_player=1,
        passed_players={2, 0},
        first_guesser=2,
        last_to_pass=0,
        selected_category=Category.BOX_OFFICE,
        previous_category=Category.RUNTIME,
        played_challenges=[Category.RUNTIME, Category.BOX_OFFICE],
        drawn_challenge_cards=[ChallengeCard("rating-1", Category.RATING, "?")],
        center_token=center,
        draft_pool=[make_token("d1", "D1", boxOffice=300)],
    )


class TestStateToDict:

    def test_passed_players_is_sorted_list(self):
        data = state_to_dict(_make_state())
        assert data["passed_players"] == [0, 2]

    def test_json_serializable(self):
        text = json.dumps(state_to_dict(_make_state()), ensure_ascii=False)
        assert '"selected_category": "boxOffice"' in text

    def test_enums_as_values(self):
        data = state_to_dict(_make_state())
        assert data["phase"] == "playing"
        assert data["round_status"] == "open"
        assert data["played_challenges"] == ["runtime", "boxOffice"]


class TestStateFromDict:

    def test_restores_state(self):
        original = _make_state()
        restored = state_from_dict(state_to_dict(original))
        assert restored.passed_players == {0, 2}
        assert restored.round == 3
        assert restored.current_player == 1
        assert restored.first_guesser == 2
        assert restored.selected_category == Category.BOX_OFFICE
        assert restored.center_token == original.center_token
        assert restored.center_token.value(Category.BOX_OFFICE) == 100
        assert restored.players[0].hand == original.players[0].hand
        assert restored.players[1].this_round == original.players[1].this_round
        assert restored.drawn_challenge_cards == original.drawn_challenge_cards
        restored.check_invariants()

    def test_passed_players_as_dict(self):
        data = state_to_dict(_make_state())
        data["passed_players"] = {"0": True, "1": False, "2": True}
        assert state_from_dict(data).passed_players == {0, 2}

    def test_defaults_for_missing_fields(self):
        s = state_from_dict({"players": [{"id": 0, "name": "A"}, {"id": 1}]})
        assert s.phase == GamePhase.LOBBY
        assert s.round_status == RoundStatus.OPEN
        assert s.passed_players == set()
        assert s.players[1].name == "P1"
