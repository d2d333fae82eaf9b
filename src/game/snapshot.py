"""状态快照 - GameState 与可 JSON 序列化 dict 之间的转换"""

from typing import Any, Dict, List, Optional

from src.engine.token import Token, Category, ChallengeCard
from src.game.player import Player
from src.game.game_state import GameState, GamePhase, RoundStatus


# ============================================================
#  序列化
# ============================================================

def token_to_dict(t: Optional[Token]) -> Optional[dict]:
    """将 Token 序列化"""
    if t is None:
        return None
    return {"id": t.id, "name": t.name, "stats": dict(t.stats)}


def challenge_to_dict(c: ChallengeCard) -> dict:
    return {"id": c.id, "category": c.category.value, "prompt": c.prompt}


def player_to_dict(p: Player) -> dict:
    """将 Player 序列化"""
    return {
        "id": p.id,
        "name": p.name,
        "score": p.score,
        "hand": [token_to_dict(t) for t in p.hand],
        "this_round": [token_to_dict(t) for t in p.this_round],
        "cash_outs": p.cash_outs,
        "correct_guesses": p.correct_guesses,
        "wrong_guesses": p.wrong_guesses,
    }


def state_to_dict(s: GameState) -> Dict[str, Any]:
    """将公开状态序列化（passed_players 固定输出为有序列表）"""
    return {
        "phase": s.phase.value,
        "round_status": s.round_status.value,
        "round": s.round,
        "max_rounds": s.max_rounds,
        "current_player": s.current_player,
        "passed_players": sorted(s.passed_players),
        "first_guesser": s.first_guesser,
        "last_to_pass": s.last_to_pass,
        "selected_category": s.selected_category.value if s.selected_category else None,
        "previous_category": s.previous_category.value if s.previous_category else None,
        "played_challenges": [c.value for c in s.played_challenges],
        "drawn_challenge_cards": [challenge_to_dict(c) for c in s.drawn_challenge_cards],
        "draft_pool": [token_to_dict(t) for t in s.draft_pool],
        "center_token": token_to_dict(s.center_token),
        "selected_draft_token": token_to_dict(s.selected_draft_token),
        "retired_tokens": [token_to_dict(t) for t in s.retired_tokens],
        "winners": list(s.winners),
        "players": [player_to_dict(p) for p in s.players],
    }


# ============================================================
#  反序列化
# ============================================================

def token_from_dict(data: Optional[dict]) -> Optional[Token]:
    if not data:
        return None
    return Token(id=data["id"], name=data.get("name", data["id"]), stats=dict(data.get("stats") or {}))


def _tokens(items: Optional[List[dict]]) -> List[Token]:
    return [token_from_dict(d) for d in (items or []) if d]


def _category(value: Optional[str]) -> Optional[Category]:
    return Category(value) if value else None


def player_from_dict(data: dict) -> Player:
    return Player(
        id=int(data["id"]),
        name=data.get("name", f"P{data['id']}"),
        score=int(data.get("score", 0)),
        hand=_tokens(data.get("hand")),
        this_round=_tokens(data.get("this_round")),
        cash_outs=int(data.get("cash_outs", 0)),
        correct_guesses=int(data.get("correct_guesses", 0)),
        wrong_guesses=int(data.get("wrong_guesses", 0)),
    )


def state_from_dict(data: Dict[str, Any]) -> GameState:
    """
    从快照重建 GameState。
    远端文档可能把 passed_players 存成列表或以座位号为键的 dict，这里统一转成 set。
    """
    passed = data.get("passed_players") or []
    if isinstance(passed, dict):
        passed = [k for k, v in passed.items() if v]

    return GameState(
        players=[player_from_dict(p) for p in data.get("players", [])],
        phase=GamePhase(data.get("phase", GamePhase.LOBBY.value)),
        round_status=RoundStatus(data.get("round_status", RoundStatus.OPEN.value)),
        round=int(data.get("round", 1)),
        max_rounds=int(data.get("max_rounds", 5)),
        current_player=int(data.get("current_player", 0)),
        passed_players={int(p) for p in passed},
        first_guesser=int(data.get("first_guesser", 0)),
        last_to_pass=data.get("last_to_pass"),
        selected_category=_category(data.get("selected_category")),
        previous_category=_category(data.get("previous_category")),
        played_challenges=[Category(c) for c in data.get("played_challenges", [])],
        drawn_challenge_cards=[
            ChallengeCard(id=c["id"], category=Category(c["category"]), prompt=c.get("prompt", ""))
            for c in data.get("drawn_challenge_cards", [])
        ],
        draft_pool=_tokens(data.get("draft_pool")),
        center_token=token_from_dict(data.get("center_token")),
        selected_draft_token=token_from_dict(data.get("selected_draft_token")),
        retired_tokens=_tokens(data.get("retired_tokens")),
        winners=list(data.get("winners", [])),
    )
