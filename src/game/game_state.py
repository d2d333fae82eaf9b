"""游戏状态 - 一局派对卡牌游戏的共享可变状态"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Set, Any

from src.engine.token import Token, Category, ChallengeCard
from src.game.player import Player


class GamePhase(str, Enum):
    """游戏阶段"""
    LOBBY = "lobby"             # 等待开始
    CHALLENGE = "challenge"     # 选择挑战类别
    PLAYING = "playing"         # 猜测中
    FINISHED = "finished"       # 已结束


class RoundStatus(str, Enum):
    """轮次状态：FINALIZING 期间拒绝再次结算和一切玩家操作"""
    OPEN = "open"
    FINALIZING = "finalizing"


@dataclass
class GameEvent:
    """游戏事件记录"""
    phase: GamePhase
    player_id: Optional[int]
    action: str                  # "pass", "correct_guess", "wrong_guess", "cash_out", "round_end", ...
    data: Any = None


@dataclass
class GameState:
    """一局游戏的完整状态"""
    players: List[Player]
    phase: GamePhase = GamePhase.LOBBY
    round_status: RoundStatus = RoundStatus.OPEN
    round: int = 1
    max_rounds: int = 5

    # 回合相关
    current_player: int = 0
    passed_players: Set[int] = field(default_factory=set)
    first_guesser: int = 0           # 本轮第一个放弃的玩家，下一轮由其先手
    last_to_pass: Optional[int] = None

    # 挑战相关
    selected_category: Optional[Category] = None
    previous_category: Optional[Category] = None
    played_challenges: List[Category] = field(default_factory=list)
    drawn_challenge_cards: List[ChallengeCard] = field(default_factory=list)

    # 令牌相关
    draft_pool: List[Token] = field(default_factory=list)
    center_token: Optional[Token] = None
    selected_draft_token: Optional[Token] = None
    retired_tokens: List[Token] = field(default_factory=list)

    # 结算相关
    winners: List[int] = field(default_factory=list)

    # 事件日志
    events: List[GameEvent] = field(default_factory=list)

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_finalizing(self) -> bool:
        return self.round_status == RoundStatus.FINALIZING

    def current(self) -> Player:
        """当前行动的玩家"""
        return self.players[self.current_player]

    def is_passed(self, pid: int) -> bool:
        return pid in self.passed_players

    def all_passed(self) -> bool:
        """是否所有玩家都已放弃本轮"""
        return len(self.passed_players) >= self.player_count

    def active_players(self) -> List[int]:
        """本轮仍可行动的玩家座位号"""
        return [p.id for p in self.players if p.id not in self.passed_players]

    def check_invariants(self) -> None:
        """校验状态不变量，违反即说明调用方绕过了放弃/结算流程"""
        n = self.player_count
        assert n > 0, "没有玩家"
        assert 0 <= self.current_player < n, f"current_player 越界: {self.current_player}"
        assert self.passed_players <= set(range(n)), f"passed_players 含非法座位: {self.passed_players}"
        if self.round_status == RoundStatus.OPEN and self.phase != GamePhase.FINISHED:
            assert not self.all_passed(), "所有玩家已放弃但未触发轮次结算"
            assert self.current_player not in self.passed_players, (
                f"轮到已放弃的玩家 {self.current_player}"
            )
