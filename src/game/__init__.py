# 游戏流程控制模块
from .player import Player
from .game_state import GameState, GamePhase, GameEvent, RoundStatus
from .turns import TurnScheduler, NoEligiblePlayerError
from .config import GameConfig
from .collaborators import ContentProvider, Presenter, StateMirror, SilentPresenter, LocalMirror
from .controller import GameController
