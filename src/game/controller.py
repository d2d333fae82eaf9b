"""游戏控制器 - 驱动派对卡牌游戏的轮次与回合流程"""

import asyncio
import logging
from typing import Callable, List, Optional, Set

from src.engine.token import Token, Category
from src.engine.guess import Direction, is_correct_guess, parse_direction
from src.engine.content import DeckContentProvider
from src.game.player import Player
from src.game.game_state import GameState, GamePhase, GameEvent, RoundStatus
from src.game.turns import TurnScheduler, NoEligiblePlayerError
from src.game.collaborators import (
    ContentProvider, Presenter, StateMirror, SilentPresenter, LocalMirror,
)
from src.game.config import GameConfig
from src.game.snapshot import state_to_dict

logger = logging.getLogger(__name__)


class GameController:
    """游戏控制器：持有一局游戏的 GameState，处理玩家操作与轮次结算"""

    def __init__(
        self,
        player_names: Optional[List[str]] = None,
        content: Optional[ContentProvider] = None,
        presenter: Optional[Presenter] = None,
        mirror: Optional[StateMirror] = None,
        config: Optional[GameConfig] = None,
        state: Optional[GameState] = None,
    ):
        self.config = config or GameConfig()
        if state is None:
            names = list(player_names or [])
            lo, hi = self.config.min_players, self.config.max_players
            if not lo <= len(names) <= hi:
                raise ValueError(f"玩家人数必须在 {lo}~{hi} 之间，当前 {len(names)}")
            players = [Player(id=i, name=name) for i, name in enumerate(names)]
            state = GameState(players=players, max_rounds=self.config.max_rounds)
        self.state = state
        self.content = content or DeckContentProvider()
        self.presenter = presenter or SilentPresenter()
        self.mirror = mirror or LocalMirror()
        self.scheduler = TurnScheduler()
        self._callbacks: List[Callable[[GameEvent], None]] = []  # 事件回调（用于 UI 通知）
        self._pending: Set[asyncio.Task] = set()                 # 进行中的轮次结算

    @property
    def players(self) -> List[Player]:
        return self.state.players

    def on_event(self, callback: Callable[[GameEvent], None]) -> None:
        """注册事件回调"""
        self._callbacks.append(callback)

    def _emit(self, event: GameEvent) -> None:
        """触发事件通知"""
        self.state.events.append(event)
        for cb in self._callbacks:
            cb(event)

    def _publish(self) -> None:
        """把公开状态推给镜像，失败只记日志"""
        try:
            self.mirror.publish(state_to_dict(self.state))
        except Exception as e:
            logger.warning("状态镜像失败 round=%d: %s", self.state.round, e)

    def _after_action(self) -> None:
        self.state.check_invariants()
        self._publish()

    def _can_act(self, action: str) -> bool:
        """结算中或游戏结束后拒绝一切玩家操作"""
        s = self.state
        if s.is_finalizing:
            logger.warning("拒绝 %s (玩家%d): 轮次 %d 正在结算", action, s.current_player, s.round)
            return False
        if s.phase == GamePhase.FINISHED:
            logger.warning("拒绝 %s (玩家%d): 游戏已结束", action, s.current_player)
            return False
        return True

    def _in_phase(self, action: str, *phases: GamePhase) -> bool:
        """当前阶段是否允许该操作，不允许时记录警告"""
        phase = self.state.phase
        if phase in phases:
            return True
        logger.warning("拒绝 %s: 当前阶段 %s 不允许该操作", action, phase.value)
        return False

    def is_turn_of(self, pid: int) -> bool:
        """pid 当前是否可以行动"""
        s = self.state
        return (
            not s.is_finalizing
            and s.phase in (GamePhase.CHALLENGE, GamePhase.PLAYING)
            and s.current_player == pid
            and not s.is_passed(pid)
        )

    # ============================================================
    #  开局与选类别
    # ============================================================

    async def start_game(self) -> bool:
        """开局：第 1 轮，由 0 号玩家先手选择挑战类别"""
        s = self.state
        if s.phase != GamePhase.LOBBY:
            logger.warning("游戏已开始 (phase=%s)", s.phase.value)
            return False
        s.round = 1
        s.phase = GamePhase.CHALLENGE
        s.current_player = 0
        s.first_guesser = 0
        self._emit(GameEvent(GamePhase.CHALLENGE, None, "game_start", s.round))
        self._after_action()
        await self._draw_challenges()
        return True

    async def _draw_challenges(self) -> None:
        """本轮尚未选定类别时抽取挑战卡并提示选择"""
        s = self.state
        if s.selected_category is not None:
            return
        exclude = [s.previous_category] if s.previous_category else []
        try:
            cards = await self.content.draw_challenge_cards(
                self.config.challenge_cards_per_draw, exclude
            )
        except Exception as e:
            logger.warning("抽取挑战卡失败 round=%d: %s", s.round, e)
            return

        # 抽卡期间可能已经选定了类别
        if s.selected_category is not None or s.phase != GamePhase.CHALLENGE:
            return
        s.drawn_challenge_cards = list(cards)
        self._publish()
        self.presenter.prompt_category_selection(list(cards))

    def select_category(self, category) -> bool:
        """选定本轮挑战类别，生成草稿池并放出中心令牌"""
        s = self.state
        if not self._can_act("select_category"):
            return False
        if s.phase != GamePhase.CHALLENGE or s.selected_category is not None:
            logger.warning("拒绝 select_category: 当前不是选类别阶段 (phase=%s)", s.phase.value)
            return False
        try:
            category = Category(category)
        except ValueError:
            logger.warning("拒绝 select_category: 未知类别 %r", category)
            return False

        offered = {c.category for c in s.drawn_challenge_cards}
        if offered and category not in offered:
            logger.warning("拒绝 select_category: %s 不在抽出的挑战卡中", category.value)
            return False

        pool = self.content.build_draft_pool(category, self.config.draft_pool_size)
        if len(pool) < 2:
            logger.warning("拒绝 select_category: %s 的令牌不足 (%d)", category.value, len(pool))
            return False

        s.selected_category = category
        s.played_challenges.append(category)
        s.center_token = pool[0]
        s.draft_pool = pool[1:]
        s.selected_draft_token = None
        s.phase = GamePhase.PLAYING
        self._emit(GameEvent(GamePhase.CHALLENGE, s.current_player, "category", category))
        self._after_action()
        return True

    # ============================================================
    #  回合推进
    # ============================================================

    def advance_turn(self) -> Optional[int]:
        """轮到下一个未放弃的玩家；无人可轮时记录错误并保持原状"""
        try:
            return self.scheduler.advance_turn(self.state)
        except NoEligiblePlayerError as e:
            logger.error("无法推进回合: %s", e)
            return None

    # ============================================================
    #  猜测
    # ============================================================

    def select_draft_token(self, token_id: str) -> Optional[Token]:
        """当前玩家从草稿池中选中一枚令牌"""
        s = self.state
        if not self._can_act("select_token") or not self._in_phase("select_token", GamePhase.PLAYING):
            return None
        if s.is_passed(s.current_player):
            logger.warning("拒绝 select_token: 玩家%d 已放弃本轮", s.current_player)
            return None
        token = next((t for t in s.draft_pool if t.id == token_id), None)
        if token is None:
            logger.warning("拒绝 select_token: 草稿池中没有 %s", token_id)
            return None
        s.selected_draft_token = token
        self._publish()
        return token

    def make_guess(self, direction, token_id: Optional[str] = None) -> Optional[bool]:
        """
        当前玩家猜测选中令牌相对中心令牌的大小。
        返回 True=猜对，False=猜错，None=操作被拒绝。
        """
        s = self.state
        if not self._can_act("guess") or not self._in_phase("guess", GamePhase.PLAYING):
            return None
        if s.is_passed(s.current_player):
            logger.warning("拒绝 guess: 玩家%d 已放弃本轮", s.current_player)
            return None
        # 方向先于选牌校验，非法请求不留下选中状态
        parsed = parse_direction(direction)
        if parsed is None:
            logger.warning("拒绝 guess: 方向非法 %r", direction)
            return None
        if token_id is not None and self.select_draft_token(token_id) is None:
            return None

        drawn, center = s.selected_draft_token, s.center_token
        if drawn is None or center is None or s.selected_category is None:
            logger.warning(
                "拒绝 guess: drawn=%s center=%s category=%s",
                drawn, center, s.selected_category,
            )
            return None

        correct = is_correct_guess(drawn, center, s.selected_category, parsed)
        if correct:
            self.handle_correct_guess(drawn, center, parsed)
        else:
            self.handle_wrong_guess(drawn, center, parsed)
        s.check_invariants()
        return correct

    def handle_correct_guess(
        self, drawn: Token, center: Optional[Token], direction: Optional[Direction] = None
    ) -> None:
        """
        猜对：中心令牌进入当前玩家的 this_round，积分 +1，
        抽出的令牌成为新的中心令牌。当前玩家继续行动。
        """
        s = self.state
        player = s.current()
        if center is not None:
            player.this_round.append(center)
        player.score += 1
        player.correct_guesses += 1

        s.center_token = drawn
        if drawn in s.draft_pool:
            s.draft_pool.remove(drawn)
        s.selected_draft_token = None

        self._emit(GameEvent(s.phase, player.id, "correct_guess", drawn))
        self._publish()

    def handle_wrong_guess(
        self, drawn: Token, center: Optional[Token], direction: Optional[Direction] = None
    ) -> None:
        """猜错：本轮令牌作废，抽出的令牌退场，中心令牌不变，轮到下一位"""
        s = self.state
        player = s.current()
        player.wrong_guesses += 1
        lost = player.forfeit_this_round()
        s.retired_tokens.extend(lost)

        if drawn in s.draft_pool:
            s.draft_pool.remove(drawn)
        s.retired_tokens.append(drawn)
        s.selected_draft_token = None

        self._emit(GameEvent(s.phase, player.id, "wrong_guess", {"drawn": drawn, "lost": lost}))
        self.advance_turn()
        self._publish()

    # ============================================================
    #  兑现与放弃
    # ============================================================

    def execute_cash_out(self) -> bool:
        """兑现：this_round 全部存入手牌，每枚 +1 分，然后让出回合"""
        s = self.state
        if not self._can_act("cash_out") or not self._in_phase("cash_out", GamePhase.PLAYING):
            return False
        player = s.current()
        banked = player.bank_this_round()
        player.score += len(banked)
        player.cash_outs += 1

        self._emit(GameEvent(s.phase, player.id, "cash_out", banked))
        self.advance_turn()
        self._after_action()
        return True

    def pass_round(self) -> bool:
        """当前玩家放弃本轮剩余回合；全员放弃时触发轮次结算"""
        s = self.state
        pid = s.current_player
        if not self._can_act("pass") or not self._in_phase("pass", GamePhase.CHALLENGE, GamePhase.PLAYING):
            return False
        if s.is_passed(pid):
            logger.warning("玩家%d 本轮已放弃，不能重复放弃", pid)
            return False

        first_pass = not s.passed_players
        s.passed_players.add(pid)
        if first_pass:
            s.first_guesser = pid
        s.last_to_pass = pid

        self._emit(GameEvent(s.phase, pid, "pass"))
        self.presenter.show_locked_out(set(s.passed_players))

        if s.all_passed():
            self._trigger_end_round()
        else:
            self.advance_turn()
            self._after_action()
        return True

    # ============================================================
    #  轮次结算
    # ============================================================

    def _enter_finalizing(self) -> bool:
        """进入结算状态；已在结算中则返回 False"""
        s = self.state
        if s.is_finalizing:
            logger.debug("轮次 %d 正在结算，忽略重复触发", s.round)
            return False
        s.round_status = RoundStatus.FINALIZING
        return True

    def _trigger_end_round(self) -> None:
        if not self._enter_finalizing():
            return
        self._publish()
        self._schedule(self._finalize_round())

    def _schedule(self, coro) -> None:
        """在运行中的事件循环里排队执行；同步调用方则直接跑完"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                asyncio.run(coro)
            except Exception:
                logger.exception("轮次 %d 结算失败", self.state.round)
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def end_round(self) -> bool:
        """结束本轮并开启下一轮。重复或并发调用直接返回 False"""
        if not self._enter_finalizing():
            return False
        await self._finalize_round()
        return True

    async def _finalize_round(self) -> None:
        s = self.state
        try:
            if self.config.round_end_delay > 0:
                await asyncio.sleep(self.config.round_end_delay)

            finished_round = s.round
            # 本轮未兑现的令牌全部退场
            for p in s.players:
                s.retired_tokens.extend(p.forfeit_this_round())

            s.center_token = None
            s.selected_draft_token = None
            s.draft_pool = []
            s.drawn_challenge_cards = []
            if s.selected_category is not None:
                s.previous_category = s.selected_category
            s.selected_category = None

            s.round += 1
            s.passed_players.clear()
            s.current_player = s.first_guesser
            s.phase = GamePhase.CHALLENGE
            self._emit(GameEvent(GamePhase.CHALLENGE, s.first_guesser, "round_end", finished_round))
            logger.info("第 %d 轮结束，玩家%d 先手第 %d 轮", finished_round, s.first_guesser, s.round)

            if s.round > s.max_rounds:
                self._finish_game()
        finally:
            s.round_status = RoundStatus.OPEN

        self._after_action()
        if s.phase == GamePhase.CHALLENGE:
            await self._draw_challenges()

    async def wait_idle(self) -> None:
        """等待所有已排队的轮次结算完成"""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ============================================================
    #  结算阶段
    # ============================================================

    def _finish_game(self) -> None:
        """游戏结束：最高分者获胜（可并列）"""
        s = self.state
        s.phase = GamePhase.FINISHED
        top = max(p.score for p in s.players)
        s.winners = [p.id for p in s.players if p.score == top]
        self._emit(GameEvent(GamePhase.FINISHED, None, "game_over", list(s.winners)))
        logger.info("游戏结束，获胜者: %s", s.winners)
