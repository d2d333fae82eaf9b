"""终端可视化渲染器 - 在终端中展示派对卡牌对局过程"""

import os
import time
from typing import List, Set

from src.engine.token import Token, ChallengeCard, CATEGORY_DISPLAY
from src.game.player import Player
from src.game.game_state import GameState, GameEvent


# 颜色常量 (ANSI)
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"


class TerminalRenderer:
    """终端可视化渲染器，同时实现 Presenter 接口"""

    def __init__(self, players: List[Player], delay: float = 0.8):
        self.players = players
        self.delay = delay  # 每步之间的延迟（秒）

    def clear(self) -> None:
        """清屏"""
        os.system("clear" if os.name != "nt" else "cls")

    def pause(self, seconds: float = 0) -> None:
        """暂停（delay 为 0 时不停顿）"""
        if self.delay <= 0:
            return
        time.sleep(seconds or self.delay)

    # ============================================================
    #  令牌渲染
    # ============================================================

    @staticmethod
    def format_tokens(tokens: List[Token]) -> str:
        """将令牌列表格式化为彩色字符串"""
        if not tokens:
            return f"{DIM}(无){RESET}"
        return " ".join(f"{CYAN}[{t.display}]{RESET}" for t in tokens)

    def format_player_name(self, pid: int, passed: Set[int] = frozenset()) -> str:
        """格式化玩家名（已放弃的玩家灰显）"""
        player = self.players[pid]
        if pid in passed:
            return f"{DIM}{player.name} [已放弃]{RESET}"
        return f"{GREEN}{BOLD}{player.name}{RESET}"

    def print_header(self, title: str) -> None:
        """打印带框的标题"""
        print(f"\n{YELLOW}{BOLD}{'═' * 60}{RESET}")
        print(f"{YELLOW}{BOLD}  {title}{RESET}")
        print(f"{YELLOW}{BOLD}{'═' * 60}{RESET}\n")

    # ============================================================
    #  Presenter 接口
    # ============================================================

    def show_locked_out(self, passed_players: Set[int]) -> None:
        """展示本轮被锁定（已放弃）的玩家"""
        names = [self.format_player_name(pid, passed_players) for pid in sorted(passed_players)]
        print(f"  🔒 已放弃: {', '.join(names)}")

    def prompt_category_selection(self, cards: List[ChallengeCard]) -> None:
        """展示可选的挑战卡"""
        print(f"  {MAGENTA}请选择挑战类别:{RESET}")
        for i, card in enumerate(cards, 1):
            print(f"    {i}. {CATEGORY_DISPLAY[card.category]} - {card.prompt}")

    # ============================================================
    #  对局展示
    # ============================================================

    def show_round_start(self, state: GameState) -> None:
        starter = self.players[state.current_player]
        self.print_header(f"🎬 第 {state.round}/{state.max_rounds} 轮  先手: {starter.name}")

    def show_category(self, state: GameState) -> None:
        cat = state.selected_category
        center = state.center_token
        print(f"  类别: {BOLD}{CATEGORY_DISPLAY[cat]}{RESET}  "
              f"中心令牌: {self.format_tokens([center] if center else [])} = {center.value(cat) if center else '-'}")

    def show_result(self, state: GameState) -> None:
        """展示游戏结果"""
        self.print_header("🏆 游戏结束")
        winners = ", ".join(self.players[pid].name for pid in state.winners)
        print(f"  获胜者: {RED}{BOLD}{winners}{RESET}")
        print(f"\n  {'─' * 48}")
        print(f"  {'玩家':<12} {'积分':<6} {'手牌':<6} {'兑现':<6} {'猜对/猜错'}")
        print(f"  {'─' * 48}")
        for p in state.players:
            print(f"  {p.name:<10} {p.score:<8} {p.hand_size:<8} {p.cash_outs:<8} "
                  f"{p.correct_guesses}/{p.wrong_guesses}")
        print()

    # ============================================================
    #  事件回调（注册到 GameController）
    # ============================================================

    def make_event_callback(self, state_getter):
        """创建事件回调函数，供 GameController.on_event() 使用"""
        renderer = self

        def callback(event: GameEvent) -> None:
            state = state_getter()
            pid = event.player_id
            name = renderer.players[pid].name if pid is not None else ""

            if event.action == "category":
                renderer.show_category(state)
            elif event.action == "correct_guess":
                print(f"  ✅ {name} 猜对！新的中心令牌 {renderer.format_tokens([event.data])}"
                      f"  (本轮 {renderer.players[pid].at_risk} 枚待兑现)")
                renderer.pause(0.3)
            elif event.action == "wrong_guess":
                lost = event.data["lost"]
                print(f"  ❌ {name} 猜错 {renderer.format_tokens([event.data['drawn']])}，"
                      f"作废 {len(lost)} 枚令牌")
                renderer.pause(0.3)
            elif event.action == "cash_out":
                print(f"  💰 {name} 兑现 {len(event.data)} 枚令牌: {renderer.format_tokens(event.data)}")
                renderer.pause()
            elif event.action == "pass":
                print(f"  {name}: {DIM}放弃本轮{RESET}")
            elif event.action == "round_end" and state.round <= state.max_rounds:
                renderer.show_round_start(state)

        return callback
