"""FourFor4 电影派对卡牌 AI 对局 - 主入口"""

import argparse
import asyncio
import logging

from src.ai.rule_ai import RuleAI
from src.ai.llm_ai import create_llm_players
from src.game.autoplay import run_game
from src.game.config import GameConfig
from src.game.controller import GameController
from src.ui.renderer import TerminalRenderer


DEFAULT_NAMES = ["影迷老王🎬", "稳健小李📊", "搞怪阿花🎭"]


def create_players(count: int, use_llm: bool):
    """创建 AI 角色"""
    names = [DEFAULT_NAMES[i] if i < len(DEFAULT_NAMES) else f"玩家{i + 1}" for i in range(count)]
    if use_llm:
        strategies = create_llm_players(names)
    else:
        strategies = [RuleAI(cash_out_at=2 + i % 3) for i in range(count)]
    return names, strategies


async def run_one_game(config: GameConfig, count: int, delay: float, use_llm: bool) -> None:
    """运行一局完整对局"""
    names, strategies = create_players(count, use_llm)

    gc = GameController(player_names=names, config=config)
    renderer = TerminalRenderer(gc.players, delay=delay)
    gc.presenter = renderer

    # 注册可视化回调
    gc.on_event(renderer.make_event_callback(lambda: gc.state))

    renderer.clear()
    renderer.print_header("🎬 FourFor4 对局开始")
    renderer.show_round_start(gc.state)

    state = await run_game(gc, strategies, delay=delay)

    # 结算
    renderer.show_result(state)


def main():
    """命令行入口"""
    parser = argparse.ArgumentParser(description="FourFor4 电影派对卡牌 AI 对局")
    parser.add_argument("--players", type=int, default=3, help="玩家人数 (默认3)")
    parser.add_argument("--games", type=int, default=1, help="对局数 (默认1)")
    parser.add_argument("--rounds", type=int, default=None, help="每局轮数 (默认读取 GAME_MAX_ROUNDS 或 5)")
    parser.add_argument("--delay", type=float, default=0.8, help="每步延迟秒数 (默认0.8)")
    parser.add_argument("--fast", action="store_true", help="快速模式 (无延迟)")
    parser.add_argument("--llm", action="store_true", help="使用 LLM 玩家 (读取 AI_PLAYER{i}_* 环境变量)")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = GameConfig.from_env()
    if args.rounds is not None:
        config.max_rounds = args.rounds
    delay = 0.0 if args.fast else args.delay
    if args.fast:
        config.round_end_delay = 0.0

    for i in range(args.games):
        if args.games > 1:
            print(f"\n{'=' * 60}")
            print(f"  第 {i + 1}/{args.games} 局")
            print(f"{'=' * 60}")
        asyncio.run(run_one_game(config, args.players, delay, args.llm))


if __name__ == "__main__":
    main()
