"""LLM AI - 让大语言模型扮演角色来猜电影数值"""

import asyncio
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from openai import AsyncOpenAI

from src.engine.token import Category, ChallengeCard, CATEGORY_DISPLAY
from src.engine.guess import Direction, parse_direction
from src.game.player import Player
from src.game.game_state import GameState
from src.game.autoplay import Decision
from src.ai.rule_ai import RuleAI

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_MODEL = "deepseek-chat"

# 角色设定：作为 system 消息发送
CHARACTER_PROMPTS = {
    "影迷老王🎬": (
        "你是「影迷老王」，看过的电影比吃过的饭还多，自信到有点自负。"
        "你喜欢连续猜测，不到万不得已不兑现。"
    ),
    "稳健小李📊": (
        "你是「稳健小李」，做事谨慎，手里有两三枚令牌就想兑现。"
        "说话冷静，喜欢拿数据说事。"
    ),
    "搞怪阿花🎭": (
        "你是「搞怪阿花」，喜欢反其道而行，偶尔故意冒险。"
        "说话夸张、戏剧化，爱用网络梗。"
    ),
}
FALLBACK_CHARACTER = "你是一个电影知识派对游戏的玩家，风格均衡。"

RULES_PROMPT = """每回合你可以：
- guess：从草稿池选一部电影，猜它的数值比中心令牌更高(higher)还是更低(lower)。猜对 +1 分并继续行动，猜错则本轮未兑现的令牌全部作废并轮到下一位。
- cash_out：把本轮未兑现的令牌存入手牌，每枚 +1 分，然后轮到下一位。
- pass：本轮不再行动。

只回复一个 JSON 对象：
{"action": "guess|cash_out|pass", "token": "草稿池令牌 id（guess 必填）", "direction": "higher|lower（guess 必填）", "strategy": "15字以内的解说"}"""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class LlmSettings:
    """一个 LLM 玩家的连接参数"""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    timeout: float = 10.0

    @classmethod
    def from_env(cls, index: int) -> "LlmSettings":
        """读取 AI_PLAYER{index}_API_KEY / _BASE_URL / _MODEL"""
        prefix = f"AI_PLAYER{index}_"
        return cls(
            api_key=os.getenv(prefix + "API_KEY", ""),
            base_url=os.getenv(prefix + "BASE_URL", DEFAULT_BASE_URL),
            model=os.getenv(prefix + "MODEL", DEFAULT_MODEL),
        )


def _describe_state(player: Player, state: GameState) -> str:
    """把局面写成给模型看的文字"""
    category = state.selected_category
    label = CATEGORY_DISPLAY[category] if category else "未选定"
    rows = [
        f"第 {state.round}/{state.max_rounds} 轮，比较类别: {label}",
        f"你是 {player.id} 号位，{player.score} 分；"
        f"本轮未兑现 {player.at_risk} 枚，已存入 {player.hand_size} 枚",
    ]
    rows += [
        f"玩家{p.id}({p.name}): {p.score}分，{'已放弃' if state.is_passed(p.id) else '仍在本轮'}"
        for p in state.players if p.id != player.id
    ]
    center = state.center_token
    if center is not None and category is not None:
        rows.append(f"中心令牌: {center.name} ({label} = {center.value(category)})")
    pool = ", ".join(f"{t.id}={t.name}" for t in state.draft_pool)
    rows.append(f"草稿池(id=片名): {pool or '空'}")
    return "\n".join(rows)


def _build_action_prompt(player: Player, state: GameState, character: str) -> str:
    """角色设定 + 规则 + 当前局面"""
    persona = CHARACTER_PROMPTS.get(character, FALLBACK_CHARACTER)
    return f"{persona}\n\n{RULES_PROMPT}\n\n【当前局面】\n{_describe_state(player, state)}"


def _extract_json(text: str) -> Optional[dict]:
    """取出回复里的 JSON 对象，容忍 ```json 包裹和前后闲聊"""
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class LlmAI:
    """
    LLM 策略。选类别和同步决策交给 RuleAI；
    async_decide_action 先问模型，调用失败或回复不合法时同样回退到 RuleAI。
    """

    def __init__(self, character: str, settings: Optional[LlmSettings] = None):
        self.character = character
        self.settings = settings or LlmSettings()
        self._fallback = RuleAI()
        self._client: Optional[AsyncOpenAI] = None
        if self.settings.api_key:
            self._client = AsyncOpenAI(api_key=self.settings.api_key, base_url=self.settings.base_url)
        else:
            logger.warning("LlmAI(%s): 没有 API key，只使用规则策略", character)

    @property
    def model(self) -> str:
        return self.settings.model

    def decide_category(self, cards: List[ChallengeCard], state: GameState) -> Category:
        return self._fallback.decide_category(cards, state)

    def decide_action(self, player: Player, state: GameState) -> Decision:
        return self._fallback.decide_action(player, state)

    async def _ask(self, prompt: str) -> Optional[str]:
        """请求一次补全；超时或出错返回 None"""
        if self._client is None:
            return None
        request = self._client.chat.completions.create(
            model=self.settings.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.settings.temperature,
            max_tokens=256,
        )
        try:
            resp = await asyncio.wait_for(request, timeout=self.settings.timeout)
        except asyncio.TimeoutError:
            logger.warning("LlmAI(%s): %.0f 秒内没有回复", self.character, self.settings.timeout)
            return None
        except Exception as e:
            logger.warning("LlmAI(%s): 请求失败: %s", self.character, e)
            return None
        reply = resp.choices[0].message.content or ""
        logger.info("LlmAI(%s) 回复: %s", self.character, reply[:200])
        return reply

    async def async_decide_action(self, player: Player, state: GameState) -> Decision:
        reply = await self._ask(_build_action_prompt(player, state, self.character))
        decision = self._parse_action_response(reply, player, state) if reply else None
        return decision or self._fallback.decide_action(player, state)

    def _parse_action_response(
        self, raw: str, player: Player, state: GameState
    ) -> Optional[Decision]:
        """把模型回复转成 Decision；不合法返回 None"""
        data = _extract_json(raw)
        if data is None:
            logger.warning("LlmAI(%s): 回复里没有 JSON", self.character)
            return None

        action = str(data.get("action", "")).strip().lower()
        strategy = str(data.get("strategy", ""))
        if action in ("pass", "cash_out"):
            return Decision(action, strategy=strategy)
        if action != "guess":
            logger.warning("LlmAI(%s): 无法识别的 action %r", self.character, action)
            return None

        token_id, direction = self._validate_guess(data, state)
        if token_id is None:
            return None
        return Decision("guess", token_id=token_id, direction=direction, strategy=strategy)

    def _validate_guess(
        self, data: dict, state: GameState
    ) -> Tuple[Optional[str], Optional[Direction]]:
        token_id = str(data.get("token", ""))
        if all(t.id != token_id for t in state.draft_pool):
            logger.warning("LlmAI(%s): 草稿池里没有 %r", self.character, token_id)
            return None, None
        direction = parse_direction(str(data.get("direction", "")))
        if direction is None:
            logger.warning("LlmAI(%s): 方向 %r 不合法", self.character, data.get("direction"))
            return None, None
        return token_id, direction


def create_llm_players(names: List[str]) -> List[LlmAI]:
    """每个名字一个 LlmAI，连接参数按 1 起的序号从环境变量读取"""
    return [LlmAI(name, LlmSettings.from_env(i + 1)) for i, name in enumerate(names)]
