"""猜测判定 - 比较抽出的令牌与中心令牌的大小"""

from enum import Enum
from typing import Optional

from .token import Token, Category


class Direction(str, Enum):
    """猜测方向"""
    HIGHER = "higher"   # 抽出的令牌更大
    LOWER = "lower"     # 抽出的令牌更小


def parse_direction(text: str) -> Optional[Direction]:
    """从文本解析方向（兼容大小写和 high/low 简写），非字符串返回 None"""
    if not isinstance(text, str):
        return None
    text = text.strip().lower()
    if text in ("higher", "high", "up", "h"):
        return Direction.HIGHER
    if text in ("lower", "low", "down", "l"):
        return Direction.LOWER
    return None


def is_correct_guess(
    drawn: Token, center: Token, category: Category, direction: Direction
) -> bool:
    """
    判定一次猜测是否正确。
    数值相等时无论猜哪个方向都算猜对。
    """
    drawn_value = drawn.value(category)
    center_value = center.value(category)
    if drawn_value == center_value:
        return True
    if direction == Direction.HIGHER:
        return drawn_value > center_value
    return drawn_value < center_value
