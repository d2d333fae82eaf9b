"""令牌定义 - 电影令牌与挑战类别的数据模型"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Mapping


class Category(str, Enum):
    """挑战类别（令牌上可比较的数值属性）"""
    BOX_OFFICE = "boxOffice"      # 票房（百万美元）
    RUNTIME = "runtime"           # 片长（分钟）
    RATING = "rating"             # 评分（×10）
    RELEASE_YEAR = "releaseYear"  # 上映年份


# 类别显示名
CATEGORY_DISPLAY = {
    Category.BOX_OFFICE: "票房",
    Category.RUNTIME: "片长",
    Category.RATING: "评分",
    Category.RELEASE_YEAR: "上映年份",
}


@dataclass(frozen=True)
class Token:
    """一枚令牌：身份 + 各类别的数值"""
    id: str
    name: str
    stats: Mapping[str, int] = field(default_factory=dict, compare=False, hash=False)

    def value(self, category: Category) -> int:
        """取某一类别的数值"""
        return int(self.stats[Category(category).value])

    @property
    def display(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Token({self.id}:{self.name})"


@dataclass(frozen=True)
class ChallengeCard:
    """一张挑战卡：决定本轮比较的类别"""
    id: str
    category: Category
    prompt: str

    @property
    def display(self) -> str:
        return CATEGORY_DISPLAY[self.category]


def make_token(token_id: str, name: str, **stats: int) -> Token:
    """快速构造令牌，stats 使用类别值作为键（如 boxOffice=150）"""
    return Token(id=token_id, name=name, stats=dict(stats))


def tokens_with_category(tokens: List[Token], category: Category) -> List[Token]:
    """筛选出带有指定类别数值的令牌"""
    key = Category(category).value
    return [t for t in tokens if key in t.stats]

