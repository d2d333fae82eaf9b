"""内容提供者 - 内置电影令牌目录、挑战卡牌堆与抽取逻辑"""

import random
from typing import Iterable, List, Optional

from .token import Token, Category, ChallengeCard, make_token, tokens_with_category


# (id, 片名, 票房, 片长, 评分×10, 年份)
MOVIE_CATALOG = [
    ("avatar", "Avatar", 2923, 162, 79, 2009),
    ("endgame", "Avengers: Endgame", 2799, 181, 84, 2019),
    ("titanic", "Titanic", 2264, 194, 79, 1997),
    ("force_awakens", "Star Wars: The Force Awakens", 2071, 138, 78, 2015),
    ("jurassic_world", "Jurassic World", 1671, 124, 70, 2015),
    ("lion_king", "The Lion King", 968, 88, 85, 1994),
    ("dark_knight", "The Dark Knight", 1006, 152, 90, 2008),
    ("inception", "Inception", 837, 148, 88, 2010),
    ("frozen", "Frozen", 1290, 102, 74, 2013),
    ("jaws", "Jaws", 476, 124, 81, 1975),
    ("et", "E.T. the Extra-Terrestrial", 793, 115, 79, 1982),
    ("matrix", "The Matrix", 467, 136, 87, 1999),
    ("toy_story", "Toy Story", 394, 81, 83, 1995),
    ("godfather", "The Godfather", 250, 175, 92, 1972),
    ("pulp_fiction", "Pulp Fiction", 214, 154, 89, 1994),
    ("parasite", "Parasite", 262, 132, 85, 2019),
    ("shawshank", "The Shawshank Redemption", 29, 142, 93, 1994),
    ("back_to_future", "Back to the Future", 388, 116, 85, 1985),
]

# 挑战卡提示语
CHALLENGE_PROMPTS = {
    Category.BOX_OFFICE: "哪部电影全球票房更高？",
    Category.RUNTIME: "哪部电影片长更长？",
    Category.RATING: "哪部电影评分更高？",
    Category.RELEASE_YEAR: "哪部电影上映更晚？",
}


def create_token_pool() -> List[Token]:
    """根据内置目录创建完整的令牌池"""
    pool: List[Token] = []
    for token_id, name, box_office, runtime, rating, year in MOVIE_CATALOG:
        pool.append(make_token(
            token_id, name,
            boxOffice=box_office, runtime=runtime, rating=rating, releaseYear=year,
        ))
    return pool


def create_challenge_deck(copies: int = 2) -> List[ChallengeCard]:
    """创建挑战卡牌堆：每个类别若干张"""
    deck: List[ChallengeCard] = []
    for category in Category:
        for i in range(copies):
            deck.append(ChallengeCard(
                id=f"{category.value}-{i + 1}",
                category=category,
                prompt=CHALLENGE_PROMPTS[category],
            ))
    return deck


class DeckContentProvider:
    """默认内容提供者：从内置目录随机抽取挑战卡与草稿池"""

    def __init__(
        self,
        tokens: Optional[List[Token]] = None,
        challenges: Optional[List[ChallengeCard]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.tokens = list(tokens) if tokens is not None else create_token_pool()
        self.challenges = list(challenges) if challenges is not None else create_challenge_deck()
        self.rng = rng or random.Random()

    async def draw_challenge_cards(
        self, count: int, exclude: Iterable[Category] = ()
    ) -> List[ChallengeCard]:
        """
        抽取 count 张挑战卡，跳过 exclude 中的类别。
        同一次抽取中每个类别最多出现一次。
        """
        excluded = {Category(c) for c in exclude}
        candidates = [c for c in self.challenges if c.category not in excluded]
        self.rng.shuffle(candidates)

        drawn: List[ChallengeCard] = []
        seen = set()
        for card in candidates:
            if card.category in seen:
                continue
            seen.add(card.category)
            drawn.append(card)
            if len(drawn) >= count:
                break
        return drawn

    def build_draft_pool(self, category: Category, size: int) -> List[Token]:
        """为指定类别洗出一个草稿池"""
        eligible = tokens_with_category(self.tokens, category)
        self.rng.shuffle(eligible)
        return eligible[:size]
