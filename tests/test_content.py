"""内容提供者与猜测判定测试"""

import asyncio
import random

from src.engine.token import Category, make_token, tokens_with_category
from src.engine.guess import Direction, is_correct_guess, parse_direction
from src.engine.content import (
    DeckContentProvider, MOVIE_CATALOG, create_token_pool, create_challenge_deck,
)


class TestGuess:

    def setup_method(self):
        self.low = make_token("low", "Low", runtime=90)
        self.high = make_token("high", "High", runtime=150)

    def test_higher(self):
        assert is_correct_guess(self.high, self.low, Category.RUNTIME, Direction.HIGHER)
        assert not is_correct_guess(self.low, self.high, Category.RUNTIME, Direction.HIGHER)

    def test_lower(self):
        assert is_correct_guess(self.low, self.high, Category.RUNTIME, Direction.LOWER)
        assert not is_correct_guess(self.high, self.low, Category.RUNTIME, Direction.LOWER)

    def test_tie_is_correct_both_ways(self):
        twin = make_token("twin", "Twin", runtime=90)
        assert is_correct_guess(twin, self.low, Category.RUNTIME, Direction.HIGHER)
        assert is_correct_guess(twin, self.low, Category.RUNTIME, Direction.LOWER)

    def test_parse_direction(self):
        assert parse_direction(" HIGH ") == Direction.HIGHER
        assert parse_direction("down") == Direction.LOWER
        assert parse_direction("") is None
        assert parse_direction(None) is None
        assert parse_direction(5) is None


class TestTokenPool:

    def test_pool_matches_catalog(self):
        pool = create_token_pool()
        assert len(pool) == len(MOVIE_CATALOG)
        assert len({t.id for t in pool}) == len(pool)

    def test_every_token_has_every_category(self):
        for token in create_token_pool():
            for category in Category:
                assert isinstance(token.value(category), int)

    def test_tokens_with_category_filters(self):
        tokens = [make_token("a", "A", rating=80), make_token("b", "B", runtime=100)]
        assert [t.id for t in tokens_with_category(tokens, Category.RATING)] == ["a"]

    def test_token_equality_ignores_stats(self):
        assert make_token("x", "X", rating=1) == make_token("x", "X", rating=2)


class TestDeckContentProvider:

    def setup_method(self):
        self.provider = DeckContentProvider(rng=random.Random(3))

    def test_challenge_deck(self):
        deck = create_challenge_deck(copies=2)
        assert len(deck) == 2 * len(Category)

    def test_draw_unique_categories(self):
        cards = asyncio.run(self.provider.draw_challenge_cards(3))
        assert len(cards) == 3
        assert len({c.category for c in cards}) == 3

    def test_draw_excludes_categories(self):
        cards = asyncio.run(self.provider.draw_challenge_cards(4, [Category.RATING]))
        assert len(cards) == 3
        assert Category.RATING not in {c.category for c in cards}

    def test_draft_pool_size(self):
        pool = self.provider.build_draft_pool(Category.RELEASE_YEAR, 8)
        assert len(pool) == 8
        assert len({t.id for t in pool}) == 8
