# 内容引擎模块
from .token import Token, Category, ChallengeCard, CATEGORY_DISPLAY, make_token
from .guess import Direction, is_correct_guess, parse_direction
from .content import DeckContentProvider, create_token_pool, create_challenge_deck
