"""外部协作者接口 - 内容、展示与状态镜像"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from src.engine.token import Token, Category, ChallengeCard

logger = logging.getLogger(__name__)


class ContentProvider(Protocol):
    """内容提供者：挑战卡与草稿池"""

    async def draw_challenge_cards(
        self, count: int, exclude: Iterable[Category] = ()
    ) -> List[ChallengeCard]:
        """抽取挑战卡"""
        ...

    def build_draft_pool(self, category: Category, size: int) -> List[Token]:
        """为指定类别生成草稿池"""
        ...


class Presenter(Protocol):
    """展示层回调"""

    def show_locked_out(self, passed_players: Set[int]) -> None:
        """每次放弃后调用，展示被锁定的玩家"""
        ...

    def prompt_category_selection(self, cards: List[ChallengeCard]) -> None:
        """提示当前玩家选择挑战类别"""
        ...


class StateMirror(Protocol):
    """状态镜像：尽力而为地同步公开状态，引擎不等待确认"""

    def publish(self, snapshot: Dict[str, Any]) -> None:
        ...


class SilentPresenter:
    """不做任何展示（测试与无界面运行）"""

    def show_locked_out(self, passed_players: Set[int]) -> None:
        pass

    def prompt_category_selection(self, cards: List[ChallengeCard]) -> None:
        pass


class LocalMirror:
    """本地模式：只保留最近一次快照"""

    def __init__(self):
        self.latest: Optional[Dict[str, Any]] = None
        self.publish_count = 0

    def publish(self, snapshot: Dict[str, Any]) -> None:
        self.latest = snapshot
        self.publish_count += 1
        logger.debug("本地镜像更新 #%d round=%s", self.publish_count, snapshot.get("round"))
