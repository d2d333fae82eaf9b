"""房间管理 - 房间码生成、加入与离开"""

import logging
import random
import string
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.game.config import GameConfig
from src.game.collaborators import StateMirror
from src.game.controller import GameController

logger = logging.getLogger(__name__)

ROOM_CODE_CHARS = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6
MAX_CODE_ATTEMPTS = 10


class RoomError(Exception):
    """房间操作失败"""
    status_code = 400


class RoomNotFound(RoomError):
    status_code = 404


class RoomFull(RoomError):
    status_code = 409


class GameInProgress(RoomError):
    status_code = 409


@dataclass
class RoomMember:
    """房间内的一个座位"""
    seat: int
    name: str
    is_host: bool = False
    connected: bool = True
    joined_at: float = field(default_factory=time.time)


@dataclass
class Room:
    """一个游戏房间"""
    code: str
    max_players: int
    members: List[RoomMember] = field(default_factory=list)
    controller: Optional[GameController] = None
    created_at: float = field(default_factory=time.time)

    @property
    def started(self) -> bool:
        return self.controller is not None

    @property
    def host(self) -> RoomMember:
        return self.members[0]


class RoomRegistry:
    """内存中的房间表"""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.rooms: Dict[str, Room] = {}

    def generate_room_code(self) -> str:
        """生成 6 位房间码"""
        return "".join(self.rng.choice(ROOM_CODE_CHARS) for _ in range(ROOM_CODE_LENGTH))

    def _unique_room_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self.generate_room_code()
            if code not in self.rooms:
                return code
        raise RoomError("无法生成唯一的房间码")

    def get(self, code: str) -> Room:
        room = self.rooms.get(code.upper())
        if room is None:
            raise RoomNotFound(f"房间不存在: {code}")
        return room

    def create_room(self, host_name: str) -> Room:
        """创建房间，房主坐 0 号位"""
        code = self._unique_room_code()
        room = Room(code=code, max_players=self.config.max_players)
        room.members.append(RoomMember(seat=0, name=host_name, is_host=True))
        self.rooms[code] = room
        logger.info("房间已创建: %s 房主=%s", code, host_name)
        return room

    def join_room(self, code: str, name: str) -> RoomMember:
        """加入房间，返回分配到的座位"""
        room = self.get(code)
        if room.started:
            raise GameInProgress(f"房间 {room.code} 的游戏已开始")
        if len(room.members) >= room.max_players:
            raise RoomFull(f"房间 {room.code} 已满 ({room.max_players}人)")
        member = RoomMember(seat=len(room.members), name=name)
        room.members.append(member)
        logger.info("玩家 %s 加入房间 %s (座位%d)", name, room.code, member.seat)
        return member

    def leave_room(self, code: str, seat: int) -> None:
        """
        离开房间。开局前直接移除座位并重新编号；
        开局后座位号必须保持稳定，只标记为断开。
        """
        room = self.get(code)
        if room.started:
            for m in room.members:
                if m.seat == seat:
                    m.connected = False
            return
        room.members = [m for m in room.members if m.seat != seat]
        for i, m in enumerate(room.members):
            m.seat = i
            m.is_host = i == 0
        if not room.members:
            del self.rooms[room.code]
            logger.info("房间 %s 已清空并删除", room.code)

    def start_game(self, code: str, mirror: Optional[StateMirror] = None) -> GameController:
        """为房间创建 GameController（人数不足时抛 ValueError）"""
        room = self.get(code)
        if room.started:
            raise GameInProgress(f"房间 {room.code} 的游戏已开始")
        room.controller = GameController(
            player_names=[m.name for m in room.members],
            mirror=mirror,
            config=self.config,
        )
        return room.controller
