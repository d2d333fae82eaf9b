"""WebSocket 后端服务 - 房间管理并把游戏状态实时镜像到所有客户端"""

import asyncio
import json
import logging
from collections import defaultdict
from typing import Any, Dict, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from src.game.config import GameConfig
from src.game.snapshot import state_to_dict
from src.web.rooms import Room, RoomError, RoomRegistry

logger = logging.getLogger(__name__)


# ============================================================
#  FastAPI 应用
# ============================================================

app = FastAPI(title="FourFor4")
registry = RoomRegistry(GameConfig.from_env())

# WebSocket 连接池：房间码 → {连接: 座位号}
connections: Dict[str, Dict[WebSocket, int]] = defaultdict(dict)


async def broadcast(code: str, msg: dict) -> None:
    """向房间内所有连接的客户端广播消息"""
    data = json.dumps(msg, ensure_ascii=False)
    dead = set()
    for ws in list(connections[code]):
        try:
            await ws.send_text(data)
        except Exception:
            dead.add(ws)
    for ws in dead:
        connections[code].pop(ws, None)


class RoomMirror:
    """把快照广播给房间内的客户端，不等待发送完成"""

    def __init__(self, code: str):
        self.code = code
        self._tasks: Set[asyncio.Task] = set()

    def publish(self, snapshot: Dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("房间 %s 没有运行中的事件循环，跳过广播", self.code)
            return
        task = loop.create_task(broadcast(self.code, {"type": "state", "state": snapshot}))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


# ============================================================
#  序列化工具
# ============================================================

def room_to_dict(room: Room) -> dict:
    """将 Room 序列化"""
    return {
        "code": room.code,
        "max_players": room.max_players,
        "started": room.started,
        "members": [
            {"seat": m.seat, "name": m.name, "is_host": m.is_host, "connected": m.connected}
            for m in room.members
        ],
        "state": state_to_dict(room.controller.state) if room.controller else None,
    }


def _room_or_http(code: str) -> Room:
    try:
        return registry.get(code)
    except RoomError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


# ============================================================
#  HTTP 接口
# ============================================================

class NameRequest(BaseModel):
    name: str


@app.post("/rooms")
async def create_room(req: NameRequest):
    """创建房间"""
    try:
        room = registry.create_room(req.name)
    except RoomError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"code": room.code, "seat": 0}


@app.post("/rooms/{code}/join")
async def join_room(code: str, req: NameRequest):
    """加入房间"""
    try:
        member = registry.join_room(code, req.name)
    except RoomError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"code": code.upper(), "seat": member.seat}


@app.delete("/rooms/{code}/seats/{seat}")
async def leave_room(code: str, seat: int):
    """离开房间"""
    try:
        registry.leave_room(code, seat)
    except RoomError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"ok": True}


@app.get("/rooms/{code}")
async def get_room(code: str):
    """房间信息与当前游戏快照"""
    return room_to_dict(_room_or_http(code))


# ============================================================
#  WebSocket：玩家操作
# ============================================================

async def handle_action(room: Room, seat: int, msg: dict) -> Optional[str]:
    """执行一条玩家操作，返回错误信息（成功返回 None）"""
    action = msg.get("action")

    if action == "start":
        if seat != 0:
            return "只有房主可以开始游戏"
        try:
            gc = registry.start_game(room.code, mirror=RoomMirror(room.code))
        except (RoomError, ValueError) as e:
            return str(e)
        await gc.start_game()
        return None

    gc = room.controller
    if gc is None:
        return "游戏尚未开始"
    if not gc.is_turn_of(seat):
        return "还没轮到你"

    if action == "select_category":
        ok = gc.select_category(msg.get("category"))
    elif action == "select_token":
        ok = gc.select_draft_token(str(msg.get("token"))) is not None
    elif action == "guess":
        ok = gc.make_guess(msg.get("direction"), token_id=msg.get("token")) is not None
    elif action == "pass":
        ok = gc.pass_round()
    elif action == "cash_out":
        ok = gc.execute_cash_out()
    else:
        return f"未知操作: {action}"
    return None if ok else f"操作被拒绝: {action}"


@app.websocket("/ws/{code}/{seat}")
async def websocket_endpoint(ws: WebSocket, code: str, seat: int):
    """WebSocket 端点：每个连接对应房间里的一个座位"""
    try:
        room = registry.get(code)
    except RoomError:
        await ws.close(code=4404)
        return
    if not 0 <= seat < len(room.members):
        await ws.close(code=4403)
        return

    await ws.accept()
    connections[room.code][ws] = seat
    await ws.send_text(json.dumps({"type": "room", "room": room_to_dict(room)}, ensure_ascii=False))
    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                await ws.send_text(json.dumps({"type": "error", "message": "无效的 JSON"}, ensure_ascii=False))
                continue
            error = await handle_action(room, seat, msg)
            if error:
                await ws.send_text(json.dumps({"type": "error", "message": error}, ensure_ascii=False))
    except (WebSocketDisconnect, RuntimeError):
        pass
    finally:
        connections[room.code].pop(ws, None)
