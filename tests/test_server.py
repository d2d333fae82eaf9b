"""WebSocket 后端测试 - HTTP 房间接口与 WebSocket 操作"""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from src.game.config import GameConfig
from src.web import server


@pytest.fixture
def client():
    server.registry.rooms.clear()
    server.connections.clear()
    server.registry.config = GameConfig(round_end_delay=0, max_players=3)
    with TestClient(server.app) as c:
        yield c


def _create_room(client, name="房主") -> str:
    resp = client.post("/rooms", json={"name": name})
    assert resp.status_code == 200
    return resp.json()["code"]


def _receive_until(ws, predicate, limit=10) -> dict:
    for _ in range(limit):
        msg = ws.receive_json()
        if predicate(msg):
            return msg
    raise AssertionError("没有收到期望的消息")


class TestRoomsApi:

    def test_create_and_join(self, client):
        code = _create_room(client)
        resp = client.post(f"/rooms/{code}/join", json={"name": "客人"})
        assert resp.json() == {"code": code, "seat": 1}
        room = client.get(f"/rooms/{code}").json()
        assert [m["name"] for m in room["members"]] == ["房主", "客人"]
        assert room["started"] is False
        assert room["state"] is None

    def test_unknown_room(self, client):
        assert client.get("/rooms/NOPE00").status_code == 404
        assert client.post("/rooms/NOPE00/join", json={"name": "x"}).status_code == 404

    def test_room_full(self, client):
        code = _create_room(client)
        client.post(f"/rooms/{code}/join", json={"name": "b"})
        client.post(f"/rooms/{code}/join", json={"name": "c"})
        assert client.post(f"/rooms/{code}/join", json={"name": "d"}).status_code == 409

    def test_leave(self, client):
        code = _create_room(client)
        client.post(f"/rooms/{code}/join", json={"name": "b"})
        assert client.delete(f"/rooms/{code}/seats/0").json() == {"ok": True}
        room = client.get(f"/rooms/{code}").json()
        assert room["members"] == [{"seat": 0, "name": "b", "is_host": True, "connected": True}]

    def test_missing_name(self, client):
        assert client.post("/rooms", json={}).status_code == 422


class TestWebSocket:

    def test_unknown_room_closed(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws/NOPE00/0"):
                pass

    def test_bad_seat_closed(self, client):
        code = _create_room(client)
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"/ws/{code}/5"):
                pass

    def test_start_and_select_category(self, client):
        code = _create_room(client)
        client.post(f"/rooms/{code}/join", json={"name": "客人"})

        with client.websocket_connect(f"/ws/{code}/0") as ws:
            hello = ws.receive_json()
            assert hello["type"] == "room"
            assert hello["room"]["code"] == code

            ws.send_json({"action": "start"})
            msg = _receive_until(
                ws, lambda m: m["type"] == "state" and m["state"]["drawn_challenge_cards"]
            )
            state = msg["state"]
            assert state["phase"] == "challenge"
            assert state["current_player"] == 0

            category = state["drawn_challenge_cards"][0]["category"]
            ws.send_json({"action": "select_category", "category": category})
            msg = _receive_until(ws, lambda m: m["type"] == "state")
            assert msg["state"]["phase"] == "playing"
            assert msg["state"]["selected_category"] == category
            assert msg["state"]["center_token"] is not None

            ws.send_json({"action": "pass"})
            msg = _receive_until(ws, lambda m: m["type"] == "state")
            assert msg["state"]["passed_players"] == [0]
            assert msg["state"]["current_player"] == 1

            # 已放弃的玩家不能再行动
            ws.send_json({"action": "cash_out"})
            msg = _receive_until(ws, lambda m: m["type"] == "error")
            assert msg["message"] == "还没轮到你"

    def test_non_string_direction_returns_error(self, client):
        code = _create_room(client)
        client.post(f"/rooms/{code}/join", json={"name": "客人"})

        with client.websocket_connect(f"/ws/{code}/0") as ws:
            ws.receive_json()
            ws.send_json({"action": "start"})
            state = _receive_until(
                ws, lambda m: m["type"] == "state" and m["state"]["drawn_challenge_cards"]
            )["state"]
            ws.send_json({"action": "select_category",
                          "category": state["drawn_challenge_cards"][0]["category"]})
            state = _receive_until(ws, lambda m: m["type"] == "state")["state"]
            token = state["draft_pool"][0]["id"]

            ws.send_json({"action": "guess", "token": token, "direction": 5})
            msg = _receive_until(ws, lambda m: m["type"] == "error")
            assert msg["message"] == "操作被拒绝: guess"

            # 连接仍然可用，且没有留下选中的令牌
            ws.send_json({"action": "pass"})
            state = _receive_until(ws, lambda m: m["type"] == "state")["state"]
            assert state["passed_players"] == [0]
            assert state["selected_draft_token"] is None

    def test_only_host_starts(self, client):
        code = _create_room(client)
        client.post(f"/rooms/{code}/join", json={"name": "客人"})
        with client.websocket_connect(f"/ws/{code}/1") as ws:
            ws.receive_json()
            ws.send_json({"action": "start"})
            msg = ws.receive_json()
            assert msg == {"type": "error", "message": "只有房主可以开始游戏"}

    def test_action_before_start(self, client):
        code = _create_room(client)
        with client.websocket_connect(f"/ws/{code}/0") as ws:
            ws.receive_json()
            ws.send_json({"action": "pass"})
            assert ws.receive_json()["message"] == "游戏尚未开始"

    def test_invalid_json(self, client):
        code = _create_room(client)
        with client.websocket_connect(f"/ws/{code}/0") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            assert ws.receive_json() == {"type": "error", "message": "无效的 JSON"}
