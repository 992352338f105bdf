"""
WebSocket endpoint for real-time game communication.

Protocol:
1. Client connects and sends: {"type": "join", "player_name": "...", "room_id": "..."}
   (room_id optional; unknown or missing ids create a new room)
2. Server replies {"type": "joined", "player_id", "room_id"} and broadcasts
   {"type": "player_joined", "players": [...]}
3. Client sends {"type": "start_game"}, {"type": "action", "action": "call"},
   {"type": "action", "action": "raise", "amount": 40, "seq": 7} or
   {"type": "confirm"}
4. Every accepted event broadcasts {"type": "state", "state": {...}}, tailored
   per player; rejections go to the sender only as {"type": "error", ...}
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import logging

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from pokertable.core.errors import SeatingError
from pokertable.server.rooms import GameRoom, RoomRegistry
from pokertable.server.schemas import (
    WSActionMessage, WSConfirmMessage, WSErrorMessage, WSJoinMessage,
    WSStartGameMessage, WSStateMessage,
)


logger = logging.getLogger(__name__)


async def handle_message(room: GameRoom, player_id: str, message: Dict[str, Any]) -> None:
    """
    Dispatch one client message to the room.

    Malformed messages are answered with a BadMessage error.
    """
    msg_type = message.get("type", "") if isinstance(message, dict) else ""

    try:
        if msg_type == "action":
            msg = WSActionMessage.model_validate(message)
            await room.handle_action(player_id, msg.action, msg.amount, msg.seq)
        elif msg_type == "confirm":
            WSConfirmMessage.model_validate(message)
            await room.handle_confirm(player_id)
        elif msg_type == "start_game":
            WSStartGameMessage.model_validate(message)
            await room.start_game(player_id)
        elif msg_type == "get_state":
            await room.send(player_id, WSStateMessage(state=room.table.view_for(player_id)).model_dump())
        else:
            await room.send_error(player_id, "BadMessage", f"Unknown message type: {msg_type}")
    except ValidationError as e:
        await room.send_error(player_id, "BadMessage", str(e))


async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for game communication."""
    registry: RoomRegistry = websocket.app.state.rooms
    room: Optional[GameRoom] = None
    player_id: Optional[str] = None

    try:
        await websocket.accept()
        raw = await websocket.receive_json()

        try:
            join = WSJoinMessage.model_validate(raw)
        except ValidationError as e:
            await websocket.send_json(WSErrorMessage(
                code="BadMessage", message=f"First message must be join: {e}"
            ).model_dump())
            await websocket.close()
            return

        room = registry.get_or_create(join.room_id)
        try:
            player_id = await room.join(websocket, join.player_name)
        except SeatingError as e:
            await websocket.send_json(WSErrorMessage(code="TableFull", message=str(e)).model_dump())
            await websocket.close()
            if room.is_empty:
                registry.remove_room(room.room_id)
            return

        # Message loop
        while True:
            message = await websocket.receive_json()
            await handle_message(room, player_id, message)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: {player_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        if room is not None and player_id is not None:
            await room.leave(player_id)
            if room.is_empty:
                registry.remove_room(room.room_id)
