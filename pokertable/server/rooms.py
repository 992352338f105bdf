"""
Game rooms and the room registry.

This module provides:
- GameRoom: one table, its connections and its event serialization
- RoomRegistry: explicit room lookup by room id

Every event that touches a room's table (actions, confirmations, timeouts,
disconnects) runs under that room's lock, one at a time. Rooms share no
state and proceed independently.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
import asyncio
import logging
import secrets
import string
import uuid

from fastapi import WebSocket

from pokertable.core.errors import HandAbortedError, NotEnoughPlayersError
from pokertable.core.rules import ActionType
from pokertable.core.table import PokerTable
from pokertable.core.turns import ActionTimer
from pokertable.server.config import ServerConfig
from pokertable.server.schemas import (
    WSErrorMessage, WSJoinedMessage, WSPlayerJoinedMessage, WSResultMessage,
    WSStateMessage,
)


logger = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits
ROOM_ID_LENGTH = 6


@dataclass
class GameRoom:
    """A game room with its table and connected players."""
    room_id: str
    table: PokerTable
    action_timeout: float
    connections: Dict[str, WebSocket] = field(default_factory=dict)
    names: Dict[str, str] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def __post_init__(self):
        self.timer = ActionTimer(self.action_timeout, self._on_action_timeout)
        self._announced_hand: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.connections

    # ------------------------------------------------------------------
    # Messaging

    async def send(self, player_id: str, message: Dict[str, Any]) -> None:
        ws = self.connections.get(player_id)
        if ws is None:
            return
        try:
            await ws.send_json(message)
        except Exception as e:
            logger.error(f"Error sending to {player_id}: {e}")

    async def send_error(self, player_id: str, code: str, message: str) -> None:
        await self.send(player_id, WSErrorMessage(code=code, message=message).model_dump())

    async def broadcast(self, message: Dict[str, Any], exclude: Optional[str] = None) -> None:
        """Broadcast a message to all connected players."""
        for player_id in list(self.connections):
            if player_id != exclude:
                await self.send(player_id, message)

    async def send_state_to_all(self) -> None:
        """Send personalized table state to each connected player."""
        for player_id in list(self.connections):
            state = self.table.view_for(player_id)
            await self.send(player_id, WSStateMessage(state=state).model_dump())

    async def _publish(self) -> None:
        """Broadcast state, announce a finished hand once, and re-arm the timer."""
        await self.send_state_to_all()

        hand = self.table.hand
        if hand is not None and hand.awaiting_confirmation and self._announced_hand != hand.hand_number:
            self._announced_hand = hand.hand_number
            await self.broadcast(WSResultMessage(
                hand_number=hand.hand_number,
                result=hand.result.to_dict(),
            ).model_dump())

        self._sync_timer()

    def _sync_timer(self) -> None:
        hand = self.table.hand
        if hand is None or not hand.is_running or hand.current_player is None:
            self.timer.cancel()
            return
        token = (hand.current_player.player_id, hand.action_seq)
        if self.timer.token != token:
            self.timer.arm(*token)

    def members(self) -> List[Dict[str, str]]:
        return [{"id": pid, "name": name} for pid, name in self.names.items()]

    # ------------------------------------------------------------------
    # Events

    async def join(self, websocket: WebSocket, player_name: str) -> str:
        """
        Seat a new player and register their connection.

        Raises:
            SeatingError: The table is full
        """
        player_id = uuid.uuid4().hex[:12]
        async with self.lock:
            self.table.seat_player(player_id, player_name)
            self.connections[player_id] = websocket
            self.names[player_id] = player_name

        logger.info(f"Player {player_name} ({player_id}) joined {self.room_id}")
        await self.send(player_id, WSJoinedMessage(player_id=player_id, room_id=self.room_id).model_dump())
        await self.broadcast(WSPlayerJoinedMessage(players=self.members()).model_dump())
        if self.table.hand is not None:
            await self.send(player_id, WSStateMessage(state=self.table.view_for(player_id)).model_dump())
        return player_id

    async def start_game(self, player_id: str) -> None:
        async with self.lock:
            if self.table.hand is not None:
                await self.send_error(player_id, "GameInProgress", "A hand is already in progress")
                return
            try:
                self.table.start_hand()
            except NotEnoughPlayersError as e:
                await self.send_error(player_id, "NotEnoughPlayers", str(e))
                return
            except HandAbortedError as e:
                await self.broadcast(WSErrorMessage(code="HandAborted", message=str(e)).model_dump())
                return

            logger.info(f"Room {self.room_id}: game started by {player_id}")
            await self.broadcast({"type": "game_started", "hand_number": self.table.hand_number})
            await self._publish()

    async def handle_action(
        self,
        player_id: str,
        action: ActionType,
        amount: Any = 0,
        seq: Optional[int] = None,
    ) -> None:
        async with self.lock:
            try:
                result = self.table.apply_action(player_id, action, amount, seq)
            except HandAbortedError as e:
                await self.broadcast(WSErrorMessage(code="HandAborted", message=str(e)).model_dump())
                await self._publish()
                return

            if not result.success:
                await self.send_error(player_id, result.error.value, result.message)
                return

            await self.send(player_id, {"type": "action_result", **result.to_dict()})
            await self._publish()

    async def handle_confirm(self, player_id: str) -> None:
        async with self.lock:
            try:
                result = self.table.confirm_result(player_id)
            except HandAbortedError as e:
                await self.broadcast(WSErrorMessage(code="HandAborted", message=str(e)).model_dump())
                await self._publish()
                return

            if not result.success:
                await self.send_error(player_id, result.error.value, result.message)
                return

            await self.send(player_id, {"type": "confirm_result", **result.to_dict()})
            await self._publish()

    async def leave(self, player_id: str) -> None:
        """Handle a disconnect: fold any live hand and free the seat."""
        async with self.lock:
            self.connections.pop(player_id, None)
            self.names.pop(player_id, None)
            try:
                changed = self.table.on_disconnect(player_id)
            except HandAbortedError as e:
                await self.broadcast(WSErrorMessage(code="HandAborted", message=str(e)).model_dump())
                changed = True

            logger.info(f"Player {player_id} disconnected from {self.room_id}")
            await self.broadcast({"type": "player_left", "player_id": player_id})
            if changed:
                await self._publish()
            if self.is_empty:
                self.timer.cancel()

    async def _on_action_timeout(self, player_id: str, action_seq: int) -> None:
        async with self.lock:
            try:
                folded = self.table.handle_timeout(player_id, action_seq)
            except HandAbortedError as e:
                await self.broadcast(WSErrorMessage(code="HandAborted", message=str(e)).model_dump())
                folded = True
            if folded:
                await self.broadcast({"type": "timeout", "player_id": player_id})
                await self._publish()

    def info(self) -> Dict[str, Any]:
        table = self.table
        view = table.view_for(None)
        return {
            "room_id": self.room_id,
            "small_blind": table.small_blind,
            "big_blind": table.big_blind,
            "buy_in": table.buy_in,
            "hand_number": table.hand_number,
            "hand_running": table.is_hand_running,
            "awaiting_confirmation": table.awaiting_confirmation,
            "players": view["seated"],
        }


class RoomRegistry:
    """
    Manages game rooms keyed by room id.

    Usage:
        registry = RoomRegistry(config)
        room = registry.get_or_create(room_id)
        player_id = await room.join(websocket, "Alice")
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.rooms: Dict[str, GameRoom] = {}

    def _new_room_id(self) -> str:
        while True:
            room_id = "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(ROOM_ID_LENGTH))
            if room_id not in self.rooms:
                return room_id

    def create_room(
        self,
        small_blind: Optional[int] = None,
        big_blind: Optional[int] = None,
        buy_in: Optional[int] = None,
    ) -> GameRoom:
        """Create a new game room with a generated id."""
        room_id = self._new_room_id()
        table = PokerTable(
            small_blind=small_blind or self.config.small_blind,
            big_blind=big_blind or self.config.big_blind,
            buy_in=buy_in or self.config.buy_in,
            max_players=self.config.max_players,
        )
        room = GameRoom(room_id=room_id, table=table, action_timeout=self.config.action_timeout)
        self.rooms[room_id] = room
        logger.info(f"Created room {room_id}")
        return room

    def get_room(self, room_id: Optional[str]) -> Optional[GameRoom]:
        """Get a game room by ID."""
        if not room_id:
            return None
        return self.rooms.get(room_id.upper())

    def get_or_create(self, room_id: Optional[str]) -> GameRoom:
        """Existing room for ``room_id``, or a new room if it is unknown."""
        room = self.get_room(room_id)
        if room is None:
            room = self.create_room()
        return room

    def remove_room(self, room_id: str) -> None:
        room = self.rooms.pop(room_id, None)
        if room is not None:
            room.timer.cancel()
            logger.info(f"Removed room {room_id}")

    def close(self) -> None:
        """Cancel all pending timers (server shutdown)."""
        for room in self.rooms.values():
            room.timer.cancel()
