"""
Pydantic schemas for API request/response validation.
"""

from typing import List, Literal, Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator

from pokertable.core.rules import ActionType


# ============= Request Schemas =============

class CreateRoomRequest(BaseModel):
    """Request to create a new game room."""
    small_blind: Optional[int] = Field(default=None, gt=0)
    big_blind: Optional[int] = Field(default=None, gt=0)
    buy_in: Optional[int] = Field(default=None, gt=0)


# ============= Response Schemas =============

class SeatSchema(BaseModel):
    """A seated player as listed in room info."""
    id: str
    name: str
    seat: int
    stack: int
    in_hand: bool


class RoomInfoSchema(BaseModel):
    """Room information."""
    room_id: str
    small_blind: int
    big_blind: int
    buy_in: int
    hand_number: int
    hand_running: bool
    awaiting_confirmation: bool
    players: List[SeatSchema]


# ============= WebSocket Message Schemas =============

class WSJoinMessage(BaseModel):
    """WebSocket join room message. Omitting room_id creates a room."""
    type: Literal["join"] = "join"
    player_name: str = Field(min_length=1, max_length=32)
    room_id: Optional[str] = None


class WSStartGameMessage(BaseModel):
    """Start the first hand in the room."""
    type: Literal["start_game"] = "start_game"


class WSActionMessage(BaseModel):
    """WebSocket action message."""
    type: Literal["action"] = "action"
    action: ActionType
    amount: Any = 0  # raise increment above the call, validated by the engine
    seq: Optional[int] = None

    @field_validator("action", mode="before")
    @classmethod
    def lowercase_action(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class WSConfirmMessage(BaseModel):
    """Acknowledge the result of the finished hand."""
    type: Literal["confirm"] = "confirm"


class WSJoinedMessage(BaseModel):
    """Sent to a player after joining."""
    type: str = "joined"
    player_id: str
    room_id: str


class WSPlayerJoinedMessage(BaseModel):
    """Broadcast when the member list changes."""
    type: str = "player_joined"
    players: List[Dict[str, Any]]


class WSStateMessage(BaseModel):
    """WebSocket state update message, one tailored copy per player."""
    type: str = "state"
    state: Dict[str, Any]


class WSResultMessage(BaseModel):
    """WebSocket hand result message."""
    type: str = "result"
    hand_number: int
    result: Dict[str, Any]


class WSErrorMessage(BaseModel):
    """WebSocket error message, sent only to the offending connection."""
    type: str = "error"
    code: str
    message: str
