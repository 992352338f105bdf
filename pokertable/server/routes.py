"""
HTTP API Routes for PokerTable.

These routes handle room creation and room queries.
Real-time game actions are handled via WebSocket.
"""

from typing import Any, Dict, List, Optional
from fastapi import APIRouter, HTTPException, Request

from pokertable import __version__
from pokertable.server.rooms import RoomRegistry
from pokertable.server.schemas import CreateRoomRequest, RoomInfoSchema

router = APIRouter()


def get_registry(request: Request) -> RoomRegistry:
    return request.app.state.rooms


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    return {
        "status": "ok",
        "version": __version__,
        "rooms": len(get_registry(request).rooms),
    }


@router.get("/rooms", response_model=List[RoomInfoSchema])
async def list_rooms(request: Request) -> List[Dict[str, Any]]:
    """List all rooms."""
    return [room.info() for room in get_registry(request).rooms.values()]


@router.post("/rooms", response_model=RoomInfoSchema, status_code=201)
async def create_room(request: Request, req: Optional[CreateRoomRequest] = None) -> Dict[str, Any]:
    """
    Create a new game room.

    Blinds and buy-in default to the server configuration. Players join the
    room over the WebSocket using the returned room id.
    """
    req = req or CreateRoomRequest()
    try:
        room = get_registry(request).create_room(
            small_blind=req.small_blind,
            big_blind=req.big_blind,
            buy_in=req.buy_in,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return room.info()


@router.get("/rooms/{room_id}", response_model=RoomInfoSchema)
async def get_room(request: Request, room_id: str) -> Dict[str, Any]:
    """Get room information."""
    room = get_registry(request).get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail=f"Room {room_id} not found")
    return room.info()
