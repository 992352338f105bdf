"""
PokerTable Server - FastAPI + WebSocket Server Layer
"""

from pokertable.server.app import app, create_app

__all__ = ["app", "create_app"]
