"""
Realtime delivery over websockets.
"""

from .hub import NotificationHub, user_room

__all__ = ["NotificationHub", "user_room"]
