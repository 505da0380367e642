"""
Realtime notification channel.

Protocol: the client connects, then sends ``{"type": "auth", "token": "..."}``.
On success it joins its user room and receives ``{"type": "auth:success"}``;
otherwise it receives ``{"type": "auth:error"}`` and the socket is closed.
"""

import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from claimflow.domain.models.base import RateLimitExceededError, ServiceUnavailableError, UnauthorizedError
from claimflow.domain.models.user import AuthContext
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.rate_limiting.dependencies import enforce_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()

AUTH_FAILED_CLOSE_CODE = 4401
RATE_LIMITED_CLOSE_CODE = 4429
TRY_AGAIN_LATER_CLOSE_CODE = 1013


async def _authenticate(websocket: WebSocket, container: ServiceContainer) -> Optional[AuthContext]:
    try:
        message = await websocket.receive_json()
    except ValueError:
        message = None

    if not isinstance(message, dict) or message.get("type") != "auth":
        await websocket.send_json({"type": "auth:error", "data": {"message": "Authentication required"}})
        return None

    db = container.database.SessionLocal()
    try:
        return await container.authenticator.authenticate(message.get("token"), db)
    except UnauthorizedError as e:
        await websocket.send_json({"type": "auth:error", "data": {"message": e.message}})
        return None
    finally:
        db.close()


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket):
    container = get_container(websocket)

    # Handshakes count against the api limit; refused sockets are never accepted
    try:
        await enforce_rate_limit(websocket, "api")
    except RateLimitExceededError:
        await websocket.close(code=RATE_LIMITED_CLOSE_CODE)
        return
    except ServiceUnavailableError:
        await websocket.close(code=TRY_AGAIN_LATER_CLOSE_CODE)
        return

    await websocket.accept()

    try:
        user = await _authenticate(websocket, container)
    except WebSocketDisconnect:
        return
    if user is None:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE)
        return

    hub = container.hub
    await hub.join(websocket, user.id)
    await websocket.send_json({"type": "auth:success", "data": {"userId": user.id}})
    logger.info(f"Websocket connected for user {user.id}")

    try:
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    except ValueError:
        await websocket.close(code=1003)
    finally:
        await hub.leave(websocket, user.id)
        logger.info(f"Websocket disconnected for user {user.id}")
