import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ....ws.schemas import JoinQuiz, LeaveQuiz, Ping, client_message_adapter

logger = logging.getLogger(__name__)

ws_router = APIRouter()


@ws_router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket) -> None:
    """
    Notification channel. Clients join a quiz room to hear about leaderboard and
    live-status changes for that quiz; every client hears about new quizzes.
    Messages only tell the client to re-fetch, they never carry quiz data.
    """
    hub = websocket.app.state.resources.hub
    await hub.register(websocket)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = client_message_adapter.validate_json(raw)
            except ValidationError:
                await websocket.send_json({"type": "error", "message": "Unknown or malformed message"})
                continue

            if isinstance(msg, JoinQuiz):
                hub.join(msg.quizId, websocket)
                await websocket.send_json({"type": "joined", "quizId": msg.quizId})
            elif isinstance(msg, LeaveQuiz):
                hub.leave(msg.quizId, websocket)
                await websocket.send_json({"type": "left", "quizId": msg.quizId})
            elif isinstance(msg, Ping):
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected")

    finally:
        await hub.unregister(websocket)
