from fastapi import WebSocket
from typing import Dict, Set
import json
import logging

logger = logging.getLogger(__name__)

class ConnectionManager:
    """Fans real-time events out to every socket watching a session.

    Delivery is best-effort: a socket that fails a send is dropped and the
    client is expected to refetch when it reconnects.
    """

    def __init__(self):
        # Session code -> Set of WebSockets
        self.active_connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, session_code: str):
        await websocket.accept()
        self.active_connections.setdefault(session_code, set()).add(websocket)

    def disconnect(self, websocket: WebSocket, session_code: str):
        sockets = self.active_connections.get(session_code)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.active_connections[session_code]

    async def broadcast(self, event: str, payload: dict, session_code: str):
        sockets = self.active_connections.get(session_code)
        if not sockets:
            return

        json_msg = json.dumps({"type": event, "payload": payload}, default=str)
        dead = set()
        for connection in list(sockets):
            try:
                await connection.send_text(json_msg)
            except Exception as exc:
                logger.info("Dropping socket for session %s: %s", session_code, exc)
                dead.add(connection)

        for conn in dead:
            self.disconnect(conn, session_code)

manager = ConnectionManager()
