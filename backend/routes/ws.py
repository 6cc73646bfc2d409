from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from connection_manager import manager

router = APIRouter(tags=["websocket"])

@router.websocket("/ws/{session_code}")
async def websocket_endpoint(websocket: WebSocket, session_code: str):
    # Unknown codes are not rejected; the socket simply never receives events
    session_code = session_code.upper()
    await manager.connect(websocket, session_code)
    try:
        while True:
            # Clients only send heartbeats
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, session_code)
