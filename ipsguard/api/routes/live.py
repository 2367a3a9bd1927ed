from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from ipsguard.core.logger import logger

router = APIRouter(prefix="/ws", tags=["live"])


@router.websocket("/threats")
async def threat_feed(websocket: WebSocket):
    broadcaster = websocket.app.state.ips_engine.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("live_socket_error", error=str(e))
    finally:
        broadcaster.disconnect(websocket)
