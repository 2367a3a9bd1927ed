import json
from datetime import datetime, timezone
from typing import Any, Optional
from fastapi import WebSocket
from starlette.concurrency import run_in_threadpool
from ipsguard.core.redis_client import get_redis
from ipsguard.core.logger import logger
from ipsguard.config import settings


class ThreatBroadcaster:
    def __init__(self, redis_client=None, channel: str = None, publish_enabled: bool = None):
        self.connections: set[WebSocket] = set()
        self._redis = redis_client
        self.channel = channel or settings.threat_channel
        self.publish_enabled = (
            settings.redis_publish_enabled if publish_enabled is None else publish_enabled
        )

    @property
    def redis(self):
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections.add(websocket)
        logger.info("live_client_connected", clients=len(self.connections))
        await websocket.send_json({
            "event": "welcome",
            "data": {
                "message": "Connected to IPS Server",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        })

    def disconnect(self, websocket: WebSocket) -> None:
        self.connections.discard(websocket)
        logger.info("live_client_disconnected", clients=len(self.connections))

    async def broadcast(self, threat: dict[str, Any]) -> int:
        message = {"event": "threat-detected", "data": threat}
        delivered = 0

        for websocket in list(self.connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("live_push_failed", error=str(e))
                self.disconnect(websocket)

        if self.publish_enabled:
            await run_in_threadpool(self.publish, threat)
        return delivered

    def publish(self, threat: dict[str, Any]) -> Optional[int]:
        if not self.publish_enabled:
            return None
        try:
            return self.redis.publish(self.channel, json.dumps(threat))
        except Exception as e:
            logger.error("threat_publish_failed", channel=self.channel, error=str(e))
            return None
