from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from ipsguard.security.request_analyzer import RequestAnalyzer
from ipsguard.core.logger import logger
from ipsguard.config import settings


class IPSMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, skip_paths: list[str] = None):
        super().__init__(app)
        self.request_analyzer = RequestAnalyzer()
        self.skip_paths = settings.ips_skip_paths if skip_paths is None else skip_paths

    async def dispatch(self, request: Request, call_next):
        if not settings.ips_enabled or self._skipped(request.url.path):
            return await call_next(request)

        engine = getattr(request.app.state, "ips_engine", None)
        if engine is None:
            return await call_next(request)

        try:
            inspected = await self.request_analyzer.analyze(request)
            allowed, blocked_response, _ = await engine.process_request(inspected)
        except Exception as e:
            logger.error("middleware_error", path=request.url.path, error=str(e))
            return await call_next(request)

        if not allowed and blocked_response is not None:
            return blocked_response

        return await call_next(request)

    def _skipped(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.skip_paths)
