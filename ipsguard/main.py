import asyncio
import time
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from ipsguard.api.middleware import IPSMiddleware
from ipsguard.api.routes import rules, threats, statistics, ip_tracking, demo, live
from ipsguard.core.database import Base, SessionLocal, engine
from ipsguard.core.redis_client import redis_status, close_redis
from ipsguard.core.logger import logger
from ipsguard.config import settings
from ipsguard.security.alert_escalator import AlertEscalator
from ipsguard.security.ips_engine import IPSEngine
from ipsguard.security.rule_engine import RuleEngine
from ipsguard.services.bookkeeping import BookkeepingQueue
from ipsguard.services.default_rules import seed_default_rules


async def sweep_alerts(escalator: AlertEscalator, interval: int) -> None:
    while True:
        await asyncio.sleep(interval)
        escalator.clear_old_alerts()


def create_app(session_factory: sessionmaker = SessionLocal) -> FastAPI:
    app = FastAPI(
        title="IPS Guard",
        description="Intrusion prevention API",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(IPSMiddleware)

    app.include_router(rules.router)
    app.include_router(threats.router)
    app.include_router(statistics.router)
    app.include_router(ip_tracking.router)
    app.include_router(demo.router)
    app.include_router(live.router)

    app.state.started_at = time.time()
    app.state.ips_engine = IPSEngine(
        rule_engine=RuleEngine(),
        escalator=AlertEscalator(),
        bookkeeping=BookkeepingQueue(session_factory=session_factory)
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, method=request.method, error=str(exc))
        content = {
            "error": type(exc).__name__,
            "message": str(exc) or "An unexpected error occurred",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if settings.environment == "development":
            content["path"] = request.url.path
        return JSONResponse(status_code=500, content=content)

    @app.get("/")
    async def root():
        return {
            "message": "IPS API Server",
            "version": app.version,
            "endpoints": {"health": "/health", "api": "/api", "admin": "/admin", "live": "/ws/threats"}
        }

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.time() - app.state.started_at, 3),
            "environment": settings.environment,
            "active_rules": len(app.state.ips_engine.rule_engine.snapshot),
            "redis": redis_status(),
        }

    @app.on_event("startup")
    async def startup_event():
        ips_engine = app.state.ips_engine

        db = session_factory()
        try:
            Base.metadata.create_all(bind=db.get_bind())
            if settings.seed_default_rules:
                seed_default_rules(db)
            ips_engine.rule_engine.reload(db)
        finally:
            db.close()

        await ips_engine.bookkeeping.start()
        app.state.alert_sweeper = asyncio.create_task(
            sweep_alerts(ips_engine.escalator, settings.alert_sweep_interval_seconds)
        )
        logger.info("ips_startup", environment=settings.environment, database=engine.url.drivername)

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.alert_sweeper.cancel()
        await app.state.ips_engine.wait_for_pushes()
        await app.state.ips_engine.bookkeeping.stop()
        close_redis()
        logger.info("ips_shutdown")

    return app


app = create_app()
