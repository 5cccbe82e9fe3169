from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from redis.asyncio import Redis

from cellduel.db import Session, engine
from cellduel.load_secrets import (
    auto_tick_interval_seconds,
    log_level,
    redis_enabled,
    redis_host,
    redis_port,
)
from cellduel.models.schemas import Base
from cellduel.redis_notifier import DuelNotifier
from cellduel.routers.duel import duel_router
from cellduel.routers.player import player_router
from cellduel.services.duel_db import DuelService

logging.basicConfig(level=log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, wire the duel service and start the tick cadence.
    This function is called to start the server.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    redis = None
    notifier = None
    if redis_enabled:
        redis = Redis(host=redis_host, port=redis_port, decode_responses=True, health_check_interval=30)
        notifier = DuelNotifier(redis, Session)

    service = DuelService(Session, notifier=notifier)
    app.state.duel_service = service
    app.state.notifier = notifier

    scheduler = AsyncIOScheduler()
    if auto_tick_interval_seconds > 0:
        scheduler.add_job(
            service.tick_active_duels,
            "interval",
            seconds=auto_tick_interval_seconds,
            max_instances=1,
            coalesce=True,
        )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        if redis is not None:
            await redis.aclose()
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(duel_router)
app.include_router(player_router)


# if __name__ == "__main__":
#     uvicorn.run("cellduel.main:app", host="0.0.0.0", port=8080)
