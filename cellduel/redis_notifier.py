import json
import logging
from typing import AsyncGenerator
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import async_sessionmaker

from cellduel.crud import ReadData

HEART_BEAT = 15


def channel_for(duel_id: UUID) -> str:
    return f"duel:{duel_id}"


class DuelNotifier:
    """Publishes duel updates on Redis and relays them as server-sent events."""

    def __init__(self, redis: Redis, Session: async_sessionmaker):
        self.redis: Redis = redis
        self.Session: async_sessionmaker = Session

    async def publish(self, duel_id: UUID) -> None:
        await self.redis.publish(channel_for(duel_id), str(duel_id))

    async def latest_payload(self, duel_id: UUID) -> str | None:
        async with self.Session() as session:
            duel_data = await ReadData.read_duel_data(duel_id, session)
        if duel_data is None:
            return None
        return json.dumps(duel_data.model_dump(mode="json"))

    async def event_generator(self, duel_id: UUID) -> AsyncGenerator[str, None]:
        """Event generator to handle SSE events.

        Sends the current duel first, then one ``duel_update`` event per
        published notification, and a comment line as heartbeat when idle.

        Args:
            duel_id (UUID): Duel whose channel is followed
        """
        channel = channel_for(duel_id)
        pubsub = self.redis.pubsub()

        payload = await self.latest_payload(duel_id)
        if payload is not None:
            yield f"event: duel_update\ndata: {payload}\n\n"

        await pubsub.subscribe(channel)
        try:
            while True:
                msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=HEART_BEAT)
                if msg is None:
                    yield ": heartbeat\n\n"
                    continue
                if msg["type"] != "message":
                    continue
                payload = await self.latest_payload(duel_id)
                if payload is None:
                    continue
                logging.debug(f"Payload: {payload}")
                yield f"event: duel_update\ndata: {payload}\n\n"
                if json.loads(payload)["status"] == "completed":
                    break
        finally:
            logging.info(f"Unsubscribing from channel {channel}")
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
