import asyncio
import contextlib

from asgiref.sync import sync_to_async
from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from pins.services.metrics import get_metrics
from schools.access import actor_for


class PinMetricsConsumer(AsyncJsonWebsocketConsumer):
    """
    Pushes PIN issuance/redemption counters to connected super admins every few
    seconds, so spikes of failed redemptions show up without polling.
    """

    interval = 3

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close()
            return
        actor = await database_sync_to_async(actor_for)(user)
        if not actor.is_super_admin:
            await self.close()
            return
        await self.accept()
        self._running = True
        await self.send_metrics()
        self._task = asyncio.create_task(self._loop())

    async def disconnect(self, close_code):
        self._running = False
        if hasattr(self, "_task"):
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _loop(self):
        while self._running:
            await asyncio.sleep(self.interval)
            await self.send_metrics()

    async def send_metrics(self):
        metrics = await sync_to_async(get_metrics)()
        if metrics is None:
            await self.send_json({"type": "metrics", "available": False})
            return
        await self.send_json({"type": "metrics", "available": True, **metrics})
