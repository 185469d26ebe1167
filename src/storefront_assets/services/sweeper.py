"""Background sweep of abandoned upload sessions."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta

from storefront_assets.services.assets import TempAssetManager

logger = logging.getLogger(__name__)


@dataclass
class SessionSweeper:
    """Periodically cleans up idle sessions and stale staged uploads."""

    manager: TempAssetManager
    interval_seconds: float = 300
    idle_timeout_seconds: float = 600
    asset_ttl_seconds: float = 3600
    _stop_event: asyncio.Event | None = field(default=None, init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> list[str]:
        """Run one sweep pass and return the cleaned session ids."""
        cleaned = await self.manager.cleanup_idle_sessions(
            timedelta(seconds=self.idle_timeout_seconds)
        )
        cleaned += await self.manager.cleanup_expired_assets(
            timedelta(seconds=self.asset_ttl_seconds)
        )
        if cleaned:
            logger.info("Swept upload sessions", extra={"count": len(cleaned)})
        return cleaned

    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(self._stop_event))
        logger.info(
            "Session sweeper started", extra={"interval": self.interval_seconds}
        )

    async def stop(self) -> None:
        """Stop the sweep loop and wait for it to finish."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None and not self._task.done():
            await self._task
        self._task = None
        logger.info("Session sweeper stopped")

    async def _loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
                break
            except TimeoutError:
                pass
            try:
                await self.run_once()
            except Exception:
                logger.exception("Session sweep failed")
