"""Periodic automatic scans."""

import asyncio
from typing import Optional

from .._utils import logger
from .service import BackupService


class ScanScheduler:
    """Trigger ``service.scan(is_automatic=True)`` every ``interval`` seconds.

    A tick is skipped, not queued, while another scan is running. Stopping
    or cancelling never interrupts a scan that already started; both wait
    for it to finish.
    """

    def __init__(self, service: BackupService, interval: float):
        self.service = service
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.interval <= 0:
            logger.info("Scan interval <= 0, automatic scans disabled")
            return
        if self.running:
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Automatic scans started every {self.interval}s")

    async def stop(self) -> None:
        """Signal the loop to exit and wait for it, including any in-flight scan."""
        if self._task is None:
            return

        self._stop_event.set()
        task, self._task = self._task, None
        await asyncio.wait([task])

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            except asyncio.CancelledError:
                logger.info("Automatic scans stopped: cancelled")
                raise
            if self._stop_event.is_set():
                logger.info("Automatic scans stopped: stop signal")
                return

            await self._tick()

    async def _tick(self) -> None:
        if self.service.scan_in_progress:
            logger.debug("Skipping automatic scan: another scan is in progress")
            return

        scan = asyncio.ensure_future(self.service.scan(is_automatic=True))
        try:
            await asyncio.shield(scan)
        except asyncio.CancelledError:
            logger.info("Automatic scans cancelled, waiting for in-flight scan")
            await asyncio.wait([scan])
            raise
        except Exception as e:
            logger.error(f"Automatic scan failed: {e}")
            return

        result = scan.result()
        if result.created:
            logger.info(f"Automatic backup created: {result.entry.id}")
