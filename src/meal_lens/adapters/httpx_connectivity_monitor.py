"""Connectivity monitor that probes a URL in the background."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field

import httpx

from meal_lens.services.connectivity import ConnectivityMonitor

_logger = logging.getLogger(__name__)


@dataclass
class HttpxConnectivityMonitor(ConnectivityMonitor):
    """Periodically probes a URL and keeps a reachability flag up to date."""

    probe_url: str
    http_client: httpx.AsyncClient
    interval_seconds: float = 30.0
    probe_timeout_seconds: float = 5.0
    _available: bool = field(default=True, init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @classmethod
    def create(
        cls, probe_url: str, interval_seconds: float = 30.0
    ) -> "HttpxConnectivityMonitor":
        """Create a monitor with a managed httpx session."""
        return cls(
            probe_url=probe_url,
            http_client=httpx.AsyncClient(),
            interval_seconds=interval_seconds,
        )

    @property
    def is_available(self) -> bool:
        return self._available

    async def check(self) -> bool:
        """Probe once and update the flag."""
        try:
            await self.http_client.head(
                self.probe_url, timeout=self.probe_timeout_seconds
            )
            available = True
        except httpx.TransportError as exc:
            _logger.debug("Connectivity probe failed: %s", exc)
            available = False
        if available != self._available:
            _logger.info("Network %s", "available" if available else "unavailable")
        self._available = available
        return available

    async def start(self) -> None:
        """Run an initial probe and keep probing in the background."""
        if self._task is not None:
            return
        await self.check()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel background probing and close the HTTP session."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        await self.http_client.aclose()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.check()
