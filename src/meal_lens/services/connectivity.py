"""Network reachability flag."""

from dataclasses import dataclass
from typing import Protocol


class ConnectivityMonitor(Protocol):
    """Exposes the latest known reachability state."""

    @property
    def is_available(self) -> bool:
        """Return True when the network was reachable at the last check."""

    async def start(self) -> None:
        """Begin observing network state changes."""

    async def stop(self) -> None:
        """Stop observing network state changes."""


@dataclass
class StaticConnectivity(ConnectivityMonitor):
    """Fixed reachability flag, toggled explicitly."""

    available: bool = True

    @property
    def is_available(self) -> bool:
        return self.available

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None
