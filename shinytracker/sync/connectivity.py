"""
Connectivity monitor.

Two-state machine (online/offline) driven by platform signals. It never
polls: whatever observes the network calls set_online() and the monitor
fires listeners only on an actual transition.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], Awaitable[None] | None]


class ConnectivityMonitor:
    """Edge-triggered online/offline state."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._on_reconnect: list[Listener] = []
        self._on_disconnect: list[Listener] = []

    @property
    def online(self) -> bool:
        return self._online

    def on_reconnect(self, listener: Listener) -> None:
        """Register a callback for the offline -> online transition."""
        self._on_reconnect.append(listener)

    def on_disconnect(self, listener: Listener) -> None:
        """Register a callback for the online -> offline transition."""
        self._on_disconnect.append(listener)

    async def set_online(self, online: bool) -> None:
        """
        Feed a platform connectivity signal.

        Repeated signals for the current state are ignored. Listeners run
        in registration order and are awaited one after another.
        """
        if online == self._online:
            return

        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")

        listeners = self._on_reconnect if online else self._on_disconnect
        for listener in listeners:
            result = listener()
            if inspect.isawaitable(result):
                await result
