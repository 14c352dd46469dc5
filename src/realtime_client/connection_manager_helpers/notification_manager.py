"""Connect/disconnect fan-out to registered consumers."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict

from ..async_helpers import safely_schedule_coroutine

ConnectCallback = Callable[[], Any]
DisconnectCallback = Callable[[str], Any]


class FanOutNotifier:
    """
    Holds the on-connect and on-disconnect callback sets.

    Callbacks may be plain functions or coroutine functions. A failing callback
    is logged and never prevents the others from running.
    """

    def __init__(self, name: str = "realtime"):
        self._connect_callbacks: Dict[ConnectCallback, None] = {}
        self._disconnect_callbacks: Dict[DisconnectCallback, None] = {}
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def add_connect_callback(self, callback: ConnectCallback) -> None:
        self._connect_callbacks[callback] = None

    def remove_connect_callback(self, callback: ConnectCallback) -> None:
        self._connect_callbacks.pop(callback, None)

    def add_disconnect_callback(self, callback: DisconnectCallback) -> None:
        self._disconnect_callbacks[callback] = None

    def remove_disconnect_callback(self, callback: DisconnectCallback) -> None:
        self._disconnect_callbacks.pop(callback, None)

    @property
    def connect_callback_count(self) -> int:
        return len(self._connect_callbacks)

    @property
    def disconnect_callback_count(self) -> int:
        return len(self._disconnect_callbacks)

    async def notify_connect(self) -> None:
        for callback in list(self._connect_callbacks):
            await self._invoke(callback, "connect")

    async def notify_disconnect(self, reason: str) -> None:
        for callback in list(self._disconnect_callbacks):
            await self._invoke(callback, "disconnect", reason)

    def invoke_now(self, callback: ConnectCallback) -> None:
        """Run a late subscriber immediately; coroutine results are scheduled."""
        try:
            result = callback()
        except Exception:
            self.logger.exception("Error in connect callback")
            return
        if inspect.isawaitable(result):
            safely_schedule_coroutine(_await(result))

    async def _invoke(self, callback: Callable[..., Any], kind: str, *args: Any) -> None:
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self.logger.exception(f"Error in {kind} callback")


async def _await(awaitable: Any) -> Any:
    return await awaitable
