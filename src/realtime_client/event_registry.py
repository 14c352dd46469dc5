"""
Event subscriptions that outlive any single transport.

The registry is the source of truth for ``event -> callbacks``. Whatever
transport is currently attached carries one dispatcher per subscribed event;
that projection is rebuilt from the registry on every (re)connection, so
consumers never re-subscribe after a reconnect.

Registering the same callback twice for one event is idempotent: the callback
is delivered once per event.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from .transport import Transport

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]


class EventRegistry:
    """Ordered, de-duplicated callbacks per event name."""

    def __init__(self, reserved_events: Iterable[str] = ()):
        # dict keys keep first-registration order and give set semantics
        self._subscriptions: Dict[str, Dict[Callback, None]] = {}
        self._reserved = frozenset(reserved_events)
        self._transport: Optional[Transport] = None

    def add(self, event: str, callback: Callback) -> bool:
        """Register ``callback``; returns False when it was already registered."""
        callbacks = self._subscriptions.setdefault(event, {})
        if callback in callbacks:
            return False
        first_for_event = not callbacks
        callbacks[callback] = None
        if first_for_event:
            self._project(event)
        return True

    def remove(self, event: str, callback: Optional[Callback] = None) -> None:
        """Remove one callback, or every callback for ``event`` when none is given."""
        callbacks = self._subscriptions.get(event)
        if callbacks is None:
            return
        if callback is None:
            callbacks.clear()
        else:
            callbacks.pop(callback, None)
        if not callbacks:
            del self._subscriptions[event]
            if self._transport is not None and event not in self._reserved:
                self._transport.off(event)

    def attach(self, transport: Transport) -> None:
        """Project every subscribed event onto ``transport``."""
        self._transport = transport
        for event in self._subscriptions:
            self._project(event)
        logger.debug(f"Attached {len(self._subscriptions)} subscribed events to transport")

    def detach(self) -> None:
        """Drop the projection from the current transport; subscriptions are kept."""
        transport, self._transport = self._transport, None
        if transport is None:
            return
        for event in self._subscriptions:
            if event not in self._reserved:
                transport.off(event)

    @property
    def attached_transport(self) -> Optional[Transport]:
        return self._transport

    def events(self) -> list[str]:
        return list(self._subscriptions)

    def callbacks(self, event: str) -> list[Callback]:
        return list(self._subscriptions.get(event, ()))

    def __contains__(self, event: object) -> bool:
        return event in self._subscriptions

    async def dispatch(self, event: str, *args: Any) -> int:
        """Deliver an event to every subscriber; returns the number of successful deliveries."""
        delivered = 0
        for callback in self.callbacks(event):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Subscriber for event {event!r} failed")
            else:
                delivered += 1
        return delivered

    def _project(self, event: str) -> None:
        # Lifecycle events are owned by the manager, which forwards them via dispatch().
        if self._transport is None or event in self._reserved:
            return
        self._transport.on(event, self._dispatcher_for(event))

    def _dispatcher_for(self, event: str) -> Callback:
        async def dispatch_event(*args: Any) -> None:
            await self.dispatch(event, *args)

        return dispatch_event


__all__ = ["Callback", "EventRegistry"]
