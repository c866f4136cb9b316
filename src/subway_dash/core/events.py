"""
Event bus for the SUBWAY DASH harness.

The tick scheduler, the stdin watcher and the signal watcher talk to the
runner through this bus. Signal and reader callbacks only queue events;
the runner drains the queue between ticks, so every handler runs on the
event loop thread. Game state is never carried in an event.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable
from enum import Enum, auto
from collections import defaultdict, deque
import asyncio
import inspect
import logging
import time

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class EventType(Enum):
    """Harness events."""
    TICK = auto()       # data: delta, frame
    RESIZE = auto()     # data: width, height
    KEY_PRESS = auto()  # data: key (raw bytes)
    SHUTDOWN = auto()   # data: reason


@dataclass
class Event:
    """
    One message on the bus.

    Attributes:
        type: EventType, or a string for ad-hoc events
        data: Payload
        source: Name of the emitting component
        timestamp: time.monotonic() at creation
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.monotonic)


SyncHandler = Callable[[Event], None]
AsyncHandler = Callable[[Event], Awaitable[None]]
Handler = SyncHandler | AsyncHandler


def _name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


class EventBus:
    """
    Publish/subscribe hub.

    emit() runs plain handlers on the spot and skips coroutine handlers.
    emit_async() and process_queue() run both kinds. A failing handler is
    logged and the remaining handlers still run.
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        self._by_type: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._wildcard: list[Handler] = []
        self._pending: asyncio.Queue[Event] = asyncio.Queue()
        self._history: deque[Event] = deque(maxlen=history_limit)

    @staticmethod
    def _detach(handlers: list[Handler], handler: Handler) -> Callable[[], None]:
        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)
        return unsubscribe

    def subscribe(self, event_type: EventType | str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for one event type.

        Returns:
            A callable that removes the handler again (safe to call twice)
        """
        handlers = self._by_type[event_type]
        handlers.append(handler)
        logger.debug(f"{_name(handler)} subscribed to {event_type}")
        return self._detach(handlers, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register a handler for every event."""
        self._wildcard.append(handler)
        return self._detach(self._wildcard, handler)

    def _targets(self, event: Event) -> Iterable[Handler]:
        # Copy so handlers may unsubscribe while being dispatched
        return [*self._by_type.get(event.type, ()), *self._wildcard]

    def _call(self, handler: SyncHandler, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(f"{_name(handler)} failed on {event.type}: {e}")

    def emit(self, event: Event) -> None:
        """Deliver an event to plain handlers immediately."""
        self._history.append(event)
        for handler in self._targets(event):
            if not inspect.iscoroutinefunction(handler):
                self._call(handler, event)

    async def emit_async(self, event: Event) -> None:
        """Deliver an event to every handler, awaiting coroutine handlers."""
        self._history.append(event)
        await self._deliver(event)

    async def _deliver(self, event: Event) -> None:
        coroutines = []
        for handler in self._targets(event):
            if inspect.iscoroutinefunction(handler):
                coroutines.append(handler(event))
            else:
                self._call(handler, event)

        if not coroutines:
            return
        for result in await asyncio.gather(*coroutines, return_exceptions=True):
            if isinstance(result, Exception):
                logger.error(f"Async handler failed on {event.type}: {result}")

    def queue_event(self, event: Event) -> None:
        """Defer an event until the next process_queue(); never blocks."""
        self._pending.put_nowait(event)

    async def process_queue(self) -> int:
        """Deliver everything queued so far, in order. Returns the count."""
        delivered = 0
        while not self._pending.empty():
            event = self._pending.get_nowait()
            self._history.append(event)
            await self._deliver(event)
            delivered += 1
        return delivered

    def get_history(self, event_type: EventType | str | None = None, limit: int = 10) -> list[Event]:
        """Most recent events, oldest first, optionally of one type."""
        events = [e for e in self._history if event_type is None or e.type == event_type]
        return events[-limit:]

    def clear_history(self) -> None:
        self._history.clear()


def tick_event(delta: float, frame: int) -> Event:
    return Event(EventType.TICK, data={"delta": delta, "frame": frame}, source="runner")


def resize_event(width: int, height: int) -> Event:
    return Event(EventType.RESIZE, data={"width": width, "height": height}, source="screen")


def key_event(key: bytes) -> Event:
    return Event(EventType.KEY_PRESS, data={"key": key}, source="input")


def shutdown_event(reason: str) -> Event:
    """Cooperative stop request; reason names the trigger (signal, key, limit)."""
    return Event(EventType.SHUTDOWN, data={"reason": reason}, source=reason)
