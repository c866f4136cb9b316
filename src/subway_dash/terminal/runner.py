"""
Terminal runner for SUBWAY DASH.

Fixed-rate scheduling harness: measures and clamps frame time, polls the
terminal size, and drives SimulationEngine.advance() followed by
FrameCompositor.render() once per tick. Key presses and OS signals only
ever request a cooperative shutdown; they never touch game state.
"""

import asyncio
import logging
import signal
import time
from typing import Optional, Protocol, Tuple

from ..config.settings import TerminalSettings
from ..core.engine import LanePicker, SimulationEngine
from ..core.events import (
    Event,
    EventBus,
    EventType,
    key_event,
    resize_event,
    shutdown_event,
    tick_event,
)
from ..core.state import GameState
from ..graphics.compositor import FrameCompositor
from .screen import TerminalScreen

logger = logging.getLogger(__name__)

QUIT_KEYS = (b"q", b"Q", b"\x03")  # Ctrl-C arrives as a byte in raw mode


class Screen(Protocol):
    """What the runner needs from a screen."""

    def input_fd(self) -> Optional[int]: ...
    def enter(self) -> None: ...
    def exit(self) -> None: ...
    def size(self) -> Tuple[int, int]: ...
    def write(self, data: bytes) -> None: ...
    def clear(self) -> None: ...
    def show_title(self, text: str) -> None: ...
    def read_keys(self) -> bytes: ...


class TerminalRunner:
    """
    Owns the game for one process: state, engine, compositor and screen.

    Advance and render strictly alternate on the event loop thread; the
    signal and input watchers only queue SHUTDOWN/KEY_PRESS events, which
    the loop drains between ticks.
    """

    def __init__(
        self,
        settings: TerminalSettings | None = None,
        screen: Screen | None = None,
        state: GameState | None = None,
        rng: LanePicker | None = None,
        event_bus: EventBus | None = None,
        max_frames: int | None = None,
        install_signal_handlers: bool = True,
    ) -> None:
        self.settings = settings or TerminalSettings()
        self.screen = screen or TerminalScreen(
            fallback=(self.settings.fallback_width, self.settings.fallback_height)
        )
        self.state = state or GameState()
        self.engine = SimulationEngine(self.state, rng)
        self.compositor = FrameCompositor(self.state)
        self.event_bus = event_bus or EventBus()
        self.max_frames = max_frames
        self._install_signal_handlers = install_signal_handlers

        self._running = False
        self._frame_count = 0
        self._input_fd: Optional[int] = None
        self._signals: list[signal.Signals] = []

        self.event_bus.subscribe(EventType.TICK, self._on_tick)
        self.event_bus.subscribe(EventType.RESIZE, self._on_resize)
        self.event_bus.subscribe(EventType.KEY_PRESS, self._on_key)
        self.event_bus.subscribe(EventType.SHUTDOWN, self._on_shutdown)

        logger.info("TerminalRunner created")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def clamp_delta(self, delta: float) -> float:
        """Keep dt non-negative and bounded after stalls."""
        return min(max(delta, 0.0), self.settings.max_delta)

    # Shutdown requests
    def request_stop(self, reason: str = "request") -> None:
        """Queue a shutdown; safe to call from signal and reader callbacks."""
        self.event_bus.queue_event(shutdown_event(reason))

    def stop(self, reason: str = "stop") -> None:
        if self._running:
            logger.info(f"Stopping runner ({reason})")
        self._running = False

    # Event handlers
    def _on_tick(self, event: Event) -> None:
        self.engine.advance(event.data.get("delta", 0.0))
        self.screen.write(self.compositor.render())

    def _on_resize(self, event: Event) -> None:
        width = event.data["width"]
        height = event.data["height"]
        logger.info(f"Terminal resized to {width}x{height}")
        self.engine.resize(width, height)
        self.screen.clear()

    def _on_key(self, event: Event) -> None:
        key = event.data.get("key", b"")
        if any(quit_key in key for quit_key in QUIT_KEYS):
            self.stop("quit key")

    def _on_shutdown(self, event: Event) -> None:
        self.stop(event.data.get("reason", "shutdown"))

    # Watchers
    def _read_input(self) -> None:
        data = self.screen.read_keys()
        if not data:
            # EOF: stop watching, keep playing
            self._remove_reader()
            return
        self.event_bus.queue_event(key_event(data))

    def _install_watchers(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._install_signal_handlers:
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, self.request_stop, sig.name)
                    self._signals.append(sig)
                except (NotImplementedError, RuntimeError) as e:
                    logger.debug(f"Signal handler for {sig.name} unavailable: {e}")

        fd = self.screen.input_fd()
        if fd is not None:
            loop.add_reader(fd, self._read_input)
            self._input_fd = fd

    def _remove_reader(self) -> None:
        if self._input_fd is None:
            return
        try:
            asyncio.get_running_loop().remove_reader(self._input_fd)
        finally:
            self._input_fd = None

    def _remove_watchers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self._signals:
            loop.remove_signal_handler(sig)
        self._signals.clear()
        self._remove_reader()

    def _poll_size(self) -> None:
        width, height = self.screen.size()
        if (width, height) != (self.state.width, self.state.height):
            self.event_bus.emit(resize_event(width, height))

    # Main loop
    async def run(self) -> None:
        """Run until stopped, always restoring the terminal."""
        loop = asyncio.get_running_loop()
        self._running = True
        self._frame_count = 0

        width, height = self.screen.size()
        self.engine.resize(width, height)

        try:
            self.screen.enter()
            self._install_watchers(loop)
            logger.info(
                f"Runner started: {width}x{height} at {self.settings.fps} fps"
            )

            self.screen.show_title(self.settings.title)
            if self.settings.title_duration > 0:
                await asyncio.sleep(self.settings.title_duration)

            frame_time = self.settings.frame_time
            last = time.monotonic()
            next_tick = last

            while self._running:
                await self.event_bus.process_queue()
                if not self._running:
                    break

                now = time.monotonic()
                delta = self.clamp_delta(now - last)
                last = now

                self._poll_size()
                self.event_bus.emit(tick_event(delta, self._frame_count))
                self._frame_count += 1

                if self.max_frames is not None and self._frame_count >= self.max_frames:
                    self.stop("frame limit")
                    break

                next_tick += frame_time
                delay = next_tick - time.monotonic()
                if delay < 0:
                    # Fell behind; resync instead of bursting
                    next_tick = time.monotonic()
                    delay = 0.0
                await asyncio.sleep(delay)
        finally:
            self._remove_watchers(loop)
            self.screen.exit()
            self._running = False
            logger.info(f"Run finished: {self.state.summary()}")
