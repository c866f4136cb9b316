"""Core simulation components for SUBWAY DASH."""

from .entities import Coin, EntityPool, Obstacle
from .state import GameState
from .engine import SimulationEngine
from .events import EventBus, Event, EventType

__all__ = [
    "Coin",
    "EntityPool",
    "Obstacle",
    "GameState",
    "SimulationEngine",
    "EventBus",
    "Event",
    "EventType",
]
