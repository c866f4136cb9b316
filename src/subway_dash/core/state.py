"""
Game state for SUBWAY DASH.

A single mutable aggregate owned by the harness for the lifetime of the
process. The simulation engine is its only writer; the compositor only
reads it.
"""

from dataclasses import dataclass, field
import logging

from .entities import Coin, EntityPool, Obstacle

logger = logging.getLogger(__name__)

NUM_LANES = 3
OBSTACLE_POOL_SIZE = 20
COIN_POOL_SIZE = 30

BASE_SPEED = 6.0
MAX_SPEED = 16.0
START_LANE = 1


@dataclass
class GameState:
    """Everything the simulation and renderer share.

    Attributes:
        width: Viewport width in character cells
        height: Viewport height in character cells
        speed: Track speed in depth units per second
        score: Distance score plus coin bonuses
        coins: Coins collected so far
        hits: Obstacles the runner failed to avoid
        runner_lane: Committed lane used for collisions
        target_lane: Lane the runner is heading to
        lane_x: Visual lane position, interpolated toward target_lane
        scroll_offset: Distance travelled, drives ground animation only
        elapsed: Simulated seconds
        spawn_timer: Seconds accumulated toward the next obstacle
        coin_timer: Seconds accumulated toward the next coin trail
    """

    width: int = 80
    height: int = 24
    speed: float = BASE_SPEED
    score: int = 0
    coins: int = 0
    hits: int = 0
    runner_lane: int = START_LANE
    target_lane: int = START_LANE
    lane_x: float = float(START_LANE)
    scroll_offset: float = 0.0
    elapsed: float = 0.0
    spawn_timer: float = 0.0
    coin_timer: float = 0.0
    obstacles: EntityPool[Obstacle] = field(
        default_factory=lambda: EntityPool(Obstacle, OBSTACLE_POOL_SIZE)
    )
    coin_pool: EntityPool[Coin] = field(
        default_factory=lambda: EntityPool(Coin, COIN_POOL_SIZE)
    )

    def reset(self) -> None:
        """Return to the start-of-run state, keeping viewport and pools."""
        self.speed = BASE_SPEED
        self.score = 0
        self.coins = 0
        self.hits = 0
        self.runner_lane = START_LANE
        self.target_lane = START_LANE
        self.lane_x = float(START_LANE)
        self.scroll_offset = 0.0
        self.elapsed = 0.0
        self.spawn_timer = 0.0
        self.coin_timer = 0.0
        self.obstacles.clear()
        self.coin_pool.clear()
        logger.debug("Game state reset")

    def summary(self) -> dict:
        """Snapshot of the run counters, for logging."""
        return {
            "score": self.score,
            "coins": self.coins,
            "hits": self.hits,
            "elapsed": round(self.elapsed, 2),
            "speed": round(self.speed, 2),
        }
