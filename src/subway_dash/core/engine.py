"""Simulation engine for SUBWAY DASH.

Advances the game state in continuous time: speed ramp, scrolling, entity
movement, spawning, coin collection, hit detection, the autonomous dodge
policy and the smooth lane change of the runner.

Nothing here blocks, performs I/O or raises for gameplay conditions. A full
pool skips the spawn, an unavoidable obstacle is simply hit.
"""

import logging
import random
from typing import List, Optional, Protocol

from .state import BASE_SPEED, MAX_SPEED, NUM_LANES, GameState

logger = logging.getLogger(__name__)

FAR_DEPTH = 20
SPAWN_DEPTH = FAR_DEPTH - 1
EXPIRE_DEPTH = -1.0

SPEED_RAMP = 0.05          # speed units per simulated second
SCORE_RATE = 10            # points per unit of distance
COIN_BONUS = 50
COLLECT_DEPTH = 2.0
HIT_DEPTH = 1.0

SPAWN_INTERVAL_BASE = 2.0
SPAWN_INTERVAL_SLOPE = 0.06
SPAWN_INTERVAL_MIN = 0.7
COIN_INTERVAL = 0.6
COIN_TRAIL_LENGTH = 3
COIN_TRAIL_SPACING = 1.5

DODGE_LOOKAHEAD = 8
LANE_CHANGE_RATE = 8.0     # lanes per second
LANE_SNAP_EPSILON = 0.05


class LanePicker(Protocol):
    """Uniform integer source; random.Random satisfies it."""

    def randrange(self, stop: int) -> int:
        ...


def spawn_interval(speed: float) -> float:
    """Seconds between obstacle spawns, shrinking as the track speeds up."""
    return max(SPAWN_INTERVAL_MIN, SPAWN_INTERVAL_BASE - speed * SPAWN_INTERVAL_SLOPE)


class SimulationEngine:
    """
    Sole mutator of a GameState.

    The harness calls advance(dt) once per tick with dt already clamped;
    the engine trusts it and does not validate.
    """

    def __init__(self, state: GameState, rng: Optional[LanePicker] = None) -> None:
        self.state = state
        self._rng = rng or random.Random()

    def advance(self, dt: float) -> None:
        """Advance the simulation by dt seconds.

        Step order matters: later steps see this tick's positions and spawns.
        """
        s = self.state

        s.elapsed += dt
        s.score += int(s.speed * dt * SCORE_RATE)

        s.speed = min(MAX_SPEED, max(BASE_SPEED, BASE_SPEED + s.elapsed * SPEED_RAMP))
        distance = s.speed * dt
        s.scroll_offset += distance

        self._move_obstacles(distance)
        self._move_coins(distance)

        s.spawn_timer += dt
        interval = spawn_interval(s.speed)
        if s.spawn_timer >= interval:
            s.spawn_timer -= interval
            self.spawn_obstacle()

        s.coin_timer += dt
        if s.coin_timer >= COIN_INTERVAL:
            s.coin_timer -= COIN_INTERVAL
            self.spawn_coin_trail()

        self.dodge()
        self._update_lane(dt)

    def resize(self, width: int, height: int) -> None:
        """Store new viewport dimensions; geometry is derived per frame."""
        self.state.width = max(1, width)
        self.state.height = max(1, height)

    def reset(self) -> None:
        self.state.reset()

    # Movement
    def _move_obstacles(self, distance: float) -> None:
        s = self.state
        for obs in s.obstacles.active():
            before = obs.depth
            obs.depth -= distance

            # Crossing into the window this tick, including jumps past it
            if (
                not obs.hit
                and obs.lane == s.runner_lane
                and before > 0
                and obs.depth < HIT_DEPTH
            ):
                obs.hit = True
                s.hits += 1
                logger.debug(f"Runner hit obstacle in lane {obs.lane} (hits={s.hits})")

            if obs.depth < EXPIRE_DEPTH:
                obs.active = False

    def _move_coins(self, distance: float) -> None:
        s = self.state
        for coin in s.coin_pool.active():
            coin.depth -= distance

            if coin.lane == s.runner_lane and 0 < coin.depth < COLLECT_DEPTH:
                coin.active = False
                s.coins += 1
                s.score += COIN_BONUS
                continue

            if coin.depth < EXPIRE_DEPTH:
                coin.active = False

    # Spawning
    def spawn_obstacle(self) -> bool:
        """Spawn one obstacle at the far end of a random lane.

        Returns:
            False if the pool was full and the spawn was dropped.
        """
        lane = self._rng.randrange(NUM_LANES)
        if self.state.obstacles.spawn(lane, float(SPAWN_DEPTH)) is None:
            logger.debug("Obstacle pool full, spawn skipped")
            return False
        return True

    def spawn_coin_trail(self) -> int:
        """Spawn a short run of coins in one random lane.

        Returns:
            Number of coins actually placed.
        """
        lane = self._rng.randrange(NUM_LANES)
        placed = 0
        for j in range(COIN_TRAIL_LENGTH):
            depth = SPAWN_DEPTH + j * COIN_TRAIL_SPACING
            if self.state.coin_pool.spawn(lane, depth) is not None:
                placed += 1

        if placed < COIN_TRAIL_LENGTH:
            logger.debug(f"Coin pool full, placed {placed}/{COIN_TRAIL_LENGTH}")
        return placed

    # Autonomous dodge
    def danger_lanes(self) -> List[bool]:
        """Flag lanes holding an obstacle within lookahead range."""
        danger = [False] * NUM_LANES
        for obs in self.state.obstacles.active():
            if 0 < obs.depth < DODGE_LOOKAHEAD:
                danger[obs.lane] = True
        return danger

    def _lane_has_coin(self, lane: int) -> bool:
        return any(
            coin.lane == lane and coin.depth < DODGE_LOOKAHEAD
            for coin in self.state.coin_pool.active()
        )

    def choose_lane(self) -> int:
        """Pick the lane the runner should head for.

        Keeps the current target while it is safe. Otherwise the first safe
        lane is the fallback and a safe lane with a coin ahead overrides it
        (the last one scanned wins). With no safe lane the target stays.
        """
        danger = self.danger_lanes()
        current = self.state.target_lane
        if not danger[current]:
            return current

        best = -1
        for lane in range(NUM_LANES):
            if danger[lane]:
                continue
            if best == -1:
                best = lane
            if self._lane_has_coin(lane):
                best = lane

        return best if best >= 0 else current

    def dodge(self) -> None:
        lane = self.choose_lane()
        if lane != self.state.target_lane:
            logger.debug(f"Dodging: lane {self.state.target_lane} -> {lane}")
            self.state.target_lane = lane

    # Lane interpolation
    def _update_lane(self, dt: float) -> None:
        """Slide lane_x toward the target, committing the lane on arrival."""
        s = self.state
        target = float(s.target_lane)
        diff = target - s.lane_x

        if diff > LANE_SNAP_EPSILON:
            s.lane_x = min(target, s.lane_x + dt * LANE_CHANGE_RATE)
        elif diff < -LANE_SNAP_EPSILON:
            s.lane_x = max(target, s.lane_x - dt * LANE_CHANGE_RATE)
        else:
            s.lane_x = target
            s.runner_lane = s.target_lane
