"""Shared fixtures for the SUBWAY DASH test suites."""

from subway_dash.core.engine import SimulationEngine
from subway_dash.core.state import GameState


class ScriptedLanes:
    """Deterministic stand-in for random.Random: replays a lane sequence."""

    def __init__(self, *lanes):
        self._lanes = list(lanes) or [0]
        self._index = 0
        self.calls = 0

    def randrange(self, stop):
        lane = self._lanes[self._index % len(self._lanes)]
        self._index += 1
        self.calls += 1
        return lane % stop


def make_engine(*lanes, width=80, height=24):
    """Fresh state and engine with scripted spawn lanes."""
    state = GameState(width=width, height=height)
    engine = SimulationEngine(state, ScriptedLanes(*lanes))
    return state, engine


def place_runner(state, lane):
    """Put the runner squarely in a lane, as if it had already snapped there."""
    state.runner_lane = lane
    state.target_lane = lane
    state.lane_x = float(lane)


def screen_rows(compositor):
    """Rendered frame as a list of row strings."""
    return compositor.render_text().split("\n")
