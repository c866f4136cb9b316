"""SUBWAY DASH - a self-driving endless runner drawn in the terminal.

The runner dodges obstacles and picks up coins on a three-lane track shown
in text-mode perspective.
"""

__version__ = "0.1.0"

from subway_dash.core.state import GameState
from subway_dash.core.engine import SimulationEngine
from subway_dash.graphics.compositor import FrameCompositor

__all__ = ["GameState", "SimulationEngine", "FrameCompositor", "__version__"]
