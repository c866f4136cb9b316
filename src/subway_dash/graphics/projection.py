"""Perspective projection for the three-lane track.

Maps world coordinates (lane, depth along the track) to screen rows, columns
and perspective-scaled widths. Everything here is pure and recomputed from
the viewport on every frame.

Depth fractions run from 0 at the horizon to 1 at the bottom of the screen:
a small raw depth (close to the viewer) gives a fraction near 1 and
therefore a wide track.
"""

from typing import Tuple

from subway_dash.core.engine import FAR_DEPTH
from subway_dash.core.state import NUM_LANES

LANE_WIDTH = 7
TRACK_WIDTH = NUM_LANES * LANE_WIDTH + 4  # lanes plus rails
MIN_TRACK_WIDTH = 3


def horizon_row(height: int) -> int:
    """Row of the horizon, a third of the way down."""
    return height // 3


def depth_fraction(depth: float) -> float:
    """Fraction of the ground span an entity at this depth sits at."""
    return 1.0 - depth / FAR_DEPTH


def is_visible(fraction: float) -> bool:
    return 0.0 <= fraction <= 1.0


def row_fraction(row: int, height: int) -> float:
    """Inverse of screen_row: how far below the horizon a row lies.

    Zero or negative for the horizon row and the sky above it.
    """
    horizon = horizon_row(height)
    return (row - horizon) / (height - horizon)


def screen_row(fraction: float, height: int) -> int:
    horizon = horizon_row(height)
    return horizon + int(fraction * (height - horizon))


def projected_width(fraction: float) -> int:
    """Unclamped track width at a fraction; entities narrower than the
    minimum are too far away to draw."""
    return int(TRACK_WIDTH * fraction)


def track_width_at(fraction: float) -> int:
    return max(MIN_TRACK_WIDTH, projected_width(fraction))


def track_half_width_at(fraction: float) -> int:
    return track_width_at(fraction) // 2


def track_left(track_width: int, width: int) -> int:
    """Unclamped left edge of a band of track_width centred in the viewport."""
    return width // 2 - track_width // 2


def track_bounds(fraction: float, width: int) -> Tuple[int, int]:
    """Left and right rail columns at a fraction, clamped to the viewport.

    Args:
        fraction: Depth fraction of the row (0 = horizon, 1 = bottom)
        width: Viewport width in cells

    Returns:
        (left, right) with 0 <= left and right <= width - 1
    """
    center = width // 2
    half = track_half_width_at(fraction)
    left = max(0, center - half)
    right = min(width - 1, center + half)
    return left, right


def lane_width_at(track_width: int) -> float:
    return track_width / NUM_LANES


def lane_to_screen_x(
    lane: float,
    left: int,
    lane_width: float,
    offset: float = 0.5,
) -> int:
    """Column of a point inside a lane.

    Args:
        lane: Lane index, fractional values interpolate between lanes
        left: Unclamped left edge of the track at this depth
        lane_width: Width of one lane at this depth
        offset: Position within the lane, 0 = left edge, 0.5 = centre
    """
    return left + int(lane * lane_width + lane_width * offset)
