"""Graphics module for SUBWAY DASH rendering pipeline."""

from subway_dash.graphics.compositor import FrameCompositor, LAYERS
from subway_dash.graphics.primitives import (
    fill_span,
    new_frame,
    put_char,
    put_text,
    replace_in_span,
)
from subway_dash.graphics.projection import (
    depth_fraction,
    horizon_row,
    lane_to_screen_x,
    screen_row,
    track_bounds,
    track_half_width_at,
)

__all__ = [
    # Compositor
    "FrameCompositor",
    "LAYERS",
    # Primitives
    "fill_span",
    "new_frame",
    "put_char",
    "put_text",
    "replace_in_span",
    # Projection
    "depth_fraction",
    "horizon_row",
    "lane_to_screen_x",
    "screen_row",
    "track_bounds",
    "track_half_width_at",
]
