"""Frame compositor for SUBWAY DASH.

Builds one full screen of text per call. Each row is composited by running
the layer functions in LAYERS, in order, over that row's buffer; a later
layer overwrites an earlier one at the same cell. The order is the
occlusion order of the scene:

    sky -> ground -> track -> lane dividers -> cross-ties
        -> obstacles -> coins -> runner -> HUD

Entities are drawn in pool order, not depth order. When two of them land
on the same cell the later slot wins.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import logging

from subway_dash.core.entities import Coin, Obstacle
from subway_dash.core.state import GameState
from subway_dash.graphics.primitives import (
    Frame,
    Row,
    fill_pattern,
    fill_span,
    new_frame,
    put_char,
    put_text,
    replace_in_span,
)
from subway_dash.graphics.projection import (
    MIN_TRACK_WIDTH,
    depth_fraction,
    horizon_row,
    is_visible,
    lane_to_screen_x,
    lane_width_at,
    projected_width,
    row_fraction,
    screen_row,
    track_bounds,
    track_left,
    track_width_at,
)

logger = logging.getLogger(__name__)

CURSOR_HOME = b"\x1b[H"
ROW_SEPARATOR = b"\r\n"

# Glyphs
STAR = "."
HORIZON = "_"
GROUND = "."
RAIL = "|"
DIVIDER = ":"
TIE = "-"
BLANK = " "
OBSTACLE = "#"
COIN = "o"
RUNNER_HEAD = "O"
RUNNER_BODY = "/|\\"
RUNNER_LEGS = ("/ \\", "| |", "\\ /", "| |")

# Entities closer than this have passed the camera and are not drawn
ENTITY_NEAR_CUTOFF = 0.5
OBSTACLE_LANE_OFFSET = 0.15
OBSTACLE_LANE_FILL = 0.7
OBSTACLE_ROWS = 2
COIN_LANE_OFFSET = 0.5

RUNNER_DEPTH_FRACTION = 0.85
RUNNER_LANE_OFFSET = 0.5
WALK_ANIM_RATE = 8  # leg frames per second


@dataclass(frozen=True)
class RowContext:
    """Geometry of one screen row, derived fresh every frame."""

    row: int
    width: int
    height: int
    horizon: int
    fraction: float      # <= 0 on and above the horizon
    track_width: int = 0
    left: int = 0        # rail columns, clamped to the viewport
    right: int = 0

    @property
    def on_ground(self) -> bool:
        return self.fraction > 0


def row_context(row: int, width: int, height: int) -> RowContext:
    fraction = row_fraction(row, height)
    ctx = RowContext(
        row=row,
        width=width,
        height=height,
        horizon=horizon_row(height),
        fraction=fraction,
    )
    if not ctx.on_ground:
        return ctx

    left, right = track_bounds(fraction, width)
    return RowContext(
        row=row,
        width=width,
        height=height,
        horizon=ctx.horizon,
        fraction=fraction,
        track_width=track_width_at(fraction),
        left=left,
        right=right,
    )


# =============================================================================
# Layers, in draw order
# =============================================================================

def draw_sky(buf: Row, ctx: RowContext, state: GameState) -> None:
    """Sparse stars from a positional hash, and the horizon rule."""
    if ctx.row >= ctx.horizon:
        return

    if ctx.row % 3 == 0:
        put_char(buf, (ctx.row * 17 + 11) % ctx.width, STAR)
        put_char(buf, (ctx.row * 31 + 7) % ctx.width, STAR)

    if ctx.row == ctx.horizon - 1:
        fill_span(buf, 0, ctx.width - 1, HORIZON)


def draw_ground(buf: Row, ctx: RowContext, state: GameState) -> None:
    if not ctx.on_ground:
        return
    fill_pattern(buf, GROUND, period=5, phase=ctx.row)


def draw_track(buf: Row, ctx: RowContext, state: GameState) -> None:
    if not ctx.on_ground:
        return
    fill_span(buf, ctx.left, ctx.right, BLANK)
    put_char(buf, ctx.left, RAIL)
    put_char(buf, ctx.right, RAIL)


def draw_lane_dividers(buf: Row, ctx: RowContext, state: GameState) -> None:
    """Dashed separators; the dash phase scrolls with distance travelled."""
    if not ctx.on_ground:
        return
    if (int(state.scroll_offset * 2) + ctx.row) % 3 == 0:
        return

    lane_width = lane_width_at(ctx.track_width)
    for divider in (1, 2):
        x = ctx.left + int(divider * lane_width)
        if ctx.left < x < ctx.right:
            put_char(buf, x, DIVIDER)


def draw_cross_ties(buf: Row, ctx: RowContext, state: GameState) -> None:
    """Tread marks over bare track only, never over rails or dividers."""
    if not ctx.on_ground:
        return
    if int(ctx.row + state.scroll_offset * 3) % 4 != 0:
        return
    replace_in_span(buf, ctx.left + 1, ctx.right - 1, BLANK, TIE)


def _entity_projection(
    entity: Obstacle | Coin,
    ctx: RowContext,
) -> Optional[Tuple[int, int, float]]:
    """Screen row, unclamped track left edge and lane width for an entity,
    or None when it is not drawable this frame."""
    if entity.depth < ENTITY_NEAR_CUTOFF:
        return None
    fraction = depth_fraction(entity.depth)
    if not is_visible(fraction):
        return None
    width = projected_width(fraction)
    if width < MIN_TRACK_WIDTH:
        return None
    return (
        screen_row(fraction, ctx.height),
        track_left(width, ctx.width),
        lane_width_at(width),
    )


def draw_obstacles(buf: Row, ctx: RowContext, state: GameState) -> None:
    """Block glyphs two rows tall spanning most of their lane."""
    if not ctx.on_ground:
        return
    for obs in state.obstacles.active():
        projection = _entity_projection(obs, ctx)
        if projection is None:
            continue
        base_row, left, lane_width = projection
        if not base_row - OBSTACLE_ROWS < ctx.row <= base_row:
            continue

        x = lane_to_screen_x(obs.lane, left, lane_width, OBSTACLE_LANE_OFFSET)
        span = max(1, int(lane_width * OBSTACLE_LANE_FILL))
        fill_span(buf, x, x + span - 1, OBSTACLE)


def draw_coins(buf: Row, ctx: RowContext, state: GameState) -> None:
    if not ctx.on_ground:
        return
    for coin in state.coin_pool.active():
        projection = _entity_projection(coin, ctx)
        if projection is None:
            continue
        base_row, left, lane_width = projection
        if ctx.row != base_row:
            continue
        put_char(buf, lane_to_screen_x(coin.lane, left, lane_width, COIN_LANE_OFFSET), COIN)


def runner_x(state: GameState) -> int:
    """Column of the runner's centre, following the interpolated lane."""
    width = projected_width(RUNNER_DEPTH_FRACTION)
    return lane_to_screen_x(
        state.lane_x,
        track_left(width, state.width),
        lane_width_at(width),
        RUNNER_LANE_OFFSET,
    )


def walk_frame(elapsed: float) -> int:
    return int(elapsed * WALK_ANIM_RATE) % len(RUNNER_LEGS)


def draw_runner(buf: Row, ctx: RowContext, state: GameState) -> None:
    """Three-row stick figure at a fixed near depth."""
    if not ctx.on_ground:
        return
    feet_row = screen_row(RUNNER_DEPTH_FRACTION, ctx.height)
    x = runner_x(state)

    if ctx.row == feet_row - 2:
        put_char(buf, x, RUNNER_HEAD)
    elif ctx.row == feet_row - 1:
        put_text(buf, x - 1, RUNNER_BODY)
    elif ctx.row == feet_row:
        put_text(buf, x - 1, RUNNER_LEGS[walk_frame(state.elapsed)])


def hud_lines(state: GameState) -> Tuple[str, str]:
    return (
        f" SCORE: {state.score:07d} ",
        f" COINS: {state.coins} ",
    )


def draw_hud(buf: Row, ctx: RowContext, state: GameState) -> None:
    """Right-aligned counters on the first two rows, clipped at the left edge."""
    lines = hud_lines(state)
    if ctx.row >= len(lines):
        return
    text = lines[ctx.row]
    put_text(buf, ctx.width - len(text) - 1, text)


Layer = Callable[[Row, RowContext, GameState], None]

# Occlusion order; do not reorder
LAYERS: Tuple[Layer, ...] = (
    draw_sky,
    draw_ground,
    draw_track,
    draw_lane_dividers,
    draw_cross_ties,
    draw_obstacles,
    draw_coins,
    draw_runner,
    draw_hud,
)


class FrameCompositor:
    """Renders a GameState to a terminal-ready byte string.

    Rendering is read-only with respect to the state and never fails: the
    buffer is sized from the current viewport on every call.
    """

    def __init__(self, state: GameState) -> None:
        self.state = state
        self._viewport: Tuple[int, int] = (0, 0)

    def compose(self) -> Frame:
        """Composite all layers into a (height, width) character frame."""
        width = max(1, self.state.width)
        height = max(1, self.state.height)
        if (width, height) != self._viewport:
            logger.debug(f"Compositing at {width}x{height}, horizon row {horizon_row(height)}")
            self._viewport = (width, height)
        frame = new_frame(width, height)

        for row in range(height):
            ctx = row_context(row, width, height)
            buf = frame[row]
            for layer in LAYERS:
                layer(buf, ctx, self.state)

        return frame

    def render(self) -> bytes:
        """Cursor-home prefix followed by every row, CRLF separated."""
        frame = self.compose()
        return CURSOR_HOME + ROW_SEPARATOR.join(row.tobytes() for row in frame)

    def render_text(self) -> str:
        """Plain rows joined by newlines, for logs and tests."""
        return "\n".join(row.tobytes().decode("ascii") for row in self.compose())
