"""
Case walls.

The outer wall is an ordered loop of `WallBrace` segments, each hung between two `BraceEnd`s.
Consecutive segments share their end, so the loop is closed by construction apart from one link
between the thumb cluster and the left wall, which per-style `Patch` hulls fill in.
"""
from dataclasses import dataclass
import logging
from typing import Optional

import numpy as np

from .configuration import KeyboardConfig, ThumbStyle
from .connectors import PostRef, resolve_key, validate_posts
from .layout import extra_top_row_enabled, is_wide_key, populated_addresses
from .parts import Post, post_named
from .placement import KeyAt, LeftWallAt

# dx used at the back wall where the top row steps up to, or down from, the extra top row
STEP_UP_DX = -0.5
STEP_DOWN_DX = 2
# dx of the left wall anchor where it turns into the back wall
LEFT_CORNER_DX = -0.6
# dx at the front wall where a short column steps back up to the corner row
FRONT_STEP_DX = 2
# skirt pull under the short columns; the front wall drops straight down there
SHORT_COLUMN_FLAT = -1


def wall_locate1(config: KeyboardConfig, dx, dy):
    return np.array([dx * config.wall_thickness, dy * config.wall_thickness, -1])


def wall_locate2(config: KeyboardConfig, dx, dy):
    return np.array([dx * config.wall_x_offset, dy * config.wall_y_offset, -config.wall_z_offset])


def wall_locate3(config: KeyboardConfig, dx, dy):
    return np.array([
        dx * (config.wall_x_offset + config.wall_thickness),
        dy * (config.wall_y_offset + config.wall_thickness),
        -config.wall_z_offset,
    ])


def _locate(config: KeyboardConfig, n: int, dx, dy):
    if n == 0:
        return np.zeros(3)
    return (wall_locate1, wall_locate2, wall_locate3)[n - 1](config, dx, dy)


def bottom(kb, shapes, height=0.001):
    """
    The shadow of `shapes` on the floor, as a thin slab just under z=0.
    """
    engine = kb.engine
    shape = engine.project(engine.union(shapes))
    shape = engine.extrude_linear(shape, height)
    return engine.translate(shape, (0, 0, height / 2 - 10))


def bottom_hull(kb, shapes):
    logging.debug("bottom_hull()")
    shapes = list(shapes)
    return kb.engine.convex_hull(shapes + [bottom(kb, shapes)])


@dataclass(frozen=True)
class BraceEnd:
    where: object
    dx: float
    dy: float
    post: Post

    def ref(self, config: KeyboardConfig, n: int, dy=None) -> PostRef:
        dy = self.dy if dy is None else dy
        return PostRef(self.where, self.post, tuple(float(v) for v in _locate(config, n, self.dx, dy)))


@dataclass(frozen=True)
class WallBrace:
    start: BraceEnd
    end: BraceEnd
    # (start, end) bottom y offsets for the flat brace, or None
    flat: Optional[tuple] = None


@dataclass(frozen=True)
class Patch:
    posts: tuple
    label: str
    bottom: bool = False


def _refs_shapes(kb, refs):
    return [ref.shape(kb) for ref in refs]


def wall_profile(config: KeyboardConfig, end: BraceEnd, yoffset=0) -> list:
    """
    The post at `end` and its three offset copies: the lip, the skirt and the skirt plus the wall
    thickness. `yoffset` pulls the skirt back along y.
    """
    dy = end.dy - yoffset
    return [end.ref(config, 0), end.ref(config, 1), end.ref(config, 2, dy), end.ref(config, 3, dy)]


def wall(kb, *ends: BraceEnd, yoffset=None):
    """
    Wall hung from one or more brace ends.

    The profiles of all ends are hulled together, and their skirts are bottom hulled so the wall
    meets the floor even where the hull alone would float above it.
    """
    config = kb.config
    yoffset = (0,) * len(ends) if yoffset is None else yoffset
    profiles = [wall_profile(config, end, offset) for end, offset in zip(ends, yoffset)]
    upper = [ref for profile in profiles for ref in profile]
    lower = [ref for profile in profiles for ref in profile[2:]]
    return kb.engine.union([
        kb.engine.convex_hull(_refs_shapes(kb, upper)),
        bottom_hull(kb, _refs_shapes(kb, lower)),
    ])


def wall_brace(kb, start: BraceEnd, end: BraceEnd):
    logging.debug("wall_brace()")
    return wall(kb, start, end)


def wall_brace_flat(kb, start: BraceEnd, end: BraceEnd, yoffset):
    """
    Like `wall_brace`, but the skirt of each end is pulled in by its entry of `yoffset`.
    """
    logging.debug("wall_brace_flat()")
    return wall(kb, start, end, yoffset=yoffset)


def render_brace(kb, brace: WallBrace):
    if brace.flat is not None:
        return wall_brace_flat(kb, brace.start, brace.end, brace.flat)
    return wall_brace(kb, brace.start, brace.end)


def render_patch(kb, patch: Patch):
    validate_posts(kb, patch.posts, patch.label)
    shapes = _refs_shapes(kb, patch.posts)
    if patch.bottom:
        return bottom_hull(kb, shapes)
    return kb.engine.convex_hull(shapes)


def _chain(ends, flat=None) -> list:
    braces = []
    for start, end in zip(ends, ends[1:]):
        braces.append(WallBrace(start, end, flat(start, end) if flat is not None else None))
    return braces


##################
## Grid walls   ##
##################


def _top_row(addresses, column: int) -> int:
    return -1 if (column, -1) in addresses else 0


def _bottom_row(config: KeyboardConfig, column: int) -> int:
    return config.lastrow if column in config.short_columns else config.cornerrow


def _key_end(config, column, row, dx, dy, post) -> BraceEnd:
    return BraceEnd(KeyAt(column, row), dx, dy, post_named(config, post))


def _left_end(config, row, direction, dx, dy) -> BraceEnd:
    return BraceEnd(LeftWallAt(row, direction), dx, dy, post_named(config, 'center'))


def back_wall(kb, side="right") -> list:
    logging.debug("back_wall()")
    config = kb.config
    addresses = populated_addresses(config, extra_top_row_enabled(config, side))
    tops = [_top_row(addresses, column) for column in range(config.ncols)]

    ends = []
    for column in range(config.ncols):
        top = tops[column]
        tl_dx = tr_dx = 0
        if column > 0 and tops[column - 1] < top:
            tl_dx = STEP_DOWN_DX
        if column < config.lastcol and tops[column + 1] < top:
            tr_dx = STEP_UP_DX
        tr = 'wide_tr' if column == config.lastcol and is_wide_key(config, column, top) else 'tr'
        ends.append(_key_end(config, column, top, tl_dx, 1, 'tl'))
        ends.append(_key_end(config, column, top, tr_dx, 1, tr))

    def flat_offset(brace_end: BraceEnd):
        column = brace_end.where.column
        if tops[column] < 0:
            return config.extra_top_row_flat_offsets.get(column, 0)
        return config.back_wall_flat_offsets.get(column, 0)

    def flat(start: BraceEnd, end: BraceEnd):
        yoffset = (flat_offset(start), flat_offset(end))
        return yoffset if any(yoffset) else None

    return _chain(ends, flat)


def back_wall_patches(kb, side="right") -> list:
    """
    Triangles filling the step where the top row moves to or from the extra top row.
    """
    config = kb.config
    addresses = populated_addresses(config, extra_top_row_enabled(config, side))
    tl, tr = post_named(config, 'tl'), post_named(config, 'tr')

    patches = []
    for column in range(config.lastcol):
        top, next_top = _top_row(addresses, column), _top_row(addresses, column + 1)
        if top > next_top:
            posts = (PostRef(KeyAt(column + 1, -1), tl), PostRef(KeyAt(column + 1, 0), tl), PostRef(KeyAt(column, 0), tr))
        elif top < next_top:
            posts = (PostRef(KeyAt(column, -1), tr), PostRef(KeyAt(column, 0), tr), PostRef(KeyAt(column + 1, 0), tl))
        else:
            continue
        patches.append(Patch(posts, f"back step {column}"))
    return patches


def right_wall(kb, side="right") -> list:
    logging.debug("right_wall()")
    config = kb.config
    column = config.lastcol
    addresses = populated_addresses(config, extra_top_row_enabled(config, side))
    top, last = _top_row(addresses, column), _bottom_row(config, column)

    def corner(row, post):
        return ('wide_' + post) if is_wide_key(config, column, row) else post

    ends = [_key_end(config, column, top, 0, 1, corner(top, 'tr'))]
    for row in range(top, last + 1):
        ends.append(_key_end(config, column, row, 1, 0, corner(row, 'tr')))
        ends.append(_key_end(config, column, row, 1, 0, corner(row, 'br')))
    ends.append(_key_end(config, column, last, 0, -1, 'br'))
    return _chain(ends)


def _front_flat(config: KeyboardConfig):
    """
    Flat offsets for braces along the front: ends under a short column drop straight down.
    """
    def flat_offset(brace_end: BraceEnd):
        where = brace_end.where
        if isinstance(where, KeyAt) and where.row == config.lastrow:
            return SHORT_COLUMN_FLAT
        return 0

    def flat(start: BraceEnd, end: BraceEnd):
        yoffset = (flat_offset(start), flat_offset(end))
        return yoffset if any(yoffset) else None

    return flat


def front_wall(kb, side="right") -> list:
    logging.debug("front_wall()")
    config = kb.config
    ends = []
    for column in range(config.lastcol, 2, -1):
        row = _bottom_row(config, column)
        # thicken the wall where the column to the left reaches further forward
        step_up = column > 3 and _bottom_row(config, column - 1) > row
        ends.append(_key_end(config, column, row, 0, -1, 'br'))
        ends.append(_key_end(config, column, row, FRONT_STEP_DX if step_up else 0, -1, 'bl'))
    return _chain(ends, _front_flat(config))


def left_wall(kb, side="right") -> list:
    logging.debug("left_wall()")
    config = kb.config
    addresses = populated_addresses(config, extra_top_row_enabled(config, side))
    top = _top_row(addresses, 0)

    ends = []
    for row in range(config.cornerrow, top - 1, -1):
        ends.append(_left_end(config, row, -1, -1, 0))
        ends.append(_left_end(config, row, 1, -1, 0))
    ends.append(_left_end(config, top, 1, LEFT_CORNER_DX, 1))
    ends.append(_key_end(config, 0, top, 0, 1, 'tl'))
    return _chain(ends)


def left_wall_patches(kb, side="right") -> list:
    """
    Fill between column 0 and the left wall anchors.
    """
    config = kb.config
    addresses = populated_addresses(config, extra_top_row_enabled(config, side))
    top = _top_row(addresses, 0)
    tl, bl, center = post_named(config, 'tl'), post_named(config, 'bl'), post_named(config, 'center')

    patches = []
    for row in range(top, config.cornerrow + 1):
        patches.append(Patch((
            PostRef(KeyAt(0, row), tl),
            PostRef(KeyAt(0, row), bl),
            PostRef(LeftWallAt(row, 1), center),
            PostRef(LeftWallAt(row, -1), center),
        ), f"left fill {row}"))
        if row > top:
            patches.append(Patch((
                PostRef(KeyAt(0, row), tl),
                PostRef(KeyAt(0, row - 1), bl),
                PostRef(LeftWallAt(row, 1), center),
                PostRef(LeftWallAt(row - 1, -1), center),
            ), f"left fill {row - 1},{row}"))
    return patches


###################
## Thumb walls   ##
###################

# Wall loop around each thumb cluster: (key, dx, dy, post), from the front wall at column 3 round
# to the back of the cluster.
THUMB_WALLS = {
    ThumbStyle.DEFAULT: [
        ((3, 'lastrow'), 0, -1, 'bl'),
        ('tr', 0, -1, 'thumb_br'),
        ('mr', 0, -1, 'br'),
        ('mr', 0, -1, 'bl'),
        ('br', 0, -1, 'br'),
        ('br', 0, -1, 'bl'),
        ('br', -1, 0, 'bl'),
        ('br', -1, 0, 'tl'),
        ('bl', -1, 0, 'bl'),
        ('bl', -1, 0, 'tl'),
        ('bl', 0, 1, 'tl'),
        ('bl', 0, 1, 'tr'),
        ('ml', 0, 1, 'tl'),
        ('ml', -0.3, 1, 'tr'),
    ],
    ThumbStyle.MINI: [
        ((3, 'lastrow'), 0, -1, 'bl'),
        ('tr', 0, -1, 'mpost_br'),
        ('mr', 0, -1, 'br'),
        ('mr', 0, -1, 'bl'),
        ('br', 0, -1, 'br'),
        ('br', 0, -1, 'bl'),
        ('br', -1, 0, 'bl'),
        ('br', -1, 0, 'tl'),
        ('bl', -1, 0, 'bl'),
        ('bl', -1, 0, 'tl'),
        ('bl', 0, 1, 'tl'),
        ('bl', 0, 1, 'tr'),
    ],
    ThumbStyle.CARBONFET: [
        ((3, 'lastrow'), 0, -1, 'bl'),
        ('tr', 0, -1, 'br'),
        ('mr', 0, -1, 'br'),
        ('mr', 0, -1.15, 'bl'),
        ('br', 0, -1, 'br'),
        ('br', 0, -1, 'bl'),
        ('br', -1, 0, 'bl'),
        ('br', -1, 0, 'tl'),
        ('bl', -1, 0, 'bl'),
        ('bl', -1, 0, 'thumb_tl'),
        ('bl', 0, 1, 'thumb_tl'),
        ('bl', -0.3, 1, 'thumb_tr'),
    ],
}

# Hulls joining the back of the thumb cluster to the lower left wall anchor and column 0.
# Posts are (key, post) or (key, post, (locate, dx, dy)); 'left' is the lower left wall anchor.
_LEFT = 'left'


def _transition(outer, inner) -> list:
    """
    The five transition hulls, given the outer thumb corner (key, post, dx, dy) and the inner post.
    """
    key, post, dx, dy = outer
    return [
        ('bottom', [(_LEFT, 'center', (2, -1, 0)), (_LEFT, 'center', (3, -1, 0)),
                    (key, post, (2, dx, dy)), (key, post, (3, dx, dy))]),
        ('hull', [(_LEFT, 'center', (2, -1, 0)), (_LEFT, 'center', (3, -1, 0)),
                  (key, post, (2, dx, dy)), (key, post, (3, dx, dy)), inner]),
        ('hull', [(_LEFT, 'center'), (_LEFT, 'center', (1, -1, 0)), (_LEFT, 'center', (2, -1, 0)),
                  (_LEFT, 'center', (3, -1, 0)), inner]),
        ('hull', [(_LEFT, 'center'), (_LEFT, 'center', (1, -1, 0)), ((0, 'cornerrow'), 'bl'),
                  ((0, 'cornerrow'), 'bl', (1, 0, 0)), inner]),
        ('hull', [(key, post), (key, post, (1, dx, dy)), (key, post, (2, dx, dy)),
                  (key, post, (3, dx, dy)), inner]),
    ]


THUMB_TRANSITIONS = {
    ThumbStyle.DEFAULT: _transition(('ml', 'tr', -0.3, 1), ('tl', 'thumb_tl')),
    ThumbStyle.MINI: _transition(('bl', 'tr', -0.3, 1), ('tl', 'tl')),
    ThumbStyle.CARBONFET: _transition(('bl', 'thumb_tr', -0.3, 1), ('ml', 'thumb_tl')),
}


def _where(kb, key):
    if key == _LEFT:
        return LeftWallAt(kb.config.cornerrow, -1)
    return resolve_key(kb, key)


def thumb_walls(kb) -> list:
    logging.debug("thumb_walls()")
    config = kb.config
    ends = [
        BraceEnd(_where(kb, key), dx, dy, post_named(config, post))
        for key, dx, dy, post in THUMB_WALLS[kb.cluster.style]
    ]
    return _chain(ends, _front_flat(config))


def thumb_transition_patches(kb) -> list:
    config = kb.config
    patches = []
    for i, (kind, entries) in enumerate(THUMB_TRANSITIONS[kb.cluster.style]):
        posts = []
        for entry in entries:
            shift = (0.0, 0.0, 0.0)
            if len(entry) > 2:
                n, dx, dy = entry[2]
                shift = tuple(float(v) for v in _locate(config, n, dx, dy))
            posts.append(PostRef(_where(kb, entry[0]), post_named(config, entry[1]), shift))
        patches.append(Patch(tuple(posts), f"{kb.cluster.style.value} transition {i}", kind == 'bottom'))
    return patches


####################
## Whole perimeter ##
####################


def perimeter(kb, side="right") -> list:
    """
    Every wall brace, clockwise seen from above, starting at the back left corner.
    """
    return back_wall(kb, side) + right_wall(kb, side) + front_wall(kb, side) + thumb_walls(kb) + left_wall(kb, side)


def patches(kb, side="right") -> list:
    return back_wall_patches(kb, side) + left_wall_patches(kb, side) + thumb_transition_patches(kb)


def case_walls(kb, side="right"):
    logging.debug("case_walls()")
    shapes = [render_brace(kb, brace) for brace in perimeter(kb, side)]
    shapes.extend(render_patch(kb, patch) for patch in patches(kb, side))
    return kb.engine.union(shapes)


def perimeter_links(braces) -> list:
    """
    Pairs of consecutive braces (wrapping round) whose shared end does not match.
    """
    links = []
    for i, brace in enumerate(braces):
        following = braces[(i + 1) % len(braces)]
        if brace.end != following.start:
            links.append((brace, following))
    return links


def footprint(kb, braces) -> list:
    """
    XY outline through the outer foot of every brace start, in loop order.
    """
    config = kb.config
    outline = []
    for brace in braces:
        ref = brace.start.ref(config, 3)
        x, y, _ = ref.point(kb)
        outline.append((float(x), float(y)))
    return outline
