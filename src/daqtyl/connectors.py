"""
Web connectors.

Every bridge between switch plates is a `Bridge`: an ordered run of posts that renders as a strip
of triangle hulls. The grid bridges are derived from the set of populated addresses; the thumb
cluster bridges are hand-authored tables per thumb style.
"""
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
import logging

import numpy as np

from .configuration import ThumbStyle
from .errors import DegenerateHullError
from .layout import extra_top_row_enabled, is_encoder, is_wide_key, populated_addresses
from .parts import Post, post_named, post_shape
from .placement import KeyAt, ThumbAt

GRID_KINDS = ('row', 'column', 'diagonal', 'corner')


@dataclass(frozen=True)
class PostRef:
    """
    A connector post at a placement, optionally pushed by a local `shift` before placing.
    """
    where: object
    post: Post
    shift: tuple = (0.0, 0.0, 0.0)

    def shape(self, kb):
        return kb.placer.place(self.where, post_shape(kb.config, kb.engine, self.post, self.shift))

    def point(self, kb) -> np.ndarray:
        return kb.placer.position(self.where, self.post.point(kb.config) + np.asarray(self.shift))


@dataclass(frozen=True)
class Bridge:
    posts: tuple
    label: str
    kind: str = 'thumb'
    # grid addresses this bridge joins
    keys: tuple = ()


def triangle_hulls(engine, shapes: Iterable):
    shapes = list(shapes)
    if len(shapes) < 3:
        raise DegenerateHullError(f"triangle hulls need at least 3 shapes, got {len(shapes)}")

    hulls = []
    for i in range(len(shapes) - 2):
        hulls.append(engine.convex_hull(shapes[i: (i + 3)]))

    return engine.union(hulls)


def validate_posts(kb, posts, label: str = "hull"):
    """
    Reject post runs that cannot span a surface: fewer than 3 posts, or all anchors on one line.
    """
    if len(posts) < 3:
        raise DegenerateHullError(f"{label}: needs at least 3 posts, got {len(posts)}")

    points = np.array([ref.point(kb) for ref in posts])
    if np.linalg.matrix_rank(points - points[0], tol=1e-6) < 2:
        raise DegenerateHullError(f"{label}: posts are collinear")


def render_bridge(kb, bridge: Bridge):
    validate_posts(kb, bridge.posts, bridge.label)
    return triangle_hulls(kb.engine, [ref.shape(kb) for ref in bridge.posts])


###################
## Grid bridges  ##
###################


def _grid_ref(kb, column: int, row: int, post: str, outward: int = 0) -> PostRef:
    config = kb.config
    shift = (0.0, 0.0, 0.0)
    if is_encoder(config, column, row):
        # posts around the raised encoder plate
        shift = (outward * config.encoder_post_x, 0.0, config.encoder_post_z)
    return PostRef(KeyAt(column, row), post_named(config, post), shift)


def grid_bridges(kb, addresses) -> list:
    """
    Bridges for every adjacent populated pair and every 2x2 block with at least three keys.
    """
    logging.debug("grid_bridges()")
    addresses = frozenset(addresses)
    bridges = []

    for column, row in sorted(addresses):
        # row connections
        if (column + 1, row) in addresses:
            bridges.append(Bridge((
                _grid_ref(kb, column + 1, row, 'tl', -1),
                _grid_ref(kb, column, row, 'tr', 1),
                _grid_ref(kb, column + 1, row, 'bl', -1),
                _grid_ref(kb, column, row, 'br', 1),
            ), f"row {column},{row}", 'row', ((column, row), (column + 1, row))))

        # column connections
        if (column, row + 1) in addresses:
            bridges.append(Bridge((
                _grid_ref(kb, column, row, 'bl'),
                _grid_ref(kb, column, row, 'br'),
                _grid_ref(kb, column, row + 1, 'tl'),
                _grid_ref(kb, column, row + 1, 'tr'),
            ), f"column {column},{row}", 'column', ((column, row), (column, row + 1))))

    columns = sorted({column for column, _ in addresses})
    rows = sorted({row for _, row in addresses})
    for column in columns:
        for row in rows:
            bridges.extend(_block_bridges(kb, addresses, column, row))

    return bridges


def _block_bridges(kb, addresses, column: int, row: int) -> list:
    # the four corners meeting in the middle of the block, in diagonal strip order
    corners = [
        ((column, row), 'br'),
        ((column, row + 1), 'tr'),
        ((column + 1, row), 'bl'),
        ((column + 1, row + 1), 'tl'),
    ]
    present = [(address, post) for address, post in corners if address in addresses]
    if len(present) < 3:
        return []

    keys = tuple(address for address, _ in present)
    posts = tuple(_grid_ref(kb, *address, post) for address, post in present)
    if len(present) == 4:
        return [Bridge(posts, f"diagonal {column},{row}", 'diagonal', keys)]

    bridges = [Bridge(posts, f"corner {column},{row}", 'corner', keys)]
    if (column + 1, row + 1) not in addresses:
        # close the step down to the front wall
        bridges.append(Bridge((
            _grid_ref(kb, column, row + 1, 'tr'),
            _grid_ref(kb, column, row + 1, 'br'),
            _grid_ref(kb, column + 1, row, 'bl'),
        ), f"front step {column},{row}", 'step'))
    return bridges


def pinky_bridges(kb) -> list:
    """
    Fill between the plate edge and the wide posts of the 1.5u outer column.
    """
    config = kb.config
    if not config.pinky_15u:
        return []

    column = config.lastcol
    rows = [row for row in range(config.nrows) if is_wide_key(config, column, row)]
    bridges = []
    for row in rows:
        bridges.append(Bridge((
            _grid_ref(kb, column, row, 'tr'),
            _grid_ref(kb, column, row, 'wide_tr'),
            _grid_ref(kb, column, row, 'br'),
            _grid_ref(kb, column, row, 'wide_br'),
        ), f"pinky {row}", 'pinky'))
        if row + 1 in rows:
            bridges.append(Bridge((
                _grid_ref(kb, column, row, 'br'),
                _grid_ref(kb, column, row, 'wide_br'),
                _grid_ref(kb, column, row + 1, 'tr'),
                _grid_ref(kb, column, row + 1, 'wide_tr'),
            ), f"pinky {row},{row + 1}", 'pinky'))
    return bridges


####################
## Thumb bridges  ##
####################

# Posts in these tables are (key, post name) or (key, post name, shift). A key is a thumb key
# name, or (column, 'cornerrow' | 'lastrow') for a grid key.

THUMB_CONNECTORS = {
    ThumbStyle.DEFAULT: [
        [('tl', 'thumb_tr'), ('tl', 'br', (-0.33, -0.25, 0)), ('tr', 'thumb_tl'), ('tr', 'thumb_bl')],
        [('br', 'tr'), ('br', 'br'), ('mr', 'tl'), ('mr', 'bl')],
        [('bl', 'tr'), ('bl', 'br'), ('ml', 'tl'), ('ml', 'bl')],
        [('br', 'tl'), ('bl', 'bl'), ('br', 'tr'), ('bl', 'br'),
         ('mr', 'tl'), ('ml', 'bl'), ('mr', 'tr'), ('ml', 'br')],
        [('tl', 'thumb_tl'), ('ml', 'tr'), ('tl', 'bl', (0.25, 0.1, 0)), ('ml', 'br'),
         ('tl', 'br', (-0.33, -0.25, 0)), ('mr', 'tr'), ('tr', 'thumb_bl'), ('mr', 'br'), ('tr', 'thumb_br')],
    ],
    ThumbStyle.MINI: [
        [('tl', 'tr'), ('tl', 'br'), ('tr', 'mpost_tl'), ('tr', 'mpost_bl')],
        [('br', 'tr'), ('br', 'br'), ('mr', 'tl'), ('mr', 'bl')],
        [('mr', 'tr'), ('mr', 'br'), ('tr', 'mpost_br')],
        [('br', 'tl'), ('bl', 'bl'), ('br', 'tr'), ('bl', 'br'), ('mr', 'tl'), ('tl', 'bl'),
         ('mr', 'tr'), ('tl', 'br'), ('tr', 'bl'), ('mr', 'tr'), ('tr', 'br')],
        [('tl', 'tl'), ('bl', 'tr'), ('tl', 'bl'), ('bl', 'br'), ('mr', 'tr'), ('tl', 'bl'),
         ('tl', 'br'), ('mr', 'tr')],
    ],
    ThumbStyle.CARBONFET: [
        [('tl', 'tl'), ('tl', 'bl'), ('ml', 'thumb_tr'), ('ml', 'br')],
        [('ml', 'thumb_tl'), ('ml', 'bl'), ('bl', 'thumb_tr'), ('bl', 'br')],
        [('br', 'tr'), ('br', 'br'), ('mr', 'tl'), ('mr', 'bl')],
        [('mr', 'tr'), ('mr', 'br'), ('tr', 'tl'), ('tr', 'bl')],
        [('tr', 'br'), ('tr', 'bl'), ('mr', 'br')],
        [('br', 'tl'), ('bl', 'bl'), ('br', 'tr'), ('bl', 'br'), ('mr', 'tl'), ('ml', 'bl'),
         ('mr', 'tr'), ('ml', 'br'), ('tr', 'tl'), ('tl', 'bl'), ('tr', 'tr'), ('tl', 'br')],
    ],
}

THUMB_JUNCTIONS = {
    ThumbStyle.DEFAULT: [
        [('tl', 'thumb_tl'), ((0, 'cornerrow'), 'bl'), ('tl', 'thumb_tr'), ((0, 'cornerrow'), 'br'),
         ('tr', 'thumb_tl'), ((1, 'cornerrow'), 'bl'), ('tr', 'thumb_tr'), ((1, 'cornerrow'), 'br'),
         ((2, 'lastrow'), 'tl'), ((2, 'lastrow'), 'bl'), ('tr', 'thumb_tr'), ((2, 'lastrow'), 'bl'),
         ('tr', 'thumb_br'), ((2, 'lastrow'), 'br'), ((3, 'lastrow'), 'bl')],
    ],
    ThumbStyle.MINI: [
        [('tl', 'tl'), ((0, 'cornerrow'), 'bl'), ('tl', 'tr'), ((0, 'cornerrow'), 'br'),
         ('tr', 'mpost_tl'), ((1, 'cornerrow'), 'bl'), ('tr', 'mpost_tr'), ((1, 'cornerrow'), 'br'),
         ((2, 'lastrow'), 'tl'), ((2, 'lastrow'), 'bl'), ('tr', 'mpost_tr'), ((2, 'lastrow'), 'bl'),
         ('tr', 'mpost_br'), ((2, 'lastrow'), 'br'), ((3, 'lastrow'), 'bl')],
    ],
    ThumbStyle.CARBONFET: [
        [('ml', 'thumb_tl'), ((0, 'cornerrow'), 'bl'), ('ml', 'thumb_tr'), ((0, 'cornerrow'), 'br'),
         ('tl', 'tl'), ((1, 'cornerrow'), 'bl'), ('tl', 'tr'), ((1, 'cornerrow'), 'br'),
         ((2, 'lastrow'), 'tl'), ((2, 'lastrow'), 'bl'), ('tl', 'tr'), ((2, 'lastrow'), 'bl'),
         ('tl', 'br'), ((2, 'lastrow'), 'br'), ((3, 'lastrow'), 'bl'), ('tl', 'br'), ('tr', 'tr')],
        [('tr', 'br'), ('tr', 'tr'), ((3, 'lastrow'), 'bl')],
    ],
}


def resolve_key(kb, key):
    """
    Turn a table key (thumb key name or (column, symbolic row)) into a placement.
    """
    if isinstance(key, str):
        return ThumbAt(key)
    column, row = key
    if isinstance(row, str):
        row = getattr(kb.config, row)
    return KeyAt(column, row)


def resolve_post(kb, entry) -> PostRef:
    key, post = entry[0], entry[1]
    shift = tuple(float(v) for v in entry[2]) if len(entry) > 2 else (0.0, 0.0, 0.0)
    return PostRef(resolve_key(kb, key), post_named(kb.config, post), shift)


def _table_bridges(kb, table, kind: str) -> list:
    bridges = []
    for i, run in enumerate(table):
        posts = tuple(resolve_post(kb, entry) for entry in run)
        keys = tuple(sorted({(ref.where.column, ref.where.row) for ref in posts if isinstance(ref.where, KeyAt)}))
        bridges.append(Bridge(posts, f"{kb.cluster.style.value} {kind} {i}", kind, keys))
    return bridges


def thumb_bridges(kb) -> list:
    logging.debug("thumb_bridges()")
    return _table_bridges(kb, THUMB_CONNECTORS[kb.cluster.style], 'thumb')


def thumb_junction_bridges(kb) -> list:
    logging.debug("thumb_junction_bridges()")
    return _table_bridges(kb, THUMB_JUNCTIONS[kb.cluster.style], 'junction')


def connector_bridges(kb, side="right") -> list:
    addresses = populated_addresses(kb.config, extra_top_row_enabled(kb.config, side))
    return grid_bridges(kb, addresses) + pinky_bridges(kb) + thumb_bridges(kb) + thumb_junction_bridges(kb)


def connectors(kb, side="right"):
    logging.debug("connectors()")
    return kb.engine.union([render_bridge(kb, bridge) for bridge in connector_bridges(kb, side)])


def bridge_coverage(bridges) -> Counter:
    """
    Count how many grid bridges join each set of addresses.
    """
    return Counter(frozenset(bridge.keys) for bridge in bridges if bridge.kind in GRID_KINDS)
