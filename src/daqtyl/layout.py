"""
Which keys exist, and where the thumb keys sit.

The grid is described by its set of populated addresses; the thumb cluster by a style descriptor
holding the pose of each key and which keys are 1u and 1.5u.
"""
from dataclasses import dataclass, field
import logging

from .configuration import KeyboardConfig, ThumbStyle
from .parts import (
    encoder_cap,
    encoder_fill,
    encoder_plate,
    keyhole_fill,
    larger_plate,
    sa_cap,
    single_plate,
)
from .placement import KeyAt, ThumbAt, ThumbPose


def extra_top_row_enabled(config: KeyboardConfig, side: str) -> bool:
    if config.extra_top_row_side == 'both':
        return True
    return config.extra_top_row_side == side


def populated_addresses(config: KeyboardConfig, extra_top_row=False) -> frozenset:
    """
    Every (column, row) that carries a key.

    The last row only holds the short columns; the extra top row sits at row -1.
    """
    addresses = {
        (column, row)
        for column in range(config.ncols)
        for row in range(config.nrows)
        if row != config.lastrow or column in config.short_columns
    }
    if extra_top_row:
        addresses.update((column, -1) for column in config.extra_top_row_columns)
    return frozenset(addresses)


def is_encoder(config: KeyboardConfig, column: int, row: int) -> bool:
    return row == -1 and column == config.encoder_column


def is_wide_key(config: KeyboardConfig, column: int, row: int) -> bool:
    return config.pinky_15u and column == config.lastcol and config.first_15u_row <= row <= config.last_15u_row


############
## Thumbs ##
############


@dataclass(frozen=True)
class ThumbCluster:
    style: ThumbStyle
    poses: dict
    one_u: tuple
    one_and_half_u: tuple
    # keys whose switch plate is turned 90 degrees
    rotated: tuple = ()
    # plate extensions for the long keys; True for the one-sided half extension
    extensions: dict = field(default_factory=dict)
    wide_cap_units: float = 1.5

    @property
    def names(self) -> tuple:
        return self.one_u + self.one_and_half_u


def _pose(rotation, translation):
    return ThumbPose(tuple(float(a) for a in rotation), tuple(float(t) for t in translation))


THUMB_CLUSTERS = {
    ThumbStyle.DEFAULT: ThumbCluster(
        style=ThumbStyle.DEFAULT,
        poses={
            'tr': _pose((10, -23, 10), (-12, -16, 3)),
            'tl': _pose((10, -23, 10), (-32, -15, -2)),
            'mr': _pose((-6, -34, 48), (-29, -40, -13)),
            'ml': _pose((6, -34, 40), (-51, -25, -12)),
            'br': _pose((-16, -33, 54), (-37.8, -55.3, -25.3)),
            'bl': _pose((-4, -35, 52), (-56.3, -43.3, -23.5)),
        },
        one_u=('mr', 'ml', 'br', 'bl'),
        one_and_half_u=('tr', 'tl'),
        rotated=('tr', 'tl'),
        extensions={'tr': False, 'tl': True},
    ),
    ThumbStyle.MINI: ThumbCluster(
        style=ThumbStyle.MINI,
        poses={
            'tr': _pose((14, -15, 10), (-15, -10, 5)),
            'tl': _pose((10, -23, 25), (-35, -16, -2)),
            'mr': _pose((10, -23, 25), (-23, -34, -6)),
            'br': _pose((6, -34, 35), (-39, -43, -16)),
            'bl': _pose((6, -32, 35), (-51, -25, -11.5)),
        },
        one_u=('mr', 'br', 'tl', 'bl'),
        one_and_half_u=('tr',),
        wide_cap_units=1,
    ),
    ThumbStyle.CARBONFET: ThumbCluster(
        style=ThumbStyle.CARBONFET,
        poses={
            'tl': _pose((10, -24, 10), (-13, -9.8, 4)),
            'tr': _pose((6, -24, 10), (-7.5, -29.5, 0)),
            'ml': _pose((8, -31, 14), (-30.5, -17, -6)),
            'mr': _pose((4, -31, 14), (-22.2, -41, -10.3)),
            'br': _pose((2, -37, 18), (-37, -46.4, -22)),
            'bl': _pose((6, -37, 18), (-47, -23, -19)),
        },
        one_u=('tr', 'mr', 'br', 'tl'),
        one_and_half_u=('bl', 'ml'),
        extensions={'bl': True, 'ml': True},
    ),
}


def thumb_cluster(style: ThumbStyle) -> ThumbCluster:
    return THUMB_CLUSTERS[ThumbStyle(style)]


def thumb_key_poses(style: ThumbStyle) -> dict:
    """
    Pose of every thumb key of `style`, relative to the thumb origin.
    """
    return dict(thumb_cluster(style).poses)


#####################
## Plates and caps ##
#####################


def key_holes(kb, side="right"):
    logging.debug("key_holes()")
    config, engine = kb.config, kb.engine
    plate = single_plate(config, engine, side=side)

    holes = []
    for column, row in sorted(populated_addresses(config, extra_top_row_enabled(config, side))):
        if is_encoder(config, column, row):
            shape = encoder_plate(config, engine, side=side)
            shape = engine.translate(shape, (0, 0, 3))
            shape = engine.rotate(shape, (0, 0, 180))
        else:
            shape = plate
        holes.append(kb.placer.place(KeyAt(column, row), shape))

    return engine.union(holes)


def thumb_plates(kb, side="right"):
    logging.debug("thumb_plates()")
    engine, cluster = kb.engine, kb.cluster
    plate = single_plate(kb.config, engine, side=side)

    plates = []
    for name in cluster.names:
        where = ThumbAt(name)
        shape = engine.rotate(plate, (0, 0, 90)) if name in cluster.rotated else plate
        plates.append(kb.placer.place(where, shape))
        if name in cluster.extensions:
            extension = larger_plate(kb.config, engine, half=cluster.extensions[name])
            plates.append(kb.placer.place(where, extension))

    return engine.union(plates)


def caps(kb, side="right"):
    logging.debug("caps()")
    config, engine = kb.config, kb.engine

    key_caps = []
    for column, row in sorted(populated_addresses(config, extra_top_row_enabled(config, side))):
        if is_encoder(config, column, row):
            cap = encoder_cap(config, engine)
        else:
            cap = sa_cap(config, engine, 1.5 if is_wide_key(config, column, row) else 1)
        key_caps.append(kb.placer.place(KeyAt(column, row), cap))

    return engine.union(key_caps)


def thumbcaps(kb):
    logging.debug("thumbcaps()")
    engine, cluster = kb.engine, kb.cluster
    one_u = sa_cap(kb.config, engine, 1)
    wide = engine.rotate(sa_cap(kb.config, engine, cluster.wide_cap_units), (0, 0, 90))

    key_caps = [kb.placer.place(ThumbAt(name), one_u) for name in cluster.one_u]
    key_caps.extend(kb.placer.place(ThumbAt(name), wide) for name in cluster.one_and_half_u)
    return engine.union(key_caps)


def caps_fill(kb, side="right"):
    """
    Solid key footprints, only used to shadow the bottom plate.
    """
    logging.debug("caps_fill()")
    config, engine = kb.config, kb.engine
    fill = keyhole_fill(config, engine)

    fills = []
    for column, row in sorted(populated_addresses(config, extra_top_row_enabled(config, side))):
        shape = encoder_fill(config, engine, side) if is_encoder(config, column, row) else fill
        fills.append(kb.placer.place(KeyAt(column, row), shape))

    return engine.union(fills)


def thumbcaps_fill(kb):
    logging.debug("thumbcaps_fill()")
    engine, cluster = kb.engine, kb.cluster
    fill = keyhole_fill(kb.config, engine)
    turned = engine.rotate(fill, (0, 0, 90))

    fills = [kb.placer.place(ThumbAt(name), fill) for name in cluster.one_u]
    fills.extend(kb.placer.place(ThumbAt(name), turned) for name in cluster.one_and_half_u)
    return engine.union(fills)
