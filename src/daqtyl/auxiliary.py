"""
Screw inserts, the controller cutout, the wrist rest and the trackball holder.

All of these are anchored through the key placement: a local offset on some key is turned into a
world position with `anchor`, and the feature is built there.
"""
import logging
import math

import numpy as np

from .configuration import ThumbStyle
from .placement import KeyAt
from .walls import case_walls, wall_locate2, wall_locate3

# bottom-left and bottom-middle insert offsets depend on where the thumb cluster sits
THUMB_SCREW_OFFSETS = {
    ThumbStyle.DEFAULT: {'bl': (-11.7, -8, 0), 'bm': (8, -1, 0)},
    ThumbStyle.MINI: {'bl': (-3, 5.5, 0), 'bm': (-2, -7, 0)},
    ThumbStyle.CARBONFET: {'bl': (-7.7, 2, 0), 'bm': (13, -7, 0)},
}


def anchor(kb, where, local_offset=(0, 0, 0)) -> np.ndarray:
    return kb.placer.position(where, local_offset)


###################
## Screw inserts ##
###################


def screw_insert_position(kb, column: int, row: int) -> np.ndarray:
    config = kb.config
    shift_right = column == config.lastcol
    shift_left = column == 0
    shift_up = not (shift_right or shift_left) and row == 0
    shift_down = not (shift_right or shift_left) and row >= config.lastrow

    if shift_up:
        offset = wall_locate2(config, 0, 1) + [0, config.mount_height / 2, 0]
    elif shift_down:
        offset = wall_locate2(config, 0, -2.5) - [0, config.mount_height / 2, 0]
    elif shift_left:
        return kb.placer.left_key_position(row, 0) + wall_locate3(config, -1, 0)
    else:
        offset = wall_locate2(config, 1, 0) + [config.mount_width / 2, 0, 0]
    return anchor(kb, KeyAt(column, row), offset)


def screw_insert_offsets(kb) -> list:
    """
    (column, row, offset) for every insert.
    """
    config = kb.config
    offsets = dict(config.screw_offsets)
    if config.pinky_15u:
        offsets.update(config.pinky_screw_offsets)
    offsets.update(THUMB_SCREW_OFFSETS[kb.cluster.style])
    return [
        (0, 0, offsets['tl']),
        (0, config.lastrow, offsets['bl']),
        (config.lastcol, config.lastrow, offsets['br']),
        (config.lastcol, 0, offsets['tr']),
        (2, 0, offsets['tm']),
        (1, config.lastrow, offsets['bm']),
    ]


def screw_insert_shape(kb, bottom_radius, top_radius, height):
    logging.debug("screw_insert_shape()")
    engine = kb.engine
    shape = engine.cone(bottom_radius, top_radius, height, segments=30)
    cap = engine.translate(engine.sphere(top_radius, segments=30), (0, 0, height / 2))
    return engine.union([shape, cap])


def screw_insert(kb, column, row, bottom_radius, top_radius, height, offset):
    position = screw_insert_position(kb, column, row)
    shape = screw_insert_shape(kb, bottom_radius, top_radius, height)
    return kb.engine.translate(shape, np.asarray(offset) + [position[0], position[1], height / 2])


def screw_insert_all_shapes(kb, bottom_radius, top_radius, height):
    return kb.engine.union([
        screw_insert(kb, column, row, bottom_radius, top_radius, height, offset)
        for column, row, offset in screw_insert_offsets(kb)
    ])


def screw_insert_holes(kb):
    config = kb.config
    return screw_insert_all_shapes(
        kb, config.screw_insert_bottom_radius, config.screw_insert_top_radius, config.screw_insert_height
    )


def screw_insert_outers(kb):
    config = kb.config
    bottom_wall, top_wall, height_wall = config.screw_insert_wall
    return screw_insert_all_shapes(
        kb,
        config.screw_insert_bottom_radius + bottom_wall,
        config.screw_insert_top_radius + top_wall,
        config.screw_insert_height + height_wall,
    )


def screw_insert_screw_holes(kb):
    radius = kb.config.screw_hole_radius
    return screw_insert_all_shapes(kb, radius, radius, 350)


def plate_screw_recess(kb):
    """
    Countersinks for the screw heads on the underside of the bottom plate.
    """
    recess = screw_insert_all_shapes(kb, 3.1, 1.95, 2.1)
    return kb.engine.translate(recess, (0, 0, -0.8))


#######################
## Controller cutout ##
#######################


def usb_holder_position(kb) -> np.ndarray:
    config = kb.config
    holder_offset = config.holder_offsets.get(config.nrows, 0)
    ref = anchor(kb, KeyAt(0, 0), wall_locate2(config, 0, -1) - [0, config.mount_height / 2, 0])
    return np.array([18.8 + holder_offset, 18.7, 1.3]) + [ref[0], ref[1], 2]


def _notch_offset(kb) -> float:
    return kb.config.notch_offsets.get(kb.config.nrows, 0)


def usb_holder_space(kb):
    shape = kb.engine.box(28.666, 30, 12.4)
    return kb.engine.translate(shape, usb_holder_position(kb) + [-1.5, -kb.config.wall_thickness, 2.9])


def usb_holder_notch(kb):
    shape = kb.engine.box(31.366, 1.3, 12.4)
    return kb.engine.translate(shape, usb_holder_position(kb) + [-1.5, 4.4 + _notch_offset(kb), 2.9])


def trrs_notch(kb):
    shape = kb.engine.box(8.4, 2.4, 19.8)
    return kb.engine.translate(shape, usb_holder_position(kb) + [-10.33, 3.6 + _notch_offset(kb), 6.6])


def controller_cutout(kb) -> list:
    if not kb.config.controller_cutout:
        return []
    return [usb_holder_space(kb), usb_holder_notch(kb), trrs_notch(kb)]


################
## Wrist rest ##
################


def cut_bottom(kb):
    return kb.engine.translate(kb.engine.box(300, 300, 100), (0, 0, -50))


def _h_offset(config) -> float:
    return math.tan(math.radians(config.wrist_rest_angle)) * 88


def wrist_rest(kb):
    logging.debug("wrist_rest()")
    engine = kb.engine
    scale_amount = (83.7 * math.cos(math.radians(kb.config.wrist_rest_angle))) / 19.33

    back = engine.scale(engine.cylinder(10, 150, segments=200), (1.3, 1, 1))
    front_cut = engine.scale(engine.translate(engine.cylinder(7, 201, segments=200), (0, -13.4, 0)), (1.1, 1, 1))
    front_cube = engine.translate(engine.box(18, 10, 201), (0, -12.4, 0))
    outline = engine.union([
        engine.difference(back, [front_cut, front_cube]),
        # side fillers
        engine.translate(engine.cylinder(6.8, 199, segments=200), (-6.15, -0.98, 0)),
        engine.translate(engine.cylinder(6.8, 199, segments=200), (6.15, -0.98, 0)),
        # rounded front lobes
        engine.translate(engine.cylinder(5.9, 190, segments=200), (-6.35, -2, 0)),
        engine.scale(engine.translate(engine.cylinder(5.9, 199, segments=200), (6.35, -2, 0)), (1.01, 1, 1)),
    ])
    rest = engine.scale(outline, (4.25, scale_amount, 1))
    return engine.difference(rest, [cut_bottom(kb)])


def _rest_top_cut(kb, drop=0):
    config, engine = kb.config, kb.engine
    h_offset = _h_offset(config)
    cut = engine.box(200, 200, 200)
    cut = engine.translate(cut, (0, 0, (h_offset / 2) + (config.wrist_rest_back_height - h_offset) + 100 - drop))
    return engine.rotate(cut, (config.wrist_rest_angle, config.wrist_rest_y_angle, 0))


def wrist_rest_base(kb):
    """
    The wrist rest cut to its slope, with an optional recess for a silicone pad.
    """
    engine = kb.engine
    rest = wrist_rest(kb)
    cuts = [_rest_top_cut(kb)]
    if kb.config.wrist_rest_ledge:
        cuts.append(engine.difference(rest, [_rest_top_cut(kb, kb.config.wrist_rest_ledge)]))
    return engine.difference(engine.scale(rest, (1.08, 1.08, 1)), cuts)


def _connector_xs(kb):
    return kb.config.wrist_connector_x


def rest_case_cuts(kb):
    """
    Screw and nut holes for the wrist rest connectors, in wrist rest space.
    """
    engine = kb.engine
    nrows = kb.config.nrows
    right_x, middle_x, left_x = _connector_xs(kb)
    cuts = []
    for x, screw_y, head_y, nut_y in (
            (right_x, 23.5, 33.3 + nrows, 23.0 + nrows),
            (middle_x, 18, 30, 14.0 + nrows),
            (left_x, 21, 27.25 + nrows, 15.0 + nrows),
    ):
        screw = engine.rotate(engine.cylinder(1.85, 25, segments=30), (90, 0, 0))
        head = engine.rotate(engine.cylinder(2.8, 5.2, segments=50), (90, 0, 0))
        cuts.append(engine.translate(screw, (x, screw_y, 4.5)))
        cuts.append(engine.translate(head, (x, head_y, 4.5)))
        cuts.append(engine.translate(engine.box(6, 3, 12.2), (x, nut_y, 1.5)))
    return engine.union(cuts)


def rest_case_connectors(kb):
    engine = kb.engine
    right_x, middle_x, left_x = _connector_xs(kb)
    arms = []
    for x, y in ((right_x, 4), (middle_x, -5), (left_x, -3)):
        arm = engine.rotate(engine.cylinder(6, 60, segments=200), (90, 0, 0))
        arm = engine.translate(arm, (x, y, 0))
        arms.append(engine.scale(arm, (1, 1, 1.6)))
    return engine.union(arms)


def wrist_rest_origin(kb, case_side=False) -> np.ndarray:
    origin = kb.placer.thumb_origin()
    if case_side:
        return np.array([origin[0] + 33, origin[1] - (56 - kb.config.nrows), 0])
    return np.array([origin[0] + 33, origin[1] - 50, 0])


def wrist_rest_case_cuts(kb):
    """
    The connector holes in the case wall.
    """
    return kb.engine.translate(rest_case_cuts(kb), wrist_rest_origin(kb, case_side=True))


def wrist_rest_build(kb, side="right"):
    logging.debug("wrist_rest_build()")
    config, engine = kb.config, kb.engine
    base = engine.translate(wrist_rest_base(kb), (config.wrist_base_position_x, config.wrist_base_distance_y, 0))
    base = engine.rotate(base, (0, 0, config.wrist_rest_rotation_angle))
    connectors = engine.difference(rest_case_connectors(kb), [rest_case_cuts(kb), cut_bottom(kb)])

    origin = wrist_rest_origin(kb)
    rest = engine.translate(engine.union([base, connectors]), origin)

    # clear the case wall the connectors slide against
    walls = case_walls(kb, side)
    wall_cut = [engine.translate(walls, (1, y, 1)) for y in (1.0, 4.0, 7.0)]
    return engine.difference(rest, [engine.translate(rest_case_cuts(kb), origin)] + wall_cut)


###############
## Trackball ##
###############


def trackball_position(kb) -> np.ndarray:
    config = kb.config
    column, row = config.trackball_anchor
    return anchor(kb, KeyAt(column, row), [0, config.mount_height / 2, 0]) + np.asarray(config.trackball_offset)


def trackball_sensor(kb, pins=True):
    """
    Clearance for a PMW3360 sensor board.
    """
    engine = kb.engine
    board = engine.convex_hull([
        engine.box(28.5, 21.5, 3.5),
        engine.translate(engine.box(21.5, 19.5, 1), (0, 0, 4.5)),
    ])
    shape = engine.union([board, engine.translate(engine.box(21.5, 21.5, 4), (0, 0, -2))])
    if pins:
        shape = engine.union([shape, engine.translate(engine.box(21.5, 12, 5), (0, -13, -4.5))])
    return shape


def _pimple(kb, radius):
    engine = kb.engine
    snip = engine.translate(engine.sphere(4, segments=40), (0, 0, -4 - radius + 0.4))
    return engine.difference(engine.sphere(radius, segments=40), [snip])


def trackholder(kb, depth, zdeg=0):
    logging.debug("trackholder()")
    engine = kb.engine
    r = kb.config.trackball_radius
    h = 70
    outer_r = r + 2

    body = engine.translate(engine.cylinder(outer_r, h), (0, 0, -h / 2))
    # lean the cup slightly towards the user
    body = engine.multmatrix(body, [[1, 0, 0, 0], [0, 1, 0.15, 0], [0, 0, 1, 0]])

    bearings = []
    for angle in (0, 120, 240):
        pimple = engine.translate(_pimple(kb, 2), (0, 0, r + 1.0))
        pimple = engine.rotate(pimple, (120, 0, 0))
        bearings.append(engine.rotate(pimple, (0, 0, angle + 60)))
    ball = engine.difference(engine.sphere(r), bearings)

    bottom_hole = engine.convex_hull([
        engine.translate(engine.cylinder(9, 9), (2, 0, 0)),
        engine.translate(engine.cylinder(9, 9), (-2, 0, 0)),
    ])
    bottom_hole = engine.translate(bottom_hole, (0, 0, -r))

    # the sensor plus the path it slides in on
    sensor, bare = trackball_sensor(kb), trackball_sensor(kb, pins=False)
    slot = [sensor] + [engine.translate(sensor, (0, -y, 0)) for y in (5, 10, 15, 20)]
    slot.extend([
        engine.translate(engine.rotate(sensor, (10, 0, 0)), (0, -20, -2)),
        engine.translate(engine.rotate(sensor, (16, 0, 0)), (0, -15, -3)),
        engine.translate(engine.rotate(bare, (30, 0, 0)), (0, -18, -6)),
        engine.translate(engine.rotate(bare, (45, 0, 0)), (0, -21, -9)),
    ])
    slot = engine.translate(engine.union(slot), (0, 0, -4.25 - r))

    floor = engine.translate(engine.box(100, 100, 100), (0, 0, -50 - depth))
    holder = engine.difference(body, [ball, bottom_hole, slot, floor])
    return engine.rotate(holder, (0, 0, zdeg))


def trackball_holder(kb):
    position = trackball_position(kb)
    return kb.engine.translate(trackholder(kb, position[2]), position)


def trackball_cutout(kb):
    """
    Room for the ball and a channel for the sensor cable through the case.
    """
    engine = kb.engine
    position = trackball_position(kb)
    ball = engine.translate(engine.sphere(kb.config.trackball_radius - 2.9), position)
    channel = engine.translate(engine.box(28, 20, 50), (position[0], position[1] - 7, 0))
    return engine.union([ball, channel])
