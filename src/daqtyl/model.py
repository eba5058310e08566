"""
Whole-part assembly: the case, its bottom plate, the wrist rest and the test fixtures.
"""
import logging

from .auxiliary import (
    controller_cutout,
    plate_screw_recess,
    screw_insert_holes,
    screw_insert_outers,
    screw_insert_screw_holes,
    trackball_cutout,
    trackball_holder,
    wrist_rest_build,
    wrist_rest_case_cuts,
)
from .configuration import KeyboardConfig
from .connectors import connectors, render_bridge, thumb_bridges
from .engines.engine import GeometryEngine
from .layout import (
    caps,
    caps_fill,
    key_holes,
    thumb_cluster,
    thumb_key_poses,
    thumb_plates,
    thumbcaps,
    thumbcaps_fill,
)
from .parts import encoder_cap, encoder_plate
from .placement import Placer
from .walls import case_walls


class Keyboard:
    """
    Everything a builder needs for one target: the config, the engine and the placer.
    """

    def __init__(self, config: KeyboardConfig, engine: GeometryEngine):
        self.config = config
        self.engine = engine
        self.cluster = thumb_cluster(config.thumb_style)
        self.placer = Placer(config, engine, thumb_poses=thumb_key_poses(config.thumb_style))

    def has_trackball(self, side: str) -> bool:
        return self.config.ball_side in (side, 'both')


def _mirrored(kb, shape, side):
    if side == "left":
        return kb.engine.mirror(shape, 'YZ')
    return shape


def case(kb, side="right"):
    """
    The case for `side`, built right handed.
    """
    logging.debug("case()")
    config, engine = kb.config, kb.engine

    shape = engine.union([key_holes(kb, side), connectors(kb, side), thumb_plates(kb, side)])

    walls = engine.union([case_walls(kb, side), screw_insert_outers(kb)])
    cuts = controller_cutout(kb)
    if config.wrist_rest:
        cuts.append(wrist_rest_case_cuts(kb))
    cuts.append(screw_insert_holes(kb))
    walls = engine.difference(walls, cuts)
    shape = engine.union([shape, walls])

    if kb.has_trackball(side):
        logging.debug("Has Trackball")
        shape = engine.union([shape, trackball_holder(kb)])
        shape = engine.difference(shape, [trackball_cutout(kb)])

    block = engine.translate(engine.box(350, 350, 40), (0, 0, -20))
    shape = engine.difference(shape, [block])

    if config.show_caps:
        shape = engine.union([shape, caps(kb, side), thumbcaps(kb)])

    return shape


def model_side(kb, side="right"):
    logging.debug("model_side()")
    return _mirrored(kb, case(kb, side), side)


def plate(kb, side="right"):
    """
    The bottom plate for `side`, built right handed.
    """
    logging.debug("plate()")
    config, engine = kb.config, kb.engine

    outline = engine.project(engine.union([
        key_holes(kb, side),
        connectors(kb, side),
        thumb_plates(kb, side),
        case_walls(kb, side),
        screw_insert_outers(kb),
        caps_fill(kb, side),
        thumbcaps_fill(kb),
    ]))
    shape = engine.extrude_linear(outline, config.bottom_plate_thickness)
    holes = engine.translate(screw_insert_screw_holes(kb), (0, 0, -10))
    return engine.difference(shape, [holes, plate_screw_recess(kb)])


def baseplate(kb, side="right"):
    logging.debug("baseplate()")
    return _mirrored(kb, plate(kb, side), side)


def wrist_rest_side(kb, side="right"):
    return _mirrored(kb, wrist_rest_build(kb, side), side)


def fit_assembly(kb, side="right"):
    """
    Case, plate, caps and wrist rest together, for checking fit.
    """
    engine = kb.engine
    parts = [case(kb, side), plate(kb, side), caps(kb, side), thumbcaps(kb)]
    if kb.config.wrist_rest:
        parts.append(wrist_rest_build(kb, side))
    return _mirrored(kb, engine.union(parts), side)


def thumb_test(kb):
    engine = kb.engine
    bridges = [render_bridge(kb, bridge) for bridge in thumb_bridges(kb)]
    return engine.union([thumb_plates(kb), thumbcaps(kb)] + bridges)


def encoder_test(kb):
    engine = kb.engine
    wheel = engine.translate(encoder_cap(kb.config, engine), (0, 0, 3.75))
    return engine.union([encoder_plate(kb.config, engine), wheel])


def trackball_test(kb):
    engine = kb.engine
    return engine.difference(trackball_holder(kb), [trackball_cutout(kb)])


TARGETS = {
    'right': lambda kb: model_side(kb, "right"),
    'left': lambda kb: model_side(kb, "left"),
    'right-plate': lambda kb: baseplate(kb, "right"),
    'left-plate': lambda kb: baseplate(kb, "left"),
    'right-wrist-rest': lambda kb: wrist_rest_side(kb, "right"),
    'left-wrist-rest': lambda kb: wrist_rest_side(kb, "left"),
    'right-test': lambda kb: fit_assembly(kb, "right"),
    'left-test': lambda kb: fit_assembly(kb, "left"),
    'thumb-test': thumb_test,
    'encoder-test': encoder_test,
    'trackball-test': trackball_test,
}

DEFAULT_TARGETS = ('right', 'left', 'right-plate', 'left-plate')
