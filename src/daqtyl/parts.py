from dataclasses import dataclass
import logging

import numpy as np

from .configuration import KeyboardConfig
from .engines.engine import GeometryEngine


def single_plate(config: KeyboardConfig, engine: GeometryEngine, side="right"):
    logging.debug("single_plate()")
    keyswitch_width = config.keyswitch_width
    keyswitch_height = config.keyswitch_height
    plate_thickness = config.plate_thickness

    top_wall = engine.box(keyswitch_width + 3, 1.5, plate_thickness + 0.5)
    top_wall = engine.translate(top_wall, (0, (1.5 / 2) + (keyswitch_height / 2), (plate_thickness / 2) - 0.25))

    left_wall = engine.box(1.8, keyswitch_height + 3, plate_thickness + 0.5)
    left_wall = engine.translate(left_wall, ((1.8 / 2) + (keyswitch_width / 2), 0, (plate_thickness / 2) - 0.25))

    plate_half = [top_wall, left_wall]
    if config.create_side_nubs:
        side_nub = engine.cylinder(radius=1, height=2.75, segments=30)
        side_nub = engine.rotate(side_nub, (90, 0, 0))
        side_nub = engine.translate(side_nub, (keyswitch_width / 2, 0, 1))

        nub_cube = engine.box(1.5, 2.75, config.side_nub_thickness)
        nub_cube = engine.translate(nub_cube, ((1.5 / 2) + (keyswitch_width / 2), 0, config.side_nub_thickness / 2))

        side_nub = engine.convex_hull([side_nub, nub_cube])
        side_nub = engine.translate(side_nub, (0, 0, plate_thickness - config.side_nub_thickness))
        plate_half.append(side_nub)

    plate_half1 = engine.union(plate_half)
    plate_half2 = engine.mirror(engine.mirror(plate_half1, 'YZ'), 'XZ')
    plate = engine.union([plate_half1, plate_half2])

    # notches for the switch retention tabs
    hole_thickness = plate_thickness + 0.5 - config.retention_tab_thickness
    top_nub = engine.box(5, 5, hole_thickness)
    top_nub = engine.translate(top_nub, (keyswitch_width / 2.5, 0, (hole_thickness / 2) - 0.5))
    top_nub_pair = engine.union([top_nub, engine.mirror(engine.mirror(top_nub, 'YZ'), 'XZ')])
    plate = engine.difference(plate, [engine.rotate(top_nub_pair, (0, 0, 90))])

    if side == "left":
        plate = engine.mirror(plate, 'YZ')

    return plate


def encoder_plate(config: KeyboardConfig, engine: GeometryEngine, side="right"):
    """
    Plate for an EVQWGD001 roller encoder. Built 3.75 mm above the switch plate origin.
    """
    logging.debug("encoder_plate()")
    encoder_width = config.encoder_width
    encoder_height = config.encoder_height
    plate_thickness = 4.0

    top_wall = engine.box(encoder_width + 3, 1.5, plate_thickness)
    top_wall = engine.translate(top_wall, (0, (1.5 / 2) + (encoder_height / 2), plate_thickness / 2))
    left_wall = engine.box(1.6, encoder_height + 3, plate_thickness)
    left_wall = engine.translate(left_wall, ((2.2 / 2) + (encoder_width / 2), 0, plate_thickness / 2))
    plate_half = engine.union([top_wall, left_wall])

    bridge_thickness = 1.5
    bridge_top_recess = 0.8
    bridge = engine.box(8, encoder_height + 2, bridge_thickness)
    pin_nubs = [
        engine.translate(engine.box(2, 2, 2), (-4, 3, 0)),
        engine.translate(engine.box(2, 2, 2), (-4, -4, 0)),
    ]
    bridge = engine.difference(bridge, pin_nubs)
    bridge = engine.translate(bridge, (-2.5, 0, plate_thickness - (bridge_thickness / 2) - bridge_top_recess))

    plate = engine.union([plate_half, bridge, engine.mirror(engine.mirror(plate_half, 'YZ'), 'XZ')])

    # pin access corner
    access = engine.translate(engine.box(3, 5, 20), (1.5, 2.5, 10))
    access = engine.rotate(access, (0, 0, 90))
    access = engine.translate(access, (8.55, -7.8, -4))
    plate = engine.difference(plate, [access])
    plate = engine.translate(plate, (0, 0, 3.75))

    if side == "left":
        plate = engine.mirror(plate, 'YZ')

    return plate


def encoder_fill(config: KeyboardConfig, engine: GeometryEngine, side="right"):
    return engine.convex_hull([encoder_plate(config, engine, side)])


def keyhole_fill(config: KeyboardConfig, engine: GeometryEngine):
    """
    Solid block standing in for a switch hole, used to shadow the bottom plate.
    """
    fill = engine.box(config.keyswitch_height, config.keyswitch_width, config.plate_thickness)
    return engine.translate(fill, (0, 0, config.plate_thickness / 2))


def larger_plate(config: KeyboardConfig, engine: GeometryEngine, half=False):
    logging.debug("larger_plate()")
    plate_height = (config.sa_double_length - config.mount_height) / 3
    top_plate = engine.box(config.mount_width, plate_height, config.web_thickness)
    top_plate = engine.translate(top_plate, (
        0, (plate_height + config.mount_height) / 2, config.plate_thickness - (config.web_thickness / 2)
    ))
    if half:
        return top_plate
    return engine.union([top_plate, engine.mirror(top_plate, 'XZ')])


def sa_cap(config: KeyboardConfig, engine: GeometryEngine, units=1):
    # MODIFIED TO NOT HAVE THE ROTATION.  NEEDS ROTATION DURING ASSEMBLY
    if units == 1:
        bl2 = 18.5 / 2
        bw2 = 18.5 / 2
        m = 17 / 2
        pl2 = 6
        pw2 = 6

    elif units == 2:
        bl2 = config.sa_length
        bw2 = config.sa_length / 2
        m = 0
        pl2 = 16
        pw2 = 6

    elif units == 1.5:
        bl2 = config.sa_length / 2
        bw2 = 27.94 / 2
        m = 0
        pl2 = 6
        pw2 = 11

    else:
        raise ValueError(f"no keycap of {units} units")

    k1 = engine.box(bw2 * 2, bl2 * 2, 0.1)
    k1 = engine.translate(k1, (0, 0, 0.05))
    k2 = engine.box(pw2 * 2, pl2 * 2, 0.1)
    k2 = engine.translate(k2, (0, 0, 12.0))
    if m > 0:
        m1 = engine.box(m * 2, m * 2, 0.1)
        m1 = engine.translate(m1, (0, 0, 6.0))
        key_cap = engine.convex_hull([k1, k2, m1])
    else:
        key_cap = engine.convex_hull([k1, k2])

    return engine.translate(key_cap, (0, 0, 5 + config.plate_thickness))


def encoder_cap(config: KeyboardConfig, engine: GeometryEngine):
    wheel = engine.cylinder(6, 15)
    wheel = engine.rotate(wheel, (0, 90, 0))
    return engine.translate(wheel, (0, 0, 5 + 2 * config.plate_thickness))


####################
## Web posts      ##
####################


@dataclass(frozen=True)
class Post:
    """
    Offset of a connector post from the centre of its switch plate.
    """
    offset: tuple

    def point(self, config: KeyboardConfig) -> np.ndarray:
        """
        Centre of the post solid in plate space.
        """
        return np.asarray(self.offset) + np.array([0, 0, config.plate_thickness - (config.web_thickness / 2)])


def web_post(config: KeyboardConfig, engine: GeometryEngine):
    logging.debug("web_post()")
    post = engine.box(config.post_size, config.post_size, config.web_thickness)
    post = engine.translate(post, (0, 0, config.plate_thickness - (config.web_thickness / 2)))
    return post


def post_shape(config: KeyboardConfig, engine: GeometryEngine, post: Post, shift=(0, 0, 0)):
    return engine.translate(web_post(config, engine), np.asarray(post.offset) + np.asarray(shift))


def _corner(config: KeyboardConfig, x_divide: float, y_divide: float, x_sign: int, y_sign: int) -> Post:
    post_adj = config.post_size / 2
    return Post((
        x_sign * ((config.mount_width / x_divide) - post_adj),
        y_sign * ((config.mount_height / y_divide) - post_adj),
        0.0,
    ))


def web_post_tr(config):
    return _corner(config, 1.95, 1.95, 1, 1)


def web_post_tl(config):
    return _corner(config, 1.95, 1.95, -1, 1)


def web_post_bl(config):
    return _corner(config, 1.95, 1.95, -1, -1)


def web_post_br(config):
    return _corner(config, 1.95, 1.95, 1, -1)


def wide_post_tr(config):
    return _corner(config, 1.2, 2, 1, 1)


def wide_post_tl(config):
    return _corner(config, 1.2, 2, -1, 1)


def wide_post_bl(config):
    return _corner(config, 1.2, 2, -1, -1)


def wide_post_br(config):
    return _corner(config, 1.2, 2, 1, -1)


def thumb_post_tr(config):
    return _corner(config, 2, 1.1, 1, 1)


def thumb_post_tl(config):
    return _corner(config, 2, 1.1, -1, 1)


def thumb_post_bl(config):
    return _corner(config, 2, 1.1, -1, -1)


def thumb_post_br(config):
    return _corner(config, 2, 1.1, 1, -1)


def mini_thumb_post_tr(config):
    return _corner(config, 2, 2, 1, 1)


def mini_thumb_post_tl(config):
    return _corner(config, 2, 2, -1, 1)


def mini_thumb_post_bl(config):
    return _corner(config, 2, 2, -1, -1)


def mini_thumb_post_br(config):
    return _corner(config, 2, 2, 1, -1)


def center_post(_config):
    return Post((0.0, 0.0, 0.0))


# names used by the hand-authored connector and wall tables
POSTS = {
    'tl': web_post_tl,
    'tr': web_post_tr,
    'bl': web_post_bl,
    'br': web_post_br,
    'wide_tl': wide_post_tl,
    'wide_tr': wide_post_tr,
    'wide_bl': wide_post_bl,
    'wide_br': wide_post_br,
    'thumb_tl': thumb_post_tl,
    'thumb_tr': thumb_post_tr,
    'thumb_bl': thumb_post_bl,
    'thumb_br': thumb_post_br,
    'mpost_tl': mini_thumb_post_tl,
    'mpost_tr': mini_thumb_post_tr,
    'mpost_bl': mini_thumb_post_bl,
    'mpost_br': mini_thumb_post_br,
    'center': center_post,
}


def post_named(config: KeyboardConfig, name: str) -> Post:
    return POSTS[name](config)
