"""
Key placement.

A single transform pipeline maps a grid address or thumb key to its pose on the curved, tented
surface. The pipeline is written once against three small function sets so that the same steps
place engine shapes, transform numpy points, and accumulate 4x4 pose matrices.
"""
from dataclasses import dataclass
import logging
import math
from typing import Callable, Optional, Sequence

import numpy as np

from .configuration import ColumnStyle, KeyboardConfig
from .engines.engine import GeometryEngine
from .errors import KeyAddressError


#########################
## Rotation helpers    ##
#########################


def rotate_around_x(position, angle):
    t_matrix = np.array(
        [
            [1, 0, 0],
            [0, math.cos(angle), -math.sin(angle)],
            [0, math.sin(angle), math.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def rotate_around_y(position, angle):
    t_matrix = np.array(
        [
            [math.cos(angle), 0, math.sin(angle)],
            [0, 1, 0],
            [-math.sin(angle), 0, math.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def rotate_around_z(position, angle):
    t_matrix = np.array(
        [
            [math.cos(angle), -math.sin(angle), 0],
            [math.sin(angle), math.cos(angle), 0],
            [0, 0, 1],
        ]
    )
    return np.matmul(t_matrix, position)


def translate_point(position, vector):
    return np.asarray(position, dtype=float) + np.asarray(vector, dtype=float)


def _rotation_pose(rotate_fn: Callable) -> Callable:
    def rotate_pose(matrix, angle):
        step = np.eye(4)
        step[:3, :3] = rotate_fn(np.eye(3), angle)
        return step @ matrix
    return rotate_pose


def translate_pose(matrix, vector):
    step = np.eye(4)
    step[:3, 3] = np.asarray(vector, dtype=float)
    return step @ matrix


rotate_pose_x = _rotation_pose(rotate_around_x)
rotate_pose_y = _rotation_pose(rotate_around_y)
rotate_pose_z = _rotation_pose(rotate_around_z)


def _column_entry(config: KeyboardConfig, table: str, column: int):
    values = getattr(config, table)
    if not 0 <= column < len(values):
        raise KeyAddressError(table, column, len(values))
    return values[column]


def offset_for_column(config: KeyboardConfig, column: int, row: int) -> float:
    """
    Extra x shift that centres a 1.5u key in the outer column.
    """
    if config.pinky_15u and column == config.lastcol and config.first_15u_row <= row <= config.last_15u_row:
        return 4.7625
    return 0


def apply_key_geometry(
        config: KeyboardConfig,
        shape,
        translate_fn,
        rotate_x_fn,
        rotate_y_fn,
        rotate_z_fn,
        column: int,
        row: int,
):
    logging.debug("apply_key_geometry()")

    column_angle = config.beta * (config.centercol - column)
    row_angle = config.alpha * (config.centerrow - row)
    row_radius = config.row_radius
    column_offset = _column_entry(config, 'column_offsets', column)

    if config.column_style == ColumnStyle.ORTHOGRAPHIC:
        column_z_delta = config.column_radius * (1 - math.cos(column_angle))
        shape = translate_fn(shape, [offset_for_column(config, column, row), 0, -row_radius])
        shape = rotate_x_fn(shape, row_angle)
        shape = translate_fn(shape, [0, 0, row_radius])
        shape = rotate_y_fn(shape, column_angle)
        shape = translate_fn(
            shape, [-(column - config.centercol) * config.column_x_delta, 0, column_z_delta]
        )
        shape = translate_fn(shape, column_offset)

    elif config.column_style == ColumnStyle.FIXED:
        fixed_z = _column_entry(config, 'fixed_z', column)
        shape = rotate_y_fn(shape, _column_entry(config, 'fixed_angles', column))
        shape = translate_fn(shape, [_column_entry(config, 'fixed_x', column), 0, fixed_z])
        shape = translate_fn(shape, [0, 0, -(row_radius + fixed_z)])
        shape = rotate_x_fn(shape, row_angle)
        shape = translate_fn(shape, [0, 0, row_radius + fixed_z])
        shape = rotate_y_fn(shape, config.fixed_tenting)
        shape = translate_fn(shape, [0, column_offset[1], 0])

    else:
        shape = rotate_y_fn(shape, _column_entry(config, 'column_twists', column))
        shape = translate_fn(shape, [offset_for_column(config, column, row), 0, -row_radius])
        shape = rotate_x_fn(shape, row_angle)
        shape = translate_fn(shape, [0, 0, row_radius])
        shape = translate_fn(shape, [0, 0, -config.column_radius])
        shape = rotate_y_fn(shape, column_angle)
        shape = translate_fn(shape, [0, 0, config.column_radius])
        shape = rotate_x_fn(shape, _column_entry(config, 'column_rotations', column))
        shape = rotate_z_fn(shape, _column_entry(config, 'column_splays', column))
        shape = translate_fn(shape, column_offset)

    shape = rotate_y_fn(shape, config.tenting_angle)
    shape = translate_fn(shape, [0, 0, config.keyboard_z_offset])

    return shape


@dataclass(frozen=True)
class ThumbPose:
    """
    Pose of one thumb key relative to the thumb origin: euler angles in degrees, then a translation.
    """
    rotation_degrees: tuple
    translation: tuple


def apply_thumb_geometry(shape, translate_fn, rotate_x_fn, rotate_y_fn, rotate_z_fn, pose: ThumbPose, origin):
    logging.debug("apply_thumb_geometry()")
    rx, ry, rz = (math.radians(angle) for angle in pose.rotation_degrees)
    shape = rotate_x_fn(shape, rx)
    shape = rotate_y_fn(shape, ry)
    shape = rotate_z_fn(shape, rz)
    shape = translate_fn(shape, origin)
    shape = translate_fn(shape, pose.translation)
    return shape


##########################
## Placement descriptors ##
##########################


@dataclass(frozen=True)
class KeyAt:
    column: int
    row: int

    def place(self, placer: "Placer", shape):
        return placer.key_place(shape, self.column, self.row)

    def position(self, placer: "Placer", point) -> np.ndarray:
        return placer.key_position(point, self.column, self.row)

    def pose(self, placer: "Placer") -> np.ndarray:
        return placer.key_pose(self.column, self.row)


@dataclass(frozen=True)
class ThumbAt:
    name: str

    def place(self, placer: "Placer", shape):
        return placer.thumb_place(shape, self.name)

    def position(self, placer: "Placer", point) -> np.ndarray:
        return placer.thumb_position(point, self.name)

    def pose(self, placer: "Placer") -> np.ndarray:
        return placer.thumb_pose(self.name)


@dataclass(frozen=True)
class LeftWallAt:
    """
    The outward anchor beside column 0 that the left wall hangs from. Translation only.
    """
    row: int
    direction: int

    def place(self, placer: "Placer", shape):
        return placer.left_key_place(shape, self.row, self.direction)

    def position(self, placer: "Placer", point) -> np.ndarray:
        return translate_point(point, placer.left_key_position(self.row, self.direction))

    def pose(self, placer: "Placer") -> np.ndarray:
        return translate_pose(np.eye(4), placer.left_key_position(self.row, self.direction))


class Placer:
    """
    Places shapes and points for one configuration.
    """

    def __init__(self, config: KeyboardConfig, engine: GeometryEngine, thumb_poses: Optional[dict] = None):
        self.config = config
        self.engine = engine
        self.thumb_poses = dict(thumb_poses or {})

    def x_rot(self, shape, angle):
        return self.engine.rotate(shape, [math.degrees(angle), 0, 0])

    def y_rot(self, shape, angle):
        return self.engine.rotate(shape, [0, math.degrees(angle), 0])

    def z_rot(self, shape, angle):
        return self.engine.rotate(shape, [0, 0, math.degrees(angle)])

    # generic interface over placement descriptors

    def place(self, where, shape):
        return where.place(self, shape)

    def position(self, where, point: Sequence[float] = (0, 0, 0)) -> np.ndarray:
        return where.position(self, point)

    def pose(self, where) -> np.ndarray:
        return where.pose(self)

    # grid keys

    def key_place(self, shape, column: int, row: int):
        logging.debug("key_place()")
        return apply_key_geometry(
            self.config, shape, self.engine.translate, self.x_rot, self.y_rot, self.z_rot, column, row
        )

    def key_position(self, position, column: int, row: int) -> np.ndarray:
        logging.debug("key_position()")
        return apply_key_geometry(
            self.config, np.asarray(position, dtype=float), translate_point,
            rotate_around_x, rotate_around_y, rotate_around_z, column, row
        )

    def key_pose(self, column: int, row: int) -> np.ndarray:
        return apply_key_geometry(
            self.config, np.eye(4), translate_pose, rotate_pose_x, rotate_pose_y, rotate_pose_z, column, row
        )

    # thumb keys

    def thumb_origin(self) -> np.ndarray:
        config = self.config
        origin = self.key_position([config.mount_width / 2, -(config.mount_height / 2), 0], 1, config.cornerrow)
        return origin + np.asarray(config.thumb_offsets)

    def _thumb_pose_for(self, name: str) -> ThumbPose:
        try:
            return self.thumb_poses[name]
        except KeyError:
            raise KeyError(f"no thumb key named {name!r} in this cluster") from None

    def thumb_place(self, shape, name: str):
        logging.debug("thumb_place()")
        return apply_thumb_geometry(
            shape, self.engine.translate, self.x_rot, self.y_rot, self.z_rot,
            self._thumb_pose_for(name), self.thumb_origin()
        )

    def thumb_position(self, position, name: str) -> np.ndarray:
        return apply_thumb_geometry(
            np.asarray(position, dtype=float), translate_point, rotate_around_x, rotate_around_y, rotate_around_z,
            self._thumb_pose_for(name), self.thumb_origin()
        )

    def thumb_pose(self, name: str) -> np.ndarray:
        return apply_thumb_geometry(
            np.eye(4), translate_pose, rotate_pose_x, rotate_pose_y, rotate_pose_z,
            self._thumb_pose_for(name), self.thumb_origin()
        )

    # left wall

    def left_key_position(self, row: int, direction: int) -> np.ndarray:
        config = self.config
        pos = self.key_position([-config.mount_width / 2, direction * config.mount_height / 2, 0], 0, row)
        return pos - np.array([config.left_wall_x_offset, 0, config.left_wall_z_offset])

    def left_key_place(self, shape, row: int, direction: int):
        logging.debug("left_key_place()")
        return self.engine.translate(shape, self.left_key_position(row, direction))
