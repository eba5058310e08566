import copy
import dataclasses
from dataclasses import dataclass
from enum import Enum
import json
import logging
import math
import pathlib
from typing import Any, Optional

from .errors import ConfigurationError
from .generate_configuration import shape_config

SIDES = ('left', 'right', 'both', 'none')


class ColumnStyle(str, Enum):
    STANDARD = 'standard'
    ORTHOGRAPHIC = 'orthographic'
    FIXED = 'fixed'


class ThumbStyle(str, Enum):
    DEFAULT = 'DEFAULT'
    MINI = 'MINI'
    CARBONFET = 'CARBONFET'


def _vectors(values) -> tuple:
    return tuple(tuple(float(v) for v in vector) for vector in values)


def _floats(values) -> tuple:
    return tuple(float(v) for v in values)


def _int_keys(mapping: dict) -> dict:
    return {int(key): float(value) for key, value in mapping.items()}


@dataclass(frozen=True)
class KeyboardConfig:
    """
    Immutable parameter set for one build.

    Built from `shape_config` merged with user overrides; see `generate_configuration` for the
    meaning of each field. Derived values are exposed as properties.
    """

    ENGINE: str
    config_name: str
    save_dir: str
    show_caps: bool

    nrows: int
    ncols: int
    alpha: float
    beta: float
    centercol: int
    centerrow_offset: int
    tenting_angle: float
    column_style: ColumnStyle
    column_offsets: tuple
    column_rotations: tuple
    column_twists: tuple
    column_splays: tuple
    fixed_angles: tuple
    fixed_x: tuple
    fixed_z: tuple
    fixed_tenting: float
    keyboard_z_offset: float
    extra_width: float
    extra_height: float

    short_columns: tuple
    pinky_15u: bool
    first_15u_row: int
    last_15u_row: int
    extra_top_row_side: str
    extra_top_row_columns: tuple
    encoder_column: Optional[int]
    encoder_post_z: float
    encoder_post_x: float

    thumb_style: ThumbStyle
    thumb_offsets: tuple

    keyswitch_height: float
    keyswitch_width: float
    sa_profile_key_height: float
    sa_length: float
    sa_double_length: float
    plate_thickness: float
    side_nub_thickness: float
    retention_tab_thickness: float
    create_side_nubs: bool
    encoder_height: float
    encoder_width: float

    web_thickness: float
    post_size: float
    wall_z_offset: float
    wall_x_offset: float
    wall_y_offset: float
    wall_thickness: float
    left_wall_x_offset: float
    left_wall_z_offset: float
    back_wall_flat_offsets: dict
    extra_top_row_flat_offsets: dict

    screw_insert_height: float
    screw_insert_bottom_radius: float
    screw_insert_top_radius: float
    screw_insert_wall: tuple
    screw_hole_radius: float
    bottom_plate_thickness: float
    screw_offsets: dict
    pinky_screw_offsets: dict

    controller_cutout: bool
    holder_offsets: dict
    notch_offsets: dict

    ball_side: str
    trackball_radius: float
    trackball_anchor: tuple
    trackball_offset: tuple

    wrist_rest: bool
    wrist_rest_back_height: float
    wrist_rest_angle: float
    wrist_rest_rotation_angle: float
    wrist_rest_ledge: float
    wrist_rest_y_angle: float
    wrist_base_position_x: float
    wrist_base_distance_y: float
    wrist_connector_x: tuple

    @classmethod
    def from_dict(cls, values: dict) -> "KeyboardConfig":
        """
        Build a config from a flat dict of overrides merged over the defaults.
        """
        merged = copy.deepcopy(shape_config)
        unknown = sorted(set(values) - set(merged))
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(unknown)}")
        merged.update(values)

        try:
            merged['column_style'] = ColumnStyle(merged['column_style'])
            merged['thumb_style'] = ThumbStyle(merged['thumb_style'])
        except ValueError as err:
            raise ConfigurationError(str(err)) from err

        for key in ('column_offsets',):
            merged[key] = _vectors(merged[key])
        for key in ('column_rotations', 'column_twists', 'column_splays', 'fixed_angles', 'fixed_x', 'fixed_z',
                    'thumb_offsets', 'screw_insert_wall', 'trackball_offset', 'wrist_connector_x'):
            merged[key] = _floats(merged[key])
        for key in ('short_columns', 'extra_top_row_columns', 'trackball_anchor'):
            merged[key] = tuple(int(v) for v in merged[key])
        for key in ('back_wall_flat_offsets', 'extra_top_row_flat_offsets', 'holder_offsets', 'notch_offsets'):
            merged[key] = _int_keys(merged[key])
        for key in ('screw_offsets', 'pinky_screw_offsets'):
            merged[key] = {name: _floats(vector) for name, vector in merged[key].items()}

        return cls(**merged)

    def __post_init__(self):
        if self.nrows < 2 or self.ncols < 2:
            raise ConfigurationError("nrows and ncols must both be at least 2")

        for name in ('column_offsets', 'column_rotations', 'column_twists', 'column_splays'):
            if len(getattr(self, name)) < self.ncols:
                raise ConfigurationError(f"{name} needs an entry for each of the {self.ncols} columns")

        if any(len(vector) != 3 for vector in self.column_offsets):
            raise ConfigurationError("column_offsets entries must be 3-vectors")

        if not set(self.short_columns) <= set(range(self.ncols)):
            raise ConfigurationError("short_columns must lie inside the grid")
        if not {2, 3} <= set(self.short_columns) or self.ncols < 5:
            raise ConfigurationError("the thumb cluster joins columns 2 and 3 in the last row; both must be short columns")
        if min(self.short_columns) < 2:
            raise ConfigurationError("columns 0 and 1 sit over the thumb cluster and cannot be short columns")

        if not set(self.extra_top_row_columns) <= set(range(self.ncols)):
            raise ConfigurationError("extra_top_row_columns must lie inside the grid")
        if not 1 <= len(self.extra_top_row_columns) <= 3:
            raise ConfigurationError("extra_top_row_columns takes between 1 and 3 columns")
        if sorted(self.extra_top_row_columns) != list(range(min(self.extra_top_row_columns), max(self.extra_top_row_columns) + 1)):
            raise ConfigurationError("extra_top_row_columns must be adjacent columns")
        if self.encoder_column is not None and self.encoder_column not in self.extra_top_row_columns:
            raise ConfigurationError("encoder_column must be one of extra_top_row_columns")

        for name in ('extra_top_row_side', 'ball_side'):
            if getattr(self, name) not in SIDES:
                raise ConfigurationError(f"{name} must be one of {', '.join(SIDES)}")

        if self.pinky_15u and not 0 <= self.first_15u_row <= self.last_15u_row <= self.cornerrow:
            raise ConfigurationError("1.5u rows must satisfy 0 <= first_15u_row <= last_15u_row <= cornerrow")

        if self.ENGINE not in ('solid', 'cadquery'):
            raise ConfigurationError(f"unknown engine {self.ENGINE!r}")

    def replace(self, **changes: Any) -> "KeyboardConfig":
        """
        Return a validated copy with the given fields changed.
        """
        return dataclasses.replace(self, **changes)

    def as_dict(self) -> dict:
        values = dataclasses.asdict(self)
        values['column_style'] = self.column_style.value
        values['thumb_style'] = self.thumb_style.value
        return values

    @property
    def lastrow(self) -> int:
        return self.nrows - 1

    @property
    def cornerrow(self) -> int:
        return self.lastrow - 1

    @property
    def lastcol(self) -> int:
        return self.ncols - 1

    @property
    def centerrow(self) -> int:
        return self.nrows - self.centerrow_offset

    @property
    def mount_width(self) -> float:
        return self.keyswitch_width + 3.2

    @property
    def mount_height(self) -> float:
        return self.keyswitch_height + 2.7

    @property
    def cap_top_height(self) -> float:
        return self.plate_thickness + self.sa_profile_key_height

    @property
    def row_radius(self) -> float:
        return ((self.mount_height + self.extra_height) / 2) / math.sin(self.alpha / 2) + self.cap_top_height

    @property
    def column_radius(self) -> float:
        return ((self.mount_width + self.extra_width) / 2) / math.sin(self.beta / 2) + self.cap_top_height

    @property
    def column_x_delta(self) -> float:
        return -1 - self.column_radius * math.sin(self.beta)


def load_config(path: Optional[pathlib.Path] = None) -> KeyboardConfig:
    """
    Load a JSON configuration file over the defaults, or the defaults alone if no path is given.
    """
    if path is None:
        logging.info("NO CONFIGURATION SPECIFIED, USING DEFAULT CONFIGURATION")
        return KeyboardConfig.from_dict({})

    logging.info("Loading configuration from %s", path)
    with open(path, mode="rt", encoding="utf-8") as fid:
        try:
            values = json.load(fid)
        except json.JSONDecodeError as err:
            raise ConfigurationError(f"{path}: {err}") from err
    if not isinstance(values, dict):
        raise ConfigurationError(f"{path}: expected a JSON object")
    return KeyboardConfig.from_dict(values)
