"""
Default parameter set.

Every tunable used by the generator lives here; a JSON configuration file overrides any subset
of these keys. Angles are in radians unless the key name says otherwise, lengths in millimeters.
"""
import argparse
import json
import pathlib
import sys
from math import pi
from typing import Optional

shape_config = {

    'ENGINE': 'solid',  # 'solid' (OpenSCAD via SolidPython) or 'cadquery'
    'config_name': "daqtyl",
    'save_dir': '',
    'show_caps': False,

    ######################
    ## Shape parameters ##
    ######################

    'nrows': 4,  # key rows
    'ncols': 6,  # key columns

    'alpha': pi / 12.0,  # curvature of the columns
    'beta': pi / 36.0,  # curvature of the rows
    'centercol': 4,  # controls left_right tilt / tenting (higher number is more tenting)
    'centerrow_offset': 3,  # rows from max, controls front_back tilt
    'tenting_angle': pi / 9.0,  # or, change this for more precise tenting control

    # 'standard', 'orthographic', or 'fixed'
    'column_style': 'standard',

    # one entry per column
    'column_offsets': [
        [0, 0, 0],
        [0, 0, 0],
        [0, 2.82, -4.5],
        [0, 0, 0],
        [0, -12, 5.64],
        [0, -12, 5.64],
    ],
    'column_rotations': [0, 0, 0, 0, 0, 0],
    'column_twists': [0, 0, 0, 0, 0, 0],
    'column_splays': [0, 0, 0, 0, 0, 0],

    # only used with column_style 'fixed'
    'fixed_angles': [pi / 18, pi / 18, 0, 0, 0, -pi / 12, -pi / 12],
    'fixed_x': [-41.5, -22.5, 0, 20.3, 41.4, 65.5, 89.6],  # relative to the middle finger
    'fixed_z': [12.1, 8.3, 0, 5, 10.7, 14.5, 17.5],
    'fixed_tenting': 0,

    'keyboard_z_offset': 8,  # controls overall height
    'extra_width': 2.5,  # extra space between the base of keys
    'extra_height': 0.5,

    # columns that reach down into the last row
    'short_columns': [2, 3],

    # 1.5u keys on the outer column
    'pinky_15u': False,
    'first_15u_row': 0,
    'last_15u_row': 2,

    # extra keys above row 0 (mouse buttons / encoder), 'left', 'right', 'both' or 'none'
    'extra_top_row_side': 'left',
    'extra_top_row_columns': [1, 2, 3],
    'encoder_column': 2,  # column of the extra top row holding the encoder, or None
    'encoder_post_z': 6,  # web post lift around the raised encoder plate
    'encoder_post_x': 1,  # web post spread around the encoder plate

    ############################
    ## Thumb cluster          ##
    ############################

    # 'DEFAULT' 6-key, 'MINI' 5-key, 'CARBONFET' 6-key
    'thumb_style': 'MINI',
    'thumb_offsets': [6, -3, 7],

    ############################
    ## Switch plate           ##
    ############################

    'keyswitch_height': 14.15,
    'keyswitch_width': 14.15,
    'sa_profile_key_height': 12.7,
    'sa_length': 18.25,
    'sa_double_length': 37.5,
    'plate_thickness': 4,
    'side_nub_thickness': 4,
    'retention_tab_thickness': 1.5,
    'create_side_nubs': True,

    'encoder_height': 14.15,
    'encoder_width': 16.0,

    ############################
    ## Web and walls          ##
    ############################

    'web_thickness': 4.5,
    'post_size': 0.1,

    'wall_z_offset': 8,  # length of the first downward_sloping part of the wall
    'wall_x_offset': 5,  # offset in the x and/or y direction for the first downward_sloping part of the wall
    'wall_y_offset': 5,
    'wall_thickness': 2,  # wall thickness parameter

    'left_wall_x_offset': 4,
    'left_wall_z_offset': 1,

    # bottom offset per column for tapering the back wall, applied through the flat brace
    'back_wall_flat_offsets': {'2': 0.43},
    # the same, for columns whose top key sits in the extra top row
    'extra_top_row_flat_offsets': {'2': 0.47},

    ############################
    ## Screw inserts          ##
    ############################

    'screw_insert_height': 6,
    'screw_insert_bottom_radius': 4.2 / 2,
    'screw_insert_top_radius': 4.0 / 2,
    'screw_insert_wall': [3.0, 2.1, 1.1],  # added to bottom radius, top radius, height for the outers
    'screw_hole_radius': 1.7,
    'bottom_plate_thickness': 2.6,

    # tl: column 0 row 0, tr: last column row 0, br: last column last row, tm: column 2 row 0
    'screw_offsets': {
        'tl': [8, 10.5, 0],
        'tr': [-2.5, 6.5, 0],
        'br': [-6, 13, 0],
        'tm': [9.5, -4.5, 0],
    },
    'pinky_screw_offsets': {
        'tr': [1, 7, 0],
        'br': [6.5, 15.5, 0],
    },

    ############################
    ## Controller cutout      ##
    ############################

    'controller_cutout': True,
    'holder_offsets': {'4': -3.5, '5': 0, '6': 2.2},
    'notch_offsets': {'4': 3.35, '5': 0.15, '6': -5.07},

    ############################
    ## Trackball              ##
    ############################

    'ball_side': 'right',  # 'left', 'right', 'both' or 'none'
    'trackball_radius': 44 / 2 + 0.5,  # 44mm ball plus clearance
    'trackball_anchor': [0, 0],  # key the holder is anchored to
    'trackball_offset': [-10, 30, 30],

    ############################
    ## Wrist rest             ##
    ############################

    'wrist_rest': True,
    'wrist_rest_back_height': 23,  # height of the back of the wrist rest
    'wrist_rest_angle': 5,  # degrees
    'wrist_rest_rotation_angle': 9,  # degrees counter clockwise
    'wrist_rest_ledge': 0,  # height of the ledge the silicone wrist rest fits inside
    'wrist_rest_y_angle': 5,  # degrees of tilt left to right
    'wrist_base_position_x': -1,
    'wrist_base_distance_y': -45,  # distance from wrist rest to keyboard
    'wrist_connector_x': [17, -4, -25],  # right, middle, left connector x
}


class GenerateConfigAction(argparse.Action):
    """
    Write the default configuration to a file and exit
    """

    def __init__(self, option_strings, dest: str, **kwargs):
        kwargs.update({
            'type': pathlib.Path,
            'default': argparse.SUPPRESS,
            'help': "Write the default configuration as JSON to the given path and exit.",
        })
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, _parser: argparse.ArgumentParser, _namespace: argparse.Namespace, values: pathlib.Path, _option_string: Optional[str] = None):
        save_config(values)
        sys.exit(0)


def save_config(path: pathlib.Path, config: Optional[dict] = None):
    """
    Dump a configuration dict (the defaults if none is given) as indented JSON.
    """
    with open(path, mode='wt', encoding='utf-8') as fid:
        json.dump(shape_config if config is None else config, fid, indent=4)
        fid.write("\n")
