import math

import numpy as np
from numpy.testing import assert_allclose
import pytest

from daqtyl.auxiliary import (
    THUMB_SCREW_OFFSETS,
    anchor,
    controller_cutout,
    rest_case_connectors,
    rest_case_cuts,
    screw_insert_holes,
    screw_insert_offsets,
    screw_insert_outers,
    screw_insert_position,
    trackball_cutout,
    trackball_position,
    trackholder,
    usb_holder_position,
    wrist_rest_base,
    wrist_rest_build,
)
from daqtyl.configuration import ThumbStyle
from daqtyl.placement import KeyAt
from daqtyl.walls import wall_locate2, wall_locate3

from scad_tree import find


def test_anchor_reuses_placement(kb):
    offset = (1.0, 2.0, 3.0)
    assert_allclose(anchor(kb, KeyAt(2, 1), offset), kb.placer.position(KeyAt(2, 1), offset))


def test_screw_insert_shift_rules(kb):
    config = kb.config
    placer = kb.placer

    left = screw_insert_position(kb, 0, 1)
    assert_allclose(left, placer.left_key_position(1, 0) + wall_locate3(config, -1, 0))

    right = screw_insert_position(kb, config.lastcol, 0)
    expected = placer.key_position(wall_locate2(config, 1, 0) + [config.mount_width / 2, 0, 0], config.lastcol, 0)
    assert_allclose(right, expected)

    up = screw_insert_position(kb, 2, 0)
    expected = placer.key_position(wall_locate2(config, 0, 1) + [0, config.mount_height / 2, 0], 2, 0)
    assert_allclose(up, expected)

    down = screw_insert_position(kb, 1, config.lastrow)
    expected = placer.key_position(wall_locate2(config, 0, -2.5) - [0, config.mount_height / 2, 0], 1, config.lastrow)
    assert_allclose(down, expected)


def test_screw_offsets_by_thumb_style(make_kb):
    for style in ThumbStyle:
        kb = make_kb(thumb_style=style.value)
        offsets = {(column, row): offset for column, row, offset in screw_insert_offsets(kb)}
        assert len(offsets) == 6
        assert offsets[(0, kb.config.lastrow)] == THUMB_SCREW_OFFSETS[style]['bl']
        assert offsets[(1, kb.config.lastrow)] == THUMB_SCREW_OFFSETS[style]['bm']


def test_pinky_screw_offsets(make_kb):
    kb = make_kb(pinky_15u=True)
    config = kb.config
    offsets = {(column, row): offset for column, row, offset in screw_insert_offsets(kb)}
    assert offsets[(config.lastcol, 0)] == config.pinky_screw_offsets['tr']
    assert offsets[(config.lastcol, config.lastrow)] == config.pinky_screw_offsets['br']


def test_screw_inserts_sit_on_the_floor(kb):
    config = kb.config
    holes = screw_insert_holes(kb)
    placed = holes.children
    assert len(placed) == 6
    for node in placed:
        assert node.name == 'translate'
        assert math.isclose(node.params['v'][2], config.screw_insert_height / 2)
    assert len(find(holes, 'sphere')) == 6


def test_screw_insert_outers_are_larger(kb):
    config = kb.config
    outers = screw_insert_outers(kb)
    cone = find(outers, 'cylinder')[0]
    assert math.isclose(cone.params['r1'], config.screw_insert_bottom_radius + config.screw_insert_wall[0])
    assert math.isclose(cone.params['h'], config.screw_insert_height + config.screw_insert_wall[2])


def test_usb_holder_position(kb):
    config = kb.config
    ref = kb.placer.position(KeyAt(0, 0), wall_locate2(config, 0, -1) - [0, config.mount_height / 2, 0])
    expected = np.array([18.8 + config.holder_offsets[config.nrows], 18.7, 1.3]) + [ref[0], ref[1], 2]
    assert_allclose(usb_holder_position(kb), expected)


def test_controller_cutout_toggle(make_kb):
    assert len(controller_cutout(make_kb())) == 3
    assert controller_cutout(make_kb(controller_cutout=False)) == []


def test_rest_case_cuts(kb):
    cuts = rest_case_cuts(kb)
    assert len(cuts.children) == 9
    assert len(find(rest_case_connectors(kb), 'cylinder')) == 3


def test_wrist_rest_ledge(make_kb):
    plain = wrist_rest_base(make_kb())
    ledged = wrist_rest_base(make_kb(wrist_rest_ledge=2))
    assert len(plain.children) == 2
    assert len(ledged.children) == 3


@pytest.mark.parametrize("side", ['left', 'right'])
def test_wrist_rest_build(kb, side):
    shape = wrist_rest_build(kb, side)
    assert shape.name == 'difference'
    # the case wall cut-outs: three shifted copies of the walls
    assert len(shape.children) == 5


def test_trackball_position(kb):
    config = kb.config
    column, row = config.trackball_anchor
    expected = kb.placer.position(KeyAt(column, row), [0, config.mount_height / 2, 0]) + config.trackball_offset
    assert_allclose(trackball_position(kb), expected)


def test_trackholder(kb):
    holder = trackholder(kb, 30)
    shear = find(holder, 'multmatrix')
    assert len(shear) == 1
    assert shear[0].params['m'][1][2] == 0.15
    pimples = [node for node in find(holder, 'sphere') if node.params['r'] == 2]
    assert len(pimples) == 3


def test_trackball_cutout(kb):
    cutout = trackball_cutout(kb)
    [ball] = find(cutout, 'sphere')
    assert math.isclose(ball.params['r'], kb.config.trackball_radius - 2.9)
