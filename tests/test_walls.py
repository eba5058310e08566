import numpy as np
import pytest
from shapely.geometry import Point, Polygon

from daqtyl.configuration import ThumbStyle
from daqtyl.layout import extra_top_row_enabled, populated_addresses
from daqtyl.parts import post_named
from daqtyl.placement import KeyAt, LeftWallAt, ThumbAt
from daqtyl.walls import (
    BraceEnd,
    back_wall,
    back_wall_patches,
    case_walls,
    footprint,
    front_wall,
    left_wall_patches,
    patches,
    perimeter,
    perimeter_links,
    render_patch,
    thumb_transition_patches,
    thumb_walls,
    wall,
    wall_locate1,
    wall_locate2,
    wall_locate3,
    wall_profile,
)

from scad_tree import find

STYLES = [style.value for style in ThumbStyle]


def test_wall_locates(config):
    assert np.allclose(wall_locate1(config, 1, 0), [config.wall_thickness, 0, -1])
    assert np.allclose(wall_locate2(config, 0, -1), [0, -config.wall_y_offset, -config.wall_z_offset])
    assert np.allclose(
        wall_locate3(config, -1, 1),
        [-(config.wall_x_offset + config.wall_thickness), config.wall_y_offset + config.wall_thickness, -config.wall_z_offset],
    )


@pytest.mark.parametrize("style", STYLES)
@pytest.mark.parametrize("side", ['left', 'right'])
def test_perimeter_has_one_open_link(make_kb, style, side):
    kb = make_kb(thumb_style=style)
    braces = perimeter(kb, side)
    links = perimeter_links(braces)

    assert len(links) == 1
    [(before, after)] = links
    # the thumb cluster meets the left wall through the transition patches
    assert isinstance(before.end.where, ThumbAt)
    assert after.start.where == LeftWallAt(kb.config.cornerrow, -1)


@pytest.mark.parametrize("style", STYLES)
@pytest.mark.parametrize("side", ['left', 'right'])
def test_footprint_contains_every_key(make_kb, style, side):
    kb = make_kb(thumb_style=style)
    outline = Polygon(footprint(kb, perimeter(kb, side)))
    assert outline.is_valid

    config = kb.config
    addresses = populated_addresses(config, extra_top_row_enabled(config, side))
    centres = [kb.placer.position(KeyAt(column, row)) for column, row in addresses]
    centres.extend(kb.placer.position(ThumbAt(name)) for name in kb.cluster.names)
    for x, y, _ in centres:
        assert outline.contains(Point(x, y)), (x, y)


def test_back_wall_follows_top_row(make_kb):
    kb = make_kb(extra_top_row_side='both', extra_top_row_columns=[1, 2, 3])
    braces = back_wall(kb, 'right')
    rows = {brace.start.where.column: brace.start.where.row for brace in braces}
    assert rows == {0: 0, 1: -1, 2: -1, 3: -1, 4: 0, 5: 0}
    # one triangle at each step of the top row
    assert len(back_wall_patches(kb, 'right')) == 2


@pytest.mark.parametrize("side, offset", [('right', 0.43), ('left', 0.47)])
def test_back_wall_flat_offsets(kb, side, offset):
    # the defaults put the extra top row, and column 2 with it, on the left only
    flats = [brace.flat for brace in back_wall(kb, side) if brace.flat is not None]
    assert flats == [(0, offset), (offset, offset), (offset, 0)]


def test_wall_profile(config):
    end = BraceEnd(KeyAt(1, 1), 0, 1, post_named(config, 'tl'))
    shifts = [ref.shift for ref in wall_profile(config, end)]
    assert shifts[0] == (0.0, 0.0, 0.0)
    for shift, locate in zip(shifts[1:], (wall_locate1, wall_locate2, wall_locate3)):
        assert np.allclose(shift, locate(config, 0, 1))

    # a flat offset only moves the skirt
    flat = [ref.shift for ref in wall_profile(config, end, 1)]
    assert flat[:2] == shifts[:2]
    assert np.allclose(flat[2], wall_locate2(config, 0, 0))
    assert np.allclose(flat[3], wall_locate3(config, 0, 0))


def test_single_post_wall(kb):
    end = BraceEnd(KeyAt(1, 1), 0, 1, post_named(kb.config, 'tl'))
    shape = wall(kb, end)
    hulls = find(shape, 'hull')
    assert len(hulls) == 2
    assert len(hulls[0].children) == 4
    assert len(find(shape, 'projection')) == 1


def test_front_wall_drops_under_short_column(kb):
    config = kb.config
    braces = front_wall(kb, 'right')
    step = [
        brace_end for brace in braces for brace_end in (brace.start, brace.end)
        if brace_end.where == KeyAt(4, config.cornerrow) and brace_end.post == post_named(config, 'bl')
    ]
    assert step and all(brace_end.dx == 2 for brace_end in step)

    flats = [brace.flat for brace in braces]
    assert flats == [None, None, None, (0, -1), (-1, -1)]
    assert braces[-1].end == BraceEnd(KeyAt(3, config.lastrow), 0, -1, post_named(config, 'bl'))


@pytest.mark.parametrize("style", STYLES)
def test_thumb_wall_starts_flat(make_kb, style):
    kb = make_kb(thumb_style=style)
    braces = thumb_walls(kb)
    assert braces[0].start.where == KeyAt(3, kb.config.lastrow)
    assert braces[0].flat == (-1, 0)
    assert all(brace.flat is None for brace in braces[1:])


def test_no_step_patches_without_extra_row(make_kb):
    kb = make_kb(extra_top_row_side='none')
    assert back_wall_patches(kb, 'left') == []


def test_left_wall_patches_cover_each_row(kb):
    config = kb.config
    rows = config.cornerrow + 1
    assert len(left_wall_patches(kb, 'right')) == 2 * rows - 1


@pytest.mark.parametrize("style", STYLES)
def test_transition_patches(make_kb, style):
    kb = make_kb(thumb_style=style)
    transitions = thumb_transition_patches(kb)
    assert len(transitions) == 5
    assert sum(patch.bottom for patch in transitions) == 1
    for patch in transitions:
        render_patch(kb, patch)


def test_patch_labels_are_unique(make_kb):
    kb = make_kb(extra_top_row_side='both')
    labels = [patch.label for patch in patches(kb, 'right')]
    assert len(labels) == len(set(labels))


def test_case_walls_render(kb):
    shape = case_walls(kb, 'right')
    # every brace and bottom patch reaches the floor through a projected slab
    floors = len(find(shape, 'projection'))
    bottom_patches = sum(patch.bottom for patch in patches(kb, 'right'))
    assert floors == len(perimeter(kb, 'right')) + bottom_patches
