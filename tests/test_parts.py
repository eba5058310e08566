import math

from numpy.testing import assert_allclose
import pytest

from daqtyl.parts import (
    POSTS,
    encoder_plate,
    larger_plate,
    post_named,
    sa_cap,
    single_plate,
    web_post,
    web_post_br,
    web_post_tl,
)

from scad_tree import bounding_box, find


def test_plate_sides(config, engine):
    right = single_plate(config, engine, "right")
    left = single_plate(config, engine, "left")
    assert right.name == 'difference'
    assert left.name == 'mirror'
    assert len(find(right, 'hull')) == 2


def test_plate_without_nubs(config, engine):
    plate = single_plate(config.replace(create_side_nubs=False), engine)
    assert not find(plate, 'hull')


def test_plate_spans_the_mount(config, engine):
    low, high = bounding_box(single_plate(config, engine))
    assert_allclose(high[:2] - low[:2], [config.keyswitch_width + 3.6, config.keyswitch_height + 3], atol=1e-9)


def test_web_post_depth(config, engine):
    post = web_post(config, engine)
    low, high = bounding_box(post)
    assert math.isclose(high[2], config.plate_thickness, abs_tol=1e-9)
    assert math.isclose(high[2] - low[2], config.web_thickness, abs_tol=1e-9)


def test_corner_posts(config):
    tl, br = web_post_tl(config), web_post_br(config)
    assert tl.offset[0] == -br.offset[0]
    assert tl.offset[1] == -br.offset[1]
    assert math.isclose(br.offset[0], config.mount_width / 1.95 - config.post_size / 2)
    assert_allclose(tl.point(config), [tl.offset[0], tl.offset[1], config.plate_thickness - config.web_thickness / 2])


def test_post_registry(config):
    for name in POSTS:
        assert len(post_named(config, name).offset) == 3
    with pytest.raises(KeyError):
        post_named(config, 'nowhere')


@pytest.mark.parametrize("units", [1, 1.5, 2])
def test_caps(config, engine, units):
    assert len(find(sa_cap(config, engine, units), 'hull')) == 1


def test_unknown_cap_size(config, engine):
    with pytest.raises(ValueError):
        sa_cap(config, engine, 3)


def test_larger_plate_halves(config, engine):
    assert larger_plate(config, engine, half=True).name == 'translate'
    assert larger_plate(config, engine).name == 'union'


def test_encoder_plate_raised(config, engine):
    low, _ = bounding_box(encoder_plate(config, engine))
    assert math.isclose(low[2], 3.75, abs_tol=1e-9)
