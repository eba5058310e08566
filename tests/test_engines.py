import math

import numpy as np
from numpy.testing import assert_allclose
import pytest

from daqtyl.auxiliary import screw_insert_shape
from daqtyl.engines import get_engine
from daqtyl.engines.solid_engine import SolidPythonEngine, write_if_changed
from daqtyl.layout import key_holes
from daqtyl.model import Keyboard
from daqtyl.parts import single_plate
from daqtyl.placement import KeyAt
from daqtyl.walls import bottom_hull

from scad_tree import bounding_box, find, parse_scad


def test_get_engine():
    assert isinstance(get_engine("solid"), SolidPythonEngine)
    with pytest.raises(ValueError):
        get_engine("blender")


def test_primitives_are_centred(engine):
    box = engine.box(1, 2, 3)
    assert box.params['center'] is True
    assert box.params['size'] == [1.0, 2.0, 3.0]
    cylinder = engine.cylinder(2, 4, segments=12)
    assert cylinder.params['center'] is True


@pytest.mark.parametrize("method", ['union', 'intersect', 'convex_hull'])
def test_empty_input_rejected(engine, method):
    with pytest.raises(ValueError, match="shapes cannot be empty"):
        getattr(engine, method)([])


def test_single_union_is_the_shape(engine):
    box = engine.box(1, 1, 1)
    assert engine.union([box]) is box
    assert engine.difference(box, []) is box


def test_transforms_render_plain_floats(engine):
    shape = engine.translate(engine.box(1, 1, 1), np.array([1, 2, 3]))
    assert all(type(v) is float for v in shape.params['v'])
    assert parse_scad(engine.render(shape)).params['v'] == [1.0, 2.0, 3.0]


def test_mirror_planes(engine):
    assert engine.mirror(engine.box(1, 1, 1), 'YZ').params['v'] == [1, 0, 0]
    assert engine.mirror(engine.box(1, 1, 1), 'XZ').params['v'] == [0, 1, 0]


def test_render_is_deterministic(kb):
    first = kb.engine.render(key_holes(kb, "left"))
    second = kb.engine.render(key_holes(kb, "left"))
    assert first == second


def test_round_trip_bounding_box(kb):
    shape = kb.placer.place(KeyAt(0, 0), single_plate(kb.config, kb.engine))
    shape = kb.engine.union([shape, kb.placer.place(KeyAt(3, 2), single_plate(kb.config, kb.engine))])
    text = kb.engine.render(shape)
    parsed = parse_scad(text)

    assert len(find(parsed, 'cube')) == len(find(shape, 'cube'))
    low, high = bounding_box(shape)
    parsed_low, parsed_high = bounding_box(parsed)
    assert_allclose(parsed_low, low, atol=1e-6)
    assert_allclose(parsed_high, high, atol=1e-6)
    volume = np.prod(high - low)
    assert math.isclose(np.prod(parsed_high - parsed_low), volume, rel_tol=1e-6)


def test_write_if_changed(tmp_path):
    path = tmp_path / "out" / "part.scad"
    assert write_if_changed("cube();\n", path)
    mtime = path.stat().st_mtime_ns
    assert not write_if_changed("cube();\n", path)
    assert path.stat().st_mtime_ns == mtime
    assert write_if_changed("sphere();\n", path)
    assert path.read_text(encoding="utf-8") == "sphere();\n"


def test_scad_exporter(tmp_path, engine):
    [exporter] = engine.exporters()
    assert exporter.file_type() == ".scad"
    path = tmp_path / "box.scad"
    assert exporter.export_geometry(engine.box(1, 1, 1), path)
    assert "cube" in path.read_text(encoding="utf-8")


def test_cadquery_engine():
    pytest.importorskip("cadquery")
    engine = get_engine("cadquery")
    box = engine.translate(engine.box(2, 2, 2), (1, 0, 0))
    hull = engine.convex_hull([box, engine.translate(engine.box(2, 2, 2), (5, 0, 0))])
    bounds = hull.BoundingBox()
    assert math.isclose(bounds.xmin, 0, abs_tol=1e-6)
    assert math.isclose(bounds.xmax, 6, abs_tol=1e-6)
    assert [exporter.file_type() for exporter in engine.exporters()] == [".step"]


@pytest.fixture
def cadquery_kb(config):
    pytest.importorskip("cadquery")
    return Keyboard(config.replace(ENGINE="cadquery"), get_engine("cadquery"))


def test_cadquery_switch_plate(cadquery_kb):
    config = cadquery_kb.config
    bounds = single_plate(config, cadquery_kb.engine).BoundingBox()
    assert math.isclose(bounds.xlen, config.keyswitch_width + 3.6, abs_tol=1e-3)
    assert math.isclose(bounds.ylen, config.keyswitch_height + 3, abs_tol=1e-3)
    assert math.isclose(bounds.zmax, config.plate_thickness, abs_tol=1e-3)


def test_cadquery_screw_insert(cadquery_kb):
    bounds = screw_insert_shape(cadquery_kb, 2, 1.5, 4).BoundingBox()
    assert math.isclose(bounds.zmin, -2, abs_tol=1e-3)
    assert math.isclose(bounds.zmax, 3.5, abs_tol=1e-3)


def test_cadquery_bottom_hull_reaches_floor(cadquery_kb):
    engine = cadquery_kb.engine
    posts = [engine.translate(engine.box(1, 1, 1), (x, y, 5)) for x, y in [(0, 0), (4, 0), (0, 4)]]
    bounds = bottom_hull(cadquery_kb, posts).BoundingBox()
    assert math.isclose(bounds.zmin, -10, abs_tol=1e-3)
    assert math.isclose(bounds.zmax, 5.5, abs_tol=1e-3)


def test_cadquery_projection_keeps_concave_outline():
    pytest.importorskip("cadquery")
    engine = get_engine("cadquery")
    # an L: 10x2 along x, and 2x10 rising from its right end
    shape = engine.union([
        engine.box(10, 2, 2),
        engine.translate(engine.box(2, 10, 2), (4, 4, 0)),
    ])
    outline = engine.project(shape)
    assert math.isclose(outline.Area(), 36, rel_tol=1e-6)
    slab = engine.extrude_linear(outline, 1.5)
    assert math.isclose(slab.Volume(), 54, rel_tol=1e-6)
