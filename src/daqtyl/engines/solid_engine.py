from collections.abc import Iterable
import logging
from pathlib import Path

from solid import (
    OpenSCADObject,
    cube,
    cylinder,
    difference,
    hull,
    intersection,
    linear_extrude,
    mirror,
    multmatrix,
    projection,
    rotate,
    scad_render,
    scale,
    sphere,
    translate,
    union,
)
from numpy import ndarray

from .engine import MIRROR_PLANES, GeometryEngine, GeometryExporter


def _vector(values) -> list:
    # solid renders numpy scalars verbatim, so hand it plain floats
    return [float(v) for v in values]


def write_if_changed(text: str, path: Path) -> bool:
    """
    Write `text` to `path` unless the file already holds exactly that text.
    """
    path = Path(path)
    if path.exists() and path.read_text(encoding="utf-8") == text:
        logging.info("Unchanged %s", path)
        return False

    logging.info("Exporting to %s", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return True


class _ScadExporter(GeometryExporter[OpenSCADObject]):
    """
    Exporter for SolidPython that writes OpenSCAD files
    """

    @staticmethod
    def file_type() -> str:
        return ".scad"

    @staticmethod
    def export_geometry(shape: OpenSCADObject, path: Path) -> bool:
        return write_if_changed(SolidPythonEngine.render(shape), path)


class SolidPythonEngine(GeometryEngine[OpenSCADObject]):
    """
    SolidPython geometry engine, producing OpenSCAD CSG trees.
    """

    @staticmethod
    def box(width: float, height: float, depth: float) -> OpenSCADObject:
        return cube(size=_vector((width, height, depth)), center=True)

    @staticmethod
    def cylinder(radius: float, height: float, segments: int = 100) -> OpenSCADObject:
        return cylinder(r=float(radius), h=float(height), center=True, segments=segments)

    @staticmethod
    def sphere(radius: float, segments: int = 100) -> OpenSCADObject:
        return sphere(r=float(radius), segments=segments)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float, segments: int = 100) -> OpenSCADObject:
        return cylinder(r1=float(radius_bottom), r2=float(radius_top), h=float(height), center=True, segments=segments)

    @staticmethod
    def rotate(shape: OpenSCADObject, euler_degrees: ndarray) -> OpenSCADObject:
        return rotate(a=_vector(euler_degrees))(shape)

    @staticmethod
    def translate(shape: OpenSCADObject, vector: ndarray) -> OpenSCADObject:
        return translate(v=_vector(vector))(shape)

    @staticmethod
    def scale(shape: OpenSCADObject, vector: ndarray) -> OpenSCADObject:
        return scale(v=_vector(vector))(shape)

    @staticmethod
    def mirror(shape: OpenSCADObject, plane: str) -> OpenSCADObject:
        return mirror(v=list(MIRROR_PLANES[plane]))(shape)

    @staticmethod
    def multmatrix(shape: OpenSCADObject, matrix: ndarray) -> OpenSCADObject:
        return multmatrix(m=[_vector(row) for row in matrix])(shape)

    @staticmethod
    def union(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0]
        return union()(*shapes)

    @staticmethod
    def difference(initial_shape: OpenSCADObject, subtractions: Iterable[OpenSCADObject]) -> OpenSCADObject:
        subtractions = list(subtractions)
        if not subtractions:
            return initial_shape
        return difference()(initial_shape, *subtractions)

    @staticmethod
    def intersect(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0]
        return intersection()(*shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")
        return hull()(*shapes)

    @staticmethod
    def project(shape: OpenSCADObject) -> OpenSCADObject:
        return projection()(shape)

    @staticmethod
    def extrude_linear(shape: OpenSCADObject, height: float) -> OpenSCADObject:
        return linear_extrude(height=float(height))(shape)

    @staticmethod
    def render(shape: OpenSCADObject) -> str:
        """
        Serialize the tree to OpenSCAD source. The output depends only on the tree.
        """
        return scad_render(shape)

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[OpenSCADObject]]:
        return [_ScadExporter]
