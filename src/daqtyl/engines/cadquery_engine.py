from functools import reduce
import logging
from collections.abc import Iterable
from pathlib import Path

from cadquery import Edge, Face, Matrix, Shape, Shell, Solid, Vector, Wire
from scipy.spatial import ConvexHull as sphull
from numpy import array, ndarray
from numpy.linalg import matrix_rank

from .engine import GeometryEngine, GeometryExporter


class _CadQueryStepExporter(GeometryExporter[Shape]):
    """
    Exporter for cadquery that can export STEP files
    """

    @staticmethod
    def file_type() -> str:
        return ".step"

    @staticmethod
    def export_geometry(shape: Shape, path: Path) -> bool:
        # STEP headers carry a timestamp, so there is nothing to compare against
        logging.info("Exporting to %s", path)
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        shape.exportStep(str(path))
        return True


class CadQueryEngine(GeometryEngine[Shape]):
    """
    CadQuery geometry engine
    """

    @staticmethod
    def box(width: float, height: float, depth: float) -> Shape:
        return Solid.makeBox(width, height, depth, pnt=Vector(-width / 2, -height / 2, -depth / 2))

    @staticmethod
    def cylinder(radius: float, height: float, segments: int = 100) -> Shape:
        return Solid.makeCylinder(radius, height, pnt=Vector(0, 0, -height / 2))

    @staticmethod
    def sphere(radius: float, segments: int = 100) -> Shape:
        return Solid.makeSphere(radius, angleDegrees1=-90, angleDegrees2=90)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float, segments: int = 100) -> Shape:
        return Solid.makeCone(radius_bottom, radius_top, height, pnt=Vector(0, 0, -height / 2))

    @staticmethod
    def rotate(shape: Shape, euler_degrees: ndarray) -> Shape:
        origin = (0, 0, 0)
        shape = shape.rotate(startVector=origin, endVector=(1, 0, 0), angleDegrees=float(euler_degrees[0]))
        shape = shape.rotate(startVector=origin, endVector=(0, 1, 0), angleDegrees=float(euler_degrees[1]))
        shape = shape.rotate(startVector=origin, endVector=(0, 0, 1), angleDegrees=float(euler_degrees[2]))
        return shape

    @staticmethod
    def translate(shape: Shape, vector: ndarray) -> Shape:
        return shape.translate(Vector(*(float(v) for v in vector)))

    @staticmethod
    def scale(shape: Shape, vector: ndarray) -> Shape:
        x, y, z = (float(v) for v in vector)
        return shape.transformGeometry(Matrix([[x, 0, 0, 0], [0, y, 0, 0], [0, 0, z, 0]]))

    @staticmethod
    def mirror(shape: Shape, plane: str) -> Shape:
        return shape.mirror(plane)

    @staticmethod
    def multmatrix(shape: Shape, matrix: ndarray) -> Shape:
        rows = [[float(v) for v in row] for row in matrix][:3]
        return shape.transformGeometry(Matrix(rows))

    @staticmethod
    def union(shapes: Iterable[Shape]) -> Shape:
        logging.debug("union()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0].copy()
        return reduce(lambda x, y: x.fuse(y), shapes)

    @staticmethod
    def difference(initial_shape: Shape, subtractions: Iterable[Shape]) -> Shape:
        logging.debug("difference()")
        subtractions = list(subtractions)
        if not subtractions:
            return initial_shape.copy()
        return reduce(lambda initial, to_remove: initial.cut(to_remove), subtractions, initial_shape)

    @staticmethod
    def intersect(shapes: Iterable[Shape]) -> Shape:
        logging.debug("intersect()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0].copy()
        return reduce(lambda x, y: x.intersect(y), shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[Shape]) -> Shape:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        vertices = []
        for shape in shapes:
            vertices.extend(v.toTuple() for v in shape.Vertices())

        return CadQueryEngine._hull_from_points(vertices)

    @staticmethod
    def _face_from_points(points):
        edges = []
        num_pnts = len(points)
        for i in range(len(points)):
            p1 = Vector(*points[i])
            p2 = Vector(*points[(i + 1) % num_pnts])
            edges.append(Edge.makeLine(p1, p2))

        return Face.makeFromWires(Wire.assembleEdges(edges))

    @staticmethod
    def _hull_from_points(points):
        hull_calc = sphull(points)

        faces = []
        for simplex in hull_calc.simplices:
            faces.append(CadQueryEngine._face_from_points([points[item] for item in simplex]))

        return Solid.makeSolid(Shell.makeShell(faces))

    @staticmethod
    def _outline(points):
        """
        The convex XY outline of `points`, or None where they project onto a line or a point.
        """
        flat = array([p[:2] for p in points])
        if len(flat) < 3 or matrix_rank(flat - flat.mean(axis=0), tol=1e-6) < 2:
            return None
        outline = sphull(flat)
        return CadQueryEngine._face_from_points([(float(flat[i][0]), float(flat[i][1]), 0.0) for i in outline.vertices])

    @staticmethod
    def _face_shadows(face: Face) -> list:
        vertices, triangles = face.tessellate(0.1)
        points = [v.toTuple() for v in vertices]
        if face.geomType() != "PLANE":
            # curved faces here are insert and nub surfaces, whose shadows are convex
            outlines = [CadQueryEngine._outline(points)]
        else:
            outlines = [CadQueryEngine._outline([points[i] for i in triangle]) for triangle in triangles]
        return [outline for outline in outlines if outline is not None]

    @staticmethod
    def project(shape: Shape) -> Shape:
        """
        The shadow of the shape on the XY plane.

        Planar faces cast the shadows of their triangles, so concave outlines such as the notch
        beside the thumb cluster survive the projection.
        """
        logging.debug("project()")
        shadows = []
        for face in shape.Faces():
            shadows.extend(CadQueryEngine._face_shadows(face))

        if not shadows:
            raise ValueError("shape casts no shadow")
        if len(shadows) == 1:
            return shadows[0]
        return shadows[0].fuse(*shadows[1:]).clean()

    @staticmethod
    def extrude_linear(shape: Shape, height: float) -> Shape:
        solids = [
            Solid.extrudeLinear(face.outerWire(), face.innerWires(), Vector(0, 0, height))
            for face in shape.Faces()
        ]
        return CadQueryEngine.union(solids)

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[Shape]]:
        return [_CadQueryStepExporter]
