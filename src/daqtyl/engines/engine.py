from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Generic, TypeVar

from numpy import ndarray

TGeometry = TypeVar("TGeometry")

# Mirror planes and their normals.
MIRROR_PLANES = {
    "YZ": (1, 0, 0),
    "XZ": (0, 1, 0),
    "XY": (0, 0, 1),
}


class GeometryExporter(ABC, Generic[TGeometry]):
    """
    A class that encapsulates the ability to export geometry.
    """

    @staticmethod
    @abstractmethod
    def file_type() -> str:
        """
        The file extension this exporter supports
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def export_geometry(shape: TGeometry, path: Path) -> bool:
        """
        Export the given shape to path.

        Returns True if the file was written, False if an identical file was already present.
        """
        raise NotImplementedError


class GeometryEngine(ABC, Generic[TGeometry]):
    """
    Engine base class.

    Dimensions are in millimeters, angles passed to `rotate` are in degrees.
    All operations that manipulate shapes return copies; no in-place manipulation is performed.
    Primitive solids are centered on the origin.
    """

    @staticmethod
    @abstractmethod
    def box(width: float, height: float, depth: float) -> TGeometry:
        """
        Create a box with the given dimensions.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def cylinder(radius: float, height: float, segments: int = 100) -> TGeometry:
        """
        Create a cylinder with the given dimensions.

        The number of segments may be provided, but this may be ignored on some engines.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def sphere(radius: float, segments: int = 100) -> TGeometry:
        """
        Create a sphere with the given radius.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def cone(radius_bottom: float, radius_top: float, height: float, segments: int = 100) -> TGeometry:
        """
        Create a cone with the given radii and height.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def rotate(shape: TGeometry, euler_degrees: ndarray) -> TGeometry:
        """
        Rotate the shape by the given euler angles in degrees, and return a copy.

        Rotation is applied about X first, then Y, then Z.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def translate(shape: TGeometry, vector: ndarray) -> TGeometry:
        """
        Translate the given shape, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def scale(shape: TGeometry, vector: ndarray) -> TGeometry:
        """
        Scale the given shape, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def mirror(shape: TGeometry, plane: str) -> TGeometry:
        """
        Mirror the given shape across the named plane ("YZ", "XZ" or "XY"), and return a copy
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def multmatrix(shape: TGeometry, matrix: ndarray) -> TGeometry:
        """
        Apply an affine matrix (3x4 or 4x4, row-major) to the shape, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def union(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the union of multiple other shapes
        It is an error to pass an empty collection.
        If `shapes` contains a single element, a copy is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def difference(initial_shape: TGeometry, subtractions: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the subtraction of multiple shapes from a starting shape.
        If `subtractions` is empty, a copy of `initial_shape` is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def intersect(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the intersection of multiple shapes.
        It is an error to pass an empty collection.
        If `shapes` contains a single element, a copy is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def convex_hull(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Construct a convex hull from the collection of multiple shapes.
        It is an error to pass an empty collection.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def project(shape: TGeometry) -> TGeometry:
        """
        Project the shape onto the XY plane, producing a 2D outline.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def extrude_linear(shape: TGeometry, height: float) -> TGeometry:
        """
        Extrude a 2D outline along +Z by `height`.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def exporters() -> Iterable[GeometryExporter[TGeometry]]:
        """
        Get the exporters this engine supports.
        """
        raise NotImplementedError
