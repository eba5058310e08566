import logging

from .engine import GeometryEngine


def get_engine(name: str) -> GeometryEngine:
    """
    Return the geometry engine registered under `name` ("solid" or "cadquery").
    """
    logging.info("Using engine %s", name)
    if name == "cadquery":
        from .cadquery_engine import CadQueryEngine
        return CadQueryEngine()
    if name == "solid":
        from .solid_engine import SolidPythonEngine
        return SolidPythonEngine()
    raise ValueError(f"unknown engine {name!r}")
