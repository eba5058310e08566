"""
Helpers for inspecting OpenSCAD trees: SolidPython objects in memory, or nodes re-read from
rendered .scad text. Both expose `name`, `params` and `children`.
"""
from dataclasses import dataclass, field
import math
import re

import numpy as np


@dataclass
class ScadNode:
    name: str
    params: dict = field(default_factory=dict)
    children: list = field(default_factory=list)


def _rotation(a):
    if not isinstance(a, (list, tuple)):
        a = [0, 0, a]
    x, y, z = (math.radians(v) for v in a)
    rx = np.array([[1, 0, 0], [0, math.cos(x), -math.sin(x)], [0, math.sin(x), math.cos(x)]])
    ry = np.array([[math.cos(y), 0, math.sin(y)], [0, 1, 0], [-math.sin(y), 0, math.cos(y)]])
    rz = np.array([[math.cos(z), -math.sin(z), 0], [math.sin(z), math.cos(z), 0], [0, 0, 1]])
    return rz @ ry @ rx


def node_matrix(node) -> np.ndarray:
    """
    The 4x4 transform a node applies to its children (identity for non-transforms).
    """
    matrix = np.eye(4)
    params = node.params
    if node.name == 'translate':
        matrix[:3, 3] = params['v']
    elif node.name == 'rotate':
        matrix[:3, :3] = _rotation(params['a'])
    elif node.name == 'scale':
        matrix[:3, :3] = np.diag(params['v'])
    elif node.name == 'mirror':
        normal = np.asarray(params['v'], dtype=float)
        normal = normal / np.linalg.norm(normal)
        matrix[:3, :3] = np.eye(3) - 2 * np.outer(normal, normal)
    elif node.name == 'multmatrix':
        m = np.asarray(params['m'], dtype=float)
        matrix[:m.shape[0], :m.shape[1]] = m
    return matrix


def leaves(node, matrix=None):
    """
    Yield (leaf, accumulated transform) for every leaf under `node`.
    """
    matrix = np.eye(4) if matrix is None else matrix
    matrix = matrix @ node_matrix(node)
    if not node.children:
        yield node, matrix
    for child in node.children:
        yield from leaves(child, matrix)


def find(node, name) -> list:
    found = [node] if node.name == name else []
    for child in node.children:
        found.extend(find(child, name))
    return found


def _leaf_corners(node) -> np.ndarray:
    params = node.params
    if node.name == 'cube':
        size = np.asarray(params['size'], dtype=float)
        low = -size / 2 if params.get('center') else np.zeros(3)
        high = low + size
    elif node.name == 'cylinder':
        radius = max(r for r in (params.get('r'), params.get('r1'), params.get('r2')) if r is not None)
        height = params['h']
        z0 = -height / 2 if params.get('center') else 0
        low, high = np.array([-radius, -radius, z0]), np.array([radius, radius, z0 + height])
    elif node.name == 'sphere':
        radius = params['r']
        low, high = np.full(3, -radius), np.full(3, radius)
    else:
        raise ValueError(f"no bounds for {node.name}")
    return np.array([[x, y, z] for x in (low[0], high[0]) for y in (low[1], high[1]) for z in (low[2], high[2])])


def bounding_box(node, matrix=None):
    """
    Axis aligned bounds of the primitives' boxes. Differences are bounded by their first child.
    """
    matrix = np.eye(4) if matrix is None else matrix
    matrix = matrix @ node_matrix(node)
    if not node.children:
        corners = _leaf_corners(node)
        points = (matrix @ np.c_[corners, np.ones(len(corners))].T).T[:, :3]
        return points.min(axis=0), points.max(axis=0)

    children = node.children[:1] if node.name in ('difference', 'intersection') else node.children
    boxes = [bounding_box(child, matrix) for child in children]
    return np.min([low for low, _ in boxes], axis=0), np.max([high for _, high in boxes], axis=0)


##############
## Parsing  ##
##############

_TOKEN = re.compile(r"""
    (?P<number>-?\d+\.?\d*(?:[eE][-+]?\d+)?)
  | (?P<name>\$?[A-Za-z_][A-Za-z0-9_]*)
  | (?P<string>"[^"]*")
  | (?P<punct>[(){}\[\],=;])
""", re.VERBOSE)


def _tokens(text):
    text = re.sub(r"//[^\n]*", "", text)
    position = 0
    for match in _TOKEN.finditer(text):
        skipped = text[position:match.start()]
        if skipped.strip():
            raise ValueError(f"unexpected {skipped.strip()!r}")
        position = match.end()
        yield match.lastgroup, match.group()


class _Parser:

    def __init__(self, text):
        self.tokens = list(_tokens(text))
        self.index = 0

    def peek(self):
        return self.tokens[self.index] if self.index < len(self.tokens) else (None, None)

    def take(self, expected=None):
        kind, value = self.peek()
        if expected is not None and value != expected:
            raise ValueError(f"expected {expected!r}, got {value!r}")
        self.index += 1
        return kind, value

    def value(self):
        kind, token = self.take()
        if token == '[':
            items = []
            while self.peek()[1] != ']':
                items.append(self.value())
                if self.peek()[1] == ',':
                    self.take(',')
            self.take(']')
            return items
        if kind == 'number':
            return float(token)
        if kind == 'string':
            return token[1:-1]
        return {'true': True, 'false': False, 'undef': None}.get(token, token)

    def node(self):
        _, name = self.take()
        self.take('(')
        params = {}
        while self.peek()[1] != ')':
            _, key = self.take()
            self.take('=')
            params[key] = self.value()
            if self.peek()[1] == ',':
                self.take(',')
        self.take(')')

        children = []
        if self.peek()[1] == '{':
            self.take('{')
            while self.peek()[1] != '}':
                children.append(self.node())
            self.take('}')
        else:
            self.take(';')
        return ScadNode(name, params, children)

    def document(self):
        nodes = []
        while self.peek()[0] is not None:
            nodes.append(self.node())
        return nodes


def parse_scad(text) -> ScadNode:
    """
    Read rendered OpenSCAD text back into a tree; several top level nodes are wrapped in a union.
    """
    nodes = _Parser(text).document()
    if len(nodes) == 1:
        return nodes[0]
    return ScadNode('union', {}, nodes)
