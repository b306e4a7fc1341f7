import math
from collections import OrderedDict

import numpy as np

import config

_mesh_cache = OrderedDict()


def _cached(key):
    mesh = _mesh_cache.get(key)
    if mesh is not None:
        _mesh_cache.move_to_end(key)
    return mesh


def _store(key, mesh):
    _mesh_cache[key] = mesh
    while len(_mesh_cache) > config.MESH_CACHE_SIZE:
        _mesh_cache.popitem(last=False)
    return mesh


def get_box_mesh(size):
    key = ('box',) + tuple(float(s) for s in size)
    mesh = _cached(key)
    if mesh is not None:
        return mesh

    w, h, d = size[0] / 2.0, size[1] / 2.0, size[2] / 2.0

    vertices = np.array([
        # top
        -w, h, -d,   -w, h, d,    w, h, d,    w, h, -d,
        # bottom
        -w, -h, -d,   w, -h, -d,   w, -h, d,   -w, -h, d,
        # left
        -w, -h, -d,  -w, -h, d,   -w, h, d,   -w, h, -d,
        # right
        w, -h, d,    w, -h, -d,   w, h, -d,   w, h, d,
        # front
        -w, -h, d,    w, -h, d,    w, h, d,   -w, h, d,
        # back
        w, -h, -d,   -w, -h, -d,  -w, h, -d,   w, h, -d,
    ], dtype=np.float64).reshape(-1, 3)

    indices = np.array([
         0, 1, 2,  0, 2, 3,    # top
         4, 5, 6,  4, 6, 7,    # bottom
         8, 9,10,  8,10,11,    # left
        12,13,14, 12,14,15,    # right
        16,17,18, 16,18,19,    # front
        20,21,22, 20,22,23     # back
    ], dtype=np.uint32)

    return _store(key, (vertices, indices))


def get_cylinder_mesh(radius, height, segments):
    key = ('cylinder', float(radius), float(height), int(segments))
    mesh = _cached(key)
    if mesh is not None:
        return mesh

    h = height / 2.0
    theta = np.arange(segments) * (2.0 * math.pi / segments)
    ring = np.stack([radius * np.sin(theta), np.zeros(segments), radius * np.cos(theta)], axis=1)
    top = ring + (0.0, h, 0.0)
    bottom = ring - (0.0, h, 0.0)
    centres = np.array([[0.0, h, 0.0], [0.0, -h, 0.0]])
    vertices = np.concatenate([top, bottom, centres])

    tris = []
    top_c, bottom_c = 2 * segments, 2 * segments + 1
    for i in range(segments):
        j = (i + 1) % segments
        tris += [i, segments + i, segments + j,   i, segments + j, j]
        tris += [top_c, i, j]
        tris += [bottom_c, segments + j, segments + i]
    indices = np.array(tris, dtype=np.uint32)

    return _store(key, (vertices, indices))


def get_sphere_mesh(radius, width_segments, height_segments, phi_start=0.0, phi_length=math.pi):
    """
    Latitude/longitude sphere. `phi` runs from the +y pole (0) to the -y
    pole (pi); a hemisphere is the band 0..pi/2 or pi/2..pi.
    """
    key = ('sphere', float(radius), int(width_segments), int(height_segments),
           float(phi_start), float(phi_length))
    mesh = _cached(key)
    if mesh is not None:
        return mesh

    rows = []
    for j in range(height_segments + 1):
        phi = phi_start + phi_length * j / height_segments
        y = radius * math.cos(phi)
        r = radius * math.sin(phi)
        for i in range(width_segments):
            theta = 2.0 * math.pi * i / width_segments
            rows.append((r * math.sin(theta), y, r * math.cos(theta)))
    vertices = np.array(rows, dtype=np.float64)

    tris = []
    for j in range(height_segments):
        for i in range(width_segments):
            a = j * width_segments + i
            b = j * width_segments + (i + 1) % width_segments
            c = a + width_segments
            d = b + width_segments
            tris += [a, c, d, a, d, b]
    indices = np.array(tris, dtype=np.uint32)

    return _store(key, (vertices, indices))


class Primitive:
    """
    A coloured volume centred on its node's origin.

    `kind` is one of box, cylinder, sphere, hemisphere. Dimensions are
    already scaled: `size` for boxes, `radius`/`height` for round shapes.
    """
    def __init__(self, kind, color=config.DEFAULT_PART_COLOR, size=None, radius=None,
                 height=None, segments=None, top=True):
        self.kind = kind
        self.color = tuple(color)
        self.size = None if size is None else tuple(float(s) for s in size)
        self.radius = radius
        self.height = height
        self.segments = segments
        self.top = top

    def mesh(self):
        if self.kind == 'box':
            return get_box_mesh(self.size)
        if self.kind == 'cylinder':
            return get_cylinder_mesh(self.radius, self.height, self.segments or config.CYLINDER_SEGMENTS)
        if self.kind == 'sphere':
            return get_sphere_mesh(self.radius, config.SPHERE_WIDTH_SEGMENTS, config.SPHERE_HEIGHT_SEGMENTS)
        if self.kind == 'hemisphere':
            rings = max(1, config.SPHERE_HEIGHT_SEGMENTS // 2)
            start = 0.0 if self.top else math.pi / 2.0
            return get_sphere_mesh(self.radius, config.SPHERE_WIDTH_SEGMENTS, rings, start, math.pi / 2.0)
        raise ValueError(f"unknown primitive kind {self.kind!r}")

    @property
    def vertices(self):
        return self.mesh()[0]

    def __repr__(self):
        if self.kind == 'box':
            return f"Primitive(box {self.size})"
        return f"Primitive({self.kind} r={self.radius} h={self.height})"
