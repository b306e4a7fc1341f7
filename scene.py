import numpy as np
from pyglet.math import Mat4, Vec3

X_AXIS = Vec3(1, 0, 0)
Y_AXIS = Vec3(0, 1, 0)
Z_AXIS = Vec3(0, 0, 1)


def mat4_to_numpy(matrix):
    """ pyglet stores Mat4 column-major; return the row-major 4x4 array. """
    return np.array(tuple(matrix), dtype=float).reshape(4, 4).T


def transform_points(matrix, points):
    m = mat4_to_numpy(matrix)
    return points @ m[:3, :3].T + m[:3, 3]


class SceneNode:
    """
    One node of a composed hierarchy.

    Nodes own their children and keep no reference to their parent, so a
    hierarchy is always a tree. `rotation` holds Euler radians applied in
    X, Y, Z order; `role` is the limb label given by the rig classifier.
    """
    def __init__(self, name='', primitive=None, position=(0.0, 0.0, 0.0),
                 rotation=(0.0, 0.0, 0.0), scale=(1.0, 1.0, 1.0)):
        self.name = name
        self.primitive = primitive
        self.position = np.array(position, dtype=float)
        self.rotation = np.array(rotation, dtype=float)
        self.scale = np.array(scale, dtype=float)
        self.children = []
        self.role = None
        self._attached = False

    def add(self, child):
        if child is self or child._attached or child.contains(self):
            raise ValueError(f"cannot attach {child.name!r} under {self.name!r}")
        child._attached = True
        self.children.append(child)
        return child

    def remove(self, child):
        for i, existing in enumerate(self.children):
            if existing is child:
                del self.children[i]
                child._attached = False
                return True
        return False

    def contains(self, node):
        return any(n is node for n in self.walk())

    def walk(self):
        """ Depth-first, parents before children. """
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, name):
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def local_matrix(self):
        rx, ry, rz = (float(a) for a in self.rotation)
        translation = Mat4.from_translation(Vec3(*(float(p) for p in self.position)))
        rotation = (Mat4.from_rotation(rx, X_AXIS)
                    @ Mat4.from_rotation(ry, Y_AXIS)
                    @ Mat4.from_rotation(rz, Z_AXIS))
        scale = Mat4.from_scale(Vec3(*(float(s) for s in self.scale)))
        return translation @ rotation @ scale

    def iter_world(self, parent_matrix=None):
        """ Yield (node, world matrix) for this subtree. """
        matrix = self.local_matrix()
        if parent_matrix is not None:
            matrix = parent_matrix @ matrix
        yield self, matrix
        for child in self.children:
            yield from child.iter_world(matrix)

    def bounds(self, parent_matrix=None):
        """ Axis-aligned (min, max) of every primitive below this node, or
        None when the subtree has no geometry.

        """
        lo = hi = None
        for node, matrix in self.iter_world(parent_matrix):
            if node.primitive is None:
                continue
            points = transform_points(matrix, node.primitive.vertices)
            pmin, pmax = points.min(axis=0), points.max(axis=0)
            lo = pmin if lo is None else np.minimum(lo, pmin)
            hi = pmax if hi is None else np.maximum(hi, pmax)
        if lo is None:
            return None
        return lo, hi

    def __repr__(self):
        return f"SceneNode({self.name!r}, children={len(self.children)})"
