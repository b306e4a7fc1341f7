import math
import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from primitives import Primitive, get_box_mesh, get_cylinder_mesh
from scene import SceneNode, mat4_to_numpy


def _box(name, size=(1, 1, 1), **kwargs):
    return SceneNode(name, Primitive('box', size=size), **kwargs)


def test_attach_rejects_cycles_and_second_parents():
    root = SceneNode('root')
    arm = root.add(SceneNode('arm'))
    hand = arm.add(SceneNode('hand'))
    with pytest.raises(ValueError):
        root.add(root)
    with pytest.raises(ValueError):
        hand.add(root)
    with pytest.raises(ValueError):
        SceneNode('other').add(hand)


def test_remove_then_reattach():
    root = SceneNode('root')
    sword = SceneNode('sword')
    left, right = root.add(SceneNode('left')), root.add(SceneNode('right'))
    left.add(sword)
    assert left.remove(sword)
    assert not left.remove(sword)
    right.add(sword)
    assert root.find('sword') is sword
    assert right.contains(sword) and not left.contains(sword)


def test_walk_is_depth_first_parents_first():
    root = SceneNode('root')
    a = root.add(SceneNode('a'))
    a.add(SceneNode('a1'))
    root.add(SceneNode('b'))
    assert [n.name for n in root.walk()] == ['root', 'a', 'a1', 'b']


def test_world_bounds_follow_parent_transforms():
    root = SceneNode('root', position=(10.0, 0.0, 0.0))
    child = root.add(_box('child', size=(2, 2, 2), position=(0.0, 1.0, 0.0)))
    lo, hi = root.bounds()
    assert np.allclose(lo, (9.0, 0.0, -1.0))
    assert np.allclose(hi, (11.0, 2.0, 1.0))

    child.scale = np.array([2.0, 1.0, 1.0])
    lo, hi = root.bounds()
    assert np.allclose(lo, (8.0, 0.0, -1.0))


def test_rotation_order_is_x_then_y_then_z():
    node = SceneNode('n', rotation=(math.pi / 2, 0.0, math.pi / 2))
    m = mat4_to_numpy(node.local_matrix())
    rx = np.array([[1, 0, 0], [0, 0, -1], [0, 1, 0]], dtype=float)
    rz = np.array([[0, -1, 0], [1, 0, 0], [0, 0, 1]], dtype=float)
    assert np.allclose(np.abs(m[:3, :3]), np.abs(rx @ rz), atol=1e-9)


def test_empty_subtree_has_no_bounds():
    root = SceneNode('root')
    root.add(SceneNode('group'))
    assert root.bounds() is None


def test_meshes_are_cached():
    assert get_box_mesh((1, 2, 3))[0] is get_box_mesh((1, 2, 3))[0]
    vertices, indices = get_cylinder_mesh(1.0, 2.0, 8)
    assert vertices.shape == (18, 3)
    assert indices.max() == 17


def test_mesh_cache_is_bounded(monkeypatch):
    import config
    import primitives
    monkeypatch.setattr(config, "MESH_CACHE_SIZE", 4)
    for i in range(10):
        get_box_mesh((1.0 + i, 1.0, 1.0))
    assert len(primitives._mesh_cache) <= 4
    # most recent sizes survive
    assert ('box', 10.0, 1.0, 1.0) in primitives._mesh_cache
