import math
import os
import random
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from obstacles import Circle, Obstacle, ObstacleRegistry, Rect
from world_state import WorldState, add_boundary_walls, create_world, scatter_trees


def _p(x, z):
    return (x, 0.0, z)


def test_circle_contains_edge_and_inflation():
    tree = Obstacle((10.0, 0.0), Circle(2.5))
    assert tree.contains(_p(10.0, 0.0))
    assert tree.contains(_p(12.5, 0.0))
    assert not tree.contains(_p(12.6, 0.0))
    assert tree.contains(_p(13.0, 0.0), inflate=0.5)


def test_rect_contains_by_half_extents():
    wall = Obstacle((0.0, 0.0), Rect(4.0, 2.0))
    assert wall.contains(_p(1.9, 0.9))
    assert not wall.contains(_p(2.1, 0.0))
    assert not wall.contains(_p(0.0, 1.1))
    assert wall.blocking_radius == math.hypot(2.0, 1.0)


def test_segment_intersection():
    tree = Obstacle((10.0, 0.0), Circle(2.5))
    assert tree.intersects_segment(_p(0, 0), _p(20, 0))
    assert not tree.intersects_segment(_p(0, 5), _p(20, 5))
    # stops short of the trunk
    assert not tree.intersects_segment(_p(0, 0), _p(7, 0))

    wall = Obstacle((5.0, 0.0), Rect(1.0, 10.0))
    assert wall.intersects_segment(_p(0, 0), _p(10, 0))
    assert not wall.intersects_segment(_p(0, 6), _p(10, 6))
    assert wall.intersects_segment(_p(0, 6), _p(10, 6), inflate=1.5)


def test_registry_queries_respect_flags():
    registry = ObstacleRegistry()
    bush = registry.register(Obstacle((0.0, 0.0), Circle(1.0), blocks_movement=False, kind='bush'))
    rock = registry.register(Obstacle((5.0, 0.0), Circle(1.0), blocks_line_of_sight=False, kind='rock'))
    assert len(registry) == 2
    assert registry.is_free(_p(0, 0))
    assert not registry.is_free(_p(5, 0))
    assert registry.blocking() == [rock]
    assert registry.intersecting(_p(-3, 0), _p(3, 0)) == []
    assert registry.intersecting(_p(-3, 0), _p(3, 0), line_of_sight=True) == [bush]
    assert registry.has_line_of_sight(_p(4, -3), _p(4, 3))


def test_registry_remove_is_by_identity():
    registry = ObstacleRegistry()
    a = registry.register(Obstacle((0.0, 0.0), Circle(1.0)))
    twin = Obstacle((0.0, 0.0), Circle(1.0))
    assert not registry.remove(twin)
    assert registry.remove(a)
    assert len(registry) == 0
    assert registry.is_free(_p(0, 0))


def test_world_state_inflates_by_agent_radius():
    registry = ObstacleRegistry([Obstacle((0.0, 0.0), Circle(1.0))])
    thin = WorldState(registry)
    wide = WorldState(registry, agent_radius=1.0)
    assert thin.is_free(_p(1.5, 0))
    assert not wide.is_free(_p(1.5, 0))
    assert wide.blocker_at(_p(1.5, 0)) is not None
    assert thin.blocker_at(_p(1.5, 0)) is None


def test_boundary_walls_fence_the_world():
    registry = ObstacleRegistry()
    walls = add_boundary_walls(registry, world_size=200.0, thickness=2.0)
    assert len(walls) == 4
    assert registry.is_free(_p(99.0, 99.0))
    for point in (_p(101, 0), _p(-101, 0), _p(0, 101), _p(0, -101), _p(101, 101)):
        assert not registry.is_free(point), point


def test_scatter_trees_keeps_spacing_and_reserved_spots():
    registry = ObstacleRegistry()
    placed = scatter_trees(registry, count=15, area=80.0, min_spacing=8.0,
                           rng=random.Random(3), reserved=[(0.0, 0.0)])
    assert len(placed) == len(registry)
    spots = placed + [(0.0, 0.0)]
    for i, (ax, az) in enumerate(spots):
        assert abs(ax) <= 40.0 and abs(az) <= 40.0
        for bx, bz in spots[i + 1:]:
            assert math.hypot(ax - bx, az - bz) >= 8.0
    assert all(o.kind == 'tree' for o in registry)


def test_scatter_trees_gives_up_when_crowded(capsys):
    registry = ObstacleRegistry()
    placed = scatter_trees(registry, count=5, area=1.0, min_spacing=10.0,
                           max_attempts=5, rng=random.Random(0))
    assert len(placed) == 1
    assert "could not place tree" in capsys.readouterr().out


def test_create_world_is_seeded():
    a = [tuple(o.position) for o in create_world(seed=7).obstacles]
    b = [tuple(o.position) for o in create_world(seed=7).obstacles]
    assert a == b
    world = create_world(seed=7)
    assert world.is_free(_p(0.0, 0.0))
