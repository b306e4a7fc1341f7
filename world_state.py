import math
import random

import config
import logutil
from obstacles import Circle, Obstacle, ObstacleRegistry, Rect


class WorldState:
    """
    The static world as seen by the planner and movement code.

    Holds the obstacle registry and answers "can an agent stand here".
    Agents never mutate it; several agents may share one instance.
    """
    def __init__(self, obstacles=None, agent_radius=None):
        self.obstacles = obstacles if obstacles is not None else ObstacleRegistry()
        self.agent_radius = config.AGENT_RADIUS if agent_radius is None else float(agent_radius)

    def is_free(self, point):
        return self.obstacles.is_free(point, inflate=self.agent_radius)

    def blocker_at(self, point):
        return self.obstacles.first_containing(point, inflate=self.agent_radius)


def add_boundary_walls(registry, world_size=None, thickness=None):
    """ Fence a square world of side `world_size` centred on the origin. """
    world_size = config.WORLD_SIZE if world_size is None else world_size
    thickness = config.WALL_THICKNESS if thickness is None else thickness
    offset = world_size / 2.0 + thickness / 2.0
    span = world_size + thickness * 2.0
    walls = [
        Obstacle((0.0, offset), Rect(span, thickness), kind='wall'),
        Obstacle((0.0, -offset), Rect(span, thickness), kind='wall'),
        Obstacle((offset, 0.0), Rect(thickness, world_size), kind='wall'),
        Obstacle((-offset, 0.0), Rect(thickness, world_size), kind='wall'),
    ]
    for wall in walls:
        registry.register(wall)
    return walls


def scatter_trees(registry, count=None, area=None, min_spacing=None,
                  max_attempts=None, trunk_radius=None, rng=None, reserved=()):
    """
    Place up to `count` tree trunks inside an `area` x `area` square,
    keeping trunks at least `min_spacing` apart and away from the
    `reserved` (x, z) spots. A tree that cannot be
    placed within `max_attempts` tries is skipped.
    """
    count = config.TREE_COUNT if count is None else count
    area = config.TREE_AREA if area is None else area
    min_spacing = config.TREE_MIN_SPACING if min_spacing is None else min_spacing
    max_attempts = config.TREE_MAX_ATTEMPTS if max_attempts is None else max_attempts
    trunk_radius = config.TREE_TRUNK_RADIUS if trunk_radius is None else trunk_radius
    rng = rng or random.Random()

    placed = []
    for i in range(count):
        position = None
        for _ in range(max_attempts):
            x = (rng.random() - 0.5) * area
            z = (rng.random() - 0.5) * area
            taken = placed + list(reserved)
            if all(math.hypot(x - px, z - pz) >= min_spacing for px, pz in taken):
                position = (x, z)
                break
        if position is None:
            logutil.log("WORLD", f"could not place tree {i} after {max_attempts} attempts", level="WARN")
            continue
        placed.append(position)
        registry.register(Obstacle(position, Circle(trunk_radius), kind='tree'))
    logutil.log("WORLD", f"created {len(placed)} trees")
    return placed


def create_world(seed=None, tree_count=None):
    rng = random.Random(seed)
    world = WorldState()
    add_boundary_walls(world.obstacles)
    scatter_trees(world.obstacles, count=tree_count, rng=rng, reserved=[(0.0, 0.0)])
    return world
