import math

import numpy as np

import config
import logutil
from util import as_point, ground_distance


class PathPlanner:
    """
    Plans a short waypoint list from a start to a target on the ground plane.

    Strategy, cheapest first:
      1. the straight segment, if every sample along it is free;
      2. one detour point beside an obstacle straddling the segment;
      3. a radial sweep of points around the start.
    An empty list means the target is unreachable.
    """
    def __init__(self, world, clearance=None, max_stretch=None,
                 sweep_distances=None, sweep_angle_count=None,
                 min_samples=None, sample_spacing=None):
        self.world = world
        self.clearance = config.DETOUR_CLEARANCE if clearance is None else clearance
        self.max_stretch = config.MAX_STRETCH_FACTOR if max_stretch is None else max_stretch
        self.sweep_distances = tuple(config.SWEEP_DISTANCES if sweep_distances is None else sweep_distances)
        self.sweep_angle_count = config.SWEEP_ANGLE_COUNT if sweep_angle_count is None else sweep_angle_count
        self.min_samples = config.PATH_MIN_SAMPLES if min_samples is None else min_samples
        self.sample_spacing = config.PATH_SAMPLE_SPACING if sample_spacing is None else sample_spacing

    def plan(self, start, target):
        start = as_point(start)
        target = as_point(target)

        if not self.world.is_free(target):
            logutil.log("PATH", f"target {target} is inside {self.world.blocker_at(target)!r}")
            return []

        if self.is_direct_path_clear(start, target):
            return [target]

        detour = self.find_detour(start, target)
        if detour is None:
            detour = self.sweep_detour(start, target)
        if detour is None:
            logutil.log("PATH", f"no path from {start} to {target}")
            return []
        logutil.log("PATH", f"detour via ({detour[0]:.2f}, {detour[2]:.2f})", level="DEBUG")
        return [detour, target]

    def sample_count(self, distance):
        return max(self.min_samples, int(math.ceil(distance / self.sample_spacing)))

    def is_direct_path_clear(self, start, target):
        """ Sample the segment start->target (excluding start) against the
        collision oracle.

        """
        distance = ground_distance(start, target)
        if distance < config.SEGMENT_EPSILON:
            return True
        steps = self.sample_count(distance)
        delta = target - start
        for i in range(1, steps + 1):
            if not self.world.is_free(start + delta * (i / steps)):
                return False
        return True

    def stretch_factor(self, start, waypoint, target):
        direct = ground_distance(start, target)
        if direct < config.SEGMENT_EPSILON:
            return 1.0
        return (ground_distance(start, waypoint) + ground_distance(waypoint, target)) / direct

    def straddling_obstacles(self, start, target):
        """
        Movement-blocking obstacles whose centre lies within their blocking
        radius of the segment and projects strictly between its ends.
        """
        distance = ground_distance(start, target)
        if distance < config.SEGMENT_EPSILON:
            return []
        dx = (target[0] - start[0]) / distance
        dz = (target[2] - start[2]) / distance
        inflate = self.world.agent_radius
        found = []
        for obstacle in self.world.obstacles.blocking():
            ox = obstacle.position[0] - start[0]
            oz = obstacle.position[1] - start[2]
            projection = ox * dx + oz * dz
            perpendicular = abs(ox * dz - oz * dx)
            if (perpendicular <= obstacle.blocking_radius + inflate
                    and 0.0 < projection < distance):
                found.append(obstacle)
        return found

    def find_detour(self, start, target):
        distance = ground_distance(start, target)
        if distance < config.SEGMENT_EPSILON:
            return None
        # unit normal of the path direction on the ground plane
        nx = -(target[2] - start[2]) / distance
        nz = (target[0] - start[0]) / distance

        best = None
        best_stretch = self.max_stretch
        for obstacle in self.straddling_obstacles(start, target):
            offset = obstacle.blocking_radius + self.world.agent_radius + self.clearance
            cx, cz = obstacle.position
            for side in (1.0, -1.0):
                candidate = np.array([cx + nx * offset * side, target[1], cz + nz * offset * side])
                if not (self.is_direct_path_clear(start, candidate)
                        and self.is_direct_path_clear(candidate, target)):
                    continue
                stretch = self.stretch_factor(start, candidate, target)
                if stretch < best_stretch:
                    best, best_stretch = candidate, stretch
        return best

    def sweep_detour(self, start, target):
        """
        Try points on rings around the start. Only candidate->target is
        checked; the leg start->candidate is assumed short enough to be safe.
        """
        best = None
        best_stretch = math.inf
        for distance in self.sweep_distances:
            for k in range(self.sweep_angle_count):
                angle = 2.0 * math.pi * k / self.sweep_angle_count
                candidate = np.array([
                    start[0] + math.cos(angle) * distance,
                    target[1],
                    start[2] + math.sin(angle) * distance,
                ])
                if not self.world.is_free(candidate):
                    continue
                if not self.is_direct_path_clear(candidate, target):
                    continue
                stretch = self.stretch_factor(start, candidate, target)
                if stretch < best_stretch:
                    best, best_stretch = candidate, stretch
        return best
