import math

import numpy as np

import logutil


class Circle:
    def __init__(self, radius):
        self.radius = float(radius)

    @property
    def blocking_radius(self):
        return self.radius

    def contains(self, dx, dz, inflate=0.0):
        r = self.radius + inflate
        return dx * dx + dz * dz <= r * r

    def segment_hits(self, ax, az, bx, bz, inflate=0.0):
        """ Closest approach of segment a->b (relative to the centre) is
        inside the circle.

        """
        ex, ez = bx - ax, bz - az
        length_sq = ex * ex + ez * ez
        if length_sq <= 0.0:
            return self.contains(ax, az, inflate)
        t = max(0.0, min(1.0, -(ax * ex + az * ez) / length_sq))
        return self.contains(ax + ex * t, az + ez * t, inflate)

    def __repr__(self):
        return f"Circle(radius={self.radius})"


class Rect:
    """ Axis-aligned rectangle; `width` spans x and `height` spans z. """

    def __init__(self, width, height):
        self.width = float(width)
        self.height = float(height)

    @property
    def blocking_radius(self):
        return math.hypot(self.width / 2.0, self.height / 2.0)

    def contains(self, dx, dz, inflate=0.0):
        return (abs(dx) <= self.width / 2.0 + inflate
                and abs(dz) <= self.height / 2.0 + inflate)

    def segment_hits(self, ax, az, bx, bz, inflate=0.0):
        # slab test against the inflated box
        hx = self.width / 2.0 + inflate
        hz = self.height / 2.0 + inflate
        t0, t1 = 0.0, 1.0
        for start, delta, half in ((ax, bx - ax, hx), (az, bz - az, hz)):
            if abs(delta) < 1e-12:
                if abs(start) > half:
                    return False
                continue
            ta = (-half - start) / delta
            tb = (half - start) / delta
            if ta > tb:
                ta, tb = tb, ta
            t0 = max(t0, ta)
            t1 = min(t1, tb)
            if t0 > t1:
                return False
        return True

    def __repr__(self):
        return f"Rect(width={self.width}, height={self.height})"


class Obstacle:
    """
    A static collidable shape projected onto the ground plane.

    `position` is the (x, z) centre. Obstacles are never changed after
    creation; the registry only adds and removes them.
    """
    def __init__(self, position, shape, blocks_movement=True,
                 blocks_line_of_sight=True, kind='obstacle'):
        self.position = np.array(position, dtype=float).ravel()[:2]
        self.shape = shape
        self.blocks_movement = bool(blocks_movement)
        self.blocks_line_of_sight = bool(blocks_line_of_sight)
        self.kind = kind

    @property
    def blocking_radius(self):
        return self.shape.blocking_radius

    def contains(self, point, inflate=0.0):
        """ `point` is a 3D world position; only x and z are used. """
        dx = float(point[0]) - self.position[0]
        dz = float(point[2]) - self.position[1]
        return self.shape.contains(dx, dz, inflate)

    def intersects_segment(self, start, end, inflate=0.0):
        cx, cz = self.position
        return self.shape.segment_hits(
            float(start[0]) - cx, float(start[2]) - cz,
            float(end[0]) - cx, float(end[2]) - cz,
            inflate,
        )

    def __repr__(self):
        return (f"Obstacle({self.kind} at ({self.position[0]:.2f}, {self.position[1]:.2f}) "
                f"{self.shape!r})")


class ObstacleRegistry:
    """
    Flat list of obstacles in registration order.

    Queries are a linear scan, which is fine for the tens of obstacles a
    world holds. A grid bucket keyed on the ground cell is the place to
    add an index if worlds grow to thousands.
    """
    def __init__(self, obstacles=()):
        self._obstacles = []
        for obstacle in obstacles:
            self.register(obstacle)

    def register(self, obstacle):
        self._obstacles.append(obstacle)
        logutil.log("WORLD", f"register {obstacle!r}", level="DEBUG")
        return obstacle

    def remove(self, obstacle):
        for i, existing in enumerate(self._obstacles):
            if existing is obstacle:
                del self._obstacles[i]
                return True
        return False

    def __iter__(self):
        return iter(self._obstacles)

    def __len__(self):
        return len(self._obstacles)

    def blocking(self):
        return [o for o in self._obstacles if o.blocks_movement]

    def first_containing(self, point, inflate=0.0):
        for obstacle in self._obstacles:
            if obstacle.blocks_movement and obstacle.contains(point, inflate):
                return obstacle
        return None

    def is_free(self, point, inflate=0.0):
        return self.first_containing(point, inflate) is None

    def intersecting(self, start, end, inflate=0.0, line_of_sight=False):
        """ Obstacles crossed by the segment start->end.

        With `line_of_sight` the sight-blocking flag is used instead of the
        movement one.
        """
        hits = []
        for obstacle in self._obstacles:
            flag = obstacle.blocks_line_of_sight if line_of_sight else obstacle.blocks_movement
            if flag and obstacle.intersects_segment(start, end, inflate):
                hits.append(obstacle)
        return hits

    def has_line_of_sight(self, start, end):
        return not self.intersecting(start, end, line_of_sight=True)
