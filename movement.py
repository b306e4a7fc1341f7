import math

import numpy as np

import config
import logutil
from pathing import PathPlanner
from util import angle_delta, is_finite_point, wrap_angle, yaw_towards


class AgentState:
    """
    Per-agent movement state.

    An agent is moving exactly when it has a target; `path_index` points at
    the waypoint currently being walked to.
    """
    def __init__(self, position=(0.0, 0.0, 0.0), facing_angle=0.0):
        self.position = np.array(position, dtype=float)
        self.facing_angle = float(facing_angle)
        self.target_position = None
        self.path = []
        self.path_index = 0
        self.is_walking = False
        self.walk_phase = 0.0

    @property
    def is_moving(self):
        return self.target_position is not None

    def clear_path(self):
        self.target_position = None
        self.path = []
        self.path_index = 0
        self.is_walking = False

    def __repr__(self):
        return (f"AgentState(pos={self.position.tolist()}, yaw={self.facing_angle:.3f}, "
                f"waypoint={self.path_index}/{len(self.path)})")


class MovementController:
    """
    Advances agents along their waypoint lists, one simulation tick at a time.

    Speeds are per reference frame and scaled by the elapsed milliseconds, so
    a move covers the same ground regardless of frame rate.
    """
    def __init__(self, world, planner=None, speed=None, reference_frame_ms=None,
                 arrival_threshold=None, rotation_rate=None, step_length=None):
        self.world = world
        self.planner = planner or PathPlanner(world)
        self.speed = config.MOVE_SPEED if speed is None else speed
        self.reference_frame_ms = config.REFERENCE_FRAME_MS if reference_frame_ms is None else reference_frame_ms
        self.arrival_threshold = config.ARRIVAL_THRESHOLD if arrival_threshold is None else arrival_threshold
        self.rotation_rate = config.ROTATION_RATE if rotation_rate is None else rotation_rate
        self.step_length = config.STEP_LENGTH if step_length is None else step_length

    def move_to(self, agent, point):
        """
        Plan from the agent to a ground point and start walking.

        Returns False, leaving the agent untouched, when the point is invalid
        or unreachable.
        """
        if not is_finite_point(point):
            logutil.log("MOVE", f"ignoring invalid move target {point!r}", level="WARN")
            return False
        target = np.array(point, dtype=float)
        # agents walk at their own height
        target[1] = agent.position[1]
        path = self.planner.plan(agent.position, target)
        if not path:
            logutil.log("MOVE", f"target ({target[0]:.2f}, {target[2]:.2f}) unreachable")
            return False
        self.set_path(agent, path)
        return True

    def set_path(self, agent, path):
        agent.path = [np.array(p, dtype=float) for p in path]
        agent.path_index = 0
        if agent.path:
            agent.target_position = agent.path[0].copy()
        else:
            agent.clear_path()

    def tick(self, agent, delta_ms):
        if agent.target_position is None:
            agent.is_walking = False
            return

        agent.is_walking = True
        direction = agent.target_position - agent.position
        distance = float(np.linalg.norm(direction))
        if not math.isfinite(distance):
            self.force_stop(agent)
            return
        if distance < config.DIRECTION_EPSILON:
            agent.position = agent.target_position.copy()
            self._reach_waypoint(agent)
            return
        if distance < self.arrival_threshold:
            self._reach_waypoint(agent)
            return
        direction /= distance

        frames = max(0.0, float(delta_ms)) / self.reference_frame_ms
        step = min(self.speed * frames, distance)
        candidate = agent.position + direction * step
        moved = step > 0.0 and self.world.is_free(candidate)
        if moved:
            agent.position = candidate
            agent.walk_phase += (self.speed / self.step_length) * frames
        # blocked steps are dropped for this tick only

        if not self._turn_towards(agent, direction, delta_ms):
            self.force_stop(agent)
            return

        if moved and distance - step < self.arrival_threshold:
            self._reach_waypoint(agent)

    def _turn_towards(self, agent, direction, delta_ms):
        if abs(direction[0]) < config.DIRECTION_EPSILON and abs(direction[2]) < config.DIRECTION_EPSILON:
            return True
        diff = angle_delta(agent.facing_angle, yaw_towards(direction))
        fraction = min(self.rotation_rate * max(0.0, float(delta_ms)), 1.0)
        facing = wrap_angle(agent.facing_angle + diff * fraction)
        if not math.isfinite(facing):
            return False
        agent.facing_angle = facing
        return True

    def _reach_waypoint(self, agent):
        agent.path_index += 1
        if agent.path_index < len(agent.path):
            agent.target_position = agent.path[agent.path_index].copy()
            logutil.log("MOVE", f"waypoint {agent.path_index}/{len(agent.path)}", level="DEBUG")
            return
        agent.position = agent.target_position.copy()
        agent.clear_path()
        logutil.log("MOVE", f"arrived at ({agent.position[0]:.2f}, {agent.position[2]:.2f})", level="DEBUG")

    def force_stop(self, agent):
        """ Snap to the current target, when it is a usable point, and go idle. """
        if agent.target_position is not None and is_finite_point(agent.target_position):
            agent.position = agent.target_position.copy()
        agent.clear_path()
        logutil.log("MOVE", "force stop", level="DEBUG")
