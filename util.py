import math

import numpy as np

import config


def as_point(position):
    """ Return `position` as a float numpy array of length 3.

    Two-element inputs are read as ground-plane (x, z) with y = 0.

    """
    p = np.asarray(position, dtype=float).ravel()
    if p.shape[0] == 2:
        return np.array([p[0], 0.0, p[1]], dtype=float)
    return np.array(p[:3], dtype=float)


def ground_distance(a, b):
    return math.hypot(float(b[0]) - float(a[0]), float(b[2]) - float(a[2]))


def is_finite_point(position):
    try:
        p = np.asarray(position, dtype=float)
    except (TypeError, ValueError):
        return False
    return p.shape == (3,) and bool(np.all(np.isfinite(p)))


def wrap_angle(angle):
    """ Wrap `angle` into (-pi, pi].

    """
    wrapped = (angle + math.pi) % config.FULL_TURN - math.pi
    if wrapped <= -math.pi:
        wrapped += config.FULL_TURN
    return wrapped


def angle_delta(a, b):
    """ Signed shortest rotation taking angle `a` to angle `b`, in (-pi, pi].

    """
    return wrap_angle(b - a)


def yaw_towards(direction):
    """ Yaw that faces `direction`; yaw 0 looks down +z.

    """
    return math.atan2(direction[0], direction[2])


def clamp_frame_ms(delta_ms):
    if not math.isfinite(delta_ms) or delta_ms < 0:
        return 0.0
    return min(float(delta_ms), config.MAX_FRAME_MS)
