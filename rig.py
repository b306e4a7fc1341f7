"""
Limb classification and walk animation for arbitrary generated rigs.

Generated bodies come with free-form part names ("left_upper_arm",
"Arm_L", "upper_arm_left", "Hoof_R", ...). Classification reads only the
names: a fixed rule table turns each limb-like name into one of four roles,
and the first part claiming a role keeps it. The animator then swings the
classified nodes by phase and never looks at the rest of the tree.
"""
import math
import re

import numpy as np

import config
import logutil

FRONT_LEFT = 'front_left'
FRONT_RIGHT = 'front_right'
BACK_LEFT = 'back_left'
BACK_RIGHT = 'back_right'
ROLES = (FRONT_LEFT, FRONT_RIGHT, BACK_LEFT, BACK_RIGHT)

LIMB_KEYWORDS = ('arm', 'leg', 'hand', 'hoof', 'foot', 'shoe')
# limbs that are not arms or hands count as hind limbs
FRONT_KEYWORDS = ('arm', 'hand')
EXPLICIT_FRONT = ('front', 'fore')
EXPLICIT_BACK = ('back', 'rear', 'hind')


def _tokens(name):
    # "FrontLeftLeg" -> front, left, leg
    spaced = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    return [t for t in re.split(r'[^a-z0-9]+', spaced.lower()) if t]


def _has_word(name, words):
    """ Any token is one of `words`, or one of them fused onto a limb
    keyword ("foreleg", "hindleg").

    """
    for token in _tokens(name):
        for word in words:
            if token == word or (token.startswith(word) and token[len(word):] in LIMB_KEYWORDS):
                return True
    return False


def is_limb(name):
    lowered = name.lower()
    return any(k in lowered for k in LIMB_KEYWORDS)


def is_left(name):
    return 'left' in name.lower() or 'l' in _tokens(name)


def is_right(name):
    return 'right' in name.lower() or 'r' in _tokens(name)


def is_front(name):
    if _has_word(name, EXPLICIT_FRONT):
        return True
    if _has_word(name, EXPLICIT_BACK):
        return False
    lowered = name.lower()
    return any(k in lowered for k in FRONT_KEYWORDS)


def is_back(name):
    return not is_front(name)


def _one_side(name, wanted):
    left, right = is_left(name), is_right(name)
    return left != right and (left if wanted == 'left' else right)


# (predicate, role): each predicate is exclusive of the others, so the
# result does not depend on the order rules are tried in.
RULES = (
    (lambda n: is_limb(n) and is_front(n) and _one_side(n, 'left'), FRONT_LEFT),
    (lambda n: is_limb(n) and is_front(n) and _one_side(n, 'right'), FRONT_RIGHT),
    (lambda n: is_limb(n) and is_back(n) and _one_side(n, 'left'), BACK_LEFT),
    (lambda n: is_limb(n) and is_back(n) and _one_side(n, 'right'), BACK_RIGHT),
)


def role_for(name):
    for predicate, role in RULES:
        if predicate(name):
            return role
    return None


class LimbMap:
    """
    Role -> node index for one body, plus the rest rotation of every
    classified node so poses can be restored exactly.
    """
    def __init__(self, nodes=None, has_limbs=False):
        self.nodes = {role: None for role in ROLES}
        if nodes:
            self.nodes.update(nodes)
        self.has_limbs = has_limbs
        self.rest_rotations = {
            role: node.rotation.copy() for role, node in self.nodes.items() if node is not None
        }

    @property
    def front_left(self):
        return self.nodes[FRONT_LEFT]

    @property
    def front_right(self):
        return self.nodes[FRONT_RIGHT]

    @property
    def back_left(self):
        return self.nodes[BACK_LEFT]

    @property
    def back_right(self):
        return self.nodes[BACK_RIGHT]

    @property
    def is_quadrupedal(self):
        return all(self.nodes[role] is not None for role in ROLES)

    @property
    def is_rigid(self):
        return not self.rest_rotations

    def describe(self):
        return {role: (node.name if node is not None else None) for role, node in self.nodes.items()}


def classify(hierarchy, part_names):
    """
    Classify a compiled body from its part names.

    Only names that resolve to a node in `hierarchy` are used. Nodes that
    receive a role are tagged with it.
    """
    index = {}
    for node in hierarchy.walk():
        if node.name and node.name not in index:
            index[node.name] = node

    has_limbs = False
    found = {}
    for name in part_names:
        if not is_limb(name):
            continue
        has_limbs = True
        role = role_for(name)
        node = index.get(name)
        if role is None or node is None or role in found:
            continue
        found[role] = node
        node.role = role

    limb_map = LimbMap(found, has_limbs=has_limbs)
    gait = 'quadruped' if limb_map.is_quadrupedal else ('biped' if found else 'rigid')
    logutil.log("RIG", f"classified {len(found)} limbs ({gait}): {limb_map.describe()}", level="DEBUG")
    return limb_map


def _swing(limb_map, role, angle):
    node = limb_map.nodes[role]
    if node is None:
        return
    node.rotation = limb_map.rest_rotations[role] + np.array([angle, 0.0, 0.0])


def animate(limb_map, phase):
    """
    Pose the classified limbs for walk `phase` (radians).

    Returns the small vertical body bob for the caller to add to the body's
    height; node positions are never changed.
    """
    if limb_map.is_rigid:
        return 0.0

    if limb_map.is_quadrupedal:
        # diagonal pairs: front-left with back-right
        front = math.sin(phase) * config.QUADRUPED_SWING
        back = math.sin(phase + math.pi) * config.QUADRUPED_SWING
        _swing(limb_map, FRONT_LEFT, front)
        _swing(limb_map, FRONT_RIGHT, -front)
        _swing(limb_map, BACK_LEFT, back)
        _swing(limb_map, BACK_RIGHT, -back)
        return math.sin(phase * 2.0) * config.BODY_BOB

    arms = math.sin(phase) * config.ARM_SWING
    _swing(limb_map, FRONT_LEFT, arms)
    _swing(limb_map, FRONT_RIGHT, -arms)
    legs = math.sin(phase + math.pi) * config.LEG_SWING
    _swing(limb_map, BACK_LEFT, legs)
    _swing(limb_map, BACK_RIGHT, -legs)
    return 0.0


def reset_pose(limb_map):
    """ Remove all swing from the classified limbs. Rotation only. """
    for role, rest in limb_map.rest_rotations.items():
        limb_map.nodes[role].rotation = rest.copy()
