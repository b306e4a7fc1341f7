import numpy as np

import logutil
import rig
from movement import AgentState, MovementController
from obstacles import Circle, Obstacle


def find_hand_socket(root, limb_map=None):
    """
    The node an equipped item hangs from: a part named like a hand (right
    side first), else the front-right limb, else the body root.
    """
    hands = [n for n in root.walk() if n is not root and 'hand' in n.name.lower()
             and 'handle' not in n.name.lower()]
    for hand in hands:
        if rig.is_right(hand.name) and not rig.is_left(hand.name):
            return hand
    if hands:
        return hands[0]
    if limb_map is not None and limb_map.front_right is not None:
        return limb_map.front_right
    return root


class Character:
    """
    A controllable agent: movement state, a compiled body and an optional
    equipped item.

    Several characters can share one world; all per-agent state lives here.
    """
    def __init__(self, world, position=(0.0, 0.0, 0.0), entity_type='character', controller=None):
        self.id = None
        self.type = entity_type
        self.world = world
        self.agent = AgentState(position)
        self.controller = controller or MovementController(world)

        self.body = None
        self.limb_map = rig.LimbMap()
        self.socket = None
        self.equipped = None
        self.body_bob = 0.0

        # Renderers use this to pick the pose
        self.current_animation = 'idle'

    @property
    def position(self):
        return self.agent.position

    @property
    def rotation(self):
        return self.agent.facing_angle

    def set_body(self, asset):
        """ Replace the body with a compiled asset and re-rig it. The equipped
        item moves to the new hand socket.

        """
        item = self.equipped
        if item is not None:
            self.unequip()
        self.body = asset
        self.limb_map = rig.classify(asset.root, asset.part_names)
        self.socket = find_hand_socket(asset.root, self.limb_map)
        self.body_bob = 0.0
        logutil.log("ENTITY", f"{self.type} body -> {asset.name or 'asset'} "
                              f"(quadrupedal={self.limb_map.is_quadrupedal})")
        if item is not None:
            self.equip(item)

    def equip(self, asset):
        if self.socket is None:
            logutil.log("ENTITY", f"{self.type} has no body to equip {asset.name!r} on", level="WARN")
            return False
        if self.equipped is not None:
            self.unequip()
        self.socket.add(asset.root)
        self.equipped = asset
        logutil.log("ENTITY", f"{self.type} equipped {asset.name or 'item'} on {self.socket.name!r}")
        return True

    def unequip(self):
        item = self.equipped
        if item is None:
            return None
        self.socket.remove(item.root)
        self.equipped = None
        return item

    def move_to(self, point):
        return self.controller.move_to(self.agent, point)

    def stop(self):
        self.controller.force_stop(self.agent)
        self._idle()

    def update(self, delta_ms):
        self.controller.tick(self.agent, delta_ms)
        if self.agent.is_walking:
            self.body_bob = rig.animate(self.limb_map, self.agent.walk_phase)
            self.current_animation = 'walk'
        else:
            self._idle()

    def _idle(self):
        if self.current_animation != 'idle':
            rig.reset_pose(self.limb_map)
            self.body_bob = 0.0
            self.current_animation = 'idle'

    def to_state_dict(self):
        """ Snapshot for renderers and logs. """
        return {
            'id': self.id,
            'type': self.type,
            'pos': self.agent.position.tolist(),
            'rot': self.agent.facing_angle,
            'bob': self.body_bob,
            'animation': self.current_animation,
            'equipped': self.equipped.name if self.equipped is not None else None,
        }


class Prop:
    """
    A compiled asset standing free in the world.

    With `solid` the prop's ground footprint is registered as a circular
    obstacle sized from its bounds.
    """
    def __init__(self, world, asset, position=(0.0, 0.0, 0.0), solid=False):
        self.world = world
        self.asset = asset
        self.position = np.array(position, dtype=float)
        self.obstacle = None
        if solid:
            lo, hi = asset.bounds()
            radius = max(hi[0] - lo[0], hi[2] - lo[2]) / 2.0
            self.obstacle = Obstacle((self.position[0], self.position[2]), Circle(radius), kind='prop')
            world.obstacles.register(self.obstacle)
        logutil.log("ENTITY", f"spawned {asset.name or 'asset'} at {self.position.tolist()}")

    def despawn(self):
        if self.obstacle is not None:
            self.world.obstacles.remove(self.obstacle)
            self.obstacle = None
