from asset_compiler import compile_parts
from entity import Character

# This file contains the stock player body as a part list, the same format
# the item generator produces. Positions are in world units with the feet
# at y = 0; the compiler re-grounds it anyway.

SKIN = '#e0ac7d'
SHIRT = '#3a6ea5'
TROUSERS = '#283264'
HAIR = '#94795f'


def _part(name, size, position, color, rotation=(0, 0, 0)):
    return {
        'name': name,
        'shape': 'box',
        'dimensions': {'x': size[0], 'y': size[1], 'z': size[2]},
        'position': {'x': position[0], 'y': position[1], 'z': position[2]},
        'rotation': {'x': rotation[0], 'y': rotation[1], 'z': rotation[2]},
        'color': color,
    }


HUMANOID_PARTS = [
    _part('torso', (0.6, 0.8, 0.3), (0.0, 1.3, 0.0), SHIRT),
    _part('head', (0.4, 0.4, 0.4), (0.0, 1.9, 0.0), SKIN),
    _part('hair', (0.44, 0.14, 0.44), (0.0, 2.1, -0.02), HAIR),
    _part('left_arm', (0.2, 0.7, 0.2), (-0.4, 1.35, 0.0), SKIN),
    _part('right_arm', (0.2, 0.7, 0.2), (0.4, 1.35, 0.0), SKIN),
    _part('left_hand', (0.18, 0.18, 0.18), (-0.4, 0.91, 0.0), SKIN),
    _part('right_hand', (0.18, 0.18, 0.18), (0.4, 0.91, 0.0), SKIN),
    _part('left_leg', (0.3, 0.9, 0.3), (-0.15, 0.45, 0.0), TROUSERS),
    _part('right_leg', (0.3, 0.9, 0.3), (0.15, 0.45, 0.0), TROUSERS),
]


def build_player(world, position=(0.0, 0.0, 0.0), parts=None, scale=1.0):
    """ A player character wearing the stock humanoid body, or `parts`. """
    player = Character(world, position=position, entity_type='player')
    player.id = 0
    player.set_body(compile_parts(parts or HUMANOID_PARTS, scale=scale, name='humanoid'))
    return player
