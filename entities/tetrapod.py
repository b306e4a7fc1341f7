from __future__ import annotations
from typing import Dict, Any, List, Tuple

from asset_compiler import compile_parts
from entity import Character


def _color(rgb: Tuple[int, int, int]) -> str:
    return '#%02x%02x%02x' % rgb


def _box(name, size, position, color) -> Dict[str, Any]:
    return {
        "name": name,
        "shape": "box",
        "dimensions": {"x": size[0], "y": size[1], "z": size[2]},
        "position": {"x": position[0], "y": position[1], "z": position[2]},
        "color": _color(color),
    }


def build_tetrapod_parts(
    body_size: Tuple[float, float, float] = (0.4, 0.4, 0.8),
    leg_size: Tuple[float, float, float] = (0.15, 0.5, 0.15),
    head_size: Tuple[float, float, float] = (0.3, 0.3, 0.3),
    snout_size: Tuple[float, float, float] = (0.2, 0.2, 0.3),
    tail_size: Tuple[float, float, float] = (0.05, 0.05, 0.3),
    body_color: Tuple[int, int, int] = (160, 160, 160),
    leg_color: Tuple[int, int, int] = (140, 140, 140),
    head_color: Tuple[int, int, int] = (150, 150, 150),
    tail_color: Tuple[int, int, int] = (140, 140, 140),
) -> List[Dict[str, Any]]:
    """ Four-legged body facing -z, feet at y = 0. """
    bw, bh, bd = body_size
    lw, lh, ld = leg_size
    body_y = lh + bh / 2
    parts = [_box("body", body_size, (0.0, body_y, 0.0), body_color)]

    # Legs
    leg_positions = {
        "front_left_leg": (-bw / 2 + lw / 2, lh / 2, -bd / 2 + ld / 2),
        "front_right_leg": (bw / 2 - lw / 2, lh / 2, -bd / 2 + ld / 2),
        "back_left_leg": (-bw / 2 + lw / 2, lh / 2, bd / 2 - ld / 2),
        "back_right_leg": (bw / 2 - lw / 2, lh / 2, bd / 2 - ld / 2),
    }
    for name, pos in leg_positions.items():
        parts.append(_box(name, leg_size, pos, leg_color))

    # Head, snout and tail
    head_y = body_y + bh / 2
    head_z = -bd / 2
    parts.append(_box("head", head_size, (0.0, head_y, head_z), head_color))
    parts.append(_box("snout", snout_size,
                      (0.0, head_y - head_size[1] / 4, head_z - head_size[2] / 2 - snout_size[2] / 2),
                      head_color))
    parts.append(_box("tail", tail_size, (0.0, body_y, bd / 2 + tail_size[2] / 2), tail_color))
    return parts


def build_dog_parts() -> List[Dict[str, Any]]:
    return build_tetrapod_parts(
        body_size=(0.3, 0.3, 0.6),
        leg_size=(0.1, 0.3, 0.1),
        head_size=(0.25, 0.25, 0.25),
        snout_size=(0.15, 0.15, 0.2),
        tail_size=(0.04, 0.04, 0.2),
        body_color=(210, 180, 140),
        leg_color=(210, 180, 140),
        head_color=(210, 180, 140),
        tail_color=(210, 180, 140),
    )


DOG_PARTS = build_dog_parts()


class Dog(Character):
    SPEED = 0.1

    def __init__(self, world, position=(0.0, 0.0, 0.0), entity_id=4):
        super().__init__(world, position=position, entity_type="dog")
        self.id = entity_id
        self.controller.speed = self.SPEED
        self.set_body(compile_parts(DOG_PARTS, name="dog"))
