"""
Compile declarative part lists into scene hierarchies.

A part list is what the item generator produces after analysing an image:
an ordered list of parts, each with a name, a shape, shape-specific
dimensions, a parent-local position, Euler rotation in degrees and a colour.

    [{"name": "blade", "shape": "box",
      "dimensions": {"x": 1.5, "y": 8, "z": 0.2},
      "position": {"x": 0, "y": 4.25, "z": 0},
      "rotation": {"x": 0, "y": 0, "z": 0},
      "color": "#696969"}, ...]

Every compiled asset rests on y = 0 and is centred on x/z, so callers can
drop it onto the ground, into a hand or in front of a camera unchanged.
"""
import json
import math

import numpy as np

import config
import logutil
from primitives import Primitive
from scene import SceneNode

SHAPES = ('box', 'prism', 'cylinder', 'sphere', 'capsule')


class AssetCompileError(Exception):
    """ Nothing could be built from the payload. """


def parse_color(value):
    """ Accept '#rrggbb', '0xrrggbb', an int, or an (r, g, b) sequence of
    0..255 values.

    """
    if value is None:
        return config.DEFAULT_PART_COLOR
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith('#'):
            text = text[1:]
        elif text.startswith('0x'):
            text = text[2:]
        if len(text) == 3:
            text = ''.join(c * 2 for c in text)
        if len(text) != 6:
            raise ValueError(f"bad colour {value!r}")
        value = int(text, 16)
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        value = int(value)
        return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    rgb = tuple(int(c) for c in value)
    if len(rgb) != 3 or any(c < 0 or c > 255 for c in rgb):
        raise ValueError(f"bad colour {value!r}")
    return rgb


def _part_color(name, value):
    try:
        return parse_color(value)
    except (TypeError, ValueError) as e:
        logutil.log("ASSET", f"part {name!r}: {e}, using default colour", level="WARN")
        return config.DEFAULT_PART_COLOR


def _vector(data, default=(0.0, 0.0, 0.0)):
    if data is None:
        return np.array(default, dtype=float)
    if isinstance(data, dict):
        v = np.array([data.get('x', 0.0), data.get('y', 0.0), data.get('z', 0.0)], dtype=float)
    else:
        v = np.array(data, dtype=float).ravel()
        if v.shape != (3,):
            raise ValueError(f"expected 3 components, got {data!r}")
    if not np.all(np.isfinite(v)):
        raise ValueError(f"non-finite vector {data!r}")
    return v


def _positive(dimensions, key):
    if key not in dimensions:
        raise ValueError(f"missing dimension {key!r}")
    value = float(dimensions[key])
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"dimension {key!r} must be positive, got {dimensions[key]!r}")
    return value


class PartDescriptor:
    def __init__(self, name, shape, dimensions, position, rotation, color):
        self.name = name
        self.shape = shape
        self.dimensions = dimensions
        self.position = position
        self.rotation = rotation
        self.color = color

    @classmethod
    def from_dict(cls, data):
        """
        Validate one raw part. Rotation, position and colour are optional;
        name, shape and the shape's dimensions are not. Raises ValueError
        (or TypeError/KeyError from malformed input) when the part is unusable.
        """
        if not isinstance(data, dict):
            raise ValueError(f"part is not an object: {data!r}")
        name = str(data.get('name') or '')
        shape = str(data.get('shape', '')).strip().lower()
        raw = data.get('dimensions')
        if not isinstance(raw, dict):
            if shape not in SHAPES:
                raw = {}
            else:
                raise ValueError(f"part {name!r} has no dimensions")
        if shape in ('box', 'prism'):
            dimensions = {k: _positive(raw, k) for k in ('x', 'y', 'z')}
        elif shape == 'sphere':
            dimensions = {'radius': _positive(raw, 'radius')}
        elif shape in ('cylinder', 'capsule'):
            dimensions = {'radius': _positive(raw, 'radius'), 'height': _positive(raw, 'height')}
        else:
            dimensions = dict(raw)
        return cls(
            name=name,
            shape=shape,
            dimensions=dimensions,
            position=_vector(data.get('position')),
            rotation=_vector(data.get('rotation')),
            color=_part_color(name, data.get('color')),
        )

    def __repr__(self):
        return f"PartDescriptor({self.name!r}, {self.shape})"


class CompiledAsset:
    """
    Result of a compile: the hierarchy plus what went into it.

    `root` sits at the identity transform; its children already carry the
    ground-normalising offset. `part_names` lists the parts that were built,
    in order, and `warnings` the parts that were dropped.
    """
    def __init__(self, root, part_names, warnings, name=''):
        self.root = root
        self.part_names = part_names
        self.warnings = warnings
        self.name = name

    def bounds(self):
        return self.root.bounds()

    def node(self, part_name):
        return self.root.find(part_name)


def load_parts(payload):
    """
    Extract the raw part list from whatever the item pipeline handed over:
    a list, a {"components": [...]} or {"parts": [...]} document, or the
    JSON text of either.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode('utf-8')
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise AssetCompileError(f"could not parse part list: {e}") from e
    if isinstance(payload, dict):
        for key in ('components', 'parts'):
            if isinstance(payload.get(key), list):
                return payload[key]
        raise AssetCompileError("payload has no 'components' or 'parts' list")
    if isinstance(payload, list):
        return payload
    raise AssetCompileError(f"unsupported part list payload {type(payload).__name__}")


def _cylinder_segments(name):
    lowered = name.lower()
    if any(k in lowered for k in config.CYLINDER_DETAIL_KEYWORDS):
        return config.CYLINDER_DETAIL_SEGMENTS
    return config.CYLINDER_SEGMENTS


def build_part(part, scale):
    """ Build the positioned node for one validated part, or None for an
    unknown shape.

    """
    dims = part.dimensions
    color = part.color
    if part.shape in ('box', 'prism'):
        size = (dims['x'] * scale, dims['y'] * scale, dims['z'] * scale)
        node = SceneNode(part.name, Primitive('box', color, size=size))
    elif part.shape == 'cylinder':
        node = SceneNode(part.name, Primitive(
            'cylinder', color, radius=dims['radius'] * scale, height=dims['height'] * scale,
            segments=_cylinder_segments(part.name)))
    elif part.shape == 'sphere':
        node = SceneNode(part.name, Primitive('sphere', color, radius=dims['radius'] * scale))
    elif part.shape == 'capsule':
        node = build_capsule(part.name, dims['radius'] * scale, dims['height'] * scale, color)
    else:
        return None
    node.position = part.position * scale
    node.rotation = np.radians(part.rotation)
    return node


def build_capsule(name, radius, height, color):
    """ A rigid group: cylinder body with hemispherical caps at +-height/2. """
    group = SceneNode(name)
    group.add(SceneNode(f"{name}_body", Primitive('cylinder', color, radius=radius, height=height,
                                                  segments=_cylinder_segments(name))))
    group.add(SceneNode(f"{name}_cap_top", Primitive('hemisphere', color, radius=radius, top=True),
                        position=(0.0, height / 2.0, 0.0)))
    group.add(SceneNode(f"{name}_cap_bottom", Primitive('hemisphere', color, radius=radius, top=False),
                        position=(0.0, -height / 2.0, 0.0)))
    return group


def ground_normalize(root):
    """ Shift the root's children so the hierarchy is centred on x/z and its
    lowest point is at y = 0.

    """
    box = root.bounds()
    if box is None:
        return np.zeros(3)
    lo, hi = box
    offset = np.array([-(lo[0] + hi[0]) / 2.0, -lo[1], -(lo[2] + hi[2]) / 2.0])
    for child in root.children:
        child.position = child.position + offset
    return offset


def compile_parts(payload, scale=1.0, name=''):
    """
    Compile a part list into a ground-normalised hierarchy.

    Bad parts are skipped and reported on the result; unknown shapes are
    skipped quietly. Raises AssetCompileError when nothing can be built.
    """
    raw_parts = load_parts(payload)
    if not raw_parts:
        raise AssetCompileError("part list is empty")

    root = SceneNode(name or 'asset')
    built, warnings = [], []
    for index, raw in enumerate(raw_parts):
        try:
            part = PartDescriptor.from_dict(raw)
        except (ValueError, TypeError, KeyError) as e:
            label = raw.get('name') if isinstance(raw, dict) else None
            message = f"part {index} ({label or 'unnamed'}) skipped: {e}"
            warnings.append(message)
            logutil.log("ASSET", message, level="WARN")
            continue
        if part.shape not in SHAPES:
            logutil.log("ASSET", f"part {part.name!r} has unknown shape {part.shape!r}", level="DEBUG")
            continue
        node = build_part(part, scale)
        if node is None:
            continue
        root.add(node)
        built.append(part.name)

    if not built:
        raise AssetCompileError("could not build asset: no valid parts")

    offset = ground_normalize(root)
    logutil.log(
        "ASSET",
        f"compiled {name or 'asset'}: {len(built)} parts, {len(warnings)} skipped, "
        f"offset=({offset[0]:.3f}, {offset[1]:.3f}, {offset[2]:.3f})",
    )
    return CompiledAsset(root, built, warnings, name=name)
