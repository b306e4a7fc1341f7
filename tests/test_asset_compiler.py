import json
import math
import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from asset_compiler import AssetCompileError, compile_parts, load_parts, parse_color

EPS = 1e-9


def _part(name, shape, dimensions, position=(0, 0, 0), rotation=None, color='#ffffff'):
    part = {
        'name': name,
        'shape': shape,
        'dimensions': dimensions,
        'position': {'x': position[0], 'y': position[1], 'z': position[2]},
        'color': color,
    }
    if rotation is not None:
        part['rotation'] = {'x': rotation[0], 'y': rotation[1], 'z': rotation[2]}
    return part


def _extents(asset):
    lo, hi = asset.bounds()
    return hi - lo


def test_single_box_rests_on_ground():
    asset = compile_parts([_part('torso', 'box', {'x': 1, 'y': 1, 'z': 1},
                                 position=(0, 5, 0), rotation=(0, 0, 0))], scale=1.0)
    lo, hi = asset.bounds()
    assert abs(lo[1]) < EPS
    assert abs(hi[1] - 1.0) < EPS
    assert asset.part_names == ['torso']
    assert asset.warnings == []


def test_assets_are_centred_on_x_and_z():
    asset = compile_parts([
        _part('a', 'box', {'x': 1, 'y': 1, 'z': 1}, position=(3, 2, -7)),
        _part('b', 'sphere', {'radius': 0.5}, position=(5, 0, -7)),
    ])
    lo, hi = asset.bounds()
    assert abs(lo[0] + hi[0]) < EPS
    assert abs(lo[2] + hi[2]) < EPS
    assert abs(lo[1]) < EPS
    # the root itself stays put
    assert np.array_equal(asset.root.position, (0.0, 0.0, 0.0))


def test_mixed_rotated_asset_min_y_is_zero():
    asset = compile_parts([
        _part('base', 'cylinder', {'radius': 1, 'height': 0.5}, position=(0, -3, 0), rotation=(15, 0, 30)),
        _part('pole', 'box', {'x': 0.2, 'y': 4, 'z': 0.2}, position=(0, -1, 0), rotation=(0, 45, 10)),
        _part('ball', 'sphere', {'radius': 0.6}, position=(0, 1.5, 0)),
        _part('grip', 'capsule', {'radius': 0.2, 'height': 1}, position=(1, -2, 0), rotation=(0, 0, 90)),
    ], scale=0.2)
    lo, _ = asset.bounds()
    assert abs(lo[1]) < EPS


@pytest.mark.parametrize("part, expected", [
    (_part('crate', 'box', {'x': 1, 'y': 2, 'z': 3}), (2, 4, 6)),
    (_part('wedge', 'prism', {'x': 1, 'y': 2, 'z': 3}), (2, 4, 6)),
    (_part('post', 'cylinder', {'radius': 0.5, 'height': 3}), (2, 6, 2)),
    (_part('orb', 'sphere', {'radius': 1.5}), (6, 6, 6)),
    (_part('pill', 'capsule', {'radius': 0.5, 'height': 2}), (2, 6, 2)),
])
def test_shape_extents_match_dimensions_times_scale(part, expected):
    asset = compile_parts([part], scale=2.0)
    assert np.allclose(_extents(asset), expected, atol=1e-9)


def test_rotation_is_accounted_for_in_extents():
    asset = compile_parts([_part('barrel', 'cylinder', {'radius': 0.5, 'height': 3},
                                 rotation=(0, 0, 90))], scale=1.0)
    assert np.allclose(_extents(asset), (3, 1, 1), atol=1e-9)

    asset = compile_parts([_part('plank', 'box', {'x': 4, 'y': 1, 'z': 2},
                                 rotation=(0, 90, 0))], scale=1.0)
    assert np.allclose(_extents(asset), (2, 1, 4), atol=1e-9)


def test_scale_applies_to_position():
    asset = compile_parts([
        _part('left', 'box', {'x': 1, 'y': 1, 'z': 1}, position=(0, 0, 0)),
        _part('right', 'box', {'x': 1, 'y': 1, 'z': 1}, position=(2, 0, 0)),
    ], scale=2.0)
    assert np.allclose(_extents(asset), (6, 2, 2))


def test_rotation_degrees_become_radians():
    asset = compile_parts([_part('blade', 'box', {'x': 1, 'y': 1, 'z': 1}, rotation=(0, 90, 45))])
    node = asset.node('blade')
    assert np.allclose(node.rotation, (0.0, math.pi / 2, math.pi / 4))


def test_missing_rotation_defaults_to_zero():
    asset = compile_parts([_part('blade', 'box', {'x': 1, 'y': 1, 'z': 1})])
    assert np.array_equal(asset.node('blade').rotation, (0.0, 0.0, 0.0))


def test_capsule_is_a_group_of_three():
    asset = compile_parts([_part('pill', 'capsule', {'radius': 0.5, 'height': 2})])
    group = asset.node('pill')
    assert group.primitive is None
    assert [c.name for c in group.children] == ['pill_body', 'pill_cap_top', 'pill_cap_bottom']
    top = group.children[1]
    assert top.primitive.kind == 'hemisphere'
    assert top.position[1] == 1.0


def test_detail_names_get_finer_cylinders():
    asset = compile_parts([
        _part('sword_handle', 'cylinder', {'radius': 0.1, 'height': 1}),
        _part('shaft', 'cylinder', {'radius': 0.1, 'height': 1}),
    ])
    assert asset.node('sword_handle').primitive.segments == 32
    assert asset.node('shaft').primitive.segments == 16


def test_bad_part_is_skipped_with_warning(capsys):
    asset = compile_parts([
        _part('blade', 'box', {'x': 1, 'y': 4, 'z': 0.2}),
        _part('guard', 'box', {'x': 1}),
        _part('gem', 'sphere', {'radius': -1}),
        'not a part',
    ])
    assert asset.part_names == ['blade']
    assert len(asset.warnings) == 3
    assert 'guard' in asset.warnings[0]
    assert 'WARN' in capsys.readouterr().out


def test_unknown_shape_is_skipped_quietly():
    asset = compile_parts([
        _part('blade', 'box', {'x': 1, 'y': 4, 'z': 0.2}),
        _part('tip', 'cone', {'radius': 1, 'height': 2}),
        {'name': 'glow', 'shape': 'light'},
    ])
    assert asset.part_names == ['blade']
    assert asset.warnings == []
    assert asset.node('tip') is None


def test_total_failure_raises():
    with pytest.raises(AssetCompileError):
        compile_parts([])
    with pytest.raises(AssetCompileError):
        compile_parts([_part('guard', 'box', {'x': 1})])
    with pytest.raises(AssetCompileError):
        compile_parts('{not json')
    with pytest.raises(AssetCompileError):
        compile_parts({'name': 'sword'})
    with pytest.raises(AssetCompileError):
        compile_parts(42)


def test_payload_forms():
    parts = [_part('blade', 'box', {'x': 1, 'y': 4, 'z': 0.2})]
    assert load_parts(parts) is parts
    assert load_parts({'name': 'sword', 'components': parts}) is parts
    assert load_parts({'parts': parts}) is parts
    assert load_parts(json.dumps({'name': 'sword', 'components': parts})) == parts
    assert load_parts(json.dumps(parts).encode('utf-8')) == parts


def test_vector_lists_are_accepted():
    asset = compile_parts([{'name': 'blade', 'shape': 'box',
                            'dimensions': {'x': 1, 'y': 1, 'z': 1},
                            'position': [0, 3, 0], 'rotation': [0, 0, 0], 'color': [10, 20, 30]}])
    assert asset.node('blade').primitive.color == (10, 20, 30)


def test_parse_color():
    assert parse_color('#ff0000') == (255, 0, 0)
    assert parse_color('0x00ff00') == (0, 255, 0)
    assert parse_color(0x0000ff) == (0, 0, 255)
    assert parse_color('#abc') == (170, 187, 204)
    assert parse_color((1, 2, 3)) == (1, 2, 3)
    assert parse_color(None) == (255, 255, 255)
    with pytest.raises(ValueError):
        parse_color('#zz')
    with pytest.raises(ValueError):
        parse_color((300, 0, 0))


def test_bad_colour_keeps_the_part():
    asset = compile_parts([_part('blade', 'box', {'x': 1, 'y': 1, 'z': 1}, color='silver'),
                           _part('gem', 'sphere', {'radius': 0.5}, color=[999, 0, 0])])
    assert asset.part_names == ['blade', 'gem']
    assert asset.warnings == []
    assert asset.node('blade').primitive.color == (255, 255, 255)
    assert asset.node('gem').primitive.color == (255, 255, 255)
