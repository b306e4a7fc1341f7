# standard library imports
import json
import sys
import time

# third party imports
import pyglet

# local imports
import config
import logutil
from asset_compiler import AssetCompileError, compile_parts
from entities.player import build_player
from entities.tetrapod import Dog
from entity import Prop
from item_library import ItemLibrary, compile_record
from util import as_point, clamp_frame_ms, is_finite_point
from world_state import create_world


class Game:
    """
    Headless world: one shared WorldState, the player, any NPCs and props.

    `update` is what the frame loop schedules; input layers only ever call
    `handle_move_command` with a ground point.
    """
    def __init__(self, seed=None, tree_count=None, library=None, with_dog=True):
        self.world = create_world(seed=seed, tree_count=tree_count)
        self.player = build_player(self.world)
        self.characters = [self.player]
        if with_dog:
            self.characters.append(Dog(self.world, position=(4.0, 0.0, 4.0)))
        self.props = []
        self.library = library or ItemLibrary()
        self.frame = 0
        self.status = ''

    def update(self, dt):
        """ This method is scheduled to be called repeatedly by the pyglet
        clock.

        Parameters
        ----------
        dt : float
            The change in time since the last call, in seconds.

        """
        self.frame += 1
        logutil.set_frame(self.frame)
        delta_ms = clamp_frame_ms(dt * 1000.0)
        for character in self.characters:
            character.update(delta_ms)
        if config.LOG_MAIN_LOOP:
            logutil.log("FRAME", f"dt={delta_ms:.2f}ms {self.player.to_state_dict()}")
        return delta_ms

    def _ground_point(self, point):
        """ `point` as a finite world position, or None. """
        try:
            target = as_point(point)
        except (TypeError, ValueError, IndexError):
            target = None
        if target is None or not is_finite_point(target):
            logutil.log("MAIN", f"ignoring invalid point {point!r}", level="WARN")
            return None
        return target

    def handle_move_command(self, point, character=None):
        character = character or self.player
        target = self._ground_point(point)
        ok = target is not None and character.move_to(target)
        self.status = '' if ok else 'Cannot reach that spot'
        return ok

    def is_idle(self):
        return not any(c.agent.is_moving for c in self.characters)

    def _compile(self, source, scale):
        """ `source` is an item id in the library or a part-list payload. """
        try:
            if isinstance(source, str) and source.startswith('item_'):
                return compile_record(self.library.get(source), scale=scale)
            return compile_parts(source, scale=scale)
        except (AssetCompileError, KeyError) as e:
            self.status = f"Could not build asset: {e}"
            logutil.log("MAIN", self.status, level="WARN")
            return None

    def equip_item(self, source, scale=None):
        asset = self._compile(source, config.ITEM_SCALE if scale is None else scale)
        if asset is None:
            return None
        self.player.equip(asset)
        return asset

    def set_player_body(self, source, scale=None):
        asset = self._compile(source, config.BODY_SCALE if scale is None else scale)
        if asset is None:
            return None
        self.player.set_body(asset)
        return asset

    def spawn_prop(self, source, position, solid=False, scale=None):
        target = self._ground_point(position)
        if target is None:
            self.status = "Cannot place that there"
            return None
        asset = self._compile(source, config.ITEM_SCALE if scale is None else scale)
        if asset is None:
            return None
        prop = Prop(self.world, asset, position=target, solid=solid)
        self.props.append(prop)
        return prop


def run(game, clock=None, timeout=10.0):
    """ Drive `game` from a pyglet clock until every agent is idle or
    `timeout` seconds pass.

    """
    clock = clock or pyglet.clock.Clock()
    clock.schedule_interval(game.update, 1.0 / config.TICKS_PER_SEC)
    deadline = time.perf_counter() + timeout
    try:
        while time.perf_counter() < deadline:
            clock.tick()
            if game.is_idle():
                break
            time.sleep(clock.get_sleep_time(True) or 0.001)
    finally:
        clock.unschedule(game.update)


def main():
    game = Game()
    if len(sys.argv) > 1:
        path = sys.argv[1]
        with open(path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
        asset = game.equip_item(payload)
        if asset is not None:
            logutil.log("MAIN", f"equipped {path}: {len(asset.part_names)} parts")
    target = (10.0, 0.0, 10.0)
    if len(sys.argv) > 3:
        target = (float(sys.argv[2]), 0.0, float(sys.argv[3]))
    if not game.handle_move_command(target):
        logutil.log("MAIN", game.status)
        return
    run(game)
    logutil.log("MAIN", f"player at {game.player.position.tolist()}")


if __name__ == '__main__':
    main()
