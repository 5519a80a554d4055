"""
Play rules for walking a generated field.

A GameSession owns the mutable side of a game: where the player stands and
which switches are on. It applies the same rules the field was generated
against, so a front end only has to turn input into step() / path_to() calls
and draw whatever Field.tile() reports.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .event_system import EventBus, Event
from .field import Field
from .pathfinding import Path, find_path
from .rooms import Direction
from .tiles import ONE_WAY_DIRECTIONS, Tile

# (x0, y0, x1, y1): half-open tile rectangle a path search may use
Bounds = Tuple[int, int, int, int]

_PLANAR_DIRECTIONS = (Direction.LEFT, Direction.RIGHT, Direction.UP, Direction.DOWN)


@dataclass
class Player:
    """The player's tile position and facing."""

    x: int
    y: int
    z: int = 0
    facing: Direction = Direction.DOWN


class GameSession:
    def __init__(self, field: Field, event_bus: Optional[EventBus] = None) -> None:
        self.field: Field = field
        self.event_bus: Optional[EventBus] = event_bus

        start_x, start_y = field.start_position()
        self.player: Player = Player(start_x, start_y, 0)
        self.switch_states: List[bool] = [False] * field.switch_count
        self.goal_reached: bool = False

        self._emit(Event.SESSION_START, x=start_x, y=start_y, z=0)

    def _emit(self, event: Event, **kwargs) -> None:
        if self.event_bus:
            self.event_bus.emit(event, **kwargs)

    def tile_at(self, x: int, y: int) -> Tile:
        """Tile at (x, y) on the player's floor."""
        tile, _ = self.field.tile(x, y, self.player.z, self.switch_states)
        return tile

    def current_tile(self) -> Tile:
        return self.tile_at(self.player.x, self.player.y)

    def in_field(self, x: int, y: int) -> bool:
        width, height, _ = self.field.tile_size()
        return 0 <= x < width and 0 <= y < height

    def floor_label(self) -> str:
        z = self.player.z
        if z == 0:
            return "GROUND"
        return f"B{z}F"

    def is_passable(
        self,
        x: int,
        y: int,
        target: Optional[Tuple[int, int]] = None,
        bounds: Optional[Bounds] = None,
    ) -> bool:
        """
        Whether a path search may step onto (x, y).

        Switch tiles only count as passable when they are the target, so a
        route never flips a switch on the way somewhere else.
        """
        if bounds is not None:
            x0, y0, x1, y1 = bounds
            if not (x0 <= x < x1 and y0 <= y < y1):
                return False
        if not self.in_field(x, y):
            return False
        tile = self.tile_at(x, y)
        if tile.is_switch:
            return (x, y) == target
        return tile.is_passable

    def path_to(self, target_x: int, target_y: int, bounds: Optional[Bounds] = None) -> Path:
        """Shortest route from the player to (target_x, target_y) on this floor."""
        if not self.in_field(target_x, target_y):
            return []
        if not self.tile_at(target_x, target_y).is_passable:
            return []
        target = (target_x, target_y)
        return find_path(
            lambda x, y: self.is_passable(x, y, target=target, bounds=bounds),
            self.player.x,
            self.player.y,
            target_x,
            target_y,
        )

    def step(self, direction: Direction) -> bool:
        """
        Move the player one tile.

        Standing on a one-way tile overrides the requested direction. Returns
        False if the player could not move.
        """
        if self.goal_reached:
            return False
        if direction not in _PLANAR_DIRECTIONS:
            raise ValueError(f"Players walk in planar directions only, not {direction.name}")
        direction = ONE_WAY_DIRECTIONS.get(self.current_tile(), direction)

        width, height, _ = self.field.tile_size()
        dx, dy, _ = direction.step()
        nx = min(max(self.player.x + dx, 0), width - 1)
        ny = min(max(self.player.y + dy, 0), height - 1)
        if (nx, ny) == (self.player.x, self.player.y):
            return False
        if not self.tile_at(nx, ny).is_passable:
            return False

        self.player.x = nx
        self.player.y = ny
        self.player.facing = direction
        self._emit(Event.PLAYER_MOVED, x=nx, y=ny, z=self.player.z, direction=direction)
        self._arrive()
        return True

    def _arrive(self) -> None:
        """Apply the effect of the tile the player just stepped onto."""
        tile, switch = self.field.tile(
            self.player.x, self.player.y, self.player.z, self.switch_states
        )
        if tile in (Tile.UPSTAIRS, Tile.ONE_WAY_UPSTAIRS):
            self.player.z -= 1
            self._emit(Event.FLOOR_CHANGED, z=self.player.z)
        elif tile in (Tile.DOWNSTAIRS, Tile.ONE_WAY_DOWNSTAIRS):
            self.player.z += 1
            self._emit(Event.FLOOR_CHANGED, z=self.player.z)
        elif tile.is_switch:
            self.switch_states[switch] = not self.switch_states[switch]
            self._emit(Event.SWITCH_TOGGLED, index=switch, state=self.switch_states[switch])
        elif tile == Tile.GOAL:
            self.goal_reached = True
            self._emit(Event.GOAL_REACHED)

    def follow(self, path: Path) -> int:
        """
        Walk along `path` until it ends or a step is blocked. A flipped switch
        or a change of floor also ends the walk, since either can invalidate
        the rest of the path.

        Returns the number of steps taken.
        """
        taken = 0
        for direction in path:
            z = self.player.z
            if not self.step(direction):
                break
            taken += 1
            if self.player.z != z or self.current_tile().is_switch:
                break
        return taken
