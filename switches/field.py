import numpy as np
from typing import List, Optional, Sequence, Tuple

from .rooms import Direction, Passage, Room, RoomGraph
from .tiles import Tile, switched_tile

# Type Definition
TileMap = np.ndarray


class Field:
    """
    A generated dungeon: the room lattice and the tile layout derived from it.

    A Field never changes once built. Switch states belong to the caller and
    are passed into every tile query. The Room and Passage records handed out
    by the queries below are the generator's own and must be treated as
    read-only; rooms and passages come back as tuples so the lattice itself
    cannot be resized.

    Each room is drawn as a block of room_size() tiles. With one switch, a
    room on an even floor that has every feature decodes to this 7x5 block
    (U/D stairs, # gated tiles, S the switch, . floor):

        "  .    "
        "U . D  "
        "# # #  "
        ". .S.  "
        ".....#."

    The bottom row's core tile is column 2. The right passage runs off the
    right edge and the up passage off the top edge of column 2.
    """

    def __init__(self, graph: RoomGraph) -> None:
        self._graph: RoomGraph = graph
        self.width: int = graph.width
        self.height: int = graph.height
        self.depth: int = graph.depth
        self.switch_count: int = graph.switch_count

    @property
    def rooms(self) -> Tuple[Optional[Room], ...]:
        return tuple(self._graph.rooms)

    @property
    def passages(self) -> Tuple[Passage, ...]:
        return tuple(self._graph.passages)

    def room_at(self, x: int, y: int, z: int) -> Optional[Room]:
        return self._graph.room_at(x, y, z)

    def iter_rooms(self) -> List[Room]:
        return self._graph.iter_rooms()

    def passage(self, room: Room, direction: Direction) -> Optional[Passage]:
        return self._graph.passage(room, direction)

    def neighbor(self, room: Room, direction: Direction) -> Optional[Room]:
        return self._graph.neighbor(room, direction)

    def goal_room(self) -> Optional[Room]:
        """The room below the grid that holds the goal tile."""
        return self.room_at(self.width - 1, self.height, self.depth - 1)

    def room_size(self) -> Tuple[int, int]:
        """(width, height) of one room block, in tiles."""
        return 5 + 2 * self.switch_count, 4 + self.switch_count

    def tile_size(self) -> Tuple[int, int, int]:
        """(width, height, depth) of the whole field, in tiles."""
        w, h = self.room_size()
        return self.width * w, (self.height + 1) * h, self.depth

    def start_position(self) -> Tuple[int, int]:
        """Tile (x, y) of the start room's core on floor 0."""
        _, h = self.room_size()
        return 2, h - 1

    def tile(self, x: int, y: int, z: int, switch_states: Sequence[bool]) -> Tuple[Tile, int]:
        """
        Decode the tile at (x, y) on floor z.

        Returns the tile and the index of the switch it shows or depends on
        (0 for tiles that involve no switch). Coordinates outside the field
        or in a block without a room decode to NONE.
        """
        if len(switch_states) != self.switch_count:
            raise ValueError(
                f"Expected {self.switch_count} switch states, got {len(switch_states)}"
            )
        tile_w, tile_h, _ = self.tile_size()
        if not (0 <= x < tile_w and 0 <= y < tile_h and 0 <= z < self.depth):
            return Tile.NONE, 0

        w, h = self.room_size()
        room = self.room_at(x // w, y // h, z)
        if room is None:
            return Tile.NONE, 0

        s = self.switch_count
        mx = x % w
        my = y % h
        cx, cy = 2, h - 1
        if mx == cx and my == cy:
            if room is self.goal_room():
                return Tile.GOAL, 0
            return Tile.REGULAR, 0

        # Staircases swap sides on every floor so they line up between floors
        left_stairs: Optional[Direction] = None
        right_stairs: Optional[Direction] = None
        if z % 2 == 0:
            if room.has_passage(Direction.UPSTAIRS):
                left_stairs = Direction.UPSTAIRS
            if room.has_passage(Direction.DOWNSTAIRS):
                right_stairs = Direction.DOWNSTAIRS
        else:
            if room.has_passage(Direction.DOWNSTAIRS):
                left_stairs = Direction.DOWNSTAIRS
            if room.has_passage(Direction.UPSTAIRS):
                right_stairs = Direction.UPSTAIRS

        if my == cy:
            if mx < cx:
                if left_stairs is not None or room.has_passage(Direction.LEFT):
                    return Tile.REGULAR, 0
            elif mx <= cx + s + 1:
                if (
                    right_stairs is not None
                    or room.has_passage(Direction.RIGHT)
                    or room.has_switch()
                ):
                    return Tile.REGULAR, 0
            elif mx < w - 1:
                passage = self.passage(room, Direction.RIGHT)
                if passage is None:
                    return Tile.NONE, 0
                return self._gated(passage, mx - (cx + s + 2), switch_states)
            elif room.has_passage(Direction.RIGHT):
                return Tile.REGULAR, 0
            return Tile.NONE, 0

        if my == cy - 1 and cx + 1 <= mx <= cx + s:
            i = mx - (cx + 1)
            if room.switches[i]:
                return (Tile.SWITCH_1 if switch_states[i] else Tile.SWITCH_0), i
            return Tile.NONE, 0

        if mx == 0:
            if my == 0 or left_stairs is None:
                return Tile.NONE, 0
            return self._stairs(room, left_stairs, my, switch_states)
        if mx == cx:
            passage = self.passage(room, Direction.UP)
            if passage is None:
                return Tile.NONE, 0
            if 1 < my < s + 2:
                return self._gated(passage, my - 2, switch_states)
            return Tile.REGULAR, 0
        if mx == 3 + s:
            if my == 0 or right_stairs is None:
                return Tile.NONE, 0
            return self._stairs(room, right_stairs, my, switch_states)
        return Tile.NONE, 0

    def _gated(self, passage: Passage, index: int, switch_states: Sequence[bool]) -> Tuple[Tile, int]:
        return switched_tile(passage.constraints[index], switch_states[index]), index

    def _stairs(
        self, room: Room, direction: Direction, my: int, switch_states: Sequence[bool]
    ) -> Tuple[Tile, int]:
        """A staircase column: the stair tile, then one gated tile per switch, then floor."""
        if my == 1:
            if direction == Direction.UPSTAIRS:
                return Tile.UPSTAIRS, 0
            return Tile.DOWNSTAIRS, 0
        if 1 < my < self.switch_count + 2:
            passage = self.passage(room, direction)
            assert passage is not None
            return self._gated(passage, my - 2, switch_states)
        return Tile.REGULAR, 0

    def tile_map(self, z: int, switch_states: Sequence[bool]) -> TileMap:
        """Decode a whole floor into a (rows, cols) array of Tile values."""
        cols, rows, _ = self.tile_size()
        tile_map: TileMap = np.zeros((rows, cols), dtype=int)
        for row in range(rows):
            for col in range(cols):
                tile_map[row, col], _ = self.tile(col, row, z, switch_states)
        return tile_map
