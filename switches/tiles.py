from enum import IntEnum
from typing import Dict, FrozenSet

from .rooms import Direction, SwitchConstraint


class Tile(IntEnum):
    """
    Tile types reported by the field decoder.

    These carry no drawing information; a renderer maps them to sprites.
    """

    NONE = 0
    REGULAR = 1  # open floor
    DOWNSTAIRS = 2
    UPSTAIRS = 3

    # One-way tiles push whoever stands on them in a fixed direction
    ONE_WAY_LEFT = 4
    ONE_WAY_RIGHT = 5
    ONE_WAY_UP = 6
    ONE_WAY_DOWN = 7
    ONE_WAY_DOWNSTAIRS = 8
    ONE_WAY_UPSTAIRS = 9

    # Switch controls, showing the switch's current state
    SWITCH_0 = 10
    SWITCH_1 = 11

    # Floor gated on one switch of a passage
    SWITCHED_TILE_VALID = 12
    SWITCHED_TILE_INVALID = 13

    GOAL = 14

    @property
    def one_way(self) -> bool:
        return self in ONE_WAY_TILES

    @property
    def is_passable(self) -> bool:
        return self not in IMPASSABLE_TILES

    @property
    def is_switch(self) -> bool:
        return self in (Tile.SWITCH_0, Tile.SWITCH_1)


ONE_WAY_TILES: FrozenSet[Tile] = frozenset(
    {
        Tile.ONE_WAY_LEFT,
        Tile.ONE_WAY_RIGHT,
        Tile.ONE_WAY_UP,
        Tile.ONE_WAY_DOWN,
        Tile.ONE_WAY_DOWNSTAIRS,
        Tile.ONE_WAY_UPSTAIRS,
    }
)

IMPASSABLE_TILES: FrozenSet[Tile] = frozenset({Tile.NONE, Tile.SWITCHED_TILE_INVALID})

# Direction a one-way floor tile forces on the next move
ONE_WAY_DIRECTIONS: Dict[Tile, Direction] = {
    Tile.ONE_WAY_LEFT: Direction.LEFT,
    Tile.ONE_WAY_RIGHT: Direction.RIGHT,
    Tile.ONE_WAY_UP: Direction.UP,
    Tile.ONE_WAY_DOWN: Direction.DOWN,
}


def switched_tile(constraint: SwitchConstraint, state: bool) -> Tile:
    """Tile for one passage constraint given the live state of its switch."""
    if constraint == SwitchConstraint.DONT_CARE:
        return Tile.REGULAR
    if constraint == SwitchConstraint.REQUIRE_FALSE:
        return Tile.SWITCHED_TILE_INVALID if state else Tile.SWITCHED_TILE_VALID
    if constraint == SwitchConstraint.REQUIRE_TRUE:
        return Tile.SWITCHED_TILE_VALID if state else Tile.SWITCHED_TILE_INVALID
    raise AssertionError(f"unknown switch constraint {constraint!r}")
