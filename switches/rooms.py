"""
Room lattice for switch-gated dungeons.

Rooms sit in a width x height x depth lattice (plus one extra row below the
grid that holds the goal room). Neighbouring rooms are joined by passages.
A passage is a single record shared by both rooms: each room stores the
passage's index in the graph's passage arena, in the slot for the direction
that leads to the other room.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Direction(Enum):
    """Directions a passage can lead in. Values double as room slot indices."""

    LEFT = 0
    RIGHT = 1
    UP = 2
    DOWN = 3
    UPSTAIRS = 4
    DOWNSTAIRS = 5

    def opposite(self) -> "Direction":
        """Returns the opposite direction."""
        opposites = {
            Direction.LEFT: Direction.RIGHT,
            Direction.RIGHT: Direction.LEFT,
            Direction.UP: Direction.DOWN,
            Direction.DOWN: Direction.UP,
            Direction.UPSTAIRS: Direction.DOWNSTAIRS,
            Direction.DOWNSTAIRS: Direction.UPSTAIRS,
        }
        return opposites[self]

    def step(self) -> Tuple[int, int, int]:
        """Returns the (dx, dy, dz) offset for moving one room in this direction."""
        steps = {
            Direction.LEFT: (-1, 0, 0),
            Direction.RIGHT: (1, 0, 0),
            Direction.UP: (0, -1, 0),
            Direction.DOWN: (0, 1, 0),
            Direction.UPSTAIRS: (0, 0, -1),
            Direction.DOWNSTAIRS: (0, 0, 1),
        }
        return steps[self]


class SwitchConstraint(Enum):
    """What state one switch must be in for a passage to be open."""

    DONT_CARE = 0
    REQUIRE_FALSE = 1
    REQUIRE_TRUE = 2


def _bit(bits: int, index: int) -> bool:
    return (bits >> index) & 1 == 1


@dataclass
class Passage:
    """A gated connection between two adjacent rooms, one constraint per switch."""

    constraints: List[SwitchConstraint]

    @classmethod
    def unconstrained(cls, switch_count: int) -> "Passage":
        """A passage with every switch left as DONT_CARE."""
        return cls([SwitchConstraint.DONT_CARE] * switch_count)

    @property
    def switch_count(self) -> int:
        return len(self.constraints)

    def _forbids(self, index: int, bits: int) -> bool:
        constraint = self.constraints[index]
        if _bit(bits, index):
            return constraint == SwitchConstraint.REQUIRE_FALSE
        return constraint == SwitchConstraint.REQUIRE_TRUE

    def init_randomly(self, bits: int, rng: random.Random) -> None:
        """
        Gate this passage on the switch combination `bits`.

        Each switch is constrained to its current state in `bits`, except that
        with more than one switch a switch is left as DONT_CARE one time in n.
        """
        n = self.switch_count
        for i in range(n):
            if n > 1 and rng.randrange(n) == 0:
                continue
            if _bit(bits, i):
                self.constraints[i] = SwitchConstraint.REQUIRE_TRUE
            else:
                self.constraints[i] = SwitchConstraint.REQUIRE_FALSE

    def allow(self, bits: int) -> None:
        """Relax every constraint that would keep `bits` from passing."""
        for i in range(self.switch_count):
            if self._forbids(i, bits):
                self.constraints[i] = SwitchConstraint.DONT_CARE

    def dont_care_count(self, bits: int) -> int:
        """Number of DONT_CARE entries this passage would have after allow(bits)."""
        return sum(
            1
            for i, constraint in enumerate(self.constraints)
            if constraint == SwitchConstraint.DONT_CARE or self._forbids(i, bits)
        )


@dataclass
class Room:
    """A cell in the room lattice."""

    x: int
    y: int
    z: int
    # passage arena indices, one slot per Direction value
    passages: List[Optional[int]] = field(default_factory=lambda: [None] * 6)
    # switches[i] is True if switch i has a control in this room
    switches: List[bool] = field(default_factory=list)

    @property
    def position(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def has_passage(self, direction: Direction) -> bool:
        return self.passages[direction.value] is not None

    def has_switch(self) -> bool:
        return any(self.switches)

    def owned_switch_count(self) -> int:
        return sum(1 for owned in self.switches if owned)


def room_index(width: int, height: int, x: int, y: int, z: int) -> int:
    """Linear index of room (x, y, z); every floor reserves height + 1 rows."""
    return x + y * width + z * width * (height + 1)


class RoomGraph:
    """
    Rooms plus the passage arena that joins them.

    The graph is the mutable working state of generation. Once generation
    succeeds it is handed to a Field and no longer changed.
    """

    def __init__(self, width: int, height: int, depth: int, switch_count: int) -> None:
        self.width: int = width
        self.height: int = height
        self.depth: int = depth
        self.switch_count: int = switch_count
        self.rooms: List[Optional[Room]] = [None] * (width * (height + 1) * depth)
        self.passages: List[Passage] = []

    def contains(self, x: int, y: int, z: int) -> bool:
        """True if (x, y, z) is a slot of the lattice, goal row included."""
        return 0 <= x < self.width and 0 <= y <= self.height and 0 <= z < self.depth

    def room_at(self, x: int, y: int, z: int) -> Optional[Room]:
        if not self.contains(x, y, z):
            return None
        return self.rooms[room_index(self.width, self.height, x, y, z)]

    def add_room(self, x: int, y: int, z: int) -> Room:
        """Create the room at (x, y, z), or return it if it already exists."""
        existing = self.room_at(x, y, z)
        if existing is not None:
            return existing
        if not self.contains(x, y, z):
            raise ValueError(f"Room ({x}, {y}, {z}) is outside the lattice")
        room = Room(x, y, z, switches=[False] * self.switch_count)
        self.rooms[room_index(self.width, self.height, x, y, z)] = room
        return room

    def iter_rooms(self) -> List[Room]:
        return [room for room in self.rooms if room is not None]

    def passage(self, room: Room, direction: Direction) -> Optional[Passage]:
        """The passage leaving `room` in `direction`, if any."""
        index = room.passages[direction.value]
        if index is None:
            return None
        return self.passages[index]

    def neighbor(self, room: Room, direction: Direction) -> Optional[Room]:
        """The room one step away in `direction`, whether or not they are joined."""
        dx, dy, dz = direction.step()
        return self.room_at(room.x + dx, room.y + dy, room.z + dz)

    def connect(self, room: Room, direction: Direction, passage: Passage) -> int:
        """
        Join `room` to its neighbour in `direction` through `passage`.

        The neighbour room is created if needed and the passage index is
        stored on both sides. Returns the passage's arena index.
        """
        if room.has_passage(direction):
            raise ValueError(f"Room {room.position} already has a {direction.name} passage")
        dx, dy, dz = direction.step()
        other = self.add_room(room.x + dx, room.y + dy, room.z + dz)

        self.passages.append(passage)
        index = len(self.passages) - 1
        room.passages[direction.value] = index
        other.passages[direction.opposite().value] = index
        return index
