"""Unit tests for verifying generated fields are connected and solvable."""

import random
from collections import deque
from typing import Deque, Iterable, Set, Tuple

import pytest

from switches.config import FieldConfig
from switches.field import Field
from switches.field_gen import GenerationError, _random_walk, generate_field, new_field
from switches.rooms import Direction, Room, SwitchConstraint
from switches.tiles import Tile

FIELD_SIZES = [
    (1, 1, 1, 0),
    (2, 2, 1, 1),
    (3, 3, 1, 2),
    (3, 3, 2, 2),
    (2, 2, 3, 3),
    (4, 3, 2, 2),
]


class ScriptedRandom(random.Random):
    """A random source that hands out a fixed list of randrange() results."""

    def __init__(self, values: Iterable[int]) -> None:
        super().__init__(0)
        self.values = list(values)

    def randrange(self, start, stop=None, step=1):
        assert stop is None, "the walk only draws randrange(n)"
        assert self.values, "walk asked for more random numbers than scripted"
        value = self.values.pop(0)
        assert 0 <= value < start
        return value


def reachable_rooms(field: Field) -> Set[Tuple[int, int, int]]:
    """Rooms reachable from the start room, treating every passage as open."""
    start = field.room_at(0, 0, 0)
    assert start is not None
    visited = {start.position}
    queue: Deque[Room] = deque([start])
    while queue:
        room = queue.popleft()
        for direction in Direction:
            if not room.has_passage(direction):
                continue
            neighbor = field.neighbor(room, direction)
            assert neighbor is not None
            if neighbor.position not in visited:
                visited.add(neighbor.position)
                queue.append(neighbor)
    return visited


def can_reach_goal_tile(field: Field) -> bool:
    """
    Search the tile grid as a player would walk it.

    The state is position plus switch states. Stepping onto a stair tile
    changes floor and stepping onto a switch flips it.
    """
    start_x, start_y = field.start_position()
    start = (start_x, start_y, 0, (False,) * field.switch_count)
    visited = {start}
    queue = deque([start])
    while queue:
        x, y, z, states = queue.popleft()
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nx, ny = x + dx, y + dy
            tile, index = field.tile(nx, ny, z, states)
            if not tile.is_passable:
                continue
            if tile == Tile.GOAL:
                return True
            nz, next_states = z, states
            if tile == Tile.UPSTAIRS:
                nz = z - 1
            elif tile == Tile.DOWNSTAIRS:
                nz = z + 1
            elif tile.is_switch:
                flipped = list(states)
                flipped[index] = not flipped[index]
                next_states = tuple(flipped)
            state = (nx, ny, nz, next_states)
            if state not in visited:
                visited.add(state)
                queue.append(state)
    return False


class TestFieldConnectivity:
    """Generated fields connect start to goal."""

    @pytest.mark.parametrize("size", FIELD_SIZES, ids=lambda s: "x".join(map(str, s)))
    def test_room_graph_reaches_goal(self, size):
        """With every passage open, the goal room is reachable from the start."""
        field = generate_field(*size, rng=random.Random(42))

        goal = field.goal_room()
        assert goal is not None
        assert goal.position == (size[0] - 1, size[1], size[2] - 1)
        assert goal.position in reachable_rooms(field)

    @pytest.mark.parametrize("size", FIELD_SIZES, ids=lambda s: "x".join(map(str, s)))
    def test_every_room_is_reachable(self, size):
        """Rooms only come into being at the end of a passage."""
        field = generate_field(*size, rng=random.Random(7))

        assert reachable_rooms(field) == {room.position for room in field.iter_rooms()}

    @pytest.mark.parametrize("size", FIELD_SIZES, ids=lambda s: "x".join(map(str, s)))
    def test_goal_tile_reachable_by_walking(self, size):
        """A player flipping switches and taking stairs can reach the goal tile."""
        field = generate_field(*size, rng=random.Random(1234))

        assert can_reach_goal_tile(field)

    @pytest.mark.parametrize("seed", range(8))
    def test_repeated_generation_is_always_solvable(self, seed):
        """Every generation stands alone; none depend on earlier ones."""
        field = new_field(3, 2, 2, 2, rng=random.Random(seed))

        assert field.goal_room() is not None
        assert can_reach_goal_tile(field)


class TestFieldStructure:
    """Structural invariants of generated fields."""

    def test_passages_are_shared_between_rooms(self):
        """Both ends of an edge refer to the same passage record."""
        field = generate_field(3, 3, 3, 3, rng=random.Random(5))

        references = {}
        for room in field.iter_rooms():
            for direction in Direction:
                index = room.passages[direction.value]
                if index is None:
                    continue
                neighbor = field.neighbor(room, direction)
                assert neighbor is not None
                assert neighbor.passages[direction.opposite().value] == index
                references[index] = references.get(index, 0) + 1

        assert sorted(references) == list(range(len(field.passages)))
        assert set(references.values()) == {2}

    def test_goal_passage_needs_every_switch(self):
        field = generate_field(2, 2, 2, 3, rng=random.Random(9))

        goal = field.goal_room()
        assert goal is not None
        passage = field.passage(goal, Direction.UP)
        assert passage is not None
        assert passage.constraints == [SwitchConstraint.REQUIRE_TRUE] * 3

        corner = field.room_at(1, 1, 1)
        assert corner is not None
        assert field.passage(corner, Direction.DOWN) is passage

    def test_goal_room_only_joins_corner(self):
        field = generate_field(3, 2, 2, 2, rng=random.Random(3))

        goal = field.goal_room()
        assert goal is not None
        joined = [d for d in Direction if goal.has_passage(d)]
        assert joined == [Direction.UP]
        for x in range(field.width - 1):
            for z in range(field.depth):
                assert field.room_at(x, field.height, z) is None

    @pytest.mark.parametrize("switch_count", [1, 2, 4, 5])
    def test_switches_per_room_are_capped(self, switch_count):
        field = generate_field(3, 3, 2, switch_count, rng=random.Random(switch_count))

        cap = max(1, switch_count // 2)
        for room in field.iter_rooms():
            assert room.owned_switch_count() <= cap

    def test_every_switch_has_a_control(self):
        """All switches end up on, so each was flipped in some room."""
        field = generate_field(3, 3, 2, 4, rng=random.Random(21))

        for i in range(4):
            assert any(room.switches[i] for room in field.iter_rooms())

    def test_room_and_passage_lists_are_read_only(self):
        field = generate_field(2, 2, 1, 1, rng=random.Random(4))
        passage_count = len(field.passages)

        assert isinstance(field.rooms, tuple)
        assert isinstance(field.passages, tuple)
        with pytest.raises(AttributeError):
            field.passages.append(field.passages[0])  # type: ignore[attr-defined]
        assert len(field.passages) == passage_count

    def test_no_switches(self):
        field = generate_field(3, 3, 2, 0, rng=random.Random(2))

        assert all(passage.constraints == [] for passage in field.passages)
        assert all(room.switches == [] for room in field.iter_rooms())


class TestRandomWalk:
    """Single walk attempts driven by a scripted random source.

    In a 2x1x1 field with two switches a walk step draws randrange(4) (0 flips
    a switch, then randrange(2) picks which), otherwise randrange(6) picks a
    Direction. A new passage draws randrange(2) per switch, 0 leaving that
    switch DONT_CARE.
    """

    def test_revisiting_open_passage_stalls(self):
        """A passage that is DONT_CARE everywhere may not be relaxed any further."""
        rng = ScriptedRandom(
            [1, Direction.RIGHT.value, 0, 0]
            + [1, Direction.LEFT.value] * 2
        )

        graph = _random_walk(2, 1, 1, 2, rng, FieldConfig(stall_limit=1))

        assert graph is None
        assert rng.values == []

    def test_revisit_relaxes_until_one_constraint_is_left(self):
        """The first return trip relaxes switch 0; the second would relax switch 1 too."""
        rng = ScriptedRandom(
            [1, Direction.RIGHT.value, 1, 1]  # gate on both switches off
            + [0, 0]  # flip switch 0 in the far room
            + [1, Direction.LEFT.value]  # relaxes switch 0 only
            + [0, 1]  # flip switch 1 in the start room
            + [1, Direction.RIGHT.value]  # would leave the passage open to all
        )

        graph = _random_walk(2, 1, 1, 2, rng, FieldConfig(stall_limit=0))

        assert graph is None
        assert rng.values == []

    def test_walk_gives_up_past_stall_limit(self):
        """Once switch 0 is placed, every attempt to add switch 1 to the room stalls."""
        rng = ScriptedRandom([0, 0] + [0, 1] * 3)

        graph = _random_walk(2, 1, 1, 2, rng, FieldConfig(stall_limit=2))

        assert graph is None
        assert rng.values == []

    def test_scripted_walk_reaches_goal(self):
        """With one switch a new passage is always gated, so no draws follow the move."""
        rng = ScriptedRandom([0, 0, 1, Direction.RIGHT.value])

        graph = _random_walk(2, 1, 1, 1, rng, FieldConfig())

        assert graph is not None
        assert rng.values == []
        start = graph.room_at(0, 0, 0)
        corner = graph.room_at(1, 0, 0)
        assert start is not None and corner is not None
        assert start.switches == [True]
        assert graph.passage(start, Direction.RIGHT).constraints == [SwitchConstraint.REQUIRE_TRUE]
        assert graph.passage(corner, Direction.DOWN).constraints == [SwitchConstraint.REQUIRE_TRUE]


class TestDeterminism:
    def test_same_seed_same_field(self):
        first = generate_field(3, 3, 2, 3, rng=random.Random(99))
        second = generate_field(3, 3, 2, 3, rng=random.Random(99))

        assert [p.constraints for p in first.passages] == [p.constraints for p in second.passages]
        assert [
            (room.position, room.passages, room.switches) for room in first.iter_rooms()
        ] == [
            (room.position, room.passages, room.switches) for room in second.iter_rooms()
        ]


class TestGenerationConfig:
    def test_custom_switch_cap(self):
        config = FieldConfig(max_switches_per_room=1)

        field = generate_field(3, 3, 1, 4, rng=random.Random(8), config=config)

        assert all(room.owned_switch_count() <= 1 for room in field.iter_rooms())

    @pytest.mark.parametrize("size", [(1, 1, 1, 2), (2, 1, 1, 3), (2, 1, 1, 5)])
    def test_rejects_more_switches_than_rooms_can_host(self, size):
        """Each room hosts at most max(1, n // 2) switches, so these never finish."""
        with pytest.raises(ValueError):
            generate_field(*size, rng=random.Random(0))

    def test_raised_switch_cap_makes_room_for_switches(self):
        config = FieldConfig(max_switches_per_room=2)

        field = generate_field(1, 1, 1, 2, rng=random.Random(0), config=config)

        start = field.room_at(0, 0, 0)
        assert start is not None
        assert start.switches == [True, True]
        assert field.goal_room() is not None

    def test_gives_up_when_attempts_are_capped(self):
        """Switch 1 cannot join switch 0 in the start room, and the walk stalls out."""
        rng = ScriptedRandom([0, 0, 0, 1])
        config = FieldConfig(stall_limit=0, max_attempts=1)

        with pytest.raises(GenerationError):
            generate_field(2, 1, 1, 2, rng=rng, config=config)

        assert rng.values == []

    def test_verbose_reports_on_stderr(self, capsys):
        generate_field(2, 2, 1, 1, rng=random.Random(0), config=FieldConfig(verbose=True))

        assert "Generated 2x2x1 field with 1 switches" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "size", [(0, 1, 1, 0), (1, 0, 1, 0), (1, 1, 0, 0), (1, 1, 1, -1)]
    )
    def test_rejects_bad_dimensions(self, size):
        with pytest.raises(ValueError):
            generate_field(*size)

    def test_default_limits(self):
        config = FieldConfig()

        assert config.stall_limit == 10
        assert config.switch_cap(5) == 2
        assert config.switch_cap(1) == 1
        assert config.relax_limit(3) == 2
        assert config.relax_limit(0) == 0
