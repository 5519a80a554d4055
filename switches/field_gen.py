"""
Field Generation Algorithm
==========================

We build the dungeon by walking randomly through a four dimensional state
space: room position (x, y, z) plus the bitmask of switch states.

1. Start in room (0, 0, 0) with every switch off
2. Until we are in the far corner room (width-1, height-1, depth-1) with
   every switch on, take a random step:
   a. One time in four, flip a random switch. The current room gets a control
      for that switch, unless it already hosts too many switches.
   b. Otherwise move to a neighbouring room. Moving through a new edge creates
      a passage gated on the current switch states. Moving through an
      existing passage relaxes it so the current switch states may pass,
      unless that would leave it open whatever the switches say.
3. A step that cannot be taken is a stall. Too many stalls in a row abandon
   the attempt and we start again from scratch.
4. Join a goal room below the corner room through a passage that needs every
   switch on.

The walk only ever relaxes the passages it uses, so the route it took stays
open and the goal is always reachable. Every other passage keeps its gating.
"""

import random
import sys
from typing import Optional

from .config import FieldConfig
from .field import Field
from .rooms import Direction, Passage, RoomGraph, SwitchConstraint


class GenerationError(RuntimeError):
    """Raised when a capped number of generation attempts all stall."""


def _random_walk(
    width: int,
    height: int,
    depth: int,
    switch_count: int,
    rng: random.Random,
    config: FieldConfig,
) -> Optional[RoomGraph]:
    """
    Run one generation attempt.

    Returns the finished room graph, or None if the walk stalled out.
    """
    graph = RoomGraph(width, height, depth, switch_count)
    all_on = (1 << switch_count) - 1
    goal = (width - 1, height - 1, depth - 1, all_on)
    switch_cap = config.switch_cap(switch_count)
    relax_limit = config.relax_limit(switch_count)

    x, y, z, bits = 0, 0, 0, 0
    room = graph.add_room(x, y, z)
    stalls = 0

    while (x, y, z, bits) != goal:
        if stalls > config.stall_limit:
            return None

        if switch_count > 0 and rng.randrange(config.switch_toggle_odds) == 0:
            i = rng.randrange(switch_count)
            owned = sum(1 for j, b in enumerate(room.switches) if b or j == i)
            if owned > switch_cap:
                stalls += 1
                continue
            room.switches[i] = True
            bits ^= 1 << i
            stalls = 0
            continue

        direction = Direction(rng.randrange(len(Direction)))
        dx, dy, dz = direction.step()
        nx = min(max(x + dx, 0), width - 1)
        ny = min(max(y + dy, 0), height - 1)
        nz = min(max(z + dz, 0), depth - 1)
        if (nx, ny, nz) == (x, y, z):
            continue

        passage = graph.passage(room, direction)
        if passage is None:
            passage = Passage.unconstrained(switch_count)
            passage.init_randomly(bits, rng)
            graph.connect(room, direction, passage)
        else:
            if passage.dont_care_count(bits) > relax_limit:
                stalls += 1
                continue
            passage.allow(bits)

        stalls = 0
        x, y, z = nx, ny, nz
        next_room = graph.room_at(x, y, z)
        assert next_room is not None
        room = next_room

    # The walk ends in the corner room with every switch on; that combination
    # is the key to the goal room below it.
    goal_passage = Passage([SwitchConstraint.REQUIRE_TRUE] * switch_count)
    graph.connect(room, Direction.DOWN, goal_passage)
    return graph


def generate_field(
    width: int,
    height: int,
    depth: int,
    switch_count: int,
    rng: Optional[random.Random] = None,
    config: Optional[FieldConfig] = None,
) -> Field:
    """
    Generates a field by repeating the random walk until one attempt succeeds.

    Parameters:
        width, height, depth: Size of the room lattice (each at least 1)
        switch_count: Number of switches (at least 0)
        rng: Random source; pass a seeded random.Random for reproducible fields
        config: Generation constants; defaults to FieldConfig()

    Returns:
        The generated Field

    Raises:
        ValueError: If a dimension or the switch count is out of range, or the
            rooms cannot host that many switches between them
        GenerationError: If config.max_attempts is set and every attempt stalled
    """
    if width < 1 or height < 1 or depth < 1:
        raise ValueError(f"Field must be at least 1x1x1, got {width}x{height}x{depth}")
    if switch_count < 0:
        raise ValueError(f"Switch count must not be negative, got {switch_count}")
    if rng is None:
        rng = random.Random()
    if config is None:
        config = FieldConfig()
    # Every switch ends up on, so some room must host a control for each
    capacity = width * height * depth * config.switch_cap(switch_count)
    if switch_count > capacity:
        raise ValueError(
            f"A {width}x{height}x{depth} field can host at most {capacity} switches, "
            f"got {switch_count}"
        )

    attempts = 0
    while True:
        attempts += 1
        graph = _random_walk(width, height, depth, switch_count, rng, config)
        if graph is not None:
            break
        if config.max_attempts is not None and attempts >= config.max_attempts:
            raise GenerationError(
                f"Gave up generating a {width}x{height}x{depth} field with "
                f"{switch_count} switches after {attempts} attempts"
            )

    if config.verbose:
        print(
            f"Generated {width}x{height}x{depth} field with {switch_count} switches: "
            f"{len(graph.iter_rooms())} rooms, {len(graph.passages)} passages, "
            f"{attempts} attempt(s)",
            file=sys.stderr,
        )
    return Field(graph)


new_field = generate_field
