"""
Pathfinding over the tile grid.
"""

from collections import deque
import sys
from typing import Callable, Dict, List, Optional, Tuple

from .rooms import Direction

# A path is a list of moves, ordered from start to goal
Path = List[Direction]

# Neighbour order: (delta_x, delta_y, direction). Down increases y.
_MOVES: List[Tuple[int, int, Direction]] = [
    (1, 0, Direction.RIGHT),
    (-1, 0, Direction.LEFT),
    (0, 1, Direction.DOWN),
    (0, -1, Direction.UP),
]


def _direction_between(parent: Tuple[int, int], tile: Tuple[int, int]) -> Direction:
    delta = (tile[0] - parent[0], tile[1] - parent[1])
    for dx, dy, direction in _MOVES:
        if delta == (dx, dy):
            return direction
    raise AssertionError(f"{parent} -> {tile} is not a single cardinal step")


def find_path(
    passable: Callable[[int, int], bool],
    start_x: int,
    start_y: int,
    goal_x: int,
    goal_y: int,
    max_distance: Optional[int] = None,
) -> Path:
    """
    Find a shortest path from (start_x, start_y) to (goal_x, goal_y) using BFS.

    Args:
        passable: Callback that returns True if tile (x, y) may be entered.
                  The start tile itself is never checked.
        start_x: Starting tile column
        start_y: Starting tile row
        goal_x: Goal tile column
        goal_y: Goal tile row
        max_distance: If given, the most tiles to expand before giving up

    Returns:
        The moves that walk from start to goal. Empty if already at the goal
        or if there is no path.
    """
    start = (start_x, start_y)
    goal = (goal_x, goal_y)
    if start == goal:
        return []  # Already at goal

    queue: deque[Tuple[int, int]] = deque([start])

    # parent[tile] = previous_tile
    parent: Dict[Tuple[int, int], Optional[Tuple[int, int]]] = {start: None}

    tiles_searched = 0

    while queue:
        if max_distance is not None and tiles_searched >= max_distance:
            print(
                f"No path found to ({goal_x}, {goal_y}) within {max_distance} tiles.",
                file=sys.stderr,
            )
            return []

        current = queue.popleft()
        tiles_searched += 1

        for dx, dy, _ in _MOVES:
            next_tile = (current[0] + dx, current[1] + dy)

            if next_tile in parent:
                continue

            if not passable(*next_tile):
                continue

            parent[next_tile] = current

            if next_tile == goal:
                path: Path = []
                tile = next_tile
                while tile != start:
                    previous = parent[tile]
                    assert previous is not None
                    path.append(_direction_between(previous, tile))
                    tile = previous
                path.reverse()
                return path

            queue.append(next_tile)

    print(f"No path found to ({goal_x}, {goal_y}): queue exhausted.", file=sys.stderr)

    return []
