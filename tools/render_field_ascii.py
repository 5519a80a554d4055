#!/usr/bin/env python3
"""
Render one floor of a generated field as ASCII art for debugging.

Usage:
    python tools/render_field_ascii.py [--width N] [--height N] [--depth N]
        [--switches N] [--floor Z] [--on I ...] [--seed S]
"""

import argparse
import random
import sys
from pathlib import Path

# Add parent directory to path so we can import switches
sys.path.insert(0, str(Path(__file__).parent.parent))

from switches.config import FieldConfig
from switches.field import TileMap
from switches.field_gen import generate_field
from switches.tiles import Tile


TILE_TO_ASCII = {
    Tile.NONE: " ",
    Tile.REGULAR: ".",
    Tile.DOWNSTAIRS: "D",
    Tile.UPSTAIRS: "U",
    Tile.ONE_WAY_LEFT: "<",
    Tile.ONE_WAY_RIGHT: ">",
    Tile.ONE_WAY_UP: "^",
    Tile.ONE_WAY_DOWN: "v",
    Tile.ONE_WAY_DOWNSTAIRS: "d",
    Tile.ONE_WAY_UPSTAIRS: "u",
    Tile.SWITCH_0: "s",
    Tile.SWITCH_1: "S",
    Tile.SWITCHED_TILE_VALID: "o",
    Tile.SWITCHED_TILE_INVALID: "#",
    Tile.GOAL: "G",
}


def render_tile_map_ascii(tile_map: TileMap) -> str:
    """Convert a decoded floor to an ASCII string."""
    lines = []
    rows, cols = tile_map.shape
    for row in range(rows):
        line = "".join(TILE_TO_ASCII.get(Tile(int(tile_map[row, col])), "?") for col in range(cols))
        lines.append(line.rstrip())
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Render a field floor as ASCII art")
    parser.add_argument("--width", type=int, default=3, help="Rooms across")
    parser.add_argument("--height", type=int, default=3, help="Rooms down")
    parser.add_argument("--depth", type=int, default=2, help="Floors")
    parser.add_argument("--switches", type=int, default=2, help="Number of switches")
    parser.add_argument("--floor", type=int, default=0, help="Floor to render")
    parser.add_argument("--on", type=int, nargs="*", default=[], help="Switch indices turned on")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible generation")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    field = generate_field(
        args.width,
        args.height,
        args.depth,
        args.switches,
        rng=rng,
        config=FieldConfig(verbose=True),
    )

    switch_states = [i in args.on for i in range(field.switch_count)]
    print(render_tile_map_ascii(field.tile_map(args.floor, switch_states)))

    print(f"\n--- Debug Info ---")
    width, height, depth = field.tile_size()
    print(f"Field size: {width}x{height} tiles, {depth} floors")
    print(f"Start position: {field.start_position()}")
    print(f"Rooms generated: {len(field.iter_rooms())}")
    print(f"Passages generated: {len(field.passages)}")


if __name__ == "__main__":
    main()
