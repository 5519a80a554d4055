"""Switch-gated dungeon generation, tile decoding and pathfinding."""

from switches.rooms import (
    Direction,
    SwitchConstraint,
    Passage,
    Room,
    RoomGraph,
    room_index,
)
from switches.tiles import Tile, switched_tile
from switches.config import FieldConfig
from switches.field import Field, TileMap
from switches.field_gen import GenerationError, generate_field, new_field
from switches.pathfinding import find_path, Path
from switches.event_system import EventBus, Event, EventData
from switches.session import GameSession, Player
