"""Procedural dungeon generation.

A start room is placed at the origin, then rooms are grown off random
existing rooms in random compass directions. A candidate is accepted if its
interior doesn't overlap any existing room, so walls can be shared and a
door placed in the shared wall.
"""

import logging
import random
from enum import IntEnum

logger = logging.getLogger(__name__)

from glee.config import Settings, get_settings
from glee.schemas.game_engine import Chest, Door, Dungeon, GameState, Room

from .actors import create_monster, monster_cost, monsters_for_level
from .combat import roll_chest_item
from .spatial import blocked, get_actor_at

START_ROOM_SIZES = (5, 6)
ROOM_SIZE_RANGE = (5, 7)
CORRIDOR_LENGTH_RANGE = (5, 9)
CORRIDOR_WIDTH = 3
MIN_CHEST_ROOM_SIZE = 5


class Direction(IntEnum):
    NORTH = 0
    SOUTH = 1
    WEST = 2
    EAST = 3


def room_intersection(candidate: Room, existing: Room) -> bool:
    """Check if a candidate room's interior overlaps any part of an existing room.

    Only the candidate's walls are allowed to overlap, so rooms can share a wall.
    """
    left, right = candidate.x + 1, candidate.x + candidate.width - 2
    top, bottom = candidate.y + 1, candidate.y + candidate.height - 2
    other_right = existing.x + existing.width - 1
    other_bottom = existing.y + existing.height - 1
    return not (
        existing.x > right
        or other_right < left
        or existing.y > bottom
        or other_bottom < top
    )


def monster_budget(level: int) -> int:
    """Total attack + defense of the monsters a single room may hold."""
    return (2 + level) * 2


def _size_room(direction: Direction, settings: Settings, generator) -> tuple[int, int]:
    if generator.random() < settings.CORRIDOR_CHANCE:
        length = generator.randint(*CORRIDOR_LENGTH_RANGE)
        if direction in (Direction.NORTH, Direction.SOUTH):
            return CORRIDOR_WIDTH, length
        return length, CORRIDOR_WIDTH
    return generator.randint(*ROOM_SIZE_RANGE), generator.randint(*ROOM_SIZE_RANGE)


def _place_room(source: Room, direction: Direction, width: int, height: int) -> Room:
    """Position a new room against a source room's wall, centred on it."""
    if direction == Direction.NORTH:
        x = source.x + source.width // 2 - width // 2
        y = source.y - height + 1
    elif direction == Direction.SOUTH:
        x = source.x + source.width // 2 - width // 2
        y = source.y + source.height - 1
    elif direction == Direction.WEST:
        x = source.x - width + 1
        y = source.y + source.height // 2 - height // 2
    else:
        x = source.x + source.width - 1
        y = source.y + source.height // 2 - height // 2

    return Room(x=x, y=y, width=width, height=height, depth=source.depth + 1)


def _door_for(source: Room, direction: Direction) -> Door:
    """The door in the middle of the source room's wall facing the new room."""
    if direction == Direction.NORTH:
        return Door(x=source.x + source.width // 2, y=source.y)
    if direction == Direction.SOUTH:
        return Door(x=source.x + source.width // 2, y=source.y + source.height - 1)
    if direction == Direction.WEST:
        return Door(x=source.x, y=source.y + source.height // 2)
    return Door(x=source.x + source.width - 1, y=source.y + source.height // 2)


def _stock_monsters(
    state: GameState,
    dungeon: Dungeon,
    room: Room,
    settings: Settings,
    generator,
) -> None:
    """Fill a new room with random monsters while staying within its difficulty budget."""
    candidates = monsters_for_level(dungeon.level)
    if not candidates:
        return

    budget = monster_budget(dungeon.level)
    spent = 0
    for _ in range(settings.MAX_MONSTERS_PER_ROOM):
        monster_type = generator.choice(candidates)
        cost = monster_cost(monster_type)
        if spent + cost > budget:
            continue

        mx = generator.randrange(room.width - 2) + 1 + room.x
        my = generator.randrange(room.height - 2) + 1 + room.y
        if get_actor_at(dungeon, mx, my):
            continue

        monster = create_monster(state, monster_type, dungeon.id, mx, my)
        if monster is None:
            continue
        dungeon.actors.append(monster)
        spent += cost


def _mark_stairs_down(dungeon: Dungeon) -> None:
    deepest: Room | None = None
    for room in dungeon.rooms:
        if room.start:
            continue
        if deepest is None or room.depth > deepest.depth:
            deepest = room
    if deepest is not None:
        deepest.stairs_down = True


def _place_chests(dungeon: Dungeon, settings: Settings, generator) -> None:
    """Roll a chest into the centre of each eligible room."""
    for room in dungeon.rooms:
        if room.start or room.stairs_down:
            continue
        if room.width < MIN_CHEST_ROOM_SIZE or room.height < MIN_CHEST_ROOM_SIZE:
            continue
        if generator.random() >= settings.CHEST_CHANCE:
            continue

        cx, cy = room.center
        # blocked() treats undiscovered rooms as solid, so look at it as if discovered
        discovered = room.discovered
        room.discovered = True
        free = not blocked(dungeon, None, cx, cy) and not get_actor_at(dungeon, cx, cy)
        room.discovered = discovered

        if free:
            dungeon.chests.append(
                Chest(x=cx, y=cy, item=roll_chest_item(dungeon.level, rng=generator))
            )


def generate_dungeon(
    state: GameState,
    level: int,
    *,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> Dungeon:
    """Generate a dungeon level.

    The dungeon is not added to the state; callers append it.

    Args:
        state: Game state, used for id allocation.
        level: Difficulty level, gates monsters and loot.
        rng: Optional random source.
        settings: Optional settings override.

    Returns:
        The generated Dungeon.
    """
    generator = rng or random
    settings = settings or get_settings()

    dungeon = Dungeon(id=state.allocate_id(), level=level)

    start_size = generator.choice(START_ROOM_SIZES)
    dungeon.rooms.append(
        Room(x=0, y=0, width=start_size, height=start_size, discovered=True, start=True, depth=0)
    )

    cycles = settings.MAX_GENERATION_CYCLES
    while len(dungeon.rooms) < settings.TARGET_ROOM_COUNT and cycles > 0:
        cycles -= 1

        source = generator.choice(dungeon.rooms)
        direction = Direction(generator.randrange(4))
        width, height = _size_room(direction, settings, generator)
        candidate = _place_room(source, direction, width, height)

        if any(room_intersection(candidate, room) for room in dungeon.rooms):
            continue

        dungeon.rooms.append(candidate)
        dungeon.doors.append(_door_for(source, direction))
        _stock_monsters(state, dungeon, candidate, settings, generator)

    _mark_stairs_down(dungeon)
    _place_chests(dungeon, settings, generator)

    logger.info(
        "Generated dungeon: id=%d, level=%d, rooms=%d, doors=%d, chests=%d, monsters=%d",
        dungeon.id,
        level,
        len(dungeon.rooms),
        len(dungeon.doors),
        len(dungeon.chests),
        len(dungeon.actors),
    )
    if len(dungeon.rooms) < settings.TARGET_ROOM_COUNT:
        logger.warning(
            "Dungeon %d stopped short of target room count: %d/%d",
            dungeon.id,
            len(dungeon.rooms),
            settings.TARGET_ROOM_COUNT,
        )
    return dungeon
