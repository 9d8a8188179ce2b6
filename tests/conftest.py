"""Shared fixtures for game engine tests."""

import random
from uuid import UUID

import pytest

from glee.config import Settings
from glee.schemas.game_engine import (
    Actor,
    Chest,
    Door,
    Dungeon,
    GameState,
    ItemType,
    PlayerClass,
    PlayerInfo,
    Room,
)
from glee.services.game.engine.actors import MONSTER_DEFS, PLAYER_CLASS_DEFS

# Fixed UUIDs for deterministic testing
PLAYER_1_ID = UUID("00000000-0000-0000-0000-000000000001")
PLAYER_2_ID = UUID("00000000-0000-0000-0000-000000000002")
PLAYER_3_ID = UUID("00000000-0000-0000-0000-000000000003")
PLAYER_4_ID = UUID("00000000-0000-0000-0000-000000000004")
PLAYER_5_ID = UUID("00000000-0000-0000-0000-000000000005")

DUNGEON_ID = 1

# Hand-built rooms share walls the way generated ones do:
#
#   x: 0    5    10
#   y0 +----+----+
#      | A  D  B |     A: start room, B: east room, door D at (5, 2)
#   y5 +-D--+----+     C: south room, door at (2, 5)
#      | C  |
#   y9 +----+


def make_room(
    x: int,
    y: int,
    width: int,
    height: int,
    discovered: bool = True,
    start: bool = False,
    depth: int = 0,
    stairs_down: bool = False,
) -> Room:
    """Helper to create a room."""
    return Room(
        x=x,
        y=y,
        width=width,
        height=height,
        discovered=discovered,
        start=start,
        depth=depth,
        stairs_down=stairs_down,
    )


def make_actor(
    actor_id: int,
    x: int,
    y: int,
    *,
    good: bool,
    health: int = 1,
    attack: int = 1,
    defense: int = 1,
    moves: int = 5,
    magic: int = 0,
    ranged: bool = False,
    player_id: UUID | None = None,
    dungeon_id: int = DUNGEON_ID,
) -> Actor:
    """Helper to create an actor with explicit stats."""
    return Actor(
        id=actor_id,
        name="Hero" if good else "Monster",
        x=x,
        y=y,
        lx=x,
        ly=y,
        sprite=0,
        player_id=player_id,
        good=good,
        health=health,
        max_health=health,
        moves=moves,
        max_moves=moves,
        magic=magic,
        max_magic=magic,
        attack=attack,
        defense=defense,
        ranged=ranged,
        dungeon_id=dungeon_id,
    )


def create_hero(
    actor_id: int,
    x: int,
    y: int,
    player_class: PlayerClass = PlayerClass.DWARF,
    player_id: UUID | None = None,
    dungeon_id: int = DUNGEON_ID,
) -> Actor:
    """Helper to create a hero with its class stats."""
    definition = PLAYER_CLASS_DEFS[player_class]
    return make_actor(
        actor_id,
        x,
        y,
        good=True,
        health=definition.health,
        attack=definition.attack,
        defense=definition.defense,
        moves=definition.moves,
        magic=definition.magic,
        ranged=definition.ranged,
        player_id=player_id,
        dungeon_id=dungeon_id,
    )


def create_goblin(actor_id: int, x: int, y: int, dungeon_id: int = DUNGEON_ID) -> Actor:
    """Helper to create a goblin with its catalog stats and loot."""
    goblin = make_actor(
        actor_id,
        x,
        y,
        good=False,
        health=1,
        attack=1,
        defense=1,
        moves=5,
        dungeon_id=dungeon_id,
    )
    goblin.loot = MONSTER_DEFS["goblin"].loot.model_copy(deep=True)
    return goblin


def make_dungeon(
    rooms: list[Room],
    doors: list[Door] | None = None,
    chests: list[Chest] | None = None,
    actors: list[Actor] | None = None,
    dungeon_id: int = DUNGEON_ID,
    level: int = 1,
) -> Dungeon:
    """Helper to create a dungeon."""
    return Dungeon(
        id=dungeon_id,
        level=level,
        rooms=rooms,
        doors=doors or [],
        chests=chests or [],
        actors=actors or [],
    )


def make_state(
    dungeon: Dungeon,
    players: list[tuple[UUID, Actor, PlayerClass]] | None = None,
    whose_turn: UUID | None = None,
) -> GameState:
    """Helper to create a game state around a hand-built dungeon.

    Each player's hero is added to the dungeon's actors.
    """
    state = GameState(dungeons=[dungeon], next_id=100, whose_turn=whose_turn)
    for player_id, hero, player_class in players or []:
        dungeon.actors.append(hero)
        state.player_order.append(player_id)
        state.player_info[player_id] = PlayerInfo(
            type=player_class, actor_id=hero.id, dungeon_id=dungeon.id
        )
    return state


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def small_settings() -> Settings:
    """Settings producing small dungeons quickly."""
    return Settings(TARGET_ROOM_COUNT=8, MAX_GENERATION_CYCLES=500)


@pytest.fixture
def start_room() -> Room:
    """Room A: 6x6 start room at the origin, stairs up at (4, 1)."""
    return make_room(0, 0, 6, 6, start=True)


@pytest.fixture
def closed_door_dungeon(start_room: Room) -> Dungeon:
    """Room A with an undiscovered room B behind a closed door."""
    return make_dungeon(
        rooms=[start_room, make_room(5, 0, 6, 6, discovered=False, depth=1)],
        doors=[Door(x=5, y=2)],
    )


@pytest.fixture
def explored_dungeon(start_room: Room) -> Dungeon:
    """Rooms A and B joined by an open door, a chest in B, room C behind a closed door."""
    return make_dungeon(
        rooms=[
            start_room,
            make_room(5, 0, 6, 6, depth=1),
            make_room(0, 5, 6, 5, discovered=False, depth=1),
        ],
        doors=[Door(x=5, y=2, open=True), Door(x=2, y=5)],
        chests=[Chest(x=8, y=3, item=ItemType.MAGIC_POTION)],
    )


@pytest.fixture
def stairs_dungeon(start_room: Room) -> Dungeon:
    """Room A and a discovered stairs-down room B (centre (8, 3)) joined by an open door."""
    return make_dungeon(
        rooms=[start_room, make_room(5, 0, 6, 6, depth=1, stairs_down=True)],
        doors=[Door(x=5, y=2, open=True)],
    )
