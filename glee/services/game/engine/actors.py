"""Actor creation for heroes and monsters."""

import logging
from uuid import UUID

logger = logging.getLogger(__name__)

from glee.schemas.game_engine import (
    Actor,
    ActorDef,
    GameState,
    ItemChance,
    ItemType,
    Loot,
    PlayerClass,
)

# dwarf is strongest but slow, witch is weak but has magic,
# elf is average but fast and ranged, knight is strong but not so slow
PLAYER_CLASS_DEFS: dict[PlayerClass, ActorDef] = {
    PlayerClass.DWARF: ActorDef(
        name="Dwarf", sprite=0, health=5, attack=4, defense=4, magic=0, moves=5, good=True
    ),
    PlayerClass.WITCH: ActorDef(
        name="Witch", sprite=1, health=3, attack=1, defense=1, magic=5, moves=6, good=True
    ),
    PlayerClass.ELF: ActorDef(
        name="Elf", sprite=2, health=4, attack=2, defense=2, magic=0, moves=7, good=True, ranged=True
    ),
    PlayerClass.KNIGHT: ActorDef(
        name="Knight", sprite=3, health=5, attack=4, defense=3, magic=0, moves=6, good=True
    ),
}

MONSTER_DEFS: dict[str, ActorDef] = {
    "goblin": ActorDef(
        name="Goblin",
        sprite=8,
        health=1,
        attack=1,
        defense=1,
        magic=0,
        moves=5,
        good=False,
        loot=Loot(
            gold_min=1,
            gold_max=5,
            items=[ItemChance(type=ItemType.HEAL_POTION, chance=0.1)],
        ),
    ),
    "rat": ActorDef(
        name="Rat",
        sprite=9,
        health=1,
        attack=1,
        defense=0,
        magic=0,
        moves=6,
        good=False,
        loot=Loot(gold_min=0, gold_max=2),
    ),
    "orc": ActorDef(
        name="Orc",
        sprite=11,
        health=2,
        attack=2,
        defense=2,
        magic=0,
        moves=4,
        good=False,
        min_level=2,
        loot=Loot(
            gold_min=3,
            gold_max=10,
            items=[
                ItemChance(type=ItemType.IRONSKIN_POTION, chance=0.05, min_level=2),
                ItemChance(type=ItemType.HEAL_POTION, chance=0.15),
            ],
        ),
    ),
    "skeleton": ActorDef(
        name="Skeleton",
        sprite=12,
        health=2,
        attack=2,
        defense=3,
        magic=0,
        moves=4,
        good=False,
        min_level=3,
        loot=Loot(
            gold_min=5,
            gold_max=12,
            items=[ItemChance(type=ItemType.MAGIC_POTION, chance=0.1)],
        ),
    ),
    "troll": ActorDef(
        name="Troll",
        sprite=13,
        health=4,
        attack=3,
        defense=3,
        magic=0,
        moves=3,
        good=False,
        min_level=5,
        loot=Loot(
            gold_min=10,
            gold_max=25,
            items=[
                ItemChance(type=ItemType.STRENGTH_POTION, chance=0.1, min_level=5),
                ItemChance(type=ItemType.HEAL_POTION, chance=0.3),
            ],
        ),
    ),
}


def create_actor(
    state: GameState,
    definition: ActorDef,
    dungeon_id: int,
    x: int,
    y: int,
    player_id: UUID | None = None,
) -> Actor:
    """Create a new actor in a dungeon from its catalog definition.

    Used for both heroes and monsters. The actor is not added to the dungeon;
    callers append it to the right actor list.
    """
    return Actor(
        id=state.allocate_id(),
        name=definition.name,
        x=x,
        y=y,
        lx=x,
        ly=y,
        lt=0,
        sprite=definition.sprite,
        player_id=player_id,
        good=definition.good,
        health=definition.health,
        max_health=definition.health,
        moves=definition.moves,
        max_moves=definition.moves,
        magic=definition.magic,
        max_magic=definition.magic,
        actions=1,
        max_actions=1,
        attack=definition.attack,
        defense=definition.defense,
        ranged=definition.ranged,
        loot=definition.loot.model_copy(deep=True) if definition.loot else None,
        dungeon_id=dungeon_id,
    )


def create_hero(
    state: GameState,
    player_class: PlayerClass,
    dungeon_id: int,
    x: int,
    y: int,
    player_id: UUID | None = None,
) -> Actor:
    return create_actor(state, PLAYER_CLASS_DEFS[player_class], dungeon_id, x, y, player_id)


def create_monster(
    state: GameState, monster_type: str, dungeon_id: int, x: int, y: int
) -> Actor | None:
    """Create a monster by catalog key, or None if the key is unknown."""
    definition = MONSTER_DEFS.get(monster_type)
    if definition is None:
        logger.error("Unknown monster type: %s", monster_type)
        return None
    return create_actor(state, definition, dungeon_id, x, y)


def monsters_for_level(level: int) -> list[str]:
    """Catalog keys of monsters allowed to spawn at the given dungeon level."""
    return [key for key, definition in MONSTER_DEFS.items() if definition.min_level <= level]


def monster_cost(monster_type: str) -> int:
    """Difficulty cost of a monster for room stocking (attack + defense)."""
    definition = MONSTER_DEFS[monster_type]
    return definition.attack + definition.defense
