"""Combat resolution, death handling and loot rolls."""

import logging
import math
import random

logger = logging.getLogger(__name__)

from glee.schemas.game_engine import (
    Actor,
    Dungeon,
    GameState,
    ItemChance,
    ItemType,
)

from .events import ActorDied, AnyGameEvent, DamageDealt, GoldLooted, ItemLooted
from .items import add_item_to_inventory, create_item
from .spatial import is_adjacent

# Fixed chance rolls for chest contents, first success wins
CHEST_LOOT: list[ItemChance] = [
    ItemChance(type=ItemType.STRENGTH_POTION, chance=0.1, min_level=3),
    ItemChance(type=ItemType.IRONSKIN_POTION, chance=0.15, min_level=2),
    ItemChance(type=ItemType.MAGIC_POTION, chance=0.3),
    ItemChance(type=ItemType.HEAL_POTION, chance=0.5),
]
CHEST_FALLBACK = ItemType.HEAL_POTION

DEATH_DELAY = 400
HEAL_AMOUNT = 2

HERO_SHIELD_FACES = 2
MONSTER_SHIELD_FACES = 1
SKULL_FACES = 3


def roll_combat(
    attacker: Actor,
    target: Actor | None,
    multiplier: int | None = None,
    *,
    rng: random.Random | None = None,
) -> int:
    """Roll an attack and return the damage dealt.

    The attacker rolls a d6 per attack point, faces below 3 are skulls. Next to
    the target the attack is halved (rounded up) and any multiplier is ignored.
    The defender rolls a d6 per defense point; heroes block on faces below 2,
    monsters only on faces below 1.
    """
    if target is None:
        return 0

    generator = rng or random
    attack = attacker.effective_attack
    if is_adjacent(attacker, target):
        attack = math.ceil(attack / 2)
    elif multiplier:
        attack *= multiplier

    skulls = sum(1 for _ in range(attack) if generator.randrange(6) < SKULL_FACES)

    shield_faces = HERO_SHIELD_FACES if target.good else MONSTER_SHIELD_FACES
    shields = sum(
        1 for _ in range(target.effective_defense) if generator.randrange(6) < shield_faces
    )

    damage = max(0, skulls - shields)
    logger.debug(
        "Combat roll: attacker=%d, target=%d, attack=%d, skulls=%d, shields=%d, damage=%d",
        attacker.id,
        target.id,
        attack,
        skulls,
        shields,
        damage,
    )
    return damage


def roll_loot(
    chances: list[ItemChance], level: int, *, rng: random.Random | None = None
) -> ItemType | None:
    """Roll each entry of a loot table in order; the first success wins."""
    generator = rng or random
    for chance in chances:
        if level < chance.min_level:
            continue
        if generator.random() < chance.chance:
            return chance.type
    return None


def roll_chest_item(level: int, *, rng: random.Random | None = None) -> ItemType:
    """Roll a chest's contents - chests are never empty."""
    return roll_loot(CHEST_LOOT, level, rng=rng) or CHEST_FALLBACK


def roll_gold(gold_min: int, gold_max: int, *, rng: random.Random | None = None) -> int:
    generator = rng or random
    if gold_max <= gold_min:
        return gold_min
    return generator.randrange(gold_min, gold_max)


def kill(
    state: GameState,
    dungeon: Dungeon,
    target: Actor,
    events: list[AnyGameEvent],
    extra_delay: int = 0,
    *,
    rng: random.Random | None = None,
) -> None:
    """Remove a dead actor from its dungeon.

    Heroes are kept in state.dead_heroes; monsters drop their loot.
    """
    target.health = 0
    dungeon.actors = [a for a in dungeon.actors if a.id != target.id]
    delay = DEATH_DELAY + extra_delay
    events.append(
        ActorDied(actor_id=-1, x=target.x, y=target.y, value=target.sprite, delay=delay)
    )
    logger.info(
        "Actor died: actor=%d (%s), good=%s, at=(%d,%d)",
        target.id,
        target.name,
        target.good,
        target.x,
        target.y,
    )

    if target.good:
        state.dead_heroes.append(target)
        return

    if target.loot is None:
        return

    if target.loot.gold_max > 0:
        gold = roll_gold(target.loot.gold_min, target.loot.gold_max, rng=rng)
        if gold > 0:
            state.gold += gold
            events.append(
                GoldLooted(actor_id=-1, x=target.x, y=target.y, value=gold, delay=delay)
            )
            logger.debug("Gold looted: %d (party total %d)", gold, state.gold)

    dropped = roll_loot(target.loot.items, dungeon.level, rng=rng)
    if dropped is not None:
        add_item_to_inventory(state, create_item(state, dropped))
        events.append(
            ItemLooted(actor_id=-1, x=target.x, y=target.y, value=1, delay=delay, item=dropped)
        )
        logger.info("Monster dropped item: %s", dropped.value)


def apply_damage(
    state: GameState,
    dungeon: Dungeon,
    target: Actor,
    damage: int,
    events: list[AnyGameEvent],
    extra_delay: int = 0,
    *,
    rng: random.Random | None = None,
) -> None:
    target.health -= damage
    if target.health <= 0:
        kill(state, dungeon, target, events, extra_delay, rng=rng)


def heal(target: Actor, amount: int) -> int:
    """Heal up to the target's maximum health; returns the amount applied."""
    before = target.health
    target.health = min(target.max_health, target.health + amount)
    return target.health - before


def damage_event(attacker: Actor, x: int, y: int, damage: int, delay: int) -> DamageDealt:
    return DamageDealt(actor_id=attacker.id, x=x, y=y, value=damage, delay=delay)
