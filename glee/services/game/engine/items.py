"""Item catalog and the shared party inventory."""

import logging

logger = logging.getLogger(__name__)

from glee.schemas.game_engine import (
    Actor,
    GameState,
    Item,
    ItemInfo,
    ItemType,
    PlayerClass,
)

ITEM_INFO: dict[ItemType, ItemInfo] = {
    ItemType.HEAL_POTION: ItemInfo(
        name="Heal Potion",
        description="Restores 2 health",
        icon=76,
        health=2,
        sound="drink",
    ),
    ItemType.MAGIC_POTION: ItemInfo(
        name="Magic Potion",
        description="Restores 3 magic",
        icon=77,
        only_used_by=[PlayerClass.WITCH],
        magic=3,
        sound="drink",
    ),
    ItemType.IRONSKIN_POTION: ItemInfo(
        name="Ironskin Potion",
        description="+1 defense",
        icon=78,
        defense=1,
        sound="drink",
    ),
    ItemType.STRENGTH_POTION: ItemInfo(
        name="Strength Potion",
        description="+1 attack",
        icon=79,
        only_used_by=[PlayerClass.DWARF, PlayerClass.KNIGHT],
        attack=1,
        sound="drink",
    ),
}


def get_item_info(item_type: ItemType) -> ItemInfo | None:
    info = ITEM_INFO.get(item_type)
    if info is None:
        logger.error("No item info for type: %s", item_type)
    return info


def create_item(state: GameState, item_type: ItemType, count: int = 1) -> Item:
    return Item(id=state.allocate_id(), type=item_type, count=count)


def add_item_to_inventory(state: GameState, item: Item) -> None:
    """Add an item to the party inventory, stacking onto an existing stack of the same type."""
    existing = next((i for i in state.items if i.type == item.type), None)
    if existing:
        existing.count += item.count
    else:
        state.items.append(item)
    logger.debug("Inventory: added %s x%d", item.type.value, item.count)


def find_item(state: GameState, item_id: int) -> Item | None:
    return next((i for i in state.items if i.id == item_id), None)


def can_use_item(info: ItemInfo, player_class: PlayerClass) -> bool:
    return not info.only_used_by or player_class in info.only_used_by


def consume_item(state: GameState, item: Item) -> None:
    """Use up one item from a stack, removing the stack when it runs out."""
    item.count -= 1
    if item.count <= 0:
        state.items.remove(item)


def apply_item(actor: Actor, info: ItemInfo) -> None:
    """Apply an item's bonuses to an actor.

    Health and magic are restored up to the actor's maximum; attack and
    defense bonuses stack onto the actor's modifiers.
    """
    if info.health:
        actor.health = min(actor.max_health, actor.health + info.health)
    if info.magic:
        actor.magic = min(actor.max_magic, actor.magic + info.magic)
    actor.attack_modifier += info.attack
    actor.defense_modifier += info.defense
