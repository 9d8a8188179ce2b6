import logging
import random
from datetime import datetime
from uuid import UUID

from glee.config import Settings, get_settings
from glee.schemas.game_engine import GameState, SaveRecord

from .engine.dungeon import generate_dungeon
from .engine.items import add_item_to_inventory, create_item
from .engine.spatial import get_dungeon_by_id

logger = logging.getLogger(__name__)


def validate_game_setup(level: int, save: SaveRecord | None, save_owner: UUID | None) -> None:
    """Validate setup arguments before initializing a game."""
    if level < 1:
        raise ValueError("Dungeon level must be at least 1.")
    if save is not None and save_owner is None:
        raise ValueError("A save slot needs the id of the player it belongs to.")
    if save is None and save_owner is not None:
        raise ValueError("A save owner was given without a save slot.")


def initialize_game(
    level: int = 1,
    save: SaveRecord | None = None,
    save_owner: UUID | None = None,
    *,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> GameState:
    """
    Validate setup arguments and return a GameState with its first dungeon.

    Nobody has joined yet, so the turn starts with the monsters and passes to
    the first player once a hero is on the board.

    Args:
        level: Level of the first dungeon when no save is used.
        save: Optional save slot to start from; its level and items win.
        save_owner: The player the save slot belongs to.
        rng: Optional random source for dungeon generation.
        settings: Optional settings override.

    Returns:
        An initialized GameState ready for players to join.

    Raises:
        ValueError: If the setup arguments are invalid.
    """
    validate_game_setup(level, save, save_owner)

    state = GameState()
    if save is not None:
        level = save.level
        for saved in save.items:
            add_item_to_inventory(state, create_item(state, saved.type, saved.count))
        state.whose_save = save_owner
        state.save_level = save.level

    state.dungeons.append(generate_dungeon(state, level, rng=rng, settings=settings))

    logger.info(
        "Game initialized: level=%d, from_save=%s, items=%d",
        level,
        save is not None,
        len(state.items),
    )
    return state


def create_save_record(state: GameState, player_id: UUID, saved_at: datetime) -> SaveRecord:
    """Capture the level a player reached and the party items for a save slot."""
    info = state.player_info.get(player_id)
    dungeon = get_dungeon_by_id(state, info.dungeon_id) if info else None
    if dungeon is not None:
        level = dungeon.level
    else:
        level = max((d.level for d in state.dungeons), default=1)

    heroes = ", ".join(state.player_info[p].type.value for p in state.player_order)
    description = f"Level {level}" + (f" with {heroes}" if heroes else "")

    return SaveRecord(
        level=level,
        items=[item.model_copy() for item in state.items],
        saved_at=saved_at,
        description=description,
    )
