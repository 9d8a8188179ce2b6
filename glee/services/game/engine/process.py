"""Main entry point for game action processing.

This module provides the primary interface for driving a session:
- process_action(): Validates and processes any player action
- process_tick(): Advances the simulation by one logic step
- process_player_left(): Removes a participant who vanished mid-game
- Returns ProcessResult with the (mutated) state and this step's events
"""

import logging
import random
from uuid import UUID

logger = logging.getLogger(__name__)

from glee.config import get_settings
from glee.schemas.game_engine import (
    Dungeon,
    GameState,
    PlayerClass,
    PlayerInfo,
    Room,
    SaveRecord,
)

from .actions import (
    ClearTypeAction,
    EndTurnAction,
    GameAction,
    MakeMoveAction,
    SelectSaveAction,
    SetPlayerTypeAction,
    UseItemAction,
)
from .actors import create_hero
from .dungeon import generate_dungeon
from .events import AnyGameEvent, ItemUsed
from .items import (
    add_item_to_inventory,
    apply_item,
    consume_item,
    create_item,
    find_item,
    get_item_info,
)
from .legal_moves import calc_moves, get_move_at
from .monster_ai import get_heroes, take_monster_turn
from .spatial import (
    find_free_cells,
    get_actor_by_id,
    get_dungeon_by_id,
    get_room_at,
    get_start_room,
)
from .turns import apply_current_activity, next_turn, start_activity
from .validation import ProcessResult, validate_action


def process_action(
    state: GameState,
    action: GameAction,
    player_id: UUID,
    game_time: float = 0,
    *,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Process a player action and return the result.

    This is the main entry point for all player actions. It:
    1. Validates the action is legal given current state
    2. Dispatches to the appropriate handler
    3. Assigns sequence numbers to events
    4. Returns ProcessResult with the state and events

    The state is mutated in place. A failed action leaves it untouched.

    Args:
        state: Current game state.
        action: The action to process.
        player_id: The player attempting the action.
        game_time: Game clock in milliseconds, stamped on new activities.
        rng: Optional random source.

    Returns:
        ProcessResult containing:
        - success: Whether the action was processed successfully
        - state: The game state (if successful)
        - events: List of events that occurred (with seq numbers)
        - error_code/error_message: Error details (if failed)

    Example:
        >>> result = process_action(state, MakeMoveAction(x=3, y=2), player_id)
        >>> if result.success:
        ...     for event in result.events:
        ...         broadcast(event)  # event.seq is set
        ... else:
        ...     send_error(result.error_code, result.error_message)
    """
    action_type = type(action).__name__
    logger.info(
        "Processing action: type=%s, player=%s, whose_turn=%s",
        action_type,
        str(player_id)[:8],
        str(state.whose_turn)[:8] if state.whose_turn else "monsters",
    )
    logger.debug("Action details: %s", action)

    validation = validate_action(state, action, player_id)
    if not validation.is_valid:
        logger.warning(
            "Action validation failed: code=%s, message=%s, player=%s, action=%s",
            validation.error_code,
            validation.error_message,
            str(player_id)[:8],
            action_type,
        )
        return ProcessResult.failure(
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid action",
        )

    if isinstance(action, SetPlayerTypeAction):
        result = process_set_player_type(state, action.player_class, player_id, rng=rng)

    elif isinstance(action, MakeMoveAction):
        result = process_make_move(state, action.x, action.y, player_id, game_time)

    elif isinstance(action, EndTurnAction):
        result = process_end_turn(state)

    elif isinstance(action, UseItemAction):
        result = process_use_item(state, action.item_id, player_id)

    elif isinstance(action, ClearTypeAction):
        result = process_player_left(state, player_id)

    elif isinstance(action, SelectSaveAction):
        result = process_select_save(state, action.save, player_id, rng=rng)

    else:
        logger.error("Unknown action type received: %s", action_type)
        return ProcessResult.failure(
            "UNKNOWN_ACTION",
            f"Unknown action type: {type(action).__name__}",
        )

    if result.success and result.state is not None:
        result = _assign_event_sequences(result)
        logger.info(
            "Action processed successfully: type=%s, player=%s, events_generated=%d",
            action_type,
            str(player_id)[:8],
            len(result.events),
        )
        logger.debug("Generated events: %s", [type(e).__name__ for e in result.events])
    else:
        logger.warning(
            "Action processing failed: type=%s, player=%s, error=%s",
            action_type,
            str(player_id)[:8],
            result.error_code,
        )

    return result


def process_tick(
    state: GameState,
    game_time: float,
    *,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Run one logic step of the simulation.

    Called at a fixed cadence by the transport. Once enough time has passed
    since the last step, plays the next step of the in-flight activity; with
    nothing in flight, lets the monsters act on their turn or moves past a
    player who has nothing left to do.

    Args:
        state: Current game state.
        game_time: Game clock in milliseconds.
        rng: Optional random source.

    Returns:
        ProcessResult with the state and the events of this tick only.
    """
    events: list[AnyGameEvent] = []

    if game_time - state.last_update > get_settings().STEP_TIME_MS:
        if not apply_current_activity(state, game_time, events, rng=rng):
            if state.is_monster_turn:
                take_monster_turn(state, game_time, events)
            elif not state.possible_moves and state.player_order:
                logger.info(
                    "Player has no moves left, advancing turn: player=%s",
                    str(state.whose_turn)[:8],
                )
                next_turn(state, events)

    return _assign_event_sequences(ProcessResult.ok(state, events))


def process_player_left(state: GameState, player_id: UUID) -> ProcessResult:
    """Remove a player and their hero from the session.

    If it was their turn the turn moves on first, so the game never waits on
    someone who is gone.
    """
    info = state.player_info.get(player_id)
    if info is None or player_id not in state.player_order:
        logger.warning("Player left but was never in the game: %s", str(player_id)[:8])
        return ProcessResult.failure("PLAYER_NOT_JOINED", "Player is not in the game")

    events: list[AnyGameEvent] = []

    activity = state.current_activity
    if activity is not None and activity.actor_id == info.actor_id:
        logger.info("Dropping activity of departing player's hero: actor=%d", info.actor_id)
        state.current_activity = None

    if state.whose_turn == player_id:
        next_turn(state, events)

    state.player_order = [p for p in state.player_order if p != player_id]
    del state.player_info[player_id]

    dungeon = get_dungeon_by_id(state, info.dungeon_id)
    if dungeon is not None:
        dungeon.actors = [a for a in dungeon.actors if a.id != info.actor_id]

    logger.info(
        "Player left: player=%s, actor=%d, remaining_players=%d",
        str(player_id)[:8],
        info.actor_id,
        len(state.player_order),
    )
    return _assign_event_sequences(ProcessResult.ok(state, events))


def _assign_event_sequences(result: ProcessResult) -> ProcessResult:
    """Assign monotonically increasing sequence numbers to events.

    Updates each event's seq field and advances the state's event_seq counter.
    """
    if result.state is None or not result.events:
        return result

    current_seq = result.state.event_seq
    for event in result.events:
        event.seq = current_seq
        current_seq += 1

    result.state.event_seq = current_seq
    return result


def _join_location(state: GameState) -> tuple[Dungeon, list[Room]] | None:
    """Where a newly joining hero may be placed.

    Next to the party on the deepest level any hero has reached, or the start
    room of the newest level when there is no party yet.
    """
    heroes = get_heroes(state)
    if heroes:
        dungeon_ids = {hero.dungeon_id for hero in heroes}
        dungeons = [d for d in state.dungeons if d.id in dungeon_ids]
        dungeon = max(dungeons, key=lambda d: d.level)
        rooms: list[Room] = []
        for hero in heroes:
            if hero.dungeon_id != dungeon.id:
                continue
            room = get_room_at(dungeon, hero.x, hero.y)
            if room is not None and room not in rooms:
                rooms.append(room)
        return dungeon, rooms

    if not state.dungeons:
        return None
    dungeon = state.dungeons[-1]
    start_room = get_start_room(dungeon)
    return dungeon, [start_room] if start_room else []


def process_set_player_type(
    state: GameState,
    player_class: PlayerClass,
    player_id: UUID,
    *,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Create a hero of the chosen class and add the player to the turn order."""
    location = _join_location(state)
    if location is None:
        logger.error("No dungeon to place a hero in")
        return ProcessResult.failure("NO_START_POSITION", "There is no dungeon to join")

    dungeon, rooms = location
    starts = find_free_cells(dungeon, rooms)
    if not starts:
        # the party's rooms are full, fall back to the level's entrance
        start_room = get_start_room(dungeon)
        if start_room is not None:
            starts = find_free_cells(dungeon, [start_room])
    if not starts:
        logger.error("No free start position in dungeon %d", dungeon.id)
        return ProcessResult.failure("NO_START_POSITION", "No free place to start")

    generator = rng or random
    x, y = generator.choice(starts)

    actor = create_hero(state, player_class, dungeon.id, x, y, player_id)
    dungeon.actors.append(actor)
    state.player_info[player_id] = PlayerInfo(
        type=player_class, actor_id=actor.id, dungeon_id=dungeon.id
    )
    state.player_order.append(player_id)

    logger.info(
        "Player joined: player=%s, class=%s, actor=%d, dungeon=%d, at=(%d,%d)",
        str(player_id)[:8],
        player_class.value,
        actor.id,
        dungeon.id,
        x,
        y,
    )

    # the turn holder's moves may route around the new hero
    if state.whose_turn is not None and state.current_activity is None:
        info = state.player_info.get(state.whose_turn)
        current = get_actor_by_id(state, info.dungeon_id, info.actor_id) if info else None
        if current is not None:
            calc_moves(state, current)

    return ProcessResult.ok(state, [])


def process_make_move(
    state: GameState,
    x: int,
    y: int,
    player_id: UUID,
    game_time: float,
) -> ProcessResult:
    """Queue the selected legal move as the in-flight activity."""
    info = state.player_info[player_id]
    actor = get_actor_by_id(state, info.dungeon_id, info.actor_id)
    move = get_move_at(state, x, y)
    if actor is None or move is None:
        return ProcessResult.failure("ILLEGAL_MOVE", f"({x}, {y}) is not a legal move")

    start_activity(state, info.dungeon_id, actor, move, game_time)
    return ProcessResult.ok(state, [])


def process_end_turn(state: GameState) -> ProcessResult:
    events: list[AnyGameEvent] = []
    next_turn(state, events)
    return ProcessResult.ok(state, events)


def process_use_item(state: GameState, item_id: int, player_id: UUID) -> ProcessResult:
    """Consume one item from the party inventory on the player's hero."""
    info = state.player_info[player_id]
    actor = get_actor_by_id(state, info.dungeon_id, info.actor_id)
    item = find_item(state, item_id)
    item_info = get_item_info(item.type) if item else None
    if actor is None or item is None or item_info is None:
        return ProcessResult.failure("ITEM_NOT_FOUND", "No such item in the inventory")

    apply_item(actor, item_info)
    consume_item(state, item)

    events: list[AnyGameEvent] = [
        ItemUsed(
            actor_id=actor.id,
            x=actor.x,
            y=actor.y,
            value=1,
            item=item.type,
            sound=item_info.sound,
        )
    ]
    logger.info(
        "Item used: player=%s, actor=%d, item=%s, remaining=%d",
        str(player_id)[:8],
        actor.id,
        item.type.value,
        max(0, item.count),
    )

    # new magic or attack may open up targets
    if state.current_activity is None:
        calc_moves(state, actor)

    return ProcessResult.ok(state, events)


def process_select_save(
    state: GameState,
    save: SaveRecord,
    player_id: UUID,
    *,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Restart the session from a save slot's level and items."""
    dungeon = generate_dungeon(state, save.level, rng=rng)
    state.dungeons = [dungeon]
    state.items = []
    for saved in save.items:
        add_item_to_inventory(state, create_item(state, saved.type, saved.count))
    state.whose_save = player_id
    state.save_level = save.level

    logger.info(
        "Save selected: player=%s, level=%d, items=%d",
        str(player_id)[:8],
        save.level,
        len(state.items),
    )
    return ProcessResult.ok(state, [])
