"""Turn order and activity playback.

The turn passes through every player in join order and then to the monster
faction. Whoever holds the turn may start one activity at a time, which is
played out one step per logic tick.
"""

import logging
import random

logger = logging.getLogger(__name__)

from glee.schemas.game_engine import (
    Activity,
    Actor,
    Dungeon,
    GameMove,
    GameState,
    MoveType,
)

from .combat import HEAL_AMOUNT, apply_damage, damage_event, heal, roll_combat
from .dungeon import generate_dungeon
from .events import (
    ActorHealed,
    ActorStepped,
    AnyGameEvent,
    ChestOpened,
    DoorOpened,
    ItemLooted,
    MagicCast,
    MeleeAttacked,
    RangedShot,
    StairsDescended,
    TurnChanged,
)
from .items import add_item_to_inventory, create_item
from .legal_moves import HEAL_COST, MAGIC_ATTACK_COST, calc_moves, find_next_step
from .spatial import (
    find_free_cells,
    get_actor_at,
    get_actor_by_id,
    get_all_rooms_at,
    get_chest_at,
    get_dungeon_by_id,
    get_dungeon_by_level,
    get_room_at,
    get_start_room,
)

RANGED_DAMAGE_DELAY = 300
MELEE_DAMAGE_DELAY = 100
MAGIC_MULTIPLIER = 2


def reset_actor_for_turn(actor: Actor) -> None:
    actor.moves = actor.max_moves
    actor.actions = actor.max_actions


def next_turn(state: GameState, events: list[AnyGameEvent]) -> None:
    """Move to the next player's turn, or the monsters' after the last player.

    Dead heroes are skipped. The new turn holder gets its moves and actions
    back and its legal moves calculated.
    """
    if state.whose_turn in state.player_order:
        index = state.player_order.index(state.whose_turn) + 1
    else:
        # coming from the monsters (or a player who left), start again at the front
        index = 0

    if index >= len(state.player_order):
        state.whose_turn = None
    else:
        state.whose_turn = state.player_order[index]

    if state.whose_turn is not None:
        info = state.player_info.get(state.whose_turn)
        actor = get_actor_by_id(state, info.dungeon_id, info.actor_id) if info else None
        if actor is not None:
            if actor.health <= 0:
                logger.debug("Skipping dead hero's turn: player=%s", str(state.whose_turn)[:8])
                next_turn(state, events)
                return

            reset_actor_for_turn(actor)
            if actor.magic < actor.max_magic:
                actor.magic += 1
            calc_moves(state, actor)
        else:
            logger.warning("Turn passed to player without an actor: %s", state.whose_turn)
            state.possible_moves = []
            state.path_moves = []
    else:
        for dungeon in state.dungeons:
            for monster in dungeon.actors:
                if not monster.good:
                    reset_actor_for_turn(monster)
        state.possible_moves = []
        state.path_moves = []

    events.append(TurnChanged(whose_turn=state.whose_turn))
    logger.info(
        "Turn changed: whose_turn=%s",
        str(state.whose_turn)[:8] if state.whose_turn else "monsters",
    )


def start_activity(
    state: GameState, dungeon_id: int, actor: Actor, move: GameMove, game_time: float
) -> None:
    state.current_activity = Activity(
        dungeon_id=dungeon_id,
        actor_id=actor.id,
        tx=move.x,
        ty=move.y,
        start_time=game_time,
    )
    logger.debug(
        "Activity started: actor=%d, type=%s, target=(%d,%d)",
        actor.id,
        move.type.value,
        move.x,
        move.y,
    )


def _end_movement(actor: Actor) -> None:
    # fighting after moving uses up the rest of the moves
    if actor.moves < actor.max_moves:
        actor.moves = 0


def _spend_action(actor: Actor, magic_cost: int = 0) -> None:
    actor.actions = max(0, actor.actions - 1)
    actor.magic = max(0, actor.magic - magic_cost)


def _apply_step(actor: Actor, step: GameMove, game_time: float, events: list[AnyGameEvent]) -> None:
    actor.lx = actor.x
    actor.ly = actor.y
    actor.lt = game_time
    actor.x = step.x
    actor.y = step.y
    actor.moves -= 1
    events.append(ActorStepped(actor_id=actor.id))
    if actor.x > actor.lx:
        actor.facing_right = True
    elif actor.x < actor.lx:
        actor.facing_right = False


def _apply_open(dungeon: Dungeon, actor: Actor, step: GameMove, events: list[AnyGameEvent]) -> None:
    for door in dungeon.doors:
        if door.x == step.x and door.y == step.y:
            door.open = True
    # discovering the rooms wakes up any monsters inside
    for room in get_all_rooms_at(dungeon, step.x, step.y):
        room.discovered = True
    events.append(DoorOpened(actor_id=actor.id, x=step.x, y=step.y))
    logger.info("Door opened: actor=%d, at=(%d,%d)", actor.id, step.x, step.y)


def _apply_chest(
    state: GameState,
    dungeon: Dungeon,
    actor: Actor,
    step: GameMove,
    events: list[AnyGameEvent],
) -> None:
    chest = get_chest_at(dungeon, step.x, step.y)
    if chest is None or chest.open:
        logger.error("No closed chest at (%d,%d) for actor %d", step.x, step.y, actor.id)
        return
    chest.open = True
    add_item_to_inventory(state, create_item(state, chest.item))
    events.append(ChestOpened(actor_id=actor.id, x=step.x, y=step.y))
    events.append(ItemLooted(actor_id=actor.id, x=step.x, y=step.y, value=1, item=chest.item))
    logger.info("Chest opened: actor=%d, item=%s", actor.id, chest.item.value)


def _apply_attack(
    state: GameState,
    dungeon: Dungeon,
    actor: Actor,
    step: GameMove,
    events: list[AnyGameEvent],
    rng: random.Random | None,
) -> None:
    """Resolve melee, ranged and magic attacks against whoever is at the target."""
    if step.type == MoveType.MAGIC:
        _spend_action(actor, MAGIC_ATTACK_COST)
    else:
        _spend_action(actor)

    target = get_actor_at(dungeon, step.x, step.y)
    if target is not None:
        if step.type == MoveType.ATTACK:
            damage = roll_combat(actor, target, rng=rng)
            events.append(MeleeAttacked(actor_id=actor.id))
            events.append(damage_event(actor, step.x, step.y, damage, MELEE_DAMAGE_DELAY))
            apply_damage(state, dungeon, target, damage, events, rng=rng)
        else:
            multiplier = MAGIC_MULTIPLIER if step.type == MoveType.MAGIC else None
            damage = roll_combat(actor, target, multiplier, rng=rng)
            action_event = MagicCast if step.type == MoveType.MAGIC else RangedShot
            events.append(action_event(actor_id=actor.id, x=step.x, y=step.y))
            events.append(damage_event(actor, step.x, step.y, damage, RANGED_DAMAGE_DELAY))
            apply_damage(
                state, dungeon, target, damage, events, RANGED_DAMAGE_DELAY, rng=rng
            )
        logger.info(
            "Attack resolved: type=%s, attacker=%d, target=%d, damage=%d",
            step.type.value,
            actor.id,
            target.id,
            damage,
        )

    _end_movement(actor)
    calc_moves(state, actor)


def _apply_heal(
    state: GameState,
    dungeon: Dungeon,
    actor: Actor,
    step: GameMove,
    events: list[AnyGameEvent],
) -> None:
    _spend_action(actor, HEAL_COST)

    target = get_actor_at(dungeon, step.x, step.y)
    if target is not None:
        healed = heal(target, HEAL_AMOUNT)
        events.append(ActorHealed(actor_id=actor.id, x=step.x, y=step.y, value=HEAL_AMOUNT))
        logger.info("Heal cast: healer=%d, target=%d, healed=%d", actor.id, target.id, healed)

    _end_movement(actor)
    calc_moves(state, actor)


def _take_stairs(
    state: GameState,
    dungeon: Dungeon,
    actor: Actor,
    events: list[AnyGameEvent],
    rng: random.Random | None,
) -> Actor:
    """Move a hero standing on the stairs down into the next level.

    The next level is generated the first time anyone reaches it.
    """
    room = get_room_at(dungeon, actor.x, actor.y)
    if not actor.good or room is None or not room.stairs_down:
        return actor
    if (actor.x, actor.y) != room.center:
        return actor

    next_level = dungeon.level + 1
    next_dungeon = get_dungeon_by_level(state, next_level)
    if next_dungeon is None:
        next_dungeon = generate_dungeon(state, next_level, rng=rng)
        state.dungeons.append(next_dungeon)

    start_room = get_start_room(next_dungeon)
    if start_room is None:
        logger.error("No start room in dungeon %d", next_dungeon.id)
        return actor

    starts = find_free_cells(next_dungeon, [start_room])
    if not starts:
        logger.error("No start places in dungeon %d", next_dungeon.id)
        return actor

    generator = rng or random
    x, y = generator.choice(starts)
    old_x, old_y = actor.x, actor.y

    dungeon.actors = [a for a in dungeon.actors if a.id != actor.id]
    actor.dungeon_id = next_dungeon.id
    actor.x = x
    actor.y = y
    actor.lx = x
    actor.ly = y
    actor.lt = 0
    next_dungeon.actors.append(actor)

    for info in state.player_info.values():
        if info.actor_id == actor.id:
            info.dungeon_id = next_dungeon.id

    events.append(StairsDescended(actor_id=actor.id, x=old_x, y=old_y, value=next_level))
    logger.info(
        "Hero took the stairs: actor=%d, level=%d, dungeon=%d",
        actor.id,
        next_level,
        next_dungeon.id,
    )
    return actor


def apply_current_activity(
    state: GameState,
    game_time: float,
    events: list[AnyGameEvent],
    *,
    rng: random.Random | None = None,
) -> bool:
    """Play out the next step of the in-flight activity.

    Returns:
        True if there was an activity to work on.
    """
    activity = state.current_activity
    if activity is None:
        return False

    state.last_update = game_time

    dungeon = get_dungeon_by_id(state, activity.dungeon_id)
    if dungeon is None:
        logger.error("Activity in unknown dungeon %d, dropping it", activity.dungeon_id)
        state.current_activity = None
        return False

    actor = next((a for a in dungeon.actors if a.id == activity.actor_id), None)
    if actor is None:
        logger.error("Activity actor %d not in dungeon %d, dropping it", activity.actor_id, dungeon.id)
        state.current_activity = None
        return True

    step = find_next_step(state, actor, activity.tx, activity.ty)
    if step is None:
        logger.error(
            "Activity has no next step: actor=%d, target=(%d,%d), dropping it",
            actor.id,
            activity.tx,
            activity.ty,
        )
        state.current_activity = None
        calc_moves(state, actor)
        return True

    if step.type == MoveType.MOVE:
        _apply_step(actor, step, game_time, events)
    elif step.type == MoveType.OPEN:
        _apply_open(dungeon, actor, step, events)
    elif step.type == MoveType.CHEST:
        _apply_chest(state, dungeon, actor, step, events)
    elif step.type in (MoveType.ATTACK, MoveType.SHOOT, MoveType.MAGIC):
        _apply_attack(state, dungeon, actor, step, events, rng)
    elif step.type == MoveType.HEAL:
        _apply_heal(state, dungeon, actor, step, events)

    if (step.x, step.y) == (activity.tx, activity.ty):
        actor = _take_stairs(state, dungeon, actor, events, rng)
        state.current_activity = None
        calc_moves(state, actor)

    return True
