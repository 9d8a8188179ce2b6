"""Legal move calculation and path reconstruction for actors."""

import logging
from collections import deque

logger = logging.getLogger(__name__)

from glee.config import get_settings
from glee.schemas.game_engine import (
    TARGETED_MOVES,
    Actor,
    Dungeon,
    GameMove,
    GameState,
    MoveType,
)

from .spatial import (
    blocked,
    get_actor_at,
    get_chest_at,
    get_door_at,
    get_dungeon_by_id,
    has_line_of_sight,
    is_adjacent,
    manhattan,
)

NEIGHBOURS = ((1, 0), (-1, 0), (0, 1), (0, -1))

MAGIC_ATTACK_COST = 3
HEAL_COST = 2

Cell = tuple[int, int]


def record_move(found: dict[Cell, GameMove], move: GameMove) -> bool:
    """Add a move to the found set unless a move at least as short is already there.

    A strictly shorter move evicts the existing entry for the same cell.

    Returns:
        True if the move was inserted (new cell or shorter path).
    """
    key = (move.x, move.y)
    existing = found.get(key)
    if existing is not None:
        if existing.depth <= move.depth:
            return False
        del found[key]
    found[key] = move
    return True


def _terminal_move_type(dungeon: Dungeon, actor: Actor, x: int, y: int) -> MoveType | None:
    """Moves that stop the flood: opening doors/chests (heroes only) and melee."""
    if actor.good:
        door = get_door_at(dungeon, x, y)
        if door and not door.open:
            return MoveType.OPEN
        chest = get_chest_at(dungeon, x, y)
        if chest and not chest.open:
            return MoveType.CHEST

    target = get_actor_at(dungeon, x, y)
    if actor.actions > 0 and target and target.good != actor.good:
        return MoveType.ATTACK
    return None


def _flood_fill(dungeon: Dungeon, actor: Actor, found: dict[Cell, GameMove]) -> None:
    """Breadth-first flood from the actor out to its remaining moves."""
    # (from_x, from_y, x, y, depth)
    pending: deque[tuple[int, int, int, int, int]] = deque(
        (actor.x, actor.y, actor.x + dx, actor.y + dy, 1) for dx, dy in NEIGHBOURS
    )

    while pending:
        last_x, last_y, x, y, depth = pending.popleft()
        if depth > actor.moves:
            continue

        # can't open doors or attack from a square we can't stand in
        occupant = get_actor_at(dungeon, last_x, last_y)
        if occupant is None or occupant.id == actor.id:
            terminal = _terminal_move_type(dungeon, actor, x, y)
            if terminal is not None:
                record_move(
                    found, GameMove(x=x, y=y, sx=last_x, sy=last_y, type=terminal, depth=depth)
                )
                continue

        if blocked(dungeon, actor, x, y):
            continue

        inserted = record_move(
            found, GameMove(x=x, y=y, sx=last_x, sy=last_y, type=MoveType.MOVE, depth=depth)
        )
        if not inserted:
            continue

        for dx, dy in NEIGHBOURS:
            pending.append((x, y, x + dx, y + dy, depth + 1))


def _add_targeted_moves(dungeon: Dungeon, actor: Actor, found: dict[Cell, GameMove]) -> None:
    """Ranged, magic and heal moves against anyone in sight.

    These replace whatever the flood found at the same cell.
    """
    if actor.actions <= 0:
        return
    if not actor.ranged and actor.magic <= 0:
        return

    ranged_distance = get_settings().RANGED_DISTANCE
    for other in dungeon.actors:
        if other.id == actor.id:
            continue
        distance = manhattan(actor.x, actor.y, other.x, other.y)
        if distance > ranged_distance:
            continue
        if not has_line_of_sight(dungeon, actor, other):
            continue

        move_type: MoveType | None = None
        if other.good != actor.good:
            # adjacent enemies have to be fought in melee
            if not is_adjacent(actor, other):
                if actor.magic >= MAGIC_ATTACK_COST:
                    move_type = MoveType.MAGIC
                elif actor.ranged:
                    move_type = MoveType.SHOOT
        elif other.health < other.max_health and actor.magic >= HEAL_COST:
            move_type = MoveType.HEAL

        if move_type is None:
            continue

        found.pop((other.x, other.y), None)
        found[(other.x, other.y)] = GameMove(
            x=other.x, y=other.y, sx=actor.x, sy=actor.y, type=move_type, depth=distance
        )


def calc_moves(state: GameState, actor: Actor) -> list[GameMove]:
    """Recompute the legal moves for an actor from its current position.

    The result replaces state.possible_moves entirely. The flood alone is kept
    in state.path_moves, since targeted moves may cover cells a path runs through.
    """
    flood: dict[Cell, GameMove] = {}
    found: dict[Cell, GameMove] = {}
    dungeon = get_dungeon_by_id(state, actor.dungeon_id)
    if dungeon is not None:
        _flood_fill(dungeon, actor, flood)
        found = dict(flood)
        _add_targeted_moves(dungeon, actor, found)
    else:
        logger.error("Actor %d is in unknown dungeon %d", actor.id, actor.dungeon_id)

    state.path_moves = list(flood.values())
    state.possible_moves = list(found.values())
    logger.debug(
        "Legal moves: actor=%d, at=(%d,%d), moves_left=%d, found=%d",
        actor.id,
        actor.x,
        actor.y,
        actor.moves,
        len(state.possible_moves),
    )
    return state.possible_moves


def get_move_at(state: GameState, x: int, y: int) -> GameMove | None:
    return next((m for m in state.possible_moves if m.x == x and m.y == y), None)


def find_next_step(state: GameState, mover: Actor, x: int, y: int) -> GameMove | None:
    """Find the move to execute now on the way to the legal move at (x, y).

    Targeted moves execute from range straight away. Otherwise the path is
    walked back through the flood moves, from source cell to source cell,
    until reaching the cell next to the mover.

    Returns:
        The next move, or None if (x, y) isn't legal or the path is broken.
    """
    current = get_move_at(state, x, y)
    if current is None:
        return None
    if current.type in TARGETED_MOVES:
        return current

    path = {(m.x, m.y): m for m in state.path_moves}
    while manhattan(current.x, current.y, mover.x, mover.y) != 1:
        previous = path.get((current.sx, current.sy))
        if previous is None or previous.depth != current.depth - 1:
            logger.error(
                "No path step found: actor=%d, at=(%d,%d), target=(%d,%d), broken_at=(%d,%d)",
                mover.id,
                mover.x,
                mover.y,
                x,
                y,
                current.x,
                current.y,
            )
            return None
        current = previous

    return current
