"""Monster faction turn: pick one monster per tick and send it at the nearest hero."""

import logging
import math

logger = logging.getLogger(__name__)

from glee.schemas.game_engine import Actor, GameState, MoveType

from .events import AnyGameEvent
from .legal_moves import calc_moves
from .spatial import get_dungeon_by_id, get_room_at, manhattan
from .turns import next_turn, start_activity


def get_heroes(state: GameState, dungeon_id: int | None = None) -> list[Actor]:
    """Living heroes, optionally limited to one dungeon."""
    return [
        actor
        for dungeon in state.dungeons
        if dungeon_id is None or dungeon.id == dungeon_id
        for actor in dungeon.actors
        if actor.good
    ]


def find_active_monsters(state: GameState) -> list[Actor]:
    """Monsters standing in rooms that have been discovered."""
    active: list[Actor] = []
    for dungeon in state.dungeons:
        for actor in dungeon.actors:
            if actor.good:
                continue
            room = get_room_at(dungeon, actor.x, actor.y)
            if room is not None and room.discovered:
                active.append(actor)
    return active


def get_adjacent_hero(state: GameState, monster: Actor) -> Actor | None:
    return next(
        (
            hero
            for hero in get_heroes(state, monster.dungeon_id)
            if manhattan(hero.x, hero.y, monster.x, monster.y) == 1
        ),
        None,
    )


def distance_to_hero(state: GameState, dungeon_id: int, x: int, y: int) -> float:
    """Manhattan distance from a cell to the closest hero in the same dungeon."""
    heroes = get_heroes(state, dungeon_id)
    if not heroes:
        return math.inf
    return min(manhattan(hero.x, hero.y, x, y) for hero in heroes)


def _can_act(state: GameState, monster: Actor) -> bool:
    next_to_hero = get_adjacent_hero(state, monster) is not None
    return (monster.moves > 0 and not next_to_hero) or (monster.actions > 0 and next_to_hero)


def take_monster_turn(state: GameState, game_time: float, events: list[AnyGameEvent]) -> None:
    """Let the most urgent monster act, or hand the turn back to the players."""
    if not get_heroes(state):
        logger.debug("Monster turn with no living heroes, nothing to do")
        return

    eligible = [m for m in find_active_monsters(state) if _can_act(state, m)]
    if not eligible:
        logger.debug("No monster can act, ending monster turn")
        next_turn(state, events)
        return

    # sort is stable, so ties go to the first monster in list order
    eligible.sort(key=lambda m: distance_to_hero(state, m.dungeon_id, m.x, m.y))
    monster = eligible[0]
    dungeon = get_dungeon_by_id(state, monster.dungeon_id)

    moves = calc_moves(state, monster)
    if not moves or dungeon is None:
        logger.debug("Monster %d has no moves, standing it down", monster.id)
        monster.moves = 0
        monster.actions = 0
        return

    hero = get_adjacent_hero(state, monster)
    if hero is not None:
        attack = next(
            (m for m in moves if m.x == hero.x and m.y == hero.y and m.type == MoveType.ATTACK),
            None,
        )
        if attack is not None:
            start_activity(state, dungeon.id, monster, attack, game_time)
            logger.info("Monster %d attacks hero %d", monster.id, hero.id)
        else:
            logger.warning("Monster %d next to hero %d has no attack move", monster.id, hero.id)
            monster.actions = 0
        monster.actions = max(0, monster.actions - 1)
        return

    best = min(moves, key=lambda m: distance_to_hero(state, dungeon.id, m.x, m.y))
    start_activity(state, dungeon.id, monster, best, game_time)
    logger.debug(
        "Monster %d heads for (%d,%d), type=%s", monster.id, best.x, best.y, best.type.value
    )
