"""Lookups over a dungeon's rooms, doors, chests and actors.

A cell is an (x, y) grid location; rooms are rectangles whose boundary
cells are walls.
"""

from collections.abc import Iterator

from glee.schemas.game_engine import (
    Actor,
    Chest,
    Door,
    Dungeon,
    GameState,
    Room,
)


def get_dungeon_by_id(state: GameState, dungeon_id: int) -> Dungeon | None:
    return next((d for d in state.dungeons if d.id == dungeon_id), None)


def get_dungeon_by_level(state: GameState, level: int) -> Dungeon | None:
    return next((d for d in state.dungeons if d.level == level), None)


def get_actor_by_id(state: GameState, dungeon_id: int, actor_id: int) -> Actor | None:
    """Find an actor by id, looking at dead heroes first and then the dungeon."""
    dead = next((a for a in state.dead_heroes if a.id == actor_id), None)
    if dead:
        return dead

    dungeon = get_dungeon_by_id(state, dungeon_id)
    if dungeon:
        return next((a for a in dungeon.actors if a.id == actor_id), None)
    return None


def get_actor_at(dungeon: Dungeon, x: int, y: int) -> Actor | None:
    return next((a for a in dungeon.actors if a.x == x and a.y == y), None)


def get_door_at(dungeon: Dungeon, x: int, y: int) -> Door | None:
    return next((d for d in dungeon.doors if d.x == x and d.y == y), None)


def get_chest_at(dungeon: Dungeon, x: int, y: int) -> Chest | None:
    return next((c for c in dungeon.chests if c.x == x and c.y == y), None)


def get_room_at(dungeon: Dungeon, x: int, y: int) -> Room | None:
    return next((r for r in dungeon.rooms if r.contains(x, y)), None)


def get_all_rooms_at(dungeon: Dungeon, x: int, y: int) -> list[Room]:
    """All rooms containing a cell - walls are shared, so a door belongs to two."""
    return [r for r in dungeon.rooms if r.contains(x, y)]


def get_start_room(dungeon: Dungeon) -> Room | None:
    return next((r for r in dungeon.rooms if r.start), None)


def manhattan(ax: int, ay: int, bx: int, by: int) -> int:
    return abs(ax - bx) + abs(ay - by)


def is_adjacent(a: Actor, b: Actor) -> bool:
    return manhattan(a.x, a.y, b.x, b.y) == 1


def blocked(dungeon: Dungeon, actor: Actor | None, x: int, y: int) -> bool:
    """Check whether a cell blocks movement for the given actor.

    Rules in order:
    - the moving actor's own cell blocks itself
    - another actor blocks unless both are heroes (monsters never share)
    - an open door never blocks
    - a chest always blocks
    - the void outside every room blocks
    - the start room's stairs up block
    - room walls block
    - undiscovered rooms block

    When actor is None (generation-time checks) the actor rules are skipped.
    """
    if actor is not None:
        blocking_actor = get_actor_at(dungeon, x, y)
        if blocking_actor is not None and blocking_actor.id == actor.id:
            return True
        if blocking_actor and (blocking_actor.good != actor.good or not actor.good):
            return True

    door = get_door_at(dungeon, x, y)
    if door and door.open:
        return False

    if get_chest_at(dungeon, x, y):
        return True

    room = get_room_at(dungeon, x, y)
    if room is None:
        return True

    if room.start and (x, y) == room.stairs_up:
        return True

    if room.on_edge(x, y):
        return True

    if not room.discovered:
        return True

    return False


def is_wall(dungeon: Dungeon, x: int, y: int) -> bool:
    """True for room boundary cells that aren't open doors, and for the void."""
    door = get_door_at(dungeon, x, y)
    if door and door.open:
        return False
    room = get_room_at(dungeon, x, y)
    if room is None:
        return True
    return room.on_edge(x, y)


def line_cells(x0: int, y0: int, x1: int, y1: int) -> Iterator[tuple[int, int]]:
    """Bresenham line from (x0, y0) to (x1, y1), both ends included."""
    dx, dy = abs(x1 - x0), abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    x, y = x0, y0
    while True:
        yield x, y
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def has_line_of_sight(dungeon: Dungeon, source: Actor, target: Actor) -> bool:
    """Check the cells strictly between two actors for walls or other actors."""
    for x, y in line_cells(source.x, source.y, target.x, target.y):
        if (x, y) in ((source.x, source.y), (target.x, target.y)):
            continue
        if is_wall(dungeon, x, y):
            return False
        if get_actor_at(dungeon, x, y):
            return False
    return True


def find_free_cells(dungeon: Dungeon, rooms: list[Room]) -> list[tuple[int, int]]:
    """Interior cells of the given rooms that nothing stands on or blocks."""
    cells: list[tuple[int, int]] = []
    for room in rooms:
        for x in range(room.x + 1, room.x + room.width - 1):
            for y in range(room.y + 1, room.y + room.height - 1):
                if get_actor_at(dungeon, x, y):
                    continue
                if blocked(dungeon, None, x, y):
                    continue
                cells.append((x, y))
    return cells
