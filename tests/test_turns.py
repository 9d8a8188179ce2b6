"""Tests for the turn state machine and activity playback.

Critical scenarios tested:
- A full round of turns returns to the first player
- Dead heroes are skipped; monsters reset together
- Opening a door discovers every room on its cell
- Walking, attacking and chest opening step by step
- Taking the stairs creates the next level exactly once
"""

import random

from glee.schemas.game_engine import MoveType, PlayerClass
from glee.services.game.engine import (
    EndTurnAction,
    MakeMoveAction,
    process_action,
    process_tick,
)
from glee.services.game.engine.events import (
    ActorStepped,
    ChestOpened,
    DamageDealt,
    DoorOpened,
    ItemLooted,
    MagicCast,
    MeleeAttacked,
    RangedShot,
    StairsDescended,
    TurnChanged,
)
from glee.services.game.engine.legal_moves import calc_moves, get_move_at
from glee.services.game.engine.turns import apply_current_activity, next_turn, start_activity

from .conftest import (
    PLAYER_1_ID,
    PLAYER_2_ID,
    PLAYER_3_ID,
    create_goblin,
    create_hero,
    make_state,
)


def _start_turn(state, player_id):
    """Give the turn to a player the way next_turn would."""
    state.whose_turn = player_id
    info = state.player_info[player_id]
    hero = next(a for a in state.dungeons[0].actors if a.id == info.actor_id)
    calc_moves(state, hero)
    return hero


def _run_activity(state, start_time: int = 1000, rng=None):
    """Tick until the in-flight activity is finished; returns all events."""
    events = []
    game_time = start_time
    for _ in range(50):
        if state.current_activity is None:
            break
        result = process_tick(state, game_time, rng=rng)
        assert result.success
        events.extend(result.events)
        game_time += 1000
    assert state.current_activity is None
    return events


class TestNextTurn:
    """Test turn order transitions."""

    def test_full_round_returns_to_first_player(self, explored_dungeon):
        state = make_state(
            explored_dungeon,
            [
                (PLAYER_1_ID, create_hero(1, 1, 1), PlayerClass.DWARF),
                (PLAYER_2_ID, create_hero(2, 2, 1, PlayerClass.ELF), PlayerClass.ELF),
                (PLAYER_3_ID, create_hero(3, 3, 1, PlayerClass.WITCH), PlayerClass.WITCH),
            ],
            whose_turn=PLAYER_1_ID,
        )
        events = []

        seen = []
        for _ in range(len(state.player_order) + 1):
            next_turn(state, events)
            seen.append(state.whose_turn)

        assert seen == [PLAYER_2_ID, PLAYER_3_ID, None, PLAYER_1_ID]
        assert len(events) == 4
        assert all(isinstance(e, TurnChanged) for e in events)
        assert [e.whose_turn for e in events] == seen

    def test_monster_turn_follows_last_player(self, explored_dungeon):
        state = make_state(
            explored_dungeon,
            [(PLAYER_1_ID, create_hero(1, 1, 1), PlayerClass.DWARF)],
            whose_turn=PLAYER_1_ID,
        )
        next_turn(state, [])
        assert state.whose_turn is None
        assert state.is_monster_turn
        assert state.possible_moves == []

    def test_new_turn_resets_hero(self, explored_dungeon):
        witch = create_hero(1, 1, 1, PlayerClass.WITCH)
        witch.moves = 0
        witch.actions = 0
        witch.magic = 2
        state = make_state(explored_dungeon, [(PLAYER_1_ID, witch, PlayerClass.WITCH)])

        next_turn(state, [])

        assert state.whose_turn == PLAYER_1_ID
        assert witch.moves == witch.max_moves
        assert witch.actions == witch.max_actions
        assert witch.magic == 3
        assert state.possible_moves

    def test_magic_regeneration_is_capped(self, explored_dungeon):
        witch = create_hero(1, 1, 1, PlayerClass.WITCH)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, witch, PlayerClass.WITCH)])
        next_turn(state, [])
        assert witch.magic == witch.max_magic

    def test_dead_heroes_are_skipped(self, explored_dungeon):
        dead = create_hero(2, 2, 1)
        state = make_state(
            explored_dungeon,
            [
                (PLAYER_1_ID, create_hero(1, 1, 1), PlayerClass.DWARF),
                (PLAYER_2_ID, dead, PlayerClass.DWARF),
            ],
            whose_turn=PLAYER_1_ID,
        )
        explored_dungeon.actors.remove(dead)
        dead.health = 0
        state.dead_heroes.append(dead)

        next_turn(state, [])
        assert state.whose_turn is None

    def test_monster_turn_resets_every_monster(self, explored_dungeon):
        goblin = create_goblin(5, 7, 2)
        goblin.moves = 0
        goblin.actions = 0
        explored_dungeon.actors.append(goblin)
        state = make_state(
            explored_dungeon,
            [(PLAYER_1_ID, create_hero(1, 1, 1), PlayerClass.DWARF)],
            whose_turn=PLAYER_1_ID,
        )

        next_turn(state, [])

        assert goblin.moves == goblin.max_moves
        assert goblin.actions == goblin.max_actions

    def test_end_turn_action(self, explored_dungeon):
        state = make_state(
            explored_dungeon,
            [(PLAYER_1_ID, create_hero(1, 1, 1), PlayerClass.DWARF)],
        )
        _start_turn(state, PLAYER_1_ID)

        result = process_action(state, EndTurnAction(), PLAYER_1_ID)

        assert result.success
        assert state.whose_turn is None
        assert isinstance(result.events[0], TurnChanged)

    def test_player_without_moves_is_moved_on(self, explored_dungeon):
        hero = create_hero(1, 1, 1)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)
        hero.moves = 0
        hero.actions = 0
        calc_moves(state, hero)

        result = process_tick(state, 1000)

        assert state.whose_turn is None
        assert isinstance(result.events[0], TurnChanged)


class TestDoorScenario:
    """Opening a door reveals the rooms behind it."""

    def test_open_door_discovers_rooms(self, closed_door_dungeon):
        hero = create_hero(1, 4, 2)
        state = make_state(closed_door_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)
        assert get_move_at(state, 5, 2).type == MoveType.OPEN

        result = process_action(state, MakeMoveAction(x=5, y=2), PLAYER_1_ID, 0)
        assert result.success
        assert state.current_activity is not None

        events = _run_activity(state)

        door = closed_door_dungeon.doors[0]
        assert door.open
        assert all(room.discovered for room in closed_door_dungeon.rooms)
        assert any(isinstance(e, DoorOpened) and (e.x, e.y) == (5, 2) for e in events)
        # the hero stays put and can now walk into the new room
        assert (hero.x, hero.y) == (4, 2)
        assert get_move_at(state, 7, 2) is not None


class TestActivityPlayback:
    """Activities play out one step per logic tick."""

    def test_walk_takes_one_step_per_tick(self, explored_dungeon):
        hero = create_hero(1, 1, 1)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=3, y=3), PLAYER_1_ID, 0)

        result = process_tick(state, 1000)
        assert [type(e) for e in result.events] == [ActorStepped]
        assert hero.moves == hero.max_moves - 1
        assert (hero.lx, hero.ly) == (1, 1)
        assert hero.lt == 1000

        # not enough time has passed for another step
        result = process_tick(state, 1100)
        assert result.events == []

        events = _run_activity(state, 2000)
        assert (hero.x, hero.y) == (3, 3)
        assert hero.moves == hero.max_moves - 4
        assert len([e for e in events if isinstance(e, ActorStepped)]) == 3
        assert state.current_activity is None

    def test_facing_follows_horizontal_movement(self, explored_dungeon):
        hero = create_hero(1, 3, 2)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=2, y=2), PLAYER_1_ID, 0)
        _run_activity(state)
        assert not hero.facing_right

        calc_moves(state, hero)
        process_action(state, MakeMoveAction(x=2, y=3), PLAYER_1_ID, 0)
        _run_activity(state, 10_000)
        assert not hero.facing_right

        calc_moves(state, hero)
        process_action(state, MakeMoveAction(x=3, y=3), PLAYER_1_ID, 0)
        _run_activity(state, 20_000)
        assert hero.facing_right

    def test_melee_attack_after_walking_ends_movement(self, explored_dungeon):
        hero = create_hero(1, 1, 2)
        goblin = create_goblin(2, 4, 2)
        explored_dungeon.actors.append(goblin)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)
        assert get_move_at(state, 4, 2).type == MoveType.ATTACK

        process_action(state, MakeMoveAction(x=4, y=2), PLAYER_1_ID, 0)
        events = _run_activity(state, rng=random.Random(0))

        assert (hero.x, hero.y) == (3, 2)
        assert hero.actions == 0
        assert hero.moves == 0
        assert any(isinstance(e, MeleeAttacked) for e in events)
        damage = next(e for e in events if isinstance(e, DamageDealt))
        assert (damage.x, damage.y) == (4, 2)

    def test_attack_from_standstill_keeps_moves(self, explored_dungeon):
        hero = create_hero(1, 3, 2)
        explored_dungeon.actors.append(create_goblin(2, 4, 2))
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=4, y=2), PLAYER_1_ID, 0)
        _run_activity(state, rng=random.Random(0))

        assert hero.actions == 0
        assert hero.moves == hero.max_moves
        # no actions left, so the goblin (if alive) is no longer a target
        move = get_move_at(state, 4, 2)
        assert move is None or move.type == MoveType.MOVE

    def test_shot_resolves_in_one_tick(self, explored_dungeon):
        elf = create_hero(1, 1, 2, PlayerClass.ELF)
        explored_dungeon.actors.append(create_goblin(2, 4, 2))
        state = make_state(explored_dungeon, [(PLAYER_1_ID, elf, PlayerClass.ELF)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=4, y=2), PLAYER_1_ID, 0)
        result = process_tick(state, 1000, rng=random.Random(0))

        assert state.current_activity is None
        assert isinstance(result.events[0], RangedShot)
        assert isinstance(result.events[1], DamageDealt)
        assert result.events[1].delay > 0
        assert (elf.x, elf.y) == (1, 2)
        assert elf.actions == 0

    def test_magic_costs_magic(self, explored_dungeon):
        witch = create_hero(1, 1, 2, PlayerClass.WITCH)
        explored_dungeon.actors.append(create_goblin(2, 4, 3))
        state = make_state(explored_dungeon, [(PLAYER_1_ID, witch, PlayerClass.WITCH)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=4, y=3), PLAYER_1_ID, 0)
        result = process_tick(state, 1000, rng=random.Random(0))

        assert isinstance(result.events[0], MagicCast)
        assert witch.magic == 2
        assert witch.actions == 0

    def test_heal_restores_ally(self, explored_dungeon):
        witch = create_hero(1, 1, 2, PlayerClass.WITCH)
        ally = create_hero(2, 3, 3)
        ally.health = 1
        state = make_state(
            explored_dungeon,
            [
                (PLAYER_1_ID, witch, PlayerClass.WITCH),
                (PLAYER_2_ID, ally, PlayerClass.DWARF),
            ],
        )
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=3, y=3), PLAYER_1_ID, 0)
        process_tick(state, 1000)

        assert ally.health == 3
        assert witch.magic == 3

    def test_chest_goes_into_party_inventory(self, explored_dungeon):
        hero = create_hero(1, 7, 2)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=8, y=3), PLAYER_1_ID, 0)
        events = _run_activity(state)

        chest = explored_dungeon.chests[0]
        assert chest.open
        assert [(i.type, i.count) for i in state.items] == [(chest.item, 1)]
        assert any(isinstance(e, ChestOpened) for e in events)
        looted = next(e for e in events if isinstance(e, ItemLooted))
        assert looted.item == chest.item

    def test_activity_for_missing_actor_is_dropped(self, explored_dungeon):
        hero = create_hero(1, 1, 1)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)
        process_action(state, MakeMoveAction(x=2, y=2), PLAYER_1_ID, 0)
        explored_dungeon.actors.remove(hero)

        assert apply_current_activity(state, 1000, [])
        assert state.current_activity is None

    def test_broken_path_is_dropped(self, explored_dungeon):
        hero = create_hero(1, 1, 1)
        state = make_state(explored_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)
        process_action(state, MakeMoveAction(x=3, y=3), PLAYER_1_ID, 0)
        state.possible_moves = []

        events = []
        assert apply_current_activity(state, 1000, events)
        assert state.current_activity is None
        assert events == []
        assert (hero.x, hero.y) == (1, 1)


class TestStairs:
    """Taking the stairs to the next level."""

    def test_first_arrival_generates_level_once(self, stairs_dungeon):
        rng = random.Random(31)
        first = create_hero(1, 8, 2)
        second = create_hero(2, 9, 3)
        state = make_state(
            stairs_dungeon,
            [
                (PLAYER_1_ID, first, PlayerClass.DWARF),
                (PLAYER_2_ID, second, PlayerClass.DWARF),
            ],
        )
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=8, y=3), PLAYER_1_ID, 0)
        events = _run_activity(state, rng=rng)

        assert len(state.dungeons) == 2
        level_two = state.dungeons[1]
        assert level_two.level == 2
        assert first.dungeon_id == level_two.id
        assert first in level_two.actors
        assert first not in stairs_dungeon.actors
        assert state.player_info[PLAYER_1_ID].dungeon_id == level_two.id
        start = next(room for room in level_two.rooms if room.start)
        assert start.contains(first.x, first.y)
        assert (first.x, first.y) != start.stairs_up
        stairs = next(e for e in events if isinstance(e, StairsDescended))
        assert stairs.value == 2
        # legal moves now belong to the hero on the new level
        assert state.possible_moves
        assert all(start.contains(m.x, m.y) for m in state.possible_moves if m.depth == 1)

        result = process_action(state, EndTurnAction(), PLAYER_1_ID)
        assert result.success
        assert state.whose_turn == PLAYER_2_ID

        process_action(state, MakeMoveAction(x=8, y=3), PLAYER_2_ID, 0)
        _run_activity(state, 50_000, rng=rng)

        assert len(state.dungeons) == 2
        assert second.dungeon_id == level_two.id
        assert (second.x, second.y) != (first.x, first.y)

    def test_walking_past_the_stairs_does_not_descend(self, stairs_dungeon):
        hero = create_hero(1, 8, 2)
        state = make_state(stairs_dungeon, [(PLAYER_1_ID, hero, PlayerClass.DWARF)])
        _start_turn(state, PLAYER_1_ID)

        process_action(state, MakeMoveAction(x=8, y=4), PLAYER_1_ID, 0)
        _run_activity(state)

        assert (hero.x, hero.y) == (8, 4)
        assert len(state.dungeons) == 1

    def test_monsters_do_not_take_stairs(self, stairs_dungeon):
        goblin = create_goblin(5, 8, 2)
        stairs_dungeon.actors.append(goblin)
        state = make_state(stairs_dungeon, [(PLAYER_1_ID, create_hero(1, 1, 1), PlayerClass.DWARF)])
        calc_moves(state, goblin)
        start_activity(state, stairs_dungeon.id, goblin, get_move_at(state, 8, 3), 0)
        apply_current_activity(state, 1000, [])

        assert (goblin.x, goblin.y) == (8, 3)
        assert len(state.dungeons) == 1
