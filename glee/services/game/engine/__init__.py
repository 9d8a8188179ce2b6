"""Game engine module - pure game logic over a mutable GameState.

This module provides the core game engine with:
- Action types for explicit player inputs
- Event types for the presentation layer
- ProcessResult pattern for error handling
- Modular processing logic (dungeon generation, legal moves, combat, turns, monster AI)

Usage:
    from glee.services.game.engine import (
        process_action,
        process_tick,
        ProcessResult,
        MakeMoveAction,
    )

    # Process an action
    result = process_action(state, MakeMoveAction(x=3, y=2), player_id, game_time)

    if result.success:
        events = result.events  # Hand these to the presentation layer
    else:
        # Handle error
        print(f"Error: {result.error_code} - {result.error_message}")

    # Drive the simulation at a fixed cadence
    result = process_tick(state, game_time)
"""

# Actions - explicit player inputs
from .actions import (
    ClearTypeAction,
    EndTurnAction,
    GameAction,
    MakeMoveAction,
    SelectSaveAction,
    SetPlayerTypeAction,
    UseItemAction,
    build_action_from_payload,
)

# Events - for the presentation layer
from .events import (
    ActorDied,
    ActorHealed,
    ActorStepped,
    AnyGameEvent,
    ChestOpened,
    DamageDealt,
    DoorOpened,
    GameEvent,
    GoldLooted,
    ItemLooted,
    ItemUsed,
    MagicCast,
    MeleeAttacked,
    RangedShot,
    StairsDescended,
    TurnChanged,
)

# Dungeon generation
from .dungeon import generate_dungeon

# Legal moves
from .legal_moves import calc_moves, find_next_step

# Main processing
from .process import process_action, process_player_left, process_tick

# Turn state machine
from .turns import apply_current_activity, next_turn

# Result types
from .validation import ProcessResult, ValidationResult, validate_action

__all__ = [
    # Actions
    "GameAction",
    "SetPlayerTypeAction",
    "MakeMoveAction",
    "EndTurnAction",
    "UseItemAction",
    "ClearTypeAction",
    "SelectSaveAction",
    "build_action_from_payload",
    # Events
    "GameEvent",
    "AnyGameEvent",
    "DamageDealt",
    "ActorDied",
    "DoorOpened",
    "ChestOpened",
    "ActorStepped",
    "MeleeAttacked",
    "RangedShot",
    "MagicCast",
    "ActorHealed",
    "TurnChanged",
    "StairsDescended",
    "GoldLooted",
    "ItemLooted",
    "ItemUsed",
    # Processing
    "process_action",
    "process_tick",
    "process_player_left",
    # Turns
    "next_turn",
    "apply_current_activity",
    # Dungeon
    "generate_dungeon",
    # Validation
    "ProcessResult",
    "ValidationResult",
    "validate_action",
    # Legal moves
    "calc_moves",
    "find_next_step",
]
