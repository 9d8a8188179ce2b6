"""Game service module.

Provides:
- Game initialization and save slots (start_game.py)
- Game engine processing (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    GameAction,
    MakeMoveAction,
    ProcessResult,
    SetPlayerTypeAction,
    build_action_from_payload,
    process_action,
    process_player_left,
    process_tick,
)
from .start_game import create_save_record, initialize_game, validate_game_setup

__all__ = [
    # Initialization
    "initialize_game",
    "validate_game_setup",
    "create_save_record",
    # Engine
    "GameAction",
    "ProcessResult",
    "SetPlayerTypeAction",
    "MakeMoveAction",
    "process_action",
    "process_tick",
    "process_player_left",
    "build_action_from_payload",
]
