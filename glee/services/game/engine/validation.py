"""Validation layer for game actions and ProcessResult pattern.

Separates validation from processing logic:
- validate_action() checks if an action is valid given current state
- ProcessResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

logger = logging.getLogger(__name__)

from glee.config import get_settings
from glee.schemas.game_engine import GameState, MoveType

from .actions import (
    ClearTypeAction,
    EndTurnAction,
    GameAction,
    MakeMoveAction,
    SelectSaveAction,
    SetPlayerTypeAction,
    UseItemAction,
)
from .events import AnyGameEvent
from .items import can_use_item, find_item, get_item_info
from .legal_moves import get_move_at
from .spatial import get_actor_at, get_actor_by_id, get_dungeon_by_id


@dataclass
class ProcessResult:
    """Result of processing a game action or tick.

    Replaces exceptions for control flow, providing explicit success/failure
    with error codes suitable for client localization.
    """

    state: GameState | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(
        cls,
        state: GameState,
        events: list[AnyGameEvent] | None = None,
    ) -> "ProcessResult":
        """Create a successful result with new state and events."""
        return cls(
            state=state,
            events=events or [],
            success=True,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            events=[],
            success=False,
            error_code=code,
            error_message=message,
        )


@dataclass
class ValidationResult:
    """Result of validating an action before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def _validate_turn_holder(state: GameState, player_id: UUID) -> ValidationResult | None:
    """Common checks for actions only the current turn holder may take."""
    if player_id not in state.player_info:
        logger.warning("Validation failed: PLAYER_NOT_JOINED, player=%s", str(player_id)[:8])
        return ValidationResult.error("PLAYER_NOT_JOINED", "You haven't chosen a hero yet")

    if state.whose_turn != player_id:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, current=%s, attempted=%s",
            str(state.whose_turn)[:8] if state.whose_turn else "monsters",
            str(player_id)[:8],
        )
        return ValidationResult.error("NOT_YOUR_TURN", "It's not your turn")

    info = state.player_info[player_id]
    actor = get_actor_by_id(state, info.dungeon_id, info.actor_id)
    if actor is None or actor.health <= 0:
        logger.warning("Validation failed: ACTOR_DEAD, player=%s", str(player_id)[:8])
        return ValidationResult.error("ACTOR_DEAD", "Your hero has fallen")

    return None


def validate_action(
    state: GameState,
    action: GameAction,
    player_id: UUID,
) -> ValidationResult:
    """Validate an action before processing.

    Checks:
    - Joining: not already joined, session not full
    - Turn actions: it's the player's turn and their hero is alive
    - Moves: no activity in flight and the destination is a legal move
    - Items: the stack exists and the hero's class may use it
    - Save selection: only once, before anyone has joined

    Args:
        state: Current game state.
        action: The action to validate.
        player_id: The player attempting the action.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    action_type = type(action).__name__
    logger.debug(
        "Validating action: type=%s, player=%s, whose_turn=%s",
        action_type,
        str(player_id)[:8],
        str(state.whose_turn)[:8] if state.whose_turn else "monsters",
    )

    if isinstance(action, SetPlayerTypeAction):
        if player_id in state.player_order:
            logger.warning("Validation failed: ALREADY_JOINED, player=%s", str(player_id)[:8])
            return ValidationResult.error("ALREADY_JOINED", "You have already joined")
        if len(state.player_order) >= get_settings().MAX_PLAYERS:
            logger.warning("Validation failed: GAME_FULL, players=%d", len(state.player_order))
            return ValidationResult.error("GAME_FULL", "The party is full")

    elif isinstance(action, SelectSaveAction):
        if state.whose_save is not None:
            logger.warning("Validation failed: SAVE_ALREADY_SELECTED")
            return ValidationResult.error(
                "SAVE_ALREADY_SELECTED",
                "A save has already been selected for this game",
            )
        if state.player_order:
            logger.warning("Validation failed: GAME_ALREADY_STARTED")
            return ValidationResult.error(
                "GAME_ALREADY_STARTED",
                "Saves can only be selected before heroes join",
            )

    elif isinstance(action, ClearTypeAction):
        if player_id not in state.player_order:
            logger.warning("Validation failed: PLAYER_NOT_JOINED, player=%s", str(player_id)[:8])
            return ValidationResult.error("PLAYER_NOT_JOINED", "You haven't chosen a hero yet")

    elif isinstance(action, MakeMoveAction):
        error = _validate_turn_holder(state, player_id)
        if error:
            return error

        if state.current_activity is not None:
            logger.warning("Validation failed: ACTIVITY_IN_PROGRESS")
            return ValidationResult.error(
                "ACTIVITY_IN_PROGRESS",
                "Wait for the current move to finish",
            )

        move = get_move_at(state, action.x, action.y)
        if move is None:
            logger.warning(
                "Validation failed: ILLEGAL_MOVE, requested=(%d,%d), legal_moves=%d",
                action.x,
                action.y,
                len(state.possible_moves),
            )
            return ValidationResult.error(
                "ILLEGAL_MOVE",
                f"({action.x}, {action.y}) is not a legal move",
            )

        # heroes may walk through each other but not stop on one another
        info = state.player_info[player_id]
        dungeon = get_dungeon_by_id(state, info.dungeon_id)
        if move.type == MoveType.MOVE and dungeon is not None:
            occupant = get_actor_at(dungeon, action.x, action.y)
            if occupant is not None and occupant.id != info.actor_id:
                logger.warning("Validation failed: ILLEGAL_MOVE, (%d,%d) occupied", action.x, action.y)
                return ValidationResult.error(
                    "ILLEGAL_MOVE",
                    f"({action.x}, {action.y}) is occupied",
                )

    elif isinstance(action, EndTurnAction):
        error = _validate_turn_holder(state, player_id)
        if error:
            return error

        if state.current_activity is not None:
            logger.warning("Validation failed: ACTIVITY_IN_PROGRESS")
            return ValidationResult.error(
                "ACTIVITY_IN_PROGRESS",
                "Wait for the current move to finish",
            )

    elif isinstance(action, UseItemAction):
        error = _validate_turn_holder(state, player_id)
        if error:
            return error

        item = find_item(state, action.item_id)
        if item is None:
            logger.warning("Validation failed: ITEM_NOT_FOUND, item=%d", action.item_id)
            return ValidationResult.error("ITEM_NOT_FOUND", "No such item in the inventory")

        info = get_item_info(item.type)
        if info is None:
            return ValidationResult.error("ITEM_NOT_FOUND", f"Unknown item type: {item.type}")

        player_class = state.player_info[player_id].type
        if not can_use_item(info, player_class):
            logger.warning(
                "Validation failed: ITEM_RESTRICTED, item=%s, class=%s",
                item.type.value,
                player_class.value,
            )
            return ValidationResult.error(
                "ITEM_RESTRICTED",
                f"{info.name} can't be used by a {player_class.value}",
            )

    logger.debug("Action validated successfully: type=%s", action_type)
    return ValidationResult.ok()
