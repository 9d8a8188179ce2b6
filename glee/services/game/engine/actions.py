"""Game action types - explicit player inputs separated from game state."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from glee.schemas.game_engine import PlayerClass, SaveRecord


class SetPlayerTypeAction(BaseModel):
    """Player joins the session with a hero class."""

    action_type: Literal["set_player_type"] = "set_player_type"
    player_class: PlayerClass


class MakeMoveAction(BaseModel):
    """Player selects one of the legal moves by its destination cell."""

    action_type: Literal["make_move"] = "make_move"
    x: int
    y: int


class EndTurnAction(BaseModel):
    """Player voluntarily hands the turn on."""

    action_type: Literal["end_turn"] = "end_turn"


class UseItemAction(BaseModel):
    """Player consumes one item from the party inventory."""

    action_type: Literal["use_item"] = "use_item"
    item_id: int = Field(..., description="ID of the inventory stack to use")


class ClearTypeAction(BaseModel):
    """Player leaves the turn order so a class can be reselected."""

    action_type: Literal["clear_type"] = "clear_type"


class SelectSaveAction(BaseModel):
    """Player starts the session from one of their save slots."""

    action_type: Literal["select_save"] = "select_save"
    save: SaveRecord


# Union type for all game actions
GameAction = Annotated[
    SetPlayerTypeAction
    | MakeMoveAction
    | EndTurnAction
    | UseItemAction
    | ClearTypeAction
    | SelectSaveAction,
    Field(discriminator="action_type"),
]


def build_action_from_payload(payload: dict) -> GameAction:
    """Build a typed action from a raw payload dict.

    Args:
        payload: Dict with 'action_type' key and action-specific fields.

    Returns:
        The appropriate GameAction subtype.

    Raises:
        ValueError: If action_type is missing or unknown.
    """
    action_type = payload.get("action_type")

    if action_type == "set_player_type":
        return SetPlayerTypeAction.model_validate(payload)
    elif action_type == "make_move":
        return MakeMoveAction.model_validate(payload)
    elif action_type == "end_turn":
        return EndTurnAction.model_validate(payload)
    elif action_type == "use_item":
        return UseItemAction.model_validate(payload)
    elif action_type == "clear_type":
        return ClearTypeAction.model_validate(payload)
    elif action_type == "select_save":
        return SelectSaveAction.model_validate(payload)
    else:
        raise ValueError(f"Unknown action type: {action_type}")
