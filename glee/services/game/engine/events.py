"""Game event types - emitted during a tick or action for the presentation layer.

Events describe what happened in this step only, enabling:
- Sound cues (door creaks, footsteps, spell effects)
- Floating damage/heal markers
- Loot fly-in animations

They are never fed back into the simulation.
"""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from glee.schemas.game_engine import ItemType


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    actor_id: int = 0
    x: int = 0
    y: int = 0
    value: int = 0
    delay: int = Field(0, description="Milliseconds the presentation should wait before showing it")
    seq: int = 0  # Sequence number assigned during processing


class DamageDealt(GameEvent):
    """An attack resolved; value is the damage (possibly zero)."""

    event_type: Literal["damage"] = "damage"


class ActorDied(GameEvent):
    """An actor's health reached zero; value is its sprite."""

    event_type: Literal["died"] = "died"


class DoorOpened(GameEvent):
    event_type: Literal["open"] = "open"


class ChestOpened(GameEvent):
    event_type: Literal["chest_open"] = "chest_open"


class ActorStepped(GameEvent):
    event_type: Literal["step"] = "step"


class MeleeAttacked(GameEvent):
    event_type: Literal["melee"] = "melee"


class RangedShot(GameEvent):
    event_type: Literal["shoot"] = "shoot"


class MagicCast(GameEvent):
    event_type: Literal["magic"] = "magic"


class ActorHealed(GameEvent):
    """A heal spell landed; value is the health restored."""

    event_type: Literal["heal"] = "heal"


class TurnChanged(GameEvent):
    event_type: Literal["turn_change"] = "turn_change"
    whose_turn: UUID | None = Field(
        None, description="Player now holding the turn, None for the monsters"
    )


class StairsDescended(GameEvent):
    """A hero took the stairs; value is the level arrived at."""

    event_type: Literal["stairs"] = "stairs"


class GoldLooted(GameEvent):
    event_type: Literal["gold_loot"] = "gold_loot"


class ItemLooted(GameEvent):
    event_type: Literal["item_loot"] = "item_loot"
    item: ItemType


class ItemUsed(GameEvent):
    event_type: Literal["use_item"] = "use_item"
    item: ItemType
    sound: str | None = None


# Union of all event types for type checking
AnyGameEvent = Annotated[
    DamageDealt
    | ActorDied
    | DoorOpened
    | ChestOpened
    | ActorStepped
    | MeleeAttacked
    | RangedShot
    | MagicCast
    | ActorHealed
    | TurnChanged
    | StairsDescended
    | GoldLooted
    | ItemLooted
    | ItemUsed,
    Field(discriminator="event_type"),
]
