from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


# Kinds of legal move produced by the move resolver
class MoveType(str, Enum):
    MOVE = "move"
    ATTACK = "attack"
    OPEN = "open"
    CHEST = "chest"
    SHOOT = "shoot"
    MAGIC = "magic"
    HEAL = "heal"


# Moves that execute at range without walking a path
TARGETED_MOVES = frozenset({MoveType.SHOOT, MoveType.MAGIC, MoveType.HEAL})


class PlayerClass(str, Enum):
    DWARF = "dwarf"
    WITCH = "witch"
    ELF = "elf"
    KNIGHT = "knight"


class ItemType(str, Enum):
    HEAL_POTION = "heal-potion"
    MAGIC_POTION = "magic-potion"
    IRONSKIN_POTION = "ironskin-potion"
    STRENGTH_POTION = "strength-potion"


# Loot tables
class ItemChance(BaseModel):
    type: ItemType
    chance: float = Field(..., ge=0.0, le=1.0)
    min_level: int = 1


class Loot(BaseModel):
    gold_min: int = 0
    gold_max: int = 0
    items: list[ItemChance] = []


# Static catalog definitions
class ActorDef(BaseModel):
    """Stats an actor is created with."""

    name: str
    sprite: int
    health: int
    attack: int
    defense: int
    magic: int
    moves: int
    good: bool
    ranged: bool = False
    min_level: int = 1
    loot: Loot | None = None


class ItemInfo(BaseModel):
    name: str
    description: str
    icon: int
    only_used_by: list[PlayerClass] | None = None
    attack: int = 0
    defense: int = 0
    health: int = 0
    magic: int = 0
    sound: str | None = None


# World entities
class Actor(BaseModel):
    """A hero or monster living in exactly one dungeon."""

    id: int
    name: str
    x: int
    y: int
    # previous position and when it was left, for interpolated rendering only
    lx: int
    ly: int
    lt: float = 0
    sprite: int
    player_id: UUID | None = None
    good: bool
    health: int
    max_health: int
    moves: int
    max_moves: int
    magic: int
    max_magic: int
    actions: int = 1
    max_actions: int = 1
    attack: int
    defense: int
    attack_modifier: int = 0
    defense_modifier: int = 0
    ranged: bool = False
    facing_right: bool = True
    loot: Loot | None = None
    dungeon_id: int

    @property
    def effective_attack(self) -> int:
        return self.attack + self.attack_modifier

    @property
    def effective_defense(self) -> int:
        return self.defense + self.defense_modifier


class Room(BaseModel):
    x: int
    y: int
    width: int
    height: int
    discovered: bool = False
    start: bool = False
    depth: int = 0
    stairs_down: bool = False

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2

    @property
    def stairs_up(self) -> tuple[int, int]:
        return self.x + self.width - 2, self.y + 1

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def on_edge(self, x: int, y: int) -> bool:
        return (
            x == self.x
            or y == self.y
            or x == self.x + self.width - 1
            or y == self.y + self.height - 1
        )


class Door(BaseModel):
    x: int
    y: int
    open: bool = False


class Chest(BaseModel):
    x: int
    y: int
    item: ItemType
    open: bool = False


class Dungeon(BaseModel):
    id: int
    level: int
    rooms: list[Room] = []
    doors: list[Door] = []
    chests: list[Chest] = []
    actors: list[Actor] = []


class Item(BaseModel):
    """A stack of items in the shared party inventory."""

    id: int
    type: ItemType
    count: int = 1


# Turn and activity tracking
class GameMove(BaseModel):
    """A legal move, recomputed whenever the acting actor's situation changes."""

    x: int
    y: int
    sx: int
    sy: int
    type: MoveType
    depth: int


class Activity(BaseModel):
    """The single in-flight action being played out over several ticks."""

    dungeon_id: int
    actor_id: int
    tx: int
    ty: int
    start_time: float = 0


class PlayerInfo(BaseModel):
    type: PlayerClass
    actor_id: int
    dungeon_id: int


# Save slot data handed in by the persistence layer
class SaveRecord(BaseModel):
    level: int = Field(..., ge=1)
    items: list[Item] = []
    saved_at: datetime
    description: str = ""


# Game state for broadcasting and game flow
class GameState(BaseModel):
    """Authoritative simulation state - mutated in place by the engine.

    Player actions and per-tick updates are handled via
    glee.services.game.engine.process, which hands back the events produced
    alongside this state.
    """

    gold: int = 0
    items: list[Item] = []
    next_id: int = 1
    player_order: list[UUID] = []
    dead_heroes: list[Actor] = []
    player_info: dict[UUID, PlayerInfo] = {}
    whose_turn: UUID | None = None  # None is the monster faction's turn
    dungeons: list[Dungeon] = []
    possible_moves: list[GameMove] = []
    path_moves: list[GameMove] = []  # flood moves behind possible_moves, walked back for paths
    current_activity: Activity | None = None
    last_update: float = 0
    event_seq: int = 0  # Next sequence number for events (monotonically increasing)
    whose_save: UUID | None = None
    save_level: int | None = None

    def allocate_id(self) -> int:
        next_id = self.next_id
        self.next_id += 1
        return next_id

    @property
    def is_monster_turn(self) -> bool:
        return self.whose_turn is None
