"""
Entity identity and movable objects for the Snake Arena simulation core.

Every visual entity the core asks the presentation layer to draw carries an
EntityTag: an explicit kind plus the owning player index or object serial.
The label string handed to the presentation layer is derived from the tag,
so classifying a colliding label is a registry lookup followed by a check
of `tag.kind`, never string parsing.

Label formats:
  - player head:   "player-head{index}"
  - player trail:  "player-tail{index}.{serial}"
  - obstacle:      "obstacle{serial}"
  - pill:          "pill{serial}"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from snake_arena.utils.spatial import Vec2, ZERO


class EntityKind(Enum):
    """What a labelled entity is."""
    PLAYER_HEAD = auto()
    PLAYER_TRAIL = auto()
    OBSTACLE = auto()
    PILL = auto()


@dataclass(frozen=True, slots=True)
class EntityTag:
    """
    Tagged identity of a labelled entity.

    Attributes:
        kind: Entity kind.
        owner: Player index for player entities, object serial otherwise.
        label: Unique label used by the presentation layer.
    """
    kind: EntityKind
    owner: int
    label: str

    @classmethod
    def player_head(cls, index: int) -> EntityTag:
        return cls(EntityKind.PLAYER_HEAD, index, f"player-head{index}")

    @classmethod
    def player_trail(cls, index: int, serial: int) -> EntityTag:
        return cls(EntityKind.PLAYER_TRAIL, index, f"player-tail{index}.{serial}")

    @classmethod
    def obstacle(cls, serial: int) -> EntityTag:
        return cls(EntityKind.OBSTACLE, serial, f"obstacle{serial}")

    @classmethod
    def pill(cls, serial: int) -> EntityTag:
        return cls(EntityKind.PILL, serial, f"pill{serial}")

    @property
    def is_player(self) -> bool:
        """True for heads and trail segments."""
        return self.kind in (EntityKind.PLAYER_HEAD, EntityKind.PLAYER_TRAIL)

    @property
    def is_object(self) -> bool:
        """True for obstacles and pills."""
        return self.kind in (EntityKind.OBSTACLE, EntityKind.PILL)


@dataclass(slots=True)
class MovableObject:
    """
    An obstacle or a pill owned by the registry.

    Attributes:
        tag: Tagged identity (kind OBSTACLE or PILL).
        position: Canonical position (the presentation layer mirrors it).
        velocity: Displacement per obstacle-move tick. Zero for pills.
        scale: Visual scale, which doubles as mass in bounces.
    """
    tag: EntityTag
    position: Vec2
    velocity: Vec2 = field(default=ZERO)
    scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.tag.is_object:
            raise ValueError(f"MovableObject needs an obstacle or pill tag, got {self.tag.kind}")

    @property
    def label(self) -> str:
        return self.tag.label

    @property
    def mass(self) -> float:
        return self.scale

    @property
    def is_obstacle(self) -> bool:
        return self.tag.kind is EntityKind.OBSTACLE

    @property
    def is_pill(self) -> bool:
        return self.tag.kind is EntityKind.PILL

    def to_dict(self) -> dict:
        """Serialize for snapshots."""
        return {
            "label": self.label,
            "kind": self.tag.kind.name,
            "x": round(self.position.x, 6),
            "y": round(self.position.y, 6),
            "vx": round(self.velocity.x, 6),
            "vy": round(self.velocity.y, 6),
            "scale": round(self.scale, 6),
        }
