"""
Entity registry for the Snake Arena simulation core.

Holds the canonical state of every movable object (obstacles and pills)
and the tag of every live labelled entity, player heads and trail segments
included. The presentation layer only ever sees labels; the registry is
how the core turns a label back into what it refers to.

Looking up a label that the core itself handed out but no longer tracks is
a broken invariant and raises KeyError. Classifying a label coming from
outside (collision events) never raises: unknown labels yield None.
"""

from __future__ import annotations

from typing import Optional

from snake_arena.core.entities import EntityKind, EntityTag, MovableObject
from snake_arena.utils.spatial import advance


class EntityRegistry:
    """
    Label → entity mapping.

    Attributes:
        objects: Dict of label → MovableObject (obstacles and pills).
    """

    def __init__(self):
        self.objects: dict[str, MovableObject] = {}
        self._tags: dict[str, EntityTag] = {}
        self._object_serial: int = 0

    # ------------------------------------------------------------------
    # Label allocation
    # ------------------------------------------------------------------

    def next_object_serial(self) -> int:
        """Serial shared by obstacles and pills, so their labels never repeat."""
        serial = self._object_serial
        self._object_serial += 1
        return serial

    @property
    def objects_created(self) -> int:
        return self._object_serial

    # ------------------------------------------------------------------
    # Tag bookkeeping
    # ------------------------------------------------------------------

    def register(self, tag: EntityTag) -> None:
        """Track a player entity label."""
        if tag.label in self._tags:
            raise RuntimeError(f"Label '{tag.label}' is already registered")
        self._tags[tag.label] = tag

    def unregister(self, label: str) -> EntityTag:
        """Stop tracking a label. Raises KeyError if it was not tracked."""
        tag = self._tags.pop(label)
        self.objects.pop(label, None)
        return tag

    def classify(self, label: str) -> Optional[EntityTag]:
        """Return the tag for a live label, or None if the label is unknown."""
        return self._tags.get(label)

    def __contains__(self, label: str) -> bool:
        return label in self._tags

    # ------------------------------------------------------------------
    # Movable objects
    # ------------------------------------------------------------------

    def add_object(self, obj: MovableObject) -> None:
        """Add an obstacle or pill."""
        self.register(obj.tag)
        self.objects[obj.label] = obj

    def remove_object(self, label: str) -> MovableObject:
        """Remove and return an obstacle or pill. Raises KeyError if missing."""
        obj = self.objects.pop(label)
        del self._tags[label]
        return obj

    def get(self, label: str) -> MovableObject:
        """Get an obstacle or pill. Raises KeyError if missing."""
        return self.objects[label]

    def obstacles(self) -> list[MovableObject]:
        return [o for o in self.objects.values() if o.tag.kind is EntityKind.OBSTACLE]

    def pills(self) -> list[MovableObject]:
        return [o for o in self.objects.values() if o.tag.kind is EntityKind.PILL]

    def move_obstacles(self, half_extents: tuple[float, float]) -> list[MovableObject]:
        """
        Advance every obstacle by its velocity and wrap at the arena bounds.

        Returns:
            The obstacles that were moved.
        """
        moved = self.obstacles()
        for obstacle in moved:
            obstacle.position = advance(obstacle.position, obstacle.velocity, half_extents)
        return moved

    @property
    def obstacle_count(self) -> int:
        return sum(1 for o in self.objects.values() if o.is_obstacle)

    @property
    def pill_count(self) -> int:
        return sum(1 for o in self.objects.values() if o.is_pill)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return (
            f"EntityRegistry(labels={len(self._tags)}, "
            f"obstacles={self.obstacle_count}, pills={self.pill_count})"
        )
