"""
Unit tests for entity tags, movable objects and the entity registry.

Tests cover:
- Tag constructors and derived labels
- Tag kind predicates
- MovableObject validation and mass
- Registry add / remove / lookup / classify
- Shared object serial
- Obstacle movement with wraparound
- Fatal lookups of unknown labels
"""

import pytest

from snake_arena.core.entities import EntityKind, EntityTag, MovableObject
from snake_arena.core.registry import EntityRegistry
from snake_arena.utils.spatial import Vec2


HALF = (100.0, 100.0)


@pytest.fixture
def registry() -> EntityRegistry:
    return EntityRegistry()


def make_obstacle(registry: EntityRegistry, x: float, y: float,
                  vx: float = 0.0, vy: float = 0.0, scale: float = 1.0) -> MovableObject:
    obj = MovableObject(
        tag=EntityTag.obstacle(registry.next_object_serial()),
        position=Vec2(x, y),
        velocity=Vec2(vx, vy),
        scale=scale,
    )
    registry.add_object(obj)
    return obj


def make_pill(registry: EntityRegistry, x: float, y: float) -> MovableObject:
    obj = MovableObject(tag=EntityTag.pill(registry.next_object_serial()), position=Vec2(x, y))
    registry.add_object(obj)
    return obj


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class TestEntityTag:
    def test_labels(self):
        assert EntityTag.player_head(2).label == "player-head2"
        assert EntityTag.player_trail(1, 7).label == "player-tail1.7"
        assert EntityTag.obstacle(3).label == "obstacle3"
        assert EntityTag.pill(4).label == "pill4"

    def test_owner(self):
        assert EntityTag.player_trail(3, 9).owner == 3
        assert EntityTag.pill(12).owner == 12

    def test_predicates(self):
        assert EntityTag.player_head(0).is_player
        assert EntityTag.player_trail(0, 0).is_player
        assert EntityTag.obstacle(0).is_object
        assert not EntityTag.pill(0).is_player

    def test_tags_are_hashable_values(self):
        assert EntityTag.player_head(1) == EntityTag.player_head(1)
        assert len({EntityTag.pill(1), EntityTag.pill(1)}) == 1


class TestMovableObject:
    def test_mass_is_scale(self):
        obj = MovableObject(tag=EntityTag.obstacle(0), position=Vec2(), scale=0.7)
        assert obj.mass == 0.7

    def test_pill_defaults_to_zero_velocity(self):
        obj = MovableObject(tag=EntityTag.pill(0), position=Vec2(1, 1))
        assert obj.velocity == Vec2(0.0, 0.0)
        assert obj.is_pill and not obj.is_obstacle

    def test_player_tag_rejected(self):
        with pytest.raises(ValueError):
            MovableObject(tag=EntityTag.player_head(0), position=Vec2())

    def test_to_dict(self):
        obj = MovableObject(tag=EntityTag.obstacle(5), position=Vec2(1, 2), velocity=Vec2(3, 4))
        d = obj.to_dict()
        assert d["label"] == "obstacle5"
        assert d["kind"] == "OBSTACLE"
        assert (d["x"], d["y"], d["vx"], d["vy"]) == (1, 2, 3, 4)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_empty(self, registry):
        assert len(registry) == 0
        assert registry.obstacle_count == 0
        assert registry.pill_count == 0

    def test_serial_shared_between_kinds(self, registry):
        a = make_obstacle(registry, 0, 0)
        b = make_pill(registry, 10, 10)
        c = make_obstacle(registry, 20, 20)
        assert [a.label, b.label, c.label] == ["obstacle0", "pill1", "obstacle2"]
        assert registry.objects_created == 3

    def test_add_and_get(self, registry):
        obj = make_obstacle(registry, 1, 2)
        assert registry.get(obj.label) is obj
        assert obj.label in registry

    def test_classify_known_and_unknown(self, registry):
        pill = make_pill(registry, 0, 0)
        registry.register(EntityTag.player_head(0))
        assert registry.classify(pill.label).kind is EntityKind.PILL
        assert registry.classify("player-head0").kind is EntityKind.PLAYER_HEAD
        assert registry.classify("pill-nonsense") is None

    def test_remove_object(self, registry):
        pill = make_pill(registry, 0, 0)
        removed = registry.remove_object(pill.label)
        assert removed is pill
        assert pill.label not in registry
        assert registry.classify(pill.label) is None

    def test_remove_missing_raises(self, registry):
        with pytest.raises(KeyError):
            registry.remove_object("pill99")

    def test_get_missing_raises(self, registry):
        with pytest.raises(KeyError):
            registry.get("obstacle42")

    def test_unregister_missing_raises(self, registry):
        with pytest.raises(KeyError):
            registry.unregister("player-tail0.0")

    def test_duplicate_label_rejected(self, registry):
        registry.register(EntityTag.player_head(1))
        with pytest.raises(RuntimeError):
            registry.register(EntityTag.player_head(1))

    def test_player_tags_not_objects(self, registry):
        registry.register(EntityTag.player_trail(0, 0))
        assert registry.objects == {}
        assert len(registry) == 1

    def test_obstacles_and_pills_lists(self, registry):
        make_obstacle(registry, 0, 0)
        make_pill(registry, 0, 0)
        make_pill(registry, 0, 0)
        assert len(registry.obstacles()) == 1
        assert len(registry.pills()) == 2


class TestMoveObstacles:
    def test_moves_by_velocity(self, registry):
        obj = make_obstacle(registry, 0, 0, vx=2.5, vy=-1.0)
        registry.move_obstacles(HALF)
        assert obj.position == Vec2(2.5, -1.0)

    def test_wraps_at_edge(self, registry):
        obj = make_obstacle(registry, 99, -99, vx=2.0, vy=-2.0)
        registry.move_obstacles(HALF)
        assert obj.position == Vec2(-100.0, 100.0)

    def test_pills_stay_put(self, registry):
        pill = make_pill(registry, 5, 5)
        moved = registry.move_obstacles(HALF)
        assert pill.position == Vec2(5, 5)
        assert moved == []
