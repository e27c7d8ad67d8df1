from caret.registry import CaretLifecycleRegistry
from caret.settings import AnimationSettings
from caret.tracker import CaretPositionTracker
from conftest import FakeSurface


def make_registry():
    return CaretLifecycleRegistry(CaretPositionTracker(AnimationSettings()))


def test_first_observation_counts_as_switch_and_seeds_settled():
    registry = make_registry()
    surface = FakeSurface({1: (10.0, 0.0), 2: (20.0, 20.0)})

    observation = registry.observe(surface, surface.caret_points())

    assert observation.switched and not observation.moving
    assert len(registry.tracker) == 2
    assert not registry.tracker.any_moving()


def test_movement_is_reported_and_new_carets_added_lazily():
    registry = make_registry()
    surface = FakeSurface({1: (10.0, 0.0)})
    registry.observe(surface, surface.caret_points())

    surface.points = {1: (20.0, 0.0), 2: (50.0, 40.0)}
    observation = registry.observe(surface, surface.caret_points())

    assert not observation.switched and observation.moving
    new = registry.tracker.get(2)
    assert (new.current_x, new.current_y) == (50.0, 40.0)


def test_dead_carets_are_pruned():
    registry = make_registry()
    surface = FakeSurface({1: (0.0, 0.0), 2: (0.0, 20.0), 3: (0.0, 40.0)})
    registry.observe(surface, surface.caret_points())

    surface.points = {1: (0.0, 0.0), 3: (0.0, 40.0)}
    registry.observe(surface, surface.caret_points())

    assert 2 not in registry.tracker
    assert 1 in registry.tracker and 3 in registry.tracker


def test_switching_surface_discards_stale_interpolation():
    registry = make_registry()
    first = FakeSurface({1: (0.0, 0.0)})
    registry.observe(first, first.caret_points())
    first.points = {1: (300.0, 0.0)}
    registry.observe(first, first.caret_points())
    assert registry.tracker.any_moving()

    second = FakeSurface({7: (80.0, 20.0)})
    observation = registry.observe(second, second.caret_points())

    assert observation.switched
    assert 1 not in registry.tracker
    assert not registry.tracker.any_moving()
