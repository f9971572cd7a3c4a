import pytest

from drop_impact.simulations import (
    EventRegistry,
    IterationTrigger,
    TimeTrigger,
    build_event_registry,
)


def noop(context):
    pass


def test_iteration_trigger():
    every = IterationTrigger()
    assert all(every.fires(i) for i in range(5))

    sparse = IterationTrigger(every=3, start=2)
    assert [i for i in range(10) if sparse.fires(i)] == [2, 5, 8]
    assert not sparse.bounded

    with pytest.raises(ValueError):
        IterationTrigger(every=0)


def test_time_trigger_firing_times_do_not_accumulate_error():
    trigger = TimeTrigger(0.001)
    assert trigger.firing_time(1000) == pytest.approx(1.0, abs=1e-15)
    assert not trigger.bounded
    assert TimeTrigger(0.1, until=1.0).bounded


def test_time_trigger_until_is_exclusive():
    trigger = TimeTrigger(0.001, until=0.01)
    assert trigger.is_live(9)
    assert not trigger.is_live(10)


def test_time_trigger_first_after():
    trigger = TimeTrigger(0.1)
    assert trigger.first_after(0.0) == 1
    assert trigger.first_after(0.05) == 1
    assert trigger.first_after(0.3) == 4
    assert trigger.first_after(0.3 - 1e-12) == 4

    delayed = TimeTrigger(0.1, start=0.5)
    assert delayed.first_after(0.2) == 0


@pytest.mark.parametrize(
    "kwargs",
    [{"interval": 0.0}, {"interval": float("inf")}, {"interval": 0.1, "start": -1.0}],
)
def test_time_trigger_validation(kwargs):
    with pytest.raises(ValueError):
        TimeTrigger(**kwargs)


def test_registry_rejects_duplicate_names():
    registry = EventRegistry()
    registry.add("stats", TimeTrigger(0.1), noop)
    with pytest.raises(ValueError):
        registry.add("stats", IterationTrigger(), noop)
    assert len(registry) == 1
    assert registry["stats"].name == "stats"
    with pytest.raises(KeyError):
        registry["missing"]


def test_due_consumes_time_events_once():
    registry = EventRegistry()
    registry.add("every", IterationTrigger(), noop)
    registry.add("stats", TimeTrigger(0.1), noop)

    assert [e.name for e in registry.due(0, 0.0)] == ["every", "stats"]
    assert registry.cursor("stats") == 1
    # 同じ時刻で再評価しても時刻イベントは発火しない
    assert [e.name for e in registry.due(1, 0.0)] == ["every"]
    assert [e.name for e in registry.due(2, 0.05)] == ["every"]
    assert [e.name for e in registry.due(3, 0.1)] == ["every", "stats"]


def test_due_skips_missed_firing_times():
    registry = EventRegistry()
    registry.add("stats", TimeTrigger(0.1), noop)
    registry.due(0, 0.0)

    assert [e.name for e in registry.due(1, 0.35)] == ["stats"]
    assert registry.cursor("stats") == 4


def test_due_preserves_registration_order():
    registry = EventRegistry()
    registry.add("c", TimeTrigger(0.5), noop)
    registry.add("a", IterationTrigger(), noop)
    registry.add("b", TimeTrigger(0.25), noop)
    assert [e.name for e in registry.due(0, 0.0)] == ["c", "a", "b"]


def test_next_time_is_earliest_pending():
    registry = EventRegistry()
    registry.add("every", IterationTrigger(), noop)
    registry.add("slow", TimeTrigger(0.1), noop)
    registry.add("fast", TimeTrigger(0.03), noop)
    assert registry.next_time(-1.0) == pytest.approx(0.0)

    registry.due(0, 0.0)
    assert registry.next_time(0.0) == pytest.approx(0.03)
    registry.due(1, 0.03)
    assert registry.next_time(0.03) == pytest.approx(0.06)


def test_next_time_without_time_events():
    registry = EventRegistry()
    registry.add("every", IterationTrigger(), noop)
    assert registry.next_time(0.0) is None


def test_bounded_events_expire_at_until():
    registry = EventRegistry()
    registry.add("stats", TimeTrigger(0.001, until=0.003), noop)
    registry.add("movies", TimeTrigger(0.001), noop)

    fired = []
    t = 0.0
    for i in range(10):
        if not registry.has_bounded_events(t):
            break
        fired.extend(e.name for e in registry.due(i, t) if e.name == "stats")
        t = registry.next_time(t)
    assert fired == ["stats"] * 3
    assert t == pytest.approx(0.003)
    assert not registry.has_bounded_events(t)


def test_seek_moves_cursors_past_restored_time():
    registry = EventRegistry()
    registry.add("every", IterationTrigger(), noop)
    registry.add("stats", TimeTrigger(0.001), noop)
    registry.add("snapshot", TimeTrigger(0.1), noop)

    registry.seek(0.005)
    assert registry.cursor("stats") == 6
    assert registry.cursor("snapshot") == 1
    # 復元時刻そのものでは時刻イベントは発火しない
    assert [e.name for e in registry.due(5, 0.005)] == ["every"]
    assert [e.name for e in registry.due(6, 0.006)] == ["every", "stats"]


def test_build_event_registry_order(config, params):
    registry = build_event_registry(config, params)
    assert registry.names == [
        "body_force",
        "refinement",
        "log_interface",
        "log_stats",
        "snapshot",
        "droplet_removal",
        "raw_interfaces",
        "interfaces",
        "movies",
        "checkpoint",
    ]
    stats = registry["log_stats"].trigger
    assert stats.until == params.end_time
    assert [e.name for e in registry.events if e.trigger.bounded] == ["log_stats"]
    assert isinstance(registry["droplet_removal"].trigger, IterationTrigger)
