import math

import pytest

from protocol_diagram.visualizer.coordinates import PlaceSlots, TimeSlots


def test_well_known_places_are_pre_seeded():
    x_of = PlaceSlots()
    assert x_of("client") == 0
    assert x_of("line") == 300
    assert x_of("server") == 600


def test_unknown_places_get_next_slot_in_first_seen_order():
    x_of = PlaceSlots()
    assert x_of("relay") == 900
    assert x_of("proxy") == 1200
    assert x_of("relay") == 900


def test_distinct_places_get_distinct_offsets():
    x_of = PlaceSlots()
    names = ["b", "client", "a", "server", "c", "line", "d"]
    offsets = [x_of(n) for n in names]
    assert len(set(offsets)) == len(names)
    assert offsets == [x_of(n) for n in names]


def test_custom_seed_does_not_collide():
    x_of = PlaceSlots(spacing=200, seed={"a": 0, "b": 400})
    assert x_of("c") == 600
    assert x_of("d") == 800


def test_time_slot_is_log_of_gap():
    y_of = TimeSlots(scale=3)
    y1 = y_of(1_000_000_000)
    y2 = y_of(2_000_000_000)
    assert y1 == pytest.approx(math.log(1e9) * 3)
    assert y2 == pytest.approx(y1 + math.log(1e9) * 3)


def test_time_slot_is_memoized():
    y_of = TimeSlots()
    first = y_of(500)
    _ = y_of(10_000)
    _ = y_of(20_000)
    assert y_of(500) == first
    assert y_of(10_000) == y_of(10_000)


def test_non_positive_gaps_use_minimum_gap():
    y_of = TimeSlots(min_gap=1)
    assert y_of(0) == 1
    y = y_of(100)
    # out of order relative to the last newly seen time
    assert y_of(50) == y + 1


def test_tiny_gaps_never_collapse():
    y_of = TimeSlots(min_gap=1)
    a = y_of(1000)
    b = y_of(1001)
    assert b == a + 1


def test_offsets_increase_in_first_seen_order():
    y_of = TimeSlots()
    times = [10, 3_000, 2_000, 1_000_000, 999, 5_000_000_000]
    offsets = [y_of(t) for t in times]
    assert all(b > a for a, b in zip(offsets, offsets[1:]))


def test_scan_preassigns_in_given_order():
    y_of = TimeSlots()
    y_of.scan([300, 100, 200])
    assert y_of(300) < y_of(100) < y_of(200)
