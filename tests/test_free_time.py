"""Tests for free-interval computation."""

import datetime as dt

from study_scheduler.entities import FixedEvent, ScheduledBlock
from study_scheduler.services.free_time import FreeInterval, FreeTimeCalculator, subtract_interval


def _at(day, hour, minute=0):
    return dt.datetime.combine(day, dt.time(hour, minute))


def _spans(intervals):
    return [(i.start.time(), i.end.time()) for i in intervals]


def test_empty_day_returns_work_window(make_constraints, monday):
    """Test that a day with no obstacles is one interval spanning the work window."""
    calc = FreeTimeCalculator(make_constraints())
    free = calc.free_intervals(monday.date())
    assert _spans(free) == [(dt.time(8), dt.time(20))]
    assert free[0].duration_minutes == 720


def test_fixed_event_is_padded_by_gap(make_constraints, monday):
    """Test that fixed events are subtracted with the minimum gap on both sides."""
    day = monday.date()
    event = FixedEvent(start=_at(day, 10), end=_at(day, 11), id="lecture")
    calc = FreeTimeCalculator(make_constraints(min_gap_between_blocks_minutes=10), [event])

    assert _spans(calc.free_intervals(day)) == [
        (dt.time(8), dt.time(9, 50)),
        (dt.time(11, 10), dt.time(20)),
    ]


def test_blackouts_and_placed_blocks_are_subtracted(make_constraints, monday):
    """Test that blackout windows and already placed blocks are obstacles too."""
    day = monday.date()
    constraints = make_constraints(
        min_gap_between_blocks_minutes=0,
        do_not_schedule_windows=((_at(day, 12), _at(day, 14)),),
    )
    placed = [ScheduledBlock(id="x:0", task_id="x", start=_at(day, 8), end=_at(day, 9))]
    calc = FreeTimeCalculator(constraints)

    assert _spans(calc.free_intervals(day, placed)) == [
        (dt.time(9), dt.time(12)),
        (dt.time(14), dt.time(20)),
    ]


def test_floor_and_horizon_clip_the_window(make_constraints, monday):
    """Test that the placement floor and horizon end clip the day's window."""
    day = monday.date()
    constraints = make_constraints(horizon_end=_at(day, 17))
    calc = FreeTimeCalculator(constraints)

    assert _spans(calc.free_intervals(day, floor=_at(day, 13))) == [(dt.time(13), dt.time(17))]


def test_day_outside_horizon_has_no_free_time(make_constraints, monday):
    """Test that days past the horizon end yield nothing."""
    calc = FreeTimeCalculator(make_constraints(horizon_end=monday + dt.timedelta(days=1)))
    assert calc.free_intervals(monday.date() + dt.timedelta(days=3)) == []


def test_event_covering_whole_day(make_constraints, monday):
    """Test that an all-day event leaves no free intervals."""
    day = monday.date()
    event = FixedEvent(start=_at(day, 0), end=_at(day, 23, 59))
    calc = FreeTimeCalculator(make_constraints(), [event])
    assert calc.free_intervals(day) == []


def test_subtract_interval_splits_and_keeps_order():
    """Test that subtracting a middle range splits one interval into two."""
    base = dt.datetime(2025, 3, 3)
    free = [FreeInterval(base, base + dt.timedelta(hours=4))]

    out = subtract_interval(free, base + dt.timedelta(hours=1), base + dt.timedelta(hours=2))

    assert out == [
        FreeInterval(base, base + dt.timedelta(hours=1)),
        FreeInterval(base + dt.timedelta(hours=2), base + dt.timedelta(hours=4)),
    ]
    # Non-overlapping range leaves the list untouched
    assert subtract_interval(out, base + dt.timedelta(hours=5), base + dt.timedelta(hours=6)) == out
