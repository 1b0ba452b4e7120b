"""Time grid: timeline generation and (time, field) cell ordering."""
from datetime import time

import pytest

from match_scheduler.utils.clock import format_hhmm, minutes_to_time, time_to_minutes
from match_scheduler.utils.time_grid import build_time_grid, build_timeline


def test_time_to_minutes_accepts_strings_and_times():
    assert time_to_minutes("09:00") == 540
    assert time_to_minutes("18:30:00") == 1110
    assert time_to_minutes(time(12, 15)) == 735


@pytest.mark.parametrize("bad", ["", "9h", "25:00", "12:75", "ab:cd"])
def test_time_to_minutes_rejects_garbage(bad):
    with pytest.raises(ValueError):
        time_to_minutes(bad)


def test_minutes_to_time_round_trips_format():
    assert minutes_to_time(545) == time(9, 5)
    assert format_hhmm(545) == "09:05"


def test_timeline_only_keeps_slots_that_fit():
    """09:00-10:00 with 25 minute slots: 09:00, 09:25 fit; 09:50 would end at 10:15."""
    assert build_timeline(540, 600, 25) == [540, 565]


def test_timeline_exact_fit_includes_last_slot():
    assert build_timeline(540, 600, 15) == [540, 555, 570, 585]


def test_timeline_empty_when_window_shorter_than_slot():
    assert build_timeline(540, 550, 15) == []


def test_grid_orders_by_time_then_field():
    cells = build_time_grid(540, 570, 15, 3)
    assert [(c.start_minute, c.field_index) for c in cells] == [
        (540, 1),
        (540, 2),
        (540, 3),
        (555, 1),
        (555, 2),
        (555, 3),
    ]


def test_grid_cells_at_same_time_share_order_index():
    cells = build_time_grid(540, 600, 15, 2)
    assert [c.time_order_index for c in cells] == [0, 0, 1, 1, 2, 2, 3, 3]
    assert cells[2].start_time == time(9, 15)
    assert cells[2].key == (555, 1)


def test_default_day_has_36_slots_per_field():
    """09:00-18:00 at 12+3 minutes."""
    cells = build_time_grid(540, 1080, 15, 2)
    assert len(cells) == 72
