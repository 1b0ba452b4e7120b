"""Pause filter: global, except-allowlist and per-field windows with half-open overlap."""
import pytest

from match_scheduler.utils.errors import ConfigurationError
from match_scheduler.utils.pauses import (
    ExceptPause,
    FieldPause,
    GlobalPause,
    filter_cells,
    intervals_overlap,
    parse_pause_windows,
)
from match_scheduler.utils.time_grid import build_time_grid

NOON = 720


def _blocked(filtered):
    return sorted(c.key for c in filtered.blocked_cells)


def test_touching_intervals_do_not_overlap():
    assert not intervals_overlap(700, 720, 720, 750)
    assert not intervals_overlap(750, 765, 720, 750)
    assert intervals_overlap(705, 720, 719, 750)


def test_global_pause_is_half_open():
    """12:00-12:30 with 15 minute slots blocks 12:00 and 12:15 only."""
    cells = build_time_grid(11 * 60 + 45, 13 * 60, 15, 2)
    filtered = filter_cells(cells, 15, [GlobalPause(NOON, NOON + 30)])

    assert _blocked(filtered) == [(720, 1), (720, 2), (735, 1), (735, 2)]
    assert [c.start_minute for c in filtered.open_cells] == [705, 705, 750, 750, 765, 765]


def test_partial_overlap_blocks_the_cell():
    """A 15 minute slot starting 11:50 runs into a 12:00 pause."""
    cells = build_time_grid(11 * 60 + 50, 12 * 60 + 5, 15, 1)
    filtered = filter_cells(cells, 15, [GlobalPause(NOON, NOON + 30)])
    assert _blocked(filtered) == [(710, 1)]


def test_except_pause_spares_allowed_fields():
    cells = build_time_grid(NOON, NOON + 15, 15, 3)
    filtered = filter_cells(cells, 15, [ExceptPause(NOON, NOON + 15, allowed_fields=frozenset({2}))])
    assert _blocked(filtered) == [(720, 1), (720, 3)]
    assert [c.field_index for c in filtered.open_cells] == [2]


def test_field_pause_only_hits_its_field():
    cells = build_time_grid(600, 630, 15, 2)
    filtered = filter_cells(cells, 15, [FieldPause(600, 615, field_index=2)])
    assert _blocked(filtered) == [(600, 2)]


def test_filter_keeps_grid_order():
    cells = build_time_grid(540, 660, 15, 2)
    filtered = filter_cells(cells, 15, [FieldPause(570, 600, field_index=1)])
    keys = [c.key for c in filtered.open_cells]
    assert keys == sorted(keys)


def test_parse_pause_windows_builds_each_kind():
    windows = parse_pause_windows(
        [
            {"type": "global", "from": "12:00", "to": "12:30"},
            {"type": "except", "from": "15:00", "to": "15:15", "except_fields": [1, "3"]},
            {"from": "16:00", "to": "16:10"},
        ],
        {"2": [{"from": "10:00", "to": "10:15"}]},
    )

    assert windows == [
        GlobalPause(720, 750),
        ExceptPause(900, 915, allowed_fields=frozenset({1, 3})),
        GlobalPause(960, 970),
        FieldPause(600, 615, field_index=2),
    ]


def test_parse_pause_windows_handles_empty_storage():
    assert parse_pause_windows(None, None) == []
    assert parse_pause_windows([], {}) == []


@pytest.mark.parametrize(
    "pauses,field_pauses",
    [
        ([{"type": "global", "from": "12:30", "to": "12:00"}], None),
        ([{"type": "global", "from": "12:00", "to": "12:00"}], None),
        ([{"type": "lunch", "from": "12:00", "to": "12:30"}], None),
        ([{"type": "global", "from": "noon", "to": "12:30"}], None),
        (["12:00-12:30"], None),
        (None, {"two": [{"from": "10:00", "to": "10:15"}]}),
        (None, {"2": [{"from": "10:00"}]}),
    ],
)
def test_parse_pause_windows_rejects_bad_input(pauses, field_pauses):
    with pytest.raises(ConfigurationError):
        parse_pause_windows(pauses, field_pauses)
