import pytest

from app.domain.paging import advance_offset, resolve_offset


@pytest.mark.parametrize(
    "stored, total, expected",
    [
        (0, 450, 0),
        (200, 450, 200),
        (449, 450, 449),
        (450, 450, 0),
        (999, 450, 0),
        (-5, 450, 0),
        (None, 450, 0),
    ],
)
def test_resolve_offset_wraps_and_clamps(stored, total, expected):
    assert resolve_offset(stored, total) == expected


def test_advance_offset_scenarios():
    # 450 total, 200 per page: 0 -> 200 -> 400 -> wrap
    assert advance_offset(0, 200, 450) == 200
    assert advance_offset(200, 200, 450) == 400
    assert advance_offset(400, 200, 450) == 0


def test_next_cursor_always_in_range():
    for total in range(1, 25):
        for page_size in range(1, 9):
            for stored in range(-3, total + 5):
                offset = resolve_offset(stored, total)
                nxt = advance_offset(offset, page_size, total)
                assert 0 <= offset < total
                assert 0 <= nxt < total
