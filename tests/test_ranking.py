# tests/test_ranking.py

import pytest

from apps.board import ranking


def test_rank_after_empty_column_starts_at_gap():
    assert ranking.rank_after(None) == ranking.POSITION_GAP


def test_rank_after_appends_one_gap_later():
    assert ranking.rank_after(2048.0) == 3072.0


def test_rank_before_prepends_one_gap_earlier():
    assert ranking.rank_before(1024.0) == 0.0
    assert ranking.rank_before(None, gap=10.0) == 10.0


def test_rank_between_takes_midpoint():
    assert ranking.rank_between(1024.0, 2048.0) == 1536.0


def test_rank_between_with_missing_side():
    assert ranking.rank_between(None, 1024.0) == 0.0
    assert ranking.rank_between(1024.0, None) == 2048.0
    assert ranking.rank_between(None, None) == ranking.POSITION_GAP


def test_rank_between_rejects_out_of_order_neighbours():
    with pytest.raises(ValueError):
        ranking.rank_between(2048.0, 1024.0)


@pytest.mark.parametrize('index, expected', [
    (0, 0.0),
    (1, 1536.0),
    (2, 3072.0),
    (99, 3072.0),
    (-5, 0.0),
])
def test_rank_for_index(index, expected):
    assert ranking.rank_for_index([1024.0, 2048.0], index) == expected


def test_rank_for_index_keeps_list_sorted():
    positions = [1024.0, 2048.0, 3072.0]
    rank = ranking.rank_for_index(positions, 2)
    positions.insert(2, rank)
    assert positions == sorted(positions)


def test_needs_renormalization_when_gap_collapses():
    assert not ranking.needs_renormalization([1.0, 2.0, 3.0])
    assert ranking.needs_renormalization([1.0, 1.0 + 1e-9, 3.0])
    assert ranking.needs_renormalization([5.0, 5.0])


def test_repeated_midpoint_inserts_eventually_need_renormalization():
    low, high = 1024.0, 2048.0
    for _ in range(60):
        high = ranking.rank_between(low, high)
    assert ranking.needs_renormalization([low, high])


def test_renormalized_is_evenly_spaced():
    assert ranking.renormalized(3) == [1024.0, 2048.0, 3072.0]
    assert ranking.renormalized(0) == []
    assert ranking.renormalized(2, gap=1.0) == [1.0, 2.0]
