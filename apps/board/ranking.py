# apps/board/ranking.py

"""
Gap based ranks for task positions

Positions are floats with room between neighbours, so placing a task only
writes that one task's row. When repeated inserts at the same spot squeeze
a gap below MIN_GAP the column is renormalized back to evenly spaced ranks.
"""

from typing import List, Optional, Sequence

POSITION_GAP = 1024.0
MIN_GAP = 1e-6


def rank_after(last: Optional[float], gap: float = POSITION_GAP) -> float:
    """Rank for appending after ``last`` (None = empty column)"""
    if last is None:
        return gap
    return last + gap


def rank_before(first: Optional[float], gap: float = POSITION_GAP) -> float:
    """Rank for prepending before ``first``"""
    if first is None:
        return gap
    return first - gap


def rank_between(before: Optional[float], after: Optional[float], gap: float = POSITION_GAP) -> float:
    """Rank strictly between two neighbours; either side may be missing"""
    if before is None and after is None:
        return gap
    if before is None:
        return rank_before(after, gap)
    if after is None:
        return rank_after(before, gap)
    if after < before:
        raise ValueError(f"Neighbours out of order: {before} > {after}")
    return (before + after) / 2


def rank_for_index(positions: Sequence[float], index: int, gap: float = POSITION_GAP) -> float:
    """
    Rank that puts a new item at ``index`` of an ascending list of positions

    The index is clamped, so anything past the end appends.
    """
    index = max(0, min(index, len(positions)))
    before = positions[index - 1] if index > 0 else None
    after = positions[index] if index < len(positions) else None
    return rank_between(before, after, gap)


def needs_renormalization(positions: Sequence[float]) -> bool:
    """True when two neighbours sit closer than MIN_GAP"""
    return any(b - a < MIN_GAP for a, b in zip(positions, positions[1:]))


def renormalized(count: int, gap: float = POSITION_GAP) -> List[float]:
    """Evenly spaced ranks for ``count`` items"""
    return [gap * (i + 1) for i in range(count)]
