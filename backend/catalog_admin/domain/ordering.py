"""
Ordering engine shared by homepage sections and section items.

Every function works on a snapshot of ids (``order``) loaded by the caller
and returns a new list; the input is never mutated. Positions are 1-based
and are only materialised by ``persist_order``, which always rewrites every
row: position is a total order and a partial write cannot keep it
contiguous when two editors race.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Hashable, Iterable, List, Optional, Sequence

from .exceptions import ValidationError


@dataclass(frozen=True)
class Move:
    id: Hashable
    target_position: int


@dataclass(frozen=True)
class PositionWrite:
    id: Hashable
    position: int
    updated_at: datetime
    updated_by: Optional[str]


def clamp_index(requested, length: int) -> int:
    """
    Saturate a 0-based target into ``[0, length]``.

    Out-of-range targets degrade to "first" or "last" instead of failing.
    ``None``, NaN and infinities mean "last".
    """
    upper = max(length, 0)

    if requested is None:
        return upper
    if isinstance(requested, float) and (math.isnan(requested) or math.isinf(requested)):
        return upper

    return max(0, min(int(requested), upper))


def insert(order: Sequence, item_id, target_index: Optional[int] = None) -> List:
    remaining = [existing for existing in order if existing != item_id]

    if target_index is None:
        remaining.append(item_id)
        return remaining

    remaining.insert(clamp_index(target_index, len(remaining)), item_id)
    return remaining


def remove(order: Sequence, item_id) -> List:
    return [existing for existing in order if existing != item_id]


def reorder(order: Sequence, moves: Iterable[Move]) -> List:
    """
    Apply ``moves`` one by one, lowest target position first.

    ``sorted`` is stable, so moves aimed at the same slot keep the order the
    caller sent them in.
    """
    moves = list(moves)
    known = set(order)

    unknown = [move.id for move in moves if move.id not in known]
    if unknown:
        raise ValidationError(
            "Cannot move ids that are not part of this collection",
            details=[
                {"field": "moves", "message": f"Unknown id: {item_id}"}
                for item_id in unknown
            ],
        )

    result = list(order)
    for move in sorted(moves, key=lambda m: m.target_position):
        result = insert(result, move.id, move.target_position - 1)

    return result


def persist_order(
    order: Sequence,
    actor_id: Optional[str],
    now: Optional[datetime] = None,
) -> List[PositionWrite]:
    """Build one write per id with ``position = index + 1``."""
    if len(set(order)) != len(order):
        raise ValidationError(
            "Order contains duplicate ids",
            details=[{"field": "order", "message": "Each id may appear only once"}],
        )

    stamp = now or datetime.now(timezone.utc)
    return [
        PositionWrite(id=item_id, position=index, updated_at=stamp, updated_by=actor_id)
        for index, item_id in enumerate(order, start=1)
    ]
