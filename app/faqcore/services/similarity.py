"""
Purpose: Cosine similarity and top-k ranking of FAQ records against a query.
Pure functions; no storage, no model calls.

Robustness contract: similarity never raises and never returns a value
outside [-1, 1] or a non-finite value, whatever the input looks like.

Testing: Hand-built vectors (identical, opposite, orthogonal, zero,
mismatched, non-numeric); ranking order and tie-breaks.
"""

from __future__ import annotations
import math
from collections.abc import Sequence
from typing import Any, Iterable

from ..models import FAQRecord, ScoredRecord

EPSILON = 1e-10
NORM_FLOOR = math.sqrt(EPSILON)


def _as_number(value: Any) -> float:
    """Coerce one vector entry; anything non-numeric or non-finite counts as 0."""
    try:
        x = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(x):
        return 0.0
    return x


def _is_vector(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def similarity(vec_a: Any, vec_b: Any) -> float:
    """Cosine similarity of two equal-length vectors, clamped to [-1, 1].

    Returns 0.0 for non-sequences, empty or mismatched vectors, and
    vectors whose norm is (near) zero.
    """
    if not _is_vector(vec_a) or not _is_vector(vec_b):
        return 0.0
    if len(vec_a) != len(vec_b) or len(vec_a) == 0:
        return 0.0

    xs = [_as_number(v) for v in vec_a]
    ys = [_as_number(v) for v in vec_b]
    # scale to unit max magnitude so squares of large entries cannot overflow
    scale_a = max(abs(x) for x in xs)
    scale_b = max(abs(y) for y in ys)
    if scale_a == 0.0 or scale_b == 0.0:
        return 0.0

    dot = norm_a = norm_b = 0.0
    for x, y in zip(xs, ys):
        a = x / scale_a
        b = y / scale_b
        dot += a * b
        norm_a += a * a
        norm_b += b * b

    len_a = math.sqrt(norm_a)
    len_b = math.sqrt(norm_b)
    if len_a * scale_a < NORM_FLOOR or len_b * scale_b < NORM_FLOOR:
        return 0.0

    score = dot / (len_a * len_b)
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))


def rank(
    query_vec: Any, records: Iterable[FAQRecord], limit: int
) -> list[ScoredRecord]:
    """Score every record against the query and keep the best `limit`.

    Sorted by score descending; equal scores keep their input order.
    """
    if limit <= 0:
        return []
    scored = [
        ScoredRecord(record=r, score=similarity(query_vec, r.embedding), index=i)
        for i, r in enumerate(records)
    ]
    scored.sort(key=lambda s: (-s.score, s.index))
    return scored[:limit]
