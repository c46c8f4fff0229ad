"""Merging of overlapping detections from several cascades."""

import logging
import math
import time
from typing import List, Sequence

from ..face import Face

logger = logging.getLogger(__name__)


def center_distance(a: Face, b: Face) -> float:
    """Euclidean distance between the centers of two faces."""
    (ax, ay), (bx, by) = a.center, b.center
    return math.hypot(ax - bx, ay - by)


def merge_duplicates(
    groups: Sequence[Sequence[Face]],
    max_distance: float = 20,
    min_duplicates: int = 1,
) -> List[Face]:
    """Collapse overlapping candidates into single faces.

    All groups are flattened in order. Walking left to right, every face to
    the right of the reference face whose center lies closer than
    ``max_distance`` is dropped and counted as a duplicate of the reference.
    A reference face with fewer than ``min_duplicates`` duplicates is
    treated as noise and dropped too.

    Args:
        groups: Candidate faces, one sequence per cascade or pass
        max_distance: Center distance below which two faces are the same
        min_duplicates: Duplicates required to keep a face

    Returns:
        Surviving faces in their original order
    """
    start = time.perf_counter()
    candidates = [face for group in groups for face in group]
    kept: List[Face] = []
    comparisons = 0

    while candidates:
        reference = candidates.pop(0)
        remaining = []
        duplicates = 0
        for other in candidates:
            comparisons += 1
            if center_distance(reference, other) < max_distance:
                duplicates += 1
            else:
                remaining.append(other)
        candidates = remaining

        if duplicates >= min_duplicates:
            kept.append(reference)

    logger.debug(
        f"Merged {comparisons} comparisons into {len(kept)} faces "
        f"in {time.perf_counter() - start:.4f}s"
    )
    return kept
