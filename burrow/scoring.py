"""
Frecency scoring.

A directory's score is its accumulated rank multiplied by a step-wise
recency factor. Visiting a directory bumps its rank; not visiting it
lets the factor fall through the buckets below.
"""

Rank = float
Epoch = int  # signed, so now - last_accessed stays meaningful under clock skew

HOUR: Epoch = 60 * 60
DAY: Epoch = 24 * HOUR
WEEK: Epoch = 7 * DAY

SCORE_MIN: Rank = 0.0
SCORE_MAX: Rank = 9999.0


def decay(elapsed: Epoch) -> float:
    """Recency multiplier for a directory last visited `elapsed` seconds ago.

    Buckets are half-open: exactly one hour old is already "within a day".
    A negative `elapsed` (last access in the future) counts as fresh.
    """
    if elapsed < HOUR:
        return 4.0
    elif elapsed < DAY:
        return 2.0
    elif elapsed < WEEK:
        return 0.5
    else:
        return 0.25


def score(rank: Rank, elapsed: Epoch) -> Rank:
    """Frecency score: rank scaled by recency."""
    return rank * decay(elapsed)


def clamp_score(value: Rank) -> Rank:
    """Clamp a score into [SCORE_MIN, SCORE_MAX] for display.

    NaN clamps to SCORE_MIN.
    """
    if value > SCORE_MAX:
        return SCORE_MAX
    elif value > SCORE_MIN:
        return value
    else:
        return SCORE_MIN
