"""
Data types for the directory database.
"""

import math
import os
from dataclasses import dataclass
from typing import Sequence

from .matcher import is_match
from .scoring import Epoch, Rank, clamp_score, score


@dataclass
class Entry:
    """
    One tracked directory.

    `path` is stored exactly as recorded; the database never normalizes it.
    `rank` accumulates one unit per visit and shrinks when the database ages.
    """
    path: str
    rank: Rank
    last_accessed: Epoch

    def is_valid(self) -> bool:
        """Whether this entry should be offered as a result.

        Checked live against the filesystem on every call, so a
        directory removed from disk drops out without an explicit prune.
        """
        return math.isfinite(self.rank) and self.rank >= 1.0 and os.path.isdir(self.path)

    def is_match(self, keywords: Sequence[str]) -> bool:
        return is_match(self.path, keywords)

    def get_score(self, now: Epoch) -> Rank:
        return score(self.rank, now - self.last_accessed)

    def display(self) -> str:
        return self.path

    def display_score(self, now: Epoch) -> str:
        """Path prefixed by its clamped score, right-aligned to four columns."""
        return f"{clamp_score(self.get_score(now)):>4.0f} {self.path}"
