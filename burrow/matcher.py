"""
Keyword matching against directory paths.

Keywords must appear in the path in the order given, without
overlapping, and the last keyword must also appear in the final path
component. `foo bar` matches /foo/baz/barn but not /bar/foo.
"""

from pathlib import PurePath
from typing import Optional, Sequence


def _final_segment(path: str) -> Optional[str]:
    """Last component of a path, or None when there isn't a proper one.

    A root, an empty string or a path ending in '..' has no final segment.
    """
    name = PurePath(path).name
    if not name or name == "..":
        return None
    return name


def is_match(path: str, keywords: Sequence[str]) -> bool:
    """Check whether `path` matches the already-lowercased `keywords`.

    The comparison lowercases the path; the caller's string is untouched.
    An empty keyword list matches everything.
    """
    path_lower = path.lower()

    if keywords:
        query_name = _final_segment(keywords[-1])
        dir_name = _final_segment(path_lower)
        if query_name is not None and dir_name is not None:
            if query_name not in dir_name:
                return False

    start = 0
    for keyword in keywords:
        idx = path_lower.find(keyword, start)
        if idx == -1:
            return False
        start = idx + len(keyword)

    return True
