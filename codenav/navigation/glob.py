"""Glob matching for reference list filters.

Supported wildcards (case-sensitive):
- ``*`` matches zero or more characters within one path segment
- ``**`` matches zero or more characters across segments; a ``/``
  directly after ``**`` is optional, so ``**/x.zig`` also matches ``x.zig``

A pattern without wildcards matches only the identical string.
"""

from __future__ import annotations

import posixpath

EXCLUDE_PREFIX = "!"


def glob_match(text: str, pattern: str) -> bool:
    """Match *text* against *pattern* in a single backtracking scan.

    The scan remembers the most recent ``*`` and the most recent ``**``.
    On a literal mismatch the single star absorbs one more character of
    text; once it reaches a ``/`` it is exhausted and the double star
    takes over instead.
    """
    ti = 0
    pi = 0
    star_pi: int | None = None
    star_ti = 0
    dstar_pi: int | None = None
    dstar_ti = 0

    while ti < len(text):
        if pi < len(pattern):
            if pattern.startswith("**", pi):
                dstar_pi = pi
                dstar_ti = ti
                star_pi = None
                pi = _after_double_star(pattern, pi)
                continue
            if pattern[pi] == "*":
                star_pi = pi
                star_ti = ti
                pi += 1
                continue
            if pattern[pi] == text[ti]:
                ti += 1
                pi += 1
                continue

        if star_pi is not None and text[star_ti] != "/":
            star_ti += 1
            ti = star_ti
            pi = star_pi + 1
            continue

        if dstar_pi is None:
            return False

        star_pi = None
        dstar_ti += 1
        ti = dstar_ti
        pi = _after_double_star(pattern, dstar_pi)

    while pi < len(pattern) and pattern[pi] == "*":
        pi += 1

    return pi == len(pattern)


def _after_double_star(pattern: str, pi: int) -> int:
    pi += 2
    if pi < len(pattern) and pattern[pi] == "/":
        pi += 1
    return pi


def path_matches(path: str, pattern: str) -> bool:
    """Check a file path against a filter pattern.

    A leading ``!`` inverts the result. Patterns containing ``/`` are
    matched against the whole path; patterns without one are matched
    against the basename, so ``*.zig`` selects ``src/main.zig``.
    """
    if pattern.startswith(EXCLUDE_PREFIX):
        return not path_matches(path, pattern[len(EXCLUDE_PREFIX):])

    if "/" in pattern:
        return glob_match(path, pattern)
    return glob_match(posixpath.basename(path), pattern)
