"""Typo-tolerant keyword suggestions.

Edit distance budget by query length:
- 1-2 chars: exact only
- 3-5 chars: 1 edit
- 6+ chars: 2 edits
"""

from __future__ import annotations

from collections.abc import Iterable


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two keywords.

    Two rows of the dynamic-programming table are kept; the shorter string
    indexes the columns.

    Args:
        s1: First keyword, already normalized.
        s2: Second keyword, already normalized.
        max_distance: Budget for the comparison. Once every cell of a row
            exceeds it the walk stops, since later rows can only grow.

    Returns:
        The number of single-character insertions, deletions and
        substitutions turning ``s1`` into ``s2``, or ``max_distance + 1``
        when that budget is exceeded.

    Examples:
        >>> levenshtein_distance("bild", "build")
        1
        >>> levenshtein_distance("builder", "build")
        2
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,
                curr_row[i - 1] + 1,
                prev_row[i - 1] + cost,
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def get_max_edit_distance(term_length: int) -> int:
    """Maximum edit distance allowed for a query term.

    Args:
        term_length: Length of the normalized query term.

    Returns:
        0 up to 2 characters, 1 up to 5 characters, otherwise 2.
    """
    if term_length <= 2:
        return 0
    if term_length <= 5:
        return 1
    return 2


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    max_distance: int | None = None,
) -> list[tuple[str, int]]:
    """Find normalized keywords within edit distance of ``query_term``.

    Args:
        query_term: Normalized query term.
        vocabulary: Distinct normalized keywords to compare against.
        max_distance: Edit budget; derived from the term length when omitted.

    Returns:
        ``(keyword, distance)`` pairs, closest first, ties alphabetical.
        An exact hit is included with distance 0.
    """
    if not query_term:
        return []

    if max_distance is None:
        max_distance = get_max_edit_distance(len(query_term))

    matches: list[tuple[str, int]] = []
    for keyword in vocabulary:
        if abs(len(query_term) - len(keyword)) > max_distance:
            continue
        distance = levenshtein_distance(query_term, keyword, max_distance)
        if distance <= max_distance:
            matches.append((keyword, distance))

    matches.sort(key=lambda match: (match[1], match[0]))
    return matches
