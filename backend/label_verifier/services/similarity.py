"""String similarity scores used by the field verification policies.

Both scores are in the range 0-100 and follow the classic sequence-matcher
definition: the matched length is found by taking the longest common
contiguous block and recursing on the segments before and after it.
"""

from typing import List, Tuple


def _longest_match(
    a: str, alo: int, ahi: int, b: str, blo: int, bhi: int
) -> Tuple[int, int, int]:
    """
    Find the longest common block of a[alo:ahi] and b[blo:bhi].

    Ties go to the block starting earliest in a, then earliest in b.

    Returns:
        Tuple of (start_in_a, start_in_b, size)
    """
    best_i, best_j, best_size = alo, blo, 0
    # Length of the common run ending at (i - 1, j) for the previous row
    prev = [0] * (bhi - blo + 1)

    for i in range(alo, ahi):
        cur = [0] * (bhi - blo + 1)
        for j in range(blo, bhi):
            if a[i] == b[j]:
                k = prev[j - blo] + 1
                cur[j - blo + 1] = k
                if k > best_size:
                    best_i, best_j, best_size = i - k + 1, j - k + 1, k
        prev = cur

    return best_i, best_j, best_size


def matched_length(a: str, b: str) -> int:
    """Total size of the non-overlapping aligned blocks shared by a and b."""
    total = 0
    queue: List[Tuple[int, int, int, int]] = [(0, len(a), 0, len(b))]

    while queue:
        alo, ahi, blo, bhi = queue.pop()
        i, j, k = _longest_match(a, alo, ahi, b, blo, bhi)
        if not k:
            continue
        total += k
        if alo < i and blo < j:
            queue.append((alo, i, blo, j))
        if i + k < ahi and j + k < bhi:
            queue.append((i + k, ahi, j + k, bhi))

    return total


def ratio(a: str, b: str) -> int:
    """
    Whole-string similarity: round(200 * M / (len(a) + len(b))).

    The operands are put in a fixed order first so the score does not depend
    on argument order. Two empty strings are identical and score 100.
    """
    if a > b:
        a, b = b, a

    total = len(a) + len(b)
    if total == 0:
        return 100

    matched = matched_length(a, b)
    # Integer half-up rounding of 200 * matched / total
    return (400 * matched + total) // (2 * total)


def partial_ratio(a: str, b: str) -> int:
    """
    Best ratio of the shorter string against every same-length window of the
    longer one.

    Scores 100 when the shorter string appears verbatim inside the longer,
    e.g. partial_ratio("weller", "weller bourbon").
    """
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)

    if not shorter:
        return 100 if not longer else 0

    width = len(shorter)
    best = 0
    for offset in range(len(longer) - width + 1):
        score = ratio(shorter, longer[offset:offset + width])
        if score > best:
            best = score
            if best == 100:
                break

    return best
