# fuzzy_match.py: bounded Levenshtein distance for typo-tolerant lookups


def edit_distance(a: str, b: str, max_dist: int) -> int:
    """Return the edit distance between a and b, or max_dist + 1 once it is
    known to exceed max_dist.

    Insertions, deletions and substitutions all cost 1. Only the accept/reject
    decision against max_dist is exact; anything above the threshold is
    reported as max_dist + 1.
    """
    too_far = max_dist + 1
    la, lb = len(a), len(b)
    if abs(la - lb) > max_dist:
        return too_far
    if la < lb:
        # keep the rows as short as possible
        a, b = b, a
        la, lb = lb, la

    prev = list(range(lb + 1))
    cur = [0] * (lb + 1)
    for i in range(1, la + 1):
        cur[0] = i
        row_min = i
        ca = a[i - 1]
        for j in range(1, lb + 1):
            cost = 0 if ca == b[j - 1] else 1
            d = min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + cost)
            cur[j] = d
            if d < row_min:
                row_min = d
        if row_min > max_dist:
            return too_far
        prev, cur = cur, prev
    return prev[lb] if prev[lb] <= max_dist else too_far
