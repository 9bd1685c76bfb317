"""Maximum-weight rectangular assignment on exact integer weights.

This is the Kuhn-Munkres (Hungarian) algorithm with row/column potentials,
O(rows^2 * cols). Weights are Python ints so that lexicographic objectives can
be packed into a single weight without any floating point tolerance.
"""

from __future__ import annotations

from typing import List, Sequence


def solve_assignment(weights: Sequence[Sequence[int]]) -> List[int]:
    """Return, for each row, the column that maximises the total weight.

    Every row is matched to a distinct column, so ``len(weights[0])`` must be at
    least ``len(weights)``. Callers model "leave this row unmatched" by adding
    zero-weight dummy columns.
    """

    n = len(weights)
    if n == 0:
        return []
    m = len(weights[0])
    if m < n:
        raise ValueError(f"Need at least as many columns as rows ({m} < {n})")
    if any(len(row) != m for row in weights):
        raise ValueError("Weight matrix rows must all have the same length")

    # Minimisation on negated weights; index 0 is the virtual source.
    cost = [[-w for w in row] for row in weights]
    u = [0] * (n + 1)
    v = [0] * (m + 1)
    owner = [0] * (m + 1)
    way = [0] * (m + 1)

    for i in range(1, n + 1):
        owner[0] = i
        j0 = 0
        minv: List[float] = [float("inf")] * (m + 1)
        used = [False] * (m + 1)
        while True:
            used[j0] = True
            i0 = owner[j0]
            delta: float = float("inf")
            j1 = 0
            row = cost[i0 - 1]
            for j in range(1, m + 1):
                if used[j]:
                    continue
                reduced = row[j - 1] - u[i0] - v[j]
                if reduced < minv[j]:
                    minv[j] = reduced
                    way[j] = j0
                if minv[j] < delta:
                    delta = minv[j]
                    j1 = j
            for j in range(m + 1):
                if used[j]:
                    u[owner[j]] += delta
                    v[j] -= delta
                else:
                    minv[j] -= delta
            j0 = j1
            if owner[j0] == 0:
                break
        # Flip the augmenting path back to the source.
        while j0:
            j1 = way[j0]
            owner[j0] = owner[j1]
            j0 = j1

    assignment = [-1] * n
    for j in range(1, m + 1):
        if owner[j]:
            assignment[owner[j] - 1] = j - 1
    return assignment
