"""Optimal one-to-one assignment over a square value matrix.

Matrices are read as profits: the solver maximises the sum of the selected
cells. Internally the profit matrix is turned into a cost matrix and solved
with the shortest augmenting path form of the Hungarian method, which runs in
O(n^3) and never fails on a finite square matrix, including one filled
entirely with the sentinel value.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from lord.config import MIN_QUALIFYING_VALUE
from lord.models import CostAssignment

MatrixLike = Sequence[Sequence[float]] | np.ndarray


def _as_square(matrix: MatrixLike) -> np.ndarray:
    array = np.asarray(matrix, dtype=np.float64)
    if array.shape == (0,):
        return np.zeros((0, 0), dtype=np.float64)
    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise ValueError(f"Assignment needs a square matrix, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise ValueError("Assignment matrix contains non-finite values")
    return array


def make_cost_matrix(profit: MatrixLike) -> np.ndarray:
    array = _as_square(profit)
    if array.size == 0:
        return array
    return array.max() - array


def _hungarian(cost: np.ndarray) -> list[int]:
    """Return ``row_of[col]`` for a minimum-cost perfect matching.

    Arrays are 1-based with index 0 as the virtual start column, as in the
    classic potentials formulation.
    """
    n = cost.shape[0]
    u = np.zeros(n + 1)
    v = np.zeros(n + 1)
    row_of = [0] * (n + 1)
    way = [0] * (n + 1)

    for row in range(1, n + 1):
        row_of[0] = row
        col0 = 0
        min_reduced = np.full(n + 1, np.inf)
        used = [False] * (n + 1)

        while True:
            used[col0] = True
            row0 = row_of[col0]
            delta = np.inf
            col1 = 0
            for col in range(1, n + 1):
                if used[col]:
                    continue
                reduced = cost[row0 - 1, col - 1] - u[row0] - v[col]
                if reduced < min_reduced[col]:
                    min_reduced[col] = reduced
                    way[col] = col0
                # Strict comparison keeps the lowest column on ties.
                if min_reduced[col] < delta:
                    delta = min_reduced[col]
                    col1 = col

            for col in range(n + 1):
                if used[col]:
                    u[row_of[col]] += delta
                    v[col] -= delta
                else:
                    min_reduced[col] -= delta

            col0 = col1
            if row_of[col0] == 0:
                break

        while True:
            col1 = way[col0]
            row_of[col0] = row_of[col1]
            col0 = col1
            if col0 == 0:
                break

    return row_of


def solve_assignment(matrix: MatrixLike) -> list[tuple[int, int]]:
    """Maximum-value bijection between rows and columns, sorted by row."""
    cost = make_cost_matrix(matrix)
    n = cost.shape[0]
    if n == 0:
        return []
    if n == 1:
        return [(0, 0)]

    row_of = _hungarian(cost)
    pairs = [(row_of[col] - 1, col - 1) for col in range(1, n + 1)]
    return sorted(pairs)


def assignment_total(matrix: MatrixLike, pairs: Sequence[tuple[int, int]]) -> float:
    array = np.asarray(matrix, dtype=np.float64)
    return float(sum(array[r, c] for r, c in pairs))


def qualifying_mean(
    matrix: MatrixLike,
    pairs: Sequence[tuple[int, int]],
    threshold: float = MIN_QUALIFYING_VALUE,
) -> tuple[float, int]:
    """Mean of the assigned cells at or above ``threshold`` and their count.

    Sentinel padding never qualifies, so an all-sentinel matrix yields 0.0.
    """
    array = np.asarray(matrix, dtype=np.float64)
    values = [float(array[r, c]) for r, c in pairs if array[r, c] >= threshold]
    if not values:
        return 0.0, 0
    return sum(values) / len(values), len(values)


def assign(
    matrix: MatrixLike, threshold: float = MIN_QUALIFYING_VALUE
) -> CostAssignment:
    array = _as_square(matrix)
    pairs = solve_assignment(array)
    mean, count = qualifying_mean(array, pairs, threshold)
    return CostAssignment(
        matrix=array.tolist(), optimal=pairs, mean=mean, qualifying=count
    )
