"""Tests for the Hungarian assignment solver."""

import itertools
import random

import numpy as np
import pytest

from lord.assignment import (
    assign,
    assignment_total,
    make_cost_matrix,
    qualifying_mean,
    solve_assignment,
)
from lord.config import SENTINEL


def brute_force_best(matrix: list[list[float]]) -> float:
    n = len(matrix)
    return max(
        sum(matrix[r][c] for r, c in enumerate(perm))
        for perm in itertools.permutations(range(n))
    )


def random_matrix(rng: random.Random, n: int) -> list[list[float]]:
    return [[round(rng.uniform(-2.0, 2.0), 3) for _ in range(n)] for _ in range(n)]


class TestSolveAssignment:
    """Optimality and validity of the returned assignment."""

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5])
    def test_matches_brute_force(self, n: int) -> None:
        rng = random.Random(n)
        for _ in range(25):
            matrix = random_matrix(rng, n)
            pairs = solve_assignment(matrix)
            assert assignment_total(matrix, pairs) == pytest.approx(
                brute_force_best(matrix)
            )

    @pytest.mark.parametrize("n", [1, 2, 4, 7, 10])
    def test_returns_bijection(self, n: int) -> None:
        rng = random.Random(100 + n)
        pairs = solve_assignment(random_matrix(rng, n))
        assert len(pairs) == n
        assert sorted(r for r, _ in pairs) == list(range(n))
        assert sorted(c for _, c in pairs) == list(range(n))

    def test_maximises_rather_than_minimises(self) -> None:
        matrix = [[0.9, 0.1], [0.2, 0.8]]
        assert solve_assignment(matrix) == [(0, 0), (1, 1)]

    def test_prefers_real_cells_over_sentinel(self) -> None:
        matrix = [
            [SENTINEL, 0.3, SENTINEL],
            [0.5, SENTINEL, SENTINEL],
            [SENTINEL, SENTINEL, SENTINEL],
        ]
        assert solve_assignment(matrix) == [(0, 1), (1, 0), (2, 2)]

    def test_single_cell(self) -> None:
        assert solve_assignment([[0.4]]) == [(0, 0)]

    def test_empty_matrix(self) -> None:
        assert solve_assignment([]) == []
        assert qualifying_mean([], []) == (0.0, 0)

    def test_all_sentinel_matrix_is_solvable(self) -> None:
        matrix = np.full((4, 4), SENTINEL)
        pairs = solve_assignment(matrix)
        assert sorted(c for _, c in pairs) == [0, 1, 2, 3]

    def test_deterministic(self) -> None:
        matrix = [[0.5, 0.5, 0.5], [0.5, 0.5, 0.5], [0.5, 0.5, 0.5]]
        first = solve_assignment(matrix)
        for _ in range(5):
            assert solve_assignment(matrix) == first

    def test_rejects_non_square(self) -> None:
        with pytest.raises(ValueError):
            solve_assignment([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])

    @pytest.mark.parametrize("matrix", [[[]], [[], [], []]])
    def test_rejects_rows_without_columns(self, matrix: list[list[float]]) -> None:
        with pytest.raises(ValueError):
            solve_assignment(matrix)

    def test_rejects_non_finite(self) -> None:
        with pytest.raises(ValueError):
            solve_assignment([[1.0, float("nan")], [0.0, 1.0]])


class TestQualifyingMean:
    """Sentinel padding must never count towards a mean."""

    def test_all_sentinel_gives_zero(self) -> None:
        matrix = np.full((3, 3), SENTINEL)
        pairs = solve_assignment(matrix)
        assert qualifying_mean(matrix, pairs) == (0.0, 0)

    def test_ignores_padding(self) -> None:
        matrix = [[0.6, SENTINEL], [SENTINEL, SENTINEL]]
        mean, count = qualifying_mean(matrix, solve_assignment(matrix))
        assert mean == pytest.approx(0.6)
        assert count == 1

    def test_threshold_is_inclusive(self) -> None:
        matrix = [[-1.0, SENTINEL], [SENTINEL, 0.5]]
        mean, count = qualifying_mean(matrix, [(0, 0), (1, 1)])
        assert count == 2
        assert mean == pytest.approx(-0.25)


class TestAssign:
    def test_bundles_matrix_assignment_and_mean(self) -> None:
        cost = assign([[0.2, 0.9], [0.7, 0.1]])
        assert cost.optimal == [(0, 1), (1, 0)]
        assert cost.mean == pytest.approx(0.8)
        assert cost.qualifying == 2
        assert cost.matrix == [[0.2, 0.9], [0.7, 0.1]]

    def test_cost_matrix_flips_orientation(self) -> None:
        cost = make_cost_matrix([[1.0, 3.0], [2.0, 0.0]])
        assert cost.tolist() == [[2.0, 0.0], [1.0, 3.0]]
