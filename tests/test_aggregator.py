"""Tests for folding atomic comparisons into one object pair similarity."""

import pytest

from lord.aggregator import HierarchicalAggregator, aggregate_similarity, build_cost_matrix
from lord.config import SENTINEL, AggregationConfig, ComparisonWeights
from lord.models import AtomicResult, PairKey, ResultStatus

PAIR = PairKey.of(3, 7)


def computed(value: float) -> AtomicResult:
    return AtomicResult.computed(value)


class TestFinalCombination:
    """The name/intro/paragraph average and its two branches."""

    def test_name_only(self) -> None:
        results = {"name": computed(0.8)}
        assert aggregate_similarity(PAIR, results) == pytest.approx(0.4)

    def test_paragraph_branch(self) -> None:
        results = {"name": computed(0.8), "P0S0P0S0": computed(0.6)}
        assert aggregate_similarity(PAIR, results) == pytest.approx(1.4 / 3.0)

    def test_all_levels(self) -> None:
        results = {
            "name": computed(0.9),
            "intro0x0": computed(0.5),
            "intro0x1": computed(0.1),
            "intro1x0": computed(0.2),
            "intro1x1": computed(0.7),
            "P0S0P0S0": computed(0.3),
        }
        similarity = HierarchicalAggregator().aggregate(PAIR, results)
        assert similarity.intro_component == pytest.approx(0.6)
        assert similarity.paragraph_component == pytest.approx(0.3)
        assert similarity.value == pytest.approx((0.9 + 0.6 + 0.3) / 3.0)

    def test_weights_scale_components(self) -> None:
        results = {"name": computed(0.8), "intro0x0": computed(0.4)}
        weights = ComparisonWeights(name=0.5, intro=2.0, sentence=1.0)
        similarity = HierarchicalAggregator(weights).aggregate(PAIR, results)
        assert similarity.name_component == pytest.approx(0.4)
        assert similarity.intro_component == pytest.approx(0.8)
        assert similarity.value == pytest.approx(0.6)

    def test_no_data_is_pending_zero(self) -> None:
        similarity = HierarchicalAggregator().aggregate(PAIR, {})
        assert similarity.value == 0.0
        assert similarity.status is ResultStatus.PENDING


class TestIntroLevel:
    def test_matrix_sized_by_largest_index(self) -> None:
        results = {"name": computed(0.0), "intro0x2": computed(0.5)}
        similarity = HierarchicalAggregator().aggregate(PAIR, results)
        assert similarity.intro_cost is not None
        assert len(similarity.intro_cost.matrix) == 3
        assert similarity.intro_cost.matrix[2][2] == SENTINEL
        assert similarity.intro_cost.mean == pytest.approx(0.5)

    def test_uses_optimal_not_greedy_pairing(self) -> None:
        # Greedy would take 0.9 then be left with 0.0; optimal takes 0.8 + 0.8.
        results = {
            "intro0x0": computed(0.9),
            "intro0x1": computed(0.8),
            "intro1x0": computed(0.8),
            "intro1x1": computed(0.0),
        }
        similarity = HierarchicalAggregator().aggregate(PAIR, results)
        assert similarity.intro_cost.mean == pytest.approx(0.8)


class TestParagraphLevel:
    """Sentence assignment per paragraph pair, then paragraph assignment."""

    def test_two_level_assignment(self) -> None:
        results = {
            "P0S0P0S0": computed(0.2),
            "P0S1P0S0": computed(0.6),
            "P0S0P1S0": computed(0.9),
            "P1S0P0S0": computed(0.4),
        }
        similarity = HierarchicalAggregator().aggregate(PAIR, results)

        inner = similarity.sentence_costs
        assert set(inner) == {"0_0", "0_1", "1_0"}
        assert inner["0_0"].mean == pytest.approx(0.6)
        assert inner["0_1"].mean == pytest.approx(0.9)
        assert inner["1_0"].mean == pytest.approx(0.4)

        # Paragraph 0 of the first object goes to paragraph 1 of the second.
        assert similarity.paragraph_cost.optimal == [(0, 1), (1, 0)]
        assert similarity.paragraph_cost.mean == pytest.approx(0.65)

    def test_sentence_matrix_sized_per_paragraph_pair(self) -> None:
        results = {"P0S0P0S2": computed(0.5), "P1S0P1S0": computed(0.3)}
        similarity = HierarchicalAggregator().aggregate(PAIR, results)
        assert len(similarity.sentence_costs["0_0"].matrix) == 3
        assert len(similarity.sentence_costs["1_1"].matrix) == 1

    def test_paragraph_pairs_without_real_cells_are_skipped(self) -> None:
        results = {"P0S0P0S0": AtomicResult.failed(), "name": computed(0.5)}
        similarity = HierarchicalAggregator().aggregate(PAIR, results)
        assert similarity.sentence_costs == {}
        assert similarity.paragraph_component == 0.0
        assert similarity.value == pytest.approx(0.25)


class TestRobustness:
    """Malformed or incomplete data never breaks aggregation."""

    def test_failed_and_pending_results_are_ignored(self) -> None:
        results = {
            "name": computed(0.8),
            "intro0x0": AtomicResult.failed(),
            "intro1x1": AtomicResult.pending(),
        }
        assert aggregate_similarity(PAIR, results) == pytest.approx(0.4)

    def test_only_failures_reports_failed(self) -> None:
        results = {"name": AtomicResult.failed()}
        similarity = HierarchicalAggregator().aggregate(PAIR, results)
        assert similarity.value == 0.0
        assert similarity.status is ResultStatus.FAILED

    def test_genuine_zero_is_computed(self) -> None:
        similarity = HierarchicalAggregator().aggregate(PAIR, {"name": computed(0.0)})
        assert similarity.value == 0.0
        assert similarity.status is ResultStatus.COMPUTED

    def test_non_numeric_value_is_skipped(self) -> None:
        broken = AtomicResult.model_construct(
            status=ResultStatus.COMPUTED, value="n/a", matrix=None
        )
        results = {"name": computed(0.8), "intro0x0": broken}
        assert aggregate_similarity(PAIR, results) == pytest.approx(0.4)

    def test_non_finite_value_is_skipped(self) -> None:
        results = {"name": computed(0.8), "P0S0P0S0": computed(float("nan"))}
        assert aggregate_similarity(PAIR, results) == pytest.approx(0.4)

    def test_unknown_labels_are_skipped(self) -> None:
        results = {"name": computed(0.8), "summary": computed(0.9)}
        assert aggregate_similarity(PAIR, results) == pytest.approx(0.4)

    def test_missing_weights_default_to_one(self) -> None:
        results = {"name": computed(0.6)}
        assert aggregate_similarity(PAIR, results, weights=None) == pytest.approx(0.3)

    def test_custom_sentinel_and_threshold(self) -> None:
        config = AggregationConfig(sentinel=-50.0, min_qualifying_value=0.0)
        results = {"intro0x1": computed(0.4), "intro1x0": computed(-0.5)}
        similarity = HierarchicalAggregator(config=config).aggregate(PAIR, results)
        assert similarity.intro_cost.matrix[0][0] == -50.0
        assert similarity.intro_cost.mean == pytest.approx(0.4)


class TestRecomputation:
    def test_idempotent(self) -> None:
        results = {
            "name": computed(0.7),
            "intro0x0": computed(0.3),
            "P0S0P1S1": computed(0.45),
            "P1S0P0S0": computed(0.25),
        }
        aggregator = HierarchicalAggregator()
        first = aggregator.aggregate(PAIR, results)
        second = aggregator.aggregate(PAIR, results)
        assert first.value == second.value
        assert first == second

    def test_more_data_never_drops_qualifying_cells(self) -> None:
        labels = [
            ("intro0x0", 0.3),
            ("P0S0P0S0", 0.5),
            ("intro1x1", 0.6),
            ("P0S1P0S0", 0.2),
            ("intro2x0", 0.9),
            ("P1S0P1S1", 0.4),
            ("P0S1P0S1", 0.7),
        ]
        aggregator = HierarchicalAggregator()
        results: dict[str, AtomicResult] = {"name": computed(0.5)}
        previous = aggregator.aggregate(PAIR, results).qualifying_cells
        for label, value in labels:
            results[label] = computed(value)
            current = aggregator.aggregate(PAIR, results).qualifying_cells
            assert current >= previous
            previous = current


class TestBuildCostMatrix:
    def test_empty_cells_give_single_sentinel(self) -> None:
        assert build_cost_matrix({}, SENTINEL).tolist() == [[SENTINEL]]

    def test_unusable_cells_still_size_the_matrix(self) -> None:
        matrix = build_cost_matrix({(0, 0): 0.5, (2, 1): None}, SENTINEL)
        assert matrix.shape == (3, 3)
        assert matrix[2, 1] == SENTINEL
