"""Fold the atomic comparisons of one object pair into a single similarity.

Three levels feed the final value:

* the name comparison, a single scalar;
* the introduction sentences, folded by one optimal assignment;
* the paragraphs, folded by two: every paragraph pair first assigns its
  sentences, then the paragraph pairs themselves are assigned.

Everything here is a pure function of the stored results and the weights, so
it can be recomputed at any time as more comparisons accumulate.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Mapping

import numpy as np

from lord.assignment import assign
from lord.config import AggregationConfig, ComparisonWeights
from lord.labels import NAME_LABEL, IntroLabel, SentenceLabel, parse_label
from lord.logging_utils import get_logger
from lord.models import (
    AtomicResult,
    CostAssignment,
    ObjectPairSimilarity,
    PairKey,
    ResultStatus,
)

Cells = dict[tuple[int, int], float | None]


def build_cost_matrix(cells: Cells, sentinel: float) -> np.ndarray:
    """Dense square matrix sized by the largest index seen on either side.

    Cells mapped to ``None`` take part in sizing but keep the sentinel.
    """
    size = 1 + max(max(r, c) for r, c in cells) if cells else 1
    matrix = np.full((size, size), sentinel, dtype=np.float64)
    for (row, col), value in cells.items():
        if value is not None:
            matrix[row, col] = value
    return matrix


class _GroupedResults:
    def __init__(self) -> None:
        self.name: float | None = None
        self.intros: Cells = {}
        self.sentences: dict[tuple[int, int], Cells] = defaultdict(dict)
        self.seen = 0
        self.computed = 0


def _group(results: Mapping[str, AtomicResult]) -> _GroupedResults:
    log = get_logger("aggregator")
    grouped = _GroupedResults()

    for label, result in results.items():
        if result.status is ResultStatus.PENDING:
            continue
        grouped.seen += 1

        try:
            parsed = parse_label(label)
        except ValueError:
            log.debug(f"Skipping unrecognised comparison label {label!r}")
            continue

        value = result.usable_value()
        if value is not None:
            grouped.computed += 1
        elif result.status is ResultStatus.COMPUTED:
            log.debug(f"Skipping malformed value for {label!r}: {result.value!r}")

        if parsed == NAME_LABEL:
            grouped.name = value
        elif isinstance(parsed, IntroLabel):
            grouped.intros[(parsed.first, parsed.second)] = value
        elif isinstance(parsed, SentenceLabel):
            paragraphs = (parsed.first_paragraph, parsed.second_paragraph)
            sentences = (parsed.first_sentence, parsed.second_sentence)
            grouped.sentences[paragraphs][sentences] = value

    return grouped


class HierarchicalAggregator:
    def __init__(
        self,
        weights: ComparisonWeights | None = None,
        config: AggregationConfig | None = None,
    ):
        self.weights = weights or ComparisonWeights()
        self.config = config or AggregationConfig()

    def _assign(self, cells: Cells) -> CostAssignment:
        matrix = build_cost_matrix(cells, self.config.sentinel)
        return assign(matrix, self.config.min_qualifying_value)

    def intro_assignment(self, intros: Cells) -> CostAssignment:
        return self._assign(intros)

    def sentence_assignments(
        self, sentences: Mapping[tuple[int, int], Cells]
    ) -> dict[tuple[int, int], CostAssignment]:
        """Assign sentences within every paragraph pair that has data."""
        costs: dict[tuple[int, int], CostAssignment] = {}
        for paragraphs in sorted(sentences):
            cells = sentences[paragraphs]
            if not cells:
                continue
            cost = self._assign(cells)
            if cost.qualifying == 0:
                continue
            costs[paragraphs] = cost
        return costs

    def paragraph_assignment(
        self, sentence_costs: Mapping[tuple[int, int], CostAssignment]
    ) -> CostAssignment:
        cells: Cells = {pair: cost.mean for pair, cost in sentence_costs.items()}
        return self._assign(cells)

    def aggregate(
        self, pair: PairKey, results: Mapping[str, AtomicResult]
    ) -> ObjectPairSimilarity:
        grouped = _group(results)

        name_component = (grouped.name or 0.0) * self.weights.name

        intro_cost = self.intro_assignment(grouped.intros)
        intro_component = intro_cost.mean * self.weights.intro

        sentence_costs = self.sentence_assignments(grouped.sentences)
        paragraph_cost = self.paragraph_assignment(sentence_costs)
        paragraph_component = paragraph_cost.mean * self.weights.sentence

        if paragraph_component != 0.0:
            value = (name_component + intro_component + paragraph_component) / 3.0
        else:
            value = (name_component + intro_component) / 2.0

        if grouped.seen == 0:
            status = ResultStatus.PENDING
        elif grouped.computed == 0:
            status = ResultStatus.FAILED
        else:
            status = ResultStatus.COMPUTED

        return ObjectPairSimilarity(
            pair=pair,
            value=value,
            status=status,
            name_component=name_component,
            intro_component=intro_component,
            paragraph_component=paragraph_component,
            intro_cost=intro_cost,
            paragraph_cost=paragraph_cost,
            sentence_costs={f"{p0}_{p1}": c for (p0, p1), c in sentence_costs.items()},
        )


def aggregate_similarity(
    pair: PairKey,
    results: Mapping[str, AtomicResult],
    weights: ComparisonWeights | None = None,
    config: AggregationConfig | None = None,
) -> float:
    return HierarchicalAggregator(weights, config).aggregate(pair, results).value
