"""Learning object relation discovery through hierarchical similarity aggregation."""

from .aggregator import HierarchicalAggregator, aggregate_similarity
from .assignment import assign, qualifying_mean, solve_assignment
from .comparison_task import ComparisonTask
from .config import DEFAULT_CONFIG, ComparisonWeights, DiscoveryConfig
from .dictionary import WordDictionary
from .models import AtomicResult, LearningObject, PairKey, ResultStatus
from .oracle import BridgeOracle, OracleResult
from .sentence_cleaner import clean, restrict_length, split_into_sentences
from .store import InMemoryComparisonStore

__all__ = [
    "HierarchicalAggregator",
    "aggregate_similarity",
    "assign",
    "qualifying_mean",
    "solve_assignment",
    "ComparisonTask",
    "DEFAULT_CONFIG",
    "ComparisonWeights",
    "DiscoveryConfig",
    "WordDictionary",
    "AtomicResult",
    "LearningObject",
    "PairKey",
    "ResultStatus",
    "BridgeOracle",
    "OracleResult",
    "clean",
    "restrict_length",
    "split_into_sentences",
    "InMemoryComparisonStore",
]
