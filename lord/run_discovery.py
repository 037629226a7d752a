#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
from pathlib import Path

from lord.comparison_task import ComparisonTask
from lord.config import DEFAULT_CONFIG, DiscoveryConfig, OracleConfig
from lord.dictionary import WordDictionary
from lord.graph import build_graph, export_graph_json, export_similarities_csv
from lord.logging_utils import setup_logging, timed_section
from lord.models import LearningObject
from lord.oracle import BridgeOracle
from lord.store import InMemoryComparisonStore

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
RESULTS_DIR = PROJECT_ROOT / "results"


def load_objects(course_path: Path) -> list[LearningObject]:
    with open(course_path, encoding="utf-8") as f:
        raw = json.load(f)
    items = raw["objects"] if isinstance(raw, dict) else raw
    return [LearningObject.model_validate(item) for item in items]


def run_discovery(
    course_path: Path,
    cycles: int = 1,
    config: DiscoveryConfig | None = None,
    store_path: Path = DATA_DIR / "comparisons.parquet",
    dictionary_path: Path = DATA_DIR / "dictionary.csv",
    output_dir: Path = RESULTS_DIR,
) -> None:
    config = config or DEFAULT_CONFIG
    log = setup_logging(output_dir / "discovery.log")

    log.info("=" * 60)
    log.info(f"Learning object relation discovery ({course_path.name})")
    log.info("=" * 60)
    log.info(
        f"Limits: sentences={config.max_sentences}, paragraphs={config.max_paragraphs}, "
        f"words={config.oracle.max_words}, rechecks={config.recheck_limit}"
    )

    objects = load_objects(course_path)
    store = InMemoryComparisonStore.load(store_path)
    dictionary = WordDictionary.load_csv(dictionary_path)
    if len(dictionary) == 0:
        dictionary = WordDictionary.with_stop_words()
        log.info(f"Seeded dictionary with {len(dictionary)} stop words")

    oracle = BridgeOracle(config.oracle)
    task = ComparisonTask(config, oracle, store, dictionary)

    with timed_section(f"Running {cycles} comparison cycle(s)"):
        for cycle in range(cycles):
            report = task.run_cycle(objects)
            if report.skipped:
                break
            log.info(
                f"Cycle {cycle + 1}: {report.new_comparisons} new comparisons, "
                f"{len(report.rechecked_pairs)} rechecked pairs"
            )
            store.save(store_path)
            dictionary.save_csv(dictionary_path)

    progress = store.progress()
    log.info(
        f"Progress: {progress.calculated}/{progress.total} pairs "
        f"({progress.percent}%), {progress.errors} errors, "
        f"{oracle.calls} oracle calls"
    )

    with timed_section("Building graph"):
        graph = build_graph(objects, store, config.weights, config.aggregation)
        export_similarities_csv(graph, output_dir / "similarities.csv")
        export_graph_json(graph, output_dir / "graph.json")


def main() -> None:
    parser = argparse.ArgumentParser(description="Discover learning object relations")
    parser.add_argument("course", type=Path, help="JSON file with the course objects")
    parser.add_argument("--cycles", type=int, default=1)
    parser.add_argument("--store", type=Path, default=DATA_DIR / "comparisons.parquet")
    parser.add_argument("--dictionary", type=Path, default=DATA_DIR / "dictionary.csv")
    parser.add_argument("--output-dir", type=Path, default=RESULTS_DIR)
    parser.add_argument("--oracle-url", default=DEFAULT_CONFIG.oracle.url)
    args = parser.parse_args()

    config = DEFAULT_CONFIG.model_copy(
        update={"oracle": OracleConfig(url=args.oracle_url)}
    )
    run_discovery(
        args.course,
        cycles=args.cycles,
        config=config,
        store_path=args.store,
        dictionary_path=args.dictionary,
        output_dir=args.output_dir,
    )


if __name__ == "__main__":
    main()
