"""Resumable batch job that fills the comparison store one cycle at a time.

A cycle computes at most one new name-level comparison, together with the
introduction and paragraph comparisons of that pair. Once every pair has a
name result, cycles switch to rechecking: pairs are revisited for comparisons
that became relevant after the sentence or paragraph limits were raised, a
bounded number of pairs per cycle. Every atomic result is stored as soon as
it is known, so an interrupted cycle loses at most one oracle call.
"""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel

from lord.config import DiscoveryConfig
from lord.dictionary import WordDictionary
from lord.labels import NAME_LABEL, intro_label, sentence_label
from lord.logging_utils import get_logger
from lord.models import LearningObject, PairKey
from lord.oracle import SimilarityOracle
from lord.sentence_cleaner import split_into_sentences
from lord.store import InMemoryComparisonStore


class CycleReport(BaseModel):
    skipped: bool = False
    added_pairs: int = 0
    removed_pairs: int = 0
    compared_pair: PairKey | None = None
    rechecked_pairs: list[PairKey] = []
    new_comparisons: int = 0


class ComparisonTask:
    def __init__(
        self,
        config: DiscoveryConfig,
        oracle: SimilarityOracle,
        store: InMemoryComparisonStore,
        dictionary: WordDictionary,
    ):
        self.config = config
        self.oracle = oracle
        self.store = store
        self.dictionary = dictionary

    def run_cycle(self, objects: Sequence[LearningObject]) -> CycleReport:
        log = get_logger("task")

        if not self.config.enabled:
            log.info("Relation discovery is turned off for this course. Nothing to do.")
            return CycleReport(skipped=True)

        report = CycleReport()
        report.added_pairs, report.removed_pairs = self.sync_objects(objects)

        by_id = {obj.id: obj for obj in objects}
        pairs = self.store.pairs()

        for pair in pairs:
            if self.store.has_name(pair):
                continue
            log.info(f"Comparing learning objects {pair.first} and {pair.second}")
            report.compared_pair = pair
            report.new_comparisons = self.compare_pair(
                by_id[pair.first], by_id[pair.second]
            )
            return report

        if pairs:
            self._recheck(pairs, by_id, report)
        return report

    def sync_objects(self, objects: Sequence[LearningObject]) -> tuple[int, int]:
        """Register pairs for new objects and drop those of removed objects."""
        log = get_logger("task")
        current = {obj.id for obj in objects}

        removed = 0
        for object_id in sorted(self.store.object_ids() - current):
            log.info(f"Deleting comparisons for removed learning object {object_id}")
            removed += self.store.remove_object(object_id)

        ids = sorted(current)
        added = 0
        for i, first in enumerate(ids):
            for second in ids[i + 1 :]:
                if self.store.register(PairKey(first=first, second=second)):
                    added += 1
        if added:
            log.info(f"Registered {added} new learning object pairs")
        return added, removed

    def compare_pair(self, first: LearningObject, second: LearningObject) -> int:
        if first.id > second.id:
            first, second = second, first
        pair = PairKey.of(first.id, second.id)

        names = (self._clean(first.name), self._clean(second.name))
        result = self.oracle.compare(*names)
        self.store.put(pair, NAME_LABEL, result.to_atomic())

        return 1 + self.compare_content(first, second)

    def compare_content(self, first: LearningObject, second: LearningObject) -> int:
        """Store every intro and paragraph comparison not stored yet."""
        if first.id > second.id:
            first, second = second, first
        log = get_logger("task")
        pair = PairKey.of(first.id, second.id)
        existing = self.store.get(pair)
        max_s = self.config.max_sentences
        max_p = self.config.max_paragraphs
        done = 0

        first_intro = split_into_sentences(first.intro)[:max_s]
        second_intro = split_into_sentences(second.intro)[:max_s]
        for ks, key_sentence in enumerate(first_intro):
            for ts, target_sentence in enumerate(second_intro):
                label = intro_label(ks, ts)
                if label in existing:
                    continue
                log.debug(f"Comparing intros: {ks} x {ts}")
                done += self._compare(pair, label, key_sentence, target_sentence)

        for p0, key_para in enumerate(first.paragraphs[:max_p]):
            key_sentences = split_into_sentences(key_para)[:max_s]
            for p1, target_para in enumerate(second.paragraphs[:max_p]):
                target_sentences = split_into_sentences(target_para)[:max_s]
                for s0, key_sentence in enumerate(key_sentences):
                    for s1, target_sentence in enumerate(target_sentences):
                        label = sentence_label(p0, s0, p1, s1)
                        if label in existing:
                            continue
                        log.debug(f"Comparing: P{p0} S{s0} x P{p1} S{s1}")
                        done += self._compare(pair, label, key_sentence, target_sentence)

        return done

    def _compare(self, pair: PairKey, label: str, key: str, target: str) -> int:
        result = self.oracle.compare(self._clean(key), self._clean(target))
        self.store.put(pair, label, result.to_atomic())
        return 1

    def _clean(self, text: str) -> str:
        return self.dictionary.clean_and_learn(text, self.oracle)

    def _recheck(
        self,
        pairs: list[PairKey],
        by_id: dict[int, LearningObject],
        report: CycleReport,
    ) -> None:
        log = get_logger("task")
        for pair in pairs:
            done = self.compare_content(by_id[pair.first], by_id[pair.second])
            if done == 0:
                continue
            report.rechecked_pairs.append(pair)
            report.new_comparisons += done
            if len(report.rechecked_pairs) >= self.config.recheck_limit:
                log.info(
                    f"Did {len(report.rechecked_pairs)} rechecks, stopping for now."
                )
                break
