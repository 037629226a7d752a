from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Mapping

from spacy.lang.en.stop_words import STOP_WORDS as SPACY_STOPWORDS_EN

from lord.logging_utils import get_logger
from lord.models import WordStatus
from lord.oracle import SimilarityOracle
from lord.sentence_cleaner import clean, is_numeric, tokenize

# Carried over from the word list courses were seeded with before spaCy's.
COURSE_STOPWORDS = frozenset(
    "a about an are as at be by com de en for from how i in is it la of on or "
    "that the this to und was what when where who will with www".split()
)

STOPWORDS_EN = frozenset(SPACY_STOPWORDS_EN) | COURSE_STOPWORDS


class WordDictionary:
    """Status of every word met while cleaning, shared by all courses.

    A word is LEXICAL when the oracle recognises it (its self-similarity is
    exactly 1.0), NON_LEXICAL otherwise, and STOPWORD when an operator or the
    default list says it carries no meaning.
    """

    def __init__(self, entries: Mapping[str, int] | None = None):
        self._words: dict[str, WordStatus] = {}
        for word, status in (entries or {}).items():
            self._words[word] = WordStatus(int(status))

    @classmethod
    def with_stop_words(cls, words: Iterable[str] = STOPWORDS_EN) -> WordDictionary:
        dictionary = cls()
        for word in words:
            dictionary.record(word.lower(), WordStatus.STOPWORD)
        return dictionary

    def lookup(self, word: str) -> WordStatus | None:
        return self._words.get(word)

    def record(self, word: str, status: WordStatus) -> None:
        self._words[word] = WordStatus(status)

    def remove(self, word: str) -> None:
        self._words.pop(word, None)

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def __len__(self) -> int:
        return len(self._words)

    def as_mapping(self) -> Mapping[str, int]:
        return self._words

    def stop_words(self) -> list[str]:
        return sorted(w for w, s in self._words.items() if s is WordStatus.STOPWORD)

    def add_stop_word(self, word: str) -> None:
        word = word.strip().lower()
        if not word or is_numeric(word):
            raise ValueError(f"Not a valid stop word: {word!r}")
        self.record(word, WordStatus.STOPWORD)

    def remove_stop_word(self, word: str) -> None:
        # Dropped entirely so the oracle re-classifies it on next sight.
        word = word.strip().lower()
        if self.lookup(word) is WordStatus.STOPWORD:
            self.remove(word)

    def populate(self, sentence: str, oracle: SimilarityOracle) -> int:
        """Classify unknown words of ``sentence`` through self-comparison.

        Returns the number of words learnt. A failed oracle call leaves the
        word unknown so that a later cycle can retry it.
        """
        log = get_logger("dictionary")
        learnt = 0
        for word in tokenize(sentence):
            if word in self._words:
                continue
            result = oracle.compare(word, word)
            if not result.ok:
                log.debug(f"Could not classify {word!r}, will retry later")
                continue
            status = (
                WordStatus.LEXICAL if result.similarity == 1.0 else WordStatus.NON_LEXICAL
            )
            self.record(word, status)
            learnt += 1
        return learnt

    def clean_and_learn(self, sentence: str, oracle: SimilarityOracle) -> str:
        self.populate(sentence, oracle)
        return clean(sentence, self._words)

    @classmethod
    def load_csv(cls, path: Path) -> WordDictionary:
        dictionary = cls()
        if not path.exists():
            return dictionary
        with open(path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                word = (row.get("word") or "").strip()
                if word:
                    dictionary.record(word, WordStatus(int(row["status"])))
        return dictionary

    def save_csv(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["word", "status"])
            for word in sorted(self._words):
                writer.writerow([word, int(self._words[word])])
