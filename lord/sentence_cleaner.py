from __future__ import annotations

import re
from typing import Mapping

from lord.models import WordStatus

HONORIFICS = ("Mr", "Mrs", "Ms", "Mx", "Dr", "Prof", "Pr", "Br", "Sr", "Fr", "Rev")

# Python lookbehinds must be fixed width, so every honorific gets its own.
_HONORIFIC_GUARD = "".join(f"(?<!{re.escape(h)}\\.)" for h in HONORIFICS)
_SENTENCE_BOUNDARY = re.compile(_HONORIFIC_GUARD + r"(?<=[.?!;])\s+(?=[A-Z])")

_PUNCTUATION = re.compile(r"[.,:;?!()@#$%&*\-_=+\[\]{}<>^\"\n\r/]+")
_NUMERIC = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def split_into_sentences(text: str) -> list[str]:
    """Split a paragraph into sentences.

    A boundary is sentence-ending punctuation followed by whitespace and a
    capital letter, except after an honorific such as "Dr.".
    """
    if not text:
        return []
    parts = _SENTENCE_BOUNDARY.split(text)
    return [p.strip() for p in parts if p.strip()]


def is_numeric(token: str) -> bool:
    return bool(_NUMERIC.match(token))


def tokenize(sentence: str) -> list[str]:
    """Lower-cased, punctuation-free, de-duplicated tokens in first-seen order."""
    stripped = _PUNCTUATION.sub(" ", sentence).lower()

    tokens: list[str] = []
    seen: set[str] = set()
    for token in stripped.split():
        if token in seen:
            continue
        seen.add(token)
        if is_numeric(token):
            continue
        tokens.append(token)
    return tokens


def clean(sentence: str, dictionary: Mapping[str, int]) -> str:
    kept = [t for t in tokenize(sentence) if dictionary.get(t) == WordStatus.LEXICAL]
    return " ".join(kept).strip()


def restrict_length(sentence: str, max_words: int) -> str:
    words = sentence.split()
    if len(words) > max_words:
        return " ".join(words[:max_words])
    return sentence
