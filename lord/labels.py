"""Comparison label grammar shared by the store, the task and the aggregator.

Labels must stay byte-compatible with previously stored data:

    name
    intro<i>x<j>
    P<p0>S<s0>P<p1>S<s1>

The first index of every pair always belongs to the lower-id object.
"""

from __future__ import annotations

import re
from typing import NamedTuple

NAME_LABEL = "name"

_INTRO_PATTERN = re.compile(r"^intro(\d+)x(\d+)$")
_SENTENCE_PATTERN = re.compile(r"^P(\d+)S(\d+)P(\d+)S(\d+)$")


class IntroLabel(NamedTuple):
    first: int
    second: int


class SentenceLabel(NamedTuple):
    first_paragraph: int
    first_sentence: int
    second_paragraph: int
    second_sentence: int


def intro_label(first: int, second: int) -> str:
    return f"intro{first}x{second}"


def sentence_label(p0: int, s0: int, p1: int, s1: int) -> str:
    return f"P{p0}S{s0}P{p1}S{s1}"


def parse_label(label: str) -> str | IntroLabel | SentenceLabel:
    if label == NAME_LABEL:
        return NAME_LABEL

    match = _INTRO_PATTERN.match(label)
    if match:
        return IntroLabel(int(match.group(1)), int(match.group(2)))

    match = _SENTENCE_PATTERN.match(label)
    if match:
        return SentenceLabel(*(int(g) for g in match.groups()))

    raise ValueError(f"Unrecognised comparison label: {label!r}")
