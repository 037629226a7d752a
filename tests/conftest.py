from __future__ import annotations

import pytest

from lord.dictionary import WordDictionary
from tests.fakes import FakeOracle


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def dictionary() -> WordDictionary:
    return WordDictionary.with_stop_words(["the", "a", "of", "is", "and"])
