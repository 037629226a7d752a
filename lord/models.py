from __future__ import annotations

import math
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, model_validator


class LearningObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    intro: str = ""
    paragraphs: list[str] = []
    kind: str = "unknown"
    section: int = 0


class PairKey(BaseModel):
    """Canonical key for two learning objects, lower id first."""

    model_config = ConfigDict(frozen=True)

    first: int
    second: int

    @model_validator(mode="after")
    def _check_order(self) -> PairKey:
        if self.first >= self.second:
            raise ValueError(
                f"Pair ids must be strictly ordered, got {self.first} and {self.second}"
            )
        return self

    @classmethod
    def of(cls, a: int, b: int) -> PairKey:
        if a == b:
            raise ValueError(f"A learning object is never compared to itself ({a})")
        return cls(first=min(a, b), second=max(a, b))

    def __str__(self) -> str:
        return f"{self.first}_{self.second}"


class WordStatus(IntEnum):
    LEXICAL = 0
    NON_LEXICAL = 1
    STOPWORD = 2


class ResultStatus(str, Enum):
    PENDING = "pending"
    COMPUTED = "computed"
    FAILED = "failed"


class AtomicResult(BaseModel):
    status: ResultStatus
    value: float | None = None
    matrix: list[list[float]] | None = None

    @classmethod
    def pending(cls) -> AtomicResult:
        return cls(status=ResultStatus.PENDING)

    @classmethod
    def computed(
        cls, value: float, matrix: list[list[float]] | None = None
    ) -> AtomicResult:
        return cls(status=ResultStatus.COMPUTED, value=value, matrix=matrix)

    @classmethod
    def failed(cls) -> AtomicResult:
        return cls(status=ResultStatus.FAILED)

    @property
    def legacy_value(self) -> float | None:
        # Stored scalar as older data has it: errors collapse into 0.0.
        if self.status is ResultStatus.FAILED:
            return 0.0
        return self.value

    def usable_value(self) -> float | None:
        if self.status is not ResultStatus.COMPUTED:
            return None
        try:
            value = float(self.value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if not math.isfinite(value):
            return None
        return value


class CostAssignment(BaseModel):
    matrix: list[list[float]]
    optimal: list[tuple[int, int]]
    mean: float
    qualifying: int


class ObjectPairSimilarity(BaseModel):
    pair: PairKey
    value: float
    status: ResultStatus
    name_component: float = 0.0
    intro_component: float = 0.0
    paragraph_component: float = 0.0
    intro_cost: CostAssignment | None = None
    paragraph_cost: CostAssignment | None = None
    sentence_costs: dict[str, CostAssignment] = {}

    @property
    def qualifying_cells(self) -> int:
        total = 0
        if self.intro_cost is not None:
            total += self.intro_cost.qualifying
        for cost in self.sentence_costs.values():
            total += cost.qualifying
        return total
