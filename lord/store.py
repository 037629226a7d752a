from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

import polars as pl
from pydantic import BaseModel

from lord.labels import NAME_LABEL
from lord.models import AtomicResult, PairKey, ResultStatus

STORE_SCHEMA = {
    "first": pl.Int64,
    "second": pl.Int64,
    "compared": pl.Utf8,
    "status": pl.Utf8,
    "value": pl.Float64,
    "matrix": pl.Utf8,
}


class Progress(BaseModel):
    total: int
    calculated: int
    percent: float
    errors: int


class ComparisonStore(Protocol):
    def get(self, pair: PairKey) -> dict[str, AtomicResult]: ...

    def put(self, pair: PairKey, label: str, result: AtomicResult) -> None: ...


class InMemoryComparisonStore:
    """Atomic comparison results keyed by object pair, then by label.

    A registered pair with no results is pending: it still has to have its
    name compared. Results are written one at a time and never batched.
    """

    def __init__(self) -> None:
        self._results: dict[PairKey, dict[str, AtomicResult]] = {}

    def register(self, pair: PairKey) -> bool:
        if pair in self._results:
            return False
        self._results[pair] = {}
        return True

    def get(self, pair: PairKey) -> dict[str, AtomicResult]:
        return dict(self._results.get(pair, {}))

    def put(self, pair: PairKey, label: str, result: AtomicResult) -> None:
        self._results.setdefault(pair, {})[label] = result

    def pairs(self) -> list[PairKey]:
        return sorted(self._results, key=lambda p: (p.first, p.second))

    def object_ids(self) -> set[int]:
        ids: set[int] = set()
        for pair in self._results:
            ids.update((pair.first, pair.second))
        return ids

    def remove_object(self, object_id: int) -> int:
        doomed = [p for p in self._results if object_id in (p.first, p.second)]
        for pair in doomed:
            del self._results[pair]
        return len(doomed)

    def has_name(self, pair: PairKey) -> bool:
        return NAME_LABEL in self._results.get(pair, {})

    def progress(self) -> Progress:
        total = len(self._results)
        calculated = 0
        errors = 0
        for results in self._results.values():
            name = results.get(NAME_LABEL)
            if name is None:
                continue
            if name.status is ResultStatus.COMPUTED:
                calculated += 1
            elif name.status is ResultStatus.FAILED:
                errors += 1
        percent = 0.0 if total == 0 else round(calculated / total * 100, 2)
        return Progress(total=total, calculated=calculated, percent=percent, errors=errors)

    def reset_errors(self) -> int:
        """Forget failed results so the next cycles recompute them."""
        removed = 0
        for results in self._results.values():
            failed = [k for k, r in results.items() if r.status is ResultStatus.FAILED]
            for label in failed:
                del results[label]
            removed += len(failed)
        return removed

    def reset_all(self) -> None:
        for pair in self._results:
            self._results[pair] = {}

    def to_frame(self) -> pl.DataFrame:
        rows = []
        for pair in self.pairs():
            results = self._results[pair]
            if not results:
                rows.append(
                    {
                        "first": pair.first,
                        "second": pair.second,
                        "compared": None,
                        "status": ResultStatus.PENDING.value,
                        "value": None,
                        "matrix": None,
                    }
                )
                continue
            for label in sorted(results):
                result = results[label]
                rows.append(
                    {
                        "first": pair.first,
                        "second": pair.second,
                        "compared": label,
                        "status": result.status.value,
                        "value": result.legacy_value,
                        "matrix": json.dumps(result.matrix) if result.matrix else None,
                    }
                )
        return pl.DataFrame(rows, schema=STORE_SCHEMA)

    @classmethod
    def from_frame(cls, df: pl.DataFrame) -> InMemoryComparisonStore:
        store = cls()
        for row in df.iter_rows(named=True):
            pair = PairKey(first=row["first"], second=row["second"])
            store.register(pair)
            label = row["compared"]
            if label is None:
                continue
            status = ResultStatus(row["status"])
            if status is ResultStatus.FAILED:
                result = AtomicResult.failed()
            else:
                matrix = json.loads(row["matrix"]) if row["matrix"] else None
                result = AtomicResult(status=status, value=row["value"], matrix=matrix)
            store.put(pair, label, result)
        return store

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().write_parquet(path)

    @classmethod
    def load(cls, path: Path) -> InMemoryComparisonStore:
        if not path.exists():
            return cls()
        return cls.from_frame(pl.read_parquet(path))
