from __future__ import annotations

from typing import Protocol

import requests
from pydantic import BaseModel

from lord.config import OracleConfig
from lord.logging_utils import get_logger
from lord.models import AtomicResult, ResultStatus
from lord.sentence_cleaner import restrict_length


class OracleResult(BaseModel):
    status: ResultStatus
    similarity: float = 0.0
    matrix: list[list[float]] | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.COMPUTED

    def to_atomic(self) -> AtomicResult:
        if self.ok:
            return AtomicResult.computed(self.similarity, self.matrix)
        return AtomicResult.failed()


EMPTY_RESULT = OracleResult(status=ResultStatus.COMPUTED, similarity=0.0)
FAILED_RESULT = OracleResult(status=ResultStatus.FAILED, similarity=0.0)


class SimilarityOracle(Protocol):
    def compare(self, key: str, target: str) -> OracleResult: ...


class BridgeOracle:
    """HTTP client for the lexical similarity bridge.

    The bridge answers ``{"similarity": float, "matrix": [[...]]}``. Any
    transport error, timeout or answer without a similarity is reported as a
    failed result rather than raised, so a batch cycle always completes.
    """

    def __init__(
        self,
        config: OracleConfig | None = None,
        session: requests.Session | None = None,
    ):
        self.config = config or OracleConfig()
        self.session = session or requests.Session()
        self.calls = 0

    def compare(self, key: str, target: str) -> OracleResult:
        if not key or not target:
            return EMPTY_RESULT

        log = get_logger("oracle")
        payload = {
            "value": 1,
            "key": restrict_length(key, self.config.max_words),
            "target": restrict_length(target, self.config.max_words),
        }
        log.debug(f"Sent to bridge: {payload}")
        self.calls += 1

        try:
            response = self.session.post(
                self.config.url, json=payload, timeout=self.config.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.Timeout:
            log.warning(f"Bridge timed out after {self.config.timeout}s")
            return FAILED_RESULT
        except (requests.RequestException, ValueError) as e:
            log.warning(f"Bridge request failed: {e}")
            return FAILED_RESULT

        log.debug(f"Received from bridge: {body}")
        return parse_bridge_response(body)


def parse_bridge_response(body: object) -> OracleResult:
    log = get_logger("oracle")
    if not isinstance(body, dict) or body.get("similarity") is None:
        log.warning("Bridge gave up on the similarity calculation")
        return FAILED_RESULT

    try:
        similarity = float(body["similarity"])
    except (TypeError, ValueError):
        log.warning(f"Bridge returned a non-numeric similarity: {body['similarity']!r}")
        return FAILED_RESULT

    matrix = body.get("matrix")
    if not _is_matrix(matrix):
        matrix = None

    return OracleResult(
        status=ResultStatus.COMPUTED, similarity=similarity, matrix=matrix
    )


def _is_matrix(value: object) -> bool:
    if not isinstance(value, list) or not value:
        return False
    for row in value:
        if not isinstance(row, list):
            return False
        for cell in row:
            if isinstance(cell, bool) or not isinstance(cell, (int, float)):
                return False
    return True
