from __future__ import annotations

from pydantic import BaseModel, Field

SENTINEL = -1000.0
MIN_QUALIFYING_VALUE = -1.0


class ComparisonWeights(BaseModel):
    name: float = Field(default=1.0, ge=0.0, description="Weight of the name comparison")
    intro: float = Field(
        default=1.0, ge=0.0, description="Weight of the introduction comparison"
    )
    sentence: float = Field(
        default=1.0,
        ge=0.0,
        description="Weight of the paragraph/sentence comparison",
    )


class AggregationConfig(BaseModel):
    sentinel: float = Field(
        default=SENTINEL,
        description="Cost matrix value for cells with no comparison result",
    )
    min_qualifying_value: float = Field(
        default=MIN_QUALIFYING_VALUE,
        description="Assigned cells below this value are padding and excluded from means",
    )


class OracleConfig(BaseModel):
    url: str = Field(
        default="https://ws-nlp.vipresearch.ca/bridge/",
        description="Endpoint of the lexical similarity bridge service",
    )
    timeout: float = Field(
        default=115.0,
        gt=0.0,
        description="Request timeout in seconds (the bridge gives up at 120s)",
    )
    max_words: int = Field(
        default=32,
        ge=1,
        description="Texts are truncated to this many words before being sent",
    )


class DiscoveryConfig(BaseModel):
    enabled: bool = Field(
        default=True, description="Run comparisons for this course at all"
    )
    max_sentences: int = Field(
        default=3,
        ge=1,
        description="Sentences compared per introduction or paragraph",
    )
    max_paragraphs: int = Field(
        default=3, ge=1, description="Paragraphs compared per learning object"
    )
    recheck_limit: int = Field(
        default=3,
        ge=1,
        description="Pairs rechecked per cycle once all names are compared",
    )

    weights: ComparisonWeights = Field(default_factory=ComparisonWeights)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)


DEFAULT_CONFIG = DiscoveryConfig()
