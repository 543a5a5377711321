"""Pydantic schema for the structured commentary returned by text generation.

Wire keys are camelCase; ``categoryClassification``, ``executiveSummary`` and
``yourKeywordCluster`` are required, everything else defaults to empty.

Per-entry damage is tolerated: null fields take their defaults, non-string
category labels are dropped (the venue then gets the fallback category) and
unusable competitor entries are skipped. Only a response whose overall shape
is wrong fails validation.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _nulls_take_defaults(cls, data):
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ExecutiveSummary(_CamelModel):
    overview: str = ""
    key_findings: list[str] = Field(default_factory=list)
    immediate_threats: str = ""
    growth_opportunities: str = ""
    recommendation: str = ""


class KeywordCluster(_CamelModel):
    primary: list[str] = Field(default_factory=list)
    positive: list[str] = Field(default_factory=list)
    negative: list[str] = Field(default_factory=list)


class CompetitorKeywordCluster(_CamelModel):
    restaurant: str
    keywords: list[str] = Field(default_factory=list)


class CompetitorEnhancement(_CamelModel):
    restaurant: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    sentiment_label: str = "Neutral"
    sentiment_score: float = 0.0
    what_they_do_better: list[str] = Field(default_factory=list)
    where_you_win: list[str] = Field(default_factory=list)


def _valid_entries(entries: list, model: type[_CamelModel]) -> list[_CamelModel]:
    kept = []
    for entry in entries:
        try:
            kept.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping unusable %s entry: %d errors", model.__name__, e.error_count())
    return kept


class MarketCommentary(_CamelModel):
    executive_summary: ExecutiveSummary
    your_keyword_cluster: KeywordCluster
    category_classification: dict[str, str]
    target_category: str | None = None
    competitor_keyword_clusters: list[CompetitorKeywordCluster] = Field(default_factory=list)
    competitor_enhancements: list[CompetitorEnhancement] = Field(default_factory=list)
    final_strategic_verdict: str = ""

    @field_validator("category_classification", mode="before")
    @classmethod
    def _drop_non_string_labels(cls, value):
        if not isinstance(value, dict):
            return value
        return {name: label for name, label in value.items() if isinstance(label, str)}

    @field_validator("target_category", mode="before")
    @classmethod
    def _non_string_target_category(cls, value):
        return value if isinstance(value, str) else None

    @field_validator("competitor_keyword_clusters", mode="before")
    @classmethod
    def _skip_bad_keyword_clusters(cls, value):
        if not isinstance(value, list):
            return value
        return _valid_entries(value, CompetitorKeywordCluster)

    @field_validator("competitor_enhancements", mode="before")
    @classmethod
    def _skip_bad_enhancements(cls, value):
        if not isinstance(value, list):
            return value
        return _valid_entries(value, CompetitorEnhancement)

    def enhancement_for(self, name: str) -> CompetitorEnhancement | None:
        """Exact-name lookup, first match wins."""
        for enhancement in self.competitor_enhancements:
            if enhancement.restaurant == name:
                return enhancement
        return None
