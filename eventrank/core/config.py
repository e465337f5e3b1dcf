"""Configuration models and YAML loader for the event ranker."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

SORT_STRATEGIES = ("relevance", "composite", "quality")
THRESHOLD_FIELDS = ("relevance", "student_friendliness")


class ScoringConfig(BaseModel):
    """Weights for the relevance score. Not normalized: the sum is clamped to 1.0."""

    token_overlap_weight: float = Field(default=0.4, ge=0.0)
    location_match_bonus: float = Field(default=0.3, ge=0.0)
    event_type_match_bonus: float = Field(default=0.2, ge=0.0)
    description_bonus: float = Field(default=0.1, ge=0.0)
    image_bonus: float = Field(default=0.05, ge=0.0)
    date_bonus: float = Field(default=0.05, ge=0.0)
    min_description_length: int = Field(default=50, ge=0)


class RankingConfig(BaseModel):
    """Call-site knobs for the ranking pipeline."""

    max_results: int = Field(default=20, ge=1, le=200)
    min_score: float = Field(default=0.3, ge=0.0, le=1.0)
    threshold_field: str = "relevance"
    strategy: str = "relevance"
    student_view: bool = False
    student_min_score: float = Field(default=0.4, ge=0.0, le=1.0)

    @field_validator("strategy")
    @classmethod
    def strategy_known(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in SORT_STRATEGIES:
            msg = f"strategy must be one of {list(SORT_STRATEGIES)}, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("threshold_field")
    @classmethod
    def threshold_field_known(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in THRESHOLD_FIELDS:
            msg = f"threshold_field must be one of {list(THRESHOLD_FIELDS)}, got '{v}'"
            raise ValueError(msg)
        return v


class ClassifierConfig(BaseModel):
    """Optional LLM query classifier. Disabled means keyword rules only."""

    enabled: bool = False
    provider: str = "anthropic"
    model: str | None = None
    min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)


class SourcesConfig(BaseModel):
    """Event source settings."""

    timeout_seconds: float = Field(default=30.0, gt=0.0)
    fixtures_path: str | None = None


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
