"""Configuration models and YAML loader for the job canal dashboard core."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_STOP_WORDS: tuple[str, ...] = (
    # function words
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in",
    "into", "is", "of", "on", "or", "per", "the", "to", "with", "via",
    "our", "your", "you", "we",
    # seniority / qualifiers
    "senior", "sr", "lead", "principal", "staff", "junior", "jr", "associate",
    "level", "entry", "mid", "ii", "iii", "iv", "vi",
    "remote", "hybrid", "onsite", "fulltime", "parttime", "full", "part", "time",
)

DEFAULT_FRESHNESS_EDGES: tuple[int, ...] = (5, 10, 30, 60)

DEFAULT_EXPORT_PREFIX = "phx-jobs"


class DataConfig(BaseModel):
    """Where the record collection is loaded from."""

    path: str = "data/jobs.json"


class WageBandsConfig(BaseModel):
    """Salary edges used by the wage-band filter and the wage tier badge."""

    lower: float = Field(default=50_000, gt=0)
    middle: float = Field(default=100_000, gt=0)
    upper: float = Field(default=150_000, gt=0)
    high_tier: float = Field(default=120_000, gt=0)

    @model_validator(mode="after")
    def edges_increasing(self) -> "WageBandsConfig":
        if not (self.lower < self.middle < self.upper):
            msg = "wage band edges must satisfy lower < middle < upper"
            raise ValueError(msg)
        return self


class PhraseConfig(BaseModel):
    """Knobs for title phrase mining."""

    stop_words: list[str] = Field(default_factory=lambda: list(DEFAULT_STOP_WORDS))
    min_ngram: int = Field(default=2, ge=1)
    max_ngram: int = Field(default=4, ge=1)
    min_support: int = Field(default=2, ge=1)
    max_phrases: int = Field(default=15, ge=1)
    min_token_length: int = Field(default=2, ge=1)

    @field_validator("stop_words")
    @classmethod
    def normalize_stop_words(cls, v: list[str]) -> list[str]:
        return [w.lower().strip() for w in v if w.strip()]

    @model_validator(mode="after")
    def ngram_range_valid(self) -> "PhraseConfig":
        if self.max_ngram < self.min_ngram:
            msg = "max_ngram must be >= min_ngram"
            raise ValueError(msg)
        return self


class FreshnessConfig(BaseModel):
    """Upper edges (in days, inclusive) of the bounded recency bands."""

    edges: list[int] = Field(default_factory=lambda: list(DEFAULT_FRESHNESS_EDGES))

    @field_validator("edges")
    @classmethod
    def edges_strictly_increasing(cls, v: list[int]) -> list[int]:
        if not v:
            msg = "at least one freshness edge must be configured"
            raise ValueError(msg)
        if v[0] < 0:
            msg = "freshness edges must not be negative"
            raise ValueError(msg)
        if any(b <= a for a, b in zip(v, v[1:])):
            msg = "freshness edges must be strictly increasing"
            raise ValueError(msg)
        return v

    def labels(self) -> list[str]:
        """Band labels in order, e.g. ["0–5 days", ..., "61+ days"]."""
        labels: list[str] = []
        start = 0
        for edge in self.edges:
            labels.append(f"{start}–{edge} days")
            start = edge + 1
        labels.append(f"{start}+ days")
        return labels


class ExportConfig(BaseModel):
    """CSV export naming."""

    filename_prefix: str = DEFAULT_EXPORT_PREFIX

    @field_validator("filename_prefix")
    @classmethod
    def prefix_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "filename_prefix must not be empty"
            raise ValueError(msg)
        return v.strip()


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    data: DataConfig = Field(default_factory=DataConfig)
    wage_bands: WageBandsConfig = Field(default_factory=WageBandsConfig)
    phrases: PhraseConfig = Field(default_factory=PhraseConfig)
    freshness: FreshnessConfig = Field(default_factory=FreshnessConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
