"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SearchSettings(BaseModel):
    """Paging and store execution limits for search requests."""

    default_limit: int = Field(25, ge=1, le=100, description="Page size when none is requested")
    max_limit: int = Field(100, ge=1, le=100, description="Upper bound page sizes are clamped to")
    statement_timeout_ms: int = Field(
        5000,
        ge=100,
        le=120000,
        description="Per-request store timeout in milliseconds",
    )

    @model_validator(mode="after")
    def check_default_within_max(self):
        """Ensure the default page size respects the clamp."""
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"default_limit ({self.default_limit}) cannot exceed max_limit ({self.max_limit})"
            )
        return self


def _normalize_term(term: str) -> str:
    return " ".join(term.strip().lower().split())


class VocabularyConfig(BaseModel):
    """Additions to the built-in synonym table and title catalogue.

    The built-in vocabulary always applies; entries here are merged on top at
    process start and never change afterwards.
    """

    extra_synonyms: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Token -> additional equivalent tokens",
    )
    extra_titles: List[str] = Field(
        default_factory=list,
        description="Canonical titles appended to the catalogue",
    )
    extra_title_mappings: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Category keyword -> canonical titles it implies",
    )

    @field_validator("extra_synonyms")
    @classmethod
    def normalize_synonyms(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Lowercase keys and values, drop blanks and self references."""
        normalized: Dict[str, List[str]] = {}
        for token, synonyms in v.items():
            key = _normalize_term(token)
            if not key:
                continue
            values = normalized.setdefault(key, [])
            for synonym in synonyms:
                value = _normalize_term(synonym)
                if value and value != key and value not in values:
                    values.append(value)
        return normalized

    @field_validator("extra_titles")
    @classmethod
    def strip_titles(cls, v: List[str]) -> List[str]:
        """Strip titles and drop blanks, preserving order."""
        titles = []
        for title in v:
            stripped = " ".join(title.split())
            if stripped and stripped not in titles:
                titles.append(stripped)
        return titles

    @field_validator("extra_title_mappings")
    @classmethod
    def normalize_mapping_keys(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Lowercase mapping keywords; titles keep their canonical casing."""
        normalized: Dict[str, List[str]] = {}
        for keyword, titles in v.items():
            key = _normalize_term(keyword)
            if not key:
                raise ValueError("Title mapping keyword cannot be empty")
            normalized[key] = [" ".join(title.split()) for title in titles if title.strip()]
        return normalized


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration object for the job search service."""

    search: SearchSettings = Field(default_factory=SearchSettings, description="Search limits")
    vocabulary: VocabularyConfig = Field(
        default_factory=VocabularyConfig, description="Synonym and title additions"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
