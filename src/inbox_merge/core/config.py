"""Merge option models and settings loader utilities."""

from __future__ import annotations

import math
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, model_validator


class MergeSortOrder(str, Enum):
    """Ordering policy applied to merged results."""

    DATE_ASCENDING = "date_ascending"
    DATE_DESCENDING = "date_descending"
    SENDER = "sender"
    SUBJECT = "subject"
    NONE = "none"


class GroupingStrategy(str, Enum):
    """How duplicate clusters are formed from pairwise scores."""

    GREEDY_SEED = "greedy_seed"
    TRANSITIVE = "transitive"


class SimilarityWeights(BaseModel):
    """Relative weight of each signal in the combined similarity score."""

    model_config = ConfigDict(frozen=True)

    subject: float = Field(default=0.3, ge=0.0, le=1.0)
    sender: float = Field(default=0.2, ge=0.0, le=1.0)
    temporal: float = Field(default=0.2, ge=0.0, le=1.0)
    body: float = Field(default=0.3, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_total(self) -> SimilarityWeights:
        total = self.subject + self.sender + self.temporal + self.body
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"similarity weights must sum to 1.0, got {total:.4f}")
        return self


class QualityWeights(BaseModel):
    """Points awarded for data completeness when ranking duplicates."""

    model_config = ConfigDict(frozen=True)

    message_id: int = Field(default=10, ge=0)
    attachments: int = Field(default=5, ge=0)
    references: int = Field(default=5, ge=0)
    chars_per_body_point: int = Field(
        default=100, ge=1, description="Body characters needed per point"
    )
    max_body_points: int = Field(default=20, ge=0)


class MergeOptions(BaseModel):
    """Configuration surface for merge and incremental import operations."""

    model_config = ConfigDict(frozen=True)

    remove_duplicates: bool = Field(
        default=True, description="Collapse duplicate groups to one survivor"
    )
    duplicate_threshold: float = Field(
        default=0.85,
        gt=0.0,
        le=1.0,
        description="Minimum similarity for two records to be grouped",
    )
    sort_order: MergeSortOrder = Field(default=MergeSortOrder.DATE_DESCENDING)
    preserve_source_info: bool = Field(
        default=True, description="Record a source label for each input record"
    )
    grouping: GroupingStrategy = Field(default=GroupingStrategy.GREEDY_SEED)
    exact_signatures: bool = Field(
        default=True,
        description="Use record signatures only during incremental import",
    )
    workers: int = Field(
        default=1, ge=1, description="Threads used for pairwise scoring"
    )
    weights: SimilarityWeights = Field(default_factory=SimilarityWeights)
    quality: QualityWeights = Field(default_factory=QualityWeights)


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle brace-style structured logging"
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    merge: MergeOptions = Field(default_factory=MergeOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_PREFIX = "INBOX_MERGE_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _collect_env_values(
    env_file: Path | str | None, *, include_environment: bool
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined: dict[str, Any] = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        normalized_value: Any = value
        if isinstance(value, str) and value == "":
            normalized_value = None
        elif isinstance(value, str):
            lowercase_value = value.lower()
            if lowercase_value == "true":
                normalized_value = True
            elif lowercase_value == "false":
                normalized_value = False
        _merge_into_tree(collected, path, normalized_value)

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment=include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "GroupingStrategy",
    "LoggingSettings",
    "MergeOptions",
    "MergeSortOrder",
    "QualityWeights",
    "SimilarityWeights",
    "load_app_settings",
]
