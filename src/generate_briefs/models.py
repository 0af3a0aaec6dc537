"""Data models for the generate_briefs pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Article:
    """Summarized article eligible for briefing."""

    id: int
    title: str
    url: str
    feed_source: str
    feed_profile: str
    published_at: datetime
    processed_content: str | None
    embedding: list[float] | None = None
    impact_rating: int | None = None


@dataclass
class ClusterAnalysis:
    """Language-model analysis of one group of related articles."""

    topic: str
    analysis: str
    size: int
    articles: list[Article] = field(default_factory=list, repr=False)


@dataclass
class CustomPrompts:
    cluster_analysis: str | None = None
    brief_synthesis: str | None = None


@dataclass
class BriefGenerationOptions:
    """Per-call overrides for generate_brief."""

    lookback_hours: int | None = None
    min_articles: int | None = None
    n_clusters: int | None = None
    custom_prompts: CustomPrompts = field(default_factory=CustomPrompts)


@dataclass
class BriefStats:
    articles_analyzed: int
    clusters_generated: int
    clusters_used: int


@dataclass
class GenerateBriefResult:
    success: bool
    briefing_id: int | None = None
    content: str | None = None
    error: str | None = None
    stats: BriefStats | None = None


@dataclass
class SimpleBriefResult:
    success: bool
    briefing_id: int | None = None
    content: str | None = None
    error: str | None = None


@dataclass
class RecentBriefing:
    id: int
    content: str
    article_count: int
    created_at: datetime


@dataclass
class BriefingTrends:
    total_briefings: int
    avg_articles_per_brief: float
    briefings_per_day: list[tuple[str, int]]


@dataclass
class StoredBriefing:
    id: int
    content: str
    article_ids: list[int]
    feed_profile: str
    created_at: datetime


@dataclass
class ProcessingStats:
    """Article processing progress for one profile."""

    total: int
    processed: int
    rated: int
    unprocessed: int
    unrated: int
    average_rating: float | None = None
