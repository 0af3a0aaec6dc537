"""Shared fixtures for generate_briefs tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from briefing_db.models import Base
from generate_briefs.config_loader import BriefingConfig, ProcessingConfig, ProfileConfig
from generate_briefs.models import Article


def build_article(article_id: int, **overrides) -> Article:
    data = {
        "id": article_id,
        "title": f"Title {article_id}",
        "url": f"https://example.com/{article_id}",
        "feed_source": "https://example.com/feed",
        "feed_profile": "technology",
        "published_at": datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc),
        "processed_content": f"Summary {article_id}",
        "embedding": [float(article_id), 0.0],
        "impact_rating": 5,
    }
    data.update(overrides)
    return Article(**data)


@pytest.fixture
def make_article():
    return build_article


@pytest.fixture
def config() -> BriefingConfig:
    return BriefingConfig(
        processing=ProcessingConfig(min_articles=5, n_clusters=10),
        profiles={"technology": ProfileConfig(name="technology")},
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()
