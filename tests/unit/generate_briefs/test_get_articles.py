"""Tests for generate_briefs.get_articles module."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from briefing_db.connection import get_session
from briefing_db.models import Article as ArticleRow
from briefing_db.models import Briefing
from generate_briefs.get_articles import SqlArticleStore, _coerce_embedding

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _insert_article(session, article_id: int, **overrides) -> None:
    data = {
        "id": article_id,
        "url": f"https://example.com/{article_id}",
        "title": f"Title {article_id}",
        "published_date": NOW - timedelta(hours=1),
        "feed_source": "https://example.com/feed",
        "raw_content": "raw",
        "processed_content": f"Summary {article_id}",
        "embedding": json.dumps([0.1 * article_id, 0.2]),
        "impact_rating": 5,
        "feed_profile": "technology",
    }
    data.update(overrides)
    session.add(ArticleRow(**data))


class TestCoerceEmbedding:
    def test_none_returns_none(self) -> None:
        assert _coerce_embedding(None) is None

    def test_json_string(self) -> None:
        assert _coerce_embedding("[1.0, 2.0, 3.0]") == [1.0, 2.0, 3.0]

    def test_invalid_json_string_returns_none(self) -> None:
        assert _coerce_embedding("not json") is None

    def test_json_non_list_returns_none(self) -> None:
        assert _coerce_embedding('{"a": 1}') is None

    def test_numpy_array(self) -> None:
        assert _coerce_embedding(np.array([1.0, 2.0])) == [1.0, 2.0]

    def test_tuple(self) -> None:
        assert _coerce_embedding((1, 2)) == [1.0, 2.0]

    def test_invalid_type_returns_none(self) -> None:
        assert _coerce_embedding(42) is None

    def test_null_element_returns_none(self) -> None:
        assert _coerce_embedding("[null, 0.2]") is None

    def test_string_element_returns_none(self) -> None:
        assert _coerce_embedding('["a"]') is None

    def test_nested_list_returns_none(self) -> None:
        assert _coerce_embedding([[1, 2]]) is None


class TestFetchEligibleArticles:
    def test_filters_and_orders(self, engine) -> None:
        with get_session(engine) as session:
            _insert_article(session, 1, impact_rating=3)
            _insert_article(session, 2, impact_rating=8, published_date=NOW - timedelta(hours=5))
            _insert_article(session, 3, impact_rating=8, published_date=NOW - timedelta(hours=2))
            _insert_article(session, 4, impact_rating=None)
            _insert_article(session, 5, processed_content=None)
            _insert_article(session, 6, embedding=None)
            _insert_article(session, 7, published_date=NOW - timedelta(hours=30))
            _insert_article(session, 8, feed_profile="brasil")
            session.commit()

        articles = SqlArticleStore(engine).fetch_eligible_articles("technology", 24, now=NOW)

        assert [a.id for a in articles] == [3, 2, 1, 4]
        first = articles[0]
        assert first.processed_content == "Summary 3"
        assert first.embedding == pytest.approx([0.3, 0.2])
        assert first.published_at.tzinfo is not None
        assert articles[-1].impact_rating is None

    def test_corrupt_embedding_is_treated_as_missing(self, engine) -> None:
        with get_session(engine) as session:
            _insert_article(session, 1)
            _insert_article(session, 2, embedding="[null, 0.2]")
            session.commit()

        articles = SqlArticleStore(engine).fetch_eligible_articles("technology", 24, now=NOW)

        by_id = {a.id: a for a in articles}
        assert set(by_id) == {1, 2}
        assert by_id[1].embedding == pytest.approx([0.1, 0.2])
        assert by_id[2].embedding is None

    def test_empty_when_nothing_matches(self, engine) -> None:
        assert SqlArticleStore(engine).fetch_eligible_articles("technology", 24, now=NOW) == []


class TestPersistBrief:
    def test_saves_briefing(self, engine) -> None:
        store = SqlArticleStore(engine)

        briefing_id = store.persist_brief("# Brief", [3, 1, 2], "technology")

        stored = store.get_brief_by_id(briefing_id)
        assert stored.content == "# Brief"
        assert stored.article_ids == [3, 1, 2]
        assert stored.feed_profile == "technology"
        assert stored.created_at.tzinfo is not None

    def test_ids_increment(self, engine) -> None:
        store = SqlArticleStore(engine)
        first = store.persist_brief("a", [1], "technology")
        second = store.persist_brief("b", [2], "technology")
        assert second > first
        assert store.count_briefings("technology") == 2
        assert store.count_briefings("brasil") == 0

    def test_missing_brief_returns_none(self, engine) -> None:
        assert SqlArticleStore(engine).get_brief_by_id(999) is None


class TestBriefingHistory:
    def test_recent_briefings_newest_first(self, engine) -> None:
        store = SqlArticleStore(engine)
        store.persist_brief("old", [1], "technology")
        store.persist_brief("new", [1, 2, 3], "technology")
        store.persist_brief("other", [1], "brasil")

        recent = store.get_recent_briefings("technology", limit=10)

        assert [b.content for b in recent] == ["new", "old"]
        assert recent[0].article_count == 3

    def test_trends(self, engine) -> None:
        now = datetime.now(timezone.utc)
        with get_session(engine) as session:
            session.add(Briefing(content="a", article_ids="[1, 2]", feed_profile="technology", created_at=now))
            session.add(
                Briefing(
                    content="b",
                    article_ids="[1, 2, 3, 4, 5]",
                    feed_profile="technology",
                    created_at=now - timedelta(days=2),
                )
            )
            session.add(
                Briefing(
                    content="too old",
                    article_ids="[1]",
                    feed_profile="technology",
                    created_at=now - timedelta(days=30),
                )
            )
            session.commit()

        trends = SqlArticleStore(engine).get_briefing_trends("technology", days=7, now=now)

        assert trends.total_briefings == 2
        assert trends.avg_articles_per_brief == 3.5
        assert len(trends.briefings_per_day) == 7
        days = dict(trends.briefings_per_day)
        assert days[now.date().isoformat()] == 1
        assert days[(now - timedelta(days=2)).date().isoformat()] == 1
        assert [day for day, _ in trends.briefings_per_day] == sorted(days)

    def test_trends_without_briefings(self, engine) -> None:
        trends = SqlArticleStore(engine).get_briefing_trends("technology", days=3)
        assert trends.total_briefings == 0
        assert trends.avg_articles_per_brief == 0.0
        assert all(count == 0 for _, count in trends.briefings_per_day)


class TestProcessingStats:
    def test_counts_and_average(self, engine) -> None:
        with get_session(engine) as session:
            _insert_article(session, 1, impact_rating=7)
            _insert_article(session, 2, impact_rating=8)
            _insert_article(session, 3, impact_rating=8)
            _insert_article(session, 4, impact_rating=None)
            _insert_article(session, 5, processed_content=None, impact_rating=None)
            _insert_article(session, 6, feed_profile="brasil", impact_rating=1)
            session.commit()

        stats = SqlArticleStore(engine).get_processing_stats("technology")

        assert stats.total == 5
        assert stats.processed == 4
        assert stats.rated == 3
        assert stats.unprocessed == 1
        assert stats.unrated == 1
        assert stats.average_rating == 7.67

    def test_empty_profile(self, engine) -> None:
        stats = SqlArticleStore(engine).get_processing_stats("technology")
        assert (stats.total, stats.processed, stats.rated) == (0, 0, 0)
        assert stats.average_rating is None
