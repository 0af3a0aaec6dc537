"""Fetch briefing candidates and persist generated briefs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from briefing_db.connection import get_session
from briefing_db.models import Article as ArticleRow
from briefing_db.models import Briefing
from common.utils import get_value
from generate_briefs.models import (
    Article,
    BriefingTrends,
    ProcessingStats,
    RecentBriefing,
    StoredBriefing,
)

logger = logging.getLogger(__name__)


def _coerce_embedding(value: Any) -> list[float] | None:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return None
        if not isinstance(value, list):
            return None
    elif hasattr(value, "tolist"):
        value = value.tolist()
    elif not isinstance(value, (list, tuple)):
        return None
    try:
        return [float(v) for v in value]
    except (TypeError, ValueError):
        return None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _row_to_article(row: Any) -> Article:
    raw_embedding = get_value(row, "embedding")
    embedding = _coerce_embedding(raw_embedding)
    if raw_embedding is not None and embedding is None:
        logger.warning("Article %s has an undecodable embedding; treating it as missing", get_value(row, "id"))
    return Article(
        id=get_value(row, "id"),
        title=get_value(row, "title"),
        url=get_value(row, "url"),
        feed_source=get_value(row, "feed_source"),
        feed_profile=get_value(row, "feed_profile"),
        published_at=_as_utc(get_value(row, "published_date")),
        processed_content=get_value(row, "processed_content"),
        embedding=embedding,
        impact_rating=get_value(row, "impact_rating"),
    )


class SqlArticleStore:
    """Article and briefing access backed by the briefing database."""

    def __init__(self, engine: Engine | None = None) -> None:
        self.engine = engine

    def fetch_eligible_articles(
        self,
        feed_profile: str,
        lookback_hours: int,
        now: datetime | None = None,
    ) -> list[Article]:
        """Return summarized, embedded articles published inside the lookback window.

        Ordered by impact rating (highest first, unrated last) and then by
        publication time, newest first.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=lookback_hours)

        logger.info(
            "Loading articles for profile '%s' published since %s",
            feed_profile,
            cutoff.isoformat(),
        )
        with get_session(self.engine) as session:
            stmt = (
                select(ArticleRow)
                .where(ArticleRow.feed_profile == feed_profile)
                .where(ArticleRow.processed_content.is_not(None))
                .where(ArticleRow.embedding.is_not(None))
                .where(ArticleRow.published_date >= cutoff)
                .where(ArticleRow.published_date <= now)
                .order_by(
                    ArticleRow.impact_rating.is_(None),
                    ArticleRow.impact_rating.desc(),
                    ArticleRow.published_date.desc(),
                )
            )
            rows = session.execute(stmt).scalars().all()
            articles = [_row_to_article(row) for row in rows]

        logger.info("Loaded %d eligible articles", len(articles))
        return articles

    def persist_brief(self, content: str, article_ids: list[int], feed_profile: str) -> int:
        """Insert a briefing in a single transaction and return its id."""
        with get_session(self.engine) as session:
            briefing = Briefing(
                content=content,
                article_ids=json.dumps(article_ids),
                feed_profile=feed_profile,
            )
            session.add(briefing)
            session.commit()
            logger.info("Saved briefing %d for profile '%s'", briefing.id, feed_profile)
            return briefing.id

    def get_brief_by_id(self, briefing_id: int) -> StoredBriefing | None:
        with get_session(self.engine) as session:
            row = session.get(Briefing, briefing_id)
            if row is None:
                return None
            return StoredBriefing(
                id=row.id,
                content=row.content,
                article_ids=json.loads(row.article_ids),
                feed_profile=row.feed_profile,
                created_at=_as_utc(row.created_at),
            )

    def get_recent_briefings(self, feed_profile: str, limit: int = 10) -> list[RecentBriefing]:
        with get_session(self.engine) as session:
            stmt = (
                select(Briefing)
                .where(Briefing.feed_profile == feed_profile)
                .order_by(Briefing.created_at.desc(), Briefing.id.desc())
                .limit(limit)
            )
            rows = session.execute(stmt).scalars().all()
            return [
                RecentBriefing(
                    id=row.id,
                    content=row.content,
                    article_count=len(json.loads(row.article_ids)),
                    created_at=_as_utc(row.created_at),
                )
                for row in rows
            ]

    def get_briefing_trends(
        self,
        feed_profile: str,
        days: int = 7,
        now: datetime | None = None,
    ) -> BriefingTrends:
        """Summarize how many briefings were produced per day over the last ``days`` days."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=days)

        with get_session(self.engine) as session:
            stmt = (
                select(Briefing.article_ids, Briefing.created_at)
                .where(Briefing.feed_profile == feed_profile)
                .where(Briefing.created_at >= cutoff)
            )
            rows = session.execute(stmt).all()

        per_day = {
            (now - timedelta(days=offset)).date().isoformat(): 0
            for offset in range(days)
        }
        article_counts = []
        for article_ids, created_at in rows:
            article_counts.append(len(json.loads(article_ids)))
            day = _as_utc(created_at).date().isoformat()
            per_day[day] = per_day.get(day, 0) + 1

        total = len(article_counts)
        average = round(sum(article_counts) / total, 2) if total else 0.0
        return BriefingTrends(
            total_briefings=total,
            avg_articles_per_brief=average,
            briefings_per_day=sorted(per_day.items()),
        )

    def count_briefings(self, feed_profile: str | None = None) -> int:
        with get_session(self.engine) as session:
            stmt = select(func.count(Briefing.id))
            if feed_profile:
                stmt = stmt.where(Briefing.feed_profile == feed_profile)
            return session.execute(stmt).scalar_one()

    def get_processing_stats(self, feed_profile: str) -> ProcessingStats:
        """Count summarized and rated articles for a profile."""
        with get_session(self.engine) as session:
            base = select(func.count(ArticleRow.id)).where(ArticleRow.feed_profile == feed_profile)
            total = session.execute(base).scalar_one()
            processed = session.execute(
                base.where(ArticleRow.processed_content.is_not(None))
            ).scalar_one()
            rated = session.execute(base.where(ArticleRow.impact_rating.is_not(None))).scalar_one()
            average = session.execute(
                select(func.avg(ArticleRow.impact_rating))
                .where(ArticleRow.feed_profile == feed_profile)
                .where(ArticleRow.impact_rating.is_not(None))
            ).scalar_one()

        return ProcessingStats(
            total=total,
            processed=processed,
            rated=rated,
            unprocessed=total - processed,
            unrated=processed - rated,
            average_rating=round(float(average), 2) if average is not None else None,
        )
