"""CLI for generating briefings from recent articles."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from briefing_db.connection import init_db
from common.aws import upload_brief_records_to_s3
from common.cli_helpers import save_jsonl_local, setup_logging
from common.llm import EmbeddingClient, check_connectivity
from generate_briefs.config_loader import BriefingConfig, load_config
from generate_briefs.generate_brief import build_chat_client, generate_brief, generate_simple_brief
from generate_briefs.get_articles import SqlArticleStore
from generate_briefs.helpers import build_brief_record, parse_generate_brief_args
from generate_briefs.models import BriefGenerationOptions

setup_logging()
logger = logging.getLogger(__name__)


def _list_profiles(config: BriefingConfig) -> None:
    print("Available feed profiles:")
    for name, profile in config.profiles.items():
        status = "+" if profile.enabled else "-"
        enabled = profile.enabled_feeds()
        print(f"  {status} {name} ({len(enabled)}/{len(profile.feeds)} feeds enabled)")
        categories = sorted({feed.category for feed in enabled if feed.category})
        if categories:
            print(f"    Categories: {', '.join(categories)}")
    print(f"\nDefault profile: {config.default_profile}")


def _show_status(config: BriefingConfig, store: SqlArticleStore, feed_profile: str) -> None:
    stats = store.get_processing_stats(feed_profile)
    print(f"Processing stats for '{feed_profile}':")
    print(f"  Total articles: {stats.total}")
    print(f"  Processed articles: {stats.processed}")
    print(f"  Rated articles: {stats.rated}")
    print(f"  Unprocessed: {stats.unprocessed}, Unrated: {stats.unrated}")
    if stats.average_rating is not None:
        print(f"  Average impact rating: {stats.average_rating}")
    print(f"  Briefings for profile: {store.count_briefings(feed_profile)}")
    print(f"  Total briefings: {store.count_briefings()}")

    trends = store.get_briefing_trends(feed_profile)
    print(f"Briefings for '{feed_profile}' (last 7 days): {trends.total_briefings}")
    print(f"  Average articles per brief: {trends.avg_articles_per_brief}")
    for day, count in trends.briefings_per_day:
        print(f"  {day}: {count}")
    for briefing in store.get_recent_briefings(feed_profile, limit=5):
        print(f"  #{briefing.id} {briefing.created_at.isoformat()} ({briefing.article_count} articles)")

    try:
        chat = build_chat_client(config).client
    except RuntimeError as exc:
        logger.warning("%s", exc)
        chat = None
    try:
        embedder = EmbeddingClient(model=config.models.embedding_model)
    except RuntimeError as exc:
        logger.warning("%s", exc)
        embedder = None

    report = check_connectivity(chat, embedder)
    print("API status:")
    print(f"  Chat API: {'available' if report.chat else 'unavailable'}")
    print(f"  Embedding API: {'available' if report.embedding else 'unavailable'}")
    for error in report.errors:
        print(f"  - {error}")


def main(argv: list[str] | None = None) -> int:
    args = parse_generate_brief_args(argv)

    load_dotenv()
    config = load_config(args.config)

    if args.list_profiles:
        _list_profiles(config)
        return 0

    feed_profile = args.profile or config.default_profile
    if feed_profile not in config.profiles:
        logger.error(
            "Feed profile '%s' not found. Available profiles: %s",
            feed_profile,
            ", ".join(config.available_profiles()),
        )
        return 1

    store = SqlArticleStore(init_db())

    if args.status:
        _show_status(config, store, feed_profile)
        return 0

    profile = config.get_profile(feed_profile)
    if not profile.enabled or not profile.enabled_feeds():
        logger.warning("No enabled feeds found for profile '%s'", feed_profile)
        return 1

    try:
        chat = build_chat_client(config)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    now = datetime.now(timezone.utc)

    if args.simple:
        result = generate_simple_brief(
            feed_profile,
            args.max_articles,
            config=config,
            store=store,
            chat=chat,
        )
    else:
        options = BriefGenerationOptions(
            lookback_hours=args.lookback_hours,
            min_articles=args.min_articles,
            n_clusters=args.n_clusters,
        )
        result = generate_brief(feed_profile, options, config=config, store=store, chat=chat)

    if not result.success:
        logger.error("Brief generation failed: %s", result.error)
        return 1

    logger.info("Brief generated successfully. ID: %s", result.briefing_id)
    stats = getattr(result, "stats", None)
    if stats:
        logger.info(
            "Stats: %d articles, %d clusters generated, %d clusters used",
            stats.articles_analyzed,
            stats.clusters_generated,
            stats.clusters_used,
        )

    record = build_brief_record(feed_profile, result, now)

    if args.load_s3:
        upload_brief_records_to_s3([record], f"briefs_{feed_profile}")

    if args.load_local:
        filepath = save_jsonl_local([record], f"briefs_{feed_profile}", now)
        logger.info("Saved brief to %s", filepath)

    return 0


if __name__ == "__main__":
    sys.exit(main())
