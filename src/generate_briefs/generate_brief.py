"""Brief generation pipeline: fetch, cluster, analyze, rank, synthesize, persist."""

from __future__ import annotations

import logging
from typing import Protocol

from common.llm import ChatClient, RateLimitedChatClient, RateLimiter
from generate_briefs.analyze_clusters import ChatCompleter, analyze_cluster
from generate_briefs.cluster_articles import (
    PartitionFn,
    cluster_embeddings,
    effective_cluster_count,
    group_by_label,
    partition_vectors,
)
from generate_briefs.config_loader import BriefingConfig
from generate_briefs.models import (
    Article,
    BriefGenerationOptions,
    BriefStats,
    ClusterAnalysis,
    GenerateBriefResult,
    SimpleBriefResult,
)
from generate_briefs.synthesize_brief import (
    select_top_analyses,
    select_top_articles,
    synthesize_brief,
    synthesize_simple_brief,
)

logger = logging.getLogger(__name__)


class ArticleStore(Protocol):
    def fetch_eligible_articles(self, feed_profile: str, lookback_hours: int) -> list[Article]: ...

    def persist_brief(self, content: str, article_ids: list[int], feed_profile: str) -> int: ...


def build_chat_client(config: BriefingConfig) -> RateLimitedChatClient:
    """Chat client for the pipeline, paced so only one request runs per interval."""
    client = ChatClient(
        model=config.models.chat_model,
        max_tokens=config.models.max_tokens,
        temperature=config.models.temperature,
    )
    return RateLimitedChatClient(client, RateLimiter(config.processing.analysis_delay_seconds))


def _failure(feed_profile: str, error: str) -> GenerateBriefResult:
    logger.warning("Brief generation failed [%s]: %s", feed_profile, error)
    return GenerateBriefResult(success=False, error=error)


def _analyze_groups(
    groups: list[list[Article]],
    feed_profile: str,
    chat: ChatCompleter,
    prompt_template: str,
    max_summaries: int,
) -> list[ClusterAnalysis]:
    analyses = []
    for index, group in enumerate(groups):
        if not group:
            continue
        analysis = analyze_cluster(
            group,
            feed_profile,
            index,
            chat,
            prompt_template,
            max_summaries=max_summaries,
        )
        if analysis is not None:
            analyses.append(analysis)
    return analyses


def generate_brief(
    feed_profile: str,
    options: BriefGenerationOptions | None = None,
    *,
    config: BriefingConfig,
    store: ArticleStore,
    chat: ChatCompleter,
    partition: PartitionFn = partition_vectors,
) -> GenerateBriefResult:
    """
    Generate and persist a clustered briefing for one profile.

    Expected data shortfalls and model failures come back as
    ``GenerateBriefResult(success=False, error=...)``; nothing is persisted
    unless the whole run succeeds.
    """
    logger.info("Starting brief generation [%s]", feed_profile)
    settings = config.resolve(feed_profile, options)

    articles = store.fetch_eligible_articles(feed_profile, settings.lookback_hours)
    if len(articles) < settings.min_articles:
        return _failure(
            feed_profile,
            f"Not enough recent articles ({len(articles)}) for profile '{feed_profile}'. "
            f"Min required: {settings.min_articles}.",
        )

    logger.info("Generating brief from %d articles", len(articles))
    article_ids = [article.id for article in articles]

    embedded = [article for article in articles if article.embedding]
    if len(embedded) != len(articles):
        logger.warning(
            "%d articles are missing embeddings. Proceeding with available ones.",
            len(articles) - len(embedded),
        )
    if len(embedded) < settings.min_articles:
        return _failure(
            feed_profile,
            f"Not enough articles ({len(embedded)}) with embeddings to cluster. "
            f"Min required: {settings.min_articles}.",
        )

    n_clusters = effective_cluster_count(len(embedded), settings.n_clusters)
    if n_clusters < 2:
        return _failure(feed_profile, "Not enough articles to form meaningful clusters")

    logger.info("Clustering %d articles into %d clusters", len(embedded), n_clusters)
    result = cluster_embeddings(
        [article.embedding for article in embedded],
        n_clusters,
        partition=partition,
    )
    if not result.ok:
        logger.warning("Clustering failed, falling back to a single group: %s", result.error)
    labels = result.labels_or_single_group(len(embedded))
    groups = group_by_label(embedded, labels, n_clusters)

    analyses = _analyze_groups(
        groups,
        feed_profile,
        chat,
        settings.cluster_analysis_prompt,
        config.processing.max_summaries_per_cluster,
    )
    if not analyses:
        return _failure(feed_profile, "No meaningful clusters found or analyzed.")

    top = select_top_analyses(analyses, config.processing.max_clusters_in_brief)
    content = synthesize_brief(top, feed_profile, chat, settings.brief_synthesis_prompt)
    if not content:
        return _failure(feed_profile, "Could not synthesize final brief.")

    try:
        briefing_id = store.persist_brief(content, article_ids, feed_profile)
    except Exception as exc:
        logger.error("Failed to save brief for profile '%s': %s", feed_profile, exc)
        return GenerateBriefResult(success=False, error=str(exc) or "Failed to save brief")

    logger.info("Brief generation finished successfully [%s]", feed_profile)
    return GenerateBriefResult(
        success=True,
        briefing_id=briefing_id,
        content=content,
        stats=BriefStats(
            articles_analyzed=len(embedded),
            clusters_generated=n_clusters,
            clusters_used=len(analyses),
        ),
    )


def generate_simple_brief(
    feed_profile: str,
    max_articles: int | None = None,
    *,
    config: BriefingConfig,
    store: ArticleStore,
    chat: ChatCompleter,
) -> SimpleBriefResult:
    """Brief from the highest-impact articles, without clustering."""
    logger.info("Generating simple brief [%s]", feed_profile)
    settings = config.resolve(feed_profile)
    if max_articles is None:
        max_articles = config.processing.simple_brief_max_articles

    articles = store.fetch_eligible_articles(feed_profile, settings.lookback_hours)
    if not articles:
        return SimpleBriefResult(success=False, error="No articles found for briefing")

    selected = select_top_articles(articles, max_articles)
    content = synthesize_simple_brief(selected, feed_profile, chat)
    if not content:
        return SimpleBriefResult(success=False, error="Failed to generate brief content")

    try:
        briefing_id = store.persist_brief(content, [article.id for article in selected], feed_profile)
    except Exception as exc:
        logger.error("Failed to save simple brief for profile '%s': %s", feed_profile, exc)
        return SimpleBriefResult(success=False, error=str(exc) or "Failed to save brief")

    return SimpleBriefResult(success=True, briefing_id=briefing_id, content=content)
