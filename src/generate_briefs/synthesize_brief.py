"""Combine the top cluster analyses into one briefing document."""

from __future__ import annotations

import logging

from generate_briefs.analyze_clusters import ChatCompleter
from generate_briefs.instructions import SIMPLE_BRIEF_INSTRUCTIONS, format_prompt
from generate_briefs.models import Article, ClusterAnalysis

logger = logging.getLogger(__name__)

MAX_CLUSTERS_IN_BRIEF = 5


def rank_analyses(analyses: list[ClusterAnalysis]) -> list[ClusterAnalysis]:
    """Order analyses by cluster size, largest first; ties keep cluster order."""
    return sorted(analyses, key=lambda analysis: analysis.size, reverse=True)


def select_top_analyses(
    analyses: list[ClusterAnalysis],
    limit: int = MAX_CLUSTERS_IN_BRIEF,
) -> list[ClusterAnalysis]:
    return rank_analyses(analyses)[:limit]


def format_cluster_analyses(analyses: list[ClusterAnalysis]) -> str:
    return "\n".join(
        f"--- Cluster {index} ({analysis.size} articles) ---\nAnalysis: {analysis.analysis}\n"
        for index, analysis in enumerate(analyses, 1)
    )


def synthesize_brief(
    analyses: list[ClusterAnalysis],
    feed_profile: str,
    chat: ChatCompleter,
    prompt_template: str,
) -> str | None:
    """Ask the model for the final Markdown briefing. Returns None on failure."""
    prompt = format_prompt(
        prompt_template,
        feed_profile=feed_profile,
        cluster_analyses_text=format_cluster_analyses(analyses),
    )
    logger.info("Synthesizing brief from %d cluster analyses", len(analyses))
    return chat.chat_complete(prompt)


def select_top_articles(articles: list[Article], max_articles: int) -> list[Article]:
    """Highest impact first; unrated articles count as zero."""
    ranked = sorted(articles, key=lambda article: article.impact_rating or 0, reverse=True)
    return ranked[:max_articles]


def format_articles_for_simple_brief(articles: list[Article]) -> str:
    lines = []
    for index, article in enumerate(articles, 1):
        impact = article.impact_rating if article.impact_rating else "N/A"
        lines.append(
            f"{index}. **{article.title}** (Impact: {impact})\n   {article.processed_content}\n"
        )
    return "\n".join(lines)


def synthesize_simple_brief(
    articles: list[Article],
    feed_profile: str,
    chat: ChatCompleter,
) -> str | None:
    prompt = format_prompt(
        SIMPLE_BRIEF_INSTRUCTIONS,
        feed_profile=feed_profile,
        articles_text=format_articles_for_simple_brief(articles),
    )
    logger.info("Synthesizing simple brief from %d articles", len(articles))
    return chat.chat_complete(prompt)
