"""Summarize a cluster of related articles with a language model."""

from __future__ import annotations

import logging
from typing import Protocol

from generate_briefs.instructions import format_prompt
from generate_briefs.models import Article, ClusterAnalysis

logger = logging.getLogger(__name__)

MAX_SUMMARIES_PER_CLUSTER = 10
UNRELATED_MARKER = "unrelated"
MAX_DROPPABLE_CLUSTER_SIZE = 2


class ChatCompleter(Protocol):
    def chat_complete(self, prompt: str) -> str | None: ...


def _format_cluster_for_prompt(articles: list[Article]) -> str:
    """Format article summaries into the bullet list used by the analysis prompt."""
    return "\n\n".join(f"- {article.processed_content}" for article in articles)


def is_degenerate(analysis: str, cluster_size: int) -> bool:
    """A small cluster the model itself flagged as unrelated is treated as noise."""
    return UNRELATED_MARKER in analysis.lower() and cluster_size <= MAX_DROPPABLE_CLUSTER_SIZE


def analyze_cluster(
    cluster: list[Article],
    feed_profile: str,
    cluster_index: int,
    chat: ChatCompleter,
    prompt_template: str,
    max_summaries: int = MAX_SUMMARIES_PER_CLUSTER,
) -> ClusterAnalysis | None:
    """
    Produce a short synthesis of one cluster.

    Args:
        cluster: Articles sharing a cluster label, in store order.
        feed_profile: Profile name interpolated into the prompt.
        cluster_index: 0-based cluster index, used for the topic label.
        chat: Language-model client.
        prompt_template: Template with {feed_profile} and {cluster_summaries_text}.
        max_summaries: Cap on summaries sent to the model.

    Returns:
        ClusterAnalysis, or None if the cluster is empty, the model call
        failed, or the cluster was judged degenerate.
    """
    if not cluster:
        return None

    logger.info("Analyzing cluster %d (%d articles)", cluster_index, len(cluster))

    selected = cluster[:max_summaries]
    prompt = format_prompt(
        prompt_template,
        feed_profile=feed_profile,
        cluster_summaries_text=_format_cluster_for_prompt(selected),
    )

    analysis = chat.chat_complete(prompt)
    if not analysis:
        logger.warning("No analysis returned for cluster %d", cluster_index)
        return None

    if is_degenerate(analysis, len(cluster)):
        logger.info("Dropping cluster %d: flagged as unrelated (%d articles)", cluster_index, len(cluster))
        return None

    return ClusterAnalysis(
        topic=f"Cluster {cluster_index + 1}",
        analysis=analysis,
        size=len(cluster),
        articles=cluster,
    )
