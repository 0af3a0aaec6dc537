"""Group briefing candidates into clusters with k-means."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

import numpy as np
from sklearn.cluster import KMeans

logger = logging.getLogger(__name__)

T = TypeVar("T")

PartitionFn = Callable[[np.ndarray, int], Sequence[int]]


@dataclass
class ClusterResult:
    """Labels produced by a clustering run.

    ``error`` is set when the partitioning primitive failed; ``labels`` is
    then empty and the caller decides on a fallback.
    """

    labels: list[int]
    n_clusters: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def labels_or_single_group(self, n_items: int) -> list[int]:
        """Labels, or the single-group fallback when clustering failed."""
        if self.ok:
            return self.labels
        return single_group_labels(n_items)


def effective_cluster_count(n_items: int, n_clusters: int) -> int:
    """Cap the requested cluster count so every cluster can hold two items."""
    return min(n_clusters, n_items // 2)


def partition_vectors(vectors: np.ndarray, k: int, random_state: int | None = 0) -> list[int]:
    """Partition vectors into k groups with k-means (Euclidean)."""
    model = KMeans(n_clusters=k, n_init=10, random_state=random_state)
    return [int(label) for label in model.fit_predict(vectors)]


def _prepare_vectors(embeddings: Sequence[Sequence[float]]) -> np.ndarray:
    vectors = np.asarray(embeddings, dtype="float32")
    if vectors.ndim != 2:
        raise ValueError("Embeddings must all have the same dimensionality")
    return vectors


def cluster_embeddings(
    embeddings: Sequence[Sequence[float]],
    n_clusters: int,
    partition: PartitionFn = partition_vectors,
) -> ClusterResult:
    """
    Assign a cluster label to every embedding.

    Args:
        embeddings: Equal-length embedding vectors.
        n_clusters: Desired number of clusters before capping.
        partition: Vector partitioning primitive.

    Returns:
        ClusterResult with one label per embedding in [0, effective_k), or
        all-zero labels when there is too little data to cluster. Failures of
        the primitive are reported through ``error`` rather than raised.
    """
    n_items = len(embeddings)
    if n_items < 2:
        return ClusterResult(labels=[0] * n_items, n_clusters=1)

    k = effective_cluster_count(n_items, n_clusters)
    if k < 2:
        return ClusterResult(labels=[0] * n_items, n_clusters=1)

    try:
        vectors = _prepare_vectors(embeddings)
        labels = [int(label) for label in partition(vectors, k)]
        if len(labels) != n_items:
            raise ValueError(f"Expected {n_items} labels, got {len(labels)}")
    except Exception as exc:
        logger.error("Clustering %d embeddings into %d clusters failed: %s", n_items, k, exc)
        return ClusterResult(labels=[], n_clusters=k, error=str(exc))

    return ClusterResult(labels=labels, n_clusters=k)


def single_group_labels(n_items: int) -> list[int]:
    """Fallback labelling that puts every item in cluster 0."""
    return [0] * n_items


def group_by_label(items: Sequence[T], labels: Sequence[int], n_clusters: int) -> list[list[T]]:
    """Scatter items into n_clusters groups, keeping input order inside each group.

    Items whose label falls outside [0, n_clusters) are dropped.
    """
    groups: list[list[T]] = [[] for _ in range(n_clusters)]
    for item, label in zip(items, labels, strict=True):
        if 0 <= label < n_clusters:
            groups[label].append(item)
    return groups
