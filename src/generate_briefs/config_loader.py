"""YAML configuration loader for brief generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from common.config import find_config_path, load_yaml
from generate_briefs.instructions import (
    BRIEF_SYNTHESIS_INSTRUCTIONS,
    CLUSTER_ANALYSIS_INSTRUCTIONS,
)
from generate_briefs.models import BriefGenerationOptions

load_dotenv()

logger = logging.getLogger(__name__)

# Config directory relative to this file
CONFIG_DIR = Path(__file__).parent / "configs"
CONFIG_ENV_VAR = "BRIEFING_CONFIG"


@dataclass
class ProcessingConfig:
    lookback_hours: int = 24
    min_articles: int = 5
    n_clusters: int = 10
    max_summaries_per_cluster: int = 10
    max_clusters_in_brief: int = 5
    simple_brief_max_articles: int = 10
    analysis_delay_seconds: float = 1.0

    def __post_init__(self) -> None:
        for name in (
            "lookback_hours",
            "min_articles",
            "n_clusters",
            "max_summaries_per_cluster",
            "max_clusters_in_brief",
            "simple_brief_max_articles",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"processing.{name} must be positive")
        if self.analysis_delay_seconds < 0:
            raise ValueError("processing.analysis_delay_seconds cannot be negative")


@dataclass
class ModelConfig:
    chat_model: str = "deepseek-chat"
    embedding_model: str = "togethercomputer/m2-bert-80M-32k-retrieval"
    max_tokens: int = 2048
    temperature: float = 0.7

    def __post_init__(self) -> None:
        if not self.chat_model.strip():
            raise ValueError("models.chat_model cannot be empty")
        if not self.embedding_model.strip():
            raise ValueError("models.embedding_model cannot be empty")


@dataclass
class PromptConfig:
    cluster_analysis: str = CLUSTER_ANALYSIS_INSTRUCTIONS
    brief_synthesis: str = BRIEF_SYNTHESIS_INSTRUCTIONS

    def __post_init__(self) -> None:
        for name in ("cluster_analysis", "brief_synthesis"):
            if not (getattr(self, name) or "").strip():
                raise ValueError(f"Prompt '{name}' cannot be empty")


@dataclass
class FeedConfig:
    url: str
    name: str
    category: str | None = None
    description: str | None = None
    enabled: bool = True


@dataclass
class ProfileConfig:
    """A named topical stream with its feeds and optional overrides."""

    name: str
    feeds: list[FeedConfig] = field(default_factory=list)
    enabled: bool = True
    cluster_analysis_prompt: str | None = None
    brief_synthesis_prompt: str | None = None
    lookback_hours: int | None = None
    min_articles: int | None = None
    n_clusters: int | None = None

    def enabled_feeds(self) -> list[FeedConfig]:
        return [feed for feed in self.feeds if feed.enabled]


@dataclass
class BriefingSettings:
    """Effective settings for one pipeline run."""

    feed_profile: str
    lookback_hours: int
    min_articles: int
    n_clusters: int
    cluster_analysis_prompt: str
    brief_synthesis_prompt: str


@dataclass
class BriefingConfig:
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    prompts: PromptConfig = field(default_factory=PromptConfig)
    default_profile: str = "default"
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)

    def available_profiles(self) -> list[str]:
        return list(self.profiles)

    def get_profile(self, name: str) -> ProfileConfig:
        """Return the profile, or an empty one if the name is not registered."""
        return self.profiles.get(name) or ProfileConfig(name=name)

    def resolve(
        self,
        feed_profile: str | None = None,
        options: BriefGenerationOptions | None = None,
    ) -> BriefingSettings:
        """Merge call options over profile overrides over global defaults."""
        options = options or BriefGenerationOptions()
        profile = self.get_profile(feed_profile or self.default_profile)
        custom = options.custom_prompts

        return BriefingSettings(
            feed_profile=profile.name,
            lookback_hours=_first_set(
                options.lookback_hours, profile.lookback_hours, self.processing.lookback_hours
            ),
            min_articles=_first_set(
                options.min_articles, profile.min_articles, self.processing.min_articles
            ),
            n_clusters=_first_set(
                options.n_clusters, profile.n_clusters, self.processing.n_clusters
            ),
            cluster_analysis_prompt=(
                custom.cluster_analysis
                or profile.cluster_analysis_prompt
                or self.prompts.cluster_analysis
            ),
            brief_synthesis_prompt=(
                custom.brief_synthesis
                or profile.brief_synthesis_prompt
                or self.prompts.brief_synthesis
            ),
        )


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _build_profile(name: str, data: dict[str, Any]) -> ProfileConfig:
    prompts = data.get("prompts") or {}
    settings = data.get("settings") or {}
    return ProfileConfig(
        name=name,
        feeds=[FeedConfig(**feed) for feed in data.get("feeds") or []],
        enabled=data.get("enabled", True),
        cluster_analysis_prompt=prompts.get("cluster_analysis"),
        brief_synthesis_prompt=prompts.get("brief_synthesis"),
        lookback_hours=settings.get("lookback_hours"),
        min_articles=settings.get("min_articles"),
        n_clusters=settings.get("n_clusters"),
    )


def config_from_dict(data: dict[str, Any]) -> BriefingConfig:
    """Build a BriefingConfig from a parsed YAML mapping."""
    app = data.get("app") or {}
    profiles = {
        name: _build_profile(name, profile_data or {})
        for name, profile_data in (data.get("profiles") or {}).items()
    }
    return BriefingConfig(
        processing=ProcessingConfig(**(data.get("processing") or {})),
        models=ModelConfig(**(data.get("models") or {})),
        prompts=PromptConfig(**(data.get("prompts") or {})),
        default_profile=app.get("default_profile", "default"),
        profiles=profiles,
    )


def load_config(config_name: str | None = None) -> BriefingConfig:
    """Load a named config from the configs directory (or a path to a YAML file)."""
    path = find_config_path(config_name, CONFIG_DIR, env_var=CONFIG_ENV_VAR)
    logger.info("Loading briefing config from %s", path)
    return config_from_dict(load_yaml(path))
