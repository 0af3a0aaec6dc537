"""Tests for generate_briefs.cli module."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from common.llm import ConnectivityReport
from generate_briefs import cli
from generate_briefs.models import BriefStats, GenerateBriefResult, SimpleBriefResult


@pytest.fixture
def patched(monkeypatch: pytest.MonkeyPatch, engine):
    monkeypatch.delenv("BRIEFING_CONFIG", raising=False)
    monkeypatch.setattr(cli, "init_db", lambda: engine)
    chat = MagicMock()
    monkeypatch.setattr(cli, "build_chat_client", lambda config: chat)
    return chat


class TestMain:
    def test_list_profiles(self, capsys) -> None:
        assert cli.main(["--list-profiles"]) == 0
        out = capsys.readouterr().out
        assert "technology" in out
        assert "Default profile: default" in out

    def test_unknown_profile(self, patched) -> None:
        assert cli.main(["--profile", "nope"]) == 1

    def test_generates_brief(self, patched, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.chdir(tmp_path)
        generate = MagicMock(
            return_value=GenerateBriefResult(
                success=True,
                briefing_id=3,
                content="# Brief",
                stats=BriefStats(articles_analyzed=10, clusters_generated=5, clusters_used=4),
            )
        )
        monkeypatch.setattr(cli, "generate_brief", generate)

        code = cli.main(["-f", "technology", "--n-clusters", "6", "--load-local"])

        assert code == 0
        profile, options = generate.call_args.args
        assert profile == "technology"
        assert options.n_clusters == 6
        assert generate.call_args.kwargs["chat"] is patched
        files = list((tmp_path / "output").glob("briefs_technology_*.jsonl"))
        assert len(files) == 1
        record = json.loads(files[0].read_text())
        assert record["briefing_id"] == 3

    def test_simple_brief(self, patched, monkeypatch: pytest.MonkeyPatch) -> None:
        simple = MagicMock(return_value=SimpleBriefResult(success=True, briefing_id=1, content="x"))
        monkeypatch.setattr(cli, "generate_simple_brief", simple)

        assert cli.main(["-f", "technology", "--simple", "--max-articles", "4"]) == 0
        assert simple.call_args.args == ("technology", 4)

    def test_failure_exit_code(self, patched, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            cli,
            "generate_brief",
            MagicMock(return_value=GenerateBriefResult(success=False, error="Not enough recent articles (0)")),
        )
        assert cli.main(["-f", "technology"]) == 1

    def test_missing_api_key_exit_code(self, monkeypatch: pytest.MonkeyPatch, engine) -> None:
        monkeypatch.delenv("BRIEFING_CONFIG", raising=False)
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        monkeypatch.setattr(cli, "init_db", lambda: engine)
        generate = MagicMock()
        monkeypatch.setattr(cli, "generate_brief", generate)

        assert cli.main(["-f", "technology"]) == 1
        generate.assert_not_called()

    def test_status(self, patched, monkeypatch: pytest.MonkeyPatch, engine, capsys) -> None:
        monkeypatch.setattr(cli, "EmbeddingClient", MagicMock())
        monkeypatch.setattr(
            cli,
            "check_connectivity",
            lambda chat, embedder: ConnectivityReport(chat=True, embedding=False, errors=["Embedding API: down"]),
        )
        store = cli.SqlArticleStore(engine)
        store.persist_brief("a", [1, 2], "technology")
        store.persist_brief("b", [3], "brasil")

        assert cli.main(["-f", "technology", "--status"]) == 0

        out = capsys.readouterr().out
        assert "Total articles: 0" in out
        assert "Briefings for profile: 1" in out
        assert "Total briefings: 2" in out
        assert "Chat API: available" in out
        assert "Embedding API: unavailable" in out
        assert "Embedding API: down" in out
