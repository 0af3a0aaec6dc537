"""Tests for common.cli_helpers module."""

import argparse
import json
from datetime import datetime, timezone

import pytest

from common.cli_helpers import positive_int, save_jsonl_local


class TestPositiveInt:
    def test_valid_value(self) -> None:
        assert positive_int("12") == 12

    def test_zero_rejected(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="n-clusters must be positive"):
            positive_int("0", "n-clusters")

    def test_non_integer_rejected(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="must be an integer"):
            positive_int("abc")


class TestSaveJsonlLocal:
    def test_writes_one_line_per_record(self, tmp_path) -> None:
        ts = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)
        records = [{"id": 1, "content": "Brief"}, {"id": 2, "content": "Ação"}]

        path = save_jsonl_local(records, "briefs_default", ts, output_dir=str(tmp_path / "out"))

        assert path.name == "briefs_default_2024_03_15_09_30.jsonl"
        lines = path.read_text().splitlines()
        assert [json.loads(line) for line in lines] == records
        assert "Ação" in lines[1]
