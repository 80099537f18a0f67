from __future__ import annotations

"""
Unit tests for the Conversion Engine.

Verifies the two-phase conversion, cache transparency, the explicit output
and visualizer flows, and that a bad banner never touches the destination.
"""

import io
import json
import os
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from boxdu.core.pipeline.engine import build_from_listing, convert_listing, run_pipeline
from boxdu.core.pipeline.validator import validate_config
from boxdu.domain.errors import CollaboratorError, ListingFormatError
from boxdu.domain.run_models import PhaseTimer


def _config(**overrides):
    cfg, _ = validate_config(dict(show_progress=False, **overrides))
    return cfg


def test_convert_listing_end_to_end(sample_listing, sample_document):
    out = io.StringIO()
    result = convert_listing(sample_listing, out)

    assert out.getvalue() == sample_document
    assert result.build.entries == 3
    assert result.serialize.files == 3
    assert result.timings == {}


def test_cache_transparency_is_byte_identical(make_listing):
    # Entries deliberately interleave directories to force cache misses
    entries = [
        "1 f 1 a/b/f1\n", "2 f 2 a/c/f2\n", "3 fo 3 a/b/f1\n",
        "4 f 4 a/b/f3\n", "5 fo 5 a/b/f1\n", "6 fa 6 a/f4\n",
        "7 fX 7 x/y/z\n", "8 f 0 a/b\n", "9 fXo 1 x/y/z\n",
    ]
    cached, uncached = io.StringIO(), io.StringIO()

    convert_listing(make_listing(entries), cached, use_cache=True)
    convert_listing(make_listing(entries), uncached, use_cache=False)

    assert cached.getvalue() == uncached.getvalue()


def test_leaf_count_matches_accepted_entries(make_listing):
    entries = ["1 f 1 a/f\n", "2 f 1 a/f\n", "3 f 0 a/g\n", "4 fo 1 b/x\n", "5 fo 2 b\n"]
    out = io.StringIO()

    result = convert_listing(make_listing(entries), out)

    assert result.build.inserted == 2
    assert result.build.conflicts == 2
    assert result.serialize.files == result.build.inserted
    assert json.loads(out.getvalue())


def test_bad_banner_aborts_before_building(preamble):
    lines = [preamble[0]] + preamble[2:] + ["1 f 1 a\n"]
    out = io.StringIO()

    with patch("boxdu.core.pipeline.engine.ForestBuilder.add_entry") as add_entry:
        with pytest.raises(ListingFormatError):
            convert_listing(lines, out)
        add_entry.assert_not_called()

    assert out.getvalue() == ""


def test_build_from_listing_returns_stats(sample_listing):
    forest, stats = build_from_listing(sample_listing)
    assert forest["deleted"] == {"dir2": {"file2": 4096}}
    assert stats.inserted == 3


def test_timer_records_both_phases(sample_listing):
    timer = PhaseTimer(enabled=True)
    result = convert_listing(sample_listing, io.StringIO(), timer=timer)

    assert set(result.timings) == {"build", "serialize"}


def test_run_pipeline_writes_explicit_output(listing_file, tmp_path, sample_document):
    out_path = tmp_path / "export.json"
    result = run_pipeline(_config(input_path=str(listing_file), output_path=str(out_path)))

    assert out_path.read_text(encoding="utf-8") == sample_document
    assert result.output_path == str(out_path)
    assert result.visualizer_status is None


def test_run_pipeline_bad_banner_keeps_existing_output(tmp_path):
    listing = tmp_path / "bad.txt"
    listing.write_text("NOTICE: x\n\n\n", encoding="utf-8")
    out_path = tmp_path / "export.json"
    out_path.write_text("previous", encoding="utf-8")

    with pytest.raises(ListingFormatError):
        run_pipeline(_config(input_path=str(listing), output_path=str(out_path)))

    assert out_path.read_text(encoding="utf-8") == "previous"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["bad.txt", "export.json"]


def test_run_pipeline_bad_banner_creates_no_output(tmp_path):
    listing = tmp_path / "bad.txt"
    listing.write_text("hello\n", encoding="utf-8")
    out_path = tmp_path / "export.json"

    with pytest.raises(ListingFormatError):
        run_pipeline(_config(input_path=str(listing), output_path=str(out_path)))

    assert not out_path.exists()


def test_run_pipeline_missing_input_raises(tmp_path):
    with pytest.raises(OSError):
        run_pipeline(_config(input_path=str(tmp_path / "missing.txt")))


def test_run_pipeline_hands_temp_document_to_visualizer(listing_file, sample_document):
    seen = {}

    def fake_visualizer(command, path):
        seen["command"] = command
        seen["path"] = path
        with open(path, encoding="utf-8") as f:
            seen["content"] = f.read()
        return 0

    with patch("boxdu.core.pipeline.engine.run_visualizer", side_effect=fake_visualizer):
        result = run_pipeline(_config(input_path=str(listing_file), visualizer_command="myncdu"))

    assert seen["command"] == "myncdu"
    assert seen["content"] == sample_document
    assert not os.path.exists(seen["path"])
    assert result.visualizer_status == 0


def test_run_pipeline_removes_temp_document_when_visualizer_fails(listing_file):
    seen = {}

    def failing_visualizer(command, path):
        seen["path"] = path
        raise CollaboratorError("cannot launch")

    with patch("boxdu.core.pipeline.engine.run_visualizer", side_effect=failing_visualizer):
        with pytest.raises(CollaboratorError):
            run_pipeline(_config(input_path=str(listing_file)))

    assert not os.path.exists(seen["path"])


def test_run_pipeline_uses_query_tool_without_input(sample_listing, tmp_path, sample_document):
    calls = []

    @contextmanager
    def fake_query(command, arguments):
        calls.append((command, list(arguments)))
        yield iter(sample_listing)

    out_path = tmp_path / "export.json"
    with patch("boxdu.core.pipeline.engine.query_listing", fake_query):
        run_pipeline(_config(output_path=str(out_path), query_command="bbq"))

    assert calls == [("bbq", ["list -rdos /", "quit"])]
    assert out_path.read_text(encoding="utf-8") == sample_document
