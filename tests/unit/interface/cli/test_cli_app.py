from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

Runs the controller in-process and checks exit codes, outputs and the
diagnostics emitted for fatal and recoverable problems.
"""

import json
import logging
from unittest.mock import patch

from boxdu.domain.errors import CollaboratorError
from boxdu.interface.cli.app import _merge_config, main


def test_main_writes_output_file(listing_file, tmp_path, sample_document):
    out = tmp_path / "export.json"

    code = main(["-q", "--use-defaults", str(listing_file), "-o", str(out)])

    assert code == 0
    assert out.read_text(encoding="utf-8") == sample_document


def test_main_bad_banner_returns_one(tmp_path, caplog):
    listing = tmp_path / "bad.txt"
    listing.write_text("NOTICE: x\nWrong\n", encoding="utf-8")
    out = tmp_path / "export.json"

    code = main(["-q", "--use-defaults", str(listing), "-o", str(out)])

    assert code == 1
    assert not out.exists()
    assert "line 2" in caplog.text


def test_main_missing_input_returns_one(tmp_path, caplog):
    code = main(["-q", "--use-defaults", str(tmp_path / "missing.txt"), "-o", str(tmp_path / "o")])

    assert code == 1
    assert "I/O failure" in caplog.text


def test_main_collaborator_failure_returns_one(listing_file, caplog):
    with patch(
        "boxdu.core.pipeline.engine.run_visualizer",
        side_effect=CollaboratorError("Cannot launch 'ncdu'"),
    ):
        code = main(["-q", "--use-defaults", str(listing_file)])

    assert code == 1
    assert "Cannot launch 'ncdu'" in caplog.text


def test_main_reports_conflicts_and_timings(tmp_path, make_listing, caplog):
    listing = tmp_path / "listing.txt"
    listing.write_text("".join(make_listing(["1 f 1 a\n", "2 f 1 a\n"])), encoding="utf-8")
    out = tmp_path / "export.json"
    caplog.set_level(logging.INFO)

    code = main(["--use-defaults", "-d", str(listing), "-o", str(out)])

    assert code == 0
    assert json.loads(out.read_text(encoding="utf-8"))[3][1][1] == {"name": "a", "dsize": 4096}
    assert "Duplicate current entry" in caplog.text
    assert "Timing: build" in caplog.text
    assert "Timing: serialize" in caplog.text


def test_merge_config_ignores_none_and_unknown_keys():
    base = {"input_path": "a", "use_cache": True}
    merged = _merge_config(base, {"input_path": None, "use_cache": False, "other": 1})

    assert merged == {"input_path": "a", "use_cache": False}
