from __future__ import annotations

"""
Unit tests for the ncdu Export Serializer.

Verifies:
1. Exact document layout for a known forest.
2. Valid JSON structure, names and leaf counts.
3. Name escaping, deep nesting and forest draining.
4. Buffer flushing independent of the threshold.
"""

import io
import json

from boxdu.core.analysis.tree_builder import ForestBuilder, build_forest
from boxdu.core.analysis.tree_serializer import escape_name, serialize_forest
from boxdu.domain.tree_models import Entry, Forest


def _sample_forest() -> Forest:
    forest, _ = build_forest([
        Entry(1, "f", 10, ("dir1", "file1")),
        Entry(2, "fo", 5, ("dir1", "file1")),
        Entry(3, "fX", 1, ("dir2", "file2")),
    ])
    return forest


def _count_files(node) -> int:
    count = 0
    for child in node[1:]:
        if isinstance(child, list):
            count += _count_files(child)
        else:
            count += 1
    return count


def test_exact_document_layout(sample_document):
    out = io.StringIO()
    serialize_forest(_sample_forest(), out)

    assert out.getvalue() == sample_document


def test_document_is_valid_json_with_bucket_order():
    out = io.StringIO()
    stats = serialize_forest(_sample_forest(), out)
    doc = json.loads(out.getvalue())

    assert doc[:3] == [1, 0, {"progname": "boxdu", "progver": "0.1"}]
    root = doc[3]
    assert root[0] == {"name": "boxbackup"}
    assert [bucket[0]["name"] for bucket in root[1:]] == ["current", "deleted", "unclear", "old"]
    assert _count_files(root) == stats.files == 3
    assert stats.bytes == 40960 + 20480 + 4096


def test_empty_forest_emits_empty_buckets():
    out = io.StringIO()
    stats = serialize_forest(Forest(), out)
    doc = json.loads(out.getvalue())

    assert doc[3] == [
        {"name": "boxbackup"},
        [{"name": "current"}],
        [{"name": "deleted"}],
        [{"name": "unclear"}],
        [{"name": "old"}],
    ]
    assert stats.files == 0
    assert stats.directories == 5


def test_serialization_drains_forest():
    forest = _sample_forest()
    serialize_forest(forest, io.StringIO())

    assert forest.is_empty()


def test_names_with_quotes_and_backslashes():
    builder = ForestBuilder()
    builder.insert("current", ('say "hi"', "back\\slash"), 1)
    out = io.StringIO()
    serialize_forest(builder.build(), out)

    doc = json.loads(out.getvalue())
    directory = doc[3][1][1]
    assert directory[0] == {"name": 'say "hi"'}
    assert directory[1] == {"name": "back\\slash", "dsize": 4096}


def test_escape_name_leaves_other_characters():
    assert escape_name('a"b\\c') == 'a\\"b\\\\c'
    assert escape_name("tab\there") == "tab\there"


def test_deep_nesting_does_not_recurse():
    depth = 5000
    path = tuple(f"d{i}" for i in range(depth)) + ("leaf",)
    builder = ForestBuilder()
    builder.insert("old", path, 1)
    out = io.StringIO()

    stats = serialize_forest(builder.build(), out)

    assert stats.directories == depth + 5
    assert out.getvalue().endswith('"dsize":4096}' + "]" * (depth + 3) + "\n")


def test_small_flush_threshold_gives_same_output():
    small, large = io.StringIO(), io.StringIO()
    serialize_forest(_sample_forest(), small, flush_threshold=1)
    serialize_forest(_sample_forest(), large, flush_threshold=1 << 20)

    assert small.getvalue() == large.getvalue()


class _CountingStream(io.StringIO):
    def __init__(self):
        super().__init__()
        self.writes = 0

    def write(self, s):
        self.writes += 1
        return super().write(s)


def test_buffer_is_flushed_incrementally():
    builder = ForestBuilder()
    for i in range(200):
        builder.insert("current", ("dir", f"file{i:03d}"), 1)
    out = _CountingStream()

    serialize_forest(builder.build(), out, flush_threshold=256)

    assert out.writes > 1
    assert _count_files(json.loads(out.getvalue())[3]) == 200
