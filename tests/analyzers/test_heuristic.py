"""Tests for the offline heuristic analyzer."""

import asyncio

import pytest

from whycomment.analyzers import HeuristicAnalyzer
from whycomment.analyzers.heuristic import MAX_MESSAGE_LENGTH, parse_annotated

ANNOTATED = "\n".join(
    [
        "[1] +import time",
        "[2] +    time.sleep(5)",
        "[3] +    # settle",
        "[4] +    x = y",
        "[5] +    if a and b or c and d:",
        "[6] +    buf = data[:512]",
        "[7] +    MAX = 42",
        "[8] +    flags = mode & 0x0F",
        "[9] +    count = 1",
    ]
)


@pytest.fixture
def analyzer():
    return HeuristicAnalyzer(output_language="en")


def test_parse_annotated_reads_back_zero_based_lines():
    assert parse_annotated("[3] +x\nnot annotated\n[10] +") == [(2, "x"), (9, "")]


def test_flags_lines_with_rationale_cues(analyzer):
    items = analyzer.analyze_sync(ANNOTATED, "python")
    by_line = {item["line"]: item for item in items}

    assert sorted(by_line) == [1, 4, 5, 6, 7]
    assert by_line[1]["message"] == "Why this delay or retry behavior?"
    assert by_line[4]["message"] == "Why does this condition combine so many checks?"
    assert by_line[5]["message"] == "Why truncate or limit here?"
    assert by_line[6]["message"] == "Why 42?"
    assert by_line[7]["message"] == "Why this bitwise operation?"


def test_anchor_is_stripped_code(analyzer):
    items = analyzer.analyze_sync("[2] +    time.sleep(5)", "python")
    assert items[0]["anchor"] == "time.sleep(5)"


def test_one_candidate_per_line(analyzer):
    items = analyzer.analyze_sync("[1] +sleep(250)", "python")
    assert len(items) == 1


def test_trailing_comment_is_not_scanned(analyzer):
    assert analyzer.analyze_sync("[1] +x = y  # retry later", "python") == []


def test_comment_lines_skipped_per_language(analyzer):
    assert analyzer.analyze_sync("[1] +// wait 30 seconds", "typescript") == []
    assert analyzer.analyze_sync("[1] +-- timeout 30", "lua") == []


def test_block_comment_body_is_skipped_but_pointer_writes_are_not(analyzer):
    annotated = "[1] +/*\n[2] + * Default width is 250 px.\n[3] + */\n[4] +*width = 250;"
    items = analyzer.analyze_sync(annotated, "c")
    assert [(item["line"], item["message"]) for item in items] == [(3, "Why 250?")]


def test_japanese_output():
    items = HeuristicAnalyzer(output_language="ja").analyze_sync("[1] +sleep(5)", "python")
    assert items[0]["message"] == "なぜこの待機・リトライ動作なのですか？"


def test_long_message_is_shortened(analyzer):
    digits = "9" * 120
    (item,) = analyzer.analyze_sync(f"[1] +x = {digits}", "python")
    assert len(item["message"]) <= MAX_MESSAGE_LENGTH
    assert item["message"].endswith("?")
    assert digits in item["suggestedComment"]


def test_async_analyze_matches_sync(analyzer):
    assert asyncio.run(analyzer.analyze(ANNOTATED, "python")) == analyzer.analyze_sync(ANNOTATED, "python")
