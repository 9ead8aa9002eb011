"""Tests for validating raw analyzer output."""

import pytest

from whycomment.analyzers import Candidate, parse_candidates, resolve_output_language


class TestParseCandidates:
    def test_well_formed_item(self):
        raw = [{"line": 4, "message": "Why 3?", "suggestedComment": "Three retries.", "anchor": "n = 3"}]
        assert parse_candidates(raw) == [Candidate(4, "Why 3?", "Three retries.", "n = 3")]

    def test_snake_case_comment_key(self):
        (c,) = parse_candidates([{"line": 1, "message": "Why?", "suggested_comment": "So."}])
        assert c.suggested_comment == "So."

    @pytest.mark.parametrize("line", [None, "7", 2.5, True, -3])
    def test_bad_line_becomes_zero(self, line):
        (c,) = parse_candidates([{"line": line, "message": "Why?", "suggestedComment": "So."}])
        assert c.line == 0

    def test_missing_texts_fall_back_in_english(self):
        (c,) = parse_candidates([{"line": 2}], "en")
        assert c.message == "Why?"
        assert c.suggested_comment == "Explain the intent and constraints."

    def test_missing_texts_fall_back_in_japanese(self):
        (c,) = parse_candidates([{"line": 2, "message": "   "}], "ja")
        assert c.message == "なぜ？"
        assert c.suggested_comment.startswith("この意図")

    def test_unknown_language_uses_english(self):
        (c,) = parse_candidates([{}], "fr")
        assert c.message == "Why?"

    def test_blank_or_non_string_anchor_dropped(self):
        raw = [{"line": 1, "anchor": "  "}, {"line": 2, "anchor": 12}]
        assert [c.anchor for c in parse_candidates(raw)] == [None, None]

    def test_non_mapping_entries_skipped(self):
        raw = ["text", 3, None, {"line": 5, "message": "Why?", "suggestedComment": "So."}]
        assert [c.line for c in parse_candidates(raw)] == [5]

    def test_none_input(self):
        assert parse_candidates(None) == []


class TestOutputLanguage:
    def test_explicit_setting_wins(self, monkeypatch):
        monkeypatch.setenv("LANG", "ja_JP.UTF-8")
        assert resolve_output_language("en") == "en"

    def test_auto_reads_lang(self, monkeypatch):
        monkeypatch.setenv("LANG", "ja_JP.UTF-8")
        assert resolve_output_language("auto") == "ja"

    def test_auto_defaults_to_english(self, monkeypatch):
        monkeypatch.setenv("LANG", "C.UTF-8")
        monkeypatch.delenv("LC_ALL", raising=False)
        assert resolve_output_language("auto") == "en"
