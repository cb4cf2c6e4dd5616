"""Tests for word normalization and dictionary loading."""

import json

import pytest

from cruzadas import load_word_file, normalize_words, parse_pasted_words, to_upper


class TestNormalizeWords:
    def test_trim_upper_dedupe_keeps_first_seen(self):
        raw = ["  casa ", "", "Casa", "manhã", "CASA", "sol", "   "]
        assert normalize_words(raw, 30) == ["CASA", "MANHÃ", "SOL"]

    def test_accepts_words_mapping(self):
        assert normalize_words({"words": ["rio", "luz"]}, 30) == ["RIO", "LUZ"]

    @pytest.mark.parametrize("raw", ["casa", 42, None, {"other": ["a"]}, {"words": "casa"}])
    def test_malformed_input_is_empty(self, raw):
        assert normalize_words(raw, 30) == []

    def test_drops_words_longer_than_grid(self):
        assert normalize_words(["computador", "sol"], 5) == ["SOL"]

    def test_keeps_accents_as_single_cells(self):
        decomposed = "manha\u0303"
        out = normalize_words([decomposed, "ação"], 30)
        assert out == ["MANHÃ", "AÇÃO"]
        assert len(out[0]) == 5

    def test_to_upper(self):
        assert to_upper("coração") == "CORAÇÃO"


class TestParsePastedWords:
    def test_json_list(self):
        assert parse_pasted_words('["casa", "sol"]') == ["casa", "sol"]

    def test_json_mapping(self):
        assert parse_pasted_words('{"words": ["rio"]}') == ["rio"]

    def test_lines_and_commas(self):
        assert parse_pasted_words("casa, sol\nrio\n\n luz ") == ["casa", "sol", "rio", "luz"]

    def test_empty(self):
        assert parse_pasted_words("") == []
        assert parse_pasted_words(None) == []


class TestLoadWordFile:
    def test_text_file(self, tmp_path):
        path = tmp_path / "palavras.txt"
        path.write_text("casa\n\n  sol \nrio\n", encoding="utf-8")
        assert load_word_file(str(path)) == ["casa", "sol", "rio"]

    def test_latin1_file(self, tmp_path):
        path = tmp_path / "palavras.txt"
        path.write_bytes("manhã\nação\n".encode("latin-1"))
        assert load_word_file(str(path)) == ["manhã", "ação"]

    def test_json_file(self, tmp_path):
        path = tmp_path / "palavras.json"
        path.write_text(json.dumps({"words": ["casa", "sol"]}), encoding="utf-8")
        assert load_word_file(str(path)) == ["casa", "sol"]

    def test_json_without_words(self, tmp_path):
        path = tmp_path / "palavras.json"
        path.write_text(json.dumps({"x": 1}), encoding="utf-8")
        with pytest.raises(RuntimeError):
            load_word_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuntimeError):
            load_word_file(str(tmp_path / "nope.txt"))
