"""Tests for the Streamlit game state (guesses, lives, uploads)."""

from unittest.mock import Mock, patch

import pytest

import streamlit_app
from cruzadas import PlacerConfig


class SessionState(dict):
    """Attribute-style dict standing in for st.session_state."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value


@pytest.fixture
def state():
    fake = SessionState()
    with patch.object(streamlit_app.st, "session_state", fake):
        streamlit_app.init_state()
        config = PlacerConfig(grid_size=9, min_words=2, max_words=2, seed="app")
        streamlit_app.generate(config, ["ABC", "XBY"])
        yield fake


class TestGenerate:
    def test_fresh_game(self, state):
        assert len(state.placer.placed) == 2
        assert state.lives == streamlit_app.START_LIVES
        assert state.solved == set()
        assert state.game_over is False
        assert state.active_index is None
        assert "Dictionary: 2 word(s)." in state.log

    def test_generate_resets_lost_game(self, state):
        for _ in range(3):
            streamlit_app.submit_guess(0, "ZZZ")
        assert state.game_over
        streamlit_app.generate(PlacerConfig(grid_size=9, min_words=2, max_words=2, seed="again"), ["ABC", "XBY"])
        assert state.game_over is False
        assert state.lives == streamlit_app.START_LIVES
        assert state.solved == set()


class TestSubmitGuess:
    def test_correct_guess_marks_solved(self, state):
        word = state.placer.placed[1].word
        assert streamlit_app.submit_guess(1, word.lower())
        assert state.solved == {1}
        assert state.lives == streamlit_app.START_LIVES
        assert state.active_index == 1

    def test_wrong_guess_costs_a_life(self, state):
        assert not streamlit_app.submit_guess(0, "ZZZ")
        assert state.lives == streamlit_app.START_LIVES - 1
        assert state.solved == set()
        assert state.game_over is False

    def test_third_wrong_guess_ends_game(self, state):
        for _ in range(3):
            streamlit_app.submit_guess(0, "ZZZ")
        assert state.lives == 0
        assert state.game_over is True
        assert state.log[-1] == "Game over."

    def test_guesses_after_game_over_ignored(self, state):
        for _ in range(3):
            streamlit_app.submit_guess(0, "ZZZ")
        word = state.placer.placed[0].word
        assert not streamlit_app.submit_guess(0, word)
        assert state.solved == set()
        assert state.lives == 0


class TestRenderGrid:
    def test_active_word_highlighted(self, state):
        streamlit_app.submit_guess(0, "ZZZ")
        html = streamlit_app.render_grid_html(state.placer, reveal=False)
        assert html.count("active") == len(state.placer.placed[0].word) + 1

    def test_hidden_until_solved(self, state):
        word = state.placer.placed[0].word
        hidden = streamlit_app.render_grid_html(state.placer, reveal=False)
        assert f">{word[0]}<" not in hidden
        streamlit_app.submit_guess(0, word)
        shown = streamlit_app.render_grid_html(state.placer, reveal=False)
        assert f">{word[-1]}</td>" in shown


class TestLoadUpload:
    def _upload(self, file_id, text):
        upload = Mock()
        upload.file_id = file_id
        upload.getvalue.return_value = text.encode("utf-8")
        return upload

    def test_new_upload_fills_words(self, state):
        assert streamlit_app.load_upload(self._upload("f1", "casa\nsol"))
        assert state.words_text == "casa\nsol"

    def test_same_upload_keeps_edits(self, state):
        upload = self._upload("f1", "casa\nsol")
        streamlit_app.load_upload(upload)
        state.words_text = "casa\nsol\nrio"
        assert not streamlit_app.load_upload(upload)
        assert state.words_text == "casa\nsol\nrio"

    def test_no_upload(self, state):
        before = state.words_text
        assert not streamlit_app.load_upload(None)
        assert state.words_text == before
