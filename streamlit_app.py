from typing import List

import streamlit as st
from dotenv import load_dotenv

from cruzadas import (
    DEFAULT_WORDS,
    POLICIES,
    PlacerConfig,
    WordPlacer,
    check_answer,
    parse_pasted_words,
    placements_table,
)


START_LIVES = 3


def init_state() -> None:
    if "placer" not in st.session_state:
        st.session_state.placer = None
    if "words_text" not in st.session_state:
        st.session_state.words_text = "\n".join(DEFAULT_WORDS)
    if "solved" not in st.session_state:
        st.session_state.solved = set()
    if "lives" not in st.session_state:
        st.session_state.lives = START_LIVES
    if "game_over" not in st.session_state:
        st.session_state.game_over = False
    if "active_index" not in st.session_state:
        st.session_state.active_index = None
    if "upload_id" not in st.session_state:
        st.session_state.upload_id = None
    if "log" not in st.session_state:
        st.session_state.log = []


def log(msg: str) -> None:
    st.session_state.log.append(msg)


def generate(config: PlacerConfig, raw_words: List[str]) -> None:
    placer = WordPlacer.from_config(config, log_fn=log)
    placer.reset()
    cleaned = placer.load_dictionary(raw_words)
    log(f"Dictionary: {len(cleaned)} word(s).")
    placer.place_words()
    st.session_state.placer = placer
    st.session_state.solved = set()
    st.session_state.lives = START_LIVES
    st.session_state.game_over = False
    st.session_state.active_index = None


def submit_guess(index: int, guess: str) -> bool:
    placer = st.session_state.placer
    if placer is None or st.session_state.game_over:
        return False
    record = placer.placed[index]
    st.session_state.active_index = index
    if check_answer(record, guess):
        st.session_state.solved.add(index)
        log(f"Correct: #{index + 1}")
        return True
    st.session_state.lives -= 1
    log(f"Wrong: #{index + 1} (lives={st.session_state.lives})")
    if st.session_state.lives <= 0:
        st.session_state.game_over = True
        log("Game over.")
    return False


def load_upload(upload) -> bool:
    """Copy a newly uploaded file into the word box; a file already read is left alone."""
    if upload is None or upload.file_id == st.session_state.upload_id:
        return False
    st.session_state.upload_id = upload.file_id
    st.session_state.words_text = upload.getvalue().decode("utf-8", errors="replace")
    return True


def render_grid_html(placer: WordPlacer, reveal: bool) -> str:
    visible = set()
    for i in st.session_state.solved:
        visible.update(placer.placed[i].cells())
    active = set()
    if st.session_state.active_index is not None:
        active.update(placer.placed[st.session_state.active_index].cells())
    starts = {p.start: i + 1 for i, p in reversed(list(enumerate(placer.placed)))}
    cell_px = 24
    rows = []
    rows.append(
        "<style>"
        "table.grid{border-collapse:collapse;font-family:ui-monospace,monospace;font-size:13px}"
        "table.grid td{width:%dpx;height:%dpx;text-align:center;vertical-align:middle;position:relative}"
        "td.letter{border:1px solid #999;background:#fff;font-weight:bold}"
        "td.center{outline:2px solid rgba(34,211,238,.6)}"
        "td.active{background:#ffeaa7}"
        "td.letter sup{position:absolute;top:0;left:1px;font-size:8px;font-weight:normal}"
        "</style>" % (cell_px, cell_px)
    )
    rows.append("<table class='grid'>")
    grid = placer.grid
    for r in range(grid.size):
        rows.append("<tr>")
        for c in range(grid.size):
            ch = grid.get(r, c)
            cls = "letter" if ch else ""
            if (r, c) == placer.center:
                cls += " center"
            if (r, c) in active:
                cls += " active"
            label = f"<sup>{starts[(r, c)]}</sup>" if (r, c) in starts else ""
            shown = ch if ch and (reveal or (r, c) in visible) else ""
            rows.append(f"<td class='{cls.strip()}'>{label}{shown}</td>")
        rows.append("</tr>")
    rows.append("</table>")
    return "\n".join(rows)


def main() -> None:
    st.set_page_config(page_title="Palavras cruzadas", layout="wide")
    # Ensure .env is loaded when running via streamlit
    load_dotenv()
    init_state()
    defaults = PlacerConfig.from_env()

    st.title("Palavras cruzadas")

    with st.sidebar:
        grid_size = st.number_input("Grid size", 5, 60, min(max(defaults.grid_size, 5), 60), format="%d")
        c1, c2 = st.columns(2)
        with c1:
            min_words = st.number_input("Min words", 1, 50, min(max(defaults.min_words, 1), 50), format="%d")
        with c2:
            max_words = st.number_input("Max words", 1, 50, min(max(defaults.max_words, 1), 50), format="%d")
        seed = st.text_input("Seed (optional)", defaults.seed or "")
        policies = sorted(POLICIES)
        policy = st.selectbox(
            "Adjacency policy",
            policies,
            index=policies.index(defaults.policy) if defaults.policy in policies else 0,
        )
        upload = st.file_uploader("Dictionary (.txt / .json)", type=["txt", "json"])
        load_upload(upload)
        st.session_state.words_text = st.text_area("Words", st.session_state.words_text, height=200)

        if st.button("Generate"):
            st.session_state.log = []
            config = PlacerConfig(
                grid_size=int(grid_size),
                min_words=int(min_words),
                max_words=int(max_words),
                max_attempts_per_word=defaults.max_attempts_per_word,
                seed=seed.strip() or None,
                policy=policy,
            )
            generate(config, parse_pasted_words(st.session_state.words_text))
            st.rerun()

    placer = st.session_state.placer
    if placer is None:
        st.info("Pick the options on the left and press Generate.")
        return

    col1, col2 = st.columns([2, 1])
    with col1:
        st.subheader("Grid")
        reveal = st.session_state.game_over or len(st.session_state.solved) == len(placer.placed)
        st.markdown(render_grid_html(placer, reveal), unsafe_allow_html=True)

    with col2:
        st.subheader(f"Lives: {st.session_state.lives}")
        if st.session_state.game_over:
            st.error("Game over.")
        elif placer.placed and len(st.session_state.solved) == len(placer.placed):
            st.success("All words found!")
        for row in placements_table(placer.placed):
            i = row["index"]
            label = f"#{i + 1} {row['orientation']} ({row['length']} letters)"
            if i in st.session_state.solved:
                st.markdown(f"~~{label}~~ **{row['word']}**")
                continue
            with st.form(f"guess_{i}", clear_on_submit=True):
                guess = st.text_input(label, key=f"guess_input_{i}")
                if st.form_submit_button("Check", disabled=st.session_state.game_over):
                    submit_guess(i, guess)
                    st.rerun()

        st.markdown("---")
        st.subheader("Log")
        st.text_area(" ", value="\n".join(st.session_state.log), height=240)


if __name__ == "__main__":
    main()
