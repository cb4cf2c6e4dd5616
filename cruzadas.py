# -*- coding: utf-8 -*-
"""Palavras cruzadas word placer.

Anchors one word on the center cell, then chains further words that cross
the previous placement with alternating orientation. Includes a seeded
PRNG, two adjacency policies, loaders and PDF output.
"""

from __future__ import annotations

import json
import logging
import math
import os
import random
import unicodedata
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas


logger = logging.getLogger("cruzadas")


HORIZONTAL = "horizontal"
VERTICAL = "vertical"

DEFAULT_GRID_SIZE = 30
DEFAULT_MIN_WORDS = 2
DEFAULT_MAX_WORDS = 15
DEFAULT_MAX_ATTEMPTS = 100
MIN_WORDS_FLOOR = 2

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MASK32 = 0xFFFFFFFF

DEFAULT_WORDS = [
    "casa", "computador", "livro", "sol", "mesa", "janela", "porta", "carro",
    "amigo", "floresta", "rio", "luz", "tempo", "caminho", "sorriso", "brasil",
    "noite", "tarde", "manhã", "cidade", "praia", "montanha", "vila", "cachorro",
    "gato", "festa", "musica", "vento", "chuva", "neve",
]


# -----------------------------------------------------------------------------
# Randomness
# -----------------------------------------------------------------------------
def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def hash_seed(text: str) -> int:
    """FNV-1a over the UTF-16 code units of ``text``, as an unsigned 32-bit int."""
    h = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = _imul(h, FNV_PRIME)
    return h


def mulberry32(seed: int) -> Callable[[], float]:
    state = seed & MASK32

    def rand() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / 4294967296

    return rand


def seed_text(seed: Union[str, int, float, bool]) -> str:
    """Text form of a seed, spelled the way a JS ``String(seed)`` would."""
    if isinstance(seed, bool):
        return "true" if seed else "false"
    if isinstance(seed, float):
        if math.isnan(seed):
            return "NaN"
        if math.isinf(seed):
            return "Infinity" if seed > 0 else "-Infinity"
        if seed.is_integer() and abs(seed) < 1e21:
            return str(int(seed))
    return str(seed)


class RandomSource:
    """Uniform [0, 1) source. Seeded sources replay the same sequence."""

    def __init__(self, seed: Optional[Union[str, int, float, bool]] = None) -> None:
        self.seed = seed
        text = None if seed is None else seed_text(seed)
        if not text:
            self.seeded = False
            self._next = random.Random().random
        else:
            self.seeded = True
            self._next = mulberry32(hash_seed(text))

    def __call__(self) -> float:
        return self._next()


def seeded_shuffle(items: Sequence, rand: Callable[[], float]) -> List:
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(math.floor(rand() * (i + 1)))
        out[i], out[j] = out[j], out[i]
    return out


# -----------------------------------------------------------------------------
# Word normalization and loading
# -----------------------------------------------------------------------------
def to_upper(text: str) -> str:
    # NFC keeps "Ã" as one cell instead of "A" + combining tilde.
    return unicodedata.normalize("NFC", text).upper()


def normalize_words(raw, grid_size: int) -> List[str]:
    if isinstance(raw, dict):
        raw = raw.get("words")
    if not isinstance(raw, (list, tuple)):
        return []
    out: List[str] = []
    seen = set()
    for item in raw:
        if item is None:
            continue
        word = to_upper(str(item).strip())
        if not word or len(word) > grid_size:
            continue
        if word in seen:
            continue
        seen.add(word)
        out.append(word)
    return out


def _read_text(path: str) -> str:
    for enc in ("utf-8", "latin-1"):
        try:
            with open(path, "r", encoding=enc) as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except OSError as e:
            raise RuntimeError(f"Unable to read {path}: {e}") from e
    raise RuntimeError(f"Unable to decode {path}")


def parse_pasted_words(text: str) -> List[str]:
    """Accept a JSON list / {"words": [...]} or plain words split by lines or commas."""
    text = (text or "").strip()
    if not text:
        return []
    if text[0] in "[{":
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict):
            data = data.get("words")
        if isinstance(data, list):
            return [str(w) for w in data if w is not None]
    words: List[str] = []
    for line in text.splitlines():
        for part in line.split(","):
            part = part.strip()
            if part:
                words.append(part)
    return words


def load_word_file(path: str) -> List[str]:
    data = _read_text(path)
    if path.lower().endswith(".json"):
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Invalid JSON dictionary {path}: {e}") from e
        if isinstance(parsed, dict):
            parsed = parsed.get("words")
        if not isinstance(parsed, list):
            raise RuntimeError(f"No word list found in {path}")
        return [str(w) for w in parsed if w is not None]
    return [line.strip() for line in data.splitlines() if line.strip()]


# -----------------------------------------------------------------------------
# Grid and records
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PlacementRecord:
    word: str
    orientation: str  # HORIZONTAL | VERTICAL
    start: Tuple[int, int]  # (row, col)
    positions: Tuple[Tuple[str, int, int], ...]  # (char, row, col)

    def cells(self) -> List[Tuple[int, int]]:
        return [(r, c) for _, r, c in self.positions]

    def to_dict(self) -> Dict:
        return {
            "word": self.word,
            "orientation": self.orientation,
            "start": {"row": self.start[0], "col": self.start[1]},
            "positions": [{"char": ch, "row": r, "col": c} for ch, r, c in self.positions],
        }


class Grid:
    def __init__(self, size: int) -> None:
        self.size = size
        self.cells: List[List[Optional[str]]] = [[None] * size for _ in range(size)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, row: int, col: int) -> Optional[str]:
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def set_letter(self, row: int, col: int, letter: str) -> bool:
        if not self.in_bounds(row, col):
            return False
        current = self.cells[row][col]
        if current is not None and current != letter:
            return False
        self.cells[row][col] = letter
        return True

    def filled(self) -> int:
        return sum(1 for row in self.cells for ch in row if ch is not None)

    def to_json(self) -> Dict:
        return {"size": self.size, "rows": [[ch or "" for ch in row] for row in self.cells]}


def run_cells(length: int, row: int, col: int, orientation: str) -> List[Tuple[int, int]]:
    if orientation == HORIZONTAL:
        return [(row, col + i) for i in range(length)]
    return [(row + i, col) for i in range(length)]


# -----------------------------------------------------------------------------
# Placement policies
# -----------------------------------------------------------------------------
class PlacementPolicy:
    name = "base"

    def is_legal(self, grid: Grid, word: str, row: int, col: int, orientation: str) -> bool:
        raise NotImplementedError

    @staticmethod
    def _fits(grid: Grid, word: str, cells: List[Tuple[int, int]]) -> bool:
        for (r, c), ch in zip(cells, word):
            if not grid.in_bounds(r, c):
                return False
            current = grid.get(r, c)
            if current is not None and current != ch:
                return False
        return True


class BlanketPolicy(PlacementPolicy):
    """All eight neighbours of every run cell must be empty.

    Crossing cells only exempt the two neighbours that lie across the run,
    which is where the crossed word continues.
    """

    name = "blanket"

    def is_legal(self, grid: Grid, word: str, row: int, col: int, orientation: str) -> bool:
        cells = run_cells(len(word), row, col, orientation)
        if not self._fits(grid, word, cells):
            return False
        in_run = set(cells)
        for r, c in cells:
            is_cross = grid.get(r, c) is not None
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = r + dr, c + dc
                    if not grid.in_bounds(nr, nc) or (nr, nc) in in_run:
                        continue
                    if is_cross:
                        if orientation == HORIZONTAL and dc == 0:
                            continue
                        if orientation == VERTICAL and dr == 0:
                            continue
                    if grid.get(nr, nc) is not None:
                        return False
        return True


class SentinelPolicy(PlacementPolicy):
    """Orthogonal rules with empty end cells.

    Non-crossing cells need empty neighbours across the run, crossing cells
    are free on that axis, the cells just before and after the run must be
    empty, and two occupied cells in a row mean the run overlaps a word.
    """

    name = "sentinel"

    def is_legal(self, grid: Grid, word: str, row: int, col: int, orientation: str) -> bool:
        cells = run_cells(len(word), row, col, orientation)
        if not self._fits(grid, word, cells):
            return False
        dr, dc = (0, 1) if orientation == HORIZONTAL else (1, 0)
        for r, c in (cells[0][0] - dr, cells[0][1] - dc), (cells[-1][0] + dr, cells[-1][1] + dc):
            if grid.get(r, c) is not None:
                return False
        prev_occupied = False
        for r, c in cells:
            occupied = grid.get(r, c) is not None
            if occupied and prev_occupied:
                return False
            prev_occupied = occupied
            if occupied:
                continue
            if grid.get(r - dc, c - dr) is not None or grid.get(r + dc, c + dr) is not None:
                return False
        return True


POLICIES: Dict[str, PlacementPolicy] = {
    BlanketPolicy.name: BlanketPolicy(),
    SentinelPolicy.name: SentinelPolicy(),
}


def resolve_policy(policy: Union[str, PlacementPolicy, None]) -> PlacementPolicy:
    if policy is None:
        return POLICIES[SentinelPolicy.name]
    if isinstance(policy, PlacementPolicy):
        return policy
    found = POLICIES.get(str(policy).strip().lower())
    if found is None:
        raise ValueError(f"Unknown placement policy: {policy!r} (expected one of {sorted(POLICIES)})")
    return found


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
def _env_int(environ, key: str, default: int) -> int:
    raw = (environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer)", key, raw)
        return default


@dataclass
class PlacerConfig:
    grid_size: int = DEFAULT_GRID_SIZE
    center: Optional[Tuple[int, int]] = None
    min_words: int = DEFAULT_MIN_WORDS
    max_words: int = DEFAULT_MAX_WORDS
    max_attempts_per_word: int = DEFAULT_MAX_ATTEMPTS
    seed: Optional[str] = None
    policy: str = SentinelPolicy.name
    min_words_floor: int = MIN_WORDS_FLOOR

    @classmethod
    def from_env(cls, environ=None) -> "PlacerConfig":
        env = os.environ if environ is None else environ
        seed = (env.get("CRUZADAS_SEED") or "").strip() or None
        return cls(
            grid_size=_env_int(env, "CRUZADAS_GRID_SIZE", DEFAULT_GRID_SIZE),
            min_words=_env_int(env, "CRUZADAS_MIN_WORDS", DEFAULT_MIN_WORDS),
            max_words=_env_int(env, "CRUZADAS_MAX_WORDS", DEFAULT_MAX_WORDS),
            max_attempts_per_word=_env_int(env, "CRUZADAS_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            seed=seed,
            policy=(env.get("CRUZADAS_POLICY") or SentinelPolicy.name).strip(),
        )


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------
class WordPlacer:
    """Places words crossword-style, each one crossing the previous placement."""

    def __init__(
        self,
        grid_size: int = DEFAULT_GRID_SIZE,
        center: Optional[Tuple[int, int]] = None,
        min_words: int = DEFAULT_MIN_WORDS,
        max_words: int = DEFAULT_MAX_WORDS,
        max_attempts_per_word: int = DEFAULT_MAX_ATTEMPTS,
        dictionary=None,
        seed: Optional[Union[str, int]] = None,
        policy: Union[str, PlacementPolicy, None] = None,
        min_words_floor: int = MIN_WORDS_FLOOR,
        log_fn: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.grid_size = max(1, int(grid_size))
        mid = self.grid_size // 2
        if isinstance(center, dict):
            center = (center["row"], center["col"])
        self.center = (int(center[0]), int(center[1])) if center is not None else (mid, mid)
        self.min_words = int(min_words)
        self.max_words = int(max_words)
        self.min_words_floor = max(1, int(min_words_floor))
        self.max_attempts_per_word = max(1, int(max_attempts_per_word))
        self.policy = resolve_policy(policy)
        self.seed = seed
        self.rand = RandomSource(seed)
        self.log_fn = log_fn
        self.raw_dictionary: List[str] = []
        self.reset()
        if dictionary is not None:
            self.load_dictionary(dictionary)

    @classmethod
    def from_config(cls, config: PlacerConfig, dictionary=None, log_fn=None) -> "WordPlacer":
        return cls(
            grid_size=config.grid_size,
            center=config.center,
            min_words=config.min_words,
            max_words=config.max_words,
            max_attempts_per_word=config.max_attempts_per_word,
            dictionary=dictionary,
            seed=config.seed,
            policy=config.policy,
            min_words_floor=config.min_words_floor,
            log_fn=log_fn,
        )

    def reset(self) -> None:
        self.grid = Grid(self.grid_size)
        self.placed: List[PlacementRecord] = []
        self.used_words = set()
        self.logs: List[str] = []

    def log(self, msg: str) -> None:
        self.logs.append(msg)
        logger.info(msg)
        if self.log_fn is not None:
            self.log_fn(msg)

    def load_dictionary(self, raw) -> List[str]:
        self.raw_dictionary = normalize_words(raw, self.grid_size)
        return list(self.raw_dictionary)

    @property
    def dictionary(self) -> List[str]:
        return list(self.raw_dictionary)

    def pick_n(self) -> int:
        n_min = max(self.min_words_floor, self.min_words)
        n_max = max(n_min, self.max_words)
        return n_min + int(math.floor(self.rand() * (n_max - n_min + 1)))

    def place_words(self) -> List[PlacementRecord]:
        words = self.dictionary
        if not words:
            self.log("Empty dictionary.")
            return list(self.placed)

        n = self.pick_n()
        self.log(f"Target: place {n} word(s). Dictionary size: {len(words)}.")
        pool = seeded_shuffle(words, self.rand)

        first = None
        for word in pool:
            if self.place_first_word(word):
                first = word
                break
        if first is None:
            self.log("Could not place a first word on the center cell.")
            return list(self.placed)

        while len(self.placed) < n:
            if not self.try_place_next_word(pool):
                self.log("No more words fit without breaking the placement rules. Stopping.")
                break
        return list(self.placed)

    def _commit(self, word: str, row: int, col: int, orientation: str) -> PlacementRecord:
        positions = []
        for (r, c), ch in zip(run_cells(len(word), row, col, orientation), word):
            if not self.grid.set_letter(r, c, ch):
                raise RuntimeError(f"Cell ({r},{c}) already holds {self.grid.get(r, c)!r}, cannot write {ch!r}")
            positions.append((ch, r, c))
        record = PlacementRecord(word=word, orientation=orientation, start=(row, col), positions=tuple(positions))
        self.placed.append(record)
        self.used_words.add(word)
        return record

    def place_first_word(self, word: str) -> bool:
        length = len(word)
        mid = (length - 1) // 2
        orientation = HORIZONTAL if self.rand() < 0.5 else VERTICAL
        center_row, center_col = self.center
        if orientation == HORIZONTAL:
            row, col = center_row, center_col - mid
            if col < 0 or col + length - 1 >= self.grid_size:
                return False
        else:
            row, col = center_row - mid, center_col
            if row < 0 or row + length - 1 >= self.grid_size:
                return False
        if not self.policy.is_legal(self.grid, word, row, col, orientation):
            return False
        self._commit(word, row, col, orientation)
        self.log(f"First word: {word} ({orientation}), middle on cell ({center_row},{center_col}).")
        return True

    def try_place_next_word(self, pool: Sequence[str]) -> bool:
        if not self.placed:
            return False
        last = self.placed[-1]
        next_ori = VERTICAL if last.orientation == HORIZONTAL else HORIZONTAL

        candidates = [w for w in pool if w not in self.used_words and len(w) <= self.grid_size]
        if not candidates:
            return False
        bag = seeded_shuffle(candidates, self.rand)

        last_map: Dict[str, List[Tuple[int, int]]] = {}
        for ch, r, c in last.positions:
            last_map.setdefault(ch, []).append((r, c))

        attempts = 0
        while attempts < self.max_attempts_per_word and bag:
            cand = bag.pop()
            attempts += 1

            matches = []
            for j, ch in enumerate(cand):
                for pos in last_map.get(ch, []):
                    matches.append((j, pos))

            for j, (cross_row, cross_col) in seeded_shuffle(matches, self.rand):
                if next_ori == HORIZONTAL:
                    row, col = cross_row, cross_col - j
                    if col < 0 or col + len(cand) - 1 >= self.grid_size:
                        continue
                else:
                    row, col = cross_row - j, cross_col
                    if row < 0 or row + len(cand) - 1 >= self.grid_size:
                        continue
                if not self.policy.is_legal(self.grid, cand, row, col, next_ori):
                    continue
                self._commit(cand, row, col, next_ori)
                self.log(
                    f"Placed: {cand} ({next_ori}) crossing '{last.word}' at ({cross_row},{cross_col}) "
                    f"[letter '{cand[j]}']."
                )
                return True

        self.log(f"Could not fit the next word after {attempts} attempt(s).")
        return False

    def generate(self, dictionary=None) -> List[PlacementRecord]:
        """Fresh run: reset, optionally reload the dictionary, place words."""
        self.reset()
        if dictionary is not None:
            self.load_dictionary(dictionary)
        return self.place_words()


# -----------------------------------------------------------------------------
# Outputs for collaborators
# -----------------------------------------------------------------------------
def placements_at(placements: Sequence[PlacementRecord], row: int, col: int) -> List[PlacementRecord]:
    return [p for p in placements if (row, col) in p.cells()]


def check_answer(record: PlacementRecord, guess: str) -> bool:
    return to_upper((guess or "").strip()) == record.word


def placements_table(placements: Sequence[PlacementRecord]) -> List[Dict]:
    rows = []
    for i, p in enumerate(placements):
        rows.append({
            "index": i,
            "word": p.word,
            "orientation": p.orientation,
            "row": p.start[0],
            "col": p.start[1],
            "length": len(p.word),
        })
    return rows


def grid_to_text(grid: Grid, empty: str = ".") -> str:
    """Render only the rows/columns that hold letters."""
    rows = [r for r in range(grid.size) if any(grid.cells[r])]
    cols = [c for c in range(grid.size) if any(grid.cells[r][c] for r in range(grid.size))]
    if not rows:
        return ""
    lines = []
    for r in range(rows[0], rows[-1] + 1):
        lines.append(" ".join(grid.cells[r][c] or empty for c in range(cols[0], cols[-1] + 1)))
    return "\n".join(lines)


def draw_pdf(placer: WordPlacer, out_path: str, show_letters: bool) -> None:
    grid = placer.grid
    c = canvas.Canvas(out_path, pagesize=A4)
    page_w, page_h = A4
    margin = 12 * mm
    cell_size = min((page_w - 2 * margin) / grid.size, (page_h - 2 * margin) / grid.size)
    origin_x = margin
    origin_y = page_h - margin - cell_size * grid.size

    c.setLineWidth(0.5)
    for r in range(grid.size):
        for col in range(grid.size):
            ch = grid.get(r, col)
            if ch is None:
                continue
            cx = origin_x + col * cell_size
            cy = origin_y + (grid.size - 1 - r) * cell_size
            c.rect(cx, cy, cell_size, cell_size)
            if show_letters:
                c.setFont("Helvetica-Bold", max(5, cell_size * 0.6))
                c.drawCentredString(cx + cell_size / 2, cy + cell_size * 0.3, ch)

    # Number each word at its start cell
    c.setFont("Helvetica", max(3, cell_size * 0.25))
    for i, p in enumerate(placer.placed, start=1):
        r, col = p.start
        cx = origin_x + col * cell_size
        cy = origin_y + (grid.size - 1 - r) * cell_size
        c.drawString(cx + 1, cy + cell_size - max(3, cell_size * 0.25), str(i))

    center_row, center_col = placer.center
    c.setStrokeColorRGB(0.13, 0.83, 0.93)
    c.setLineWidth(1.5)
    c.rect(
        origin_x + center_col * cell_size + 1.5,
        origin_y + (grid.size - 1 - center_row) * cell_size + 1.5,
        cell_size - 3,
        cell_size - 3,
    )
    c.showPage()
    c.save()
