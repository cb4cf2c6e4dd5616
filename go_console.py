import argparse
import json
import logging
import os

from dotenv import load_dotenv

from cruzadas import (
    DEFAULT_WORDS,
    POLICIES,
    PlacerConfig,
    WordPlacer,
    draw_pdf,
    grid_to_text,
    load_word_file,
    placements_table,
)


def _print_summary(placer: WordPlacer, log_fn) -> None:
    for row in placements_table(placer.placed):
        log_fn(
            f"[{row['index'] + 1:02d}] {row['word']:<12} {row['orientation']:<10} "
            f"@ ({row['row']},{row['col']}) len={row['length']}"
        )


def run(
    words_path: str = None,
    config: PlacerConfig = None,
    outdir: str = "out",
    log_fn=None,
    grid_cb=None,
    write_pdf: bool = True,
) -> WordPlacer:
    base_log = log_fn
    if base_log is None:
        def base_log(msg: str) -> None:
            print(msg, flush=True)

    config = config or PlacerConfig.from_env()
    raw_words = load_word_file(words_path) if words_path else list(DEFAULT_WORDS)

    placer = WordPlacer.from_config(config, log_fn=base_log)
    placer.reset()
    cleaned = placer.load_dictionary(raw_words)
    base_log(
        f"RUN start seed={config.seed} grid={placer.grid_size} policy={placer.policy.name} "
        f"words={len(cleaned)}"
    )
    placer.place_words()

    if grid_cb:
        grid_cb(placer.grid)

    text = grid_to_text(placer.grid)
    if text:
        base_log(text)
    _print_summary(placer, base_log)

    os.makedirs(outdir, exist_ok=True)
    json_path = os.path.join(outdir, "grid.json")
    with open(json_path, "w", encoding="utf-8") as f:
        out = placer.grid.to_json()
        out["center"] = {"row": placer.center[0], "col": placer.center[1]}
        out["words"] = [p.to_dict() for p in placer.placed]
        out["logs"] = placer.logs
        f.write(json.dumps(out, ensure_ascii=False, indent=2))

    if write_pdf:
        draw_pdf(placer, os.path.join(outdir, "grid_blank.pdf"), show_letters=False)
        draw_pdf(placer, os.path.join(outdir, "grid_solution.pdf"), show_letters=True)

    base_log(f"DONE: placed={len(placer.placed)} filled_cells={placer.grid.filled()}")
    return placer


def main() -> None:
    # Load .env from current working directory if present
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("CRUZADAS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=[logging.FileHandler("cruzadas_debug.log", encoding="utf-8")],
    )
    env_config = PlacerConfig.from_env()

    parser = argparse.ArgumentParser(description="Palavras cruzadas - console")
    parser.add_argument("--input", default=os.environ.get("CRUZADAS_WORDS"), help="Word file (.txt or .json)")
    parser.add_argument("--outdir", default="out", help="Output directory")
    parser.add_argument("--seed", default=env_config.seed, help="Random seed (text or number)")
    parser.add_argument("--grid-size", type=int, default=env_config.grid_size)
    parser.add_argument("--min-words", type=int, default=env_config.min_words)
    parser.add_argument("--max-words", type=int, default=env_config.max_words)
    parser.add_argument("--max-attempts", type=int, default=env_config.max_attempts_per_word)
    parser.add_argument("--policy", choices=sorted(POLICIES), default=env_config.policy)
    parser.add_argument("--no-pdf", action="store_true", help="Only write grid.json")
    args = parser.parse_args()

    config = PlacerConfig(
        grid_size=args.grid_size,
        min_words=args.min_words,
        max_words=args.max_words,
        max_attempts_per_word=args.max_attempts,
        seed=args.seed,
        policy=args.policy,
    )
    run(args.input, config, outdir=args.outdir, write_pdf=not args.no_pdf)


if __name__ == "__main__":
    main()
