#!/usr/bin/env python3
"""Render Snake Arena replays to animated GIFs.

Takes either a single replay JSON or a directory of
snake_arena_<game_id>.json files, and writes one GIF per replay with
a matching basename.

Usage examples:

    python -m snake_arena.cli.render_replay completed_games/snake_arena_<id>.json

    python -m snake_arena.cli.render_replay completed_games \
        --output-dir completed_games_gifs --limit 5 --overwrite
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from snake_arena.services.replay import load_replay
from snake_arena.services.replay_renderer import DEFAULT_FPS, DEFAULT_SCALE, ReplayRenderer


logger = logging.getLogger(__name__)


def iter_replay_files(source: Path) -> List[Path]:
    """Return the replay file itself, or a sorted list of replays in a directory."""
    if source.is_file():
        return [source]
    return sorted(source.glob("snake_arena_*.json"))


def process_replay(
    json_path: Path,
    output_dir: Path,
    renderer: ReplayRenderer,
    overwrite: bool = False,
    max_frames: Optional[int] = None,
) -> str:
    """Render a single replay JSON.

    Returns a status string: "ok", "skipped", or "failed".
    """
    output_path = output_dir / f"{json_path.stem}.gif"

    if output_path.exists() and not overwrite:
        logger.info("Skipping %s (GIF already exists)", json_path.name)
        return "skipped"

    try:
        replay_data = load_replay(str(json_path))
        renderer.generate_gif(replay_data, str(output_path), max_frames=max_frames)
        logger.info("Rendered %s", output_path)
        return "ok"
    except (OSError, ValueError, KeyError) as exc:
        logger.exception("Failed to render %s: %s", json_path, exc)
        return "failed"


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render Snake Arena replay JSON files to animated GIFs",
    )
    parser.add_argument(
        "source",
        type=str,
        help="A replay JSON file or a directory containing snake_arena_*.json",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory to write GIF files (default: next to the replays)",
    )
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help=f"GIF frame rate (default: {DEFAULT_FPS})")
    parser.add_argument(
        "--scale",
        type=float,
        default=DEFAULT_SCALE,
        help=f"Image pixels per field pixel (default: {DEFAULT_SCALE})",
    )
    parser.add_argument("--max-frames", type=int, default=None, help="Stop each GIF after this many frames")
    parser.add_argument("--limit", type=int, help="Optional maximum number of replays to process")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Re-render even if an output file already exists",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    source = Path(args.source).resolve()
    if not source.exists():
        raise SystemExit(f"Replay source does not exist: {source}")

    replay_files = iter_replay_files(source)
    if args.limit is not None:
        replay_files = replay_files[: args.limit]

    if not replay_files:
        logger.info("No replay JSON files found under %s", source)
        return

    output_dir = Path(args.output_dir).resolve() if args.output_dir else replay_files[0].parent
    output_dir.mkdir(parents=True, exist_ok=True)

    renderer = ReplayRenderer(scale=args.scale, fps=args.fps)
    counts = {"ok": 0, "skipped": 0, "failed": 0}

    for idx, json_path in enumerate(replay_files, start=1):
        logger.info("[%d/%d] Processing %s", idx, len(replay_files), json_path.name)
        status = process_replay(json_path, output_dir, renderer, args.overwrite, args.max_frames)
        counts[status] += 1

    logger.info(
        "Done. ok=%d, skipped=%d, failed=%d",
        counts["ok"],
        counts["skipped"],
        counts["failed"],
    )


if __name__ == "__main__":
    main()
