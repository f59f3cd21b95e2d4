#!/usr/bin/env python
"""Loudness + key/scale analysis of one audio file, printed as JSON.

Usage
-----
    # Whole file, default 9 common scale patterns
    python scripts/analyze_audio.py /path/to/master.wav

    # First 60 s only, all 24 scale patterns, debug logging
    python scripts/analyze_audio.py track.flac --duration 60 --all-scales -v

    # Write the record to a file
    python scripts/analyze_audio.py track.mp3 --output result.json

Exit codes
----------
    0  — success
    1  — file could not be found, is unsupported or failed to decode
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DEFAULT_CONFIG, FULL_SCALE_CATALOGUE_CONFIG  # noqa: E402
from ingestion.audio_engine import AudioAnalysisEngine  # noqa: E402

logger = logging.getLogger("analyze_audio")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="BS.1770-4 loudness and key/scale analysis")
    p.add_argument("path", help="Audio file (.wav .flac .mp3 .aiff .ogg .m4a .opus)")
    p.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Max seconds to load (default: whole file)",
    )
    p.add_argument(
        "--all-scales",
        action="store_true",
        help="Match all 24 scale patterns instead of the 9 common ones",
    )
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the JSON record here instead of stdout",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = FULL_SCALE_CATALOGUE_CONFIG if args.all_scales else DEFAULT_CONFIG
    engine = AudioAnalysisEngine(config)
    try:
        report = engine.analyze_file(args.path, duration=args.duration)
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        logger.error("%s", exc)
        return 1

    text = json.dumps(report.as_dict(), indent=2)
    if args.output is not None:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %s", args.output)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
