from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from journey_engine.config import EngineSettings, load_engine_settings
from journey_engine.replay import run_packs


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay recorded journey scenario packs and summarize mission outcomes.")
    parser.add_argument(
        "--packs",
        default=str(Path(__file__).resolve().parent / "scenarios"),
        help="Directory of *.json scenario packs.",
    )
    parser.add_argument("--output", help="Path to write the JSON report (stdout when omitted).")
    parser.add_argument("--settings", help="Optional JSON file with engine settings overrides.")
    parser.add_argument("--verbose", action="store_true", help="Log classification traces.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = load_engine_settings(args.settings) if args.settings else EngineSettings()
    report = run_packs(Path(args.packs), settings=settings)

    text = json.dumps(report, indent=2) + "\n"
    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
    else:
        print(text, end="")
    return 0 if report["summary_metrics"]["expectation_pass_rate"] == 1.0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
