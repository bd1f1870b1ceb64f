"""CLI entry point to run a discovery interview in the terminal."""

import argparse
import json
from datetime import datetime
from pathlib import Path

from revenue_architect.config import settings
from revenue_architect.interview.context import SNAPSHOT_INIT
from revenue_architect.interview.graph import take_turn
from revenue_architect.interview.nodes import FINISH_CHOICES
from revenue_architect.logging_config import configure_logging
from revenue_architect.session import Session


def _print_turn(payload: dict) -> None:
    print("-" * 60)
    print(f"[{payload['current_phase']}] turn {payload['turn_count']} · "
          f"confidence {payload['confidence_state']['total']}%")
    print("-" * 60)
    print(payload["message"])
    print()
    for i, option in enumerate(payload["options"], 1):
        print(f"  {i}. {option['label']}  ({option['key']})")
    print()


def _read_choice(payload: dict) -> str:
    """A number picks a button; anything else is sent as free text."""
    while True:
        answer = input("> ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(payload["options"]):
            return payload["options"][int(answer) - 1]["key"]
        if answer and payload["allow_text"]:
            return answer
        print("Pick one of the options above.")


def _save(session_data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(session_data, ensure_ascii=False, indent=2), encoding="utf-8")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Revenue Architect — interactive discovery interview",
    )
    parser.add_argument("--website", type=str, default="", help="Company website URL")
    parser.add_argument("--description", type=str, default="", help="One-line company description")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to save the session (default: sessions_dir/<timestamp>.json)",
    )
    args = parser.parse_args()

    configure_logging()
    output = args.output or settings.sessions_dir / f"{datetime.now():%Y%m%d-%H%M%S}.json"

    print("=" * 60)
    print("Revenue Architect — Discovery Interview")
    print("=" * 60)

    result = take_turn(
        Session(),
        SNAPSHOT_INIT,
        website=args.website,
        description=args.description,
    )

    try:
        while True:
            payload = result.to_payload()
            _save(payload["session_data"], output)
            _print_turn(payload)
            choice = _read_choice(payload)
            result = take_turn(result.session, choice)
            if choice in FINISH_CHOICES:
                _save(result.to_payload()["session_data"], output)
                break
    except (KeyboardInterrupt, EOFError):
        print()

    print(f"\nSession saved to {output}")
    print(f"Generate the plan with: python scripts/generate_report.py --session {output}")


if __name__ == "__main__":
    main()
