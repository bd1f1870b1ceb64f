"""CLI entry point to generate the Strategic Growth Plan from a saved session."""

import argparse
import json
from pathlib import Path

from revenue_architect.logging_config import configure_logging
from revenue_architect.report import generate_report, prepare_report
from revenue_architect.session import Session


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Revenue Architect — Strategic Growth Plan generator",
    )
    parser.add_argument(
        "--session",
        type=Path,
        required=True,
        help="Session JSON file saved by run_interview.py",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("reports"),
        help="Directory for the markdown report and its data",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the deterministic inputs, do not call the model",
    )
    args = parser.parse_args()

    configure_logging()
    session = Session.model_validate_json(args.session.read_text(encoding="utf-8"))

    print("=" * 60)
    print("Revenue Architect — Strategic Growth Plan")
    print("=" * 60)

    if args.dry_run:
        inputs = prepare_report(session)
        print(json.dumps(inputs.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return

    result = generate_report(session)
    inputs = result.inputs
    print(f"\nStage: {inputs.stage} ({inputs.stage_label or 'no benchmarks'})")
    print(f"Feasibility flags: {len(inputs.feasibility_flags)}")
    for flag in inputs.feasibility_flags:
        print(f"  - [{flag.severity.upper()}] {flag.issue}")

    args.output_dir.mkdir(parents=True, exist_ok=True)
    data_path = args.output_dir / f"{result.filename}.json"
    data_path.write_text(
        json.dumps(result.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8"
    )

    if result.report is None:
        print("\nReport generation failed; deterministic data saved to", data_path)
        return

    report_path = args.output_dir / f"{result.filename}.md"
    report_path.write_text(result.report, encoding="utf-8")
    print(f"\nReport written to {report_path}")
    print(f"Chart and dashboard data written to {data_path}")


if __name__ == "__main__":
    main()
