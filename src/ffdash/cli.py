"""Command-line interface for lineup optimisation and league efficiency reports."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from ffdash.analytics import analyze_team_weeks, summarize_managers
from ffdash.config import SlotModel, SlotModelProfile, get_slot_model, iter_slot_models
from ffdash.ingest import IngestReport, load_roster_csv, load_roster_json, load_team_weeks_json
from ffdash.models import RosterPlayer
from ffdash.optimizer import (
    build_actual_lineup,
    compute_bench_impact,
    compute_efficiency,
    compute_optimal_lineup,
)
from ffdash.schemas import (
    BenchImpactResponse,
    EfficiencyResponse,
    LineupAssignmentResponse,
    ManagerScoreResponse,
    TeamWeekAnalysisResponse,
)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--slots",
        default="STANDARD",
        help="Preset slot model ({})".format(", ".join(model.name for model in iter_slot_models())),
    )
    parser.add_argument("--slots-file", type=Path, default=None, help="Load slot model JSON profile")
    parser.add_argument("--save-slots", type=Path, default=None, help="Save the resolved slot model JSON")
    parser.add_argument(
        "--solver",
        choices=("matching", "cbc", "highs"),
        default=None,
        help="Assignment backend (defaults to FFDASH_SOLVER or matching)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def _add_roster_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("roster", type=Path, help="Roster JSON or CSV file")
    parser.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for roster CSV columns (e.g., points=Actual Pts)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ffdash", description="Fantasy lineup efficiency tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    optimal = subparsers.add_parser("optimal", help="Compute the optimal lineup for a roster")
    _add_roster_arguments(optimal)
    _add_common_arguments(optimal)
    optimal.add_argument(
        "--strict",
        action="store_true",
        help="Fail on malformed roster records instead of benching them",
    )

    efficiency = subparsers.add_parser("efficiency", help="Compare the played lineup with the optimum")
    _add_roster_arguments(efficiency)
    _add_common_arguments(efficiency)

    bench = subparsers.add_parser("bench", help="List bench players who outscored a starter")
    _add_roster_arguments(bench)
    _add_common_arguments(bench)

    league = subparsers.add_parser("league", help="Score every manager across team-weeks")
    league.add_argument("team_weeks", type=Path, help="Team-weeks JSON file")
    _add_common_arguments(league)
    league.add_argument("--workers", type=int, default=None, help="Worker processes (FFDASH_MAX_WORKERS)")
    league.add_argument(
        "--weekly",
        action="store_true",
        help="Include the per team-week breakdown in the output",
    )
    return parser


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _resolve_slot_model(parser: argparse.ArgumentParser, args: argparse.Namespace) -> SlotModel:
    if args.slots_file:
        model = SlotModelProfile.load(args.slots_file).to_model()
    else:
        try:
            model = get_slot_model(args.slots)
        except KeyError as exc:
            parser.error(str(exc.args[0]))
    if args.save_slots:
        SlotModelProfile.from_model(model).save(args.save_slots)
        print(f"Saved slot model profile to {args.save_slots}", file=sys.stderr)
    return model


def _load_roster(args: argparse.Namespace, slot_model: SlotModel) -> Tuple[List[RosterPlayer], IngestReport]:
    if args.roster.suffix.lower() == ".csv":
        return load_roster_csv(
            args.roster,
            mapping=_parse_mapping(args.column) or None,
            slot_model=slot_model,
        )
    return load_roster_json(args.roster, slot_model=slot_model)


def _print_report(report: IngestReport) -> None:
    print(f"Loaded {report.accepted}/{report.total_entries} roster entries", file=sys.stderr)
    for label, items in (("Dropped", report.dropped), ("Warnings", report.warnings)):
        if items:
            preview = "; ".join(items[:5])
            more = len(items) - 5
            suffix = f", +{more} more" if more > 0 else ""
            print(f"{label}: {preview}{suffix}", file=sys.stderr)


def _emit(payload: Any, output: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2)
    if output is None:
        print(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    print(f"Wrote {output}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    slot_model = _resolve_slot_model(parser, args)

    if args.command == "league":
        team_weeks, report = load_team_weeks_json(args.team_weeks, slot_model=slot_model)
        _print_report(report)
        analyses = analyze_team_weeks(team_weeks, slot_model, max_workers=args.workers, solver=args.solver)
        scores = summarize_managers(team_weeks, analyses)
        payload: Any = {"managers": [ManagerScoreResponse.from_result(score).model_dump(mode="json") for score in scores]}
        if args.weekly:
            payload["team_weeks"] = [
                TeamWeekAnalysisResponse.from_result(item).model_dump(mode="json") for item in analyses
            ]
        _emit(payload, args.output)
        return

    roster, report = _load_roster(args, slot_model)
    _print_report(report)

    if args.command == "optimal":
        lineup = compute_optimal_lineup(roster, slot_model, strict=args.strict, solver=args.solver)
        payload = LineupAssignmentResponse.from_result(lineup).model_dump(mode="json")
    elif args.command == "efficiency":
        actual = build_actual_lineup(roster, slot_model)
        efficiency = compute_efficiency(actual, roster, slot_model, solver=args.solver)
        payload = EfficiencyResponse.from_result(efficiency).model_dump(mode="json")
    else:
        impacts = compute_bench_impact(None, roster, slot_model)
        payload = [BenchImpactResponse.from_result(item).model_dump(mode="json") for item in impacts]
    _emit(payload, args.output)


if __name__ == "__main__":
    main()
