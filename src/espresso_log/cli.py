"""Command-line interface for espresso-log."""

import argparse
import json
import logging
import sys
from datetime import date

from espresso_log import __version__
from espresso_log.config import EspressoLogConfig
from espresso_log.drafts import BeanDraft, BeanStep, ShotDraft, ShotStep
from espresso_log.exceptions import EspressoLogError, PersistenceError, ValidationError
from espresso_log.schema import (
    Bean,
    Shot,
    format_grams,
    format_grind,
    format_ratio,
    format_seconds,
)
from espresso_log.storage import JsonFileKeyValueStore, RecordStore
from espresso_log.stores import BeanStore, ShotStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="espresso-log",
        description="Record coffee beans and espresso shots",
    )
    parser.add_argument(
        "--data",
        help="Path to the data file (default: ESPRESSO_LOG_DATA_PATH env var)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"espresso-log {__version__}",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    beans = commands.add_parser("beans", help="Manage coffee beans").add_subparsers(
        dest="action", required=True
    )
    beans.add_parser("list", help="List beans")
    add_bean = beans.add_parser("add", help="Add a bean")
    add_bean.add_argument("--origin", required=True, help="Country or region")
    add_bean.add_argument("--roast-level", default="Medium", help="Light, Medium or Dark")
    add_bean.add_argument(
        "--roast-date",
        type=date.fromisoformat,
        help="Roast date as YYYY-MM-DD (default: today)",
    )
    add_bean.add_argument("--name", required=True, help="Name for this bean")
    delete_bean = beans.add_parser("delete", help="Delete a bean")
    delete_bean.add_argument("id", help="Bean id")

    shots = commands.add_parser("shots", help="Record and review shots").add_subparsers(
        dest="action", required=True
    )
    list_shots = shots.add_parser("list", help="Full shot history")
    list_shots.add_argument("--json", action="store_true", help="Output as JSON")
    recent = shots.add_parser("recent", help="Most recent shots")
    recent.add_argument("-n", type=int, help="Number of shots (default: ESPRESSO_LOG_RECENT_LIMIT)")
    add_shot = shots.add_parser("add", help="Record a shot")
    add_shot.add_argument("--bean", required=True, help="Bean id")
    add_shot.add_argument("--grind", type=float, default=5.0, help="Grind setting 1.0-10.0")
    add_shot.add_argument("--dose", required=True, help="Dose in grams")
    add_shot.add_argument("--yield", dest="yield_", required=True, help="Yield in grams")
    add_shot.add_argument("--time", type=float, required=True, help="Shot time in seconds")
    add_shot.add_argument("--notes", default="", help="Taste notes")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)
    config = EspressoLogConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    def warn(error: PersistenceError) -> None:
        print(f"Warning: could not access saved data ({error})", file=sys.stderr)

    records = RecordStore(JsonFileKeyValueStore(args.data or config.data_path), on_error=warn)

    try:
        if args.command == "beans":
            return _beans(args, BeanStore(records))
        return _shots(args, BeanStore(records), ShotStore(records), config)
    except EspressoLogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _beans(args, beans: BeanStore) -> int:
    if args.action == "list":
        if not len(beans):
            print("No beans added yet")
        for bean in beans.all():
            _print_bean(bean)
        return 0

    if args.action == "delete":
        if not beans.delete(args.id):
            raise EspressoLogError(f"No bean with id {args.id}")
        return 0

    draft = BeanDraft(beans)
    draft.origin = args.origin
    draft.roast_level = args.roast_level
    if args.roast_date:
        draft.roast_date = args.roast_date
    draft.name = args.name
    _walk_to(draft, BeanStep.NAME)
    result = draft.finish()
    if isinstance(result, ValidationError):
        raise result
    _print_bean(result)
    return 0


def _shots(args, beans: BeanStore, shots: ShotStore, config: EspressoLogConfig) -> int:
    if args.action == "list":
        if args.json:
            print(json.dumps([shot.model_dump(mode="json", by_alias=True) for shot in shots.all()], indent=2))
            return 0
        _print_shots(shots.all())
        return 0

    if args.action == "recent":
        _print_shots(shots.recent(args.n if args.n is not None else config.recent_limit))
        return 0

    bean = beans.get(args.bean)
    if bean is None:
        raise EspressoLogError(f"No bean with id {args.bean}")

    with ShotDraft(beans, shots) as draft:
        draft.select_bean(bean)
        draft.grind_setting = args.grind
        draft.dose = args.dose
        draft.set_shot_time(args.time)
        draft.yield_ = args.yield_
        draft.taste_notes = args.notes
        _walk_to(draft, ShotStep.TASTE_NOTES)
        result = draft.finish()

    if isinstance(result, ValidationError):
        raise result
    _print_shot(result)
    return 0


def _walk_to(draft, last_step) -> None:
    """Advance a filled-in draft to its last step, naming the field that blocks it."""
    while draft.step is not last_step:
        if not draft.advance():
            raise ValidationError(draft.step.name.lower(), "missing or invalid")


def _print_bean(bean: Bean) -> None:
    today = date.today()
    print(
        f"  {bean.id}  {bean.name} ({bean.origin}, {bean.roast_level.value})"
        f"  {bean.days_since_roast(today)} days old, {bean.freshness(today).value}"
    )


def _print_shots(shots) -> None:
    if not shots:
        print("No shots recorded yet")
        return
    for shot in shots:
        _print_shot(shot)


def _print_shot(shot: Shot) -> None:
    """Print a shot in human-readable format."""
    print()
    print(f"  {shot.date:%Y-%m-%d %H:%M}  Ratio: {format_ratio(shot.extraction_ratio)}")
    fields = [
        ("Bean", shot.coffee_bean.name),
        ("Dose", format_grams(shot.dose)),
        ("Yield", format_grams(shot.yield_)),
        ("Time", format_seconds(shot.shot_time)),
        ("Grind", format_grind(shot.grind_setting)),
        ("Notes", shot.taste_notes),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<8} {display}")


if __name__ == "__main__":
    sys.exit(main())
