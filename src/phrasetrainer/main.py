"""CLI entrypoint for the sentence practice app."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from .config import Settings, is_log_level, load_settings
from .models import Direction
from .service import TrainerService
from .session import SessionStatus

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
ServiceFactory = Callable[[Settings], TrainerService]
BACK_COMMANDS = {":back", ":b", "back"}
MENU_QUIT_COMMANDS = {"q"}
FLOW_EXIT_COMMANDS = {":quit", ":exit", ":q"}
MENU_BACK_COMMANDS = {"b"}

logger = logging.getLogger(__name__)


class QuitApp(Exception):
    """Signal immediate app exit from nested menu flows."""


def _service(settings: Settings) -> TrainerService:
    """Create app service backed by the configured database."""
    return TrainerService(db_path=settings.db_path)


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    defaults = load_settings()
    parser = argparse.ArgumentParser(prog="phrasetrainer", description="Sentence flashcard practice")
    parser.add_argument("command", nargs="?", default="play", choices=["play"])
    parser.add_argument("--data-dir", type=Path, default=None, help="directory holding progress.db")
    parser.add_argument("--log-level", default=None, help="logging level, e.g. INFO or DEBUG")
    args = parser.parse_args(argv)
    if args.log_level is not None and not is_log_level(args.log_level):
        parser.error(f"unknown log level: {args.log_level}")

    settings = Settings(
        data_dir=args.data_dir if args.data_dir is not None else defaults.data_dir,
        log_level=(args.log_level or defaults.log_level).upper(),
    )
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return play_shell(settings=settings)


def play_shell(
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    settings: Settings | None = None,
    service_factory: ServiceFactory = _service,
) -> int:
    """Run persistent menu-driven shell."""
    service = service_factory(settings or load_settings())
    direction = Direction.SOURCE_TO_TARGET
    try:
        while True:
            print_fn("\n=== Sentence Practice ===")
            print_fn(f"Direction: {_direction_label(direction)}")
            print_fn("1) Practice a plan")
            print_fn("2) Switch direction")
            print_fn("3) Status")
            print_fn("4) Export progress")
            print_fn("5) Import progress")
            print_fn("q) Quit")
            choice = input_fn("Choose: ").strip().lower()

            if choice == "1":
                _plan_flow(service, direction, input_fn, print_fn)
            elif choice == "2":
                direction = direction.flipped()
                print_fn(f"Direction is now {_direction_label(direction)}.")
            elif choice == "3":
                _status_flow(service, print_fn)
            elif choice == "4":
                _export_flow(service, input_fn, print_fn)
            elif choice == "5":
                _import_flow(service, input_fn, print_fn)
            elif choice in MENU_QUIT_COMMANDS:
                return 0
            else:
                print_fn("Invalid choice.")
    except QuitApp:
        return 0
    finally:
        service.close()


def _direction_label(direction: Direction) -> str:
    if direction is Direction.SOURCE_TO_TARGET:
        return "English -> Portuguese"
    return "Portuguese -> English"


def _plan_flow(service: TrainerService, direction: Direction, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Choose a study plan and run a session for it."""
    overview = service.plan_overview()
    print_fn("\n=== Study Plans ===")
    for idx, item in enumerate(overview, start=1):
        note = "" if item.reachable else " (not enough sentences)"
        print_fn(f"{idx}) {item.plan.label}: {item.target} sentences{note}")
    print_fn("b) Back")
    print_fn("q) Quit")
    choice = input_fn("Choose plan: ").strip().lower()
    if choice in MENU_BACK_COMMANDS:
        return
    if choice in MENU_QUIT_COMMANDS:
        raise QuitApp()
    if not choice.isdigit():
        print_fn("Invalid choice.")
        return
    index = int(choice) - 1
    if not (0 <= index < len(overview)):
        print_fn("Invalid choice.")
        return

    plan = overview[index].plan
    service.start_session(plan)
    while _run_session(service, direction, input_fn, print_fn):
        service.restart_session()


def _run_session(service: TrainerService, direction: Direction, input_fn: InputFn, print_fn: PrintFn) -> bool:
    """Drive the active session until it ends; return whether to play again."""
    snapshot = service.snapshot()
    plan = snapshot.plan
    label = plan.label if plan is not None else "Practice"
    print_fn(f"\nStarting {label} plan: {snapshot.target} correct answers to finish.")
    print_fn("Type :b or :q to leave the session.")

    while snapshot.status is SessionStatus.IN_PROGRESS and snapshot.current is not None:
        print_fn(f"\n[{snapshot.completed_count}/{snapshot.target}] {direction.prompt_for(snapshot.current)}")
        answer = input_fn("Your answer: ").strip()
        lowered = answer.lower()
        if lowered in BACK_COMMANDS or lowered in FLOW_EXIT_COMMANDS:
            print_fn("Leaving session. Learned sentences are saved.")
            return False
        result = service.submit_answer(answer, direction)
        if result.correct:
            print_fn("Correct.")
        else:
            print_fn(f"Not quite. {result.feedback}")
        snapshot = result.snapshot

    if snapshot.status is SessionStatus.FINISHED:
        summary = service.progress_summary()
        print_fn(f"\nSession complete! Streak: {summary.streak} day(s).")
    else:
        print_fn(
            f"\nNo sentences left to practise ({snapshot.completed_count}/{snapshot.target}). "
            "This plan cannot be finished with the current catalog."
        )

    again = input_fn("Practice again? (y/N): ").strip().lower()
    return again in {"y", "yes"}


def _status_flow(service: TrainerService, print_fn: PrintFn) -> None:
    """Print streak and learned-sentence counts."""
    summary = service.progress_summary()
    last = summary.last_completed_on.isoformat() if summary.last_completed_on else "never"
    print_fn("\n=== Status ===")
    print_fn(f"- Streak: {summary.streak} day(s)")
    print_fn(f"- Last completed session: {last}")
    print_fn(f"- Learned sentences: {summary.learned_count}/{summary.catalog_size}")


def _export_flow(service: TrainerService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Export progress to a JSON file."""
    print_fn("\n=== Export Progress ===")
    path_text = input_fn("Export file path: ").strip()
    if not path_text:
        print_fn("File path is required.")
        return
    try:
        summary = service.export_progress(path_text)
    except OSError as exc:
        logger.debug("Export failed", exc_info=True)
        print_fn(f"Export failed: {exc}")
        return
    print_fn(f"Exported progress to {path_text}")
    print_fn(f"- learned sentences: {summary.learned_rows}")
    print_fn(f"- streak: {summary.streak}")


def _import_flow(service: TrainerService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Replace progress with the contents of a JSON export."""
    print_fn("\n=== Import Progress ===")
    path_text = input_fn("Import file path: ").strip()
    if not path_text:
        print_fn("File path is required.")
        return
    confirm = input_fn("This replaces current progress. Type YES to continue: ").strip()
    if confirm != "YES":
        print_fn("Import cancelled.")
        return
    try:
        summary = service.import_progress(path_text)
    except (OSError, ValueError) as exc:
        logger.debug("Import failed", exc_info=True)
        print_fn(f"Import failed: {exc}")
        return
    print_fn("Imported progress.")
    print_fn(f"- learned sentences: {summary.learned_rows}")
    print_fn(f"- streak: {summary.streak}")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
