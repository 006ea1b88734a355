"""CLI entrypoint for the case interview practice shell."""

from __future__ import annotations

import argparse
import logging
import time
from collections.abc import Callable
from pathlib import Path

from .ai_client import TROUBLESHOOTING_TIPS
from .config import Settings
from .errors import CaseCoachError, CatalogUnavailable, MissingCredential, NoActiveSession, RemoteRequestFailed
from .logs import configure_logging
from .models import CaseType, Industry
from .service import CoachService
from .timer import format_time

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
SleepFn = Callable[[float], None]
MENU_QUIT_COMMANDS = {"q"}
MENU_BACK_COMMANDS = {"b"}
DEFAULT_WATCH_SECONDS = 10
MAX_WATCH_SECONDS = 3600

logger = logging.getLogger(__name__)


class QuitApp(Exception):
    """Signal immediate app exit from nested menu flows."""


def _service(settings: Settings) -> CoachService:
    """Create app service from resolved settings."""
    return CoachService(settings)


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="casecoach", description="Case interview framework practice")
    parser.add_argument("command", nargs="?", default="play", choices=["play", "stats"])
    parser.add_argument("--data-dir", type=Path, help="directory for history, settings, and logs")
    parser.add_argument("--catalog", type=Path, help="case framework catalog JSON to use instead of the bundled one")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env().with_overrides(
            data_dir=args.data_dir, catalog_path=args.catalog, log_level=args.log_level
        )
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(settings)

    try:
        if args.command == "stats":
            return stats_command(settings)
        return play_shell(settings)
    except CatalogUnavailable as exc:
        parser.error(str(exc))


def stats_command(settings: Settings, print_fn: PrintFn = print) -> int:
    """Print practice stats once and exit."""
    service = _service(settings)
    try:
        _stats_flow(service, print_fn)
    finally:
        service.close()
    return 0


def play_shell(
    settings: Settings,
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    sleep_fn: SleepFn = time.sleep,
) -> int:
    """Run persistent menu-driven shell."""
    service = _service(settings)
    try:
        while True:
            service.run_pending()
            print_fn("\n=== Case Interview Coach ===")
            if service.active_case_type is not None:
                print_fn(f"Practicing: {service.active_case_type.name} ({_timer_label(service)})")
            print_fn("1) Frameworks by industry")
            print_fn("2) Combo cases")
            print_fn("3) AI case generator")
            print_fn("4) Practice stats")
            print_fn("5) Settings")
            print_fn("q) Quit")
            choice = input_fn("Choose: ").strip().lower()

            try:
                if choice == "1":
                    _frameworks_flow(service, input_fn, print_fn, sleep_fn)
                elif choice == "2":
                    _combo_cases_flow(service, print_fn)
                elif choice == "3":
                    _ai_generator_flow(service, input_fn, print_fn)
                elif choice == "4":
                    _stats_flow(service, print_fn)
                elif choice == "5":
                    _settings_flow(service, input_fn, print_fn)
                elif choice in MENU_QUIT_COMMANDS:
                    return 0
                else:
                    print_fn("Invalid choice.")
            except QuitApp:
                return 0
            except CaseCoachError as exc:
                logger.warning("Action failed: %s", exc)
                print_fn(f"Error: {exc}")
    finally:
        service.close()


def _timer_label(service: CoachService) -> str:
    if service.timer.paused:
        return f"{service.timer_display} paused"
    if service.timer.running:
        return f"{service.timer_display} running"
    return service.timer_display


def _choose_index(choice: str, count: int) -> int | None:
    if not choice.isdigit():
        return None
    index = int(choice) - 1
    if 0 <= index < count:
        return index
    return None


def _frameworks_flow(service: CoachService, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    """Pick an industry, then browse its case cards."""
    industries = service.list_industries()
    print_fn("\n=== Choose Industry ===")
    for idx, industry in enumerate(industries, start=1):
        print_fn(f"{idx}) {industry.label}")
    print_fn("r) Random industry")
    print_fn("b) Back")
    print_fn("q) Quit")
    choice = input_fn("Choose industry: ").strip().lower()
    if choice in MENU_BACK_COMMANDS:
        return
    if choice in MENU_QUIT_COMMANDS:
        raise QuitApp()
    if choice == "r":
        industry = service.random_industry()
    else:
        index = _choose_index(choice, len(industries))
        if index is None:
            print_fn("Invalid choice.")
            return
        industry = industries[index]
        service.select_industry(industry.id)

    _case_cards_flow(service, industry, input_fn, print_fn, sleep_fn)


def _case_cards_flow(
    service: CoachService, industry: Industry, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn
) -> None:
    """List every case type with the ones typical for the industry marked."""
    while True:
        cards = service.case_cards(industry.id)
        print_fn(f"\n=== {industry.label} ===")
        print_fn("* = common in this industry")
        for idx, card in enumerate(cards, start=1):
            case_type = card.case_type
            marker = "*" if card.highlighted else " "
            print_fn(
                f"{idx:>2}) {marker} {case_type.name} [{case_type.category}] "
                f"{case_type.duration} • {case_type.difficulty}"
            )
            if case_type.description:
                print_fn(f"       {case_type.description}")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Open case: ").strip().lower()
        if choice in MENU_BACK_COMMANDS:
            return
        if choice in MENU_QUIT_COMMANDS:
            raise QuitApp()
        index = _choose_index(choice, len(cards))
        if index is None:
            print_fn("Invalid choice.")
            continue
        case_type = service.open_case(cards[index].case_type.id)
        _print_case_detail(case_type, print_fn)
        _practice_timer_flow(service, input_fn, print_fn, sleep_fn)


def _print_case_detail(case_type: CaseType, print_fn: PrintFn) -> None:
    print_fn(f"\n=== {case_type.name} ===")
    if case_type.when_used:
        print_fn(f"When to use: {case_type.when_used}")
    print_fn(f"{case_type.duration} • {case_type.difficulty} difficulty")
    print_fn("\nFramework steps:")
    for idx, step in enumerate(case_type.framework.steps, start=1):
        print_fn(f"  {idx}. {step}")
    if case_type.framework.key_areas:
        print_fn("\nKey areas to explore:")
        print_fn("  " + " • ".join(case_type.framework.key_areas))
    if case_type.clarifying_questions:
        print_fn("\nClarifying questions to ask:")
        for question in case_type.clarifying_questions:
            print_fn(f"  - {question}")
    if case_type.common_pitfalls:
        print_fn("\nCommon pitfalls:")
        for pitfall in case_type.common_pitfalls:
            print_fn(f"  - {pitfall}")
    if case_type.example_prompt:
        print_fn("\nExample case prompt:")
        print_fn(f'  "{case_type.example_prompt}"')


def _practice_timer_flow(service: CoachService, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    """Stopwatch controls for the case that was just opened."""
    while service.active_case_type is not None:
        service.run_pending()
        print_fn(f"\n--- Practice timer: {service.active_case_type.name} ---")
        print_fn(f"Time: {_timer_label(service)}")
        if service.timer.can_start:
            print_fn("s) Start")
        else:
            print_fn("p) Resume" if service.timer.paused else "p) Pause")
        print_fn("r) Reset")
        print_fn("c) Complete case")
        print_fn("w) Watch timer")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Timer: ").strip().lower()
        service.run_pending()

        if choice in MENU_BACK_COMMANDS:
            return
        if choice in MENU_QUIT_COMMANDS:
            raise QuitApp()
        if choice == "s":
            if not service.timer.can_start:
                print_fn("Timer is already running.")
                continue
            try:
                service.start_timer()
            except NoActiveSession as exc:
                print_fn(str(exc))
                return
            print_fn("Timer started.")
        elif choice == "p":
            if not service.timer_running:
                print_fn("Timer is not running.")
                continue
            paused = service.pause_timer()
            print_fn(f"Paused at {service.timer_display}." if paused else "Resumed.")
        elif choice == "r":
            service.reset_timer()
            print_fn(f"Timer reset to {service.timer_display}.")
        elif choice == "c":
            try:
                session = service.complete_case()
            except NoActiveSession as exc:
                print_fn(str(exc))
                return
            print_fn(
                f"Great job! You completed a {session.case_type_name} case in "
                f"{format_time(session.duration_seconds)}."
            )
            return
        elif choice == "w":
            _watch_timer_flow(service, input_fn, print_fn, sleep_fn)
        else:
            print_fn("Invalid choice.")


def _watch_timer_flow(service: CoachService, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    """Pump the tick source once per second and print the running time."""
    if not service.timer_running:
        print_fn("Start the timer first.")
        return
    raw = input_fn(f"Watch for how many seconds? [{DEFAULT_WATCH_SECONDS}]: ").strip()
    if not raw:
        seconds = DEFAULT_WATCH_SECONDS
    elif raw.isdigit() and 0 < int(raw) <= MAX_WATCH_SECONDS:
        seconds = int(raw)
    else:
        print_fn("Invalid duration.")
        return

    print_fn("Press Ctrl+C to stop watching.")
    try:
        for _ in range(seconds):
            sleep_fn(1.0)
            if service.run_pending():
                print_fn(f"  {_timer_label(service)}")
    except KeyboardInterrupt:
        print_fn("")
    print_fn(f"Time: {_timer_label(service)}")


def _combo_cases_flow(service: CoachService, print_fn: PrintFn) -> None:
    print_fn("\n=== Combo Cases ===")
    combos = service.combo_cases()
    if not combos:
        print_fn("No combo cases in this catalog.")
        return
    for combo in combos:
        print_fn(f"\n{combo.name}")
        if combo.description:
            print_fn(f"  {combo.description}")
        if combo.example:
            print_fn(f"  Example: {combo.example}")


def _stats_flow(service: CoachService, print_fn: PrintFn) -> None:
    """Print totals, recent sessions, and weak spots."""
    stats = service.stats()
    print_fn("\n=== Practice Stats ===")
    print_fn(f"Cases practiced: {stats.total_sessions}")
    print_fn(f"Total time: {format_time(stats.total_duration)}")
    print_fn(f"Average time: {format_time(stats.average_duration)}")

    print_fn("\nRecent practice:")
    if not stats.recent_history:
        print_fn("No practice sessions yet. Start practicing!")
    else:
        name_width = max(len("Case"), max(len(item.case_type_name) for item in stats.recent_history))
        industry_width = max(
            len("Industry"), max(len(item.industry_name or "General") for item in stats.recent_history)
        )
        header = f"{'Case':<{name_width}} {'Industry':<{industry_width}} {'Time':>6} Date"
        print_fn(header)
        print_fn("-" * len(header))
        for item in stats.recent_history:
            local_date = item.timestamp.astimezone().strftime("%Y-%m-%d")
            print_fn(
                f"{item.case_type_name:<{name_width}} "
                f"{item.industry_name or 'General':<{industry_width}} "
                f"{format_time(item.duration_seconds):>6} "
                f"{local_date}"
            )

    print_fn("\nWeak spots:")
    if not stats.weak_spots:
        print_fn("Great! You've practiced all case types multiple times.")
        return
    for spot in stats.weak_spots:
        plural = "" if spot.count == 1 else "s"
        print_fn(f"- {spot.case_type.name}: {spot.count} time{plural}")


def _ai_generator_flow(service: CoachService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Pick industry and case type, then request a generated case prompt."""
    if service.api_key_status() is None:
        print_fn("Please enter your API key in Settings first.")
        _settings_flow(service, input_fn, print_fn)
        return

    industries = service.list_industries()
    print_fn("\n=== AI Case Generator ===")
    for idx, industry in enumerate(industries, start=1):
        print_fn(f"{idx}) {industry.label}")
    industry_index = _choose_index(input_fn("Choose an industry: ").strip(), len(industries))

    case_types = service.list_case_types()
    for idx, case_type in enumerate(case_types, start=1):
        print_fn(f"{idx}) {case_type.name} ({case_type.category})")
    case_index = _choose_index(input_fn("Choose a case type: ").strip(), len(case_types))

    if industry_index is None or case_index is None:
        print_fn("Please select both an industry and a case type.")
        return

    industry = industries[industry_index]
    case_type = case_types[case_index]
    print_fn("Generating custom case prompt...")
    try:
        generated = service.generate_ai_case(industry.id, case_type.id)
    except MissingCredential as exc:
        print_fn(str(exc))
        return
    except RemoteRequestFailed as exc:
        print_fn(f"Error generating case: {exc}")
        print_fn("Troubleshooting:")
        for tip in TROUBLESHOOTING_TIPS:
            print_fn(f"- {tip}")
        print_fn(
            f"Debug info: key length {service.api_key_status() or 0}, "
            f"industry {industry.name}, case type {case_type.name}"
        )
        return

    print_fn("\n=== Generated Case Prompt ===")
    print_fn(f"Industry: {generated.industry.label} • Type: {generated.case_type.name}")
    print_fn("")
    print_fn(generated.text)


def _settings_flow(service: CoachService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """API key management and history reset."""
    while True:
        key_length = service.api_key_status()
        print_fn("\n=== Settings ===")
        if key_length is None:
            print_fn("No API key saved.")
        else:
            print_fn(f"API key saved (length: {key_length} characters)")
        print_fn("1) Save API key")
        print_fn("2) Test API key")
        print_fn("3) Clear practice history")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = input_fn("Choose setting: ").strip().lower()
        if choice in MENU_BACK_COMMANDS:
            return
        if choice in MENU_QUIT_COMMANDS:
            raise QuitApp()
        if choice == "1":
            try:
                service.save_api_key(input_fn("API key: "))
            except ValueError as exc:
                print_fn(str(exc))
                continue
            print_fn("API key saved. You can now generate AI cases.")
        elif choice == "2":
            print_fn("Testing...")
            try:
                service.test_api_key()
            except MissingCredential as exc:
                print_fn(str(exc))
                continue
            except RemoteRequestFailed as exc:
                print_fn(f"API key test failed. {exc}")
                continue
            print_fn("API key is valid and working!")
        elif choice == "3":
            _clear_history_flow(service, input_fn, print_fn)
        else:
            print_fn("Invalid choice.")


def _clear_history_flow(service: CoachService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Clear practice history with explicit confirmation safeguard."""
    print_fn("WARNING: This permanently deletes all practice history.")
    confirm = input_fn("Type YES to confirm: ").strip()
    if confirm != "YES":
        print_fn("Clear cancelled.")
        return
    service.clear_history()
    print_fn("Practice history cleared!")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
