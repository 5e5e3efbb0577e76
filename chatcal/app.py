"""
Command-line entry point for Chat to Calendar.
Generates a schedule from a request, prints it and exports an .ics file.
"""

import argparse
import sys
from typing import Optional, Sequence

from chatcal.calendar_links import generate_apple_calendar_link
from chatcal.event_normalizer import DateTimeFormatError
from chatcal.ics_generator import write_ics
from chatcal.logging_helper import Log
from chatcal.schedule_llm_client import GenerationFailure
from chatcal.schedule_service import generate_schedule
from chatcal.settings_manager import get_default_timezone
from chatcal.ui_state import format_event_time


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn a scheduling request into calendar events")
    parser.add_argument("message", help="natural-language scheduling request")
    parser.add_argument("--ics", metavar="PATH", help="where to write the .ics file (default: configured download path)")
    parser.add_argument("--links", action="store_true", help="print an Apple Calendar link per event")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the command line."""
    args = build_parser().parse_args(argv)

    Log.section("Chat to Calendar")
    Log.info(f"Log file: {Log.get_log_path()}")

    outcome = generate_schedule(args.message)
    if isinstance(outcome, GenerationFailure):
        Log.error(f"{outcome.message} ({outcome.status_code})")
        return 1

    schedule = outcome.schedule
    timezone = schedule.timezone or get_default_timezone()
    print(f"\nSchedule ({timezone}):")
    for index, event in enumerate(schedule.events, start=1):
        print(f"  {index}. {event.title}: {format_event_time(event.start_local)} - {format_event_time(event.end_local)}")
        if event.location:
            print(f"     @ {event.location}")
        if args.links:
            print(f"     {generate_apple_calendar_link(event, timezone)}")

    for warning in outcome.warnings:
        Log.warn(warning)

    try:
        ics_path = write_ics(schedule, args.ics)
    except DateTimeFormatError as err:
        Log.error(f"Cannot export calendar file: {err}")
        return 1
    print(f"\nCalendar file: {ics_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
