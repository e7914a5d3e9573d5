"""Command-line entry point.

Each invocation opens the store once, runs the orphan check where needed,
performs one lifecycle or reporting operation and renders the result.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TextIO

from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import Settings, get_settings
from .db import open_database
from .errors import TallyError
from .schemas.recovery import Disposition, OrphanNotice, RecoveryOutcome
from .schemas.report import Report
from .schemas.session import SessionRead, StatusResult
from .services.export import EXPORT_FORMATS, export_report
from .services.lifecycle import SessionLifecycle
from .services.recovery import RecoveryReconciler
from .services.reporting import build_report
from .services.store import SessionStore
from .services.timekeeping import Clock, SystemClock, elapsed_seconds, format_duration, get_date_range

logger = logging.getLogger(__name__)

RULE = "─" * 50
RECOVERY_QUESTION = "What would you like to do? [k]eep it as-is, [d]iscard it, or [c]lose it at end of day: "


@dataclass
class CommandContext:
    settings: Settings
    store: SessionStore
    clock: Clock
    prompt: Callable[[OrphanNotice], str]
    out: TextIO = field(default_factory=lambda: sys.stdout)
    sleep: Callable[[float], None] = time.sleep

    def echo(self, message: str = "") -> None:
        print(message, file=self.out)

    @property
    def lifecycle(self) -> SessionLifecycle:
        return SessionLifecycle(self.store, self.clock, self.settings.note_separator)

    def reconcile(self) -> Optional[RecoveryOutcome]:
        outcome = RecoveryReconciler(self.store, self.clock, self.prompt).check()
        if outcome is not None:
            render_recovery(self, outcome)
        return outcome


def _clock_time(value, seconds: bool = False) -> str:
    return value.strftime("%H:%M:%S" if seconds else "%H:%M")


def _echo_metadata(ctx: CommandContext, session: SessionRead, indent: str = "  ") -> None:
    if session.project:
        ctx.echo(f"{indent}Project: {session.project}")
    if session.tag:
        ctx.echo(f"{indent}Tag: {session.tag}")
    if session.note:
        ctx.echo(f"{indent}Note: {session.note}")


def console_prompt(out: TextIO = sys.stdout, ask: Callable[[str], str] = input) -> Callable[[OrphanNotice], str]:
    def _prompt(notice: OrphanNotice) -> str:
        session = notice.session
        print(
            f"\n⚠️  Found an unfinished session from {session.start_time:%Y-%m-%d} "
            f"({format_duration(notice.elapsed_seconds)})",
            file=out,
        )
        if session.project:
            print(f"   Project: {session.project}", file=out)
        try:
            return ask(RECOVERY_QUESTION)
        except EOFError:
            return ""

    return _prompt


def render_recovery(ctx: CommandContext, outcome: RecoveryOutcome) -> None:
    if not outcome.recognized:
        ctx.echo("Invalid choice. Session kept as-is.\n")
    elif outcome.disposition is Disposition.DISCARD:
        ctx.echo("✓ Session discarded.\n")
    elif outcome.disposition is Disposition.CLOSE:
        ctx.echo(f"✓ Session stopped at end of day ({format_duration(outcome.total_seconds or 0)}).\n")
    else:
        ctx.echo("Session kept as-is.\n")


def cmd_start(ctx: CommandContext, args: argparse.Namespace) -> int:
    ctx.reconcile()
    result = ctx.lifecycle.start(args.project or args.project_arg, args.tag, args.note)
    ctx.echo("✓ Session started!")
    _echo_metadata(ctx, result.session)
    ctx.echo(f"  Started at: {_clock_time(result.session.start_time, seconds=True)}")
    return 0


def cmd_stop(ctx: CommandContext, args: argparse.Namespace) -> int:
    result = ctx.lifecycle.stop(args.note)
    ctx.echo("✓ Session stopped!")
    if result.session.project:
        ctx.echo(f"  Project: {result.session.project}")
    ctx.echo(f"  Duration: {format_duration(result.total_seconds)}")
    ctx.echo(f"  Ended at: {_clock_time(result.session.end_time, seconds=True)}")
    return 0


def cmd_pause(ctx: CommandContext, args: argparse.Namespace) -> int:
    result = ctx.lifecycle.pause()
    ctx.echo("⏸  Session paused")
    if result.session.project:
        ctx.echo(f"  Project: {result.session.project}")
    ctx.echo(f"  Elapsed: {format_duration(result.elapsed_seconds)}")
    ctx.echo("  Use 'tally resume' to continue")
    return 0


def cmd_resume(ctx: CommandContext, args: argparse.Namespace) -> int:
    ctx.reconcile()
    result = ctx.lifecycle.resume()
    ctx.echo("▶  Session resumed")
    if result.session.project:
        ctx.echo(f"  Project: {result.session.project}")
    ctx.echo(f"  Paused for: {format_duration(result.pause_seconds)}")
    return 0


def render_status(ctx: CommandContext, status: StatusResult) -> None:
    session = status.active
    if session is None:
        ctx.echo("No active session")
        ctx.echo(
            f"Today: {format_duration(status.today_completed_seconds)} "
            f"across {status.today_completed_count} session(s)"
        )
        return
    icon = "▶" if session.status == "running" else "⏸"
    ctx.echo(
        f"{icon}  {session.status.capitalize()}: {format_duration(status.elapsed_seconds)} "
        f"(started at {_clock_time(session.start_time)})"
    )
    _echo_metadata(ctx, session, indent="   ")
    ctx.echo(f"   Today: {format_duration(status.today_total_seconds)} total")


def live_status(ctx: CommandContext, status: StatusResult) -> int:
    """Redraw the running timer until interrupted. Never writes to the store."""
    session = status.active
    ctx.echo("Press Ctrl+C to exit\n")
    try:
        while True:
            elapsed = elapsed_seconds(session, ctx.clock.now())
            frame = status.model_copy(update={"elapsed_seconds": elapsed})
            ctx.out.write("\x1b[2J\x1b[H")
            render_status(ctx, frame)
            ctx.echo("\nPress Ctrl+C to exit")
            ctx.out.flush()
            ctx.sleep(ctx.settings.live_refresh_seconds)
    except KeyboardInterrupt:
        ctx.echo("\n\nStopped live view")
    return 0


def cmd_status(ctx: CommandContext, args: argparse.Namespace) -> int:
    status = ctx.lifecycle.status()
    if status.is_empty:
        ctx.echo("No sessions today. Use 'tally start' to begin tracking.")
        return 0
    is_tty = getattr(ctx.out, "isatty", lambda: False)()
    if args.live and is_tty and status.active is not None and status.active.status == "running":
        return live_status(ctx, status)
    render_status(ctx, status)
    return 0


def _render_sessions(ctx: CommandContext, report: Report, detailed: bool) -> None:
    if detailed:
        for index, session in enumerate(report.sessions, start=1):
            end = _clock_time(session.end_time) if session.end_time else "ongoing"
            ctx.echo(f"\nSession {index}:")
            ctx.echo(f"  {_clock_time(session.start_time)} - {end}")
            ctx.echo(f"  Duration: {format_duration(session.total_seconds or 0)}")
            _echo_metadata(ctx, session)
        return
    ctx.echo()
    for session in report.sessions:
        project = f"[{session.project}] " if session.project else ""
        ctx.echo(f"  {_clock_time(session.start_time)} {project}{format_duration(session.total_seconds or 0)}")


def _render_days(ctx: CommandContext, report: Report) -> None:
    ctx.echo()
    for day in report.days:
        plural = "s" if day.session_count > 1 else ""
        ctx.echo(
            f"  {day.day:%a} {day.day:%b} {day.day.day}: {format_duration(day.total_seconds)} "
            f"({day.session_count} session{plural})"
        )


def cmd_report(ctx: CommandContext, args: argparse.Namespace) -> int:
    period = args.period or "today"
    date_range = get_date_range(period, ctx.clock.now().date())
    report = build_report(ctx.store, period.lower(), date_range)
    if not report.sessions:
        ctx.echo(f"No sessions found for {report.label}")
        return 0

    if args.export:
        path = export_report(report, args.export, ctx.settings.export_dir, ctx.clock)
        ctx.echo(f"✓ Report exported to {path}")
        return 0

    ctx.echo(f"\n📊 Report for {report.label}")
    ctx.echo(RULE)
    if report.grouped:
        _render_days(ctx, report)
    else:
        _render_sessions(ctx, report, args.detailed)
    ctx.echo(RULE)
    ctx.echo(
        f"Total: {format_duration(report.total_seconds)} ({report.total_hours:.2f} hours) "
        f"across {report.session_count} session(s)"
    )
    ctx.echo()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tally", description="A simple CLI tool for tracking daily work hours")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command")

    start = sub.add_parser("start", help="Start a new work session")
    start.add_argument("project_arg", nargs="?", metavar="project", help="Project name")
    start.add_argument("-p", "--project", help="Project name")
    start.add_argument("-t", "--tag", help="Tag for the session")
    start.add_argument("-n", "--note", help="Note or description")
    start.set_defaults(handler=cmd_start)

    stop = sub.add_parser("stop", help="Stop the current work session")
    stop.add_argument("-n", "--note", help="Add a note when stopping")
    stop.set_defaults(handler=cmd_stop)

    sub.add_parser("pause", help="Pause the current work session").set_defaults(handler=cmd_pause)
    sub.add_parser("resume", help="Resume a paused work session").set_defaults(handler=cmd_resume)

    status = sub.add_parser("status", help="Show current session status and today's total")
    status.add_argument("-l", "--live", action="store_true", help="Show live updating timer")
    status.set_defaults(handler=cmd_status)

    report = sub.add_parser("report", help="Generate work reports")
    report.add_argument(
        "period", nargs="?", default="today", help="today (default), yesterday, week, month, or YYYY-MM-DD"
    )
    report.add_argument("-d", "--detailed", action="store_true", help="Show detailed session breakdown")
    report.add_argument("--export", choices=EXPORT_FORMATS, help="Export format: json or csv")
    report.set_defaults(handler=cmd_report)
    return parser


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    level = "DEBUG" if verbose else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s [%(name)s] %(message)s")


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    prompt: Optional[Callable[[OrphanNotice], str]] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout
    err = err or sys.stderr
    if not getattr(args, "handler", None):
        parser.print_help(out)
        return 0

    settings = settings or get_settings()
    configure_logging(settings, args.verbose)
    try:
        with open_database(settings) as database, database.session_scope() as db_session:
            ctx = CommandContext(
                settings=settings,
                store=SessionStore(db_session),
                clock=clock or SystemClock(),
                prompt=prompt or console_prompt(out),
                out=out,
                sleep=sleep,
            )
            return args.handler(ctx, args)
    except TallyError as exc:
        print(f"⚠️  {exc}", file=err)
        return 1
    except SQLAlchemyError:
        logger.exception("Store failure while running '%s'", args.command)
        print(f"Database error while running {args.command}; see log for details.", file=err)
        return 2
    except Exception:
        logger.exception("Unexpected failure while running '%s'", args.command)
        print(f"Unexpected error while running {args.command}; see log for details.", file=err)
        return 2
