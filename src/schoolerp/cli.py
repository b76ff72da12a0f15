"""Command-line front end for the timetable client.

Run with: python scripts/timetable.py <command> [options]

  login                      Log in and save the bearer token
  logout                     Log out and delete the saved token
  classes                    List classes
  edit                       Load a period and (optionally) reassign it
  create                     Create a period
  generate                   Ask the backend to auto-generate a class timetable
  free-teachers              Teachers with no class at a day/period
  class-grid / teacher-grid  Weekly grid for a class or a teacher
  delete                     Delete a period by id

Tables go to stdout (or JSON with --json); diagnostics go to stderr.

Exit codes:
  0 = success
  1 = error, or the requested period/update did not go through
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from src.schoolerp.api import AsyncTimetableApi, TimetableApi
from src.schoolerp.config import ErpConfig, get_config
from src.schoolerp.editor import EditorPhase, Notice, PeriodEditor, UpdateOutcome
from src.schoolerp.errors import ErpApiError
from src.schoolerp.grid import format_grid, free_slots
from src.schoolerp.logging import get_logger, setup_logging
from src.schoolerp.models import (
    PERIOD_NUMBERS,
    AutoGenerateRequest,
    PeriodCreate,
    Weekday,
)
from src.schoolerp.session import TokenStore

log = get_logger(__name__)


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _print_notice(notice: Notice) -> None:
    _log(f"  [{notice.title}] {notice.description}")


def _period_number(value: str) -> int:
    number = int(value)
    if number not in PERIOD_NUMBERS:
        raise argparse.ArgumentTypeError(
            f"period must be between {PERIOD_NUMBERS[0]} and {PERIOD_NUMBERS[-1]}"
        )
    return number


def _weekday(value: str) -> Weekday:
    try:
        return Weekday.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timetable",
        description="School ERP timetable client.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of tables.")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Log in and save the bearer token.")
    login.add_argument("--email", default=None, help="Defaults to ERP_EMAIL.")
    login.add_argument("--password", default=None, help="Defaults to ERP_PASSWORD.")

    sub.add_parser("logout", help="Log out and delete the saved token.")
    sub.add_parser("classes", help="List classes.")

    edit = sub.add_parser("edit", help="Load the period at a slot and optionally reassign it.")
    edit.add_argument("--class", dest="class_id", required=True, help="Class id.")
    edit.add_argument("--day", type=_weekday, required=True)
    edit.add_argument("--period", type=_period_number, required=True)
    edit.add_argument("--subject", default=None, help="New subject id.")
    edit.add_argument("--teacher", default=None, help="New teacher id.")

    create = sub.add_parser("create", help="Create a period.")
    create.add_argument("--class", dest="class_id", required=True)
    create.add_argument("--day", type=_weekday, required=True)
    create.add_argument("--period", type=_period_number, required=True)
    create.add_argument("--subject", required=True)
    create.add_argument("--teacher", required=True)
    create.add_argument("--room", default=None)

    generate = sub.add_parser("generate", help="Auto-generate a class timetable.")
    generate.add_argument("--class", dest="class_id", required=True)
    generate.add_argument("--days", type=int, default=6, help="Number of days (1-6).")
    generate.add_argument("--periods", type=int, default=8, help="Periods per day (1-8).")

    free = sub.add_parser("free-teachers", help="Teachers free at a day/period.")
    free.add_argument("--day", type=_weekday, required=True)
    free.add_argument("--period", type=_period_number, required=True)

    class_grid = sub.add_parser("class-grid", help="Weekly grid of a class.")
    class_grid.add_argument("--class", dest="class_id", required=True)

    teacher_grid = sub.add_parser("teacher-grid", help="Weekly grid of a teacher.")
    teacher_grid.add_argument("--teacher", dest="teacher_id", required=True)

    delete = sub.add_parser("delete", help="Delete a period.")
    delete.add_argument("--period-id", required=True)

    return parser


def build_client(config: ErpConfig) -> tuple[TimetableApi, TokenStore]:
    store = TokenStore(config.state_dir, config.max_token_age_hours)
    api = TimetableApi(
        config.erp_api_url,
        token_provider=store.token_provider(config.erp_token or None),
        timeout=config.request_timeout_seconds,
    )
    return api, store


def _emit(args: argparse.Namespace, payload, table: str) -> None:
    if args.json:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(table)


async def run_edit(args: argparse.Namespace, api: TimetableApi) -> int:
    """Drive the period editor non-interactively for one slot."""
    editor = PeriodEditor(AsyncTimetableApi(api), on_notice=_print_notice)
    await editor.open()
    editor.select_class(args.class_id)
    editor.select_day(args.day)
    editor.select_period(args.period)

    state = await editor.fetch_period()
    if state.phase is not EditorPhase.LOADED:
        editor.close()
        return 1

    if args.subject and args.subject != state.subject_id:
        state = await editor.select_subject(args.subject)
    if args.teacher:
        state = editor.select_teacher(args.teacher)

    loaded = state
    summary = {
        "periodId": state.period_id,
        "classId": state.class_id,
        "day": state.day.value,
        "periodNumber": state.period_number,
        "subjectId": state.subject_id,
        "teacherId": state.teacher_id,
        "subjects": [s.model_dump() for s in state.subjects],
        "teachers": [t.model_dump() for t in state.teachers],
    }

    exit_code = 0
    if args.subject or args.teacher:
        state = await editor.update()
        summary["updated"] = state.last_update is UpdateOutcome.SUCCEEDED
        exit_code = 0 if summary["updated"] else 1

    lines = [f"{key}: {value}" for key, value in summary.items() if key not in ("subjects", "teachers")]
    lines.append("subjects: " + (", ".join(f"{s.id}={s.name}" for s in loaded.subjects) or "-"))
    lines.append("teachers: " + (", ".join(f"{t.id}={t.display_name}" for t in loaded.teachers) or "-"))
    _emit(args, summary, "\n".join(lines))
    editor.close()
    return exit_code


def run(args: argparse.Namespace, api: TimetableApi, store: TokenStore, config: ErpConfig) -> int:
    command = args.command

    if command == "login":
        store.authenticate(api, args.email or config.erp_email, args.password or config.erp_password)
        _log(f"  Token saved to {store.token_file}")
        return 0

    if command == "logout":
        try:
            api.logout()
        except ErpApiError as e:
            log.warning("logout_failed", error=str(e))
        store.clear_token()
        return 0

    if command == "classes":
        classes = api.list_classes()
        rows = [f"{c.id}  {c.label}" for c in classes] or ["(no classes)"]
        _emit(args, [c.model_dump() for c in classes], "\n".join(rows))
        return 0

    if command == "edit":
        return asyncio.run(run_edit(args, api))

    if command == "create":
        period = PeriodCreate(
            class_id=args.class_id,
            day=args.day,
            period_number=args.period,
            subject_id=args.subject,
            teacher_id=args.teacher,
            room=args.room,
        )
        result = api.create_period(period)
        _log(f"  {result.message or 'Period created.'}")
        return 0

    if command == "generate":
        request = AutoGenerateRequest(
            class_id=args.class_id,
            number_of_days=args.days,
            periods_per_day=args.periods,
        )
        result = api.auto_generate(request)
        _log(f"  {result.message or 'Timetable generated successfully.'}")
        return 0

    if command == "free-teachers":
        result = api.find_free_teachers(args.day, args.period)
        teachers = result.free_teachers
        _log(f"  Found {len(teachers)} available teacher(s).")
        rows = [
            f"{t.name}  {t.email or '-'}  {t.department or 'No department'}  {', '.join(t.subject_specialization)}"
            for t in teachers
        ] or ["(no free teachers)"]
        _emit(args, [t.model_dump() for t in teachers], "\n".join(rows))
        return 0

    if command == "class-grid":
        timetable = api.class_timetable(args.class_id)
        title = timetable.class_name or timetable.class_id
        _emit(
            args,
            timetable.model_dump(mode="json"),
            f"{title}\n{format_grid(timetable.periods, detail='teacher_name')}",
        )
        return 0

    if command == "teacher-grid":
        timetable = api.teacher_timetable(args.teacher_id)
        free = timetable.free_periods or free_slots(timetable.periods)
        title = f"{timetable.teacher_name or timetable.teacher_id} ({len(free)} free periods)"
        _emit(
            args,
            timetable.model_dump(mode="json"),
            f"{title}\n{format_grid(timetable.periods, detail='class_name')}",
        )
        return 0

    if command == "delete":
        result = api.delete_period(args.period_id)
        _log(f"  {result.message or 'Period deleted successfully.'}")
        return 0

    raise ValueError(f"Unknown command {command!r}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    api, store = build_client(config)
    try:
        return run(args, api, store, config)
    except (ErpApiError, ValueError) as e:
        log.error("command_failed", command=args.command, type=type(e).__name__)
        _log(f"ERROR: {e}")
        return 1
