"""Interactive CLI application."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from assignment_tracker.assignments import (
    SORT_ORDERS, STATUS_FILTERS, add_assignment, course_options, delete_assignment,
    due_status, filter_assignments, filters_active, status_color, status_label,
    update_assignment,
)
from assignment_tracker.calendar_export import export_ics, google_calendar_url
from assignment_tracker.dates import add_days, format_day_label, format_due, get_zone, local_now, parse_due
from assignment_tracker.db import DEFAULT_DB_PATH, init_db
from assignment_tracker.importer import import_file
from assignment_tracker.models import Assignment
from assignment_tracker.overrides import OverrideStore
from assignment_tracker.planner import WINDOW_DAYS, build_plan
from assignment_tracker.settings import get_timezone, set_timezone
from assignment_tracker.storage import SqliteOverrideAdapter, load_assignments

console = Console()
logger = logging.getLogger(__name__)

CANCEL_WORDS = ("q", "cancel")


class FormCancelled(Exception):
    """Raised when the user types 'q' at a form prompt."""


def form_prompt(prompt: str, **kwargs) -> str:
    if kwargs.get("choices"):
        kwargs["choices"] = list(kwargs["choices"]) + ["q"]
        kwargs.setdefault("show_choices", False)
    answer = Prompt.ask(prompt, **kwargs)
    if answer is not None and answer.strip().lower() in CANCEL_WORDS:
        raise FormCancelled()
    return answer if answer is not None else ""


def form_int_prompt(prompt: str, default: int | None = None) -> int | None:
    """Ask for an optional whole number. Enter keeps `default`; blank means none."""
    while True:
        answer = form_prompt(prompt, default="" if default is None else str(default)).strip()
        if not answer:
            return None
        try:
            return int(answer)
        except ValueError:
            console.print("[red]Please enter a whole number.[/red]")


def setup_logging(level: int = logging.WARNING) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
    )


def show_welcome(tz_name: str):
    console.print(Panel(
        f"[bold]Assignment Tracker[/bold]\n[dim]Due dates shown in {tz_name}[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("add", "Add an assignment"),
        ("edit", "Edit an assignment"),
        ("delete", "Delete an assignment"),
        ("list", "List, search and filter assignments"),
        ("plan", "Study plan for the next 7 days"),
        ("done", "Check off a plan chunk"),
        ("move", "Move a plan chunk to another day"),
        ("export", "Export assignments to .ics"),
        ("link", "Google Calendar link for one assignment"),
        ("import", "Import assignments from a file"),
        ("timezone", "Change the planning timezone"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _due_text(a: Assignment, tz) -> str:
    try:
        return format_due(parse_due(a.due, tz))
    except ValueError:
        return f"[red]{a.due}[/red]"


def render_assignments(items: list[Assignment], tz, title: str = "Assignments") -> Table:
    now = local_now(tz)
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Course")
    table.add_column("Title")
    table.add_column("Due")
    table.add_column("Est.", justify="right")
    table.add_column("Status")
    table.add_column("Notes", overflow="ellipsis", max_width=32)
    for i, a in enumerate(items, 1):
        status = due_status(a, now, tz)
        color = status_color(status)
        estimate = a.estimate_minutes if a.estimate_minutes is not None else 60
        hours = f"{estimate / 60:.1f}".removesuffix(".0")
        table.add_row(
            str(i),
            a.course or "-",
            a.title,
            _due_text(a, tz),
            f"{hours}h",
            f"[{color}]{status_label(status)}[/{color}]",
            a.notes or "-",
        )
    return table


def pick_assignment(items: list[Assignment], tz) -> Assignment | None:
    if not items:
        console.print("[yellow]No assignments yet.[/yellow]")
        return None
    ordered = filter_assignments(items, tz=tz)
    console.print(render_assignments(ordered, tz))
    choice = form_prompt("Number", choices=[str(i) for i in range(1, len(ordered) + 1)])
    return ordered[int(choice) - 1]


def cmd_add(db_path: str, tz):
    console.print("\n[bold]Add assignment[/bold] [dim](q to cancel)[/dim]")
    course = form_prompt("Course (optional)", default="")
    title = form_prompt("Title")
    due = form_prompt("Due (YYYY-MM-DD HH:MM)")
    notes = form_prompt("Notes (optional)", default="")
    estimate = form_int_prompt("Estimated minutes (blank = 60)")
    a = add_assignment(db_path, title, due, course=course, notes=notes, estimate_minutes=estimate, tz=tz)
    console.print(f"[green]Added {a.display_title}, due {_due_text(a, tz)}[/green]")


def cmd_edit(db_path: str, tz):
    a = pick_assignment(load_assignments(db_path), tz)
    if a is None:
        return
    console.print("[dim]Press Enter to keep the current value, q to cancel.[/dim]")
    fields = {
        "course": form_prompt("Course", default=a.course),
        "title": form_prompt("Title", default=a.title),
        "notes": form_prompt("Notes", default=a.notes),
        "estimate_minutes": form_int_prompt("Estimated minutes", default=a.estimate_minutes),
    }
    due = form_prompt("Due", default=a.due)
    if due != a.due:
        fields["due"] = due
    updated = update_assignment(db_path, a.id, tz=tz, **fields)
    console.print(f"[green]Saved {updated.display_title}[/green]")


def cmd_delete(db_path: str, tz, overrides: OverrideStore):
    a = pick_assignment(load_assignments(db_path), tz)
    if a is None:
        return
    if Prompt.ask(f"Delete {a.display_title}?", choices=["y", "n"], default="n") != "y":
        return
    delete_assignment(db_path, a.id, overrides=overrides)
    console.print(f"[green]Deleted {a.display_title}[/green]")


def cmd_list(db_path: str, tz):
    items = load_assignments(db_path)
    if not items:
        console.print("[yellow]No assignments yet.[/yellow]")
        return
    query = Prompt.ask("Search title/course/notes", default="")
    course = Prompt.ask("Course", choices=course_options(items), default="ALL")
    status = Prompt.ask("Status", choices=list(STATUS_FILTERS), default="ALL")
    sort = Prompt.ask("Sort", choices=list(SORT_ORDERS), default="DUE_ASC")
    shown = filter_assignments(items, query=query, course=course, status=status, sort=sort, tz=tz)
    if not shown:
        console.print("[yellow]No results. Try clearing filters or changing your search.[/yellow]")
        return
    title = f"Assignments ({len(shown)} of {len(items)})" if filters_active(query, course, status) else "Assignments"
    console.print(render_assignments(shown, tz, title=title))


def cmd_plan(db_path: str, tz, overrides: OverrideStore):
    plan = build_plan(load_assignments(db_path), local_now(tz), overrides, tz)
    if not plan.chunks:
        console.print("[yellow]Nothing to plan in the next 7 days.[/yellow]")
        return plan
    table = Table(title=f"Plan (next 7 days): {plan.done_count}/{plan.total_count} chunks done")
    table.add_column("#", justify="right")
    table.add_column("Day")
    table.add_column("Work")
    table.add_column("Min", justify="right")
    table.add_column("Done")
    n = 0
    for group in plan.groups:
        table.add_section()
        first = True
        for chunk in group.chunks:
            n += 1
            table.add_row(
                str(n),
                f"[bold]{group.label}[/bold] [dim]({group.total_minutes}m)[/dim]" if first else "",
                f"{chunk.display_title} [dim]#{chunk.index + 1}[/dim]",
                str(chunk.minutes),
                "[green]✔[/green]" if chunk.done else "",
            )
            first = False
    console.print(table)
    if plan.skipped:
        console.print(f"[red]{len(plan.skipped)} assignment(s) skipped: unreadable due date.[/red]")
    return plan


def _pick_chunk(db_path: str, tz, overrides: OverrideStore):
    plan = cmd_plan(db_path, tz, overrides)
    if not plan.chunks:
        return None, plan
    choice = form_prompt("Chunk number", choices=[str(i) for i in range(1, len(plan.chunks) + 1)])
    return plan.chunks[int(choice) - 1], plan


def cmd_done(db_path: str, tz, overrides: OverrideStore):
    chunk, _ = _pick_chunk(db_path, tz, overrides)
    if chunk is None:
        return
    done = overrides.toggle_done(chunk.key, current=chunk.done)
    console.print(f"[green]{'Checked off' if done else 'Unchecked'} {chunk.display_title}[/green]")


def cmd_move(db_path: str, tz, overrides: OverrideStore):
    chunk, plan = _pick_chunk(db_path, tz, overrides)
    if chunk is None:
        return
    days = [add_days(plan.window_start, i) for i in range(WINDOW_DAYS)]
    for i, day in enumerate(days):
        console.print(f"  [cyan]{i}[/cyan]) {format_day_label(day, plan.window_start)}")
    choice = form_prompt("Move to day", choices=[str(i) for i in range(len(days))])
    day = days[int(choice)]
    overrides.move(chunk.key, day)
    console.print(f"[green]Moved {chunk.display_title} to {format_day_label(day, plan.window_start)}[/green]")


def cmd_export(db_path: str, tz):
    items = load_assignments(db_path)
    if not items:
        console.print("[yellow]Nothing to export.[/yellow]")
        return
    path = Prompt.ask("File", default="assignments.ics")
    count = export_ics(items, path, tz)
    console.print(f"[green]Wrote {count} event(s) to {path}[/green]")


def cmd_link(db_path: str, tz):
    a = pick_assignment(load_assignments(db_path), tz)
    if a is None:
        return
    console.print(google_calendar_url(a, tz), soft_wrap=True)


def cmd_import(db_path: str, tz):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path, tz)
    msg = f"Imported {result['imported']} assignment(s) from {result['filename']}"
    if result["skipped"]:
        msg += f" ([yellow]{result['skipped']} skipped[/yellow])"
    console.print(f"[green]{msg}[/green]")


def cmd_timezone(db_path: str) -> str:
    name = Prompt.ask("Timezone (IANA name)", default=get_timezone(db_path))
    set_timezone(db_path, name)
    console.print(f"[green]Timezone set to {name.strip()}[/green]")
    return name.strip()


def main(db_path: str = DEFAULT_DB_PATH):
    setup_logging()
    init_db(db_path)
    tz_name = get_timezone(db_path)
    tz = get_zone(tz_name)
    overrides = OverrideStore.load(SqliteOverrideAdapter(db_path))
    pruned = overrides.prune(a.id for a in load_assignments(db_path))
    if pruned:
        logger.info("Removed %d override(s) for deleted assignments", pruned)

    show_welcome(tz_name)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="plan").strip().lower()
        try:
            if choice == "add":
                cmd_add(db_path, tz)
            elif choice == "edit":
                cmd_edit(db_path, tz)
            elif choice == "delete":
                cmd_delete(db_path, tz, overrides)
            elif choice == "list":
                cmd_list(db_path, tz)
            elif choice == "plan":
                cmd_plan(db_path, tz, overrides)
            elif choice == "done":
                cmd_done(db_path, tz, overrides)
            elif choice == "move":
                cmd_move(db_path, tz, overrides)
            elif choice == "export":
                cmd_export(db_path, tz)
            elif choice == "link":
                cmd_link(db_path, tz)
            elif choice == "import":
                cmd_import(db_path, tz)
            elif choice == "timezone":
                tz = get_zone(cmd_timezone(db_path))
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck with your assignments![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except FormCancelled:
            console.print("[dim]Cancelled.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
