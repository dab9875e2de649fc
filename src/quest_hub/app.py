"""Interactive CLI application."""
import asyncio
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from quest_hub.config import DEFAULT_DB_PATH, LOG_LEVEL
from quest_hub.dashboard import (
    get_badge_board, get_class_roster, get_level_color, get_level_label, get_level_progress,
    get_quest_progress, get_recent_activity, get_weekly_history,
)
from quest_hub.delegate import CONTENT_KINDS, ContentDelegate
from quest_hub.importer import read_roster_names
from quest_hub.models import CONTENT_TYPES, DIFFICULTIES
from quest_hub.persistence import LoadStatus, export_backup
from quest_hub.store import AppStore

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user types q/menu at any prompt to return to the main menu."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer is not None and answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str] = None, **kwargs) -> int:
    return int(session_prompt(prompt, choices=choices, **kwargs))


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Quest Hub[/bold]\n[dim]Gamified learning units, classes and progress[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("units", "Browse learning units"),
        ("open", "Open a unit and work through its tasks"),
        ("stats", "Level, XP and weekly activity"),
        ("badges", "Badge collection"),
        ("daily", "Today's daily challenge"),
        ("new", "Generate a new unit"),
        ("addtask", "Generate a task for a unit"),
        ("plan", "Generate a weekly lesson plan"),
        ("classes", "Classes and rosters"),
        ("backup", "Export a JSON backup"),
        ("reset", "Factory reset"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def celebrate(badges) -> None:
    for badge in badges:
        console.print(Panel(
            f"[bold yellow]{badge.title}[/bold yellow]\n{badge.description}",
            title="Badge Unlocked!", border_style="yellow",
        ))


def pick(items: list, label, title: str):
    """Show a numbered list and return the chosen item."""
    if not items:
        console.print(f"[yellow]No {title.lower()} available.[/yellow]")
        return None
    for i, item in enumerate(items, 1):
        console.print(f"  [cyan]{i:>3}[/cyan]) {label(item)}")
    choice = session_int_prompt(f"Select {title.lower()}", choices=[str(i) for i in range(1, len(items) + 1)])
    return items[choice - 1]


def cmd_units(store: AppStore):
    year = pick(store.state.years, lambda y: y.title, "Year")
    if year is None:
        return
    quests = [q for q in store.state.quests if q.year_id == year.id]
    table = Table(title=f"Units: {year.title}")
    table.add_column("#", justify="right")
    table.add_column("Unit", style="cyan")
    table.add_column("Tasks", justify="right")
    table.add_column("XP", justify="right")
    table.add_column("Progress", justify="right")
    for i, q in enumerate(quests, 1):
        table.add_row(str(i), q.title, str(len(q.tasks)), f"{q.earned_xp}/{q.total_xp}", f"{get_quest_progress(q)}%")
    console.print(table)


def show_quest(quest):
    table = Table(title=f"{quest.title} ({quest.earned_xp}/{quest.total_xp} XP)")
    table.add_column("#", justify="right")
    table.add_column("Task")
    table.add_column("Type")
    table.add_column("XP", justify="right")
    table.add_column("Done")
    for i, t in enumerate(quest.tasks, 1):
        table.add_row(str(i), t.title, t.type, str(t.xp), "[green]✔[/green]" if t.is_completed else "")
    console.print(Panel(quest.description, title="Mission Briefing", border_style="blue"))
    console.print(table)


def cmd_open(store: AppStore, delegate: ContentDelegate):
    quest = pick(store.state.quests, lambda q: f"{q.title} [dim]{get_quest_progress(q)}%[/dim]", "Unit")
    if quest is None:
        return
    while True:
        quest = store.state.find_quest(quest.id)
        show_quest(quest)
        action = session_prompt("Action", choices=["toggle", "content", "back"], default="toggle")
        if action == "back":
            return
        task = pick(quest.tasks, lambda t: t.title, "Task")
        if task is None:
            continue
        if action == "toggle":
            celebrate(store.toggle_task(quest.id, task.id))
        else:
            kind = session_prompt("Content", choices=list(CONTENT_KINDS), default="markdown")
            with console.status("Generating content..."):
                filled = asyncio.run(store.generate_task_content(delegate, quest.id, task.id, kind))
            if filled is None:
                console.print("[yellow]The unit changed while generating; result discarded.[/yellow]")
            elif filled.markdown_content and kind == "markdown":
                console.print(Panel(filled.markdown_content, title=filled.title))
            else:
                console.print(f"[green]{kind.capitalize()} attached to {filled.title}.[/green]")


def cmd_stats(store: AppStore):
    stats = store.state.stats
    progress = get_level_progress(stats)
    color = get_level_color(progress)
    bar_filled = int(progress / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(Panel(
        f"Level [bold]{stats.level}[/bold] · {get_level_label(stats.level)}\n"
        f"{stats.current_xp}/{stats.next_level_xp} XP {bar} {progress}%\n"
        f"Streak: [bold]{stats.streak_days}[/bold] days  |  Units completed: [bold]{stats.total_quests_completed}[/bold]",
        title="Your Progress", border_style="blue",
    ))
    table = Table(title="Last 7 Days")
    table.add_column("Date")
    table.add_column("XP", justify="right")
    for day in get_weekly_history(stats):
        table.add_row(day["date"], str(day["xp"]))
    console.print(table)
    recent = get_recent_activity(store.state.quests)
    if recent:
        console.print("\n[bold]Recent Activity:[/bold]")
        for q in recent:
            console.print(f"  [cyan]{q.title}[/cyan] {get_quest_progress(q)}%")


def cmd_badges(store: AppStore):
    table = Table(title="Badges")
    table.add_column("Badge")
    table.add_column("Requirement")
    table.add_column("Status")
    for entry in get_badge_board(store.state.stats):
        badge = entry["badge"]
        status = "[green]Earned[/green]" if entry["earned"] else "[dim]Locked[/dim]"
        table.add_row(badge.title, badge.description, status)
    console.print(table)


def cmd_daily(store: AppStore, delegate: ContentDelegate):
    with console.status("Preparing today's challenge..."):
        task = asyncio.run(store.offer_daily_challenge(delegate))
    if task is None:
        console.print("[green]You've already accepted today's challenge. Come back tomorrow![/green]")
        return
    console.print(Panel(f"{task.description}\n\n[bold]{task.xp} XP[/bold]", title=task.title, border_style="yellow"))
    if session_prompt("Accept?", choices=["y", "n"], default="y") == "y":
        store.accept_daily_challenge(task)
        console.print("[green]Daily Challenge Accepted![/green]")


def cmd_new(store: AppStore, delegate: ContentDelegate):
    topic = session_prompt("Topic")
    difficulty = session_prompt("Difficulty", choices=list(DIFFICULTIES), default="Beginner")
    notes = session_prompt("Notes", default="")
    year = pick(store.state.years, lambda y: y.title, "Year")
    with console.status("Designing your unit..."):
        quest = asyncio.run(store.create_quest(delegate, topic, difficulty, notes or None, year.id if year else None))
    console.print(f"[green]New Unit added: {quest.title}[/green]")
    show_quest(quest)


def cmd_addtask(store: AppStore, delegate: ContentDelegate):
    quest = pick(store.state.quests, lambda q: q.title, "Unit")
    if quest is None:
        return
    title = session_prompt("Task title")
    task_type = session_prompt("Type", choices=list(CONTENT_TYPES), default="Lesson")
    with console.status("Generating task..."):
        task = asyncio.run(store.add_generated_task(delegate, quest.id, title, task_type))
    if task is None:
        console.print("[yellow]The unit changed while generating; result discarded.[/yellow]")
    else:
        console.print(f"[green]Added {task.title} ({task.xp} XP)[/green]")


def cmd_plan(delegate: ContentDelegate):
    grade = session_prompt("Grade")
    unit = session_prompt("Unit")
    week = session_prompt("Week", default="1")
    topic = session_prompt("Topic")
    with console.status("Writing lesson plan..."):
        plan = asyncio.run(delegate.generate_lesson_plan(grade, unit, week, topic))
    console.print(Panel(plan.student_edition, title="Student Edition", border_style="blue"))
    console.print(Panel(plan.exit_tickets, title="Exit Tickets", border_style="green"))
    console.print(Panel(plan.teacher_pack, title="Teacher Pack", border_style="yellow"))


def show_roster(store: AppStore, class_id: str):
    group = store.state.find_class(class_id)
    table = Table(title=group.title)
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("XP", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Status")
    for i, s in enumerate(get_class_roster(store.state, class_id), 1):
        table.add_row(str(i), s.name, s.email or "", str(s.xp), str(s.level), s.status)
    console.print(table)


def cmd_classes(store: AppStore):
    years = {y.id: y.title for y in store.state.years}
    action = session_prompt("Action", choices=["view", "create", "delete"], default="view")
    if action == "create":
        title = session_prompt("Class name")
        year = pick(store.state.years, lambda y: y.title, "Year")
        if year is not None:
            store.add_class(title, year.id)
            console.print(f'[green]Class "{title}" created[/green]')
        return
    group = pick(store.state.classes, lambda c: f"{c.title} [dim]{years.get(c.year_id, '')}[/dim]", "Class")
    if group is None:
        return
    if action == "delete":
        store.delete_class(group.id)
        console.print("[green]Class deleted[/green]")
        return
    while True:
        show_roster(store, group.id)
        roster_action = session_prompt("Roster", choices=["enroll", "bulk", "remove", "back"], default="back")
        if roster_action == "back":
            return
        if roster_action == "enroll":
            name = session_prompt("Student name")
            store.enroll_student(name, group.id)
            console.print(f"[green]Student {name} enrolled[/green]")
        elif roster_action == "bulk":
            file_path = session_prompt("Roster file path")
            if not Path(file_path).exists():
                console.print(f"[red]File not found: {file_path}[/red]")
                continue
            count = store.enroll_students_bulk(read_roster_names(file_path), group.id)
            console.print(f"[green]{count} students enrolled[/green]")
        else:
            student = pick(get_class_roster(store.state, group.id), lambda s: s.name, "Student")
            if student is not None:
                store.remove_student(student.id, group.id)
                console.print("[green]Student removed from roster[/green]")


def cmd_backup(store: AppStore):
    path = session_prompt("Backup file", default="questhub_backup.json")
    target = export_backup(store.state, path)
    console.print(f"[green]Backup written to {target}[/green]")


def cmd_reset(store: AppStore):
    if session_prompt("This deletes all progress, custom units and classes. Continue?", choices=["y", "n"], default="n") == "y":
        store.reset()
        console.print("[green]App reset to factory settings.[/green]")


def main():
    configure_logging()
    store = AppStore.open(DEFAULT_DB_PATH)
    if store.status is LoadStatus.SEEDED:
        console.print("[dim]Loaded the standard curriculum.[/dim]")
    delegate = ContentDelegate()
    if not delegate.is_configured:
        console.print("[yellow]No GEMINI_API_KEY set: generated content will use demo material.[/yellow]")

    show_welcome()

    commands = {
        "units": lambda: cmd_units(store),
        "open": lambda: cmd_open(store, delegate),
        "stats": lambda: cmd_stats(store),
        "badges": lambda: cmd_badges(store),
        "daily": lambda: cmd_daily(store, delegate),
        "new": lambda: cmd_new(store, delegate),
        "addtask": lambda: cmd_addtask(store, delegate),
        "plan": lambda: cmd_plan(delegate),
        "classes": lambda: cmd_classes(store),
        "backup": lambda: cmd_backup(store),
        "reset": lambda: cmd_reset(store),
    }

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="units").strip().lower()
        try:
            if choice in commands:
                commands[choice]()
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Keep questing![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            continue
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
