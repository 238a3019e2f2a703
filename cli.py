import typer
from rich.console import Console
from rich.table import Table
from typing import Optional, List
from datetime import date

from pacer.config import settings
from pacer.database import SessionLocal, init_db
from pacer.logging_config import configure_logging
from pacer.crud import (
    create_university, list_universities,
    create_textbook, get_textbook, list_textbooks, link_anki_deck,
    get_plan_for_textbook, list_study_logs,
    create_exam, list_exams, get_subject_scores
)
from pacer.schemas import UniversityCreate, TextbookCreate, ExamCreate, SubjectScoreInput
from pacer.errors import PacerError
from pacer.dates import parse_iso_date
from pacer.plan_compiler import compile_plan
from pacer.progress import STATUS_LABELS, ProgressStatus
from pacer.timeline import TimelineKind
from pacer.weekday_goals import WEEKDAY_NAMES, weekday_preset, format_weekday_goals
from pacer.yearly import yearly_statistics
from pacer import service

app = typer.Typer(help="Textbook Pacer CLI - plan textbooks to an exam and track your pace")
console = Console()

STATUS_STYLES = {
    ProgressStatus.ON_TRACK: "green",
    ProgressStatus.NEAR_TARGET: "cyan",
    ProgressStatus.SLIGHTLY_BEHIND: "yellow",
    ProgressStatus.BEHIND: "red",
}

KIND_STYLES = {
    TimelineKind.PLAN: "green",
    TimelineKind.EXAM: "red",
    TimelineKind.MOCK_EXAM: "yellow",
}


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level (default from settings)"),
    log_format: Optional[str] = typer.Option(None, help="console or json")
):
    """Configure logging before any command runs"""
    configure_logging(log_level or settings.log_level, log_format or settings.log_format)


def _fail(error: Exception):
    """Report a rejected request and exit non-zero"""
    console.print(f"[red]✗[/red] {error}")
    if isinstance(error, PacerError) and error.retryable:
        console.print("[yellow]The database could not be reached; try again.[/yellow]")
    raise typer.Exit(code=1)


def _date_option(value: Optional[str], default: Optional[date] = None) -> Optional[date]:
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        console.print(f"[red]✗[/red] Invalid date '{value}', expected YYYY-MM-DD")
        raise typer.Exit(code=1)


def _weekday_goals(goals: Optional[str], weekday: Optional[int], weekend: Optional[int]) -> Optional[dict]:
    """
    Goal map from either --goals "Sun=5,Mon=10,..." (or "0=5,1=10,...")
    or the --weekday/--weekend preset. Returns None if neither was given.
    """
    if goals:
        parsed = {}
        for part in goals.split(","):
            if not part.strip():
                continue
            key, _, value = part.partition("=")
            key = key.strip()
            day = WEEKDAY_NAMES.index(key.title()) if key.title() in WEEKDAY_NAMES else key
            try:
                parsed[day] = int(value)
            except ValueError:
                console.print(f"[red]✗[/red] Invalid goal '{part.strip()}', expected DAY=NUMBER")
                raise typer.Exit(code=1)
        return parsed
    if weekday is not None or weekend is not None:
        return weekday_preset(weekday or 0, weekend or 0)
    return None


# ===================================================================
# SETUP
# ===================================================================

@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")

@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from pacer.database import engine, Base
    import pacer.models  # noqa: F401
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")

@app.command()
def add_university(
    name: str = typer.Option(..., prompt="University name"),
    rank: Optional[int] = typer.Option(None, help="Preference rank (1 = first choice)"),
    notes: Optional[str] = typer.Option(None, help="Optional notes")
):
    """Add a target university"""
    db = SessionLocal()
    try:
        university = create_university(db, UniversityCreate(name=name, rank=rank, notes=notes))
        console.print(f"[green]✓[/green] University added! ID: {university.id}")
    finally:
        db.close()

@app.command()
def add_textbook(
    title: str = typer.Option(..., prompt="Textbook title"),
    subject: str = typer.Option(..., prompt="Subject (e.g., Math, English)"),
    total_problems: int = typer.Option(..., prompt="Total problems"),
    deck: Optional[str] = typer.Option(None, help="Review deck name")
):
    """Register a textbook"""
    if total_problems < 0:
        _fail(ValueError("Total problems cannot be negative"))
    db = SessionLocal()
    try:
        textbook = create_textbook(db, TextbookCreate(
            title=title,
            subject=subject,
            total_problems=total_problems,
            anki_deck_name=deck
        ))
        console.print(f"[green]✓[/green] Textbook added! ID: {textbook.id}")
        console.print(f"  {textbook.subject}: {textbook.title} ({textbook.total_problems} problems)")
    finally:
        db.close()

@app.command("list-textbooks")
def list_textbooks_cmd(subject: Optional[str] = typer.Option(None, help="Only this subject")):
    """List textbooks and their plans"""
    db = SessionLocal()
    try:
        textbooks = list_textbooks(db, subject=subject)
        if not textbooks:
            console.print("[yellow]No textbooks yet. Add one with add-textbook.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", justify="right")
        table.add_column("Subject", style="cyan")
        table.add_column("Title", style="green")
        table.add_column("Problems", justify="right")
        table.add_column("Plan", style="yellow")
        table.add_column("Deck", style="blue")

        for textbook in textbooks:
            plan = get_plan_for_textbook(db, textbook.id)
            plan_str = f"{plan.start_date} → {plan.end_date}" if plan else "-"
            table.add_row(
                str(textbook.id),
                textbook.subject,
                textbook.title,
                str(textbook.total_problems),
                plan_str,
                textbook.anki_deck_name or "-"
            )

        console.print(table)
    finally:
        db.close()

@app.command()
def link_deck(
    textbook_id: int,
    deck: Optional[str] = typer.Argument(None, help="Deck name; omit to unlink")
):
    """Link a textbook to a review deck"""
    db = SessionLocal()
    try:
        textbook = link_anki_deck(db, textbook_id, deck)
        if not textbook:
            console.print(f"[red]✗[/red] Textbook ID {textbook_id} not found")
            raise typer.Exit(code=1)
        if deck:
            console.print(f"[green]✓[/green] Linked '{textbook.title}' to deck '{deck}'")
        else:
            console.print(f"[green]✓[/green] Unlinked deck from '{textbook.title}'")
    finally:
        db.close()


# ===================================================================
# PLANNING
# ===================================================================

@app.command()
def preview_plan(
    total_problems: int = typer.Option(..., prompt="Total problems"),
    start: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD). Default: today"),
    goals: Optional[str] = typer.Option(None, help="Per-day goals, e.g. 'Sun=0,Mon=10,Sat=20'"),
    weekday: Optional[int] = typer.Option(None, help="Goal for Monday-Friday"),
    weekend: Optional[int] = typer.Option(None, help="Goal for Saturday and Sunday"),
    buffer_days: int = typer.Option(0, help="Slack days after the last full week")
):
    """Show when a textbook would be finished, without saving anything"""
    start_date = _date_option(start, date.today())
    weekday_goals = _weekday_goals(goals, weekday, weekend)
    if weekday_goals is None:
        _fail(ValueError("Give --goals or --weekday/--weekend"))

    try:
        compiled = compile_plan(start_date, weekday_goals, buffer_days, total_problems)
    except PacerError as e:
        _fail(e)

    console.print("\n[bold]Plan Preview[/bold]")
    console.print(f"  Start: {compiled.start_date}")
    console.print(f"  End: [bold]{compiled.end_date}[/bold] ({compiled.total_days} days)")
    console.print(f"  Weekly total: {compiled.weekly_total} problems")
    console.print(f"  Weeks needed: {compiled.weeks_needed}")
    console.print(f"  Buffer: {compiled.buffer_days} days")
    console.print(f"  Goals: {format_weekday_goals(compiled.weekday_goals)}")

@app.command()
def plan(
    textbook_id: int = typer.Option(..., prompt="Textbook ID"),
    start: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD). Default: today"),
    goals: Optional[str] = typer.Option(None, help="Per-day goals, e.g. 'Sun=0,Mon=10,Sat=20'"),
    weekday: Optional[int] = typer.Option(None, help="Goal for Monday-Friday"),
    weekend: Optional[int] = typer.Option(None, help="Goal for Saturday and Sunday"),
    buffer_days: int = typer.Option(0, help="Slack days after the last full week"),
    total_problems: Optional[int] = typer.Option(None, help="Override the textbook's total"),
    daily_goal: Optional[int] = typer.Option(None, help="Flat daily goal. Default: Monday's goal")
):
    """Create a study plan for a textbook"""
    start_date = _date_option(start, date.today())
    weekday_goals = _weekday_goals(goals, weekday, weekend)
    if weekday_goals is None:
        _fail(ValueError("Give --goals or --weekday/--weekend"))

    db = SessionLocal()
    try:
        study_plan = service.plan_study(
            db, textbook_id, start_date, weekday_goals,
            buffer_days=buffer_days, total_problems=total_problems, daily_goal=daily_goal
        )
        console.print(f"[green]✓[/green] Study plan created! ID: {study_plan.id}")
        console.print(f"  {study_plan.textbook_subject}: {study_plan.textbook_title}")
        console.print(f"  {study_plan.start_date} → [bold]{study_plan.end_date}[/bold]")
        console.print(f"  Goals: {format_weekday_goals(study_plan.weekday_goals)}")
    except PacerError as e:
        _fail(e)
    finally:
        db.close()

@app.command()
def replan(
    plan_id: int = typer.Option(..., prompt="Plan ID"),
    start: Optional[str] = typer.Option(None, help="New start date (YYYY-MM-DD)"),
    goals: Optional[str] = typer.Option(None, help="New per-day goals, e.g. 'Sun=0,Mon=10'"),
    weekday: Optional[int] = typer.Option(None, help="New goal for Monday-Friday"),
    weekend: Optional[int] = typer.Option(None, help="New goal for Saturday and Sunday"),
    buffer_days: Optional[int] = typer.Option(None, help="New buffer days"),
    total_problems: Optional[int] = typer.Option(None, help="New problem total"),
    daily_goal: Optional[int] = typer.Option(None, help="New flat daily goal")
):
    """Recompile a study plan; options left out keep their current value"""
    start_date = _date_option(start)
    weekday_goals = _weekday_goals(goals, weekday, weekend)

    db = SessionLocal()
    try:
        study_plan = service.replan_study(
            db, plan_id,
            start_date=start_date,
            weekday_goals=weekday_goals,
            buffer_days=buffer_days,
            total_problems=total_problems,
            daily_goal=daily_goal
        )
        console.print(f"[green]✓[/green] Study plan {study_plan.id} updated!")
        console.print(f"  {study_plan.start_date} → [bold]{study_plan.end_date}[/bold]")
    except PacerError as e:
        _fail(e)
    finally:
        db.close()

@app.command()
def delete_plan(plan_id: int):
    """Delete a study plan (logs are kept)"""
    db = SessionLocal()
    try:
        service.delete_plan(db, plan_id)
        console.print(f"[green]✓[/green] Study plan {plan_id} deleted")
    except PacerError as e:
        _fail(e)
    finally:
        db.close()


# ===================================================================
# DAILY WORK
# ===================================================================

@app.command()
def log_work(
    textbook_id: int = typer.Option(..., prompt="Textbook ID"),
    amount: int = typer.Option(..., prompt="Problems solved"),
    log_date: Optional[str] = typer.Option(None, "--date", help="Date (YYYY-MM-DD), default: today"),
    planned: Optional[int] = typer.Option(None, help="Planned amount. Default: the plan's target"),
    notes: Optional[str] = typer.Option(None, help="Optional notes")
):
    """Record problems solved on a day (overwrites that day's entry)"""
    day = _date_option(log_date, date.today())
    db = SessionLocal()
    try:
        log = service.record_daily_work(db, textbook_id, day, amount, planned_amount=planned, notes=notes)
        console.print(f"[green]✓[/green] Logged {log.actual_amount} problems for {log.date}")
        console.print(f"  {log.textbook_subject}: {log.textbook_title} (planned {log.planned_amount})")
    except PacerError as e:
        _fail(e)
    finally:
        db.close()

@app.command()
def list_logs(
    start: Optional[str] = typer.Option(None, help="From date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, help="To date (YYYY-MM-DD)"),
    textbook_id: Optional[int] = typer.Option(None, help="Only this textbook"),
    limit: int = typer.Option(30, help="Rows to show")
):
    """List study logs, newest first"""
    db = SessionLocal()
    try:
        logs = list_study_logs(db, _date_option(start), _date_option(end), textbook_id)
        if not logs:
            console.print("[yellow]No study logs found.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan", width=12)
        table.add_column("Textbook", style="green")
        table.add_column("Planned", justify="right")
        table.add_column("Actual", style="blue", justify="right")
        table.add_column("Notes", style="dim")

        for log in logs[:limit]:
            table.add_row(
                str(log.date),
                f"{log.textbook_subject}: {log.textbook_title}",
                str(log.planned_amount),
                str(log.actual_amount),
                log.notes or ""
            )

        console.print(table)
        if len(logs) > limit:
            console.print(f"[dim]... and {len(logs) - limit} more logs[/dim]")
    finally:
        db.close()


# ===================================================================
# REPORTS
# ===================================================================

@app.command()
def progress(
    textbook_id: Optional[int] = typer.Argument(None, help="Textbook ID; omit for all textbooks"),
    chart: bool = typer.Option(False, help="Show the day-by-day cumulative series")
):
    """Compare solved problems against the ideal pace"""
    db = SessionLocal()
    try:
        if textbook_id is not None:
            snapshot = service.get_progress(db, textbook_id)
            textbook = get_textbook(db, textbook_id)
            _print_progress(f"{textbook.subject}: {textbook.title}", snapshot, chart)
            return

        all_progress = service.get_all_progress(db)
        if not all_progress:
            console.print("[yellow]No textbooks yet. Add one with add-textbook.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Textbook", style="green")
        table.add_column("Solved", justify="right")
        table.add_column("Ideal", justify="right")
        table.add_column("Diff", justify="right")
        table.add_column("Status")
        table.add_column("Daily Target", justify="right")

        for textbook in list_textbooks(db):
            snapshot = all_progress.get(textbook.id)
            name = f"{textbook.subject}: {textbook.title}"
            if snapshot is None:
                table.add_row(name, "-", "-", "-", "[dim]No plan[/dim]", "-")
                continue
            style = STATUS_STYLES[snapshot.status]
            table.add_row(
                name,
                f"{snapshot.actual_solved}/{snapshot.total_problems}",
                str(snapshot.ideal_solved),
                f"{snapshot.difference:+d}",
                f"[{style}]{STATUS_LABELS[snapshot.status]}[/{style}]",
                str(snapshot.daily_target)
            )

        console.print(table)
    except PacerError as e:
        _fail(e)
    finally:
        db.close()


def _print_progress(name: str, snapshot, chart: bool):
    style = STATUS_STYLES[snapshot.status]
    console.print(f"\n[bold]{name}[/bold]")
    console.print(f"  Status: [{style}]{STATUS_LABELS[snapshot.status]}[/{style}] ({snapshot.difference:+d})")
    console.print(f"  Solved: {snapshot.actual_solved}/{snapshot.total_problems} ({snapshot.progress_percentage}%)")
    console.print(f"  Ideal by today: {snapshot.ideal_solved}")
    console.print(f"  Days: {snapshot.elapsed_days}/{snapshot.total_days} ({snapshot.remaining_days} left)")
    console.print(f"  Daily target: {snapshot.daily_target} ({snapshot.remaining_problems} remaining)")

    if chart and snapshot.series:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan", width=12)
        table.add_column("Planned", justify="right")
        table.add_column("Actual", justify="right")
        table.add_column("Cumulative", style="blue", justify="right")
        table.add_column("Ideal", style="yellow", justify="right")
        for point in snapshot.series:
            table.add_row(
                str(point.date),
                str(point.planned),
                str(point.actual),
                str(point.cumulative_actual),
                str(point.cumulative_ideal)
            )
        console.print(table)

@app.command()
def timeline(
    start: Optional[str] = typer.Option(None, help="From date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, help="To date (YYYY-MM-DD)")
):
    """Show study plans and exams in date order"""
    db = SessionLocal()
    try:
        events = service.get_timeline(db, _date_option(start), _date_option(end))
        if not events:
            console.print("[yellow]Nothing scheduled in this range.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Start", style="cyan", width=12)
        table.add_column("End", style="cyan", width=12)
        table.add_column("Kind")
        table.add_column("Title", style="green")
        table.add_column("ID", style="dim")

        for event in events:
            style = KIND_STYLES[event.kind]
            table.add_row(
                str(event.start_date),
                str(event.end_date) if event.kind == TimelineKind.PLAN else "",
                f"[{style}]{event.kind.value}[/{style}]",
                event.title,
                event.id
            )

        console.print(table)
    except PacerError as e:
        _fail(e)
    finally:
        db.close()

@app.command()
def yearly(
    year: Optional[int] = typer.Argument(None, help="Year, default: this year"),
    textbook_id: Optional[int] = typer.Option(None, help="Only this textbook"),
    subject: Optional[str] = typer.Option(None, help="Only this subject")
):
    """Problems solved per month of a year, with totals"""
    year = year or date.today().year
    db = SessionLocal()
    try:
        days = service.get_yearly_summary(db, year, textbook_id=textbook_id, subject=subject)
    except PacerError as e:
        _fail(e)
    finally:
        db.close()

    stats = yearly_statistics(days)
    console.print(f"\n[bold]{year}[/bold]")
    console.print(f"  Total: {stats.total_amount} problems on {stats.study_days} days")
    console.print(f"  Best day: {stats.max_day}  Average: {stats.avg_per_day}/day")

    if days:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Month", style="cyan")
        table.add_column("Days", justify="right")
        table.add_column("Problems", style="blue", justify="right")
        for month in range(1, 13):
            month_days = {d: n for d, n in days.items() if d.month == month}
            if month_days:
                table.add_row(
                    date(year, month, 1).strftime("%b"),
                    str(len(month_days)),
                    str(sum(month_days.values()))
                )
        console.print(table)

@app.command()
def today():
    """What to solve today"""
    db = SessionLocal()
    try:
        tasks = service.get_todays_tasks(db)
        if not tasks:
            console.print("[yellow]No active study plans today.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Subject", style="cyan")
        table.add_column("Textbook", style="green")
        table.add_column("Target", style="blue", justify="right")
        table.add_column("Review Deck", style="yellow")

        for task in tasks:
            table.add_row(task.subject, task.title, str(task.target), task.review_deck or "-")

        console.print(table)
    except PacerError as e:
        _fail(e)
    finally:
        db.close()


# ===================================================================
# EXAMS
# ===================================================================

@app.command()
def add_exam(
    name: str = typer.Option(..., prompt="Exam name"),
    exam_date: str = typer.Option(..., "--date", prompt="Exam date (YYYY-MM-DD)"),
    exam_type: str = typer.Option(..., prompt="Exam type (e.g., general, secondary)"),
    mock: bool = typer.Option(False, help="Mock exam"),
    university_id: Optional[int] = typer.Option(None, help="University ID"),
    notes: Optional[str] = typer.Option(None, help="Optional notes")
):
    """Add a real or mock exam"""
    day = _date_option(exam_date)
    db = SessionLocal()
    try:
        exam = create_exam(db, ExamCreate(
            name=name,
            date=day,
            is_mock=mock,
            exam_type=exam_type,
            university_id=university_id,
            notes=notes
        ))
        kind = "Mock exam" if exam.is_mock else "Exam"
        console.print(f"[green]✓[/green] {kind} added! ID: {exam.id}")
    finally:
        db.close()

@app.command("list-exams")
def list_exams_cmd(
    start: Optional[str] = typer.Option(None, help="From date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, help="To date (YYYY-MM-DD)"),
    scores: bool = typer.Option(False, help="Show subject scores")
):
    """List exams and universities"""
    db = SessionLocal()
    try:
        exams = list_exams(db, _date_option(start), _date_option(end))
        if not exams:
            console.print("[yellow]No exams found.[/yellow]")
        else:
            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("ID", style="dim", justify="right")
            table.add_column("Date", style="cyan", width=12)
            table.add_column("Name", style="green")
            table.add_column("Type")
            table.add_column("University", style="yellow")
            table.add_column("Mock")

            for exam in exams:
                table.add_row(
                    str(exam.id),
                    str(exam.date),
                    exam.name,
                    exam.exam_type,
                    exam.university_name or "-",
                    "yes" if exam.is_mock else ""
                )
            console.print(table)

            if scores:
                for exam in exams:
                    for row in get_subject_scores(db, exam.id):
                        max_str = f"/{row.max_score:g}" if row.max_score is not None else ""
                        score_str = f"{row.score:g}" if row.score is not None else "-"
                        console.print(f"  {exam.name} [{row.exam_type}] {row.subject}: {score_str}{max_str}")

        universities = list_universities(db)
        if universities:
            console.print("\n[cyan]Universities:[/cyan]")
            for university in universities:
                rank_str = f"#{university.rank} " if university.rank is not None else ""
                console.print(f"  {rank_str}{university.name} (ID: {university.id})")
    finally:
        db.close()

@app.command()
def record_scores(
    exam_id: int = typer.Option(..., prompt="Exam ID"),
    score: List[str] = typer.Option(..., help="TYPE:SUBJECT:SCORE[/MAX], repeatable")
):
    """Save subject scores for an exam (all or nothing)"""
    rows = []
    for item in score:
        parts = item.split(":")
        if len(parts) != 3:
            _fail(ValueError(f"Invalid score '{item}', expected TYPE:SUBJECT:SCORE[/MAX]"))
        exam_type, subject, value = parts
        value, _, max_value = value.partition("/")
        try:
            rows.append(SubjectScoreInput(
                exam_type=exam_type.strip(),
                subject=subject.strip(),
                score=float(value) if value.strip() else None,
                max_score=float(max_value) if max_value.strip() else None
            ))
        except ValueError as e:
            _fail(ValueError(f"Invalid score '{item}': {e}"))

    db = SessionLocal()
    try:
        saved = service.record_subject_scores(db, exam_id, rows)
        console.print(f"[green]✓[/green] Saved {len(rows)} scores ({len(saved)} on record for exam {exam_id})")
    except PacerError as e:
        _fail(e)
    finally:
        db.close()

if __name__ == "__main__":
    app()
