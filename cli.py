import logging
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from typing import Optional
from datetime import date, datetime

from noraliva.config import settings
from noraliva.database import SessionLocal, init_db
from noraliva.crud import (
    create_profile, get_profile, get_profile_by_slug,
    get_domain_by_slug, import_curriculum_rows,
    get_next_exercise, submit_answer, get_learner_mastery,
    start_learning_session, end_learning_session,
    get_xp_streak_by_slug, upsert_xp_streak, award_answer_xp,
    get_parent_view_data, log_chat_message
)
from noraliva.schemas import ProfileCreate, CurriculumRow
from noraliva.curriculum_parser import CurriculumParser
from noraliva.learners import get_learner_profile
from noraliva.missions import get_daily_mission
from noraliva.streaks import apply_missed_day, complete_mission, commit_to_challenge
from noraliva.ace import get_ace, feeling_reply

app = typer.Typer(help="Noraliva CLI - missions, mastery and spaced review for young learners")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    """Configure logging for every command"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)]
    )


def _resolve_learner(db, learner: str):
    """Accept a numeric profile id or a slug"""
    if learner.isdigit():
        return get_profile(db, int(learner))
    return get_profile_by_slug(db, learner)


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

    from noraliva.database import engine, Base
    import noraliva.models  # noqa: F401
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")

@app.command()
def create_learner(
    slug: str = typer.Option(..., prompt="Learner slug (e.g., liv, elle)"),
    parent_id: Optional[int] = typer.Option(None, help="Parent profile ID"),
    parent: bool = typer.Option(False, "--parent", help="Create a parent profile instead")
):
    """Create a learner (or parent) profile, using built-in defaults for known learners"""
    db = SessionLocal()
    try:
        if parent:
            profile_data = ProfileCreate(slug=slug.lower(), role="parent", display_name=slug.title())
        else:
            defaults = get_learner_profile(slug)
            profile_data = ProfileCreate(
                slug=slug.lower(),
                role="learner",
                display_name=defaults.display_name,
                parent_id=parent_id,
                age=defaults.age or None,
                grade_label=defaults.grade_label,
                challenge_style=defaults.challenge_style
            )

        profile = create_profile(db, profile_data)
        console.print(f"[green]✓[/green] Profile created! ID: {profile.id}")
        console.print(f"  Name: {profile.display_name} ({profile.role})")
        if profile.grade_label:
            console.print(f"  Grade: {profile.grade_label}, challenge style: {profile.challenge_style}")
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
    finally:
        db.close()

@app.command()
def import_curriculum(
    file_path: str = typer.Option(..., prompt="Curriculum file path (.csv or .xlsx)")
):
    """Import domains, skills, lessons and exercises from a curriculum sheet"""
    db = SessionLocal()
    try:
        console.print("[yellow]Parsing curriculum...[/yellow]")
        raw_rows = CurriculumParser.auto_parse(file_path)
        console.print(f"[green]✓[/green] Extracted {len(raw_rows)} exercise rows")

        rows = []
        for item in raw_rows:
            try:
                rows.append(CurriculumRow(**item))
            except Exception as e:
                console.print(f"[red]Skipping row: {item.get('prompt', '?')} - {str(e)}[/red]")

        created = import_curriculum_rows(db, rows)
        console.print(f"[green]✓[/green] Imported {created} exercises")
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
    finally:
        db.close()

@app.command()
def next_exercise(
    learner: str = typer.Argument(..., help="Learner ID or slug"),
    domain: str = typer.Argument(..., help="Domain slug (e.g., math)"),
    last_exercise_id: Optional[int] = typer.Option(None, "--last", help="Exercise just served")
):
    """Show the next exercise for a learner"""
    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return

        exercise = get_next_exercise(db, profile.id, domain, last_exercise_id)
        if not exercise:
            console.print(f"[yellow]No exercises available in '{domain}'[/yellow]")
            return

        console.print(f"\n[bold]Next exercise[/bold] (ID {exercise.id}, skill {exercise.skill_id})")
        console.print(f"  {exercise.prompt}")
    finally:
        db.close()

@app.command()
def answer(
    learner: str = typer.Argument(..., help="Learner ID or slug"),
    exercise_id: int = typer.Argument(..., help="Exercise ID"),
    correct: bool = typer.Option(..., "--correct/--incorrect", help="Was the answer right?")
):
    """Record an answer and update mastery and review schedule"""
    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return

        result = submit_answer(db, profile.id, exercise_id, correct)

        console.print(f"[green]✓[/green] Answer recorded: {'correct ✅' if correct else 'try again 💛'}")
        console.print(f"  Mastery: {result.mastery_probability:.0%} after {result.attempts_count} attempts")
        console.print(f"  Confidence: {result.confidence_score:.1f}")
        console.print(f"  Next review: {result.next_review_at.strftime('%Y-%m-%d %H:%M')}")

        if correct:
            state = award_answer_xp(db, profile.id, exercise_id)
            if state:
                console.print(f"  XP: {state.xp}")
    except ValueError as e:
        console.print(f"[red]✗[/red] {str(e)}")
    finally:
        db.close()

@app.command()
def start_session(
    learner: str = typer.Argument(..., help="Learner ID or slug"),
    domain: str = typer.Argument(..., help="Domain slug")
):
    """Start a learning session"""
    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return

        session = start_learning_session(db, profile.id, domain)
        console.print(f"[green]✓[/green] Session started! ID: {session.id}")
    finally:
        db.close()

@app.command()
def end_session(
    learner: str = typer.Argument(..., help="Learner ID or slug"),
    session_id: int = typer.Argument(..., help="Session ID")
):
    """Complete a learning session"""
    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return

        session = end_learning_session(db, session_id, profile.id)
        if session:
            console.print(f"[green]✓[/green] Session {session.id} completed")
        else:
            console.print(f"[red]✗[/red] Session {session_id} not found for {profile.display_name}")
    finally:
        db.close()

@app.command()
def mission(
    learner: str = typer.Argument(..., help="Learner slug"),
    domain: str = typer.Argument(..., help="Domain slug (math, reading, ...)"),
    date_key: Optional[str] = typer.Option(None, "--date", help="Day (YYYY-MM-DD), default: today")
):
    """Show today's mission questions"""
    if date_key:
        try:
            datetime.strptime(date_key, "%Y-%m-%d")
        except ValueError:
            console.print(f"[red]✗[/red] Invalid date '{date_key}', expected YYYY-MM-DD")
            return

    daily = get_daily_mission(learner.lower(), domain, date_key)
    console.print(f"\n[bold]{daily.title}[/bold]")
    console.print(" → ".join(node.title for node in daily.nodes))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan")
    table.add_column("Question", style="green")
    table.add_column("Options", style="yellow")
    table.add_column("Skill", style="blue")

    for question in daily.questions:
        table.add_row(question.id, question.prompt, " / ".join(question.options), question.skill)

    console.print(table)

@app.command(name="complete-mission")
def complete_mission_cmd(
    learner: str = typer.Argument(..., help="Learner ID or slug"),
    domain: str = typer.Argument(..., help="Domain slug"),
    commit: bool = typer.Option(False, "--commit", help="Commit to the 7-day challenge first")
):
    """Mark today's mission complete and update XP and streak"""
    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return
        if not get_domain_by_slug(db, domain):
            console.print(f"[red]✗[/red] Domain '{domain}' not found")
            return

        state = get_xp_streak_by_slug(db, profile.id, domain)
        state, message = apply_missed_day(state, profile.challenge_style, date.today())
        if message:
            console.print(f"[yellow]{message}[/yellow]")

        if commit:
            state = commit_to_challenge(state)
            console.print("[green]Committed! One mission a day. You've got this. ✅[/green]")

        state = complete_mission(state, date.today())
        upsert_xp_streak(db, profile.id, domain, state)

        console.print("[green]✓[/green] Mission complete! 🎉 Nice work.")
        console.print(f"  XP: {state.xp}   🔥 Streak: {state.streak}")
        if state.committed:
            console.print(f"  Challenge: Day {state.challenge_day}/7")
    finally:
        db.close()

@app.command()
def parent_view(parent_id: int):
    """Show children's recent attempts and skill mastery"""
    db = SessionLocal()
    try:
        children = get_parent_view_data(db, parent_id)
        if not children:
            console.print(f"[yellow]No learners linked to parent {parent_id}[/yellow]")
            return

        for child in children:
            console.print(f"\n[bold]{child.display_name}[/bold]")

            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("Skill", style="cyan")
            table.add_column("Mastery", style="green", justify="right")
            table.add_column("Attempts", style="blue", justify="right")
            table.add_column("Next Review", style="yellow")

            for row in child.mastery:
                table.add_row(
                    row.skill_name,
                    f"{row.mastery_probability:.0%}",
                    str(row.attempts_count),
                    row.next_review_at.strftime("%Y-%m-%d %H:%M") if row.next_review_at else "-"
                )
            console.print(table)

            correct = sum(1 for a in child.attempts if a.correct)
            console.print(f"  Recent attempts: {len(child.attempts)} ({correct} correct)")
            for attempt in child.attempts[:5]:
                mark = "[green]✓[/green]" if attempt.correct else "[red]✗[/red]"
                console.print(f"  {mark} {attempt.created_at.strftime('%Y-%m-%d %H:%M')} {attempt.prompt[:50]}")
    finally:
        db.close()

@app.command()
def ask_ace(
    learner: str = typer.Argument(..., help="Learner ID or slug"),
    question: Optional[str] = typer.Option(None, help="Question for Ace"),
    feeling: Optional[str] = typer.Option(None, help="frustrated, dont_know, too_easy or too_hard")
):
    """Ask Ace for help, or tell Ace how a question feels"""
    if feeling:
        try:
            console.print(f"[bold]Ace:[/bold] {feeling_reply(feeling)}")
        except ValueError as e:
            console.print(f"[red]✗[/red] {str(e)}")
        return

    if not question:
        question = typer.prompt("What would you like to ask Ace?")

    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return

        learner_profile = get_learner_profile(profile.slug)
        console.print("[yellow]Ace is thinking...[/yellow]")
        reply = get_ace().ask(question, learner_profile)

        log_chat_message(db, profile.id, "user", question)
        log_chat_message(db, profile.id, "assistant", reply)

        console.print(f"[bold]Ace:[/bold] {reply}")
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
    finally:
        db.close()

@app.command()
def view_progress(learner: str = typer.Argument(..., help="Learner ID or slug")):
    """View skill mastery and upcoming reviews"""
    db = SessionLocal()
    try:
        profile = _resolve_learner(db, learner)
        if not profile:
            console.print(f"[red]✗[/red] Learner {learner} not found")
            return

        rows = get_learner_mastery(db, profile.id)
        console.print(f"\n[bold]Learning Progress - {profile.display_name}[/bold]\n")
        if not rows:
            console.print("[yellow]No skills practiced yet.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Skill", style="cyan")
        table.add_column("Mastery", style="green", justify="right")
        table.add_column("Confidence", style="blue", justify="right")
        table.add_column("Next Review", style="yellow")

        for row in rows:
            table.add_row(
                row.skill.name if row.skill else str(row.skill_id),
                f"{row.mastery_probability:.0%}",
                f"{row.confidence_score:.1f}",
                row.next_review_at.strftime("%Y-%m-%d %H:%M") if row.next_review_at else "-"
            )
        console.print(table)
    finally:
        db.close()

if __name__ == "__main__":
    app()
