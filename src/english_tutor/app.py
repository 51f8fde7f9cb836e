"""Interactive CLI application."""
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from english_tutor.challenge import ACTION_TYPES, GOAL_PRESETS
from english_tutor.clock import SessionClock
from english_tutor.config import get_settings
from english_tutor.dashboard import (
    format_clock, get_band_color, get_progress_summary, get_score_color,
)
from english_tutor.errors import TutorError
from english_tutor.importer import load_questions
from english_tutor.log import configure_logging
from english_tutor.models import AssessmentResult, SessionKind
from english_tutor.store import PersistentStore
from english_tutor.tracker import ProgressTracker

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """User asked to leave the current screen."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = Prompt.ask(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return int(answer)


def show_welcome(user_id: str):
    console.print(Panel(
        f"[bold]English Tutor[/bold]\n[dim]Progress & assessment for {user_id}[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("exam", "Timed exam from a question file"),
        ("resume", "Return to the running exam"),
        ("practice", "Untimed practice with instant feedback"),
        ("goal", "Set today's goal"),
        ("analyze", "Log an analyzed question"),
        ("word", "Save a vocabulary word"),
        ("action", "Log a completed activity"),
        ("dashboard", "Streak, goal and scores"),
        ("skills", "Skill tree"),
        ("badges", "Achievements"),
        ("history", "Past exam results"),
        ("clear", "Clear exam history and stats"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_result(result: AssessmentResult) -> None:
    color = get_score_color(result.percentage)
    console.print(Panel(
        f"Score: [bold {color}]{result.score}/{result.total_questions} ({result.percentage:.0f}%)[/bold {color}]\n"
        f"Time used: {format_clock(result.seconds_elapsed)}",
        title="Exam Finished", border_style=color,
    ))
    table = Table(title="By Category")
    table.add_column("Category", style="cyan")
    table.add_column("Correct", justify="right")
    for category, stats in sorted(result.performance_by_category.items()):
        table.add_row(category, f"{stats.correct}/{stats.total}")
    console.print(table)
    for q in result.questions:
        given = result.answers.get(q.ordinal)
        if given != q.correct_key:
            console.print(f"  [red]Q{q.ordinal}[/red] your answer: {given or '-'}, "
                          f"correct: [green]{q.correct_key}[/green]")


def run_exam(tracker: ProgressTracker) -> AssessmentResult | None:
    """Answer the active session's open questions until submit, timeout or exit.

    Leaving with ``q`` keeps the session running in the background.
    """
    controller = tracker.controller
    session_id = controller.session_id
    try:
        while controller.is_active:
            snapshot = controller.snapshot()
            open_questions = [q for q in snapshot.questions if q.ordinal not in snapshot.answers]
            if not open_questions:
                if Confirm.ask("All questions answered. Submit now?", default=True):
                    controller.finish()
                    break
                open_questions = list(snapshot.questions)
            for q in open_questions:
                if not controller.is_active:
                    break
                remaining = format_clock(controller.seconds_remaining)
                if q.passage:
                    console.print(Panel(q.passage, border_style="dim"))
                console.print(f"\n[bold]Q{q.ordinal}.[/bold] {q.prompt}  [dim]({remaining} left)[/dim]")
                for option in q.options:
                    console.print(f"  [cyan]{option.key})[/cyan] {option.text}")
                answer = session_prompt(
                    "Answer ([dim]Enter to skip, 'submit' to finish, 'q' to leave[/dim])", default="",
                ).strip()
                if answer.lower() == "submit":
                    controller.finish()
                    break
                if not answer:
                    continue
                try:
                    controller.record_answer(q.ordinal, answer.upper())
                except TutorError as e:
                    console.print(f"[red]{e}[/red]")
    except SessionExitRequested:
        console.print("[yellow]Exam still running in the background. Use 'resume' to return.[/yellow]")
    if controller.session_id == session_id:
        return None
    result = next((r for r in tracker.history.results() if r.session_id == session_id), None)
    if result is not None:
        show_result(result)
    return result


def cmd_exam(tracker: ProgressTracker, duration_seconds: int):
    if tracker.controller.is_active:
        console.print("[yellow]An exam is already running. Use 'resume' or finish it first.[/yellow]")
        return
    file_path = Prompt.ask("Question file")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    category = Prompt.ask("Default category", default="general")
    kind = Prompt.ask("Exam type", choices=[SessionKind.PDF_EXAM, SessionKind.READING,
                                             SessionKind.LISTENING, SessionKind.ORDERING],
                      default=SessionKind.PDF_EXAM)
    minutes = IntPrompt.ask("Duration (minutes)", default=max(1, duration_seconds // 60))
    questions = load_questions(file_path, category=category)
    tracker.controller.start(questions, minutes * 60, kind=kind)
    console.print(f"[green]Exam started: {len(questions)} questions, {minutes} minutes.[/green]")
    run_exam(tracker)


def cmd_resume(tracker: ProgressTracker):
    if not tracker.controller.is_active:
        console.print("[yellow]No exam is running.[/yellow]")
        return
    run_exam(tracker)


def cmd_practice(tracker: ProgressTracker):
    file_path = Prompt.ask("Question file")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    category = Prompt.ask("Default category", default="general")
    questions = [q for q in load_questions(file_path, category=category) if q.correct_key]
    if not questions:
        console.print("[yellow]No answerable questions found![/yellow]")
        return
    correct = 0
    try:
        for q in questions:
            console.print(f"\n[bold]Q{q.ordinal}.[/bold] {q.prompt}")
            for option in q.options:
                console.print(f"  [cyan]{option.key})[/cyan] {option.text}")
            answer = session_prompt("Your answer", choices=q.option_keys() + list(EXIT_WORDS))
            is_correct = answer == q.correct_key
            tracker.on_exercise_completed(q.category, is_correct)
            if is_correct:
                correct += 1
                console.print("[green]Correct![/green]")
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_key}[/green]")
    except SessionExitRequested:
        pass
    console.print(f"[bold]Practice score: {correct}/{len(questions)}[/bold]")


def cmd_goal(tracker: ProgressTracker):
    for i, preset in enumerate(GOAL_PRESETS, 1):
        console.print(f"  [cyan]{i}[/cyan]) {preset['description']}")
    console.print(f"  [cyan]{len(GOAL_PRESETS) + 1}[/cyan]) Custom goal")
    choice = IntPrompt.ask("Pick a goal", choices=[str(i) for i in range(1, len(GOAL_PRESETS) + 2)])
    if choice <= len(GOAL_PRESETS):
        preset = GOAL_PRESETS[choice - 1]
        tracker.challenge.set_challenge(preset["type"], preset["description"], preset["target"])
    else:
        action = Prompt.ask("Activity", choices=list(ACTION_TYPES))
        target = IntPrompt.ask("How many times", default=1)
        description = Prompt.ask("Description", default=f"{target} x {action}")
        tracker.challenge.set_challenge(action, description, target)
    console.print("[green]Goal set for today![/green]")


def _report_action(tracker: ProgressTracker, action_type: str):
    counted = tracker.on_action_performed(action_type)
    challenge = tracker.challenge.current_challenge()
    if counted and challenge and challenge.completed:
        console.print(f"[bold green]Daily goal complete! Streak: {tracker.challenge.current_streak()}[/bold green]")


def cmd_analyze(tracker: ProgressTracker):
    question = Prompt.ask("Question text")
    question_type = Prompt.ask("Question type", default="general")
    tracker.analyses.add(question, question_type)
    _report_action(tracker, "analyze")
    console.print("[green]Analysis logged.[/green]")


def cmd_word(tracker: ProgressTracker):
    word = Prompt.ask("Word")
    meaning = Prompt.ask("Meaning", default="")
    tracker.vocabulary.add(word, meaning)
    _report_action(tracker, "dictionary")
    console.print(f"[green]Saved. {len(tracker.vocabulary.items())} words in your list.[/green]")


def cmd_action(tracker: ProgressTracker):
    action = Prompt.ask("Activity", choices=list(ACTION_TYPES))
    _report_action(tracker, action)
    console.print("[green]Logged.[/green]")


def cmd_dashboard(tracker: ProgressTracker):
    summary = get_progress_summary(tracker)
    console.print(Panel(f"[bold]Streak: {summary['streak']} day(s)[/bold]",
                        title="Progress Dashboard", border_style="blue"))
    challenge = summary["challenge"]
    if challenge is None:
        console.print("\n  [dim]No goal set for today. Use 'goal' to pick one.[/dim]")
    elif challenge.completed:
        console.print(f"\n  [green]Goal complete:[/green] {challenge.description}")
    else:
        filled = int(challenge.progress / challenge.target * 20)
        bar = f"[cyan]{'█' * filled}{'░' * (20 - filled)}[/cyan]"
        console.print(f"\n  {challenge.description}: {bar} {challenge.progress}/{challenge.target}")

    latest = summary["latest_exam_score"]
    console.print(f"\n  Exams: [bold]{summary['exams_taken']}[/bold]  |  "
                  f"Avg: [bold]{summary['avg_exam_score']}%[/bold]  |  "
                  f"Latest: [bold]{'-' if latest is None else f'{latest}%'}[/bold]  |  "
                  f"Answered: [bold]{summary['questions_answered']}[/bold] "
                  f"({summary['overall_accuracy']}%)  |  "
                  f"Badges: [bold]{summary['badges_unlocked']}[/bold]")
    for weak in summary["weak_categories"]:
        console.print(f"  [yellow]Focus on {weak['category']}: {weak['score']}% "
                      f"of {weak['total']}[/yellow]")
    if tracker.controller.is_active:
        console.print(f"\n  [red]Exam running: {format_clock(tracker.controller.seconds_remaining)} left[/red]")


def cmd_skills(tracker: ProgressTracker):
    tracked = tracker.tracked_skills()
    if not tracked:
        console.print("[yellow]Your skill tree is empty. Practice to start building it.[/yellow]")
        return
    table = Table(title="Skill Tree")
    table.add_column("Skill", style="cyan")
    table.add_column("Correct", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Level")
    for skill in tracked:
        color = get_band_color(skill.band)
        table.add_row(skill.name, f"{skill.correct}/{skill.total}",
                      f"[{color}]{skill.percentage:.0f}%[/{color}]", skill.tier)
    console.print(table)


def cmd_badges(tracker: ProgressTracker):
    table = Table(title="Achievements")
    table.add_column("")
    table.add_column("Badge")
    table.add_column("Description")
    for status in tracker.achievements():
        d = status.definition
        if status.unlocked:
            table.add_row(d.icon, f"[bold]{d.title}[/bold]", d.description)
        else:
            table.add_row("🔒", f"[dim]{d.title}[/dim]", f"[dim]{d.description}[/dim]")
    console.print(table)


def cmd_history(tracker: ProgressTracker):
    results = tracker.history.results()
    if not results:
        console.print("[yellow]No exams taken yet.[/yellow]")
        return
    table = Table(title="Exam History")
    table.add_column("Finished")
    table.add_column("Type")
    table.add_column("Score", justify="right")
    table.add_column("Time", justify="right")
    for r in results:
        color = get_score_color(r.percentage)
        table.add_row(r.completed_at[:16].replace("T", " "), r.kind,
                      f"[{color}]{r.score}/{r.total_questions}[/{color}]",
                      format_clock(r.seconds_elapsed))
    console.print(table)


def cmd_clear(tracker: ProgressTracker):
    if Confirm.ask("Clear all exam history and performance stats?", default=False):
        tracker.clear_history()
        console.print("[green]History cleared.[/green]")


COMMANDS = {
    "resume": cmd_resume,
    "practice": cmd_practice,
    "goal": cmd_goal,
    "analyze": cmd_analyze,
    "word": cmd_word,
    "action": cmd_action,
    "dashboard": cmd_dashboard,
    "skills": cmd_skills,
    "badges": cmd_badges,
    "history": cmd_history,
    "clear": cmd_clear,
}


def main():
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    store = PersistentStore(settings.db_path)
    tracker = ProgressTracker(store, settings.user_id, history_limit=settings.history_limit)

    show_welcome(settings.user_id)

    with SessionClock(tracker.controller, settings.tick_interval_seconds):
        while True:
            show_menu()
            choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
            try:
                if choice == "exam":
                    cmd_exam(tracker, settings.exam_duration_seconds)
                elif choice in COMMANDS:
                    COMMANDS[choice](tracker)
                elif choice in ("quit", "exit", "q"):
                    if tracker.controller.is_active:
                        tracker.controller.abandon()
                    console.print("[dim]Keep practising![/dim]")
                    break
                else:
                    console.print("[red]Unknown command. Try again.[/red]")
                if tracker.last_persist_error:
                    console.print(f"[yellow]Progress not saved: {tracker.last_persist_error}[/yellow]")
            except KeyboardInterrupt:
                console.print("\n[dim]Use 'quit' to exit.[/dim]")
            except TutorError as e:
                console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
