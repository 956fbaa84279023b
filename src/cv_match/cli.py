"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from cv_match.config import THEMES, load_config
from cv_match.export.markdown_report import REPORT_FILENAME
from cv_match.logging.usage_store import UsageStore
from cv_match.models.analysis import AnalysisResult
from cv_match.session.controller import AppState, SessionController, build_controller

app = typer.Typer(
    name="cv-match",
    help="Score a CV against a job description with an LLM.",
    no_args_is_help=True,
)
console = Console()


def _controller() -> SessionController:
    return build_controller(load_config())


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _read_text(path: Path, label: str) -> str:
    if not path.exists():
        console.print(f"[red]{label} file not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def _rating_label(rating: int) -> str:
    if rating >= 4:
        return f"[green]Strong Match ({rating}/5)[/green]"
    if rating == 3:
        return f"[yellow]Partial ({rating}/5)[/yellow]"
    return f"[red]Gap ({rating}/5)[/red]"


def _print_result(result: AnalysisResult) -> None:
    color = _score_color(result.overall_score)
    console.print(
        Panel(
            f"[bold {color}]{result.overall_score}/100[/bold {color}]\n{result.summary}",
            title="Overall Match Score",
        )
    )

    console.print("\n[bold]Key Strengths[/bold]")
    for strength in result.strengths:
        console.print(f"  [green]✓[/green] {strength}")

    table = Table(title="Requirements Match Matrix", show_lines=True)
    table.add_column("Requirement", style="bold")
    table.add_column("Evidence")
    table.add_column("Rating")
    table.add_column("Gap Notes")
    table.add_column("Action to Improve")
    for r in result.requirements:
        table.add_row(r.requirement, r.evidence, _rating_label(r.rating), r.gap_notes, r.action_to_improve)
    console.print(table)

    if result.missing_keywords:
        console.print("\n[bold]Missing Keywords[/bold]")
        console.print("  " + ", ".join(result.missing_keywords))

    console.print("\n[bold]Prioritized Next Steps[/bold]")
    for i, step in enumerate(result.next_steps, 1):
        console.print(f"  {i}. {step}")


def _write_report(controller: SessionController, output: Path) -> None:
    markdown = controller.export_markdown()
    if markdown is None:
        console.print("[red]No result to export.[/red]")
        raise typer.Exit(1)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    console.print(f"[green]Report saved: {output}[/green]")


def _require_user(controller: SessionController) -> None:
    if controller.user is None:
        console.print("[red]Not logged in. Run `cv-match login EMAIL` first.[/red]")
        raise typer.Exit(1)


@app.command()
def analyze(
    cv: Path = typer.Option(..., "--cv", help="CV / résumé text file"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the Markdown report here"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Analyze a CV against a job description."""
    _setup_logging(verbose)
    cv_text = _read_text(cv, "CV")
    jd_text = _read_text(jd, "Job description")

    controller = _controller()
    if verbose:
        console.print(f"[dim]CV: {len(cv_text)} chars, JD: {len(jd_text)} chars[/dim]")

    with console.status("Analyzing CV against the job description..."):
        state = asyncio.run(controller.submit(cv_text, jd_text))

    if state is not AppState.RESULTS:
        console.print(f"[red]{controller.context.error}[/red]")
        raise typer.Exit(1)

    _print_result(controller.context.result)
    if controller.context.error:
        console.print(f"\n[yellow]{controller.context.error}[/yellow]")
    elif controller.user is not None:
        console.print(f"\n[dim]Saved to history for {controller.user.email}[/dim]")
    if output is not None:
        _write_report(controller, output)


@app.command()
def signup(
    email: str = typer.Argument(help="Account email"),
    name: str = typer.Argument(help="Display name"),
) -> None:
    """Create an account and log in."""
    controller = _controller()
    if not controller.signup(email, name):
        console.print(f"[red]{controller.context.auth_error}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Welcome, {controller.user.name}![/green]")


@app.command()
def login(email: str = typer.Argument(help="Account email")) -> None:
    """Log in to an existing account."""
    controller = _controller()
    if not controller.login(email):
        console.print(f"[red]{controller.context.auth_error}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Logged in as {controller.user.name} ({controller.user.email})[/green]")


@app.command()
def logout() -> None:
    """Log out. Saved history is kept."""
    _controller().logout()
    console.print("Logged out.")


@app.command()
def whoami() -> None:
    """Show the logged-in user."""
    user = _controller().user
    if user is None:
        console.print("[yellow]Not logged in.[/yellow]")
        return
    console.print(f"{user.name} <{user.email}>")


@app.command()
def history() -> None:
    """List saved analyses, newest first."""
    controller = _controller()
    _require_user(controller)
    items = controller.history_items()
    if not items:
        console.print("[yellow]No saved analyses yet.[/yellow]")
        return

    table = Table(title=f"History for {controller.user.email}")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Score", justify="right")
    table.add_column("Job description")
    for item in items:
        date = datetime.fromtimestamp(item.timestamp / 1000).strftime("%b %d, %Y %H:%M")
        score = item.result.overall_score
        snippet = " ".join(item.jd_text.split())[:60]
        table.add_row(item.id, date, f"[{_score_color(score)}]{score}[/]", snippet)
    console.print(table)


@app.command()
def show(item_id: str = typer.Argument(help="History item ID")) -> None:
    """Show a saved analysis."""
    controller = _controller()
    _require_user(controller)
    if not controller.select_history(item_id):
        console.print(f"[red]No saved analysis with ID {item_id}[/red]")
        raise typer.Exit(1)
    _print_result(controller.context.result)


@app.command()
def delete(
    item_id: str = typer.Argument(help="History item ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a saved analysis."""
    controller = _controller()
    _require_user(controller)

    def confirm() -> bool:
        return yes or typer.confirm("Are you sure you want to delete this analysis?")

    if controller.delete_history(item_id, confirm=confirm):
        console.print("[green]Deleted.[/green]")
    else:
        console.print("[yellow]Nothing deleted.[/yellow]")


@app.command()
def export(
    item_id: str = typer.Argument(help="History item ID"),
    output: Path = typer.Option(Path(REPORT_FILENAME), "--output", "-o", help="Output path (.md)"),
) -> None:
    """Export a saved analysis as Markdown."""
    controller = _controller()
    _require_user(controller)
    if not controller.select_history(item_id):
        console.print(f"[red]No saved analysis with ID {item_id}[/red]")
        raise typer.Exit(1)
    _write_report(controller, output)


@app.command()
def theme(value: str = typer.Argument(None, help="light or dark; omit to show")) -> None:
    """Show or set the UI theme."""
    controller = _controller()
    if value is None:
        console.print(controller.context.theme)
        return
    if value not in THEMES:
        console.print(f"[red]Theme must be one of: {', '.join(THEMES)}[/red]")
        raise typer.Exit(1)
    if controller.context.theme != value:
        controller.toggle_theme()
    console.print(f"Theme: {controller.context.theme}")


@app.command()
def usage(
    recent: int = typer.Option(0, "--list", "-n", help="Also list the N most recent runs"),
    user: str = typer.Option(None, "--user", help="Only list runs by this email"),
) -> None:
    """Show this month's analysis usage and cost."""
    config = load_config()
    store = UsageStore(config.usage.resolved_db_path)
    stats = store.get_monthly_stats()
    avg = stats["avg_overall_score"]
    console.print(
        Panel(
            f"Runs: {stats['total_runs']} | Success: {stats['success_rate']:.0f}%\n"
            f"Tokens: {stats['total_input_tokens']} in / {stats['total_output_tokens']} out\n"
            f"Average score: {avg if avg is not None else '-'}\n"
            f"Estimated cost: ${stats['total_cost_usd']:.4f} "
            f"(all time ${store.get_total_cost():.4f})",
            title=f"Usage {stats['month']}",
        )
    )
    if recent <= 0:
        return

    logs = store.get_logs(user_email=user, limit=recent)
    if not logs:
        console.print("[yellow]No runs recorded.[/yellow]")
        return
    table = Table(title="Recent runs")
    table.add_column("Time")
    table.add_column("User")
    table.add_column("Model")
    table.add_column("Score", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Status")
    for log in logs:
        status = "[green]ok[/green]" if log.success else f"[red]{log.error_message or 'failed'}[/red]"
        table.add_row(
            log.timestamp.strftime("%Y-%m-%d %H:%M"),
            log.user_email or "-",
            log.model,
            str(log.overall_score) if log.overall_score is not None else "-",
            f"${log.estimated_cost_usd:.4f}",
            status,
        )
    console.print(table)


if __name__ == "__main__":
    app()
