"""Command-line interface for codejudge_py."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click
import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .client import JudgeClient, Language, Problem, SubmissionRecord
from .config import GlobalConfig, LocalConfig
from .core.history import SubmissionHistoryCache
from .core.results import ResultView, Severity
from .errors import CodeJudgeError
from .session import ProblemSession
from .utils.terminal import choose_index, create_table, format_result_color


console = Console()

SEVERITY_STYLES = {
    Severity.COMPILE_ERROR: "red",
    Severity.RUNTIME_ERROR: "yellow",
    Severity.ACCEPTED: "green",
    Severity.REJECTED: "red",
}

LEXERS = {"Python": "python", "C++": "cpp", "Java": "java", "JavaScript": "javascript"}


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def make_client(config: GlobalConfig) -> JudgeClient:
    return JudgeClient(base_url=config.base_url, cookies=GlobalConfig.load_cookies())


def pick_language(problem: Problem, lang: Optional[int]) -> Optional[Language]:
    """Resolve a language index, falling back to the local default."""
    if not problem.languages:
        console.print("[red]No languages available for this problem.[/red]")
        return None

    if lang is None:
        config = LocalConfig.load()
        lang = config.default_lang if config else 0

    if not (0 <= lang < len(problem.languages)):
        console.print(f"[red]Invalid language index: {lang}[/red]")
        console.print(
            f"[yellow]Available languages: 0-{len(problem.languages) - 1}[/yellow]"
        )
        return None
    return problem.languages[lang]


def resolve_contest(contest: Optional[str]) -> Optional[str]:
    if contest:
        return contest
    config = LocalConfig.load()
    return config.contest_id if config else None


def print_results(view: ResultView) -> None:
    """Display a projected run or submission result."""
    console.print(f"\n[bold]Status:[/bold] {format_result_color(view.status.value)}")
    if not view.rows:
        console.print("[yellow]No detailed test results available.[/yellow]")
        return

    console.print(f"[bold]Passed:[/bold] {view.passed}/{view.total}")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Test", style="cyan")
    table.add_column("Result", style="white")
    table.add_column("Time", style="yellow")
    table.add_column("Memory", style="yellow")
    table.add_column("Output", style="white")
    table.add_column("Expected", style="green")

    for row in view.rows:
        style = SEVERITY_STYLES[row.severity]
        output = row.error_text if row.error_text else row.output
        table.add_row(
            row.label,
            f"[{style}]{row.status_text}[/{style}]",
            f"{row.execution_time}ms" if row.execution_time is not None else "",
            f"{row.memory}KB" if row.memory is not None else "",
            escape(output),
            escape(row.expected_output) if row.error_text is None else "",
        )

    console.print(table)


def print_history(records: List[SubmissionRecord]) -> None:
    table = create_table("Submissions", ["ID", "Status", "Language", "Time", "Submitted"])
    for record in records:
        table.add_row(
            record.id,
            format_result_color(record.status.value),
            record.language,
            f"{record.execution_time}ms" if record.execution_time else "",
            record.submitted_at,
        )
    console.print(table)


async def watch_run(session: ProblemSession, language: Language) -> Optional[ResultView]:
    """Create a run job and poll it until it finishes."""
    async with session:
        job = await session.run(language)
        if job is None:
            return None
        console.print(f"[cyan]Run {job.id} created[/cyan]")

        with console.status("[bold green]Running...") as status:
            session.run_lane.subscribe(
                lambda lane: lane.snapshot
                and status.update(f"[bold green]{lane.snapshot.status.value}...")
            )
            await session.wait_run()
        return session.run_view()


async def watch_submission(
    session: ProblemSession, language: Language, watch: bool
) -> Tuple[Optional[ResultView], Optional[List[SubmissionRecord]]]:
    """Create a submission and, if requested, poll it until it is judged."""
    async with session:
        job = await session.submit(language)
        if job is None:
            return None, None
        console.print(f"[cyan]Submitted {job.id}[/cyan]")
        if not watch:
            return None, None

        with console.status("[bold green]Judging..."):
            await session.wait_submission()
            await session.settle()
        return session.submission_view(), session.history.cached(session.problem.id)


@click.group()
@click.version_option(version=__version__)
def cli():
    """codejudge_py - CLI client for running and submitting code to the judge."""
    pass


@cli.command()
@click.option("--base-url", help="Judge API base url")
@click.option("--poll-interval", type=float, help="Seconds between status polls")
@click.option("--first-poll-delay", type=float, help="Seconds before the first poll")
def configure(
    base_url: Optional[str],
    poll_interval: Optional[float],
    first_poll_delay: Optional[float],
):
    """Show or update global settings."""
    config = GlobalConfig.load()
    if base_url:
        config.base_url = base_url
    if poll_interval is not None:
        config.poll_interval = poll_interval
    if first_poll_delay is not None:
        config.first_poll_delay = first_poll_delay
    if base_url or poll_interval is not None or first_poll_delay is not None:
        config.save()
        console.print("[green]Configuration saved[/green]")

    console.print(f"[bold cyan]Base URL:[/bold cyan] {config.base_url}")
    console.print(f"[bold cyan]Poll interval:[/bold cyan] {config.poll_interval}s")
    console.print(f"[bold cyan]First poll delay:[/bold cyan] {config.first_poll_delay}s")


@cli.command(name="set-cookie")
@click.argument("name")
@click.argument("value")
def set_cookie(name: str, value: str):
    """Store a session cookie sent with every request."""
    cookies = GlobalConfig.load_cookies() or requests.cookies.RequestsCookieJar()
    cookies.set(name, value)
    GlobalConfig.save_cookies(cookies)
    console.print(f"[green]Saved cookie {name}[/green]")


@cli.command()
@click.argument("problem_id")
@click.option("--contest", help="Contest ID (default: from local config)")
def problem(problem_id: str, contest: Optional[str]):
    """Display a problem's languages and sample tests."""
    client = make_client(GlobalConfig.load())
    try:
        detail = client.get_problem(problem_id, resolve_contest(contest))
    except CodeJudgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    console.print(f"\n[bold cyan]{detail.title}[/bold cyan] ({detail.id})")

    config = LocalConfig.load()
    default_lang = config.default_lang if config else 0
    if detail.languages:
        table = create_table("Languages", ["#", "Name", "Judge0"])
        for idx, language in enumerate(detail.languages):
            marker = "*" if idx == default_lang else ""
            table.add_row(f"{idx}{marker}", language.name, str(language.judge0_code))
        console.print(table)

    samples = [case for case in detail.test_cases if case.is_sample]
    for idx, case in enumerate(samples):
        console.print(f"\n[bold]Sample {idx + 1}[/bold]")
        console.print(f"[cyan]Input:[/cyan]\n{case.input}")
        console.print(f"[cyan]Output:[/cyan]\n{case.output}")
        if case.explanation:
            console.print(f"[cyan]Explanation:[/cyan] {case.explanation}")
    console.print(f"\n[bold]{len(detail.test_cases)}[/bold] predefined test cases")


@cli.command(name="set-language")
@click.argument("problem_id")
def set_language(problem_id: str):
    """Choose the default language."""
    client = make_client(GlobalConfig.load())
    try:
        detail = client.get_problem(problem_id, resolve_contest(None))
    except CodeJudgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    if not detail.languages:
        console.print("[red]No languages available for this problem.[/red]")
        return

    config = LocalConfig.load() or LocalConfig()
    table = create_table("Available Languages", ["#", "Name"])
    for idx, language in enumerate(detail.languages):
        marker = "*" if idx == config.default_lang else ""
        table.add_row(f"{idx}{marker}", language.name)
    console.print(table)

    idx = choose_index("Select default language", detail.languages)
    if idx is None:
        return

    config.default_lang = idx
    config.save()
    console.print(f"[green]Default language set to: {detail.languages[idx].name}[/green]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--problem", help="Problem ID (default: extracted from filename)")
@click.option("-l", "--lang", type=int, help="Language index (default: from config)")
@click.option(
    "-c",
    "--custom",
    nargs=2,
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Custom test as INPUT_FILE EXPECTED_FILE (repeatable)",
)
@click.option("--contest", help="Contest ID (default: from local config)")
@click.option("--debug", is_flag=True, default=False, help="Enable debug output")
def run(
    file: Path,
    problem: Optional[str],
    lang: Optional[int],
    custom: Tuple[Tuple[Path, Path], ...],
    contest: Optional[str],
    debug: bool,
):
    """Run a solution against sample and custom tests."""
    setup_logging(debug)
    problem = problem or file.stem
    config = GlobalConfig.load()
    client = make_client(config)

    try:
        detail = client.get_problem(problem, resolve_contest(contest))
        language = pick_language(detail, lang)
        if language is None:
            return

        session = ProblemSession(
            client,
            detail,
            interval=config.poll_interval,
            first_delay=config.first_poll_delay,
            draft=file.read_text(encoding="utf-8"),
        )
        for input_path, output_path in custom:
            session.testcases.add_custom(
                input_path.read_text(encoding="utf-8"),
                output_path.read_text(encoding="utf-8"),
            )

        view = asyncio.run(watch_run(session, language))
    except CodeJudgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    if view is not None:
        print_results(view)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--problem", help="Problem ID (default: extracted from filename)")
@click.option("-l", "--lang", type=int, help="Language index (default: from config)")
@click.option("--contest", help="Contest ID (default: from local config)")
@click.option(
    "--watch/--no-watch",
    default=True,
    help="Watch submission results (default: true)",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug output")
def submit(
    file: Path,
    problem: Optional[str],
    lang: Optional[int],
    contest: Optional[str],
    watch: bool,
    debug: bool,
):
    """Submit a solution for scoring."""
    setup_logging(debug)
    problem = problem or file.stem
    contest = resolve_contest(contest)
    config = GlobalConfig.load()
    client = make_client(config)

    try:
        detail = client.get_problem(problem, contest)
        language = pick_language(detail, lang)
        if language is None:
            return

        session = ProblemSession(
            client,
            detail,
            contest_id=contest,
            interval=config.poll_interval,
            first_delay=config.first_poll_delay,
            draft=file.read_text(encoding="utf-8"),
        )
        view, history = asyncio.run(watch_submission(session, language, watch))
    except CodeJudgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    if view is not None:
        print_results(view)
    if history:
        console.print()
        print_history(history)


@cli.command()
@click.argument("problem_id")
def history(problem_id: str):
    """Show past submissions for a problem."""
    cache = SubmissionHistoryCache(make_client(GlobalConfig.load()))

    console.print("[cyan]Fetching submissions...[/cyan]")
    try:
        records = cache.fetch(problem_id)
    except CodeJudgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    if not records:
        console.print("[yellow]No submissions yet.[/yellow]")
        return
    print_history(records)


@cli.command(name="show-submission")
@click.argument("problem_id")
@click.argument("submission_id")
def show_submission(problem_id: str, submission_id: str):
    """Show the code of a past submission (read-only)."""
    cache = SubmissionHistoryCache(make_client(GlobalConfig.load()))
    try:
        record = cache.find(problem_id, submission_id)
    except CodeJudgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    if record is None:
        console.print(f"[red]Submission {submission_id} not found[/red]")
        raise SystemExit(1)

    cache.open_as_tab(record)
    console.print(
        f"[bold cyan]Submission {record.id}[/bold cyan] "
        f"{format_result_color(record.status.value)} ({record.language}, read-only)"
    )
    console.print(
        Syntax(
            cache.editor.displayed_code,
            LEXERS.get(record.language, "text"),
            line_numbers=True,
        )
    )
    cache.close_tab(record)


@cli.command()
def version():
    """Show version information."""
    console.print(f"[bold cyan]codejudge_py[/bold cyan] version [green]{__version__}[/green]")
    console.print("CLI client for running and submitting code to the judge")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
