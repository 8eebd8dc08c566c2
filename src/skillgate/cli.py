"""CLI for SkillGate."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, TypeVar

import structlog
import typer
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from skillgate import __version__
from skillgate.core.config import EngineConfig, load_config
from skillgate.core.errors import ConfigurationError, SkillGateError
from skillgate.engine import SkillEngine
from skillgate.models import Challenge
from skillgate.services.attempts import AttemptKind

T = TypeVar("T")

load_dotenv()

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="skillgate",
    help="SkillGate - adaptive skill ratings and challenge-gated project admission",
    add_completion=False,
)
console = Console()

# Global options set by the callback
_options: dict[str, bool] = {"verbose": False}

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
DatabaseOption = Annotated[
    str | None, typer.Option("--db", help="Database URL (overrides config and environment)")
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"skillgate v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")] = False,
) -> None:
    """SkillGate CLI."""
    _options["verbose"] = verbose
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    logging.getLogger().setLevel(level)


def _apply_log_level(config: EngineConfig) -> None:
    """Use a log level set in the config file unless --verbose was given."""
    if not _options["verbose"] and "log_level" in config.model_fields_set:
        logging.getLogger().setLevel(config.log_level)


def _load_engine_config(config_path: Path | None, database_url: str | None) -> EngineConfig:
    config = load_config(config_path) if config_path else EngineConfig()
    if database_url:
        config.database_url = database_url
    return config


def _run(
    config_path: Path | None,
    database_url: str | None,
    action: Callable[[SkillEngine], Awaitable[T]],
) -> T:
    """Build an engine, run one async action against it, and clean up."""
    try:
        config = _load_engine_config(config_path, database_url)
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    _apply_log_level(config)

    async def _go() -> T:
        engine = SkillEngine(config)
        try:
            await engine.init_db()
            return await action(engine)
        finally:
            await engine.close()

    try:
        return asyncio.run(_go())
    except SkillGateError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e


@app.command("init-db")
def init_db_command(config_path: ConfigOption = None, database_url: DatabaseOption = None) -> None:
    """Create database tables."""

    async def _action(engine: SkillEngine) -> str:
        return engine.db_engine.url.render_as_string(hide_password=True)

    url = _run(config_path, database_url, _action)
    console.print(f"[green]Database ready:[/green] {url}")


def _read_challenges(path: Path) -> list[Challenge]:
    with path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)
    items = data.get("challenges", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        msg = f"Expected a list of challenges in {path}"
        raise ConfigurationError(msg, "Use a top-level 'challenges:' list.")
    return [Challenge.model_validate(item) for item in items]


@app.command("load-challenges")
def load_challenges(
    catalog_path: Annotated[Path, typer.Argument(help="YAML file with a 'challenges' list")],
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Import challenges from a YAML file into the local catalog."""
    try:
        challenges = _read_challenges(catalog_path)
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e

    async def _action(engine: SkillEngine) -> int:
        return await engine.challenges.upsert_many(challenges)

    count = _run(config_path, database_url, _action)
    console.print(f"[green]Loaded {count} challenge(s)[/green]")


@app.command()
def submit(
    user_id: Annotated[str, typer.Argument(help="Submitting user id")],
    code_path: Annotated[Path, typer.Argument(help="File with the submitted code")],
    challenge_id: Annotated[
        str | None, typer.Option("--challenge", help="Challenge id (or temp_... id)")
    ] = None,
    project_id: Annotated[str | None, typer.Option("--project", help="Project id")] = None,
    language: Annotated[
        str | None, typer.Option("--language", help="Language for transient challenges")
    ] = None,
    recruit: Annotated[
        bool, typer.Option("--recruit", help="Recruitment attempt: admit the user on pass")
    ] = False,
    project_title: Annotated[
        str | None, typer.Option("--project-title", help="Project name for messages")
    ] = None,
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Submit code for a challenge and print the verdict."""
    try:
        content = code_path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    kind = AttemptKind.RECRUITMENT if recruit else AttemptKind.PRACTICE

    async def _action(engine: SkillEngine) -> Any:
        return await engine.submit_attempt(
            user_id,
            content,
            challenge_id=challenge_id,
            project_id=project_id,
            language=language,
            kind=kind,
            project_title=project_title,
        )

    outcome = _run(config_path, database_url, _action)
    status_color = "green" if outcome.passed else "red"
    console.print(f"[bold]Attempt:[/bold] {outcome.attempt.id}")
    console.print(f"[{status_color}]{outcome.attempt.status.upper()}[/{status_color}]")
    console.print(f"  Score: {outcome.verdict.score}/100 ({outcome.verdict.evaluator_used})")
    console.print(f"  Rating updated: {outcome.rating_updated}")
    if outcome.admitted:
        console.print("[green]  Admitted to project[/green]")
    if outcome.award is not None:
        console.print(f"[yellow]  Award granted: {outcome.award.title}[/yellow]")
    console.print(f"\n{outcome.verdict.feedback}")
    if outcome.encouragement:
        console.print(f"\n[cyan]{outcome.encouragement}[/cyan]")
    for warning in outcome.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command("next")
def next_challenge(
    user_id: Annotated[str, typer.Argument(help="User id")],
    language: Annotated[str, typer.Argument(help="Programming language")],
    project_id: Annotated[
        str | None, typer.Option("--project", help="Include this project's challenges")
    ] = None,
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Recommend the challenge best matched to a user's rating."""

    async def _action(engine: SkillEngine) -> tuple[Challenge, int, int]:
        challenge = await engine.next_challenge(user_id, language, project_id)
        user = await engine.get_skill_rating(user_id, language)
        rated = await engine.get_challenge_rating(challenge.id)
        return challenge, user.rating, rated.rating

    challenge, user_rating, challenge_rating = _run(config_path, database_url, _action)
    console.print(f"[bold]{challenge.id}[/bold] {challenge.title}")
    console.print(f"  Difficulty: {challenge.difficulty}")
    console.print(f"  Challenge rating: {challenge_rating} (user {user_rating})")


@app.command()
def rating(
    user_id: Annotated[str, typer.Argument(help="User id")],
    language: Annotated[str | None, typer.Argument(help="Language (all when omitted)")] = None,
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Show a user's skill ratings."""

    async def _action(engine: SkillEngine) -> list[Any]:
        if language:
            return [await engine.get_skill_rating(user_id, language)]
        return await engine.list_skill_ratings(user_id)

    rows = _run(config_path, database_url, _action)
    if not rows:
        console.print(f"[yellow]No ratings for {user_id}[/yellow]")
        return

    table = Table(title=f"Skill ratings: {user_id}")
    table.add_column("Language", style="cyan")
    table.add_column("Rating", justify="right")
    table.add_column("Attempts", justify="right")
    for row in rows:
        table.add_row(row.language, str(row.rating), str(row.attempts))
    console.print(table)


@app.command("challenge-rating")
def challenge_rating(
    challenge_id: Annotated[str, typer.Argument(help="Challenge id")],
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Show a challenge's rating and pass statistics."""

    async def _action(engine: SkillEngine) -> Any:
        return await engine.get_challenge_rating(challenge_id)

    row = _run(config_path, database_url, _action)
    console.print(f"[bold]{challenge_id}[/bold]")
    console.print(f"  Rating: {row.rating}")
    console.print(f"  Attempts: {row.attempts}")
    console.print(f"  Passed: {row.pass_count}")


@app.command()
def stats(
    user_id: Annotated[str, typer.Argument(help="User id")],
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Show a user's attempt statistics."""

    async def _action(engine: SkillEngine) -> dict[str, Any]:
        return await engine.user_stats(user_id)

    data = _run(config_path, database_url, _action)
    table = Table(title=f"Attempts: {user_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in data.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


@app.command("can-attempt")
def can_attempt(
    user_id: Annotated[str, typer.Argument(help="User id")],
    project_id: Annotated[str, typer.Argument(help="Project id")],
    project_title: Annotated[
        str | None, typer.Option("--project-title", help="Project name for messages")
    ] = None,
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Check whether a user may attempt a project's recruitment challenge."""

    async def _action(engine: SkillEngine) -> Any:
        return await engine.can_attempt(user_id, project_id, project_title)

    result = _run(config_path, database_url, _action)
    if result.can_attempt:
        console.print("[green]Can attempt[/green]")
    else:
        console.print(f"[red]Cannot attempt:[/red] {result.reason}")
    console.print(f"  Failed attempts: {result.failed_attempts}")
    if result.encouragement:
        console.print(f"\n[cyan]{result.encouragement}[/cyan]")


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Database: {config.get_database_url()}")
        console.print(f"  Default rating: {config.rating.default_rating}")
        console.print(f"  K base: {config.rating.k_base}")
        console.print(f"  Pass threshold: {config.evaluation.pass_threshold}")
        console.print(f"  Sandbox: {config.sandbox.url or 'disabled'}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ValidationError as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]SkillGate[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Create tables and import a challenge catalog")
    console.print("  uv run skillgate init-db")
    console.print("  uv run skillgate load-challenges challenges.yaml\n")

    console.print("  # Get a recommended challenge")
    console.print("  uv run skillgate next alice python --project proj-1\n")

    console.print("  # Submit a recruitment attempt")
    console.print(
        "  uv run skillgate submit alice solution.py"
        " --challenge py-101 --project proj-1 --recruit\n"
    )

    console.print("  # Inspect ratings")
    console.print("  uv run skillgate rating alice")
    console.print("  uv run skillgate challenge-rating py-101\n")

    console.print("  # Validate config")
    console.print("  uv run skillgate validate config.yaml")


if __name__ == "__main__":
    app()
