"""Click CLI: loads config, builds the gateway, runs the council and renders the result."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from council.gateway import Gateway, build_gateway
from council.models import PipelineResult
from council.output import (
    RunDisplay,
    console,
    make_progress,
    print_answers,
    print_final_answer,
    print_header,
    print_peer_reviews,
    print_summary,
)
from council.pipeline import CouncilConfig, run_council
from council_config.config_loader import AppConfig, load_config

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, console=console)],
    )


def _parse_models(models_arg: str | None, default: list[str]) -> list[str]:
    """Split --models into a list, dropping blanks. Falls back to config defaults."""
    if models_arg is None:
        return list(default)
    return [m.strip() for m in models_arg.split(",") if m.strip()]


def _build_gateway(config: AppConfig) -> Gateway:
    return build_gateway(config)


async def _run(
    gateway: Gateway,
    council_config: CouncilConfig,
    question: str,
    app_config: AppConfig,
) -> PipelineResult:
    with make_progress() as progress:
        display = RunDisplay(progress)
        return await run_council(
            gateway,
            council_config,
            question,
            prompts=app_config.prompts,
            on_progress=display.on_progress,
            on_stage=display.on_stage,
        )


@click.command()
@click.argument("question", required=False)
@click.option("--file", "question_file", type=click.Path(exists=True, dir_okay=False),
              help="Read the question from a text/markdown file")
@click.option("-m", "--models", default=None, help="Comma-separated participant models (default: from config)")
@click.option("-a", "--aggregator", default=None, help="Model that synthesizes the final answer (default: from config)")
@click.option("-t", "--timeout", "timeout_sec", default=None, type=click.FloatRange(min=0, min_open=True),
              help="Timeout in seconds for each model call (default: from config)")
@click.option("-v", "--verbose", is_flag=True, help="Show peer review details and DEBUG logging")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Path to settings.yaml (default: bundled settings)")
def main(
    question: str | None,
    question_file: str | None,
    models: str | None,
    aggregator: str | None,
    timeout_sec: float | None,
    verbose: bool,
    config_path: str | None,
) -> None:
    """Council -- ask several models, let them peer-review, and synthesize one answer.

    \b
    Examples:
      council "What is the capital of France?"
      council -m claude-sonnet-4.5,gpt-5.2 "Explain quantum computing"
      council -a gpt-5.2 "Best practices for Python packaging"
      council -t 120 -v "Complex question here"
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        app_config = load_config(Path(config_path)) if config_path else load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if question_file:
        question_text = Path(question_file).read_text(encoding="utf-8").strip()
    elif question:
        question_text = question.strip()
    else:
        raise click.UsageError("Provide a QUESTION argument or --file.")
    if not question_text:
        raise click.UsageError("The question is empty.")

    participants = _parse_models(models, app_config.defaults.participants)
    if not participants:
        raise click.UsageError("At least one model must be specified.")

    council_config = CouncilConfig(
        participants=participants,
        aggregator=aggregator or app_config.defaults.aggregator,
        timeout_sec=timeout_sec if timeout_sec is not None else app_config.defaults.timeout_sec,
        verbose=verbose,
    )
    if council_config.timeout_sec <= 0:
        raise click.UsageError(f"Timeout must be positive, got {council_config.timeout_sec:g}s.")

    gateway = _build_gateway(app_config)
    print_header(question_text, council_config.participants, council_config.aggregator, council_config.timeout_sec)

    result = asyncio.run(_run(gateway, council_config, question_text, app_config))

    print_answers(result)
    if verbose:
        print_peer_reviews(result)
    print_final_answer(result)
    print_summary(result)

    if result.error is not None:
        sys.exit(1)


if __name__ == "__main__":
    main()
