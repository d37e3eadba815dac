"""Rich console output for council runs."""

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from council.errors import ProviderError
from council.models import CallResult, PipelineResult, PipelineState

console = Console(legacy_windows=False)

_STAGE_DESCRIPTIONS = {
    PipelineState.STAGE1_RUNNING: "Stage 1: querying models in parallel...",
    PipelineState.STAGE2_RUNNING: "Stage 2: conducting peer review...",
    PipelineState.STAGE3_RUNNING: "Stage 3: synthesizing responses...",
}


def _suggestion(error: ProviderError) -> str:
    """Return a hint for common failures, or ""."""
    message = error.message.lower()
    if "timed out" in message:
        return "Try --timeout 120"
    if "missing api key" in message or "not available" in message:
        return "Check API keys in .env"
    if "no provider configured" in message:
        return "Check the model name or add a prefix under providers in settings.yaml"
    return ""


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


class RunDisplay:
    """Live spinner fed by the pipeline's stage and progress callbacks."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._task: TaskID | None = None

    def on_stage(self, state: PipelineState) -> None:
        description = _STAGE_DESCRIPTIONS.get(state)
        if description is None:
            return
        if self._task is None:
            self._task = self._progress.add_task(description, total=None)
        else:
            self._progress.update(self._task, description=description)

    def on_progress(self, participant: str, elapsed_sec: float, error: ProviderError | None) -> None:
        if error is None:
            self._progress.print(f"  [green]OK  [/green] {escape(participant):<28} {elapsed_sec:6.2f}s")
        else:
            self._progress.print(
                f"  [red]FAIL[/red] {escape(participant):<28} {elapsed_sec:6.2f}s  {escape(_truncate(error.message, 60))}"
            )


def make_progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_header(question: str, participants: list[str], aggregator: str, timeout_sec: float) -> None:
    console.print(Rule("[bold cyan]Council[/bold cyan]"))
    console.print(f"[bold cyan]Question:[/bold cyan] {escape(question)}")
    aggregator_label = aggregator + (" (participant)" if aggregator in participants else "")
    console.print(f"[dim]Participants: {escape(', '.join(participants))}[/dim]")
    console.print(f"[dim]Aggregator: {escape(aggregator_label)} | Timeout: {timeout_sec:g}s per call[/dim]\n")


def _print_answer(result: CallResult) -> None:
    if result.error is not None:
        body = Text(result.error.message, style="red")
        suggestion = _suggestion(result.error)
        if suggestion:
            body.append(f"\nSuggestion: {suggestion}", style="yellow")
        border = "red"
    elif not result.text:
        body = Text("(empty response)", style="dim")
        border = "yellow"
    else:
        body = Markdown(result.text)
        border = "dim"
    console.print(
        Panel(
            body,
            title=f"[bold]{escape(result.participant)}[/bold]",
            subtitle=f"{result.elapsed_sec:.2f}s",
            border_style=border,
        )
    )


def print_answers(result: PipelineResult) -> None:
    """Print every Stage 1 answer, failures included."""
    console.print(Rule("[bold cyan]Stage 1: Initial Responses[/bold cyan]"))
    for call in result.call_results:
        _print_answer(call)


def print_peer_reviews(result: PipelineResult) -> None:
    """Print the parsed rankings of every reviewer."""
    if not result.reviews:
        return
    console.print(Rule("[bold cyan]Stage 2: Peer Review Results[/bold cyan]"))
    for review in result.reviews:
        console.print(f"[bold green]{escape(review.reviewer)}[/bold green]'s evaluation:")
        if review.error is not None:
            console.print(f"  [red]Error: {escape(review.error.message)}[/red]")
        elif review.rankings:
            for assertion in review.rankings:
                console.print(escape(f"  Rank {assertion.rank}: {assertion.participant} - {assertion.justification}"))
        else:
            console.print("  [dim](No structured rankings extracted)[/dim]")
        console.print()

    if result.aggregate_ranks:
        table = Table(title="Average peer rank", show_edge=False)
        table.add_column("Participant")
        table.add_column("Avg rank", justify="right")
        table.add_column("Votes", justify="right")
        for rank in result.aggregate_ranks:
            table.add_row(rank.participant, f"{rank.average_rank:.2f}", str(rank.votes))
        console.print(table)


def print_final_answer(result: PipelineResult) -> None:
    """Print the synthesized answer, or the terminal failure."""
    if result.aggregated_text is not None:
        console.print(Rule("[bold green]Final Answer[/bold green]"))
        console.print(Text(f"Synthesized by: {result.aggregator}", style="dim"))
        console.print(Markdown(result.aggregated_text))
        return
    console.print(f"\n[bold red]Error:[/bold red] {escape(str(result.error))}")


def print_summary(result: PipelineResult) -> None:
    """Per-stage execution summary."""
    table = Table(title="Execution summary", show_header=False, show_edge=False)
    table.add_column(style="bold")
    table.add_column()

    calls = result.call_results
    successes = [c for c in calls if c.ok]
    style = "green" if len(successes) == len(calls) else "yellow"
    table.add_row("Stage 1", f"[{style}]{len(successes)}/{len(calls)} successful[/{style}]")
    if successes:
        fastest = min(successes, key=lambda c: c.elapsed_sec)
        table.add_row("  Fastest", f"{fastest.participant} ({fastest.elapsed_sec:.2f}s)")
    table.add_row("  Phase time", f"{result.timings.stage1_sec:.2f}s")

    if result.reviews:
        reviewed = sum(1 for r in result.reviews if r.error is None)
        table.add_row("Stage 2", f"{reviewed}/{len(result.reviews)} reviews successful")
        table.add_row("  Phase time", f"{result.timings.stage2_sec:.2f}s")

    if result.state in (PipelineState.DONE, PipelineState.STAGE3_FAILED):
        outcome = "[green]done[/green]" if result.succeeded else "[red]failed[/red]"
        table.add_row("Stage 3", f"{result.aggregator} {outcome}")
        table.add_row("  Phase time", f"{result.timings.stage3_sec:.2f}s")

    table.add_row("Total", f"{result.timings.total_sec:.2f}s")
    console.print()
    console.print(table)
