"""CLI entry point for the Precedent Explorer."""

import asyncio
import json
import signal
from pathlib import Path

import click

from . import config
from .dependencies import build_controller
from .http_pool import close_http_client, init_http_client
from .pipeline import PipelineState, PipelineStatus, event_from_dict, fold_events


@click.group()
@click.option("--log-level", type=str, default=None, help="Logging level (default: LOG_LEVEL)")
def cli(log_level: str | None):
    """Precedent Explorer - staged precedent analysis for fiqh scenarios."""
    config.configure_logging(log_level)


def _print_summary(state: PipelineState) -> None:
    click.echo("=" * 60)
    if state.status is not PipelineStatus.COMPLETE:
        click.echo(f"\n❌ Run stopped at step {state.step + 1} of 4")
        return

    click.echo("\n✅ Analysis complete!")
    click.echo(f"\nDomain: {state.scenario.domain or 'n/a'}")
    click.echo(f"Precedents ({len(state.matches)}):")
    for match in state.matches:
        click.echo(
            f"  - [{match.similarity.total:>3}%] {match.title} "
            f"({match.madhhab}, {match.era.value})"
        )
    if state.conflicts.has_conflict:
        click.echo(f"Divergences: {len(state.conflicts.divergence_points)}")
    click.echo(f"Consensus: {state.trends.consensus_level.value}")
    click.echo(f"Majority view: {state.trends.majority_view}")


@cli.command()
@click.argument("query")
@click.option(
    "--language",
    type=click.Choice(sorted(config.SUPPORTED_LANGUAGES)),
    default=config.DEFAULT_LANGUAGE,
    help="Answer language",
)
@click.option("--mock", is_flag=True, default=False, help="Use canned offline answers")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the final state as JSON")
def run(query: str, language: str, mock: bool, as_json: bool):
    """Run the four-stage precedent analysis for QUERY. Ctrl-C cancels."""

    async def _run() -> PipelineState:
        use_mock = mock or config.USE_MOCK_INFERENCE
        if not use_mock:
            await init_http_client()
        controller = build_controller(mock=use_mock)

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, controller.cancel)
        except (NotImplementedError, RuntimeError):
            pass

        try:
            if controller.start(query, language) is None:
                raise click.UsageError("QUERY must not be empty")

            printed = 0
            async for state in controller.watch():
                if not as_json:
                    for line in state.logs[printed:]:
                        click.echo(line)
                printed = len(state.logs)
            return await controller.wait()
        finally:
            try:
                loop.remove_signal_handler(signal.SIGINT)
            except (NotImplementedError, RuntimeError):
                pass
            if not use_mock:
                await close_http_client()

    state = asyncio.run(_run())
    if as_json:
        click.echo(json.dumps(state.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_summary(state)


@cli.command()
def presets():
    """List sample scenarios."""
    for i, preset in enumerate(config.PRESETS, start=1):
        click.echo(f"{i}. {preset}")


@cli.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def replay(events_file: Path):
    """Fold a JSON-lines event log and print the final state as JSON."""
    events = []
    with open(events_file, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                events.append(event_from_dict(json.loads(line)))
            except (json.JSONDecodeError, ValueError, AttributeError) as e:
                raise click.ClickException(f"{events_file}:{line_number}: {e}")

    state = fold_events(events)
    click.echo(json.dumps(state.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
