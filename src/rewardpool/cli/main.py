# Copyright (c) RewardPool Contributors. All rights reserved.
# Licensed under the MIT License.
"""
RewardPool CLI

Commands for inspecting a reward distribution from a leaderboard snapshot:
- summary: Pool split and multiplier
- rewards: Per-participant rewards and contributions
- user-reward: Display string for a single participant
- persist: Store opted-out contributions in the configured backend
- lookup: Show a stored contribution
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import TypeAdapter, ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from rewardpool import __version__
from rewardpool.config import RewardsConfig, load_config
from rewardpool.exceptions import RewardPoolError
from rewardpool.models import RankedEntry
from rewardpool.reward import ContributionPersister, RewardsDistributor, format_reward
from rewardpool.storage import create_store

console = Console()

_ENTRIES = TypeAdapter(list[RankedEntry])


def _output_json(data: object) -> None:
    """Print data as JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def _output_yaml(data: object) -> None:
    """Print data as YAML to stdout."""
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


def _load_entries(path: Path) -> list[RankedEntry]:
    """Read ranked entries from a JSON file, exiting on invalid input."""
    try:
        return _ENTRIES.validate_json(Path(path).read_bytes())
    except (OSError, ValidationError) as exc:
        click.echo(f"Error: invalid entries file {path}: {exc}", err=True)
        raise SystemExit(1)


def _fail(exc: RewardPoolError) -> None:
    click.echo(f"Error: {exc}", err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="rewardpool")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML rewards configuration.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def app(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Distribute a sponsor pool across a leaderboard snapshot."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(config_path) if config_path else RewardsConfig()
    except RewardPoolError as exc:
        _fail(exc)
    ctx.obj = config


entries_argument = click.argument(
    "entries_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)

format_option = click.option(
    "--format", "fmt",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="Output format (table, json, or yaml).",
)

json_option = click.option(
    "--json", "json_flag", is_flag=True, help="Output as JSON (shorthand for --format json)."
)


@app.command()
@entries_argument
@format_option
@json_option
@click.pass_obj
def summary(config: RewardsConfig, entries_path: Path, fmt: str, json_flag: bool):
    """Show how the pool splits between active and opted-out participants."""
    if json_flag:
        fmt = "json"

    entries = _load_entries(entries_path)
    result = RewardsDistributor(config).get_rewards_summary(entries)
    data = result.model_dump()

    if fmt == "json":
        _output_json(data)
        return
    if fmt == "yaml":
        _output_yaml(data)
        return

    console.print("\n[bold blue]Rewards Pool Summary[/bold blue]\n")
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="bold cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_row("Total Pool", f"{result.total_pool:,.2f}")
    table.add_row("Active Pool", f"{result.active_pool:,.2f}")
    table.add_row("Future Pool", f"{result.future_pool:,.2f}")
    table.add_row("Eligible Scores", f"{result.total_eligible_scores:,.2f}")
    table.add_row("Opted-out Users", str(result.opted_out_users))
    table.add_row("Multiplier", f"{result.multiplier:.6f}")
    console.print(table)


@app.command()
@entries_argument
@format_option
@json_option
@click.option("--limit", type=int, default=None, help="Max number of rows.")
@click.pass_obj
def rewards(
    config: RewardsConfig,
    entries_path: Path,
    fmt: str,
    json_flag: bool,
    limit: Optional[int],
):
    """List each eligible participant's reward, sorted by rank."""
    if json_flag:
        fmt = "json"

    entries = _load_entries(entries_path)
    results = RewardsDistributor(config).calculate_rewards_with_optouts(entries)
    if limit is not None:
        results = results[:limit]

    if fmt in ("json", "yaml"):
        data = [r.model_dump() for r in results]
        if fmt == "json":
            _output_json(data)
        else:
            _output_yaml(data)
        return

    console.print("\n[bold blue]Rewards by Rank[/bold blue]\n")
    table = Table(box=box.ROUNDED)
    table.add_column("Rank", justify="right")
    table.add_column("Participant", style="cyan", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Boosted", justify="right")
    table.add_column("Reward", justify="right")
    table.add_column("Contribution", justify="right", style="dim")

    for r in results:
        boosted = f"[green]{r.boosted_score:,.1f}[/green]" if r.is_boosted else f"{r.boosted_score:,.1f}"
        table.add_row(
            str(r.rank),
            r.name or r.participant_id,
            f"{r.base_score:,.1f}",
            boosted,
            "[yellow]paid forward[/yellow]" if r.is_opted_out else format_reward(r.final_reward),
            format_reward(r.opted_out_contribution) if r.is_opted_out else "-",
        )

    console.print(table)
    console.print(f"\n  Total participants: {len(results)}\n")


@app.command("user-reward")
@entries_argument
@click.argument("score", type=float)
@click.option("--rank", type=int, default=None, help="Participant's leaderboard rank.")
@click.option("--boosted", is_flag=True, help="Participant holds the boost balance.")
@click.option("--opted-out", is_flag=True, help="Participant paid their reward forward.")
@click.pass_obj
def user_reward(
    config: RewardsConfig,
    entries_path: Path,
    score: float,
    rank: Optional[int],
    boosted: bool,
    opted_out: bool,
):
    """Print the reward a participant with SCORE would see."""
    entries = _load_entries(entries_path)
    click.echo(
        RewardsDistributor(config).calculate_user_reward(
            score, rank, boosted, opted_out, entries
        )
    )


async def _persist(config: RewardsConfig, entries: list[RankedEntry]) -> int:
    store = create_store(config.storage)
    await store.connect()
    try:
        distributor = RewardsDistributor(config, persister=ContributionPersister(store))
        await distributor.store_opted_out_contributions(entries)
        return len(distributor.opted_out_contributions(entries))
    finally:
        await store.disconnect()


@app.command()
@entries_argument
@click.pass_obj
def persist(config: RewardsConfig, entries_path: Path):
    """Store opted-out contributions in the configured backend."""
    entries = _load_entries(entries_path)
    try:
        count = asyncio.run(_persist(config, entries))
    except RewardPoolError as exc:
        _fail(exc)
    click.echo(f"Stored {count} contribution(s) in {config.storage.backend} backend")


async def _lookup(config: RewardsConfig, participant_id: str):
    store = create_store(config.storage)
    await store.connect()
    try:
        return await ContributionPersister(store).get(participant_id)
    finally:
        await store.disconnect()


@app.command()
@click.argument("participant_id")
@click.pass_obj
def lookup(config: RewardsConfig, participant_id: str):
    """Show the stored contribution for PARTICIPANT_ID."""
    try:
        record = asyncio.run(_lookup(config, participant_id))
    except RewardPoolError as exc:
        _fail(exc)
    if record is None:
        click.echo(f"Error: no contribution stored for '{participant_id}'.", err=True)
        raise SystemExit(1)
    _output_json(record.model_dump(mode="json"))


if __name__ == "__main__":
    app()
