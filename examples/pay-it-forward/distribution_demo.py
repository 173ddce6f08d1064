#!/usr/bin/env python3
"""
RewardPool - Pay It Forward Demo

Runs one distribution round over a sample leaderboard: loads the sponsor
configuration, records a late opt-out decision, prints the pool summary and
per-participant rewards, then stores the opted-out contributions in memory.

Run: python distribution_demo.py
"""

import asyncio
import json
from pathlib import Path

from pydantic import TypeAdapter
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from rewardpool import (
    ContributionPersister,
    DecisionRegistry,
    RankedEntry,
    RewardsDistributor,
    apply_decisions,
    format_reward,
    load_config,
)
from rewardpool.observability import MetricsCollector
from rewardpool.storage import create_store

HERE = Path(__file__).parent
console = Console()


def print_step(step: int, description: str):
    """Print a step header."""
    console.print()
    console.print(f"[bold]Step {step}:[/bold] {description}")


def print_info(label: str, value: str):
    console.print(f"  • [dim]{label}:[/dim] {value}")


async def run_round():
    console.print(Panel(
        "[bold]RewardPool - Pay It Forward[/bold]\n\n"
        "Opted-out participants give up their reward.\n"
        "Their share of the pool is carried into the next round.",
        box=box.ROUNDED,
    ))

    print_step(1, "Load sponsor configuration")
    config = load_config(HERE / "rewards.yaml")
    print_info("Sponsors", str(len(config.sponsors)))
    print_info("Total pool", format_reward(config.total_pool))

    print_step(2, "Load leaderboard and apply opt-out decisions")
    raw = json.loads((HERE / "leaderboard.json").read_text())
    entries = TypeAdapter(list[RankedEntry]).validate_python(raw)
    registry = DecisionRegistry()
    registry.opt_out("creator-004")
    registry.opt_in("creator-001")
    entries = apply_decisions(entries, registry)
    print_info("Entries", str(len(entries)))
    print_info("Decided opt-out share", f"{registry.opted_out_percentage()}%")
    print_info("Opted out", ", ".join(e.participant_id for e in entries if e.is_opted_out))

    metrics = MetricsCollector()
    store = create_store(config.storage)
    await store.connect()
    distributor = RewardsDistributor(
        config,
        persister=ContributionPersister(store),
        metrics=metrics,
    )

    print_step(3, "Pool summary")
    summary = distributor.get_rewards_summary(entries)
    print_info("Eligible scores", f"{summary.total_eligible_scores:,.2f}")
    print_info("Multiplier", f"{summary.multiplier:.4f}")
    print_info("Active pool", format_reward(summary.active_pool))
    print_info("Future pool", format_reward(summary.future_pool))

    print_step(4, "Rewards")
    table = Table(box=box.SIMPLE)
    table.add_column("Rank", justify="right")
    table.add_column("Participant")
    table.add_column("Boosted", justify="center")
    table.add_column("Reward", justify="right")
    table.add_column("Carried forward", justify="right")
    for result in distributor.calculate_rewards_with_optouts(entries):
        table.add_row(
            str(result.rank),
            result.name or result.participant_id,
            "✓" if result.is_boosted else "",
            format_reward(result.final_reward),
            format_reward(result.opted_out_contribution) if result.is_opted_out else "",
        )
    console.print(table)

    print_step(5, "Persist opted-out contributions")
    await distributor.store_opted_out_contributions(entries)
    for record in await store.list_all():
        print_info(record.participant_id, format_reward(record.contribution_amount))
    await store.disconnect()

    console.print()
    console.print("[green]✓[/green] Round complete")


if __name__ == "__main__":
    asyncio.run(run_round())
