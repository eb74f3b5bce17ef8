"""
Strategy and fleet cleanup commands.
"""

from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from shipyard.config import DecommissionConfig
from shipyard.controller import StrategyController
from shipyard.decommission import DecommissionPlan, apply_actions, collect_releases
from shipyard.errors import AggregateError, ShipyardError
from shipyard.store import InMemoryReleaseStore
from shipyard.strategy import ExecutorResult

console = Console()

STATE_FILE_OPTION = click.option(
    "--state-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML fleet snapshot",
)


def _load_store(state_file: Path) -> InMemoryReleaseStore:
    try:
        return InMemoryReleaseStore.load(state_file)
    except (KeyError, TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid fleet snapshot {state_file}: {e}") from e


def _show_patches(release_key: str, patches: list[ExecutorResult]) -> None:
    if not patches:
        console.print(f"✅ Release {release_key}: nothing to change", style="green")
        return

    table = Table(title=f"Patches for {release_key}")
    table.add_column("Kind", style="cyan")
    table.add_column("Object", style="magenta")
    table.add_column("New value", style="yellow")
    for patch in patches:
        table.add_row(patch.kind, patch.key, patch.describe())
    console.print(table)


def _show_plan(plan: DecommissionPlan) -> None:
    table = Table(title="Decommission Plan")
    table.add_column("Namespace", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Action Taken", style="bold")
    table.add_column("Old Clusters Annotations", style="yellow")
    table.add_column("New Clusters Annotations", style="green")
    for action in plan.actions:
        table.add_row(
            action.namespace,
            action.name,
            action.action.value,
            action.old_clusters,
            action.new_clusters,
        )
    console.print(table)


# ==================== strategy ==================== #


@click.group()
def strategy():
    """Strategy execution commands."""
    pass


@strategy.command("execute")
@STATE_FILE_OPTION
@click.option("--release", "release_key", required=True, help="Release as namespace/name")
@click.option(
    "--apply", "apply_patches", is_flag=True, help="Apply the patches and save the snapshot"
)
@click.pass_context
def execute_strategy(ctx, state_file: Path, release_key: str, apply_patches: bool):
    """Run the strategy executor for a release."""
    store = _load_store(state_file)
    controller = StrategyController(store, ctx.obj["settings"])

    try:
        if apply_patches:
            patches = controller.sync_release(release_key)
        else:
            patches = controller.plan_release(release_key)
    except (ShipyardError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    _show_patches(release_key, patches)

    if apply_patches and patches:
        store.dump(state_file)
        console.print(f"💾 Applied {len(patches)} patches to {state_file}", style="bold green")


# ==================== clean ==================== #


@click.group()
def clean():
    """Clean Shipyard objects."""
    pass


@clean.command("decommissioned-clusters")
@STATE_FILE_OPTION
@click.option(
    "--decommissioned-clusters",
    "clusters",
    required=True,
    multiple=True,
    help="Decommissioned clusters, comma separated (can specify multiple)",
)
@click.option("--dryrun", is_flag=True, help="Only print the releases that would change")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def decommissioned_clusters(state_file: Path, clusters: tuple[str, ...], dryrun: bool, yes: bool):
    """Clean releases from decommissioned clusters.

    Deletes releases scheduled only on decommissioned clusters that are not
    contenders, and removes decommissioned clusters from the annotations of
    releases scheduled partially on them.
    """
    try:
        config = DecommissionConfig(
            clusters=[cluster for value in clusters for cluster in value.split(",")],
            dry_run=dryrun,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--decommissioned-clusters") from e

    store = _load_store(state_file)
    plan = collect_releases(store, config)

    console.print(
        f"About to edit {len(plan.update)} releases and delete {len(plan.delete)} releases"
    )
    for error in plan.errors.errors:
        console.print(f"⚠️  {error}", style="yellow")

    if not plan.actions:
        return

    if yes or click.confirm(
        "Would you like to see the releases? (This will not start the process)", default=True
    ):
        _show_plan(plan)

    if config.dry_run:
        console.print("🔍 Dry-run mode: no releases were changed", style="yellow")
        return

    if not yes and not click.confirm("Apply these changes?"):
        console.print("Aborted", style="yellow")
        return

    try:
        applied = apply_actions(store, plan, dry_run=False)
    except AggregateError as e:
        store.dump(state_file)
        raise click.ClickException(str(e)) from e

    store.dump(state_file)
    console.print(f"✅ Applied {len(applied)} changes", style="bold green")
