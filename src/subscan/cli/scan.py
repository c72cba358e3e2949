#!/usr/bin/env python3
"""
Scan CLI - Discovery and Review Commands

``scan`` reports what the mailbox contains; ``review`` walks through each
candidate interactively and commits the accepted ones.
"""

import asyncio
from pathlib import Path

import click

from ..core.config import LOOKBACK_PRESETS, Config
from ..core.json_utils import write_json
from ..pipeline import DiscoveryPipeline, ScanResult, build_pipeline
from ..reconcile import Classification, ClassifiedCandidate, candidates_to_dataframe, generate_scan_summary
from ..review import CommitSummary, ConflictAction, ResolutionSession

_ACTION_CHOICES = {
    "update": ConflictAction.UPDATE_EXISTING,
    "add": ConflictAction.ADD_SEPARATE,
    "skip": ConflictAction.SKIP,
}

_DAYS_HELP = f"Lookback window in days (e.g. {', '.join(str(d) for d in LOOKBACK_PRESETS)})"


def _resolve_token(token: str | None, config: Config) -> str:
    resolved = token or config.gmail.access_token
    if not resolved:
        raise click.UsageError("A mailbox access token is required (--token or GMAIL_ACCESS_TOKEN)")
    return resolved


def _prompt_days(default: int) -> int:
    choices = sorted(set(LOOKBACK_PRESETS) | {default})
    answer = click.prompt(
        "Lookback window in days",
        type=click.Choice([str(d) for d in choices]),
        default=str(default),
    )
    return int(answer)


def _run_scan(pipeline: DiscoveryPipeline, token: str, days: int | None) -> ScanResult:
    result = asyncio.run(pipeline.scan(token, days))
    if not result.success:
        raise click.ClickException(result.error or "Scan failed")
    return result


def _echo_candidates(classified: list[ClassifiedCandidate]) -> None:
    df = candidates_to_dataframe(classified)
    columns = ["merchant", "amount", "frequency", "billing_date", "classification", "current_cost"]
    click.echo(df[columns].to_string(index=False))


def _echo_commit_summary(summary: CommitSummary) -> None:
    # Only the aggregate is shown; per-item failures go to the log
    click.echo(f"✅ Saved {summary.applied_count} subscription(s)")
    if summary.failures:
        click.echo(f"⚠️  {len(summary.failures)} item(s) could not be saved")


@click.command()
@click.option("--token", envvar="GMAIL_ACCESS_TOKEN", help="Mailbox OAuth access token")
@click.option("--days", type=click.IntRange(min=1), help=_DAYS_HELP)
@click.option("--import-new", is_flag=True, help="Import every NEW candidate without review")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Write scan result JSON here")
@click.pass_context
def scan(ctx: click.Context, token: str | None, days: int | None, import_new: bool, output: Path | None) -> None:
    """
    Scan the mailbox for subscriptions.

    Examples:
      subscan scan --days 90
      subscan scan --import-new
      subscan scan --output scan.json
    """
    config = ctx.obj["config"]
    pipeline = build_pipeline(config)

    click.echo("🔍 Scanning mailbox...")
    result = _run_scan(pipeline, _resolve_token(token, config), days)

    if output:
        write_json(output, {**result.to_dict(), "summary": generate_scan_summary(result.candidates)})
        click.echo(f"Scan result written to {output}")

    click.echo(f"Scanned {result.scanned} message(s)")
    if not result.candidates:
        click.echo(result.message)
        return

    click.echo(result.message)
    _echo_candidates(result.candidates)

    if ctx.obj.get("verbose", False):
        summary = generate_scan_summary(result.candidates)
        click.echo(f"Breakdown: {summary['classification_breakdown']}")

    if import_new:
        commit_summary = asyncio.run(pipeline.import_all_new(result.candidates))
        _echo_commit_summary(commit_summary)


@click.command()
@click.option("--token", envvar="GMAIL_ACCESS_TOKEN", help="Mailbox OAuth access token")
@click.option("--days", type=click.IntRange(min=1), help=_DAYS_HELP)
@click.option("--yes", "-y", is_flag=True, help="Accept default decisions without prompting")
@click.pass_context
def review(ctx: click.Context, token: str | None, days: int | None, yes: bool) -> None:
    """
    Scan, then decide per candidate what to save.

    New subscriptions default to import, duplicates to skip, and price
    changes to updating the existing record.
    """
    config = ctx.obj["config"]
    pipeline = build_pipeline(config)
    access_token = _resolve_token(token, config)
    if days is None and not yes:
        days = _prompt_days(config.scan.lookback_days)

    click.echo("🔍 Scanning mailbox...")
    result = _run_scan(pipeline, access_token, days)

    if not result.candidates:
        click.echo(result.message)
        return

    session = ResolutionSession(result.candidates)

    if not yes:
        for index, (item, decision) in enumerate(session.items()):
            candidate = item.candidate
            label = f"{candidate.merchant_name} {candidate.amount} ({candidate.billing_frequency.value})"

            if item.classification == Classification.CONFLICT:
                snapshot = item.matched_record_snapshot
                click.echo(f"Price change: {label}, currently tracked as {snapshot.name} at {snapshot.cost}")
                choice = click.prompt(
                    "  update existing, add separate, or skip?",
                    type=click.Choice(list(_ACTION_CHOICES)),
                    default="update",
                )
                session.set_action(index, _ACTION_CHOICES[choice])
            elif item.classification == Classification.DUPLICATE:
                session.set_selected(index, click.confirm(f"Already tracked: {label}. Add anyway?", default=False))
            else:
                session.set_selected(index, click.confirm(f"New: {label}. Import?", default=decision.selected))

    committable = session.committable()
    if not committable:
        click.echo("Nothing selected")
        return

    candidates = [item for item, _ in session.items()]
    decisions = [decision for _, decision in session.items()]
    commit_summary = asyncio.run(pipeline.commit(candidates, decisions))
    _echo_commit_summary(commit_summary)
