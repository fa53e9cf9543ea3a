"""
KeyLeaks CLI - Scan and watch commands

Provides commands for:
- One-shot scanning of a file or directory tree
- Watching a tree and rescanning files as they change
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

import click

from keyleaks.cli.render import echo_diagnostics, echo_match_details, match_to_dict
from keyleaks.core.models import ScanResult
from keyleaks.core.scheduler import ScanScheduler
from keyleaks.utils.config import ConfigManager, KeyLeaksConfig

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = {"node_modules", ".git", "dist", "build", ".next", "out"}


def build_scheduler(config: KeyLeaksConfig) -> ScanScheduler:
    """Scheduler wired with the user's scanning settings."""
    return ScanScheduler(
        debounce_seconds=config.debounce_ms / 1000.0,
        max_resource_size=config.max_file_size,
        max_batch_resources=config.max_workspace_files,
        realtime_enabled=config.enable_real_time_scanning,
        scan_on_save=config.scan_on_save,
    )


def iter_workspace_files(root: Path, max_files: Optional[int] = None) -> Iterator[Path]:
    """Files under ``root`` outside excluded directories, in a stable order."""
    if root.is_file():
        yield root
        return

    count = 0
    for path in sorted(root.rglob("*")):
        if max_files is not None and count >= max_files:
            break
        if not path.is_file():
            continue
        if any(part in EXCLUDED_DIRS for part in path.relative_to(root).parts):
            continue
        count += 1
        yield path


def resource_id_for(root: Path, path: Path) -> str:
    if root.is_file():
        return str(path)
    return path.relative_to(root).as_posix()


def read_text(path: Path) -> Optional[str]:
    """File contents, or None for binary or unreadable files."""
    try:
        return path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None


def iter_resources(root: Path, max_files: Optional[int] = None) -> Iterator[Tuple[str, str]]:
    for path in iter_workspace_files(root, max_files):
        text = read_text(path)
        if text is not None:
            yield resource_id_for(root, path), text


@click.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path), default=".")
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format"
)
@click.option("--details", "-d", is_flag=True, help="Show a detailed block per finding")
@click.option("--max-files", type=int, help="Maximum number of files to scan")
@click.pass_context
def scan(ctx, path: Path, output_format: str, details: bool, max_files: Optional[int]):
    """
    🔍 Scan a file or directory for exposed secrets.

    \b
    Examples:
      keyleaks scan                  # Scan current directory
      keyleaks scan src/ -f json     # JSON output
      keyleaks scan config.py -d     # Detailed findings
    """
    config: ConfigManager = ctx.obj['config']
    settings = config.load()
    scheduler = build_scheduler(settings)

    limit = max_files if max_files is not None else settings.max_workspace_files
    summary = scheduler.scan_workspace(iter_resources(path, limit))

    if output_format == "json":
        findings = [
            match_to_dict(result.resource_id, match)
            for result in summary.results_with_matches
            for match in result.matches
        ]
        click.echo(json.dumps({
            "scanned": summary.scanned,
            "skipped": summary.skipped,
            "total_matches": summary.total_matches,
            "findings": findings,
        }, indent=2))
    else:
        for result in summary.results_with_matches:
            if details:
                echo_match_details(result.resource_id, result.matches)
            else:
                echo_diagnostics(result.resource_id, result.matches)

        click.echo("")
        if summary.total_matches:
            click.secho(
                f"⚠️  Found {summary.total_matches} potential secret(s) in "
                f"{len(summary.results_with_matches)} file(s) "
                f"({summary.scanned} scanned, {summary.skipped} skipped)",
                fg="yellow",
            )
        else:
            click.secho(
                f"✅ No secrets detected ({summary.scanned} scanned, {summary.skipped} skipped)",
                fg="green",
            )

    if summary.total_matches:
        ctx.exit(1)


async def watch_tree(
    root: Path,
    scheduler: ScanScheduler,
    interval: float,
    max_files: Optional[int] = None,
    iterations: Optional[int] = None,
) -> None:
    """
    Poll ``root`` and feed the scheduler.

    Files seen for the first time are scanned at once (open). Modified files
    go through the debounced path (change), or are treated as saves when
    real-time scanning is switched off. Files that disappear are dropped
    from the scheduler.
    """
    seen: Dict[Path, float] = {}
    resource_ids: Dict[Path, str] = {}
    rounds = 0

    while iterations is None or rounds < iterations:
        present = set()
        for path in iter_workspace_files(root, max_files):
            try:
                mtime = path.stat().st_mtime
            except OSError:
                continue
            present.add(path)
            previous = seen.get(path)
            if previous == mtime:
                continue
            seen[path] = mtime
            resource_id = resource_ids.setdefault(path, resource_id_for(root, path))

            text = read_text(path)
            if text is None:
                continue
            if previous is None:
                scheduler.on_open(resource_id, text)
            elif scheduler.realtime_enabled:
                scheduler.on_change(resource_id, text)
            else:
                scheduler.on_save(resource_id, text)

        for path in set(seen) - present:
            del seen[path]
            scheduler.forget(resource_ids.pop(path))
            logger.debug("Stopped tracking removed file %s", path)

        rounds += 1
        await asyncio.sleep(interval)


@click.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path), default=".")
@click.option("--interval", "-i", type=float, default=0.5, help="Polling interval in seconds")
@click.pass_context
def watch(ctx, path: Path, interval: float):
    """
    👀 Watch a directory and rescan files as they change.

    Edits are debounced; press Ctrl-C to stop.
    """
    config: ConfigManager = ctx.obj['config']
    settings = config.load()
    scheduler = build_scheduler(settings)

    def report(result: ScanResult) -> None:
        if not result.matches:
            return
        echo_diagnostics(result.resource_id, result.matches)
        if result.high_severity_matches and settings.enable_sound_alerts:
            click.echo("\a", nl=False)

    scheduler.add_listener(report)
    click.echo(f"👀 Watching {path} for secrets (Ctrl-C to stop)...")

    try:
        asyncio.run(watch_tree(path, scheduler, interval, settings.max_workspace_files))
    except KeyboardInterrupt:
        click.echo(f"\nStopped. {scheduler.total_matches()} potential secret(s) currently tracked.")
    finally:
        scheduler.close()
