"""CLI command for getting remediation advice on detected secrets."""

import asyncio
from pathlib import Path
from typing import List, Optional

import click

from keyleaks.cli.render import echo_advice
from keyleaks.cli.scan import build_scheduler, read_text
from keyleaks.core.advisor import SecurityAdvisor
from keyleaks.core.models import AdviceOutcome, AdvicePanelData, SecretMatch
from keyleaks.utils.config import ConfigManager


async def gather_advice(advisor: SecurityAdvisor, matches: List[SecretMatch]) -> List[AdviceOutcome]:
    """Request advice for every match concurrently; each call is independent."""
    return await asyncio.gather(*(advisor.get_advice(m) for m in matches))


@click.command("advise")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--line", "-l", type=int, required=True, help="Line of the detected secret (1-based)")
@click.option("--column", "-c", type=int, help="Only the secret starting at this column")
@click.option("--offline", is_flag=True, help="Skip the AI service and use built-in advice")
@click.option("--api-key", envvar="KEYLEAKS_API_KEY", help="AI service API key (overrides config)")
@click.pass_context
def advise_cmd(
    ctx,
    file: Path,
    line: int,
    column: Optional[int],
    offline: bool,
    api_key: Optional[str],
):
    """
    🛡️  Get remediation advice for a secret detected in FILE.

    Only the secret type, its redacted value, severity and line number are
    sent to the AI service. Without an API key, built-in advice is shown.

    \b
    Examples:
      keyleaks advise config.py --line 12
      keyleaks advise app.js -l 3 --offline
    """
    config: ConfigManager = ctx.obj['config']
    settings = config.load()

    text = read_text(file)
    if text is None:
        click.echo(f"❌ Cannot read {file} as text.", err=True)
        ctx.exit(2)

    scheduler = build_scheduler(settings)
    resource_id = str(file)
    result = scheduler.on_open(resource_id, text)
    if result is None:
        click.echo(f"❌ {file} is too large to scan.", err=True)
        ctx.exit(2)

    matches = [
        m for m in result.matches
        if m.line == line and (column is None or m.column == column)
    ]
    if not matches:
        click.echo(f"❌ No detected secret at {file}:{line}. Run 'keyleaks scan' first.", err=True)
        ctx.exit(2)

    key = None if offline else (api_key or config.get_api_key())
    advisor = SecurityAdvisor(
        api_key=key,
        model=settings.gemini_model,
        timeout=settings.advice_timeout_seconds,
    )
    if advisor.has_credential:
        click.echo("🔎 Fetching AI security advice...")

    outcomes = asyncio.run(gather_advice(advisor, matches))

    for match, outcome in zip(matches, outcomes):
        if outcome.warning:
            click.secho(f"⚠️  {outcome.warning}", fg="yellow", err=True)
        echo_advice(AdvicePanelData(advice=outcome.advice, match=match, resource_id=resource_id))
        click.echo(f"(source: {outcome.source.value})\n")
