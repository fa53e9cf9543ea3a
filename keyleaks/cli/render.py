"""
KeyLeaks CLI - Text rendering for diagnostics and advice
"""
from typing import List

import click

from keyleaks.core.diagnostics import DiagnosticLevel, to_diagnostics
from keyleaks.core.models import AdvicePanelData, SecretMatch, Urgency
from keyleaks.core.redactor import redact

LEVEL_COLORS = {
    DiagnosticLevel.ERROR: "red",
    DiagnosticLevel.WARNING: "yellow",
    DiagnosticLevel.INFORMATION: "cyan",
}

URGENCY_COLORS = {
    Urgency.CRITICAL: "red",
    Urgency.HIGH: "red",
    Urgency.MEDIUM: "yellow",
    Urgency.LOW: "green",
}


def redacted_context(match: SecretMatch) -> str:
    """
    Match context with the secret itself masked.

    Context is clipped to the line, so a long value may be cut off at the
    end. In that case the trailing fragment of the value is masked instead.
    """
    context = match.context
    value = match.value
    if value in context:
        return context.replace(value, redact(value))

    for size in range(min(len(context), len(value)), 0, -1):
        if context.endswith(value[:size]):
            return context[:-size] + redact(value)
    return context


def match_to_dict(resource_id: str, match: SecretMatch) -> dict:
    return {
        "file": resource_id,
        "line": match.line,
        "column": match.column,
        "type": match.type,
        "severity": match.severity.value,
        "redacted_value": redact(match.value),
        "context": redacted_context(match),
    }


def echo_diagnostics(resource_id: str, matches: List[SecretMatch]) -> None:
    """Print one compiler-style line per match."""
    for diagnostic in to_diagnostics(matches):
        click.echo(click.style(diagnostic.format(resource_id), fg=LEVEL_COLORS[diagnostic.level]))


def echo_match_details(resource_id: str, matches: List[SecretMatch]) -> None:
    """Print a detailed block per match."""
    for match in matches:
        click.echo(f"File: {resource_id}")
        click.echo(f"Line: {match.line}, Column: {match.column}")
        click.echo(f"Type: {match.type}")
        click.echo(f"Severity: {match.severity.value.upper()}")
        click.echo(f"Redacted Value: {redact(match.value)}")
        click.echo(f"Context: {redacted_context(match)}")
        click.echo("-" * 50)


def render_advice(panel: AdvicePanelData, styled: bool = False) -> str:
    """Plain-text rendering of an advice panel."""
    advice = panel.advice
    match = panel.match
    title = advice.title
    if styled:
        title = click.style(title, fg=URGENCY_COLORS.get(advice.urgency), bold=True)
    lines = [
        "=" * 70,
        title,
        "=" * 70,
        f"Location: {panel.resource_id}:{match.line}:{match.column}",
        f"Secret:   {match.type} ({redact(match.value)})",
        f"Urgency:  {advice.urgency.value.upper()}",
        "",
        advice.description,
        "",
        "Recommendations:",
    ]
    lines.extend(f"  {i}. {rec}" for i, rec in enumerate(advice.recommendations, 1))

    if advice.revocation_steps:
        lines.append("")
        lines.append("Revocation steps:")
        lines.extend(f"  {i}. {step}" for i, step in enumerate(advice.revocation_steps, 1))

    return "\n".join(lines)


def echo_advice(panel: AdvicePanelData) -> None:
    click.echo(render_advice(panel, styled=True))
