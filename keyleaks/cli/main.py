"""
KeyLeaks CLI - Main entry point
"""
from pathlib import Path

import click
from dotenv import load_dotenv

from keyleaks import __version__
from keyleaks.cli.advise import advise_cmd
from keyleaks.cli.scan import scan, watch
from keyleaks.cli.settings import config_group
from keyleaks.utils.config import ConfigManager
from keyleaks.utils.logger import get_logger


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    envvar='KEYLEAKS_CONFIG',
    help='Config file (default: ~/.keyleaks/config.json)',
)
@click.pass_context
def cli(ctx, verbose, config_path):
    """
    🔒 KeyLeaks - Secret Leak Detection & Advice

    Find credentials in source files before they leave your machine, and
    get step-by-step remediation advice for each one.

    WORKFLOW:

    1. Scan for secrets:
       keyleaks scan ./src

    2. Get advice for a finding (AI-powered when a key is configured):
       keyleaks config set gemini_api_key YOUR_KEY
       keyleaks advise src/config.py --line 12

    3. Keep watching while you edit:
       keyleaks watch ./src
    """
    load_dotenv()
    get_logger("keyleaks", "DEBUG" if verbose else None)

    ctx.ensure_object(dict)
    ctx.obj['config'] = ConfigManager(config_path)


# Register subcommands
cli.add_command(scan)
cli.add_command(watch)
cli.add_command(advise_cmd)
cli.add_command(config_group)


if __name__ == '__main__':
    cli()
