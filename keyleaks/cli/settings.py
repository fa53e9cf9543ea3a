"""
KeyLeaks CLI - Configuration commands
"""
import click

from keyleaks.core.exceptions import ConfigurationError
from keyleaks.utils.config import ConfigManager


@click.group("config")
@click.pass_context
def config_group(ctx):
    """Manage KeyLeaks settings and the AI service key"""
    pass


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_value(ctx, key, value):
    """Set a configuration value"""
    config: ConfigManager = ctx.obj['config']
    try:
        config.set(key, value)
    except ConfigurationError as e:
        raise click.BadParameter(e.message, param_hint='KEY/VALUE')

    shown = '***' if key == 'gemini_api_key' else config.get(key)
    click.echo(f"✅ {key} = {shown}")
    click.echo(f"💾 Configuration saved to: {config.config_path}")


@config_group.command()
@click.pass_context
def show(ctx):
    """Show current configuration (sanitized)"""
    config: ConfigManager = ctx.obj['config']
    cfg = config.load()

    click.echo("⚙️  Current Configuration\n")
    if cfg.gemini_api_key:
        click.echo("AI API Key: *** (config)")
    elif config.has_api_key():
        click.echo("AI API Key: *** (environment)")
    else:
        click.echo("AI API Key: Not set (built-in advice only)")
    click.echo(f"AI Model: {cfg.gemini_model}")
    click.echo(f"Real-time Scanning: {cfg.enable_real_time_scanning}")
    click.echo(f"Scan on Save: {cfg.scan_on_save}")
    click.echo(f"Sound Alerts: {cfg.enable_sound_alerts}")
    click.echo(f"Debounce: {cfg.debounce_ms}ms")
    click.echo(f"Max File Size: {cfg.max_file_size} characters")
    click.echo(f"Max Workspace Files: {cfg.max_workspace_files}")
    click.echo(f"Advice Timeout: {cfg.advice_timeout_seconds}s")
    click.echo(f"\n📁 Config file: {config.config_path}")


@config_group.command('toggle-realtime')
@click.pass_context
def toggle_realtime(ctx):
    """Enable or disable real-time scanning"""
    config: ConfigManager = ctx.obj['config']
    enabled = config.toggle('enable_real_time_scanning')
    click.echo(f"Real-time scanning {'enabled' if enabled else 'disabled'}")


@config_group.command()
@click.confirmation_option(prompt='Are you sure you want to reset all settings?')
@click.pass_context
def clear(ctx):
    """Reset all settings to defaults"""
    config: ConfigManager = ctx.obj['config']
    config.clear()
    click.echo("✅ All settings reset")
