"""
Preset CLI commands for Lumigrade
"""

import json

import click

from ..config import get_config_value
from ..processing.presets import PresetCatalog


@click.group()
def presets():
    """Preset look commands"""
    pass


@presets.command('list')
@click.pass_context
def list_presets(ctx):
    """List available presets"""
    catalog = PresetCatalog(get_config_value(ctx.obj.get('config', {}), 'presets', {}))

    click.echo(f"{'Key':<12} {'Name':<18} {'Color':<8} Settings")
    click.echo("=" * 72)
    for preset in catalog.list():
        summary = ", ".join(f"{k} {v:+d}" if isinstance(v, int) else f"{k} {v:+}"
                            for k, v in preset.settings.items())
        click.echo(f"{preset.key:<12} {preset.name:<18} {preset.color:<8} {summary}")


@presets.command('show')
@click.argument('key')
@click.pass_context
def show_preset(ctx, key: str):
    """Print the full settings a preset produces"""
    catalog = PresetCatalog(get_config_value(ctx.obj.get('config', {}), 'presets', {}))
    try:
        settings = catalog.apply(key)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='KEY')
    click.echo(json.dumps(settings.to_dict(), indent=2))
