"""
Lumigrade Command Line Interface

Main CLI entry point for grading images from the terminal.
"""

import click
import logging
from typing import Optional

from ..config import load_config, get_config_value
from ..utils.logging import setup_console_logging
from .grade_commands import render, batch, suggest
from .preset_commands import presets

logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.version_option(package_name='lumigrade')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    Lumigrade - parametric color grading for photos

    Apply exposure, white balance, tone, color, detail and vignette
    adjustments from presets, JSON settings or AI suggestions.
    """

    # Ensure context object exists
    if ctx.obj is None:
        ctx.obj = {}

    ctx.obj['config'] = load_config(config)

    # Configure logging level
    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    setup_console_logging(
        level,
        color=get_config_value(ctx.obj['config'], 'logging.color', True),
        fmt=get_config_value(ctx.obj['config'], 'logging.format',
                             '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )

    # Store CLI options in context
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


main.add_command(render)
main.add_command(batch)
main.add_command(suggest)
main.add_command(presets)


if __name__ == '__main__':
    main()
