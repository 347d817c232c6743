"""
Grading CLI commands for Lumigrade

Provides render, batch and suggest commands.
"""

import json
import logging
import sys
import time
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click
from tqdm import tqdm

from ..config import get_config_value, with_config_value
from ..exceptions import LumigradeError
from ..io.image_io import SUPPORTED_EXTENSIONS, export_filename, load_image, save_image
from ..processing.pipeline import GradingPipeline
from ..processing.presets import PresetCatalog
from ..processing.settings import GradeSettings
from ..utils.logging import RenderStats

logger = logging.getLogger(__name__)


def _parse_assignments(assignments: Tuple[str, ...]) -> Dict[str, str]:
    """Turn ``field=value`` pairs into a mapping."""
    values = {}
    for item in assignments:
        if '=' not in item:
            raise click.BadParameter(f"Expected field=value, got '{item}'", param_hint='--set')
        name, value = item.split('=', 1)
        name = name.strip()
        if name not in GradeSettings.field_names():
            raise click.BadParameter(
                f"Unknown field '{name}'. Valid fields: {', '.join(GradeSettings.field_names())}",
                param_hint='--set')
        values[name] = value.strip()
    return values


def build_settings(config: Dict, preset: Optional[str] = None,
                   settings_file: Optional[Path] = None,
                   assignments: Tuple[str, ...] = ()) -> GradeSettings:
    """
    Combine preset, settings file and --set overrides, in that order.
    """
    catalog = PresetCatalog(get_config_value(config, 'presets', {}))
    settings = catalog.apply(preset) if preset else GradeSettings()

    if settings_file:
        with open(settings_file, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise click.BadParameter("Settings file must hold a JSON object", param_hint='--settings')
        settings = settings.merged(data)

    overrides = _parse_assignments(assignments)
    if overrides:
        settings = settings.merged(overrides)

    return settings


def batch_targets(files: List[Path], directory: Path, output_dir: Path) -> Dict[Path, Path]:
    """
    Map each source image to its JPEG output path.

    Sources whose names differ only by extension (``a.png``, ``a.jpg``) keep
    the extension in the stem so they don't overwrite each other.
    """
    plain = {path: output_dir / path.relative_to(directory).with_suffix('.jpg') for path in files}
    counts = Counter(plain.values())

    targets = {}
    for path, target in plain.items():
        if counts[target] > 1:
            target = target.with_name(f"{path.stem}_{path.suffix.lstrip('.')}.jpg")
        targets[path] = target
    return targets


def _echo_settings(settings: GradeSettings):
    for name, value in settings.to_dict().items():
        if value:
            click.echo(f"  {name:<11} {value:+.0f}")


@click.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Output file (default: timestamped JPEG next to the input)')
@click.option('--preset', '-p', help='Preset look to start from')
@click.option('--settings', 'settings_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='JSON file with settings')
@click.option('--set', 'assignments', multiple=True, metavar='FIELD=VALUE',
              help='Override a single setting (repeatable)')
@click.option('--workers', '-w', type=int, help='Row bands graded in parallel')
@click.pass_context
def render(ctx, input_path: Path, output: Optional[Path], preset: Optional[str],
           settings_file: Optional[Path], assignments: Tuple[str, ...], workers: Optional[int]):
    """
    Grade a single image.

    INPUT_PATH: Image to grade
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    try:
        settings = build_settings(config, preset, settings_file, assignments)
    except ValueError as e:
        raise click.BadParameter(str(e))

    if workers:
        config = with_config_value(config, 'rendering.workers', workers)

    if output is None:
        prefix = get_config_value(config, 'output.filename_prefix', 'lumigrade')
        output = input_path.parent / export_filename(prefix)

    try:
        image = load_image(input_path)
        result = GradingPipeline(config).render(image, settings)
        save_image(result, output, quality=get_config_value(config, 'output.jpeg_quality', 95))
    except (LumigradeError, OSError, ValueError) as e:
        click.echo(f"Error rendering {input_path.name}: {e}", err=True)
        sys.exit(1)

    if not quiet:
        click.echo(f"Rendered {input_path.name} -> {output}")
        _echo_settings(settings)


@click.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--output-dir', '-o', required=True, type=click.Path(file_okay=False, path_type=Path),
              help='Directory for graded images')
@click.option('--preset', '-p', help='Preset look to apply')
@click.option('--settings', 'settings_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='JSON file with settings')
@click.option('--set', 'assignments', multiple=True, metavar='FIELD=VALUE',
              help='Override a single setting (repeatable)')
@click.option('--recursive/--no-recursive', default=False, help='Process subdirectories')
@click.pass_context
def batch(ctx, directory: Path, output_dir: Path, preset: Optional[str],
          settings_file: Optional[Path], assignments: Tuple[str, ...], recursive: bool):
    """
    Grade every image in a directory with the same settings.

    DIRECTORY: Directory containing images
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    try:
        settings = build_settings(config, preset, settings_file, assignments)
    except ValueError as e:
        raise click.BadParameter(str(e))

    pattern = '**/*' if recursive else '*'
    files = sorted(p for p in directory.glob(pattern)
                   if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS)
    if not files:
        click.echo("No images found in directory", err=True)
        return

    targets = batch_targets(files, directory, output_dir)
    pipeline = GradingPipeline(config)
    quality = get_config_value(config, 'output.jpeg_quality', 95)
    stats = RenderStats()
    stats.set_total(len(files))

    for path in tqdm(files, desc="Grading", unit="img", disable=quiet):
        start = time.perf_counter()
        try:
            result = pipeline.render(load_image(path), settings)
            target = targets[path]
            save_image(result, target, quality=quality)
            stats.add_result(time.perf_counter() - start)
        except (LumigradeError, OSError, ValueError) as e:
            logger.error(f"Failed to grade {path}: {e}")
            stats.add_error(str(path), str(e))

    summary = stats.get_summary()
    if not quiet:
        click.echo(f"Graded {summary['rendered_files']}/{summary['total_files']} images "
                   f"in {summary['elapsed_time']:.1f}s")
    if stats.errors:
        click.echo(f"{len(stats.errors)} images failed", err=True)
        sys.exit(1)


@click.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--apply', 'apply_output', type=click.Path(dir_okay=False, path_type=Path),
              help='Render the suggestion to this file')
@click.option('--json', 'as_json', is_flag=True, help='Print settings as JSON')
@click.pass_context
def suggest(ctx, input_path: Path, apply_output: Optional[Path], as_json: bool):
    """
    Ask the vision model for grade settings.

    INPUT_PATH: Image to analyze
    """
    from ..analysis.suggestion import SuggestionService

    config = ctx.obj.get('config', {})

    try:
        service = SuggestionService.from_config(config)
    except (ImportError, ValueError) as e:
        click.echo(f"Suggestion provider unavailable: {e}", err=True)
        sys.exit(1)

    try:
        image = load_image(input_path)
        settings = service.suggest(image)
    except (LumigradeError, OSError) as e:
        click.echo(f"Suggestion failed: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(settings.to_dict(), indent=2))
    else:
        click.echo(f"Suggested settings for {input_path.name}:")
        _echo_settings(settings)

    if apply_output:
        try:
            result = GradingPipeline(config).render(image, settings)
            save_image(result, apply_output,
                       quality=get_config_value(config, 'output.jpeg_quality', 95))
        except (LumigradeError, OSError, ValueError) as e:
            click.echo(f"Error rendering suggestion: {e}", err=True)
            sys.exit(1)
        click.echo(f"Rendered suggestion -> {apply_output}")
