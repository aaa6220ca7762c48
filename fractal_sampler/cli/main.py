"""
Command-line interface for fractal rendering.
"""

import click
import sys
from pathlib import Path
from typing import Tuple
import logging
import time

from .. import __version__
from ..api import FractalRenderer, RenderConfig, load_config
from ..core.filters import FILTERS
from ..core.fractal_types import FractalRegistry, JULIA_PRESETS
from ..core.sampling import SAMPLER_KINDS
from ..rendering.coloring import list_palettes

logger = logging.getLogger(__name__)


def parse_complex_pair(value: str, option: str) -> Tuple[float, float]:
    """Parse a "real,imag" string."""
    try:
        parts = [float(x.strip()) for x in value.split(',')]
    except ValueError:
        raise click.BadParameter(f"Invalid value '{value}'. Use 'real,imag'", param_hint=option)
    if len(parts) != 2:
        raise click.BadParameter(f"Invalid value '{value}'. Use 'real,imag'", param_hint=option)
    return parts[0], parts[1]


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, verbose, quiet):
    """
    Fractal Sampler - supersampled escape-time fractal renderer.

    Render Mandelbrot and Julia sets with stratified sub-pixel sampling
    and filtered reconstruction.
    """
    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Sampler v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('output', type=click.Path())
@click.option('--config', 'config_file', type=click.Path(exists=True), help='JSON configuration file')
@click.option('--fractal', type=click.Choice(sorted(FractalRegistry.list_fractals())), help='Fractal type')
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--center', type=str, help='View center "real,imag"')
@click.option('--scale', type=float, help='Horizontal half-extent of the view in plane units')
@click.option('--max-iter', 'max_iterations', type=int, help='Maximum iterations')
@click.option('--julia-c', type=str, help='Julia constant "real,imag" or preset name')
@click.option('--sampler', type=click.Choice(list(SAMPLER_KINDS)), help='Sampling strategy')
@click.option('--samples', 'samples_per_pixel', type=int, help='Samples per pixel')
@click.option('--jitter/--no-jitter', default=True, help='Jitter stratified samples')
@click.option('--filter', 'filter_name', type=click.Choice(list(FILTERS)), help='Reconstruction filter')
@click.option('--palette', type=click.Choice(list_palettes()), help='Color palette')
@click.option('--processes', 'num_processes', type=int, help='Number of worker processes')
@click.option('--tile-size', type=int, help='Tile size for parallel rendering')
@click.option('--seed', type=int, help='Random seed for reproducible jitter')
@click.option('--raw', 'save_raw_data', is_flag=True, help='Also save the value raster (.npy)')
@click.option('--quality', 'jpeg_quality', type=int, help='JPEG quality (1-100)')
@click.pass_context
def render(ctx, output, config_file, julia_c, center, filter_name, **kwargs):
    """
    Render a single fractal image.

    OUTPUT: Output image file path (.png, .tif, .tiff, .jpg, .jpeg)
    """
    try:
        render_config = load_config(Path(config_file)) if config_file else RenderConfig()

        overrides = {k: v for k, v in kwargs.items() if v is not None}
        # Flags always carry a value; only explicit ones override the config file
        for flag in ('jitter', 'save_raw_data'):
            if ctx.get_parameter_source(flag) is not click.core.ParameterSource.COMMANDLINE:
                overrides.pop(flag, None)
        if filter_name is not None:
            overrides['filter'] = filter_name
        if center is not None:
            overrides['center'] = parse_complex_pair(center, '--center')

        fractal_type = overrides.get('fractal', render_config.fractal).lower()
        if julia_c is not None and fractal_type != 'julia':
            logger.warning(f"--julia-c is ignored for the {fractal_type} fractal")
        elif julia_c is not None:
            if julia_c in JULIA_PRESETS:
                preset = JULIA_PRESETS[julia_c]
                overrides['julia_c'] = (preset.c_real, preset.c_imag)
                overrides.setdefault('center', preset.center)
                overrides.setdefault('scale', preset.scale)
                click.echo(f"Using Julia preset: {julia_c}")
            else:
                overrides['julia_c'] = parse_complex_pair(julia_c, '--julia-c')

        for key, value in overrides.items():
            setattr(render_config, key, value)

        renderer = FractalRenderer(render_config)

        click.echo(f"Rendering {render_config.fractal} fractal...")
        start_time = time.time()

        renderer.render_to_file(Path(output))

        render_time = time.time() - start_time
        click.echo(f"Render complete: {render_time:.2f}s")
        click.echo(f"Saved: {output}")

    except click.BadParameter:
        raise
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj.get('verbose'):
            import traceback
            traceback.print_exc()
        sys.exit(1)


@main.command()
def palettes():
    """List available color palettes."""
    for name in list_palettes():
        click.echo(name)


@main.command()
def presets():
    """List Julia set presets."""
    for name, preset in JULIA_PRESETS.items():
        click.echo(f"{name:12s} c = {preset.c}")


@main.command()
def fractals():
    """List available fractal types."""
    for name, description in FractalRegistry.list_fractals().items():
        click.echo(f"{name:12s} {description}")


if __name__ == '__main__':
    main()
