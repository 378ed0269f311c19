"""Command-line interface for PlaneKit."""

import logging
import sys
import time
from pathlib import Path
from typing import Callable

import click

from . import __version__
from .core.convolution import EdgeMode
from .core.filters import (
    FilterConfig,
    gaussian_blur,
    invert_colors,
    key_color_transparent,
    to_grayscale_packed,
    unsharp_mask,
)
from .core.algebra import to_black_and_white
from .core.packed import PackedImage
from .core.planes import ChannelPlanes
from .utils.image import FORMAT_JPG, FORMAT_PNG, read_image, write_image
from .utils.profiler import estimate_memory_usage, global_profiler

Transform = Callable[[PackedImage], PackedImage]


class ProgressBar:
    """Simple progress bar for CLI operations."""

    def __init__(self, total_steps: int, description: str = "Processing"):
        self.total_steps = total_steps
        self.current_step = 0
        self.description = description
        self.start_time = time.time()

    def update(self, step_name: str) -> None:
        """Update progress bar with current step."""
        self.current_step += 1
        percentage = (self.current_step / self.total_steps) * 100
        elapsed = time.time() - self.start_time

        bar_length = 30
        filled_length = int(bar_length * self.current_step // self.total_steps)
        bar = "█" * filled_length + "░" * (bar_length - filled_length)

        click.echo(
            f"\r{self.description}: [{bar}] {percentage:.1f}% - {step_name}",
            nl=False,
        )

        if self.current_step == self.total_steps:
            click.echo(f" ✓ Complete ({elapsed:.1f}s)")


def _output_format(output: Path) -> str:
    if output.suffix.lower() in (".jpg", ".jpeg"):
        return FORMAT_JPG
    return FORMAT_PNG


def _on_planes(func: Callable[[ChannelPlanes], ChannelPlanes]) -> Transform:
    """Lift a plane filter to packed images (the result is opaque)."""
    return lambda image: func(ChannelPlanes.from_packed(image)).to_packed()


def _run(
    ctx: click.Context,
    input_file: Path,
    output: Path,
    name: str,
    build: Callable[[], Transform],
    keep_alpha: bool = False,
) -> None:
    verbose = ctx.obj["verbose"]
    profile = ctx.obj["profile"]

    if output.exists():
        if not click.confirm(f"Output file {output} exists. Overwrite?"):
            click.echo("Aborted.")
            return
    output.parent.mkdir(parents=True, exist_ok=True)

    progress = ProgressBar(3, "Filtering")
    try:
        transform = build()

        progress.update("Loading image")
        image = read_image(input_file)
        if image is None:
            raise RuntimeError(f"Could not read image {input_file}")

        if verbose:
            click.echo(f"\nImage dimensions: {image.width}x{image.height}")
            click.echo(f"Estimated memory: {estimate_memory_usage(image.width, image.height):.1f} MB")

        progress.update(f"Applying {name}")
        if profile:
            transform = global_profiler.profile_function(name)(transform)
        result = transform(image)

        progress.update("Saving file")
        if not write_image(result, output, _output_format(output), keep_alpha=keep_alpha):
            raise RuntimeError(f"Could not write image {output}")

        click.echo(f"\n✅ Successfully created {output}")
        if profile:
            global_profiler.print_summary()

    except Exception as e:
        click.echo(f"\n❌ Error: {e}", err=True)
        if verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


input_argument = click.argument("input_file", type=click.Path(exists=True, path_type=Path))
output_option = click.option(
    "-o",
    "--output",
    required=True,
    type=click.Path(path_type=Path),
    help="Output image path (.png or .jpg)",
)


def kernel_options(func):
    """Options shared by the Gaussian-based commands."""
    func = click.option(
        "--edge-mode",
        default=EdgeMode.NEAREST.value,
        type=click.Choice([m.value for m in EdgeMode]),
        help="Border extension (default: nearest)",
    )(func)
    func = click.option(
        "--sigma",
        default=1.0,
        type=click.FloatRange(min=0.0, min_open=True),
        help="Gaussian sigma in pixels (default: 1.0)",
    )(func)
    func = click.option(
        "--radius",
        default=2,
        type=click.IntRange(0, 50),
        help="Kernel half-size k, kernel is 2k+1 wide (default: 2)",
    )(func)
    return func


@click.group()
@click.version_option(__version__, prog_name="planekit")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--profile", is_flag=True, help="Report time and memory of the filter step")
@click.pass_context
def main(ctx: click.Context, verbose: bool, profile: bool) -> None:
    """Pixel-level image filters on floating-point channel planes.

    Examples:
        planekit blur photo.jpg --radius 3 --sigma 1.5 -o soft.png
        planekit sharpen photo.png --coef 1.5 -o crisp.png
        planekit key-color logo.png --color 255,255,255 --threshold 30 -o logo-cut.png
    """
    if verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["profile"] = profile


@main.command()
@input_argument
@output_option
@kernel_options
@click.pass_context
def blur(ctx, input_file: Path, output: Path, radius: int, sigma: float, edge_mode: str) -> None:
    """Gaussian blur."""
    def build() -> Transform:
        config = FilterConfig(radius=radius, sigma=sigma, edge_mode=edge_mode)
        return _on_planes(lambda planes: gaussian_blur(planes, config.radius, config.sigma, config.edge_mode))

    _run(ctx, input_file, output, "gaussian_blur", build)


@main.command()
@input_argument
@output_option
@kernel_options
@click.option("--coef", default=1.0, type=float, help="Mask strength (default: 1.0)")
@click.option(
    "--mask-threshold",
    default=0.0,
    type=click.FloatRange(min=0.0),
    help="Ignore mask values with a smaller magnitude (default: 0.0, keep all)",
)
@click.pass_context
def sharpen(
    ctx,
    input_file: Path,
    output: Path,
    radius: int,
    sigma: float,
    edge_mode: str,
    coef: float,
    mask_threshold: float,
) -> None:
    """Unsharp masking."""
    def build() -> Transform:
        config = FilterConfig(
            radius=radius, sigma=sigma, coef=coef, mask_threshold=mask_threshold, edge_mode=edge_mode
        )
        return _on_planes(lambda planes: unsharp_mask(
            planes, config.radius, config.sigma, config.coef,
            mask_threshold=config.mask_threshold, edge_mode=config.edge_mode,
        ))

    _run(ctx, input_file, output, "unsharp_mask", build)


@main.command()
@input_argument
@output_option
@click.pass_context
def grayscale(ctx, input_file: Path, output: Path) -> None:
    """Luma grayscale."""
    _run(ctx, input_file, output, "to_grayscale", lambda: to_grayscale_packed)


@main.command()
@input_argument
@output_option
@click.option(
    "--threshold",
    default=0.5,
    type=click.FloatRange(0.0, 1.0),
    help="Luma above which a pixel turns white (default: 0.5)",
)
@click.pass_context
def bw(ctx, input_file: Path, output: Path, threshold: float) -> None:
    """Black and white via a hard luma threshold."""
    def build() -> Transform:
        config = FilterConfig(bw_threshold=threshold)
        return _on_planes(lambda planes: to_black_and_white(planes, config.bw_threshold))

    _run(ctx, input_file, output, "to_black_and_white", build)


@main.command()
@input_argument
@output_option
@click.pass_context
def invert(ctx, input_file: Path, output: Path) -> None:
    """Invert colors, keeping alpha."""
    _run(ctx, input_file, output, "invert_colors", lambda: invert_colors, keep_alpha=True)


def _parse_color(ctx, param, value: str):
    try:
        parts = tuple(int(v) for v in value.split(","))
    except ValueError:
        raise click.BadParameter(f"expected R,G,B integers, got {value!r}")
    if len(parts) != 3 or not all(0 <= v <= 255 for v in parts):
        raise click.BadParameter(f"expected three values in 0-255, got {value!r}")
    return parts


@main.command("key-color")
@input_argument
@output_option
@click.option("--color", required=True, callback=_parse_color, help="Key color as R,G,B (0-255)")
@click.option(
    "--threshold",
    default=10.0,
    type=click.FloatRange(min=0.0),
    help="Max RGB distance (0-255 scale) made transparent (default: 10)",
)
@click.pass_context
def key_color(ctx, input_file: Path, output: Path, color, threshold: float) -> None:
    """Make pixels near a key color transparent."""
    _run(
        ctx,
        input_file,
        output,
        "key_color_transparent",
        lambda: lambda image: key_color_transparent(image, color, threshold),
        keep_alpha=True,
    )


if __name__ == "__main__":
    main()
